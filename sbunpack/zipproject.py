from __future__ import annotations

from .archive import ArchiveView
from .constants import PROJECT_JSON
from .pathutil import containing_folder
from .project import UnpackagedProject, classify_asset_name, count_assets, guess_type_from_assets


def strip_non_assets(view: ArchiveView) -> int:
    """Remove everything but project.json and asset-shaped files.

    Some generators (HTMLifier zips of Scratch 3 projects) bundle their own
    files next to the project. Returns the number of entries removed.
    """
    removed = 0
    for name in view.names():
        if name == PROJECT_JSON or classify_asset_name(name) is not None:
            continue
        view.remove(name)
        removed += 1
    return removed


def extract_zip_project(view: ArchiveView, project_json_path: str) -> UnpackagedProject:
    """Rebuild the project whose project.json sits at project_json_path.

    The sb2/sb3 decision relies on asset names alone; project.json is not
    parsed on this path.
    """
    inner = view.folder(containing_folder(project_json_path))
    strip_non_assets(inner)
    sb2_assets, sb3_assets = count_assets(inner.names())
    return UnpackagedProject(guess_type_from_assets(sb2_assets, sb3_assets), inner.to_bytes())
