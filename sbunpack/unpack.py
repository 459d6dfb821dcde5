from __future__ import annotations

from pathlib import Path
from typing import Union

from .archive import ArchiveView
from .constants import TYPE_SB, PROJECT_JSON, PROJECT_BINARY_NAMES
from .errors import NoProjectFoundError, ZipMissingProjectError
from .htmlparse import unpackage_html
from .project import UnpackagedProject, is_scratch1_binary, unpackage_binary_blob
from .textio import as_bytes, read_as_text, read_blob
from .zipproject import extract_zip_project


def _unpackage_zip(view: ArchiveView) -> UnpackagedProject:
    # Raw sb2/sb3 and TurboWarp Packager zips keep project.json beside the assets
    project_json = view.find(PROJECT_JSON)
    if project_json is not None:
        return extract_zip_project(view, project_json)

    # Packager and forkphorus zips carry "project.zip"; HTMLifier zips of
    # Scratch 1 projects carry "project"
    for name in PROJECT_BINARY_NAMES:
        path = view.find(name)
        if path is not None:
            return unpackage_binary_blob(view.read(path))

    raise ZipMissingProjectError("Input was a zip but we could not find a project.")


def unpackage(artifact: bytes) -> UnpackagedProject:
    """Recover the original project from a packaged artifact.

    Args:
        artifact: Packaged zip or HTML page, or a bare project file.

    Returns:
        The project type ("sb", "sb2" or "sb3") and its bytes.
    """
    artifact = as_bytes(artifact)
    view = ArchiveView.open_or_none(artifact)
    if view is not None:
        with view:
            return _unpackage_zip(view)

    # A bare Scratch 1 project is neither a zip nor a page
    if is_scratch1_binary(artifact):
        return UnpackagedProject(TYPE_SB, artifact)

    project = unpackage_html(read_as_text(artifact))
    if project is None:
        raise NoProjectFoundError("Input was not a zip and we could not find project.")
    return project


def unpackage_file(path: Union[str, Path]) -> UnpackagedProject:
    return unpackage(read_blob(path))
