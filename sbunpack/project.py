from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Optional, Tuple

from .archive import ArchiveView
from .constants import (
    TYPE_SB,
    TYPE_SB2,
    TYPE_SB3,
    PROJECT_TYPES,
    PROJECT_JSON,
    SB2_ASSET_RE,
    SB3_ASSET_RE,
    SB2_JSON_KEY,
    SB3_JSON_KEY,
    EXTENSIONS,
    SB1_MAGIC,
)
from .errors import UnknownProjectTypeError


@dataclass(frozen=True)
class UnpackagedProject:
    type: str
    data: bytes

    def __post_init__(self):
        if self.type not in PROJECT_TYPES:
            raise ValueError(f"unknown project type: {self.type!r}")

    @property
    def extension(self) -> str:
        return EXTENSIONS[self.type]


def classify_asset_name(name: str) -> Optional[str]:
    """Project format implied by an asset file name, or None."""
    if SB3_ASSET_RE.match(name):
        return TYPE_SB3
    if SB2_ASSET_RE.match(name):
        return TYPE_SB2
    return None


def guess_type_from_assets(sb2_assets: int, sb3_assets: int) -> str:
    # sb3 is far more common, so anything ambiguous (no assets, or both
    # kinds) is treated as sb3.
    if sb2_assets > 0 and sb3_assets == 0:
        return TYPE_SB2
    return TYPE_SB3


def identify_project_json_type(data: Any) -> str:
    if isinstance(data, dict):
        if SB3_JSON_KEY in data:
            return TYPE_SB3
        if SB2_JSON_KEY in data:
            return TYPE_SB2
    raise UnknownProjectTypeError("Can not determine project.json type")


def _load_project_json(raw: bytes) -> Any:
    try:
        return json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as exc:
        raise UnknownProjectTypeError(f"project.json is not valid JSON: {exc}")


def is_scratch1_binary(data: bytes) -> bool:
    return bytes(data[:len(SB1_MAGIC)]) == SB1_MAGIC


def unpackage_binary_blob(data: bytes) -> UnpackagedProject:
    """Tag a bare project file: a zipped sb2/sb3 or a Scratch 1 binary."""
    data = bytes(data)
    view = ArchiveView.open_or_none(data)
    if view is None:
        return UnpackagedProject(TYPE_SB, data)
    with view:
        path = view.find(PROJECT_JSON)
        if path is None:
            raise UnknownProjectTypeError("Project zip has no project.json")
        raw = view.read(path)
    return UnpackagedProject(identify_project_json_type(_load_project_json(raw)), data)


def count_assets(names) -> Tuple[int, int]:
    """(sb2, sb3) counts of asset-shaped names."""
    sb2 = sb3 = 0
    for name in names:
        kind = classify_asset_name(name)
        if kind == TYPE_SB3:
            sb3 += 1
        elif kind == TYPE_SB2:
            sb2 += 1
    return sb2, sb3
