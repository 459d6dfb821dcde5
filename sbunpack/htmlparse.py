"""Recover an embedded project from a packaged HTML page.

Each packager version inlines the project its own way. The patterns below
are matched against real generator output, so their literal text (attribute
order, quoting, whitespace, newlines) must not be altered. They are tried in
order and the first hit wins: some pages would also satisfy a later, looser
pattern.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from .archive import ArchiveView
from .base85 import decode_with_length_header, decode_without_length_header
from .constants import TYPE_SB, TYPE_SB3, PROJECT_JSON
from .datauri import decode_data_uri
from .errors import HTMLPayloadError
from .project import UnpackagedProject, unpackage_binary_blob


STRATEGY_BASE85_CHUNKS = "base85-chunks"
STRATEGY_BASE85_P4_PROJECT = "base85-p4-project"
STRATEGY_BASE85_INLINE = "base85-inline"
STRATEGY_DATA_URI = "data-uri"
STRATEGY_HTMLIFIER_OPTIONS = "htmlifier-options"
STRATEGY_HTMLIFIER_JSON = "htmlifier-json"


# TurboWarp Packager, progressive decoding (one v4 chunk per script tag)
_CHUNK_RE = re.compile(r'<script data="([^"]+)">decodeChunk\((\d+)\)</script>', re.ASCII)
# TurboWarp Packager, several script tags concatenated at load
_P4_PROJECT_RE = re.compile(r'<script type="p4-project">([^<]+)</script>', re.ASCII)
# TurboWarp Packager, one big script
_BASE85_INLINE_RES = (
    re.compile(r'const result = base85decode\("(.+)"\);', re.ASCII),
    re.compile(
        r'<script id="p4-encoded-project-data" type="p4-encoded-project-data">([^<]+)</script>',
        re.ASCII,
    ),
)
_DATA_URI_RES = (
    # old TurboWarp Packager
    re.compile(r'const getProjectData = \(\) => fetch\("([a-zA-Z0-9+/=\-:;,]+)"\)', re.ASCII),
    # forkphorus packager
    re.compile(r"var project = '([a-zA-Z0-9+/=\-:;,]+)';", re.ASCII),
    # legacy TurboWarp Packager
    re.compile(r'window\.__PACKAGER__ = \{\n    projectData: "([a-zA-Z0-9+/=\-:;,]+)"', re.ASCII),
)
# HTMLifier, assets inside initOptions
_HTMLIFIER_OPTIONS_RE = re.compile(
    r"<script>\nconst GENERATED = \d+\nconst initOptions = (\{[\s\S]+\})\ninit\(initOptions\)\n</script>",
    re.ASCII,
)
# Older HTMLifier with TYPE === "json"
_HTMLIFIER_JSON_RE = re.compile(
    r"var TYPE = 'json',\nPROJECT_JSON = \"([^\"]*)\",\nASSETS = (\{[^}]*\}),",
    re.ASCII,
)


@dataclass
class EmbeddedPayload:
    strategy: str
    fragments: List[str] = field(default_factory=list)
    # Decoded byte length, for headerless base85 only
    length: Optional[int] = None


def _find_base85_chunks(text: str) -> Optional[EmbeddedPayload]:
    matches = _CHUNK_RE.findall(text)
    if not matches:
        return None
    return EmbeddedPayload(
        STRATEGY_BASE85_CHUNKS,
        [data for data, _ in matches],
        sum(int(length) for _, length in matches),
    )


def _find_p4_project(text: str) -> Optional[EmbeddedPayload]:
    matches = _P4_PROJECT_RE.findall(text)
    if not matches:
        return None
    return EmbeddedPayload(STRATEGY_BASE85_P4_PROJECT, matches)


def _first_match(text: str, patterns) -> Optional[str]:
    for pattern in patterns:
        m = pattern.search(text)
        if m:
            return m.group(1)
    return None


def _find_base85_inline(text: str) -> Optional[EmbeddedPayload]:
    found = _first_match(text, _BASE85_INLINE_RES)
    if found is None:
        return None
    return EmbeddedPayload(STRATEGY_BASE85_INLINE, [found])


def _find_data_uri(text: str) -> Optional[EmbeddedPayload]:
    found = _first_match(text, _DATA_URI_RES)
    if found is None:
        return None
    return EmbeddedPayload(STRATEGY_DATA_URI, [found])


def _find_htmlifier_options(text: str) -> Optional[EmbeddedPayload]:
    m = _HTMLIFIER_OPTIONS_RE.search(text)
    if not m:
        return None
    return EmbeddedPayload(STRATEGY_HTMLIFIER_OPTIONS, [m.group(1)])


def _find_htmlifier_json(text: str) -> Optional[EmbeddedPayload]:
    m = _HTMLIFIER_JSON_RE.search(text)
    if not m:
        return None
    return EmbeddedPayload(STRATEGY_HTMLIFIER_JSON, [m.group(1), m.group(2)])


EXTRACTORS: Tuple[Tuple[str, Callable[[str], Optional[EmbeddedPayload]]], ...] = (
    (STRATEGY_BASE85_CHUNKS, _find_base85_chunks),
    (STRATEGY_BASE85_P4_PROJECT, _find_p4_project),
    (STRATEGY_BASE85_INLINE, _find_base85_inline),
    (STRATEGY_DATA_URI, _find_data_uri),
    (STRATEGY_HTMLIFIER_OPTIONS, _find_htmlifier_options),
    (STRATEGY_HTMLIFIER_JSON, _find_htmlifier_json),
)


def find_embedded_payload(text: str) -> Optional[EmbeddedPayload]:
    for _strategy, extract in EXTRACTORS:
        payload = extract(text)
        if payload is not None:
            return payload
    return None


def _load_json_object(text: str, what: str) -> Dict[str, Any]:
    try:
        obj = json.loads(text)
    except ValueError as exc:
        raise HTMLPayloadError(f"could not parse {what}: {exc}")
    if not isinstance(obj, dict):
        raise HTMLPayloadError(f"{what} is not a JSON object")
    return obj


def _asset_uri(assets: Dict[str, Any], name: str) -> str:
    uri = assets[name]
    if not isinstance(uri, str):
        raise HTMLPayloadError(f"asset {name!r} is not a data URI")
    return uri


def _decode_htmlifier_options(options_text: str) -> UnpackagedProject:
    assets = _load_json_object(options_text, "HTMLifier options").get("assets")
    if not isinstance(assets, dict):
        raise HTMLPayloadError("HTMLifier options have no assets")

    if assets.get("file"):
        # Scratch 1 project, stored whole
        return UnpackagedProject(TYPE_SB, decode_data_uri(_asset_uri(assets, "file")))

    # Scratch 3 project with its assets listed one by one (HTMLifier also
    # converts Scratch 2 projects to this form)
    view = ArchiveView()
    for name in assets:
        view.add(PROJECT_JSON if name == "project" else name, decode_data_uri(_asset_uri(assets, name)))
    return UnpackagedProject(TYPE_SB3, view.to_bytes())


def _decode_htmlifier_json(project_uri: str, assets_text: str) -> UnpackagedProject:
    project_json = decode_data_uri(project_uri)
    assets = _load_json_object(assets_text, "HTMLifier ASSETS")
    view = ArchiveView()
    view.add(PROJECT_JSON, project_json)
    for name in assets:
        view.add(name, decode_data_uri(_asset_uri(assets, name)))
    return UnpackagedProject(TYPE_SB3, view.to_bytes())


def decode_payload(payload: EmbeddedPayload) -> UnpackagedProject:
    strategy = payload.strategy
    if strategy == STRATEGY_BASE85_CHUNKS:
        return unpackage_binary_blob(
            decode_without_length_header("".join(payload.fragments), payload.length or 0)
        )
    if strategy in (STRATEGY_BASE85_P4_PROJECT, STRATEGY_BASE85_INLINE):
        return unpackage_binary_blob(decode_with_length_header("".join(payload.fragments)))
    if strategy == STRATEGY_DATA_URI:
        return unpackage_binary_blob(decode_data_uri(payload.fragments[0]))
    if strategy == STRATEGY_HTMLIFIER_OPTIONS:
        return _decode_htmlifier_options(payload.fragments[0])
    if strategy == STRATEGY_HTMLIFIER_JSON:
        return _decode_htmlifier_json(payload.fragments[0], payload.fragments[1])
    raise ValueError(f"unknown payload strategy: {strategy}")


def unpackage_html(text: str) -> Optional[UnpackagedProject]:
    """Decode the project embedded in text, or None if no pattern matches."""
    payload = find_embedded_payload(text)
    if payload is None:
        return None
    return decode_payload(payload)
