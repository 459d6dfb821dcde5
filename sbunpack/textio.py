from __future__ import annotations

import codecs
from pathlib import Path
from typing import Union

from .errors import BlobReadError


_BOMS = (
    (codecs.BOM_UTF8, "utf-8"),
    (codecs.BOM_UTF16_LE, "utf-16-le"),
    (codecs.BOM_UTF16_BE, "utf-16-be"),
)


def read_blob(path: Union[str, Path]) -> bytes:
    try:
        with open(path, "rb") as fh:
            return fh.read()
    except OSError as exc:
        raise BlobReadError(f"Could not read {path}: {exc}")


def as_bytes(data) -> bytes:
    try:
        return memoryview(data).tobytes()
    except TypeError:
        raise BlobReadError(f"Could not read blob: {type(data).__name__} is not bytes-like")


def read_as_text(data: bytes) -> str:
    """Decode data the way a browser's FileReader.readAsText() does.

    A byte order mark selects the encoding and is dropped; otherwise UTF-8.
    Malformed sequences become U+FFFD rather than failing.
    """
    raw = as_bytes(data)
    for bom, encoding in _BOMS:
        if raw.startswith(bom):
            return raw[len(bom):].decode(encoding, "replace")
    return raw.decode("utf-8", "replace")
