from __future__ import annotations

import base64
import binascii
import re

from .constants import DATA_URI_BASE64_MARKER
from .errors import DataURINotBase64Error, DataURIDecodeError


_B64_WHITESPACE_RE = re.compile(r"[\t\n\f\r ]")
_B64_ALPHABET_RE = re.compile(r"[A-Za-z0-9+/]*")


def decode_base64(text: str) -> bytes:
    """Standard base64 with the leniency of a browser's atob().

    ASCII whitespace is ignored and '=' padding is optional.
    """
    data = _B64_WHITESPACE_RE.sub("", text)
    if len(data) % 4 == 0 and data.endswith("="):
        data = data[:-2] if data.endswith("==") else data[:-1]
    if len(data) % 4 == 1 or not _B64_ALPHABET_RE.fullmatch(data):
        raise DataURIDecodeError("data URI payload is not valid base64")
    data += "=" * (-len(data) % 4)
    try:
        return base64.b64decode(data, validate=True)
    except binascii.Error as exc:
        raise DataURIDecodeError(f"data URI payload is not valid base64: {exc}")


def decode_data_uri(uri: str) -> bytes:
    """Decode "<meta>;base64,<payload>" to raw bytes."""
    parts = uri.split(DATA_URI_BASE64_MARKER)
    if len(parts) < 2:
        raise DataURINotBase64Error("data URI is not base64")
    return decode_base64(parts[1])
