"""Decoders for the base85 variants used by historical TurboWarp Packager
builds to inline a project into an HTML page.

None of the variants is Ascii85 or RFC 1924. All of them pack a little-endian
32-bit word into 5 characters, least significant digit first:

    word = b4*85**4 + b3*85**3 + b2*85**2 + b1*85 + b0

and differ in alphabet and in how the decoded length is transported:

- v1: alphabet 0x29-0x7d with '\\' replaced by '~'; "<length>," header.
- v2: alphabet 0x2a-0x7e with '<' and '>' replaced by '(' and ')' so the
  text is HTML safe; "<length>," header.
- v3: v2 alphabet; the header digits are shifted by ord('1') ("a" == 0).
- v4: v2 alphabet; no header, the length is supplied by the page.

Artifacts of all four exist in the wild, so these decoders follow the
packagers' encoder output exactly, including their quirks: a trailing group
shorter than 5 characters decodes to a zero word, and words wrap modulo 2**32.
"""

from __future__ import annotations

import re
import struct
import sys
from array import array
from typing import Callable, Sequence, Tuple

from .constants import (
    BASE85_RADIX,
    BASE85_GROUP_CHARS,
    BASE85_GROUP_BYTES,
    BASE85_HEADER_SEP,
    BASE85_V1_OFFSET,
    BASE85_V1_ESCAPE,
    BASE85_V1_ESCAPED,
    BASE85_V2_OFFSET,
    BASE85_V2_SUBSTITUTIONS,
    BASE85_V3_HEADER_SHIFT,
)
from .errors import Base85HeaderError, Base85LengthError


_WORD = struct.Struct("<I")
_DECIMAL_RE = re.compile(r"[0-9]+")

_P1 = BASE85_RADIX
_P2 = _P1 * BASE85_RADIX
_P3 = _P2 * BASE85_RADIX
_P4 = _P3 * BASE85_RADIX


def _v1_value(code: int) -> int:
    if code == BASE85_V1_ESCAPE:
        return BASE85_V1_ESCAPED - BASE85_V1_OFFSET
    return code - BASE85_V1_OFFSET


def _v2_value(code: int) -> int:
    return BASE85_V2_SUBSTITUTIONS.get(code, code) - BASE85_V2_OFFSET


def _padded_length(n: int) -> int:
    if n % BASE85_GROUP_BYTES == 0:
        return n
    return n + (BASE85_GROUP_BYTES - n % BASE85_GROUP_BYTES)


def _js_length(text: str) -> int:
    return len(text.encode("utf-16-le", "surrogatepass")) // 2


def _code_units(text: str) -> array:
    """UTF-16 code units of text, i.e. what a browser's charCodeAt() sees."""
    units = array("H")
    units.frombytes(text.encode("utf-16-le", "surrogatepass"))
    if sys.byteorder == "big":
        units.byteswap()
    return units


def _decode_groups(
    codes: Sequence[int],
    start: int,
    limit: int,
    value: Callable[[int], int],
    byte_length: int,
) -> bytes:
    """Decode 5-char groups of codes[start:limit] into byte_length bytes.

    The output buffer is padded up to whole words; the pad is never returned.
    """
    out = bytearray(_padded_length(byte_length))
    j = 0
    for i in range(start, limit, BASE85_GROUP_CHARS):
        if j + BASE85_GROUP_BYTES > len(out):
            raise Base85LengthError(
                f"encoded data exceeds declared length of {byte_length} bytes"
            )
        group = codes[i:i + BASE85_GROUP_CHARS]
        if len(group) < BASE85_GROUP_CHARS:
            word = 0
        else:
            word = (
                value(group[4]) * _P4
                + value(group[3]) * _P3
                + value(group[2]) * _P2
                + value(group[1]) * _P1
                + value(group[0])
            ) & 0xFFFFFFFF
        _WORD.pack_into(out, j, word)
        j += BASE85_GROUP_BYTES
    return bytes(out[:byte_length])


def split_length_header(text: str) -> Tuple[str, int]:
    """Return (header, index of first data character)."""
    end = text.find(BASE85_HEADER_SEP)
    if end < 0:
        raise Base85HeaderError("base85 data has no length header")
    return text[:end], end + 1


def _parse_decimal(header: str) -> int:
    if not _DECIMAL_RE.fullmatch(header):
        raise Base85HeaderError(f"invalid base85 length header: {header[:32]!r}")
    return int(header)


def _parse_shifted(header: str) -> int:
    return _parse_decimal("".join(chr(max(ord(c) - BASE85_V3_HEADER_SHIFT, 0)) for c in header))


def select_variant(text: str) -> int:
    """Pick the header-bearing variant (1, 2 or 3) that produced text.

    A v2 payload that happens to contain no backslash is read as v1. Both
    share a plain decimal header so nothing else tells them apart; zip data
    is close enough to random that this does not happen in practice.
    """
    header, _ = split_length_header(text)
    if _DECIMAL_RE.fullmatch(header):
        if "\\" in text:
            return 2
        return 1
    return 3


def decode_v1(text: str) -> bytes:
    header, start = split_length_header(text)
    # v1 and v2 index the UTF-8 bytes but stop at the character count
    return _decode_groups(
        text.encode("utf-8", "surrogatepass"), start, _js_length(text), _v1_value, _parse_decimal(header)
    )


def decode_v2(text: str) -> bytes:
    header, start = split_length_header(text)
    return _decode_groups(
        text.encode("utf-8", "surrogatepass"), start, _js_length(text), _v2_value, _parse_decimal(header)
    )


def decode_v3(text: str) -> bytes:
    header, start = split_length_header(text)
    codes = _code_units(text)
    return _decode_groups(codes, start, len(codes), _v2_value, _parse_shifted(header))


def decode_with_length_header(text: str) -> bytes:
    variant = select_variant(text)
    if variant == 1:
        return decode_v1(text)
    if variant == 2:
        return decode_v2(text)
    return decode_v3(text)


def decode_without_length_header(text: str, length: int) -> bytes:
    """Decode v4 data whose decoded length is known from elsewhere."""
    if length < 0:
        raise Base85LengthError(f"negative length: {length}")
    codes = _code_units(text)
    return _decode_groups(codes, 0, len(codes), _v2_value, length)
