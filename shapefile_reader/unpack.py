"""
Layout-string driven decoder shared by the .shp, .shx and .dbf readers.

A layout is an optional byte-order marker followed by tokens of the form
``[repeat count][type letter]``, the same grammar ``struct`` uses:

    "<4d"      four little-endian doubles
    ">2i"      two big-endian int32
    "<1s10s8s" three text fields of 1, 10 and 8 bytes

Only little-endian (``<``, ``=`` or no marker) and big-endian (``>``, ``!``)
byte orders are accepted.  Numeric fields are decoded through a small table
of ``struct.Struct`` pairs; text fields are decoded by trying each candidate
encoding in order because the attribute table never declares one.
"""

from __future__ import annotations

import string
import struct
from dataclasses import dataclass
from typing import Callable, Dict, Sequence, Tuple, Union

from .errors import LayoutMismatch, TextDecodeError, UnsupportedField

DEFAULT_TEXT_ENCODINGS: Tuple[str, ...] = ("cp1252",)
ATTRIBUTE_TEXT_ENCODINGS: Tuple[str, ...] = ("cp1252", "utf-8")

LITTLE_ENDIAN_MARKERS = ("<", "=")
BIG_ENDIAN_MARKERS = (">", "!")

Scalar = Union[str, bool, int, float]


def decode_text(raw: bytes, encodings: Sequence[str] = DEFAULT_TEXT_ENCODINGS) -> str:
    for encoding in encodings:
        try:
            return raw.decode(encoding)
        except UnicodeDecodeError:
            continue
    raise TextDecodeError(bytes(raw), tuple(encodings))


@dataclass(frozen=True)
class FieldCodec:
    width: int
    read: Callable[[bytes, int, bool, Sequence[str]], Scalar] | None
    produces_value: bool = True


def _fixed(code: str) -> FieldCodec:
    little = struct.Struct("<" + code)
    big = struct.Struct(">" + code)

    def read(buffer: bytes, offset: int, big_endian: bool, encodings: Sequence[str]) -> Scalar:
        return (big if big_endian else little).unpack_from(buffer, offset)[0]

    return FieldCodec(width=little.size, read=read)


def _char(buffer: bytes, offset: int, big_endian: bool, encodings: Sequence[str]) -> Scalar:
    return decode_text(buffer[offset : offset + 1], encodings)


CODECS: Dict[str, FieldCodec] = {
    "x": FieldCodec(width=1, read=None, produces_value=False),
    "c": FieldCodec(width=1, read=_char),
    "b": _fixed("b"),
    "B": _fixed("B"),
    "?": _fixed("?"),
    "h": _fixed("h"),
    "H": _fixed("H"),
    "i": _fixed("i"),
    "l": _fixed("i"),
    "I": _fixed("I"),
    "L": _fixed("I"),
    "q": _fixed("q"),
    "Q": _fixed("Q"),
    "f": _fixed("f"),
    "d": _fixed("d"),
    # ``s`` consumes its repeat count as one text value; see LayoutToken.
    "s": FieldCodec(width=1, read=None),
}


@dataclass(frozen=True)
class LayoutToken:
    count: int
    code: str

    @property
    def size(self) -> int:
        return self.count * CODECS[self.code].width


@dataclass(frozen=True)
class Layout:
    text: str
    big_endian: bool
    tokens: Tuple[LayoutToken, ...]

    @property
    def size(self) -> int:
        return sum(token.size for token in self.tokens)


def parse_layout(layout: str) -> Layout:
    body = layout
    big_endian = False
    if body[:1] in BIG_ENDIAN_MARKERS:
        big_endian = True
        body = body[1:]
    elif body[:1] in LITTLE_ENDIAN_MARKERS:
        body = body[1:]
    elif body[:1] == "@":
        raise UnsupportedField(f"native alignment marker '@' is not supported in {layout!r}")

    tokens: list[LayoutToken] = []
    digits = ""
    for char in body:
        if char in string.digits:
            digits += char
            continue
        if char == " " and not digits:
            continue
        if char not in CODECS:
            raise UnsupportedField(f"unsupported layout token {char!r} in {layout!r}")
        tokens.append(LayoutToken(count=int(digits) if digits else 1, code=char))
        digits = ""
    if digits:
        raise UnsupportedField(f"repeat count {digits} is not followed by a type letter in {layout!r}")
    return Layout(text=layout, big_endian=big_endian, tokens=tuple(tokens))


def calcsize(layout: str | Layout) -> int:
    if isinstance(layout, str):
        layout = parse_layout(layout)
    return layout.size


def unpack(
    buffer: bytes,
    layout: str | Layout,
    *,
    encodings: Sequence[str] = DEFAULT_TEXT_ENCODINGS,
) -> Tuple[Scalar, ...]:
    """Decode ``buffer`` according to ``layout``.

    The buffer must be exactly as long as the layout describes; anything else
    raises ``LayoutMismatch`` rather than silently decoding a prefix.
    """

    if isinstance(layout, str):
        layout = parse_layout(layout)
    if layout.size != len(buffer):
        raise LayoutMismatch(layout.text, layout.size, len(buffer))

    values: list[Scalar] = []
    offset = 0
    for token in layout.tokens:
        codec = CODECS[token.code]
        if token.code == "s":
            values.append(decode_text(buffer[offset : offset + token.count], encodings))
            offset += token.count
            continue
        if not codec.produces_value:
            offset += token.size
            continue
        for _ in range(token.count):
            values.append(codec.read(buffer, offset, layout.big_endian, encodings))
            offset += codec.width
    return tuple(values)
