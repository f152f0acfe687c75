"""Decoders for the JSON primitives: string, number, boolean and null.

Each decoder expects the buffer to sit on the first character of its production
and leaves it on the first character after it.

Known grammar gaps, kept on purpose: numbers have no sign and no exponent, and
strings only understand the escapes \\" \\\\ and \\n. Any other escaped character
is kept verbatim with its backslash dropped; there is no \\uXXXX support.
"""

from enum import Enum
from typing import Optional, Union

from .buffer import StreamBuffer
from .errors import END_OF_STREAM, LimitExceeded, UnexpectedEndOfInput, UnknownValueStart, unexpected

ValueKind = Enum("ValueKind", "STRING NUMBER BOOLEAN NULL ARRAY OBJECT")

Primitive = Union[str, int, float, bool, None]

DIGITS = frozenset("0123456789")

_ESCAPES = {'"': '"', "\\": "\\", "n": "\n"}

_KINDS = {
    '"': ValueKind.STRING,
    "t": ValueKind.BOOLEAN,
    "f": ValueKind.BOOLEAN,
    "n": ValueKind.NULL,
    "[": ValueKind.ARRAY,
    "{": ValueKind.OBJECT,
}


async def which_value_kind(buffer: StreamBuffer) -> ValueKind:
    """Peek at the next character and tell which production starts there.

    Raises:
        UnknownValueStart: the character starts no JSON value
        UnexpectedEndOfInput: the stream ended
    """
    char = await buffer.peek()
    if char in DIGITS:
        return ValueKind.NUMBER
    if char == END_OF_STREAM:
        raise UnexpectedEndOfInput(buffer.position)
    try:
        return _KINDS[char]
    except KeyError:
        raise UnknownValueStart(char, buffer.position) from None


async def decode_string(buffer: StreamBuffer, max_size: Optional[int] = None) -> str:
    """Decode a quoted string.

    Args:
        buffer: positioned on the opening quote
        max_size: maximum length of the decoded string, None for unlimited
    """
    char = await buffer.next()
    if char != '"':
        raise unexpected(char, buffer.last_position)
    parts = []
    size = 0
    escaping = False
    while True:
        char = await buffer.next()
        if char == END_OF_STREAM:
            raise UnexpectedEndOfInput(buffer.position)
        if escaping:
            escaping = False
            char = _ESCAPES.get(char, char)
        elif char == "\\":
            escaping = True
            continue
        elif char == '"':
            return "".join(parts)
        parts.append(char)
        size += 1
        if max_size is not None and size > max_size:
            raise LimitExceeded(f"String size {size} exceeds maximum of {max_size}")


async def decode_number(buffer: StreamBuffer) -> Union[int, float]:
    """Decode a run of digits with at most one decimal point.

    Raises:
        UnexpectedToken: a leading or a second '.'
    """
    chars = []
    has_decimal = False
    while True:
        char = await buffer.peek()
        if char == ".":
            if not chars or has_decimal:
                await buffer.next()
                raise unexpected(char, buffer.last_position)
            has_decimal = True
        elif char not in DIGITS:
            break
        chars.append(await buffer.next())
    if not chars:
        raise unexpected(char, buffer.position)
    text = "".join(chars)
    return float(text) if has_decimal else int(text)


async def _decode_literal(buffer: StreamBuffer, literal: str) -> None:
    for expected in literal:
        char = await buffer.next()
        if char == END_OF_STREAM:
            raise UnexpectedEndOfInput(buffer.position)
        if char != expected:
            raise unexpected(char, buffer.last_position)


async def decode_boolean(buffer: StreamBuffer) -> bool:
    """Decode `true` or `false`, chosen by the first character."""
    literal = "true" if await buffer.peek() == "t" else "false"
    await _decode_literal(buffer, literal)
    return literal == "true"


async def decode_null(buffer: StreamBuffer) -> None:
    await _decode_literal(buffer, "null")
    return None


async def decode_primitive(buffer: StreamBuffer, max_string_size: Optional[int] = None) -> Primitive:
    """Decode whichever primitive starts at the buffer.

    Raises:
        UnknownValueStart: also for '[' and '{', which start no primitive
    """
    kind = await which_value_kind(buffer)
    if kind is ValueKind.STRING:
        return await decode_string(buffer, max_string_size)
    if kind is ValueKind.NUMBER:
        return await decode_number(buffer)
    if kind is ValueKind.BOOLEAN:
        return await decode_boolean(buffer)
    if kind is ValueKind.NULL:
        return await decode_null(buffer)
    raise UnknownValueStart(await buffer.peek(), buffer.position)
