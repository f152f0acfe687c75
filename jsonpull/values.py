"""Recursive descent decoding of whole JSON values into Python objects."""

from typing import Any, Dict, List, Optional

from .buffer import StreamBuffer
from .errors import LimitExceeded, UnexpectedToken, unexpected
from .scalars import ValueKind, decode_boolean, decode_null, decode_number, decode_string, which_value_kind


def _enter(depth: int, max_depth: Optional[int]) -> int:
    if max_depth is not None and depth >= max_depth:
        raise LimitExceeded(f"Maximum nesting depth of {max_depth} exceeded")
    return depth + 1


async def _expect(buffer: StreamBuffer, expected: str) -> None:
    char = await buffer.next()
    if char != expected:
        raise unexpected(char, buffer.last_position)


async def _reject_closer(buffer: StreamBuffer, closer: str) -> None:
    # a separator must be followed by another element
    await buffer.consume_whitespace()
    if await buffer.peek() == closer:
        raise UnexpectedToken(closer, buffer.position)


async def decode_value(
    buffer: StreamBuffer, max_depth: Optional[int] = None, max_string_size: Optional[int] = None, depth: int = 0
) -> Any:
    """Decode the next complete value, skipping leading whitespace.

    Args:
        buffer: the buffer to read from
        max_depth: maximum container nesting, None for unlimited
        max_string_size: maximum length of any string or key, None for unlimited
        depth: nesting depth the value starts at, counted against `max_depth`

    Returns:
        str, int, float, bool, None, list or dict
    """
    await buffer.consume_whitespace()
    kind = await which_value_kind(buffer)
    if kind is ValueKind.OBJECT:
        return await decode_object(buffer, max_depth, max_string_size, depth)
    if kind is ValueKind.ARRAY:
        return await decode_array(buffer, max_depth, max_string_size, depth)
    if kind is ValueKind.STRING:
        return await decode_string(buffer, max_string_size)
    if kind is ValueKind.NUMBER:
        return await decode_number(buffer)
    if kind is ValueKind.BOOLEAN:
        return await decode_boolean(buffer)
    return await decode_null(buffer)


async def decode_array(
    buffer: StreamBuffer, max_depth: Optional[int] = None, max_string_size: Optional[int] = None, depth: int = 0
) -> List[Any]:
    await _expect(buffer, "[")
    depth = _enter(depth, max_depth)
    result = []
    await buffer.consume_whitespace()
    while await buffer.peek() != "]":
        if result:
            await _expect(buffer, ",")
            await _reject_closer(buffer, "]")
        result.append(await decode_value(buffer, max_depth, max_string_size, depth))
        await buffer.consume_whitespace()
    await buffer.next()
    return result


async def decode_object(
    buffer: StreamBuffer, max_depth: Optional[int] = None, max_string_size: Optional[int] = None, depth: int = 0
) -> Dict[str, Any]:
    """Decode an object; a repeated key keeps the last value, in the first key's place."""
    await _expect(buffer, "{")
    depth = _enter(depth, max_depth)
    result = {}
    first = True
    await buffer.consume_whitespace()
    while await buffer.peek() != "}":
        if not first:
            await _expect(buffer, ",")
            await buffer.consume_whitespace()
        key = await decode_string(buffer, max_string_size)
        await buffer.consume_whitespace()
        await _expect(buffer, ":")
        result[key] = await decode_value(buffer, max_depth, max_string_size, depth)
        first = False
        await buffer.consume_whitespace()
    await buffer.next()
    return result


async def decode_document(
    source: Any, *, buffer_size: int = 65536, max_depth: Optional[int] = None, max_string_size: Optional[int] = None
) -> Any:
    """Decode one whole document from `source`.

    Args:
        source: anything StreamBuffer accepts
        buffer_size: read size for file-like sources
        max_depth: maximum container nesting, None for unlimited
        max_string_size: maximum length of any string or key, None for unlimited

    Note:
        The whole value is held in memory; use Decoder.token() for unbounded documents.
    """
    buffer = StreamBuffer(source, buffer_size)
    try:
        return await decode_value(buffer, max_depth, max_string_size)
    finally:
        await buffer.aclose()
