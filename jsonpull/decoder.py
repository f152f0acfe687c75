"""Decoder: a pull tokenizer that walks a streamed JSON document one token per call.

Pending grammar work lives on an explicit stack of steps rather than on the Python call
stack, so the walk can be suspended between any two tokens and its memory use follows
the nesting depth of the document, not its length.
"""

import asyncio
import logging
from enum import Enum
from typing import Any, Optional

from .buffer import StreamBuffer
from .errors import END_OF_STREAM, DecoderStateError, LimitExceeded, UnexpectedToken, unexpected
from .scalars import decode_primitive, decode_string
from .tokens import CloseArray, CloseObject, Key, OpenArray, OpenObject, Token, Value
from .values import decode_value

logger = logging.getLogger(__name__)

Step = Enum(
    "Step",
    "VALUE KEY KEY_OR_END_OBJECT END_OBJECT_OR_VALUE END_OBJECT VALUE_OR_END_ARRAY END_ARRAY_OR_VALUE END_ARRAY",
)

CLOSERS = frozenset((END_OF_STREAM, "]", "}"))


class Decoder:
    """Pull tokenizer over a chunked source.

    `token()` returns the next Token of the document, `decode()` materializes the next
    value in one go, and `more()` tells whether the current container has another entry.
    The three can be mixed freely, e.g. to walk into a huge array token by token and then
    decode its elements one at a time:

        >>> decoder = Decoder(source)
        >>> await decoder.token()
        OpenArray()
        >>> while await decoder.more():
        ...     handle(await decoder.decode())

    A Decoder has exactly one consumer; do not call it from concurrent tasks. After the
    first exception escapes any of its methods, including cancellation, every further call
    raises DecoderStateError.
    """

    def __init__(self, source: Any, *, buffer_size=65536, max_depth=None, max_string_size=None):
        """Initialize Decoder with configurable settings

        Args:
            source: async iterable, iterable or file-like object delivering str or bytes chunks,
                or a StreamBuffer
            buffer_size (int): Size of each read from file-like sources (default: 65536)
            max_depth (int, optional): Maximum nesting depth allowed. None means unlimited. (default: None)
            max_string_size (int, optional): Maximum size of individual strings. None means unlimited. (default: None)
        """
        if isinstance(source, StreamBuffer):
            self._buffer = source
        else:
            self._buffer = StreamBuffer(source, buffer_size)
        self._max_depth = max_depth
        self._max_string_size = max_string_size
        self._depth = 0
        self._stack = [Step.VALUE]
        self._failure: Optional[BaseException] = None
        self._closed = False
        self._steps = {
            Step.VALUE: self._value,
            Step.KEY: self._key,
            Step.KEY_OR_END_OBJECT: self._key_or_end_object,
            Step.END_OBJECT_OR_VALUE: self._end_object_or_value,
            Step.END_OBJECT: self._end_object,
            Step.VALUE_OR_END_ARRAY: self._value_or_end_array,
            Step.END_ARRAY_OR_VALUE: self._end_array_or_value,
            Step.END_ARRAY: self._end_array,
        }

    @property
    def buffer(self) -> StreamBuffer:
        return self._buffer

    @property
    def depth(self) -> int:
        """Number of containers currently open."""
        return self._depth

    @property
    def stack_depth(self) -> int:
        """Number of pending steps; zero once the document is complete."""
        return len(self._stack)

    # Public API

    async def token(self) -> Optional[Token]:
        """Consume and return the next token, or None once the document is complete.

        Raises:
            JSONSyntaxError: malformed input
            LimitExceeded: a configured limit was exceeded
            DecoderStateError: the decoder failed earlier or was closed
        """
        self._check_usable()
        try:
            while self._stack:
                token = await self._steps[self._stack.pop()]()
                if token is not None:
                    return token
            return None
        except (Exception, asyncio.CancelledError) as e:
            self._poison(e)
            raise

    async def more(self) -> bool:
        """Return True if another element or pair follows in the current container.

        Only whitespace is consumed. Call this where an entry may start or end: right after
        an opening token or after a complete entry.
        """
        self._check_usable()
        if not self._stack:
            return False
        try:
            await self._buffer.consume_whitespace()
            return await self._buffer.peek() not in CLOSERS
        except (Exception, asyncio.CancelledError) as e:
            self._poison(e)
            raise

    async def decode(self) -> Any:
        """Decode the whole next value and return it as Python objects.

        Valid at the start of the document, after a Key, after an OpenArray and after an
        array element, where the separating comma is consumed first.

        Raises:
            UnexpectedToken: the next item is an object key or the container is closing
        """
        self._check_usable()
        try:
            await self._buffer.consume_whitespace()
            await self._prepare_decode()
            return await decode_value(self._buffer, self._max_depth, self._max_string_size, self._depth)
        except (Exception, asyncio.CancelledError) as e:
            self._poison(e)
            raise

    async def aclose(self) -> None:
        """Stop decoding and close the source."""
        if self._closed:
            return
        self._closed = True
        self._stack = []
        logger.debug("closing decoder at %s", self._buffer.position)
        await self._buffer.aclose()

    def __aiter__(self):
        return self

    async def __anext__(self) -> Token:
        token = await self.token()
        if token is None:
            raise StopAsyncIteration
        return token

    async def __aenter__(self):
        """Context manager entry"""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - ensures aclose() is always called"""
        await self.aclose()
        return False

    # Private API

    def _check_usable(self) -> None:
        if self._failure is not None:
            raise DecoderStateError(f"Decoder failed earlier: {self._failure!r}") from self._failure
        if self._closed:
            raise DecoderStateError("Decoder is closed")

    def _poison(self, error: BaseException) -> None:
        logger.debug("decoder failed at %s: %r", self._buffer.position, error)
        self._failure = error

    async def _prepare_decode(self) -> None:
        if not self._stack:
            raise unexpected(END_OF_STREAM, self._buffer.position)
        step = self._stack[-1]
        if step is Step.VALUE:
            self._stack.pop()
        elif step is Step.VALUE_OR_END_ARRAY:
            self._stack[-1] = Step.END_ARRAY_OR_VALUE
        elif step is Step.END_ARRAY_OR_VALUE:
            char = await self._buffer.peek()
            if char != ",":
                raise unexpected(char, self._buffer.position)
            await self._separator("]")
        else:
            raise unexpected(await self._buffer.peek(), self._buffer.position)
        char = await self._buffer.peek()
        if char in ("]", "}"):
            raise UnexpectedToken(char, self._buffer.position)

    def _open(self) -> None:
        if self._max_depth is not None and self._depth >= self._max_depth:
            raise LimitExceeded(f"Maximum nesting depth of {self._max_depth} exceeded")
        self._depth += 1

    async def _expect(self, expected: str) -> None:
        char = await self._buffer.next()
        if char != expected:
            raise unexpected(char, self._buffer.last_position)

    async def _separator(self, closer: str) -> None:
        await self._buffer.next()
        await self._buffer.consume_whitespace()
        if await self._buffer.peek() == closer:
            raise UnexpectedToken(closer, self._buffer.position)

    # Steps. Each returns the token it produced, or None to let token() run the next step.

    async def _value(self) -> Token:
        await self._buffer.consume_whitespace()
        char = await self._buffer.peek()
        if char == "{":
            self._open()
            await self._buffer.next()
            self._stack.append(Step.KEY_OR_END_OBJECT)
            return OpenObject()
        if char == "[":
            self._open()
            await self._buffer.next()
            self._stack.append(Step.VALUE_OR_END_ARRAY)
            return OpenArray()
        return Value(await decode_primitive(self._buffer, self._max_string_size))

    async def _key(self) -> Token:
        await self._buffer.consume_whitespace()
        key = await decode_string(self._buffer, self._max_string_size)
        await self._buffer.consume_whitespace()
        await self._expect(":")
        return Key(key)

    async def _key_or_end_object(self) -> Token:
        await self._buffer.consume_whitespace()
        if await self._buffer.peek() == "}":
            return await self._end_object()
        self._stack.extend((Step.END_OBJECT_OR_VALUE, Step.VALUE))
        return await self._key()

    async def _end_object_or_value(self) -> Optional[Token]:
        await self._buffer.consume_whitespace()
        char = await self._buffer.peek()
        if char == "}":
            return await self._end_object()
        if char != ",":
            raise unexpected(char, self._buffer.position)
        await self._buffer.next()
        self._stack.extend((Step.END_OBJECT_OR_VALUE, Step.VALUE, Step.KEY))
        return None

    async def _end_object(self) -> Token:
        await self._buffer.consume_whitespace()
        await self._expect("}")
        self._depth -= 1
        return CloseObject()

    async def _value_or_end_array(self) -> Optional[Token]:
        await self._buffer.consume_whitespace()
        if await self._buffer.peek() == "]":
            return await self._end_array()
        self._stack.extend((Step.END_ARRAY_OR_VALUE, Step.VALUE))
        return None

    async def _end_array_or_value(self) -> Optional[Token]:
        await self._buffer.consume_whitespace()
        char = await self._buffer.peek()
        if char == "]":
            return await self._end_array()
        if char != ",":
            raise unexpected(char, self._buffer.position)
        await self._separator("]")
        self._stack.extend((Step.END_ARRAY_OR_VALUE, Step.VALUE))
        return None

    async def _end_array(self) -> Token:
        await self._buffer.consume_whitespace()
        await self._expect("]")
        self._depth -= 1
        return CloseArray()
