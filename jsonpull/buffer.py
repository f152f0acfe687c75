"""
StreamBuffer: character level lookahead over a chunked, asynchronous source.

Chunks are pulled from the source one at a time and only when a read finds the
current chunk exhausted; the unread remainder of that chunk is all the buffer
ever holds.
"""

import asyncio
import codecs
import inspect
import logging
from typing import Any, AsyncIterator, Optional, Union

from .errors import END_OF_STREAM, DecoderStateError, Position

logger = logging.getLogger(__name__)

WHITESPACE = frozenset(" \t\r\n")

Chunk = Union[str, bytes]


async def _iterate(chunks):
    for chunk in chunks:
        yield chunk


async def _read(file_like, size: int):
    while True:
        chunk = file_like.read(size)
        if inspect.isawaitable(chunk):
            chunk = await chunk
        if not chunk:
            return
        yield chunk


def aiter_chunks(source: Any, buffer_size: int = 65536) -> AsyncIterator[Chunk]:
    """Adapt any supported source to an async iterator of chunks.

    Args:
        source: an async iterable of chunks, a file-like object with `read(size)`
            (plain or awaitable), a single str/bytes value, or any iterable of chunks
        buffer_size: number of characters requested per `read` on file-like sources

    Returns:
        An async iterator yielding str or bytes chunks
    """
    if isinstance(source, (str, bytes)):
        return _iterate((source,))
    if hasattr(source, "__aiter__"):
        return source.__aiter__()
    if hasattr(source, "read"):
        return _read(source, buffer_size)
    return _iterate(source)


class StreamBuffer:
    """
    Gives single character `peek`/`next` access to a source delivering text in chunks.
    Bytes chunks are decoded as UTF-8, including sequences split across chunks.
    Once the source is exhausted every read returns END_OF_STREAM.
    """

    def __init__(self, source: Any, buffer_size: int = 65536) -> None:
        self._source = source
        self._chunks = aiter_chunks(source, buffer_size)
        self._chunk: str = ""
        self._index: int = 0
        self._exhausted: bool = False
        self._utf8 = codecs.getincrementaldecoder("utf-8")()
        self._offset: int = 0
        self._line: int = 1
        self._column: int = 1
        self._last_position: Optional[Position] = None

    @property
    def position(self) -> Position:
        """Position of the next unread character."""
        return Position(self._offset, self._line, self._column)

    @property
    def last_position(self) -> Position:
        """Position of the most recently consumed character."""
        return self._last_position or self.position

    @property
    def exhausted(self) -> bool:
        return self._exhausted and self._index >= len(self._chunk)

    async def _fill(self) -> bool:
        while self._index >= len(self._chunk):
            if self._exhausted:
                return False
            try:
                chunk = await self._chunks.__anext__()
            except StopAsyncIteration:
                self._exhausted = True
                self._chunk = self._utf8.decode(b"", final=True)
                self._index = 0
                logger.debug("source exhausted after %d characters", self._offset)
                continue
            if isinstance(chunk, bytes):
                chunk = self._utf8.decode(chunk)
            logger.debug("pulled chunk of %d characters at offset %d", len(chunk), self._offset)
            self._chunk = chunk
            self._index = 0
        return True

    async def peek(self) -> str:
        """Return the next character without consuming it, or END_OF_STREAM."""
        if self._index >= len(self._chunk) and not await self._fill():
            return END_OF_STREAM
        return self._chunk[self._index]

    async def next(self) -> str:
        """Consume and return the next character, or END_OF_STREAM."""
        if self._index >= len(self._chunk) and not await self._fill():
            return END_OF_STREAM
        char = self._chunk[self._index]
        self._index += 1
        self._last_position = Position(self._offset, self._line, self._column)
        self._offset += 1
        if char == "\n":
            self._line += 1
            self._column = 1
        else:
            self._column += 1
        return char

    async def consume_whitespace(self) -> None:
        """Skip spaces, tabs, carriage returns and newlines."""
        while await self.peek() in WHITESPACE:
            await self.next()

    async def aclose(self) -> None:
        """Stop reading and close the chunk iterator if it supports `aclose`.

        File-like sources are left open; they belong to the caller.
        """
        self._exhausted = True
        self._chunk = ""
        self._index = 0
        close = getattr(self._chunks, "aclose", None)
        if close is not None:
            await close()


class ChunkFeed:
    """
    A push style source: producers write chunks as they arrive and close the feed at the end,
    a decoder reads the feed as an async iterable.

    Examples:
        >>> feed = ChunkFeed()
        >>> decoder = Decoder(feed)
        >>> await feed.write('{"key": ')
        >>> await feed.write('"value"}')
        >>> feed.close()
    """

    _CLOSED = object()

    def __init__(self, maxsize: int = 0) -> None:
        """Initialize the feed.

        Args:
            maxsize: maximum number of queued, unread chunks; `write` waits while the feed is full.
                Zero means unbounded. (default: 0)
        """
        self._queue: asyncio.Queue = asyncio.Queue(maxsize)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def write(self, data: Chunk) -> int:
        """Queue a chunk for the reader.

        Returns:
            The number of characters (or bytes) written
        """
        if self._closed:
            raise DecoderStateError("Cannot write to a closed ChunkFeed")
        await self._queue.put(data)
        return len(data)

    def close(self) -> None:
        """Signal the end of the stream. Chunks written earlier are still delivered."""
        if self._closed:
            return
        self._closed = True
        try:
            self._queue.put_nowait(ChunkFeed._CLOSED)
        except asyncio.QueueFull:
            # the reader is not waiting; it sees the flag once the queue drains
            pass

    def __aiter__(self):
        return self

    async def __anext__(self) -> Chunk:
        if self._closed and self._queue.empty():
            raise StopAsyncIteration
        item = await self._queue.get()
        if item is ChunkFeed._CLOSED:
            raise StopAsyncIteration
        return item
