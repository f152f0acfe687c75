from typing import Any

from .decoder import Decoder
from .errors import JSONPullError
from .tokens import OpenArray, OpenObject


class ObjectStreamer:
    """Yields the entries of the `root` json object/array as they complete

    The root container is walked token by token and each entry is decoded whole, so memory
    use is bounded by the largest entry rather than by the document.

    Items:
        For a root array, every element as a Python value
        (str|int|float|bool|None|list|dict).
        For a root object, a `(key, value)` tuple for every pair.

    Example:
        >>> async with ObjectStreamer(feed) as streamer:
        ...     async for key, value in streamer:
        ...         print(key, value)
    """

    def __init__(self, source: Any, **options) -> None:
        """Initialize ObjectStreamer

        Args:
            source: anything Decoder accepts
            **options: buffer_size, max_depth, max_string_size as for Decoder
        """
        self._decoder = Decoder(source, **options)
        self._root = None
        self._finished = False

    @property
    def root(self):
        """OpenArray or OpenObject once the root has been read, None before."""
        return self._root

    def __aiter__(self):
        return self

    async def __anext__(self) -> Any:
        if self._finished:
            raise StopAsyncIteration
        if self._root is None:
            self._root = await self._decoder.token()
            if not isinstance(self._root, (OpenArray, OpenObject)):
                raise JSONPullError(f"Expected a top-level JSON object or array, got {self._root!r}")
        if not await self._decoder.more():
            await self._decoder.token()
            self._finished = True
            raise StopAsyncIteration
        if isinstance(self._root, OpenArray):
            return await self._decoder.decode()
        key = await self._decoder.token()
        return key.key, await self._decoder.decode()

    async def aclose(self) -> None:
        """Closes the object streamer"""
        await self._decoder.aclose()

    async def __aenter__(self):
        """Context manager entry"""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - ensures aclose() is always called"""
        await self.aclose()
        return False
