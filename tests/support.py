import asyncio
import os
from functools import wraps

from jsonpull import StreamBuffer

json_file_name = lambda test_fn: os.path.join(os.path.dirname(__file__), "json_files", test_fn.__name__[5:] + ".json")


def load_test_data(func):
    """loads some json from a file with the same name as the test"""

    @wraps(func)
    async def wrapper(self, *args, **kwargs):
        with open(json_file_name(func), encoding="utf-8") as json_file:
            json_input = json_file.read()
        return await func(self, json_input)

    return wrapper


def chunked(text, size):
    return [text[i : i + size] for i in range(0, len(text), size)]


async def async_chunks(text, size=1):
    """Delivers `text` in chunks of `size`, yielding to the event loop before each one."""
    for chunk in chunked(text, size):
        await asyncio.sleep(0)
        yield chunk


def mock_buffer(text, size=None):
    return StreamBuffer(async_chunks(text, size or max(len(text), 1)))


class CountingSource:
    """Async iterable over fixed chunks that records how many chunks were pulled."""

    def __init__(self, chunks):
        self._chunks = list(chunks)
        self.pulls = 0

    def __aiter__(self):
        return self

    async def __anext__(self):
        if self.pulls >= len(self._chunks):
            raise StopAsyncIteration
        chunk = self._chunks[self.pulls]
        self.pulls += 1
        return chunk


async def endless_array(element='"foo"'):
    """An array that never ends: `[` followed by `element,` forever."""
    yield "["
    while True:
        await asyncio.sleep(0)
        yield element + ","


async def stalled(prefix=""):
    """Delivers `prefix` and then never delivers anything again."""
    if prefix:
        yield prefix
    await asyncio.Event().wait()
