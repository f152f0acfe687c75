import asyncio
import io
import unittest

from jsonpull import END_OF_STREAM, ChunkFeed, DecoderStateError, Position, StreamBuffer
from support import CountingSource, async_chunks, mock_buffer


class StreamBufferTests(unittest.IsolatedAsyncioTestCase):
    async def test_next(self):
        buffer = mock_buffer("foo")
        self.assertEqual(await buffer.next(), "f")
        self.assertEqual(await buffer.next(), "o")
        self.assertEqual(await buffer.next(), "o")
        self.assertEqual(await buffer.next(), END_OF_STREAM)
        self.assertEqual(await buffer.next(), END_OF_STREAM)

    async def test_peek(self):
        buffer = mock_buffer("foo")
        self.assertEqual(await buffer.peek(), "f")
        self.assertEqual(await buffer.peek(), "f")
        self.assertEqual(await buffer.next(), "f")
        await buffer.next()
        await buffer.next()
        self.assertEqual(await buffer.peek(), END_OF_STREAM)
        self.assertEqual(await buffer.peek(), END_OF_STREAM)

    async def test_peek_is_idempotent_across_chunk_boundaries(self):
        buffer = mock_buffer("abc", size=1)
        for expected in "abc":
            first = await buffer.peek()
            second = await buffer.peek()
            self.assertEqual(first, second)
            self.assertEqual(first, expected)
            await buffer.next()

    async def test_reads_across_chunks_and_skips_empty_ones(self):
        buffer = StreamBuffer(CountingSource(["a", "", "", "bc"]))
        self.assertEqual([await buffer.next() for _ in range(4)], ["a", "b", "c", END_OF_STREAM])
        self.assertTrue(buffer.exhausted)

    async def test_pulls_only_when_needed(self):
        source = CountingSource(["ab", "cd"])
        buffer = StreamBuffer(source)
        self.assertEqual(source.pulls, 0)
        await buffer.peek()
        self.assertEqual(source.pulls, 1)
        await buffer.next()
        await buffer.next()
        self.assertEqual(source.pulls, 1)
        await buffer.peek()
        self.assertEqual(source.pulls, 2)

    async def test_consume_whitespace(self):
        buffer = mock_buffer("1 2\t3\n4\r5 \r\t\n\t\r 6")
        for expected in "123456":
            await buffer.consume_whitespace()
            self.assertEqual(await buffer.peek(), expected)
            await buffer.next()
        await buffer.consume_whitespace()
        self.assertEqual(await buffer.peek(), END_OF_STREAM)

    async def test_consume_whitespace_spanning_chunks(self):
        buffer = StreamBuffer(async_chunks("   \n\n\t  x", 2))
        await buffer.consume_whitespace()
        self.assertEqual(await buffer.next(), "x")

    async def test_utf8_bytes_split_across_chunks(self):
        encoded = '"hé€"'.encode("utf-8")
        buffer = StreamBuffer([encoded[i : i + 1] for i in range(len(encoded))])
        chars = []
        while await buffer.peek() != END_OF_STREAM:
            chars.append(await buffer.next())
        self.assertEqual("".join(chars), '"hé€"')

    async def test_truncated_utf8_raises(self):
        buffer = StreamBuffer([b"a\xe2\x82"])
        self.assertEqual(await buffer.next(), "a")
        with self.assertRaises(UnicodeDecodeError):
            await buffer.next()

    async def test_file_like_source(self):
        buffer = StreamBuffer(io.StringIO("[1, 2]"), buffer_size=2)
        chars = [await buffer.next() for _ in range(7)]
        self.assertEqual("".join(chars), "[1, 2]")

    async def test_string_and_iterable_sources(self):
        self.assertEqual(await StreamBuffer("xy").next(), "x")
        self.assertEqual(await StreamBuffer(b"xy").next(), "x")
        self.assertEqual(await StreamBuffer(iter(["x", "y"])).next(), "x")

    async def test_position(self):
        buffer = mock_buffer("a\nbc")
        self.assertEqual(buffer.position, Position(0, 1, 1))
        await buffer.next()
        self.assertEqual(buffer.position, Position(1, 1, 2))
        await buffer.next()
        self.assertEqual(buffer.position, Position(2, 2, 1))
        await buffer.next()
        self.assertEqual(buffer.last_position, Position(2, 2, 1))
        self.assertEqual(buffer.position, Position(3, 2, 2))
        self.assertEqual(str(buffer.position), "line 2, column 2 (offset 3)")

    async def test_aclose_stops_reading(self):
        buffer = StreamBuffer(async_chunks("abc"))
        await buffer.next()
        await buffer.aclose()
        self.assertEqual(await buffer.peek(), END_OF_STREAM)


class ChunkFeedTests(unittest.IsolatedAsyncioTestCase):
    async def test_write_then_read(self):
        feed = ChunkFeed()
        buffer = StreamBuffer(feed)

        async def produce():
            for chunk in ("ab", "c"):
                await asyncio.sleep(0)
                await feed.write(chunk)
            feed.close()

        producer = asyncio.create_task(produce())
        chars = []
        while await buffer.peek() != END_OF_STREAM:
            chars.append(await buffer.next())
        await producer
        self.assertEqual(chars, ["a", "b", "c"])

    async def test_write_after_close(self):
        feed = ChunkFeed()
        feed.close()
        self.assertTrue(feed.closed)
        with self.assertRaises(DecoderStateError):
            await feed.write("x")

    async def test_close_while_full_still_delivers(self):
        feed = ChunkFeed(maxsize=1)
        self.assertEqual(await feed.write("x"), 1)
        feed.close()
        self.assertEqual([chunk async for chunk in feed], ["x"])

    async def test_bounded_feed_waits_for_reader(self):
        feed = ChunkFeed(maxsize=1)
        await feed.write("a")
        blocked = asyncio.create_task(feed.write("b"))
        await asyncio.sleep(0)
        self.assertFalse(blocked.done())
        self.assertEqual(await feed.__anext__(), "a")
        await blocked
        self.assertEqual(await feed.__anext__(), "b")


if __name__ == "__main__":
    unittest.main(verbosity=2)
