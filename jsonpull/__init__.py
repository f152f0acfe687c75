"""jsonpull provides a pull tokenizer for JSON arriving in chunks via the Decoder class, whole value
decoding via decode_document and a streamer of top level entries via the ObjectStreamer class.

Useful for parsing very large or open ended JSON coming over the wire or from disk: memory use
follows the nesting depth of the document, not its size.
"""

from jsonpull.buffer import ChunkFeed, StreamBuffer
from jsonpull.decoder import Decoder
from jsonpull.errors import (
    END_OF_STREAM,
    DecoderStateError,
    JSONPullError,
    JSONSyntaxError,
    LimitExceeded,
    Position,
    UnexpectedEndOfInput,
    UnexpectedToken,
    UnknownValueStart,
)
from jsonpull.streamer import ObjectStreamer
from jsonpull.tokens import CloseArray, CloseObject, Key, OpenArray, OpenObject, Token, TokenKind, TokenListener, Value
from jsonpull.values import decode_document

__all__ = [
    "ChunkFeed",
    "CloseArray",
    "CloseObject",
    "Decoder",
    "DecoderStateError",
    "END_OF_STREAM",
    "JSONPullError",
    "JSONSyntaxError",
    "Key",
    "LimitExceeded",
    "ObjectStreamer",
    "OpenArray",
    "OpenObject",
    "Position",
    "StreamBuffer",
    "Token",
    "TokenKind",
    "TokenListener",
    "UnexpectedEndOfInput",
    "UnexpectedToken",
    "UnknownValueStart",
    "Value",
    "decode_document",
]
