"""
Structured errors raised by the buffer, the decoders and the pull tokenizer.

Every parse failure carries the offending character (where there is one) and
the position it was read at, so callers can render a message or branch on the
exception class without parsing strings.
"""

from collections import namedtuple
from typing import Optional, Union

END_OF_STREAM = ""

Position = namedtuple("Position", ["offset", "line", "column"])


def describe_position(self):
    return f"line {self.line}, column {self.column} (offset {self.offset})"


Position.__str__ = describe_position


class JSONPullError(Exception):
    """Base class of every error raised by jsonpull."""

    def __init__(self, msg: Union[str, bytes] = "") -> None:
        """Initialize JSONPullError with an error message.

        Args:
            msg: The error message as string or bytes
        """
        super().__init__(msg)
        self._msg: Union[str, bytes] = msg

    def __str__(self) -> str:
        """Return the error message as a string."""
        if isinstance(self._msg, bytes):
            return self._msg.decode("utf-8")
        return str(self._msg)


class JSONSyntaxError(JSONPullError):
    """A grammar violation found at a concrete place in the input.

    Two syntax errors are equal when they have the same class and character; the
    position is informational.
    """

    char = None

    def __init__(self, msg: str, position: Optional[Position] = None) -> None:
        super().__init__(msg)
        self.position = position

    def __eq__(self, other):
        if type(self) is not type(other):
            return NotImplemented
        return self.char == other.char

    def __hash__(self):
        return hash((type(self), self.char))

    def __repr__(self):
        return f"{type(self).__name__}({self.char!r}, position={self.position!r})"

    def _where(self) -> str:
        return f" at {self.position}" if self.position is not None else ""


class UnexpectedEndOfInput(JSONSyntaxError):
    """The source ended in the middle of a production."""

    def __init__(self, position: Optional[Position] = None) -> None:
        super().__init__("", position)
        self._msg = "Unexpected end of JSON input" + self._where()

    def __repr__(self):
        return f"UnexpectedEndOfInput(position={self.position!r})"


class UnexpectedToken(JSONSyntaxError):
    """A character that the grammar does not allow at this point."""

    def __init__(self, char: str, position: Optional[Position] = None) -> None:
        super().__init__("", position)
        self.char = char
        self._msg = f"Unexpected token {char!r} in JSON{self._where()}"


class UnknownValueStart(JSONSyntaxError):
    """A character that cannot start any JSON value."""

    def __init__(self, char: str, position: Optional[Position] = None) -> None:
        super().__init__("", position)
        self.char = char
        self._msg = f"Unknown start of JSON value {char!r}{self._where()}"


class LimitExceeded(JSONPullError):
    """A configured safety limit (nesting depth or string size) was exceeded."""


class DecoderStateError(JSONPullError):
    """The decoder can no longer be used: it failed earlier or it was closed."""


def unexpected(char: str, position: Optional[Position] = None) -> JSONSyntaxError:
    """Build the error for reading `char` where something else was expected."""
    if char == END_OF_STREAM:
        return UnexpectedEndOfInput(position)
    return UnexpectedToken(char, position)
