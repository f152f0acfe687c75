"""
The six lexical tokens a streaming walk over a JSON document produces, and the
TokenListener interface used to handle them exhaustively.
"""

from abc import ABCMeta, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .scalars import Primitive

TokenKind = Enum("TokenKind", "OPEN_OBJECT CLOSE_OBJECT OPEN_ARRAY CLOSE_ARRAY KEY VALUE")


class TokenListener(metaclass=ABCMeta):
    """Abstract base class for token handlers.

    Subclasses must implement every method, so a handler that forgets a kind of
    token cannot be instantiated. `Token.accept` returns whatever the called method
    returns.
    """

    @abstractmethod
    def on_open_object(self) -> Any:
        """Called for `{`."""

    @abstractmethod
    def on_close_object(self) -> Any:
        """Called for `}`."""

    @abstractmethod
    def on_open_array(self) -> Any:
        """Called for `[`."""

    @abstractmethod
    def on_close_array(self) -> Any:
        """Called for `]`."""

    @abstractmethod
    def on_key(self, key: str) -> Any:
        """Called for an object key.

        Args:
            key: The decoded key
        """

    @abstractmethod
    def on_value(self, value: Primitive) -> Any:
        """Called for a primitive value, in an object, an array or at the top level.

        Args:
            value: str, int, float, bool or None
        """


class Token(metaclass=ABCMeta):
    kind: TokenKind

    @abstractmethod
    def accept(self, listener: TokenListener) -> Any:
        """Dispatch to the listener method for this kind of token."""


@dataclass(frozen=True)
class OpenObject(Token):
    kind = TokenKind.OPEN_OBJECT

    def accept(self, listener):
        return listener.on_open_object()

    def __str__(self):
        return "{"


@dataclass(frozen=True)
class CloseObject(Token):
    kind = TokenKind.CLOSE_OBJECT

    def accept(self, listener):
        return listener.on_close_object()

    def __str__(self):
        return "}"


@dataclass(frozen=True)
class OpenArray(Token):
    kind = TokenKind.OPEN_ARRAY

    def accept(self, listener):
        return listener.on_open_array()

    def __str__(self):
        return "["


@dataclass(frozen=True)
class CloseArray(Token):
    kind = TokenKind.CLOSE_ARRAY

    def accept(self, listener):
        return listener.on_close_array()

    def __str__(self):
        return "]"


@dataclass(frozen=True)
class Key(Token):
    kind = TokenKind.KEY
    key: str

    def accept(self, listener):
        return listener.on_key(self.key)


@dataclass(frozen=True)
class Value(Token):
    kind = TokenKind.VALUE
    value: Primitive

    def accept(self, listener):
        return listener.on_value(self.value)
