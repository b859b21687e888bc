"""Marker types for fixed-width numbers and the text-deserialization protocol.

Python numbers carry no width, so fields that need the 64-bit or unsigned
parsing rules declare one of the markers below. Plain ``int`` parses as a
32-bit signed integer and plain ``float`` as a double.
"""

from __future__ import annotations

from typing import NewType, Protocol, Type, TypeVar, runtime_checkable

Int64 = NewType("Int64", int)
UInt = NewType("UInt", int)
UInt64 = NewType("UInt64", int)
Float32 = NewType("Float32", float)

T = TypeVar("T", bound="TextDeserializable")


@runtime_checkable
class TextDeserializable(Protocol):
    """Capability of types that build themselves from an environment string.

    Implementations raise ``ValueError`` (or ``TypeError``) for malformed text.

    Examples:
        >>> class Level:
        ...     def __init__(self, name: str) -> None:
        ...         self.name = name
        ...     @classmethod
        ...     def from_text(cls, text: str) -> "Level":
        ...         return cls(text.lower())
    """

    @classmethod
    def from_text(cls: Type[T], text: str) -> T:
        ...


def is_text_deserializable(tp: object) -> bool:
    return isinstance(tp, type) and callable(getattr(tp, "from_text", None))
