"""Error taxonomy shared by the extraction, delivery and storage layers."""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Closed set of failure categories callers can branch on."""

    STRUCTURAL_PARSE = "structural_parse"
    DATA_FORMAT = "data_format"
    NETWORK = "network"
    DURABILITY = "durability"


class AllSidesError(Exception):
    """Base class for every failure raised by allsides-tg components."""

    kind: ErrorKind

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"[{self.kind.value}] {self.message}"


class StructuralParseError(AllSidesError):
    """An expected element is missing: the site layout most likely changed."""

    kind = ErrorKind.STRUCTURAL_PARSE

    def __init__(self, message: str, selector: str | None = None) -> None:
        if selector:
            message = f"{message} ({selector})"
        super().__init__(message)
        self.selector = selector


class DataFormatError(AllSidesError):
    """An element is present but its content cannot be interpreted."""

    kind = ErrorKind.DATA_FORMAT


class NetworkError(AllSidesError):
    """A fetch or delivery call failed."""

    kind = ErrorKind.NETWORK


class DurabilityError(AllSidesError):
    """The dedup store could not open, write or flush."""

    kind = ErrorKind.DURABILITY


__all__ = [
    "AllSidesError",
    "DataFormatError",
    "DurabilityError",
    "ErrorKind",
    "NetworkError",
    "StructuralParseError",
]
