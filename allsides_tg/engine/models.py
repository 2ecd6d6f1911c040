"""Value objects produced by the page extractor."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from html import escape
from typing import Union

from ..errors import DataFormatError


class Side(str, Enum):
    """Editorial bias of a side-article's source."""

    LEFT = "left"
    CENTER_LEFT = "center_left"
    CENTER = "center"
    CENTER_RIGHT = "center_right"
    RIGHT = "right"

    @classmethod
    def from_shorthand(cls, shorthand: str) -> "Side":
        try:
            return _SHORTHANDS[shorthand]
        except KeyError:
            raise DataFormatError(
                f"unexpected political affiliation shorthand: {shorthand!r}"
            ) from None


_SHORTHANDS: dict[str, Side] = {
    "Left": Side.LEFT,
    "Lean Left": Side.CENTER_LEFT,
    "Center Left": Side.CENTER_LEFT,
    "Center": Side.CENTER,
    "Lean Right": Side.CENTER_RIGHT,
    "Center Right": Side.CENTER_RIGHT,
    "Right": Side.RIGHT,
}


@dataclass(frozen=True, slots=True)
class TextSpan:
    text: str

    def rich_text(self) -> str:
        return escape(self.text, quote=False)


@dataclass(frozen=True, slots=True)
class LinkSpan:
    href: str
    text: str

    def rich_text(self) -> str:
        return f'<a href="{escape(self.href)}">{escape(self.text, quote=False)}</a>'


Span = Union[TextSpan, LinkSpan]


@dataclass(frozen=True, slots=True)
class Paragraph:
    """Inline content of a single ``<p>`` captured at parse time."""

    spans: tuple[Span, ...]

    def plain_text(self) -> str:
        return "".join(span.text for span in self.spans)

    def rich_text(self) -> str:
        """Render links as Telegram HTML anchors, keeping span order and adjacency."""

        return "".join(span.rich_text() for span in self.spans)


@dataclass(frozen=True, slots=True)
class Teaser:
    title: str
    url: str
    image_url: str


@dataclass(frozen=True, slots=True)
class MainPage:
    teasers: tuple[Teaser, ...]


@dataclass(frozen=True, slots=True)
class Article:
    side: Side
    source: str
    title: str
    url: str
    summary: tuple[Paragraph, ...] = ()


@dataclass(frozen=True, slots=True)
class Story:
    title: str
    summary: tuple[Paragraph, ...]
    published_at: datetime
    articles: tuple[Article, ...] = ()


__all__ = [
    "Article",
    "LinkSpan",
    "MainPage",
    "Paragraph",
    "Side",
    "Span",
    "Story",
    "Teaser",
    "TextSpan",
]
