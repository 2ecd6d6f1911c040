"""Render parsed stories into Telegram announcements."""

from __future__ import annotations

from html import escape
from pathlib import Path
from string import Template
from typing import Iterable

from ..config import ExcerptPolicy
from ..errors import DataFormatError
from .models import Article, Paragraph, Side, Story
from .notifier import TELEGRAM_MAX_MESSAGE_LENGTH

ELLIPSIS = "..."

SIDE_EMOJI: dict[Side, str] = {
    Side.LEFT: "🟦",
    Side.CENTER_LEFT: "🔵",
    Side.CENTER: "🟣",
    Side.CENTER_RIGHT: "🔴",
    Side.RIGHT: "🟥",
}

_TEMPLATES_DIR = Path(__file__).resolve().parents[1] / "templates"


def _load_template(name: str) -> Template:
    return Template((_TEMPLATES_DIR / name).read_text(encoding="utf-8"))


def excerpt(paragraphs: Iterable[Paragraph], policy: ExcerptPolicy) -> list[str]:
    """Plain-text paragraphs of a side-article up to its truncation marker.

    ``TAKE_WHILE`` stops at the first paragraph ending with ``...`` and leaves it
    out; ``FILTER`` only drops the paragraphs ending with ``...``.
    """

    kept: list[str] = []
    for paragraph in paragraphs:
        text = paragraph.plain_text()
        if text.rstrip().endswith(ELLIPSIS):
            if policy is ExcerptPolicy.TAKE_WHILE:
                break
            continue
        kept.append(text)
    return kept


class Formatter:
    """Fill the post template from a :class:`Story`."""

    def __init__(
        self,
        excerpt_policy: ExcerptPolicy = ExcerptPolicy.TAKE_WHILE,
        post_template: Template | None = None,
        side_story_template: Template | None = None,
        max_length: int = TELEGRAM_MAX_MESSAGE_LENGTH,
    ) -> None:
        self.excerpt_policy = excerpt_policy
        self.max_length = max_length
        self.post_template = post_template or _load_template("post.txt")
        self.side_story_template = side_story_template or _load_template("side_story.txt")

    def format_story(self, story: Story, url: str) -> str:
        """Render ``story``, shrinking it until it fits into one message.

        Excerpt paragraphs go first (last article backwards), then whole side
        articles, then trailing summary paragraphs.
        """

        summary = list(story.summary)
        articles = list(story.articles)
        excerpts = [excerpt(article.summary, self.excerpt_policy) for article in articles]
        body = self._render(story, url, summary, articles, excerpts)
        while len(body) > self.max_length:
            trimmable = [index for index, kept in enumerate(excerpts) if kept]
            if trimmable:
                excerpts[trimmable[-1]].pop()
            elif articles:
                articles.pop()
                excerpts.pop()
            elif len(summary) > 1:
                summary.pop()
            else:
                raise DataFormatError(
                    f"announcement is {len(body)} characters, the limit is {self.max_length}"
                )
            body = self._render(story, url, summary, articles, excerpts)
        return body

    def _render(
        self,
        story: Story,
        url: str,
        summary: list[Paragraph],
        articles: list[Article],
        excerpts: list[list[str]],
    ) -> str:
        story_content = "\n\n".join(p.rich_text() for p in summary)
        side_stories = "\n\n".join(
            self._format_article(article, content) for article, content in zip(articles, excerpts)
        )
        rendered = self.post_template.substitute(
            story_title=escape(story.title, quote=False),
            story_content=story_content,
            story_url=escape(url),
            story_date=story.published_at.date().strftime("%Y-%m-%d"),
            side_stories=f"{side_stories}\n\n" if side_stories else "",
        )
        return rendered.strip()

    def _format_article(self, article: Article, paragraphs: list[str]) -> str:
        content = "\n\n".join(paragraphs)
        rendered = self.side_story_template.substitute(
            side_story_emoji=SIDE_EMOJI[article.side],
            side_story_title=escape(article.title, quote=False),
            side_story_url=escape(article.url),
            side_story_source=escape(article.source, quote=False),
            side_story_content=escape(content, quote=False),
        )
        return rendered.rstrip()


__all__ = ["ELLIPSIS", "Formatter", "SIDE_EMOJI", "excerpt"]
