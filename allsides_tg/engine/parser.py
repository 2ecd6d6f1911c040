"""DOM parsing of the AllSides balanced-news pages."""

from __future__ import annotations

from datetime import datetime
from urllib.parse import urljoin

from selectolax.parser import HTMLParser, Node

from ..config import SITE_ORIGIN
from ..errors import DataFormatError, StructuralParseError
from .models import Article, LinkSpan, MainPage, Paragraph, Side, Span, Story, Teaser, TextSpan

STORY_BLOCK = ".view-story-id-single-story"
STORY_CONTENT = "#content"


class Parser:
    """Turn rendered AllSides HTML into immutable value objects."""

    def __init__(self, site_origin: str = SITE_ORIGIN) -> None:
        self.site_origin = site_origin

    def parse_main_page(self, html: str) -> MainPage:
        tree = HTMLParser(html)
        teasers: list[Teaser] = []
        for block in tree.css(STORY_BLOCK):
            href = _attr(block.css_first("a[href]"), "href")
            if not href:
                raise StructuralParseError(
                    "cannot query story url", f"{STORY_BLOCK} > a.href"
                )
            title_node = block.css_first(".story-title")
            if title_node is None:
                raise StructuralParseError(
                    "cannot query story title", f"{STORY_BLOCK} > .story-title"
                )
            img_src = _attr(block.css_first(".story-id-image img"), "src")
            if not img_src:
                raise StructuralParseError(
                    "cannot query story image", f"{STORY_BLOCK} > .story-id-image > img.src"
                )
            teasers.append(
                Teaser(
                    title=title_node.text(deep=True).strip(),
                    url=self.normalize_url(href),
                    image_url=self.normalize_url(img_src),
                )
            )

        # The site lists newest first
        teasers.reverse()

        if not teasers:
            raise StructuralParseError(
                "the main page contains no stories: parsing is broken", STORY_BLOCK
            )
        return MainPage(teasers=tuple(teasers))

    def parse_story(self, html: str) -> Story:
        tree = HTMLParser(html)
        content = tree.css_first(STORY_CONTENT)
        if content is None:
            raise StructuralParseError("cannot query story body", STORY_CONTENT)

        heading = content.css_first(".taxonomy-heading")
        if heading is None:
            raise StructuralParseError("cannot query story heading", ".taxonomy-heading")
        title = heading.text(deep=True).strip()

        raw_date = _attr(content.css_first(".date-display-single"), "content")
        if not raw_date:
            raise StructuralParseError(
                "cannot query story publishing date", ".date-display-single[content]"
            )
        published_at = parse_rfc3339(raw_date)

        description = content.css_first(".story-id-page-description")
        if description is None:
            raise StructuralParseError(
                "cannot query story summary", ".story-id-page-description"
            )
        summary = extract_paragraphs(description)
        if not summary:
            raise DataFormatError("summary contains no paragraphs")

        wrapper = content.css_first(".feature-thumbs-wrapper")
        if wrapper is None:
            raise StructuralParseError(
                "cannot query linked stories container", ".feature-thumbs-wrapper"
            )
        articles = tuple(self._parse_article(node) for node in wrapper.css(".feature-thumbs"))

        return Story(title=title, summary=summary, published_at=published_at, articles=articles)

    def _parse_article(self, node: Node) -> Article:
        title_node = node.css_first(".news-title a")
        if title_node is None:
            raise StructuralParseError(
                "cannot query linked article title", ".feature-thumbs > .news-title > a"
            )

        url = _attr(node.css_first(".read-more-story a[href]"), "href")
        if not url:
            raise StructuralParseError(
                "cannot query linked article origin url",
                ".feature-thumbs > .read-more-story > a.href",
            )

        source_node = node.css_first(".news-source")
        if source_node is None:
            raise StructuralParseError(
                "cannot query news article source", ".feature-thumbs > .news-source"
            )

        bias = _attr(node.css_first(".bias-image img"), "title")
        if bias is None:
            raise StructuralParseError(
                "cannot query news source political bias",
                ".feature-thumbs > .bias-image > img.title",
            )

        body = node.css_first(".news-body")
        if body is None:
            raise StructuralParseError(
                "cannot query article summary", ".feature-thumbs > .news-body"
            )

        return Article(
            side=parse_bias(bias),
            source=source_node.text(deep=True).strip(),
            title=title_node.text(deep=True).strip(),
            url=url.strip(),
            summary=extract_paragraphs(body),
        )

    def normalize_url(self, href: str) -> str:
        return urljoin(self.site_origin, href.strip())


def parse_bias(bias: str) -> Side:
    """Map ``"AllSides Media Bias Rating: Lean Left"`` to its :class:`Side`."""

    if ":" not in bias:
        raise DataFormatError(
            f"unexpected bias format {bias!r}: expected '<any>: <affiliation>'"
        )
    return Side.from_shorthand(bias.rsplit(":", 1)[1].strip())


def parse_rfc3339(value: str) -> datetime:
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as exc:
        raise DataFormatError(f"unexpected date-time format (not rfc3339): {value!r}") from exc
    if parsed.tzinfo is None:
        raise DataFormatError(f"date-time carries no utc offset: {value!r}")
    return parsed


def extract_paragraphs(container: Node) -> tuple[Paragraph, ...]:
    """Collect the direct ``<p>`` children of ``container`` in document order."""

    return tuple(
        build_paragraph(child) for child in container.iter(include_text=False) if child.tag == "p"
    )


def build_paragraph(node: Node) -> Paragraph:
    spans: list[Span] = []
    for child in node.iter(include_text=True):
        if child.tag == "_comment":
            continue
        text = child.text(deep=True)
        href = _attr(child, "href") if child.tag == "a" else None
        if href is not None:
            spans.append(LinkSpan(href=href, text=text))
        elif text:
            spans.append(TextSpan(text=text))
    return Paragraph(spans=tuple(spans))


def _attr(node: Node | None, name: str) -> str | None:
    if node is None:
        return None
    return node.attributes.get(name)


__all__ = [
    "Parser",
    "SITE_ORIGIN",
    "STORY_BLOCK",
    "STORY_CONTENT",
    "build_paragraph",
    "extract_paragraphs",
    "parse_bias",
    "parse_rfc3339",
]
