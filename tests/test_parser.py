from __future__ import annotations

from datetime import timedelta

import pytest

from allsides_tg.engine import LinkSpan, Parser, Side, Teaser, TextSpan
from allsides_tg.errors import DataFormatError, ErrorKind, StructuralParseError


def test_parse_main_page(main_page_html: str) -> None:
    parsed = Parser().parse_main_page(main_page_html)
    assert list(parsed.teasers) == [
        Teaser(
            title="McConnell Recognizes Biden as President-Elect",
            url="https://www.allsides.com/story/mcconnell-recognizes-biden-president-elect",
            image_url="https://www.allsides.com/sites/default/files/styles/feature_image_300x200/public/mreportmcconnell_1_1.jpg?itok=fYKpR74i",
        ),
        Teaser(
            title="Russian Hackers Suspected in Broad Attack on US Government, Businesses",
            url="https://www.allsides.com/story/russian-hackers-suspected-broad-attack-us-government-businesses",
            image_url="https://www.allsides.com/sites/default/files/styles/feature_image_300x200/public/594d77f2-7693-4a33-8d79-5c007f8ffb7d%40news.ap_.org_.jpg?itok=g5Jm68U3",
        ),
        Teaser(
            title="NY Gov. Cuomo Accused of Sexual Harrassment; Less Coverage from Left-Rated Outlets",
            url="https://www.allsides.com/story/ny-gov-cuomo-accused-sexual-harrassment-less-coverage-left-rated-outlets",
            image_url="https://www.allsides.com/sites/default/files/styles/feature_image_300x200/public/cuo.png?itok=NeTuIYlx",
        ),
    ]


def test_parse_main_page_normalizes_relative_urls() -> None:
    html = """
    <div class="view-story-id-single-story">
      <div class="story-id-image"><a href="/story/b"><img src="/files/b.jpg"></a></div>
      <div class="story-title">Second</div>
    </div>
    <div class="view-story-id-single-story">
      <div class="story-id-image"><a href="https://www.allsides.com/story/a"><img src="https://cdn.example/a.jpg"></a></div>
      <div class="story-title">First</div>
    </div>
    """
    teasers = Parser().parse_main_page(html).teasers
    assert [t.title for t in teasers] == ["First", "Second"]
    assert teasers[0].url == "https://www.allsides.com/story/a"
    assert teasers[0].image_url == "https://cdn.example/a.jpg"
    assert teasers[1].url == "https://www.allsides.com/story/b"
    assert teasers[1].image_url == "https://www.allsides.com/files/b.jpg"


def test_parse_main_page_without_blocks_is_structural_error() -> None:
    with pytest.raises(StructuralParseError) as excinfo:
        Parser().parse_main_page("<html><body><p>maintenance</p></body></html>")
    assert excinfo.value.kind is ErrorKind.STRUCTURAL_PARSE
    assert excinfo.value.selector == ".view-story-id-single-story"


@pytest.mark.parametrize(
    ("block", "missing"),
    [
        ('<div class="story-title">T</div><div class="story-id-image"><img src="/i.jpg"></div>', "a.href"),
        ('<a href="/s"></a><div class="story-id-image"><img src="/i.jpg"></div>', ".story-title"),
        ('<a href="/s"></a><div class="story-title">T</div>', "img.src"),
    ],
)
def test_parse_main_page_names_missing_element(block: str, missing: str) -> None:
    html = f'<div class="view-story-id-single-story">{block}</div>'
    with pytest.raises(StructuralParseError) as excinfo:
        Parser().parse_main_page(html)
    assert missing in str(excinfo.value)


def test_parse_story(story_html: str) -> None:
    parsed = Parser().parse_story(story_html)
    assert parsed.title == (
        "NY Gov. Cuomo Accused of Sexual Harrassment; Less Coverage from Left-Rated Outlets"
    )
    assert int(parsed.published_at.timestamp()) == 1608079500
    assert parsed.published_at.utcoffset() == timedelta(0)
    assert len(parsed.summary) == 2
    assert parsed.summary[0].plain_text() == (
        'A former aide accused New York Gov. Andrew Cuomo (D) of sexually harassing her while '
        'she worked for him between 2015 and 2018. Lindsey Boylan, a current candidate for '
        'Manhattan borough president, said "Yes, @NYGovCuomo sexually harassed me for years. '
        'Many saw it, and watched" in a tweet Sunday morning. The governor\'s office responded '
        'by saying "There is simply no truth to these claims." '
    )
    assert parsed.summary[1].plain_text() == (
        "Right-rated outlets reported the story more prominently than left- and center-rated "
        "outlets. Coverage from the right focused on the fact that many left-rated news sources, "
        "including CNN where Cuomo's brother Chris works as an anchor, had not covered the story, "
        "framing the sources as hypocritical and protective of Democrats. Some coverage from left- "
        "and center-rated outlets concentrated on Boylan's claims; others highlighted the "
        "governor's denial and other doubts about the allegations."
    )


def test_parse_story_articles(story_html: str) -> None:
    articles = Parser().parse_story(story_html).articles
    assert len(articles) == 3

    vox, fox, post = articles
    assert vox.title == "The sexual harassment allegation against Gov. Andrew Cuomo, explained"
    assert vox.url == "https://www.vox.com/22174452/andrew-cuomo-lindsey-boylan-sexual-harassment"
    assert vox.source == "Vox"
    assert vox.side is Side.LEFT
    assert vox.summary[0].plain_text() == (
        "“Yes, @NYGovCuomo sexually harassed me for years. Many saw it, and watched.”"
    )
    assert vox.summary[2].plain_text().endswith("would...")

    assert fox.title == (
        "Mainstream media ignores sexual harassment allegations against Gov. Andrew Cuomo"
    )
    assert fox.source == "Fox News (Online News)"
    assert fox.side is Side.CENTER_RIGHT
    assert fox.summary[2].plain_text() == (
        '"Yes, @NYGovCuomo sexually harassed me for years," Boylan tweeted. "Many saw it, and '
        'watched. I could never anticipate what to expect: would I be grilled on my...'
    )

    assert post.url == (
        "https://nypost.com/2020/12/14/metoo-double-standard-evidence-required-when-accused-is-a-democrat/"
    )
    assert post.source == "New York Post (Opinion)"
    assert post.side is Side.RIGHT
    assert post.summary[0].plain_text() == (
        "Gov. Andrew Cuomo is lucky he’s a Democrat — otherwise Lindsey Boylan’s charge that he "
        "“sexually harassed” her might lead to political challenges and media shame."
    )


def test_paragraph_spans_keep_document_order(story_html: str) -> None:
    paragraph = Parser().parse_story(story_html).summary[0]
    assert len(paragraph.spans) == 3
    assert isinstance(paragraph.spans[0], TextSpan)
    assert paragraph.spans[1] == LinkSpan(
        href="https://twitter.com/LindseyBoylan/status/1338125549756182529", text="in a tweet"
    )
    assert paragraph.spans[2] == TextSpan(
        text=' Sunday morning. The governor\'s office responded by saying "There is simply no '
        'truth to these claims." '
    )


def test_paragraph_rich_text(story_html: str) -> None:
    paragraph = Parser().parse_story(story_html).summary[0]
    assert paragraph.rich_text() == (
        'A former aide accused New York Gov. Andrew Cuomo (D) of sexually harassing her while '
        'she worked for him between 2015 and 2018. Lindsey Boylan, a current candidate for '
        'Manhattan borough president, said "Yes, @NYGovCuomo sexually harassed me for years. '
        'Many saw it, and watched" <a href="https://twitter.com/LindseyBoylan/status/1338125549756182529">'
        'in a tweet</a> Sunday morning. The governor\'s office responded by saying "There is '
        'simply no truth to these claims." '
    )


def _story(body: str = "", date: str = "2020-12-16T00:45:00Z", description: str = "<p>Summary</p>") -> str:
    return f"""
    <div id="content">
      <h1 class="taxonomy-heading">Title</h1>
      <span class="date-display-single" content="{date}"></span>
      <div class="story-id-page-description">{description}</div>
      <div class="feature-thumbs-wrapper">{body}</div>
    </div>
    """


def _article(bias: str = "AllSides Media Bias Rating: Center", news_body: str = '<div class="news-body"></div>') -> str:
    return f"""
    <div class="feature-thumbs">
      <div class="news-title"><a href="/n">Headline</a></div>
      <div class="news-source">Reuters</div>
      <div class="bias-image"><img title="{bias}" src="/b.png"></div>
      {news_body}
      <div class="read-more-story"><a href="https://reuters.com/x">Read</a></div>
    </div>
    """


def test_parse_story_article_without_paragraphs_is_allowed() -> None:
    story = Parser().parse_story(_story(body=_article()))
    assert story.articles[0].summary == ()
    assert story.articles[0].side is Side.CENTER
    assert story.published_at.utcoffset() == timedelta(0)


def test_parse_story_without_articles() -> None:
    assert Parser().parse_story(_story()).articles == ()


def test_parse_story_missing_content_region() -> None:
    with pytest.raises(StructuralParseError, match="#content"):
        Parser().parse_story("<html><body><h1>Nope</h1></body></html>")


def test_parse_story_missing_wrapper() -> None:
    html = _story().replace("feature-thumbs-wrapper", "something-else")
    with pytest.raises(StructuralParseError, match="feature-thumbs-wrapper"):
        Parser().parse_story(html)


def test_parse_story_missing_news_body() -> None:
    with pytest.raises(StructuralParseError, match="news-body"):
        Parser().parse_story(_story(body=_article(news_body="")))


def test_parse_story_bad_timestamp() -> None:
    with pytest.raises(DataFormatError, match="rfc3339"):
        Parser().parse_story(_story(date="16 December 2020"))


def test_parse_story_timestamp_without_offset() -> None:
    with pytest.raises(DataFormatError):
        Parser().parse_story(_story(date="2020-12-16T00:45:00"))


def test_parse_story_empty_summary() -> None:
    with pytest.raises(DataFormatError, match="no paragraphs"):
        Parser().parse_story(_story(description="<div>not a paragraph</div>"))


@pytest.mark.parametrize("bias", ["Center", "AllSides Media Bias Rating: Far Left", "AllSides Media Bias Rating: left"])
def test_parse_story_rejects_bad_bias(bias: str) -> None:
    with pytest.raises(DataFormatError):
        Parser().parse_story(_story(body=_article(bias=bias)))
