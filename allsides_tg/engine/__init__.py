"""Engine components wiring fetch → parse → format → publish → dedup."""

from .dedup import DedupStore
from .fetcher import Fetcher, PageFetcher
from .formatter import Formatter
from .models import Article, LinkSpan, MainPage, Paragraph, Side, Story, Teaser, TextSpan
from .notifier import Notifier, TelegramNotifier
from .parser import Parser

__all__ = [
    "Article",
    "DedupStore",
    "Fetcher",
    "Formatter",
    "LinkSpan",
    "MainPage",
    "Notifier",
    "PageFetcher",
    "Paragraph",
    "Parser",
    "Side",
    "Story",
    "Teaser",
    "TelegramNotifier",
    "TextSpan",
]
