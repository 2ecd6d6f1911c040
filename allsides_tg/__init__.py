"""allsides-tg: publish AllSides balanced-news story clusters to Telegram."""

__version__ = "0.1.0"
