"""summarizer - turn a URL or a block of text into a short summary via OpenRouter."""

__version__ = "0.3.0"
