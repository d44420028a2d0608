"""Newsletter Curator - deduplicate, score and select daily news articles."""

__version__ = "0.1.0"
