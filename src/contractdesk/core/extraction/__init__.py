"""Text extraction stage"""

from contractdesk.core.extraction.text_extractor import TextExtractor, default_strategies
from contractdesk.core.extraction import strategies

__all__ = ["TextExtractor", "default_strategies", "strategies"]
