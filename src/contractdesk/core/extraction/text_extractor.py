"""
Text extraction cascade.

The first candidate longer than its strategy's threshold wins; later
strategies are never invoked once an earlier one succeeds. The last-resort
encoding recovery accepts shorter text than the others.
"""

import asyncio
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from loguru import logger

from contractdesk.core.config import PipelineConfig
from contractdesk.core.errors import ExtractionFailed
from contractdesk.core.extraction.strategies import (
    content_stream_scan,
    encoding_recovery,
    printable_scrape,
    structured_parser,
)
from contractdesk.models.document import ExtractedText, SourceDocument
from contractdesk.utils.fallback import AsyncStrategy, first_success_async

TextStrategy = Callable[[bytes], Optional[str]]


@dataclass(frozen=True)
class _Candidate:
    text: str
    min_chars: int


def default_strategies(config: PipelineConfig) -> List[Tuple[str, TextStrategy, int]]:
    """(name, function, minimum length) in cascade order."""
    return [
        ("structured_parser", structured_parser, config.min_text_chars),
        ("content_stream_scan", content_stream_scan, config.min_text_chars),
        ("printable_scrape", printable_scrape, config.min_text_chars),
        ("encoding_recovery", encoding_recovery, config.recovery_min_chars),
    ]


def _reject_short(candidate: _Candidate) -> Optional[str]:
    length = len(candidate.text.strip())
    if length > candidate.min_chars:
        return None
    return f"only {length} characters (needs more than {candidate.min_chars})"


class TextExtractor:
    """Converts raw document bytes to plain text."""

    def __init__(
        self,
        config: PipelineConfig,
        parser_timeout: float = 20.0,
        strategies: Optional[Sequence[Tuple[str, TextStrategy, int]]] = None,
    ):
        self.config = config
        self.parser_timeout = parser_timeout
        self.strategies = [
            AsyncStrategy(name, self._threaded(func, min_chars))
            for name, func, min_chars in (strategies or default_strategies(config))
        ]

    @staticmethod
    def _threaded(func: TextStrategy, min_chars: int):
        async def run(data: bytes) -> Optional[_Candidate]:
            text = await asyncio.to_thread(func, data)
            return _Candidate(text, min_chars) if text is not None else None
        return run

    async def extract(self, document: SourceDocument) -> ExtractedText:
        """
        Run the cascade over ``document``.

        Raises:
            ExtractionFailed: If no strategy produced enough text
        """
        logger.info(f"Extracting text from {document.file_name} ({document.size} bytes)")

        result = await first_success_async(
            self.strategies,
            document.data,
            accept=_reject_short,
            timeout=self.parser_timeout,
            label="extraction",
        )
        if result.is_err():
            logger.error(f"No text could be extracted from {document.file_name}; likely image-only or encrypted")
            raise ExtractionFailed(document.file_name, result.unwrap_err())

        success = result.unwrap()
        extracted = ExtractedText(text=success.value.text, method=success.name)
        logger.info(f"Extracted {extracted.char_count} characters via {success.name}")
        return extracted
