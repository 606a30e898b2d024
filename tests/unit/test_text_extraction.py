"""Text extraction cascade and its individual strategies."""

import zlib

import pymupdf
import pytest

from contractdesk.core.config import PipelineConfig
from contractdesk.core.errors import ExtractionFailed
from contractdesk.core.extraction.strategies import (
    content_stream_scan,
    decode_pdf_literal,
    encoding_recovery,
    printable_scrape,
    structured_parser,
)
from contractdesk.core.extraction.text_extractor import TextExtractor
from contractdesk.models.document import SourceDocument

LONG_TEXT = "This Master Services Agreement sets out the services and fees agreed by the parties. " * 3


def counting(value):
    calls = []

    def strategy(data: bytes):
        calls.append(data)
        return value
    return strategy, calls


def make_pdf(lines) -> bytes:
    doc = pymupdf.open()
    page = doc.new_page()
    for i, line in enumerate(lines):
        page.insert_text((72, 72 + 14 * i), line)
    data = doc.tobytes()
    doc.close()
    return data


async def test_first_strategy_success_skips_the_rest():
    first, first_calls = counting(LONG_TEXT)
    second, second_calls = counting(LONG_TEXT)
    third, third_calls = counting(LONG_TEXT)
    fourth, fourth_calls = counting(LONG_TEXT)
    extractor = TextExtractor(
        PipelineConfig(),
        strategies=[("one", first, 100), ("two", second, 100), ("three", third, 100), ("four", fourth, 40)],
    )

    extracted = await extractor.extract(SourceDocument(data=b"%PDF-1.7 data", file_name="a.pdf"))

    assert extracted.method == "one"
    assert len(first_calls) == 1
    assert second_calls == third_calls == fourth_calls == []


async def test_short_output_falls_through_and_recovery_uses_lower_threshold():
    short, _ = counting("x" * 60)
    empty, _ = counting(None)
    recovery, recovery_calls = counting("y" * 60)
    extractor = TextExtractor(
        PipelineConfig(),
        strategies=[("one", short, 100), ("two", empty, 100), ("three", short, 100), ("four", recovery, 40)],
    )

    extracted = await extractor.extract(SourceDocument(data=b"bytes", file_name="a.pdf"))

    assert extracted.method == "four"
    assert extracted.char_count == 60
    assert len(recovery_calls) == 1


async def test_exhaustion_raises_extraction_failed():
    empty, _ = counting(None)
    extractor = TextExtractor(PipelineConfig(), strategies=[("one", empty, 100), ("two", empty, 40)])

    with pytest.raises(ExtractionFailed) as excinfo:
        await extractor.extract(SourceDocument(data=b"\x00\x01", file_name="scan.pdf"))

    assert [a.name for a in excinfo.value.attempts] == ["one", "two"]


async def test_default_cascade_reads_a_real_pdf():
    data = make_pdf([
        "Order Form",
        "This Order Form is governed by the Master Services Agreement between the parties.",
        "Effective Date: January 1, 2025. The term is twelve (12) months.",
    ])

    extracted = await TextExtractor(PipelineConfig()).extract(SourceDocument(data=data, file_name="order.pdf"))

    assert extracted.method == "structured_parser"
    assert "Master Services Agreement" in extracted.text


def test_structured_parser_ignores_non_pdf_bytes():
    assert structured_parser(b"plain text, not a pdf") is None


def test_decode_pdf_literal_handles_escapes():
    assert decode_pdf_literal(rb"(Acme \(US\) Inc\056)") == "Acme (US) Inc."
    assert decode_pdf_literal(rb"(line\nbreak)") == "line\nbreak"
    assert decode_pdf_literal(rb"(not octal \9)") == "not octal 9"


def test_content_stream_scan_reads_text_operators():
    content = (
        b"BT /F1 12 Tf 72 720 Td (Master Services Agreement) Tj "
        b"0 -14 Td [(Customer)-250(Acme)] TJ T* (Year 1: $100,000) Tj ET"
    )
    data = (
        b"%PDF-1.4\n1 0 obj << /Length 99 /Filter /FlateDecode >>\nstream\n"
        + zlib.compress(content)
        + b"\nendstream\nendobj\n%%EOF"
    )

    text = content_stream_scan(data)

    assert text.splitlines() == ["Master Services Agreement", "Customer Acme", "Year 1: $100,000"]


def test_printable_scrape_drops_pdf_structure():
    data = (
        b"%PDF-1.4\n1 0 obj\n<< /Type /Catalog /Pages 2 0 R >>\nendobj\n"
        b"\x00\x01(Customer Advisory Board Memorandum) Tj\x00\x02"
        b"xref\n0 3\ntrailer\n%%EOF"
    )

    text = printable_scrape(data)

    assert text == "Customer Advisory Board Memorandum"


def test_encoding_recovery_prefers_the_encoding_with_most_anchor_hits():
    sentence = "This Agreement between the parties sets the payment date and the term of the services."
    data = b"\xff\xfe" + sentence.encode("utf-16-le")

    text = encoding_recovery(data)

    assert text is not None
    assert "Agreement between the parties" in text
