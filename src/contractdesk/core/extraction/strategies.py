"""
Text extraction strategies, most structured first.

Each strategy is a plain function ``bytes -> str | None``. They are ordered
and wrapped by :class:`contractdesk.core.extraction.text_extractor.TextExtractor`.
"""

import re
import zlib
from typing import Iterable, List, Optional

import pymupdf
from loguru import logger

# --- 1. structured parser ----------------------------------------------------


def structured_parser(data: bytes) -> Optional[str]:
    """Full PDF parse with PyMuPDF."""
    if not data[:1024].lstrip().startswith(b"%PDF"):
        return None

    doc = pymupdf.open(stream=data, filetype="pdf")
    try:
        if doc.needs_pass:
            logger.warning("PDF is password protected")
            return None
        pages = [page.get_text() for page in doc]
    finally:
        doc.close()
    return "\n".join(pages)


# --- 2. content stream operator scan -------------------------------------------

STREAM_RE = re.compile(rb"stream\r?\n(.*?)\r?\n?endstream", re.S)
TEXT_BLOCK_RE = re.compile(rb"\bBT\b(.*?)\bET\b", re.S)
LITERAL_RE = rb"\((?:\\.|[^\\)])*\)"
SHOW_TOKEN_RE = re.compile(
    rb"(?P<show>" + LITERAL_RE + rb")\s*(?:Tj|'|\")"
    rb"|(?P<array>\[(?:" + LITERAL_RE + rb"|[^\]])*\])\s*TJ"
    rb"|(?P<move>T\*|-?[\d.]+\s+-?[\d.]+\s+T[dD]|(?:-?[\d.]+\s+){6}Tm)",
    re.S,
)
ARRAY_ITEM_RE = re.compile(rb"(?P<literal>" + LITERAL_RE + rb")|(?P<number>-?\d+(?:\.\d+)?)", re.S)
ESCAPES = {b"n": "\n", b"r": "\r", b"t": "\t", b"b": "", b"f": "", b"(": "(", b")": ")", b"\\": "\\"}
KERNING_SPACE = -200


def _inflate(raw: bytes) -> bytes:
    try:
        return zlib.decompress(raw)
    except zlib.error:
        pass
    try:
        return zlib.decompressobj().decompress(raw)
    except zlib.error:
        return raw


def decode_pdf_literal(literal: bytes) -> str:
    """Decode a ``(...)`` PDF string literal, escapes included."""
    body = literal[1:-1]
    out: List[str] = []
    i = 0
    while i < len(body):
        ch = body[i:i + 1]
        if ch != b"\\":
            out.append(ch.decode("latin-1"))
            i += 1
            continue
        nxt = body[i + 1:i + 2]
        if nxt in ESCAPES:
            out.append(ESCAPES[nxt])
            i += 2
        elif nxt and nxt in b"01234567":
            digits = re.match(rb"[0-7]{1,3}", body[i + 1:i + 4]).group(0)
            out.append(chr(int(digits, 8) & 0xFF))
            i += 1 + len(digits)
        elif nxt in (b"\n", b"\r"):
            i += 2
        else:
            out.append(nxt.decode("latin-1"))
            i += 2
    return "".join(out)


def _text_from_block(block: bytes) -> str:
    parts: List[str] = []
    for match in SHOW_TOKEN_RE.finditer(block):
        if match.group("show"):
            parts.append(decode_pdf_literal(match.group("show")))
        elif match.group("array"):
            for item in ARRAY_ITEM_RE.finditer(match.group("array")[1:-1]):
                if item.group("literal"):
                    parts.append(decode_pdf_literal(item.group("literal")))
                elif float(item.group("number")) < KERNING_SPACE:
                    parts.append(" ")
        else:
            parts.append("\n")
    return "".join(parts)


def _content_streams(data: bytes) -> Iterable[bytes]:
    for match in STREAM_RE.finditer(data):
        yield _inflate(match.group(1))


def content_stream_scan(data: bytes) -> Optional[str]:
    """Collect text-showing operator operands from every content stream."""
    lines: List[str] = []
    for stream in _content_streams(data):
        for block in TEXT_BLOCK_RE.finditer(stream):
            text = _text_from_block(block.group(1))
            lines.extend(line.strip() for line in text.splitlines())
    text = "\n".join(line for line in lines if line)
    return text or None


# --- 3. printable-run scrape ---------------------------------------------------

PRINTABLE_RUN_RE = re.compile(rb"[\x20-\x7E]{4,}")
STRUCTURAL_RE = re.compile(
    r"^\s*(?:\d+\s+\d+\s+(?:obj|R)\b|endobj|stream|endstream|xref|trailer|startxref|%%EOF|%PDF-)"
)
OPERATOR_TAIL_RE = re.compile(r"\s*(?:Tj|TJ|Tf|Td|TD|Tm|T\*|BT|ET|re|cm|gs|Do|BDC|EMC)\s*$")
WORD_RE = re.compile(r"[A-Za-z]{3,}")


def _is_structural(run: str) -> bool:
    if STRUCTURAL_RE.match(run):
        return True
    if "<<" in run or ">>" in run or run.count("/") >= 2:
        return True
    letters = sum(c.isalpha() or c.isspace() for c in run)
    return letters / len(run) < 0.6 or not WORD_RE.search(run)


def printable_scrape(data: bytes) -> Optional[str]:
    """Keep runs of printable characters that read like prose."""
    kept: List[str] = []
    for match in PRINTABLE_RUN_RE.finditer(data):
        run = match.group(0).decode("ascii")
        run = OPERATOR_TAIL_RE.sub("", run).strip().strip("()[]")
        if len(run) < 4 or _is_structural(run):
            continue
        kept.append(run)
    return "\n".join(kept) or None


# --- 4. multi-encoding recovery ------------------------------------------------

RECOVERY_ENCODINGS = ("utf-8", "utf-16-le", "utf-16-be", "cp1252", "latin-1")
FRAGMENT_RE = re.compile(r"[A-Za-z0-9$(\"'][A-Za-z0-9 ,.;:'\"()$%&/\-–’]{19,}")
SENTENCE_SHAPE_RE = re.compile(r"^[A-Z][a-z]+(?:\s+[A-Za-z][a-z]*){3,}")
ANCHOR_KEYWORDS = (
    "agreement", "customer", "effective", "term", "services", "fees", "party",
    "parties", "signature", "date", "contract", "order", "memorandum",
    "payment", "whereas", "advisory", "year",
)


def _recover(decoded: str) -> tuple[int, str]:
    fragments: List[str] = []
    hits = 0
    for fragment in FRAGMENT_RE.findall(decoded):
        lowered = fragment.lower()
        anchors = sum(1 for keyword in ANCHOR_KEYWORDS if keyword in lowered)
        if anchors or SENTENCE_SHAPE_RE.match(fragment):
            fragments.append(fragment.strip())
            hits += anchors
    return hits, "\n".join(fragments)


def encoding_recovery(data: bytes) -> Optional[str]:
    """Decode with several encodings and keep the most contract-like result."""
    best_hits, best_text = 0, ""
    for encoding in RECOVERY_ENCODINGS:
        decoded = data.decode(encoding, errors="ignore")
        hits, text = _recover(decoded)
        if hits > best_hits:
            best_hits, best_text = hits, text
    return best_text or None
