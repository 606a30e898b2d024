"""Display name and notes."""

import re
from pathlib import Path
from typing import Optional

from contractdesk.domain.value_objects import ContractType
from contractdesk.models.classification import ContractClassification
from contractdesk.models.fields import FieldValue
from contractdesk.utils.fallback import Strategy, first_success

TITLE_LINE_RE = re.compile(
    r"^(?P<title>[A-Z0-9][^\n]{2,118}?\b(?:Order|Order\s+Form|Agreement|Memorandum|Contract|Statement\s+of\s+Work|"
    r"Addendum|Amendment|Letter\s+of\s+Intent))\s*$",
    re.IGNORECASE | re.MULTILINE,
)
TITLE_SCAN_LINES = 10

CAB_NOTE = "Customer Advisory Board Agreement"
LOI_NOTE = "LOI - Committed spend"


def _title_line(text: str, file_name: str) -> Optional[FieldValue[str]]:
    lines = [line.strip() for line in text.splitlines() if line.strip()]
    head = "\n".join(lines[:TITLE_SCAN_LINES])
    match = TITLE_LINE_RE.search(head)
    return FieldValue(" ".join(match.group("title").split()), 0.8, "title_line") if match else None


def _filename_stem(text: str, file_name: str) -> Optional[FieldValue[str]]:
    stem = " ".join(re.sub(r"[_]+", " ", Path(file_name).stem).split())
    return FieldValue(stem, 0.5, "filename") if stem else None


def extract_display_name(text: str, file_name: str) -> Optional[FieldValue[str]]:
    strategies = [Strategy("title_line", _title_line), Strategy("filename", _filename_stem)]
    result = first_success(strategies, text, file_name, label="display_name")
    return result.unwrap().value if result.is_ok() else None


def loi_notes(classification: ContractClassification, text: str) -> Optional[FieldValue[str]]:
    if classification.type != ContractType.LOI:
        return None
    if "cab_markers" in classification.applied_overrides or "customer advisory board" in text.lower():
        return FieldValue(CAB_NOTE, 0.8, "cab_markers")
    return FieldValue(LOI_NOTE, 0.7, "loi_type")
