"""
Signature block extraction.

Labelled names are partitioned against the internal signer allowlist: the
first name not on it is the counterparty signer, the first one on it is the
internal signer (reported under its canonical name).
"""

import re
from dataclasses import dataclass
from typing import Dict, List, Optional

from contractdesk.core.config import PipelineConfig
from contractdesk.models.fields import FieldValue

SIGNER_LABEL_RE = re.compile(r"(?im)^[ \t]*(?:Signed\s+By|Signed|Name|By)[ \t]*:[ \t]*(?P<name>[^\n]*?)[ \t]*$")
TITLE_LABEL_RE = re.compile(r"(?im)^[ \t]*Title[ \t]*:[ \t]*(?P<title>[^\n]+?)[ \t]*$")
PERSON_RE = re.compile(r"^[A-Z][A-Za-z.'\-]+(?:\s+[A-Z][A-Za-z.'\-]*){1,3}$")
SIGNATURE_NOISE_RE = re.compile(r"(?:/s/|_{2,}|\bDocuSigned\s+by\b)", re.IGNORECASE)


@dataclass(frozen=True)
class SignerMention:
    name: str
    position: int


def _clean(raw: str) -> Optional[str]:
    name = " ".join(SIGNATURE_NOISE_RE.sub(" ", raw).split()).strip(" ,.")
    return name if PERSON_RE.match(name) else None


def signer_mentions(text: str) -> List[SignerMention]:
    mentions = []
    for match in SIGNER_LABEL_RE.finditer(text):
        name = _clean(match.group("name"))
        if name:
            mentions.append(SignerMention(name, match.start()))
    return mentions


def _title_after(text: str, position: int) -> Optional[str]:
    match = TITLE_LABEL_RE.search(text, position)
    if not match:
        return None
    title = " ".join(SIGNATURE_NOISE_RE.sub(" ", match.group("title")).split())
    return title or None


def _allowlisted_in_text(text: str, config: PipelineConfig) -> Optional[str]:
    for signer in config.internal_signers:
        for candidate in (signer.name, *signer.aliases):
            if re.search(rf"\b{re.escape(candidate)}\b", text, re.IGNORECASE):
                return signer.name
    return None


def extract_signatures(text: str, config: PipelineConfig) -> Dict[str, FieldValue[str]]:
    """
    Returns populated entries among ``counterparty_signer_name``,
    ``counterparty_signer_title`` and ``internal_signer_name``.
    """
    values: Dict[str, FieldValue[str]] = {}
    counterparty: Optional[SignerMention] = None

    for mention in signer_mentions(text):
        internal = config.internal_signer_for(mention.name)
        if internal and "internal_signer_name" not in values:
            values["internal_signer_name"] = FieldValue(internal.name, 0.9, "signature_label")
        elif internal is None and counterparty is None:
            counterparty = mention

    if counterparty:
        values["counterparty_signer_name"] = FieldValue(counterparty.name, 0.8, "signature_label")
        title = _title_after(text, counterparty.position)
        if title:
            values["counterparty_signer_title"] = FieldValue(title, 0.7, "title_label")

    if "internal_signer_name" not in values:
        fallback = _allowlisted_in_text(text, config)
        if fallback:
            values["internal_signer_name"] = FieldValue(fallback, 0.6, "allowlist_scan")

    return values
