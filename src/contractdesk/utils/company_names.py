"""Company name normalization shared by field extraction and CRM lookups."""

import re

LEGAL_SUFFIX_RE = re.compile(
    r"(?:,?\s+(?:Inc|Incorporated|LLC|L\.L\.C|Ltd|Limited|Corp|Corporation|Co|Company|GmbH|"
    r"PLC|LLP|LP|L\.P|S\.A|AG|B\.?V|N\.V|Pty|SE|SAS|S\.p\.A)\.?)+\s*$",
    re.IGNORECASE,
)


def strip_legal_suffix(name: str) -> str:
    """'Acme Holdings, Inc.' -> 'Acme Holdings'. Returns the input when only a suffix remains."""
    stripped = LEGAL_SUFFIX_RE.sub("", name.strip()).strip(" ,")
    return stripped or name.strip()


def fix_casing(name: str) -> str:
    """Title-case all-caps names, keeping short acronyms such as IBM."""
    letters = [c for c in name if c.isalpha()]
    if not letters or not all(c.isupper() for c in letters):
        return name
    return " ".join(w if len(w) <= 3 else w.capitalize() for w in name.split())


def normalize_company_name(name: str) -> str:
    cleaned = " ".join(name.split()).strip(" ,;:.\"'“”")
    return fix_casing(strip_legal_suffix(cleaned))
