"""Name / date / ID-token heuristics shared by parsers, merge and validation.

All functions are pure predicates or pickers over OCR text; none of them
raise on odd input.
"""

from __future__ import annotations

import re
from datetime import date
from typing import Iterable, List, Optional

from idscan.date_normalizer import normalize_date


# ------------------------------------------------------------- patterns ---

NATIONAL_ID_HEADER_RE = re.compile(
    r"(REPUBLIKA\s+NG\s+PILIPINAS|PAMBANSANG\s+PAGKAKAKILANLAN"
    r"|Philippine\s+Identification\s+Card)",
    re.IGNORECASE,
)

# Institutional words that never belong to a person's name.
NAME_DENYLIST_RE = re.compile(
    r"(non-?professional|professional|drivers?|license|lto|republic|philippines"
    r"|department|transportation|office|signature)",
    re.IGNORECASE,
)

NAME_GARBAGE_RE = re.compile(
    r"\b(?:REPUBLIKA|REPUBLIC|PILIPINAS|PHILIPPINES|PAMBANS\w*|PAGKAKA\w*|PHILSYS"
    r"|NATIONAL\s*ID|IDENTIFICATION|LAND\s*TRANSPORTATION|LTO|SOCIAL\s*SECURITY"
    r"|SYSTEM|SSS|PHILHEALTH|PASSPORT|DFA|PROFESSIONAL\s*REGULATION|PRC"
    r"|DRIVER'?S?\s*LICEN[CS]E|LICENSE\s*(?:NO|NUMBER)|LICENSE\s*REGISTRATION"
    r"|DEPARTMENT|COMMISSION|GOVERNMENT|PAMBANSANG|PAGKAKAKILANLAN)\b",
    re.IGNORECASE,
)

_FIELD_LABEL_RE = re.compile(
    r"name\b|surname\b|given\b|middle\b|birth\b|date\b|sex\b|gender\b",
    re.IGNORECASE,
)

ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

_DOB_ISO_RE = re.compile(r"\b\d{4}[/\-]\d{1,2}[/\-]\d{1,2}\b")
_DOB_NUMERIC_RE = re.compile(r"\b\d{1,2}[/\-]\d{1,2}[/\-]\d{2,4}\b")
_DOB_TEXT_RE = re.compile(
    r"\b(January|February|March|April|May|June|July|August|September|October"
    r"|November|December|Jan|Feb|Mar|Apr|Jun|Jul|Aug|Sept?|Oct|Nov|Dec)\.?"
    r"\s+\d{1,3},?\s+\d{4}\b",
    re.IGNORECASE,
)

MAX_NAME_TOKENS = 6
MIN_ALPHA_DENSITY = 0.6
MIN_AGE_YEARS = 10
MAX_AGE_YEARS = 110


# -------------------------------------------------------------- helpers ---

def collapse_ws(text: str) -> str:
    """Collapse runs of whitespace to one space and strip."""
    return " ".join((text or "").split())


def _alpha_density(text: str) -> float:
    letters = len(re.sub(r"[^A-Za-z\s]", "", text))
    return letters / max(len(text), 1)


def _short_token_ratio(tokens: List[str]) -> float:
    short = sum(1 for t in tokens if len(re.sub(r"[^A-Za-z]", "", t)) <= 2)
    return short / max(len(tokens), 1)


# ------------------------------------------------------ coarse predicates ---

def looks_like_name(text: str) -> bool:
    """Coarse "this could be a person's name" check."""
    trimmed = collapse_ws(text)
    if len(trimmed) < 5 or " " not in trimmed:
        return False
    tokens = trimmed.split(" ")
    if len(tokens) > MAX_NAME_TOKENS:
        return False
    if any(ch.isdigit() for ch in trimmed):
        return False
    return _short_token_ratio(tokens) < 0.5


def looks_like_dob(text: str) -> bool:
    return bool(ISO_DATE_RE.match((text or "").strip()))


def looks_like_id_token(text: str) -> bool:
    return sum(1 for ch in (text or "") if ch.isdigit()) >= 6


# ----------------------------------------------------- strict predicates ---

def is_reasonable_full_name(name: str) -> bool:
    """Name-likeness plus alphabetic density and the institutional denylist."""
    trimmed = (name or "").strip()
    if not trimmed:
        return False
    if NATIONAL_ID_HEADER_RE.search(trimmed):
        return False
    if len(trimmed) < 5 or not re.search(r"\s", trimmed):
        return False
    if _alpha_density(trimmed) < MIN_ALPHA_DENSITY:
        return False
    if NAME_DENYLIST_RE.search(trimmed):
        return False
    return looks_like_name(trimmed)


def is_reasonable_merge_name(name: str) -> bool:
    """Merge-time name check, applied to the whitespace-collapsed value."""
    collapsed = collapse_ws(name)
    if not collapsed:
        return False
    tokens = collapsed.split(" ")
    if len(tokens) > MAX_NAME_TOKENS or re.search(r"\d", collapsed):
        return False
    if _short_token_ratio(tokens) > 0.5:
        return False
    return is_reasonable_full_name(collapsed)


def is_reasonable_dob(iso: str, today: Optional[date] = None) -> bool:
    """True for a real ``YYYY-MM-DD`` date implying an age of 10..110 years."""
    if not iso or not ISO_DATE_RE.match(iso.strip()):
        return False
    y, m, d = (int(p) for p in iso.strip().split("-"))
    try:
        born = date(y, m, d)
    except ValueError:
        return False
    today = today or date.today()
    age_years = (today - born).days / 365.25
    return MIN_AGE_YEARS <= age_years <= MAX_AGE_YEARS


# ---------------------------------------------------------- name cleaning ---

def clean_name_candidate(name: str) -> str:
    """Strip institutional header words; ``""`` if fewer than two words remain."""
    if not name:
        return ""
    cleaned = collapse_ws(NAME_GARBAGE_RE.sub(" ", name))
    if len(cleaned.split()) < 2:
        return ""
    return cleaned


# --------------------------------------------------------------- pickers ---

def is_likely_name_line(line: str) -> bool:
    trimmed = (line or "").strip()
    if len(trimmed) < 5:
        return False
    if NAME_GARBAGE_RE.search(trimmed):
        return False
    if len(trimmed.split()) < 2:
        return False
    if _alpha_density(trimmed) < MIN_ALPHA_DENSITY:
        return False
    if _FIELD_LABEL_RE.search(trimmed):
        return False
    return is_reasonable_full_name(trimmed)


def pick_best_name_line(lines: Iterable[str]) -> str:
    """Longest line that passes :func:`is_likely_name_line`."""
    candidates = [ln.strip() for ln in lines if is_likely_name_line(ln)]
    if not candidates:
        return ""
    return max(candidates, key=len)


def pick_best_dob(text: str) -> str:
    """First normalizable date in *text*: ISO, then numeric, then month name."""
    joined = collapse_ws(text)
    for rx in (_DOB_ISO_RE, _DOB_NUMERIC_RE, _DOB_TEXT_RE):
        m = rx.search(joined)
        if m:
            norm = normalize_date(m.group(0))
            if norm:
                return norm
    return ""


def pick_best_id_token(text: str) -> str:
    """Longest whitespace token that looks like an ID number."""
    candidates = []
    for tok in (text or "").split():
        if len(tok) < 6 or not re.search(r"\d", tok):
            continue
        kept = re.sub(r"[^A-Za-z0-9\-]", "", tok)
        if len(kept) / len(tok) < 0.7:
            continue
        candidates.append(tok)
    if not candidates:
        return ""
    best = max(candidates, key=len)
    return re.sub(r"[.,]+$", "", best)


def extract_surname_token(line: str) -> Optional[str]:
    """Return the trailing all-caps word of a short (<=2 word) line."""
    parts = (line or "").split()
    if not parts or len(parts) > 2:
        return None
    last = parts[-1]
    if not re.match(r"^[A-Z]{3,20}$", last):
        return None
    return last
