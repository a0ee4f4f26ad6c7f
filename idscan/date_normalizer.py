"""Date normalization for OCR'd date-of-birth strings.

Three families are tried in order and the first one that yields a real
calendar date wins:

  1. month name   "January 3, 1999", "JAN. 03 1999"
  2. ISO numeric  "1987/10/04", "1987-10-4"
  3. local numeric "03/01/1999", "3-1-99" (month first, day-first fallback)

Anything else normalizes to ``""``.
"""

from __future__ import annotations

import re
from datetime import date
from typing import Optional


MONTH_NAMES = [
    "january", "february", "march", "april", "may", "june",
    "july", "august", "september", "october", "november", "december",
]

_MONTH_ALT = "|".join(
    f"{m[:3]}(?:{m[3:]})?" if len(m) > 3 else m for m in MONTH_NAMES
).replace("sep(?:tember)?", "sept?(?:ember)?")

MONTH_NAME_RE = re.compile(
    rf"\b({_MONTH_ALT})\.?\s+(\d{{1,3}})\s+(\d{{4}})\b", re.IGNORECASE)
ISO_NUMERIC_RE = re.compile(r"(\d{4})[/\-](\d{1,2})[/\-](\d{1,2})")
# Anchored so it never matches inside a longer numeric date ("2005/14/03").
LOCAL_NUMERIC_RE = re.compile(
    r"(?<![\d/\-])(\d{1,2})[/\-](\d{1,2})[/\-](\d{2,4})(?![\d/\-])")


def month_number(name: str) -> Optional[int]:
    """Map a month name or 3+ letter abbreviation to 1..12."""
    key = name.strip().rstrip(".").lower()
    if len(key) < 3:
        return None
    for idx, full in enumerate(MONTH_NAMES):
        if full.startswith(key) or key.startswith(full[:3]):
            return idx + 1
    return None


def to_iso(year: int, month: int, day: int) -> str:
    """Return ``YYYY-MM-DD`` for a real calendar date, else ``""``."""
    try:
        return date(year, month, day).isoformat()
    except ValueError:
        return ""


def _day_from_raw(raw: str) -> Optional[int]:
    day = int(raw)
    if 1 <= day <= 31:
        return day
    # OCR often glues a stray digit onto the day ("311" for "31").
    if len(raw) >= 2:
        candidate = int(raw[:2])
        if 1 <= candidate <= 31:
            return candidate
    return None


def _from_month_name(cleaned: str) -> str:
    for m in MONTH_NAME_RE.finditer(cleaned):
        month = month_number(m.group(1))
        day = _day_from_raw(m.group(2))
        if month is None or day is None:
            continue
        iso = to_iso(int(m.group(3)), month, day)
        if iso:
            return iso
    return ""


def _from_iso_numeric(cleaned: str) -> str:
    m = ISO_NUMERIC_RE.search(cleaned)
    if not m:
        return ""
    return to_iso(int(m.group(1)), int(m.group(2)), int(m.group(3)))


def _from_local_numeric(cleaned: str) -> str:
    m = LOCAL_NUMERIC_RE.search(cleaned)
    if not m:
        return ""
    first, second, year_raw = m.group(1), m.group(2), m.group(3)
    if len(year_raw) == 2:
        year_raw = f"20{year_raw}"
    elif len(year_raw) == 3:
        return ""
    year = int(year_raw)
    return to_iso(year, int(first), int(second)) or to_iso(year, int(second), int(first))


def normalize_date(text: str) -> str:
    """Normalize a free-form date string to ISO ``YYYY-MM-DD`` or ``""``."""
    if not text:
        return ""
    cleaned = text.strip().replace(",", " ")
    cleaned = " ".join(cleaned.split())
    for family in (_from_month_name, _from_iso_numeric, _from_local_numeric):
        iso = family(cleaned)
        if iso:
            return iso
    return ""
