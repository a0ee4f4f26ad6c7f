"""Cleaners for text read from a single field crop.

A field crop is small and noisy: label words bleed in from the card, digits
and letters get swapped.  These helpers turn that text into a field value
(or ``""``).
"""

from __future__ import annotations

import re

from idscan.date_normalizer import normalize_date
from idscan.heuristics import clean_name_candidate, collapse_ws


_ROI_LABEL_RE = re.compile(
    r"(Apelyido|Last\s*Name|Mga\s*Pangalan|Given\s*Names?|Gitnang\s*Apelyido"
    r"|Middle\s*Name|Surname|Petsa\s*ng\s*Kapanganakan|Date\s*of\s*Birth)",
    re.IGNORECASE,
)
_ROI_DATE_RE = re.compile(
    r"(January|February|March|April|May|June|July|August|September|October"
    r"|November|December)\s+\d{1,2},?\s+\d{4}",
    re.IGNORECASE,
)

# Common OCR confusions in Filipino surnames.
_NAME_FIXES = (
    (re.compile(r"DE1A", re.IGNORECASE), "DELA"),
    (re.compile(r"DE L4", re.IGNORECASE), "DE LA"),
    (re.compile(r"CR[U0]Z", re.IGNORECASE), "CRUZ"),
    (re.compile(r"5ANT[O0]S", re.IGNORECASE), "SANTOS"),
    (re.compile(r"8A[U0]TISTA", re.IGNORECASE), "BAUTISTA"),
    (re.compile(r"R[E3]Y[E3]S", re.IGNORECASE), "REYES"),
    (re.compile(r"GARC1A", re.IGNORECASE), "GARCIA"),
)

_DIGIT_TO_LETTER = str.maketrans({"0": "O", "1": "I", "5": "S", "8": "B"})


def correct_name_ocr(name: str) -> str:
    """Undo digit-for-letter swaps in a name (``"JUAN DE1A CRU2"``)."""
    if not name:
        return ""
    result = name
    for rx, fixed in _NAME_FIXES:
        result = rx.sub(fixed, result)
    return result.translate(_DIGIT_TO_LETTER)


def clean_roi_name(text: str) -> str:
    """Name value from a name crop, or ``""`` if nothing name-like is left."""
    if not text:
        return ""
    cleaned = collapse_ws(text)
    cleaned = _ROI_LABEL_RE.sub(" ", cleaned)
    cleaned = _ROI_DATE_RE.sub(" ", cleaned)
    cleaned = re.sub(r"[/|]", " ", cleaned)
    cleaned = correct_name_ocr(collapse_ws(cleaned))
    return clean_name_candidate(cleaned)


def clean_roi_name_part(text: str) -> str:
    """Single-part variant for split name crops; one word is fine here."""
    if not text:
        return ""
    cleaned = _ROI_LABEL_RE.sub(" ", collapse_ws(text))
    cleaned = _ROI_DATE_RE.sub(" ", cleaned)
    cleaned = re.sub(r"[^A-Za-z\s.'\-]", " ", correct_name_ocr(cleaned))
    return collapse_ws(cleaned)


def extract_national_id_number(text: str) -> str:
    """``XXXX-XXXX-XXXX-XXXX`` from a crop, tolerating O/0 and I/l/1 swaps."""
    if not text:
        return ""
    cleaned = re.sub(r"[Il]", "1", text.replace("O", "0"))
    cleaned = collapse_ws(cleaned.replace("–", "-"))
    m = re.search(r"\b\d{4}\s*-\s*\d{4}\s*-\s*\d{4}\s*-\s*\d{4}\b", cleaned)
    if not m:
        # Dashes lost entirely: a lone 16-digit run.
        m = re.search(r"(?<!\d)\d{4}\s?\d{4}\s?\d{4}\s?\d{4}(?!\d)", cleaned)
    if not m:
        return ""
    digits = re.sub(r"\D", "", m.group(0))
    if len(digits) != 16:
        return ""
    return "-".join(digits[i:i + 4] for i in range(0, 16, 4))


def _numeric_crop(text: str) -> str:
    cleaned = re.sub(r"[Oo]", "0", text)
    cleaned = re.sub(r"[Il]", "1", cleaned)
    cleaned = re.sub(r"[Ss]", "5", cleaned)
    cleaned = re.sub(r"[B]", "8", cleaned)
    return re.sub(r"\s+", "", cleaned)


def extract_philhealth_id_number(text: str) -> str:
    """``##-#########-#`` from a crop, or ``""``."""
    if not text:
        return ""
    cleaned = _numeric_crop(text)
    m = re.search(r"(\d{2})-?(\d{9})-?(\d)(?!\d)", cleaned)
    if m:
        return f"{m.group(1)}-{m.group(2)}-{m.group(3)}"
    return ""


def extract_sss_id_number(text: str) -> str:
    """``##-#######-#`` from a crop, or ``""``."""
    if not text:
        return ""
    cleaned = _numeric_crop(text)
    m = re.search(r"(\d{2})-?(\d{7})-?(\d)(?!\d)", cleaned)
    if m:
        return f"{m.group(1)}-{m.group(2)}-{m.group(3)}"
    return ""


def extract_dob_from_text(text: str) -> str:
    return normalize_date(text) if text else ""
