"""Per-document-type text parsers.

Each ``parse_*`` function takes the raw OCR text of a whole card and returns
an :class:`~idscan.types.ExtractedInfo`.  Parsers are pure: same text in,
same value out.  Every parser funnels its raw guesses through
:func:`post_process`, which re-validates each field for the document type
and blanks (and down-weights) anything that does not hold up.

Also here: document-type detection from header/number patterns and the
address extractor used by the driver's license parser.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field, replace
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from rapidfuzz import fuzz

from idscan.date_normalizer import month_number, normalize_date, to_iso
from idscan.heuristics import (
    NATIONAL_ID_HEADER_RE,
    clean_name_candidate,
    collapse_ws,
    extract_surname_token,
    is_reasonable_dob,
    is_reasonable_full_name,
    pick_best_dob,
    pick_best_id_token,
    pick_best_name_line,
)
from idscan.types import UNKNOWN_ID_TYPE, ExtractedInfo, FieldConfidence

logger = logging.getLogger("idscan.parsers")


NATIONAL_ID = "National ID"
PHILHEALTH_ID = "PhilHealth ID"
UMID = "UMID"
DRIVERS_LICENSE = "Driver's License"
SSS_ID = "SSS ID"
QC_CITIZEN_ID = "Quezon City Citizen ID"
PWD_ID = "PWD ID"

LABEL_FUZZY_THRESHOLD = 85.0


# ------------------------------------------------------------ validators ---

def is_valid_national_id_number(id_number: str) -> bool:
    return bool(re.match(r"^\d{4}-\d{4}-\d{4}-\d{4}$", (id_number or "").strip()))


def is_valid_philhealth_number(id_number: str) -> bool:
    return bool(re.match(r"^\d{2}-\d{9}-\d$", (id_number or "").strip()))


def is_valid_umid_crn(id_number: str) -> bool:
    return bool(re.match(r"^CRN-\d{4}-\d{7}-\d$", (id_number or "").strip(), re.IGNORECASE))


def is_valid_drivers_license_number(id_number: str) -> bool:
    trimmed = (id_number or "").strip()
    if not trimmed:
        return False
    return bool(re.search(r"\b[A-Z]\d{2}-\d{2}-\d{6}\b", trimmed, re.IGNORECASE))


def is_valid_sss_number(id_number: str) -> bool:
    return bool(re.match(r"^\d{2}-\d{7}-\d$", (id_number or "").strip()))


def is_valid_qc_citizen_number(id_number: str) -> bool:
    return bool(re.match(r"^\d{3}-\d{8}$", (id_number or "").strip()))


# Driver's license numbers printed without the leading letter.
_DL_LEGACY_RE = re.compile(r"^\d{2,3}-\d{2}-\d{6}$")

ID_NUMBER_VALIDATORS: Dict[str, Callable[[str], bool]] = {
    NATIONAL_ID: is_valid_national_id_number,
    PHILHEALTH_ID: is_valid_philhealth_number,
    UMID: is_valid_umid_crn,
    DRIVERS_LICENSE: is_valid_drivers_license_number,
    SSS_ID: is_valid_sss_number,
    QC_CITIZEN_ID: is_valid_qc_citizen_number,
}


def normalize_id_number_generic(raw: str) -> str:
    """Remove every whitespace character."""
    if not raw:
        return ""
    return re.sub(r"\s+", "", raw)


# -------------------------------------------------------------- helpers ---

def _split_lines(text: str) -> List[str]:
    return [ln.strip() for ln in (text or "").splitlines() if ln.strip()]


def _norm(text: str) -> str:
    """Lowercase, strip, collapse whitespace."""
    return " ".join(text.lower().split())


def _label_index(lines: Sequence[str], pattern: str,
                 fuzzy_targets: Sequence[str] = ()) -> int:
    """Index of the first line carrying a label, or -1.

    The regex is tried on every line first; fuzzy targets only catch OCR
    typos ("Apelyid0", "Glven Names") when no line matched exactly.
    """
    rx = re.compile(pattern, re.IGNORECASE)
    for idx, line in enumerate(lines):
        if rx.search(line):
            return idx
    for idx, line in enumerate(lines):
        t = _norm(line)
        # A label line is short; long lines give partial_ratio false hits.
        if len(t) > 40:
            continue
        for target in fuzzy_targets:
            if len(t) < len(target) * 0.6:
                continue
            if fuzz.partial_ratio(t, target) >= LABEL_FUZZY_THRESHOLD:
                return idx
    return -1


def _comma_name(joined: str) -> str:
    """``"DELA CRUZ, JUAN"`` -> ``"JUAN DELA CRUZ"``."""
    m = re.search(r"([A-Z][A-Z']+),\s*([A-Z][A-Z'\s.]+)", joined)
    if not m:
        return ""
    return collapse_ws(f"{m.group(2).strip()} {m.group(1).strip()}")


def _confidence(found: Dict[str, bool],
                weights: Dict[str, Tuple[float, float]]) -> FieldConfidence:
    """Pick the hit/miss constant for each field."""
    values = {k: (hit if found.get(k) else miss) for k, (hit, miss) in weights.items()}
    return FieldConfidence(**values)


# ------------------------------------------------------- post-processing ---

def _id_validator_for(id_type: str) -> Optional[Callable[[str], bool]]:
    return ID_NUMBER_VALIDATORS.get(id_type)


def post_process(info: ExtractedInfo) -> ExtractedInfo:
    """Re-validate every field of *info* for its document type.

    Invalid values are reset to ``""`` and their confidence capped: name and
    dob at 0.2, ID number at 0.25.  Driver's license numbers without the
    leading letter survive with confidence capped at 0.6.
    """
    full_name = collapse_ws(info.full_name)
    dob = (info.dob or "").strip()
    id_number = normalize_id_number_generic(info.id_number)
    conf = info.confidence

    if full_name:
        full_name = clean_name_candidate(full_name) or full_name
        if not is_reasonable_full_name(full_name):
            logger.debug("Dropping unreasonable name %r (%s)", full_name, info.id_type)
            full_name = ""
            if conf is not None:
                conf = conf.capped(full_name=0.2)

    if dob:
        if not re.match(r"^\d{4}-\d{2}-\d{2}$", dob):
            dob = normalize_date(dob) or dob
        if not is_reasonable_dob(dob):
            dob = ""
            if conf is not None:
                conf = conf.capped(dob=0.2)

    validator = _id_validator_for(info.id_type)
    if id_number and validator is not None and not validator(id_number):
        if info.id_type == DRIVERS_LICENSE and _DL_LEGACY_RE.match(id_number):
            if conf is not None:
                conf = conf.capped(id_number=0.6)
        else:
            id_number = ""
            if conf is not None:
                conf = conf.capped(id_number=0.25)

    return replace(info, full_name=full_name, dob=dob,
                   id_number=id_number, confidence=conf)


# ------------------------------------------------------------ national ID ---

_NATIONAL_STOP_RE = re.compile(
    r"Apelyido|Given|Petsa|Date|Kapanganakan|Birth|\bID\b|Numero", re.IGNORECASE)
_NATIONAL_HEADER_LIKE_RE = re.compile(
    r"(PILIP|PHILIPPINES?|REPUBLIKA|REPUBLIC|PAMBANSANG|PAGKAKAKILANLAN"
    r"|IDENTIFICATION|CARD)", re.IGNORECASE)
_NATIONAL_DOB_RE = re.compile(
    r"\b(January|February|March|April|May|June|July|August|September|October"
    r"|November|December)\s+\d{1,3},?\s*\d{4}\b", re.IGNORECASE)


def _line_below(lines: Sequence[str], pattern: str,
                fuzzy_targets: Sequence[str] = ()) -> Tuple[str, int]:
    """Return (value, index) of the line under a label, or ("", -1)."""
    idx = _label_index(lines, pattern, fuzzy_targets)
    if idx != -1 and idx + 1 < len(lines):
        nxt = lines[idx + 1].strip()
        if not _NATIONAL_STOP_RE.search(nxt):
            return nxt, idx + 1
    return "", -1


def parse_national_id(text: str) -> ExtractedInfo:
    """PhilSys national ID: bilingual labels above each name part."""
    lines = _split_lines(text)
    joined = collapse_ws(text)

    m = re.search(r"\b\d{4}-\d{4}-\d{4}-\d{4}\b", joined)
    id_number = m.group(0) if m else ""

    last_name, last_idx = _line_below(
        lines, r"Apelyido|Last\s*Name", ("apelyido", "last name"))
    labelled_last = bool(last_name)
    if not last_name:
        caps = [ln for ln in lines
                if not NATIONAL_ID_HEADER_RE.search(ln)
                and re.match(r"^[A-Z\s]{3,}$", ln)
                and not _NATIONAL_HEADER_LIKE_RE.search(ln)]
        last_name = pick_best_name_line(caps)
        last_idx = lines.index(last_name) if last_name else -1

    given_names, given_idx = _line_below(
        lines, r"Mga\s*Pangalan|Given\s*Names", ("mga pangalan", "given names"))
    middle_name, _ = _line_below(
        lines, r"Gitnang\s*Apelyido|Middle\s*Name", ("gitnang apelyido", "middle name"))

    anchor, anchor_idx = (given_names, given_idx) if given_names else (last_name, last_idx)
    if anchor and (anchor.startswith("/") or re.search(r"(CITY|CTY)", anchor, re.IGNORECASE)):
        anchor, anchor_idx = last_name, last_idx

    # Without a readable label the surname often still sits a line or two
    # above the given names.
    final_last = last_name if labelled_last and last_name != anchor else ""
    if not final_last and anchor and anchor_idx > 0:
        for i in range(anchor_idx - 1, max(anchor_idx - 4, -1), -1):
            token = extract_surname_token(lines[i])
            if token:
                final_last = token
                break
    if not final_last and last_name and last_name != anchor:
        final_last = last_name

    dob_m = _NATIONAL_DOB_RE.search(joined)
    dob = normalize_date(dob_m.group(0)) if dob_m else ""

    raw_name = " ".join(p for p in (anchor, middle_name, final_last) if p).strip()
    full_name = clean_name_candidate(raw_name) or raw_name

    return post_process(ExtractedInfo(
        full_name=full_name,
        dob=dob,
        id_number=id_number,
        id_type=NATIONAL_ID,
        confidence=_confidence(
            {"full_name": bool(full_name), "dob": bool(dob), "id_number": bool(id_number)},
            {"full_name": (0.95, 0.4), "dob": (0.9, 0.4), "id_number": (1.0, 0.3)},
        ),
    ))


# ------------------------------------------------------------- PhilHealth ---

_SHORT_MONTH_DOB_RE = re.compile(
    r"\b(Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sept?|Oct|Nov|Dec)[a-z]*\.?\s+(\d{1,2}),\s*(\d{4})\b",
    re.IGNORECASE)


def parse_philhealth_id(text: str) -> ExtractedInfo:
    """PhilHealth: ``LAST, GIVEN MIDDLE`` name line and ``Mon. DD, YYYY`` dates."""
    lines = _split_lines(text)
    joined = collapse_ws(text)

    m = re.search(r"\b\d{2}-\d{9}-\d\b", joined)
    id_number = m.group(0) if m else ""

    full_name = ""
    for line in lines:
        if re.match(r"^[A-Z][A-Za-z'\-]+,\s*[A-Za-z]", line):
            last_part, _, given_part = line.partition(",")
            last_part, given_part = last_part.strip(), given_part.strip()
            full_name = collapse_ws(f"{given_part} {last_part}") if last_part and given_part else line
            break

    dob = ""
    dm = _SHORT_MONTH_DOB_RE.search(joined)
    if dm:
        month = month_number(dm.group(1))
        if month is not None:
            dob = to_iso(int(dm.group(3)), month, int(dm.group(2)))
    if not dob:
        dob = pick_best_dob(joined)

    return post_process(ExtractedInfo(
        full_name=full_name,
        dob=dob,
        id_number=id_number,
        id_type=PHILHEALTH_ID,
        confidence=_confidence(
            {"full_name": bool(full_name), "dob": bool(dob), "id_number": bool(id_number)},
            {"full_name": (0.85, 0.3), "dob": (0.85, 0.3), "id_number": (0.98, 0.4)},
        ),
    ))


# ------------------------------------------------------------------- UMID ---

def parse_umid(text: str) -> ExtractedInfo:
    """UMID: CRN number, surname / given / middle name labels."""
    lines = _split_lines(text)
    joined = collapse_ws(text)

    id_number = ""
    m = re.search(r"CRN-?\s*(\d{4})-?\s*(\d{7})-?\s*(\d)", joined, re.IGNORECASE)
    if m:
        id_number = f"CRN-{m.group(1)}-{m.group(2)}-{m.group(3)}"

    surname_idx = _label_index(lines, r"surname", ("surname",))
    given_idx = _label_index(lines, r"given\s+name", ("given name",))
    middle_idx = _label_index(lines, r"middle\s+name", ("middle name",))

    last_name = lines[surname_idx + 1] if 0 <= surname_idx < len(lines) - 1 else ""
    given_names = ""
    if given_idx != -1:
        end = middle_idx if middle_idx > given_idx else len(lines)
        given_names = collapse_ws(" ".join(
            ln for ln in lines[given_idx + 1:end]
            if not re.search(r"middle\s+name", ln, re.IGNORECASE)))
    middle_name = lines[middle_idx + 1] if 0 <= middle_idx < len(lines) - 1 else ""

    raw_name = collapse_ws(" ".join(p for p in (given_names, middle_name, last_name) if p))
    full_name = clean_name_candidate(raw_name) or raw_name

    dob = ""
    dob_idx = _label_index(lines, r"date\s+of\s+birth", ("date of birth",))
    if dob_idx != -1 and dob_idx + 1 < len(lines):
        dm = re.search(r"(\d{4})[/\-](\d{2})[/\-](\d{2})", lines[dob_idx + 1])
        if dm:
            dob = to_iso(int(dm.group(1)), int(dm.group(2)), int(dm.group(3)))

    return post_process(ExtractedInfo(
        full_name=full_name,
        dob=dob,
        id_number=id_number,
        id_type=UMID,
        confidence=_confidence(
            {"full_name": bool(full_name), "dob": bool(dob), "id_number": bool(id_number)},
            {"full_name": (0.8, 0.3), "dob": (0.85, 0.3), "id_number": (0.95, 0.4)},
        ),
    ))


# ------------------------------------------------------- driver's license ---

_DL_HEADER_RE = re.compile(
    r"REPUBLIC|PHILIPPINES|TRANSPORTATION|LICENSE|DRIVER|PROFESSIONAL"
    r"|DEPARTMENT|OFFICE|NON-PROFESSIONAL", re.IGNORECASE)


def parse_drivers_license(text: str) -> ExtractedInfo:
    """LTO driver's license: ``N##-##-######`` number, comma name, address."""
    joined = collapse_ws(text)

    id_number = ""
    m = re.search(r"N?\d{2,3}[-\s]?\d{2}[-\s]?\d{5,6}", joined)
    if m:
        digits = re.sub(r"\D", "", m.group(0))
        if len(digits) >= 10:
            id_number = f"N{digits[:2]}-{digits[2:4]}-{digits[4:]}"

    full_name = ""
    nm = re.search(r"([A-Z]{2,}(?:\s+[A-Z]{2,})*),\s*([A-Z]{2,}(?:\s+[A-Z]{2,})*)", joined)
    if nm and not re.search(r"REPUBLIC|PHILIPPINES|TRANSPORTATION|LICENSE|PROFESSIONAL",
                            nm.group(1), re.IGNORECASE):
        full_name = f"{nm.group(2).strip()} {nm.group(1).strip()}"

    if not full_name:
        for cm in re.finditer(r"\b([A-Z]{3,}(?:\s+[A-Z]{3,}){2,4})\b", joined):
            if _DL_HEADER_RE.search(cm.group(1)):
                continue
            full_name = cm.group(1)
            break

    if not full_name:
        lm = re.search(r"(?:Last|First|Middle)\s*(?:Name|Nome)[^A-Z]*([A-Z]{3,}(?:\s+[A-Z]{3,}){2,4})",
                       joined, re.IGNORECASE)
        if lm:
            full_name = lm.group(1)

    if full_name:
        full_name = re.sub(r"^[a-z]\s+", "", full_name, flags=re.IGNORECASE).strip()

    dob = ""
    dm = re.search(r"\b(\d{4})[/\-](\d{2})[/\-](\d{2})\b", joined)
    if dm:
        dob = to_iso(int(dm.group(1)), int(dm.group(2)), int(dm.group(3)))
    if not dob:
        # "1990/0115": OCR dropped the second separator
        dm = re.search(r"\b(\d{4})[/\-](\d{4})\b", joined)
        if dm:
            mmdd = dm.group(2)
            dob = to_iso(int(dm.group(1)), int(mmdd[:2]), int(mmdd[2:]))
    if not dob:
        dob = pick_best_dob(joined)

    address = extract_address(text)

    conf = _confidence(
        {"full_name": bool(full_name), "dob": bool(dob), "id_number": bool(id_number)},
        {"full_name": (0.85, 0.3), "dob": (0.8, 0.3), "id_number": (0.95, 0.3)},
    )
    return post_process(ExtractedInfo(
        full_name=collapse_ws(full_name),
        dob=dob,
        id_number=id_number,
        id_type=DRIVERS_LICENSE,
        address=address,
        confidence=replace(conf, address=0.7 if address else 0.2),
    ))


# ------------------------------------------------------------------- SSS ---

_SSS_EXCLUDE_RE = re.compile(
    r"REPUBLIC|PHILIPPINES|SOCIAL|SECURITY|SYSTEM|PRESIDENT|PROUD|FILIPINO|SSS",
    re.IGNORECASE)


def parse_sss_id(text: str) -> ExtractedInfo:
    """SSS card: ``##-#######-#`` number and an all-caps name."""
    lines = _split_lines(text)
    joined = collapse_ws(text)

    id_number = ""
    id_m = re.search(r"\d{2}-\d{7}-\d", joined)
    if id_m:
        id_number = id_m.group(0)
    else:
        dm = re.search(r"\b(\d{9,10})\b", joined)
        if dm:
            digits = dm.group(1)
            if len(digits) == 10:
                id_number = f"{digits[:2]}-{digits[2:9]}-{digits[9:]}"
            else:
                id_number = f"0{digits[:1]}-{digits[1:8]}-{digits[8:]}"

    full_name = _comma_name(joined)

    if not full_name:
        pm = re.search(r"\b([A-Z]{3,})\s+([A-Z]{3,})(?:\s+([A-Z]{3,}))?\b", joined)
        if pm and not _SSS_EXCLUDE_RE.search(pm.group(0)):
            full_name = pm.group(0)

    if not full_name:
        for line in lines:
            words = [re.sub(r"[^A-Za-z]", "", w) for w in line.split()]
            words = [w for w in words if len(w) >= 3]
            if 2 <= len(words) <= 4 and all(w == w.upper() for w in words):
                candidate = " ".join(words)
                if not _SSS_EXCLUDE_RE.search(candidate):
                    full_name = candidate
                    break

    if not full_name and id_m:
        before = joined[:joined.index(id_m.group(0))]
        bm = re.search(r"([A-Z]{2,}\s+[A-Z]{2,}(?:\s+[A-Z]{2,})?)\s*$", before)
        if bm:
            full_name = bm.group(1)

    if full_name:
        words = full_name.split()
        while len(words) > 2 and len(words[0]) <= 2:
            words.pop(0)
        while len(words) > 2 and len(words[-1]) <= 2:
            words.pop()
        full_name = " ".join(words)

    dob = pick_best_dob(joined)

    return post_process(ExtractedInfo(
        full_name=collapse_ws(full_name),
        dob=dob,
        id_number=id_number,
        id_type=SSS_ID,
        confidence=_confidence(
            {"full_name": bool(full_name), "dob": bool(dob), "id_number": bool(id_number)},
            {"full_name": (0.85, 0.3), "dob": (0.8, 0.3), "id_number": (0.95, 0.3)},
        ),
    ))


# ----------------------------------------------------- generic / derived ---

def _generic_fields(text: str) -> Tuple[str, str, str]:
    lines = _split_lines(text)
    joined = collapse_ws(text)
    raw_name = pick_best_name_line(lines)
    full_name = clean_name_candidate(raw_name) or raw_name
    return full_name, pick_best_dob(joined), pick_best_id_token(joined)


def parse_generic(text: str) -> ExtractedInfo:
    """Best name line, first date, longest ID-looking token."""
    full_name, dob, id_number = _generic_fields(text)
    return post_process(ExtractedInfo(
        full_name=full_name,
        dob=dob,
        id_number=id_number,
        id_type=UNKNOWN_ID_TYPE,
        confidence=_confidence(
            {"full_name": bool(full_name), "dob": bool(dob), "id_number": bool(id_number)},
            {"full_name": (0.7, 0.3), "dob": (0.6, 0.2), "id_number": (0.6, 0.2)},
        ),
    ))


def parse_qc_citizen_id(text: str) -> ExtractedInfo:
    """QCitizen card: generic heuristics plus the ``###-########`` number."""
    joined = collapse_ws(text)
    full_name, dob, id_number = _generic_fields(text)
    m = re.search(r"\b\d{3}-\d{8}\b", joined)
    if m:
        id_number = m.group(0)
    full_name = full_name or _comma_name(joined)
    return post_process(ExtractedInfo(
        full_name=full_name,
        dob=dob,
        id_number=id_number,
        id_type=QC_CITIZEN_ID,
        confidence=_confidence(
            {"full_name": bool(full_name), "dob": bool(dob), "id_number": bool(id_number)},
            {"full_name": (0.75, 0.3), "dob": (0.7, 0.3), "id_number": (0.7, 0.3)},
        ),
    ))


def parse_pwd_id(text: str) -> ExtractedInfo:
    full_name, dob, id_number = _generic_fields(text)
    return post_process(ExtractedInfo(
        full_name=full_name,
        dob=dob,
        id_number=id_number,
        id_type=PWD_ID,
        confidence=_confidence(
            {"full_name": bool(full_name), "dob": bool(dob), "id_number": bool(id_number)},
            {"full_name": (0.75, 0.3), "dob": (0.7, 0.3), "id_number": (0.7, 0.3)},
        ),
    ))


# ---------------------------------------------------------------- address ---

_ADDRESS_SKIP_RE = re.compile(r"(name|birth|sex|date|id|number|license|expiry)", re.IGNORECASE)
_ADDRESS_HINT_RE = re.compile(
    r"(brgy|barangay|street|st\.|ave|avenue|city|metro|manila|quezon)", re.IGNORECASE)


def extract_address(text: str) -> str:
    """Up to three lines under an ``Address`` label, else the first street-ish line."""
    lines = _split_lines(text)
    for idx, line in enumerate(lines):
        if re.match(r"^address", line, re.IGNORECASE) or re.search(r"\baddress\s*:", line, re.IGNORECASE):
            picked = [ln for ln in lines[idx + 1:idx + 4] if not _ADDRESS_SKIP_RE.search(ln)]
            if picked:
                return collapse_ws(", ".join(picked))
            break
    for line in lines:
        if _ADDRESS_HINT_RE.search(line):
            return line
    return ""


# -------------------------------------------------------------- detection ---

@dataclass(frozen=True)
class DetectedIdType:
    """Outcome of :func:`detect_id_type`.

    ``id_type`` is always a registry key (``"Unknown"`` when the document is
    recognised but not supported); ``document_kind`` keeps the finer label.
    """
    id_type: str
    confidence: float
    matched_patterns: List[str] = field(default_factory=list)
    document_kind: str = "Other"


def detect_id_type(text: str) -> DetectedIdType:
    """Guess the document type from header words and number formats."""
    if not text:
        return DetectedIdType(UNKNOWN_ID_TYPE, 0.0, [], "Other")

    upper = text.upper()
    matched: List[str] = []

    if re.search(r"\d{4}-\d{4}-\d{4}-\d{4}", text):
        matched.append("ID: XXXX-XXXX-XXXX-XXXX")
        if re.search(r"PHILSYS|PHILIPPINE\s*NATIONAL\s*ID|REPUBLIKA\s*NG\s*PILIPINAS"
                     r"|REPUBLIC\s*OF\s*THE\s*PHILIPPINES", text, re.IGNORECASE):
            matched.append("PhilSys / National ID")
        return DetectedIdType(NATIONAL_ID, 0.95, matched, NATIONAL_ID)

    has_crn = bool(re.search(r"CRN[:\s\-]*\d{4}[\-\s]?\d{7}[\-\s]?\d", text, re.IGNORECASE))
    has_umid = bool(re.search(r"\bUMID\b", text, re.IGNORECASE))
    has_republic = bool(re.search(r"REPUBLIC\s*OF\s*THE\s*PHILIPPINES", text, re.IGNORECASE)) \
        or ("REPUBLIC" in upper and "PHILIPPINES" in upper)
    has_multi = bool(re.search(r"MULTI[-\s]?PURPOSE", text, re.IGNORECASE)) \
        or ("MULTI" in upper and "PURPOSE" in upper)
    has_unified = "UNIFIED" in upper
    if has_crn or has_umid or (has_republic and (has_multi or has_unified)):
        if has_crn:
            matched.append("CRN-XXXX-XXXXXXX-X")
        if has_umid:
            matched.append("UMID text found")
        if has_republic:
            matched.append("Republic of the Philippines")
        if has_multi or has_unified:
            matched.append("Multi-Purpose ID text")
        return DetectedIdType(UMID, 0.95, matched, UMID)

    has_lto = bool(re.search(r"LAND\s*TRANSPORTATION\s*OFFICE|DRIVER['’]?S?\s*LICENSE|LICENSE\s*NO",
                             text, re.IGNORECASE)) or bool(re.search(r"\bLTO\b", upper))
    has_dl_number = bool(re.search(r"[A-Z]?\d{2,3}-\d{2}-\d{6}", text))
    if has_lto or has_dl_number:
        if has_lto:
            matched.append("LTO / Driver's License")
        if has_dl_number:
            matched.append("ID: N##-##-######")
        return DetectedIdType(DRIVERS_LICENSE, 0.9, matched, DRIVERS_LICENSE)

    has_ph = bool(re.search(r"PHILHEALTH|PHILIPPINE\s*HEALTH\s*INSURANCE", text, re.IGNORECASE))
    has_ph_number = bool(re.search(r"\d{2}-\d{9}-\d", text))
    if has_ph or has_ph_number:
        if has_ph:
            matched.append("PhilHealth")
        if has_ph_number:
            matched.append("ID: ##-#########-#")
        return DetectedIdType(PHILHEALTH_ID, 0.9, matched, PHILHEALTH_ID)

    has_sss_text = bool(re.search(r"SOCIAL\s*SECURITY\s*SYSTEM", text, re.IGNORECASE))
    has_sss_abbrev = bool(re.search(r"\bSSS\b", upper)) \
        and not re.search(r"PHILSYS|UMID|MULTI.?PURPOSE", text, re.IGNORECASE)
    has_sss_number = bool(re.search(r"\d{2}-\d{7}-\d", text))
    if has_sss_text or (has_sss_abbrev and has_sss_number):
        if has_sss_text:
            matched.append("Social Security System")
        if has_sss_number:
            matched.append("ID: ##-#######-#")
        return DetectedIdType(SSS_ID, 0.85, matched, SSS_ID)

    has_passport = bool(re.search(r"PASSPORT|DEPARTMENT\s*OF\s*FOREIGN\s*AFFAIRS", text, re.IGNORECASE)) \
        or bool(re.search(r"\bDFA\b", upper))
    has_passport_number = bool(re.search(r"[A-Z]{1,2}\d{7}", text))
    if has_passport or has_passport_number:
        if has_passport:
            matched.append("Philippine Passport")
        if has_passport_number:
            matched.append("Passport number format")
        return DetectedIdType(UNKNOWN_ID_TYPE, 0.85, matched, "Passport")

    if re.search(r"PERSONS?\s*WITH\s*DISABILITY|\bPWD\b", text, re.IGNORECASE):
        matched.append("PWD ID")
        return DetectedIdType(PWD_ID, 0.8, matched, PWD_ID)

    if re.search(r"QUEZON\s*CITY|QCITIZEN", text, re.IGNORECASE):
        matched.append("Quezon City ID")
        return DetectedIdType(QC_CITIZEN_ID, 0.8, matched, QC_CITIZEN_ID)

    if re.search(r"CITY\s*OF\s*MANILA|CITY\s*ID|BARANGAY\s*ID", text, re.IGNORECASE):
        matched.append("City/Barangay ID")
        return DetectedIdType(UNKNOWN_ID_TYPE, 0.8, matched, "City ID")

    if re.search(r"UNIVERSITY|COLLEGE|STUDENT\s*ID|SCHOOL\s*ID", text, re.IGNORECASE):
        matched.append("School/University")
        return DetectedIdType(UNKNOWN_ID_TYPE, 0.7, matched, "School ID")

    return DetectedIdType(UNKNOWN_ID_TYPE, 0.3, ["No patterns matched"], "Other")
