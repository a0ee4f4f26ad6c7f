"""Accept / reject the merged fields of a scan."""

from __future__ import annotations

import logging
import re
from typing import List, Optional

from idscan.heuristics import is_reasonable_dob, is_reasonable_full_name
from idscan.registry import get_descriptor
from idscan.types import UNKNOWN_ID_TYPE, FieldValidationResult

logger = logging.getLogger("idscan.validation")

FULL_NAME_LABEL = "full name"
DOB_LABEL = "date of birth"
DEFAULT_ID_LABEL = "ID number"


def is_plausible_id_number(id_number: str) -> bool:
    """Fallback rule for types without a number format: 6+ chars, a digit, no spaces."""
    return len(id_number) >= 6 and bool(re.search(r"\d", id_number)) \
        and not re.search(r"\s", id_number)


def validate_extracted_fields(id_type: Optional[str], full_name: str, dob: str,
                              id_number: str) -> FieldValidationResult:
    """Check each merged field; ``failed_fields`` holds human-readable labels."""
    descriptor = get_descriptor(id_type or UNKNOWN_ID_TYPE)
    check_name = descriptor.validate_full_name or is_reasonable_full_name
    check_dob = descriptor.validate_dob or is_reasonable_dob
    failed: List[str] = []

    if not check_name(full_name or ""):
        failed.append(FULL_NAME_LABEL)
    if not check_dob(dob or ""):
        failed.append(DOB_LABEL)

    trimmed = (id_number or "").strip()
    label = descriptor.id_number_label or DEFAULT_ID_LABEL
    check_id = descriptor.validate_id_number or is_plausible_id_number
    if not check_id(trimmed):
        failed.append(label)

    if failed:
        logger.debug("Validation failed for %s: %s", descriptor.id_type, ", ".join(failed))
    return FieldValidationResult(ok=not failed, failed_fields=failed)
