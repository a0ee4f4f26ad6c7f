"""Document-type registry.

One :class:`Descriptor` per supported card, built once at import time and
looked up by key.  Anything not registered resolves to the generic
``Unknown`` descriptor.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple, Union

from idscan import id_parsers
from idscan.heuristics import is_reasonable_dob, is_reasonable_full_name
from idscan.types import UNKNOWN_ID_TYPE, ExtractedInfo

logger = logging.getLogger("idscan.registry")

REDETECT_MIN_CONFIDENCE = 0.85


class IdType(str, Enum):
    NATIONAL_ID = "National ID"
    PHILHEALTH_ID = "PhilHealth ID"
    UMID = "UMID"
    DRIVERS_LICENSE = "Driver's License"
    SSS_ID = "SSS ID"
    QC_CITIZEN_ID = "Quezon City Citizen ID"
    PWD_ID = "PWD ID"
    UNKNOWN = "Unknown"
    BLANK = "Blank"


INTERNAL_TYPES = (IdType.UNKNOWN.value, IdType.BLANK.value)


# ------------------------------------------------------------ descriptor ---

@dataclass(frozen=True)
class RoiProfile:
    uses_split_name_rois: bool
    roi_keys: Tuple[str, ...]


@dataclass(frozen=True)
class Descriptor:
    id_type: str
    label: str
    parser: Callable[[str], ExtractedInfo]
    roi_profile: RoiProfile
    validate_id_number: Optional[Callable[[str], bool]] = None
    validate_full_name: Optional[Callable[[str], bool]] = None
    validate_dob: Optional[Callable[[str], bool]] = None
    card_template_key: Optional[str] = None
    id_number_label: Optional[str] = None


_FIELD_KEYS = ("fullName", "dob", "idNumber")
_DESCRIPTORS: Dict[str, Descriptor] = {}


def _register(descriptor: Descriptor) -> None:
    _DESCRIPTORS[descriptor.id_type] = descriptor


_register(Descriptor(
    id_type=IdType.NATIONAL_ID.value,
    label="Philippine National ID",
    parser=id_parsers.parse_national_id,
    validate_id_number=id_parsers.is_valid_national_id_number,
    validate_full_name=is_reasonable_full_name,
    validate_dob=is_reasonable_dob,
    roi_profile=RoiProfile(True, ("lastName", "givenNames", "middleName", "dob", "idNumber")),
    card_template_key=IdType.NATIONAL_ID.value,
    id_number_label="National ID number",
))

_register(Descriptor(
    id_type=IdType.PHILHEALTH_ID.value,
    label="PhilHealth ID",
    parser=id_parsers.parse_philhealth_id,
    validate_id_number=id_parsers.is_valid_philhealth_number,
    validate_full_name=is_reasonable_full_name,
    validate_dob=is_reasonable_dob,
    roi_profile=RoiProfile(False, _FIELD_KEYS),
    card_template_key=IdType.PHILHEALTH_ID.value,
    id_number_label="PhilHealth ID number",
))

# The UMID template crops the name in three parts; they are joined into
# one full-name guess since the card has no single name field.
_register(Descriptor(
    id_type=IdType.UMID.value,
    label="UMID",
    parser=id_parsers.parse_umid,
    validate_id_number=id_parsers.is_valid_umid_crn,
    validate_full_name=is_reasonable_full_name,
    validate_dob=is_reasonable_dob,
    roi_profile=RoiProfile(False, _FIELD_KEYS + ("lastName", "givenNames", "middleName")),
    card_template_key=IdType.UMID.value,
    id_number_label="UMID CRN",
))

_register(Descriptor(
    id_type=IdType.DRIVERS_LICENSE.value,
    label="Driver's License",
    parser=id_parsers.parse_drivers_license,
    validate_id_number=id_parsers.is_valid_drivers_license_number,
    validate_full_name=is_reasonable_full_name,
    validate_dob=is_reasonable_dob,
    roi_profile=RoiProfile(False, _FIELD_KEYS),
    card_template_key=IdType.DRIVERS_LICENSE.value,
    id_number_label="License Number",
))

_register(Descriptor(
    id_type=IdType.SSS_ID.value,
    label="SSS ID",
    parser=id_parsers.parse_sss_id,
    validate_id_number=id_parsers.is_valid_sss_number,
    validate_full_name=is_reasonable_full_name,
    validate_dob=is_reasonable_dob,
    roi_profile=RoiProfile(False, _FIELD_KEYS),
    card_template_key=IdType.SSS_ID.value,
    id_number_label="SSS Number",
))

_register(Descriptor(
    id_type=IdType.QC_CITIZEN_ID.value,
    label="Quezon City Citizen ID",
    parser=id_parsers.parse_qc_citizen_id,
    validate_id_number=id_parsers.is_valid_qc_citizen_number,
    validate_full_name=is_reasonable_full_name,
    validate_dob=is_reasonable_dob,
    roi_profile=RoiProfile(False, _FIELD_KEYS),
    card_template_key=IdType.QC_CITIZEN_ID.value,
    id_number_label="QCitizen Card Number",
))

_register(Descriptor(
    id_type=IdType.PWD_ID.value,
    label="PWD ID",
    parser=id_parsers.parse_pwd_id,
    validate_full_name=is_reasonable_full_name,
    validate_dob=is_reasonable_dob,
    roi_profile=RoiProfile(False, _FIELD_KEYS),
    card_template_key=IdType.PWD_ID.value,
    id_number_label="PWD ID Number",
))

_register(Descriptor(
    id_type=IdType.UNKNOWN.value,
    label="Unknown ID",
    parser=id_parsers.parse_generic,
    validate_full_name=is_reasonable_full_name,
    validate_dob=is_reasonable_dob,
    roi_profile=RoiProfile(False, _FIELD_KEYS),
    id_number_label="ID number",
))

# Raw OCR only: no ROIs, no validators.
_register(Descriptor(
    id_type=IdType.BLANK.value,
    label="Blank / Raw OCR",
    parser=id_parsers.parse_generic,
    roi_profile=RoiProfile(False, ()),
    id_number_label="ID number",
))


# ---------------------------------------------------------------- lookup ---

def _key(id_type: Union[IdType, str, None]) -> str:
    if isinstance(id_type, IdType):
        return id_type.value
    return id_type or ""


def get_descriptor(id_type: Union[IdType, str, None]) -> Descriptor:
    return _DESCRIPTORS.get(_key(id_type), _DESCRIPTORS[UNKNOWN_ID_TYPE])


def is_registered(id_type: Union[IdType, str, None]) -> bool:
    return _key(id_type) in _DESCRIPTORS


def list_selectable_types(include_internal: bool = False) -> List[Dict[str, str]]:
    """``[{"value", "label"}]`` for a type picker; Unknown/Blank only on request."""
    return [
        {"value": d.id_type, "label": d.label}
        for d in _DESCRIPTORS.values()
        if include_internal or d.id_type not in INTERNAL_TYPES
    ]


_ALIASES: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("national", "philsys"), IdType.NATIONAL_ID.value),
    (("philhealth",), IdType.PHILHEALTH_ID.value),
    (("umid",), IdType.UMID.value),
    (("driver", "lto"), IdType.DRIVERS_LICENSE.value),
    (("sss", "social security"), IdType.SSS_ID.value),
    (("quezon", "qcitizen", "qc citizen"), IdType.QC_CITIZEN_ID.value),
    (("pwd", "person with disability", "persons with disability"), IdType.PWD_ID.value),
    (("blank",), IdType.BLANK.value),
)


def normalize_id_type(raw: Optional[str]) -> str:
    """Map free text (``"NATIONAL_ID"``, ``"philsys"``...) to a registry key.

    Returns ``""`` for empty input and ``"Unknown"`` when nothing matches.
    """
    if isinstance(raw, IdType):
        return raw.value
    val = " ".join((raw or "").strip().lower().replace("_", " ").replace("-", " ").split())
    if not val:
        return ""
    for key in _DESCRIPTORS:
        if val == key.lower():
            return key
    for needles, key in _ALIASES:
        if any(n in val for n in needles):
            return key
    return UNKNOWN_ID_TYPE


# ---------------------------------------------------------------- parsing ---

def parse_text_by_id_type(text: str, id_type: Union[IdType, str, None],
                          redetect_min_confidence: float = REDETECT_MIN_CONFIDENCE
                          ) -> ExtractedInfo:
    """Parse whole-card OCR text with the parser registered for *id_type*.

    For the generic ``Unknown`` descriptor the text is first run through
    document-type detection; a confident hit on a registered type is parsed
    with that type's parser instead.
    """
    descriptor = get_descriptor(id_type)
    if descriptor.id_type == UNKNOWN_ID_TYPE and text:
        detected = id_parsers.detect_id_type(text)
        if (detected.id_type != UNKNOWN_ID_TYPE
                and detected.confidence >= redetect_min_confidence):
            logger.debug("Re-detected %r as %s (%.2f, %s)", id_type,
                         detected.id_type, detected.confidence,
                         ", ".join(detected.matched_patterns))
            return get_descriptor(detected.id_type).parser(text)
    return descriptor.parser(text)
