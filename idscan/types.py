"""Shared value types for the ID scan engine.

Everything here is a plain dataclass.  Values produced by parsers and the
merge engine are frozen; post-processing builds new instances with
``dataclasses.replace`` instead of mutating.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

import numpy as np


# ------------------------------------------------------------ constants ---

UNKNOWN_ID_TYPE = "Unknown"

# Field keys a card template may define an ROI for.
ROI_KEYS = ("fullName", "dob", "idNumber", "lastName", "givenNames", "middleName")
SPLIT_NAME_KEYS = ("lastName", "givenNames", "middleName")


# ----------------------------------------------------------- extracted ---

@dataclass(frozen=True)
class FieldConfidence:
    """Static per-field confidence weights in [0, 1]."""
    full_name: float = 0.0
    dob: float = 0.0
    id_number: float = 0.0
    address: Optional[float] = None

    def capped(self, **caps: float) -> "FieldConfidence":
        """Return a copy with the named fields lowered to at most *caps*."""
        values = {k: min(getattr(self, k), v) for k, v in caps.items()}
        return FieldConfidence(
            full_name=values.get("full_name", self.full_name),
            dob=values.get("dob", self.dob),
            id_number=values.get("id_number", self.id_number),
            address=self.address,
        )

    def to_dict(self) -> Dict[str, float]:
        out = {
            "fullName": self.full_name,
            "dob": self.dob,
            "idNumber": self.id_number,
        }
        if self.address is not None:
            out["address"] = self.address
        return out


@dataclass(frozen=True)
class ExtractedInfo:
    """Fields pulled out of one OCR text by one parser.

    ``dob`` is ``""`` or an ISO ``YYYY-MM-DD`` date; ``id_type`` is a registry
    key or ``"Unknown"``.
    """
    full_name: str = ""
    dob: str = ""
    id_number: str = ""
    id_type: str = UNKNOWN_ID_TYPE
    confidence: Optional[FieldConfidence] = None
    address: str = ""

    @classmethod
    def empty(cls, id_type: Optional[str] = None) -> "ExtractedInfo":
        return cls(id_type=id_type or UNKNOWN_ID_TYPE)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "fullName": self.full_name,
            "dob": self.dob,
            "idNumber": self.id_number,
            "idType": self.id_type,
        }
        if self.address:
            out["address"] = self.address
        if self.confidence is not None:
            out["confidence"] = self.confidence.to_dict()
        return out


# ------------------------------------------------------------------ roi ---

@dataclass(frozen=True)
class RoiSpec:
    """A normalized rectangle on the card, relative to card bounds."""
    key: str
    label: str
    x: float
    y: float
    width: float
    height: float

    def __post_init__(self) -> None:
        for name in ("x", "y", "width", "height"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"RoiSpec.{name} must be within [0, 1], got {value}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RoiSpec":
        return cls(
            key=str(data["key"]),
            label=str(data.get("label", data["key"])),
            x=float(data["x"]),
            y=float(data["y"]),
            width=float(data["width"]),
            height=float(data["height"]),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "label": self.label,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
        }


# ---------------------------------------------------------------- merge ---

@dataclass(frozen=True)
class RoiMergeInput:
    """ROI-sourced guesses handed to the merge engine."""
    full_name: str = ""
    dob: str = ""
    id_number: str = ""


@dataclass(frozen=True)
class MergeResult:
    merged_full_name: str
    merged_dob: str
    merged_id_number: str


@dataclass(frozen=True)
class FieldValidationResult:
    ok: bool
    failed_fields: List[str] = field(default_factory=list)


# ----------------------------------------------------------------- scan ---

class ScanState(str, Enum):
    """Progress markers of one scan attempt."""
    INIT = "Init"
    ROI_CROPPED = "RoiCropped"
    ROI_OCR_DONE = "RoiOcrDone"
    FULL_CARD_OCR_DONE = "FullCardOcrDone"
    MERGED = "Merged"
    VALIDATED = "Validated"
    DONE = "Done"


@dataclass
class ScanResult:
    """Merged fields plus everything collected along the way."""
    merged: ExtractedInfo
    has_useful_data: bool = False
    failed_fields: List[str] = field(default_factory=list)
    roi_has_any_data: bool = False
    roi_images: Dict[str, np.ndarray] = field(default_factory=dict)
    roi_texts: Dict[str, str] = field(default_factory=dict)
    roi_confidence: Dict[str, Optional[float]] = field(default_factory=dict)
    roi_person_names: Dict[str, List[str]] = field(default_factory=dict)
    full_card_text: str = ""
    full_card_confidence: Optional[float] = None
    full_card_person_names: Optional[List[str]] = None
    state: ScanState = ScanState.INIT

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly summary (ROI images are reported by shape only)."""
        return {
            "merged": self.merged.to_dict(),
            "hasUsefulData": self.has_useful_data,
            "failedFields": list(self.failed_fields),
            "roiHasAnyData": self.roi_has_any_data,
            "roiImages": {k: list(v.shape) for k, v in self.roi_images.items()},
            "roiTexts": dict(self.roi_texts),
            "roiConfidence": dict(self.roi_confidence),
            "roiPersonNames": {k: list(v) for k, v in self.roi_person_names.items()},
            "fullCardText": self.full_card_text,
            "fullCardConfidence": self.full_card_confidence,
            "fullCardPersonNames": self.full_card_person_names,
            "state": self.state.value,
        }
