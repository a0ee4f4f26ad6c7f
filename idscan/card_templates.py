"""Default ROI layouts per document type and the custom-layout store.

Coordinates are fractions of the cropped card (0,0 top-left, 1,1
bottom-right).  They don't have to be pixel-perfect; the crops are padded
and each field is cleaned after OCR anyway.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from idscan.types import RoiSpec

logger = logging.getLogger("idscan.templates")

CUSTOM_ROI_PREFIX = "ivisit-custom-rois-"
CUSTOM_ROI_VERSION = 1


# -------------------------------------------------------------- templates ---

@dataclass(frozen=True)
class CardTemplate:
    id_type: str
    display_name: str
    rois: Tuple[RoiSpec, ...]


def _roi(key: str, label: str, x: float, y: float, w: float, h: float) -> RoiSpec:
    return RoiSpec(key=key, label=label, x=x, y=y, width=w, height=h)


_TEMPLATES: Dict[str, CardTemplate] = {}


def _add(template: CardTemplate) -> None:
    _TEMPLATES[template.id_type] = template


_add(CardTemplate("National ID", "Philippine National ID", (
    # Names run down the right half, ID number top-left above the photo.
    _roi("lastName", "Last Name", 0.42, 0.36, 0.50, 0.10),
    _roi("givenNames", "Given Names", 0.42, 0.48, 0.50, 0.15),
    _roi("middleName", "Middle Name", 0.42, 0.635, 0.50, 0.10),
    _roi("dob", "Date of Birth", 0.42, 0.74, 0.425, 0.125),
    _roi("idNumber", "ID Number", 0.0, 0.26, 0.40, 0.13),
)))

_add(CardTemplate("PhilHealth ID", "PhilHealth ID", (
    _roi("fullName", "Full Name", 0.35, 0.40, 0.60, 0.10),
    _roi("dob", "Date of Birth", 0.35, 0.48, 0.25, 0.07),
    _roi("idNumber", "PhilHealth No.", 0.35, 0.33, 0.40, 0.10),
)))

_add(CardTemplate("UMID", "Unified Multi-Purpose ID", (
    _roi("lastName", "Surname", 0.38, 0.36, 0.62, 0.10),
    _roi("givenNames", "Given Name", 0.38, 0.46, 0.40, 0.16),
    _roi("middleName", "Middle Name", 0.38, 0.62, 0.50, 0.10),
    _roi("dob", "Date of Birth", 0.62, 0.675, 0.235, 0.10),
    _roi("idNumber", "CRN", 0.55, 0.23, 0.45, 0.12),
)))

_add(CardTemplate("Driver's License", "LTO Driver's License", (
    _roi("fullName", "Full Name", 0.32, 0.30, 0.65, 0.10),
    _roi("dob", "Date of Birth", 0.55, 0.40, 0.18, 0.10),
    _roi("idNumber", "License No.", 0.32, 0.62, 0.26, 0.10),
)))

_add(CardTemplate("SSS ID", "SSS ID Card", (
    _roi("fullName", "Full Name", 0.25, 0.32, 0.70, 0.12),
    _roi("idNumber", "SSS Number", 0.25, 0.45, 0.50, 0.12),
)))

_add(CardTemplate("Quezon City Citizen ID", "QCitizen ID", (
    _roi("fullName", "Full Name", 0.20, 0.28, 0.60, 0.14),
    _roi("dob", "Date of Birth", 0.32, 0.40, 0.20, 0.10),
    _roi("idNumber", "QCitizen Card No.", 0.68, 0.40, 0.30, 0.12),
)))

_add(CardTemplate("PWD ID", "PWD ID", (
    _roi("fullName", "Full Name", 0.15, 0.30, 0.70, 0.15),
    _roi("dob", "Date of Birth", 0.15, 0.48, 0.50, 0.12),
    _roi("idNumber", "PWD ID No.", 0.15, 0.66, 0.55, 0.12),
)))


def get_template(id_type: Optional[str]) -> Optional[CardTemplate]:
    if not id_type:
        return None
    return _TEMPLATES.get(str(id_type))


def default_rois(id_type: Optional[str]) -> List[RoiSpec]:
    tpl = get_template(id_type)
    return list(tpl.rois) if tpl else []


def list_templates() -> List[CardTemplate]:
    return list(_TEMPLATES.values())


# ------------------------------------------------------------ custom store ---

RoiLike = Union[RoiSpec, Dict[str, Any]]


def _as_spec(roi: RoiLike) -> RoiSpec:
    return roi if isinstance(roi, RoiSpec) else RoiSpec.from_dict(roi)


def storage_slug(id_type: str) -> str:
    """``"Driver's License"`` -> ``"drivers-license"``."""
    slug = re.sub(r"\s+", "-", str(id_type).strip()).lower()
    return re.sub(r"[^a-z0-9\-]", "", slug)


class CustomRoiStore:
    """Per-type ROI overrides persisted as one JSON file each.

    File layout::

        {"id_type": "...", "rois": [...], "version": 1, "updated_at": "..."}

    A missing or unreadable file means "no custom layout".
    """

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)

    def _path(self, id_type: str) -> Path:
        return self.directory / f"{CUSTOM_ROI_PREFIX}{storage_slug(id_type)}.json"

    def get(self, id_type: str) -> Optional[List[RoiSpec]]:
        path = self._path(id_type)
        if not path.is_file():
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            return [RoiSpec.from_dict(r) for r in data.get("rois", [])]
        except (OSError, ValueError, KeyError, TypeError, AttributeError):
            logger.warning("Ignoring unreadable custom ROI file %s", path, exc_info=True)
            return None

    def save(self, id_type: str, rois: Sequence[RoiLike]) -> Path:
        specs = [_as_spec(r) for r in rois]
        self.directory.mkdir(parents=True, exist_ok=True)
        payload = {
            "id_type": str(id_type),
            "rois": [s.to_dict() for s in specs],
            "version": CUSTOM_ROI_VERSION,
            "updated_at": datetime.now(timezone.utc).isoformat(),
        }
        path = self._path(id_type)
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        logger.info("Saved %d custom ROIs for %s", len(specs), id_type)
        return path

    def reset(self, id_type: str) -> None:
        self._path(id_type).unlink(missing_ok=True)

    def has(self, id_type: str) -> bool:
        return self.get(id_type) is not None

    def merged_rois(self, id_type: str) -> List[RoiSpec]:
        """Custom layout when one is saved and non-empty, else the defaults."""
        custom = self.get(id_type)
        if custom:
            return custom
        return default_rois(id_type)


def load_rois_file(path: Union[str, Path]) -> List[RoiSpec]:
    """Read a ROI list from JSON: either a bare list or a store payload."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if isinstance(data, dict):
        data = data.get("rois", [])
    return [RoiSpec.from_dict(r) for r in data]
