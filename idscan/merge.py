"""Merge engine: fuse ROI-sourced and whole-card field guesses."""

from __future__ import annotations

import logging
from typing import Optional

from idscan.heuristics import is_reasonable_merge_name
from idscan.id_parsers import normalize_id_number_generic
from idscan.registry import get_descriptor
from idscan.types import UNKNOWN_ID_TYPE, ExtractedInfo, MergeResult, RoiMergeInput

logger = logging.getLogger("idscan.merge")


def _merge_full_name(split_name_type: bool, roi_name: str, full_name: str) -> str:
    roi_ok = is_reasonable_merge_name(roi_name)
    full_ok = is_reasonable_merge_name(full_name)
    logger.debug("name roi=%r (%s) full=%r (%s)", roi_name, roi_ok, full_name, full_ok)

    if split_name_type:
        # Separately cropped name parts are the better source on these
        # cards; when both fail, whole-card text beats ROI noise.
        if roi_ok:
            return roi_name
        if full_ok:
            return full_name
        return full_name or roi_name
    return roi_name if roi_ok else full_name


def _merge_id_number(id_type: str, roi_num: str, full_num: str) -> str:
    validate = get_descriptor(id_type).validate_id_number
    if validate is None:
        return roi_num or full_num

    roi_ok = validate(roi_num)
    full_ok = validate(full_num)
    if roi_ok and full_ok:
        return roi_num if len(roi_num) >= len(full_num) else full_num
    if roi_ok:
        return roi_num
    if full_ok:
        return full_num
    return roi_num or full_num


def merge_roi_and_full_results(id_type: Optional[str], roi: RoiMergeInput,
                               from_full: ExtractedInfo) -> MergeResult:
    """One value per field from the two sources.

    * name: the ROI guess when it passes the merge-time name check, else
      the whole-card guess (split-name cards keep a non-empty fallback)
    * dob: ROI first, then whole card
    * ID number: whichever validates for the type; if both do, the longer
      (ROI on a tie); if neither, ROI then whole card.  Whitespace removed.
    """
    id_type = id_type or UNKNOWN_ID_TYPE
    descriptor = get_descriptor(id_type)

    merged_name = _merge_full_name(
        descriptor.roi_profile.uses_split_name_rois,
        (roi.full_name or "").strip(),
        (from_full.full_name or "").strip(),
    )
    merged_dob = roi.dob or from_full.dob or ""
    merged_id = normalize_id_number_generic(_merge_id_number(
        id_type, (roi.id_number or "").strip(), (from_full.id_number or "").strip()))

    logger.debug("merged name=%r dob=%r id=%r", merged_name, merged_dob, merged_id)
    return MergeResult(
        merged_full_name=merged_name,
        merged_dob=merged_dob,
        merged_id_number=merged_id,
    )


def merged_id_type(id_type: Optional[str], from_full: ExtractedInfo) -> str:
    """Whole-card type, else the caller's type, else ``"Unknown"``."""
    return from_full.id_type or id_type or UNKNOWN_ID_TYPE
