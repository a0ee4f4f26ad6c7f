"""ID Card Scan Pipeline.

Sequences one scan attempt over an already-cropped card image:

  1. crop the type's ROIs (template or caller override)
  2. OCR each field crop and clean the text per field
  3. OCR the whole card and parse it with the type's parser
  4. merge the two sources field by field
  5. validate the merged fields

A failure on one field empties that field only; a failure anywhere in the
whole-card path empties the whole-card result only.  The scan itself always
completes.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import numpy as np

from idscan.field_helpers import (
    clean_roi_name,
    clean_roi_name_part,
    extract_dob_from_text,
    extract_national_id_number,
    extract_philhealth_id_number,
    extract_sss_id_number,
)
from idscan.heuristics import (
    clean_name_candidate,
    looks_like_dob,
    looks_like_id_token,
    looks_like_name,
)
from idscan.merge import merge_roi_and_full_results, merged_id_type
from idscan.ocr_adapter import (
    EasyOcrRecognizer,
    OcrFieldResult,
    OcrMode,
    OcrProfile,
    Recognizer,
    recognize_field,
)
from idscan.registry import REDETECT_MIN_CONFIDENCE, IdType, get_descriptor, parse_text_by_id_type
from idscan.roi_extractor import DEFAULT_PAD, Cropper, crop_fields_from_card, get_rois_for_id_type
from idscan.types import (
    SPLIT_NAME_KEYS,
    UNKNOWN_ID_TYPE,
    ExtractedInfo,
    RoiMergeInput,
    RoiSpec,
    ScanResult,
    ScanState,
)
from idscan.validation import validate_extracted_fields

logger = logging.getLogger("idscan.pipeline")

FullCardLoader = Callable[[], np.ndarray]

# Crop text -> ID number, per type.  Types not listed keep the trimmed text.
_ID_EXTRACTORS: Dict[str, Callable[[str], str]] = {
    IdType.NATIONAL_ID.value: extract_national_id_number,
    IdType.PHILHEALTH_ID.value: extract_philhealth_id_number,
    IdType.SSS_ID.value: extract_sss_id_number,
}


# ---------------------------------------------------------------- config ---

@dataclass
class ScanConfig:
    """Pipeline-level configuration."""
    # Symmetric margin added around every ROI (card fraction).
    roi_pad: float = DEFAULT_PAD

    # >1 runs field OCR on a thread pool.
    max_workers: int = 1

    # Unknown-type whole-card text is re-parsed with the detected type's
    # parser at or above this detection confidence.
    redetect_min_confidence: float = REDETECT_MIN_CONFIDENCE


# -------------------------------------------------------------- pipeline ---

class ScanPipeline:
    """One scan attempt: ROI OCR + whole-card OCR -> merged, validated fields."""

    def __init__(self, recognizer: Recognizer, cfg: Optional[ScanConfig] = None,
                 cropper: Optional[Cropper] = None):
        self.recognizer = recognizer
        self.cfg = cfg or ScanConfig()
        self.cropper = cropper

    # ── field OCR ──────────────────────────────────────────────────

    def _field_jobs(self, images: Dict[str, np.ndarray],
                    split_name: bool) -> List[Tuple[str, OcrMode, Optional[OcrProfile]]]:
        jobs: List[Tuple[str, OcrMode, Optional[OcrProfile]]] = []
        if split_name or "fullName" not in images:
            jobs += [(k, "line", "name") for k in SPLIT_NAME_KEYS if k in images]
        else:
            jobs.append(("fullName", "line", None))
        if "dob" in images:
            jobs.append(("dob", "line", "dob"))
        if "idNumber" in images:
            jobs.append(("idNumber", "line", "numeric" if split_name else None))
        return jobs

    def _ocr_one(self, key: str, image: np.ndarray, mode: OcrMode,
                 profile: Optional[OcrProfile]) -> Tuple[str, OcrFieldResult]:
        try:
            return key, recognize_field(self.recognizer, image, mode, profile)
        except Exception:
            logger.warning("OCR of field %s failed", key, exc_info=True)
            return key, OcrFieldResult()

    def _ocr_fields(self, images: Dict[str, np.ndarray],
                    jobs: Sequence[Tuple[str, OcrMode, Optional[OcrProfile]]]
                    ) -> Dict[str, OcrFieldResult]:
        if self.cfg.max_workers > 1 and len(jobs) > 1:
            with ThreadPoolExecutor(max_workers=self.cfg.max_workers) as pool:
                futures = [pool.submit(self._ocr_one, k, images[k], m, p) for k, m, p in jobs]
                return dict(f.result() for f in futures)
        return dict(self._ocr_one(k, images[k], m, p) for k, m, p in jobs)

    # ── whole card ─────────────────────────────────────────────────

    def _whole_card(self, card_image: np.ndarray, id_type: str,
                    loader: Optional[FullCardLoader]
                    ) -> Tuple[ExtractedInfo, str, Optional[float], Optional[List[str]]]:
        try:
            image = loader() if loader is not None else card_image
            res = self.recognizer.recognize(image, mode="block")
            text = res.text or ""
            parsed = parse_text_by_id_type(text, id_type, self.cfg.redetect_min_confidence)
            return parsed, text, res.confidence, res.person_names
        except Exception:
            logger.warning("Whole-card OCR failed; continuing with ROI data only",
                           exc_info=True)
            return ExtractedInfo.empty(id_type), "", None, None

    # ── run ────────────────────────────────────────────────────────

    def scan_card_image(self, card_image: np.ndarray, id_type: Optional[str],
                        custom_rois: Optional[Sequence[RoiSpec]] = None,
                        full_card_loader: Optional[FullCardLoader] = None) -> ScanResult:
        """Run one scan attempt over *card_image* (a cropped card, BGR or gray)."""
        if card_image is None:
            raise ValueError("card_image is required")
        t_start = time.time()
        id_type = str(id_type.value if isinstance(id_type, IdType) else (id_type or UNKNOWN_ID_TYPE))
        descriptor = get_descriptor(id_type)
        # Unregistered types continue as "Unknown".
        id_type = descriptor.id_type
        split_name = descriptor.roi_profile.uses_split_name_rois
        result = ScanResult(merged=ExtractedInfo.empty(id_type))

        # 1) crop
        rois = get_rois_for_id_type(id_type, custom_rois)
        images = crop_fields_from_card(card_image, rois, cropper=self.cropper,
                                       pad=self.cfg.roi_pad)
        result.roi_images = images
        result.state = ScanState.ROI_CROPPED

        # 2) field OCR
        ocr = self._ocr_fields(images, self._field_jobs(images, split_name))
        for key, res in ocr.items():
            result.roi_texts[key] = res.text
            result.roi_confidence[key] = res.confidence
            if res.person_names:
                result.roi_person_names[key] = list(res.person_names)

        parts = {k: clean_roi_name_part(ocr[k].text) for k in SPLIT_NAME_KEYS if k in ocr}
        if "fullName" in ocr:
            roi_name = clean_roi_name(ocr["fullName"].text)
        else:
            joined = " ".join(parts[k] for k in ("givenNames", "middleName", "lastName")
                              if parts.get(k))
            roi_name = clean_name_candidate(joined) or joined
        roi_dob = extract_dob_from_text(ocr["dob"].text) if "dob" in ocr else ""
        roi_id = ""
        if "idNumber" in ocr:
            raw_id = ocr["idNumber"].text or ""
            extractor = _ID_EXTRACTORS.get(descriptor.id_type)
            roi_id = (extractor(raw_id) if extractor else "") or raw_id.strip()

        combined_name = " ".join(p for p in [roi_name, *parts.values()] if p).strip()
        result.roi_has_any_data = (looks_like_name(combined_name)
                                   or looks_like_dob(roi_dob)
                                   or looks_like_id_token(roi_id))
        result.state = ScanState.ROI_OCR_DONE
        logger.debug("ROI name=%r dob=%r id=%r", roi_name, roi_dob, roi_id)

        # 3) whole card
        from_full, text, conf, names = self._whole_card(card_image, id_type, full_card_loader)
        result.full_card_text = text
        result.full_card_confidence = conf
        result.full_card_person_names = list(names) if names is not None else None
        result.state = ScanState.FULL_CARD_OCR_DONE

        # 4) merge
        merged = merge_roi_and_full_results(
            id_type, RoiMergeInput(full_name=roi_name, dob=roi_dob, id_number=roi_id), from_full)
        result.merged = ExtractedInfo(
            full_name=merged.merged_full_name,
            dob=merged.merged_dob,
            id_number=merged.merged_id_number,
            id_type=merged_id_type(id_type, from_full),
            confidence=from_full.confidence,
        )
        result.state = ScanState.MERGED

        # 5) validate
        validation = validate_extracted_fields(
            id_type, merged.merged_full_name, merged.merged_dob, merged.merged_id_number)
        result.has_useful_data = validation.ok
        result.failed_fields = list(validation.failed_fields)
        result.state = ScanState.VALIDATED

        result.state = ScanState.DONE
        logger.info("Scan %s: usable=%s failed=%s (%.2fs)", id_type, validation.ok,
                    validation.failed_fields, time.time() - t_start)
        return result


def scan_card_image(card_image: np.ndarray, id_type: Optional[str],
                    recognizer: Optional[Recognizer] = None,
                    custom_rois: Optional[Sequence[RoiSpec]] = None,
                    full_card_loader: Optional[FullCardLoader] = None,
                    cfg: Optional[ScanConfig] = None) -> ScanResult:
    """Convenience wrapper: one scan with a default (EasyOCR) pipeline."""
    if recognizer is None:
        recognizer = EasyOcrRecognizer()
    return ScanPipeline(recognizer, cfg).scan_card_image(
        card_image, id_type, custom_rois=custom_rois, full_card_loader=full_card_loader)
