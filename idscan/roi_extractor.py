"""ROI field extraction: card image -> one normalized sub-image per field."""

from __future__ import annotations

import logging
from typing import Callable, Dict, Iterable, List, Optional, Sequence

import cv2
import numpy as np

from idscan.card_templates import default_rois
from idscan.registry import get_descriptor
from idscan.types import RoiSpec

logger = logging.getLogger("idscan.roi")

# (image, x, y, width, height) in card fractions -> pixels
Cropper = Callable[[np.ndarray, float, float, float, float], np.ndarray]

MIN_CROP_PX = 8
DEFAULT_PAD = 0.02


# -------------------------------------------------------- image helpers ---

def crop_normalized(image: np.ndarray, x: float, y: float,
                    width: float, height: float) -> np.ndarray:
    """Slice a fractional rectangle out of *image* (at least 8x8 px)."""
    h_img, w_img = image.shape[:2]
    x0 = int(round(x * w_img))
    y0 = int(round(y * h_img))
    cw = max(MIN_CROP_PX, int(round(width * w_img)))
    ch = max(MIN_CROP_PX, int(round(height * h_img)))
    # Keep the minimum size inside the image by shifting, not shrinking.
    x0 = max(0, min(x0, w_img - cw))
    y0 = max(0, min(y0, h_img - ch))
    return image[y0:y0 + ch, x0:x0 + cw].copy()


def contrast_stretch(image: np.ndarray) -> np.ndarray:
    """Grayscale crop with brightness remapped linearly from [min, max] to [0, 255].

    Brightness is the plain mean of the colour channels.
    """
    if image.ndim == 3:
        gray = image[:, :, :3].astype(np.float32).mean(axis=2)
    else:
        gray = image.astype(np.float32)
    lo = float(gray.min()) if gray.size else 0.0
    hi = float(gray.max()) if gray.size else 0.0
    if hi - lo < 1e-6:
        return np.clip(gray, 0, 255).astype(np.uint8)
    out = (gray - lo) * (255.0 / (hi - lo))
    return np.clip(np.rint(out), 0, 255).astype(np.uint8)


def pad_roi(roi: RoiSpec, pad: float = DEFAULT_PAD) -> RoiSpec:
    """Grow *roi* by *pad* on every side, clipped to the card."""
    x = max(0.0, roi.x - pad)
    y = max(0.0, roi.y - pad)
    right = min(1.0, roi.x + roi.width + pad)
    bottom = min(1.0, roi.y + roi.height + pad)
    return RoiSpec(key=roi.key, label=roi.label, x=x, y=y,
                   width=max(0.0, right - x), height=max(0.0, bottom - y))


def to_png_bytes(image: np.ndarray) -> bytes:
    ok, buf = cv2.imencode(".png", image)
    if not ok:
        raise ValueError("PNG encoding failed")
    return buf.tobytes()


# ---------------------------------------------------------------- public ---

def get_rois_for_id_type(id_type: Optional[str],
                         override: Optional[Sequence[RoiSpec]] = None) -> List[RoiSpec]:
    """ROIs to crop for *id_type*: the override if non-empty, else the template.

    Only keys the type's descriptor consumes are returned.
    """
    descriptor = get_descriptor(id_type)
    wanted = set(descriptor.roi_profile.roi_keys)
    template_key = descriptor.card_template_key or id_type
    rois: Iterable[RoiSpec] = override if override else default_rois(template_key)
    kept: List[RoiSpec] = []
    for r in rois:
        if r.key in wanted:
            kept.append(r)
        elif override:
            logger.warning("Ignoring ROI %s: %s does not use it", r.key, descriptor.id_type)
    return kept


def crop_fields_from_card(card_image: np.ndarray, rois: Sequence[RoiSpec],
                          cropper: Optional[Cropper] = None,
                          pad: float = DEFAULT_PAD) -> Dict[str, np.ndarray]:
    """Crop, pad and contrast-stretch each ROI of the card.

    Keys without an ROI are simply absent.  A crop that fails is logged and
    left out; the other fields are unaffected.
    """
    if card_image is None:
        raise ValueError("card_image is required")
    crop = cropper or crop_normalized
    out: Dict[str, np.ndarray] = {}
    for roi in rois:
        padded = pad_roi(roi, pad)
        try:
            sub = crop(card_image, padded.x, padded.y, padded.width, padded.height)
            if sub is None or sub.size == 0:
                logger.warning("Empty crop for ROI %s", roi.key)
                continue
            out[roi.key] = contrast_stretch(sub)
        except Exception:
            logger.warning("Cropping ROI %s failed", roi.key, exc_info=True)
    logger.debug("Cropped %d/%d ROIs", len(out), len(rois))
    return out
