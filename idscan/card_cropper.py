"""Card detection and perspective crop from a raw camera frame.

Finds the most card-like convex quadrilateral near the centre of the
frame and warps it to a fixed 1000x600 image.  When no quadrilateral
qualifies, the centre 70% x 50% of the frame (where the on-screen guide
puts the card) is resized instead.  Blurry results are rejected.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import cv2
import numpy as np

logger = logging.getLogger("idscan.cropper")


# ---------------------------------------------------------------- config ---

@dataclass
class CardCropConfig:
    """Tunable parameters for card detection and warping."""
    # Output dimensions (width x height) of the cropped card.
    out_width: int = 1000
    out_height: int = 600

    # Detection runs on a copy downscaled to this longest side.
    max_detect_dim: int = 1000

    blur_ksize: int = 5
    canny_low: int = 50
    canny_high: int = 150
    approx_epsilon_ratio: float = 0.02   # cv2.approxPolyDP epsilon

    # Contour filtering, as fractions of the (downscaled) frame.
    min_area_ratio: float = 0.02
    max_area_ratio: float = 0.90
    min_width_ratio: float = 0.25
    min_height_ratio: float = 0.18
    full_frame_ratio: float = 0.95       # w AND h above this -> frame border
    max_center_dist: float = 0.35
    aspect_range: Tuple[float, float] = (0.5, 4.0)
    target_aspect: float = 1.6           # ID-1 card is ~85.6 x 54 mm

    # Winner must still cover this much of the frame.
    min_coverage_w: float = 0.5
    min_coverage_h: float = 0.35

    # Fallback guide rectangle.
    fallback_w: float = 0.7
    fallback_h: float = 0.5

    # Laplacian std-dev below this -> too blurry.
    min_sharpness: float = 3.5


# ---------------------------------------------------------------- result ---

@dataclass
class CardCropResult:
    success: bool
    image: Optional[np.ndarray] = None
    reason: str = ""
    sharpness: Optional[float] = None
    strategy: str = ""


# -------------------------------------------------------------- helpers ---

def _order_points(pts: np.ndarray) -> np.ndarray:
    """Order 4 points as [top-left, top-right, bottom-right, bottom-left].

      - top-left has the smallest x+y, bottom-right the largest
      - top-right has the smallest y-x, bottom-left the largest
    """
    rect = np.zeros((4, 2), dtype=np.float32)
    s = pts.sum(axis=1)
    d = np.diff(pts, axis=1).ravel()
    rect[0] = pts[np.argmin(s)]
    rect[2] = pts[np.argmax(s)]
    rect[1] = pts[np.argmin(d)]
    rect[3] = pts[np.argmax(d)]
    return rect


def compute_sharpness(image_bgr: np.ndarray) -> float:
    """Standard deviation of the Laplacian of the grayscale image."""
    gray = image_bgr if image_bgr.ndim == 2 else cv2.cvtColor(image_bgr, cv2.COLOR_BGR2GRAY)
    lap = cv2.Laplacian(gray, cv2.CV_64F)
    return float(lap.std())


def _find_card_quad(small: np.ndarray, cfg: CardCropConfig) -> Optional[np.ndarray]:
    """Best-scoring card quadrilateral in *small*, in its own pixel coords."""
    rows, cols = small.shape[:2]
    img_area = float(rows * cols)

    gray = cv2.cvtColor(small, cv2.COLOR_BGR2GRAY) if small.ndim == 3 else small
    blurred = cv2.GaussianBlur(gray, (cfg.blur_ksize, cfg.blur_ksize), 0)
    edges = cv2.Canny(blurred, cfg.canny_low, cfg.canny_high)
    contours, _ = cv2.findContours(edges, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE)

    best_quad, best_rect, best_score = None, None, 0.0
    for cnt in contours:
        peri = cv2.arcLength(cnt, True)
        approx = cv2.approxPolyDP(cnt, cfg.approx_epsilon_ratio * peri, True)
        if len(approx) != 4 or not cv2.isContourConvex(approx):
            continue
        area = cv2.contourArea(approx)
        if area < img_area * cfg.min_area_ratio or area > img_area * cfg.max_area_ratio:
            continue

        x, y, w, h = cv2.boundingRect(approx)
        if w < cols * cfg.min_width_ratio or h < rows * cfg.min_height_ratio:
            continue
        if w >= cols * cfg.full_frame_ratio and h >= rows * cfg.full_frame_ratio:
            continue

        dx = (x + w / 2 - cols / 2) / cols
        dy = (y + h / 2 - rows / 2) / rows
        if (dx * dx + dy * dy) ** 0.5 > cfg.max_center_dist:
            continue

        aspect = w / h if w > h else h / w
        if not cfg.aspect_range[0] <= aspect <= cfg.aspect_range[1]:
            continue

        score = area / (1.0 + abs(aspect - cfg.target_aspect))
        if score > best_score:
            best_score, best_quad, best_rect = score, approx.reshape(4, 2), (w, h)

    if best_quad is None:
        return None
    if best_rect[0] / cols < cfg.min_coverage_w or best_rect[1] / rows < cfg.min_coverage_h:
        return None
    return best_quad.astype(np.float32)


# ---------------------------------------------------------------- public ---

def crop_id_card(image_bgr: np.ndarray,
                 cfg: Optional[CardCropConfig] = None) -> CardCropResult:
    """Detect and crop the card in *image_bgr*.

    Never raises on a bad photo: failures come back as
    ``CardCropResult(success=False, reason=...)`` and the caller keeps using
    the original frame.
    """
    if image_bgr is None:
        raise ValueError("image_bgr is required")
    cfg = cfg or CardCropConfig()

    try:
        rows, cols = image_bgr.shape[:2]
        scale = 1.0
        small = image_bgr
        if max(rows, cols) > cfg.max_detect_dim:
            scale = min(cfg.max_detect_dim / cols, cfg.max_detect_dim / rows)
            small = cv2.resize(image_bgr, (round(cols * scale), round(rows * scale)),
                               interpolation=cv2.INTER_AREA)

        quad = _find_card_quad(small, cfg)
        if quad is not None:
            src = _order_points(quad / scale)
            dst = np.array([
                [0, 0],
                [cfg.out_width - 1, 0],
                [cfg.out_width - 1, cfg.out_height - 1],
                [0, cfg.out_height - 1],
            ], dtype=np.float32)
            M = cv2.getPerspectiveTransform(src, dst)
            card = cv2.warpPerspective(image_bgr, M, (cfg.out_width, cfg.out_height),
                                       flags=cv2.INTER_LINEAR,
                                       borderMode=cv2.BORDER_REPLICATE)
            strategy = "contour_quad"
        else:
            w = round(cols * cfg.fallback_w)
            h = round(rows * cfg.fallback_h)
            x = round((cols - w) / 2)
            y = round((rows - h) / 2)
            roi = image_bgr[y:y + h, x:x + w]
            card = cv2.resize(roi, (cfg.out_width, cfg.out_height),
                              interpolation=cv2.INTER_AREA)
            strategy = "fallback_guide_rect"
    except cv2.error as exc:
        logger.warning("Card crop failed: %s", exc)
        return CardCropResult(success=False, reason="OpenCV error, using original image")

    sharpness = compute_sharpness(card)
    if not np.isfinite(sharpness) or sharpness < cfg.min_sharpness:
        return CardCropResult(success=False, sharpness=sharpness, strategy=strategy,
                              reason="Card too blurry or invalid crop, using original image")

    logger.debug("Card cropped via %s (sharpness %.1f)", strategy, sharpness)
    return CardCropResult(success=True, image=card, sharpness=sharpness, strategy=strategy)
