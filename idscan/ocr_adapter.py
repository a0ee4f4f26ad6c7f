"""OCR field adapter: the one place that talks to a text recognizer.

Two backends ship with the package:

  * ``EasyOcrRecognizer``  - in-process EasyOCR, reader created lazily
  * ``HelperOcrRecognizer`` - the i-Visit desktop helper's multipass
    endpoint over HTTP (``POST /api/ocr/multipass``)

Both raise :class:`OcrCollaboratorError` when the engine is unavailable or
the request fails; the scan pipeline catches it at the field / whole-card
boundary.
"""

from __future__ import annotations

import logging
import os
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional, Tuple

import cv2
import numpy as np
import requests

from idscan.roi_extractor import to_png_bytes

logger = logging.getLogger("idscan.ocr")

OcrMode = Literal["line", "block"]
OcrProfile = Literal["name", "numeric", "dob"]

DEFAULT_HELPER_URL = "http://localhost:8765"
DEFAULT_HELPER_TIMEOUT = 15.0
MULTIPASS_PATH = "/api/ocr/multipass"


class OcrCollaboratorError(RuntimeError):
    """The recognizer could not produce a result."""


# ---------------------------------------------------------------- result ---

@dataclass
class OcrFieldResult:
    text: str = ""
    confidence: Optional[float] = None        # 0-100
    person_names: Optional[List[str]] = None


# -------------------------------------------------------------- contract ---

class Recognizer(ABC):
    """Turns an image into text."""

    @abstractmethod
    def recognize(self, image: np.ndarray, *, mode: OcrMode = "line",
                  profile: Optional[OcrProfile] = None) -> OcrFieldResult:
        """Recognize *image*.  ``mode="line"`` wants one line back,
        ``"block"`` keeps the card's line breaks.  *profile* is a hint the
        backend may use to narrow its character set."""


def recognize_field(recognizer: Recognizer, image: np.ndarray,
                    mode: OcrMode = "line",
                    profile: Optional[OcrProfile] = None) -> OcrFieldResult:
    """Run *recognizer* on one image; the profile is passed through untouched."""
    result = recognizer.recognize(image, mode=mode, profile=profile)
    logger.debug("OCR mode=%s profile=%s conf=%s text=%r",
                 mode, profile, result.confidence, result.text)
    return result


# --------------------------------------------------------------- EasyOCR ---

@dataclass
class EasyOcrConfig:
    """Tunable parameters for the EasyOCR backend."""
    languages: List[str] = field(default_factory=lambda: ["en"])
    gpu: bool = False

    # Detections below this confidence are dropped.
    min_confidence: float = 0.10

    # Two boxes are on the same line when their centres are closer than
    # this fraction of the taller box.
    line_merge_factor: float = 0.6


_LETTERS = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz"
PROFILE_ALLOWLIST: Dict[str, str] = {
    "name": _LETTERS + " .,'-ÑñÉé",
    "numeric": "0123456789-",
    "dob": _LETTERS + "0123456789 /-,.",
}

# EasyOCR's reader is not safe to share across threads mid-inference.
_easyocr_lock = threading.Lock()


def _group_lines(detections: List[Tuple[List[List[float]], str, float]],
                 merge_factor: float) -> List[str]:
    """Group EasyOCR boxes into reading-order lines."""
    items = []
    for polygon, text, _conf in detections:
        ys = [p[1] for p in polygon]
        xs = [p[0] for p in polygon]
        items.append(((min(ys) + max(ys)) / 2.0, max(ys) - min(ys), min(xs), text))
    items.sort(key=lambda it: (it[0], it[2]))

    lines: List[List[Tuple[float, str]]] = []
    last_cy, last_h = None, 0.0
    for cy, h, x, text in items:
        if last_cy is not None and abs(cy - last_cy) <= merge_factor * max(h, last_h, 1.0):
            lines[-1].append((x, text))
        else:
            lines.append([(x, text)])
            last_cy, last_h = cy, h
    return [" ".join(t for _, t in sorted(ln)) for ln in lines]


class EasyOcrRecognizer(Recognizer):
    """In-process EasyOCR backend."""

    def __init__(self, cfg: Optional[EasyOcrConfig] = None):
        self.cfg = cfg or EasyOcrConfig()
        self._reader = None

    def _get_reader(self):
        """Lazy-initialise the EasyOCR reader (first call downloads models)."""
        if self._reader is not None:
            return self._reader
        with _easyocr_lock:
            if self._reader is None:
                try:
                    import easyocr
                    self._reader = easyocr.Reader(self.cfg.languages, gpu=self.cfg.gpu)
                except Exception as exc:
                    raise OcrCollaboratorError(f"EasyOCR unavailable: {exc}") from exc
        return self._reader

    def recognize(self, image: np.ndarray, *, mode: OcrMode = "line",
                  profile: Optional[OcrProfile] = None) -> OcrFieldResult:
        reader = self._get_reader()
        if image.ndim == 3:
            image = cv2.cvtColor(image, cv2.COLOR_BGR2RGB)
        kwargs: Dict[str, Any] = {}
        if profile in PROFILE_ALLOWLIST:
            kwargs["allowlist"] = PROFILE_ALLOWLIST[profile]
        try:
            with _easyocr_lock:
                raw = reader.readtext(image, **kwargs)
        except Exception as exc:
            raise OcrCollaboratorError(f"EasyOCR failed: {exc}") from exc

        kept = [(poly, text, conf) for (poly, text, conf) in raw
                if conf >= self.cfg.min_confidence and text.strip()]
        if not kept:
            return OcrFieldResult(text="", confidence=None)

        lines = _group_lines(kept, self.cfg.line_merge_factor)
        text = " ".join(lines) if mode == "line" else "\n".join(lines)
        mean_conf = float(np.mean([c for _, _, c in kept])) * 100.0
        return OcrFieldResult(text=text, confidence=round(mean_conf, 2))


# ---------------------------------------------------------------- helper ---

def _env_timeout() -> float:
    raw = os.getenv("IDSCAN_HELPER_TIMEOUT")
    if not raw:
        return DEFAULT_HELPER_TIMEOUT
    try:
        return float(raw)
    except ValueError:
        logger.warning("Bad IDSCAN_HELPER_TIMEOUT %r, using %.0fs", raw, DEFAULT_HELPER_TIMEOUT)
        return DEFAULT_HELPER_TIMEOUT


@dataclass
class HelperOcrConfig:
    """Where the i-Visit helper app listens."""
    base_url: str = field(
        default_factory=lambda: os.getenv("IDSCAN_HELPER_URL", DEFAULT_HELPER_URL))
    timeout: float = field(default_factory=lambda: _env_timeout())


class HelperOcrRecognizer(Recognizer):
    """Posts PNG crops to the helper's multipass OCR endpoint."""

    def __init__(self, cfg: Optional[HelperOcrConfig] = None,
                 session: Optional[requests.Session] = None):
        self.cfg = cfg or HelperOcrConfig()
        self._session = session or requests.Session()

    @property
    def url(self) -> str:
        return self.cfg.base_url.rstrip("/") + MULTIPASS_PATH

    def recognize(self, image: np.ndarray, *, mode: OcrMode = "line",
                  profile: Optional[OcrProfile] = None) -> OcrFieldResult:
        data = {"mode": mode}
        if profile:
            data["profile"] = profile
        files = {"file": ("field.png", to_png_bytes(image), "image/png")}
        try:
            response = self._session.post(self.url, files=files, data=data,
                                          timeout=self.cfg.timeout)
            response.raise_for_status()
            payload = response.json()
        except requests.exceptions.Timeout as exc:
            raise OcrCollaboratorError("OCR helper timed out") from exc
        except requests.exceptions.HTTPError as exc:
            raise OcrCollaboratorError(
                f"OCR helper HTTP error: {exc.response.status_code}") from exc
        except (requests.exceptions.RequestException, ValueError) as exc:
            raise OcrCollaboratorError(f"OCR helper request failed: {exc}") from exc

        conf = payload.get("meanConfidence")
        names = payload.get("personNames")
        return OcrFieldResult(
            text=payload.get("extractedText") or "",
            confidence=float(conf) if isinstance(conf, (int, float)) else None,
            person_names=list(names) if isinstance(names, list) else None,
        )


def build_recognizer(engine: str, helper_url: Optional[str] = None) -> Recognizer:
    """Backend by name: ``"easyocr"`` or ``"helper"``."""
    if engine == "easyocr":
        return EasyOcrRecognizer()
    if engine == "helper":
        cfg = HelperOcrConfig(base_url=helper_url) if helper_url else HelperOcrConfig()
        return HelperOcrRecognizer(cfg)
    raise ValueError(f"Unknown OCR engine: {engine}")
