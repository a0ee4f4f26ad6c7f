from __future__ import annotations

import unittest

import cv2
import numpy as np

from idscan.card_cropper import CardCropConfig, _order_points, compute_sharpness, crop_id_card


def _photo_with_card() -> np.ndarray:
    """Dark table, light card in the middle with printed text on it."""
    frame = np.full((480, 640, 3), 30, dtype=np.uint8)
    cv2.rectangle(frame, (80, 90), (560, 390), (235, 235, 235), thickness=-1)
    for i, line in enumerate(["REPUBLIKA NG PILIPINAS", "DELA CRUZ", "JUAN SANTOS", "1990-01-15"]):
        cv2.putText(frame, line, (110, 150 + i * 55), cv2.FONT_HERSHEY_SIMPLEX,
                    0.8, (20, 20, 20), 2, cv2.LINE_AA)
    return frame


class TestCropIdCard(unittest.TestCase):
    def test_detects_card_quad(self) -> None:
        res = crop_id_card(_photo_with_card())
        self.assertTrue(res.success, res.reason)
        self.assertEqual(res.strategy, "contour_quad")
        self.assertEqual(res.image.shape, (600, 1000, 3))
        self.assertGreater(res.sharpness, CardCropConfig().min_sharpness)

    def test_featureless_frame_is_rejected(self) -> None:
        res = crop_id_card(np.full((480, 640, 3), 128, dtype=np.uint8))
        self.assertFalse(res.success)
        self.assertEqual(res.strategy, "fallback_guide_rect")
        self.assertIsNone(res.image)

    def test_missing_image_raises(self) -> None:
        with self.assertRaises(ValueError):
            crop_id_card(None)

    def test_custom_output_size(self) -> None:
        res = crop_id_card(_photo_with_card(), CardCropConfig(out_width=500, out_height=300))
        self.assertTrue(res.success, res.reason)
        self.assertEqual(res.image.shape[:2], (300, 500))


class TestHelpers(unittest.TestCase):
    def test_order_points(self) -> None:
        pts = np.array([[100, 10], [0, 60], [0, 0], [100, 60]], dtype=np.float32)
        ordered = _order_points(pts)
        self.assertEqual(ordered.tolist(), [[0, 0], [100, 10], [100, 60], [0, 60]])

    def test_sharpness_of_flat_image_is_zero(self) -> None:
        self.assertEqual(compute_sharpness(np.full((20, 20), 90, dtype=np.uint8)), 0.0)


if __name__ == "__main__":
    unittest.main()
