from __future__ import annotations

import unittest

import numpy as np

from idscan.roi_extractor import (
    contrast_stretch,
    crop_fields_from_card,
    crop_normalized,
    get_rois_for_id_type,
    pad_roi,
    to_png_bytes,
)
from idscan.types import RoiSpec


def _card() -> np.ndarray:
    card = np.zeros((100, 200, 3), dtype=np.uint8)
    card[:, :, 0] = np.linspace(40, 120, 200, dtype=np.uint8)[None, :]
    card[:, :, 1] = 80
    card[:, :, 2] = 80
    return card


class TestImageHelpers(unittest.TestCase):
    def test_crop_normalized_size(self) -> None:
        out = crop_normalized(_card(), 0.5, 0.5, 0.25, 0.1)
        self.assertEqual(out.shape, (10, 50, 3))

    def test_crop_has_minimum_size_inside_image(self) -> None:
        out = crop_normalized(_card(), 1.0, 1.0, 0.0, 0.0)
        self.assertEqual(out.shape, (8, 8, 3))

    def test_contrast_stretch_full_range(self) -> None:
        img = np.array([[50, 75], [100, 60]], dtype=np.uint8)
        out = contrast_stretch(img)
        self.assertEqual(out.dtype, np.uint8)
        self.assertEqual(int(out.min()), 0)
        self.assertEqual(int(out.max()), 255)

    def test_contrast_stretch_colour_is_channel_mean(self) -> None:
        img = np.zeros((1, 2, 3), dtype=np.uint8)
        img[0, 1] = (30, 60, 90)
        out = contrast_stretch(img)
        self.assertEqual(out.shape, (1, 2))
        self.assertEqual(out.tolist(), [[0, 255]])

    def test_contrast_stretch_constant_image(self) -> None:
        img = np.full((4, 4), 77, dtype=np.uint8)
        self.assertTrue((contrast_stretch(img) == 77).all())

    def test_pad_roi_clips_to_card(self) -> None:
        full = pad_roi(RoiSpec("dob", "Date", 0.0, 0.0, 1.0, 1.0))
        self.assertEqual((full.x, full.y, full.width, full.height), (0.0, 0.0, 1.0, 1.0))
        inner = pad_roi(RoiSpec("dob", "Date", 0.1, 0.1, 0.2, 0.2), pad=0.02)
        self.assertAlmostEqual(inner.x, 0.08)
        self.assertAlmostEqual(inner.width, 0.24)

    def test_png_bytes(self) -> None:
        self.assertTrue(to_png_bytes(np.zeros((8, 8), dtype=np.uint8)).startswith(b"\x89PNG"))


class TestRoiSelection(unittest.TestCase):
    def test_template_keys_for_national_id(self) -> None:
        keys = [r.key for r in get_rois_for_id_type("National ID")]
        self.assertEqual(keys, ["lastName", "givenNames", "middleName", "dob", "idNumber"])

    def test_override_filtered_to_consumed_keys(self) -> None:
        override = [RoiSpec("bogus", "Bogus", 0.1, 0.1, 0.2, 0.2),
                    RoiSpec("dob", "Date", 0.1, 0.5, 0.2, 0.1)]
        with self.assertLogs("idscan.roi", level="WARNING") as logs:
            kept = get_rois_for_id_type("PhilHealth ID", override)
        self.assertEqual([r.key for r in kept], ["dob"])
        self.assertTrue(any("bogus" in line for line in logs.output))

    def test_unused_override_key_is_logged_for_split_name_type(self) -> None:
        override = [RoiSpec("fullName", "Full Name", 0.4, 0.4, 0.5, 0.1)]
        with self.assertLogs("idscan.roi", level="WARNING") as logs:
            self.assertEqual(get_rois_for_id_type("National ID", override), [])
        self.assertIn("fullName", logs.output[0])

    def test_empty_override_uses_template(self) -> None:
        keys = [r.key for r in get_rois_for_id_type("SSS ID", [])]
        self.assertEqual(keys, ["fullName", "idNumber"])

    def test_blank_and_unknown_have_no_rois(self) -> None:
        self.assertEqual(get_rois_for_id_type("Blank"), [])
        self.assertEqual(get_rois_for_id_type("Unknown"), [])


class TestCropFields(unittest.TestCase):
    def test_crops_are_gray_uint8(self) -> None:
        out = crop_fields_from_card(_card(), get_rois_for_id_type("PhilHealth ID"))
        self.assertEqual(sorted(out), ["dob", "fullName", "idNumber"])
        for img in out.values():
            self.assertEqual(img.ndim, 2)
            self.assertEqual(img.dtype, np.uint8)

    def test_failed_crop_only_drops_that_field(self) -> None:
        calls = []

        def cropper(image, x, y, w, h):
            calls.append(x)
            if len(calls) == 1:
                raise RuntimeError("boom")
            return crop_normalized(image, x, y, w, h)

        out = crop_fields_from_card(_card(), get_rois_for_id_type("PhilHealth ID"), cropper=cropper)
        self.assertEqual(sorted(out), ["dob", "idNumber"])

    def test_missing_card_raises(self) -> None:
        with self.assertRaises(ValueError):
            crop_fields_from_card(None, [])


if __name__ == "__main__":
    unittest.main()
