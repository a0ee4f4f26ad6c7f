from __future__ import annotations

import unittest

from idscan.registry import (
    IdType,
    get_descriptor,
    is_registered,
    list_selectable_types,
    normalize_id_type,
    parse_text_by_id_type,
)

from tests.test_id_parsers import NATIONAL_ID_TEXT


class TestLookup(unittest.TestCase):
    def test_unregistered_falls_back_to_unknown(self) -> None:
        self.assertEqual(get_descriptor("Library Card").id_type, "Unknown")
        self.assertEqual(get_descriptor(None).id_type, "Unknown")
        self.assertFalse(is_registered("Library Card"))
        self.assertTrue(is_registered(IdType.UMID))

    def test_only_national_id_uses_split_names(self) -> None:
        split = [t.value for t in IdType if get_descriptor(t).roi_profile.uses_split_name_rois]
        self.assertEqual(split, ["National ID"])

    def test_blank_has_no_rois_or_validators(self) -> None:
        blank = get_descriptor(IdType.BLANK)
        self.assertEqual(blank.roi_profile.roi_keys, ())
        self.assertIsNone(blank.validate_id_number)
        self.assertIsNone(blank.validate_full_name)

    def test_selectable_types(self) -> None:
        values = [t["value"] for t in list_selectable_types()]
        self.assertNotIn("Unknown", values)
        self.assertNotIn("Blank", values)
        self.assertIn("National ID", values)
        self.assertEqual(len(list_selectable_types(include_internal=True)), len(IdType))


class TestNormalizeIdType(unittest.TestCase):
    def test_aliases(self) -> None:
        self.assertEqual(normalize_id_type("NATIONAL_ID"), "National ID")
        self.assertEqual(normalize_id_type("philsys"), "National ID")
        self.assertEqual(normalize_id_type("drivers-license"), "Driver's License")
        self.assertEqual(normalize_id_type("pwd"), "PWD ID")
        self.assertEqual(normalize_id_type("Blank"), "Blank")
        self.assertEqual(normalize_id_type(IdType.UMID), "UMID")

    def test_empty_and_unknown(self) -> None:
        self.assertEqual(normalize_id_type(""), "")
        self.assertEqual(normalize_id_type(None), "")
        self.assertEqual(normalize_id_type("library card"), "Unknown")


class TestParseByType(unittest.TestCase):
    def test_registered_type_uses_its_parser(self) -> None:
        info = parse_text_by_id_type(NATIONAL_ID_TEXT, "National ID")
        self.assertEqual(info.id_type, "National ID")
        self.assertEqual(info.id_number, "1234-5678-9012-3456")

    def test_unknown_type_is_redetected(self) -> None:
        info = parse_text_by_id_type(NATIONAL_ID_TEXT, "Unknown")
        self.assertEqual(info.id_type, "National ID")
        self.assertEqual(info.full_name, "JUAN SANTOS DELA CRUZ")

    def test_redetection_threshold(self) -> None:
        info = parse_text_by_id_type(NATIONAL_ID_TEXT, "Unknown", redetect_min_confidence=0.99)
        self.assertEqual(info.id_type, "Unknown")


if __name__ == "__main__":
    unittest.main()
