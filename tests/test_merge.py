from __future__ import annotations

import unittest

from idscan.merge import merge_roi_and_full_results, merged_id_type
from idscan.types import ExtractedInfo, RoiMergeInput


def _merge(id_type, roi_name="", roi_dob="", roi_id="", full_name="", full_dob="", full_id=""):
    return merge_roi_and_full_results(
        id_type,
        RoiMergeInput(full_name=roi_name, dob=roi_dob, id_number=roi_id),
        ExtractedInfo(full_name=full_name, dob=full_dob, id_number=full_id, id_type=id_type or ""),
    )


class TestMergeName(unittest.TestCase):
    def test_reasonable_roi_name_wins(self) -> None:
        for id_type in ("National ID", "PhilHealth ID", "Unknown"):
            res = _merge(id_type, roi_name="MARIA CLARA REYES", full_name="JOSE RIZAL MERCADO")
            self.assertEqual(res.merged_full_name, "MARIA CLARA REYES", id_type)

    def test_unreasonable_roi_name_falls_back_to_whole_card(self) -> None:
        res = _merge("PhilHealth ID", roi_name="A 1 B", full_name="JOSE RIZAL MERCADO")
        self.assertEqual(res.merged_full_name, "JOSE RIZAL MERCADO")

    def test_split_name_type_keeps_a_non_empty_fallback(self) -> None:
        res = _merge("National ID", roi_name="X1", full_name="")
        self.assertEqual(res.merged_full_name, "X1")
        res = _merge("National ID", roi_name="ab", full_name="REPUBLIKA NG PILIPINAS")
        self.assertEqual(res.merged_full_name, "REPUBLIKA NG PILIPINAS")


class TestMergeDob(unittest.TestCase):
    def test_roi_dob_has_priority(self) -> None:
        res = _merge("UMID", roi_dob="1990-01-15", full_dob="1980-02-02")
        self.assertEqual(res.merged_dob, "1990-01-15")
        res = _merge("UMID", full_dob="1980-02-02")
        self.assertEqual(res.merged_dob, "1980-02-02")


class TestMergeIdNumber(unittest.TestCase):
    def test_valid_candidate_wins(self) -> None:
        res = _merge("National ID", roi_id="1234", full_id="1111-2222-3333-4444")
        self.assertEqual(res.merged_id_number, "1111-2222-3333-4444")

    def test_both_valid_prefers_roi_on_tie(self) -> None:
        res = _merge("National ID", roi_id="1234-5678-9012-3456", full_id="1111-2222-3333-4444")
        self.assertEqual(res.merged_id_number, "1234-5678-9012-3456")

    def test_both_valid_prefers_longer(self) -> None:
        res = _merge("Driver's License", roi_id="N01-23-456789", full_id="N01-23-456789 X")
        self.assertEqual(res.merged_id_number, "N01-23-456789X")

    def test_neither_valid_takes_roi_without_whitespace(self) -> None:
        res = _merge("National ID", roi_id="12 34", full_id="999")
        self.assertEqual(res.merged_id_number, "1234")

    def test_no_validator(self) -> None:
        res = _merge("PWD ID", roi_id="", full_id="PWD-123")
        self.assertEqual(res.merged_id_number, "PWD-123")


class TestMergeProperties(unittest.TestCase):
    def test_split_name_precedence(self) -> None:
        res = _merge("National ID", roi_name="JUAN DELA CRUZ", full_name="xk2 99")
        self.assertEqual(res.merged_full_name, "JUAN DELA CRUZ")

    def test_id_only_roi_validates(self) -> None:
        res = _merge("National ID", roi_id="1234-5678-9012-3456", full_id="99-999999999-9")
        self.assertEqual(res.merged_id_number, "1234-5678-9012-3456")

    def test_same_inputs_same_output(self) -> None:
        args = dict(roi_name="JUAN DELA CRUZ", roi_dob="1990-01-15", roi_id="12 34",
                    full_name="JOSE RIZAL", full_dob="", full_id="1234-5678-9012-3456")
        self.assertEqual(_merge("National ID", **args), _merge("National ID", **args))


class TestMergedIdType(unittest.TestCase):
    def test_whole_card_type_wins(self) -> None:
        self.assertEqual(merged_id_type("National ID", ExtractedInfo(id_type="UMID")), "UMID")
        self.assertEqual(merged_id_type("National ID", ExtractedInfo(id_type="")), "National ID")
        self.assertEqual(merged_id_type(None, ExtractedInfo(id_type="")), "Unknown")


if __name__ == "__main__":
    unittest.main()
