from __future__ import annotations

import json
import shutil
import tempfile
import unittest
from pathlib import Path

from idscan.card_templates import (
    CustomRoiStore,
    default_rois,
    get_template,
    list_templates,
    load_rois_file,
    storage_slug,
)
from idscan.types import RoiSpec


class TestTemplates(unittest.TestCase):
    def test_every_template_stays_inside_the_card(self) -> None:
        for tpl in list_templates():
            for roi in tpl.rois:
                self.assertLessEqual(roi.x + roi.width, 1.0 + 1e-9, (tpl.id_type, roi.key))
                self.assertLessEqual(roi.y + roi.height, 1.0 + 1e-9, (tpl.id_type, roi.key))

    def test_lookup(self) -> None:
        self.assertEqual([r.key for r in default_rois("SSS ID")], ["fullName", "idNumber"])
        self.assertEqual(default_rois("Library Card"), [])
        self.assertIsNone(get_template(None))

    def test_roi_spec_rejects_out_of_range(self) -> None:
        with self.assertRaises(ValueError):
            RoiSpec("dob", "Date", 1.5, 0.0, 0.1, 0.1)

    def test_storage_slug(self) -> None:
        self.assertEqual(storage_slug("Driver's License"), "drivers-license")
        self.assertEqual(storage_slug("National ID"), "national-id")


class TestCustomRoiStore(unittest.TestCase):
    def setUp(self) -> None:
        self.tmp = Path(tempfile.mkdtemp())
        self.store = CustomRoiStore(self.tmp)
        self.rois = [RoiSpec("dob", "Date of Birth", 0.4, 0.7, 0.3, 0.1),
                     RoiSpec("idNumber", "ID Number", 0.0, 0.25, 0.4, 0.12)]

    def tearDown(self) -> None:
        shutil.rmtree(self.tmp, ignore_errors=True)

    def test_save_get_reset(self) -> None:
        self.assertIsNone(self.store.get("National ID"))
        path = self.store.save("National ID", self.rois)
        self.assertEqual(path.name, "ivisit-custom-rois-national-id.json")

        payload = json.loads(path.read_text(encoding="utf-8"))
        self.assertEqual(payload["version"], 1)
        self.assertEqual(payload["id_type"], "National ID")

        self.assertEqual(self.store.get("National ID"), self.rois)
        self.assertTrue(self.store.has("National ID"))
        self.assertEqual(self.store.merged_rois("National ID"), self.rois)

        self.store.reset("National ID")
        self.assertIsNone(self.store.get("National ID"))
        self.store.reset("National ID")

    def test_save_accepts_dicts(self) -> None:
        self.store.save("UMID", [r.to_dict() for r in self.rois])
        self.assertEqual(self.store.get("UMID"), self.rois)

    def test_corrupt_file_reads_as_missing(self) -> None:
        path = self.store.save("UMID", self.rois)
        path.write_text("{not json", encoding="utf-8")
        self.assertIsNone(self.store.get("UMID"))
        self.assertEqual(self.store.merged_rois("UMID"), default_rois("UMID"))

    def test_load_rois_file_accepts_list_or_payload(self) -> None:
        bare = self.tmp / "bare.json"
        bare.write_text(json.dumps([r.to_dict() for r in self.rois]), encoding="utf-8")
        self.assertEqual(load_rois_file(bare), self.rois)
        saved = self.store.save("PWD ID", self.rois)
        self.assertEqual(load_rois_file(saved), self.rois)


if __name__ == "__main__":
    unittest.main()
