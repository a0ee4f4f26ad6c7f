from __future__ import annotations

import re
import unittest

from idscan import id_parsers
from idscan.id_parsers import (
    detect_id_type,
    extract_address,
    parse_drivers_license,
    parse_generic,
    parse_national_id,
    parse_philhealth_id,
    parse_sss_id,
    parse_umid,
    post_process,
)
from idscan.types import ExtractedInfo, FieldConfidence

NATIONAL_ID_TEXT = "\n".join([
    "REPUBLIKA NG PILIPINAS",
    "PAMBANSANG PAGKAKAKILANLAN",
    "Philippine Identification Card",
    "1234-5678-9012-3456",
    "Apelyido/Last Name",
    "DELA CRUZ",
    "Mga Pangalan/Given Names",
    "JUAN",
    "Gitnang Apelyido/Middle Name",
    "SANTOS",
    "Petsa ng Kapanganakan/Date of Birth",
    "JANUARY 15, 1990",
])

PHILHEALTH_TEXT = "\n".join([
    "PhilHealth",
    "REPUBLIC OF THE PHILIPPINES",
    "12-345678901-2",
    "REYES, MARIA CLARA",
    "Mar. 05, 1985",
])

DRIVERS_LICENSE_TEXT = "\n".join([
    "REPUBLIC OF THE PHILIPPINES",
    "LAND TRANSPORTATION OFFICE",
    "DRIVER'S LICENSE",
    "Last Name, First Name, Middle Name",
    "DELA CRUZ, JUAN SANTOS",
    "1990/01/15",
    "N01-23-456789",
])

UMID_TEXT = "\n".join([
    "UNIFIED MULTI-PURPOSE ID",
    "CRN-0111-1234567-8",
    "SURNAME",
    "GARCIA",
    "GIVEN NAME",
    "PEDRO",
    "MIDDLE NAME",
    "LOPEZ",
    "DATE OF BIRTH",
    "1988/07/21",
])

SSS_TEXT = "\n".join([
    "SOCIAL SECURITY SYSTEM",
    "01-2345678-9",
    "ROSA MARIE LIM",
])

ISO_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class TestNationalId(unittest.TestCase):
    def test_labelled_card(self) -> None:
        info = parse_national_id(NATIONAL_ID_TEXT)
        self.assertEqual(info.id_type, "National ID")
        self.assertEqual(info.id_number, "1234-5678-9012-3456")
        self.assertEqual(info.full_name, "JUAN SANTOS DELA CRUZ")
        self.assertEqual(info.dob, "1990-01-15")
        self.assertEqual(info.confidence.full_name, 0.95)
        self.assertEqual(info.confidence.id_number, 1.0)

    def test_empty_text(self) -> None:
        info = parse_national_id("")
        self.assertEqual((info.full_name, info.dob, info.id_number), ("", "", ""))
        self.assertEqual(info.confidence.id_number, 0.3)


class TestOtherParsers(unittest.TestCase):
    def test_philhealth_comma_name(self) -> None:
        info = parse_philhealth_id(PHILHEALTH_TEXT)
        self.assertEqual(info.full_name, "MARIA CLARA REYES")
        self.assertEqual(info.dob, "1985-03-05")
        self.assertEqual(info.id_number, "12-345678901-2")

    def test_drivers_license(self) -> None:
        info = parse_drivers_license(DRIVERS_LICENSE_TEXT)
        self.assertEqual(info.full_name, "JUAN SANTOS DELA CRUZ")
        self.assertEqual(info.dob, "1990-01-15")
        self.assertEqual(info.id_number, "N01-23-456789")
        self.assertEqual(info.confidence.address, 0.2)

    def test_umid_labels(self) -> None:
        info = parse_umid(UMID_TEXT)
        self.assertEqual(info.id_number, "CRN-0111-1234567-8")
        self.assertEqual(info.full_name, "PEDRO LOPEZ GARCIA")
        self.assertEqual(info.dob, "1988-07-21")

    def test_sss(self) -> None:
        info = parse_sss_id(SSS_TEXT)
        self.assertEqual(info.id_number, "01-2345678-9")
        self.assertEqual(info.full_name, "ROSA MARIE LIM")

    def test_dob_is_empty_or_iso(self) -> None:
        texts = [NATIONAL_ID_TEXT, PHILHEALTH_TEXT, DRIVERS_LICENSE_TEXT, UMID_TEXT,
                 SSS_TEXT, "JUAN DELA CRUZ\nBorn 13/45/1990", "", "garbage 99/99/99"]
        parsers = [parse_national_id, parse_philhealth_id, parse_drivers_license,
                   parse_umid, parse_sss_id, parse_generic]
        for text in texts:
            for parser in parsers:
                dob = parser(text).dob
                self.assertTrue(dob == "" or ISO_RE.match(dob), (parser.__name__, text, dob))

    def test_impossible_numeric_dob_stays_empty(self) -> None:
        self.assertEqual(parse_generic("JUAN DELA CRUZ\nBorn 2005/14/03").dob, "")

    def test_extract_address_under_label(self) -> None:
        text = "Address\n123 RIZAL ST\nBRGY SAN ROQUE\nDate of Birth"
        self.assertEqual(extract_address(text), "123 RIZAL ST, BRGY SAN ROQUE")


class TestPostProcess(unittest.TestCase):
    def _info(self, **kwargs) -> ExtractedInfo:
        base = dict(confidence=FieldConfidence(full_name=0.9, dob=0.9, id_number=0.95))
        base.update(kwargs)
        return ExtractedInfo(**base)

    def test_invalid_fields_blanked_and_capped(self) -> None:
        out = post_process(self._info(full_name="123 456", dob="2099-01-01",
                                      id_number="1234", id_type="National ID"))
        self.assertEqual((out.full_name, out.dob, out.id_number), ("", "", ""))
        self.assertEqual(out.confidence.full_name, 0.2)
        self.assertEqual(out.confidence.dob, 0.2)
        self.assertEqual(out.confidence.id_number, 0.25)

    def test_legacy_license_number_kept_with_lower_confidence(self) -> None:
        out = post_process(self._info(id_number="01-23-456789", id_type="Driver's License"))
        self.assertEqual(out.id_number, "01-23-456789")
        self.assertEqual(out.confidence.id_number, 0.6)

    def test_whitespace_removed_from_id(self) -> None:
        out = post_process(self._info(id_number="1234 -5678-9012-3456", id_type="National ID"))
        self.assertEqual(out.id_number, "1234-5678-9012-3456")


class TestDetectIdType(unittest.TestCase):
    def test_registered_types(self) -> None:
        cases = [
            ("REPUBLIKA NG PILIPINAS 1234-5678-9012-3456", "National ID", 0.95),
            ("CRN-0111-1234567-8", "UMID", 0.95),
            ("LAND TRANSPORTATION OFFICE", "Driver's License", 0.9),
            ("PhilHealth 12-345678901-2", "PhilHealth ID", 0.9),
            ("SOCIAL SECURITY SYSTEM 01-2345678-9", "SSS ID", 0.85),
            ("PERSONS WITH DISABILITY", "PWD ID", 0.8),
            ("QUEZON CITY QCITIZEN", "Quezon City Citizen ID", 0.8),
        ]
        for text, id_type, confidence in cases:
            detected = detect_id_type(text)
            self.assertEqual(detected.id_type, id_type, text)
            self.assertEqual(detected.confidence, confidence, text)

    def test_unsupported_documents_map_to_unknown(self) -> None:
        detected = detect_id_type("PASSPORT")
        self.assertEqual(detected.id_type, "Unknown")
        self.assertEqual(detected.document_kind, "Passport")
        self.assertEqual(detected.confidence, 0.85)

    def test_no_match(self) -> None:
        detected = detect_id_type("hello world")
        self.assertEqual(detected.id_type, "Unknown")
        self.assertEqual(detected.confidence, 0.3)
        self.assertEqual(detect_id_type("").confidence, 0.0)

    def test_validators(self) -> None:
        self.assertTrue(id_parsers.is_valid_umid_crn("crn-0111-1234567-8"))
        self.assertTrue(id_parsers.is_valid_qc_citizen_number("123-45678901"))
        self.assertFalse(id_parsers.is_valid_sss_number("01-234567-9"))


if __name__ == "__main__":
    unittest.main()
