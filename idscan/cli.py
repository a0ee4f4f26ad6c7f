"""Command-line entry point: scan one ID card photo."""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from typing import List, Optional

import cv2

from idscan.card_cropper import crop_id_card
from idscan.card_templates import CustomRoiStore, load_rois_file
from idscan.ocr_adapter import build_recognizer
from idscan.pipeline import ScanConfig, ScanPipeline
from idscan.registry import list_selectable_types, normalize_id_type

EXIT_OK = 0
EXIT_IO = 1
EXIT_UNUSABLE = 2


def _parser() -> argparse.ArgumentParser:
    types = ", ".join(t["value"] for t in list_selectable_types(include_internal=True))
    parser = argparse.ArgumentParser(
        prog="idscan", description="Extract name, birth date and ID number from an ID card photo")
    parser.add_argument("image", help="Path to the card photo")
    parser.add_argument("--id-type", "-t", required=True,
                        help=f"Document type ({types}); aliases like 'philsys' work")
    parser.add_argument("--no-crop", action="store_true",
                        help="Image is already a cropped card; skip card detection")
    parser.add_argument("--rois", default=None,
                        help="JSON file with ROI overrides for this type")
    parser.add_argument("--roi-store", default=None,
                        help="Directory of saved custom ROI layouts")
    parser.add_argument("--engine", choices=["easyocr", "helper"], default="easyocr",
                        help="OCR backend (default: easyocr)")
    parser.add_argument("--helper-url", default=None,
                        help="Base URL of the OCR helper (default: $IDSCAN_HELPER_URL)")
    parser.add_argument("--workers", type=int, default=1,
                        help="Parallel field OCR workers")
    parser.add_argument("--output-dir", "-o", default=None,
                        help="Write scan.json and ROI crops here")
    parser.add_argument("--verbose", "-v", action="store_true")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = _parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not os.path.isfile(args.image):
        print(f"ERROR: File not found: {args.image}")
        return EXIT_IO
    image = cv2.imread(args.image)
    if image is None:
        print(f"ERROR: Cannot read image: {args.image}")
        return EXIT_IO

    id_type = normalize_id_type(args.id_type) or "Unknown"

    card = image
    if not args.no_crop:
        crop = crop_id_card(image)
        if crop.success:
            card = crop.image
        else:
            print(f"[WARN] {crop.reason}")

    rois = None
    if args.rois:
        rois = load_rois_file(args.rois)
    elif args.roi_store:
        store = CustomRoiStore(args.roi_store)
        rois = store.get(id_type)

    pipeline = ScanPipeline(build_recognizer(args.engine, args.helper_url),
                            ScanConfig(max_workers=max(1, args.workers)))
    result = pipeline.scan_card_image(card, id_type, custom_rois=rois)

    sep = "=" * 60
    print(sep)
    print(f"  SCAN RESULT ({id_type})")
    print(sep)
    print(f"  full name : {result.merged.full_name}")
    print(f"  birth date: {result.merged.dob}")
    print(f"  ID number : {result.merged.id_number}")
    print(f"  ID type   : {result.merged.id_type}")
    print(f"  usable    : {result.has_useful_data}")
    if result.failed_fields:
        print(f"  failed    : {', '.join(result.failed_fields)}")
    print(sep)

    if args.output_dir:
        os.makedirs(args.output_dir, exist_ok=True)
        cv2.imwrite(os.path.join(args.output_dir, "card.png"), card)
        for key, roi_img in result.roi_images.items():
            cv2.imwrite(os.path.join(args.output_dir, f"roi_{key}.png"), roi_img)
        json_path = os.path.join(args.output_dir, "scan.json")
        with open(json_path, "w", encoding="utf-8") as f:
            json.dump(result.to_dict(), f, indent=2, ensure_ascii=False)
        print(f"JSON saved -> {json_path}")

    return EXIT_OK if result.has_useful_data else EXIT_UNUSABLE


if __name__ == "__main__":
    sys.exit(main())
