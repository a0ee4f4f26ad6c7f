# Philippine ID card scan engine
# This package contains:
#   - card_cropper: Card detection + perspective crop from a camera frame
#   - card_templates: Default ROI layouts and the custom-layout store
#   - roi_extractor: ROI crop + contrast stretch per field
#   - ocr_adapter: EasyOCR / helper-app recognizers
#   - date_normalizer: Free-form date -> ISO
#   - heuristics: Name / date / ID-token predicates and pickers
#   - field_helpers: Cleaners for single-field crop text
#   - id_parsers: Per-type whole-card parsers + type detection
#   - registry: Document-type descriptors
#   - merge: ROI vs whole-card field fusion
#   - validation: Accept / reject merged fields
#   - pipeline: End-to-end scan of one card image
#   - cli: `idscan` command

__version__ = "0.1.0"
