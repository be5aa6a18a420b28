"""Utility modules."""

from .image_processing import (
    ReferenceImage,
    MAX_REFERENCE_SIZE,
    strip_data_url,
    decode_base64_image,
    load_image_from_bytes,
    sniff_mime_type,
    sniff_base64_mime_type,
    resize_image,
    encode_image_to_base64,
    normalize_reference_image,
    fetch_image_bytes,
)
from .maps import MapUrls, build_map_urls, get_maps_api_key
from .report import ReportDesign, build_report_pdf

__all__ = [
    "ReferenceImage",
    "MAX_REFERENCE_SIZE",
    "strip_data_url",
    "decode_base64_image",
    "load_image_from_bytes",
    "sniff_mime_type",
    "sniff_base64_mime_type",
    "resize_image",
    "encode_image_to_base64",
    "normalize_reference_image",
    "fetch_image_bytes",
    "MapUrls",
    "build_map_urls",
    "get_maps_api_key",
    "ReportDesign",
    "build_report_pdf",
]
