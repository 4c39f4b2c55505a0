"""
Yard OCR Core Module
====================

Vehicle list parsing and search query helpers.
Pure text processing, no I/O.
"""

from .vehicle_parser import (
    # Tables
    COMMON_MAKES,
    OCR_SUBSTITUTIONS,
    NOISE_MARKERS,
    MIN_LINE_LENGTH,
    CENTURY_CUTOFF,
    # Model
    Vehicle,
    YearMatch,
    VehicleParser,
    get_parser,
    # Stages
    normalize_ocr_text,
    segment_lines,
    extract_year,
    split_make_model,
    clean_text,
    parse_vehicles,
    format_vehicle_list,
)
from .search_query import (
    DEFAULT_SEARCH_LIMIT,
    ExclusionList,
    SearchRequest,
    TitleToken,
    build_search_query,
    normalize_keyword,
    tokenize_title,
)

__all__ = [
    # Tables
    "COMMON_MAKES",
    "OCR_SUBSTITUTIONS",
    "NOISE_MARKERS",
    "MIN_LINE_LENGTH",
    "CENTURY_CUTOFF",
    # Model
    "Vehicle",
    "YearMatch",
    "VehicleParser",
    "get_parser",
    # Stages
    "normalize_ocr_text",
    "segment_lines",
    "extract_year",
    "split_make_model",
    "clean_text",
    "parse_vehicles",
    "format_vehicle_list",
    # Search
    "DEFAULT_SEARCH_LIMIT",
    "ExclusionList",
    "SearchRequest",
    "TitleToken",
    "build_search_query",
    "normalize_keyword",
    "tokenize_title",
]
