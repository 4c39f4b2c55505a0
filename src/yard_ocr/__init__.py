"""
Yard List OCR
=============

Turns photographed vehicle-yard inventory lists into structured
"YEAR MAKE MODEL" records.

Package Structure:
    yard_ocr/
    ├── core/           # Vehicle list parser, search query helpers
    ├── pipeline/       # Image -> OCR -> vehicles pipeline
    ├── providers/      # OCR backends
    ├── preprocessing/  # Inventory sheet image enhancement
    ├── config.py       # Environment-driven settings
    └── cli.py          # yard-ocr command

Quick Start:
    from yard_ocr import parse_vehicles, format_vehicle_list

    vehicles = parse_vehicles("2015 CHEVROLETIMPALA\\n99 FORD F150")
    print(format_vehicle_list(vehicles))

    # Full pipeline (requires the paddle extra)
    from yard_ocr import YardListPipeline
    result = YardListPipeline().recognize("inventory.jpg")

Version: 1.0.0
"""

__version__ = "1.0.0"
__author__ = "Yard OCR Team"

# Core exports (lightweight, always available)
from .core import (
    Vehicle,
    YearMatch,
    VehicleParser,
    normalize_ocr_text,
    segment_lines,
    extract_year,
    split_make_model,
    clean_text,
    parse_vehicles,
    format_vehicle_list,
    build_search_query,
    ExclusionList,
    SearchRequest,
)

__all__ = [
    "__version__",
    "__author__",
    # Core
    "Vehicle",
    "YearMatch",
    "VehicleParser",
    "normalize_ocr_text",
    "segment_lines",
    "extract_year",
    "split_make_model",
    "clean_text",
    "parse_vehicles",
    "format_vehicle_list",
    "build_search_query",
    "ExclusionList",
    "SearchRequest",
]


# Lazy imports for the pipeline (OpenCV dependency)
def __getattr__(name: str):
    """Lazy import for pipeline modules."""
    if name == "YardListPipeline":
        from .pipeline import YardListPipeline
        return YardListPipeline
    elif name == "ScanResult":
        from .pipeline import ScanResult
        return ScanResult
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
