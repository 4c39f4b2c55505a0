"""
Yard OCR Pipeline - Main Pipeline Module
========================================

Contains the inventory sheet pipeline.
"""

from .yard_pipeline import (
    YardListPipeline,
    ScanResult,
    PipelineError,
    ImageLoadError,
    ConfigurationError,
)

__all__ = [
    "YardListPipeline",
    "ScanResult",
    "PipelineError",
    "ImageLoadError",
    "ConfigurationError",
]
