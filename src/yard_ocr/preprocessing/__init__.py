"""
Yard OCR Image Preprocessing Module
===================================

Contrast enhancement for photographed inventory lists.

Usage:
    from yard_ocr.preprocessing import ListImagePreprocessor

    preprocessor = ListImagePreprocessor()
    processed = preprocessor.process(image)
"""

from .list_preprocessor import (
    ListImagePreprocessor,
    PreprocessConfig,
    load_image,
)

__all__ = [
    'ListImagePreprocessor',
    'PreprocessConfig',
    'load_image',
]
