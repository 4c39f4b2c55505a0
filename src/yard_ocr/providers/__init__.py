"""
Yard OCR Providers Module
=========================

OCR provider abstraction layer.

Supported providers:
- PaddleOCR (install the `paddle` extra)

Usage:
    from yard_ocr.providers import OCRProviderFactory

    provider = OCRProviderFactory.create("paddleocr")
    result = provider.recognize(image_path)
    print(result.text, result.confidence)
"""

from .ocr_providers import (
    OCRResult,
    OCRProvider,
    OCRProviderError,
    PaddleOCRProvider,
    OCRProviderFactory,
    PaddleOCRConfig,
    ProviderConfig,
)

__all__ = [
    "OCRResult",
    "OCRProvider",
    "OCRProviderError",
    "PaddleOCRProvider",
    "OCRProviderFactory",
    "PaddleOCRConfig",
    "ProviderConfig",
]
