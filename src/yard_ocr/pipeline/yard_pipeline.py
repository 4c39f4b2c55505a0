"""
Yard List Pipeline
==================

Ties the pieces together: photographed inventory sheet -> OCR text ->
ordered vehicle records.

Usage:
    from yard_ocr.pipeline import YardListPipeline

    pipeline = YardListPipeline()
    result = pipeline.recognize('inventory.jpg')
    for vehicle in result.vehicles:
        print(vehicle.full_text)

    # Text already produced by another OCR engine
    result = pipeline.parse_text(ocr_text, confidence=0.87)
"""

import time
import logging
import numpy as np
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..config import get_config
from ..core.vehicle_parser import Vehicle, VehicleParser, format_vehicle_list
from ..preprocessing import load_image
from ..providers import OCRProvider, OCRProviderError, OCRProviderFactory

logger = logging.getLogger(__name__)

NO_TEXT_ERROR = "No text detected"


class PipelineError(Exception):
    """
    Base exception for pipeline errors.

    Provides structured error information with error codes for programmatic handling.
    """

    def __init__(self, message: str, error_code: str = "PIPELINE_ERROR", context: Optional[Dict[str, Any]] = None):
        self.message = message
        self.error_code = error_code
        self.context = context or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON serialization."""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "context": self.context,
        }


class ImageLoadError(PipelineError):
    """Raised when image cannot be loaded."""

    def __init__(self, file_path: str, reason: str = "Unknown error"):
        super().__init__(
            message=f"Failed to load image: {file_path}. Reason: {reason}",
            error_code="IMAGE_LOAD_ERROR",
            context={"file_path": file_path, "reason": reason}
        )
        self.file_path = file_path
        self.reason = reason


class ConfigurationError(PipelineError):
    """Raised when pipeline is misconfigured."""

    def __init__(self, message: str, config_key: Optional[str] = None, expected: Optional[str] = None):
        super().__init__(
            message=f"Configuration error: {message}",
            error_code="CONFIG_ERROR",
            context={"config_key": config_key, "expected": expected}
        )
        self.config_key = config_key
        self.expected = expected


@dataclass
class ScanResult:
    """Structured result of one inventory sheet."""
    vehicles: List[Vehicle] = field(default_factory=list)
    raw_text: str = ""
    confidence: float = 0.0
    provider: str = ""
    processing_time_ms: float = 0.0
    error: Optional[str] = None

    @property
    def formatted(self) -> str:
        return format_vehicle_list(self.vehicles)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'vehicles': [v.to_dict() for v in self.vehicles],
            'raw_text': self.raw_text,
            'confidence': self.confidence,
            'provider': self.provider,
            'processing_time_ms': self.processing_time_ms,
            'error': self.error,
        }


@contextmanager
def _timer():
    """Context manager for timing operations."""
    start = time.perf_counter()
    elapsed = {'ms': 0.0}
    try:
        yield elapsed
    finally:
        elapsed['ms'] = (time.perf_counter() - start) * 1000


class YardListPipeline:
    """
    Complete inventory list pipeline.

    Combines:
    - OCR provider (PaddleOCR by default, created lazily)
    - Vehicle list parser

    Thread Safety: parse_text is thread-safe; recognize shares the OCR
    engine and is NOT. Create separate instances for parallel OCR.

    Example:
        pipeline = YardListPipeline()
        result = pipeline.recognize('yard_list.jpg')
        print(result.formatted)
    """

    def __init__(
        self,
        provider: Optional[OCRProvider] = None,
        parser: Optional[VehicleParser] = None,
        provider_type: str = "paddleocr",
        **provider_kwargs
    ):
        """
        Initialize the pipeline.

        Args:
            provider: Ready OCR provider (created from provider_type if None)
            parser: Vehicle parser (built from config if None)
            provider_type: Factory name used when provider is None
            **provider_kwargs: Passed to OCRProviderFactory.create
        """
        config = get_config()
        self.parser = parser or VehicleParser.from_config(config.parser)
        self.provider_type = provider_type
        self._provider = provider
        self._provider_kwargs = provider_kwargs

    @property
    def provider(self) -> OCRProvider:
        """OCR provider, created on first access."""
        if self._provider is None:
            try:
                provider = OCRProviderFactory.create(
                    self.provider_type, auto_initialize=False, **self._provider_kwargs
                )
            except ValueError as e:
                raise ConfigurationError(str(e), config_key="provider_type") from e
            if not provider.is_available:
                raise ConfigurationError(
                    f"OCR provider '{provider.name}' is not installed",
                    config_key="provider_type",
                    expected="an installed OCR engine",
                )
            self._provider = provider
        return self._provider

    def parse_text(self, text: str, confidence: float = 0.0, provider: str = "") -> ScanResult:
        """
        Parse text already produced by an OCR engine.

        Args:
            text: Raw OCR text
            confidence: OCR confidence, carried through for display
            provider: Name of the engine that produced the text

        Returns:
            ScanResult; error is set when the text is blank
        """
        with _timer() as elapsed:
            vehicles = self.parser.parse(text)

        logger.debug(f"Parsed {len(vehicles)} vehicles from {len(text.splitlines())} OCR lines")
        return ScanResult(
            vehicles=vehicles,
            raw_text=text,
            confidence=confidence,
            provider=provider,
            processing_time_ms=elapsed['ms'],
            error=None if text.strip() else NO_TEXT_ERROR,
        )

    def recognize(self, image: Union[str, Path, np.ndarray]) -> ScanResult:
        """
        Recognize an inventory sheet image.

        OCR and image errors are reported through ScanResult.error so the
        caller can show them to the user.
        """
        with _timer() as elapsed:
            try:
                result = self._recognize_internal(image)
            except (PipelineError, OCRProviderError) as e:
                logger.error(f"Recognition failed: {e}")
                result = ScanResult(error=e.message)

        result.processing_time_ms = elapsed['ms']
        return result

    def _recognize_internal(self, image: Union[str, Path, np.ndarray]) -> ScanResult:
        try:
            img = load_image(image)
        except ValueError as e:
            raise ImageLoadError(str(image) if not isinstance(image, np.ndarray) else "numpy_array", str(e)) from e

        if img.size == 0:
            raise ImageLoadError("numpy_array", "Image is empty")

        logger.debug(f"Loaded image, shape={img.shape}")

        ocr_result = self.provider.recognize_with_retry(img)
        logger.debug(f"Raw OCR ({ocr_result.provider}, confidence {ocr_result.confidence:.2f}):\n{ocr_result.text}")

        return self.parse_text(ocr_result.text, ocr_result.confidence, ocr_result.provider)

    def recognize_batch(
        self,
        images: List[Union[str, Path]],
    ) -> List[Dict[str, Any]]:
        """
        Recognize multiple inventory sheets.

        Returns:
            One result dict per image, with the source under 'file'
        """
        results = []
        failed = 0

        for path in images:
            result = self.recognize(path)
            if result.error:
                failed += 1
            output = result.to_dict()
            output['file'] = str(path)
            results.append(output)

        logger.info(f"Completed: {len(images) - failed} successful, {failed} failed")
        return results
