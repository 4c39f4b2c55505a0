"""
OCR Providers - Engine Abstraction Layer
========================================

Reads the text off a photographed inventory sheet. Each provider returns an
OCRResult whose text keeps one detected row per line, which is the input
yard_ocr.core.parse_vehicles expects.

Built-in engines:
- paddleocr (default, local; install the `paddle` extra)

Other engines plug in by subclassing OCRProvider and calling
OCRProviderFactory.register("name", MyProvider).

Usage:
    from yard_ocr.providers import OCRProviderFactory

    provider = OCRProviderFactory.create("paddleocr")
    result = provider.recognize_with_retry("inventory.jpg")
    print(result.text, result.confidence)
"""

import time
import logging
import numpy as np
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Type, Union

from ..config import get_config
from ..preprocessing import ListImagePreprocessor, PreprocessConfig, load_image

logger = logging.getLogger(__name__)

ImageInput = Union[str, Path, np.ndarray]

# Errors worth another attempt; anything else is a caller mistake.
RETRYABLE_ERRORS = (TimeoutError, ConnectionError)


# =============================================================================
# RESULTS AND CONFIGURATION
# =============================================================================

@dataclass
class OCRResult:
    """
    Text read from one inventory sheet.

    Attributes:
        text: Detected rows joined by newlines, top to bottom
        confidence: Mean recognition score (0.0 to 1.0); display only
        raw_response: Engine output, kept for debugging
        bounding_boxes: One entry per detected row (text, confidence, polygon)
        provider: Name of the engine that produced the text
        metadata: Engine-specific extras
    """
    text: str
    confidence: float
    raw_response: Any = None
    bounding_boxes: List[Dict[str, Any]] = field(default_factory=list)
    provider: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization (raw_response omitted)."""
        return {
            "text": self.text,
            "confidence": self.confidence,
            "provider": self.provider,
            "bounding_boxes": self.bounding_boxes,
            "metadata": self.metadata,
        }


@dataclass
class ProviderConfig:
    """Settings shared by every engine."""
    max_retries: int = 3
    retry_delay: float = 1.0  # seconds, doubled after each failure
    preprocess_enabled: bool = True
    preprocess: PreprocessConfig = field(default_factory=PreprocessConfig)


@dataclass
class PaddleOCRConfig(ProviderConfig):
    """PaddleOCR engine settings."""
    lang: str = "en"
    use_gpu: bool = False
    det_db_box_thresh: float = 0.3
    use_doc_orientation_classify: bool = False
    use_doc_unwarping: bool = False
    use_textline_orientation: bool = False
    ocr_version: str = "PP-OCRv4"


class OCRProviderError(Exception):
    """An engine failed to start or to read an image."""

    def __init__(self, message: str, provider: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.provider = provider
        self.details = details or {}
        super().__init__(f"[{provider}] {message}")


# =============================================================================
# PROVIDER INTERFACE
# =============================================================================

class OCRProvider(ABC):
    """
    Interface every OCR engine implements.

    Subclasses set `config`, `_initialized` and (through _init_preprocessor)
    `_preprocessor` in __init__. Sheets are contrast-stretched with
    ListImagePreprocessor before recognition unless preprocessing is off.
    """

    config: ProviderConfig
    _initialized: bool = False
    _preprocessor: Optional[ListImagePreprocessor] = None

    @property
    @abstractmethod
    def name(self) -> str:
        """Engine name shown in results and errors."""

    @property
    @abstractmethod
    def is_available(self) -> bool:
        """True when the engine's libraries are importable."""

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @abstractmethod
    def initialize(self) -> None:
        """Load models. Raises OCRProviderError on failure."""

    @abstractmethod
    def recognize(self, image: ImageInput, **kwargs) -> OCRResult:
        """
        Read the text of one sheet.

        Args:
            image: Image path or BGR numpy array

        Raises:
            OCRProviderError: If the engine fails
        """

    def recognize_with_retry(self, image: ImageInput, **kwargs) -> OCRResult:
        """
        recognize(), retried with exponential backoff on engine, timeout
        and connection errors. Other errors propagate immediately.
        """
        attempts = max(getattr(self.config, "max_retries", 1) or 1, 1)
        delay = getattr(self.config, "retry_delay", 0.0) or 0.0

        for attempt in range(1, attempts + 1):
            try:
                return self.recognize(image, **kwargs)
            except (OCRProviderError,) + RETRYABLE_ERRORS as e:
                if attempt == attempts:
                    raise
                wait = delay * 2 ** (attempt - 1)
                logger.warning(
                    f"{self.name} failed (attempt {attempt}/{attempts}), "
                    f"retrying in {wait:.2f}s: {e}"
                )
                if wait > 0:
                    time.sleep(wait)

    def recognize_batch(self, images: List[ImageInput], **kwargs) -> List[OCRResult]:
        """Read several sheets one after another."""
        return [self.recognize_with_retry(image, **kwargs) for image in images]

    def _init_preprocessor(self, config: ProviderConfig) -> None:
        if config.preprocess_enabled:
            self._preprocessor = ListImagePreprocessor(config=config.preprocess)
        else:
            self._preprocessor = None
        logger.debug(f"{self.name}: preprocessing {'on' if self._preprocessor else 'off'}")

    def _prepare(self, image: ImageInput, preprocess: Optional[bool] = None) -> np.ndarray:
        """Load the sheet and apply preprocessing unless disabled."""
        img = load_image(image)
        if preprocess is None:
            preprocess = self._preprocessor is not None
        if preprocess:
            preprocessor = self._preprocessor or ListImagePreprocessor(config=self.config.preprocess)
            img = preprocessor.process(img)
        return img


# =============================================================================
# PADDLEOCR
# =============================================================================

class PaddleOCRProvider(OCRProvider):
    """
    Local PaddleOCR engine.

    Detected rows are returned in the order PaddleOCR reports them (top to
    bottom), one per line, so each inventory row reaches the parser intact.
    """

    def __init__(self, config: Optional[PaddleOCRConfig] = None):
        self.config = config or PaddleOCRConfig()
        self._ocr = None
        self._initialized = False
        self._init_preprocessor(self.config)

    @property
    def name(self) -> str:
        return "PaddleOCR"

    @property
    def is_available(self) -> bool:
        try:
            import paddleocr  # noqa: F401
        except ImportError:
            return False
        return True

    def initialize(self) -> None:
        if self._initialized:
            return
        if not self.is_available:
            raise OCRProviderError(
                "PaddleOCR is not installed. Run: pip install 'yard-list-ocr[paddle]'",
                provider=self.name,
            )

        from paddleocr import PaddleOCR

        cfg = self.config
        logger.info(f"Loading PaddleOCR {cfg.ocr_version} ({cfg.lang}, {'gpu' if cfg.use_gpu else 'cpu'})")
        try:
            self._ocr = PaddleOCR(
                lang=cfg.lang,
                ocr_version=cfg.ocr_version,
                device="gpu" if cfg.use_gpu else "cpu",
                use_doc_orientation_classify=cfg.use_doc_orientation_classify,
                use_doc_unwarping=cfg.use_doc_unwarping,
                use_textline_orientation=cfg.use_textline_orientation,
                text_det_box_thresh=cfg.det_db_box_thresh,
            )
        except Exception as e:
            raise OCRProviderError(
                f"Failed to initialize PaddleOCR: {e}", provider=self.name, details={"error": str(e)}
            ) from e
        self._initialized = True

    def recognize(self, image: ImageInput, preprocess: Optional[bool] = None, **kwargs) -> OCRResult:
        """
        Read one sheet with PaddleOCR.

        Args:
            image: Image path or numpy array
            preprocess: Force preprocessing on or off (None uses the config)
        """
        if not self._initialized:
            self.initialize()

        img = self._prepare(image, preprocess)

        try:
            output = self._ocr.predict(img)
        except Exception as e:
            raise OCRProviderError(
                f"OCR prediction failed: {e}", provider=self.name, details={"error": str(e)}
            ) from e

        text, confidence, rows = self._parse_result(output)
        return OCRResult(
            text=text,
            confidence=confidence,
            raw_response=output,
            bounding_boxes=rows,
            provider=self.name,
            metadata={"lang": self.config.lang, "line_count": len(rows)},
        )

    @staticmethod
    def _parse_result(output: Any) -> Tuple[str, float, List[Dict[str, Any]]]:
        """Flatten PaddleOCR's predict() output (a list with one page dict)."""
        page = output[0] if isinstance(output, list) and output else output
        if not isinstance(page, dict):
            return "", 0.0, []

        texts = list(page.get('rec_texts', []))
        if not texts:
            return "", 0.0, []
        scores = [float(s) for s in page.get('rec_scores', [])]
        polys = list(page.get('dt_polys', []))

        rows = []
        for i, row_text in enumerate(texts):
            poly = polys[i] if i < len(polys) else None
            rows.append({
                "text": row_text,
                "confidence": scores[i] if i < len(scores) else 0.0,
                "polygon": poly.tolist() if hasattr(poly, "tolist") else poly,
            })
        confidence = float(np.mean(scores)) if scores else 0.0
        return '\n'.join(texts), confidence, rows


# =============================================================================
# FACTORY
# =============================================================================

class OCRProviderFactory:
    """
    Creates providers by name.

    Usage:
        provider = OCRProviderFactory.create("paddleocr", lang="en")
    """

    _providers: Dict[str, Type[OCRProvider]] = {
        "paddleocr": PaddleOCRProvider,
    }

    @classmethod
    def create(cls, name: str, auto_initialize: bool = True, **kwargs) -> OCRProvider:
        """
        Build a provider, filling unset options from get_config().

        Args:
            name: Registered provider name (case-insensitive)
            auto_initialize: Load the engine now when it is installed
            **kwargs: Config overrides (lang, use_gpu, max_retries, ...)

        Raises:
            ValueError: If no provider is registered under name
        """
        key = name.lower()
        provider_class = cls._providers.get(key)
        if provider_class is None:
            raise ValueError(
                f"Unknown provider type: '{name}'. Available: {cls.list_available()}"
            )

        provider = provider_class(config=cls._build_config(provider_class, **kwargs))
        if auto_initialize and provider.is_available:
            provider.initialize()
        return provider

    @classmethod
    def _build_config(cls, provider_class: Type[OCRProvider], **kwargs) -> ProviderConfig:
        config = get_config()
        shared = dict(
            max_retries=kwargs.get('max_retries', config.ocr.max_retries),
            retry_delay=kwargs.get('retry_delay', config.ocr.retry_delay),
            preprocess_enabled=kwargs.get('preprocess_enabled', config.preprocessing.enabled),
            preprocess=PreprocessConfig.from_config(config.preprocessing),
        )
        if issubclass(provider_class, PaddleOCRProvider):
            return PaddleOCRConfig(
                lang=kwargs.get('lang', config.ocr.language),
                use_gpu=kwargs.get('use_gpu', config.ocr.use_gpu),
                det_db_box_thresh=kwargs.get('det_db_box_thresh', config.ocr.det_db_box_thresh),
                ocr_version=kwargs.get('ocr_version', config.ocr.ocr_version),
                use_doc_orientation_classify=config.ocr.use_doc_orientation_classify,
                use_doc_unwarping=config.ocr.use_doc_unwarping,
                use_textline_orientation=config.ocr.use_textline_orientation,
                **shared,
            )
        return ProviderConfig(**shared)

    @classmethod
    def list_available(cls) -> List[str]:
        """Registered provider names."""
        return sorted(cls._providers)

    @classmethod
    def register(cls, name: str, provider_class: type) -> None:
        """Register an extra engine under name."""
        if not (isinstance(provider_class, type) and issubclass(provider_class, OCRProvider)):
            raise TypeError(
                f"Provider class must inherit from OCRProvider, got {getattr(provider_class, '__name__', provider_class)}"
            )
        cls._providers[name.lower()] = provider_class
        logger.info(f"Registered OCR provider: {name.lower()}")
