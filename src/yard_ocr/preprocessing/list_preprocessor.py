"""
Inventory List Image Preprocessor
=================================

Prepares photographed yard inventory sheets for OCR.

Printed lists are dark text on a light page, so a global stretch is enough:
- Grayscale conversion
- Linear contrast/brightness stretch around mid-gray
- Hard threshold: near-white pixels become white, near-black become black
- Optional downscale of oversized photos
"""

import cv2
import numpy as np
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
import logging

logger = logging.getLogger(__name__)


@dataclass
class PreprocessConfig:
    """Configuration for list image preprocessing."""

    contrast: float = 1.5
    brightness: float = 20.0

    # Stretched values above white_threshold -> 255, below black_threshold -> 0
    white_threshold: int = 160
    black_threshold: int = 100

    # Longest side after downscaling (0 disables resizing)
    max_image_dimension: int = 4096

    @classmethod
    def from_config(cls, config) -> 'PreprocessConfig':
        """Create from a PreprocessingConfig section."""
        return cls(
            contrast=config.contrast,
            brightness=config.brightness,
            white_threshold=config.white_threshold,
            black_threshold=config.black_threshold,
            max_image_dimension=config.max_image_dimension,
        )


class ListImagePreprocessor:
    """
    Contrast enhancement for printed inventory lists.

    Example:
        preprocessor = ListImagePreprocessor()
        processed = preprocessor.process(image)

    Thread Safety: This class is thread-safe for concurrent use.
    """

    def __init__(self, config: Optional[PreprocessConfig] = None):
        self.config = config or PreprocessConfig()
        if self.config.black_threshold > self.config.white_threshold:
            raise ValueError(
                f"black_threshold ({self.config.black_threshold}) must not exceed "
                f"white_threshold ({self.config.white_threshold})"
            )

    def process(self, image: np.ndarray) -> np.ndarray:
        """
        Process image for OCR.

        Args:
            image: Input image (BGR or grayscale)

        Returns:
            Enhanced image (BGR format, compatible with PaddleOCR)

        Raises:
            ValueError: If image is invalid
        """
        if image is None or image.size == 0:
            raise ValueError("Input image is empty or None")

        image = self._limit_size(image)
        gray = self._to_gray(image)

        stretched = (gray.astype(np.float32) - 128.0) * self.config.contrast + 128.0 + self.config.brightness
        stretched[stretched > self.config.white_threshold] = 255.0
        stretched[stretched < self.config.black_threshold] = 0.0
        enhanced = np.clip(stretched, 0, 255).astype(np.uint8)

        return cv2.cvtColor(enhanced, cv2.COLOR_GRAY2BGR)

    def process_batch(self, images: List[np.ndarray]) -> List[np.ndarray]:
        return [self.process(img) for img in images]

    def _to_gray(self, image: np.ndarray) -> np.ndarray:
        if image.ndim == 2:
            return image
        if image.shape[2] == 4:
            return cv2.cvtColor(image, cv2.COLOR_BGRA2GRAY)
        return cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)

    def _limit_size(self, image: np.ndarray) -> np.ndarray:
        """Downscale so the longest side fits max_image_dimension."""
        limit = self.config.max_image_dimension
        h, w = image.shape[:2]
        if limit <= 0 or max(h, w) <= limit:
            return image

        scale = limit / max(h, w)
        new_size = (max(1, int(w * scale)), max(1, int(h * scale)))
        logger.debug(f"Downscaling {w}x{h} image to {new_size[0]}x{new_size[1]}")
        return cv2.resize(image, new_size, interpolation=cv2.INTER_AREA)

    def analyze_image(self, image: np.ndarray) -> Dict[str, Any]:
        """
        Analyze image characteristics for debugging/tuning.

        Args:
            image: Input image

        Returns:
            Dict with analysis results
        """
        gray = self._to_gray(image)

        return {
            'width': image.shape[1],
            'height': image.shape[0],
            'channels': image.shape[2] if image.ndim > 2 else 1,
            'contrast': float(np.std(gray)),
            'brightness': float(np.mean(gray)),
            'min_pixel': int(gray.min()),
            'max_pixel': int(gray.max()),
        }


def load_image(image: Union[str, Path, np.ndarray]) -> np.ndarray:
    """
    Load image from path or return numpy array.

    Raises:
        ValueError: If image cannot be loaded
    """
    if isinstance(image, np.ndarray):
        return image

    path = Path(image)
    if not path.exists():
        raise ValueError(f"Image file not found: {path}")

    img = cv2.imread(str(path))
    if img is None:
        raise ValueError(f"Failed to load image: {path}")

    return img
