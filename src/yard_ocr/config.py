"""
Pipeline Configuration - Centralized Settings
==============================================

All configurable parameters in one place.
Supports environment variable overrides.

Usage:
    from yard_ocr.config import get_config
    config = get_config()
    print(config.parser.century_cutoff)

Environment Variables:
    YARD_CENTURY_CUTOFF=30
    YARD_MIN_LINE_LENGTH=5
    YARD_OCR_LANG=en
    YARD_USE_GPU=false
    YARD_LOG_LEVEL=DEBUG
"""

import os
import json
import logging
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Optional, Dict, Any

from .core.vehicle_parser import CENTURY_CUTOFF, MIN_LINE_LENGTH
from .core.search_query import DEFAULT_SEARCH_LIMIT, MIN_EXCLUDE_LENGTH

logger = logging.getLogger(__name__)


def _get_env_float(key: str, default: float) -> float:
    """Get float from environment variable."""
    value = os.environ.get(key)
    if value is not None:
        try:
            return float(value)
        except ValueError:
            logger.warning(f"Invalid float for {key}: {value}, using default {default}")
    return default


def _get_env_int(key: str, default: int) -> int:
    """Get int from environment variable."""
    value = os.environ.get(key)
    if value is not None:
        try:
            return int(value)
        except ValueError:
            logger.warning(f"Invalid int for {key}: {value}, using default {default}")
    return default


def _get_env_bool(key: str, default: bool) -> bool:
    """Get bool from environment variable."""
    value = os.environ.get(key)
    if value is not None:
        return value.lower() in ('true', '1', 'yes', 'on')
    return default


def _get_env_str(key: str, default: str) -> str:
    """Get string from environment variable."""
    return os.environ.get(key, default)


@dataclass
class ParserConfig:
    """Vehicle list parsing configuration."""

    # Two-digit years up to this value are read as 20xx
    century_cutoff: int = field(
        default_factory=lambda: _get_env_int('YARD_CENTURY_CUTOFF', CENTURY_CUTOFF)
    )
    min_line_length: int = field(
        default_factory=lambda: _get_env_int('YARD_MIN_LINE_LENGTH', MIN_LINE_LENGTH)
    )


@dataclass
class PreprocessingConfig:
    """Image preprocessing configuration."""

    enabled: bool = field(
        default_factory=lambda: _get_env_bool('YARD_PREPROCESS', True)
    )
    contrast: float = field(
        default_factory=lambda: _get_env_float('YARD_CONTRAST', 1.5)
    )
    brightness: float = field(
        default_factory=lambda: _get_env_float('YARD_BRIGHTNESS', 20.0)
    )

    # Pixels above/below these become pure white/black
    white_threshold: int = 160
    black_threshold: int = 100

    # Maximum image dimension (prevents OOM)
    max_image_dimension: int = field(
        default_factory=lambda: _get_env_int('YARD_MAX_IMAGE_DIM', 4096)
    )


@dataclass
class OCRConfig:
    """PaddleOCR configuration."""

    language: str = field(
        default_factory=lambda: _get_env_str('YARD_OCR_LANG', 'en')
    )
    ocr_version: str = 'PP-OCRv4'
    det_db_box_thresh: float = field(
        default_factory=lambda: _get_env_float('YARD_DET_BOX_THRESH', 0.3)
    )

    # Printed lists are upright pages
    use_doc_orientation_classify: bool = False
    use_doc_unwarping: bool = False
    use_textline_orientation: bool = False

    use_gpu: bool = field(
        default_factory=lambda: _get_env_bool('YARD_USE_GPU', False)
    )

    max_retries: int = field(
        default_factory=lambda: _get_env_int('YARD_OCR_MAX_RETRIES', 3)
    )
    retry_delay: float = 1.0  # seconds


@dataclass
class SearchConfig:
    """Marketplace search query configuration."""

    default_limit: int = field(
        default_factory=lambda: _get_env_int('YARD_SEARCH_LIMIT', DEFAULT_SEARCH_LIMIT)
    )
    min_exclude_length: int = field(
        default_factory=lambda: _get_env_int('YARD_MIN_EXCLUDE_LENGTH', MIN_EXCLUDE_LENGTH)
    )


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = field(
        default_factory=lambda: _get_env_str('YARD_LOG_LEVEL', 'INFO')
    )
    format: str = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    date_format: str = '%Y-%m-%d %H:%M:%S'

    # File logging (optional)
    log_file: Optional[str] = field(
        default_factory=lambda: os.environ.get('YARD_LOG_FILE')
    )


@dataclass
class PipelineConfig:
    """Complete pipeline configuration."""

    parser: ParserConfig = field(default_factory=ParserConfig)
    preprocessing: PreprocessingConfig = field(default_factory=PreprocessingConfig)
    ocr: OCRConfig = field(default_factory=OCRConfig)
    search: SearchConfig = field(default_factory=SearchConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    def save(self, path: Path):
        """Save configuration to JSON file."""
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, path: Path) -> 'PipelineConfig':
        """Load configuration from JSON file."""
        with open(path) as f:
            data = json.load(f)

        config = cls()

        for section in ('parser', 'preprocessing', 'ocr', 'search', 'logging'):
            if section not in data:
                continue
            target = getattr(config, section)
            for key, value in data[section].items():
                if hasattr(target, key):
                    setattr(target, key, value)
                else:
                    logger.warning(f"Ignoring unknown config key: {section}.{key}")

        return config


# Global configuration instance (singleton pattern)
_config: Optional[PipelineConfig] = None


def get_config() -> PipelineConfig:
    """
    Get the global configuration instance.

    Creates a new instance on first call, returns cached instance thereafter.
    """
    global _config
    if _config is None:
        _config = PipelineConfig()
        _setup_logging(_config.logging)
    return _config


def reset_config():
    """Reset configuration to defaults (useful for testing)."""
    global _config
    _config = None


def _setup_logging(config: LoggingConfig):
    """Configure logging based on settings."""
    level = getattr(logging, config.level.upper(), logging.INFO)

    handlers = [logging.StreamHandler()]

    if config.log_file:
        handlers.append(logging.FileHandler(config.log_file))

    logging.basicConfig(
        level=level,
        format=config.format,
        datefmt=config.date_format,
        handlers=handlers,
    )
