"""
Configuration for pixelgrid.

Defaults come from const.py and can be overridden through environment
variables (PIXELGRID_LOG_LEVEL, PIXELGRID_RESAMPLE) or by installing a
config with set_config().
"""

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .const import (
    DEFAULT_LOG_FORMAT,
    DEFAULT_LOG_LEVEL,
    DEFAULT_RESAMPLE,
    ENV_LOG_LEVEL,
    ENV_RESAMPLE,
    RESAMPLE_METHODS,
)

logger = logging.getLogger(__name__)


@dataclass
class PixelGridConfig:
    """Package-wide settings."""

    log_level: str = DEFAULT_LOG_LEVEL
    log_format: str = DEFAULT_LOG_FORMAT
    resample: str = DEFAULT_RESAMPLE  # Default Pillow resampling for bridge.resize

    def __post_init__(self):
        self.log_level = self.log_level.upper()
        if self.resample not in RESAMPLE_METHODS:
            raise ValueError(f"Unknown resample method: {self.resample}")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "PixelGridConfig":
        """Build a config from environment variables, falling back to defaults."""
        environ = os.environ if environ is None else environ
        return cls(
            log_level=environ.get(ENV_LOG_LEVEL, DEFAULT_LOG_LEVEL),
            resample=environ.get(ENV_RESAMPLE, DEFAULT_RESAMPLE),
        )


_config: Optional[PixelGridConfig] = None


def get_config() -> PixelGridConfig:
    """Return the active config, reading the environment on first use."""
    global _config
    if _config is None:
        _config = PixelGridConfig.from_env()
    return _config


def set_config(config: Optional[PixelGridConfig]) -> None:
    """Install a config; None resets to the environment defaults on next use."""
    global _config
    _config = config
    if config is not None:
        logger.debug(f"Config set: {config}")
