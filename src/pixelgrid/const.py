"""
Global constants for the pixelgrid package.

This module contains the package-wide constants shared by the container,
the processing engines and the bitmap bridge.
"""

# Channel layout
MAX_CHANNEL_VALUE = 255  # 8 bits per channel
RGBA_CHANNELS = 4  # red, green, blue, alpha
GRAY_CHANNELS = 1

# Convolution
DEFAULT_KERNEL_SIZE = 3  # Mean filter neighborhood (3x3)

# Bitmap bridge
DEFAULT_RESAMPLE = "bilinear"
RESAMPLE_METHODS = ("nearest", "bilinear", "bicubic", "lanczos")

# Logging
DEFAULT_LOG_LEVEL = "WARNING"
DEFAULT_LOG_FORMAT = "%(asctime)s - %(app_time)s - %(name)s - %(levelname)s - %(message)s"
PACKAGE_LOGGER_NAME = "pixelgrid"

# Environment overrides
ENV_LOG_LEVEL = "PIXELGRID_LOG_LEVEL"
ENV_RESAMPLE = "PIXELGRID_RESAMPLE"
