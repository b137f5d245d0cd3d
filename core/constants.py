"""
Constants and configuration values for PhotoDesk.

Filter ranges, zoom bounds, export naming and window defaults live here so
the core and the Qt shell agree on them.
"""

APP_NAME = "PhotoDesk"

# Filter parameters: name -> (min, max). Order is the render order.
FILTER_RANGES = {
    "brightness": (-100, 100),
    "contrast": (-100, 100),
    "saturation": (-100, 100),
    "hue": (-180, 180),
    "warm": (0, 100),
    "cool": (0, 100),
    "blur": (0, 20),
}
FILTER_ORDER = ("brightness", "contrast", "saturation", "hue", "warm", "cool", "blur")
FILTER_DEFAULT = 0

# Output size
MIN_OUTPUT_DIM = 1
MAX_OUTPUT_DIM = 16384

# Display zoom (percent)
ZOOM_MIN_PERCENT = 25
ZOOM_MAX_PERCENT = 200
ZOOM_STEP_PERCENT = 5
ZOOM_DEFAULT_PERCENT = 100

# Export
EXPORT_FILENAME = "edited-image.png"
EXPORT_FORMAT = "PNG"

# Loader
IMAGE_EXTENSIONS = (".png", ".jpg", ".jpeg", ".bmp", ".webp", ".gif", ".tif", ".tiff")

# Resampling
DEFAULT_HIGH_QUALITY = True
DEFAULT_NEAREST_NEIGHBOR = False

# UI
DEFAULT_WINDOW_WIDTH = 1200
DEFAULT_WINDOW_HEIGHT = 800
LOG_LEVEL_ENV = "PHOTODESK_LOG_LEVEL"
