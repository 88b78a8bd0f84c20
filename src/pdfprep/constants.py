"""Centralized constants for pdfprep."""

from typing import Literal

# Rotation angles, clockwise degrees
ROTATE_ANGLES = (0, 90, 180, 270)
RotationAngle = Literal[0, 90, 180, 270]

# Scale limits in percent
MIN_SCALE = 10
MAX_SCALE = 500
DEFAULT_SCALE = 100
SCALE_STEP = 10

# Normalized crop constraints
CROP_TOLERANCE = 0.01
MIN_CROP_SIZE = 0.01
MIN_CENTERED_CROP = 0.1

# Crop placement margin on the output page, fraction of page size
SAFE_MARGIN = 0.05

# Fit modes for scale-to-fit
FIT_MODES = ("contain", "cover")
FitMode = Literal["contain", "cover"]

# Print options
PAGES_PER_SHEET = (1, 2, 4)
COLOR_MODES = ("color", "grayscale")
QUALITY_OPTIONS = ("draft", "normal", "high")

# Cache sizes
PREVIEW_CACHE_SIZE = 20
THUMBNAIL_CACHE_SIZE = 100

# Default render sizes, in pixels
DEFAULT_PREVIEW_SIZE = (800, 1000)
DEFAULT_THUMBNAIL_SIZE = (150, 200)
DEFAULT_THUMBNAIL_QUALITY = 70

# Preview rasterization never goes beyond this multiple of the page's point size
MAX_RENDER_SCALE = 2.0
RAW_THUMBNAIL_OVERSAMPLE = 1.2

# Background pre-rendering is skipped above this file size
BACKGROUND_MAX_FILE_MB = 10

# Recipe format
RECIPE_VERSION = "2.0"
RECIPE_TYPE = "print_job"

# Paper sizes in PDF points (72 points per inch)
PAPER_SIZES = {
    "A3": (842.0, 1191.0),
    "A4": (595.0, 842.0),
    "A5": (420.0, 595.0),
    "Letter": (612.0, 792.0),
    "Legal": (612.0, 1008.0),
}
