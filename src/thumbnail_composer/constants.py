"""
Constants used internally by the thumbnail composer.

These are implementation-level values that should not be overridden
via config files or CLI arguments.
"""

# YouTube thumbnail canvas
THUMBNAIL_WIDTH = 1280
THUMBNAIL_HEIGHT = 720
THUMBNAIL_SIZE = (THUMBNAIL_WIDTH, THUMBNAIL_HEIGHT)

# Internal color constants
COLOR_MODE_RGB = "RGB"
COLOR_MODE_RGBA = "RGBA"
COLOR_BLACK = (0, 0, 0)
COLOR_WHITE = (255, 255, 255)

# Geometry
MIN_SLOT_DIMENSION = 100

# Feature analysis
ENTROPY_BINS = 256
EDGE_THRESHOLD = 50
EDGE_SAMPLE_MAX = 200
EDGE_KERNEL = (-1, -1, -1, -1, 8, -1, -1, -1, -1)
SUBJECT_CENTER_START = 0.25
SUBJECT_CENTER_END = 0.75
SUBJECT_DENSITY_RATIO = 1.5
PORTRAIT_MAX_ASPECT = 0.9
LANDSCAPE_MIN_ASPECT = 1.1
COLOR_CAST_THRESHOLD = 0.1
UNDEREXPOSED_MEAN = 0.3
OVEREXPOSED_MEAN = 0.7
CHANNEL_MAX_VALUE = 255.0

# Enhancement
THUMBNAIL_BOOST = 1.2
SATURATION_BOOST = 1.2
SATURATION_CAP = 1.8
CONTRAST_BOOST = 1.15
CONTRAST_CAP = 1.3
ENHANCE_SHARPEN_M1_GAIN = 1.2
ENHANCE_SHARPEN_M2_GAIN = 1.1
CENTER_WEIGHT_KERNEL = (1, 1, 1, 1, 1.1, 1, 1, 1, 1)

# Cosmetic chain applied to every slot
VIGNETTE_EDGE_OPACITY = 0.15
COSMETIC_SHARPEN = {"sigma": 1.2, "m1": 1.0, "m2": 2.0, "x1": 2.0, "y2": 10.0}
COSMETIC_LINEAR = (1.1, 0.0)
COSMETIC_BRIGHTNESS = 1.05
COSMETIC_SATURATION = 1.1

# Text overlay
TEXT_MARGIN_PX = 40
TEXT_SHADOW_OFFSET = (4, 4)
TEXT_SHADOW_BLUR = 4
TEXT_GLOW_RADIUS = 8
TEXT_BACKGROUND_PAD = 16
TEXT_BACKGROUND_ALPHA = 160

# Output
PNG_COMPRESSION_LEVEL = 8
MAX_OUTPUT_PATH_LENGTH = 260
OUTPUT_NAME_PREFIX = "youtube-thumbnail"

# Dividers
MAX_DIVIDER_TILT = 60.0
