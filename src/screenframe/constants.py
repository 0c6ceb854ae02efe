"""
Various constants for screenframe
"""

from enum import Enum


class FrameKind(str, Enum):
    """
    Device class of the frame hosting the composition.
    """

    MOBILE = "mobile"
    TABLET = "tablet"
    DESKTOP = "desktop"


class TransformOrigin(str, Enum):
    """
    Origin of a scale transform.
    """

    CENTER = "center"


DEFAULT_FRAME_KIND = FrameKind.DESKTOP

MIN_ZOOM = 0.5
MAX_ZOOM = 2.0
DEFAULT_ZOOM = 1.0
ZOOM_STEP = 0.1

#: Canonical ``(width, height, border_width)`` per frame kind, in pixels.
FRAME_DIMENSIONS = {
    FrameKind.MOBILE: (375, 667, 8),
    FrameKind.TABLET: (768, 1024, 12),
    FrameKind.DESKTOP: (1024, 768, 16),
}

OUTPUT_FILENAME = "screenshot.png"
OUTPUT_MEDIA_TYPE = "image/png"

#: Filter expression that leaves the surface untouched.
NO_FILTER = "none"

# RGBA, 0-255.
DEFAULT_BACKDROP_COLOR = (255, 255, 255, 255)
DEFAULT_BEZEL_COLOR = (17, 17, 17, 255)

#: Origin used for cross-origin checks when the session does not name one.
DEFAULT_ORIGIN = "null"
