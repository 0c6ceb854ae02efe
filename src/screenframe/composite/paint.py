"""Paint operations for the composition layers."""

import logging
from typing import Optional

import numpy as np
from PIL import Image

from screenframe.composite import utils
from screenframe.geometry import (
    Box,
    DeviceFrame,
    Size,
    center_box,
    cover_size,
    fit_within,
    frame_box,
    scale_size,
)

logger = logging.getLogger(__name__)


def draw_solid_color(
    size: Size, rgba: tuple[int, int, int, int]
) -> tuple[np.ndarray, np.ndarray]:
    """Uniform ``(color, alpha)`` arrays covering ``size``."""
    width, height = size
    color = np.empty((height, width, 3), dtype=np.float32)
    color[:, :] = np.array(rgba[:3], dtype=np.float32) / 255.0
    alpha = np.full((height, width, 1), rgba[3] / 255.0, dtype=np.float32)
    return color, alpha


def draw_background(
    size: Size, image: Image.Image, resample: Image.Resampling
) -> tuple[np.ndarray, np.ndarray, Box]:
    """
    Scale an image to cover ``size``, centered.

    Returns:
        ``(color, alpha, bbox)`` where ``bbox`` may extend past the surface
    """
    target = cover_size(image.size, size)
    logger.debug("Background %dx%d covers at %dx%d" % (image.size + target))
    scaled = image if image.size == target else image.resize(target, resample)
    color, alpha = utils.to_array(scaled)
    return color, alpha, center_box(target, (0, 0) + size)


def draw_content(
    frame: DeviceFrame, image: Image.Image, zoom: float, resample: Image.Resampling
) -> tuple[np.ndarray, np.ndarray, Box]:
    """
    Place the screenshot in the frame content box.

    The image is shrunk to fit inside the content box, then scaled by
    ``zoom`` about the box center.

    Returns:
        ``(color, alpha, bbox)``
    """
    box = frame_box(frame)
    fitted = fit_within(image.size, (box[2] - box[0], box[3] - box[1]))
    target = scale_size(fitted, zoom)
    logger.debug(
        "Screenshot %dx%d drawn at %dx%d (zoom %g)" % (image.size + target + (zoom,))
    )
    scaled = image if image.size == target else image.resize(target, resample)
    color, alpha = utils.to_array(scaled)
    return color, alpha, center_box(target, box)


def draw_bezel(
    frame: DeviceFrame, rgba: tuple[int, int, int, int]
) -> Optional[tuple[np.ndarray, np.ndarray]]:
    """Frame border of ``border_width`` px, or None without a border."""
    if frame.border_width <= 0:
        return None
    color, alpha = draw_solid_color(frame.size, rgba)
    left, top, right, bottom = frame_box(frame)
    alpha[top:bottom, left:right, :] = 0.0
    return color, alpha
