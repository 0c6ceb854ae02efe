"""
Frame geometry.

This module resolves device frame kinds to their canonical dimensions and
computes how a frame fits on screen and how images fit inside a frame.

Key functionality:

- :py:func:`resolve_frame`: frame kind to canonical :py:class:`DeviceFrame`
- :py:func:`compute_scale`: uniform shrink factor fitting a frame into a
  container, never above 1:1
- :py:func:`frame_box`, :py:func:`fit_within`, :py:func:`cover_size`: layout
  helpers used by the rasterizer

Example::

    from screenframe.geometry import compute_scale, resolve_frame

    frame = resolve_frame("desktop")   # 1024x768, border 16
    compute_scale(512, 512, frame)     # 0.5
"""

import logging
from typing import Union

from attrs import define, field

from screenframe.constants import DEFAULT_FRAME_KIND, FRAME_DIMENSIONS, FrameKind
from screenframe.validators import in_, range_

logger = logging.getLogger(__name__)

Box = tuple[int, int, int, int]
Size = tuple[int, int]


@define(frozen=True)
class DeviceFrame:
    """
    Canonical device frame.

    Instances are only obtained from :py:func:`resolve_frame`; the validators
    reject any dimensions that do not belong to the frame kind.

    .. py:attribute:: kind
    .. py:attribute:: width
    .. py:attribute:: height
    .. py:attribute:: border_width
    """

    kind: FrameKind = field(converter=FrameKind, validator=in_(FrameKind))
    width: int = field(validator=range_(1, 100000))
    height: int = field(validator=range_(1, 100000))
    border_width: int = field(validator=range_(0, 1000))

    def __attrs_post_init__(self) -> None:
        expected = FRAME_DIMENSIONS[self.kind]
        if (self.width, self.height, self.border_width) != expected:
            raise ValueError(
                f"{self.kind.value} frame must be {expected[0]}x{expected[1]} "
                f"with border {expected[2]}"
            )

    @property
    def size(self) -> Size:
        return (self.width, self.height)


_FRAMES = {
    kind: DeviceFrame(kind, width, height, border_width)
    for kind, (width, height, border_width) in FRAME_DIMENSIONS.items()
}


def coerce_kind(kind: Union[FrameKind, str]) -> FrameKind:
    """Convert a frame identifier to :py:class:`FrameKind`.

    Unrecognized identifiers fall back to the desktop frame.
    """
    if isinstance(kind, FrameKind):
        return kind
    if isinstance(kind, str):
        try:
            return FrameKind(kind.strip().lower())
        except ValueError:
            pass
    logger.warning(
        "Invalid frame kind %r, using %s" % (kind, DEFAULT_FRAME_KIND.value)
    )
    return DEFAULT_FRAME_KIND


def resolve_frame(kind: Union[FrameKind, str]) -> DeviceFrame:
    """
    Map a device class to its canonical frame.

    ``mobile`` is 375x667 with an 8 px border, ``tablet`` 768x1024 with 12 px
    and ``desktop`` 1024x768 with 16 px. The same kind always yields the same
    (shared, immutable) instance.

    Args:
        kind: :py:class:`FrameKind` or its string value. Anything else is
            coerced to ``desktop``.

    Returns:
        The canonical :py:class:`DeviceFrame`
    """
    return _FRAMES[coerce_kind(kind)]


def compute_scale(
    container_width: float, container_height: float, frame: DeviceFrame
) -> float:
    """
    Compute the uniform scale that fits a frame into a container.

    The result is ``min(container_width / frame.width, container_height /
    frame.height, 1.0)``: frames are shrunk to fit but never magnified.

    Args:
        container_width: Available width in pixels, must be positive
        container_height: Available height in pixels, must be positive
        frame: Frame to fit

    Returns:
        Scale factor in ``(0, 1]``

    Raises:
        ValueError: If a container dimension is not positive
    """
    if not (container_width > 0 and container_height > 0):
        raise ValueError(
            "Container size must be positive: %rx%r"
            % (container_width, container_height)
        )
    scale_x = container_width / frame.width
    scale_y = container_height / frame.height
    return min(scale_x, scale_y, 1.0)


def frame_box(frame: DeviceFrame) -> Box:
    """Content box of the frame, inside its border."""
    border = frame.border_width
    return (border, border, frame.width - border, frame.height - border)


def fit_within(size: Size, bounds: Size) -> Size:
    """
    Largest size with the aspect ratio of ``size`` fitting inside ``bounds``.

    Images smaller than the bounds keep their natural size.
    """
    width, height = size
    max_width, max_height = bounds
    ratio = min(max_width / width, max_height / height, 1.0)
    return (max(1, round(width * ratio)), max(1, round(height * ratio)))


def cover_size(size: Size, target: Size) -> Size:
    """Smallest size with the aspect ratio of ``size`` covering ``target``."""
    width, height = size
    ratio = max(target[0] / width, target[1] / height)
    return (
        max(target[0], round(width * ratio)),
        max(target[1], round(height * ratio)),
    )


def center_box(size: Size, container: Box) -> Box:
    """Box of ``size`` centered in ``container``; may extend past it."""
    left = container[0] + (container[2] - container[0] - size[0]) // 2
    top = container[1] + (container[3] - container[1] - size[1]) // 2
    return (left, top, left + size[0], top + size[1])


def scale_size(size: Size, factor: float) -> Size:
    return (max(1, round(size[0] * factor)), max(1, round(size[1] * factor)))
