"""
Composition state.

:py:class:`CompositionState` is the single mutable aggregate of the engine:
the uploaded screenshot, the selected background and effect, the device
frame, the zoom and the viewport scale. Every mutation validates or clamps
its input so the aggregate never violates its invariants:

- ``zoom`` is clamped to ``[0.5, 2.0]``
- ``frame`` is one of the canonical frames from
  :py:func:`~screenframe.geometry.resolve_frame`
- ``viewport_scale`` is in ``(0, 1]``

Rendering never reads the live state; it works on an immutable
:py:class:`StateSnapshot` taken with :py:meth:`CompositionState.snapshot`.

Example::

    from screenframe.state import CompositionState

    state = CompositionState()
    with open('capture.png', 'rb') as f:
        state.set_screenshot(f.read())
    state.set_frame('mobile')
    state.set_zoom(5.0)    # clamped to 2.0
"""

import io
import logging
import math
import numbers
from typing import Optional, Union

import attr
from attrs import define, field
from PIL import Image, UnidentifiedImageError

from screenframe.catalog import Background, Effect
from screenframe.constants import (
    DEFAULT_FRAME_KIND,
    DEFAULT_ZOOM,
    MAX_ZOOM,
    MIN_ZOOM,
    FrameKind,
)
from screenframe.errors import DecodeError
from screenframe.geometry import DeviceFrame, resolve_frame
from screenframe.validators import finite, range_

logger = logging.getLogger(__name__)


@define(frozen=True)
class Screenshot:
    """
    Decoded upload.

    .. py:attribute:: data

        Raw uploaded bytes.

    .. py:attribute:: image

        Decoded RGBA :py:class:`PIL.Image.Image`. Treated as read-only.
    """

    data: bytes = field(repr=False)
    image: Image.Image = field(eq=False, repr=False)

    @property
    def size(self) -> tuple[int, int]:
        return self.image.size

    @classmethod
    def decode(cls, data: bytes) -> "Screenshot":
        """Decode uploaded bytes.

        Raises:
            DecodeError: If the bytes are not a readable image
        """
        if not data:
            raise DecodeError("Empty upload")
        try:
            with Image.open(io.BytesIO(data)) as image:
                image.load()
                rgba = image.convert("RGBA")
        except (
            UnidentifiedImageError,
            Image.DecompressionBombError,
            OSError,
            ValueError,
        ) as e:
            raise DecodeError(f"Cannot decode image: {e}") from e
        if rgba.width == 0 or rgba.height == 0:
            raise DecodeError("Image has no pixels")
        return cls(bytes(data), rgba)


def _clamp_zoom(value: float) -> float:
    return min(max(float(value), MIN_ZOOM), MAX_ZOOM)


def _canonical_frame(instance, attribute, value):
    if not isinstance(value, DeviceFrame) or value != resolve_frame(value.kind):
        raise ValueError(f"'{attribute.name}' must be a canonical frame: {value!r}")


@define(frozen=True)
class StateSnapshot:
    """
    Immutable view of :py:class:`CompositionState` at one point in time.
    """

    screenshot: Optional[Screenshot]
    background: Optional[Background]
    effect: Optional[Effect]
    frame: DeviceFrame
    zoom: float
    viewport_scale: float


@define
class CompositionState:
    """
    Current selections of an editing session.

    Fields are validated on assignment; use the ``set_*`` methods, which
    clamp or resolve their input first.
    """

    screenshot: Optional[Screenshot] = field(default=None)
    background: Optional[Background] = field(
        default=None,
        validator=attr.validators.optional(attr.validators.instance_of(Background)),
    )
    effect: Optional[Effect] = field(
        default=None,
        validator=attr.validators.optional(attr.validators.instance_of(Effect)),
    )
    frame: DeviceFrame = field(
        factory=lambda: resolve_frame(DEFAULT_FRAME_KIND),
        validator=_canonical_frame,
    )
    zoom: float = field(
        default=DEFAULT_ZOOM, validator=[finite, range_(MIN_ZOOM, MAX_ZOOM)]
    )
    viewport_scale: float = field(
        default=1.0, validator=[finite, range_(0.0, 1.0, exclude_minimum=True)]
    )

    @property
    def has_screenshot(self) -> bool:
        return self.screenshot is not None

    def set_screenshot(self, data: bytes) -> bool:
        """
        Replace the screenshot with newly uploaded bytes.

        Args:
            data: Raw image file content

        Returns:
            True if the bytes were decoded and stored. False if decoding
            failed, in which case the previous screenshot is kept.
        """
        try:
            screenshot = Screenshot.decode(data)
        except DecodeError as e:
            logger.warning("Ignoring upload: %s" % e)
            return False
        self.screenshot = screenshot
        logger.debug("Screenshot set: %dx%d" % screenshot.size)
        return True

    def clear_screenshot(self) -> None:
        self.screenshot = None

    def set_background(self, background: Optional[Background]) -> None:
        self.background = background

    def set_effect(self, effect: Optional[Effect]) -> None:
        self.effect = effect

    def set_frame(self, kind: Union[FrameKind, str]) -> DeviceFrame:
        """Select a frame kind; unknown kinds resolve to desktop."""
        self.frame = resolve_frame(kind)
        return self.frame

    def set_zoom(self, value: float) -> float:
        """
        Set the content zoom, clamped to ``[0.5, 2.0]``.

        Raises:
            ValueError: If ``value`` is NaN or not a real number
        """
        if (
            not isinstance(value, numbers.Real)
            or isinstance(value, bool)
            or math.isnan(value)
        ):
            raise ValueError(f"Zoom must be a number: {value!r}")
        self.zoom = _clamp_zoom(value)
        return self.zoom

    def set_viewport_scale(self, value: float) -> None:
        self.viewport_scale = float(value)

    def snapshot(self) -> StateSnapshot:
        """Capture the current state as an immutable value."""
        return StateSnapshot(
            screenshot=self.screenshot,
            background=self.background,
            effect=self.effect,
            frame=self.frame,
            zoom=self.zoom,
            viewport_scale=self.viewport_scale,
        )
