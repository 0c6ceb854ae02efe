"""Composite implementation for frame rendering."""

import logging
from typing import Optional, Union

import numpy as np
from PIL import Image

from screenframe.composite import paint, utils
from screenframe.composite.filters import apply_filters, parse_filter
from screenframe.errors import ExportError, FilterSyntaxError
from screenframe.geometry import Box, frame_box, scale_size
from screenframe.options import RenderOptions
from screenframe.resources import ResourceLoader
from screenframe.state import CompositionState, StateSnapshot
from screenframe.style import RenderStyle, derive_style

logger = logging.getLogger(__name__)


def composite_pil(
    state: Union[CompositionState, StateSnapshot],
    loader: Optional[ResourceLoader] = None,
    options: Optional[RenderOptions] = None,
    style: Optional[RenderStyle] = None,
) -> Image.Image:
    """
    Composite the frame and return a PIL Image.

    Args:
        state: Composition state or snapshot. Live states are snapshotted
            first
        loader: :py:class:`~screenframe.resources.ResourceLoader` for the
            background. A temporary loader is used when omitted
        options: :py:class:`~screenframe.options.RenderOptions`
        style: Style derived from the same snapshot. Derived when omitted

    Returns:
        RGBA image at the canonical frame size
    """
    color, alpha = composite(state, loader, options, style)
    return utils.to_image(color, alpha)


def composite(
    state: Union[CompositionState, StateSnapshot],
    loader: Optional[ResourceLoader] = None,
    options: Optional[RenderOptions] = None,
    style: Optional[RenderStyle] = None,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Composite the frame and return NumPy arrays.

    Layers are painted in order over the backdrop color: background (cover,
    centered), screenshot (fitted, zoomed, clipped to the content box) and
    the frame border. The effect filter is applied to the flattened surface.
    The result is always at the canonical frame resolution; the viewport
    scale of the state is ignored.

    Returns:
        Tuple of ``(color, alpha)`` float32 arrays of shape
        ``(height, width, 3)`` and ``(height, width, 1)`` in [0, 1]

    Raises:
        TaintedCanvasError: A cross-origin background did not grant access
        ResourceError: The background cannot be loaded
        ExportError: The filter expression is malformed
    """
    snapshot = state.snapshot() if isinstance(state, CompositionState) else state
    options = options or RenderOptions()
    style = style or derive_style(snapshot)
    frame = snapshot.frame
    viewport = (0, 0, frame.width, frame.height)

    try:
        ops = parse_filter(style.filter_expression)
    except FilterSyntaxError as e:
        raise ExportError(str(e)) from e

    backdrop = paint.draw_solid_color(frame.size, options.backdrop_color)
    compositor = Compositor(viewport, *backdrop)

    if style.background_paint is not None:
        url = style.background_paint.url
        if loader is None:
            with ResourceLoader(origin=options.origin) as temporary:
                image = temporary.load(url)
        else:
            image = loader.load(url)
        color, alpha, bbox = paint.draw_background(frame.size, image, options.resample)
        compositor.apply(color, alpha, bbox)

    if snapshot.screenshot is not None:
        color, alpha, bbox = paint.draw_content(
            frame,
            snapshot.screenshot.image,
            style.content_transform.scale,
            options.resample,
        )
        compositor.apply(color, alpha, bbox, clip_box=frame_box(frame))

    bezel = paint.draw_bezel(frame, options.bezel_color)
    if bezel is not None:
        compositor.apply(*bezel)

    color, alpha = compositor.finish()
    return apply_filters(color, alpha, ops)


def render_preview(
    state: Union[CompositionState, StateSnapshot],
    loader: Optional[ResourceLoader] = None,
    options: Optional[RenderOptions] = None,
) -> Image.Image:
    """
    Render the on-screen preview: the composition shrunk by the viewport
    scale about its center.
    """
    snapshot = state.snapshot() if isinstance(state, CompositionState) else state
    options = options or RenderOptions()
    style = derive_style(snapshot)
    image = composite_pil(snapshot, loader, options, style)
    scale = style.frame_transform.scale
    if scale == 1.0:
        return image
    return image.resize(scale_size(image.size, scale), options.resample)


class Compositor(object):
    """Composite context.

    Accumulates layers with normal (source-over) blending over a backdrop.
    """

    def __init__(self, viewport: Box, color: np.ndarray, alpha: np.ndarray):
        self._viewport = viewport
        self._color = color.astype(np.float32)
        self._alpha = alpha.astype(np.float32)

    def apply(
        self,
        color: np.ndarray,
        alpha: np.ndarray,
        bbox: Optional[Box] = None,
        clip_box: Optional[Box] = None,
    ) -> None:
        """
        Blend a layer onto the accumulated result.

        Args:
            color: Layer color, ``(h, w, 3)``
            alpha: Layer alpha, ``(h, w, 1)``
            bbox: Placement of the layer; None means the whole viewport
            clip_box: Region outside of which the layer is discarded
        """
        if bbox is not None and bbox != self._viewport:
            color = utils.paste(self._viewport, bbox, color)
            alpha = utils.paste(self._viewport, bbox, alpha)
        if clip_box is not None:
            mask = utils.paste(
                self._viewport,
                clip_box,
                np.ones((clip_box[3] - clip_box[1], clip_box[2] - clip_box[0], 1)),
            )
            alpha = alpha * mask

        alpha_previous = self._alpha
        self._alpha = utils.union(alpha_previous, alpha)
        color_t = (1.0 - alpha) * alpha_previous * self._color + alpha * color
        self._color = utils.clip(utils.divide(color_t, self._alpha))

    def finish(self) -> tuple[np.ndarray, np.ndarray]:
        return self._color, self._alpha

    @property
    def viewport(self) -> Box:
        return self._viewport

    @property
    def width(self) -> int:
        return self._viewport[2] - self._viewport[0]

    @property
    def height(self) -> int:
        return self._viewport[3] - self._viewport[1]
