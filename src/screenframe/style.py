"""
Style derivation.

:py:func:`derive_style` turns a composition state into the
:py:class:`RenderStyle` applied to the composition surface. It is a pure
function: the caller re-derives after every state change instead of
relying on the surface to observe the state, so the applied style is never
stale.

Example::

    from screenframe.state import CompositionState
    from screenframe.style import derive_style

    state = CompositionState()
    style = derive_style(state)
    style.filter_expression   # 'none'
    style.as_css()['content']['transform']   # 'scale(1)'
"""

from typing import Optional, Union

from attrs import define, field

from screenframe.constants import NO_FILTER, TransformOrigin
from screenframe.state import CompositionState, StateSnapshot
from screenframe.validators import finite, in_


@define(frozen=True)
class BackgroundPaint:
    """
    Background image paint of the frame surface.

    Only the cover-fit, centered, non-repeating paint is produced.
    """

    url: str
    size: str = field(default="cover", validator=in_(("cover",)))
    position: str = field(default="center", validator=in_(("center",)))
    repeat: str = field(default="no-repeat", validator=in_(("no-repeat",)))


@define(frozen=True)
class Transform:
    """Uniform scale about an origin."""

    scale: float = field(default=1.0, validator=finite)
    origin: TransformOrigin = field(
        default=TransformOrigin.CENTER, converter=TransformOrigin
    )

    @property
    def is_identity(self) -> bool:
        return self.scale == 1.0


@define(frozen=True)
class RenderStyle:
    """
    Visual style of the composition surface.

    .. py:attribute:: background_paint

        :py:class:`BackgroundPaint` or None when no background is selected.

    .. py:attribute:: filter_expression

        CSS filter applied to the whole frame surface, ``'none'`` for none.

    .. py:attribute:: content_transform

        Zoom of the screenshot image only.

    .. py:attribute:: frame_transform

        Viewport scale of the frame surface. Presentation only; exports
        ignore it.
    """

    background_paint: Optional[BackgroundPaint] = None
    filter_expression: str = NO_FILTER
    content_transform: Transform = field(factory=Transform)
    frame_transform: Transform = field(factory=Transform)

    def as_css(self) -> dict[str, dict[str, str]]:
        """Inline CSS declarations for the frame and content elements."""
        if self.background_paint is None:
            frame = {"background-image": "none"}
        else:
            frame = {
                "background-image": f"url({self.background_paint.url})",
                "background-size": self.background_paint.size,
                "background-position": self.background_paint.position,
                "background-repeat": self.background_paint.repeat,
            }
        frame.update(
            {
                "filter": self.filter_expression,
                "transform": _css_scale(self.frame_transform),
                "transform-origin": self.frame_transform.origin.value,
            }
        )
        content = {
            "transform": _css_scale(self.content_transform),
            "transform-origin": self.content_transform.origin.value,
        }
        return {"frame": frame, "content": content}


def _css_scale(transform: Transform) -> str:
    return "scale(%s)" % format(transform.scale, "g")


def derive_style(state: Union[CompositionState, StateSnapshot]) -> RenderStyle:
    """
    Derive the render style from the composition state.

    Args:
        state: Live state or a snapshot of it; it is only read

    Returns:
        :py:class:`RenderStyle` equal for equal states
    """
    background_paint = None
    if state.background is not None:
        background_paint = BackgroundPaint(state.background.url)
    filter_expression = NO_FILTER
    if state.effect is not None:
        filter_expression = state.effect.filter_expression.strip() or NO_FILTER
    return RenderStyle(
        background_paint=background_paint,
        filter_expression=filter_expression,
        content_transform=Transform(state.zoom),
        frame_transform=Transform(state.viewport_scale),
    )
