"""
Render options.

Example::

    from screenframe.options import RenderOptions

    options = RenderOptions(bezel_color=(255, 255, 255, 255))
"""

from attrs import define, field
from PIL import Image

from screenframe.constants import (
    DEFAULT_BACKDROP_COLOR,
    DEFAULT_BEZEL_COLOR,
    DEFAULT_ORIGIN,
    OUTPUT_FILENAME,
)


def _rgba(value) -> tuple[int, int, int, int]:
    value = tuple(int(v) for v in value)
    if len(value) == 3:
        value += (255,)
    if len(value) != 4 or any(not 0 <= v <= 255 for v in value):
        raise ValueError(f"Expected an RGB(A) color with 0-255 values: {value!r}")
    return value  # type: ignore[return-value]


@define(frozen=True)
class RenderOptions:
    """
    Rendering and export settings.

    .. py:attribute:: backdrop_color

        RGBA color under the background, visible when no background is set.

    .. py:attribute:: bezel_color

        RGBA color of the frame border.

    .. py:attribute:: resample

        Pillow resampling filter used to scale the background and screenshot.

    .. py:attribute:: filename

        Name of the exported file.

    .. py:attribute:: origin

        Origin used for cross-origin checks of referenced resources.
    """

    backdrop_color: tuple[int, int, int, int] = field(
        default=DEFAULT_BACKDROP_COLOR, converter=_rgba
    )
    bezel_color: tuple[int, int, int, int] = field(
        default=DEFAULT_BEZEL_COLOR, converter=_rgba
    )
    resample: Image.Resampling = field(
        default=Image.Resampling.LANCZOS, converter=Image.Resampling
    )
    filename: str = field(default=OUTPUT_FILENAME)
    origin: str = DEFAULT_ORIGIN

    @filename.validator
    def _validate_filename(self, attribute, value: str) -> None:
        if not value or "/" in value or "\\" in value:
            raise ValueError(f"'{attribute.name}' must be a plain file name: {value!r}")
