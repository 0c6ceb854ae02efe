"""
Export module.

Flattens a composition into a PNG file and hands it to a save collaborator.

The capture is taken from a single :py:class:`~screenframe.state.StateSnapshot`
with the style derived from that same snapshot, at the canonical frame
resolution. Exporting an unchanged state twice yields byte-identical files.

Example usage::

    from screenframe.export import DirectorySaver, export

    blob = export(state.snapshot(), loader=loader)
    path = DirectorySaver('out').save(blob)
"""

import io
import logging
import os
from typing import Any, Optional, Protocol, Union

from attrs import define, field
from PIL import Image

from screenframe.composite import composite_pil
from screenframe.constants import OUTPUT_FILENAME, OUTPUT_MEDIA_TYPE
from screenframe.errors import ExportError, ExportUnavailableError
from screenframe.options import RenderOptions
from screenframe.resources import ResourceLoader
from screenframe.state import CompositionState, StateSnapshot
from screenframe.style import RenderStyle, derive_style

logger = logging.getLogger(__name__)


@define(frozen=True)
class FileBlob:
    """
    Exported file.

    .. py:attribute:: filename
    .. py:attribute:: data

        Encoded file content.

    .. py:attribute:: media_type
    """

    filename: str = OUTPUT_FILENAME
    data: bytes = field(default=b"", repr=False)
    media_type: str = OUTPUT_MEDIA_TYPE

    @property
    def size(self) -> int:
        return len(self.data)

    def topil(self) -> Image.Image:
        """Decode the blob back into an image."""
        image = Image.open(io.BytesIO(self.data))
        image.load()
        return image


class Saver(Protocol):
    """Save collaborator receiving exported blobs."""

    def save(self, blob: FileBlob) -> Any: ...


class DirectorySaver:
    """
    Save blobs as files under a directory.

    Args:
        directory: Target directory, created when missing
    """

    def __init__(self, directory: Union[str, "os.PathLike[str]"]):
        self.directory = os.fspath(directory)

    def save(self, blob: FileBlob) -> str:
        os.makedirs(self.directory, exist_ok=True)
        path = os.path.join(self.directory, os.path.basename(blob.filename))
        with open(path, "wb") as f:
            f.write(blob.data)
        logger.info("Saved %s (%d bytes)" % (path, blob.size))
        return path


def encode_png(image: Image.Image) -> bytes:
    """Encode an image as PNG without metadata chunks."""
    with io.BytesIO() as f:
        image.save(f, format="PNG")
        return f.getvalue()


def rasterize(
    snapshot: StateSnapshot,
    style: Optional[RenderStyle] = None,
    loader: Optional[ResourceLoader] = None,
    options: Optional[RenderOptions] = None,
) -> Image.Image:
    """
    Capture the composition into an RGBA image.

    Raises:
        ExportUnavailableError: If no screenshot is loaded
        TaintedCanvasError: A cross-origin background did not grant access
        ResourceError: The background cannot be loaded
    """
    if snapshot.screenshot is None:
        raise ExportUnavailableError("Export requires a screenshot")
    style = style or derive_style(snapshot)
    image = composite_pil(snapshot, loader, options, style)
    logger.debug("Rasterized %dx%d" % image.size)
    return image


def export(
    state: Union[CompositionState, StateSnapshot],
    style: Optional[RenderStyle] = None,
    loader: Optional[ResourceLoader] = None,
    options: Optional[RenderOptions] = None,
) -> FileBlob:
    """
    Rasterize the composition and encode it as a PNG blob.

    Args:
        state: Composition state or snapshot. Live states are snapshotted
            first so the capture sees one consistent state
        style: Style derived from the same snapshot. Derived when omitted
        loader: Loader for referenced resources
        options: :py:class:`~screenframe.options.RenderOptions`

    Returns:
        :py:class:`FileBlob` named ``screenshot.png``

    Raises:
        ExportError: On any failure; no blob is produced
    """
    snapshot = state.snapshot() if isinstance(state, CompositionState) else state
    options = options or RenderOptions()
    image = rasterize(snapshot, style, loader, options)
    try:
        data = encode_png(image)
    except (OSError, ValueError) as e:
        raise ExportError(f"Cannot encode PNG: {e}") from e
    blob = FileBlob(filename=options.filename, data=data)
    logger.debug("Exported %s (%d bytes)" % (blob.filename, blob.size))
    return blob
