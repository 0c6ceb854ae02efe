"""
Editing session.

:py:class:`Session` owns the :py:class:`~screenframe.state.CompositionState`
of one user. Every mutation goes through the session, which synchronously
recomputes the viewport scale and re-derives the
:py:class:`~screenframe.style.RenderStyle` afterwards, so :py:attr:`Session.style`
always matches the state.

The on-screen container is modelled by :py:class:`Viewport`. A session
listens to its resize events only between :py:meth:`Session.attach` and
:py:meth:`Session.detach`; :py:meth:`Session.bind` pairs both.

Example::

    from screenframe import DirectorySaver, Session, Viewport

    viewport = Viewport(800, 600)
    with Session() as session, session.bind(viewport):
        with open('capture.png', 'rb') as f:
            session.set_screenshot(f.read())
        session.select_background(0)
        session.set_frame('tablet')
        viewport.resize(400, 300)    # rescales the preview
        session.download(DirectorySaver('.'))
"""

import contextlib
import logging
from typing import Any, Callable, Iterator, Optional, Union

from PIL import Image

from screenframe.catalog import Background, Catalog, Effect, default_catalog
from screenframe.composite import render_preview
from screenframe.constants import FrameKind
from screenframe.errors import ExportUnavailableError
from screenframe.export import FileBlob, Saver, export
from screenframe.geometry import DeviceFrame, compute_scale
from screenframe.options import RenderOptions
from screenframe.resources import ResourceLoader
from screenframe.state import CompositionState
from screenframe.style import RenderStyle, derive_style

logger = logging.getLogger(__name__)

ResizeListener = Callable[[int, int], None]


class Viewport:
    """
    Observable on-screen container.

    Args:
        width: Initial width in pixels
        height: Initial height in pixels
    """

    def __init__(self, width: int, height: int):
        self._size = (width, height)
        self._listeners: list[ResizeListener] = []

    @property
    def size(self) -> tuple[int, int]:
        return self._size

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def subscribe(self, listener: ResizeListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: ResizeListener) -> None:
        """Remove a listener. Raises ValueError if it is not subscribed."""
        self._listeners.remove(listener)

    def resize(self, width: int, height: int) -> None:
        """Change the size and notify listeners."""
        self._size = (width, height)
        for listener in list(self._listeners):
            listener(width, height)


class Session:
    """
    Owner of a composition state.

    Args:
        catalog: Backgrounds and effects to select from. Defaults to
            :py:func:`~screenframe.catalog.default_catalog`
        loader: Resource loader for backgrounds. When omitted, the session
            creates one and closes it in :py:meth:`close`
        options: :py:class:`~screenframe.options.RenderOptions`
        container_size: Initial container size; None renders at 1:1
    """

    def __init__(
        self,
        catalog: Optional[Catalog] = None,
        loader: Optional[ResourceLoader] = None,
        options: Optional[RenderOptions] = None,
        container_size: Optional[tuple[int, int]] = None,
    ):
        self.catalog = catalog or default_catalog()
        self.options = options or RenderOptions()
        self._owns_loader = loader is None
        self.loader = loader or ResourceLoader(origin=self.options.origin)
        self.state = CompositionState()
        self._container_size = container_size
        self._viewport: Optional[Viewport] = None
        self._style = RenderStyle()
        self.refresh()

    def __enter__(self) -> "Session":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def close(self) -> None:
        """Release the viewport listener and owned resources."""
        self.detach()
        if self._owns_loader:
            self.loader.close()

    def __repr__(self) -> str:
        return "%s(frame=%s, zoom=%g, scale=%g, screenshot=%s)" % (
            self.__class__.__name__,
            self.frame.kind.value,
            self.state.zoom,
            self.state.viewport_scale,
            self.can_export,
        )

    @property
    def style(self) -> RenderStyle:
        """Style derived after the last mutation."""
        return self._style

    @property
    def frame(self) -> DeviceFrame:
        return self.state.frame

    @property
    def container_size(self) -> Optional[tuple[int, int]]:
        return self._container_size

    @property
    def can_export(self) -> bool:
        return self.state.has_screenshot

    @property
    def zoom_enabled(self) -> bool:
        return self.state.has_screenshot

    def refresh(self) -> RenderStyle:
        """Recompute the viewport scale and re-derive the style."""
        if self._container_size is None:
            scale = 1.0
        else:
            scale = compute_scale(*self._container_size, self.state.frame)
        self.state.set_viewport_scale(scale)
        self._style = derive_style(self.state)
        return self._style

    def set_screenshot(self, data: bytes) -> bool:
        """
        Load uploaded bytes as the screenshot.

        Returns:
            False when the bytes cannot be decoded; the composition is left
            as it was
        """
        accepted = self.state.set_screenshot(data)
        self.refresh()
        return accepted

    def clear_screenshot(self) -> None:
        self.state.clear_screenshot()
        self.refresh()

    def select_background(
        self, background: Union[Background, int, None]
    ) -> Optional[Background]:
        """Select a background by entry or catalog id; None clears it."""
        if isinstance(background, int):
            background = self.catalog.background(background)
        self.state.set_background(background)
        self.refresh()
        return background

    def select_effect(self, effect: Union[Effect, int, None]) -> Optional[Effect]:
        """Select an effect by entry or catalog id; None clears it."""
        if isinstance(effect, int):
            effect = self.catalog.effect(effect)
        self.state.set_effect(effect)
        self.refresh()
        return effect

    def set_frame(self, kind: Union[FrameKind, str]) -> DeviceFrame:
        frame = self.state.set_frame(kind)
        self.refresh()
        return frame

    def set_zoom(self, value: float) -> float:
        zoom = self.state.set_zoom(value)
        self.refresh()
        return zoom

    def container_resized(self, width: int, height: int) -> float:
        """
        Handle a container size change; returns the new viewport scale.

        A container without area, such as a minimized window, keeps the
        previous size and scale.
        """
        if not (width > 0 and height > 0):
            logger.warning("Ignoring container size %rx%r" % (width, height))
            return self.state.viewport_scale
        self._container_size = (width, height)
        self.refresh()
        logger.debug(
            "Container %dx%d, viewport scale %g"
            % (width, height, self.state.viewport_scale)
        )
        return self.state.viewport_scale

    def attach(self, viewport: Viewport) -> None:
        """Follow the size of ``viewport`` until :py:meth:`detach`."""
        if self._viewport is viewport:
            return
        self.detach()
        viewport.subscribe(self.container_resized)
        self._viewport = viewport
        self.container_resized(*viewport.size)

    def detach(self) -> None:
        if self._viewport is not None:
            self._viewport.unsubscribe(self.container_resized)
            self._viewport = None

    @contextlib.contextmanager
    def bind(self, viewport: Viewport) -> Iterator["Session"]:
        """Context manager attaching to ``viewport`` and detaching on exit."""
        self.attach(viewport)
        try:
            yield self
        finally:
            self.detach()

    def preview(self) -> Image.Image:
        """Render the preview at the current viewport scale."""
        return render_preview(self.state.snapshot(), self.loader, self.options)

    def export(self) -> FileBlob:
        """
        Export the composition as ``screenshot.png``.

        Raises:
            ExportUnavailableError: If no screenshot is loaded
            TaintedCanvasError: A cross-origin background did not grant access
            ExportError: Any other export failure
        """
        if not self.can_export:
            raise ExportUnavailableError("Export requires a screenshot")
        snapshot = self.state.snapshot()
        return export(snapshot, derive_style(snapshot), self.loader, self.options)

    def download(self, saver: Saver) -> Any:
        """Export and hand the blob to ``saver``; returns what it returns."""
        blob = self.export()
        return saver.save(blob)
