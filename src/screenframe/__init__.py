"""
screenframe: Python package for framing screenshots.

This package composes an uploaded screenshot over a background inside a
canonical device frame, applies a filter effect and zoom, and exports the
result as a PNG image.

Basic usage::

    from screenframe import DirectorySaver, Session

    with Session() as session:
        with open('capture.png', 'rb') as f:
            session.set_screenshot(f.read())
        session.select_background(0)
        session.select_effect(3)
        session.set_frame('mobile')
        session.set_zoom(1.5)
        session.download(DirectorySaver('out'))   # out/screenshot.png

Architecture:

- :py:mod:`screenframe.geometry`: Frame dimensions and viewport fitting
- :py:mod:`screenframe.state`: Composition state
- :py:mod:`screenframe.style`: Style derivation from the state
- :py:mod:`screenframe.composite`: Rasterization engine
- :py:mod:`screenframe.export`: PNG export and save collaborators
- :py:mod:`screenframe.session`: Session owning the state

For most users, the :py:class:`Session` class provides all necessary functionality.
"""

from screenframe.catalog import Background, Catalog, Effect, default_catalog
from screenframe.constants import FrameKind
from screenframe.errors import (
    DecodeError,
    ExportError,
    ExportUnavailableError,
    ResourceError,
    TaintedCanvasError,
)
from screenframe.export import DirectorySaver, FileBlob, export
from screenframe.geometry import DeviceFrame, compute_scale, resolve_frame
from screenframe.options import RenderOptions
from screenframe.resources import ResourceLoader
from screenframe.session import Session, Viewport
from screenframe.state import CompositionState
from screenframe.style import RenderStyle, derive_style
from screenframe.version import __version__

__all__ = [
    "Background",
    "Catalog",
    "CompositionState",
    "DecodeError",
    "DeviceFrame",
    "DirectorySaver",
    "Effect",
    "ExportError",
    "ExportUnavailableError",
    "FileBlob",
    "FrameKind",
    "RenderOptions",
    "RenderStyle",
    "ResourceError",
    "ResourceLoader",
    "Session",
    "TaintedCanvasError",
    "Viewport",
    "__version__",
    "compute_scale",
    "default_catalog",
    "derive_style",
    "export",
    "resolve_frame",
]
