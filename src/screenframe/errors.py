"""
Exceptions raised by screenframe.

Only :py:class:`DecodeError` is recovered inside the package (an upload that
cannot be decoded leaves the composition as it was). Everything under
:py:class:`ExportError` propagates to the caller of the export, which may
retry after changing its inputs.
"""


class ScreenframeError(Exception):
    """Base class of all screenframe errors."""


class DecodeError(ScreenframeError, ValueError):
    """Uploaded bytes cannot be interpreted as an image."""


class FilterSyntaxError(ScreenframeError, ValueError):
    """Malformed filter expression."""


class ExportError(ScreenframeError):
    """Rasterizing or encoding the composition failed."""


class ExportUnavailableError(ExportError):
    """Export was requested while no screenshot is loaded."""


class ResourceError(ExportError):
    """A referenced image resource cannot be fetched or decoded."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"Cannot load {url}: {reason}")
        self.url = url
        self.reason = reason


class TaintedCanvasError(ExportError):
    """A cross-origin resource did not grant read access to its pixels."""

    def __init__(self, url: str, origin: str):
        super().__init__(
            f"Resource {url} does not allow cross-origin access from {origin}"
        )
        self.url = url
        self.origin = origin
