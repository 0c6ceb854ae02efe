"""
Image resource loading.

Backgrounds reference their pixels by URL. :py:class:`ResourceLoader`
fetches and decodes them the way a browser canvas sources cross-origin
images for a pixel read-back:

- ``data:`` URIs, ``file://`` URLs and local paths are same-origin
- ``http(s)`` URLs with the loader's origin are same-origin
- other ``http(s)`` URLs are requested with an ``Origin`` header and are
  only readable when the response grants that origin through
  ``Access-Control-Allow-Origin``; otherwise
  :py:class:`~screenframe.errors.TaintedCanvasError` is raised

Decoded images are cached per URL; once the cache is full the least
recently used image is dropped. Failures are not cached, so a retry
fetches again. A redirect is judged by the origin of the final URL.

Example::

    from screenframe.resources import ResourceLoader

    with ResourceLoader(origin='https://editor.example') as loader:
        image = loader.load('https://cdn.example/bg.jpg')
"""

import base64
import io
import logging
import os
from collections import OrderedDict
from typing import Optional
from urllib.parse import unquote_to_bytes, urlsplit
from urllib.request import url2pathname

import httpx
from PIL import Image, UnidentifiedImageError

from screenframe.constants import DEFAULT_ORIGIN
from screenframe.errors import ResourceError, TaintedCanvasError

logger = logging.getLogger(__name__)

DEFAULT_CONNECT_TIMEOUT = 10.0
DEFAULT_READ_TIMEOUT = 30.0
DEFAULT_TIMEOUT = httpx.Timeout(DEFAULT_READ_TIMEOUT, connect=DEFAULT_CONNECT_TIMEOUT)

_DEFAULT_PORTS = {"http": 80, "https": 443}

DEFAULT_CACHE_SIZE = 32


def origin_of(url: str) -> str:
    """
    Serialize the origin of an ``http(s)`` URL, e.g. ``https://host:8443``.

    Default ports are omitted. Other schemes have the opaque origin
    ``'null'``.
    """
    parts = urlsplit(url)
    scheme = parts.scheme.lower()
    if scheme not in _DEFAULT_PORTS or not parts.hostname:
        return "null"
    origin = f"{scheme}://{parts.hostname.lower()}"
    if parts.port is not None and parts.port != _DEFAULT_PORTS[scheme]:
        origin += f":{parts.port}"
    return origin


def cors_allows(response: httpx.Response, origin: str) -> bool:
    """Check whether a response grants ``origin`` read access."""
    allowed = response.headers.get("access-control-allow-origin")
    if allowed is None:
        return False
    allowed = allowed.strip()
    return allowed == "*" or allowed == origin


def decode_data_uri(uri: str) -> bytes:
    """Return the payload of a ``data:`` URI."""
    header, sep, payload = uri.partition(",")
    if not sep or not header.lower().startswith("data:"):
        raise ValueError("Malformed data URI")
    if header.lower().endswith(";base64"):
        return base64.b64decode(payload, validate=False)
    return unquote_to_bytes(payload)


def _decode_image(url: str, data: bytes) -> Image.Image:
    try:
        with Image.open(io.BytesIO(data)) as image:
            image.load()
            return image.convert("RGBA")
    except (
        UnidentifiedImageError,
        Image.DecompressionBombError,
        OSError,
        ValueError,
    ) as e:
        raise ResourceError(url, f"not an image ({e})") from e


class ResourceLoader:
    """
    Cross-origin aware image loader.

    Args:
        origin: Origin of the document requesting the pixels
        client: Optional :py:class:`httpx.Client`. When omitted, the loader
            creates one on first use and closes it in :py:meth:`close`
        timeout: Request timeout for the owned client
        use_cors: If False, cross-origin resources are never requested with
            CORS and always taint the canvas
        cache_size: Number of decoded images to keep
    """

    def __init__(
        self,
        origin: str = DEFAULT_ORIGIN,
        client: Optional[httpx.Client] = None,
        timeout: httpx.Timeout = DEFAULT_TIMEOUT,
        use_cors: bool = True,
        cache_size: int = DEFAULT_CACHE_SIZE,
    ):
        if urlsplit(origin).scheme.lower() in _DEFAULT_PORTS:
            origin = origin_of(origin)
        self.origin = origin
        self.use_cors = use_cors
        self._client = client
        self._owns_client = client is None
        self._timeout = timeout
        self.cache_size = cache_size
        self._cache: OrderedDict[str, Image.Image] = OrderedDict()

    def __enter__(self) -> "ResourceLoader":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client and self._client is not None:
            self._client.close()
            self._client = None
        self._cache.clear()

    @property
    def client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(timeout=self._timeout, follow_redirects=True)
        return self._client

    def is_cached(self, url: str) -> bool:
        return url in self._cache

    def load(self, url: str) -> Image.Image:
        """
        Fetch and decode an image.

        Returns:
            RGBA :py:class:`PIL.Image.Image`. The cached instance is shared,
            callers must copy before drawing on it.

        Raises:
            TaintedCanvasError: Cross-origin resource without a CORS grant
            ResourceError: Unreachable, failed or undecodable resource
        """
        image = self._cache.get(url)
        if image is not None:
            logger.debug("Resource cache hit: %s" % url)
            self._cache.move_to_end(url)
            return image
        image = _decode_image(url, self.read_bytes(url))
        self._cache[url] = image
        while len(self._cache) > max(self.cache_size, 0):
            evicted, _ = self._cache.popitem(last=False)
            logger.debug("Evicted resource %s" % evicted)
        logger.debug("Loaded resource %s (%dx%d)" % ((url,) + image.size))
        return image

    def read_bytes(self, url: str) -> bytes:
        scheme = urlsplit(url).scheme.lower()
        if scheme == "data":
            try:
                return decode_data_uri(url)
            except ValueError as e:
                raise ResourceError(url, str(e)) from e
        if scheme in _DEFAULT_PORTS:
            return self._fetch(url)
        if scheme == "file":
            path = url2pathname(urlsplit(url).path)
        elif scheme and len(scheme) > 1:
            raise ResourceError(url, f"unsupported scheme {scheme!r}")
        else:
            path = url  # Plain path, possibly with a drive letter.
        try:
            with open(os.path.expanduser(path), "rb") as f:
                return f.read()
        except OSError as e:
            raise ResourceError(url, str(e)) from e

    def _fetch(self, url: str) -> bytes:
        cross_origin = origin_of(url) != self.origin
        if cross_origin and not self.use_cors:
            raise TaintedCanvasError(url, self.origin)
        headers = {"Origin": self.origin} if cross_origin else {}
        logger.debug("GET %s (cross-origin: %s)" % (url, cross_origin))
        try:
            response = self.client.get(url, headers=headers, follow_redirects=True)
        except httpx.HTTPError as e:
            raise ResourceError(url, str(e)) from e
        if response.status_code >= 400:
            raise ResourceError(url, f"HTTP {response.status_code}")
        final_url = str(response.url)
        if final_url != url:
            logger.debug("Redirected %s to %s" % (url, final_url))
        cross_origin = cross_origin or origin_of(final_url) != self.origin
        if cross_origin and not (
            self.use_cors and cors_allows(response, self.origin)
        ):
            logger.warning("No CORS grant for %s from %s" % (final_url, self.origin))
            raise TaintedCanvasError(url, self.origin)
        return response.content
