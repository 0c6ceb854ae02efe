import base64
import io
import logging
import struct
import zlib
from typing import Callable, Optional

import httpx
from PIL import Image

from screenframe.resources import ResourceLoader

logging.basicConfig(level=logging.DEBUG)

EDITOR_ORIGIN = "https://editor.example"
CDN_URL = "https://cdn.example/background.png"

RED = (255, 0, 0, 255)
BLUE = (0, 0, 255, 255)
WHITE = (255, 255, 255, 255)


def make_image(
    size: tuple[int, int] = (200, 100), color: tuple[int, ...] = RED
) -> Image.Image:
    return Image.new("RGBA", size, color)


def png_bytes(image: Optional[Image.Image] = None) -> bytes:
    image = image or make_image()
    with io.BytesIO() as f:
        image.save(f, format="PNG")
        return f.getvalue()


def data_uri(image: Optional[Image.Image] = None) -> str:
    return bytes_uri(png_bytes(image))


def bytes_uri(data: bytes) -> str:
    return "data:image/png;base64," + base64.b64encode(data).decode()


def _png_chunk(tag: bytes, payload: bytes) -> bytes:
    crc = zlib.crc32(tag + payload) & 0xFFFFFFFF
    return struct.pack(">I", len(payload)) + tag + payload + struct.pack(">I", crc)


def png_header(width: int, height: int) -> bytes:
    """PNG declaring ``width`` x ``height`` RGB pixels, with almost no data."""
    return (
        b"\x89PNG\r\n\x1a\n"
        + _png_chunk(b"IHDR", struct.pack(">IIBBBBB", width, height, 8, 2, 0, 0, 0))
        + _png_chunk(b"IDAT", zlib.compress(b"\x00"))
        + _png_chunk(b"IEND", b"")
    )


def close_to(pixel: tuple[int, ...], expected: tuple[int, ...], tolerance: int = 2) -> bool:
    return all(abs(a - b) <= tolerance for a, b in zip(pixel, expected))


def serve_png(
    image: Optional[Image.Image] = None,
    allow_origin: Optional[str] = None,
    status_code: int = 200,
    requests: Optional[list] = None,
) -> Callable[[httpx.Request], httpx.Response]:
    """Build a MockTransport handler answering every request with a PNG."""
    content = png_bytes(image or make_image(color=BLUE))

    def handler(request: httpx.Request) -> httpx.Response:
        if requests is not None:
            requests.append(request)
        headers = {"content-type": "image/png"}
        if allow_origin is not None:
            headers["access-control-allow-origin"] = allow_origin
        return httpx.Response(status_code, headers=headers, content=content)

    return handler


def mock_loader(
    handler: Callable[[httpx.Request], httpx.Response],
    origin: str = EDITOR_ORIGIN,
    **kwargs,
) -> ResourceLoader:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return ResourceLoader(origin=origin, client=client, **kwargs)
