import logging

import httpx
import pytest

from screenframe.errors import ResourceError, TaintedCanvasError
from screenframe.resources import (
    ResourceLoader,
    cors_allows,
    decode_data_uri,
    origin_of,
)

from .utils import (
    BLUE,
    CDN_URL,
    EDITOR_ORIGIN,
    bytes_uri,
    data_uri,
    make_image,
    mock_loader,
    png_bytes,
    png_header,
    serve_png,
)

logger = logging.getLogger(__name__)


@pytest.mark.parametrize(
    "url, expected",
    [
        ("https://cdn.example/a.png", "https://cdn.example"),
        ("HTTPS://CDN.example:443/a.png", "https://cdn.example"),
        ("http://cdn.example:8080/a.png?x=1", "http://cdn.example:8080"),
        ("file:///tmp/a.png", "null"),
        ("data:image/png;base64,AAAA", "null"),
        ("/tmp/a.png", "null"),
    ],
)
def test_origin_of(url, expected):
    assert origin_of(url) == expected


@pytest.mark.parametrize(
    "header, expected",
    [
        ("*", True),
        (EDITOR_ORIGIN, True),
        ("https://other.example", False),
        (None, False),
    ],
)
def test_cors_allows(header, expected):
    headers = {} if header is None else {"access-control-allow-origin": header}
    response = httpx.Response(200, headers=headers)
    assert cors_allows(response, EDITOR_ORIGIN) is expected


def test_decode_data_uri():
    assert decode_data_uri("data:text/plain,hello%20world") == b"hello world"
    assert decode_data_uri("data:;base64,aGk=") == b"hi"
    with pytest.raises(ValueError):
        decode_data_uri("data:image/png;base64")


def test_load_data_uri():
    with ResourceLoader() as loader:
        image = loader.load(data_uri(make_image((30, 20), BLUE)))
    assert image.size == (30, 20)
    assert image.mode == "RGBA"
    assert image.getpixel((0, 0)) == BLUE


def test_load_local_file(tmp_path):
    path = tmp_path / "background.png"
    path.write_bytes(png_bytes(make_image((12, 8))))
    with ResourceLoader() as loader:
        assert loader.load(str(path)).size == (12, 8)
        assert loader.load(path.as_uri()).size == (12, 8)


def test_load_missing_file(tmp_path):
    with ResourceLoader() as loader:
        with pytest.raises(ResourceError):
            loader.load(str(tmp_path / "missing.png"))


def test_load_unsupported_scheme():
    with ResourceLoader() as loader:
        with pytest.raises(ResourceError):
            loader.load("ftp://cdn.example/a.png")


@pytest.mark.parametrize("allow_origin", ["*", EDITOR_ORIGIN])
def test_cross_origin_granted(allow_origin):
    requests = []
    loader = mock_loader(serve_png(allow_origin=allow_origin, requests=requests))
    image = loader.load(CDN_URL)
    assert image.getpixel((0, 0)) == BLUE
    assert requests[0].headers["origin"] == EDITOR_ORIGIN


@pytest.mark.parametrize("allow_origin", [None, "https://other.example"])
def test_cross_origin_tainted(allow_origin):
    loader = mock_loader(serve_png(allow_origin=allow_origin))
    with pytest.raises(TaintedCanvasError) as excinfo:
        loader.load(CDN_URL)
    assert excinfo.value.url == CDN_URL
    assert excinfo.value.origin == EDITOR_ORIGIN
    assert not loader.is_cached(CDN_URL)


def test_cross_origin_without_cors():
    requests = []
    loader = mock_loader(serve_png(allow_origin="*", requests=requests), use_cors=False)
    with pytest.raises(TaintedCanvasError):
        loader.load(CDN_URL)
    assert requests == []


def test_same_origin_skips_cors():
    requests = []
    loader = mock_loader(serve_png(requests=requests), origin="https://cdn.example")
    assert loader.load(CDN_URL).size == (200, 100)
    assert "origin" not in requests[0].headers


def test_http_error():
    loader = mock_loader(serve_png(allow_origin="*", status_code=404))
    with pytest.raises(ResourceError) as excinfo:
        loader.load(CDN_URL)
    assert "404" in excinfo.value.reason


def test_network_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    loader = mock_loader(handler)
    with pytest.raises(ResourceError):
        loader.load(CDN_URL)


def test_not_an_image():
    def handler(request):
        return httpx.Response(
            200, headers={"access-control-allow-origin": "*"}, content=b"<html>"
        )

    loader = mock_loader(handler)
    with pytest.raises(ResourceError):
        loader.load(CDN_URL)


def test_oversized_image():
    url = bytes_uri(png_header(30000, 30000))
    loader = ResourceLoader()
    with pytest.raises(ResourceError):
        loader.load(url)
    assert not loader.is_cached(url)


def test_cross_origin_redirect_tainted():
    requests = []

    def handler(request):
        requests.append(request)
        if request.url.host == "editor.example":
            return httpx.Response(302, headers={"location": CDN_URL})
        return httpx.Response(200, content=png_bytes())

    loader = mock_loader(handler)
    with pytest.raises(TaintedCanvasError) as excinfo:
        loader.load(EDITOR_ORIGIN + "/redirect.png")
    assert excinfo.value.origin == EDITOR_ORIGIN
    assert [str(r.url) for r in requests] == [
        EDITOR_ORIGIN + "/redirect.png",
        CDN_URL,
    ]


def test_cross_origin_redirect_granted():
    def handler(request):
        if request.url.host == "editor.example":
            return httpx.Response(302, headers={"location": CDN_URL})
        return httpx.Response(
            200,
            headers={"access-control-allow-origin": EDITOR_ORIGIN},
            content=png_bytes(),
        )

    loader = mock_loader(handler)
    assert loader.load(EDITOR_ORIGIN + "/redirect.png").size == (200, 100)


def test_origin_normalized():
    requests = []
    loader = mock_loader(
        serve_png(requests=requests), origin="HTTPS://Editor.example:443"
    )
    assert loader.origin == EDITOR_ORIGIN
    assert loader.load(EDITOR_ORIGIN + "/background.png").size == (200, 100)
    assert "origin" not in requests[0].headers
    assert ResourceLoader(origin="null").origin == "null"


def test_cache():
    requests = []
    loader = mock_loader(serve_png(allow_origin="*", requests=requests))
    first = loader.load(CDN_URL)
    assert loader.is_cached(CDN_URL)
    assert loader.load(CDN_URL) is first
    assert len(requests) == 1
    loader.close()
    assert not loader.is_cached(CDN_URL)


def test_cache_evicts_least_recently_used():
    requests = []
    loader = mock_loader(
        serve_png(allow_origin="*", requests=requests), cache_size=2
    )
    urls = ["https://cdn.example/%d.png" % i for i in range(3)]
    loader.load(urls[0])
    loader.load(urls[1])
    loader.load(urls[0])
    loader.load(urls[2])
    assert loader.is_cached(urls[0])
    assert not loader.is_cached(urls[1])
    assert loader.is_cached(urls[2])
    loader.load(urls[1])
    assert len(requests) == 4
