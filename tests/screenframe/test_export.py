import logging

import pytest

from screenframe.catalog import Background, Effect
from screenframe.errors import ExportError, ExportUnavailableError, TaintedCanvasError
from screenframe.export import DirectorySaver, FileBlob, encode_png, export, rasterize
from screenframe.options import RenderOptions
from screenframe.state import CompositionState
from screenframe.style import derive_style

from .utils import BLUE, CDN_URL, data_uri, make_image, mock_loader, serve_png

logger = logging.getLogger(__name__)

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


def test_export_requires_screenshot():
    with pytest.raises(ExportUnavailableError):
        export(CompositionState())
    with pytest.raises(ExportUnavailableError):
        rasterize(CompositionState().snapshot())


def test_export(state):
    blob = export(state)
    assert isinstance(blob, FileBlob)
    assert blob.filename == "screenshot.png"
    assert blob.media_type == "image/png"
    assert blob.data.startswith(PNG_SIGNATURE)
    assert blob.size == len(blob.data)
    image = blob.topil()
    assert image.format == "PNG"
    assert image.size == (1024, 768)


def test_export_filename(state):
    blob = export(state, options=RenderOptions(filename="framed.png"))
    assert blob.filename == "framed.png"
    with pytest.raises(ValueError):
        RenderOptions(filename="../framed.png")


@pytest.mark.slow
def test_export_idempotent(state):
    state.set_background(Background(0, "Blue", data_uri(make_image((160, 90), BLUE))))
    state.set_effect(Effect(3, "Effect 4", "blur(3px)"))
    state.set_frame("mobile")
    state.set_zoom(1.4)
    assert export(state).data == export(state).data
    snapshot = state.snapshot()
    assert export(snapshot, derive_style(snapshot)).data == export(snapshot).data


def test_export_ignores_viewport_scale(state):
    full = export(state)
    state.set_viewport_scale(0.3)
    assert export(state).data == full.data


def test_export_tainted_canvas(state):
    state.set_background(Background(0, "Remote", CDN_URL))
    before = state.snapshot()
    with pytest.raises(TaintedCanvasError):
        export(state, loader=mock_loader(serve_png()))
    assert state.snapshot() == before


def test_export_malformed_filter(state):
    state.set_effect(Effect(0, "Broken", "hue-rotate(90)"))
    with pytest.raises(ExportError):
        export(state)


def test_export_reads_one_snapshot(state):
    snapshot = state.snapshot()
    state.set_frame("tablet")
    assert export(snapshot).topil().size == (1024, 768)


def test_encode_png_deterministic():
    image = make_image((10, 10))
    assert encode_png(image) == encode_png(image.copy())


def test_directory_saver(tmp_path, state):
    blob = export(state)
    path = DirectorySaver(tmp_path / "out").save(blob)
    assert path == str(tmp_path / "out" / "screenshot.png")
    with open(path, "rb") as f:
        assert f.read() == blob.data
