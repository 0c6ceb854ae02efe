import logging
import math

import numpy as np
import pytest

from screenframe.composite.filters import (
    FilterOp,
    apply_filter,
    apply_filters,
    grayscale_matrix,
    hue_rotate_matrix,
    parse_filter,
    saturate_matrix,
    sepia_matrix,
)
from screenframe.errors import FilterSyntaxError

logger = logging.getLogger(__name__)


def _solid(rgb, alpha=1.0, size=(8, 8)):
    color = np.empty(size + (3,), dtype=np.float32)
    color[:, :] = rgb
    return color, np.full(size + (1,), alpha, dtype=np.float32)


@pytest.mark.parametrize("expression", [None, "", "  ", "none", "NONE"])
def test_parse_identity(expression):
    assert parse_filter(expression) == ()


@pytest.mark.parametrize(
    "expression, expected",
    [
        ("blur(3px)", (FilterOp("blur", 3.0),)),
        ("blur(0)", (FilterOp("blur", 0.0),)),
        ("blur()", (FilterOp("blur", 0.0),)),
        ("brightness(150%)", (FilterOp("brightness", 1.5),)),
        ("contrast(2)", (FilterOp("contrast", 2.0),)),
        ("grayscale()", (FilterOp("grayscale", 1.0),)),
        ("grayscale(250%)", (FilterOp("grayscale", 1.0),)),
        ("sepia(.5)", (FilterOp("sepia", 0.5),)),
        ("hue-rotate(180deg)", (FilterOp("hue-rotate", 180.0 * (math.pi / 180.0)),)),
        ("hue-rotate(0.5turn)", (FilterOp("hue-rotate", math.pi),)),
        (
            "Blur(2px)  invert(100%) opacity(0.5)",
            (FilterOp("blur", 2.0), FilterOp("invert", 1.0), FilterOp("opacity", 0.5)),
        ),
    ],
)
def test_parse_filter(expression, expected):
    assert parse_filter(expression) == expected


@pytest.mark.parametrize(
    "expression",
    [
        "blur(",
        "blur(3px",
        "blur(3)",
        "blur(3em)",
        "blur(-1px)",
        "brightness(-50%)",
        "brightness(1px)",
        "hue-rotate(90)",
        "blur(1px) garbage",
        "3px",
    ],
)
def test_parse_filter_invalid(expression):
    with pytest.raises(FilterSyntaxError):
        parse_filter(expression)


def test_parse_filter_unknown_function(caplog):
    with caplog.at_level(logging.WARNING):
        ops = parse_filter("url(#glow) blur(1px)")
    assert ops == (FilterOp("blur", 1.0),)
    assert "url()" in caplog.text


@pytest.mark.parametrize(
    "matrix",
    [
        grayscale_matrix(0.0),
        sepia_matrix(0.0),
        saturate_matrix(1.0),
        hue_rotate_matrix(0.0),
    ],
)
def test_identity_matrices(matrix):
    np.testing.assert_allclose(matrix, np.eye(3), atol=1e-3)


def test_grayscale():
    color, alpha = apply_filter(*_solid((1.0, 0.0, 0.0)), FilterOp("grayscale", 1.0))
    np.testing.assert_allclose(color[0, 0], (0.2126,) * 3, atol=1e-5)
    assert np.all(alpha == 1.0)


def test_brightness_and_contrast():
    color, _ = apply_filter(*_solid((0.25, 0.5, 0.75)), FilterOp("brightness", 2.0))
    np.testing.assert_allclose(color[0, 0], (0.5, 1.0, 1.0))
    color, _ = apply_filter(*_solid((0.25, 0.5, 0.75)), FilterOp("contrast", 0.0))
    np.testing.assert_allclose(color[0, 0], (0.5, 0.5, 0.5))


def test_invert_and_opacity():
    color, alpha = apply_filters(
        *_solid((1.0, 0.25, 0.0)), (FilterOp("invert", 1.0), FilterOp("opacity", 0.5))
    )
    np.testing.assert_allclose(color[0, 0], (0.0, 0.75, 1.0))
    np.testing.assert_allclose(alpha[0, 0], (0.5,))


def test_blur_uniform_surface():
    color, alpha = apply_filter(*_solid((0.2, 0.4, 0.6)), FilterOp("blur", 3.0))
    expected = np.broadcast_to(np.array((0.2, 0.4, 0.6)), (8, 8, 3))
    np.testing.assert_allclose(color, expected, atol=1e-5)
    np.testing.assert_allclose(alpha, 1.0, atol=1e-6)


def test_blur_spreads_edges():
    color = np.zeros((9, 9, 3), dtype=np.float32)
    color[4, 4] = 1.0
    alpha = np.ones((9, 9, 1), dtype=np.float32)
    blurred, _ = apply_filter(color, alpha, FilterOp("blur", 1.0))
    assert blurred[4, 4, 0] < 1.0
    assert blurred[4, 5, 0] > 0.0
    assert blurred[0, 0, 0] < blurred[4, 5, 0]


def test_blur_zero_is_identity():
    color, alpha = _solid((0.1, 0.2, 0.3))
    assert apply_filter(color, alpha, FilterOp("blur", 0.0))[0] is color


def test_unknown_op():
    with pytest.raises(ValueError):
        apply_filter(*_solid((0.0, 0.0, 0.0)), FilterOp("drop-shadow", 1.0))
