"""
Filter effects.

This module parses CSS filter expressions and applies them to composited
pixels. Supported functions, applied left to right:

- ``blur(<length>)``: Gaussian blur, the length is the standard deviation
- ``brightness()``, ``contrast()``, ``saturate()``: linear color operations
- ``grayscale()``, ``sepia()``, ``invert()``, ``opacity()``: amounts are
  clamped to 1
- ``hue-rotate(<angle>)``

Amounts accept numbers or percentages (``50%`` is ``0.5``). ``none`` is the
identity. Unknown functions are skipped with a warning, malformed
expressions raise :py:class:`~screenframe.errors.FilterSyntaxError`.

Color matrices follow the Filter Effects Module Level 1 definitions and
operate on non-premultiplied color; blur operates on premultiplied color.

Example::

    from screenframe.composite.filters import apply_filters, parse_filter

    ops = parse_filter('blur(3px) grayscale(50%)')
    color, alpha = apply_filters(color, alpha, ops)
"""

import logging
import math
import re
from typing import Callable, Optional

import numpy as np
from attrs import define
from scipy import ndimage

from screenframe.composite import utils
from screenframe.constants import NO_FILTER
from screenframe.errors import FilterSyntaxError

logger = logging.getLogger(__name__)

_FUNCTION_RE = re.compile(r"\s*([a-zA-Z][a-zA-Z-]*)\(([^()]*)\)\s*")
_NUMBER_RE = re.compile(r"^([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)([a-zA-Z%]*)$")

_ANGLE_UNITS = {
    "deg": math.pi / 180.0,
    "grad": math.pi / 200.0,
    "rad": 1.0,
    "turn": 2.0 * math.pi,
}


@define(frozen=True)
class FilterOp:
    """One parsed filter function. ``value`` is in px, radians or a ratio."""

    name: str
    value: float


def _parse_number(name: str, argument: str) -> tuple[float, str]:
    match = _NUMBER_RE.match(argument)
    if match is None:
        raise FilterSyntaxError(f"Invalid argument for {name}(): {argument!r}")
    return float(match.group(1)), match.group(2).lower()


def _parse_length(name: str, argument: str) -> float:
    if not argument:
        return 0.0
    value, unit = _parse_number(name, argument)
    if unit not in ("px", "") or (unit == "" and value != 0):
        raise FilterSyntaxError(f"{name}() needs a length in px: {argument!r}")
    if value < 0:
        raise FilterSyntaxError(f"{name}() must not be negative: {argument!r}")
    return value


def _parse_angle(name: str, argument: str) -> float:
    if not argument:
        return 0.0
    value, unit = _parse_number(name, argument)
    if unit == "" and value == 0:
        return 0.0
    if unit not in _ANGLE_UNITS:
        raise FilterSyntaxError(f"{name}() needs an angle: {argument!r}")
    return value * _ANGLE_UNITS[unit]


def _parse_amount(name: str, argument: str) -> float:
    if not argument:
        return 1.0
    value, unit = _parse_number(name, argument)
    if unit == "%":
        value /= 100.0
    elif unit:
        raise FilterSyntaxError(f"{name}() needs a number or percentage: {argument!r}")
    if value < 0:
        raise FilterSyntaxError(f"{name}() must not be negative: {argument!r}")
    return value


def _clamped_amount(name: str, argument: str) -> float:
    return min(_parse_amount(name, argument), 1.0)


_PARSERS: dict[str, Callable[[str, str], float]] = {
    "blur": _parse_length,
    "brightness": _parse_amount,
    "contrast": _parse_amount,
    "saturate": _parse_amount,
    "grayscale": _clamped_amount,
    "sepia": _clamped_amount,
    "invert": _clamped_amount,
    "opacity": _clamped_amount,
    "hue-rotate": _parse_angle,
}


def parse_filter(expression: Optional[str]) -> tuple[FilterOp, ...]:
    """
    Parse a CSS filter expression.

    Args:
        expression: e.g. ``'blur(2px) contrast(120%)'``; None, empty and
            ``'none'`` yield no operations

    Returns:
        Tuple of :py:class:`FilterOp` in application order

    Raises:
        FilterSyntaxError: If the expression is malformed
    """
    if expression is None:
        return ()
    expression = expression.strip()
    if not expression or expression.lower() == NO_FILTER:
        return ()

    ops = []
    position = 0
    while position < len(expression):
        match = _FUNCTION_RE.match(expression, position)
        if match is None:
            raise FilterSyntaxError(
                f"Invalid filter expression at {position}: {expression!r}"
            )
        position = match.end()
        name, argument = match.group(1).lower(), match.group(2).strip()
        parser = _PARSERS.get(name)
        if parser is None:
            logger.warning("Unsupported filter function: %s()" % name)
            continue
        ops.append(FilterOp(name, parser(name, argument)))
    return tuple(ops)


def _matrix(color: np.ndarray, matrix: np.ndarray) -> np.ndarray:
    return utils.clip(np.einsum("hwc,rc->hwr", color, matrix).astype(np.float32))


def grayscale_matrix(amount: float) -> np.ndarray:
    a = 1.0 - amount
    return np.array(
        [
            [0.2126 + 0.7874 * a, 0.7152 - 0.7152 * a, 0.0722 - 0.0722 * a],
            [0.2126 - 0.2126 * a, 0.7152 + 0.2848 * a, 0.0722 - 0.0722 * a],
            [0.2126 - 0.2126 * a, 0.7152 - 0.7152 * a, 0.0722 + 0.9278 * a],
        ],
        dtype=np.float32,
    )


def sepia_matrix(amount: float) -> np.ndarray:
    a = 1.0 - amount
    return np.array(
        [
            [0.393 + 0.607 * a, 0.769 - 0.769 * a, 0.189 - 0.189 * a],
            [0.349 - 0.349 * a, 0.686 + 0.314 * a, 0.168 - 0.168 * a],
            [0.272 - 0.272 * a, 0.534 - 0.534 * a, 0.131 + 0.869 * a],
        ],
        dtype=np.float32,
    )


def saturate_matrix(amount: float) -> np.ndarray:
    s = amount
    return np.array(
        [
            [0.213 + 0.787 * s, 0.715 - 0.715 * s, 0.072 - 0.072 * s],
            [0.213 - 0.213 * s, 0.715 + 0.285 * s, 0.072 - 0.072 * s],
            [0.213 - 0.213 * s, 0.715 - 0.715 * s, 0.072 + 0.928 * s],
        ],
        dtype=np.float32,
    )


def hue_rotate_matrix(angle: float) -> np.ndarray:
    cos, sin = math.cos(angle), math.sin(angle)
    return np.array(
        [
            [
                0.213 + cos * 0.787 - sin * 0.213,
                0.715 - cos * 0.715 - sin * 0.715,
                0.072 - cos * 0.072 + sin * 0.928,
            ],
            [
                0.213 - cos * 0.213 + sin * 0.143,
                0.715 + cos * 0.285 + sin * 0.140,
                0.072 - cos * 0.072 - sin * 0.283,
            ],
            [
                0.213 - cos * 0.213 - sin * 0.787,
                0.715 - cos * 0.715 + sin * 0.715,
                0.072 + cos * 0.928 + sin * 0.072,
            ],
        ],
        dtype=np.float32,
    )


def blur(
    color: np.ndarray, alpha: np.ndarray, radius: float
) -> tuple[np.ndarray, np.ndarray]:
    """Gaussian blur with standard deviation ``radius`` px."""
    if radius <= 0:
        return color, alpha
    sigma = (radius, radius, 0)
    # Edge pixels extend outward.
    premultiplied = ndimage.gaussian_filter(color * alpha, sigma=sigma, mode="nearest")
    alpha = ndimage.gaussian_filter(alpha, sigma=sigma, mode="nearest")
    color = utils.clip(utils.divide(premultiplied, alpha))
    return color, utils.clip(alpha)


def apply_filter(
    color: np.ndarray, alpha: np.ndarray, op: FilterOp
) -> tuple[np.ndarray, np.ndarray]:
    """Apply one filter operation to ``(color, alpha)`` float arrays."""
    if op.name == "blur":
        return blur(color, alpha, op.value)
    elif op.name == "brightness":
        color = utils.clip(color * op.value)
    elif op.name == "contrast":
        color = utils.clip((color - 0.5) * op.value + 0.5)
    elif op.name == "invert":
        color = op.value * (1.0 - color) + (1.0 - op.value) * color
    elif op.name == "opacity":
        alpha = alpha * op.value
    elif op.name == "grayscale":
        color = _matrix(color, grayscale_matrix(op.value))
    elif op.name == "sepia":
        color = _matrix(color, sepia_matrix(op.value))
    elif op.name == "saturate":
        color = _matrix(color, saturate_matrix(op.value))
    elif op.name == "hue-rotate":
        color = _matrix(color, hue_rotate_matrix(op.value))
    else:
        raise ValueError(f"Unknown filter operation: {op.name}")
    return color.astype(np.float32), alpha.astype(np.float32)


def apply_filters(
    color: np.ndarray, alpha: np.ndarray, ops: tuple[FilterOp, ...]
) -> tuple[np.ndarray, np.ndarray]:
    """Apply filter operations in order."""
    for op in ops:
        logger.debug("Applying filter %s(%g)" % (op.name, op.value))
        color, alpha = apply_filter(color, alpha, op)
    return color, alpha
