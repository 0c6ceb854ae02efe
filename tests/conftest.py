"""Pytest configuration for screenframe tests."""

from typing import Any

import pytest

from screenframe.state import CompositionState

from .screenframe.utils import png_bytes


def pytest_configure(config: Any) -> None:
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "slow: mark test as rendering full size frames repeatedly",
    )


@pytest.fixture
def screenshot_bytes() -> bytes:
    return png_bytes()


@pytest.fixture
def state(screenshot_bytes: bytes) -> CompositionState:
    state = CompositionState()
    assert state.set_screenshot(screenshot_bytes)
    return state
