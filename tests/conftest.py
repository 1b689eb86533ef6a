"""Pytest configuration and shared fixtures."""

from unittest.mock import AsyncMock, Mock

import pytest
from PIL import Image

from csscritic.models.comparison import ComparisonResult, RenderResult, TestCase
from csscritic.reporter.reporting import Reporting


# ============================================================================
# Image Fixtures
# ============================================================================


@pytest.fixture
def white_image() -> Image.Image:
    return Image.new("RGB", (10, 5), "white")


@pytest.fixture
def black_image() -> Image.Image:
    return Image.new("RGB", (10, 5), "black")


# ============================================================================
# Collaborator Fixtures
# ============================================================================


@pytest.fixture
def renderer() -> Mock:
    """Renderer double returning a fixed page image."""
    mock = Mock(spec=["render"])
    mock.render = AsyncMock(return_value=RenderResult(image="the_new_html_image", errors=[]))
    return mock


@pytest.fixture
def image_store() -> Mock:
    """Image store double with no stored references."""
    mock = Mock(spec=["read_reference_image", "store_reference_image"])
    mock.read_reference_image = AsyncMock(return_value=None)
    mock.store_reference_image = AsyncMock(return_value=None)
    return mock


@pytest.fixture
def reporting(renderer, image_store) -> Reporting:
    return Reporting(renderer, image_store)


# ============================================================================
# Comparison Fixtures
# ============================================================================


@pytest.fixture
def make_result():
    """Factory for comparison results with sensible defaults."""
    def _make(
        status="passed",
        url="differentpage.html",
        html_image="the_html_image",
        reference_image="the_reference_image",
        render_errors=None,
        viewport_width=42,
        viewport_height=21,
        **params,
    ) -> ComparisonResult:
        return ComparisonResult(
            status=status,
            test_case=TestCase(url=url, **params),
            html_image=html_image,
            reference_image=reference_image,
            render_errors=render_errors or [],
            viewport_width=viewport_width,
            viewport_height=viewport_height,
        )
    return _make
