"""Regression comparison — renders a test case and classifies it against its reference."""

from __future__ import annotations

import logging

from PIL import Image, ImageChops

from csscritic.errors import RenderError
from csscritic.models.comparison import ComparisonResult, TestCase, ViewportSize

logger = logging.getLogger(__name__)

DEFAULT_VIEWPORT = ViewportSize(width=800, height=100)


class ImageComparer:
    """Pixel comparison with a tolerance for the fraction of differing pixels."""

    def __init__(self, tolerance: float = 0.0, pixel_threshold: int = 0):
        self.tolerance = tolerance
        self.pixel_threshold = pixel_threshold

    def diff_ratio(self, image: Image.Image, reference: Image.Image) -> float:
        """Fraction of pixels whose channels differ by more than the threshold."""
        if image.size != reference.size:
            return 1.0
        total = image.size[0] * image.size[1]
        if total == 0:
            return 0.0

        diff = ImageChops.difference(image.convert("RGBA"), reference.convert("RGBA"))
        if diff.getbbox() is None:
            return 0.0
        differing = sum(1 for px in diff.getdata() if max(px) > self.pixel_threshold)
        return differing / total

    def matches(self, image: Image.Image, reference: Image.Image) -> bool:
        return self.diff_ratio(image, reference) <= self.tolerance


class Regression:
    """Produces a ComparisonResult for one test case."""

    def __init__(self, renderer, image_store, comparer: ImageComparer | None = None,
                 default_viewport: ViewportSize = DEFAULT_VIEWPORT):
        self.renderer = renderer
        self.image_store = image_store
        self.comparer = comparer or ImageComparer()
        self.default_viewport = default_viewport

    async def _viewport_for(self, test_case: TestCase) -> ViewportSize:
        # Stored reference geometry first, then the test case's own, then the default
        read_viewport = getattr(self.image_store, "read_reference_viewport", None)
        if read_viewport is not None:
            stored = await read_viewport(test_case)
            if stored is not None:
                return stored
        params = test_case.params
        return ViewportSize(
            width=params.get("width", self.default_viewport.width),
            height=params.get("height", self.default_viewport.height),
        )

    async def compare(self, test_case: TestCase) -> ComparisonResult:
        reference_image = await self.image_store.read_reference_image(test_case)
        viewport = await self._viewport_for(test_case)

        try:
            rendered = await self.renderer.render(test_case.render_spec(viewport.width, viewport.height))
        except RenderError as e:
            logger.warning("%s", e)
            return ComparisonResult(status="error", test_case=test_case)

        if reference_image is None:
            status = "reference_missing"
        elif self.comparer.matches(rendered.image, reference_image):
            status = "passed"
        else:
            status = "failed"
        logger.debug("%s: %s (%dx%d)", test_case.url, status, viewport.width, viewport.height)

        return ComparisonResult(
            status=status,
            test_case=test_case,
            html_image=rendered.image,
            reference_image=reference_image,
            render_errors=rendered.errors,
            viewport_width=viewport.width,
            viewport_height=viewport.height,
        )
