"""Page renderer — captures a page image with headless Chromium via Playwright."""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Any, Optional
from urllib.parse import urlparse

from PIL import Image
from playwright.async_api import Browser, Page, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError

from csscritic.errors import RenderError
from csscritic.models.comparison import RenderResult

logger = logging.getLogger(__name__)


def resolve_url(url: str, base_dir: Path | None = None) -> str:
    """Turn a relative file path into a file:// URL; leave real URLs untouched."""
    if urlparse(url).scheme:
        return url
    path = Path(url)
    if base_dir is not None and not path.is_absolute():
        path = base_dir / path
    return path.resolve().as_uri()


class PageRenderer:
    """Renders test case pages. Starts the browser lazily on first use."""

    def __init__(self, timeout_ms: int = 30000, base_dir: Path | None = None):
        self.timeout_ms = timeout_ms
        self.base_dir = base_dir
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None

    async def start(self) -> None:
        if self._browser is not None:
            return
        logger.debug("Launching headless Chromium")
        self._playwright = await async_playwright().start()
        self._browser = await self._playwright.chromium.launch(headless=True)

    async def close(self) -> None:
        if self._browser is not None:
            await self._browser.close()
            self._browser = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None

    async def __aenter__(self) -> "PageRenderer":
        await self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    @staticmethod
    def setup_listeners(page: Page, errors: list[str]) -> None:
        """Record the URLs of subresources that failed to load."""
        page.on("requestfailed", lambda req: errors.append(req.url))
        page.on("response", lambda resp: errors.append(resp.url)
                if resp.status >= 400 and resp.request.resource_type != "document"
                else None)

    async def render(self, spec: dict[str, Any]) -> RenderResult:
        """Render ``spec["url"]`` at ``spec["width"]`` x ``spec["height"]``.

        An optional ``hover`` selector is hovered before the capture. Raises
        RenderError when the page cannot be loaded, hovered or captured.
        """
        await self.start()
        url = resolve_url(spec["url"], self.base_dir)
        errors: list[str] = []

        context = await self._browser.new_context(
            viewport={"width": spec["width"], "height": spec["height"]},
        )
        try:
            page = await context.new_page()
            self.setup_listeners(page, errors)
            try:
                response = await page.goto(url, wait_until="load", timeout=self.timeout_ms)
            except PlaywrightError as e:
                raise RenderError(spec["url"], str(e)) from e
            if response is not None and not response.ok:
                raise RenderError(spec["url"], f"HTTP {response.status}")

            try:
                if spec.get("hover"):
                    await page.hover(spec["hover"], timeout=self.timeout_ms)
                png = await page.screenshot(full_page=True)
            except PlaywrightError as e:
                raise RenderError(spec["url"], str(e)) from e
        finally:
            await context.close()

        if errors:
            logger.debug("%d resource(s) failed to load for %s", len(errors), spec["url"])
        image = Image.open(io.BytesIO(png))
        image.load()
        return RenderResult(image=image, errors=errors)
