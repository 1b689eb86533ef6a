"""File image store — persists reference images and the viewport they were captured at."""

from __future__ import annotations

import asyncio
import hashlib
import json
import logging
import time
from pathlib import Path

from PIL import Image

from csscritic.models.comparison import TestCase, ViewportSize
from csscritic.models.reference import ReferenceEntry, ReferenceRegistry
from csscritic.url_utils import reference_id_for

logger = logging.getLogger(__name__)


class FileImageStore:
    """Stores reference PNGs under ``<base_dir>/images`` with a JSON registry."""

    def __init__(self, base_dir: Path):
        self.base_dir = Path(base_dir)
        self.registry_path = self.base_dir / "registry.json"

    def load(self) -> ReferenceRegistry:
        """Load registry from disk, or create a new one."""
        if self.registry_path.exists():
            try:
                with open(self.registry_path) as f:
                    data = json.load(f)
                return ReferenceRegistry(**data)
            except Exception as e:
                logger.warning("Failed to load reference registry: %s. Creating new.", e)
        return ReferenceRegistry()

    def save(self, registry: ReferenceRegistry) -> None:
        """Persist registry to disk."""
        self.registry_path.parent.mkdir(parents=True, exist_ok=True)
        registry.last_updated = time.strftime("%Y-%m-%dT%H:%M:%SZ")
        with open(self.registry_path, "w") as f:
            json.dump(registry.model_dump(), f, indent=2)
        logger.debug("Saved reference registry to %s", self.registry_path)

    def _image_path(self, reference_id: str) -> Path:
        return self.base_dir / "images" / f"{reference_id}.png"

    def get_entry(self, test_case: TestCase) -> ReferenceEntry | None:
        """Look up the registry entry for a test case, if its image still exists."""
        key = reference_id_for(test_case)
        entry = self.load().references.get(key)
        if entry is None:
            return None
        abs_path = self.base_dir / entry.image_path
        if not abs_path.exists():
            logger.warning("Reference image missing for %s: %s", test_case.url, abs_path)
            return None
        return entry

    def _read_image(self, test_case: TestCase) -> Image.Image | None:
        entry = self.get_entry(test_case)
        if entry is None:
            return None
        with Image.open(self.base_dir / entry.image_path) as img:
            img.load()
            return img.copy()

    def _store_image(self, test_case: TestCase, image: Image.Image, size: ViewportSize) -> ReferenceEntry:
        key = reference_id_for(test_case)
        dest = self._image_path(key)
        dest.parent.mkdir(parents=True, exist_ok=True)
        image.save(dest, format="PNG")

        # Relative path from base_dir for portability
        rel_path = str(dest.relative_to(self.base_dir))

        entry = ReferenceEntry(
            url=test_case.url,
            params=test_case.params,
            viewport_width=size.width,
            viewport_height=size.height,
            image_path=rel_path,
            captured_at=time.strftime("%Y-%m-%dT%H:%M:%SZ"),
            image_hash=hashlib.sha256(dest.read_bytes()).hexdigest(),
        )

        registry = self.load()
        registry.references[key] = entry
        self.save(registry)
        logger.info("Stored reference for %s (%dx%d)", test_case.url, size.width, size.height)
        return entry

    async def read_reference_image(self, test_case: TestCase) -> Image.Image | None:
        return await asyncio.to_thread(self._read_image, test_case)

    async def read_reference_viewport(self, test_case: TestCase) -> ViewportSize | None:
        """Viewport the stored reference was captured at, if there is one."""
        entry = await asyncio.to_thread(self.get_entry, test_case)
        if entry is None:
            return None
        return ViewportSize(width=entry.viewport_width, height=entry.viewport_height)

    async def store_reference_image(self, test_case: TestCase, image: Image.Image, size: ViewportSize) -> None:
        await asyncio.to_thread(self._store_image, test_case, image, size)
