"""Configuration models for csscritic."""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from csscritic.models.comparison import TestCase, ViewportSize


class CriticConfig(BaseModel):
    # Pages under test
    test_cases: list[TestCase] = Field(default_factory=list)

    # Reference images
    reference_dir: str = "./.csscritic/references"

    # Rendering
    default_viewport: ViewportSize = Field(
        default_factory=lambda: ViewportSize(width=800, height=100)
    )
    browser_timeout_ms: int = 30000

    # Comparison
    diff_tolerance: float = 0.0  # fraction of differing pixels still counted as a match

    # Reporting
    report_formats: list[str] = Field(default_factory=lambda: ["terminal"])
    report_output_dir: str = "./csscritic-reports"

    @field_validator("test_cases", mode="before")
    @classmethod
    def coerce_url_strings(cls, v):
        if isinstance(v, list):
            return [{"url": item} if isinstance(item, str) else item for item in v]
        return v

    @classmethod
    def load(cls, path: str | Path) -> "CriticConfig":
        """Load config from a JSON file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with open(path) as f:
            data = json.load(f)
        return cls(**data)

    def save(self, path: str | Path) -> None:
        """Save config to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(self.model_dump(), f, indent=2)
