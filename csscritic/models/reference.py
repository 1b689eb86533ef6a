"""Reference image registry data structures."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ReferenceEntry(BaseModel):
    url: str
    params: dict = Field(default_factory=dict)  # extra test case fields, e.g. hover
    viewport_width: int
    viewport_height: int
    image_path: str  # relative path from the reference dir to the PNG
    captured_at: str  # ISO timestamp
    image_hash: str  # SHA-256 hex digest


class ReferenceRegistry(BaseModel):
    last_updated: str = ""
    references: dict[str, ReferenceEntry] = Field(default_factory=dict)
    # key: reference_id_for(test_case)
