"""Test case and comparison data structures shared by the runner and reporters."""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

ComparisonStatus = Literal["passed", "failed", "reference_missing", "error"]


class TestCase(BaseModel):
    """One page to verify. Extra fields (e.g. ``hover``) are kept verbatim."""

    __test__ = False  # not a pytest test class

    model_config = ConfigDict(extra="allow", frozen=True)

    url: str

    @property
    def params(self) -> dict[str, Any]:
        """Additional parameters beyond the URL."""
        return dict(self.model_extra or {})

    def render_spec(self, width: int, height: int) -> dict[str, Any]:
        """Build the renderer input for this test case at the given geometry."""
        spec = self.model_dump()
        spec.update(width=width, height=height)
        return spec


class ViewportSize(BaseModel):
    width: int
    height: int


class RenderResult(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    image: Any
    errors: list[str] = Field(default_factory=list)  # URLs of resources that failed to load


class ComparisonResult(BaseModel):
    """Classified outcome of comparing one rendered page against its reference."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    status: ComparisonStatus
    test_case: TestCase
    html_image: Any = None
    reference_image: Any = None
    render_errors: list[str] = Field(default_factory=list)
    viewport_width: Optional[int] = None
    viewport_height: Optional[int] = None

    @model_validator(mode="after")
    def require_viewport(self) -> "ComparisonResult":
        # A rendered page must carry the geometry it was rendered at
        if self.status != "error" and (self.viewport_width is None or self.viewport_height is None):
            raise ValueError(f"viewport_width and viewport_height are required for status {self.status!r}")
        return self


class ComparisonStarting(BaseModel):
    test_case: TestCase


class SuiteReport(BaseModel):
    success: bool
