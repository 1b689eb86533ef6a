"""Reporting orchestration — notifies reporters of comparison lifecycle events.

Every operation fans an event out to all reporters implementing the matching
method and only completes once each reporter's own work has settled. Reporter
methods are optional and may be plain functions or coroutines.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Callable, Iterable, Optional, Sequence, Union

from csscritic.models.comparison import (
    ComparisonResult,
    ComparisonStarting,
    RenderResult,
    SuiteReport,
    TestCase,
    ViewportSize,
)

logger = logging.getLogger(__name__)

DoneCallback = Optional[Callable[[], Any]]


async def _invoke(method: Callable[[Any], Any], payload: Any) -> None:
    result = method(payload)
    if inspect.isawaitable(result):
        await result


async def notify_all(
    reporters: Sequence[Any],
    method_name: str,
    events: Iterable[Any],
    shape: Callable[[Any], Any],
) -> None:
    """Call ``method_name`` on every reporter that has it, once per event.

    ``shape`` builds the payload for one (event, reporter) pairing, so each
    reporter gets its own payload object. Waits until all calls have settled,
    then re-raises the first reporter failure in dispatch order.
    """
    calls = []
    for event in events:
        for reporter in reporters:
            method = getattr(reporter, method_name, None)
            if not callable(method):
                continue
            logger.debug("Dispatching %s to %s", method_name, type(reporter).__name__)
            calls.append(_invoke(method, shape(event)))
    results = await asyncio.gather(*calls, return_exceptions=True)
    for result in results:
        if isinstance(result, BaseException):
            raise result


class PageActions:
    """Live page image and viewport of one reported comparison.

    Seeded from the comparison result and updated by every resize, so that
    accepting always stores the most recently rendered image and geometry.
    """

    def __init__(self, renderer, image_store, test_case: TestCase,
                 image: Any, width: int | None, height: int | None):
        self.renderer = renderer
        self.image_store = image_store
        self.test_case = test_case
        self.current_image = image
        self.current_width = width
        self.current_height = height

    async def resize(self, width: int, height: int) -> RenderResult:
        """Re-render the page at the given viewport and make it current."""
        logger.info("Re-rendering %s at %sx%s", self.test_case.url, width, height)
        result = await self.renderer.render(self.test_case.render_spec(width, height))
        self.current_image = result.image
        self.current_width = width
        self.current_height = height
        return result

    async def accept(self) -> None:
        """Store the current page image as the new reference."""
        logger.info("Accepting %s as reference (%sx%s)",
                    self.test_case.url, self.current_width, self.current_height)
        await self.image_store.store_reference_image(
            self.test_case,
            self.current_image,
            ViewportSize(width=self.current_width, height=self.current_height),
        )


class ReportedComparison:
    """Reporter-facing view of a comparison result with remediation actions attached.

    ``resize_page_image`` and ``accept_page`` are ``None`` for errored
    comparisons. ``as_dict()`` lists only the keys that apply to this
    comparison: no ``reference_image`` when there is none, no
    ``render_errors`` when the page rendered cleanly.
    """

    def __init__(
        self,
        status: str,
        test_case: TestCase,
        page_image: Any,
        reference_image: Any = None,
        render_errors: Sequence[str] = (),
        actions: PageActions | None = None,
    ):
        self.status = status
        self.test_case = test_case
        self.page_image = page_image
        self.reference_image = reference_image
        self.render_errors = list(render_errors)
        self._actions = actions

    @classmethod
    def from_result(cls, result: ComparisonResult, renderer, image_store) -> "ReportedComparison":
        actions = None
        if result.status != "error":
            actions = PageActions(
                renderer, image_store, result.test_case,
                result.html_image, result.viewport_width, result.viewport_height,
            )
        reference_image = None
        if result.status != "reference_missing":
            reference_image = result.reference_image
        return cls(
            status=result.status,
            test_case=result.test_case,
            page_image=result.html_image,
            reference_image=reference_image,
            render_errors=result.render_errors,
            actions=actions,
        )

    @property
    def resize_page_image(self):
        return self._resize_page_image if self._actions is not None else None

    @property
    def accept_page(self):
        return self._accept_page if self._actions is not None else None

    async def _resize_page_image(self, width: int, height: int, done: DoneCallback = None) -> None:
        result = await self._actions.resize(width, height)
        self.page_image = result.image
        if done is not None:
            done()

    async def _accept_page(self, done: DoneCallback = None) -> None:
        await self._actions.accept()
        if done is not None:
            done()

    def as_dict(self) -> dict[str, Any]:
        view: dict[str, Any] = {
            "status": self.status,
            "test_case": self.test_case,
            "page_image": self.page_image,
        }
        if self._actions is not None:
            view["resize_page_image"] = self.resize_page_image
            view["accept_page"] = self.accept_page
        if self.reference_image is not None:
            view["reference_image"] = self.reference_image
        if self.render_errors:
            view["render_errors"] = list(self.render_errors)
        return view

    def __repr__(self) -> str:
        return f"ReportedComparison(status={self.status!r}, url={self.test_case.url!r})"


class Reporting:
    """Delivers comparison lifecycle events to a list of reporters."""

    def __init__(self, renderer, image_store):
        self.renderer = renderer
        self.image_store = image_store

    async def report_comparison_starting(
        self, reporters: Sequence[Any], test_cases: Iterable[TestCase],
    ) -> None:
        """Announce each starting test case to every reporter."""
        await notify_all(
            reporters, "report_comparison_starting", test_cases,
            lambda test_case: ComparisonStarting(test_case=test_case),
        )

    async def report_comparison(
        self,
        reporters: Sequence[Any],
        comparisons: Union[ComparisonResult, Iterable[ComparisonResult]],
    ) -> None:
        """Deliver finished comparisons; each reporter gets its own view per comparison."""
        if isinstance(comparisons, ComparisonResult):
            comparisons = [comparisons]
        await notify_all(
            reporters, "report_comparison", comparisons,
            lambda result: ReportedComparison.from_result(result, self.renderer, self.image_store),
        )

    async def report_test_suite(self, reporters: Sequence[Any], success: bool) -> None:
        """Deliver the overall outcome of the run."""
        await notify_all(
            reporters, "report", [success],
            lambda value: SuiteReport(success=value),
        )
