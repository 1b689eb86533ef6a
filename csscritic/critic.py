"""Runs all test cases of a suite and reports their outcome."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Union

from csscritic.models.comparison import ComparisonResult, TestCase, ViewportSize
from csscritic.regression import DEFAULT_VIEWPORT, ImageComparer, Regression
from csscritic.reporter.protocol import (
    ComparisonReporter,
    ComparisonStartingReporter,
    SuiteReporter,
)
from csscritic.reporter.reporting import Reporting

logger = logging.getLogger(__name__)


class CssCritic:
    """Coordinates regression comparisons and reporter notifications for one run."""

    def __init__(
        self,
        renderer,
        image_store,
        reporters: list[Any] | None = None,
        comparer: ImageComparer | None = None,
        default_viewport: ViewportSize = DEFAULT_VIEWPORT,
    ):
        self.test_cases: list[TestCase] = []
        self.reporters: list[Any] = []
        self.reporting = Reporting(renderer, image_store)
        self.regression = Regression(renderer, image_store, comparer, default_viewport)
        for reporter in reporters or []:
            self.add_reporter(reporter)

    def add(self, test_case: Union[TestCase, dict, str]) -> TestCase:
        """Register a page to verify. Accepts a TestCase, a dict or a bare URL."""
        if isinstance(test_case, str):
            test_case = TestCase(url=test_case)
        elif isinstance(test_case, dict):
            test_case = TestCase(**test_case)
        self.test_cases.append(test_case)
        return test_case

    def add_reporter(self, reporter: Any) -> None:
        if not isinstance(reporter, (ComparisonStartingReporter, ComparisonReporter, SuiteReporter)):
            logger.warning("Reporter %s implements no reporting method and will never be called",
                           type(reporter).__name__)
        self.reporters.append(reporter)

    async def _compare_and_report(self, test_case: TestCase) -> ComparisonResult:
        result = await self.regression.compare(test_case)
        logger.info("[%s] %s", result.status.upper(), test_case.url)
        await self.reporting.report_comparison(self.reporters, result)
        return result

    async def execute(self) -> bool:
        """Run all test cases. Returns True iff every comparison passed."""
        start = time.time()
        test_cases = list(self.test_cases)
        logger.info("=== Running %d test case(s) ===", len(test_cases))

        await self.reporting.report_comparison_starting(self.reporters, test_cases)

        results = list(await asyncio.gather(
            *(self._compare_and_report(tc) for tc in test_cases)
        ))
        success = all(r.status == "passed" for r in results)

        await self.reporting.report_test_suite(self.reporters, success)

        logger.info("=== Run %s in %.1fs: %d passed of %d ===",
                    "succeeded" if success else "failed", time.time() - start,
                    sum(1 for r in results if r.status == "passed"), len(results))
        return success
