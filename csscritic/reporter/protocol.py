"""Optional reporter capabilities, one protocol per lifecycle notification.

A reporter implements any subset of these. ``Reporting`` checks for the
method before dispatching, so a reporter lacking one is simply skipped for
that event. Methods may return a plain value or an awaitable.

Example::

    class CountingReporter:
        def __init__(self):
            self.finished = 0

        def report_comparison(self, comparison):
            self.finished += 1
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Awaitable, Protocol, Union, runtime_checkable

if TYPE_CHECKING:
    from csscritic.models.comparison import ComparisonStarting, SuiteReport
    from csscritic.reporter.reporting import ReportedComparison


@runtime_checkable
class ComparisonStartingReporter(Protocol):
    def report_comparison_starting(
        self, starting: ComparisonStarting
    ) -> Union[None, Awaitable[Any]]:
        ...


@runtime_checkable
class ComparisonReporter(Protocol):
    def report_comparison(
        self, comparison: ReportedComparison
    ) -> Union[None, Awaitable[Any]]:
        ...


@runtime_checkable
class SuiteReporter(Protocol):
    def report(self, suite: SuiteReport) -> Union[None, Awaitable[Any]]:
        ...


__all__ = ["ComparisonReporter", "ComparisonStartingReporter", "SuiteReporter"]
