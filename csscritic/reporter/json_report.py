"""JSON report output."""

from __future__ import annotations

import json
import logging
import time
from pathlib import Path

from csscritic.models.comparison import SuiteReport
from csscritic.reporter.reporting import ReportedComparison
from csscritic.url_utils import reference_id_for

logger = logging.getLogger(__name__)


class JsonReporter:
    """Collects finished comparisons and writes a machine-readable report at the end of the run.

    Page images of comparisons that did not pass are saved next to the report
    so they can be inspected or copied by hand.
    """

    def __init__(self, output_dir: Path):
        self.output_dir = Path(output_dir)
        self.comparisons: list[ReportedComparison] = []

    def report_comparison(self, comparison: ReportedComparison) -> None:
        self.comparisons.append(comparison)

    def _save_page_image(self, comparison: ReportedComparison) -> str | None:
        if comparison.page_image is None or not hasattr(comparison.page_image, "save"):
            return None
        path = self.output_dir / "images" / f"{reference_id_for(comparison.test_case)}.png"
        path.parent.mkdir(parents=True, exist_ok=True)
        comparison.page_image.save(path, format="PNG")
        return str(path.relative_to(self.output_dir))

    def _entry(self, comparison: ReportedComparison) -> dict:
        entry = {
            "url": comparison.test_case.url,
            "params": comparison.test_case.params,
            "status": comparison.status,
            "render_errors": list(comparison.render_errors),
        }
        if comparison.status != "passed":
            entry["page_image"] = self._save_page_image(comparison)
        return entry

    def report(self, suite: SuiteReport) -> None:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        report = {
            "generated_at": time.strftime("%Y-%m-%dT%H:%M:%SZ"),
            "success": suite.success,
            "total": len(self.comparisons),
            "comparisons": [self._entry(c) for c in self.comparisons],
        }

        output_path = self.output_dir / "report.json"
        with open(output_path, "w") as f:
            json.dump(report, f, indent=2, default=str)
        logger.info("JSON report: %s", output_path)
