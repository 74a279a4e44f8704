"""CSV report generator."""

import csv
import io
import logging
from datetime import datetime
from pathlib import Path

from script_usage_checker.models import UsageResult

logger = logging.getLogger(__name__)

REPORT_PREFIX = "ScriptUsageReport"

FULL_HEADER = "Name,Kind,AttachedTo,Status,References"
SIMPLE_HEADER = "Name,AttachedTo,Status"


def report_filename(timestamped: bool = True, now: datetime | None = None) -> str:
    """Build the report file name.

    Args:
        timestamped: If True, suffix the name with the local time
        now: Time to use instead of the current time

    Returns:
        File name such as ``ScriptUsageReport_20240102_030405.csv``
    """
    if not timestamped:
        return f"{REPORT_PREFIX}.csv"

    now = now or datetime.now()
    return f"{REPORT_PREFIX}_{now:%Y%m%d_%H%M%S}.csv"


def _csv_line(fields: list[str]) -> str:
    """Format fields as one CSV line, quoting only where needed."""
    buffer = io.StringIO()
    csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator="\r\n").writerow(fields)
    return buffer.getvalue()[:-2]


class CSVReporter:
    """Generates CSV usage reports."""

    def __init__(self, simple: bool = False) -> None:
        """Initialize CSV reporter.

        Args:
            simple: If True, write only Name, AttachedTo and Status
        """
        self.simple = simple

    def build_rows(self, results: list[UsageResult]) -> list[str]:
        """Build the report lines, header first.

        Args:
            results: Usage results

        Returns:
            List of CSV lines without line terminators
        """
        rows = [SIMPLE_HEADER if self.simple else FULL_HEADER]

        for result in results:
            name = result.entity.name
            attached = result.attachment_summary
            status = result.verdict.value

            if self.simple:
                rows.append(_csv_line([name, attached, status]))
            else:
                # Hit text already has its quotes doubled, so the column is written as is
                plain = _csv_line([name, result.entity.kind.value, attached, status])
                rows.append(f"{plain},\"{result.reference_summary}\"")

        return rows

    def generate_report(self, results: list[UsageResult], output_file: Path | None = None) -> str:
        """Generate CSV report.

        Args:
            results: Usage results
            output_file: Optional path to save report

        Returns:
            CSV text
        """
        csv_str = "\n".join(self.build_rows(results)) + "\n"

        if output_file:
            output_file.parent.mkdir(parents=True, exist_ok=True)
            output_file.write_text(csv_str, encoding="utf-8", newline="")
            logger.info(f"CSV report written: {output_file}")

        return csv_str

    def write_to_directory(
        self,
        results: list[UsageResult],
        output_dir: Path,
        timestamped: bool = True,
        now: datetime | None = None,
    ) -> Path:
        """Write the report into a directory under the standard file name.

        Returns:
            Path of the written report
        """
        output_file = Path(output_dir) / report_filename(timestamped, now)
        self.generate_report(results, output_file)
        return output_file
