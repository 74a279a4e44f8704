"""JSON output formatter."""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from script_usage_checker.models import UsageResult

logger = logging.getLogger(__name__)


class JSONReporter:
    """Generates JSON format reports."""

    def generate_report(self, results: list[UsageResult], output_file: Path | None = None) -> str:
        """Generate JSON report.

        Args:
            results: Usage results
            output_file: Optional path to save report

        Returns:
            JSON string
        """
        data = {
            "version": "1.0",
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "summary": self._generate_summary(results),
            "scripts": [
                self._serialize_result(result)
                for result in results
            ],
        }

        json_str = json.dumps(data, indent=2, ensure_ascii=False, default=str)

        if output_file:
            output_file.parent.mkdir(parents=True, exist_ok=True)
            output_file.write_text(json_str, encoding="utf-8")

        return json_str

    def _generate_summary(self, results: list[UsageResult]) -> dict[str, Any]:
        """Generate summary statistics."""
        used = sum(1 for r in results if r.is_used)
        return {
            "total_scripts": len(results),
            "used": used,
            "unused": len(results) - used,
            "name_collisions": sum(1 for r in results if r.name_collision),
        }

    def _serialize_result(self, result: UsageResult) -> dict[str, Any]:
        """Serialize a single result to dict."""
        entity = result.entity
        return {
            "name": entity.name,
            "namespace": entity.namespace,
            "kind": entity.kind.value,
            "file": str(entity.file_path),
            "status": result.verdict.value,
            "attached_to": list(result.attached_to),
            "has_lifecycle_hook": result.has_lifecycle_hook,
            "name_collision": result.name_collision,
            "references": [
                {
                    "file": hit.file_name,
                    "line": hit.line_number,
                    # Report text has quotes doubled for CSV
                    "text": hit.text.replace('""', '"'),
                }
                for hit in result.references
            ],
        }
