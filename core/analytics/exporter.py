"""
Export of the treasury breakdown for offline analysis.
"""
import csv
import json
from io import StringIO
from typing import Any, Dict

TREASURY_CSV_HEADER = ["workgroup_id", "workgroup_name", "workgroup_type", "total_usd"]
SUPPORTED_FORMATS = ("csv", "json")


class ReportExporter:
    """Serializes the treasury block of an analytics result"""

    def export_treasury(self, treasury: Dict[str, Any], format: str = "csv") -> str:
        """Export the per-workgroup treasury breakdown in the given format"""
        if format.lower() == "csv":
            return self._export_csv(treasury)
        elif format.lower() == "json":
            return json.dumps(treasury.get("byWorkGroup", []), indent=2)
        else:
            raise ValueError(f"Unsupported export format: {format}")

    def filename(self, period_days: int, format: str = "csv") -> str:
        return f"treasury_by_workgroup_{period_days}d.{format.lower()}"

    def _export_csv(self, treasury: Dict[str, Any]) -> str:
        output = StringIO()
        writer = csv.writer(output, quoting=csv.QUOTE_ALL, lineterminator="\n")
        writer.writerow(TREASURY_CSV_HEADER)
        for entry in treasury.get("byWorkGroup", []):
            writer.writerow([entry["id"], entry["name"], entry["type"], _format_amount(entry["totalUSD"])])
        # Rows are newline-joined with no trailing newline
        return output.getvalue().rstrip("\n")


def _format_amount(value: float) -> str:
    # Whole amounts print without a trailing ".0"
    if float(value).is_integer():
        return str(int(value))
    return str(value)
