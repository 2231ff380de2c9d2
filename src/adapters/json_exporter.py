"""JSON export of lookup reports.

Why JSON:
- Interoperability with scripts and other tools.
- Keeps results around without depending on the Rich rendering.
"""

from __future__ import annotations

import json
from pathlib import Path

from core.domain.models import LookupReport


def report_to_json(report: LookupReport) -> str:
    """Serialize a `LookupReport` with stable key order."""

    payload = report.model_dump(mode="json")
    return json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True) + "\n"


def export_report_json(*, report: LookupReport, output_path: Path) -> Path:
    """Write a `LookupReport` to a UTF-8 JSON file."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(report_to_json(report), encoding="utf-8")
    return output_path
