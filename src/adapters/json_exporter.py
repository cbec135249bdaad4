"""Exportación JSON del reporte.

Por qué JSON:
- Interoperabilidad con otras herramientas contables y pipelines.
- Es la forma verbatim del `Report`: `Report.model_validate_json` lo reconstruye.
"""

from __future__ import annotations

import json
from pathlib import Path

from core.domain.errors import RenderError
from core.domain.models import Report


def report_to_json(report: Report) -> str:
    payload = report.model_dump(mode="json", by_alias=True)
    return json.dumps(payload, ensure_ascii=False, indent=2) + "\n"


def load_report_json(path: Path) -> Report:
    return Report.model_validate_json(path.read_text(encoding="utf-8"))


def export_report_json(*, report: Report, output_path: Path) -> Path:
    """Exporta `Report` a JSON UTF-8 (claves camelCase, indentación 2)."""

    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(report_to_json(report), encoding="utf-8")
    except OSError as exc:
        raise RenderError(f"Could not write JSON {output_path}: {exc}") from exc
    return output_path
