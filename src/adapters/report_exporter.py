"""Exportación de reportes HTML.

Por qué está en adapters:
- HTML es un detalle de infraestructura (Jinja2 + fichero en disco).
- El Core solo conoce el `Report` ya construido por el agregador.
"""

from __future__ import annotations

from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from core.domain.errors import RenderError
from core.domain.models import Report


_TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"


def _get_env() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(_TEMPLATES_DIR)),
        autoescape=select_autoescape(["html", "xml"]),
    )


def render_report_html(*, report: Report) -> str:
    """Renderiza un HTML autocontenido para el reporte."""

    template = _get_env().get_template("report.html")
    return template.render(
        report=report,
        payout=report.payout,
        transactions=report.transactions,
        logo=report.logo,
    )


def export_report_html(*, report: Report, output_path: Path) -> Path:
    """Exporta el reporte como HTML UTF-8."""

    html = render_report_html(report=report)
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(html, encoding="utf-8")
    except OSError as exc:
        raise RenderError(f"Could not write HTML {output_path}: {exc}") from exc
    return output_path
