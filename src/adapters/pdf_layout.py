"""PDF layout engine for payout reports (ReportLab canvas).

Por qué un canvas y no Platypus/HTML:
- El reporte tiene una geometría fija (título, logo, bloque clave/valor y una
  tabla de ancho fijo) y necesitamos controlar exactamente dónde cae cada
  salto de página y que cada página repita la cabecera de la tabla.

Coordenadas:
- El layout razona con `y` medido desde el borde superior (como se lee la
  página); `_baseline` lo traduce al origen inferior de ReportLab.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Sequence

from reportlab.lib.colors import HexColor, black
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas as rl_canvas

from core.domain.errors import AssetLoadError, RenderError
from core.domain.models import LogoConfig, PayoutSummary, Report, TransactionView
from core.logging_setup import get_logger

FONT_REGULAR = "Helvetica"
FONT_BOLD = "Helvetica-Bold"
ELLIPSIS = "..."

TABLE_HEADER = ("Date", "Description", "ID", "Included Fees", "Net Amount")
TABLE_ALIGN = ("left", "left", "left", "right", "right")
NO_TRANSACTIONS = "No related transactions found."
LOGO_PLACEHOLDER = "Logo unavailable"


@dataclass(frozen=True)
class PdfLayout:
    """Geometría del documento. Unidades: puntos PDF."""

    page_size: tuple[float, float] = field(default_factory=lambda: landscape(A4))
    left_margin: float = 30
    right_margin: float = 30
    top_margin: float = 30
    bottom_margin: float = 40
    line_height: float = 20
    title: str = "Payment Report"
    title_size: float = 24
    title_gap: float = 60
    title_color: str = "#635BFF"
    detail_size: float = 12
    row_size: float = 11
    value_offset: float = 100
    logo_max_width: float = 150
    logo_default_width: float = 100
    # Date, ID, Included Fees and Net Amount are fixed; Description takes the rest.
    fixed_columns: tuple[float, float, float, float] = (100, 200, 120, 130)

    @property
    def width(self) -> float:
        return self.page_size[0]

    @property
    def height(self) -> float:
        return self.page_size[1]

    @property
    def content_width(self) -> float:
        return self.width - self.left_margin - self.right_margin

    @property
    def printable_bottom(self) -> float:
        return self.height - self.bottom_margin

    @property
    def column_widths(self) -> tuple[float, ...]:
        date_w, id_w, fees_w, net_w = self.fixed_columns
        description_w = self.content_width - sum(self.fixed_columns)
        return (date_w, description_w, id_w, fees_w, net_w)


@dataclass(frozen=True)
class PageCursor:
    """Posición vertical (desde arriba) y página actual."""

    y: float
    page_index: int = 0

    def advance(self, dy: float) -> "PageCursor":
        return replace(self, y=self.y + dy)

    def next_page(self, top: float) -> "PageCursor":
        return PageCursor(y=top, page_index=self.page_index + 1)


@dataclass(frozen=True)
class PdfRenderResult:
    path: Path
    pages: int


def fit_text(text: str, width: float, font: str, size: float) -> str:
    """Recorta `text` para que quepa en `width`, terminando en '...'."""

    if width <= 0:
        return ""
    if stringWidth(text, font, size) <= width:
        return text
    if stringWidth(ELLIPSIS, font, size) > width:
        return ""
    cut = len(text)
    while cut > 0 and stringWidth(text[:cut] + ELLIPSIS, font, size) > width:
        cut -= 1
    return text[:cut].rstrip() + ELLIPSIS


class PdfLayoutEngine:
    """Dibuja un `Report` sobre un canvas ReportLab (o compatible).

    Cada paso recibe un `PageCursor` y devuelve el siguiente; el único estado
    mutable es el propio canvas.
    """

    def __init__(self, layout: PdfLayout | None = None, *, logger: logging.Logger | None = None) -> None:
        self.layout = layout or PdfLayout()
        self._log = logger or get_logger(__name__)

    def draw(self, canvas: Any, report: Report) -> PageCursor:
        cursor = PageCursor(y=self.layout.top_margin)
        cursor = self.draw_title(canvas, cursor)
        self.draw_logo(canvas, report.logo)
        cursor = self.draw_details(canvas, cursor, report.payout)
        return self.layout_table(canvas, cursor, report.transactions)

    def draw_title(self, canvas: Any, cursor: PageCursor) -> PageCursor:
        layout = self.layout
        canvas.setFillColor(HexColor(layout.title_color))
        self._text(canvas, layout.title, layout.left_margin, cursor.y, font=FONT_BOLD, size=layout.title_size)
        canvas.setFillColor(black)
        return cursor.advance(layout.title_gap)

    def draw_logo(self, canvas: Any, logo: LogoConfig | None) -> None:
        """Logo arriba a la derecha; si falla, texto sustituto (nunca eleva)."""

        if logo is None or not logo.url:
            return
        layout = self.layout
        width = min(logo.width, layout.logo_max_width) if logo.width else layout.logo_default_width
        x = layout.width - layout.right_margin - width
        try:
            reader = ImageReader(logo.url)
            img_w, img_h = reader.getSize()
            height = logo.height or width * img_h / img_w
            canvas.drawImage(
                reader,
                x,
                layout.height - layout.top_margin - height,
                width=width,
                height=height,
                mask="auto",
            )
        except Exception as exc:
            # ReportLab/PIL raise a mix of IOError, OSError and decoder errors.
            error = AssetLoadError(f"Error loading logo {logo.url}: {exc}")
            self._log.warning("%s", error)
            x = layout.width - layout.right_margin - layout.logo_default_width
            self._text(canvas, LOGO_PLACEHOLDER, x, layout.top_margin, font=FONT_REGULAR, size=layout.detail_size)

    def draw_details(self, canvas: Any, cursor: PageCursor, payout: PayoutSummary) -> PageCursor:
        """Seis pares etiqueta/valor, dos por fila."""

        layout = self.layout
        details = [
            ("Payout ID", payout.id),
            ("Amount", f"{payout.amount} {payout.currency}"),
            ("Date", payout.date),
            ("Status", payout.status.value),
            ("Total Fees", f"{payout.total_fees} {payout.currency}"),
            ("# Invoices", str(payout.number_of_invoices)),
        ]
        column = layout.content_width / 2
        value_width = column - layout.value_offset - 10
        for row_start in range(0, len(details), 2):
            pairs = details[row_start : row_start + 2]
            for col, (label, value) in enumerate(pairs):
                x = layout.left_margin + col * column
                self._text(canvas, f"{label}:", x, cursor.y, font=FONT_BOLD, size=layout.detail_size)
                self._text(
                    canvas,
                    value,
                    x + layout.value_offset,
                    cursor.y,
                    font=FONT_REGULAR,
                    size=layout.detail_size,
                    width=value_width,
                )
            cursor = cursor.advance(layout.line_height)
        return cursor.advance(layout.line_height)

    def layout_table(
        self,
        canvas: Any,
        cursor: PageCursor,
        transactions: Sequence[TransactionView],
    ) -> PageCursor:
        """Tabla de transacciones con salto de página y cabecera repetida."""

        layout = self.layout
        if not transactions:
            self._text(canvas, NO_TRANSACTIONS, layout.left_margin, cursor.y, font=FONT_REGULAR, size=layout.row_size)
            return cursor.advance(layout.line_height)

        cursor = self._draw_table_header(canvas, cursor)
        last = len(transactions) - 1
        for index, txn in enumerate(transactions):
            # The last row never opens a page of its own.
            if cursor.y + layout.line_height > layout.printable_bottom and index < last:
                canvas.showPage()
                cursor = cursor.next_page(layout.top_margin)
                self._log.debug("Page %d started at row %d", cursor.page_index + 1, index)
                cursor = self._draw_table_header(canvas, cursor)
            cursor = cursor.advance(layout.line_height)
            cells = (
                txn.created,
                txn.description,
                txn.transaction_id,
                f"{txn.fees} {txn.currency}",
                f"{txn.net} {txn.currency}",
            )
            self._draw_cells(canvas, cursor, cells, font=FONT_REGULAR, size=layout.row_size)
        return cursor

    def _draw_table_header(self, canvas: Any, cursor: PageCursor) -> PageCursor:
        layout = self.layout
        self._draw_cells(canvas, cursor, TABLE_HEADER, font=FONT_BOLD, size=layout.detail_size)
        cursor = cursor.advance(layout.line_height)
        rule_y = layout.height - cursor.y
        canvas.line(layout.left_margin, rule_y, layout.left_margin + layout.content_width, rule_y)
        return cursor

    def _draw_cells(
        self,
        canvas: Any,
        cursor: PageCursor,
        cells: Sequence[str],
        *,
        font: str,
        size: float,
    ) -> None:
        x = self.layout.left_margin
        for cell, width, align in zip(cells, self.layout.column_widths, TABLE_ALIGN):
            self._text(canvas, cell, x, cursor.y, font=font, size=size, width=width, align=align)
            x += width

    def _baseline(self, top: float, size: float) -> float:
        return self.layout.height - top - size

    def _text(
        self,
        canvas: Any,
        text: str,
        x: float,
        top: float,
        *,
        font: str,
        size: float,
        width: float | None = None,
        align: str = "left",
    ) -> None:
        if width is not None:
            text = fit_text(text, width, font, size)
        canvas.setFont(font, size)
        baseline = self._baseline(top, size)
        if align == "right" and width is not None:
            canvas.drawRightString(x + width, baseline, text)
        else:
            canvas.drawString(x, baseline, text)


def render_pdf(
    report: Report,
    output_path: Path,
    *,
    layout: PdfLayout | None = None,
    logger: logging.Logger | None = None,
) -> PdfRenderResult:
    """Escribe el reporte como PDF y devuelve la ruta y el número de páginas.

    Sincrónico: el pipeline lo ejecuta en un thread (`asyncio.to_thread`).
    Los errores al escribir el fichero se elevan como `RenderError`.
    """

    engine = PdfLayoutEngine(layout, logger=logger)
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        pdf = rl_canvas.Canvas(str(output_path), pagesize=engine.layout.page_size)
        pdf.setTitle(f"Payout {report.payout.id}")
        cursor = engine.draw(pdf, report)
        pdf.save()
    except OSError as exc:
        raise RenderError(f"Could not write PDF {output_path}: {exc}") from exc
    return PdfRenderResult(path=output_path, pages=cursor.page_index + 1)
