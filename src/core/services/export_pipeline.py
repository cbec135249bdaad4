"""Payout export orchestration.

Resolves which payouts to export, then for each one fetches its transactions,
builds the `Report` and hands it to the renderer for the requested format.
Payouts are processed strictly one after another; a failure is logged and the
batch moves on to the next payout. The CLI is only responsible for parsing
arguments and presenting results.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Sequence

from adapters.json_exporter import export_report_json
from adapters.pdf_layout import PdfLayout, render_pdf
from adapters.report_exporter import export_report_html
from core.config import AppSettings
from core.domain.errors import ExportError
from core.domain.models import Payout, Report, Transaction
from core.domain.report_format import ReportFormat
from core.interfaces.cursor_store import CursorStore
from core.interfaces.ledger import LedgerClient
from core.logging_setup import get_logger
from core.services.aggregator import build_report
from core.services.paginator import fetch_all


@dataclass
class ExportOutcome:
    """Result of exporting a single payout."""

    payout_id: str
    path: Path | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class ExportSummary:
    """Output of an export run."""

    outcomes: list[ExportOutcome] = field(default_factory=list)
    cursor_written: str | None = None

    @property
    def exported(self) -> list[ExportOutcome]:
        return [o for o in self.outcomes if o.ok]

    @property
    def failed(self) -> list[ExportOutcome]:
        return [o for o in self.outcomes if not o.ok]


def report_filename(payout_id: str, report_format: ReportFormat) -> str:
    return f"payout_{payout_id}{report_format.suffix}"


class ExportPipeline:
    def __init__(
        self,
        ledger: LedgerClient,
        settings: AppSettings | None = None,
        *,
        cursor_store: CursorStore | None = None,
        logger: logging.Logger | None = None,
        pdf_layout: PdfLayout | None = None,
    ) -> None:
        self._ledger = ledger
        self._settings = settings or AppSettings()
        self._cursor_store = cursor_store
        self._log = logger or get_logger(__name__)
        self._pdf_layout = pdf_layout

    async def list_payouts(
        self,
        *,
        limit: int | None = None,
        since: datetime | None = None,
        strict: bool = False,
    ) -> list[Payout]:
        """Payouts newest first, optionally created at or after `since`."""

        async def fetch_page(cursor: str | None, size: int):
            return await self._ledger.list_payouts(limit=size, starting_after=cursor, created_after=since)

        return await fetch_all(
            fetch_page,
            limit=limit,
            page_size=self._settings.page_size,
            max_pages=self._settings.max_pages,
            strict=strict,
            logger=self._log,
        )

    async def fetch_transactions(self, payout_id: str) -> list[Transaction]:
        """Every balance transaction of a payout; fetch errors propagate."""

        async def fetch_page(cursor: str | None, size: int):
            return await self._ledger.list_transactions(
                payout_id=payout_id,
                limit=size,
                starting_after=cursor,
                expand_source=True,
            )

        return await fetch_all(
            fetch_page,
            page_size=self._settings.page_size,
            max_pages=self._settings.max_pages,
            strict=True,
            logger=self._log,
        )

    async def resolve_payout_ids(self, payout_ids: Sequence[str], last_id: str | None) -> list[str]:
        """Explicit IDs win; otherwise every payout newer than `last_id`, oldest first."""

        if payout_ids:
            return list(payout_ids)
        if not last_id:
            return []

        cursor_payout = await self._ledger.retrieve_payout(last_id)
        # Strict: the cursor only advances over a complete listing.
        listed = await self.list_payouts(since=cursor_payout.created_at, strict=True)
        ids = [p.id for p in listed]
        # Same-second payouts listed after the cursor are older than it.
        if last_id in ids:
            ids = ids[: ids.index(last_id)]
        ids.reverse()
        self._log.info("Payouts to export after %s: %s", last_id, ", ".join(ids) or "none")
        return ids

    async def build_report(self, payout_id: str, report_format: ReportFormat) -> Report:
        self._log.debug("Fetching payout %s", payout_id)
        payout = await self._ledger.retrieve_payout(payout_id)
        transactions = await self.fetch_transactions(payout_id)
        self._log.debug("Received %d transactions for payout %s", len(transactions), payout_id)
        return build_report(
            payout,
            transactions,
            self._settings.logo(),
            report_format,
            pdf_logo_path=self._settings.pdf_logo_path,
        )

    async def render(self, report: Report, report_format: ReportFormat, out_dir: Path) -> Path:
        path = out_dir / report_filename(report.payout.id, report_format)
        if report_format is ReportFormat.HTML:
            return export_report_html(report=report, output_path=path)
        if report_format is ReportFormat.JSON:
            return export_report_json(report=report, output_path=path)
        result = await asyncio.to_thread(
            render_pdf,
            report,
            path,
            layout=self._pdf_layout,
            logger=self._log,
        )
        self._log.debug("PDF for %s has %d page(s)", report.payout.id, result.pages)
        return result.path

    async def export_one(self, payout_id: str, report_format: ReportFormat, out_dir: Path) -> Path:
        report = await self.build_report(payout_id, report_format)
        return await self.render(report, report_format, out_dir)

    async def export(
        self,
        payout_ids: Sequence[str] = (),
        *,
        last_id: str | None = None,
        report_format: ReportFormat | None = None,
        out_dir: Path | None = None,
    ) -> ExportSummary:
        """Export each payout in turn and advance the cursor in continuation mode.

        Resolution errors in continuation mode propagate: without a complete
        list of newer payouts the cursor cannot be advanced safely.
        """

        report_format = report_format or self._settings.default_format
        out_dir = out_dir or self._settings.output_dir
        out_dir.mkdir(parents=True, exist_ok=True)
        continuation = not payout_ids and bool(last_id)

        work = await self.resolve_payout_ids(payout_ids, last_id)
        summary = ExportSummary()
        for payout_id in work:
            try:
                path = await self.export_one(payout_id, report_format, out_dir)
            except ExportError as exc:
                self._log.error("Error generating report for payout %s: %s", payout_id, exc)
                summary.outcomes.append(ExportOutcome(payout_id=payout_id, error=str(exc)))
                continue
            except Exception as exc:
                self._log.exception("Unexpected error generating report for payout %s", payout_id)
                summary.outcomes.append(ExportOutcome(payout_id=payout_id, error=str(exc)))
                continue
            self._log.info("Generated %s report for payout %s at %s", report_format.label(), payout_id, path)
            summary.outcomes.append(ExportOutcome(payout_id=payout_id, path=path))

        if continuation and work and self._cursor_store is not None:
            newest = work[-1]
            self._cursor_store.write_cursor(newest)
            summary.cursor_written = newest
            self._log.info("Updated lastid file with %s", newest)
        return summary
