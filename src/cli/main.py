"""Command-line interface: list, view and export payouts.

Commands stay thin: they parse arguments, own the logging lifecycle and the
HTTP client, and delegate to `ExportPipeline`.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, NoReturn

import typer
from pydantic import ValidationError
from rich.console import Console

from adapters.cursor_store import FileCursorStore
from adapters.http_client import build_async_client
from adapters.stripe_ledger import StripeLedgerClient
from cli import doctor
from cli.ui_components import (
    build_payout_details_table,
    build_payouts_table,
    build_transactions_table,
)
from core.config import AppSettings
from core.domain.errors import CursorNotFoundError, RemoteFetchError, UnsupportedFormatError
from core.domain.report_format import ReportFormat
from core.logging_setup import configure_logging, shutdown_logging
from core.services.export_pipeline import ExportPipeline, ExportSummary

# Value injected by `run()` for a bare `--lastid`: read the cursor file.
LASTID_FROM_FILE = "@lastid"

app = typer.Typer(no_args_is_help=True, help="Export payout reports (HTML, PDF, JSON) from the ledger API.")
app.add_typer(doctor.app, name="doctor")

_console = Console()
_err_console = Console(stderr=True)


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug output."),
) -> None:
    ctx.obj = {"verbose": verbose}


def _fail(message: str) -> NoReturn:
    _err_console.print(f"[red]Error:[/red] {message}")
    raise typer.Exit(code=1)


@contextmanager
def _logging(ctx: typer.Context, log_file: Path | None = None) -> Iterator[logging.Logger]:
    verbose = bool(ctx.obj and ctx.obj.get("verbose"))
    logger = configure_logging(verbose=verbose, log_file=log_file, console=_err_console)
    try:
        yield logger
    finally:
        shutdown_logging()


def _load_settings() -> AppSettings:
    try:
        return AppSettings()
    except ValidationError as exc:
        fields = {str(err["loc"][0]) for err in exc.errors() if err["loc"]}
        if "default_format" in fields:
            _fail("PAYOUT_REPORTS_DEFAULT_FORMAT must be html, pdf, or json.")
        _fail(f"Invalid configuration: {exc}")


def _settings_with_key() -> AppSettings:
    settings = _load_settings()
    if not settings.api_key:
        _fail("No API key configured. Set PAYOUT_REPORTS_API_KEY or run `doctor set-key`.")
    return settings


def _parse_since(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        day = datetime.strptime(value, "%Y-%m-%d")
    except ValueError as exc:
        raise typer.BadParameter("expected YYYY-MM-DD", param_hint="--since") from exc
    return day.replace(tzinfo=timezone.utc)


@app.command("list")
def list_payouts(
    ctx: typer.Context,
    limit: int | None = typer.Option(None, "--limit", min=1, help="Maximum number of payouts."),
    since: str | None = typer.Option(None, "--since", help="Only payouts created on or after YYYY-MM-DD."),
) -> None:
    """List payouts, newest first."""

    created_after = _parse_since(since)
    settings = _settings_with_key()

    async def _run(logger: logging.Logger):
        async with build_async_client(settings) as client:
            pipeline = ExportPipeline(StripeLedgerClient(client, logger=logger), settings, logger=logger)
            return await pipeline.list_payouts(limit=limit, since=created_after)

    with _logging(ctx) as logger:
        payouts = asyncio.run(_run(logger))

    if not payouts:
        _console.print("No payouts found.")
        return
    _console.print(f"Found {len(payouts)} payouts:")
    _console.print(build_payouts_table(payouts))


@app.command()
def view(
    ctx: typer.Context,
    payout_id: str | None = typer.Argument(None, help="Payout ID (po_...)."),
) -> None:
    """Show a payout and its related transactions."""

    if not payout_id:
        _fail('Payout ID is required for "view" command.')
    settings = _settings_with_key()

    async def _run(logger: logging.Logger):
        async with build_async_client(settings) as client:
            ledger = StripeLedgerClient(client, logger=logger)
            pipeline = ExportPipeline(ledger, settings, logger=logger)
            payout = await ledger.retrieve_payout(payout_id)
            transactions = await pipeline.fetch_transactions(payout_id)
            return payout, transactions

    with _logging(ctx) as logger:
        try:
            payout, transactions = asyncio.run(_run(logger))
        except RemoteFetchError as exc:
            logger.error("Error fetching payout %s: %s", payout_id, exc)
            raise typer.Exit(code=1)

    _console.print(build_payout_details_table(payout))
    if transactions:
        _console.print(build_transactions_table(transactions))
    else:
        _console.print("No related transactions found.")


@app.command()
def export(
    ctx: typer.Context,
    payout_ids: list[str] | None = typer.Argument(None, help="Payout ID(s) to export."),
    lastid: str | None = typer.Option(
        None,
        "--lastid",
        help="Export every payout created after this ID. Without a value, continue from the lastid file.",
    ),
    report_format: str | None = typer.Option(None, "--format", help="html, pdf or json."),
    outdir: Path | None = typer.Option(None, "--outdir", help="Output directory."),
    log: Path | None = typer.Option(None, "--log", help="Log file (default: <log_dir>/export-<date>.log)."),
) -> None:
    """Export payout report(s)."""

    settings = _load_settings()
    try:
        fmt = ReportFormat.parse(report_format) if report_format else settings.default_format
    except UnsupportedFormatError:
        _fail("--format must be html, pdf, or json.")

    ids = list(payout_ids or [])
    store = FileCursorStore(settings.lastid_file)
    if lastid == LASTID_FROM_FILE:
        try:
            lastid = store.require_cursor()
        except CursorNotFoundError as exc:
            _fail(str(exc))
    if not ids and not lastid:
        _fail('Payout ID or --lastid is required for "export" command.')
    settings = _settings_with_key()

    today = datetime.now(timezone.utc).date().isoformat()
    log_file = log or settings.log_dir / f"export-{today}.log"

    async def _run(logger: logging.Logger) -> ExportSummary:
        async with build_async_client(settings) as client:
            pipeline = ExportPipeline(
                StripeLedgerClient(client, logger=logger),
                settings,
                cursor_store=store,
                logger=logger,
            )
            return await pipeline.export(ids, last_id=lastid, report_format=fmt, out_dir=outdir)

    with _logging(ctx, log_file=log_file) as logger:
        logger.debug("Output: %s, format: %s, ids: %s, lastid: %s", outdir or settings.output_dir, fmt.value, ids, lastid)
        try:
            summary = asyncio.run(_run(logger))
        except RemoteFetchError as exc:
            logger.error("Could not resolve payouts after %s: %s", lastid, exc)
            raise typer.Exit(code=1)

    for outcome in summary.exported:
        _console.print(
            f"Generated {fmt.label()} report for payout {outcome.payout_id} at {outcome.path}",
            soft_wrap=True,
        )
    if summary.failed:
        _console.print(f"[yellow]{len(summary.failed)} payout(s) failed; see the log for details.[/yellow]")
    if not summary.outcomes:
        _console.print("No payouts to export.")


def normalize_lastid_args(argv: list[str]) -> list[str]:
    """Give a bare `--lastid` the sentinel value that means "read the cursor file"."""

    out: list[str] = []
    for i, arg in enumerate(argv):
        out.append(arg)
        if arg == "--lastid":
            nxt = argv[i + 1] if i + 1 < len(argv) else None
            if nxt is None or nxt.startswith("-"):
                out.append(LASTID_FROM_FILE)
    return out


def run() -> None:
    app(args=normalize_lastid_args(sys.argv[1:]), prog_name="payout-reports")
