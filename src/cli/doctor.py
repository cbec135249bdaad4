"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio
import tempfile
from datetime import datetime, timezone
from pathlib import Path

import typer
from rich.console import Console

from adapters.http_client import build_async_client
from adapters.pdf_layout import render_pdf
from adapters.stripe_ledger import StripeLedgerClient
from cli.ui_components import build_doctor_table
from core.config import AppSettings, write_user_env_vars
from core.domain.models import Payout, PayoutStatus
from core.domain.report_format import ReportFormat
from core.services.aggregator import build_report

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


async def _check_api(settings: AppSettings) -> tuple[bool, str]:
    try:
        async with build_async_client(settings) as client:
            page = await StripeLedgerClient(client).list_payouts(limit=1)
        return True, f"OK ({len(page.data)} payout(s) visible)"
    except Exception as exc:
        return False, str(exc)


def _check_pdf(settings: AppSettings) -> tuple[bool, str]:
    """Render a one-page PDF with the configured logo asset."""

    payout = Payout(
        id="po_doctor",
        amount_minor=0,
        currency="usd",
        created_at=datetime.now(timezone.utc),
        status=PayoutStatus.PAID,
    )
    report = build_report(payout, [], settings.logo(), ReportFormat.PDF, pdf_logo_path=settings.pdf_logo_path)
    try:
        with tempfile.TemporaryDirectory() as tmp:
            result = render_pdf(report, Path(tmp) / "doctor.pdf")
        return True, f"OK ({result.pages} page)"
    except Exception as exc:
        return False, str(exc)


def _check_writable(path: Path) -> tuple[bool, str]:
    try:
        path.mkdir(parents=True, exist_ok=True)
        probe = path / ".doctor"
        probe.write_text("ok", encoding="utf-8")
        probe.unlink()
        return True, str(path.resolve())
    except OSError as exc:
        return False, str(exc)


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()
    table = build_doctor_table()

    if settings.api_key:
        table.add_row("API key", "OK", "Key configured")
        ok_api, detail_api = asyncio.run(_check_api(settings))
        table.add_row("Ledger API", "OK" if ok_api else "FAIL", detail_api)
    else:
        table.add_row("API key", "MISSING", "Set PAYOUT_REPORTS_API_KEY or run `doctor set-key`")
    table.add_row("API base_url", "OK", settings.api_base_url)

    ok_out, detail_out = _check_writable(settings.output_dir)
    table.add_row("Output dir", "OK" if ok_out else "FAIL", detail_out)

    if settings.pdf_logo_path.is_file():
        table.add_row("PDF logo", "OK", str(settings.pdf_logo_path))
    else:
        table.add_row("PDF logo", "MISSING", "PDFs will show a placeholder instead")

    ok_pdf, detail_pdf = _check_pdf(settings)
    table.add_row("PDF render", "OK" if ok_pdf else "FAIL", detail_pdf)

    _console.print(table)


@app.command(name="set-key")
def set_key() -> None:
    """Store the ledger API key in the user config .env."""

    api_key = typer.prompt("Ledger secret key", hide_input=True, confirmation_prompt=False).strip()
    base_url = typer.prompt("API base URL", default="https://api.stripe.com", show_default=True).strip()
    if not api_key:
        raise typer.BadParameter("api key is required")

    env_path = write_user_env_vars(
        {
            "PAYOUT_REPORTS_API_KEY": api_key,
            "PAYOUT_REPORTS_API_BASE_URL": base_url,
        }
    )
    _console.print(f"[green]Saved API config to:[/green] {env_path}")
