"""Build the normalized `Report` for one payout.

Pure functions: no I/O, no clock access unless ``generated_on`` is omitted.
Amounts are always minor units divided by 100; currency exponents are not
taken into account.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from pathlib import Path
from typing import Iterable

from core.domain.models import (
    LogoConfig,
    Payout,
    PayoutSummary,
    Report,
    Transaction,
    TransactionView,
)
from core.domain.report_format import ReportFormat


def format_minor(amount_minor: int) -> str:
    """Minor units to a decimal string with exactly two fractional digits."""

    return f"{amount_minor / 100:.2f}"


def format_date(moment: datetime) -> str:
    """UTC calendar date (YYYY-MM-DD) of an instant."""

    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).date().isoformat()


def build_transaction_view(txn: Transaction) -> TransactionView:
    return TransactionView(
        transaction_id=txn.id,
        amount=format_minor(txn.amount_minor),
        fees=format_minor(txn.fee_minor),
        net=format_minor(txn.net_minor),
        currency=txn.currency.upper(),
        created=format_date(txn.created_at),
        description=txn.resolved_description,
    )


def sum_fees(views: Iterable[TransactionView]) -> str:
    # Float summation of the formatted strings, then 2dp. Not banker's rounding.
    total = 0.0
    for view in views:
        total += float(view.fees)
    return f"{total:.2f}"


def resolve_logo(
    logo: LogoConfig | None,
    report_format: ReportFormat,
    pdf_logo_path: Path | None,
) -> LogoConfig | None:
    """PDF embeds the bundled local asset; other formats keep the caller's logo."""

    if report_format is ReportFormat.PDF:
        return LogoConfig(
            url=str(pdf_logo_path) if pdf_logo_path else "",
            width=logo.width if logo else None,
            height=logo.height if logo else None,
        )
    return logo


def build_report(
    payout: Payout,
    transactions: Iterable[Transaction],
    logo: LogoConfig | None,
    report_format: ReportFormat,
    *,
    pdf_logo_path: Path | None = None,
    generated_on: date | None = None,
) -> Report:
    """Convert a payout and its transactions into a `Report`."""

    txns = list(transactions)
    views = [build_transaction_view(txn) for txn in txns]
    invoices = sum(1 for txn in txns if txn.has_invoice)

    summary = PayoutSummary(
        id=payout.id,
        amount=format_minor(payout.amount_minor),
        currency=payout.currency.upper(),
        date=format_date(payout.created_at),
        status=payout.status,
        total_fees=sum_fees(views),
        number_of_invoices=invoices,
    )
    generated = generated_on or datetime.now(timezone.utc).date()
    return Report(
        logo=resolve_logo(logo, report_format, pdf_logo_path),
        payout=summary,
        transactions=views,
        generated_date=generated.isoformat(),
    )
