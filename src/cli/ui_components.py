"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar tablas en `list`, `view` y `doctor`.
"""

from __future__ import annotations

from typing import Iterable

from rich.table import Table

from core.domain.models import Payout, Transaction
from core.services.aggregator import format_date, format_minor


def _money(amount_minor: int, currency: str) -> str:
    return f"{format_minor(amount_minor)} {currency.upper()}"


def build_payouts_table(payouts: Iterable[Payout]) -> Table:
    table = Table(title="Payouts")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Date", style="white")
    table.add_column("Amount", justify="right")
    table.add_column("Currency")
    table.add_column("Status", style="green")
    for payout in payouts:
        table.add_row(
            payout.id,
            format_date(payout.created_at),
            format_minor(payout.amount_minor),
            payout.currency.upper(),
            payout.status.value,
        )
    return table


def build_payout_details_table(payout: Payout) -> Table:
    table = Table(title="Payout Details", show_header=True)
    table.add_column("Field", style="bold", no_wrap=True)
    table.add_column("Value")
    table.add_row("ID", payout.id)
    table.add_row("Date", format_date(payout.created_at))
    table.add_row("Amount", _money(payout.amount_minor, payout.currency))
    table.add_row("Status", payout.status.value)
    return table


def build_transactions_table(transactions: list[Transaction]) -> Table:
    table = Table(title=f"Related Transactions ({len(transactions)})")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Amount", justify="right")
    table.add_column("Fees", justify="right")
    table.add_column("Net", justify="right")
    table.add_column("Date")
    table.add_column("Description", style="magenta")
    for txn in transactions:
        table.add_row(
            txn.id,
            _money(txn.amount_minor, txn.currency),
            _money(txn.fee_minor, txn.currency),
            _money(txn.net_minor, txn.currency),
            format_date(txn.created_at),
            txn.resolved_description,
        )
    return table


def build_doctor_table() -> Table:
    table = Table(title="payout-reports Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")
    return table
