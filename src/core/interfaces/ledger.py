"""Contrato del cliente de ledger.

Por qué Protocol:
- Define un contrato estructural (duck typing) sin herencia rígida.
- El pipeline de exportación y el paginador dependen solo de esta forma; el
  adaptador httpx (Stripe) y los fakes de test son intercambiables.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Generic, Protocol, TypeVar, runtime_checkable

from core.domain.models import Payout, Transaction

T = TypeVar("T")


@dataclass(frozen=True)
class Page(Generic[T]):
    """Una página de una colección remota."""

    data: list[T] = field(default_factory=list)
    has_more: bool = False


@runtime_checkable
class LedgerClient(Protocol):
    """Contrato mínimo del ledger remoto.

    Reglas de diseño:
    - Todo es asíncrono porque cada llamada es I/O (HTTP).
    - Los fallos de red/API se elevan como `RemoteFetchError`.
    """

    async def list_payouts(
        self,
        *,
        limit: int,
        starting_after: str | None = None,
        created_after: datetime | None = None,
    ) -> Page[Payout]:
        """Página de payouts, del más reciente al más antiguo."""

        ...

    async def list_transactions(
        self,
        *,
        payout_id: str,
        limit: int,
        starting_after: str | None = None,
        expand_source: bool = True,
    ) -> Page[Transaction]:
        """Página de balance transactions de un payout."""

        ...

    async def retrieve_payout(self, payout_id: str) -> Payout:
        """Un payout por ID."""

        ...
