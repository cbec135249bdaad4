"""Ledger client over the Stripe REST API (httpx).

Maps `/v1/payouts` and `/v1/balance_transactions` onto the `LedgerClient`
contract. Every transport, HTTP or payload problem is raised as
`RemoteFetchError`; there are no retries.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

import httpx
from pydantic import ValidationError

from core.domain.errors import RemoteFetchError, payout_not_found
from core.domain.models import Payout, Transaction
from core.interfaces.ledger import LedgerClient, Page
from core.logging_setup import get_logger


def statement_descriptor_of(source: object) -> str | None:
    """Descriptor from an expanded `source`, falling back to its suffix."""

    if not isinstance(source, dict):
        return None
    value = source.get("statement_descriptor") or source.get("statement_descriptor_suffix")
    return str(value) if value else None


def parse_transaction(raw: dict[str, Any]) -> Transaction:
    data = dict(raw)
    data["statement_descriptor"] = statement_descriptor_of(raw.get("source"))
    return Transaction.model_validate(data)


class StripeLedgerClient(LedgerClient):
    """Reads payouts and balance transactions from a Stripe account."""

    def __init__(self, client: httpx.AsyncClient, *, logger: logging.Logger | None = None) -> None:
        self._client = client
        self._log = logger or get_logger(__name__)

    async def _get(self, path: str, params: list[tuple[str, str | int]] | None = None) -> dict[str, Any]:
        self._log.debug("GET %s %s", path, params or "")
        try:
            response = await self._client.get(path, params=params)
        except httpx.HTTPError as exc:
            raise RemoteFetchError(f"Request to {path} failed: {exc}") from exc

        if response.status_code >= 400:
            raise RemoteFetchError(
                f"{path} returned HTTP {response.status_code}: {_error_message(response)}",
                status_code=response.status_code,
            )
        try:
            payload = response.json()
        except ValueError as exc:
            raise RemoteFetchError(f"{path} returned invalid JSON", status_code=response.status_code) from exc
        if not isinstance(payload, dict):
            raise RemoteFetchError(f"{path} returned an unexpected payload", status_code=response.status_code)
        return payload

    async def list_payouts(
        self,
        *,
        limit: int,
        starting_after: str | None = None,
        created_after: datetime | None = None,
    ) -> Page[Payout]:
        params: list[tuple[str, str | int]] = [("limit", limit)]
        if starting_after:
            params.append(("starting_after", starting_after))
        if created_after is not None:
            params.append(("created[gte]", int(created_after.timestamp())))
        payload = await self._get("/v1/payouts", params)
        return _page(payload, Payout.model_validate, "/v1/payouts")

    async def list_transactions(
        self,
        *,
        payout_id: str,
        limit: int,
        starting_after: str | None = None,
        expand_source: bool = True,
    ) -> Page[Transaction]:
        params: list[tuple[str, str | int]] = [("payout", payout_id), ("limit", limit)]
        if starting_after:
            params.append(("starting_after", starting_after))
        if expand_source:
            params.append(("expand[]", "data.source"))
        payload = await self._get("/v1/balance_transactions", params)
        return _page(payload, parse_transaction, "/v1/balance_transactions")

    async def retrieve_payout(self, payout_id: str) -> Payout:
        try:
            payload = await self._get(f"/v1/payouts/{payout_id}")
        except RemoteFetchError as exc:
            if exc.status_code == 404:
                raise RemoteFetchError(payout_not_found(payout_id), status_code=404) from exc
            raise
        try:
            return Payout.model_validate(payload)
        except ValidationError as exc:
            raise RemoteFetchError(f"Invalid payout payload for {payout_id}: {exc}") from exc


def _page(payload: dict[str, Any], parse: Any, path: str) -> Page[Any]:
    raw_items = payload.get("data")
    if not isinstance(raw_items, list):
        raise RemoteFetchError(f"{path} response has no data list")
    try:
        items = [parse(item) for item in raw_items]
    except ValidationError as exc:
        raise RemoteFetchError(f"Invalid item in {path} response: {exc}") from exc
    return Page(data=items, has_more=bool(payload.get("has_more")))


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(payload, dict) and isinstance(payload.get("error"), dict):
        return str(payload["error"].get("message") or payload["error"])
    return response.text[:200]
