"""Contrato de persistencia del cursor de continuación."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class CursorStore(Protocol):
    """Guarda el último payout procesado.

    - `read_cursor` devuelve el ID más reciente o `None` si no hay historial.
    - `write_cursor` antepone un ID; nunca borra los anteriores.
    """

    def read_cursor(self) -> str | None: ...

    def write_cursor(self, payout_id: str) -> None: ...
