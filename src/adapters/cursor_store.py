"""Fichero `lastid`: cursor de continuación.

Formato:
- Un ID por línea, el más reciente primero.
- Escribir = anteponer; nunca se reescriben ni borran IDs anteriores.
"""

from __future__ import annotations

from pathlib import Path

from core.domain.errors import CursorNotFoundError
from core.interfaces.cursor_store import CursorStore


class FileCursorStore(CursorStore):
    def __init__(self, path: Path) -> None:
        self.path = path

    def history(self) -> list[str]:
        """Todos los IDs registrados, del más reciente al más antiguo."""

        if not self.path.exists():
            return []
        lines = self.path.read_text(encoding="utf-8").splitlines()
        return [line.strip() for line in lines if line.strip()]

    def read_cursor(self) -> str | None:
        history = self.history()
        return history[0] if history else None

    def write_cursor(self, payout_id: str) -> None:
        existing = self.path.read_text(encoding="utf-8") if self.path.exists() else ""
        content = f"{payout_id}\n{existing}".strip()
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(content + "\n", encoding="utf-8")

    def require_cursor(self) -> str:
        """Como `read_cursor`, pero sin historial eleva `CursorNotFoundError`."""

        cursor = self.read_cursor()
        if cursor is None:
            raise CursorNotFoundError(f"--lastid specified but no lastid file exists ({self.path}).")
        return cursor
