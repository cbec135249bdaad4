"""Report output formats.

This module centralizes the formats the exporter can produce. Keeping it in
the domain layer lets the CLI, settings and renderers share one source of
truth without importing adapters.
"""

from __future__ import annotations

from enum import Enum

from core.domain.errors import UnsupportedFormatError


class ReportFormat(str, Enum):
    """Supported report output formats."""

    HTML = "html"
    PDF = "pdf"
    JSON = "json"

    @classmethod
    def parse(cls, value: "str | ReportFormat") -> "ReportFormat":
        """Parse a user supplied format name (case-insensitive)."""

        if isinstance(value, ReportFormat):
            return value
        try:
            return cls(value.strip().lower())
        except ValueError as exc:
            raise UnsupportedFormatError(value) from exc

    @property
    def suffix(self) -> str:
        return f".{self.value}"

    def label(self) -> str:
        """Upper-case label for console messages and logging."""

        return self.value.upper()
