"""Error types shared by the export pipeline, adapters and CLI."""

from __future__ import annotations


class ExportError(Exception):
    """Base class for payout export errors."""


class RemoteFetchError(ExportError):
    """The ledger API could not be reached or returned an unusable response."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class IncompleteListingError(RemoteFetchError):
    """A strict walk hit the page ceiling while the ledger still had more items."""


class UnsupportedFormatError(ExportError, ValueError):
    """Requested report format is not one of html, pdf or json."""

    def __init__(self, value: str) -> None:
        super().__init__(f"Unsupported format: {value!r} (expected html, pdf or json)")
        self.value = value


class RenderError(ExportError):
    """A report file could not be written."""


class AssetLoadError(ExportError):
    """A report asset (logo) could not be loaded or drawn."""


class CursorNotFoundError(ExportError):
    """Continuation export requested but no cursor has been recorded yet."""


def payout_not_found(payout_id: str) -> str:
    """Return message for a payout the ledger does not know."""
    return f"Payout {payout_id} not found"
