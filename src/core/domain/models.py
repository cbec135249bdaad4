"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Nos da validación estricta y documentación autocontenida (Field) sin acoplar
  el Core a librerías de I/O.
- El mismo modelo `Report` sirve de contrato para los tres renderers y para la
  serialización JSON (camelCase, compatible con reportes ya exportados).

Nota:
- `Payout` y `Transaction` describen lo que devuelve el ledger; `Report` es la
  vista derivada, construida una sola vez por el agregador y nunca mutada.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel
from pydantic.config import ConfigDict


def parse_pixels(value: object) -> int | None:
    """Normaliza tamaños tipo `150`, `"150"` o `"150px"` a entero."""

    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValueError("size must be a number of pixels")
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, str):
        text = value.strip().lower()
        if text.endswith("px"):
            text = text[:-2].strip()
        return int(text)
    raise ValueError(f"unsupported size value: {value!r}")


class PayoutStatus(str, Enum):
    PENDING = "pending"
    IN_TRANSIT = "in_transit"
    PAID = "paid"
    FAILED = "failed"
    CANCELED = "canceled"


class Payout(BaseModel):
    """Un desembolso del procesador hacia una cuenta bancaria."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    id: str = Field(..., min_length=1, description="ID del payout (po_...).")
    amount_minor: int = Field(
        ...,
        alias="amount",
        description="Importe en unidades menores (céntimos).",
    )
    currency: str = Field(..., min_length=1, description="Código ISO de la moneda.")
    created_at: datetime = Field(
        ...,
        alias="created",
        description="Instante de creación (epoch o ISO-8601).",
    )
    status: PayoutStatus = Field(..., description="Estado del payout en el ledger.")


class Transaction(BaseModel):
    """Un asiento del ledger (cargo, comisión, reembolso) asociado a un payout.

    Por qué `statement_descriptor` es un campo plano:
    - El ledger lo anida en el objeto `source` expandido; el adaptador lo
      aplana para que el dominio no conozca la forma de la API.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    id: str = Field(..., min_length=1, description="ID del balance transaction (txn_...).")
    amount_minor: int = Field(..., alias="amount", description="Importe bruto en unidades menores.")
    fee_minor: int = Field(default=0, alias="fee", description="Comisiones en unidades menores.")
    net_minor: int = Field(..., alias="net", description="Importe neto en unidades menores.")
    currency: str = Field(..., min_length=1, description="Código ISO de la moneda.")
    created_at: datetime = Field(..., alias="created", description="Instante de creación.")
    description: str | None = Field(default=None, description="Descripción cruda del ledger.")
    statement_descriptor: str | None = Field(
        default=None,
        description="Texto del extracto del cliente; se usa como referencia de factura.",
    )

    @property
    def has_invoice(self) -> bool:
        return bool(self.statement_descriptor)

    @property
    def resolved_description(self) -> str:
        """Descripción legible combinando descripción y descriptor."""

        if self.description:
            if self.statement_descriptor:
                return f"{self.description} (Invoice: {self.statement_descriptor})"
            return self.description
        return self.statement_descriptor or "N/A"


class _ReportModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class LogoConfig(_ReportModel):
    url: str = Field(default="", description="URL o ruta local del logo (vacío = sin logo).")
    width: int | None = Field(default=None, description="Ancho en píxeles/puntos.")
    height: int | None = Field(default=None, description="Alto en píxeles/puntos.")

    @field_validator("width", "height", mode="before")
    @classmethod
    def _parse_size(cls, value: object) -> int | None:
        return parse_pixels(value)


class TransactionView(_ReportModel):
    """Fila de transacción ya formateada para el reporte."""

    transaction_id: str
    amount: str
    fees: str
    net: str
    currency: str
    created: str
    description: str


class PayoutSummary(_ReportModel):
    """Bloque de cabecera del reporte (datos del payout + totales derivados)."""

    id: str
    amount: str
    currency: str
    date: str
    status: PayoutStatus
    total_fees: str = "0.00"
    number_of_invoices: int = Field(default=0, ge=0)


class Report(_ReportModel):
    """Reporte de un payout, consumido por un único renderer."""

    logo: LogoConfig | None = None
    payout: PayoutSummary
    transactions: list[TransactionView] = Field(default_factory=list)
    generated_date: str
