from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path

STANDARD_TAX_CLASS = "standard"


@dataclass(frozen=True)
class TaxRate:
    id: str
    tax_class: str
    percentage: Decimal
    applies_to_shipping: bool


@dataclass(frozen=True)
class LineItem:
    tax_class: str
    unit_price: Decimal
    quantity: int

    @property
    def subtotal(self) -> Decimal:
        return self.unit_price * self.quantity


@dataclass
class Bucket:
    rate_id: str
    tax_class_label: str
    subtotal: Decimal = Decimal("0")
    rate_percentage: Decimal = Decimal("0")
    share_percentage: Decimal = Decimal("0")
    shipping_costs_part: Decimal = Decimal("0")
    shipping_tax_amount: Decimal = Decimal("0")


@dataclass(frozen=True)
class TaxConfig:
    classes: list[str] = field(default_factory=list)
    rates: list[TaxRate] = field(default_factory=list)


@dataclass(frozen=True)
class AppConfig:
    log_path: Path | None = None


@dataclass(frozen=True)
class RuntimeConfig:
    version: int
    app: AppConfig
    tax: TaxConfig
