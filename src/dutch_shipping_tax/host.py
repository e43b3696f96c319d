from __future__ import annotations

from typing import Protocol

from dutch_shipping_tax.models import LineItem, TaxConfig, TaxRate


class TaxTable(Protocol):
    def get_tax_classes(self) -> list[str]:
        ...

    def get_rates_for_tax_class(self, tax_class: str) -> list[TaxRate]:
        ...


class Cart(Protocol):
    def get_line_items(self) -> list[LineItem]:
        ...


class StaticTaxTable:
    """Read-only tax table backed by the ``tax`` section of the config file."""

    def __init__(self, config: TaxConfig) -> None:
        self._classes = list(config.classes)
        self._rates = list(config.rates)

    def get_tax_classes(self) -> list[str]:
        return list(self._classes)

    def get_rates_for_tax_class(self, tax_class: str) -> list[TaxRate]:
        return [rate for rate in self._rates if rate.tax_class == tax_class]


class StaticCart:
    def __init__(self, line_items: list[LineItem]) -> None:
        self._line_items = list(line_items)

    def get_line_items(self) -> list[LineItem]:
        return list(self._line_items)
