from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Mapping

from dutch_shipping_tax.host import Cart, TaxTable
from dutch_shipping_tax.models import Bucket, LineItem
from dutch_shipping_tax.utils import HUNDRED, round_amount, tax_class_label

SHIPPING_TAX_FILTER = "woocommerce_calc_shipping_tax"
SHIPPING_TAX_FILTER_PRIORITY = 10
SHIPPING_TAX_FILTER_ARGS = 3


class TaxRateLookupError(LookupError):
    pass


class ShippingTaxAllocationError(ValueError):
    pass


class ShippingTaxAllocator:
    """Split shipping tax over the VAT classes present in the cart.

    Each shipping-taxable class receives the part of the shipping price that
    matches its share of the cart's taxable subtotal, taxed at that class's
    own rate.
    """

    def __init__(self, tax_table: TaxTable, cart: Cart) -> None:
        self._tax_table = tax_table
        self._cart = cart

    def register(self, add_filter: Callable[..., Any]) -> None:
        add_filter(
            SHIPPING_TAX_FILTER,
            self.calculate_shipping_taxes,
            SHIPPING_TAX_FILTER_PRIORITY,
            SHIPPING_TAX_FILTER_ARGS,
        )

    def get_shipping_tax_rates(self) -> dict[str, str]:
        tax_classes = self._tax_table.get_tax_classes()
        if "" not in tax_classes:
            tax_classes = ["", *tax_classes]

        shipping_rates: dict[str, str] = {}
        for tax_class in tax_classes:
            rates = self._tax_table.get_rates_for_tax_class(tax_class)
            if not rates:
                continue
            rate = rates[0]
            if rate.applies_to_shipping:
                shipping_rates[tax_class_label(rate.tax_class)] = rate.id
        return shipping_rates

    def get_tax_percentage(self, line_item: LineItem) -> Decimal:
        """Return the first configured rate percentage for the item's class.

        Classes reported by ``get_shipping_tax_rates`` always have a rate, so the
        lookup only fails for ``shipping_tax_rates`` mappings built by the caller.
        """
        rates = self._tax_table.get_rates_for_tax_class(line_item.tax_class)
        if not rates:
            label = tax_class_label(line_item.tax_class)
            raise TaxRateLookupError(f"No tax rate configured for tax class '{label}'.")
        return rates[0].percentage

    def build_buckets(
        self,
        shipping_price: Decimal,
        line_items: list[LineItem],
        shipping_tax_rates: Mapping[str, str],
    ) -> list[Bucket]:
        if not shipping_tax_rates or not line_items:
            return []

        buckets = {
            rate_id: Bucket(rate_id=rate_id, tax_class_label=label)
            for label, rate_id in shipping_tax_rates.items()
        }
        taxable_total = Decimal("0")
        for item in line_items:
            rate_id = shipping_tax_rates.get(tax_class_label(item.tax_class))
            if rate_id is None:
                continue
            bucket = buckets[rate_id]
            bucket.subtotal += item.subtotal
            taxable_total += item.subtotal
            bucket.rate_percentage = self.get_tax_percentage(item)

        # Nothing in the cart falls into a shipping-taxable class.
        if taxable_total <= 0:
            return []

        for bucket in buckets.values():
            bucket.share_percentage = bucket.subtotal / taxable_total * HUNDRED
            bucket.shipping_costs_part = shipping_price / HUNDRED * bucket.share_percentage
            try:
                bucket.shipping_tax_amount = round_amount(
                    bucket.shipping_costs_part / HUNDRED * bucket.rate_percentage
                )
            except InvalidOperation as exc:
                raise ShippingTaxAllocationError(
                    f"Shipping tax for rate '{bucket.rate_id}' is too large to round to cents."
                ) from exc
        return list(buckets.values())

    def allocate_shipping_tax(
        self,
        shipping_price: Decimal,
        line_items: list[LineItem],
        shipping_tax_rates: Mapping[str, str],
    ) -> dict[str, Decimal]:
        buckets = self.build_buckets(shipping_price, line_items, shipping_tax_rates)
        return {bucket.rate_id: bucket.shipping_tax_amount for bucket in buckets}

    def calculate_shipping_taxes(
        self,
        taxes: Mapping[str, Decimal],
        price: Decimal,
        rates: Any = None,
    ) -> Mapping[str, Decimal]:
        shipping_tax_rates = self.get_shipping_tax_rates()
        if not shipping_tax_rates:
            return taxes

        allocated = self.allocate_shipping_tax(price, self._cart.get_line_items(), shipping_tax_rates)
        return allocated or taxes
