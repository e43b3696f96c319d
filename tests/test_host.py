from decimal import Decimal

from dutch_shipping_tax.host import StaticCart, StaticTaxTable
from dutch_shipping_tax.models import LineItem, TaxConfig, TaxRate


def test_static_tax_table_filters_rates_by_class_in_config_order() -> None:
    rates = [
        TaxRate(id="R1", tax_class="", percentage=Decimal("21"), applies_to_shipping=True),
        TaxRate(id="R2", tax_class="reduced", percentage=Decimal("9"), applies_to_shipping=True),
        TaxRate(id="R3", tax_class="", percentage=Decimal("21"), applies_to_shipping=False),
    ]
    table = StaticTaxTable(TaxConfig(classes=["reduced"], rates=rates))

    assert table.get_tax_classes() == ["reduced"]
    assert [rate.id for rate in table.get_rates_for_tax_class("")] == ["R1", "R3"]
    assert table.get_rates_for_tax_class("zero") == []


def test_static_cart_returns_a_copy_of_its_items() -> None:
    item = LineItem(tax_class="", unit_price=Decimal("5"), quantity=2)
    cart = StaticCart([item])

    items = cart.get_line_items()
    items.append(item)

    assert cart.get_line_items() == [item]
