from __future__ import annotations

from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from dutch_shipping_tax.models import LineItem
from dutch_shipping_tax.utils import host_tax_class


class CartError(ValueError):
    pass


def load_cart(path: Path) -> list[LineItem]:
    """Read cart line items from a YAML (or JSON) file.

    The file holds an ``items`` list; each item has ``price``, ``quantity`` and
    an optional ``tax_class`` (missing, empty or ``standard`` for the default
    class).
    """
    if not path.exists():
        raise CartError(f"Cart file not found: {path}")
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise CartError(f"Cart file {path} is not valid YAML.") from exc
    except UnicodeDecodeError as exc:
        raise CartError(f"Cart file {path} is not valid UTF-8 text.") from exc

    if raw is None:
        return []
    if not isinstance(raw, dict):
        raise CartError("The cart root value must be a mapping/object.")
    items_raw = raw.get("items", [])
    if not isinstance(items_raw, list):
        raise CartError("'items' must be a list.")
    return [_parse_line_item(idx, item) for idx, item in enumerate(items_raw, start=1)]


def _parse_line_item(idx: int, raw: Any) -> LineItem:
    if not isinstance(raw, dict):
        raise CartError(f"Cart item {idx} must be a mapping/object.")

    tax_class = raw.get("tax_class") or ""
    if not isinstance(tax_class, str):
        raise CartError(f"Cart item {idx}: 'tax_class' must be a string.")

    quantity = raw.get("quantity")
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 0:
        raise CartError(f"Cart item {idx}: 'quantity' must be a non-negative integer.")

    return LineItem(
        tax_class=host_tax_class(tax_class.strip()),
        unit_price=_parse_price(idx, raw.get("price")),
        quantity=quantity,
    )


def _parse_price(idx: int, value: Any) -> Decimal:
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise CartError(f"Cart item {idx}: 'price' must be a number.")
    try:
        price = Decimal(str(value).strip())
    except InvalidOperation as exc:
        raise CartError(f"Cart item {idx}: 'price' must be a number.") from exc
    if not price.is_finite() or price < 0:
        raise CartError(f"Cart item {idx}: 'price' must be a non-negative number.")
    return price
