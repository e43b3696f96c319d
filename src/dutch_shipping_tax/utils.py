from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP

from dutch_shipping_tax.models import STANDARD_TAX_CLASS

CENT = Decimal("0.01")
HUNDRED = Decimal("100")


def round_amount(amount: Decimal) -> Decimal:
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def tax_class_label(tax_class: str) -> str:
    """Map the host's empty default class to its ``standard`` label."""
    return STANDARD_TAX_CLASS if tax_class == "" else tax_class


def host_tax_class(label: str) -> str:
    return "" if label == STANDARD_TAX_CLASS else label


def now_local_iso() -> str:
    return datetime.now(timezone.utc).astimezone().isoformat(timespec="seconds")
