from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import Mapping

from dutch_shipping_tax.allocator import ShippingTaxAllocator
from dutch_shipping_tax.cart import load_cart
from dutch_shipping_tax.config import load_config
from dutch_shipping_tax.host import StaticCart, StaticTaxTable
from dutch_shipping_tax.logger import append_log_event
from dutch_shipping_tax.models import Bucket
from dutch_shipping_tax.utils import now_local_iso


@dataclass(frozen=True)
class ShippingTaxResult:
    status: str
    message: str
    shipping_price: Decimal
    taxes: dict[str, Decimal]
    buckets: tuple[Bucket, ...] = field(default_factory=tuple)


def calculate_shipping_tax(
    cart_path: Path,
    config_path: Path,
    shipping_price: Decimal,
    existing_taxes: Mapping[str, Decimal] | None = None,
    log_path: Path | None = None,
    log_to_stdout: bool = False,
) -> ShippingTaxResult:
    existing = dict(existing_taxes or {})
    resolved_log_path = log_path
    try:
        runtime_config = load_config(config_path)
        if resolved_log_path is None and not log_to_stdout:
            resolved_log_path = runtime_config.app.log_path

        line_items = load_cart(cart_path)
        allocator = ShippingTaxAllocator(StaticTaxTable(runtime_config.tax), StaticCart(line_items))
        shipping_tax_rates = allocator.get_shipping_tax_rates()
        buckets = allocator.build_buckets(shipping_price, line_items, shipping_tax_rates)
        status = "passthrough"
        taxes = existing
        if buckets:
            status = "allocated"
            taxes = {bucket.rate_id: bucket.shipping_tax_amount for bucket in buckets}
            message = f"Shipping tax split over {len(buckets)} tax rate(s)."
        elif not shipping_tax_rates:
            message = "No tax rates apply to shipping; existing taxes kept."
        elif not line_items:
            message = "Cart is empty; existing taxes kept."
        else:
            message = "Cart has no items in a shipping-taxable class; existing taxes kept."
    except Exception as exc:
        append_log_event(
            resolved_log_path,
            {
                "timestamp": now_local_iso(),
                "event_name": "shipping_tax_run_failed",
                "cart_path": str(cart_path),
                "status": "failed",
                "error_message": str(exc),
            },
        )
        raise

    append_log_event(
        resolved_log_path,
        {
            "timestamp": now_local_iso(),
            "event_name": "shipping_tax_calculated",
            "cart_path": str(cart_path),
            "status": status,
            "shipping_price": shipping_price,
            "taxes": taxes,
            "message": message,
        },
    )
    return ShippingTaxResult(
        status=status,
        message=message,
        shipping_price=shipping_price,
        taxes=taxes,
        buckets=tuple(buckets),
    )
