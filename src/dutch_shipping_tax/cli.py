from __future__ import annotations

import argparse
import sys
from dataclasses import asdict
from decimal import Decimal, InvalidOperation
from pathlib import Path

from dutch_shipping_tax.allocator import ShippingTaxAllocationError, TaxRateLookupError
from dutch_shipping_tax.cart import CartError
from dutch_shipping_tax.config import ConfigError
from dutch_shipping_tax.logger import print_structured_stdout
from dutch_shipping_tax.models import Bucket
from dutch_shipping_tax.paths import resolve_config_path
from dutch_shipping_tax.service import calculate_shipping_tax


def main() -> int:
    parser = _build_arg_parser()
    args = parser.parse_args()
    config_path = resolve_config_path(args.config, Path.cwd())
    if not config_path.exists():
        parser.error(
            f"Tax config not found at '{config_path}'. "
            "Provide --config, or create tax.yml or tax.yaml in the working directory."
        )

    try:
        existing_taxes = dict(_parse_existing_tax(value) for value in args.existing_tax)
    except ValueError as exc:
        parser.error(str(exc))

    try:
        result = calculate_shipping_tax(
            cart_path=args.cart_path,
            config_path=config_path,
            shipping_price=args.shipping_price,
            existing_taxes=existing_taxes,
            log_path=args.log,
        )
    except (ConfigError, CartError, TaxRateLookupError, ShippingTaxAllocationError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if args.breakdown:
        _print_breakdown(result.buckets)

    print(f"{result.status}: shipping_price={result.shipping_price} {result.message}")
    for rate_id, amount in result.taxes.items():
        print(f"  rate {rate_id}: {amount}")
    return 0


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dutch-shipping-tax",
        description="Split shipping tax over the VAT rates of the items in a cart.",
    )
    parser.add_argument("cart_path", type=Path, help="Path to a YAML or JSON cart file.")
    parser.add_argument(
        "--shipping-price",
        type=_decimal_arg,
        required=True,
        help="Shipping price excluding tax, e.g. 6.95.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to YAML tax config. Default: auto-detect tax.yml or tax.yaml in working directory.",
    )
    parser.add_argument(
        "--existing-tax",
        action="append",
        default=[],
        metavar="RATE_ID=AMOUNT",
        help="Shipping tax the host already computed. Returned unchanged when no split applies. Repeatable.",
    )
    parser.add_argument(
        "--log",
        type=Path,
        default=None,
        help="Append-only JSON lines log path. Default: app.log_path from the config.",
    )
    parser.add_argument("--breakdown", action="store_true", help="Print the per-rate working table.")
    return parser


def _decimal_arg(value: str) -> Decimal:
    try:
        amount = Decimal(value.strip())
    except InvalidOperation as exc:
        raise argparse.ArgumentTypeError(f"invalid amount: '{value}'") from exc
    if not amount.is_finite() or amount < 0:
        raise argparse.ArgumentTypeError(f"amount must be a non-negative number: '{value}'")
    return amount


def _parse_existing_tax(value: str) -> tuple[str, Decimal]:
    rate_id, sep, amount = value.partition("=")
    if not sep or not rate_id.strip():
        raise ValueError(f"--existing-tax expects RATE_ID=AMOUNT, got '{value}'.")
    try:
        return rate_id.strip(), Decimal(amount.strip())
    except InvalidOperation as exc:
        raise ValueError(f"--existing-tax has an invalid amount: '{value}'.") from exc


def _print_breakdown(buckets: tuple[Bucket, ...]) -> None:
    print_structured_stdout([asdict(bucket) for bucket in buckets])


if __name__ == "__main__":
    raise SystemExit(main())
