from __future__ import annotations

from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from dutch_shipping_tax.models import AppConfig, RuntimeConfig, TaxConfig, TaxRate
from dutch_shipping_tax.utils import host_tax_class

DEFAULT_APP_LOG_PATH = Path("~/.dutch-shipping-tax/shipping-tax.log").expanduser()


class ConfigError(ValueError):
    pass


def _config_error(message: str) -> ConfigError:
    return ConfigError(f"Invalid tax config: {message}")


def _format_yaml_error(exc: Exception) -> str:
    mark = getattr(exc, "problem_mark", None)
    if mark is None:
        return "YAML syntax is invalid."
    return f"YAML syntax is invalid near line {mark.line + 1}, column {mark.column + 1}."


def load_config(path: Path) -> RuntimeConfig:
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise _config_error(_format_yaml_error(exc)) from exc
    except UnicodeDecodeError as exc:
        raise _config_error("File is not valid UTF-8 text.") from exc
    if not isinstance(raw, dict):
        raise _config_error("The root value must be a mapping/object.")

    version = _required_int(raw, "version")
    if version != 1:
        raise _config_error(f"Unsupported version '{version}'. Expected version '1'.")

    app_raw = raw.get("app", {})
    if not isinstance(app_raw, dict):
        raise _config_error("The 'app' section must be a mapping/object when provided.")
    log_path = _optional_str(app_raw, "log_path")
    app = AppConfig(log_path=Path(log_path).expanduser() if log_path else DEFAULT_APP_LOG_PATH)

    tax_raw = _required_mapping(raw, "tax")
    tax = _parse_tax(tax_raw)

    return RuntimeConfig(version=version, app=app, tax=tax)


def _parse_tax(raw: dict[str, Any]) -> TaxConfig:
    classes_raw = raw.get("classes", [])
    if not isinstance(classes_raw, list):
        raise _config_error("'tax.classes' must be a list when provided.")
    classes: list[str] = []
    for item in classes_raw:
        if not isinstance(item, str):
            raise _config_error("Each item in 'tax.classes' must be a string.")
        classes.append(host_tax_class(item.strip()))

    rates_raw = raw.get("rates", [])
    if not isinstance(rates_raw, list):
        raise _config_error("'tax.rates' must be a list when provided.")
    rates = [_parse_rate(item) for item in rates_raw]

    seen: set[str] = set()
    for rate in rates:
        if rate.id in seen:
            raise _config_error(f"Duplicate tax rate id '{rate.id}'.")
        seen.add(rate.id)

    return TaxConfig(classes=classes, rates=rates)


def _parse_rate(raw: Any) -> TaxRate:
    if not isinstance(raw, dict):
        raise _config_error("Each item in 'tax.rates' must be a mapping/object.")

    tax_class = raw.get("class", "")
    if tax_class is None:
        tax_class = ""
    if not isinstance(tax_class, str):
        raise _config_error("'class' must be a string when provided.")

    shipping = raw.get("shipping", True)
    if not isinstance(shipping, bool):
        raise _config_error("'shipping' must be true or false when provided.")

    return TaxRate(
        id=_required_id(raw, "id"),
        tax_class=host_tax_class(tax_class.strip()),
        percentage=_required_percentage(raw, "percentage"),
        applies_to_shipping=shipping,
    )


def _required_mapping(raw: dict[str, Any], key: str) -> dict[str, Any]:
    value = raw.get(key)
    if not isinstance(value, dict):
        raise _config_error(f"'{key}' must be a mapping/object.")
    return value


def _required_id(raw: dict[str, Any], key: str) -> str:
    value = raw.get(key)
    if isinstance(value, bool) or not isinstance(value, (str, int)) or not str(value).strip():
        raise _config_error(f"'{key}' must be a non-empty string or integer.")
    return str(value).strip()


def _optional_str(raw: dict[str, Any], key: str) -> str | None:
    value = raw.get(key)
    if value is None:
        return None
    if not isinstance(value, str) or not value.strip():
        raise _config_error(f"'{key}' must be a non-empty string when provided.")
    return value.strip()


def _required_int(raw: dict[str, Any], key: str) -> int:
    value = raw.get(key)
    if not isinstance(value, int):
        raise _config_error(f"'{key}' must be an integer.")
    return value


def _required_percentage(raw: dict[str, Any], key: str) -> Decimal:
    value = raw.get(key)
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise _config_error(f"'{key}' must be a number.")
    try:
        # str() keeps YAML floats such as 21.0 from picking up binary noise.
        percentage = Decimal(str(value).strip())
    except InvalidOperation as exc:
        raise _config_error(f"'{key}' must be a number.") from exc
    if not percentage.is_finite() or percentage < 0:
        raise _config_error(f"'{key}' must be a non-negative number.")
    return percentage
