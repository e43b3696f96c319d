from __future__ import annotations

import json
from decimal import Decimal
from pathlib import Path
from typing import Any

from rich.console import Console

_STDOUT_CONSOLE = Console()


def _json_default(value: Any) -> str:
    if isinstance(value, (Decimal, Path)):
        return str(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def to_json(value: Any) -> str:
    return json.dumps(value, ensure_ascii=True, separators=(",", ":"), sort_keys=True, default=_json_default)


def print_structured_stdout(value: dict[str, Any] | list[Any]) -> None:
    _STDOUT_CONSOLE.print_json(json=to_json(value))


def append_log_event(path: Path | None, event: dict[str, Any], echo_stdout: bool = False) -> None:
    line = to_json(event)

    if path is not None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("a", encoding="utf-8") as handle:
            handle.write(f"{line}\n")

    if path is None or echo_stdout:
        print_structured_stdout(event)
