import json
from decimal import Decimal
from pathlib import Path

from dutch_shipping_tax.logger import append_log_event, print_structured_stdout


def test_append_log_event_stdout_pretty_prints_json(capsys) -> None:
    append_log_event(path=None, event={"z": 1, "a": {"b": 2}}, echo_stdout=False)

    output = capsys.readouterr().out
    assert "\n" in output
    assert '  "a"' in output
    payload = json.loads(output)
    assert payload["a"]["b"] == 2
    assert payload["z"] == 1


def test_append_log_event_file_stays_compact_json_line(tmp_path: Path, capsys) -> None:
    log_path = tmp_path / "logs" / "run.log"
    append_log_event(path=log_path, event={"b": 2, "a": 1}, echo_stdout=False)

    assert log_path.read_text(encoding="utf-8") == '{"a":1,"b":2}\n'
    assert capsys.readouterr().out == ""


def test_append_log_event_writes_decimals_as_strings(tmp_path: Path) -> None:
    log_path = tmp_path / "run.log"
    append_log_event(path=log_path, event={"taxes": {"R1": Decimal("2.10")}})

    assert json.loads(log_path.read_text(encoding="utf-8")) == {"taxes": {"R1": "2.10"}}


def test_append_log_event_echoes_when_requested(tmp_path: Path, capsys) -> None:
    log_path = tmp_path / "run.log"
    append_log_event(path=log_path, event={"status": "ok"}, echo_stdout=True)

    assert json.loads(capsys.readouterr().out) == {"status": "ok"}
    assert log_path.exists()


def test_print_structured_stdout_handles_lists(capsys) -> None:
    print_structured_stdout([{"rate_id": "R1", "subtotal": Decimal("60")}])

    assert json.loads(capsys.readouterr().out) == [{"rate_id": "R1", "subtotal": "60"}]
