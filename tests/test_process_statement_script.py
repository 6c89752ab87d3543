import importlib.util
import json
import logging
from pathlib import Path

import pytest

from statement_ingest.shared.utils.logging_config import ROOT_LOGGER_NAME

SCRIPT = Path(__file__).resolve().parent.parent / "scripts" / "process_statement.py"


@pytest.fixture
def script():
    spec = importlib.util.spec_from_file_location("process_statement", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    yield module
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)


def test_cli_prints_summary_and_exports(script, tmp_path, capsys):
    statement = tmp_path / "march.txt"
    statement.write_text(
        "IIB TRANSFER TO 8,000.00 03 05 32,106.81\n"
        "BALANCE BROUGHT FORWARD 02 16 25,416.81\n"
        "Thank you for banking with us\n",
        encoding="utf-8",
    )

    exit_code = script.main(
        [
            str(statement),
            "--statement-date", "2024-03-15",
            "--period-start", "2024-03-01",
            "--period-end", "2024-03-31",
            "--output-dir", str(tmp_path / "out"),
        ]
    )

    output = capsys.readouterr().out
    lines = output.splitlines()
    start = lines.index("{")
    summary = json.loads("\n".join(lines[start: lines.index("}", start) + 1]))
    assert exit_code == 0
    assert summary["valid_transactions"] == 1
    assert summary["out_of_period_transactions"] == 1
    assert summary["unparsed_lines"] == 1
    assert "OUT_OF_PERIOD" in output
    assert (tmp_path / "out" / "march_transactions.csv").exists()
    assert (tmp_path / "out" / "march_rejected.csv").exists()


def test_cli_reports_unknown_parser(script, tmp_path, capsys):
    statement = tmp_path / "empty.txt"
    statement.write_text("", encoding="utf-8")

    exit_code = script.main([str(statement), "--statement-date", "2024-03-15", "--parsers", "NEDBANK"])

    assert exit_code == 2
    assert "CONFIGURATION_ERROR" in capsys.readouterr().out
