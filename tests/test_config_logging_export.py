import logging
from datetime import date
from decimal import Decimal

import pandas as pd
import pytest
from pydantic import ValidationError

from statement_ingest.application.finance.bank_statement_parser import ProcessBankStatementUseCase
from statement_ingest.core.config import DatabaseSettings, StatementParserSettings
from statement_ingest.core.exceptions import ParserContractError, StatementIngestError
from statement_ingest.shared.utils.export import export_result_csv
from statement_ingest.shared.utils.logging_config import ROOT_LOGGER_NAME, setup_logging


def test_settings_defaults():
    settings = StatementParserSettings()

    assert settings.service_fee_threshold == Decimal("100")
    assert settings.continuation_min_indent == 5
    assert settings.parser_order[0] == "STANDARD_BANK"
    assert settings.log_level == "INFO"


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("STATEMENT_INGEST__SERVICE_FEE_THRESHOLD", "250")
    monkeypatch.setenv("STATEMENT_INGEST__LOG_LEVEL", "debug")
    monkeypatch.setenv("STATEMENT_INGEST__PARSER_ORDER", '["absa", "credit"]')

    settings = StatementParserSettings()

    assert settings.service_fee_threshold == Decimal("250")
    assert settings.log_level == "DEBUG"
    assert settings.parser_order == ["ABSA", "CREDIT"]


def test_invalid_settings():
    with pytest.raises(ValidationError):
        StatementParserSettings(log_level="LOUD")
    with pytest.raises(ValidationError):
        StatementParserSettings(continuation_min_indent=0)
    with pytest.raises(ValidationError):
        DatabaseSettings(url="not-a-url")


def test_error_serialization():
    error = ParserContractError("CREDIT", "SALARY 9,000.00")

    payload = error.to_dict()

    assert isinstance(error, StatementIngestError)
    assert payload["error_code"] == "PARSER_CONTRACT_VIOLATION"
    assert "SALARY 9,000.00" in payload["details"]
    assert payload["timestamp"]


def test_setup_logging_writes_rotating_file(tmp_path):
    log_file = tmp_path / "logs" / "ingest.log"

    logger = setup_logging("debug", str(log_file))
    try:
        logging.getLogger(f"{ROOT_LOGGER_NAME}.tests").info("hello from the parser")
        for handler in logger.handlers:
            handler.flush()

        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 2
        assert "hello from the parser" in log_file.read_text()

        setup_logging("WARNING")
        assert len(logger.handlers) == 1
    finally:
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
        logger.setLevel(logging.NOTSET)


def test_result_frames_and_csv_export(tmp_path, settings, context, march_period):
    lines = [
        "BALANCE BROUGHT FORWARD 02 16 25,416.81",
        "IIB TRANSFER TO 8,000.00 03 05 32,106.81",
        "IMMEDIATE PAYMENT 1,310.00- 03 16 24,106.81",
    ]
    result = ProcessBankStatementUseCase(settings=settings).execute(
        lines, context, company_id=1, fiscal_period=march_period
    )

    frame = result.to_dataframe()
    assert list(frame["type"]) == ["CREDIT", "DEBIT"]
    assert frame.loc[1, "debit"] == Decimal("1310.00")

    accepted_path, rejected_path = export_result_csv(result, tmp_path / "out", "march")

    exported = pd.read_csv(accepted_path)
    rejected = pd.read_csv(rejected_path)
    assert list(exported["description"]) == ["IIB TRANSFER TO", "IMMEDIATE PAYMENT"]
    assert list(rejected["reason"]) == ["OUT_OF_PERIOD"]
    assert result.summary()["out_of_period_transactions"] == 1
    assert result.transactions[0].date == date(2024, 3, 5)
