from datetime import date

import pytest

from statement_ingest.application.finance.bank_statement_parser.bank_parsers import (
    AbsaParser,
    CreditParser,
    ParserFactory,
    StandardBankParser,
)
from statement_ingest.core.config import StatementParserSettings
from statement_ingest.core.exceptions import ConfigurationError, UnknownParserError
from statement_ingest.domain.finance.bank_statement_parser.models import ParsingContext


def test_default_order():
    parsers = ParserFactory.create_parsers()

    assert [p.parser_name for p in parsers] == [
        "STANDARD_BANK",
        "ABSA",
        "FNB",
        "MULTI_TRANSACTION",
        "SERVICE_FEE",
        "CREDIT",
    ]


def test_instances_are_fresh_per_call():
    first = ParserFactory.create_parsers()
    second = ParserFactory.create_parsers()

    assert all(a is not b for a, b in zip(first, second))


def test_order_from_settings():
    settings = StatementParserSettings(parser_order=["credit", "absa"])

    parsers = ParserFactory.create_parsers(settings=settings)

    assert [type(p) for p in parsers] == [CreditParser, AbsaParser]


def test_lookup_by_name_is_case_insensitive():
    assert isinstance(ParserFactory.get_parser_by_name("standard_bank"), StandardBankParser)


def test_unknown_parser():
    with pytest.raises(UnknownParserError) as excinfo:
        ParserFactory.get_parser_by_name("NEDBANK")

    assert isinstance(excinfo.value, ConfigurationError)
    assert "CREDIT" in excinfo.value.details


def test_supported_banks():
    assert ParserFactory.get_supported_banks() == ["Standard Bank", "Absa", "FNB"]


def test_first_acceptor_wins():
    context = ParsingContext(statement_date=date(2025, 3, 12))
    parsers = ParserFactory.create_parsers()

    multi = ParserFactory.select_parser(parsers, "TRANSFER TO JOHN DOE 1,500.00- FEE: 8.90-", context)
    fee = ParserFactory.select_parser(parsers, "MONTHLY MANAGEMENT FEE ## 35.00", context)
    credit = ParserFactory.select_parser(parsers, "DEPOSIT REF 123456 500.00", context)
    nothing = ParserFactory.select_parser(parsers, "Thank you for banking with us", context)

    assert multi.parser_name == "MULTI_TRANSACTION"
    assert fee.parser_name == "SERVICE_FEE"
    assert credit.parser_name == "CREDIT"
    assert nothing is None


def test_reversed_order_changes_winner():
    context = ParsingContext(statement_date=date(2025, 3, 12))
    parsers = ParserFactory.create_parsers(order=["SERVICE_FEE", "MULTI_TRANSACTION"])

    winner = ParserFactory.select_parser(parsers, "TRANSFER TO JOHN DOE 1,500.00- FEE: 8.90-", context)

    assert winner.parser_name == "SERVICE_FEE"


def test_settings_reject_bad_parser_order():
    with pytest.raises(ValueError):
        StatementParserSettings(parser_order=["CREDIT", "credit"])
    with pytest.raises(ValueError):
        StatementParserSettings(parser_order=[])



def test_headerless_dmy_line_goes_to_first_date_parser(context):
    line = "15/03/2024 Refund Received 500.00- 2,734.56"

    default_winner = ParserFactory.select_parser(ParserFactory.create_parsers(), line, context)
    fnb_first = ParserFactory.select_parser(ParserFactory.create_parsers(order=["FNB", "ABSA"]), line, context)

    assert default_winner.parser_name == "ABSA"
    assert fnb_first.parser_name == "FNB"


def test_fnb_header_routes_dmy_lines_to_fnb(context):
    parsers = ParserFactory.create_parsers()
    line = "15/03/2024 Refund Received 500.00- 2,734.56"

    assert ParserFactory.select_parser(parsers, "First National Bank", context) is None

    assert ParserFactory.select_parser(parsers, line, context).parser_name == "FNB"
