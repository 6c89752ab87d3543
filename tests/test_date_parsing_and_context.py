from datetime import date
from decimal import Decimal

import pytest
from pydantic import ValidationError

from statement_ingest.domain.finance.bank_statement_parser.models import (
    ParsedTransaction,
    ParsingContext,
    StandardizedTransaction,
    TransactionType,
)
from statement_ingest.shared.utils.date_parsing import build_date, parse_date, resolve_date


def test_numeric_formats(context):
    assert parse_date("23/02/2023", context) == date(2023, 2, 23)
    assert parse_date("23/02/23", context) == date(2023, 2, 23)
    assert parse_date("2024-03-01", context) == date(2024, 3, 1)
    assert parse_date("01-03-2024", context) == date(2024, 3, 1)


def test_month_name_formats(context):
    assert parse_date("16 February 2024", context) == date(2024, 2, 16)
    assert parse_date("02 Apr 2023", context) == date(2023, 4, 2)
    assert parse_date("5-Jan-2024", context) == date(2024, 1, 5)


def test_day_month_only_uses_default_year(context):
    assert parse_date("02 Apr", context) == date(2024, 4, 2)
    assert parse_date("15/03", context) == date(2024, 3, 15)

    other_year = ParsingContext(statement_date=date(2024, 1, 10), default_year=2023)
    assert parse_date("28 Dec", other_year) == date(2023, 12, 28)


def test_day_month_without_context_fails():
    assert parse_date("02 Apr") is None


@pytest.mark.parametrize("text", [None, "", "   ", "not a date", "1234"])
def test_unparseable_dates_return_none(text, context):
    assert parse_date(text, context) is None


def test_caller_falls_back_to_statement_date(context):
    assert resolve_date(None, context) == date(2024, 3, 15)
    assert resolve_date(date(2024, 3, 2), context) == date(2024, 3, 2)


def test_build_date_rejects_impossible_dates():
    assert build_date(2024, 2, 30) is None
    assert build_date(2024, 2, 29) == date(2024, 2, 29)


def test_context_defaults_year_from_statement_date():
    ctx = ParsingContext(statement_date=date(2024, 3, 15))

    assert ctx.default_year == 2024


def test_context_requires_statement_date():
    with pytest.raises(ValidationError):
        ParsingContext(default_year=2024)


def test_context_is_immutable(context):
    with pytest.raises(ValidationError):
        context.default_year = 1999


def test_standardized_transaction_allows_one_direction_only():
    with pytest.raises(ValidationError):
        StandardizedTransaction(
            date=date(2024, 3, 1),
            description="BOTH",
            debit_amount=Decimal("1.00"),
            credit_amount=Decimal("2.00"),
        )

    # a fee may sit next to either direction
    txn = StandardizedTransaction(
        date=date(2024, 3, 1),
        description="PAYMENT",
        debit_amount=Decimal("100.00"),
        service_fee=Decimal("5.00"),
    )
    assert txn.service_fee == Decimal("5.00")


def test_parsed_transaction_rejects_missing_fields():
    with pytest.raises(ValidationError):
        ParsedTransaction(type=TransactionType.DEBIT, description="  ", amount=Decimal("1"), date=date(2024, 3, 1))
    with pytest.raises(ValidationError):
        ParsedTransaction(type=TransactionType.DEBIT, description="X", amount=Decimal("1"), date=None)
    with pytest.raises(ValidationError):
        ParsedTransaction(type=TransactionType.DEBIT, description="X", amount=Decimal("-1"), date=date(2024, 3, 1))


def test_parsed_transaction_signed_amount():
    debit = ParsedTransaction(type=TransactionType.DEBIT, description="X", amount=Decimal("10"), date=date(2024, 3, 1))
    fee = ParsedTransaction(type=TransactionType.SERVICE_FEE, description="FEE", amount=Decimal("2"), date=date(2024, 3, 1))
    credit = ParsedTransaction(type=TransactionType.CREDIT, description="Y", amount=Decimal("7"), date=date(2024, 3, 1))

    assert debit.signed_amount == Decimal("-10")
    assert fee.signed_amount == Decimal("-2")
    assert fee.debit_amount == Decimal("2")
    assert credit.signed_amount == Decimal("7")
    assert credit.credit_amount == Decimal("7")
    assert credit.debit_amount == Decimal("0")
