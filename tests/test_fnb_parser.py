from datetime import date
from decimal import Decimal

import pytest

from statement_ingest.application.finance.bank_statement_parser.bank_parsers import FnbParser
from statement_ingest.application.finance.bank_statement_parser.column_classifier import ColumnClassifier
from statement_ingest.domain.finance.bank_statement_parser.models import ParsingContext, TransactionType


@pytest.fixture
def fnb_context():
    return ParsingContext(statement_date=date(2024, 4, 30), source_file="fnb_april.pdf")


@pytest.fixture
def parser(settings):
    return FnbParser(settings)


@pytest.fixture
def classifier(settings):
    return ColumnClassifier(settings)


def feed(parser, line, context):
    assert parser.can_parse(line, context), line
    return parser.parse(line, context)


def test_cr_suffix_is_credit(parser, fnb_context, classifier):
    std = feed(parser, "02 Apr Magtape Credit Xinghlzana Group 7,500.00Cr 5,969.38Cr", fnb_context)
    parsed = classifier.classify(std)

    assert parsed.date == date(2024, 4, 2)
    assert parsed.type == TransactionType.CREDIT
    assert parsed.amount == Decimal("7500.00")
    assert parsed.balance == Decimal("5969.38")
    assert parsed.description == "Magtape Credit Xinghlzana Group"


def test_reference_is_moved_to_end(parser, fnb_context):
    std = feed(parser, "15/04/2024 EFT Payment Ref: 123456 250.00 5,719.38", fnb_context)

    assert std.description == "EFT Payment (Ref: 123456)"
    assert std.reference == "123456"
    assert std.debit_amount == Decimal("250.00")


def test_service_fee_keyword(parser, fnb_context, classifier):
    parsed = classifier.classify(feed(parser, "16/04/2024 Monthly Service Fee 150.00 5,569.38", fnb_context))

    assert parsed.type == TransactionType.SERVICE_FEE
    assert parsed.amount == Decimal("150.00")


def test_trailing_minus_is_reversal(parser, fnb_context, classifier):
    parsed = classifier.classify(feed(parser, "17/04/2024 Refund Received 500.00- 6,069.38", fnb_context))

    assert parsed.type == TransactionType.CREDIT
    assert parsed.amount == Decimal("500.00")


def test_bank_charge_uses_previous_date(parser, fnb_context, classifier):
    feed(parser, "17/04/2024 Refund Received 500.00- 10,300.00", fnb_context)

    std = feed(parser, "#Service Fee 5.50 10294.50", fnb_context)

    assert std.date == date(2024, 4, 17)
    assert std.service_fee == Decimal("5.50")
    assert std.balance == Decimal("10294.50")
    assert classifier.classify(std).type == TransactionType.SERVICE_FEE


def test_bank_charge_without_previous_transaction_uses_statement_date(parser, fnb_context):
    std = feed(parser, "# Cash Handling Fee 12.00", fnb_context)

    assert std.date == date(2024, 4, 30)
    assert std.balance is None


def test_header_and_table_lines_rejected(parser, fnb_context):
    assert not parser.can_parse("First National Bank", fnb_context)
    assert parser.session.format_detected
    assert not parser.can_parse("Transaction Description Amount Balance", fnb_context)
    assert not parser.can_parse("Closing Balance 5,969.38", fnb_context)
    assert not parser.can_parse("02 Apr Opening notes", fnb_context)
