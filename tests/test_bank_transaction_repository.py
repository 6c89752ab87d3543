from datetime import date
from decimal import Decimal

import pytest

from statement_ingest.application.finance.bank_statement_parser import ProcessBankStatementUseCase
from statement_ingest.domain.finance.bank_statement_parser.models import (
    ParsedTransaction,
    ParsingContext,
    RejectionReason,
    TransactionType,
)
from statement_ingest.infrastructure.database.connection import close_db, get_db_context, get_engine, init_db
from statement_ingest.infrastructure.persistence.repositories import BankTransactionRepository


def make_transaction(description="IIB TRANSFER TO", amount="8000.00", balance="32106.81", txn_type=TransactionType.CREDIT):
    return ParsedTransaction(
        type=txn_type,
        description=description,
        amount=Decimal(amount),
        date=date(2024, 3, 5),
        balance=Decimal(balance) if balance is not None else None,
    )


def test_saved_transaction_is_found_as_duplicate(db_session):
    repository = BankTransactionRepository(db_session)
    repository.save_transactions(1, [make_transaction()], source_file="march.pdf")

    assert repository.exists_duplicate(
        1, date(2024, 3, 5), Decimal("0"), Decimal("8000.00"), "IIB TRANSFER TO", Decimal("32106.81")
    )
    assert not repository.exists_duplicate(
        2, date(2024, 3, 5), Decimal("0"), Decimal("8000.00"), "IIB TRANSFER TO", Decimal("32106.81")
    )
    assert not repository.exists_duplicate(
        1, date(2024, 3, 5), Decimal("0"), Decimal("8000.00"), "IIB TRANSFER TO", Decimal("1.00")
    )


def test_missing_balance_matches_missing_balance(db_session):
    repository = BankTransactionRepository(db_session)
    repository.save_transactions(1, [make_transaction(balance=None)])

    assert repository.exists_duplicate(1, date(2024, 3, 5), Decimal("0"), Decimal("8000.00"), "IIB TRANSFER TO", None)
    assert not repository.exists_duplicate(
        1, date(2024, 3, 5), Decimal("0"), Decimal("8000.00"), "IIB TRANSFER TO", Decimal("32106.81")
    )


def test_saved_columns(db_session):
    repository = BankTransactionRepository(db_session)
    fee = make_transaction(description="CASH WITHDRAWAL FEE", amount="52.60", txn_type=TransactionType.SERVICE_FEE)

    repository.save_transactions(7, [fee], source_file="march.pdf", fiscal_period_id=3)

    (stored,) = repository.get_by_company(7)
    assert stored.transaction_type == "SERVICE_FEE"
    assert stored.debit_amount == Decimal("52.60")
    assert stored.credit_amount == Decimal("0")
    assert stored.source_file == "march.pdf"
    assert stored.fiscal_period_id == 3


def test_active_fiscal_period(db_session):
    repository = BankTransactionRepository(db_session)
    repository.add_fiscal_period(1, "FY2024 P02", date(2024, 2, 1), date(2024, 2, 29))
    closed = repository.add_fiscal_period(1, "FY2024 P03", date(2024, 3, 1), date(2024, 3, 31))
    closed.is_closed = True
    db_session.flush()

    february = repository.get_active_fiscal_period(1, date(2024, 2, 10))

    assert february.period_name == "FY2024 P02"
    assert february.start_date == date(2024, 2, 1)
    assert repository.get_active_fiscal_period(1, date(2024, 3, 10)) is None
    assert repository.get_active_fiscal_period(2, date(2024, 2, 10)) is None


def test_second_import_of_same_statement_is_all_duplicates(db_session, settings):
    repository = BankTransactionRepository(db_session)
    repository.add_fiscal_period(1, "FY2024 P03", date(2024, 3, 1), date(2024, 3, 31))
    context = ParsingContext(statement_date=date(2024, 3, 15))
    lines = [
        "IIB TRANSFER TO 8,000.00 03 05 32,106.81",
        "PAYSHAP PAYMENT 500.00- 03 07 31,606.81",
        "FEE-ELECTRONIC PAYMENT ## 8.90- 03 07 31,597.91",
        "MONTHLY MANAGEMENT FEE 69.00- 03 08 31,528.91",
        "FEE REVERSAL 25.00 03 09 31,553.91",
    ]
    use_case = ProcessBankStatementUseCase(lookup=repository, settings=settings)

    first = use_case.execute(lines, context, company_id=1)
    repository.save_transactions(1, first.transactions)
    second = use_case.execute(lines, context, company_id=1)

    assert first.valid_transactions == 5
    assert [t.type for t in first.transactions[2:]] == [TransactionType.SERVICE_FEE] * 3
    assert second.valid_transactions == 0
    assert [r.reason for r in second.rejected_transactions] == [RejectionReason.DUPLICATE] * 5


def test_db_context_commits_and_rolls_back(tmp_path):
    close_db()
    get_engine(f"sqlite:///{tmp_path / 'ingest.db'}")
    try:
        init_db()
        with get_db_context() as session:
            BankTransactionRepository(session).add_fiscal_period(1, "FY2024 P03", date(2024, 3, 1), date(2024, 3, 31))

        with pytest.raises(RuntimeError):
            with get_db_context() as session:
                BankTransactionRepository(session).save_transactions(1, [make_transaction()])
                raise RuntimeError("abort import")

        with get_db_context() as session:
            repository = BankTransactionRepository(session)
            assert repository.get_active_fiscal_period(1, date(2024, 3, 10)).period_name == "FY2024 P03"
            assert repository.get_by_company(1) == []
    finally:
        close_db()
