from datetime import date

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from statement_ingest.core.config import StatementParserSettings
from statement_ingest.domain.finance.bank_statement_parser.models import FiscalPeriod, ParsingContext
from statement_ingest.infrastructure.database import models  # noqa: F401
from statement_ingest.infrastructure.database.base import Base


class InMemoryLookup:
    """TransactionLookup double backed by a list and an optional period."""

    def __init__(self, existing=None, fiscal_period=None):
        self.existing = list(existing or [])
        self.fiscal_period = fiscal_period
        self.duplicate_calls = []
        self.period_calls = []

    def exists_duplicate(self, company_id, transaction_date, debit_amount, credit_amount, description, balance):
        key = (company_id, transaction_date, debit_amount, credit_amount, description, balance)
        self.duplicate_calls.append(key)
        return key in self.existing

    def get_active_fiscal_period(self, company_id, on_date):
        self.period_calls.append((company_id, on_date))
        if self.fiscal_period is not None and self.fiscal_period.contains(on_date):
            return self.fiscal_period
        return None


@pytest.fixture
def settings():
    return StatementParserSettings()


@pytest.fixture
def context():
    return ParsingContext(statement_date=date(2024, 3, 15), source_file="statement.pdf")


@pytest.fixture
def march_period():
    return FiscalPeriod(
        id=3,
        period_name="FY2024 P03",
        company_id=1,
        start_date=date(2024, 3, 1),
        end_date=date(2024, 3, 31),
    )


@pytest.fixture
def lookup_factory():
    return InMemoryLookup


@pytest.fixture
def db_session():
    engine = create_engine("sqlite://")
    Base.metadata.create_all(engine)
    session = Session(engine, expire_on_commit=False)
    try:
        yield session
    finally:
        session.close()
        engine.dispose()
