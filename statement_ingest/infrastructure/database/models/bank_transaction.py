"""Imported bank transaction and fiscal period database models."""

from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import Boolean, Date, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from statement_ingest.infrastructure.database.base import Base, TimestampMixin


class BankTransactionModel(Base, TimestampMixin):
    """Model for an imported bank statement transaction."""

    __tablename__ = "bank_transactions"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    company_id: Mapped[int] = mapped_column(Integer, nullable=False)
    transaction_date: Mapped[date] = mapped_column(Date, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    transaction_type: Mapped[str] = mapped_column(String(20), nullable=False)
    debit_amount: Mapped[Decimal] = mapped_column(Numeric(20, 2), nullable=False, default=0)
    credit_amount: Mapped[Decimal] = mapped_column(Numeric(20, 2), nullable=False, default=0)
    balance: Mapped[Optional[Decimal]] = mapped_column(Numeric(20, 2), nullable=True)
    reference: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    has_service_fee: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    source_file: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    fiscal_period_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    __table_args__ = (
        Index("ix_bank_transactions_company_date", "company_id", "transaction_date"),
    )

    def __repr__(self) -> str:
        return (
            f"<BankTransaction(id={self.id}, company={self.company_id}, date={self.transaction_date}, "
            f"debit={self.debit_amount}, credit={self.credit_amount})>"
        )


class FiscalPeriodModel(Base, TimestampMixin):
    """Model for a company's fiscal period."""

    __tablename__ = "fiscal_periods"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    company_id: Mapped[int] = mapped_column(Integer, nullable=False)
    period_name: Mapped[str] = mapped_column(String(100), nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    is_closed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = (
        Index("ix_fiscal_periods_company_dates", "company_id", "start_date", "end_date"),
    )

    def __repr__(self) -> str:
        return f"<FiscalPeriod(id={self.id}, company={self.company_id}, {self.start_date}..{self.end_date})>"
