"""Validation outcomes and the per-statement processing result."""

from datetime import date as date_type
from decimal import Decimal
from enum import Enum
from typing import List, Optional

import pandas as pd
from pydantic import BaseModel, ConfigDict, Field

from .transaction import ParsedTransaction, ZERO


class RejectionReason(str, Enum):
    """Why a transaction was excluded from the accepted set."""

    DUPLICATE = "DUPLICATE"
    OUT_OF_PERIOD = "OUT_OF_PERIOD"
    VALIDATION_ERROR = "VALIDATION_ERROR"


class RejectedTransaction(BaseModel):
    """A transaction skipped by validation, with the first reason that fired."""

    model_config = ConfigDict(frozen=True)

    date: Optional[date_type] = Field(None, description="Transaction date")
    description: Optional[str] = Field(None, description="Transaction description")
    debit_amount: Decimal = Field(ZERO, description="Money out")
    credit_amount: Decimal = Field(ZERO, description="Money in")
    balance: Optional[Decimal] = Field(None, description="Running balance")
    reason: RejectionReason = Field(..., description="Rejection reason")
    detail: str = Field("", description="Human-readable explanation")


class FiscalPeriod(BaseModel):
    """Accounting date range a transaction must fall within."""

    model_config = ConfigDict(frozen=True)

    id: Optional[int] = Field(None, description="Fiscal period id")
    period_name: str = Field("", description="Display name, e.g. 'FY2024 P03'")
    company_id: Optional[int] = Field(None, description="Owning company")
    start_date: date_type = Field(..., description="First day of the period, inclusive")
    end_date: date_type = Field(..., description="Last day of the period, inclusive")

    def contains(self, value: date_type) -> bool:
        return self.start_date <= value <= self.end_date


class StatementProcessingResult(BaseModel):
    """Counts plus accepted and rejected transactions for one statement."""

    model_config = ConfigDict(frozen=True)

    processed_lines: int = Field(0, ge=0)
    valid_transactions: int = Field(0, ge=0)
    duplicate_transactions: int = Field(0, ge=0)
    out_of_period_transactions: int = Field(0, ge=0)
    invalid_transactions: int = Field(0, ge=0)
    unparsed_lines: int = Field(0, ge=0)
    transactions: List[ParsedTransaction] = Field(default_factory=list)
    rejected_transactions: List[RejectedTransaction] = Field(default_factory=list)
    parse_errors: List[str] = Field(default_factory=list)
    bank_name: Optional[str] = Field(None, description="Bank detected from the lines, if any")

    @property
    def rejected_count(self) -> int:
        return self.duplicate_transactions + self.out_of_period_transactions + self.invalid_transactions

    def summary(self) -> dict:
        """Counts only, for logging and CLI output."""
        return {
            "bank_name": self.bank_name,
            "processed_lines": self.processed_lines,
            "valid_transactions": self.valid_transactions,
            "duplicate_transactions": self.duplicate_transactions,
            "out_of_period_transactions": self.out_of_period_transactions,
            "invalid_transactions": self.invalid_transactions,
            "unparsed_lines": self.unparsed_lines,
            "parse_errors": len(self.parse_errors),
        }

    def to_dataframe(self) -> pd.DataFrame:
        """Accepted transactions as a DataFrame (one row per transaction)."""
        columns = ["date", "type", "description", "debit", "credit", "balance", "reference", "has_service_fee"]
        rows = [
            {
                "date": txn.date,
                "type": txn.type.value,
                "description": txn.description,
                "debit": txn.debit_amount,
                "credit": txn.credit_amount,
                "balance": txn.balance,
                "reference": txn.reference,
                "has_service_fee": txn.has_service_fee,
            }
            for txn in self.transactions
        ]
        return pd.DataFrame(rows, columns=columns)

    def rejected_to_dataframe(self) -> pd.DataFrame:
        """Rejected transactions with reason and detail."""
        columns = ["date", "description", "debit", "credit", "balance", "reason", "detail"]
        rows = [
            {
                "date": rejected.date,
                "description": rejected.description,
                "debit": rejected.debit_amount,
                "credit": rejected.credit_amount,
                "balance": rejected.balance,
                "reason": rejected.reason.value,
                "detail": rejected.detail,
            }
            for rejected in self.rejected_transactions
        ]
        return pd.DataFrame(rows, columns=columns)
