"""Database models package - import all models here so metadata sees them."""

from statement_ingest.infrastructure.database.models.bank_transaction import (
    BankTransactionModel,
    FiscalPeriodModel,
)

__all__ = ["BankTransactionModel", "FiscalPeriodModel"]
