"""Repository implementations."""

from statement_ingest.infrastructure.persistence.repositories.bank_transaction_repository import (
    BankTransactionRepository,
)

__all__ = ["BankTransactionRepository"]
