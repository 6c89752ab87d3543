"""Domain models for bank statement parsing."""

from .parsing_context import ParsingContext
from .transaction import TransactionType, StandardizedTransaction, ParsedTransaction
from .processing_result import (
    RejectionReason,
    RejectedTransaction,
    FiscalPeriod,
    StatementProcessingResult,
)

__all__ = [
    "ParsingContext",
    "TransactionType",
    "StandardizedTransaction",
    "ParsedTransaction",
    "RejectionReason",
    "RejectedTransaction",
    "FiscalPeriod",
    "StatementProcessingResult",
]
