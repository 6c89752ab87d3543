"""Statement line parsing, classification and validation."""

from .column_classifier import ColumnAssignment, ColumnClassifier
from .process_bank_statement import ProcessBankStatementUseCase
from .result_aggregator import StatementResultAggregator
from .statement_validator import StatementValidator, TransactionLookup

__all__ = [
    "ColumnAssignment",
    "ColumnClassifier",
    "ProcessBankStatementUseCase",
    "StatementResultAggregator",
    "StatementValidator",
    "TransactionLookup",
]
