"""Collects counts and outcomes while a statement is processed."""

from typing import List, Optional

from statement_ingest.domain.finance.bank_statement_parser.models import (
    ParsedTransaction,
    RejectedTransaction,
    RejectionReason,
    StatementProcessingResult,
)


class StatementResultAggregator:
    """Mutable tally for one statement; ``build()`` freezes it into a result."""

    def __init__(self):
        self.processed_lines = 0
        self.unparsed_lines = 0
        self.transactions: List[ParsedTransaction] = []
        self.rejected: List[RejectedTransaction] = []
        self.parse_errors: List[str] = []
        self.bank_name: Optional[str] = None

    def line_processed(self) -> None:
        self.processed_lines += 1

    def line_unparsed(self) -> None:
        self.unparsed_lines += 1

    def add_parse_error(self, message: str) -> None:
        self.parse_errors.append(message)

    def accept(self, transaction: ParsedTransaction, bank_name: Optional[str] = None) -> None:
        self.transactions.append(transaction)
        if bank_name and self.bank_name is None:
            self.bank_name = bank_name

    def reject(self, rejected: RejectedTransaction) -> None:
        self.rejected.append(rejected)

    def count(self, reason: RejectionReason) -> int:
        return sum(1 for rejected in self.rejected if rejected.reason == reason)

    def build(self) -> StatementProcessingResult:
        return StatementProcessingResult(
            processed_lines=self.processed_lines,
            valid_transactions=len(self.transactions),
            duplicate_transactions=self.count(RejectionReason.DUPLICATE),
            out_of_period_transactions=self.count(RejectionReason.OUT_OF_PERIOD),
            invalid_transactions=self.count(RejectionReason.VALIDATION_ERROR),
            unparsed_lines=self.unparsed_lines,
            transactions=list(self.transactions),
            rejected_transactions=list(self.rejected),
            parse_errors=list(self.parse_errors),
            bank_name=self.bank_name,
        )
