"""Shared multiline accumulation for bank-specific tabular parsers."""

import re
from abc import abstractmethod
from typing import Optional

from statement_ingest.domain.finance.bank_statement_parser.models import (
    ParsingContext,
    StandardizedTransaction,
)
from statement_ingest.shared.utils.amount_parsing import find_amount_tokens
from statement_ingest.shared.utils.logging_config import get_logger
from .base_parser import BANK_HEADER_PATTERNS, AccumulationState, BaseTransactionParser

logger = get_logger(__name__)

LEADING_DATE = re.compile(
    r"^\s*(?:\d{1,2}/\d{1,2}/\d{2,4}|\d{4}-\d{2}-\d{2}|\d{1,2}\s+[A-Za-z]{3,9}\b)"
)


class MultilineTransactionParser(BaseTransactionParser):
    """
    Base class for parsers whose descriptions may wrap over several lines.

    States (see ``AccumulationState``):
    - IDLE: no pending description
    - ACCUMULATING: continuation fragments are buffered

    A continuation fragment (no leading date, indented at least
    ``continuation_min_indent`` spaces, no amounts) moves IDLE -> ACCUMULATING.
    The next complete transaction line moves back to IDLE and receives the
    fragments, in line order, as a prefix of its own description.
    ``finalize()`` turns a still-open buffer into a zero-amount transaction.
    """

    # Parser key in BANK_HEADER_PATTERNS
    header_key: str = ""

    # Continuation lines are only accepted after this bank's header was seen
    continuation_requires_header: bool = False

    # Header/footer lines that are never transactions
    skip_pattern: Optional[re.Pattern] = None

    # Space-grouped thousands (54 882.66) on this bank's statements
    space_thousands: bool = False

    @abstractmethod
    def _is_transaction_line(self, line: str, context: ParsingContext) -> bool:
        """True if the line carries a complete transaction."""
        pass

    @abstractmethod
    def _parse_transaction_line(self, line: str, context: ParsingContext) -> Optional[StandardizedTransaction]:
        """Build the transaction for a complete line."""
        pass

    def _observe_header(self, line: str, context: ParsingContext) -> bool:
        """
        Flip format detection on bank header lines.

        Returns:
            True if the line was a header (never parseable itself)
        """
        if LEADING_DATE.match(line) or find_amount_tokens(line, self.space_thousands):
            return False

        for key, pattern in BANK_HEADER_PATTERNS.items():
            if not pattern.search(line):
                continue
            if key == self.header_key:
                if not self.session.format_detected:
                    logger.info(f"{self.bank_name}: statement header detected")
                self.session.format_detected = True
            elif not self.session.format_detected:
                self.session.foreign_format_detected = True
            return True
        return False

    def _should_skip(self, line: str) -> bool:
        return bool(self.skip_pattern and self.skip_pattern.match(line))

    def _is_continuation_line(self, line: str) -> bool:
        if self.continuation_requires_header and not self.session.format_detected:
            return False
        if LEADING_DATE.match(line):
            return False
        if self.leading_indent(line) < self.settings.continuation_min_indent:
            return False
        if find_amount_tokens(line, self.space_thousands):
            return False
        return any(ch.isalpha() for ch in line)

    def _detect(self, line: str, context: ParsingContext) -> bool:
        if self._observe_header(line, context):
            return False
        if self.session.foreign_format_detected:
            return False
        if self._should_skip(line):
            return False
        if self._is_transaction_line(line, context):
            return True
        return self._is_continuation_line(line)

    def _parse_line(self, line: str, context: ParsingContext) -> Optional[StandardizedTransaction]:
        if not self._is_transaction_line(line, context):
            fragment = self.clean_description(line)
            self.session.fragments.append(fragment)
            logger.debug(f"{self.bank_name}: buffered continuation {fragment!r}")
            return None

        transaction = self._parse_transaction_line(line, context)
        if transaction is None:
            return None

        if self.session.fragments:
            prefix = " ".join(self.session.fragments)
            description = f"{prefix} {transaction.description}".strip()
            transaction = transaction.model_copy(update={"description": description})
            self.session.fragments = []

        if transaction.date is not None:
            self.session.last_date = transaction.date
        if transaction.balance is not None:
            self.session.previous_balance = transaction.balance
        return transaction

    def finalize(self, context: Optional[ParsingContext] = None) -> Optional[StandardizedTransaction]:
        """
        Flush a still-open continuation buffer.

        Returns:
            A zero-amount transaction carrying the buffered description with
            the last known date and balance, or None when IDLE
        """
        if self.session.state == AccumulationState.IDLE:
            return None

        context = context or self.session.last_context
        transaction_date = self.session.last_date
        if transaction_date is None and context is not None:
            transaction_date = context.statement_date

        transaction = StandardizedTransaction(
            date=transaction_date,
            description=" ".join(self.session.fragments),
            balance=self.session.previous_balance,
        )
        logger.info(
            f"{self.bank_name}: flushed {len(self.session.fragments)} trailing continuation line(s) "
            f"as {transaction.description!r}"
        )
        self.session.fragments = []
        self.session.transactions_emitted += 1
        return transaction
