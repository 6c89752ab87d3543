"""Base class for all statement line parsers."""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from statement_ingest.core.config import StatementParserSettings, get_settings
from statement_ingest.core.exceptions import ParserContractError
from statement_ingest.domain.finance.bank_statement_parser.models import (
    ParsingContext,
    StandardizedTransaction,
)
from statement_ingest.shared.utils.logging_config import get_logger

logger = get_logger(__name__)

# Bank header lines, used to flip format detection. Only checked on lines that
# carry no amount and no leading date, so descriptions such as
# "PAYMENT TO STANDARD BANK CARD" never count as a header.
BANK_HEADER_PATTERNS = {
    "STANDARD_BANK": re.compile(r"(?i)\bstandard\s+bank\b"),
    "ABSA": re.compile(r"(?i)^\s*(?:ABSA|Absa\s+Bank)\b"),
    "FNB": re.compile(r"(?i)^\s*(?:FNB|First\s+National\s+Bank)\b"),
}


class AccumulationState(str, Enum):
    """Multiline accumulation state of a parser session."""

    IDLE = "IDLE"
    ACCUMULATING = "ACCUMULATING"


@dataclass
class ParserSession:
    """
    Mutable per-statement state owned by exactly one parser instance.

    One parser instance processes one statement. Call ``reset()`` on the
    parser (or build a new one) before feeding it another statement.
    """

    previous_balance: Optional[Decimal] = None
    fragments: List[str] = field(default_factory=list)
    format_detected: bool = False
    foreign_format_detected: bool = False
    last_date: Optional[date] = None
    last_context: Optional[ParsingContext] = None
    period_start: Optional[date] = None
    period_end: Optional[date] = None
    accepted_line: Optional[str] = None
    transactions_emitted: int = 0

    @property
    def state(self) -> AccumulationState:
        return AccumulationState.ACCUMULATING if self.fragments else AccumulationState.IDLE


class BaseTransactionParser(ABC):
    """
    Abstract base class for line-level statement parsers.

    Contract:
    - ``can_parse(line, context)`` is a predicate. The only side effects
      allowed are format-detection flips (bank header seen, statement period
      seen) and remembering the accepted line.
    - ``parse(line, context)`` must only be called right after ``can_parse``
      accepted that same line. Anything else raises ParserContractError.
    - ``finalize()`` flushes buffered state at the end of a statement.
    - ``reset()`` clears the session so the instance can be reused.
    """

    def __init__(self, settings: Optional[StatementParserSettings] = None):
        self.settings = settings or get_settings()
        self.session = ParserSession()

    @property
    @abstractmethod
    def parser_name(self) -> str:
        """Registry name (e.g., 'STANDARD_BANK', 'CREDIT')."""
        pass

    @property
    def bank_name(self) -> Optional[str]:
        """Display name of the bank, or None for bank-agnostic parsers."""
        return None

    def can_parse(self, line: Optional[str], context: ParsingContext) -> bool:
        """
        Check whether this parser accepts the line.

        Args:
            line: Raw statement line
            context: Statement context

        Returns:
            True if ``parse`` may be called for this line
        """
        self.session.accepted_line = None
        if line is None or not line.strip():
            return False

        self.session.last_context = context
        accepted = self._detect(line, context)
        if accepted:
            self.session.accepted_line = line
        return accepted

    def parse(self, line: str, context: ParsingContext) -> Optional[StandardizedTransaction]:
        """
        Parse a line previously accepted by ``can_parse``.

        Returns:
            The completed transaction, or None when the line was buffered as
            a continuation fragment

        Raises:
            ParserContractError: If ``can_parse`` did not just accept this line
        """
        if self.session.accepted_line is None or self.session.accepted_line != line:
            raise ParserContractError(self.parser_name, line)
        self.session.accepted_line = None

        transaction = self._parse_line(line, context)
        if transaction is not None:
            self.session.transactions_emitted += 1
        return transaction

    def finalize(self, context: Optional[ParsingContext] = None) -> Optional[StandardizedTransaction]:
        """Flush buffered state at the end of a statement. Nothing to flush by default."""
        return None

    def reset(self) -> None:
        """Drop all per-statement state."""
        self.session = ParserSession()

    @abstractmethod
    def _detect(self, line: str, context: ParsingContext) -> bool:
        """Format-specific acceptance check."""
        pass

    @abstractmethod
    def _parse_line(self, line: str, context: ParsingContext) -> Optional[StandardizedTransaction]:
        """Format-specific parsing of an accepted line."""
        pass

    # Helper methods available to all parsers

    @staticmethod
    def clean_description(text: str) -> str:
        """Collapse whitespace and strip separators left over after removing amounts."""
        if not text:
            return ""
        cleaned = re.sub(r"\s+", " ", text)
        return cleaned.strip(" \t-:|")

    @staticmethod
    def leading_indent(line: str) -> int:
        """Number of leading spaces (tabs count as four)."""
        expanded = line.expandtabs(4)
        return len(expanded) - len(expanded.lstrip(" "))
