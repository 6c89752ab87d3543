"""Standard Bank tabular statement parser."""

import re
from datetime import date, timedelta
from typing import Optional

from statement_ingest.domain.finance.bank_statement_parser.models import (
    ParsingContext,
    StandardizedTransaction,
    TransactionType,
)
from statement_ingest.domain.finance.bank_statement_parser.models.transaction import ZERO
from statement_ingest.shared.utils.amount_parsing import (
    find_amount_tokens,
    normalize_ocr_amounts,
    parse_amount_token,
)
from statement_ingest.shared.utils.date_parsing import build_date, parse_date
from statement_ingest.shared.utils.logging_config import get_logger
from ..column_classifier import ColumnClassifier, signed_balance
from .multiline_parser import MultilineTransactionParser

logger = get_logger(__name__)

# DESCRIPTION [##] [AMOUNT[-]] MM DD BALANCE[-]
TRANSACTION_LINE = re.compile(
    r"^(?P<body>[A-Za-z#].*?)\s+(?P<month>\d{2})\s+(?P<day>\d{2})\s+(?P<balance>[\d,]+\.\d{2}-?)$"
)

STATEMENT_PERIOD = re.compile(
    r"(?i)statement\s+from\s+(?P<start>\d{1,2}\s+[A-Za-z]+\s+\d{4})\s+to\s+(?P<end>\d{1,2}\s+[A-Za-z]+\s+\d{4})"
)

SKIP_LINE = re.compile(
    r"^\s*(?:"
    r"Details\b.*\bBalance\b.*"
    r"|Page\s+\d+\s+of\s+\d+.*"
    r"|Statement\s+from\b.*"
    r"|Account\s+(?:Number|number|Type)\b.*"
    r"|Branch\b.*"
    r"|Customer\s+Care\b.*"
    r"|.*\bVAT\s+(?:Reg|Registration|Number|No)\b.*"
    r"|Month-end\s+Balance\b.*"
    r"|Please\s+verify\b.*"
    r")$"
)

FEE_MARKER = "##"
REFERENCE = re.compile(r"\b(\d{8,})\b")
YEAR_SWITCH_WINDOW = timedelta(days=183)


class StandardBankParser(MultilineTransactionParser):
    """
    Parser for Standard Bank tabular statements.

    Line layout: ``DESCRIPTION [##] [AMOUNT[-]] MM DD BALANCE[-]``

    Logic:
    - A trailing ``-`` marks a debit, an unsigned amount is a credit
    - ``##`` marks the amount as a bank service fee
    - A line with only the balance is a balance brought forward
    - The year of ``MM DD`` comes from the statement period header when seen,
      else from the context's default year
    - Continuation lines are only accepted after the Standard Bank header
    """

    header_key = "STANDARD_BANK"
    continuation_requires_header = True
    skip_pattern = SKIP_LINE

    def __init__(self, settings=None):
        super().__init__(settings)
        self.classifier = ColumnClassifier(self.settings)

    @property
    def parser_name(self) -> str:
        return "STANDARD_BANK"

    @property
    def bank_name(self) -> Optional[str]:
        return "Standard Bank"

    def _observe_header(self, line: str, context: ParsingContext) -> bool:
        match = STATEMENT_PERIOD.search(line)
        if match:
            start = parse_date(match.group("start"), context)
            end = parse_date(match.group("end"), context)
            if start and end and start <= end:
                self.session.period_start = start
                self.session.period_end = end
                logger.info(f"Standard Bank: statement period {start} to {end}")
        return super()._observe_header(line, context)

    def _is_transaction_line(self, line: str, context: ParsingContext) -> bool:
        match = TRANSACTION_LINE.match(normalize_ocr_amounts(line.strip()))
        if not match:
            return False
        return self._transaction_date(int(match.group("month")), int(match.group("day")), context) is not None

    def _parse_transaction_line(self, line: str, context: ParsingContext) -> Optional[StandardizedTransaction]:
        match = TRANSACTION_LINE.match(normalize_ocr_amounts(line.strip()))
        body = match.group("body")
        transaction_date = self._transaction_date(int(match.group("month")), int(match.group("day")), context)
        balance_token = parse_amount_token(match.group("balance"))

        amounts = find_amount_tokens(body)
        has_fee_marker = FEE_MARKER in body
        description_end = amounts[0].start if amounts else len(body)
        description = self.clean_description(body[:description_end].replace(FEE_MARKER, " "))

        reference_match = REFERENCE.search(description)
        reference = reference_match.group(1) if reference_match else None

        if has_fee_marker and amounts:
            # ## puts the amount in the service fee column
            fee = sum((token.value for token in amounts), ZERO)
            transaction = StandardizedTransaction(
                date=transaction_date,
                description=description,
                service_fee=fee,
                balance=signed_balance(balance_token),
                reference=reference,
            )
        else:
            columns = self.classifier.assign_columns(
                amounts + [balance_token],
                description,
                previous_balance=self.session.previous_balance,
                minus_direction=TransactionType.DEBIT,
                unsigned_direction=TransactionType.CREDIT,
                default_direction=TransactionType.CREDIT,
                source="Standard Bank",
            )
            transaction = StandardizedTransaction(
                date=transaction_date,
                description=description,
                service_fee=columns.service_fee,
                debit_amount=columns.debit_amount,
                credit_amount=columns.credit_amount,
                balance=columns.balance,
                reference=reference,
                fee_ambiguous=columns.fee_ambiguous,
            )

        logger.debug(f"Standard Bank: parsed {transaction.description!r} on {transaction.date}")
        return transaction

    def _transaction_date(self, month: int, day: int, context: ParsingContext) -> Optional[date]:
        """
        Resolve ``MM DD`` to a full date.

        With a known statement period the year is the one that puts the date
        inside the period (Dec/Jan statements span two years). Without it the
        context's default year is used, moved by one year when that lands more
        than six months away from the statement date.
        """
        start, end = self.session.period_start, self.session.period_end
        if start and end:
            for year in sorted({start.year, end.year}):
                candidate = build_date(year, month, day)
                if candidate and start <= candidate <= end:
                    return candidate
            if start.year != end.year and month < start.month:
                return build_date(end.year, month, day)
            return build_date(start.year, month, day)

        candidate = build_date(context.default_year, month, day)
        if candidate is None or context.default_year != context.statement_date.year:
            return candidate
        if candidate - context.statement_date > YEAR_SWITCH_WINDOW:
            return build_date(context.default_year - 1, month, day)
        if context.statement_date - candidate > YEAR_SWITCH_WINDOW:
            return build_date(context.default_year + 1, month, day)
        return candidate
