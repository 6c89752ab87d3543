"""Absa bank statement parser."""

import re
from typing import Optional

from statement_ingest.domain.finance.bank_statement_parser.models import (
    ParsingContext,
    StandardizedTransaction,
    TransactionType,
)
from statement_ingest.shared.utils.amount_parsing import find_amount_tokens, normalize_ocr_amounts
from statement_ingest.shared.utils.date_parsing import parse_date
from statement_ingest.shared.utils.logging_config import get_logger
from ..column_classifier import ColumnClassifier
from .multiline_parser import MultilineTransactionParser

logger = get_logger(__name__)

TRANSACTION_LINE = re.compile(r"^\s*(?P<date>\d{1,2}/\d{1,2}/\d{4})\s+(?P<rest>.+)$")

SKIP_LINE = re.compile(
    r"^\s*(?:Date|Transaction Description|Charge|Debit Amount|Credit Amount|Balance|"
    r"Your transactions|Account Type|Statement no|Client VAT|Account Summary|"
    r"Page \d+ of \d+|Authorised Financial|Registration Number|Cheque Account).*$"
)


class AbsaParser(MultilineTransactionParser):
    """
    Parser for Absa statements.

    Line layout: ``DD/MM/YYYY DESCRIPTION [charge] [debit] [credit] balance``

    Logic:
    - Amounts use space-grouped thousands (``54 882.66``)
    - Rightmost amount is the balance, the rest resolve right to left
      (see ColumnClassifier)
    - Direction: a trailing ``-`` (negative debit) is a credit, then balance
      delta, then keywords, else debit
    - Description continuation lines are indented and carry no date
    """

    header_key = "ABSA"
    skip_pattern = SKIP_LINE
    space_thousands = True

    def __init__(self, settings=None):
        super().__init__(settings)
        self.classifier = ColumnClassifier(self.settings)

    @property
    def parser_name(self) -> str:
        return "ABSA"

    @property
    def bank_name(self) -> Optional[str]:
        return "Absa"

    def _is_transaction_line(self, line: str, context: ParsingContext) -> bool:
        match = TRANSACTION_LINE.match(line)
        if not match:
            return False
        if parse_date(match.group("date"), context) is None:
            return False
        return bool(find_amount_tokens(normalize_ocr_amounts(match.group("rest")), allow_space_thousands=True))

    def _parse_transaction_line(self, line: str, context: ParsingContext) -> Optional[StandardizedTransaction]:
        match = TRANSACTION_LINE.match(line)
        transaction_date = parse_date(match.group("date"), context)
        rest = normalize_ocr_amounts(match.group("rest"))

        amounts = find_amount_tokens(rest, allow_space_thousands=True)
        description = self.clean_description(rest[: amounts[0].start])

        columns = self.classifier.assign_columns(
            amounts,
            description,
            previous_balance=self.session.previous_balance,
            minus_direction=TransactionType.CREDIT,
            default_direction=TransactionType.DEBIT,
            source="ABSA",
        )

        logger.debug(
            f"ABSA: {description!r} fee={columns.service_fee} debit={columns.debit_amount} "
            f"credit={columns.credit_amount} balance={columns.balance} ({columns.direction_source})"
        )
        return StandardizedTransaction(
            date=transaction_date,
            description=description,
            service_fee=columns.service_fee,
            debit_amount=columns.debit_amount,
            credit_amount=columns.credit_amount,
            balance=columns.balance,
            fee_ambiguous=columns.fee_ambiguous,
        )
