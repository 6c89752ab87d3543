"""Parser for lines carrying a transaction and its fee."""

import re
from typing import Optional

from statement_ingest.domain.finance.bank_statement_parser.models import (
    ParsingContext,
    StandardizedTransaction,
)
from statement_ingest.shared.utils.amount_parsing import normalize_ocr_amounts, parse_amount_token
from statement_ingest.shared.utils.logging_config import get_logger
from .base_parser import BaseTransactionParser

logger = get_logger(__name__)

# TRANSFER TO JOHN DOE 1,500.00- FEE: 8.90-
MULTI_LINE = re.compile(
    r"^(?P<description>.*?[A-Za-z].*?)\s+(?P<amount>\d{1,3}(?:,\d{3})*\.\d{2}|\d+\.\d{2})-"
    r"\s+FEE\b[:\-\s]?.*?(?P<fee>\d{1,3}(?:,\d{3})*\.\d{2}|\d+\.\d{2})-?\s*$",
    re.IGNORECASE,
)


class MultiTransactionParser(BaseTransactionParser):
    """
    Parser for one debit plus its fee on a single line.

    Logic:
    - ``DESCRIPTION AMOUNT- FEE[:-] ... FEE_AMOUNT[-]``
    - AMOUNT is a debit, FEE_AMOUNT goes to the service fee column
    - The date is the statement date
    """

    @property
    def parser_name(self) -> str:
        return "MULTI_TRANSACTION"

    def _detect(self, line: str, context: ParsingContext) -> bool:
        return MULTI_LINE.match(normalize_ocr_amounts(line.strip())) is not None

    def _parse_line(self, line: str, context: ParsingContext) -> Optional[StandardizedTransaction]:
        match = MULTI_LINE.match(normalize_ocr_amounts(line.strip()))
        amount = parse_amount_token(match.group("amount"))
        fee = parse_amount_token(match.group("fee"))
        description = self.clean_description(match.group("description"))

        logger.debug(f"MULTI_TRANSACTION: {description!r} debit={amount.value} fee={fee.value}")
        return StandardizedTransaction(
            date=context.statement_date,
            description=description,
            debit_amount=amount.value,
            service_fee=fee.value,
        )
