"""Bank-agnostic credit line parser."""

import re
from typing import Optional

from statement_ingest.domain.finance.bank_statement_parser.models import (
    ParsingContext,
    StandardizedTransaction,
)
from statement_ingest.shared.utils.amount_parsing import find_amount_tokens, normalize_ocr_amounts
from statement_ingest.shared.utils.logging_config import get_logger
from .base_parser import BaseTransactionParser

logger = get_logger(__name__)

CREDIT_INDICATORS = re.compile(
    r"(?i)\b(?:CREDIT|DEPOSIT|PAYMENT\s+FROM|TRANSFER\s+FROM|REFUND|INTEREST|SALARY|RECEIVED)\b"
)
FEE_MARKER = re.compile(r"##|\bFEE", re.IGNORECASE)


class CreditParser(BaseTransactionParser):
    """
    Parser for simple credit lines such as ``DEPOSIT REF 123456 500.00``.

    Logic:
    - A credit keyword and exactly one unsigned amount at the end of the line
    - No fee marker (those belong to the fee parsers)
    - The date is the statement date
    """

    @property
    def parser_name(self) -> str:
        return "CREDIT"

    def _detect(self, line: str, context: ParsingContext) -> bool:
        text = normalize_ocr_amounts(line.strip())
        if FEE_MARKER.search(text) or not CREDIT_INDICATORS.search(text):
            return False
        amounts = find_amount_tokens(text)
        if len(amounts) != 1 or amounts[0].marker is not None:
            return False
        return amounts[0].end == len(text)

    def _parse_line(self, line: str, context: ParsingContext) -> Optional[StandardizedTransaction]:
        text = normalize_ocr_amounts(line.strip())
        amount = find_amount_tokens(text)[0]
        description = self.clean_description(text[: amount.start])

        logger.debug(f"CREDIT: {description!r} {amount.value}")
        return StandardizedTransaction(
            date=context.statement_date,
            description=description,
            credit_amount=amount.value,
        )
