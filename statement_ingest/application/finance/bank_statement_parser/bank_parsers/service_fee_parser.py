"""Bank-agnostic service fee line parser."""

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

FEE_MARKER = re.compile(r"##|\bFEES?\b", re.IGNORECASE)

# Column header rows such as "Details Service Fee Debits Credits Date Balance"
TABLE_HEADER = re.compile(
    r"(?i)^\s*(?:Date|Details?|Description|Amount|Debits?|Credits?|Balance|Reference|Service|Fees?)"
    r"(?:\s+(?:Date|Details?|Description|Amount|Debits?|Credits?|Balance|Reference|Service|Fees?))*\s*$"
)
HEADER_WORDS = re.compile(r"\b(?:Fee|Debits|Credits|Date|Balance)\b")

TRAILING_AMOUNT = re.compile(r"(?:\d+\.\d{2}-?)\s*(?:##)?\s*$")


class ServiceFeeParser(BaseTransactionParser):
    """
    Parser for standalone service fee lines.

    Logic:
    - Line carries ``##`` or the word FEE and ends in an amount
    - Table header rows are excluded
    - The last amount on the line is the fee; the date is the statement date
    - Reference is always ``FEE``
    """

    @property
    def parser_name(self) -> str:
        return "SERVICE_FEE"

    def _detect(self, line: str, context: ParsingContext) -> bool:
        text = normalize_ocr_amounts(line.strip())
        if not FEE_MARKER.search(text):
            return False
        if TABLE_HEADER.match(text) or len(HEADER_WORDS.findall(text)) >= 2:
            return False
        return bool(TRAILING_AMOUNT.search(text)) and bool(find_amount_tokens(text))

    def _parse_line(self, line: str, context: ParsingContext) -> Optional[StandardizedTransaction]:
        text = normalize_ocr_amounts(line.strip())
        amounts = find_amount_tokens(text)
        fee_token = amounts[-1]
        description = self.clean_description(text[: amounts[0].start].replace("##", " "))

        logger.debug(f"SERVICE_FEE: {description!r} {fee_token.value}")
        return StandardizedTransaction(
            date=context.statement_date,
            description=description,
            service_fee=fee_token.value,
            reference="FEE",
        )
