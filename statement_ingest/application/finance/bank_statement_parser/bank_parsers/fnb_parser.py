"""FNB (First National Bank) statement parser."""

import re
from typing import Optional

from statement_ingest.domain.finance.bank_statement_parser.models import (
    ParsingContext,
    StandardizedTransaction,
    TransactionType,
)
from statement_ingest.domain.finance.bank_statement_parser.models.transaction import ZERO
from statement_ingest.shared.utils.amount_parsing import find_amount_tokens, normalize_ocr_amounts
from statement_ingest.shared.utils.date_parsing import parse_date, resolve_date
from statement_ingest.shared.utils.logging_config import get_logger
from ..column_classifier import ColumnClassifier, signed_balance
from .multiline_parser import MultilineTransactionParser

logger = get_logger(__name__)

TRANSACTION_LINE = re.compile(
    r"^\s*(?P<date>\d{1,2}/\d{1,2}/\d{4}"
    r"|\d{1,2}\s+(?:Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)[a-z]*)\s+(?P<rest>.+)$"
)
BANK_CHARGE_LINE = re.compile(r"^\s*#\s*(?P<rest>.+)$")
REFERENCE = re.compile(r"\bRef:\s*(?P<reference>\S+)")

SKIP_LINE = re.compile(
    r"^\s*(?:Date|Transaction|Description|Amount|Balance|Reference|"
    r"Account Summary|Statement|Page \d|Business Account|"
    r"Cheque Account|Savings Account|Account Number|Branch|VAT Number|Closing Balance).*$"
)


class FnbParser(MultilineTransactionParser):
    """
    Parser for FNB statements.

    Line layout: ``DATE DESCRIPTION AMOUNT[Cr] BALANCE[Cr]`` where DATE is
    ``DD/MM/YYYY`` or ``DD Mon``.

    Logic:
    - ``Cr`` on the amount marks a credit; a trailing ``-`` is a reversal (credit)
    - Unmarked amounts: balance delta, then keywords, else debit
    - ``#`` lines are bank charges dated with the previous transaction
    - ``Ref: 123`` is moved to the end of the description as ``(Ref: 123)``
    """

    header_key = "FNB"
    skip_pattern = SKIP_LINE

    def __init__(self, settings=None):
        super().__init__(settings)
        self.classifier = ColumnClassifier(self.settings)

    @property
    def parser_name(self) -> str:
        return "FNB"

    @property
    def bank_name(self) -> Optional[str]:
        return "FNB"

    def _is_transaction_line(self, line: str, context: ParsingContext) -> bool:
        charge = BANK_CHARGE_LINE.match(line)
        if charge:
            return bool(find_amount_tokens(normalize_ocr_amounts(charge.group("rest"))))

        match = TRANSACTION_LINE.match(line)
        if not match:
            return False
        if parse_date(match.group("date"), context) is None:
            return False
        return bool(find_amount_tokens(normalize_ocr_amounts(match.group("rest"))))

    def _parse_transaction_line(self, line: str, context: ParsingContext) -> Optional[StandardizedTransaction]:
        charge = BANK_CHARGE_LINE.match(line)
        if charge:
            return self._parse_bank_charge(charge.group("rest"), context)

        match = TRANSACTION_LINE.match(line)
        transaction_date = parse_date(match.group("date"), context)
        rest = normalize_ocr_amounts(match.group("rest"))

        amounts = find_amount_tokens(rest)
        description, reference = self._format_reference(self.clean_description(rest[: amounts[0].start]))

        columns = self.classifier.assign_columns(
            amounts,
            description,
            previous_balance=self.session.previous_balance,
            minus_direction=TransactionType.CREDIT,
            default_direction=TransactionType.DEBIT,
            source="FNB",
        )

        return StandardizedTransaction(
            date=transaction_date,
            description=description,
            service_fee=columns.service_fee,
            debit_amount=columns.debit_amount,
            credit_amount=columns.credit_amount,
            balance=columns.balance,
            reference=reference,
            fee_ambiguous=columns.fee_ambiguous,
        )

    def _parse_bank_charge(self, rest: str, context: ParsingContext) -> StandardizedTransaction:
        """
        Parse ``# Service Fee 5.50 10294.50``.

        The charge goes to the service fee column. Charge lines carry no date,
        so the previous transaction's date is used (statement date if none).
        """
        rest = normalize_ocr_amounts(rest)
        amounts = find_amount_tokens(rest)
        description = self.clean_description(rest[: amounts[0].start])

        fee = amounts[0].value
        balance = signed_balance(amounts[-1]) if len(amounts) > 1 else None
        transaction_date = resolve_date(self.session.last_date, context)

        logger.debug(f"FNB: bank charge {description!r} {fee} dated {transaction_date}")
        return StandardizedTransaction(
            date=transaction_date,
            description=description,
            service_fee=fee,
            debit_amount=ZERO,
            balance=balance,
        )

    @staticmethod
    def _format_reference(description: str):
        """Rewrite ``EFT Payment Ref: 123456`` as ``EFT Payment (Ref: 123456)``."""
        match = REFERENCE.search(description)
        if not match:
            return description, None
        reference = match.group("reference")
        before = description[: match.start()].strip()
        after = description[match.end():].strip()
        formatted = f"{before} (Ref: {reference})"
        if after:
            formatted = f"{formatted} {after}"
        return formatted.strip(), reference
