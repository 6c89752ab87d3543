"""
Column disambiguation and transaction type classification.

Statement lines end in one to four amounts with no fixed schema. The
rightmost amount is always the running balance; the rest are assigned right
to left:

- 1 amount:  balance only (opening balance / brought forward), CREDIT with 0
- 2 amounts: transaction amount + balance; direction from the explicit marker,
  then the balance delta, then description keywords, then the format default
- 3 amounts: fee + transaction amount + balance; a fee at or above
  ``service_fee_threshold`` is kept as the fee leg but logged as ambiguous
- 4 amounts: charge column + the three-amount case
"""

import re
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional, Tuple

from statement_ingest.core.config import StatementParserSettings, get_settings
from statement_ingest.domain.finance.bank_statement_parser.models import (
    ParsedTransaction,
    StandardizedTransaction,
    TransactionType,
)
from statement_ingest.domain.finance.bank_statement_parser.models.transaction import ZERO
from statement_ingest.shared.utils.amount_parsing import (
    MARKER_CREDIT,
    MARKER_DEBIT,
    MARKER_MINUS,
    AmountToken,
)
from statement_ingest.shared.utils.logging_config import get_logger

logger = get_logger(__name__)

FEE_KEYWORDS = re.compile(r"(?i)\b(?:fee|fees|charge|charges|bank\s+charges?)\b")

# Checked before the debit keywords: "Atm Payment Fr ..." is an inbound payment
CREDIT_KEYWORDS = re.compile(
    r"(?i)\b(?:payment\s+fr(?:om)?|transfer\s+from|deposit|credit|refund|reversal|"
    r"salary|interest|dividend|received)\b"
)

DEBIT_KEYWORDS = re.compile(
    r"(?i)\b(?:withdrawal|atm|payment\s+to|pmt\s+to|transfer\s+to|debit\s+order|"
    r"purchase|pos|cash\s+send|prepaid)\b"
)


@dataclass(frozen=True)
class ColumnAssignment:
    """Amounts of one line after column disambiguation."""

    service_fee: Decimal = ZERO
    debit_amount: Decimal = ZERO
    credit_amount: Decimal = ZERO
    balance: Optional[Decimal] = None
    fee_ambiguous: bool = False
    direction_source: str = "none"


def signed_balance(token: AmountToken) -> Decimal:
    """Balance value with its marker applied (``-`` or ``Dr`` means overdrawn)."""
    if token.marker in (MARKER_MINUS, MARKER_DEBIT):
        return -token.value
    return token.value


def direction_from_keywords(description: str) -> Optional[TransactionType]:
    """Guess CREDIT/DEBIT from description keywords; credit indicators win."""
    text = description or ""
    if CREDIT_KEYWORDS.search(text):
        return TransactionType.CREDIT
    if DEBIT_KEYWORDS.search(text):
        return TransactionType.DEBIT
    return None


class ColumnClassifier:
    """Assigns trailing amounts to columns and classifies transactions."""

    def __init__(self, settings: Optional[StatementParserSettings] = None):
        self.settings = settings or get_settings()

    def assign_columns(
        self,
        amounts: List[AmountToken],
        description: str,
        previous_balance: Optional[Decimal] = None,
        minus_direction: TransactionType = TransactionType.DEBIT,
        unsigned_direction: Optional[TransactionType] = None,
        default_direction: TransactionType = TransactionType.DEBIT,
        source: str = "",
    ) -> ColumnAssignment:
        """
        Assign amount tokens (left to right as found on the line) to columns.

        Args:
            amounts: Amount tokens after the description
            description: Description text, for keyword heuristics
            previous_balance: Balance of the previous transaction in this statement
            minus_direction: Meaning of a trailing ``-`` on the transaction amount
            unsigned_direction: Meaning of an unmarked amount when the format
                always prints a sign (Standard Bank), else None
            default_direction: Used when nothing else decides
            source: Parser name for log messages

        Returns:
            ColumnAssignment honouring the single-direction invariant
        """
        if not amounts:
            return ColumnAssignment()

        balance = signed_balance(amounts[-1])
        if len(amounts) == 1:
            return ColumnAssignment(balance=balance, direction_source="balance_only")

        if len(amounts) > 4:
            logger.warning(
                f"{source}: {len(amounts)} amounts on one line, using the rightmost four ({description!r})"
            )
            amounts = amounts[-4:]

        transaction_token = amounts[-2]
        service_fee = ZERO
        fee_ambiguous = False

        if len(amounts) >= 3:
            fee_token = amounts[-3]
            service_fee = fee_token.value
            if fee_token.value >= self.settings.service_fee_threshold:
                fee_ambiguous = True
                logger.warning(
                    f"{source}: amount {fee_token.value} in the fee position is not below "
                    f"{self.settings.service_fee_threshold}; kept as fee leg of {description!r}"
                )
        if len(amounts) == 4:
            service_fee += amounts[0].value

        direction, direction_source = self._resolve_direction(
            transaction_token,
            description,
            balance,
            previous_balance,
            minus_direction,
            unsigned_direction,
            default_direction,
        )
        logger.debug(f"{source}: {transaction_token.value} -> {direction.value} via {direction_source}")

        return ColumnAssignment(
            service_fee=service_fee,
            debit_amount=transaction_token.value if direction == TransactionType.DEBIT else ZERO,
            credit_amount=transaction_token.value if direction == TransactionType.CREDIT else ZERO,
            balance=balance,
            fee_ambiguous=fee_ambiguous,
            direction_source=direction_source,
        )

    @staticmethod
    def _resolve_direction(
        token: AmountToken,
        description: str,
        balance: Decimal,
        previous_balance: Optional[Decimal],
        minus_direction: TransactionType,
        unsigned_direction: Optional[TransactionType],
        default_direction: TransactionType,
    ):
        if token.marker == MARKER_CREDIT:
            return TransactionType.CREDIT, "marker"
        if token.marker == MARKER_DEBIT:
            return TransactionType.DEBIT, "marker"
        if token.marker == MARKER_MINUS:
            return minus_direction, "marker"
        if unsigned_direction is not None:
            return unsigned_direction, "marker"

        if previous_balance is not None and balance != previous_balance:
            if balance > previous_balance:
                return TransactionType.CREDIT, "balance_delta"
            return TransactionType.DEBIT, "balance_delta"

        keyword_direction = direction_from_keywords(description)
        if keyword_direction is not None:
            return keyword_direction, "keywords"

        return default_direction, "default"

    @staticmethod
    def resolve_type(transaction: StandardizedTransaction) -> Tuple[TransactionType, Decimal]:
        """
        Ledger type and unsigned amount of a transaction.

        Fee/charge keywords in the description make it SERVICE_FEE whatever the
        columns say. A line with only a fee is SERVICE_FEE, a line with no
        amount at all (balance brought forward) is CREDIT with amount 0.
        """
        fee = transaction.service_fee
        debit = transaction.debit_amount
        credit = transaction.credit_amount

        if FEE_KEYWORDS.search(transaction.description or ""):
            return TransactionType.SERVICE_FEE, debit or credit or fee
        if debit > 0:
            return TransactionType.DEBIT, debit
        if credit > 0:
            return TransactionType.CREDIT, credit
        if fee > 0:
            return TransactionType.SERVICE_FEE, fee
        return TransactionType.CREDIT, ZERO

    @classmethod
    def ledger_amounts(cls, transaction: StandardizedTransaction) -> Tuple[Decimal, Decimal]:
        """(debit, credit) as stored for the classified transaction."""
        txn_type, amount = cls.resolve_type(transaction)
        if txn_type == TransactionType.CREDIT:
            return ZERO, amount
        return amount, ZERO

    def classify(self, transaction: StandardizedTransaction) -> ParsedTransaction:
        """
        Turn a validated StandardizedTransaction into a ParsedTransaction.

        Raises:
            pydantic.ValidationError: If date or description is missing
        """
        txn_type, amount = self.resolve_type(transaction)

        return ParsedTransaction(
            type=txn_type,
            description=transaction.description,
            amount=amount,
            date=transaction.date,
            balance=transaction.balance,
            reference=transaction.reference,
            has_service_fee=transaction.service_fee > 0 or txn_type == TransactionType.SERVICE_FEE,
        )
