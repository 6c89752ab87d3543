"""Validation, fiscal period boundary and duplicate checks for parsed lines."""

from datetime import date
from decimal import Decimal
from typing import Optional, Protocol, Set, Tuple

from statement_ingest.domain.finance.bank_statement_parser.models import (
    FiscalPeriod,
    ParsingContext,
    RejectedTransaction,
    RejectionReason,
    StandardizedTransaction,
)
from statement_ingest.shared.utils.logging_config import get_logger

from .column_classifier import ColumnClassifier

logger = get_logger(__name__)

DuplicateKey = Tuple[Optional[int], date, Decimal, Decimal, str, Optional[Decimal]]


class TransactionLookup(Protocol):
    """Queries answered by the persistence layer."""

    def exists_duplicate(
        self,
        company_id: int,
        transaction_date: date,
        debit_amount: Decimal,
        credit_amount: Decimal,
        description: str,
        balance: Optional[Decimal],
    ) -> bool:
        ...

    def get_active_fiscal_period(self, company_id: int, on_date: date) -> Optional[FiscalPeriod]:
        ...


class StatementValidator:
    """
    Rejects transactions that must not be imported.

    Checks run in the order Validation -> Boundary -> Duplicate and the first
    one that fails decides the single rejection reason. Rejections are
    returned, never raised.

    One validator per statement: it remembers transactions accepted earlier
    in the same statement so repeats inside one file are caught too. Duplicates
    are matched on the classified debit/credit, the values that get stored.
    """

    def __init__(
        self,
        lookup: Optional[TransactionLookup] = None,
        company_id: Optional[int] = None,
        fiscal_period: Optional[FiscalPeriod] = None,
    ):
        self.lookup = lookup
        self.company_id = company_id
        self.fiscal_period = fiscal_period
        self._seen: Set[DuplicateKey] = set()

    def prepare(self, context: ParsingContext) -> Optional[FiscalPeriod]:
        """
        Resolve the fiscal period for the statement.

        An explicitly passed period wins; otherwise the lookup is asked for the
        period active on the statement date. Without a period the boundary
        check is skipped.
        """
        if self.fiscal_period is None and self.lookup is not None and self.company_id is not None:
            self.fiscal_period = self.lookup.get_active_fiscal_period(self.company_id, context.statement_date)

        if self.fiscal_period is None:
            logger.warning(
                f"No fiscal period for company {self.company_id} on {context.statement_date}; "
                f"boundary check skipped"
            )
        else:
            logger.info(
                f"Validating against fiscal period {self.fiscal_period.period_name or self.fiscal_period.id} "
                f"({self.fiscal_period.start_date} to {self.fiscal_period.end_date})"
            )
        return self.fiscal_period

    def validate(self, transaction: StandardizedTransaction) -> Optional[RejectedTransaction]:
        """
        Check one transaction.

        Returns:
            RejectedTransaction with the first failing reason, or None if the
            transaction is accepted
        """
        rejection = (
            self._check_required_fields(transaction)
            or self._check_boundary(transaction)
            or self._check_duplicate(transaction)
        )
        if rejection is None:
            self._seen.add(self._key(transaction))
        else:
            logger.debug(f"Rejected {transaction.description!r}: {rejection.reason.value} ({rejection.detail})")
        return rejection

    def _check_required_fields(self, transaction: StandardizedTransaction) -> Optional[RejectedTransaction]:
        missing = []
        if transaction.date is None:
            missing.append("date")
        if not transaction.description or not transaction.description.strip():
            missing.append("description")
        if not missing:
            return None
        return self._reject(
            transaction,
            RejectionReason.VALIDATION_ERROR,
            f"Missing required field(s): {', '.join(missing)}",
        )

    def _check_boundary(self, transaction: StandardizedTransaction) -> Optional[RejectedTransaction]:
        period = self.fiscal_period
        if period is None:
            return None
        name = f" ({period.period_name})" if period.period_name else ""
        if transaction.date < period.start_date:
            return self._reject(
                transaction,
                RejectionReason.OUT_OF_PERIOD,
                f"Transaction date {transaction.date} is before fiscal period start date {period.start_date}{name}",
            )
        if transaction.date > period.end_date:
            return self._reject(
                transaction,
                RejectionReason.OUT_OF_PERIOD,
                f"Transaction date {transaction.date} is after fiscal period end date {period.end_date}{name}",
            )
        return None

    def _check_duplicate(self, transaction: StandardizedTransaction) -> Optional[RejectedTransaction]:
        key = self._key(transaction)
        if key in self._seen:
            return self._reject(transaction, RejectionReason.DUPLICATE, "Repeated within this statement")

        if self.lookup is not None and self.company_id is not None:
            if self.lookup.exists_duplicate(*key):
                return self._reject(
                    transaction,
                    RejectionReason.DUPLICATE,
                    f"Already imported for company {self.company_id}",
                )
        return None

    def _key(self, transaction: StandardizedTransaction) -> DuplicateKey:
        debit, credit = ColumnClassifier.ledger_amounts(transaction)
        return (
            self.company_id,
            transaction.date,
            debit,
            credit,
            transaction.description.strip(),
            transaction.balance,
        )

    @staticmethod
    def _reject(
        transaction: StandardizedTransaction,
        reason: RejectionReason,
        detail: str,
    ) -> RejectedTransaction:
        return RejectedTransaction(
            date=transaction.date,
            description=transaction.description,
            debit_amount=transaction.debit_amount,
            credit_amount=transaction.credit_amount,
            balance=transaction.balance,
            reason=reason,
            detail=detail,
        )
