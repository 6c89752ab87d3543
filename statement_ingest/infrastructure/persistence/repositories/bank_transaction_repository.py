"""Bank transaction repository: duplicate and fiscal period lookups plus storage."""

from datetime import date
from decimal import Decimal
from typing import Iterable, List, Optional

from sqlalchemy import and_, func, select
from sqlalchemy.orm import Session

from statement_ingest.domain.finance.bank_statement_parser.models import (
    FiscalPeriod,
    ParsedTransaction,
)
from statement_ingest.infrastructure.database.models.bank_transaction import (
    BankTransactionModel,
    FiscalPeriodModel,
)
from statement_ingest.shared.utils.logging_config import get_logger

logger = get_logger(__name__)


class BankTransactionRepository:
    """
    Repository for imported bank transactions.

    Implements the TransactionLookup queries used by StatementValidator.

    Usage:
        with get_db_context() as session:
            repository = BankTransactionRepository(session)
            result = ProcessBankStatementUseCase(lookup=repository).execute(...)
            repository.save_transactions(company_id, result.transactions)
    """

    def __init__(self, session: Session):
        self.session = session

    def exists_duplicate(
        self,
        company_id: int,
        transaction_date: date,
        debit_amount: Decimal,
        credit_amount: Decimal,
        description: str,
        balance: Optional[Decimal],
    ) -> bool:
        """True if the same transaction was already imported for the company."""
        conditions = [
            BankTransactionModel.company_id == company_id,
            BankTransactionModel.transaction_date == transaction_date,
            BankTransactionModel.debit_amount == (debit_amount or Decimal("0")),
            BankTransactionModel.credit_amount == (credit_amount or Decimal("0")),
            BankTransactionModel.description == description,
        ]
        if balance is None:
            conditions.append(BankTransactionModel.balance.is_(None))
        else:
            conditions.append(BankTransactionModel.balance == balance)

        count = self.session.execute(
            select(func.count()).select_from(BankTransactionModel).where(and_(*conditions))
        ).scalar_one()
        return count > 0

    def get_active_fiscal_period(self, company_id: int, on_date: date) -> Optional[FiscalPeriod]:
        """Get the open fiscal period containing the date, if any."""
        model = self.session.execute(
            select(FiscalPeriodModel)
            .where(
                and_(
                    FiscalPeriodModel.company_id == company_id,
                    FiscalPeriodModel.start_date <= on_date,
                    FiscalPeriodModel.end_date >= on_date,
                    FiscalPeriodModel.is_closed == False,  # noqa: E712
                )
            )
            .order_by(FiscalPeriodModel.start_date.desc())
            .limit(1)
        ).scalar_one_or_none()

        if model is None:
            return None
        return FiscalPeriod(
            id=model.id,
            period_name=model.period_name,
            company_id=model.company_id,
            start_date=model.start_date,
            end_date=model.end_date,
        )

    def save_transactions(
        self,
        company_id: int,
        transactions: Iterable[ParsedTransaction],
        source_file: Optional[str] = None,
        fiscal_period_id: Optional[int] = None,
    ) -> List[BankTransactionModel]:
        """
        Add accepted transactions to the session and flush.

        The caller owns the commit (see ``get_db_context``).
        """
        models = [
            BankTransactionModel(
                company_id=company_id,
                transaction_date=txn.date,
                description=txn.description,
                transaction_type=txn.type.value,
                debit_amount=txn.debit_amount,
                credit_amount=txn.credit_amount,
                balance=txn.balance,
                reference=txn.reference,
                has_service_fee=txn.has_service_fee,
                source_file=source_file,
                fiscal_period_id=fiscal_period_id,
            )
            for txn in transactions
        ]
        self.session.add_all(models)
        self.session.flush()
        logger.info(f"Saved {len(models)} transaction(s) for company {company_id}")
        return models

    def get_by_company(self, company_id: int, skip: int = 0, limit: int = 1000) -> List[BankTransactionModel]:
        """Get imported transactions for a company, newest first."""
        result = self.session.execute(
            select(BankTransactionModel)
            .where(BankTransactionModel.company_id == company_id)
            .order_by(BankTransactionModel.transaction_date.desc(), BankTransactionModel.id.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(result.scalars().all())

    def add_fiscal_period(
        self,
        company_id: int,
        period_name: str,
        start_date: date,
        end_date: date,
    ) -> FiscalPeriodModel:
        """Create a fiscal period (setup and tests)."""
        model = FiscalPeriodModel(
            company_id=company_id,
            period_name=period_name,
            start_date=start_date,
            end_date=end_date,
        )
        self.session.add(model)
        self.session.flush()
        return model
