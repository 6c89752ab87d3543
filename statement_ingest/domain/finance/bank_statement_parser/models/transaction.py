"""Transaction models produced by the statement parsers."""

from datetime import date as date_type
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

ZERO = Decimal("0")


class TransactionType(str, Enum):
    """Ledger direction of a parsed transaction."""

    DEBIT = "DEBIT"
    CREDIT = "CREDIT"
    SERVICE_FEE = "SERVICE_FEE"


class StandardizedTransaction(BaseModel):
    """
    Column-level view of one logical statement transaction.

    Built by a bank parser from one or more lines. ``date`` may be missing and
    ``description`` may be blank so that broken records still reach the
    validator and get rejected with a reason instead of raising.
    """

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "date": "2024-03-16",
                "description": "IMMEDIATE PAYMENT",
                "service_fee": "0",
                "debit_amount": "1310.00",
                "credit_amount": "0",
                "balance": "24106.81",
                "reference": None,
            }
        },
    )

    date: Optional[date_type] = Field(None, description="Transaction date")
    description: str = Field("", description="Transaction description")
    service_fee: Decimal = Field(ZERO, description="Bank charge on this line", ge=0)
    debit_amount: Decimal = Field(ZERO, description="Money out", ge=0)
    credit_amount: Decimal = Field(ZERO, description="Money in", ge=0)
    balance: Optional[Decimal] = Field(None, description="Running balance after the transaction")
    reference: Optional[str] = Field(None, description="Bank reference, when printed")
    fee_ambiguous: bool = Field(
        False, description="Fee column was assigned by the small-amount heuristic with low confidence"
    )

    @model_validator(mode="after")
    def check_single_direction(self):
        if self.debit_amount > 0 and self.credit_amount > 0:
            raise ValueError(
                f"Transaction cannot carry both debit {self.debit_amount} and credit {self.credit_amount}"
            )
        return self


class ParsedTransaction(BaseModel):
    """Normalized transaction handed to persistence."""

    model_config = ConfigDict(frozen=True)

    type: TransactionType = Field(..., description="DEBIT, CREDIT or SERVICE_FEE")
    description: str = Field(..., description="Transaction description")
    amount: Decimal = Field(..., description="Unsigned transaction amount", ge=0)
    date: date_type = Field(..., description="Transaction date")
    balance: Optional[Decimal] = Field(None, description="Running balance")
    reference: Optional[str] = Field(None, description="Bank reference")
    has_service_fee: bool = Field(False, description="A fee was charged on this line")

    @field_validator("description")
    @classmethod
    def description_not_blank(cls, v):
        if not v or not v.strip():
            raise ValueError("Description must not be empty")
        return v.strip()

    @property
    def debit_amount(self) -> Decimal:
        return self.amount if self.type != TransactionType.CREDIT else ZERO

    @property
    def credit_amount(self) -> Decimal:
        return self.amount if self.type == TransactionType.CREDIT else ZERO

    @property
    def signed_amount(self) -> Decimal:
        """Credit positive, debit and service fee negative."""
        return self.amount if self.type == TransactionType.CREDIT else -self.amount
