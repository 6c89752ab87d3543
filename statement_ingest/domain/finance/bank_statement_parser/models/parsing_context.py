"""Per-statement parsing context."""

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ParsingContext(BaseModel):
    """Immutable metadata threaded through every parse call for one statement."""

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "statement_date": "2024-03-15",
                "default_year": 2024,
                "account_number": "10 09 547 275 3",
                "statement_period": "16 February 2024 to 15 March 2024",
                "source_file": "standard_bank_march.pdf",
            }
        },
    )

    statement_date: date = Field(..., description="Nominal statement date, last-resort transaction date")
    default_year: Optional[int] = Field(
        None, description="Year used when a line carries only day and month", ge=1900, le=2999
    )
    account_number: Optional[str] = Field(None, description="Account number printed on the statement")
    statement_period: Optional[str] = Field(None, description="Free-text statement period")
    source_file: Optional[str] = Field(None, description="Original file name, for logging")

    @model_validator(mode="before")
    @classmethod
    def fill_default_year(cls, data):
        if isinstance(data, dict) and data.get("default_year") is None:
            statement_date = data.get("statement_date")
            if isinstance(statement_date, date):
                data = {**data, "default_year": statement_date.year}
            elif isinstance(statement_date, str) and len(statement_date) >= 4 and statement_date[:4].isdigit():
                data = {**data, "default_year": int(statement_date[:4])}
        return data
