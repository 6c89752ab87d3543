# statement_ingest/core/exceptions.py
"""Exception hierarchy for statement ingestion."""

from datetime import datetime
from typing import Any, Dict, Optional


class StatementIngestError(Exception):
    """Base exception carrying a code and details for reporting."""

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        error_code: Optional[str] = None,
    ):
        self.message = message
        self.details = details
        self.error_code = error_code or self.__class__.__name__.upper()
        self.timestamp = datetime.now().isoformat()
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the error for logs and CLI output."""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
            "timestamp": self.timestamp,
        }


class ParserContractError(StatementIngestError, ValueError):
    """
    Raised when a parser is driven outside its contract.

    ``parse()`` may only be called for the line that ``can_parse()``
    accepted immediately before. Anything else is a programming error in the
    caller and is never swallowed.
    """

    def __init__(self, parser_name: str, line: str):
        super().__init__(
            message=f"{parser_name}: parse() called for a line that can_parse() did not accept",
            details=f"line={line!r}",
            error_code="PARSER_CONTRACT_VIOLATION",
        )
        self.parser_name = parser_name
        self.line = line


class ConfigurationError(StatementIngestError):
    """Raised for invalid ingestion configuration."""

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message=message, details=details, error_code="CONFIGURATION_ERROR")


class UnknownParserError(ConfigurationError):
    """Raised when a parser name is not registered."""

    def __init__(self, parser_name: str, supported: list):
        super().__init__(
            message=f"Unknown parser '{parser_name}'",
            details=f"Supported parsers: {', '.join(supported)}",
        )
        self.parser_name = parser_name
