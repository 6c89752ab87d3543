"""Factory for creating statement line parsers in registration order."""

from typing import Dict, List, Optional, Type

from statement_ingest.core.config import DEFAULT_PARSER_ORDER, StatementParserSettings, get_settings
from statement_ingest.core.exceptions import UnknownParserError
from statement_ingest.domain.finance.bank_statement_parser.models import ParsingContext
from .base_parser import BaseTransactionParser
from .standard_bank_parser import StandardBankParser
from .absa_parser import AbsaParser
from .fnb_parser import FnbParser
from .multi_transaction_parser import MultiTransactionParser
from .service_fee_parser import ServiceFeeParser
from .credit_parser import CreditParser


class ParserFactory:
    """Factory to build fresh parser instances and pick one per line."""

    # Register all available parsers here
    _registry: Dict[str, Type[BaseTransactionParser]] = {
        "STANDARD_BANK": StandardBankParser,
        "ABSA": AbsaParser,
        "FNB": FnbParser,
        "MULTI_TRANSACTION": MultiTransactionParser,
        "SERVICE_FEE": ServiceFeeParser,
        "CREDIT": CreditParser,
    }

    # NOTE: Order matters! First acceptor wins for every line.
    # - STANDARD_BANK first: its "MM DD balance" tail is the most specific layout and
    #   its "##" fee lines would otherwise be taken by SERVICE_FEE
    # - ABSA before FNB: both accept DD/MM/YYYY lines until a bank header is seen
    # - MULTI_TRANSACTION before SERVICE_FEE: "PAYMENT 1,500.00- FEE: 8.90-" also
    #   matches the service fee pattern
    # - CREDIT last: it only needs a keyword and one amount
    DEFAULT_ORDER: List[str] = list(DEFAULT_PARSER_ORDER)

    @classmethod
    def create_parsers(
        cls,
        order: Optional[List[str]] = None,
        settings: Optional[StatementParserSettings] = None,
    ) -> List[BaseTransactionParser]:
        """
        Build fresh parser instances for one statement.

        Args:
            order: Parser names in priority order (default: settings.parser_order)
            settings: Settings passed to every parser

        Returns:
            New parser instances; never share them between statements

        Raises:
            UnknownParserError: If a name is not registered
        """
        settings = settings or get_settings()
        names = order if order is not None else settings.parser_order
        return [cls.get_parser_by_name(name, settings) for name in names]

    @classmethod
    def get_parser_by_name(
        cls,
        parser_name: str,
        settings: Optional[StatementParserSettings] = None,
    ) -> BaseTransactionParser:
        """
        Create a parser by registry name.

        Args:
            parser_name: Registry name (e.g., 'ABSA', 'credit')

        Returns:
            New parser instance

        Raises:
            UnknownParserError: If the name is not registered
        """
        parser_class = cls._registry.get(parser_name.strip().upper())
        if parser_class is None:
            raise UnknownParserError(parser_name, cls.get_supported_parsers())
        return parser_class(settings)

    @classmethod
    def get_supported_parsers(cls) -> List[str]:
        """Get registry names in default order."""
        return list(cls.DEFAULT_ORDER)

    @classmethod
    def get_supported_banks(cls) -> List[str]:
        """Get display names of the bank-specific parsers."""
        banks = []
        for name in cls.DEFAULT_ORDER:
            bank_name = cls._registry[name]().bank_name
            if bank_name:
                banks.append(bank_name)
        return banks

    @staticmethod
    def select_parser(
        parsers: List[BaseTransactionParser],
        line: str,
        context: ParsingContext,
    ) -> Optional[BaseTransactionParser]:
        """
        Return the first parser that accepts the line.

        Every parser before the winner sees the line through ``can_parse`` so
        header detection stays up to date; parsers after it do not.
        """
        for parser in parsers:
            if parser.can_parse(line, context):
                return parser
        return None
