"""Use case for turning statement lines into validated transactions."""

from typing import Iterable, List, Optional

from statement_ingest.core.config import StatementParserSettings, get_settings
from statement_ingest.core.exceptions import ParserContractError
from statement_ingest.domain.finance.bank_statement_parser.models import (
    FiscalPeriod,
    ParsingContext,
    StandardizedTransaction,
    StatementProcessingResult,
)
from statement_ingest.shared.utils.logging_config import get_logger
from .bank_parsers.base_parser import BaseTransactionParser
from .bank_parsers.parser_factory import ParserFactory
from .column_classifier import ColumnClassifier
from .result_aggregator import StatementResultAggregator
from .statement_validator import StatementValidator, TransactionLookup

logger = get_logger(__name__)


class ProcessBankStatementUseCase:
    """
    Use case for processing one bank statement.

    Handles:
    - Parser selection per line (first acceptor in registration order wins)
    - Multiline accumulation and end-of-statement flush
    - Validation, fiscal period boundary and duplicate checks
    - Classification into DEBIT / CREDIT / SERVICE_FEE
    - Counting and collecting rejects for reporting
    """

    def __init__(
        self,
        lookup: Optional[TransactionLookup] = None,
        settings: Optional[StatementParserSettings] = None,
    ):
        self.lookup = lookup
        self.settings = settings or get_settings()
        self.parser_factory = ParserFactory
        self.classifier = ColumnClassifier(self.settings)

    def execute(
        self,
        lines: Iterable[str],
        context: ParsingContext,
        company_id: Optional[int] = None,
        fiscal_period: Optional[FiscalPeriod] = None,
        parser_order: Optional[List[str]] = None,
    ) -> StatementProcessingResult:
        """
        Process the lines of one statement in order.

        Args:
            lines: Statement text lines, in document order
            context: Statement context (statement date, default year)
            company_id: Company for duplicate and fiscal period lookups
            fiscal_period: Explicit fiscal period; looked up when omitted
            parser_order: Parser names overriding settings.parser_order

        Returns:
            StatementProcessingResult with counts, accepted and rejected
            transactions and per-line parse errors

        Raises:
            ParserContractError: If a parser is driven outside its contract
            UnknownParserError: If parser_order names an unknown parser
        """
        parsers = self.parser_factory.create_parsers(parser_order, self.settings)
        validator = StatementValidator(self.lookup, company_id, fiscal_period)
        validator.prepare(context)
        aggregator = StatementResultAggregator()

        source = context.source_file or "statement"
        logger.info(f"Processing {source} (statement date {context.statement_date})")

        for line_number, line in enumerate(lines, start=1):
            aggregator.line_processed()
            try:
                parser = self.parser_factory.select_parser(parsers, line, context)
                if parser is None:
                    aggregator.line_unparsed()
                    logger.debug(f"Line {line_number}: no parser accepted {line!r}")
                    continue

                transaction = parser.parse(line, context)
                if transaction is not None:
                    self._handle_transaction(transaction, parser, validator, aggregator)

            except ParserContractError:
                raise
            except Exception as e:
                logger.error(f"Line {line_number}: failed to process {line!r}: {e}")
                aggregator.add_parse_error(f"Line {line_number}: {e}")

        for parser in parsers:
            transaction = parser.finalize(context)
            if transaction is None:
                continue
            try:
                self._handle_transaction(transaction, parser, validator, aggregator)
            except Exception as e:
                logger.error(f"{parser.parser_name}: failed to flush trailing lines: {e}")
                aggregator.add_parse_error(f"{parser.parser_name} (end of statement): {e}")

        result = aggregator.build()
        logger.info(f"Processed {source}: {result.summary()}")
        return result

    def _handle_transaction(
        self,
        transaction: StandardizedTransaction,
        parser: BaseTransactionParser,
        validator: StatementValidator,
        aggregator: StatementResultAggregator,
    ) -> None:
        rejected = validator.validate(transaction)
        if rejected is not None:
            aggregator.reject(rejected)
            return

        parsed = self.classifier.classify(transaction)
        if transaction.fee_ambiguous:
            logger.warning(
                f"{parser.parser_name}: best-effort fee split kept for {parsed.description!r} "
                f"on {parsed.date} ({parsed.type.value} {parsed.amount}, fee {transaction.service_fee})"
            )
        aggregator.accept(parsed, parser.bank_name)
