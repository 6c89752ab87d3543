#!/usr/bin/env python3
"""Script to process a statement text file (one extracted line per line)."""

import argparse
import json
import os
import sys
from datetime import datetime

# Add project root to path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, project_root)

# Load environment variables from .env file
from dotenv import load_dotenv
load_dotenv(os.path.join(project_root, ".env"))

from statement_ingest.application.finance.bank_statement_parser import ProcessBankStatementUseCase
from statement_ingest.core.config import get_settings
from statement_ingest.core.exceptions import StatementIngestError
from statement_ingest.domain.finance.bank_statement_parser.models import FiscalPeriod, ParsingContext
from statement_ingest.infrastructure.database.connection import close_db, get_db_context, get_engine, init_db
from statement_ingest.infrastructure.persistence.repositories import BankTransactionRepository
from statement_ingest.shared.utils.export import export_result_csv
from statement_ingest.shared.utils.logging_config import setup_logging


def _parse_day(value: str):
    return datetime.strptime(value, "%Y-%m-%d").date()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Parse bank statement lines into transactions")
    parser.add_argument("input", help="UTF-8 text file with one statement line per line")
    parser.add_argument("--statement-date", required=True, type=_parse_day, help="YYYY-MM-DD")
    parser.add_argument("--default-year", type=int, help="Year for DD/MM and MM DD dates")
    parser.add_argument("--company-id", type=int, help="Company for duplicate and fiscal period checks")
    parser.add_argument("--period-start", type=_parse_day, help="Fiscal period start (YYYY-MM-DD)")
    parser.add_argument("--period-end", type=_parse_day, help="Fiscal period end (YYYY-MM-DD)")
    parser.add_argument("--database-url", help="Database for duplicate/fiscal period lookups")
    parser.add_argument("--save", action="store_true", help="Store accepted transactions in the database")
    parser.add_argument("--output-dir", help="Write CSV exports to this directory")
    parser.add_argument("--parsers", help="Comma-separated parser order, e.g. ABSA,CREDIT")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    setup_logging(level=settings.log_level, log_file=settings.log_file)

    with open(args.input, encoding="utf-8") as handle:
        lines = handle.read().splitlines()

    context = ParsingContext(
        statement_date=args.statement_date,
        default_year=args.default_year,
        source_file=os.path.basename(args.input),
    )

    fiscal_period = None
    if args.period_start and args.period_end:
        fiscal_period = FiscalPeriod(
            period_name="command line",
            company_id=args.company_id,
            start_date=args.period_start,
            end_date=args.period_end,
        )

    parser_order = [name.strip() for name in args.parsers.split(",")] if args.parsers else None

    try:
        if args.database_url:
            get_engine(args.database_url)
            init_db()
            with get_db_context() as session:
                repository = BankTransactionRepository(session)
                result = ProcessBankStatementUseCase(lookup=repository, settings=settings).execute(
                    lines, context, args.company_id, fiscal_period, parser_order
                )
                if args.save and args.company_id is not None:
                    repository.save_transactions(args.company_id, result.transactions, context.source_file)
            close_db()
        else:
            result = ProcessBankStatementUseCase(settings=settings).execute(
                lines, context, args.company_id, fiscal_period, parser_order
            )
    except StatementIngestError as e:
        print(json.dumps(e.to_dict(), indent=2))
        return 2

    print(json.dumps(result.summary(), indent=2))
    for rejected in result.rejected_transactions:
        print(f"  {rejected.reason.value}: {rejected.date} {rejected.description} - {rejected.detail}")
    for error in result.parse_errors:
        print(f"  ERROR {error}")

    if args.output_dir:
        stem = os.path.splitext(os.path.basename(args.input))[0]
        export_result_csv(result, args.output_dir, stem)

    return 0


if __name__ == "__main__":
    sys.exit(main())
