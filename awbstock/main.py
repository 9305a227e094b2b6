#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
AWB Stock - Main Entry Point
============================

Validate AWB numbers, generate AWB series and add them to stock.

Usage:
    awbstock validate 124-12345675 "124 1234567 6"  # Check single numbers
    awbstock generate --prefix 124 --range 1234567 1234600
    awbstock generate --prefix 124 --quantity 1234567 50 --commit
    awbstock generate --prefix 124 --manual numbers.txt --json
    awbstock airlines                                 # List airline prefixes
    awbstock airlines --add 124 AH "Air Algerie"      # Register a prefix
    awbstock --debug ...                              # Verbose logging
"""

import argparse
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path

from .business.awb_codec import ValidationResult
from .business.series_validator import (
    GenerationRequest,
    ManualRequest,
    QuantityRequest,
    RangeRequest,
    SeriesValidator,
    summarize,
)
from .business.stock_service import CommitReport, StockService
from .core.app_context import AppContext, get_context
from .core.constants import APP_NAME, CommitStatus
from .core.exceptions import AWBStockError, SeriesRequestError, ValidationError
from .core.version import get_version
from .data.database import Database, get_db

logger = logging.getLogger("awbstock.cli")

EXIT_OK = 0
EXIT_INVALID = 1
EXIT_REQUEST_ERROR = 2


def init_application(data_dir: Path | None = None, debug: bool = False) -> bool:
    """Initialize application context and database."""
    try:
        context = AppContext()
        context.initialize(user_dir=data_dir, debug=debug)
        logger.info(f"Maximum AWB per series: {context.max_batch_size}")

        db_path = context.get_path("database")
        logger.info(f"Initializing database at: {db_path}")
        db = Database()
        db.initialize(db_path, context.get_migrations_path())
        logger.info(f"Database schema version: {db.get_schema_version()}")

        StockService().seed_airlines(context.airlines)
        return True

    except AWBStockError as e:
        logger.error(f"Application initialization failed: {e}", exc_info=True)
        print(f"ERROR: {e}", file=sys.stderr)
        return False


def build_validator(service: StockService) -> SeriesValidator:
    context = get_context()
    return service.build_validator(
        max_batch_size=context.max_batch_size,
        extra_prefixes=context.supported_prefixes,
    )


def read_manual_numbers(source: str) -> str:
    """Read a manual AWB list from a file, or from stdin when source is '-'."""
    if source == "-":
        return sys.stdin.read()
    try:
        return Path(source).read_text(encoding="utf-8")
    except OSError as e:
        raise ValidationError(
            f"Cannot read AWB list: {e}",
            field="manual",
            value=source,
        ) from e


def build_request(args: argparse.Namespace) -> GenerationRequest:
    prefix = args.prefix.strip()
    if args.range:
        first, last = args.range
        return RangeRequest(prefix=prefix, first_serial=first, last_serial=last)
    if args.quantity:
        first, quantity = args.quantity
        return QuantityRequest(prefix=prefix, first_serial=first, quantity=quantity)
    return ManualRequest.from_text(prefix, read_manual_numbers(args.manual))


def print_results(results: list[ValidationResult]) -> None:
    """Print the batch summary, then the detail of every rejected number."""
    summary = summarize(results)
    print(f"Valid: {summary.valid}")
    print(f"Invalid: {summary.invalid}")
    if summary.duplicates:
        print(f"Already in stock: {summary.duplicates}")

    for index, result in enumerate(results, start=1):
        if result.is_valid:
            continue
        shown = result.awb_number or "<empty>"
        print(f"  #{index} {shown}: {'; '.join(result.errors)}")


def print_commit_report(report: CommitReport) -> None:
    print(report.message)
    for outcome in report.outcomes:
        if outcome.status == CommitStatus.FAILED:
            print(f"  {outcome.awb_number}: {outcome.error}")


def print_json(results: list[ValidationResult], report: CommitReport | None = None) -> None:
    payload = {
        "summary": asdict(summarize(results)),
        "results": [r.to_dict() for r in results],
    }
    if report is not None:
        payload["commit"] = report.to_dict()
    print(json.dumps(payload, ensure_ascii=False, indent=2))


def cmd_validate(args: argparse.Namespace) -> int:
    validator = build_validator(StockService())
    results = [validator.validate_single(number) for number in args.numbers]

    if args.json:
        print(json.dumps([r.to_dict() for r in results], ensure_ascii=False, indent=2))
    else:
        for result in results:
            status = "OK" if result.is_valid else "INVALID"
            detail = "" if result.is_valid else f" - {'; '.join(result.errors)}"
            print(f"{result.awb_number or '<empty>'}: {status}{detail}")

    return EXIT_OK if all(r.is_valid for r in results) else EXIT_INVALID


def cmd_generate(args: argparse.Namespace) -> int:
    service = StockService()
    validator = build_validator(service)

    try:
        request = build_request(args)
        results = validator.generate_and_validate(request)
    except (SeriesRequestError, ValidationError) as e:
        logger.warning(f"Series request rejected: {e}")
        print(f"ERROR: {e.message}", file=sys.stderr)
        return EXIT_REQUEST_ERROR

    report = None
    if args.commit:
        try:
            report = service.commit(results, allow_partial=args.allow_partial)
        except ValidationError as e:
            logger.warning(f"Commit refused: {e}")
            if args.json:
                print_json(results)
            else:
                print_results(results)
            print(f"ERROR: {e.message}", file=sys.stderr)
            return EXIT_INVALID

    if args.json:
        print_json(results, report)
    else:
        print_results(results)
        if report is not None:
            print_commit_report(report)

    if report is not None and report.failed:
        return EXIT_INVALID
    return EXIT_OK if all(r.is_valid for r in results) else EXIT_INVALID


def cmd_airlines(args: argparse.Namespace) -> int:
    service = StockService()

    if args.add:
        prefix, code, name = args.add
        try:
            airline = service.register_airline(prefix, code, name)
        except ValidationError as e:
            print(f"ERROR: {e.message}", file=sys.stderr)
            return EXIT_REQUEST_ERROR
        print(f"Registered {airline.prefix}: {airline.display_name}")
        return EXIT_OK

    for airline in service.list_airlines():
        print(f"{airline.prefix}  {airline.code or '--'}  {airline.name}")
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="awbstock",
        description=f"{APP_NAME} - Air Waybill validation and stock entry",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode with verbose logging",
    )
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=None,
        help="Directory for the database, logs and config overrides (default: ./data)",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {get_version()}")

    subparsers = parser.add_subparsers(dest="command", required=True)

    validate = subparsers.add_parser("validate", help="Validate single AWB numbers")
    validate.add_argument("numbers", nargs="+", help="AWB numbers (spaces and hyphens allowed)")
    validate.add_argument("--json", action="store_true", help="Print results as JSON")
    validate.set_defaults(handler=cmd_validate)

    generate = subparsers.add_parser("generate", help="Generate and validate an AWB series")
    generate.add_argument("--prefix", required=True, help="3-digit airline prefix")
    mode = generate.add_mutually_exclusive_group(required=True)
    mode.add_argument(
        "--range",
        nargs=2,
        type=int,
        metavar=("FIRST", "LAST"),
        help="Inclusive serial range",
    )
    mode.add_argument(
        "--quantity",
        nargs=2,
        type=int,
        metavar=("FIRST", "COUNT"),
        help="First serial and number of AWB",
    )
    mode.add_argument(
        "--manual",
        metavar="FILE",
        help="File with one AWB number per line ('-' for stdin)",
    )
    generate.add_argument("--commit", action="store_true", help="Add valid AWB numbers to stock")
    generate.add_argument(
        "--allow-partial",
        action="store_true",
        help="With --commit, skip invalid numbers instead of refusing the batch",
    )
    generate.add_argument("--json", action="store_true", help="Print results as JSON")
    generate.set_defaults(handler=cmd_generate)

    airlines = subparsers.add_parser("airlines", help="List or register airline prefixes")
    airlines.add_argument(
        "--add",
        nargs=3,
        metavar=("PREFIX", "CODE", "NAME"),
        help="Register or update an airline",
    )
    airlines.set_defaults(handler=cmd_airlines)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    if not init_application(args.data_dir, debug=args.debug):
        return EXIT_REQUEST_ERROR

    logger.info(f"{APP_NAME} {get_version()} - command: {args.command}")
    try:
        return args.handler(args)
    finally:
        get_db().close()


if __name__ == "__main__":
    sys.exit(main())
