#!/usr/bin/env python3
"""
Invoice Manager - Main Entry Point.

Command-line interface to process invoices and query the invoice store.

Usage:
    Process invoices:
        python main.py --input factura.pdf
        python main.py --input ./facturas/

    Query the store:
        python main.py --list
        python main.py --stats
        python main.py --evolution year
        python main.py --search acme --status processed --min-amount 100
        python main.py --show 12
        python main.py --list --json
        python main.py --delete 12

    Python:
        from main import run_processing
        outcomes = run_processing("facturas/")

Author: ML Engineering Team
Version: 1.0.0
"""

import argparse
import dataclasses
import json
import sys
from pathlib import Path
from typing import List, Optional

from invoice_manager.config import AppSettings, load_settings
from invoice_manager.utils.logger import setup_logger_from_config, get_logger
from invoice_manager.utils.helpers import format_currency
from invoice_manager.utils.exceptions import InvoiceManagerError


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Parsed argument namespace.
    """
    parser = argparse.ArgumentParser(
        description="Invoice Manager: OCR + Gemini invoice extraction and storage",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    Process a single invoice:
        python main.py --input factura.pdf

    Process a directory:
        python main.py --input ./facturas/

    Dashboard and monthly evolution:
        python main.py --stats --evolution 6m
        """
    )

    parser.add_argument(
        "--input", "-i",
        type=str,
        default=None,
        help="Invoice file or directory to process"
    )

    parser.add_argument(
        "--db",
        type=str,
        default=None,
        help="SQLite database path (default: from configuration)"
    )

    parser.add_argument(
        "--config", "-c",
        type=str,
        default=None,
        help="Path to custom configuration file"
    )

    # Query options
    parser.add_argument("--list", action="store_true", help="List stored invoices")
    parser.add_argument("--limit", type=int, default=None, help="Maximum invoices to list")
    parser.add_argument("--stats", action="store_true", help="Show dashboard statistics")
    parser.add_argument(
        "--evolution",
        choices=["6m", "year", "all"],
        default=None,
        help="Show monthly expense evolution"
    )
    parser.add_argument("--delete", type=int, default=None, metavar="ID", help="Delete an invoice")
    parser.add_argument("--show", type=int, default=None, metavar="ID",
                        help="Print the normalized record of an invoice as JSON")
    parser.add_argument("--json", action="store_true",
                        help="Print processing results, listings and statistics as JSON")

    # Search options
    parser.add_argument("--search", type=str, default=None, metavar="TERM",
                        help="Search provider, invoice number or file name")
    parser.add_argument("--status", type=str, default="all", help="Filter by status")
    parser.add_argument("--category", type=str, default="all", help="Filter by category")
    parser.add_argument("--provider", type=str, default="all", help="Filter by provider")
    parser.add_argument("--date-from", type=str, default=None, help="Issue date from (YYYY-MM-DD)")
    parser.add_argument("--date-to", type=str, default=None, help="Issue date to (YYYY-MM-DD)")
    parser.add_argument("--min-amount", type=float, default=None, help="Minimum total amount")
    parser.add_argument("--max-amount", type=float, default=None, help="Maximum total amount")

    # Logging options
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--quiet", "-q", action="store_true", help="Only log warnings and errors")

    args = parser.parse_args(argv)
    if args.limit is not None and args.limit < 1:
        parser.error("--limit must be at least 1")

    return args


def initialize_system(args: argparse.Namespace) -> AppSettings:
    """
    Load configuration and settings, and set up logging.

    Returns:
        Application settings, with ``--db`` applied.
    """
    settings = load_settings(args.config)
    if args.db:
        settings = dataclasses.replace(settings, database_path=Path(args.db))

    level = "DEBUG" if args.debug else "WARNING" if args.quiet else None
    logger = setup_logger_from_config(level)

    logger.info("=" * 60)
    logger.info("INVOICE MANAGER")
    logger.info("=" * 60)
    logger.info(f"Database: {settings.database_path}")
    logger.info(f"Model: {settings.model_name}")

    return settings


def run_processing(input_path: str, settings: Optional[AppSettings] = None) -> list:
    """
    Process an invoice file or every supported file in a directory.

    Args:
        input_path: File or directory.
        settings: Application settings (loaded from configuration if None).

    Returns:
        List of ProcessingOutcome.
    """
    from invoice_manager.pipeline import InvoicePipeline

    settings = settings or load_settings()
    pipeline = InvoicePipeline(settings)

    path = Path(input_path)
    if path.is_dir():
        files = pipeline.input_handler.collect_files(path)
    else:
        files = [path]

    return pipeline.process_batch(files)


def print_json(data) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


def print_outcomes(outcomes: list) -> None:
    for outcome in outcomes:
        if outcome.success:
            print(f"[OK]    {outcome.file_path} -> invoice {outcome.invoice_id}: {outcome.record!r}")
            for warning in outcome.warnings:
                print(f"        warning: {warning}")
        else:
            print(f"[ERROR] {outcome.file_path}: {outcome.user_message}")


def print_invoices(invoices: list) -> None:
    if not invoices:
        print("No invoices found.")
        return

    print(f"{'ID':>5}  {'STATUS':<10}  {'DATE':<10}  {'PROVIDER':<30}  {'TOTAL':>16}  FILE")
    for invoice in invoices:
        record = invoice.record
        total = format_currency(record.total_amount, record.currency or "MXN") if record.total_amount is not None else "-"
        print(
            f"{invoice.id:>5}  {invoice.status:<10}  {record.issue_date or '-':<10}  "
            f"{(record.provider or '-')[:30]:<30}  {total:>16}  {invoice.file_name}"
        )


def print_stats(stats) -> None:
    print("Dashboard")
    print(f"  Files:            {stats.total_files}")
    print(f"  Processed:        {stats.processed_files}")
    print(f"  Total amount:     {format_currency(stats.total_amount)}")
    print(f"  Taxes:            {format_currency(stats.total_taxes)}")
    print(f"  Discounts:        {format_currency(stats.total_discounts)}")
    print(f"  Average amount:   {format_currency(stats.average_amount)}")
    print(f"  Due in 30 days:   {stats.upcoming_invoices}")
    print("  Top categories:")
    for category, count in stats.top_categories():
        print(f"    {category:<25} {count}")


def print_evolution(months: list) -> None:
    if not months:
        print("No processed invoices with an issue date.")
        return

    print(f"{'MONTH':<10}  {'COUNT':>5}  {'TOTAL':>16}  {'TAXES':>16}  {'GROWTH':>8}  TOP CATEGORY")
    for month in reversed(months):
        print(
            f"{month.name:<10}  {month.count:>5}  {format_currency(month.total):>16}  "
            f"{format_currency(month.taxes):>16}  {month.growth:>7.1f}%  {month.top_category}"
        )


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main function - entry point for command-line execution.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    args = parse_arguments(argv)

    try:
        settings = initialize_system(args)
        logger = get_logger(__name__)

        from invoice_manager.analytics import (
            SearchFilters,
            compute_dashboard_stats,
            compute_monthly_evolution,
        )
        from invoice_manager.output_handler import InvoiceStore

        store = InvoiceStore(settings.database_path)
        exit_code = 0
        did_something = False

        if args.input:
            did_something = True
            outcomes = run_processing(args.input, settings)
            if args.json:
                print_json([outcome.to_dict() for outcome in outcomes])
            else:
                print_outcomes(outcomes)
            if not all(outcome.success for outcome in outcomes):
                exit_code = 1

        if args.show is not None:
            did_something = True
            print(store.get(args.show).record.to_json())

        if args.delete is not None:
            did_something = True
            store.delete(args.delete)
            print(f"Deleted invoice {args.delete}")

        filters = SearchFilters(
            search_term=args.search or "",
            status=args.status,
            category=args.category,
            provider=args.provider,
            date_from=args.date_from,
            date_to=args.date_to,
            amount_min=args.min_amount,
            amount_max=args.max_amount,
        )

        listing = None
        if filters.has_active_filters:
            listing = store.search(filters)
        elif args.list:
            listing = store.list_all(args.limit)

        if listing is not None:
            did_something = True
            if args.json:
                print_json([invoice.to_dict() for invoice in listing])
            else:
                print_invoices(listing)

        if args.stats or args.evolution:
            did_something = True
            invoices = store.list_all()
            if args.stats:
                stats = compute_dashboard_stats(invoices)
                if args.json:
                    print_json(stats.to_dict())
                else:
                    print_stats(stats)
            if args.evolution:
                print_evolution(compute_monthly_evolution(invoices, args.evolution))

        if not did_something:
            print("Nothing to do. Use --input, --list, --show, --stats, --evolution, --search or --delete.")
            return 2

        logger.debug("Done")
        return exit_code

    except InvoiceManagerError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    except KeyboardInterrupt:
        print("\nOperation cancelled by user")
        return 130


if __name__ == "__main__":
    sys.exit(main())
