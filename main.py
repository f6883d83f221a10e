# main.py

"""Entry point for the grocery_compare command-line interface."""

import argparse
import asyncio
import logging
import sys

from grocery_compare.config.logging_config import setup_logging

logger = logging.getLogger("grocery_compare.main")


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-d",
        "--data",
        default=None,
        dest="data_path",
        help="JSON snapshot to read instead of the Supabase backend.",
    )


def _add_format(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-f",
        "--format",
        choices=["json", "table"],
        default="table",
        dest="output_format",
        help="Output format (default: table).",
    )


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="grocery_compare",
        description="Compare grocery prices and promotions across stores.",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    compare = commands.add_parser(
        "compare", help="Show products grouped across stores."
    )
    _add_common(compare)
    _add_format(compare)
    compare.add_argument(
        "-c", "--category", default=None, help="Only this category."
    )

    promotions = commands.add_parser(
        "promotions", help="Show current promotions."
    )
    _add_common(promotions)
    _add_format(promotions)
    promotions.add_argument(
        "-s", "--store", default=None, help="Only this store."
    )
    promotions.add_argument(
        "-c", "--category", default=None, help="Only this category."
    )
    promotions.add_argument(
        "--all",
        action="store_false",
        default=True,
        dest="catalog_only",
        help="Include promotions outside the tracked product list.",
    )

    categories = commands.add_parser(
        "categories", help="List categories present in the data."
    )
    _add_common(categories)

    refresh = commands.add_parser(
        "refresh", help="Refetch products and promotions."
    )
    _add_common(refresh)

    classify = commands.add_parser(
        "classify", help="Categorise a product description."
    )
    classify.add_argument("text", help="Product text to categorise.")

    return parser


def main() -> None:
    """Route the parsed subcommand to its runner and exit with its code."""
    log_file = setup_logging()
    logger.info("grocery_compare starting, log file: %s", log_file)

    args = _build_parser().parse_args()

    from grocery_compare.cli import runner

    if args.command == "compare":
        exit_code = asyncio.run(
            runner.run_compare(
                args.data_path, args.category, args.output_format
            )
        )
    elif args.command == "promotions":
        exit_code = asyncio.run(
            runner.run_promotions(
                args.data_path,
                args.store,
                args.category,
                args.catalog_only,
                args.output_format,
            )
        )
    elif args.command == "categories":
        exit_code = asyncio.run(runner.run_categories(args.data_path))
    elif args.command == "refresh":
        exit_code = asyncio.run(runner.run_refresh(args.data_path))
    else:
        exit_code = runner.run_classify(args.text)

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
