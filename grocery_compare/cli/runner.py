# grocery_compare/cli/runner.py

"""Headless CLI commands, all served through the comparison service."""

import json
import logging
import sys
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.table import Table

from grocery_compare.config.settings import Settings
from grocery_compare.filters.matcher import build_matcher
from grocery_compare.filters.price import calculate_savings, format_price
from grocery_compare.models.combined_product import (
    CombinedProduct,
    PriceLevel,
)
from grocery_compare.models.records import PromotionRecord
from grocery_compare.services.classifier import CategoryClassifier
from grocery_compare.services.comparison_service import ComparisonService
from grocery_compare.services.grouping_engine import ProductGrouper
from grocery_compare.sources.base_source import DataSource, DataSourceError
from grocery_compare.sources.json_source import JsonFileSource
from grocery_compare.sources.supabase_source import SupabaseSource
from grocery_compare.storage.data_cache import DataCache

logger = logging.getLogger("grocery_compare.cli")

# Stderr console for status messages so stdout stays clean for JSON
_err = Console(stderr=True)

_LEVEL_STYLES: dict[PriceLevel, str] = {
    PriceLevel.LOWEST: "green",
    PriceLevel.MIDDLE: "yellow",
    PriceLevel.HIGHEST: "red",
    PriceLevel.NEUTRAL: "white",
}


def build_source(data_path: str | None) -> DataSource:
    """Pick the data source: an explicit snapshot, else Supabase if set up."""
    if data_path is not None:
        return JsonFileSource(Path(data_path))
    if Settings.SUPABASE_URL and Settings.SUPABASE_ANON_KEY:
        return SupabaseSource()
    return JsonFileSource(Settings.DATA_PATH)


def build_service(data_path: str | None) -> ComparisonService:
    """Wire source, cache and service for one CLI run."""
    source = build_source(data_path)
    grouper = ProductGrouper(matcher=build_matcher())
    return ComparisonService(DataCache(source), source, grouper)


def _price(value: float) -> str:
    return f"{Settings.CURRENCY_LABEL} {format_price(value)}"


def _combined_to_dict(group: CombinedProduct) -> dict[str, Any]:
    """Serialise a combined product to a plain dict for JSON output."""
    return {
        "id": group.id,
        "name": group.name,
        "lowest_price": group.lowest_price,
        "highest_price": group.highest_price,
        "savings": group.savings,
        "promotion_savings": group.promotion_savings,
        "image_url": group.image_url,
        "products": [
            {
                "id": p.id,
                "name": p.name,
                "store": p.store,
                "price": p.price,
                "size": p.size,
                "level": group.price_level(p).value,
                "promotion_id": (
                    group.promotions[p.id].id
                    if p.id in group.promotions
                    else None
                ),
            }
            for p in group.by_price()
        ],
    }


def _promotion_to_dict(promo: PromotionRecord) -> dict[str, Any]:
    return {
        "id": promo.id,
        "name": promo.name,
        "store": promo.store,
        "new_price": promo.new_price,
        "previous_price": promo.previous_price,
        "savings": calculate_savings(promo),
        "size": promo.size,
        "category": promo.category,
        "created_at": (
            promo.created_at.isoformat() if promo.created_at else None
        ),
    }


def _dump_json(data: Any) -> None:
    json.dump(data, sys.stdout, ensure_ascii=False, indent=2)
    sys.stdout.write("\n")


def _print_combined_table(groups: list[CombinedProduct]) -> None:
    """Render a Rich table with one row per store listing."""
    table = Table(
        title="Price Comparison",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("#", style="dim", width=4)
    table.add_column("Product", max_width=40)
    table.add_column("Store", style="magenta")
    table.add_column("Price", justify="right")
    table.add_column("Promotion", justify="right", style="cyan")
    table.add_column("Save", justify="right", style="green")

    for idx, group in enumerate(groups, 1):
        for row, product in enumerate(group.by_price()):
            style = _LEVEL_STYLES[group.price_level(product)]
            promo = group.promotion_for(product)
            table.add_row(
                str(idx) if row == 0 else "",
                group.name[:40] if row == 0 else "",
                product.store,
                f"[{style}]{_price(product.price)}[/{style}]",
                _price(promo.new_price) if promo else "—",
                _price(group.savings) if row == 0 and group.savings else "",
            )

    Console().print(table)


def _print_promotions_table(promotions: list[PromotionRecord]) -> None:
    table = Table(
        title="Promotions",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("Product", max_width=40)
    table.add_column("Store", style="magenta")
    table.add_column("Was", justify="right", style="dim")
    table.add_column("Now", justify="right", style="green")
    table.add_column("Save", justify="right")
    table.add_column("Category")

    for promo in promotions:
        table.add_row(
            promo.name[:40],
            promo.store,
            _price(promo.previous_price) if promo.previous_price else "—",
            _price(promo.new_price),
            _price(calculate_savings(promo)),
            promo.category or "—",
        )

    Console().print(table)


async def run_compare(
    data_path: str | None,
    category: str | None,
    output_format: str,
) -> int:
    """Print combined products; exit code 0=ok, 1=fail."""
    service = build_service(data_path)
    try:
        groups = await service.get_combined_products(category)
    except DataSourceError as exc:
        logger.error("Compare failed: %s", exc)
        _err.print(f"[red]Error: {exc}[/red]")
        return 1

    if not groups:
        _err.print("[yellow]No products found.[/yellow]")
        return 1

    multi = sum(1 for g in groups if len(g.constituents) > 1)
    _err.print(
        f"[green]✓ {len(groups)} products ({multi} compared across "
        f"stores)[/green]"
    )
    if output_format == "table":
        _print_combined_table(groups)
    else:
        _dump_json([_combined_to_dict(g) for g in groups])
    return 0


async def run_promotions(
    data_path: str | None,
    store: str | None,
    category: str | None,
    catalog_only: bool,
    output_format: str,
) -> int:
    """Print current promotions; exit code 0=ok, 1=fail."""
    service = build_service(data_path)
    try:
        promotions = await service.get_promotions(
            store=store, category=category, catalog_only=catalog_only
        )
    except DataSourceError as exc:
        logger.error("Promotions failed: %s", exc)
        _err.print(f"[red]Error: {exc}[/red]")
        return 1

    if not promotions:
        _err.print("[yellow]No promotions found.[/yellow]")
        return 1

    _err.print(f"[green]✓ {len(promotions)} promotions[/green]")
    if output_format == "table":
        _print_promotions_table(promotions)
    else:
        _dump_json([_promotion_to_dict(p) for p in promotions])
    return 0


async def run_categories(data_path: str | None) -> int:
    """List the display categories present in the data."""
    service = build_service(data_path)
    try:
        categories = await service.categories()
    except DataSourceError as exc:
        logger.error("Categories failed: %s", exc)
        _err.print(f"[red]Error: {exc}[/red]")
        return 1
    for category in categories:
        Console().print(category)
    return 0


async def run_refresh(data_path: str | None) -> int:
    """Force a refetch of products and promotions and report counts."""
    service = build_service(data_path)
    try:
        await service.refresh()
    except DataSourceError as exc:
        logger.error("Refresh failed: %s", exc)
        _err.print(f"[red]Refresh failed: {exc}[/red]")
        return 1
    stores = await service.stores()
    _err.print(
        f"[green]✓ Refreshed data for {len(stores)} stores: "
        f"{', '.join(stores) or '—'}[/green]"
    )
    return 0


def run_classify(text: str) -> int:
    """Categorise a product description through the remote collaborator."""
    if not Settings.SUPABASE_URL:
        _err.print("[red]SUPABASE_URL is not configured.[/red]")
        return 1
    result = CategoryClassifier().classify(text)
    if result.is_fallback:
        _err.print(
            f"[yellow]Uncategorised ({result.reason}), using "
            f"'{result.category}'[/yellow]"
        )
    _dump_json(
        {
            "text": text,
            "category": result.category,
            "confidence": result.confidence,
            "fallback": result.is_fallback,
        }
    )
    return 0
