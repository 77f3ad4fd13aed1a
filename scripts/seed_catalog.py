#!/usr/bin/env python3
"""Seed the shoe catalog.

Creates a deterministic demo catalog (colors, sizes, products, variants and
opening stock imports) through the catalog services, so every invariant is
enforced exactly as it is for operator requests.

Usage:
    python scripts/seed_catalog.py
    python scripts/seed_catalog.py --create-tables --operator seed-bot
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from shoestore.application.wiring import get_stock_ledger, get_variant_catalog
from shoestore.infrastructure.config import settings
from shoestore.infrastructure.database import Base, dispose_engine, get_engine
from shoestore.infrastructure.logging_config import configure_logging

import shoestore.catalog.models  # noqa: F401  (register tables on Base.metadata)

COLORS = [
    ("Black", "#000000"),
    ("White", "#FFFFFF"),
    ("Red", "#C0392B"),
    ("Navy", "#1F3A5F"),
]

SIZES = ["7", "7.5", "8", "8.5", "9", "9.5", "10", "11"]

# (name, base price in cents, category, colors, sizes, sku prefix)
PRODUCTS = [
    ("Runner X", 8999, 1, ["Black", "White"], ["8", "9", "10"], "RX"),
    ("Trail Blazer", 12999, 1, ["Black", "Navy"], ["8.5", "9.5", "11"], "TB"),
    ("Court Classic", 6999, 2, ["White", "Red"], ["7", "7.5", "8", "9"], "CC"),
    ("City Loafer", 10999, 3, ["Black", "Navy", "Red"], ["9", "10"], "CL"),
]


def opening_stock(product_index: int, color_index: int, size_index: int) -> int:
    """Deterministic opening stock; every fifth combination starts sold out."""
    value = (product_index * 7 + color_index * 3 + size_index * 5) % 13
    return 0 if value % 5 == 0 else value


async def create_tables() -> None:
    """Create database tables if they don't exist."""
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def seed(operator_id: str) -> dict:
    """Seed the demo catalog.

    Args:
        operator_id: Operator recorded on the opening imports.

    Returns:
        Seeding counts.
    """
    catalog = get_variant_catalog()
    ledger = get_stock_ledger()

    colors = {name: await catalog.create_color(name, hex_code) for name, hex_code in COLORS}
    sizes = {value: await catalog.create_size(value) for value in SIZES}

    variant_count = 0
    import_count = 0
    for p_index, (name, price, category_id, color_names, size_values, prefix) in enumerate(PRODUCTS):
        product = await catalog.create_product(name, price, category_id=category_id)
        for c_index, color_name in enumerate(color_names):
            for s_index, size_value in enumerate(size_values):
                variant = await catalog.upsert_variant(
                    product.id,
                    colors[color_name].id,
                    sizes[size_value].id,
                    sku=f"{prefix}-{color_name[:3].upper()}-{size_value}",
                )
                variant_count += 1

                quantity = opening_stock(p_index, c_index, s_index)
                if quantity:
                    await ledger.record_import(
                        variant.id,
                        quantity=quantity,
                        unit_cost=price // 2,
                        operator_id=operator_id,
                        note="opening stock",
                    )
                    import_count += 1

    return {
        "colors": len(colors),
        "sizes": len(sizes),
        "products": len(PRODUCTS),
        "variants": variant_count,
        "imports": import_count,
    }


async def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Seed the shoe catalog")
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create tables first (database backend only)",
    )
    parser.add_argument(
        "--operator",
        default="seed",
        help="Operator id recorded on opening stock imports",
    )
    args = parser.parse_args()

    configure_logging()

    if args.create_tables and settings.storage_backend == "database":
        print("Creating database tables...")
        await create_tables()

    try:
        result = await seed(args.operator)
    finally:
        await dispose_engine()

    print(f"\n{'=' * 50}")
    print("Seeding complete!")
    print(f"{'=' * 50}")
    for key, value in result.items():
        print(f"  {key:<10} {value}")


if __name__ == "__main__":
    asyncio.run(main())
