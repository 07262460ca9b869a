#!/usr/bin/env python3
"""
seed_data.py

Generates a small, deterministic item catalog and a starter set of promotions
as CSVs under the configured data directory.

Files:
- items.csv, promotions.csv (orders.csv is left alone; it fills up as orders are placed)

Run:
  python -m retailsim.seed_data --items 30 --days 30
"""

from __future__ import annotations
import argparse
import os
import random
import sys
from datetime import datetime, timedelta
from pathlib import Path
from typing import Dict, List, Optional

from .config import load_config
from .data.backends.csv_backend import ITEM_COLUMNS, PROMOTION_COLUMNS, item_to_row, promotion_to_row, write_table
from .data.models import ALL_ITEMS, Item, Promotion
from .data.util import resolve_data_dir

# -----------------------------
# Catalog vocabulary
# -----------------------------

CATEGORIES: Dict[str, List[str]] = {
    "Electronics": ["Headphones", "Keyboard", "Mouse", "Monitor", "Charger", "Speaker"],
    "Books": ["Novel", "Cookbook", "Atlas", "Biography", "Notebook"],
    "Clothing": ["T-Shirt", "Jacket", "Socks", "Scarf", "Cap"],
    "Home": ["Mug", "Lamp", "Pillow", "Blanket", "Vase"],
    "Food": ["Coffee", "Tea", "Chocolate", "Cookies", "Honey"],
}

ADJECTIVES = ["Classic", "Deluxe", "Compact", "Everyday", "Premium", "Eco"]

PRICE_RANGES = {
    "Electronics": (30.0, 400.0),
    "Books": (8.0, 60.0),
    "Clothing": (10.0, 150.0),
    "Home": (5.0, 120.0),
    "Food": (3.0, 40.0),
}


# -----------------------------
# Generators
# -----------------------------

def price_round(p: float) -> float:
    return round(max(p, 0.01), 2)


def gen_items(n: int) -> List[Item]:
    items: List[Item] = []
    categories = list(CATEGORIES.keys())
    for i in range(1, n + 1):
        category = categories[(i - 1) % len(categories)]
        noun = random.choice(CATEGORIES[category])
        lo, hi = PRICE_RANGES[category]
        items.append(Item(
            item_id=str(i),
            name=f"{random.choice(ADJECTIVES)} {noun}",
            category=category,
            price=price_round(random.uniform(lo, hi)),
            description=f"{category.lower()} / {noun.lower()}",
            stock=random.randint(5, 200),
        ))
    return items


def gen_promotions(items: List[Item], now: datetime, days: int) -> List[Promotion]:
    """A store-wide discount, two item discounts and two stacking reductions."""
    until = now + timedelta(days=days)
    targets = random.sample(items, k=min(2, len(items)))
    promos: List[Promotion] = [
        Promotion.discount(
            promotion_id="PROMO001", name="Store-wide sale",
            valid_from=now, valid_until=until, target_item_id=ALL_ITEMS, discount_rate=0.9,
        ),
    ]
    for target in targets:
        promos.append(Promotion.discount(
            promotion_id=f"PROMO{len(promos) + 1:03d}", name=f"{target.name} special",
            valid_from=now, valid_until=until, target_item_id=target.item_id,
            discount_rate=random.choice([0.6, 0.7, 0.8]),
        ))
    for threshold, reduction in [(300.0, 50.0), (500.0, 100.0)]:
        promos.append(Promotion.full_reduction(
            promotion_id=f"PROMO{len(promos) + 1:03d}", name=f"Spend {int(threshold)} save {int(reduction)}",
            valid_from=now, valid_until=until, threshold_amount=threshold, reduction_amount=reduction,
        ))
    return promos


def main(argv: Optional[List[str]] = None) -> int:
    config = load_config()

    parser = argparse.ArgumentParser(description="Generate a starter item catalog and promotions as CSVs.")
    parser.add_argument("--items", type=int, default=config.default_seed_items, help="Number of items to generate.")
    parser.add_argument("--days", type=int, default=config.default_promotion_days, help="Promotion validity in days.")
    parser.add_argument("--output-dir", type=str, default=config.data_dir)
    parser.add_argument("--seed", type=int, default=config.default_seed_value)
    parser.add_argument("--no-overwrite", action="store_true", help="Fail if CSVs already exist.")
    args = parser.parse_args(argv)

    if args.items <= 0 or args.days <= 0:
        print("--items and --days must be positive", file=sys.stderr)
        return 2

    random.seed(args.seed)

    outdir = resolve_data_dir(args.output_dir)
    files = {
        "items": outdir / config.items_file,
        "promotions": outdir / config.promotions_file,
    }
    if args.no_overwrite:
        for p in files.values():
            if os.path.exists(p):
                print(f"Refusing to overwrite existing file: {p}", file=sys.stderr)
                return 2

    now = datetime.now().replace(microsecond=0)
    items = gen_items(args.items)
    promotions = gen_promotions(items, now, args.days)

    write_table(Path(files["items"]), [item_to_row(it) for it in items], ITEM_COLUMNS)
    write_table(Path(files["promotions"]), [promotion_to_row(p) for p in promotions], PROMOTION_COLUMNS)

    print(f"Generated data in {outdir}")
    print(f" items: {len(items)} | promotions: {len(promotions)}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
