"""Bulk-load sizes and aliases into the alias store.

Input is a JSON object:
  {
    "sizes": ["12\\"x24\\"", "2x2"],
    "sizeAliases": [{"aliasText": "M122", "mappedSize": "2x2"}],
    "productAliases": [{"aliasText": "COR-PRO-OAK-5IN", "mappedProductName": "Coretec Pro Oak"}]
  }

Example:
  python scripts/seed_alias_store.py \
    --input data/seed/aliases.json \
    --store-url http://localhost:8100
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

ROOT = Path(__file__).resolve().parent.parent
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from sheet_cleaner.config import CleanerConfig  # noqa: E402
from sheet_cleaner.exceptions import AliasStoreError  # noqa: E402
from sheet_cleaner.stores import HttpAliasStore  # noqa: E402


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seed the alias store from a JSON file")
    parser.add_argument("--input", required=True, help="Seed JSON file")
    parser.add_argument("--store-url", help="Alias store URL (default: ALIAS_STORE_URL env var)")
    parser.add_argument("--dry-run", action="store_true", help="Show what would be written")
    return parser.parse_args()


def load_seed(path: Path) -> dict[str, Any]:
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise SystemExit(f"Seed file must contain a JSON object: {path}")
    return data


def iter_pairs(items: Any, left: str, right: str) -> list[tuple[str, str]]:
    pairs: list[tuple[str, str]] = []
    for item in items if isinstance(items, list) else []:
        if not isinstance(item, dict):
            continue
        a, b = item.get(left), item.get(right)
        if isinstance(a, str) and isinstance(b, str) and a.strip() and b.strip():
            pairs.append((a.strip(), b.strip()))
    return pairs


def main() -> int:
    args = parse_args()
    seed = load_seed(Path(args.input))
    sizes = [s.strip() for s in seed.get("sizes", []) if isinstance(s, str) and s.strip()]
    size_aliases = iter_pairs(seed.get("sizeAliases"), "aliasText", "mappedSize")
    product_aliases = iter_pairs(seed.get("productAliases"), "aliasText", "mappedProductName")

    print(
        f"[seed] sizes={len(sizes)} size_aliases={len(size_aliases)} "
        f"product_aliases={len(product_aliases)}"
    )
    if args.dry_run:
        for alias_text, mapped in size_aliases + product_aliases:
            print(f"  {alias_text} -> {mapped}")
        return 0

    config = CleanerConfig.from_env()
    url = args.store_url or config.alias_store_url
    if not url:
        print("[seed] ERROR: --store-url or ALIAS_STORE_URL is required")
        return 1
    store = HttpAliasStore(url, token=config.alias_store_token, timeout_sec=config.alias_store_timeout_sec)

    failed = 0
    for label in sizes + [mapped for _, mapped in size_aliases]:
        try:
            store.create_size(label)
        except AliasStoreError as exc:
            failed += 1
            print(f"[seed] size {label!r} failed: {exc}")
    for alias_text, mapped in size_aliases:
        try:
            store.create_size_alias(alias_text, mapped)
        except AliasStoreError as exc:
            failed += 1
            print(f"[seed] size alias {alias_text!r} failed: {exc}")
    for alias_text, mapped in product_aliases:
        try:
            store.create_product_alias(alias_text, mapped)
        except AliasStoreError as exc:
            failed += 1
            print(f"[seed] product alias {alias_text!r} failed: {exc}")

    print(f"[seed] done, {failed} failed")
    return 1 if failed else 0


if __name__ == "__main__":
    raise SystemExit(main())
