# scripts/import_products.py
"""
Load a product price list ("name<TAB|;|,>price" per line) into the catalog.

Usage:
    python -m scripts.import_products data/price_list.csv
"""

import argparse
import logging
from pathlib import Path

from vetms.db.engine import get_engine
from vetms.db.migrate import ensure_schema
from vetms.logging_config import configure_logging
from vetms.services.catalog import import_price_list, parse_price_list

logger = logging.getLogger(__name__)


def main(argv=None):
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument("path", type=Path, help="price list file")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="parse and report without writing",
    )
    args = parser.parse_args(argv)

    configure_logging()
    text = args.path.read_text(encoding="utf-8")

    if args.dry_run:
        rows, skipped = parse_price_list(text)
        logger.info("Parsed rows:   %s", len(rows))
        logger.info("Skipped lines: %s", skipped)
        for name, price in rows[:5]:
            logger.info("  %s -> %s", name, price)
        return

    ensure_schema(get_engine())
    stats = import_price_list(text)
    logger.info("Products upserted: %s", stats["processed"])
    logger.info("Lines skipped:     %s", stats["skipped"])


if __name__ == "__main__":
    main()
