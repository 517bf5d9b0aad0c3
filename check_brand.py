#!/usr/bin/env python3
"""Load a brand document, resolve every entry and report the invalid ones.

Usage:
    python check_brand.py                          # ./appearance.json
    python check_brand.py --brand-dir assets/brand
    python check_brand.py --file appearance.yaml

Exits 1 if the document fails to decode or any entry resolves invalid.
"""
import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent))

from settings import Settings
from resolvers.brand import Brand
from utils.font_catalog import FONT_SEARCH_DIRS, FontCatalog

logger = logging.getLogger("check_brand")


def build_brand(settings: Settings) -> Brand:
    catalog = FontCatalog.default()
    catalog.scan(settings.font_dirs or FONT_SEARCH_DIRS)
    return Brand(
        storage=settings.brand_dir,
        file_name=settings.file_name,
        font_catalog=catalog,
        write_log_file=settings.write_log_file,
    )


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--brand-dir", type=Path, default=None, dest="brand_dir",
                        help="Folder holding the brand document and its images")
    parser.add_argument("--file", default=None, dest="file_name",
                        help="Brand document file name inside the brand folder")
    args = parser.parse_args(argv)

    overrides = {k: v for k, v in vars(args).items() if v is not None}
    settings = Settings(**overrides)

    logging.basicConfig(
        level=settings.log_level_number,
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
        datefmt="%H:%M:%S",
    )

    brand = build_brand(settings)
    if not brand.load():
        logger.error("Could not load %s", settings.document_path)
        return 1

    report = brand.resolve_all()
    failed = 0
    for kind, results in report.items():
        invalid = sorted(name for name, valid in results.items() if not valid)
        failed += len(invalid)
        print(f"{kind:<16} {len(results) - len(invalid):>4} valid  {len(invalid):>4} invalid")
        for name in invalid:
            print(f"    {name}")

    if failed:
        logger.warning("%d invalid entries in %s", failed, settings.document_path)
        return 1
    logger.info("All entries in %s resolved", settings.document_path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
