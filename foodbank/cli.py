"""CLI entry point for foodbank ingestion."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from datetime import date
from pathlib import Path

from dotenv import load_dotenv

from .catalog import load_catalog, load_line_items
from .categories import category_path
from .config import load_config
from .errors import IngestError
from .nutrition import DEFAULT_TARGET, summarize
from .ocr import TextExtractor, create_recognizer
from .ocr.images import load_bitmap
from .pipeline import IngestionPipeline, Source


def main(argv: list[str] | None = None) -> None:
    load_dotenv()

    parser = argparse.ArgumentParser(
        prog="foodbank",
        description="Turn receipt and nutrition-label photos into structured food records",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        default=None,
        help="Path to the configuration file (TOML)",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging"
    )

    sub = parser.add_subparsers(dest="command")

    # ocr
    ocr_parser = sub.add_parser("ocr", help="Recognize text in an image")
    ocr_parser.add_argument("image", type=str, help="Image or PDF file")

    # receipt
    receipt_parser = sub.add_parser("receipt", help="Extract items from receipts")
    receipt_parser.add_argument(
        "sources", type=str, nargs="+", help="Image, PDF or text files"
    )
    receipt_parser.add_argument(
        "--catalog", type=str, default=None, metavar="FILE",
        help="Catalog JSON used to link items",
    )
    receipt_parser.add_argument(
        "--meal", action="store_true", help="Treat sources as meals, not receipts"
    )
    receipt_parser.add_argument("--json", action="store_true", help="Output JSON")

    # label
    label_parser = sub.add_parser("label", help="Read a nutrition label")
    label_parser.add_argument("source", type=str, help="Image, PDF or text file")
    label_parser.add_argument("--json", action="store_true", help="Output JSON")

    # summary
    summary_parser = sub.add_parser("summary", help="Summarize nutrition of line items")
    summary_parser.add_argument("items", type=str, help="Line items JSON")
    summary_parser.add_argument(
        "--catalog", type=str, required=True, metavar="FILE", help="Catalog JSON"
    )
    summary_parser.add_argument(
        "--from", dest="start", type=date.fromisoformat, default=None,
        help="First day (YYYY-MM-DD)",
    )
    summary_parser.add_argument(
        "--to", dest="end", type=date.fromisoformat, default=None,
        help="Last day (YYYY-MM-DD)",
    )
    summary_parser.add_argument(
        "--include-excluded", action="store_true",
        help="Count items whose catalog entry is excluded",
    )
    summary_parser.add_argument("--json", action="store_true", help="Output JSON")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = load_config(args.config)

    try:
        match args.command:
            case "ocr":
                _cmd_ocr(config, args)
            case "receipt":
                asyncio.run(_cmd_receipt(config, args))
            case "label":
                asyncio.run(_cmd_label(config, args))
            case "summary":
                _cmd_summary(args)
    except (IngestError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def _cmd_ocr(config, args) -> None:
    extractor = TextExtractor.from_config(create_recognizer(config), config.ocr)
    if args.image.lower().endswith(".pdf"):
        text = extractor.extract_pdf(Path(args.image).read_bytes())
    else:
        text = extractor.extract(load_bitmap(args.image))
    if text is None:
        print("No text recognized.")
        return
    print(text)


async def _cmd_receipt(config, args) -> None:
    catalog = load_catalog(args.catalog) if args.catalog else ()
    pipeline = IngestionPipeline.from_config(config)
    sources = [Source.from_path(p) for p in args.sources]

    if len(sources) == 1:
        receipt = await pipeline.ingest_receipt(sources[0], catalog, meal=args.meal)
        failures: list[str] = []
    else:
        result = await pipeline.ingest_batch(sources, catalog, meal=args.meal)
        receipt = result.receipt
        failures = result.errors
        print(
            f"{result.succeeded} succeeded, {result.failed} failed",
            file=sys.stderr,
        )
        for message in failures:
            print(f"  {message}", file=sys.stderr)

    names = {e.id: e.name for e in catalog}

    if args.json:
        data = receipt.to_dict()
        for item, raw in zip(receipt.items, data["items"]):
            raw["linked_entry_id"] = item.linked_entry_id
        print(json.dumps(data, ensure_ascii=False, indent=2))
        return

    header = receipt.store_name or "Unknown store"
    if receipt.parsed_date:
        header += f" ({receipt.parsed_date.isoformat()})"
    print(header)
    if not receipt.items:
        print("  No items found.")
        return
    for item in receipt.items:
        link = names.get(item.linked_entry_id, "new") if item.linked_entry_id else "new"
        category = category_path(item.category, item.subcategory)
        print(
            f"  {item.name:<30} {item.quantity_grams:>7.0f} g "
            f"{item.price:>8.2f}  [{category}] -> {link}"
        )


async def _cmd_label(config, args) -> None:
    pipeline = IngestionPipeline.from_config(config)
    label = await pipeline.ingest_nutrition_label(Source.from_path(args.source))

    if args.json:
        print(json.dumps(label.to_dict(), ensure_ascii=False, indent=2))
        return

    print(f"{label.display_name} (per 100 g)")
    for name, value in label.nutrition.values().items():
        print(f"  {name:<15} {value:g}")


def _cmd_summary(args) -> None:
    catalog = load_catalog(args.catalog)
    items = load_line_items(args.items, catalog)

    date_range = None
    if args.start or args.end:
        start = args.start or args.end
        end = args.end or args.start
        date_range = (start, end)

    summary = summarize(
        items, date_range=date_range, exclude_flagged=not args.include_excluded
    )
    progress = summary.progress(DEFAULT_TARGET)

    if args.json:
        data = {
            "day_count": summary.day_count,
            "item_count": summary.item_count,
            "totals": summary.totals.to_dict(),
            "daily_average": summary.daily_average.to_dict(),
        }
        print(json.dumps(data, ensure_ascii=False, indent=2))
        return

    print(f"{summary.item_count} item(s) over {summary.day_count} day(s)")
    average = summary.daily_average.values()
    for name, total in summary.totals.values().items():
        bar = "█" * min(10, int(progress[name] * 10))
        print(f"  {name:<15} {total:>10.1f}  {average[name]:>8.1f}/day {bar}")
