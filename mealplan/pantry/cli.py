"""CLI entry point for the pantry module."""

from __future__ import annotations

import argparse
import csv
import json
import logging
import sys
from datetime import date
from pathlib import Path

from .config import load_config
from .errors import InvalidInput, StorageUnavailable
from .matching import calculate_similarity, confidence_of, find_duplicates, normalize_ingredient_name
from .shelf_life import ShelfLifeTable, estimate_shelf_life, line_expiry_status, sort_by_expiry_priority

EXIT_INVALID_INPUT = 2
EXIT_STORAGE_UNAVAILABLE = 3


def _date_arg(text: str) -> date:
    try:
        return date.fromisoformat(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an ISO date (YYYY-MM-DD): {text!r}")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mealplan-pantry",
        description="Ingredient matching and pantry stock reconciliation",
    )
    parser.add_argument(
        "--config", "-c", type=str, default=None, help="Path to a TOML config file"
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Log progress at INFO level"
    )

    sub = parser.add_subparsers(dest="command")

    norm = sub.add_parser("normalize", help="Print the canonical key of each name")
    norm.add_argument("names", nargs="+")

    sim = sub.add_parser("similarity", help="Score two ingredient names")
    sim.add_argument("a")
    sim.add_argument("b")

    shelf = sub.add_parser("shelf-life", help="Look up storage and shelf life")
    shelf.add_argument("name")
    shelf.add_argument("--purchased", type=_date_arg, default=None, metavar="DATE")

    dup = sub.add_parser("duplicates", help="List duplicate inventory lines")
    dup.add_argument("--owner", required=True)

    lst = sub.add_parser("list", help="List active inventory by expiry priority")
    lst.add_argument("--owner", required=True)
    lst.add_argument("--json", action="store_true", help="Output as JSON")

    rec = sub.add_parser("reconcile", help="Match recipe requirements against stock")
    rec.add_argument("--owner", required=True)
    rec.add_argument(
        "--requirements", required=True, metavar="FILE",
        help='JSON: {"milk": "2 cups"} or [{"name", "quantity", "unit"}]',
    )
    rec.add_argument("--scale", type=float, default=1.0, help="Multiply every quantity")
    rec.add_argument("--apply", action="store_true", help="Deduct the selected lines")
    rec.add_argument("--json", action="store_true", help="Output as JSON")

    imp = sub.add_parser("import", help="Add purchased items from a CSV file")
    imp.add_argument("--owner", required=True)
    imp.add_argument("--csv", required=True, metavar="FILE")
    imp.add_argument("--purchased", type=_date_arg, default=None, metavar="DATE")
    imp.add_argument("--no-merge", action="store_true", help="Always create new lines")

    sub.add_parser("expire", help="Mark lines past their expiry date as expired")

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_config(args.config)
        if config.shelf_life.data_path:
            table = ShelfLifeTable(data_path=config.shelf_life.data_path)
        else:
            table = ShelfLifeTable.instance()

        match args.command:
            case "normalize":
                _cmd_normalize(args)
            case "similarity":
                _cmd_similarity(args)
            case "shelf-life":
                _cmd_shelf_life(config, table, args)
            case "duplicates":
                _cmd_duplicates(config, args)
            case "list":
                _cmd_list(config, args)
            case "reconcile":
                _cmd_reconcile(config, args)
            case "import":
                _cmd_import(config, table, args)
            case "expire":
                _cmd_expire(config)
    except ValueError as e:  # includes InvalidInput
        print(f"error: {e}", file=sys.stderr)
        sys.exit(EXIT_INVALID_INPUT)
    except StorageUnavailable as e:
        print(f"storage unavailable: {e}", file=sys.stderr)
        sys.exit(EXIT_STORAGE_UNAVAILABLE)


def _open_db(config):
    from .db import InventoryDB

    return InventoryDB(config.database.path)


def _cmd_normalize(args) -> None:
    for name in args.names:
        print(f"{name}\t{normalize_ingredient_name(name)}")


def _cmd_similarity(args) -> None:
    score = calculate_similarity(args.a, args.b)
    print(f"{score:.3f}\t{confidence_of(score).value}")


def _cmd_shelf_life(config, table, args) -> None:
    purchased = args.purchased or date.today()
    found = table.match(args.name)
    estimate = estimate_shelf_life(
        args.name, purchased, locations=config.storage.locations, table=table
    )
    location = estimate.location.value if estimate.location else "unassigned"
    print(f"category:   {estimate.category}")
    print(f"location:   {location}")
    if found is None:
        print("shelf life: unknown")
        return
    print(f"reference:  {found.record.name} ({found.tier.value} match)")
    print(f"shelf life: {estimate.shelf_life_days} days")
    print(f"expires:    {estimate.expiry_date.isoformat()} (estimated)")


def _cmd_duplicates(config, args) -> None:
    db = _open_db(config)
    try:
        lines = db.get_active_inventory(args.owner)
    finally:
        db.close()

    groups = find_duplicates(lines)
    if not groups:
        print("No duplicate inventory lines.")
        return
    for group in groups:
        print(f"{group.normalized_name}:")
        for line in group.items:
            print(f"  #{line.id:<5} {line.name}  {line.quantity:g} {line.unit}")


def _cmd_list(config, args) -> None:
    db = _open_db(config)
    try:
        lines = db.get_active_inventory(args.owner)
    finally:
        db.close()

    today = date.today()
    min_days = config.shelf_life.expiring_soon_min_days
    ordered = sort_by_expiry_priority(lines, today, min_days)

    if args.json:
        data = [
            {
                "id": line.id,
                "name": line.name,
                "quantity": line.quantity,
                "unit": line.unit,
                "category": line.category,
                "location": line.location.value if line.location else None,
                "expiration_date": (
                    line.expiration_date.isoformat() if line.expiration_date else None
                ),
                "expiry_is_estimated": line.expiry_is_estimated,
                "expiry_status": line_expiry_status(line, today, min_days).value,
            }
            for line in ordered
        ]
        print(json.dumps(data, ensure_ascii=False, indent=2))
        return

    if not ordered:
        print("Inventory is empty.")
        return
    for line in ordered:
        status = line_expiry_status(line, today, min_days).value
        expiry = line.expiration_date.isoformat() if line.expiration_date else "-"
        if line.expiry_is_estimated and line.expiration_date:
            expiry += "~"
        print(f"  #{line.id:<5} {line.name:<28} {line.quantity:g} {line.unit:<6} {expiry:<12} {status}")


def _cmd_reconcile(config, args) -> None:
    from .db import SettingsDB
    from .reconcile import apply_deductions, parse_requirements, preview_deductions

    try:
        raw = json.loads(Path(args.requirements).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise InvalidInput(f"cannot read requirements file: {e}") from e
    requirements = parse_requirements(raw)

    settings_db = SettingsDB(config.database.path)
    try:
        settings = settings_db.get_or_default(args.owner, config.reconcile.thresholds())
    finally:
        settings_db.close()

    db = _open_db(config)
    try:
        records = preview_deductions(
            db,
            args.owner,
            requirements,
            settings.thresholds(),
            scale=args.scale,
            min_match_score=config.reconcile.min_match_score,
        )
        result = apply_deductions(records, args.owner, db) if args.apply else None
    finally:
        db.close()

    if args.json:
        data: dict = {"deductions": [r.to_dict() for r in records]}
        if result is not None:
            data["applied"] = {
                "updated_count": result.updated_count,
                "partial_failure": result.partial_failure,
                "results": [
                    {
                        "ingredient_name": r.ingredient_name,
                        "item_id": r.item_id,
                        "status": r.status.value,
                        "message": r.message,
                    }
                    for r in result.results
                ],
            }
        print(json.dumps(data, ensure_ascii=False, indent=2))
        return

    for r in records:
        mark = "[x]" if r.selected else "[ ]"
        need = f"{r.recipe_quantity:g} {r.recipe_unit}".strip()
        if r.inventory_match is None:
            print(f"{mark} {r.ingredient_name:<24} {need:<12} not in stock -> buy {r.buy_quantity:g}")
            continue
        have = f"{r.current_inventory_quantity:g} {r.inventory_match.unit}".strip()
        line = (
            f"{mark} {r.ingredient_name:<24} {need:<12} "
            f"<- {r.inventory_match.name} ({have}, {r.confidence.value}) "
            f"{r.status.value}"
        )
        if r.buy_quantity:
            line += f" -> buy {r.buy_quantity:g}"
        else:
            line += f" -> {r.quantity_after_deduction:g} left"
        print(line)

    if result is not None:
        print(f"\nApplied {result.updated_count} deduction(s).")
        for r in result.results:
            if r.failed:
                print(f"  {r.ingredient_name}: {r.status.value} ({r.message})")


def _cmd_import(config, table, args) -> None:
    from .importer import InventoryImporter, items_from_rows

    try:
        with open(args.csv, newline="", encoding="utf-8") as f:
            items, row_errors = items_from_rows(csv.DictReader(f))
    except OSError as e:
        raise InvalidInput(f"cannot read CSV file: {e}") from e

    db = _open_db(config)
    try:
        importer = InventoryImporter(db, table=table, config=config)
        summary = importer.import_items(
            args.owner, items, args.purchased, merge=not args.no_merge
        )
    finally:
        db.close()

    print(f"Created {summary.created}, merged {summary.merged}.")
    for error in row_errors + summary.errors:
        print(f"  skipped: {error}", file=sys.stderr)


def _cmd_expire(config) -> None:
    from .scheduler import run_expiry_check

    min_days = config.shelf_life.expiring_soon_min_days
    db = _open_db(config)
    try:
        report = run_expiry_check(db, min_days=min_days)
    finally:
        db.close()

    print(f"Marked {report.expired_count} item(s) expired.")
    for owner_id in report.owners:
        expired = report.expired.get(owner_id, [])
        soon = report.expiring_soon.get(owner_id, [])
        print(f"{owner_id}: {len(expired)} expired, {len(soon)} due within {min_days} day(s)")
        for line in soon:
            print(f"  {line.expiration_date.isoformat()}  {line.name}")
