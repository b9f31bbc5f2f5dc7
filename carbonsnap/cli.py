"""CLI entry point for carbonsnap."""

from __future__ import annotations

import argparse
import asyncio
import base64
import json
import logging
import mimetypes
import sys
from pathlib import Path

from dotenv import load_dotenv

from .carbon import FootprintCalculator
from .config import load_config
from .service import ReceiptParser
from .vision import create_backend


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="carbonsnap",
        description="Receipt parsing and carbon footprint tracking",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        default=None,
        help="Path to the configuration file (TOML)",
    )

    sub = parser.add_subparsers(dest="command")

    # serve
    serve_parser = sub.add_parser("serve", help="Run the receipt parsing HTTP function")
    serve_parser.add_argument("--host", type=str, default=None)
    serve_parser.add_argument("--port", type=int, default=None)

    # parse
    parse_parser = sub.add_parser("parse", help="Parse a receipt image file")
    parse_parser.add_argument("--image", type=str, required=True, help="Receipt image file")
    parse_parser.add_argument("--json", action="store_true", help="Print JSON output")
    parse_parser.add_argument(
        "--save", action="store_true", help="Store the receipt for --user-id"
    )
    parse_parser.add_argument("--user-id", type=str, default=None)

    # goals
    goals_parser = sub.add_parser("goals", help="Show or update a user's carbon goals")
    goals_parser.add_argument("--user-id", type=str, required=True)
    goals_parser.add_argument("--weekly", type=float, default=None, metavar="KG")
    goals_parser.add_argument("--monthly", type=float, default=None, metavar="KG")
    goals_parser.add_argument("--yearly", type=float, default=None, metavar="KG")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    load_dotenv()
    config = load_config(args.config)
    logging.basicConfig(
        level=config.logging.level.upper(),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )

    match args.command:
        case "serve":
            _cmd_serve(config, args)
        case "parse":
            asyncio.run(_cmd_parse(config, args))
        case "goals":
            _cmd_goals(config, args)


def _cmd_serve(config, args) -> None:
    try:
        import uvicorn
    except ImportError:
        print("uvicorn is required: pip install uvicorn", file=sys.stderr)
        sys.exit(1)

    from .server import create_app

    uvicorn.run(
        create_app(config),
        host=args.host or config.server.host,
        port=args.port or config.server.port,
        log_level=config.logging.level.lower(),
    )


def image_to_data_url(path: str | Path) -> str:
    """Encode an image file as a base64 data URL."""
    data = Path(path).read_bytes()
    media_type = mimetypes.guess_type(str(path))[0] or "image/jpeg"
    return f"data:{media_type};base64,{base64.standard_b64encode(data).decode()}"


async def _cmd_parse(config, args) -> None:
    if args.save and not args.user_id:
        print("--save requires --user-id", file=sys.stderr)
        sys.exit(1)

    try:
        image_data = image_to_data_url(args.image)
    except OSError as e:
        print(f"Cannot read image: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        backend = create_backend(config)
    except ValueError as e:
        print(str(e), file=sys.stderr)
        sys.exit(1)

    parser = ReceiptParser(backend)
    print("Parsing receipt...", file=sys.stderr)
    try:
        receipt = await parser.parse(image_data)
    except Exception as e:
        print(f"Receipt parsing failed: {e}", file=sys.stderr)
        sys.exit(1)

    footprint = FootprintCalculator().estimate_receipt(receipt)

    if args.json:
        data = receipt.to_dict()
        data["carbon"] = {
            "totalKg": footprint.total_kg,
            "category": footprint.carbon_category,
            "items": [
                {"name": i.name, "emissionsKg": i.emissions_kg, "impact": i.impact}
                for i in footprint.items
            ],
            "equivalents": footprint.equivalents,
        }
        print(json.dumps(data, ensure_ascii=False, indent=2))
    else:
        print(f"\n{receipt.store_name}  {receipt.date}  (confidence {receipt.confidence:.0%})")
        for item, fp in zip(receipt.items, footprint.items):
            print(
                f"  {item.name:<24} {item.quantity:>4} {item.price:>8.2f}"
                f"  {fp.emissions_kg:>6.2f} kg  [{item.category}]"
            )
        print(f"  {'Total':<29} {receipt.total:>8.2f}  {footprint.total_kg:>6.2f} kg")
        for line in footprint.equivalents:
            print(f"  {line}")

    if args.save:
        from .store import ReceiptStore, create_store_client

        try:
            store = ReceiptStore(create_store_client(config.store))
        except (ImportError, ValueError) as e:
            print(str(e), file=sys.stderr)
            sys.exit(1)
        try:
            row = store.save_receipt(
                receipt, args.user_id, scan_method="upload", footprint=footprint
            )
        except Exception as e:
            print(f"Saving receipt failed: {e}", file=sys.stderr)
            sys.exit(1)
        print(f"Saved receipt {row['id']}", file=sys.stderr)


def _cmd_goals(config, args) -> None:
    from .store import TIMEFRAMES, DashboardStore, GoalStore, create_store_client

    try:
        client = create_store_client(config.store)
    except (ImportError, ValueError) as e:
        print(str(e), file=sys.stderr)
        sys.exit(1)

    try:
        if args.weekly is not None or args.monthly is not None or args.yearly is not None:
            GoalStore(client).set_goals(
                args.user_id,
                weekly=args.weekly,
                monthly=args.monthly,
                yearly=args.yearly,
            )
        dashboard = DashboardStore(client)
        summaries = [dashboard.emissions_summary(args.user_id, tf) for tf in TIMEFRAMES]
    except Exception as e:
        print(f"Store request failed: {e}", file=sys.stderr)
        sys.exit(1)

    for s in summaries:
        status = "on track" if s.on_track else "over goal"
        print(
            f"  {s.timeframe:<6} {s.total_kg:>7.1f} / {s.goal_kg:g} kg CO2e"
            f"  {status}  ({s.change_pct:+.1f}% vs previous, {s.scans} scans)"
        )
