"""
CLI entry point for the ipdesk console.

Usage:
    python -m ipdesk serve --port 8090
    python -m ipdesk choices tenant
    python -m ipdesk import devices.xlsx --dry-run
    python -m ipdesk export devices --output devices_data.xlsx
    python -m ipdesk export prefixes

Every command except serve logs in with IPDESK_URL / IPDESK_TOKEN (or --url /
--token) and loads the reference caches once before running.
"""

import argparse
import logging
import sys

from .core.config import settings
from .core.console import InventoryConsole
from .core.errors import AuthRejected, InventoryError, NotLoggedIn
from .core.models import ReferenceKind
from .core.tables import DEVICE_COLUMNS, format_table


def _connect(args) -> InventoryConsole:
    if not args.token:
        print("Error: no API token (set IPDESK_TOKEN or pass --token)", file=sys.stderr)
        sys.exit(1)
    console = InventoryConsole()
    console.login(args.url, args.token)
    console.load_all()
    return console


def cmd_serve(args) -> None:
    import uvicorn

    uvicorn.run("ipdesk.api.main:app", host=args.host, port=args.port)


def cmd_choices(args) -> None:
    console = _connect(args)
    cache = console.cache(ReferenceKind(args.kind))
    for entry in cache.all():
        remote_id = "-" if entry.remote_id is None else entry.remote_id
        print(f"{entry.local_index:>5}  {remote_id:>6}  {entry.display_name}")
    if cache.skipped:
        print(f"\n{cache.skipped} record(s) skipped", file=sys.stderr)


def cmd_devices(args) -> None:
    console = _connect(args)
    print(format_table(DEVICE_COLUMNS, console.device_rows(args.search)))


def cmd_import(args) -> None:
    console = _connect(args)
    summary = console.import_rows(args.file, dry_run=args.dry_run)

    for result in summary.results:
        if result.reason:
            print(f"Row {result.row.row_number} ({result.row.name}): {result.outcome.value} - {result.reason}")

    verb = "would be created" if args.dry_run else "created"
    print(
        f"\n{summary.submitted} device(s) {verb}, "
        f"{summary.skipped} skipped, {summary.failed} failed ({summary.total} rows)"
    )
    if summary.failed:
        sys.exit(2)


def cmd_export(args) -> None:
    console = _connect(args)
    if args.what == "devices":
        path = console.export_devices(args.output, search=args.search)
    else:
        path = console.export_prefixes(args.output)
    print(f"Exported to: {path}")


def main():
    parser = argparse.ArgumentParser(
        prog="ipdesk",
        description="IPAM desk console - browse, create and bulk-import inventory records",
    )
    parser.add_argument("--url", default=settings.INVENTORY_URL, help="Inventory API base URL")
    parser.add_argument("--token", default=settings.INVENTORY_TOKEN, help="Inventory API token")
    parser.add_argument("--log-level", default=settings.LOG_LEVEL, help="Logging level (default: INFO)")

    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP console")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8090)
    serve.set_defaults(func=cmd_serve)

    choices = sub.add_parser("choices", help="List dropdown entries of a reference kind")
    choices.add_argument("kind", choices=[k.value for k in ReferenceKind])
    choices.set_defaults(func=cmd_choices)

    devices = sub.add_parser("devices", help="List cached devices")
    devices.add_argument("--search", default="", help="Display-name filter")
    devices.set_defaults(func=cmd_devices)

    imp = sub.add_parser("import", help="Bulk-import devices from .xlsx or .csv")
    imp.add_argument("file", metavar="FILE")
    imp.add_argument("--dry-run", action="store_true", help="Resolve rows without creating devices")
    imp.set_defaults(func=cmd_import)

    export = sub.add_parser("export", help="Export a snapshot workbook")
    export.add_argument("what", choices=["devices", "prefixes"])
    export.add_argument("--output", "-o", metavar="FILE", help="Output .xlsx path")
    export.add_argument("--search", default="", help="Device display-name filter")
    export.set_defaults(func=cmd_export)

    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        args.func(args)
    except (AuthRejected, NotLoggedIn) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except InventoryError as e:
        body = getattr(e, "body", "")
        print(f"Error: {e}", file=sys.stderr)
        if body:
            print(body, file=sys.stderr)
        sys.exit(1)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
