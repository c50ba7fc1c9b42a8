"""CLI main: argument parsing, engine setup, one transaction per command."""

import argparse
import sys

from sqlalchemy.exc import SQLAlchemyError

from dairy_config import DEFAULT_MASTER_DATA_PATH, load_settings
from dairy_kernel.db.engine import (
    create_tables,
    drop_tables,
    init_engine_from_url,
    session_scope,
)
from dairy_kernel.exceptions import DairyKernelError
from dairy_kernel.logging_config import LogContext, configure_logging
from scripts.dairy_cli import commands
from scripts.dairy_cli.util import enable_quiet_logging, restore_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m scripts.dairy_cli",
        description="Milk procurement pricing kernel",
    )
    parser.add_argument("--config", default=None, help="Settings YAML (default: $DAIRY_CONFIG or packaged defaults)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Keep JSON logs on stderr")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("init-db", help="Create tables")
    p.add_argument("--reset", action="store_true", help="Drop all tables first")

    p = sub.add_parser("seed", help="Load bill periods, rate configs, farmers and locks from YAML")
    p.add_argument("--file", default=str(DEFAULT_MASTER_DATA_PATH))
    p.set_defaults(handler=commands.cmd_seed)

    p = sub.add_parser("import-collections", help="Bulk import collection rows from a YAML list")
    p.add_argument("file")
    p.set_defaults(handler=commands.cmd_import_collections)

    p = sub.add_parser("recalculate", help="Re-value stored collections from their raw input")
    p.add_argument("--from-date", default=None)
    p.add_argument("--to-date", default=None)
    p.add_argument("--from-shift", default=None)
    p.add_argument("--to-shift", default=None)
    p.set_defaults(handler=commands.cmd_recalculate)

    p = sub.add_parser("toggle-lock", help="Lock or unlock a bill period, e.g. 5-2025-1")
    p.add_argument("period_id")
    p.set_defaults(handler=commands.cmd_toggle_lock)

    p = sub.add_parser("locks", help="List locked bill periods")
    p.set_defaults(handler=commands.cmd_list_locks)

    p = sub.add_parser("farmer-bill", help="Print one farmer's bill for a period")
    p.add_argument("farmer_id")
    p.add_argument("period_id")
    p.set_defaults(handler=commands.cmd_farmer_bill)

    p = sub.add_parser("bill-summary", help="Net payable per farmer for a period")
    p.add_argument("period_id")
    p.add_argument("--branch", default=None)
    p.add_argument("--route", default=None)
    p.set_defaults(handler=commands.cmd_bill_summary)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = load_settings(args.config)

    configure_logging(level=settings.log_level)
    try:
        init_engine_from_url(settings.database_url, echo=settings.echo_sql)
    except (SQLAlchemyError, ImportError) as exc:
        print(f"  ERROR: {exc}", file=sys.stderr)
        return 1
    if args.command == "init-db" and args.reset:
        drop_tables()
    create_tables()

    if args.command == "init-db":
        print(f"Tables ready at {settings.database_url}")
        return 0

    muted = [] if args.verbose else enable_quiet_logging()
    try:
        with LogContext.bind(command=args.command), session_scope() as session:
            return args.handler(args, session, settings)
    except (DairyKernelError, ValueError) as exc:
        print(f"  ERROR: {exc}", file=sys.stderr)
        return 1
    finally:
        restore_logging(muted)


if __name__ == "__main__":
    sys.exit(main())
