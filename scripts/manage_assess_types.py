#!/usr/bin/env python3
"""
Manage activity assess types from the command line.

Usage:
    python scripts/manage_assess_types.py init-db
    python scripts/manage_assess_types.py set <courseid> <cmid> <type> [--gradeitemid N] [--locked]
    python scripts/manage_assess_types.py show <cmid>
    python scripts/manage_assess_types.py list <courseid> [--type N]
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

# Add project root to path
project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from dotenv import load_dotenv  # noqa: E402

from app.services.assess_type import build_store, parse_type  # noqa: E402
from config.settings import get_settings  # noqa: E402
from models import StorageError, init_db  # noqa: E402

logger = logging.getLogger("manage_assess_types")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Manage activity assess types.")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="Create the assess type table.")

    set_cmd = sub.add_parser("set", help="Classify an activity.")
    set_cmd.add_argument("courseid", type=int)
    set_cmd.add_argument("cmid", type=int)
    set_cmd.add_argument("type", help="0 formative, 1 summative, 2 dummy")
    set_cmd.add_argument("--gradeitemid", type=int, default=0)
    set_cmd.add_argument("--locked", action="store_true")

    show_cmd = sub.add_parser("show", help="Show an activity's classification.")
    show_cmd.add_argument("cmid", type=int)

    list_cmd = sub.add_parser("list", help="List classifications for a course.")
    list_cmd.add_argument("courseid", type=int)
    list_cmd.add_argument("--type", dest="type_filter", default=None)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _build_parser().parse_args(argv)

    try:
        init_db()
        store = build_store()

        if args.command == "init-db":
            print("Assess type table is ready.")
        elif args.command == "set":
            store.update_type(
                args.courseid,
                parse_type(args.type),
                cmid=args.cmid,
                gradeitemid=args.gradeitemid,
                locked=args.locked,
            )
            print(f"cm {args.cmid}: {store.get_type_name(args.cmid, args.gradeitemid)}")
        elif args.command == "show":
            name = store.get_type_name(args.cmid)
            if name is None:
                print(f"cm {args.cmid}: not classified")
            else:
                locked = " (locked)" if store.is_locked(args.cmid) else ""
                print(f"cm {args.cmid}: {name}{locked}")
        elif args.command == "list":
            type_filter = parse_type(args.type_filter) if args.type_filter is not None else None
            records = store.get_records_by_course(args.courseid, type_filter)
            for record in records:
                print(
                    f"{record.id}\tcm={record.cmid}\tgradeitem={record.gradeitemid}"
                    f"\ttype={record.type}\tlocked={int(record.locked)}"
                )
            print(f"{len(records)} record(s)")
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2
    except StorageError as exc:
        logger.error("Storage failure: %s", exc)
        return 1
    return 0


if __name__ == "__main__":
    load_dotenv()
    logging.basicConfig(
        level=get_settings().LOG_LEVEL,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    sys.exit(main())
