"""CLI for looking up a student by roll number."""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from rollbook.config import configure_logging, load_settings
from rollbook.lookup.history import SearchHistory
from rollbook.lookup.service import LookupService
from rollbook.store.repository import SqlStudentStore


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Look a student up by roll number.")
    parser.add_argument("roll_number", nargs="?", help="Roll number, e.g. 22CSE1015.")
    parser.add_argument("--db", dest="database_url", default=None, help="SQLAlchemy database URL.")
    parser.add_argument(
        "--history",
        type=Path,
        default=Path.home() / ".rollbook" / "history.json",
        help="Where recent searches are kept.",
    )
    parser.add_argument("--recent", action="store_true", help="Print recent searches and exit.")
    parser.add_argument("--clear-history", action="store_true", help="Forget recent searches.")
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    settings = load_settings(database_url=args.database_url)
    configure_logging(settings.log_level)

    history = SearchHistory.load(args.history, limit=settings.history_size)
    if args.clear_history:
        history.clear()
        history.save(args.history)
        return 0
    if args.recent or not args.roll_number:
        for entry in history.entries:
            status = "found" if entry.found else "not found"
            print(f"{entry.roll_number}\t{status}\t{entry.timestamp.isoformat()}")
        return 0

    service = LookupService(
        SqlStudentStore.from_url(settings.database_url),
        photo_url_template=settings.photo_url_template,
    )
    result = service.find(args.roll_number, history=history)
    history.save(args.history)
    print(result.model_dump_json(indent=2))
    return 0 if result.found else 1


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
