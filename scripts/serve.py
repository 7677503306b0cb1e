"""Run the upload/lookup API with uvicorn."""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import uvicorn

from rollbook.api.app import create_app
from rollbook.config import load_settings


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Serve the student records API.")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--db", dest="database_url", default=None, help="SQLAlchemy database URL.")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    settings = load_settings(database_url=args.database_url)
    uvicorn.run(create_app(settings=settings), host=args.host, port=args.port, log_level=settings.log_level.lower())


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    main()
