"""CLI entry-point for uploading roster files into the records store."""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from pipelines.upload import run_upload_pipeline
from rollbook.config import configure_logging, load_settings
from rollbook.ingest import EmptySourceError, UnsupportedDocumentError
from rollbook.store.batcher import BatchProgress, BatchSubmissionError
from rollbook.store.repository import SqlStudentStore


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Upload student rosters into the records store.")
    parser.add_argument("--in", dest="input_path", type=Path, required=True, help="File or directory of roster files.")
    parser.add_argument("--db", dest="database_url", default=None, help="SQLAlchemy database URL.")
    parser.add_argument("--batch-size", dest="batch_size", type=int, default=None, help="Records per upsert.")
    return parser.parse_args()


def _print_progress(progress: BatchProgress) -> None:
    print(
        f"  batch {progress.batch_index + 1}/{progress.batch_count}: "
        f"{progress.submitted}/{progress.total} records ({progress.percent:.0f}%)",
        file=sys.stderr,
    )


def main() -> int:
    args = parse_args()
    settings = load_settings(database_url=args.database_url, batch_size=args.batch_size)
    configure_logging(settings.log_level)

    input_path: Path = args.input_path
    if input_path.is_dir():
        input_paths: List[Path] = sorted(p for p in input_path.glob("*") if p.is_file())
    else:
        input_paths = [input_path]

    store = SqlStudentStore.from_url(settings.database_url)
    exit_code = 0
    for path in input_paths:
        try:
            report = run_upload_pipeline(path, store, batch_size=settings.batch_size, progress=_print_progress)
        except (FileNotFoundError, EmptySourceError, UnsupportedDocumentError) as exc:
            print(f"{path.name}: {exc}", file=sys.stderr)
            exit_code = 1
            continue
        except BatchSubmissionError as exc:
            print(f"{path.name}: {exc}", file=sys.stderr)
            return 2
        print(report.model_dump_json(indent=2))
        if not report.success:
            exit_code = 1
    return exit_code


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
