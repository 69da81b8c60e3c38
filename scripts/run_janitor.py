"""Run the session janitor sweeps once from the command line.

Examples:
  python scripts/run_janitor.py inactive
  python scripts/run_janitor.py cleanup
  python scripts/run_janitor.py all
"""

import argparse
import logging
import sys
from dataclasses import asdict
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from iqra.firebase import get_bucket, get_db  # noqa: E402
from scheduling.config import load_settings  # noqa: E402
from scheduling.janitor import SessionJanitor  # noqa: E402


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Complete idle sessions and delete expired sessions/recordings.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "sweep",
        choices=("inactive", "cleanup", "all"),
        help="which sweep to run",
    )
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    settings = load_settings()
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(message)s")

    janitor = SessionJanitor.from_settings(get_db(), settings, bucket=get_bucket())
    if args.sweep in ("inactive", "all"):
        print(f"Closed {janitor.close_inactive_sessions()} inactive sessions")
    if args.sweep in ("cleanup", "all"):
        stats = janitor.cleanup_old_data()
        print(f"Deleted {stats.total} documents: {asdict(stats)}")
    return 0


if __name__ == "__main__":  # pragma: no cover - script entrypoint
    sys.exit(main())
