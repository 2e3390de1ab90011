# update_scripts.py
# Refresh the local copies of the effect scripts from the remote listing

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from im_utils.fetcher import Fetcher
from im_utils.log_utils import configure_logging, get_logger
from im_utils.settings import SETTINGS

from ..constants import EXIT_CONFIG_ERROR, EXIT_INTERRUPTED, EXIT_OK
from ..utils.exceptions import ImBatchError
from .updater import UpdateReport, update_scripts

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    conf = SETTINGS.updater
    ap = argparse.ArgumentParser(
        prog="im-update-scripts",
        description="Download the ImageMagick effect scripts listed remotely into a bin folder",
    )
    ap.add_argument("--bin-dir", default=conf.bin_dir, help=f"Target folder (default: {conf.bin_dir})")
    ap.add_argument("--list-url", default=conf.list_url, help="URL of the script listing")
    ap.add_argument("--download-url", default=conf.download_url,
                    help="Download URL template; {script} is replaced by the script name")
    ap.add_argument("--prefix", default=conf.prefix, help=f"File name prefix (default: {conf.prefix})")
    ap.add_argument("--only", nargs="+", metavar="NAME", help="Download only these scripts")
    ap.add_argument("--timeout", type=int, default=conf.timeout_sec, help="HTTP timeout in seconds")
    ap.add_argument("--json", action="store_true", help="Print a JSON summary line on stdout")
    ap.add_argument("--log-level", type=str.upper, choices=("DEBUG", "INFO", "WARNING", "ERROR"))
    return ap


def _run(argv: list[str] | None) -> int:
    args = build_parser().parse_args(argv)
    if args.log_level:
        configure_logging(args.log_level, force=True)

    report = UpdateReport()
    try:
        update_scripts(
            Path(args.bin_dir),
            list_url=args.list_url,
            download_url=args.download_url,
            fetcher=Fetcher(timeout_sec=args.timeout),
            prefix=args.prefix,
            only=args.only,
            report=report,
        )
    except ImBatchError as e:
        logger.error("[UPDATE] %s", e)
        if args.json:
            print(report.to_result(error=str(e)).to_json())
        return EXIT_CONFIG_ERROR

    failed = report.failed
    if args.json:
        error = f"{len(failed)} download(s) failed" if failed else None
        print(report.to_result(error=error).to_json())
    return EXIT_CONFIG_ERROR if failed else EXIT_OK


def main(argv: list[str] | None = None) -> int:
    try:
        return _run(argv)
    except KeyboardInterrupt:
        print("\n[Aborted]", file=sys.stderr)
        return EXIT_INTERRUPTED


if __name__ == "__main__":
    sys.exit(main())
