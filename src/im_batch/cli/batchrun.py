# batchrun.py
# Command-line front-end of the batch runner

from __future__ import annotations

import argparse
import sys

from im_utils.log_utils import configure_logging, get_logger
from im_utils.settings import SETTINGS

from ..constants import (
    BATCHRUN_USAGE,
    EXIT_ABORTED,
    EXIT_CONFIG_ERROR,
    EXIT_INTERRUPTED,
    EXIT_OK,
)
from ..utils.exceptions import ConfigError, SubprocessError
from ..utils.responses import BatchResult
from .batch import BatchReport, JobConfig, run_batch

logger = get_logger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


class _ArgumentParser(argparse.ArgumentParser):
    """argparse that reports bad flags as ConfigError instead of exiting with 2."""

    def error(self, message: str):  # type: ignore[override]
        raise ConfigError("arguments", message)


def build_parser() -> argparse.ArgumentParser:
    ap = _ArgumentParser(prog="batchrun", usage=BATCHRUN_USAGE, add_help=False, allow_abbrev=False)
    ap.add_argument("-h", "-help", "--help", dest="help", action="store_true")
    ap.add_argument("-c", "--command", dest="command")
    ap.add_argument("-i", "--inputfolder", dest="inputfolder")
    ap.add_argument("-o", "--outputfolder", dest="outputfolder")
    ap.add_argument("-f", "--format", dest="formats")
    ap.add_argument("-s", "--suffix", dest="suffix")
    ap.add_argument("-p", "--path2imagemagick", dest="path2imagemagick")
    ap.add_argument("-t", "--timeout", dest="timeout", type=float)
    ap.add_argument("--fail-fast", dest="fail_fast", action="store_true", default=SETTINGS.batch.fail_fast)
    ap.add_argument("--dry-run", dest="dry_run", action="store_true")
    ap.add_argument("--json", dest="json", action="store_true")
    ap.add_argument("--log-level", dest="log_level", type=str.upper, choices=LOG_LEVELS)
    return ap


def _report_config_error(err: ConfigError) -> None:
    logger.error("[CONFIG] %s", err)
    print(f"\n--- {err} ---\n", file=sys.stderr)
    print(BATCHRUN_USAGE, file=sys.stderr)


def _run(argv: list[str] | None) -> int:
    try:
        args = build_parser().parse_args(argv)
    except ConfigError as e:
        _report_config_error(e)
        return EXIT_CONFIG_ERROR

    if args.help:
        print(BATCHRUN_USAGE)
        return EXIT_OK

    if args.log_level:
        configure_logging(args.log_level, force=True)

    timeout = args.timeout if args.timeout is not None else SETTINGS.batch.timeout_sec
    report = BatchReport()
    try:
        cfg = JobConfig.from_options(
            command=args.command,
            inputfolder=args.inputfolder,
            outputfolder=args.outputfolder,
            formats=args.formats,
            suffix=args.suffix,
            path2imagemagick=args.path2imagemagick,
            timeout=timeout,
            fail_fast=args.fail_fast,
            dry_run=args.dry_run,
        )
        run_batch(cfg, report=report)
    except ConfigError as e:
        _report_config_error(e)
        if args.json:
            print(BatchResult.with_stats(0, 0, 0, error=str(e)).to_json())
        return EXIT_CONFIG_ERROR
    except SubprocessError as e:
        logger.error("[ABORT] %s", e)
        if args.json:
            print(report.to_result(error=str(e)).to_json())
        return EXIT_ABORTED

    if args.json:
        print(report.to_result().to_json())
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    try:
        return _run(argv)
    except KeyboardInterrupt:
        print("\n[Aborted]", file=sys.stderr)
        return EXIT_INTERRUPTED


if __name__ == "__main__":
    sys.exit(main())
