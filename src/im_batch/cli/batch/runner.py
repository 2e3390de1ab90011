from __future__ import annotations

import os
import shlex
import subprocess
import time
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from im_utils.log_utils import get_logger

from ...utils.exceptions import SubprocessError
from ...utils.responses import BatchResult
from .config import JobConfig, validate_job_config

logger = get_logger(__name__)


@dataclass
class Invocation:
    """One run of the external command on one image."""
    source: Path
    output: Path
    argv: list[str]
    returncode: int | None = None
    elapsed: float = 0.0
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and not self.returncode

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": str(self.source),
            "output": str(self.output),
            "returncode": self.returncode,
            "elapsed_sec": round(self.elapsed, 3),
            "ok": self.ok,
            "error": self.error,
        }


@dataclass
class BatchReport:
    candidates: int = 0
    skipped: int = 0
    invocations: list[Invocation] = field(default_factory=list)
    aborted: bool = False
    dry_run: bool = False

    @property
    def processed(self) -> int:
        return len(self.invocations)

    @property
    def failed(self) -> list[Invocation]:
        return [inv for inv in self.invocations if not inv.ok]

    def to_result(self, error: str | None = None) -> BatchResult:
        failed = len(self.failed)
        return BatchResult.with_stats(
            total=self.processed,
            success_count=self.processed - failed,
            failed_count=failed,
            items=[inv.to_dict() for inv in self.invocations],
            error=error,
            candidates=self.candidates,
            skipped=self.skipped,
            aborted=self.aborted,
            dry_run=self.dry_run,
        )


def iter_candidates(folder: Path) -> Iterator[Path]:
    """Yield regular files of `folder` in directory-listing order (non-recursive)."""
    with os.scandir(folder) as it:
        for entry in it:
            try:
                is_file = entry.is_file()
            except OSError:
                is_file = False
            if not is_file:
                logger.debug("[BATCH] skip non-file entry %s", entry.path)
                continue
            yield Path(entry.path)


def matches_format(name: str, formats: Sequence[str]) -> bool:
    """Case-insensitive substring match of the file name against any filter token."""
    if not formats:
        return True
    lowered = name.lower()
    return any(tok in lowered for tok in formats)


def derive_output_path(source: Path, output_folder: Path, suffix: str | None = None) -> Path:
    """`{output_folder}/{name without final extension}.{suffix or own extension}`."""
    imgname = source.stem if source.suffix else source.name
    outsuffix = suffix if suffix is not None else source.suffix[1:]
    if not outsuffix:
        return output_folder / imgname
    return output_folder / f"{imgname}.{outsuffix}"


def build_argv(command: Sequence[str], source: Path, output: Path) -> list[str]:
    return [*command, str(source), str(output)]


def build_env(imagemagick_path: Path | None) -> dict[str, str] | None:
    """Environment for the child: PATH prefixed with the tool folder, or inherited as is."""
    if imagemagick_path is None:
        return None
    env = os.environ.copy()
    cur = env.get("PATH", "")
    env["PATH"] = f"{imagemagick_path}{os.pathsep}{cur}" if cur else str(imagemagick_path)
    return env


def invoke(inv: Invocation, env: dict[str, str] | None, timeout_sec: float | None) -> Invocation:
    """Run the invocation synchronously and record its outcome in place.

    The child shares our stdout/stderr. A missing executable or a timeout is
    recorded as an error instead of propagating.
    """
    start = time.monotonic()
    try:
        proc = subprocess.run(inv.argv, env=env, timeout=timeout_sec, check=False)
    except subprocess.TimeoutExpired:
        inv.error = f"timed out after {timeout_sec:g}s"
    except OSError as e:
        inv.error = f"could not start {inv.argv[0]}: {e.strerror or e}"
    else:
        inv.returncode = proc.returncode
        if proc.returncode:
            inv.error = f"exit code {proc.returncode}"
    inv.elapsed = time.monotonic() - start
    return inv


def run_batch(cfg: JobConfig, *, cwd: Path | None = None, report: BatchReport | None = None) -> BatchReport:
    """Run the configured command once per matching file of the input folder.

    Args:
        cfg: Job configuration (validated here before anything runs)
        cwd: Folder used when no input folder is configured
        report: Report to fill in; lets callers read partial results
            after a fail-fast abort

    Returns:
        The filled-in report.

    Raises:
        ConfigError: Invalid configuration; no file was processed.
        SubprocessError: An invocation failed and `fail_fast` is set.
    """
    cfg = validate_job_config(cfg, cwd=cwd)
    report = report if report is not None else BatchReport()
    report.dry_run = cfg.dry_run
    env = build_env(cfg.imagemagick_path)

    logger.info(
        "[BATCH] %s: %s -> %s (formats=%s, suffix=%s)",
        shlex.join(cfg.command), cfg.input_folder, cfg.output_folder,
        ",".join(cfg.formats) or "*", cfg.suffix or "<own>",
    )

    # Listing is taken up front: outputs may land in the same folder
    for source in list(iter_candidates(cfg.input_folder)):
        report.candidates += 1
        if not matches_format(source.name, cfg.formats):
            report.skipped += 1
            logger.debug("[BATCH] skip %s (format filter)", source.name)
            continue

        output = derive_output_path(source, cfg.output_folder, cfg.suffix)
        inv = Invocation(source=source, output=output, argv=build_argv(cfg.command, source, output))
        report.invocations.append(inv)

        if cfg.dry_run:
            logger.info("[DRY-RUN] %s", shlex.join(inv.argv))
            continue

        logger.info("[BATCH] %d: %s -> %s", report.processed, source.name, output.name)
        invoke(inv, env, cfg.timeout_sec)
        if inv.ok:
            continue
        logger.warning("[FAIL] %s: %s", source.name, inv.error)
        if cfg.fail_fast:
            report.aborted = True
            raise SubprocessError(shlex.join(inv.argv), inv.returncode if inv.returncode is not None else -1, inv.error or "")

    failed = report.failed
    logger.info(
        "[BATCH] done: %d processed, %d skipped, %d failed",
        report.processed, report.skipped, len(failed),
    )
    for inv in failed:
        logger.warning("[BATCH] failed: %s (%s)", inv.source, inv.error)
    return report
