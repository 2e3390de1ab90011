"""Job configuration for the batch runner.

`JobConfig.from_options` turns raw CLI/UI strings into a typed config;
`validate_job_config` checks the folders and returns the resolved config
that the runner iterates with.
"""

from __future__ import annotations

import dataclasses
import os
import shlex
from dataclasses import dataclass
from pathlib import Path

from im_utils.log_utils import get_logger

from ...utils.exceptions import ConfigError
from ...utils.text import split_tokens

logger = get_logger(__name__)


@dataclass(frozen=True)
class JobConfig:
    """Immutable batch configuration.

    Attributes:
        command: Command tokens run per image, before the two file arguments
        input_folder: Folder to scan (None = current directory)
        output_folder: Folder receiving results (None = input folder)
        formats: Lower-cased filter tokens; empty means every file
        suffix: Output extension override, without the dot
        imagemagick_path: Folder prepended to PATH for the command
        timeout_sec: Per-invocation limit (None = wait forever)
        fail_fast: Stop at the first failed invocation
        dry_run: Log invocations without running them
    """

    command: tuple[str, ...]
    input_folder: Path | None = None
    output_folder: Path | None = None
    formats: tuple[str, ...] = ()
    suffix: str | None = None
    imagemagick_path: Path | None = None
    timeout_sec: float | None = None
    fail_fast: bool = False
    dry_run: bool = False

    @classmethod
    def from_options(
        cls,
        command: str | None,
        inputfolder: str | None = None,
        outputfolder: str | None = None,
        formats: str | None = None,
        suffix: str | None = None,
        path2imagemagick: str | None = None,
        timeout: float | None = None,
        fail_fast: bool = False,
        dry_run: bool = False,
    ) -> JobConfig:
        """Build a config from raw option strings.

        Raises:
            ConfigError: If the command is missing or cannot be tokenized,
                or the suffix/timeout values are malformed.
        """
        return cls(
            command=parse_command(command),
            input_folder=Path(inputfolder).expanduser() if inputfolder else None,
            output_folder=Path(outputfolder).expanduser() if outputfolder else None,
            formats=parse_format_filter(formats),
            suffix=normalize_suffix(suffix),
            imagemagick_path=Path(path2imagemagick).expanduser() if path2imagemagick else None,
            timeout_sec=normalize_timeout(timeout),
            fail_fast=bool(fail_fast),
            dry_run=bool(dry_run),
        )


def parse_command(raw: str | None) -> tuple[str, ...]:
    """Tokenize the command line with POSIX shell rules.

    Quoted arguments stay whole, so color specs like "rgb(255,0,0)" work.
    """
    if raw is None or not raw.strip():
        raise ConfigError("command", "missing required argument -c")
    if raw.lstrip().startswith("-"):
        raise ConfigError("command", "must not begin with '-'", raw)
    try:
        tokens = shlex.split(raw)
    except ValueError as e:
        raise ConfigError("command", str(e), raw) from e
    if not tokens:
        raise ConfigError("command", "missing required argument -c")
    return tuple(tokens)


def parse_format_filter(raw: str | None) -> tuple[str, ...]:
    """Split "jpg,png" / "jpg png" into lower-cased tokens, order kept, no duplicates."""
    seen: dict[str, None] = {}
    for tok in split_tokens(raw):
        seen.setdefault(tok.lower(), None)
    return tuple(seen)


def normalize_suffix(raw: str | None) -> str | None:
    if raw is None:
        return None
    suffix = raw.strip()
    if suffix.startswith("."):
        suffix = suffix[1:]
    if not suffix:
        raise ConfigError("suffix", "must not be empty", raw)
    if "/" in suffix or "\\" in suffix or os.sep in suffix:
        raise ConfigError("suffix", "must not contain path separators", raw)
    return suffix


def normalize_timeout(raw: float | str | None) -> float | None:
    if raw is None or raw == "":
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError) as e:
        raise ConfigError("timeout", "must be a number of seconds", raw) from e
    if value < 0:
        raise ConfigError("timeout", "must not be negative", raw)
    # 0 keeps the historical "no timeout" behaviour
    return value or None


def _check_input_folder(folder: Path) -> None:
    if not folder.exists():
        raise ConfigError("inputfolder", "does not exist", folder)
    if not folder.is_dir():
        raise ConfigError("inputfolder", "is not a directory", folder)
    if not os.access(folder, os.R_OK | os.X_OK):
        raise ConfigError("inputfolder", "is not readable", folder)


def _prepare_output_folder(folder: Path) -> None:
    if not folder.exists():
        try:
            folder.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ConfigError("outputfolder", f"could not be created ({e.strerror or e})", folder) from e
        logger.info("[BATCH] created output folder %s", folder)
        return
    if not folder.is_dir():
        raise ConfigError("outputfolder", "is not a directory", folder)
    if not os.access(folder, os.R_OK):
        raise ConfigError("outputfolder", "is not readable", folder)


def validate_job_config(cfg: JobConfig, cwd: Path | None = None) -> JobConfig:
    """Check every option and return the config with folders resolved.

    Creates the output folder when it does not exist yet. Nothing else
    on disk is touched.

    Raises:
        ConfigError: On the first invalid option.
    """
    if not cfg.command:
        raise ConfigError("command", "missing required argument -c")
    if cfg.command[0].startswith("-"):
        raise ConfigError("command", "must not begin with '-'", " ".join(cfg.command))

    if cfg.imagemagick_path is not None and not cfg.imagemagick_path.is_dir():
        raise ConfigError("path2imagemagick", "is not a directory", cfg.imagemagick_path)

    input_folder = cfg.input_folder or Path(cwd or Path.cwd())
    _check_input_folder(input_folder)

    output_folder = cfg.output_folder or input_folder
    _prepare_output_folder(output_folder)

    return dataclasses.replace(cfg, input_folder=input_folder, output_folder=output_folder)
