"""Download the effect scripts named in the remote listing into a bin folder.

The listing is a plain-text file whose first whitespace-separated column is
the script name; each script is saved as `<bin_dir>/<prefix><script>` and
made executable.
"""

from __future__ import annotations

import urllib.parse
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from im_utils.fetcher import Fetcher
from im_utils.log_utils import get_logger

from ..constants import SCRIPT_FILE_MODE, SCRIPT_PLACEHOLDER
from ..utils.exceptions import ImBatchError, ParseError, wrap_fetch_error
from ..utils.responses import BatchResult
from ..utils.text import sanitize_filename

logger = get_logger(__name__)


@dataclass
class DownloadOutcome:
    script: str
    path: Path
    size: int = 0
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict[str, Any]:
        return {"script": self.script, "path": str(self.path), "size": self.size, "ok": self.ok, "error": self.error}


@dataclass
class UpdateReport:
    scripts: list[str] = field(default_factory=list)
    outcomes: list[DownloadOutcome] = field(default_factory=list)

    @property
    def failed(self) -> list[DownloadOutcome]:
        return [o for o in self.outcomes if not o.ok]

    def to_result(self, error: str | None = None) -> BatchResult:
        failed = len(self.failed)
        return BatchResult.with_stats(
            total=len(self.outcomes),
            success_count=len(self.outcomes) - failed,
            failed_count=failed,
            items=[o.to_dict() for o in self.outcomes],
            error=error,
            listed=len(self.scripts),
        )


def parse_script_list(text: str) -> list[str]:
    """First column of every non-blank line, listing order kept, duplicates dropped."""
    seen: dict[str, None] = {}
    for line in (text or "").splitlines():
        parts = line.split()
        if parts:
            seen.setdefault(parts[0], None)
    return list(seen)


def render_download_url(template: str, script: str) -> str:
    return template.replace(SCRIPT_PLACEHOLDER, urllib.parse.quote(script, safe=""))


def script_path(bin_dir: Path, script: str, prefix: str = "im-") -> Path:
    return Path(bin_dir) / sanitize_filename(f"{prefix}{script}")


def fetch_script_list(fetcher: Fetcher, list_url: str) -> list[str]:
    """Fetch and parse the listing.

    Raises:
        NetworkError: The listing could not be downloaded.
        ParseError: The listing holds no script name.
    """
    try:
        text = fetcher.fetch_text(list_url)
    except (OSError, ValueError) as e:
        raise wrap_fetch_error(e, list_url, fetcher.timeout_sec) from e
    scripts = parse_script_list(text)
    if not scripts:
        raise ParseError("script listing", f"no script names in {list_url}")
    return scripts


def update_scripts(
    bin_dir: Path,
    *,
    list_url: str,
    download_url: str,
    fetcher: Fetcher,
    prefix: str = "im-",
    only: Iterable[str] | None = None,
    report: UpdateReport | None = None,
) -> UpdateReport:
    """Download every listed script (or the `only` subset) into `bin_dir`.

    A failed download is logged and recorded; the loop goes on with the
    next script. Listing failures propagate.
    """
    report = report if report is not None else UpdateReport()
    report.scripts = fetch_script_list(fetcher, list_url)

    wanted = list(report.scripts)
    if only:
        selected = set(only)
        unknown = sorted(selected.difference(report.scripts))
        for name in unknown:
            logger.warning("[UPDATE] %s is not in the listing", name)
        wanted = [s for s in wanted if s in selected]

    bin_dir = Path(bin_dir)
    bin_dir.mkdir(parents=True, exist_ok=True)

    for script in wanted:
        logger.info("downloading %s", script)
        dest = script_path(bin_dir, script, prefix)
        outcome = DownloadOutcome(script=script, path=dest)
        url = render_download_url(download_url, script)
        try:
            outcome.size = fetcher.download(url, dest, mode=SCRIPT_FILE_MODE)
        except (OSError, ValueError) as e:
            err: ImBatchError = wrap_fetch_error(e, url, fetcher.timeout_sec)
            outcome.error = str(err)
            logger.warning("[UPDATE] %s failed: %s", script, err)
        report.outcomes.append(outcome)

    logger.info(
        "[UPDATE] done: %d downloaded, %d failed (%s)",
        len(report.outcomes) - len(report.failed), len(report.failed), bin_dir,
    )
    return report
