from __future__ import annotations

import os
import urllib.request
from pathlib import Path

from .log_utils import get_logger

logger = get_logger(__name__)

_DEFAULT_HEADERS = {
    "User-Agent": "im-batch/0.1 (+https://pypi.org/project/im-batch/)",
    "Accept": "text/plain,application/octet-stream,*/*;q=0.8",
    "Connection": "close",
}


class Fetcher:
    """Small HTTP helper for plain-text listings and script downloads.

    Errors from urllib (URLError, HTTPError, socket timeouts) propagate to the
    caller, which decides whether a failure is fatal.
    """

    def __init__(self, timeout_sec: int = 30, headers: dict[str, str] | None = None):
        self.timeout_sec = timeout_sec
        self.headers = dict(_DEFAULT_HEADERS)
        if headers:
            self.headers.update(headers)

    def fetch_bytes(self, url: str) -> bytes:
        if not url or not url.startswith(("http://", "https://")):
            raise ValueError(f"unsupported URL: {url!r}")
        req = urllib.request.Request(url, headers=self.headers)
        with urllib.request.urlopen(req, timeout=self.timeout_sec) as resp:
            return resp.read()

    def fetch_text(self, url: str) -> str:
        raw = self.fetch_bytes(url)
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError:
            return raw.decode("latin-1", errors="ignore")

    def download(self, url: str, dest: Path, mode: int | None = None) -> int:
        """Download `url` into `dest` and return the number of bytes written.

        The payload is written to a sibling temp file first and renamed, so an
        interrupted transfer never leaves a truncated script behind.
        """
        data = self.fetch_bytes(url)
        dest = Path(dest)
        dest.parent.mkdir(parents=True, exist_ok=True)
        tmp = dest.with_name(dest.name + ".part")
        try:
            tmp.write_bytes(data)
            if mode is not None:
                os.chmod(tmp, mode)
            os.replace(tmp, dest)
        finally:
            tmp.unlink(missing_ok=True)
        logger.debug("[FETCH] %s -> %s (%d bytes)", url, dest, len(data))
        return len(data)


__all__ = ["Fetcher"]
