from __future__ import annotations

import contextlib
import csv
import io
import json
import os
import subprocess
import sys
from datetime import datetime
from pathlib import Path
from typing import Any

from im_utils.log_utils import get_logger
from im_utils.settings import SETTINGS

from ...constants import LOCK_FILENAME, RESULTS_DIR
from ...utils.exceptions import ImBatchError
from ...utils.responses import OperationResult, parse_subprocess_output
from .helpers import BatchForm, build_batchrun_cmd, build_update_cmd

logger = get_logger(__name__)

# Guards a single batch execution launched from the UI
LOCK_PATH = Path(RESULTS_DIR) / LOCK_FILENAME

# src/ root, so `python -m im_batch...` works from a source checkout too
_SRC_ROOT = str(Path(__file__).resolve().parents[3])


def _child_env() -> dict[str, str]:
    env = os.environ.copy()
    cur_pp = env.get("PYTHONPATH", "")
    if _SRC_ROOT not in cur_pp.split(os.pathsep):
        env["PYTHONPATH"] = f"{_SRC_ROOT}{os.pathsep}{cur_pp}" if cur_pp else _SRC_ROOT
    return env


def run_cmd(cmd, timeout: float | None = 5, cwd: str | None = None, env: dict | None = None, check: bool = False):
    """Small wrapper around subprocess.run to centralize capture/timeouts.

    Propagates subprocess.TimeoutExpired so callers that expect timeouts can
    handle them.
    """
    return subprocess.run(cmd, capture_output=True, text=True, check=check, timeout=timeout, cwd=cwd, env=env)


def _pid_alive_windows(pid: int) -> bool:
    out = run_cmd(["tasklist", "/FI", f"PID eq {pid}", "/FO", "CSV", "/NH"], timeout=2)
    stdout = (out.stdout or "").strip()
    if not stdout or stdout.lower().startswith("info:"):
        return False
    row = next(csv.reader(io.StringIO(stdout)), [])
    return len(row) >= 2 and row[1].strip().isdigit() and int(row[1].strip()) == pid


def pid_alive(pid: int) -> bool:
    if pid <= 0:
        return False
    if sys.platform.startswith("win"):
        try:
            return _pid_alive_windows(pid)
        except subprocess.TimeoutExpired:
            # Slow system: assume alive
            return True
        except OSError:
            return False
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    except PermissionError:
        return True
    return True


def _read_lock(lock_path: Path) -> dict[str, Any]:
    try:
        data = json.loads(lock_path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


def detect_other_execution(lock_path: Path = LOCK_PATH) -> dict[str, Any] | None:
    """Return {pid, started, lock_path} when a live execution holds the lock.

    Stale locks (dead PID or unreadable metadata) are removed.
    """
    if not lock_path.exists():
        return None
    data = _read_lock(lock_path)
    try:
        pid = int(data.get("pid") or 0)
    except (TypeError, ValueError):
        pid = 0
    if pid_alive(pid):
        return {"pid": pid, "started": str(data.get("started") or ""), "lock_path": str(lock_path)}
    logger.info("[UI] removing stale lock %s (pid=%s)", lock_path, pid or "?")
    with contextlib.suppress(FileNotFoundError):
        lock_path.unlink()
    return None


class BatchLock:
    """Exclusive lock file held while a UI-launched batch runs."""

    def __init__(self, path: Path = LOCK_PATH):
        self.path = Path(path)

    def __enter__(self) -> BatchLock:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        meta = {"pid": os.getpid(), "started": datetime.now().isoformat(timespec="seconds")}
        for _ in (1, 2):
            try:
                with open(self.path, "x", encoding="utf-8") as fp:
                    fp.write(json.dumps(meta, ensure_ascii=False))
                return self
            except FileExistsError:
                other = detect_other_execution(self.path)
                if other:
                    raise ImBatchError("Another batch is already running", details=other)
        raise ImBatchError("Could not acquire the batch lock", details={"lock_path": str(self.path)})

    def __exit__(self, _exc_type, _exc, _tb):
        with contextlib.suppress(FileNotFoundError):
            self.path.unlink()
        return False


def _run_json_command(cmd: list[str], timeout: float | None) -> OperationResult:
    logger.info("[UI] running: %s", " ".join(cmd))
    try:
        proc = run_cmd(cmd, timeout=timeout, env=_child_env())
    except subprocess.TimeoutExpired:
        return OperationResult.fail(f"Timed out after {timeout}s")
    except OSError as e:
        return OperationResult.fail(f"Could not start {cmd[0]}: {e}")
    result = parse_subprocess_output(proc.stdout)
    result.metadata.setdefault("returncode", proc.returncode)
    if proc.stderr:
        result.metadata.setdefault("stderr_tail", proc.stderr[-2000:])
    return result


def run_batch_with_form(
    form: BatchForm,
    timeout: float | None = None,
    lock_path: Path = LOCK_PATH,
) -> OperationResult:
    """Run batchrun for `form` in a subprocess, one UI execution at a time.

    Streamlit-free so it can be driven headless.
    """
    timeout = timeout if timeout is not None else SETTINGS.ui.subprocess_timeout
    try:
        with BatchLock(lock_path):
            return _run_json_command(build_batchrun_cmd(form), timeout)
    except ImBatchError as e:
        return OperationResult.fail(str(e))


def run_update(bin_dir: str = "", only: str = "", timeout: float | None = None) -> OperationResult:
    timeout = timeout if timeout is not None else SETTINGS.ui.subprocess_timeout
    return _run_json_command(build_update_cmd(bin_dir, only), timeout)
