"""Form → command translation for the batch UI.

Kept free of Streamlit imports so it can be unit tested and reused by
headless callers.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import Any

from ...utils.responses import OperationResult
from ...utils.text import split_tokens


@dataclass
class BatchForm:
    """Values of the batch form, one field per batchrun option."""
    command: str = ""
    inputfolder: str = ""
    outputfolder: str = ""
    formats: str = ""
    suffix: str = ""
    path2imagemagick: str = ""
    timeout: float = 0.0
    fail_fast: bool = False
    dry_run: bool = False


def build_batchrun_cmd(form: BatchForm, python: str | None = None) -> list[str]:
    """Build the batchrun argv for a form; blank fields are left out.

    The command always asks for the JSON summary line.
    """
    cmd = [python or sys.executable, "-m", "im_batch.cli.batchrun", "-c", form.command.strip()]
    for flag, value in (
        ("-i", form.inputfolder),
        ("-o", form.outputfolder),
        ("-f", form.formats),
        ("-s", form.suffix),
        ("-p", form.path2imagemagick),
    ):
        value = (value or "").strip()
        if value:
            cmd.extend([flag, value])
    if form.timeout and form.timeout > 0:
        cmd.extend(["-t", f"{form.timeout:g}"])
    if form.fail_fast:
        cmd.append("--fail-fast")
    if form.dry_run:
        cmd.append("--dry-run")
    cmd.append("--json")
    return cmd


def build_update_cmd(bin_dir: str = "", only: str = "", python: str | None = None) -> list[str]:
    cmd = [python or sys.executable, "-m", "im_batch.cli.update_scripts"]
    if bin_dir.strip():
        cmd.extend(["--bin-dir", bin_dir.strip()])
    names = split_tokens(only)
    if names:
        cmd.extend(["--only", *names])
    cmd.append("--json")
    return cmd


def summarize_result(result: OperationResult) -> dict[str, Any]:
    """Flatten a BatchResult payload into the numbers and rows the UI shows."""
    data = result.data if isinstance(result.data, dict) else {}
    items = data.get("items") or []
    return {
        "success": result.success,
        "error": result.error,
        "total": int(data.get("total") or 0),
        "success_count": int(data.get("success_count") or 0),
        "failed_count": int(data.get("failed_count") or 0),
        "skipped": int(result.metadata.get("skipped") or 0),
        "failures": [it for it in items if isinstance(it, dict) and not it.get("ok", True)],
        "items": items,
    }
