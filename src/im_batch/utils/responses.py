"""JSON envelope printed by `batchrun --json` and `im-update-scripts --json`.

The envelope is the last line on stdout; everything else (logs) goes to
stderr. The UI parses it back with `parse_subprocess_output`:

    {"success": true, "data": {"total": 2, "success_count": 2, "failed_count": 0}}
    {"success": false, "error": "Invalid inputfolder: does not exist"}
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from typing import Any

_TAIL_CHARS = 200


@dataclass
class OperationResult:
    success: bool
    data: Any = None
    error: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, data: Any = None, **metadata: Any) -> OperationResult:
        return cls(True, data, None, metadata)

    @classmethod
    def fail(cls, error: str, data: Any = None, **metadata: Any) -> OperationResult:
        """Failed result; `data` may carry what was done before the failure."""
        return cls(False, data, error, metadata)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    def to_json(self, ensure_ascii: bool = False) -> str:
        # Keys without a value are left out to keep the line short
        payload: dict[str, Any] = {"success": self.success}
        for key, value, keep in (
            ("data", self.data, self.data is not None),
            ("error", self.error, bool(self.error) and not self.success),
            ("metadata", self.metadata, bool(self.metadata)),
        ):
            if keep:
                payload[key] = value
        return json.dumps(payload, ensure_ascii=ensure_ascii)

    @classmethod
    def from_json(cls, raw: str) -> OperationResult:
        """Raises json.JSONDecodeError on malformed input."""
        payload = json.loads(raw)
        return cls(
            success=bool(payload.get("success", False)),
            data=payload.get("data"),
            error=payload.get("error"),
            metadata=payload.get("metadata") or {},
        )


@dataclass
class BatchResult(OperationResult):
    """Counts plus per-item rows for a batch of invocations or downloads."""

    @classmethod
    def with_stats(
        cls,
        total: int,
        success_count: int,
        failed_count: int,
        items: list[Any] | None = None,
        error: str | None = None,
        **metadata: Any,
    ) -> BatchResult:
        """Build the envelope of a batch.

        Failed items do not make the batch fail; only `error` does (set when
        the batch itself was aborted or could not start).
        """
        stats: dict[str, Any] = dict(total=total, success_count=success_count, failed_count=failed_count)
        if items is not None:
            stats["items"] = items
        return cls(error is None, stats, error, metadata)


def parse_subprocess_output(output: str | None) -> OperationResult:
    """Return the last JSON object line of `output`, skipping log noise."""
    text = output or ""
    candidates = [ln.strip() for ln in text.splitlines()]
    for line in reversed(candidates):
        if not (line.startswith("{") and line.endswith("}")):
            continue
        try:
            return OperationResult.from_json(line)
        except json.JSONDecodeError:
            continue
    return OperationResult.fail(f"No valid JSON found in output: {text[:_TAIL_CHARS]}")
