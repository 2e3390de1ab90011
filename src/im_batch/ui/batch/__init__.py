"""Streamlit-free helpers behind the batch UI."""

from .helpers import BatchForm, build_batchrun_cmd, build_update_cmd, summarize_result
from .runner import BatchLock, detect_other_execution, run_batch_with_form, run_update

__all__ = [
    "BatchForm",
    "BatchLock",
    "build_batchrun_cmd",
    "build_update_cmd",
    "detect_other_execution",
    "run_batch_with_form",
    "run_update",
    "summarize_result",
]
