# CLI Batch Processing Module
"""Batch runner: one external command invocation per image of a folder."""

from .config import JobConfig, validate_job_config
from .runner import BatchReport, Invocation, run_batch

__all__ = [
    "BatchReport",
    "Invocation",
    "JobConfig",
    "run_batch",
    "validate_job_config",
]
