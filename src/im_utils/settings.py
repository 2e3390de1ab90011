"""
settings.py
Central, immutable configuration (dataclasses) for every module.
Values are read from IM_* environment variables at import time.
"""

from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
import os

# Checkout root (src/im_utils/settings.py -> ../..); downloaded scripts live in its bin/
PROJECT_ROOT = Path(__file__).resolve().parents[2]

# ---------------- Logging ----------------
@dataclass(frozen=True)
class LoggingConfig:
    level: str = os.getenv("IM_LOG_LEVEL", "INFO")
    json: bool = os.getenv("IM_LOG_JSON", "0") == "1"
    log_file: str = os.getenv("IM_LOG_FILE", "")
    max_bytes: int = int(os.getenv("IM_LOG_MAX_BYTES", "1048576"))      # 1MB
    backup_count: int = int(os.getenv("IM_LOG_BACKUP_COUNT", "3"))

# ---------------- Batch ----------------
@dataclass(frozen=True)
class BatchConfig:
    # 0 = wait forever
    timeout_sec: float = float(os.getenv("IM_BATCH_TIMEOUT", "0"))
    fail_fast: bool = os.getenv("IM_BATCH_FAIL_FAST", "0") == "1"

# ---------------- Script updater ----------------
@dataclass(frozen=True)
class UpdaterConfig:
    list_url: str = os.getenv(
        "IM_SCRIPT_LIST_URL", "http://www.fmwconcepts.com/imagemagick/script_list.txt"
    )
    download_url: str = os.getenv(
        "IM_SCRIPT_DOWNLOAD_URL",
        "http://www.fmwconcepts.com/imagemagick/downloadcounter.php?scriptname={script}&dirname={script}",
    )
    bin_dir: str = os.getenv("IM_BIN_DIR", str(PROJECT_ROOT / "bin"))
    prefix: str = os.getenv("IM_SCRIPT_PREFIX", "im-")
    timeout_sec: int = int(os.getenv("IM_FETCH_TIMEOUT", "30"))

# ---------------- UI ----------------
@dataclass(frozen=True)
class UIConfig:
    port: str = os.getenv("IM_UI_PORT", "8501")
    subprocess_timeout: int = int(os.getenv("IM_UI_SUBPROCESS_TIMEOUT", "900"))

# ---------------- Global settings ----------------
@dataclass(frozen=True)
class Settings:
    logging: LoggingConfig = LoggingConfig()
    batch: BatchConfig = BatchConfig()
    updater: UpdaterConfig = UpdaterConfig()
    ui: UIConfig = UIConfig()

SETTINGS = Settings()
