from __future__ import annotations

import contextlib
import pathlib
import subprocess
import sys
import webbrowser

from im_utils.settings import SETTINGS

# Launcher for `python -m im_batch.ui.launch` or the `im-batch-ui` entry point.
# Runs `streamlit run` on app.py and tries to open the browser.


def build_streamlit_cmd(app_path: pathlib.Path, port: str) -> list[str]:
    extra_flags = [
        "--browser.gatherUsageStats=false",
        "--server.headless=true",
        f"--server.port={port}",
    ]
    return [sys.executable, "-m", "streamlit", "run", str(app_path), *extra_flags]


def main():  # pragma: no cover
    app_path = pathlib.Path(__file__).resolve().with_name("app.py")
    if not app_path.exists():
        print("[ERROR] app.py not found at", app_path, file=sys.stderr)
        return 1
    port = SETTINGS.ui.port
    cmd = build_streamlit_cmd(app_path, port)
    print("[INFO] Starting UI:", " ".join(cmd))
    with contextlib.suppress(webbrowser.Error):
        webbrowser.open(f"http://localhost:{port}", new=2)
    return subprocess.call(cmd)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
