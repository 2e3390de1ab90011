"""Project exceptions.

    ImBatchError
    ├── ConfigError          bad or missing option, checked before any work
    ├── NetworkError         listing or script download failed
    │   ├── TimeoutError
    │   └── ConnectionError
    ├── DataError
    │   └── ParseError       e.g. a script listing with no names
    └── SubprocessError      an invocation failed under --fail-fast

`TimeoutError` and `ConnectionError` shadow the builtins inside this module;
import them under another name (`FetchTimeoutError`, `FetchConnectionError`).
Every error keeps its constructor arguments in `__reduce__` so it pickles.
"""

from __future__ import annotations

import socket
import urllib.error

_STDERR_PREVIEW = 500


class ImBatchError(Exception):
    """Base class; `details` is appended to the message as key=value pairs."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if not self.details:
            return self.message
        extra = ", ".join(f"{k}={v}" for k, v in self.details.items())
        return f"{self.message} ({extra})"


class ConfigError(ImBatchError):
    def __init__(self, option: str, reason: str, value: object = None):
        details = {"option": option}
        if value is not None:
            details["value"] = str(value)
        super().__init__(f"Invalid {option}: {reason}", details=details)
        self.option = option
        self.reason = reason
        self.value = value

    def __reduce__(self):
        return (type(self), (self.option, self.reason, self.value))


class NetworkError(ImBatchError):
    pass


class TimeoutError(NetworkError):
    def __init__(self, operation: str, timeout_sec: float = 0):
        super().__init__(
            f"Timeout after {timeout_sec}s in: {operation}",
            details={"operation": operation, "timeout_sec": timeout_sec},
        )
        self.operation = operation
        self.timeout_sec = timeout_sec

    def __reduce__(self):
        return (type(self), (self.operation, self.timeout_sec))


class ConnectionError(NetworkError):
    def __init__(self, url: str, reason: str = ""):
        message = f"Connection failed: {url}" + (f" - {reason}" if reason else "")
        super().__init__(message, details={"url": url})
        self.url = url
        self.reason = reason

    def __reduce__(self):
        return (type(self), (self.url, self.reason))


class DataError(ImBatchError):
    pass


class ParseError(DataError):
    def __init__(self, data_type: str, reason: str = ""):
        message = f"Could not parse {data_type}" + (f": {reason}" if reason else "")
        super().__init__(message, details={"data_type": data_type})
        self.data_type = data_type
        self.reason = reason

    def __reduce__(self):
        return (type(self), (self.data_type, self.reason))


class SubprocessError(ImBatchError):
    """An external command failed; `stderr` is kept whole, the message shows its head."""

    def __init__(self, command: str, exit_code: int, stderr: str = ""):
        message = f"Subprocess failed (exit code {exit_code}): {command}"
        if stderr:
            message = f"{message}\n{stderr[:_STDERR_PREVIEW]}"
        super().__init__(message, details={"command": command, "exit_code": exit_code})
        self.command = command
        self.exit_code = exit_code
        self.stderr = stderr

    def __reduce__(self):
        return (type(self), (self.command, self.exit_code, self.stderr))


def wrap_fetch_error(error: Exception, url: str = "", timeout_sec: float = 0) -> ImBatchError:
    """Map an error raised while fetching `url` onto the project hierarchy.

    HTTP status errors and unreachable hosts become `ConnectionError`,
    socket timeouts (bare or inside a URLError) become `TimeoutError`, and
    anything else becomes a plain `NetworkError`. Project errors pass through.
    """
    if isinstance(error, ImBatchError):
        return error
    if isinstance(error, urllib.error.HTTPError):
        return ConnectionError(url or error.geturl() or "unknown URL", f"HTTP {error.code} {error.reason}")
    reason = getattr(error, "reason", None)
    # socket.timeout is the builtin TimeoutError, not the class above
    if isinstance(error, socket.timeout) or isinstance(reason, socket.timeout):
        return TimeoutError(f"fetching {url}" if url else "fetch", timeout_sec=timeout_sec)
    if isinstance(error, urllib.error.URLError):
        return ConnectionError(url or "unknown URL", str(reason or error))
    return NetworkError(f"{url}: {error}" if url else str(error))
