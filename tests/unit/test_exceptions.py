"""Unit tests for im_batch.utils.exceptions module.

Tests for the custom exception hierarchy and fetch error wrapping.
"""
import pickle
import socket
import urllib.error

import pytest
from im_batch.utils.exceptions import (
    ImBatchError,
    ConfigError,
    NetworkError,
    TimeoutError as FetchTimeoutError,
    ConnectionError as FetchConnectionError,
    DataError,
    ParseError,
    SubprocessError,
    wrap_fetch_error,
)


class TestExceptionHierarchy:
    """Tests for exception class hierarchy."""

    def test_config_error_inherits_from_base(self):
        """Test ConfigError inherits from ImBatchError."""
        assert issubclass(ConfigError, ImBatchError)

    def test_network_error_inherits_from_base(self):
        """Test NetworkError inherits from ImBatchError."""
        assert issubclass(NetworkError, ImBatchError)

    def test_timeout_error_inherits_from_network_error(self):
        """Test TimeoutError inherits from NetworkError."""
        assert issubclass(FetchTimeoutError, NetworkError)

    def test_connection_error_inherits_from_network_error(self):
        """Test ConnectionError inherits from NetworkError."""
        assert issubclass(FetchConnectionError, NetworkError)

    def test_parse_error_inherits_from_data_error(self):
        """Test ParseError inherits from DataError."""
        assert issubclass(ParseError, DataError)
        assert issubclass(DataError, ImBatchError)

    def test_subprocess_error_inherits_from_base(self):
        """Test SubprocessError inherits from ImBatchError."""
        assert issubclass(SubprocessError, ImBatchError)

    def test_project_errors_do_not_shadow_builtins(self):
        """Test project TimeoutError/ConnectionError are not the builtins."""
        assert FetchTimeoutError is not TimeoutError
        assert not issubclass(FetchConnectionError, ConnectionError)


class TestExceptionConstruction:
    """Tests for exception construction and messages."""

    def test_base_exception_with_details(self):
        """Test details are appended to the message."""
        exc = ImBatchError("Base error", details={"k": "v"})
        assert str(exc) == "Base error (k=v)"

    def test_config_error_fields(self):
        """Test ConfigError keeps option, reason and value."""
        exc = ConfigError("inputfolder", "does not exist", "/nope")
        assert exc.option == "inputfolder"
        assert exc.reason == "does not exist"
        assert "inputfolder" in str(exc)
        assert "/nope" in str(exc)

    def test_config_error_without_value(self):
        """Test ConfigError message without a value."""
        exc = ConfigError("command", "missing required argument -c")
        assert "value" not in exc.details

    def test_timeout_with_duration(self):
        """Test TimeoutError reports the timeout."""
        exc = FetchTimeoutError("fetching listing", 30)
        assert "30" in str(exc)

    def test_connection_error_with_url(self):
        """Test ConnectionError with URL."""
        exc = FetchConnectionError("http://example.com", "refused")
        assert "example.com" in str(exc)
        assert "refused" in str(exc)

    def test_subprocess_error_with_exit_code(self):
        """Test SubprocessError with exit code."""
        exc = SubprocessError("im-vintage a.jpg out/a.jpg", 3, "boom")
        assert exc.exit_code == 3
        assert "exit code 3" in str(exc)

    def test_subprocess_error_truncates_stderr(self):
        """Test long stderr is cut in the message but kept on the attribute."""
        exc = SubprocessError("cmd", 1, "x" * 2000)
        assert len(exc.stderr) == 2000
        assert len(exc.message) < 700

    @pytest.mark.parametrize(
        "exc",
        [
            ConfigError("suffix", "must not be empty", ""),
            FetchTimeoutError("op", 5),
            FetchConnectionError("http://example.com", "refused"),
            SubprocessError("cmd", 2, "err"),
        ],
    )
    def test_pickle_round_trip(self, exc):
        """Test exceptions survive pickling (multiprocessing, logging queues)."""
        clone = pickle.loads(pickle.dumps(exc))
        assert type(clone) is type(exc)
        assert str(clone) == str(exc)


class TestExceptionCatching:
    """Tests for catching exceptions at different levels."""

    def test_catch_base_catches_all(self):
        """Test catching ImBatchError catches all custom exceptions."""
        with pytest.raises(ImBatchError):
            raise ConfigError("command", "missing")

        with pytest.raises(ImBatchError):
            raise FetchTimeoutError("op", 1)

        with pytest.raises(ImBatchError):
            raise SubprocessError("cmd", 1)

    def test_network_error_not_catches_data_error(self):
        """Test NetworkError doesn't catch DataError."""
        with pytest.raises(DataError):
            try:
                raise ParseError("script listing")
            except NetworkError:
                pytest.fail("NetworkError should not catch DataError")


class TestWrapFetchError:
    """Tests for wrap_fetch_error helper."""

    def test_http_error_wrapped(self):
        """Test HTTP errors become ConnectionError with the status."""
        error = urllib.error.HTTPError("http://x/list.txt", 404, "Not Found", {}, None)
        wrapped = wrap_fetch_error(error, "http://x/list.txt")

        assert isinstance(wrapped, FetchConnectionError)
        assert "404" in str(wrapped)

    def test_url_error_wrapped(self):
        """Test URLError becomes ConnectionError."""
        error = urllib.error.URLError("Name or service not known")
        wrapped = wrap_fetch_error(error, "http://nowhere.invalid/")

        assert isinstance(wrapped, FetchConnectionError)
        assert "nowhere.invalid" in str(wrapped)

    def test_socket_timeout_wrapped(self):
        """Test socket timeouts become TimeoutError."""
        wrapped = wrap_fetch_error(socket.timeout("timed out"), "http://x/", 7)

        assert isinstance(wrapped, FetchTimeoutError)
        assert wrapped.timeout_sec == 7

    def test_url_error_with_timeout_reason(self):
        """Test URLError wrapping a timeout becomes TimeoutError."""
        error = urllib.error.URLError(socket.timeout("timed out"))
        assert isinstance(wrap_fetch_error(error, "http://x/"), FetchTimeoutError)

    def test_other_error_is_network_error(self):
        """Test unknown errors fall back to NetworkError."""
        wrapped = wrap_fetch_error(OSError("disk full"), "http://x/")

        assert type(wrapped) is NetworkError

    def test_project_error_passes_through(self):
        """Test project exceptions are returned unchanged."""
        original = ParseError("script listing")
        assert wrap_fetch_error(original) is original
