# Utils package for im_batch

from im_batch.utils.exceptions import (
    ConfigError,
    ConnectionError,
    DataError,
    ImBatchError,
    NetworkError,
    ParseError,
    SubprocessError,
    TimeoutError,
    wrap_fetch_error,
)
from im_batch.utils.responses import (
    BatchResult,
    OperationResult,
    parse_subprocess_output,
)

__all__ = [
    "BatchResult",
    # Exceptions
    "ConfigError",
    "ConnectionError",
    "DataError",
    "ImBatchError",
    "NetworkError",
    # Responses
    "OperationResult",
    "ParseError",
    "SubprocessError",
    "TimeoutError",
    "parse_subprocess_output",
    "wrap_fetch_error",
]
