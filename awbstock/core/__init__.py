# AWB Stock - Core Module
# =======================

from .constants import (
    RequestMode,
    AWBStatus,
    CommitStatus,
    APP_NAME,
)
from .exceptions import (
    AWBStockError,
    ValidationError,
    DatabaseError,
    ConfigurationError,
    SeriesRequestError,
    InvalidPrefixError,
    PrefixNotSupportedError,
    BatchTooLargeError,
    InvalidRangeError,
    EmptyManualListError,
    AWBItemError,
    MalformedLengthError,
    CheckDigitMismatchError,
    PrefixMismatchError,
    DuplicateAwbError,
    RepeatedInBatchError,
)
from .app_context import AppContext, get_context

__all__ = [
    # Constants
    "RequestMode",
    "AWBStatus",
    "CommitStatus",
    "APP_NAME",
    # Exceptions
    "AWBStockError",
    "ValidationError",
    "DatabaseError",
    "ConfigurationError",
    "SeriesRequestError",
    "InvalidPrefixError",
    "PrefixNotSupportedError",
    "BatchTooLargeError",
    "InvalidRangeError",
    "EmptyManualListError",
    "AWBItemError",
    "MalformedLengthError",
    "CheckDigitMismatchError",
    "PrefixMismatchError",
    "DuplicateAwbError",
    "RepeatedInBatchError",
    # Context
    "AppContext",
    "get_context",
]
