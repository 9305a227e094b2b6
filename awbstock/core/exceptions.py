# AWB Stock - Custom Exceptions
# =============================

from typing import Any


class AWBStockError(Exception):
    """Base exception for all AWB Stock errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} [{details_str}]"
        return self.message


class ValidationError(AWBStockError):
    """Raised when data validation fails."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
        expected: str | None = None,
    ):
        details = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)[:100]  # Truncate long values
        if expected:
            details["expected"] = expected
        super().__init__(message, details)
        self.field = field
        self.value = value
        self.expected = expected


class DatabaseError(AWBStockError):
    """Raised when database operations fail."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        table: str | None = None,
        cause: Exception | None = None,
    ):
        details = {}
        if operation:
            details["operation"] = operation
        if table:
            details["table"] = table
        if cause:
            details["cause"] = str(cause)
        super().__init__(message, details)
        self.operation = operation
        self.table = table
        self.cause = cause


class ConfigurationError(AWBStockError):
    """Raised when configuration is invalid or missing."""

    def __init__(
        self,
        message: str,
        config_file: str | None = None,
        key: str | None = None,
    ):
        details = {}
        if config_file:
            details["config_file"] = config_file
        if key:
            details["key"] = key
        super().__init__(message, details)
        self.config_file = config_file
        self.key = key


# Series request errors
# ---------------------
# Fatal to a whole batch. Raised by SeriesValidator.expand() before any
# candidate number is generated.


class SeriesRequestError(AWBStockError):
    """Base class for errors that reject an entire series request."""


class InvalidPrefixError(SeriesRequestError):
    """Raised when a series prefix is not exactly 3 digits."""

    def __init__(self, prefix: str):
        super().__init__(
            "Airline prefix must contain exactly 3 digits",
            {"prefix": prefix},
        )
        self.prefix = prefix


class PrefixNotSupportedError(SeriesRequestError):
    """Raised when a series prefix is not in the recognized allow-list."""

    def __init__(self, prefix: str, supported: list[str]):
        supported_str = ", ".join(supported) if supported else "none"
        super().__init__(
            f"Airline prefix {prefix} is not supported. Supported prefixes: {supported_str}",
            {"prefix": prefix},
        )
        self.prefix = prefix
        self.supported = list(supported)


class BatchTooLargeError(SeriesRequestError):
    """Raised when a series would produce more numbers than the batch ceiling."""

    def __init__(self, requested: int, limit: int):
        super().__init__(
            f"Maximum {limit} AWB per series",
            {"requested": requested, "limit": limit},
        )
        self.requested = requested
        self.limit = limit


class InvalidRangeError(SeriesRequestError):
    """Raised when serial bounds or quantity are malformed."""

    def __init__(
        self,
        message: str,
        first_serial: int | None = None,
        last_serial: int | None = None,
        quantity: int | None = None,
    ):
        details: dict[str, Any] = {}
        if first_serial is not None:
            details["first_serial"] = first_serial
        if last_serial is not None:
            details["last_serial"] = last_serial
        if quantity is not None:
            details["quantity"] = quantity
        super().__init__(message, details)
        self.first_serial = first_serial
        self.last_serial = last_serial
        self.quantity = quantity


class EmptyManualListError(SeriesRequestError):
    """Raised when a manual series holds no AWB number after blank lines are dropped."""

    def __init__(self):
        super().__init__("No AWB number entered")


# Item errors
# -----------
# Recorded per candidate in ValidationResult.issues, never raised by the
# validator itself.


class AWBItemError(AWBStockError):
    """Base class for problems found on a single AWB number."""

    code: str = "item_error"

    def __init__(self, message: str, awb_number: str, details: dict[str, Any] | None = None):
        super().__init__(message, details)
        self.awb_number = awb_number


class MalformedLengthError(AWBItemError):
    """AWB number is not exactly 11 digits after normalization."""

    code = "malformed_length"

    def __init__(self, awb_number: str):
        super().__init__("AWB number must contain exactly 11 digits", awb_number)


class CheckDigitMismatchError(AWBItemError):
    """Provided check digit differs from serial mod 7."""

    code = "check_digit_mismatch"

    def __init__(self, awb_number: str, computed: int, provided: int):
        super().__init__(
            f"Check digit mismatch: computed {computed}, provided {provided}",
            awb_number,
            {"computed": computed, "provided": provided},
        )
        self.computed = computed
        self.provided = provided


class PrefixMismatchError(AWBItemError):
    """Manually entered AWB number carries a different prefix than its series."""

    code = "prefix_mismatch"

    def __init__(self, awb_number: str, prefix: str, expected: str):
        super().__init__(
            f"AWB prefix {prefix} does not match series prefix {expected}",
            awb_number,
            {"prefix": prefix, "expected": expected},
        )
        self.prefix = prefix
        self.expected = expected


class DuplicateAwbError(AWBItemError):
    """AWB number is already present in the issued stock."""

    code = "duplicate"

    def __init__(self, awb_number: str):
        super().__init__("This AWB number already exists in stock", awb_number)


class RepeatedInBatchError(AWBItemError):
    """AWB number already appeared earlier in the same series."""

    code = "repeated_in_batch"

    def __init__(self, awb_number: str):
        super().__init__("This AWB number appears more than once in the series", awb_number)
