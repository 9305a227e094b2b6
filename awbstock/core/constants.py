# AWB Stock - Constants
# =====================

from enum import Enum
from typing import Final

# Application info
APP_NAME: Final[str] = "AWB Stock"


class RequestMode(str, Enum):
    """Ways an operator can describe a series of AWB numbers."""
    RANGE = "range"
    QUANTITY = "quantity"
    MANUAL = "manual"

    def __str__(self) -> str:
        return self.value


class AWBStatus(str, Enum):
    """Status of an AWB number held in stock."""
    ACTIVE = "active"
    USED = "used"
    CANCELLED = "cancelled"

    def __str__(self) -> str:
        return self.value


class CommitStatus(str, Enum):
    """Outcome of writing one AWB number to stock."""
    ADDED = "added"
    FAILED = "failed"
    SKIPPED = "skipped"

    def __str__(self) -> str:
        return self.value


# File paths
DEFAULT_DATA_DIR: Final[str] = "data"
DEFAULT_DB_NAME: Final[str] = "awbstock.db"
DEFAULT_LOG_NAME: Final[str] = "app.log"

# Date/time formats
DATETIME_FORMAT_DB: Final[str] = "%Y-%m-%d %H:%M:%S"

# AWB structure
AWB_LENGTH: Final[int] = 11
AWB_PREFIX_LENGTH: Final[int] = 3
AWB_SERIAL_LENGTH: Final[int] = 7
AWB_CHECK_MODULUS: Final[int] = 7
AWB_MAX_SERIAL: Final[int] = 9_999_999
DEFAULT_MAX_BATCH_SIZE: Final[int] = 1000

# Validation patterns
AWB_NUMBER_PATTERN: Final[str] = rf"^[0-9]{{{AWB_LENGTH}}}$"
AWB_PREFIX_PATTERN: Final[str] = rf"^[0-9]{{{AWB_PREFIX_LENGTH}}}$"
AWB_SEPARATORS_PATTERN: Final[str] = r"[\s-]"
AIRLINE_CODE_PATTERN: Final[str] = r"^[A-Z0-9]{2}$"
