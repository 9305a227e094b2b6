# AWB Stock - Business Layer
# ==========================

from .awb_codec import (
    compute_check_digit,
    format_awb,
    normalize,
    parse_and_validate,
    DuplicateStore,
    ValidationResult,
)
from .series_validator import (
    SeriesValidator,
    PrefixRegistry,
    StaticPrefixRegistry,
    RangeRequest,
    QuantityRequest,
    ManualRequest,
    GenerationRequest,
    BatchSummary,
    count_valid,
    count_invalid,
    summarize,
)
from .stock_service import (
    StockService,
    AirlinePrefixRegistry,
    CommitOutcome,
    CommitReport,
)

__all__ = [
    # Codec
    "compute_check_digit",
    "format_awb",
    "normalize",
    "parse_and_validate",
    "DuplicateStore",
    "ValidationResult",
    # Series
    "SeriesValidator",
    "PrefixRegistry",
    "StaticPrefixRegistry",
    "RangeRequest",
    "QuantityRequest",
    "ManualRequest",
    "GenerationRequest",
    "BatchSummary",
    "count_valid",
    "count_invalid",
    "summarize",
    # Services
    "StockService",
    "AirlinePrefixRegistry",
    "CommitOutcome",
    "CommitReport",
]
