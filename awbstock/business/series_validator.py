# AWB Stock - Series Validator
# ============================

import logging
import re
from dataclasses import dataclass
from typing import Iterable, Protocol, Union

from ..core.constants import (
    AWB_MAX_SERIAL,
    AWB_PREFIX_PATTERN,
    DEFAULT_MAX_BATCH_SIZE,
    RequestMode,
)
from ..core.exceptions import (
    BatchTooLargeError,
    EmptyManualListError,
    InvalidPrefixError,
    InvalidRangeError,
    PrefixNotSupportedError,
    RepeatedInBatchError,
)
from .awb_codec import DuplicateStore, ValidationResult, format_awb, parse_and_validate

logger = logging.getLogger("awbstock.business")

_PREFIX_RE = re.compile(AWB_PREFIX_PATTERN)


class PrefixRegistry(Protocol):
    """Allow-list of airline prefixes a series may be generated for."""

    def is_supported(self, prefix: str) -> bool:
        ...

    def list_prefixes(self) -> list[str]:
        ...


class StaticPrefixRegistry:
    """Prefix allow-list held in memory."""

    def __init__(self, prefixes: Iterable[str]):
        self._prefixes = sorted(set(prefixes))

    def is_supported(self, prefix: str) -> bool:
        return prefix in self._prefixes

    def list_prefixes(self) -> list[str]:
        return list(self._prefixes)


@dataclass(frozen=True)
class RangeRequest:
    """Every serial from first_serial to last_serial, both inclusive."""

    prefix: str
    first_serial: int
    last_serial: int

    @property
    def mode(self) -> RequestMode:
        return RequestMode.RANGE


@dataclass(frozen=True)
class QuantityRequest:
    """`quantity` consecutive serials starting at first_serial."""

    prefix: str
    first_serial: int
    quantity: int

    @property
    def mode(self) -> RequestMode:
        return RequestMode.QUANTITY


@dataclass(frozen=True)
class ManualRequest:
    """AWB numbers typed or pasted by the operator, one per entry."""

    prefix: str
    numbers: tuple[str, ...]

    @property
    def mode(self) -> RequestMode:
        return RequestMode.MANUAL

    @classmethod
    def from_text(cls, prefix: str, text: str) -> "ManualRequest":
        """Build from multi-line input, one AWB number per line."""
        return cls(prefix=prefix, numbers=tuple(text.splitlines()))


GenerationRequest = Union[RangeRequest, QuantityRequest, ManualRequest]


@dataclass(frozen=True)
class BatchSummary:
    """Counts shown before the detail of a validated batch."""

    total: int
    valid: int
    invalid: int
    duplicates: int

    @property
    def all_valid(self) -> bool:
        return self.invalid == 0

    def __str__(self) -> str:
        return (
            f"{self.total} AWB checked: {self.valid} valid, {self.invalid} invalid"
            f" ({self.duplicates} already in stock)"
        )


def count_valid(results: Iterable[ValidationResult]) -> int:
    return sum(1 for r in results if r.is_valid)


def count_invalid(results: Iterable[ValidationResult]) -> int:
    return sum(1 for r in results if not r.is_valid)


def summarize(results: list[ValidationResult]) -> BatchSummary:
    valid = count_valid(results)
    return BatchSummary(
        total=len(results),
        valid=valid,
        invalid=len(results) - valid,
        duplicates=sum(1 for r in results if r.already_exists),
    )


class SeriesValidator:
    """
    Expands series requests into AWB numbers and validates them.

    Request-level problems (prefix, bounds, batch size, empty list) raise a
    SeriesRequestError before any number is produced. Problems with
    individual numbers never raise; they are recorded on the corresponding
    ValidationResult, and results always come back in input order.
    """

    def __init__(
        self,
        prefix_registry: PrefixRegistry,
        duplicate_store: DuplicateStore | None = None,
        max_batch_size: int = DEFAULT_MAX_BATCH_SIZE,
    ):
        self._prefix_registry = prefix_registry
        self._duplicate_store = duplicate_store
        self._max_batch_size = max_batch_size

    @property
    def max_batch_size(self) -> int:
        return self._max_batch_size

    def expand(self, request: GenerationRequest) -> list[str]:
        """
        Turn a request into its ordered list of candidate AWB numbers.

        Raises:
            InvalidPrefixError: Prefix is not 3 digits
            PrefixNotSupportedError: Prefix is not in the registry
            InvalidRangeError: Bounds or quantity are malformed
            BatchTooLargeError: More candidates than max_batch_size
            EmptyManualListError: Manual list has no non-blank entry
            TypeError: Unknown request type
        """
        self._check_prefix(request.prefix)

        if isinstance(request, RangeRequest):
            return self._expand_range(request)
        if isinstance(request, QuantityRequest):
            return self._expand_quantity(request)
        if isinstance(request, ManualRequest):
            return self._expand_manual(request)
        raise TypeError(f"Unsupported series request: {type(request).__name__}")

    def _check_prefix(self, prefix: str) -> None:
        if not isinstance(prefix, str) or not _PREFIX_RE.fullmatch(prefix):
            raise InvalidPrefixError(str(prefix))
        if not self._prefix_registry.is_supported(prefix):
            raise PrefixNotSupportedError(prefix, self._prefix_registry.list_prefixes())

    def _check_serial_bounds(self, first: int, last: int, **details) -> None:
        if first < 0 or last > AWB_MAX_SERIAL:
            raise InvalidRangeError(
                f"Serial numbers must lie between 0 and {AWB_MAX_SERIAL}",
                **details,
            )

    def _expand_range(self, request: RangeRequest) -> list[str]:
        first, last = request.first_serial, request.last_serial
        if first >= last:
            raise InvalidRangeError(
                "Last serial number must be greater than first serial number",
                first_serial=first,
                last_serial=last,
            )

        count = last - first + 1
        if count > self._max_batch_size:
            raise BatchTooLargeError(count, self._max_batch_size)

        self._check_serial_bounds(first, last, first_serial=first, last_serial=last)

        return [format_awb(request.prefix, serial) for serial in range(first, last + 1)]

    def _expand_quantity(self, request: QuantityRequest) -> list[str]:
        first, quantity = request.first_serial, request.quantity
        if quantity < 1:
            raise InvalidRangeError(
                "Quantity must be at least 1",
                first_serial=first,
                quantity=quantity,
            )
        if quantity > self._max_batch_size:
            raise BatchTooLargeError(quantity, self._max_batch_size)

        self._check_serial_bounds(
            first, first + quantity - 1, first_serial=first, quantity=quantity
        )

        return [format_awb(request.prefix, first + i) for i in range(quantity)]

    def _expand_manual(self, request: ManualRequest) -> list[str]:
        numbers = [line.strip() for line in request.numbers if line.strip()]
        if not numbers:
            raise EmptyManualListError()
        return numbers

    def validate_all(
        self,
        candidates: list[str],
        expected_prefix: str | None = None,
    ) -> list[ValidationResult]:
        """
        Validate every candidate; result[i] belongs to candidates[i].

        Every copy of a valid number after its first occurrence gets a
        RepeatedInBatchError.
        """
        results = []
        seen: set[str] = set()
        for candidate in candidates:
            result = parse_and_validate(candidate, self._duplicate_store, expected_prefix)
            if result.is_valid:
                if result.awb_number in seen:
                    result.add_issue(RepeatedInBatchError(result.awb_number))
                seen.add(result.awb_number)
            if not result.is_valid:
                logger.debug(f"AWB {candidate!r} rejected: {'; '.join(result.errors)}")
            results.append(result)

        summary = summarize(results)
        logger.info(f"Series validated: {summary}")
        return results

    def generate_and_validate(self, request: GenerationRequest) -> list[ValidationResult]:
        """Expand a request and validate every resulting number."""
        candidates = self.expand(request)
        logger.info(
            f"Expanded {request.mode} series for prefix {request.prefix}: "
            f"{len(candidates)} AWB"
        )
        expected_prefix = request.prefix if isinstance(request, ManualRequest) else None
        return self.validate_all(candidates, expected_prefix=expected_prefix)

    def validate_single(self, raw: str) -> ValidationResult:
        """Check one AWB number as typed by an operator."""
        return parse_and_validate(raw, self._duplicate_store)
