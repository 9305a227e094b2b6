# AWB Stock - AWB Number Codec
# ============================

import re
from dataclasses import dataclass, field
from typing import Any, Protocol

from ..core.constants import (
    AWB_CHECK_MODULUS,
    AWB_NUMBER_PATTERN,
    AWB_PREFIX_LENGTH,
    AWB_SEPARATORS_PATTERN,
    AWB_SERIAL_LENGTH,
)
from ..core.exceptions import (
    AWBItemError,
    CheckDigitMismatchError,
    DuplicateAwbError,
    MalformedLengthError,
    PrefixMismatchError,
)

_AWB_RE = re.compile(AWB_NUMBER_PATTERN)
_SEPARATORS_RE = re.compile(AWB_SEPARATORS_PATTERN)


class DuplicateStore(Protocol):
    """Lookup of AWB numbers that have already been issued."""

    def exists_in_stock(self, prefix: str, awb_number: str) -> bool:
        ...


@dataclass
class ValidationResult:
    """Verdict on one AWB number."""

    awb_number: str = ""
    prefix: str = ""
    serial: str = ""
    provided_check_digit: int = 0
    computed_check_digit: int = 0
    already_exists: bool = False
    issues: list[AWBItemError] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.issues

    @property
    def errors(self) -> list[str]:
        return [issue.message for issue in self.issues]

    def add_issue(self, issue: AWBItemError) -> None:
        """Record a problem found on this number."""
        self.issues.append(issue)

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready representation."""
        return {
            "awb_number": self.awb_number,
            "prefix": self.prefix,
            "serial": self.serial,
            "provided_check_digit": self.provided_check_digit,
            "computed_check_digit": self.computed_check_digit,
            "is_valid": self.is_valid,
            "already_exists": self.already_exists,
            "errors": self.errors,
        }


def compute_check_digit(serial: int) -> int:
    """
    Compute the check digit of a 7-digit serial.

    The result is always in 0..6; check digits 7, 8 and 9 never occur.
    """
    return serial % AWB_CHECK_MODULUS


def format_awb(prefix: str, serial: int) -> str:
    """
    Build a complete 11-digit AWB number from prefix and serial.

    The caller guarantees a 3-digit prefix and 0 <= serial <= 9999999.

    >>> format_awb("124", 1234567)
    '12412345675'
    """
    return f"{prefix}{serial:0{AWB_SERIAL_LENGTH}d}{compute_check_digit(serial)}"


def normalize(raw: str) -> str:
    """Strip whitespace and hyphens from an AWB number."""
    return _SEPARATORS_RE.sub("", raw)


def parse_and_validate(
    raw: str,
    duplicate_store: DuplicateStore | None = None,
    expected_prefix: str | None = None,
) -> ValidationResult:
    """
    Validate one AWB number.

    Checks, in order:
    1. exactly 11 digits once spaces and hyphens are removed (stops here on failure)
    2. check digit equals serial mod 7
    3. prefix equals expected_prefix, when one is given
    4. not already in stock, only asked when every check above passed

    Args:
        raw: AWB number as entered
        duplicate_store: Issued-number lookup; skipped when None
        expected_prefix: Prefix the number must carry (manual series)

    Returns:
        ValidationResult
    """
    awb_number = normalize(raw)
    result = ValidationResult(awb_number=awb_number)

    if not _AWB_RE.fullmatch(awb_number):
        result.add_issue(MalformedLengthError(awb_number))
        return result

    serial_end = AWB_PREFIX_LENGTH + AWB_SERIAL_LENGTH
    result.prefix = awb_number[:AWB_PREFIX_LENGTH]
    result.serial = awb_number[AWB_PREFIX_LENGTH:serial_end]
    result.provided_check_digit = int(awb_number[serial_end])
    result.computed_check_digit = compute_check_digit(int(result.serial))

    if result.provided_check_digit != result.computed_check_digit:
        result.add_issue(
            CheckDigitMismatchError(
                awb_number,
                computed=result.computed_check_digit,
                provided=result.provided_check_digit,
            )
        )

    if expected_prefix is not None and result.prefix != expected_prefix:
        result.add_issue(PrefixMismatchError(awb_number, result.prefix, expected_prefix))

    if result.is_valid and duplicate_store is not None:
        if duplicate_store.exists_in_stock(result.prefix, awb_number):
            result.already_exists = True
            result.add_issue(DuplicateAwbError(awb_number))

    return result
