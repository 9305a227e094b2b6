# AWB Stock - Stock Service
# =========================

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Iterable

from ..core.constants import AIRLINE_CODE_PATTERN, AWB_PREFIX_PATTERN, CommitStatus
from ..core.exceptions import DatabaseError, ValidationError
from ..data.models import Airline, AWBStockItem
from ..data.repositories import AirlineRepository, AWBStockRepository
from .awb_codec import ValidationResult
from .series_validator import SeriesValidator

logger = logging.getLogger("awbstock.business")


class AirlinePrefixRegistry:
    """
    Prefix allow-list backed by the airlines table.

    Prefixes listed in configuration are accepted as well, so a prefix can be
    enabled without registering the airline first.
    """

    def __init__(
        self,
        airline_repo: AirlineRepository | None = None,
        extra_prefixes: Iterable[str] = (),
    ):
        self._airline_repo = airline_repo or AirlineRepository()
        self._extra_prefixes = set(extra_prefixes)

    def is_supported(self, prefix: str) -> bool:
        if prefix in self._extra_prefixes:
            return True
        airline = self._airline_repo.get_by_prefix(prefix)
        return airline is not None and airline.is_active

    def list_prefixes(self) -> list[str]:
        return sorted(set(self._airline_repo.list_prefixes()) | self._extra_prefixes)


@dataclass
class CommitOutcome:
    """Result of writing one AWB number to stock."""

    awb_number: str
    status: CommitStatus
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"awb_number": self.awb_number, "status": str(self.status), "error": self.error}


@dataclass
class CommitReport:
    """Per-number outcomes of a commit, in the order the results were given."""

    outcomes: list[CommitOutcome] = field(default_factory=list)

    def _count(self, status: CommitStatus) -> int:
        return sum(1 for o in self.outcomes if o.status == status)

    @property
    def added(self) -> int:
        return self._count(CommitStatus.ADDED)

    @property
    def failed(self) -> int:
        return self._count(CommitStatus.FAILED)

    @property
    def skipped(self) -> int:
        return self._count(CommitStatus.SKIPPED)

    @property
    def message(self) -> str:
        if self.failed:
            return f"{self.added} AWB added to stock, {self.failed} errors"
        if self.added:
            return f"{self.added} AWB added to stock"
        return "No AWB added to stock"

    def to_dict(self) -> dict[str, Any]:
        return {
            "added": self.added,
            "failed": self.failed,
            "skipped": self.skipped,
            "message": self.message,
            "outcomes": [o.to_dict() for o in self.outcomes],
        }


class StockService:
    """
    Business logic for AWB stock.

    Handles:
    - Building a series validator wired to the stock database
    - Committing validated AWB numbers, one row at a time
    - Registering airlines and their prefixes
    """

    def __init__(
        self,
        stock_repo: AWBStockRepository | None = None,
        airline_repo: AirlineRepository | None = None,
    ):
        self._stock_repo = stock_repo or AWBStockRepository()
        self._airline_repo = airline_repo or AirlineRepository()

    def build_validator(
        self,
        max_batch_size: int,
        extra_prefixes: Iterable[str] = (),
    ) -> SeriesValidator:
        """Series validator checking prefixes and duplicates against the database."""
        return SeriesValidator(
            prefix_registry=AirlinePrefixRegistry(self._airline_repo, extra_prefixes),
            duplicate_store=self._stock_repo,
            max_batch_size=max_batch_size,
        )

    def commit(
        self,
        results: list[ValidationResult],
        airline: Airline | None = None,
        allow_partial: bool = False,
    ) -> CommitReport:
        """
        Add validated AWB numbers to stock.

        Every valid result is inserted on its own; a row rejected by the
        database is reported as failed and the remaining rows still go in.

        Args:
            results: Output of SeriesValidator
            airline: Airline stamped on every row; looked up by prefix if None
            allow_partial: Skip invalid results instead of refusing the batch

        Returns:
            CommitReport

        Raises:
            ValidationError: If results is empty, or holds invalid numbers
                and allow_partial is False
        """
        if not results:
            raise ValidationError("No validated AWB numbers to add")

        invalid = [r for r in results if not r.is_valid]
        if invalid and not allow_partial:
            raise ValidationError(
                "Invalid AWB numbers cannot be added to stock",
                field="awb_number",
                value=", ".join(r.awb_number for r in invalid[:10]),
            )

        report = CommitReport()
        airlines: dict[str, Airline | None] = {}

        for result in results:
            if not result.is_valid:
                report.outcomes.append(
                    CommitOutcome(result.awb_number, CommitStatus.SKIPPED, "; ".join(result.errors))
                )
                continue

            row_airline = airline
            if row_airline is None:
                if result.prefix not in airlines:
                    airlines[result.prefix] = self._airline_repo.get_by_prefix(result.prefix)
                row_airline = airlines[result.prefix]

            item = AWBStockItem.new(
                awb_number=result.awb_number,
                prefix=result.prefix,
                serial_number=result.serial,
                check_digit=result.computed_check_digit,
                airline=row_airline,
            )
            try:
                self._stock_repo.create(item)
            except DatabaseError as e:
                logger.error(f"Error adding AWB {result.awb_number}: {e}")
                report.outcomes.append(
                    CommitOutcome(result.awb_number, CommitStatus.FAILED, e.message)
                )
                continue

            report.outcomes.append(CommitOutcome(result.awb_number, CommitStatus.ADDED))

        logger.info(
            f"Stock commit finished: {report.added} added, "
            f"{report.failed} failed, {report.skipped} skipped"
        )
        return report

    def register_airline(self, prefix: str, code: Any, name: str) -> Airline:
        """
        Create or update the airline owning a prefix.

        Raises:
            ValidationError: If prefix, code or name is malformed
        """
        prefix = prefix.strip()
        if not re.fullmatch(AWB_PREFIX_PATTERN, prefix):
            raise ValidationError(
                "Airline prefix must contain exactly 3 digits",
                field="prefix",
                value=prefix,
                expected="3 digits",
            )

        # YAML reads codes such as 12 as integers
        if code is not None:
            code = str(code).strip().upper() or None
        if code and not re.fullmatch(AIRLINE_CODE_PATTERN, code):
            raise ValidationError(
                "Airline code must be a 2-character IATA designator",
                field="code",
                value=code,
                expected="2 letters or digits",
            )

        name = name.strip()
        if not name:
            raise ValidationError("Airline name is required", field="name")

        return self._airline_repo.upsert(Airline(prefix=prefix, code=code, name=name))

    def get_airline(self, prefix: str) -> Airline | None:
        return self._airline_repo.get_by_prefix(prefix)

    def list_airlines(self) -> list[Airline]:
        return self._airline_repo.get_all()

    def seed_airlines(self, airlines: Iterable[dict[str, Any]]) -> int:
        """
        Insert configured airlines whose prefix is not registered yet.

        Existing rows are left untouched so operator edits survive restarts.

        Returns:
            Number of airlines inserted
        """
        inserted = 0
        for entry in airlines:
            prefix = str(entry.get("prefix", ""))
            if self._airline_repo.get_by_prefix(prefix) is not None:
                continue
            try:
                self.register_airline(prefix, entry.get("code"), str(entry.get("name", "")))
            except ValidationError as e:
                logger.warning(f"Skipping configured airline {entry!r}: {e}")
                continue
            inserted += 1

        if inserted:
            logger.info(f"Seeded {inserted} airlines from configuration")
        return inserted
