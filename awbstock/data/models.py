# AWB Stock - Data Models
# =======================

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from ..core.constants import AWBStatus, DATETIME_FORMAT_DB


@dataclass
class Airline:
    """Airline owning an AWB prefix."""

    id: int | None = None
    prefix: str = ""
    code: str | None = None
    name: str = ""
    is_active: bool = True
    created_at: str | None = None
    updated_at: str | None = None

    @property
    def display_name(self) -> str:
        if self.code:
            return f"{self.name} ({self.code})"
        return self.name

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for database storage."""
        return {
            "prefix": self.prefix,
            "code": self.code,
            "name": self.name,
            "is_active": 1 if self.is_active else 0,
        }

    @classmethod
    def from_row(cls, row) -> "Airline":
        """Create from database row."""
        return cls(
            id=row["id"],
            prefix=row["prefix"],
            code=row["code"],
            name=row["name"],
            is_active=bool(row["is_active"]),
            created_at=row["created_at"] if "created_at" in row.keys() else None,
            updated_at=row["updated_at"] if "updated_at" in row.keys() else None,
        )


@dataclass
class AWBStockItem:
    """An issued AWB number held in stock."""

    id: int | None = None
    awb_number: str = ""
    prefix: str = ""
    serial_number: str = ""
    check_digit: int = 0
    airline_code: str | None = None
    airline_name: str | None = None
    status: AWBStatus = AWBStatus.ACTIVE
    created_at: str | None = None
    updated_at: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for database storage."""
        data = {
            "awb_number": self.awb_number,
            "prefix": self.prefix,
            "serial_number": self.serial_number,
            "check_digit": self.check_digit,
            "airline_code": self.airline_code,
            "airline_name": self.airline_name,
            "status": str(self.status),
        }
        if self.created_at:
            data["created_at"] = self.created_at
        return data

    @classmethod
    def from_row(cls, row) -> "AWBStockItem":
        """Create from database row."""
        return cls(
            id=row["id"],
            awb_number=row["awb_number"],
            prefix=row["prefix"],
            serial_number=row["serial_number"],
            check_digit=row["check_digit"],
            airline_code=row["airline_code"],
            airline_name=row["airline_name"],
            status=AWBStatus(row["status"]),
            created_at=row["created_at"] if "created_at" in row.keys() else None,
            updated_at=row["updated_at"] if "updated_at" in row.keys() else None,
        )

    @classmethod
    def new(
        cls,
        awb_number: str,
        prefix: str,
        serial_number: str,
        check_digit: int,
        airline: "Airline | None" = None,
    ) -> "AWBStockItem":
        """Build a fresh active stock row, stamped with the current time."""
        return cls(
            awb_number=awb_number,
            prefix=prefix,
            serial_number=serial_number,
            check_digit=check_digit,
            airline_code=airline.code if airline else None,
            airline_name=airline.name if airline else None,
            status=AWBStatus.ACTIVE,
            created_at=datetime.now().strftime(DATETIME_FORMAT_DB),
        )
