# AWB Stock - Data Repositories
# =============================

import logging
from datetime import datetime

from ..core.constants import AWBStatus, DATETIME_FORMAT_DB
from .database import Database, get_db
from .models import Airline, AWBStockItem

logger = logging.getLogger("awbstock.data")


class BaseRepository:
    """Base class for all repositories."""

    def __init__(self, db: Database | None = None):
        self._db = db or get_db()


class AirlineRepository(BaseRepository):
    """Repository for airlines and the AWB prefixes they own."""

    TABLE = "airlines"

    def create(self, airline: Airline) -> int:
        """Create a new airline and return its ID."""
        airline_id = self._db.insert(self.TABLE, airline.to_dict())
        logger.info(f"Created airline: {airline.prefix} {airline.name} (id={airline_id})")
        return airline_id

    def get_by_prefix(self, prefix: str) -> Airline | None:
        """Get airline by AWB prefix."""
        row = self._db.fetch_one(
            f"SELECT * FROM {self.TABLE} WHERE prefix = ?",
            (prefix,),
        )
        return Airline.from_row(row) if row else None

    def get_all(self, active_only: bool = True) -> list[Airline]:
        """Get all airlines ordered by prefix."""
        where = "is_active = 1" if active_only else "1=1"
        rows = self._db.fetch_all(
            f"SELECT * FROM {self.TABLE} WHERE {where} ORDER BY prefix"
        )
        return [Airline.from_row(row) for row in rows]

    def list_prefixes(self) -> list[str]:
        """Prefixes of all active airlines."""
        rows = self._db.fetch_all(
            f"SELECT prefix FROM {self.TABLE} WHERE is_active = 1 ORDER BY prefix"
        )
        return [row["prefix"] for row in rows]

    def upsert(self, airline: Airline) -> Airline:
        """Insert the airline, or update code and name of an existing prefix."""
        existing = self.get_by_prefix(airline.prefix)
        if existing is None:
            airline.id = self.create(airline)
            return airline

        self._db.update(
            self.TABLE,
            {
                "code": airline.code,
                "name": airline.name,
                "is_active": 1 if airline.is_active else 0,
                "updated_at": _now_sql(),
            },
            "id = ?",
            (existing.id,),
        )
        logger.info(f"Updated airline: {airline.prefix} {airline.name} (id={existing.id})")
        airline.id = existing.id
        return airline


class AWBStockRepository(BaseRepository):
    """
    Repository for issued AWB numbers.

    Also serves as the duplicate store consulted during series validation.
    """

    TABLE = "awb_stock"

    def create(self, item: AWBStockItem) -> int:
        """
        Insert one AWB number into stock.

        Raises:
            DatabaseError: If the number is already present (UNIQUE constraint)
                or the row is otherwise rejected.
        """
        item_id = self._db.insert(self.TABLE, item.to_dict())
        logger.info(f"Added AWB to stock: {item.awb_number} (id={item_id})")
        return item_id

    def exists_in_stock(self, prefix: str, awb_number: str) -> bool:
        """Whether the AWB number has already been issued."""
        row = self._db.fetch_one(
            f"SELECT 1 FROM {self.TABLE} WHERE prefix = ? AND awb_number = ? LIMIT 1",
            (prefix, awb_number),
        )
        return row is not None

    def get_by_awb(self, awb_number: str) -> AWBStockItem | None:
        """Get stock row by AWB number."""
        row = self._db.fetch_one(
            f"SELECT * FROM {self.TABLE} WHERE awb_number = ?",
            (awb_number,),
        )
        return AWBStockItem.from_row(row) if row else None

    def get_by_prefix(
        self,
        prefix: str,
        status: AWBStatus | None = None,
        limit: int = 1000,
        offset: int = 0,
    ) -> list[AWBStockItem]:
        """Get stock rows for one airline prefix, in serial order."""
        conditions = ["prefix = ?"]
        params: list = [prefix]

        if status:
            conditions.append("status = ?")
            params.append(str(status))

        where = " AND ".join(conditions)
        params.extend([limit, offset])
        rows = self._db.fetch_all(
            f"SELECT * FROM {self.TABLE} WHERE {where} "
            "ORDER BY serial_number LIMIT ? OFFSET ?",
            tuple(params),
        )
        return [AWBStockItem.from_row(row) for row in rows]

    def count(self, prefix: str | None = None, status: AWBStatus | None = None) -> int:
        """Fast COUNT(*) with optional prefix and status filters."""
        conditions = []
        params = []

        if prefix:
            conditions.append("prefix = ?")
            params.append(prefix)

        if status:
            conditions.append("status = ?")
            params.append(str(status))

        where = " AND ".join(conditions) if conditions else "1=1"
        row = self._db.fetch_one(
            f"SELECT COUNT(*) AS count FROM {self.TABLE} WHERE {where}",
            tuple(params),
        )
        return row["count"] if row else 0

    def update_status(self, awb_number: str, status: AWBStatus) -> bool:
        """Change the status of a stock row."""
        rows_affected = self._db.update(
            self.TABLE,
            {"status": str(status), "updated_at": _now_sql()},
            "awb_number = ?",
            (awb_number,),
        )
        if rows_affected > 0:
            logger.info(f"AWB {awb_number} status -> {status}")
        else:
            logger.warning(f"AWB {awb_number} not found in stock, status unchanged")
        return rows_affected > 0


def _now_sql() -> str:
    return datetime.now().strftime(DATETIME_FORMAT_DB)
