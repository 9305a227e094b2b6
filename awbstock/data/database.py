# AWB Stock - Database Manager
# ============================

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Generator

from ..core.exceptions import DatabaseError

logger = logging.getLogger("awbstock.data")


class Database:
    """
    SQLite database connection manager with migration support.

    Singleton: every repository shares the same connection.
    """

    _instance: "Database | None" = None
    _initialized: bool = False

    def __new__(cls) -> "Database":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        if Database._initialized:
            return
        Database._initialized = True

        self._db_path: Path | None = None
        self._connection: sqlite3.Connection | None = None
        self._migrations_path: Path | None = None

    def initialize(self, db_path: Path | str, migrations_path: Path | str | None = None) -> None:
        """
        Initialize database connection and run migrations.

        Args:
            db_path: Path to SQLite database file
            migrations_path: Path to migrations directory (optional)
        """
        if self._connection is not None:
            self.close()

        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)

        if migrations_path:
            self._migrations_path = Path(migrations_path)
        else:
            self._migrations_path = Path(__file__).parent / "migrations"

        self._connection = sqlite3.connect(str(self._db_path))
        self._connection.row_factory = sqlite3.Row
        self._connection.execute("PRAGMA foreign_keys = ON")

        self._run_migrations()

        logger.info(f"Database initialized: {self._db_path}")

    def _run_migrations(self) -> None:
        """Run all pending SQL migrations in file name order."""
        if not self._migrations_path or not self._migrations_path.exists():
            raise DatabaseError(
                f"Migrations path invalid or missing: {self._migrations_path}",
                operation="migrate",
            )

        migration_files = sorted(self._migrations_path.glob("*.sql"))
        if not migration_files:
            logger.warning(f"No migration files found in {self._migrations_path}")
            return

        cursor = self._connection.cursor()

        # schema_version must exist before the applied set can be read
        schema_version_file = self._migrations_path / "000_schema_version.sql"
        if schema_version_file.exists():
            cursor.executescript(schema_version_file.read_text(encoding="utf-8"))
            self._connection.commit()

        try:
            cursor.execute("SELECT version FROM schema_version")
            applied_versions = {row[0] for row in cursor.fetchall()}
        except sqlite3.OperationalError:
            applied_versions = set()

        for migration_file in migration_files:
            try:
                version = int(migration_file.stem.split("_")[0])
            except (ValueError, IndexError):
                logger.warning(f"Invalid migration filename: {migration_file.name}")
                continue

            if version in applied_versions or version == 0:
                continue

            sql = migration_file.read_text(encoding="utf-8")
            try:
                logger.info(f"Applying migration {version}: {migration_file.name}")
                cursor.executescript(sql)
                cursor.execute(
                    "INSERT INTO schema_version (version, name) VALUES (?, ?)",
                    (version, migration_file.stem),
                )
                self._connection.commit()
            except sqlite3.Error as e:
                self._connection.rollback()
                logger.error(
                    f"Migration {migration_file.name} failed on {self._db_path}: {e}",
                    exc_info=True,
                )
                raise DatabaseError(
                    f"Migration {migration_file.name} failed: {e}",
                    operation="migrate",
                    cause=e,
                ) from e

        cursor.close()

    def get_schema_version(self) -> int | None:
        """Highest applied migration version, or None if none applied."""
        row = self.fetch_one("SELECT MAX(version) AS version FROM schema_version")
        return row["version"] if row else None

    @property
    def db_path(self) -> Path | None:
        return self._db_path

    @property
    def connection(self) -> sqlite3.Connection:
        """Get the database connection."""
        if self._connection is None:
            raise DatabaseError("Database not initialized", operation="get_connection")
        return self._connection

    @contextmanager
    def transaction(self) -> Generator[sqlite3.Cursor, None, None]:
        """
        Context manager for database transactions.

        Usage:
            with db.transaction() as cursor:
                cursor.execute(...)
        """
        cursor = self.connection.cursor()
        try:
            yield cursor
            self.connection.commit()
        except sqlite3.Error as e:
            self.connection.rollback()
            raise DatabaseError(
                f"Transaction failed: {e}",
                operation="transaction",
                cause=e,
            ) from e
        except Exception:
            self.connection.rollback()
            raise
        finally:
            cursor.close()

    def execute(
        self,
        sql: str,
        params: tuple | dict | None = None,
    ) -> sqlite3.Cursor:
        """
        Execute a SQL statement.

        Args:
            sql: SQL statement
            params: Parameters for the statement

        Returns:
            Cursor with results
        """
        try:
            cursor = self.connection.cursor()
            if params:
                cursor.execute(sql, params)
            else:
                cursor.execute(sql)
            return cursor
        except sqlite3.Error as e:
            raise DatabaseError(
                f"SQL execution failed: {e}",
                operation="execute",
                cause=e,
            ) from e

    def fetch_one(
        self,
        sql: str,
        params: tuple | dict | None = None,
    ) -> sqlite3.Row | None:
        """Execute SQL and fetch one row."""
        cursor = self.execute(sql, params)
        return cursor.fetchone()

    def fetch_all(
        self,
        sql: str,
        params: tuple | dict | None = None,
    ) -> list[sqlite3.Row]:
        """Execute SQL and fetch all rows."""
        cursor = self.execute(sql, params)
        return cursor.fetchall()

    def insert(
        self,
        table: str,
        data: dict[str, Any],
    ) -> int:
        """
        Insert a row into a table.

        Args:
            table: Table name
            data: Dictionary of column -> value

        Returns:
            ID of inserted row
        """
        columns = ", ".join(data.keys())
        placeholders = ", ".join("?" * len(data))
        sql = f"INSERT INTO {table} ({columns}) VALUES ({placeholders})"

        try:
            with self.transaction() as cursor:
                cursor.execute(sql, tuple(data.values()))
                return cursor.lastrowid
        except DatabaseError as e:
            raise DatabaseError(
                f"Insert failed: {e.cause or e}",
                operation="insert",
                table=table,
                cause=e.cause,
            ) from e

    def update(
        self,
        table: str,
        data: dict[str, Any],
        where: str,
        where_params: tuple | None = None,
    ) -> int:
        """
        Update rows in a table.

        Args:
            table: Table name
            data: Dictionary of column -> value to update
            where: WHERE clause (without 'WHERE' keyword)
            where_params: Parameters for WHERE clause

        Returns:
            Number of affected rows
        """
        set_clause = ", ".join(f"{k} = ?" for k in data.keys())
        sql = f"UPDATE {table} SET {set_clause} WHERE {where}"
        params = tuple(data.values()) + (where_params or ())

        try:
            with self.transaction() as cursor:
                cursor.execute(sql, params)
                return cursor.rowcount
        except DatabaseError as e:
            raise DatabaseError(
                f"Update failed: {e.cause or e}",
                operation="update",
                table=table,
                cause=e.cause,
            ) from e

    def close(self) -> None:
        """Close the database connection."""
        if self._connection:
            self._connection.close()
            self._connection = None
            logger.info("Database connection closed")


# Global convenience function
def get_db() -> Database:
    """Get the global Database instance."""
    return Database()
