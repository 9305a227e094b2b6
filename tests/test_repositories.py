"""Tests for the SQLite layer: migrations, models and repositories."""

import pytest

from awbstock.core.constants import AWBStatus
from awbstock.core.exceptions import DatabaseError
from awbstock.data.database import Database
from awbstock.data.models import Airline, AWBStockItem
from conftest import MIGRATIONS_PATH


def _item(awb_number: str, status: AWBStatus = AWBStatus.ACTIVE) -> AWBStockItem:
    return AWBStockItem(
        awb_number=awb_number,
        prefix=awb_number[:3],
        serial_number=awb_number[3:10],
        check_digit=int(awb_number[10]),
        status=status,
    )


class TestDatabase:
    """Tests for Database."""

    def test_migrations_applied(self, db):
        assert db.get_schema_version() == 1
        tables = {
            row["name"]
            for row in db.fetch_all("SELECT name FROM sqlite_master WHERE type = 'table'")
        }
        assert {"schema_version", "airlines", "awb_stock"} <= tables

    def test_reinitialize_keeps_applied_migrations(self, db, tmp_path):
        db.initialize(tmp_path / "test.db", MIGRATIONS_PATH)
        rows = db.fetch_all("SELECT version FROM schema_version ORDER BY version")
        assert [row["version"] for row in rows] == [1]

    def test_singleton(self, db):
        assert Database() is db

    def test_missing_migrations_path(self, tmp_path):
        database = Database()
        with pytest.raises(DatabaseError):
            database.initialize(tmp_path / "other.db", tmp_path / "missing")
        database.close()

    def test_closed_connection_raises(self, tmp_path):
        database = Database()
        database.initialize(tmp_path / "closed.db", MIGRATIONS_PATH)
        database.close()
        with pytest.raises(DatabaseError):
            database.fetch_one("SELECT 1")

    def test_check_constraint_wrapped(self, db):
        with pytest.raises(DatabaseError) as exc_info:
            db.insert(
                "awb_stock",
                {
                    "awb_number": "12412345679",
                    "prefix": "124",
                    "serial_number": "1234567",
                    "check_digit": 9,
                },
            )
        assert exc_info.value.table == "awb_stock"
        assert exc_info.value.message.startswith("Insert failed:")

    def test_transaction_rolls_back(self, db):
        with pytest.raises(RuntimeError):
            with db.transaction() as cursor:
                cursor.execute(
                    "INSERT INTO airlines (prefix, code, name) VALUES (?, ?, ?)",
                    ("124", "AH", "Air Algerie"),
                )
                raise RuntimeError("boom")
        assert db.fetch_one("SELECT * FROM airlines") is None


class TestAirlineRepository:
    """Tests for AirlineRepository."""

    def test_create_and_get(self, airline_repo):
        airline_id = airline_repo.create(Airline(prefix="057", code="AF", name="Air France"))
        airline = airline_repo.get_by_prefix("057")
        assert airline.id == airline_id
        assert airline.display_name == "Air France (AF)"
        assert airline.is_active is True
        assert airline.created_at

    def test_get_missing(self, airline_repo):
        assert airline_repo.get_by_prefix("999") is None

    def test_duplicate_prefix_rejected(self, airline_repo):
        airline_repo.create(Airline(prefix="057", code="AF", name="Air France"))
        with pytest.raises(DatabaseError):
            airline_repo.create(Airline(prefix="057", code="XX", name="Other"))

    def test_get_all_active_only(self, airline_repo):
        airline_repo.create(Airline(prefix="235", code="TK", name="Turkish Airlines"))
        airline_repo.create(Airline(prefix="057", code="AF", name="Air France", is_active=False))
        assert [a.prefix for a in airline_repo.get_all()] == ["235"]
        assert [a.prefix for a in airline_repo.get_all(active_only=False)] == ["057", "235"]
        assert airline_repo.list_prefixes() == ["235"]

    def test_upsert_updates_in_place(self, airline_repo):
        first = airline_repo.upsert(Airline(prefix="124", code="AH", name="Air Algerie"))
        second = airline_repo.upsert(Airline(prefix="124", code="AH", name="Air Algerie Cargo"))
        assert second.id == first.id
        assert airline_repo.get_by_prefix("124").name == "Air Algerie Cargo"


class TestAWBStockRepository:
    """Tests for AWBStockRepository."""

    def test_create_and_get(self, stock_repo):
        stock_repo.create(_item("12412345675"))
        item = stock_repo.get_by_awb("12412345675")
        assert item.prefix == "124"
        assert item.serial_number == "1234567"
        assert item.check_digit == 5
        assert item.status == AWBStatus.ACTIVE

    def test_exists_in_stock(self, stock_repo):
        stock_repo.create(_item("12412345675"))
        assert stock_repo.exists_in_stock("124", "12412345675") is True
        assert stock_repo.exists_in_stock("124", "12412345686") is False
        assert stock_repo.exists_in_stock("235", "12412345675") is False

    def test_duplicate_number_rejected(self, stock_repo):
        stock_repo.create(_item("12412345675"))
        with pytest.raises(DatabaseError) as exc_info:
            stock_repo.create(_item("12412345675"))
        assert "UNIQUE constraint failed" in exc_info.value.message

    def test_get_by_prefix_in_serial_order(self, stock_repo):
        for awb in ("12412345686", "12412345664", "23500010006", "12412345675"):
            stock_repo.create(_item(awb))
        items = stock_repo.get_by_prefix("124")
        assert [i.awb_number for i in items] == ["12412345664", "12412345675", "12412345686"]
        assert [i.awb_number for i in stock_repo.get_by_prefix("124", limit=1, offset=1)] == [
            "12412345675"
        ]

    def test_count_and_status_filter(self, stock_repo):
        stock_repo.create(_item("12412345664"))
        stock_repo.create(_item("12412345675", AWBStatus.USED))
        stock_repo.create(_item("23500010006"))
        assert stock_repo.count() == 3
        assert stock_repo.count(prefix="124") == 2
        assert stock_repo.count(status=AWBStatus.ACTIVE) == 2
        assert stock_repo.count(prefix="124", status=AWBStatus.USED) == 1
        assert [i.awb_number for i in stock_repo.get_by_prefix("124", AWBStatus.USED)] == [
            "12412345675"
        ]

    def test_update_status(self, stock_repo):
        stock_repo.create(_item("12412345675"))
        assert stock_repo.update_status("12412345675", AWBStatus.CANCELLED) is True
        assert stock_repo.get_by_awb("12412345675").status == AWBStatus.CANCELLED

    def test_update_status_missing(self, stock_repo):
        assert stock_repo.update_status("12412345675", AWBStatus.USED) is False
