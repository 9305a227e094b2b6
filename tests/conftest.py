from pathlib import Path

import pytest

from awbstock.business.series_validator import SeriesValidator, StaticPrefixRegistry
from awbstock.data.database import Database
from awbstock.data.repositories import AirlineRepository, AWBStockRepository

MIGRATIONS_PATH = Path(__file__).parent.parent / "awbstock" / "data" / "migrations"


class FakeDuplicateStore:
    """In-memory issued-number store recording every lookup."""

    def __init__(self, existing=()):
        self.existing = set(existing)
        self.lookups: list[tuple[str, str]] = []

    def exists_in_stock(self, prefix: str, awb_number: str) -> bool:
        self.lookups.append((prefix, awb_number))
        return awb_number in self.existing


@pytest.fixture
def duplicate_store():
    return FakeDuplicateStore()


@pytest.fixture
def registry():
    return StaticPrefixRegistry(["057", "124", "235"])


@pytest.fixture
def validator(registry, duplicate_store):
    return SeriesValidator(registry, duplicate_store)


@pytest.fixture
def db(tmp_path):
    database = Database()
    database.initialize(tmp_path / "test.db", MIGRATIONS_PATH)
    yield database
    database.close()


@pytest.fixture
def stock_repo(db):
    return AWBStockRepository(db)


@pytest.fixture
def airline_repo(db):
    return AirlineRepository(db)
