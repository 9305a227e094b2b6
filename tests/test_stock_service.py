"""Tests for committing validated AWB numbers and managing airlines."""

import pytest

from awbstock.business.awb_codec import parse_and_validate
from awbstock.business.series_validator import QuantityRequest, RangeRequest
from awbstock.business.stock_service import (
    AirlinePrefixRegistry,
    CommitOutcome,
    CommitReport,
    StockService,
)
from awbstock.core.constants import AWBStatus, CommitStatus
from awbstock.core.exceptions import PrefixNotSupportedError, ValidationError
from awbstock.data.models import Airline, AWBStockItem


@pytest.fixture
def service(stock_repo, airline_repo):
    return StockService(stock_repo, airline_repo)


@pytest.fixture
def algerie(airline_repo):
    return airline_repo.upsert(Airline(prefix="124", code="AH", name="Air Algerie"))


def _stock_item(awb_number: str) -> AWBStockItem:
    result = parse_and_validate(awb_number)
    return AWBStockItem.new(
        awb_number=result.awb_number,
        prefix=result.prefix,
        serial_number=result.serial,
        check_digit=result.computed_check_digit,
    )


class TestAirlinePrefixRegistry:
    """Tests for AirlinePrefixRegistry."""

    def test_registered_airline_supported(self, airline_repo, algerie):
        registry = AirlinePrefixRegistry(airline_repo)
        assert registry.is_supported("124") is True
        assert registry.is_supported("235") is False

    def test_inactive_airline_not_supported(self, airline_repo):
        airline_repo.upsert(Airline(prefix="235", code="TK", name="Turkish", is_active=False))
        registry = AirlinePrefixRegistry(airline_repo)
        assert registry.is_supported("235") is False
        assert registry.list_prefixes() == []

    def test_extra_prefixes(self, airline_repo, algerie):
        registry = AirlinePrefixRegistry(airline_repo, extra_prefixes=["999", "124"])
        assert registry.is_supported("999") is True
        assert registry.list_prefixes() == ["124", "999"]


class TestBuildValidator:
    """Tests for the database-backed validator."""

    def test_unknown_prefix_lists_registered_ones(self, service, algerie):
        validator = service.build_validator(max_batch_size=1000)
        with pytest.raises(PrefixNotSupportedError) as exc_info:
            validator.expand(RangeRequest("235", 1, 5))
        assert exc_info.value.supported == ["124"]

    def test_duplicates_come_from_stock(self, service, stock_repo, algerie):
        stock_repo.create(_stock_item("12412345675"))
        validator = service.build_validator(max_batch_size=1000)
        results = validator.generate_and_validate(QuantityRequest("124", 1234566, 2))
        assert [r.already_exists for r in results] == [False, True]


class TestCommit:
    """Tests for StockService.commit."""

    def test_adds_valid_numbers(self, service, stock_repo, algerie):
        validator = service.build_validator(max_batch_size=1000)
        results = validator.generate_and_validate(RangeRequest("124", 1234560, 1234564))

        report = service.commit(results)

        assert report.added == 5
        assert report.failed == 0
        assert report.message == "5 AWB added to stock"
        assert [o.awb_number for o in report.outcomes] == [r.awb_number for r in results]
        assert stock_repo.count(prefix="124") == 5

    def test_rows_are_stamped_with_airline(self, service, stock_repo, algerie):
        service.commit([parse_and_validate("12412345675")])
        item = stock_repo.get_by_awb("12412345675")
        assert item.prefix == "124"
        assert item.serial_number == "1234567"
        assert item.check_digit == 5
        assert item.airline_code == "AH"
        assert item.airline_name == "Air Algerie"
        assert item.status == AWBStatus.ACTIVE
        assert item.created_at

    def test_explicit_airline_wins(self, service, stock_repo, algerie):
        other = Airline(prefix="124", code="XX", name="Charter")
        service.commit([parse_and_validate("12412345675")], airline=other)
        assert stock_repo.get_by_awb("12412345675").airline_code == "XX"

    def test_unregistered_prefix_stored_without_airline(self, service, stock_repo):
        service.commit([parse_and_validate("99900000000")])
        item = stock_repo.get_by_awb("99900000000")
        assert item.airline_code is None
        assert item.airline_name is None

    def test_empty_results_refused(self, service):
        with pytest.raises(ValidationError) as exc_info:
            service.commit([])
        assert exc_info.value.message == "No validated AWB numbers to add"

    def test_invalid_results_refused(self, service, stock_repo):
        results = [parse_and_validate("12412345675"), parse_and_validate("12412345676")]
        with pytest.raises(ValidationError) as exc_info:
            service.commit(results)
        assert exc_info.value.message == "Invalid AWB numbers cannot be added to stock"
        assert stock_repo.count() == 0

    def test_allow_partial_skips_invalid(self, service, stock_repo):
        results = [parse_and_validate("12412345676"), parse_and_validate("12412345675")]

        report = service.commit(results, allow_partial=True)

        assert [o.status for o in report.outcomes] == [CommitStatus.SKIPPED, CommitStatus.ADDED]
        assert report.outcomes[0].error == "Check digit mismatch: computed 5, provided 6"
        assert report.skipped == 1
        assert report.message == "1 AWB added to stock"
        assert stock_repo.count() == 1

    def test_rejected_row_does_not_stop_the_rest(self, service, stock_repo):
        results = [
            parse_and_validate("12412345664"),
            parse_and_validate("12412345675"),
            parse_and_validate("12412345686"),
        ]
        # Issued by someone else between validation and commit
        stock_repo.create(_stock_item("12412345675"))

        report = service.commit(results)

        assert [o.status for o in report.outcomes] == [
            CommitStatus.ADDED,
            CommitStatus.FAILED,
            CommitStatus.ADDED,
        ]
        assert "UNIQUE constraint failed" in report.outcomes[1].error
        assert report.message == "2 AWB added to stock, 1 errors"
        assert stock_repo.count() == 3

    def test_recommit_reports_every_row_as_failed(self, service, stock_repo):
        results = [parse_and_validate("12412345675")]
        service.commit(results)
        report = service.commit(results)
        assert report.added == 0
        assert report.failed == 1
        assert stock_repo.count() == 1


class TestCommitReport:
    """Tests for CommitReport."""

    def test_nothing_added(self):
        report = CommitReport([CommitOutcome("x", CommitStatus.SKIPPED, "bad")])
        assert report.message == "No AWB added to stock"

    def test_to_dict(self):
        report = CommitReport(
            [
                CommitOutcome("12412345675", CommitStatus.ADDED),
                CommitOutcome("12412345686", CommitStatus.FAILED, "Insert failed"),
            ]
        )
        data = report.to_dict()
        assert data["added"] == 1
        assert data["failed"] == 1
        assert data["skipped"] == 0
        assert data["message"] == "1 AWB added to stock, 1 errors"
        assert data["outcomes"][1] == {
            "awb_number": "12412345686",
            "status": "failed",
            "error": "Insert failed",
        }


class TestAirlines:
    """Tests for airline registration and seeding."""

    def test_register_airline(self, service):
        airline = service.register_airline(" 235 ", "tk", " Turkish Airlines ")
        assert airline.id is not None
        assert airline.code == "TK"
        assert service.get_airline("235").name == "Turkish Airlines"

    def test_register_updates_existing(self, service, algerie):
        service.register_airline("124", "AH", "Air Algerie Cargo")
        assert service.get_airline("124").name == "Air Algerie Cargo"
        assert len(service.list_airlines()) == 1

    def test_register_without_code(self, service):
        airline = service.register_airline("999", None, "Test Carrier")
        assert airline.code is None
        assert airline.display_name == "Test Carrier"

    @pytest.mark.parametrize(
        "prefix,code,name,field",
        [
            ("12", "AH", "Air Algerie", "prefix"),
            ("12a", "AH", "Air Algerie", "prefix"),
            ("124", "AHX", "Air Algerie", "code"),
            ("124", "A-", "Air Algerie", "code"),
            ("124", "AH", "   ", "name"),
        ],
    )
    def test_register_rejects_malformed(self, service, prefix, code, name, field):
        with pytest.raises(ValidationError) as exc_info:
            service.register_airline(prefix, code, name)
        assert exc_info.value.field == field

    def test_list_airlines_ordered(self, service):
        service.register_airline("235", "TK", "Turkish Airlines")
        service.register_airline("057", "AF", "Air France")
        assert [a.prefix for a in service.list_airlines()] == ["057", "235"]

    def test_seed_airlines(self, service, algerie):
        configured = [
            {"prefix": "124", "code": "AH", "name": "Renamed"},
            {"prefix": "057", "code": "AF", "name": "Air France"},
            {"prefix": "57", "code": "AF", "name": "Broken"},
        ]
        assert service.seed_airlines(configured) == 1
        assert service.get_airline("124").name == "Air Algerie"
        assert service.get_airline("057").name == "Air France"

    def test_seed_twice_inserts_nothing(self, service):
        configured = [{"prefix": "057", "code": "AF", "name": "Air France"}]
        assert service.seed_airlines(configured) == 1
        assert service.seed_airlines(configured) == 0

    def test_register_numeric_code(self, service):
        airline = service.register_airline("999", 12, "Numeric Air")
        assert airline.code == "12"

    def test_seed_numeric_code(self, service):
        configured = [
            {"prefix": "999", "code": 12, "name": "Numeric Air"},
            {"prefix": "998", "code": 1.5, "name": "Float Air"},
        ]
        assert service.seed_airlines(configured) == 1
        assert service.get_airline("999").code == "12"
        assert service.get_airline("998") is None
