"""Integration tests for CLI commands."""

import json
from datetime import datetime
from pathlib import Path

import pytest
from sqlalchemy.engine import Engine
from typer.testing import CliRunner

from car_admin.cli import app
from car_admin.config import SESSION_TOKEN_ENV, load_admin_config
from car_admin.database.engine import init_db, reset_engine
from car_admin.models.db_models import PrivateListing, Vehicle
from car_admin.models.pydantic_models import ListingStatus


@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture
def test_db(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Create a test database and an operator session."""
    reset_engine()
    monkeypatch.delenv("DATABASE_URL", raising=False)
    db_path = tmp_path / "test.db"
    monkeypatch.setenv("CAR_ADMIN_DB_PATH", str(db_path))
    monkeypatch.setenv(SESSION_TOKEN_ENV, "operator-token")
    init_db(db_path)
    yield db_path
    reset_engine()


@pytest.fixture
def engine(test_db: Path) -> Engine:
    """Use the process-wide engine the CLI itself connects through."""
    return init_db(test_db)


@pytest.fixture
def populated_db(seed) -> dict[str, int]:
    """Create a catalog with two cars and a moderation queue."""
    bmw = seed.brand("BMW")
    tesla = seed.brand("Tesla")
    return {
        "i4": seed.vehicle(
            bmw, model="i4 eDrive40", price=52000, mileage=15000, created_at=datetime(2024, 1, 1)
        ),
        "ix": seed.vehicle(
            bmw,
            model="iX xDrive50",
            price=78000,
            created_at=datetime(2024, 2, 1),
            features=[("Panoramic Roof", True)],
        ),
        "pending": seed.listing(tesla, created_at=datetime(2024, 3, 2), seller_name="Jo Doe"),
        "rejected": seed.listing(
            tesla, created_at=datetime(2024, 3, 1), status=ListingStatus.REJECTED, model="Model S"
        ),
    }


class TestVersion:
    def test_version(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert "car-admin version" in result.stdout


class TestInitDatabase:
    def test_init_database(self, runner: CliRunner, test_db: Path) -> None:
        result = runner.invoke(app, ["init-database", "--db", str(test_db)])

        assert result.exit_code == 0
        assert "Database initialized" in result.stdout


class TestVehiclesCommand:
    def test_json_output_newest_first(
        self, runner: CliRunner, populated_db: dict[str, int]
    ) -> None:
        result = runner.invoke(app, ["vehicles", "--json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert [car["id"] for car in data] == [populated_db["ix"], populated_db["i4"]]
        assert data[0]["brand"]["name"] == "BMW"

    def test_table_output(self, runner: CliRunner, populated_db: dict[str, int]) -> None:
        result = runner.invoke(app, ["vehicles"])

        assert result.exit_code == 0
        assert "Car Listings (2)" in result.stdout

    def test_without_session_redirects(
        self, runner: CliRunner, populated_db: dict[str, int], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv(SESSION_TOKEN_ENV)

        result = runner.invoke(app, ["vehicles"])

        assert result.exit_code == 1
        assert "/admin/login" in result.stdout

    def test_without_session_does_not_create_store(
        self, runner: CliRunner, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """The login redirect happens before any database file or directory is made."""
        reset_engine()
        monkeypatch.delenv(SESSION_TOKEN_ENV, raising=False)
        monkeypatch.delenv("DATABASE_URL", raising=False)
        db_path = tmp_path / "fresh" / "cars.db"

        result = runner.invoke(app, ["vehicles", "--db", str(db_path)])

        assert result.exit_code == 1
        assert "/admin/login" in result.stdout
        assert not db_path.parent.exists()


class TestVehicleCommand:
    def test_json_output(self, runner: CliRunner, populated_db: dict[str, int]) -> None:
        result = runner.invoke(app, ["vehicle", str(populated_db["ix"]), "--json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["model"] == "iX xDrive50"
        assert [f["name"] for f in data["features"]] == ["Panoramic Roof"]

    def test_missing_car(self, runner: CliRunner, populated_db: dict[str, int]) -> None:
        result = runner.invoke(app, ["vehicle", "9999"])

        assert result.exit_code == 1
        assert "Failed to load car details" in result.stdout
        assert "/admin/dashboard" in result.stdout


class TestEditCommand:
    def test_edit_price(
        self, runner: CliRunner, seed, populated_db: dict[str, int]
    ) -> None:
        result = runner.invoke(app, ["edit", str(populated_db["i4"]), "--price", "49900"])

        assert result.exit_code == 0
        assert "Car updated successfully" in result.stdout
        assert seed.get(Vehicle, populated_db["i4"]).price == 49900

    def test_edit_without_fields_fails(
        self, runner: CliRunner, populated_db: dict[str, int]
    ) -> None:
        result = runner.invoke(app, ["edit", str(populated_db["i4"])])

        assert result.exit_code == 1
        assert "Failed to update car" in result.stdout

    def test_edit_invalid_value(self, runner: CliRunner, populated_db: dict[str, int]) -> None:
        result = runner.invoke(app, ["edit", str(populated_db["i4"]), "--year", "1800"])

        assert result.exit_code == 1
        assert "Invalid values" in result.stdout


class TestDashboardActions:
    def test_mark_sold_and_available(
        self, runner: CliRunner, seed, populated_db: dict[str, int]
    ) -> None:
        car_id = str(populated_db["i4"])

        result = runner.invoke(app, ["mark-sold", car_id])
        assert result.exit_code == 0
        assert "Car marked as sold" in result.stdout
        assert seed.get(Vehicle, populated_db["i4"]).is_sold is True

        result = runner.invoke(app, ["mark-available", car_id])
        assert result.exit_code == 0
        assert seed.get(Vehicle, populated_db["i4"]).is_sold is False

    def test_delete(
        self, runner: CliRunner, seed, populated_db: dict[str, int]
    ) -> None:
        result = runner.invoke(app, ["delete", str(populated_db["i4"]), "--yes"])

        assert result.exit_code == 0
        assert "Car deleted successfully" in result.stdout
        assert seed.get(Vehicle, populated_db["i4"]) is None

    def test_delete_missing_car(self, runner: CliRunner, populated_db: dict[str, int]) -> None:
        result = runner.invoke(app, ["delete", "9999", "--yes"])

        assert result.exit_code == 1
        assert "Failed to delete car" in result.stdout

    def test_delete_declined(
        self, runner: CliRunner, seed, populated_db: dict[str, int]
    ) -> None:
        result = runner.invoke(app, ["delete", str(populated_db["i4"])], input="n\n")

        assert result.exit_code == 1
        assert seed.get(Vehicle, populated_db["i4"]) is not None

    def test_toggle_sold_flips_status(
        self, runner: CliRunner, seed, populated_db: dict[str, int]
    ) -> None:
        car_id = str(populated_db["i4"])

        result = runner.invoke(app, ["toggle-sold", car_id])
        assert result.exit_code == 0
        assert "Car marked as sold" in result.stdout
        assert seed.get(Vehicle, populated_db["i4"]).is_sold is True

        result = runner.invoke(app, ["toggle-sold", car_id])
        assert result.exit_code == 0
        assert seed.get(Vehicle, populated_db["i4"]).is_sold is False

    def test_toggle_sold_unknown_car(self, runner: CliRunner, populated_db: dict[str, int]) -> None:
        result = runner.invoke(app, ["toggle-sold", "9999"])

        assert result.exit_code == 1
        assert "Car 9999 not found" in result.stdout


class TestLogoutCommand:
    @pytest.fixture
    def config_file(self, tmp_path: Path) -> Path:
        config_path = tmp_path / "admin.yaml"
        config_path.write_text("routes:\n  login: /sign-in\nsession_token: abc\n")
        return config_path

    def test_logout_clears_stored_token(
        self,
        runner: CliRunner,
        test_db: Path,
        config_file: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.delenv(SESSION_TOKEN_ENV)

        result = runner.invoke(app, ["logout", "--config", str(config_file)])

        assert result.exit_code == 0
        assert "/sign-in" in result.stdout
        assert "still set" not in result.stdout
        assert load_admin_config(config_file).session_present is False

        result = runner.invoke(app, ["vehicles", "--config", str(config_file)])
        assert result.exit_code == 1
        assert "/sign-in" in result.stdout

    def test_logout_warns_when_env_token_remains(
        self, runner: CliRunner, test_db: Path, config_file: Path
    ) -> None:
        result = runner.invoke(app, ["logout", "--config", str(config_file)])

        assert result.exit_code == 0
        assert f"{SESSION_TOKEN_ENV} is still set" in result.stdout
        assert "session_token: null" in config_file.read_text()


class TestModerationCommands:
    def test_queue_json(self, runner: CliRunner, populated_db: dict[str, int]) -> None:
        result = runner.invoke(app, ["queue", "--json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert [listing["id"] for listing in data] == [
            populated_db["pending"],
            populated_db["rejected"],
        ]
        assert data[0]["status"] == "pending"

    def test_queue_table_shows_pending_count(
        self, runner: CliRunner, populated_db: dict[str, int]
    ) -> None:
        result = runner.invoke(app, ["queue"])

        assert result.exit_code == 0
        assert "1 pending" in result.stdout

    def test_approve_adds_car(
        self, runner: CliRunner, seed, populated_db: dict[str, int]
    ) -> None:
        result = runner.invoke(app, ["approve", str(populated_db["pending"])])

        assert result.exit_code == 0
        assert "Listing approved successfully" in result.stdout
        listing = seed.get(PrivateListing, populated_db["pending"])
        assert listing.status == ListingStatus.APPROVED
        assert seed.get(Vehicle, listing.car_id).make == "Tesla"

    def test_reject(
        self, runner: CliRunner, seed, populated_db: dict[str, int]
    ) -> None:
        result = runner.invoke(app, ["reject", str(populated_db["pending"])])

        assert result.exit_code == 0
        assert seed.get(PrivateListing, populated_db["pending"]).status == ListingStatus.REJECTED
        assert seed.count(Vehicle) == 2

    def test_processed_listing_fails(
        self, runner: CliRunner, populated_db: dict[str, int]
    ) -> None:
        result = runner.invoke(app, ["approve", str(populated_db["rejected"])])

        assert result.exit_code == 1
        assert "Failed to update listing" in result.stdout
