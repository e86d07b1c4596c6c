"""CLI interface for car-admin."""

import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Any

import typer
from pydantic import ValidationError as PydanticValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from car_admin import __version__
from car_admin.config import (
    SESSION_TOKEN_ENV,
    AdminConfig,
    ConfigSessionManager,
    load_admin_config,
)
from car_admin.database.engine import get_engine, init_db
from car_admin.database.gateway import StoreGateway
from car_admin.database.repository import CatalogRepository
from car_admin.models.pydantic_models import ListingStatus, VehicleUpdate
from car_admin.screens.base import NotificationKind, Screen, ScreenStatus
from car_admin.screens.dashboard import DashboardScreen
from car_admin.screens.moderation import ModerationScreen
from car_admin.screens.vehicle_edit import VehicleEditScreen
from car_admin.services.moderation_service import ModerationWorkflow, pending_count

app = typer.Typer(
    name="car-admin",
    help="Back office for the vehicle catalog and private listing moderation",
    add_completion=False,
)
console = Console()

DB_OPTION = typer.Option(None, "--db", "-d", help="Path to SQLite database file.")
CONFIG_OPTION = typer.Option(None, "--config", "-c", help="Path to YAML config file.")
JSON_OPTION = typer.Option(False, "--json", help="Output JSON instead of a table.")


class ConsoleNotifier:
    """Prints notifications to the console."""

    def notify(self, kind: NotificationKind, message: str) -> None:
        if kind == NotificationKind.SUCCESS:
            console.print(f"[green]{message}[/green]")
        else:
            console.print(f"[red]{message}[/red]")


class ConsoleNavigator:
    """Remembers and prints the route a screen asked to navigate to."""

    def __init__(self) -> None:
        self.route: str | None = None

    def navigate_to(self, route: str) -> None:
        self.route = route
        console.print(f"[dim]-> {route}[/dim]")


def output_json(data: Any) -> None:
    """Output JSON to stdout (for scripting)."""
    print(json.dumps(data, indent=2, ensure_ascii=False, default=str))


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"car-admin version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-V", help="Show log output."),
) -> None:
    """Vehicle catalog back office."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
        )


def _open_store(db_path: Path | None, config_path: Path | None) -> tuple[StoreGateway, AdminConfig]:
    """Load configuration and connect to the store.

    Without a session the operator is sent to login before the store is opened.
    """
    try:
        config = load_admin_config(config_path)
    except FileNotFoundError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1) from e
    if not config.session_present:
        ConsoleNavigator().navigate_to(config.routes.login)
        raise typer.Exit(1)
    return StoreGateway(get_engine(db_path)), config


def _require_ready(screen: Screen[Any]) -> None:
    """Exit with status 1 unless the screen loaded."""
    if screen.state.status != ScreenStatus.READY:
        raise typer.Exit(1)


def _dashboard(db_path: Path | None, config_path: Path | None) -> tuple[DashboardScreen, AdminConfig]:
    gateway, config = _open_store(db_path, config_path)
    screen = DashboardScreen(
        CatalogRepository(gateway),
        ConsoleNotifier(),
        ConsoleNavigator(),
        config.routes,
        session_manager=ConfigSessionManager(config_path),
    )
    return screen, config


def _moderation(db_path: Path | None, config_path: Path | None) -> tuple[ModerationScreen, AdminConfig]:
    gateway, config = _open_store(db_path, config_path)
    screen = ModerationScreen(
        ModerationWorkflow(gateway), ConsoleNotifier(), ConsoleNavigator(), config.routes
    )
    return screen, config


@app.command()
def init_database(
    db_path: Path | None = DB_OPTION,
    verbose: bool = typer.Option(False, "--verbose", "-V", help="Show SQL statements."),
) -> None:
    """Initialize the database, creating all tables."""
    console.print("[bold blue]Initializing database...[/bold blue]")

    try:
        init_db(db_path, echo=verbose)
        db_location = db_path or "data/car_admin.db"
        console.print(f"[green]Database initialized at: {db_location}[/green]")
    except Exception as e:
        console.print(f"[red]Error initializing database: {e}[/red]")
        raise typer.Exit(1) from e


@app.command()
def vehicles(
    db_path: Path | None = DB_OPTION,
    config_path: Path | None = CONFIG_OPTION,
    json_output: bool = JSON_OPTION,
) -> None:
    """List all cars in the catalog, newest first."""
    screen, config = _dashboard(db_path, config_path)
    asyncio.run(screen.enter(config.session_present))
    _require_ready(screen)
    cars = screen.state.data or []

    if json_output:
        output_json([car.model_dump(mode="json") for car in cars])
        return

    table = Table(title=f"Car Listings ({len(cars)})")
    table.add_column("ID", justify="right")
    table.add_column("Car")
    table.add_column("Price", justify="right")
    table.add_column("Mileage", justify="right")
    table.add_column("Status")
    for car in cars:
        table.add_row(
            str(car.id),
            car.title,
            f"{car.price:,}" if car.price is not None else "-",
            f"{car.mileage:,} km" if car.mileage is not None else "-",
            "[red]sold[/red]" if car.is_sold else "[green]available[/green]",
        )
    console.print(table)


@app.command()
def vehicle(
    vehicle_id: int = typer.Argument(..., help="Car ID."),
    db_path: Path | None = DB_OPTION,
    config_path: Path | None = CONFIG_OPTION,
    json_output: bool = JSON_OPTION,
) -> None:
    """Show one car with its brand and features."""
    gateway, config = _open_store(db_path, config_path)
    screen = VehicleEditScreen(
        CatalogRepository(gateway), ConsoleNotifier(), ConsoleNavigator(), config.routes
    )
    asyncio.run(screen.enter(config.session_present, vehicle_id))
    _require_ready(screen)
    if screen.state.data is None:
        raise typer.Exit(1)
    car = screen.state.data.vehicle

    if json_output:
        output_json(car.model_dump(mode="json"))
        return

    features = "\n".join(
        f"{'[green]yes[/green]' if f.available else '[dim]no[/dim]'}  {f.name}"
        for f in car.features
    ) or "[dim]none[/dim]"
    body = (
        f"Brand: {car.brand.name}\n"
        f"Price: {car.price if car.price is not None else '-'}\n"
        f"Mileage: {car.mileage if car.mileage is not None else '-'}\n"
        f"Fuel: {car.fuel_type or '-'}  Transmission: {car.transmission or '-'}\n"
        f"Status: {'sold' if car.is_sold else 'available'}\n\n"
        f"[bold]Features[/bold]\n{features}"
    )
    console.print(Panel(body, title=f"Edit Car: {car.title}"))


@app.command()
def edit(
    vehicle_id: int = typer.Argument(..., help="Car ID."),
    model: str | None = typer.Option(None, "--model", help="Model name."),
    year: int | None = typer.Option(None, "--year", help="Model year."),
    price: int | None = typer.Option(None, "--price", help="Price."),
    mileage: int | None = typer.Option(None, "--mileage", help="Mileage in km."),
    color: str | None = typer.Option(None, "--color", help="Exterior color."),
    description: str | None = typer.Option(None, "--description", help="Description."),
    db_path: Path | None = DB_OPTION,
    config_path: Path | None = CONFIG_OPTION,
) -> None:
    """Edit catalog fields of a car."""
    values = {
        "model": model,
        "year": year,
        "price": price,
        "mileage": mileage,
        "color": color,
        "description": description,
    }
    try:
        update = VehicleUpdate(**{k: v for k, v in values.items() if v is not None})
    except PydanticValidationError as e:
        console.print(f"[red]Invalid values: {escape(str(e))}[/red]")
        raise typer.Exit(1) from e

    gateway, config = _open_store(db_path, config_path)
    screen = VehicleEditScreen(
        CatalogRepository(gateway), ConsoleNotifier(), ConsoleNavigator(), config.routes
    )

    async def run() -> bool:
        await screen.enter(config.session_present, vehicle_id)
        if screen.state.status != ScreenStatus.READY:
            return False
        return await screen.save(update)

    if not asyncio.run(run()):
        raise typer.Exit(1)


@app.command()
def delete(
    vehicle_id: int = typer.Argument(..., help="Car ID."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
    db_path: Path | None = DB_OPTION,
    config_path: Path | None = CONFIG_OPTION,
) -> None:
    """Delete a car from the catalog."""
    if not yes:
        typer.confirm(f"Delete car {vehicle_id}?", abort=True)
    _run_dashboard_action(db_path, config_path, lambda s: s.delete_vehicle(vehicle_id))


@app.command()
def mark_sold(
    vehicle_id: int = typer.Argument(..., help="Car ID."),
    db_path: Path | None = DB_OPTION,
    config_path: Path | None = CONFIG_OPTION,
) -> None:
    """Mark a car as sold."""
    _run_dashboard_action(db_path, config_path, lambda s: s.set_sold_status(vehicle_id, True))


@app.command()
def mark_available(
    vehicle_id: int = typer.Argument(..., help="Car ID."),
    db_path: Path | None = DB_OPTION,
    config_path: Path | None = CONFIG_OPTION,
) -> None:
    """Mark a car as available again."""
    _run_dashboard_action(db_path, config_path, lambda s: s.set_sold_status(vehicle_id, False))


@app.command()
def toggle_sold(
    vehicle_id: int = typer.Argument(..., help="Car ID."),
    db_path: Path | None = DB_OPTION,
    config_path: Path | None = CONFIG_OPTION,
) -> None:
    """Flip the sale status of a car as shown in the car list."""

    async def toggle(screen: DashboardScreen) -> bool:
        car = next((c for c in screen.state.data or [] if c.id == vehicle_id), None)
        if car is None:
            console.print(f"[red]Car {vehicle_id} not found[/red]")
            return False
        return await screen.toggle_sold(car)

    _run_dashboard_action(db_path, config_path, toggle)


@app.command()
def logout(
    db_path: Path | None = DB_OPTION,
    config_path: Path | None = CONFIG_OPTION,
) -> None:
    """Sign out by clearing the session token from the config file."""
    screen, _ = _dashboard(db_path, config_path)
    if not asyncio.run(screen.logout()):
        raise typer.Exit(1)
    if os.environ.get(SESSION_TOKEN_ENV):
        console.print(
            f"[yellow]{SESSION_TOKEN_ENV} is still set; unset it to end the session.[/yellow]"
        )


def _run_dashboard_action(db_path: Path | None, config_path: Path | None, action: Any) -> None:
    screen, config = _dashboard(db_path, config_path)

    async def run() -> bool:
        await screen.enter(config.session_present)
        if screen.state.status != ScreenStatus.READY:
            return False
        return await action(screen)

    if not asyncio.run(run()):
        raise typer.Exit(1)


@app.command()
def queue(
    db_path: Path | None = DB_OPTION,
    config_path: Path | None = CONFIG_OPTION,
    json_output: bool = JSON_OPTION,
) -> None:
    """Show the private listing moderation queue, newest first."""
    screen, config = _moderation(db_path, config_path)
    asyncio.run(screen.enter(config.session_present))
    _require_ready(screen)
    listings = screen.state.data or []

    if json_output:
        output_json([listing.model_dump(mode="json") for listing in listings])
        return

    table = Table(title=f"Private Listings ({pending_count(listings)} pending)")
    table.add_column("ID", justify="right")
    table.add_column("Car")
    table.add_column("Seller")
    table.add_column("Submitted")
    table.add_column("Status")
    colors = {
        ListingStatus.PENDING: "yellow",
        ListingStatus.APPROVED: "green",
        ListingStatus.REJECTED: "red",
    }
    for listing in listings:
        color = colors[listing.status]
        table.add_row(
            str(listing.id),
            f"{listing.year} {listing.brand.name} {listing.model}",
            listing.seller_name or "-",
            listing.created_at.strftime("%Y-%m-%d %H:%M"),
            f"[{color}]{listing.status.value}[/{color}]",
        )
    console.print(table)


@app.command()
def approve(
    listing_id: int = typer.Argument(..., help="Private listing ID."),
    db_path: Path | None = DB_OPTION,
    config_path: Path | None = CONFIG_OPTION,
) -> None:
    """Approve a pending listing and add it to the catalog."""
    _run_transition(db_path, config_path, listing_id, ListingStatus.APPROVED)


@app.command()
def reject(
    listing_id: int = typer.Argument(..., help="Private listing ID."),
    db_path: Path | None = DB_OPTION,
    config_path: Path | None = CONFIG_OPTION,
) -> None:
    """Reject a pending listing."""
    _run_transition(db_path, config_path, listing_id, ListingStatus.REJECTED)


def _run_transition(
    db_path: Path | None, config_path: Path | None, listing_id: int, status: ListingStatus
) -> None:
    screen, config = _moderation(db_path, config_path)

    async def run() -> bool:
        await screen.enter(config.session_present)
        if screen.state.status != ScreenStatus.READY:
            return False
        return await screen.update_status(listing_id, status)

    if not asyncio.run(run()):
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
