"""
Main CLI application using Typer.
"""

import logging
from pathlib import Path
from typing import Annotated, List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from ..config import AppConfig, build_store, get_default_config_path
from ..domain.exceptions import TherapySlotsError
from ..domain.models import AnnotatedWindow, Mode, TimeWindow
from ..services import (
    AvailabilityQuery,
    AvailabilityService,
    BookingRequest,
    BookingService,
    ScheduleService,
    TherapistService,
)

app = typer.Typer(
    name="therapyslots",
    help="Check therapy timeslot availability, match experts and manage schedules",
    add_completion=False
)

console = Console()

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml"),
]
TherapistOption = Annotated[
    Optional[str],
    typer.Option("--therapist", "-t", help="Edit this therapist's availability instead of the catalog."),
]


def _load_config(config_file: Optional[Path]) -> AppConfig:
    config = AppConfig.load_from_yaml(config_file or get_default_config_path())
    logging.basicConfig(
        level=config.logging.level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )
    return config


def _parse_window(value: str) -> TimeWindow:
    """Parse 'HH:mm-HH:mm' into a window."""
    start, sep, end = value.partition("-")
    if not sep:
        raise typer.BadParameter(f"Expected HH:mm-HH:mm, got '{value}'")
    return TimeWindow(start=start.strip(), end=end.strip())


def _fail(exc: Exception) -> None:
    console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
    raise typer.Exit(1)


def _render_windows(date: str, annotated: List[AnnotatedWindow]) -> None:
    if not annotated:
        console.print(f"[yellow]⚠ No timeslots configured for {date}.[/yellow]")
        return

    table = Table(title=f"Timeslots on {date}", show_header=True, header_style="bold cyan")
    table.add_column("From", style="bold")
    table.add_column("To", style="bold")
    table.add_column("Expert available")

    for item in annotated:
        if item.has_expert is None:
            status = "[dim]-[/dim]"
        elif item.has_expert:
            status = "[green]yes[/green]"
        else:
            status = "[red]no[/red]"
        table.add_row(item.window.start, item.window.end, status)

    console.print(table)


@app.command()
def timeslots(
    date: Annotated[str, typer.Argument(help="Date (YYYY-MM-DD)")],
    mode: Annotated[Optional[str], typer.Option("--mode", "-m", help="ONLINE or OFFLINE")] = None,
    therapy: Annotated[Optional[List[str]], typer.Option("--therapy", help="Therapy name; repeat for several.")] = None,
    therapist: Annotated[Optional[str], typer.Option("--therapist", "-t", help="Annotate against one therapist and their bookings.")] = None,
    config_file: ConfigOption = None,
):
    """
    List catalog timeslots for a date.

    Examples:

        therapyslots timeslots 2025-06-10
        therapyslots timeslots 2025-06-10 --mode online --therapy "Speech Therapy"
        therapyslots timeslots 2025-06-10 --therapist t1
    """
    try:
        config = _load_config(config_file)
        with build_store(config) as store:
            service = AvailabilityService(store)
            if therapist:
                annotated = service.annotate_for_therapist(date, therapist)
            else:
                query = AvailabilityQuery(date=date, mode=mode, therapy_names=tuple(therapy or ()))
                annotated = service.annotate_availability(query)
        _render_windows(date, annotated)
    except (TherapySlotsError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def experts(
    date: Annotated[str, typer.Argument(help="Date (YYYY-MM-DD)")],
    window: Annotated[str, typer.Argument(help="Window as HH:mm-HH:mm")],
    therapy: Annotated[List[str], typer.Option("--therapy", help="Therapy name; repeat for several.")],
    mode: Annotated[Optional[str], typer.Option("--mode", "-m", help="ONLINE or OFFLINE")] = None,
    config_file: ConfigOption = None,
):
    """
    List therapists who qualify for one window.
    """
    try:
        config = _load_config(config_file)
        with build_store(config) as store:
            candidates = AvailabilityService(store).find_qualifying_therapists(
                date=date,
                mode=Mode.parse(mode) if mode else config.defaults.mode,
                window=_parse_window(window),
                therapy_names=therapy,
            )

        if not candidates:
            console.print("[yellow]⚠ No experts available for this timeslot.[/yellow]")
            return

        table = Table(title=f"Experts for {date} {window}", show_header=True, header_style="bold cyan")
        table.add_column("ID", style="dim")
        table.add_column("Name", style="bold yellow")
        table.add_column("Expertise")
        table.add_column("Modes")
        for candidate in candidates:
            table.add_row(
                candidate.id,
                candidate.name,
                ", ".join(candidate.expertise),
                ", ".join(supported.value for supported in candidate.supported_modes),
            )
        console.print(table)
    except (TherapySlotsError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def book(
    date: Annotated[str, typer.Argument(help="Date (YYYY-MM-DD)")],
    window: Annotated[str, typer.Argument(help="Window as HH:mm-HH:mm")],
    therapy: Annotated[List[str], typer.Option("--therapy", help="Therapy name; repeat for several.")],
    user: Annotated[str, typer.Option("--user", help="Booking user id")],
    profile: Annotated[str, typer.Option("--profile", help="Profile id of the person attending")],
    mode: Annotated[Optional[str], typer.Option("--mode", "-m", help="ONLINE or OFFLINE")] = None,
    therapist: Annotated[Optional[str], typer.Option("--therapist", "-t", help="Book this therapist directly (admin booking, stored as PAID).")] = None,
    config_file: ConfigOption = None,
):
    """
    Create a booking and assign a qualifying therapist at random.

    With --therapist the chosen therapist is booked directly, unless they
    already hold a booking for the same window.
    """
    try:
        config = _load_config(config_file)
        request = BookingRequest(
            user_id=user,
            profile_id=profile,
            date=date,
            timeslot=_parse_window(window),
            mode=Mode.parse(mode) if mode else config.defaults.mode,
            therapy_names=tuple(therapy),
        )
        with build_store(config) as store:
            service = BookingService(store)
            if therapist:
                booking = service.create_booking_for_therapist(request, therapist)
            else:
                booking = service.create_booking(request)

        console.print(f"[green]✓ Booking {booking.id} created[/green] ({booking.status.value})")
        console.print(f"   Session: {booking.date} {booking.timeslot} ({booking.mode.value})")
        console.print(f"   Therapist: [bold]{booking.therapist_name or booking.therapist_id}[/bold]")
    except (TherapySlotsError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command("save-slots")
def save_slots(
    date: Annotated[str, typer.Argument(help="Date (YYYY-MM-DD)")],
    windows: Annotated[List[str], typer.Argument(help="Windows as HH:mm-HH:mm")],
    therapist: TherapistOption = None,
    config_file: ConfigOption = None,
):
    """
    Replace the slots of one date.
    """
    try:
        config = _load_config(config_file)
        slots = [_parse_window(value) for value in windows]
        with build_store(config) as store:
            service = ScheduleService(store, timezone=config.timezone)
            if therapist:
                service.save_therapist_slots(therapist, date, slots)
            else:
                service.save_catalog_slots(date, slots)
        console.print(f"[green]✓ {len(slots)} slot(s) saved for {date}.[/green]")
    except (TherapySlotsError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def copy(
    source: Annotated[str, typer.Argument(help="Source date (YYYY-MM-DD)")],
    targets: Annotated[List[str], typer.Argument(help="Target dates (YYYY-MM-DD)")],
    therapist: TherapistOption = None,
    config_file: ConfigOption = None,
):
    """
    Copy one date's slots to other dates.
    """
    try:
        config = _load_config(config_file)
        with build_store(config) as store:
            service = ScheduleService(store, timezone=config.timezone)
            if therapist:
                written = service.copy_therapist_slots(therapist, source, targets)
            else:
                written = service.copy_catalog(source, targets)
        console.print(f"[green]✓ Slots copied to {len(written)} date(s).[/green]")
    except (TherapySlotsError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def recurring(
    source: Annotated[str, typer.Argument(help="Source date (YYYY-MM-DD)")],
    day: Annotated[List[str], typer.Option("--day", "-d", help="Weekday name, e.g. Monday; repeat for several.")],
    therapist: TherapistOption = None,
    config_file: ConfigOption = None,
):
    """
    Apply one date's slots to matching weekdays for the next year.
    """
    try:
        config = _load_config(config_file)
        with build_store(config) as store:
            service = ScheduleService(store, timezone=config.timezone)
            if therapist:
                written = service.apply_therapist_recurring(therapist, source, day)
            else:
                written = service.apply_catalog_recurring(source, day)
        console.print(f"[green]✓ Recurring slots applied to {len(written)} date(s).[/green]")
    except (TherapySlotsError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def month(
    year: Annotated[int, typer.Argument(help="Year, e.g. 2025")],
    month_number: Annotated[int, typer.Argument(metavar="MONTH", help="Month 1-12")],
    therapist: Annotated[str, typer.Option("--therapist", "-t", help="Therapist id")],
    config_file: ConfigOption = None,
):
    """
    Show a therapist's availability for one month.
    """
    try:
        config = _load_config(config_file)
        with build_store(config) as store:
            calendar = AvailabilityService(store).therapist_month(therapist, year, month_number)

        if not calendar:
            console.print("[yellow]No availability in this month.[/yellow]")
            return

        for date in sorted(calendar):
            slots = ", ".join(str(slot) for slot in calendar[date]) or "-"
            console.print(f"  [bold]{date}[/bold]  {slots}")
    except (TherapySlotsError, FileNotFoundError, ValueError) as e:
        _fail(e)


ExpertiseOption = Annotated[
    Optional[List[str]],
    typer.Option("--expertise", "-e", help="Therapy name; repeat for several."),
]
ModesOption = Annotated[
    Optional[List[str]],
    typer.Option("--mode", "-m", help="ONLINE or OFFLINE; repeat for both."),
]


@app.command("add-therapist")
def add_therapist(
    name: Annotated[str, typer.Option("--name", help="Display name")],
    expertise: ExpertiseOption = None,
    mode: ModesOption = None,
    about: Annotated[str, typer.Option("--about")] = "",
    photo: Annotated[str, typer.Option("--photo", help="Photo URL")] = "",
    therapist_id: Annotated[Optional[str], typer.Option("--id", help="Id to use instead of a generated one")] = None,
    config_file: ConfigOption = None,
):
    """
    Create a therapist profile without availability.
    """
    try:
        config = _load_config(config_file)
        with build_store(config) as store:
            therapist = TherapistService(store).create_therapist(
                name=name,
                expertise=expertise or [],
                about=about,
                photo=photo,
                supported_modes=mode,
                therapist_id=therapist_id,
            )
        console.print(f"[green]✓ Therapist {therapist.id} created[/green] ({escape(therapist.name)})")
    except (TherapySlotsError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command("update-therapist")
def update_therapist(
    therapist_id: Annotated[str, typer.Argument(metavar="ID", help="Therapist id")],
    name: Annotated[Optional[str], typer.Option("--name")] = None,
    expertise: ExpertiseOption = None,
    mode: ModesOption = None,
    about: Annotated[Optional[str], typer.Option("--about")] = None,
    photo: Annotated[Optional[str], typer.Option("--photo")] = None,
    config_file: ConfigOption = None,
):
    """
    Change profile fields; options left out keep their value.
    """
    try:
        config = _load_config(config_file)
        with build_store(config) as store:
            therapist = TherapistService(store).update_therapist(
                therapist_id,
                name=name,
                expertise=expertise or None,
                about=about,
                photo=photo,
                supported_modes=mode or None,
            )
        console.print(f"[green]✓ Therapist {therapist.id} updated[/green]")
        console.print(f"   Expertise: {escape(', '.join(therapist.expertise)) or '-'}")
        console.print(f"   Modes: {', '.join(m.value for m in therapist.supported_modes)}")
    except (TherapySlotsError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def therapists(config_file: ConfigOption = None):
    """
    List all therapists.
    """
    try:
        config = _load_config(config_file)
        with build_store(config) as store:
            records = store.list_therapists()

        if not records:
            console.print("[yellow]No therapists found.[/yellow]")
            return

        table = Table(title="Therapists", show_header=True, header_style="bold cyan")
        table.add_column("ID", style="dim")
        table.add_column("Name", style="bold yellow")
        table.add_column("Expertise")
        table.add_column("Modes")
        table.add_column("Dates", justify="right")
        for record in records:
            table.add_row(
                record.id,
                record.name,
                ", ".join(record.expertise),
                ", ".join(mode.value for mode in record.supported_modes),
                str(len(record.availability)),
            )

        console.print()
        console.print(table)
        console.print()
    except (TherapySlotsError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]therapyslots[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
