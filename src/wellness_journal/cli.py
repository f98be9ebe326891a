"""Command-line interface for the wellness journal."""

import logging
from datetime import date, datetime, timedelta
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .models.entry import JournalEntry, JournalEntryDraft
from .models.time_settings import JournalPeriod, TimeSettings, current_period, unlocked_periods
from .services import AppContext
from .services.prompting import JournalPrompter
from .utils.config import get_settings

app = typer.Typer(
    name="journal",
    help="Wellness Journal - morning, afternoon and evening check-ins",
    no_args_is_help=True,
)
console = Console()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Configure logging for every command."""
    level = logging.DEBUG if verbose else getattr(logging, get_settings().log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def open_context() -> AppContext:
    """Build a session context from the current settings."""
    return AppContext(get_settings())


def parse_date(date_str: Optional[str]) -> date:
    """Parse a date string or return today.

    Supports:
    - None or empty: today
    - "today": today
    - "yesterday": yesterday
    - "-N": N days ago
    - "YYYY-MM-DD": specific date
    """
    if not date_str or date_str.lower() == "today":
        return date.today()

    if date_str.lower() == "yesterday":
        return date.today() - timedelta(days=1)

    if date_str.startswith("-") and date_str[1:].isdigit():
        return date.today() - timedelta(days=int(date_str[1:]))

    try:
        return datetime.strptime(date_str, "%Y-%m-%d").date()
    except ValueError:
        console.print(f"[red]Invalid date format: {date_str}[/red]")
        console.print("[dim]Use: YYYY-MM-DD, 'yesterday', or -N (days ago)[/dim]")
        raise typer.Exit(1)


def require_user(context: AppContext) -> None:
    if context.auth.user is None:
        console.print("[red]Not signed in. Run 'journal login' first.[/red]")
        raise typer.Exit(1)


def find_entry(context: AppContext, entry_id: str) -> JournalEntry:
    for entry in context.journal.snapshot.entries:
        if entry.id == entry_id:
            return entry
    console.print(f"[yellow]No entry found with id {entry_id}[/yellow]")
    raise typer.Exit(1)


# ----- Accounts -----


@app.command()
def signup(
    email: str = typer.Argument(..., help="Email address"),
    password: str = typer.Option(
        ..., "--password", "-p",
        prompt=True, hide_input=True, confirmation_prompt=True,
        help="Password",
    ),
):
    """Create an account and sign in."""
    with open_context() as context:
        if not context.auth.sign_up(email, password):
            console.print(f"[red]{context.auth.state.error}[/red]")
            raise typer.Exit(1)
        console.print(f"[green]✓ Signed up as {context.auth.user.email}[/green]")


@app.command()
def login(
    email: str = typer.Argument(..., help="Email address"),
    password: str = typer.Option(
        ..., "--password", "-p",
        prompt=True, hide_input=True,
        help="Password",
    ),
):
    """Sign in."""
    with open_context() as context:
        if not context.auth.sign_in(email, password):
            console.print(f"[red]{context.auth.state.error}[/red]")
            raise typer.Exit(1)
        console.print(f"[green]✓ Signed in as {context.auth.user.email}[/green]")


@app.command()
def logout():
    """Sign out."""
    with open_context() as context:
        context.auth.sign_out()
    console.print("[green]✓ Signed out[/green]")


@app.command()
def whoami():
    """Show the signed-in user."""
    with open_context() as context:
        user = context.auth.user
        if user is None:
            console.print("[yellow]Not signed in[/yellow]")
            raise typer.Exit(0)
        console.print(f"{user.email} [dim]({user.uid})[/dim]")


# ----- Entries -----


@app.command()
def new(
    date_str: Optional[str] = typer.Option(
        None, "--date", "-d",
        help="Date for entry (YYYY-MM-DD). Defaults to today.",
    ),
    morning_energy: Optional[int] = typer.Option(None, "--morning-energy", min=1, max=10),
    morning_focus: Optional[str] = typer.Option(None, "--morning-focus"),
    afternoon_energy: Optional[int] = typer.Option(None, "--afternoon-energy", min=1, max=10),
    afternoon_moment: Optional[str] = typer.Option(None, "--afternoon-moment"),
    evening_energy: Optional[int] = typer.Option(None, "--evening-energy", min=1, max=10),
    evening_emotion: Optional[str] = typer.Option(None, "--evening-emotion"),
    evening_authentic: Optional[str] = typer.Option(None, "--evening-authentic"),
    evening_acting: Optional[str] = typer.Option(None, "--evening-acting"),
    evening_admiration: Optional[str] = typer.Option(None, "--evening-admiration"),
    all_periods: bool = typer.Option(
        False, "--all",
        help="Ask every period, even ones not unlocked yet",
    ),
):
    """Write a journal entry.

    With any field option the entry is saved as given; otherwise the open
    periods are asked interactively.
    """
    entry_date = parse_date(date_str)
    fields = {
        "morning_energy": morning_energy,
        "morning_focus": morning_focus,
        "afternoon_energy": afternoon_energy,
        "afternoon_moment": afternoon_moment,
        "evening_energy": evening_energy,
        "evening_emotion": evening_emotion,
        "evening_authentic": evening_authentic,
        "evening_acting": evening_acting,
        "evening_admiration": evening_admiration,
    }
    given = {k: v for k, v in fields.items() if v is not None}

    with open_context() as context:
        require_user(context)

        if not given:
            prompter = JournalPrompter(context.queries, context.time_settings.settings, console)
            result = prompter.start_entry(entry_date, include_locked=all_periods)
            if result is not None and not result.success:
                raise typer.Exit(1)
            return

        result = context.queries.save(JournalEntryDraft(date=entry_date.isoformat(), **given))
        if not result.success:
            console.print(f"[red]❌ Error saving: {result.error}[/red]")
            raise typer.Exit(1)
        console.print(f"[green]✓ Entry saved[/green] [dim]({result.id})[/dim]")


@app.command(name="list")
def list_entries(
    limit: int = typer.Option(
        10, "--limit", "-n",
        help="Number of entries to show",
    ),
):
    """List recent journal entries, newest first."""
    with open_context() as context:
        require_user(context)
        state = context.journal.snapshot

        if state.error:
            console.print(f"[red]{state.error}[/red]")

        if not state.entries:
            console.print("[yellow]No entries found[/yellow]")
            raise typer.Exit(0)

        table = Table(title=f"Recent Entries ({min(limit, len(state.entries))} of {len(state.entries)})")
        table.add_column("ID", style="dim")
        table.add_column("Date", style="cyan")
        table.add_column("🌅", justify="center")
        table.add_column("☀️", justify="center")
        table.add_column("🌙", justify="center")
        table.add_column("Emotion")

        for entry in state.entries[:limit]:
            table.add_row(
                entry.id or "",
                entry.date,
                str(entry.morning_energy or "-"),
                str(entry.afternoon_energy or "-"),
                str(entry.evening_energy or "-"),
                entry.evening_emotion or "",
            )

        console.print(table)


@app.command()
def show(
    entry_id: str = typer.Argument(..., help="Entry id"),
):
    """Show a journal entry."""
    with open_context() as context:
        require_user(context)
        entry = find_entry(context, entry_id)

        console.print(Panel(entry.summary(), title=f"🌱 {entry.date}"))
        for period in JournalPeriod:
            lines = []
            for field in period.fields:
                value = getattr(entry, field)
                if value not in (None, ""):
                    lines.append(f"  • {field.split('_', 1)[1]}: {value}")
            if lines:
                console.print(f"\n[bold]{period.value.title()}[/bold]")
                console.print("\n".join(lines))


@app.command()
def edit(
    entry_id: str = typer.Argument(..., help="Entry id"),
    field: list[str] = typer.Option(
        ..., "--set", "-s",
        help="Field to change as name=value, e.g. --set evening_emotion=calm",
    ),
):
    """Change fields of an existing entry."""
    changes = {}
    for item in field:
        name, sep, value = item.partition("=")
        if not sep:
            console.print(f"[red]Expected name=value, got: {item}[/red]")
            raise typer.Exit(1)
        name = name.strip()
        changes[name] = int(value) if name.endswith("_energy") and value.strip().isdigit() else value

    with open_context() as context:
        require_user(context)
        find_entry(context, entry_id)
        result = context.queries.update(entry_id, changes)
        if not result.success:
            console.print(f"[red]❌ Error updating: {escape(result.error or '')}[/red]")
            raise typer.Exit(1)
        console.print("[green]✓ Entry updated[/green]")


@app.command()
def delete(
    entry_id: str = typer.Argument(..., help="Entry id"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Don't ask for confirmation"),
):
    """Delete a journal entry."""
    with open_context() as context:
        require_user(context)
        entry = find_entry(context, entry_id)
        if not yes and not typer.confirm(f"Delete the entry for {entry.date}?"):
            raise typer.Exit(0)
        result = context.queries.delete(entry_id)
        if not result.success:
            console.print(f"[red]❌ Error deleting: {result.error}[/red]")
            raise typer.Exit(1)
        console.print("[green]✓ Entry deleted[/green]")


# ----- Settings -----


@app.command()
def periods():
    """Show which periods are open right now."""
    with open_context() as context:
        settings = context.time_settings.settings
        now = datetime.now()
        opened = unlocked_periods(settings, now)
        current = current_period(settings, now)

        table = Table(title=f"Journal periods at {now.strftime('%H:%M')}")
        table.add_column("Period", style="cyan")
        table.add_column("Opens at", justify="center")
        table.add_column("Status", justify="center")

        for period in JournalPeriod:
            if period == current:
                status = "[green]● open now[/green]"
            elif period in opened:
                status = "[green]open[/green]"
            else:
                status = "[dim]locked[/dim]"
            table.add_row(period.value.title(), period.unlock_time(settings).strftime("%H:%M"), status)

        console.print(table)


@app.command()
def settings(
    morning: Optional[str] = typer.Option(None, "--morning", help="Morning unlock time (HH:MM)"),
    afternoon: Optional[str] = typer.Option(None, "--afternoon", help="Afternoon unlock time (HH:MM)"),
    evening: Optional[str] = typer.Option(None, "--evening", help="Evening unlock time (HH:MM)"),
):
    """Show or change the unlock times."""
    with open_context() as context:
        current = context.time_settings.settings

        if morning or afternoon or evening:
            require_user(context)
            try:
                updated = TimeSettings(
                    morning_unlock=morning or current.morning_unlock,
                    afternoon_unlock=afternoon or current.afternoon_unlock,
                    evening_unlock=evening or current.evening_unlock,
                )
            except ValueError as e:
                console.print(f"[red]Invalid time: {escape(str(e))}[/red]")
                raise typer.Exit(1)
            result = context.time_settings.save(updated)
            if not result.success:
                console.print(f"[red]❌ Error saving: {result.error}[/red]")
                raise typer.Exit(1)
            console.print("[green]✓ Saved[/green]")
            current = updated

        table = Table(title="⏰ Unlock Times")
        table.add_column("Period", style="cyan")
        table.add_column("Opens at", justify="center")
        table.add_row("Morning", current.morning_unlock)
        table.add_row("Afternoon", current.afternoon_unlock)
        table.add_row("Evening", current.evening_unlock)
        console.print(table)


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", "-h", help="Host to bind to"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port to bind to"),
):
    """Start the web API."""
    from .web import run

    settings = get_settings()
    host = host or settings.host
    port = port or settings.port

    console.print(f"[green]Starting web API at http://{host}:{port}[/green]")
    console.print("[dim]Press Ctrl+C to stop[/dim]\n")

    run(host, port)


if __name__ == "__main__":
    app()
