"""Interactive prompting for journal check-ins."""

from datetime import date, datetime
from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.prompt import IntPrompt, Prompt

from ..models.entry import JournalEntryDraft
from ..models.results import SaveResult
from ..models.time_settings import JournalPeriod, TimeSettings, unlocked_periods
from .queries import JournalQueries

QUESTIONS = {
    "morning_focus": "What is one thing about myself I want to notice today?",
    "afternoon_moment": "When today have I felt most like myself?",
    "evening_emotion": "Which emotion did I feel most strongly today?",
    "evening_authentic": "When did I feel most like myself today?",
    "evening_acting": "When did I feel I was acting or trying to fit in?",
    "evening_admiration": "Did I admire someone today? What quality did I see that I can have too?",
}

PERIOD_TITLES = {
    JournalPeriod.MORNING: "🌅 Morning (2 minutes)",
    JournalPeriod.AFTERNOON: "☀️ Afternoon (2 minutes)",
    JournalPeriod.EVENING: "🌙 Evening (5 minutes)",
}


class JournalPrompter:
    """
    Walks the user through the check-ins that are open right now.

    Locked periods are skipped unless ``include_locked`` is set.
    """

    def __init__(
        self,
        queries: JournalQueries,
        time_settings: TimeSettings,
        console: Optional[Console] = None,
    ):
        self.queries = queries
        self.time_settings = time_settings
        self.console = console or Console()

    def periods_to_ask(self, now: datetime, include_locked: bool = False) -> list[JournalPeriod]:
        if include_locked:
            return list(JournalPeriod)
        return unlocked_periods(self.time_settings, now)

    def start_entry(
        self,
        entry_date: Optional[date] = None,
        now: Optional[datetime] = None,
        include_locked: bool = False,
    ) -> Optional[SaveResult]:
        """Ask the open periods' questions and save the entry."""
        entry_date = entry_date or date.today()
        now = now or datetime.now()
        periods = self.periods_to_ask(now, include_locked)

        self.console.print(Panel(
            f"[bold blue]Journal Entry[/bold blue]\n"
            f"Date: {entry_date.strftime('%A, %B %d, %Y')}",
            title="🌱 Wellness Journal",
        ))

        if not periods:
            self.console.print(
                f"[yellow]Nothing is open yet. Morning opens at "
                f"{self.time_settings.morning_unlock}.[/yellow]"
            )
            return None

        values: dict = {"date": entry_date.isoformat()}
        for period in periods:
            values.update(self._prompt_period(period))

        result = self.queries.save(JournalEntryDraft(**values))
        if result.success:
            self.console.print(Panel(
                "Thanks for today's entry! 🌟",
                title="✅ Entry Saved",
                style="green",
            ))
        else:
            self.console.print(f"[red]❌ Error saving: {result.error}[/red]")
        return result

    def _prompt_period(self, period: JournalPeriod) -> dict:
        self.console.print(f"\n[bold]{PERIOD_TITLES[period]}[/bold]")
        answers = {}
        for field in period.fields:
            if field.endswith("_energy"):
                answers[field] = self._prompt_energy()
            else:
                answers[field] = Prompt.ask(QUESTIONS[field], default="", console=self.console)
        return answers

    def _prompt_energy(self) -> int:
        """Ask for an energy level until it is within 1-10."""
        while True:
            level = IntPrompt.ask(
                "How is my energy right now? (1 = exhausted, 10 = full of energy)",
                console=self.console,
            )
            if 1 <= level <= 10:
                return level
            self.console.print("[red]Please pick a number from 1 to 10[/red]")
