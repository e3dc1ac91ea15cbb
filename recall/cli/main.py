"""
Recall CLI - terminal front-end for the scheduling engine.

Usage:
    recall init                      # Create tables
    recall add-set "Biology"         # New card set
    recall add-card Biology "Q" "A"  # New card
    recall due                       # Due count and time estimate
    recall queue                     # Today's review queue
    recall session Biology           # Build a study session
    recall grade <card-id> good      # Submit a review grade
    recall stats                     # Proficiency, mastery, milestones
    recall forecast                  # Cards due over the next days
    recall streak --record           # Record a finished session
"""

from __future__ import annotations

from typing import Annotated, NoReturn
from uuid import UUID

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from recall.config import get_settings
from recall.core.exceptions import CardNotFoundError, CardSetNotFoundError, RecallError
from recall.core.mastery import format_progress_bar
from recall.core.models import Card, CardSet, Grade
from recall.factory import build_study_service
from recall.logging_config import configure_logging
from recall.study.study_service import StudyService

# =============================================================================
# CLI Setup
# =============================================================================

app = typer.Typer(
    name="recall",
    help="Recall - SM-2 flashcard scheduling from the terminal",
    add_completion=False,
    rich_markup_mode="rich",
)

console = Console()

_state: dict[str, str | None] = {"database_url": None}


@app.callback()
def main(
    database_url: Annotated[
        str | None, typer.Option("--db", help="SQLAlchemy URL (overrides DATABASE_URL)")
    ] = None,
) -> None:
    """Recall - SM-2 flashcard scheduling."""
    _state["database_url"] = database_url
    configure_logging()


def get_service() -> StudyService:
    """Build the study service for this invocation."""
    settings = get_settings()
    if _state["database_url"]:
        settings = settings.model_copy(update={"database_url": _state["database_url"]})
    return build_study_service(settings)


def _fail(message: str) -> NoReturn:
    console.print(f"[red]✗ {message}[/]")
    raise typer.Exit(1)


def _resolve_set(service: StudyService, ref: str) -> CardSet:
    """Find a set by id or (case-insensitive) topic."""
    try:
        return service.store.get_set(UUID(ref))
    except ValueError:
        pass
    for card_set in service.store.list_sets():
        if card_set.topic.strip().lower() == ref.strip().lower():
            return card_set
    raise CardSetNotFoundError(ref)


def _resolve_card(service: StudyService, ref: str) -> Card:
    """Find a card by full id or unique id prefix."""
    try:
        return service.store.get_card(UUID(ref))
    except ValueError:
        pass
    matches = [
        card
        for card_set in service.store.list_sets()
        for card in card_set.cards
        if str(card.id).startswith(ref.lower())
    ]
    if len(matches) != 1:
        raise CardNotFoundError(ref)
    return matches[0]


def _card_table(title: str, cards: list[Card]) -> Table:
    table = Table(title=title)
    table.add_column("ID", style="dim")
    table.add_column("Front", style="white")
    table.add_column("Due", style="cyan")
    table.add_column("Interval", style="green", justify="right")
    table.add_column("Ease", style="yellow", justify="right")
    table.add_column("Mastery")

    for card in cards:
        level = card.mastery_level
        table.add_row(
            str(card.id)[:8],
            card.front[:50],
            card.next_review_at.strftime("%Y-%m-%d %H:%M"),
            f"{card.interval_days}d",
            f"{card.ease_factor:.2f}",
            f"[{level.color}]{level.emoji} {level.display_name}[/]",
        )
    return table


# =============================================================================
# Content Commands
# =============================================================================


@app.command("init")
def init() -> None:
    """Create the database tables."""
    get_service()
    console.print("[green]✓ Database ready[/]")


@app.command("add-set")
def add_set(
    topic: Annotated[str, typer.Argument(help="Topic name")],
    tag: Annotated[str, typer.Option("--tag", "-t", help="Primary tag")] = "",
) -> None:
    """Create a card set."""
    service = get_service()
    card_set = service.store.add_set(CardSet(topic=topic, tag=tag))
    console.print(f"[green]✓ Created set[/] {card_set.topic} [dim]({card_set.id})[/]")


@app.command("add-card")
def add_card(
    set_ref: Annotated[str, typer.Argument(help="Set id or topic")],
    front: Annotated[str, typer.Argument(help="Question side")],
    back: Annotated[str, typer.Argument(help="Answer side")],
) -> None:
    """Add a card to a set."""
    service = get_service()
    try:
        card_set = _resolve_set(service, set_ref)
        card = service.store.add_card(Card(front=front, back=back), card_set.id)
    except RecallError as e:
        _fail(str(e))
    console.print(f"[green]✓ Added card[/] [dim]{card.id}[/] to {card_set.topic}")


@app.command("sets")
def list_sets() -> None:
    """List card sets with their due and new counts."""
    service = get_service()
    card_sets = service.store.list_sets()

    table = Table(title="📚 Card Sets")
    table.add_column("Topic", style="cyan")
    table.add_column("Cards", justify="right")
    table.add_column("Due", style="yellow", justify="right")
    table.add_column("New", style="green", justify="right")
    table.add_column("Success", justify="right")

    for card_set in card_sets:
        stats = service.statistics.set_statistics(card_set)
        table.add_row(
            card_set.topic,
            str(stats.total_cards),
            str(stats.due_cards),
            str(stats.new_cards),
            f"{stats.average_success_rate:.0%}",
        )
    console.print(table)


# =============================================================================
# Study Commands
# =============================================================================


@app.command("due")
def due() -> None:
    """Show how many cards are due and how long they will take."""
    service = get_service()
    card_sets = service.store.list_sets()
    count = service.statistics.due_count(card_sets)
    minutes = service.statistics.estimate_daily_study_minutes(card_sets)

    console.print(
        Panel(
            f"[bold cyan]{count}[/] card{'s' if count != 1 else ''} due\n"
            f"Estimated time: [green]{minutes} min[/]",
            title="🧠 Today",
            border_style="cyan",
        )
    )


@app.command("queue")
def queue(
    limit: Annotated[int, typer.Option("--limit", "-n", help="Rows to show")] = 20,
) -> None:
    """Show today's review queue, earliest due first."""
    service = get_service()
    cards = service.statistics.daily_review_queue(service.store.list_sets())
    if not cards:
        console.print("[green]Nothing due. 🎉[/]")
        return
    console.print(_card_table(f"Review Queue ({len(cards)} due)", cards[:limit]))


@app.command("session")
def session(
    set_ref: Annotated[str, typer.Argument(help="Set id or topic")],
    max_new: Annotated[
        int | None, typer.Option("--max-new", help="New cards to include")
    ] = None,
    max_review: Annotated[
        int | None, typer.Option("--max-review", help="Review cards to include")
    ] = None,
) -> None:
    """Build a shuffled study session for a set."""
    service = get_service()
    try:
        card_set = _resolve_set(service, set_ref)
    except RecallError as e:
        _fail(str(e))
    cards = service.start_session(card_set.id, max_new=max_new, max_review=max_review)
    if not cards:
        console.print(f"[green]Nothing to study in {card_set.topic}.[/]")
        return
    console.print(_card_table(f"Session: {card_set.topic}", cards))


@app.command("preview")
def preview(
    card_ref: Annotated[str, typer.Argument(help="Card id or id prefix")],
) -> None:
    """Show when each grade would schedule a card."""
    service = get_service()
    try:
        card = _resolve_card(service, card_ref)
    except RecallError as e:
        _fail(str(e))

    table = Table(title=card.front[:60] or str(card.id))
    table.add_column("Grade")
    table.add_column("Next review", style="cyan")
    for grade, when in service.scheduler.estimate_next_intervals(card).items():
        table.add_row(f"[{grade.color}]{grade.display_name}[/]", when.strftime("%Y-%m-%d %H:%M"))
    console.print(table)


@app.command("grade")
def grade(
    card_ref: Annotated[str, typer.Argument(help="Card id or id prefix")],
    rating: Annotated[Grade, typer.Argument(help="again, good or easy", case_sensitive=False)],
) -> None:
    """Submit a review grade for a card."""
    service = get_service()
    try:
        card = service.grade_card(_resolve_card(service, card_ref), rating)
    except RecallError as e:
        _fail(str(e))

    console.print(
        f"[{rating.color}]{rating.display_name}[/] → next review "
        f"[cyan]{card.next_review_at.strftime('%Y-%m-%d %H:%M')}[/] "
        f"(interval {card.interval_days}d, ease {card.ease_factor:.2f})"
    )


# =============================================================================
# Statistics Commands
# =============================================================================


@app.command("stats")
def stats() -> None:
    """Show topic proficiency, mastery distribution and milestones."""
    service = get_service()
    card_sets = service.store.list_sets()

    topics = Table(title="Topic Proficiency")
    topics.add_column("Topic", style="cyan")
    topics.add_column("Proficiency")
    topics.add_column("Cards", justify="right")
    topics.add_column("Mastered", justify="right")
    for p in service.statistics.topic_proficiencies(card_sets):
        topics.add_row(
            p.topic,
            f"{format_progress_bar(p.proficiency)} {p.proficiency:.0%}",
            str(p.card_count),
            str(p.mastered_count),
        )
    console.print(topics)

    mastery = Table(title="Mastery")
    mastery.add_column("Level")
    mastery.add_column("Cards", justify="right")
    for level, count in service.statistics.mastery_distribution(card_sets).items():
        mastery.add_row(f"[{level.color}]{level.emoji} {level.display_name}[/]", str(count))
    console.print(mastery)

    current = service.streaks.current_streak()
    milestones = Table(title="Milestones")
    milestones.add_column("")
    milestones.add_column("Milestone", style="cyan")
    milestones.add_column("Description", style="dim")
    for m in service.statistics.milestones(card_sets, current):
        milestones.add_row("✓" if m.is_achieved else "·", m.title, m.description)
    console.print(milestones)


@app.command("forecast")
def forecast(
    days: Annotated[int, typer.Option("--days", "-d", help="Days to forecast")] = 7,
) -> None:
    """Show how many cards fall due on each upcoming day."""
    service = get_service()
    rows = service.statistics.due_forecast(service.store.list_sets(), days=days)
    peak = max((row.count for row in rows), default=0) or 1

    table = Table(title=f"Due Forecast (Next {days} Days)")
    table.add_column("Day", style="cyan")
    table.add_column("Cards", justify="right")
    table.add_column("")
    for row in rows:
        label = "Today" if row.is_today else row.day.strftime("%a %d")
        table.add_row(label, str(row.count), format_progress_bar(row.count / peak, width=20))
    console.print(table)
    console.print(f"Total due in next {days} days: {sum(row.count for row in rows)} cards")


@app.command("streak")
def streak(
    record: Annotated[
        bool, typer.Option("--record", "-r", help="Record a completed session now")
    ] = False,
) -> None:
    """Show (or extend) the study streak."""
    service = get_service()
    if record:
        service.complete_session()

    current = service.streaks.current_streak()
    longest = service.streaks.longest_streak()
    console.print(
        Panel(
            f"🔥 Current streak: [bold]{current}[/] day{'s' if current != 1 else ''}\n"
            f"🏆 Longest streak: [bold]{longest}[/]",
            title="Study Streak",
            border_style="yellow",
        )
    )


def run() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    run()
