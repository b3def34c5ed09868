"""
Recall: terminal flashcards with spaced repetition.

A Rich terminal interface over the local card store.

Commands:
- recall add       - Add a card
- recall edit      - Edit a card
- recall delete    - Delete a card
- recall search    - Find cards by text
- recall due       - Preview the study queue
- recall review    - Start a review session
- recall stats     - Show learning statistics
- recall tags      - List tags
- recall decks     - List decks
- recall deck-add  - Create a deck
- recall deck-delete - Delete a deck and its cards
"""
from __future__ import annotations

import sys
from dataclasses import replace
from datetime import timedelta
from typing import List, Optional

import typer
from loguru import logger
from rich.console import Console
from rich.panel import Panel
from rich.prompt import IntPrompt, Prompt
from rich.table import Table

from config import Settings, get_settings

from .card_store import DEFAULT_DECK_ID, CardStore
from .cards import Card, CardState, Rating, initialize, utcnow
from .errors import SchedulingError
from .filters import CardFilter
from .scheduler import Scheduler
from .session import ReviewSession
from .statistics import recent_activity, summarize

# =============================================================================
# CLI Setup
# =============================================================================

app = typer.Typer(
    name="recall",
    help="Recall: terminal flashcards with spaced repetition",
    no_args_is_help=True,
)
console = Console()


# =============================================================================
# Styling
# =============================================================================

STATE_STYLES = {
    CardState.NEW: "green",
    CardState.LEARNING: "yellow",
    CardState.RELEARNING: "red",
    CardState.REVIEW: "cyan",
}

RATING_LABELS = {
    Rating.AGAIN: "Again",
    Rating.HARD: "Hard",
    Rating.GOOD: "Good",
    Rating.EASY: "Easy",
}


def style_state(state: CardState) -> str:
    """Get styled card state string."""
    color = STATE_STYLES[state]
    return f"[{color}]{state.value}[/{color}]"


def format_delay(delay: timedelta) -> str:
    """Compact delay such as 1m, 10m or 4d."""
    if delay >= timedelta(days=1):
        return f"{delay.days}d"
    minutes = max(1, round(delay.total_seconds() / 60))
    if minutes >= 60:
        return f"{minutes // 60}h"
    return f"{minutes}m"


def configure_logging(settings: Settings) -> None:
    """Route loguru output according to settings."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=settings.log_level,
        format="<level>{message}</level>",
    )
    if settings.log_file:
        logger.add(settings.log_file, level="DEBUG", rotation="10 MB")


def open_store() -> CardStore:
    return CardStore(get_settings().db_path)


@app.callback()
def _setup() -> None:
    configure_logging(get_settings())


# =============================================================================
# Display Helpers
# =============================================================================

def display_card_front(card: Card, index: int, total: int) -> None:
    """Display the front of a card."""
    header = f"Card {index}/{total}  |  {style_state(card.state)}"
    if card.tags:
        header += f"  |  {', '.join(sorted(card.tags))}"

    console.print(Panel(
        card.front,
        title=header,
        title_align="left",
        border_style="cyan",
        padding=(1, 2),
    ))


def display_card_back(card: Card, scheduler: Scheduler) -> None:
    """Display the answer and what each rating would schedule."""
    console.print(Panel(card.back, border_style="green", padding=(1, 2)))

    delays = scheduler.preview(card)
    options = "   ".join(
        f"[bold]{int(rating)}[/bold] {RATING_LABELS[rating]} ({format_delay(delay)})"
        for rating, delay in delays.items()
    )
    console.print(options)


# =============================================================================
# Commands
# =============================================================================

@app.command()
def add(
    front: str = typer.Argument(..., help="Prompt side"),
    back: str = typer.Argument(..., help="Answer side"),
    tag: Optional[List[str]] = typer.Option(None, "--tag", "-t", help="Tag (repeatable)"),
    deck: str = typer.Option(DEFAULT_DECK_ID, "--deck", "-d", help="Deck id"),
) -> None:
    """Add a new card, due immediately."""
    store = open_store()
    card = initialize(front=front, back=back, tags=tag or [], deck_id=deck)

    try:
        store.add_card(card)
    except KeyError:
        console.print(f"[red]Deck not found: {deck}[/red]")
        raise typer.Exit(1)

    console.print(f"[green]Added card {card.id}[/green]")


@app.command()
def edit(
    card_id: str = typer.Argument(..., help="Card id"),
    front: Optional[str] = typer.Option(None, "--front", "-f", help="New prompt side"),
    back: Optional[str] = typer.Option(None, "--back", "-b", help="New answer side"),
    tag: Optional[List[str]] = typer.Option(None, "--tag", "-t", help="Replace tags (repeatable)"),
) -> None:
    """Edit a card's text or tags. Scheduling state is kept."""
    store = open_store()
    card = store.get_card(card_id)
    if card is None:
        console.print(f"[red]Card not found: {card_id}[/red]")
        raise typer.Exit(1)

    updated = replace(
        card,
        front=card.front if front is None else front,
        back=card.back if back is None else back,
        tags=card.tags if tag is None else frozenset(tag),
    )
    store.update_card(updated)
    console.print(f"[green]Card updated {card_id}[/green]")


@app.command()
def delete(
    card_id: str = typer.Argument(..., help="Card id"),
) -> None:
    """Delete a card."""
    store = open_store()
    if store.get_card(card_id) is None:
        console.print(f"[red]Card not found: {card_id}[/red]")
        raise typer.Exit(1)

    store.delete_card(card_id)
    console.print(f"[green]Card deleted {card_id}[/green]")


@app.command()
def search(
    query: str = typer.Argument(..., help="Text to find in front, back or tags"),
) -> None:
    """List cards matching a search query."""
    matches = open_store().search_cards(query)
    if not matches:
        console.print("No matching cards")
        return

    table = Table()
    table.add_column("ID")
    table.add_column("Front")
    table.add_column("Back")
    table.add_column("State")

    for card in matches:
        table.add_row(card.id, card.front, card.back, style_state(card.state))

    console.print(table)


@app.command()
def due(
    deck: Optional[str] = typer.Option(None, "--deck", "-d", help="Restrict to one deck"),
    limit: int = typer.Option(20, "--limit", "-l", help="Number of cards to list"),
) -> None:
    """Preview the cards that would be studied now."""
    settings = get_settings()
    session = ReviewSession(open_store(), settings.daily_new_cards, deck_id=deck)

    try:
        queue = session.build_queue()
        counts = session.due_counts()
    except SchedulingError as e:
        logger.error(str(e))
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    console.print(
        f"\n[bold]{counts.total} cards to study[/bold]  "
        f"([yellow]{counts.learning} learning[/yellow], "
        f"[cyan]{counts.review} review[/cyan], "
        f"[green]{counts.new} new[/green])\n"
    )

    if not queue:
        console.print("[green]Nothing due. All caught up![/green]")
        return

    table = Table()
    table.add_column("#", justify="right")
    table.add_column("Front")
    table.add_column("State")
    table.add_column("Interval", justify="right")

    for i, card in enumerate(queue[:limit], 1):
        table.add_row(str(i), card.front, style_state(card.state), f"{card.interval}d")

    console.print(table)


@app.command()
def review(
    deck: Optional[str] = typer.Option(None, "--deck", "-d", help="Restrict to one deck"),
    tag: Optional[str] = typer.Option(None, "--tag", "-t", help="Only cards with this tag"),
    search: Optional[str] = typer.Option(None, "--search", "-s", help="Only cards matching text"),
) -> None:
    """
    Start an interactive review session.

    Learning cards come first, then due reviews, then new cards up to the
    daily limit.
    """
    settings = get_settings()
    store = open_store()
    card_filter = CardFilter(tag=tag, query=search)
    session = ReviewSession(
        store,
        settings.daily_new_cards,
        deck_id=deck,
        card_filter=card_filter,
    )

    try:
        queue = session.build_queue()
    except SchedulingError as e:
        logger.error(str(e))
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    if not queue:
        console.print("[green]Nothing due for review![/green]")
        raise typer.Exit(0)

    if card_filter.has_active_filters:
        console.print(f"[dim]{card_filter.describe()}[/dim]")

    try:
        while queue:
            for i, card in enumerate(queue, 1):
                display_card_front(card, i, len(queue))
                Prompt.ask("[dim]Press Enter to reveal[/dim]", default="", show_default=False)
                display_card_back(card, session.scheduler)

                rating = IntPrompt.ask("Rating", choices=["1", "2", "3", "4"])
                session.record_review(card, rating)
            queue = session.build_queue()
    except (KeyboardInterrupt, EOFError):
        console.print("\n[yellow]Session interrupted.[/yellow]")

    record = session.finish()
    console.print(Panel(
        f"[bold]Session Complete![/bold]\n\n"
        f"Cards reviewed: {record.cards_reviewed}\n"
        f"Accuracy: {record.accuracy * 100:.1f}%",
        title="Summary",
        border_style="green",
    ))


@app.command()
def stats(
    days: int = typer.Option(7, "--days", help="Days of recent activity to show"),
) -> None:
    """Show learning statistics."""
    store = open_store()
    today = utcnow().date()
    sessions = store.get_sessions()
    summary = summarize(sessions, store.get_cards(), today)

    console.print("\n[bold cyan]Learning Statistics[/bold cyan]")

    table = Table(show_header=False, box=None)
    table.add_column("Metric", style="dim")
    table.add_column("Value", style="bold")

    table.add_row("Total cards", str(summary.total_cards))
    table.add_row("Total reviews", str(summary.total_reviews))
    table.add_row("Sessions", str(summary.total_review_sessions))
    table.add_row("Streak", f"{summary.streak_days} days")
    table.add_row("Accuracy", f"{summary.accuracy_rate:.1f}%")
    table.add_row("Average interval", f"{summary.average_interval:.1f} days")

    console.print(table)

    activity = Table(title="Recent Activity")
    activity.add_column("Date")
    activity.add_column("Reviews", justify="right")
    for day, reviews in recent_activity(sessions, today, days=days):
        activity.add_row(day.isoformat(), str(reviews))
    console.print(activity)


@app.command()
def tags() -> None:
    """List all tags in use."""
    all_tags = open_store().get_all_tags()
    if not all_tags:
        console.print("No tags found")
        return
    for name in all_tags:
        console.print(f"  {name}")


@app.command()
def decks() -> None:
    """List decks with their due counts."""
    settings = get_settings()
    store = open_store()

    table = Table()
    table.add_column("ID")
    table.add_column("Name")
    table.add_column("Cards", justify="right")
    table.add_column("Due", justify="right")

    for deck in store.get_decks():
        cards = store.get_cards_by_deck(deck.id)
        counts = ReviewSession(store, settings.daily_new_cards, deck_id=deck.id).due_counts()
        table.add_row(deck.id, deck.name, str(len(cards)), str(counts.total))

    console.print(table)


@app.command("deck-add")
def deck_add(
    name: str = typer.Argument(..., help="Deck name"),
) -> None:
    """Create a new deck."""
    deck = open_store().create_deck(name)
    console.print(f"[green]Created deck {deck.name} ({deck.id})[/green]")


@app.command("deck-delete")
def deck_delete(
    deck_id: str = typer.Argument(..., help="Deck id"),
) -> None:
    """Delete a deck and all of its cards."""
    store = open_store()
    if store.get_deck(deck_id) is None:
        console.print(f"[red]Deck not found: {deck_id}[/red]")
        raise typer.Exit(1)

    try:
        store.delete_deck(deck_id)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    console.print(f"[green]Deck deleted {deck_id}[/green]")


# =============================================================================
# Entry Point
# =============================================================================

def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
