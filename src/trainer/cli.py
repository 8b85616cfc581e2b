"""
RFI Trainer: Main CLI.

A Rich terminal interface for drilling pre-flop opening ranges with
adaptive hand selection and spaced repetition.

Commands:
- rfi study     - Start a drill session
- rfi evaluate  - Show the strategy for one hand
- rfi chart     - Show the 13x13 range chart for a position
- rfi due       - List hands due for review
- rfi history   - List recent answers
- rfi stats     - Show training statistics
- rfi settings  - Show or change stored session settings
- rfi reset     - Clear attempts and review state
"""
from __future__ import annotations

import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer
from loguru import logger
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

from config import get_settings

from .errors import StrategyLoadError
from .hands import POSITIONS, RANKS, deal_cards, hand_at, is_valid_hand, position_label
from .selector import SelectionMode, SessionSettings
from .strategy_deck import ActionType, HandEvaluation
from .telemetry import SessionTelemetry
from .trainer import DrillTrainer, Feedback, now_ms

# =============================================================================
# CLI Setup
# =============================================================================

app = typer.Typer(
    name="rfi",
    help="RFI Trainer: pre-flop opening range drills",
    no_args_is_help=True,
)
console = Console()


# =============================================================================
# Styling
# =============================================================================

STYLES = {
    "correct": "bold green",
    "incorrect": "bold red",
    "info": "bold cyan",
    "warning": "bold yellow",
    "dim": "dim",
    "action": {
        "raise": "green",
        "call": "yellow",
        "fold": "red",
    },
    "tier": {
        "due_review": "magenta",
        "boundary": "cyan",
        "random": "blue",
    },
}

SUIT_SYMBOLS = {"s": "♠", "h": "[red]♥[/red]", "d": "[red]♦[/red]", "c": "♣"}

ACTION_KEYS = {"r": ActionType.RAISE, "c": ActionType.CALL, "f": ActionType.FOLD}


def style_action(action: str) -> str:
    color = STYLES["action"].get(action, "white")
    return f"[{color}]{action}[/{color}]"


def format_card(card: str) -> str:
    return f"{card[0]}{SUIT_SYMBOLS.get(card[1], card[1])}"


# =============================================================================
# Argument Helpers
# =============================================================================

def normalize_position(name: str) -> str:
    """Accept "btn", "BTN" or "RFI_BTN"."""
    position = name.strip().upper()
    if not position.startswith("RFI_"):
        position = f"RFI_{position}"
    if position not in POSITIONS:
        valid = ", ".join(position_label(p) for p in POSITIONS)
        raise typer.BadParameter(f"Unknown position '{name}'. Choose from: {valid}")
    return position


def normalize_hand(label: str) -> str:
    """Accept "aks" or "AKs"."""
    label = label.strip()
    hand = label[:2].upper() + label[2:].lower()
    if not is_valid_hand(hand):
        raise typer.BadParameter(f"Unknown hand '{label}'")
    return hand


def _open_trainer(strategy: Optional[Path], db: Optional[Path]) -> DrillTrainer:
    """Build the trainer, turning load failures into a clean exit."""
    settings = get_settings()
    overrides = {}
    if strategy is not None:
        overrides["strategy_path"] = strategy
    if db is not None:
        overrides["database_path"] = db
    if overrides:
        settings = settings.model_copy(update=overrides)

    try:
        return DrillTrainer.from_settings(settings)
    except StrategyLoadError as e:
        console.print(f"\n[red]Could not load strategy table:[/red] {e}")
        raise typer.Exit(1)


STRATEGY_OPTION = typer.Option(None, "--strategy", "-s", help="Strategy table JSON file")
DB_OPTION = typer.Option(None, "--db", help="SQLite state database")


# =============================================================================
# Display Helpers
# =============================================================================

def display_question(
    position: str,
    hand: str,
    tier: str,
    index: int,
    total: Optional[int],
    open_size_bb: Optional[float] = None,
) -> None:
    """Display the hand to act on, with the open size when the table has one."""
    cards = "  ".join(format_card(c) for c in deal_cards(hand))
    counter = f"Hand {index}/{total}" if total else f"Hand {index}"
    tier_color = STYLES["tier"].get(tier, "white")
    header = f"{counter}  |  [{tier_color}]{tier}[/{tier_color}]"
    size = f" {open_size_bb:g}bb" if open_size_bb is not None else ""

    panel = Panel(
        f"[bold]{position_label(position)}[/bold] opens{size}?\n\n{cards}   [dim]({hand})[/dim]",
        title=header,
        title_align="left",
        border_style="cyan",
        padding=(1, 2),
    )
    console.print(panel)


def frequency_table(evaluation: HandEvaluation) -> Table:
    table = Table(show_header=False, box=None)
    table.add_column("Action")
    table.add_column("Frequency", justify="right")
    for action, freq in evaluation.frequencies.as_dict().items():
        marker = " ◀" if action == evaluation.best_action.value else ""
        table.add_row(style_action(action), f"{freq * 100:.1f}%{marker}")
    table.add_row("[dim]boundary[/dim]", f"[dim]{evaluation.boundary_score:.3f}[/dim]")
    return table


def display_feedback(feedback: Feedback) -> None:
    """Display the graded answer with frequencies."""
    style = STYLES["correct"] if feedback.is_correct else STYLES["incorrect"]
    if feedback.is_correct:
        title = "[green]✓ Correct[/green]"
    else:
        title = (
            f"[red]✗ Incorrect[/red] - best is {style_action(feedback.correct_action.value)}"
        )

    console.print(Panel(
        frequency_table(feedback.pick.evaluation),
        title=title,
        title_align="left",
        border_style=style,
        padding=(0, 2),
    ))


def _display_session_summary(stats: dict, leaks: list[tuple[str, str]]) -> None:
    """Display end-of-session summary."""
    body = (
        f"[bold]Session Complete![/bold]\n\n"
        f"Duration: {stats['duration_minutes']:.1f} minutes\n"
        f"Hands answered: {stats['total']}\n"
        f"Accuracy: {stats['accuracy_percent']:.1f}%\n"
        f"Best streak: {stats['best_streak']}\n"
        f"Avg response: {stats['avg_response_ms'] / 1000:.1f}s"
    )
    if stats["accuracy_by_position"]:
        by_position = ", ".join(
            f"{position_label(p)} {acc * 100:.0f}%" for p, acc in stats["accuracy_by_position"].items()
        )
        body += f"\nBy position: {by_position}"
    if leaks:
        listed = ", ".join(f"{position_label(p)} {h}" for p, h in leaks[:5])
        body += f"\nRepeated misses: {listed}"

    console.print("\n")
    console.print(Panel(body, title="Summary", border_style="green"))


# =============================================================================
# Commands
# =============================================================================

@app.command()
def study(
    count: Optional[int] = typer.Option(
        None,
        "--count", "-c",
        help="Number of hands (default: stored setting, unlimited if unset)",
    ),
    mode: Optional[SelectionMode] = typer.Option(
        None,
        "--mode", "-m",
        help="Selection mode for this session",
    ),
    positions: Optional[list[str]] = typer.Option(
        None,
        "--position", "-p",
        help="Restrict to a position (repeatable)",
    ),
    strategy: Optional[Path] = STRATEGY_OPTION,
    db: Optional[Path] = DB_OPTION,
) -> None:
    """
    Start an interactive drill session.

    Hands are chosen by the three-tier lottery (due review, boundary,
    random). Answer with r (raise), c (call) or f (fold); q quits.
    """
    app_settings = get_settings()
    trainer = _open_trainer(strategy, db)
    stored = trainer.load_session_settings(
        app_settings.default_mode, app_settings.default_question_count
    )
    session = SessionSettings(
        enabled_positions=(
            frozenset(normalize_position(p) for p in positions) if positions else stored.enabled_positions
        ),
        mode=mode or stored.mode,
        question_count=count if count is not None else stored.question_count,
    )

    console.print("\n[bold cyan]RFI Trainer[/bold cyan] - Opening Ranges", style="bold")
    console.print("=" * 40)
    console.print(f"Mode: {session.mode.value}  |  Due now: {len(trainer.repetitions.due_items(now_ms()))}")

    telemetry = SessionTelemetry()
    asked = 0

    try:
        while session.question_count is None or asked < session.question_count:
            pick = trainer.select_next(session)
            if pick is None:
                console.print("\n[yellow]No hands available for these settings.[/yellow]")
                if session.mode is SelectionMode.REVIEW:
                    console.print("Review mode only repeats hands you have answered before.")
                trainer.close()
                raise typer.Exit(1)

            asked += 1
            console.print()
            display_question(
                pick.position,
                pick.hand,
                pick.tier.value,
                asked,
                session.question_count,
                trainer.index.open_size_bb(pick.position),
            )

            start_time = time.time()
            key = Prompt.ask("Action [r]aise / [c]all / [f]old / [q]uit", choices=["r", "c", "f", "q"])
            response_ms = int((time.time() - start_time) * 1000)
            if key == "q":
                break

            feedback = trainer.submit_action(pick, ACTION_KEYS[key])
            telemetry.record(
                pick.position,
                pick.hand,
                feedback.user_action.value,
                feedback.is_correct,
                feedback.boundary_score,
                response_ms,
            )
            display_feedback(feedback)
            console.print(
                f"[dim]Streak {telemetry.current_streak}  |  "
                f"{telemetry.correct_count}/{telemetry.total} correct[/dim]"
            )

    except (KeyboardInterrupt, EOFError):
        console.print("\n\n[yellow]Session interrupted.[/yellow]")

    _display_session_summary(telemetry.get_stats(), telemetry.get_leaks())
    trainer.close()


@app.command()
def evaluate(
    position: str = typer.Argument(..., help="Position, e.g. BTN or RFI_BTN"),
    hand: str = typer.Argument(..., help="Hand label, e.g. AKs"),
    strategy: Optional[Path] = STRATEGY_OPTION,
    db: Optional[Path] = DB_OPTION,
) -> None:
    """Show the strategy and review state for one hand."""
    position = normalize_position(position)
    hand = normalize_hand(hand)
    trainer = _open_trainer(strategy, db)

    evaluation = trainer.evaluate(position, hand)
    if evaluation is None:
        console.print(f"[yellow]{hand} is not defined for {position_label(position)}[/yellow]")
        trainer.close()
        raise typer.Exit(1)

    console.print(f"\n[bold]{position_label(position)} {hand}[/bold]")
    console.print(frequency_table(evaluation))

    record = trainer.repetitions.get_record(position, hand)
    if record is not None:
        due_in = max(0, record.next_review_at - now_ms()) // 1000
        console.print(f"\n[dim]Streak {record.streak}, next review in {due_in}s[/dim]")
    trainer.close()


@app.command()
def chart(
    position: str = typer.Argument(..., help="Position, e.g. CO"),
    strategy: Optional[Path] = STRATEGY_OPTION,
    db: Optional[Path] = DB_OPTION,
) -> None:
    """Show the 13x13 range chart for a position."""
    position = normalize_position(position)
    trainer = _open_trainer(strategy, db)

    table = Table(
        title=f"{position_label(position)} opening range",
        show_header=False,
        padding=(0, 1),
    )
    for _ in RANKS:
        table.add_column(justify="center")

    for row in range(len(RANKS)):
        cells = []
        for col in range(len(RANKS)):
            hand = hand_at(row, col)
            evaluation = trainer.evaluate(position, hand)
            if evaluation is None:
                cells.append(f"[dim]{hand}[/dim]")
                continue
            color = STYLES["action"][evaluation.best_action.value]
            weight = "bold " if evaluation.boundary_score >= 0.25 else ""
            cells.append(f"[{weight}{color}]{hand}[/{weight}{color}]")
        table.add_row(*cells)

    console.print(table)
    console.print(
        f"[green]raise[/green]  [yellow]call[/yellow]  [red]fold[/red]  "
        f"[bold]bold[/bold] = mixed (boundary ≥ 0.25)"
    )
    trainer.close()


@app.command()
def due(
    limit: int = typer.Option(20, "--limit", "-l", help="Number of items to list"),
    strategy: Optional[Path] = STRATEGY_OPTION,
    db: Optional[Path] = DB_OPTION,
) -> None:
    """List hands due for review."""
    trainer = _open_trainer(strategy, db)
    now = now_ms()
    items = trainer.repetitions.due_items(now)

    if not items:
        console.print("\n[green]Nothing due for review![/green]")
        trainer.close()
        return

    table = Table(title=f"{len(items)} due")
    table.add_column("Position")
    table.add_column("Hand")
    table.add_column("Streak", justify="right")
    table.add_column("Overdue", justify="right")

    for record in items[:limit]:
        overdue_s = (now - record.next_review_at) // 1000
        table.add_row(position_label(record.position), record.hand, str(record.streak), f"{overdue_s}s")

    console.print(table)
    trainer.close()


@app.command()
def history(
    limit: int = typer.Option(20, "--limit", "-l", help="Number of answers to list"),
    strategy: Optional[Path] = STRATEGY_OPTION,
    db: Optional[Path] = DB_OPTION,
) -> None:
    """List recent answers, newest first."""
    trainer = _open_trainer(strategy, db)
    attempts = trainer.store.get_recent_attempts(limit)

    if not attempts:
        console.print("\n[yellow]No answers recorded yet.[/yellow]")
        trainer.close()
        return

    table = Table(title="Recent answers")
    table.add_column("Time")
    table.add_column("Position")
    table.add_column("Hand")
    table.add_column("Action")
    table.add_column("Result")
    table.add_column("Boundary", justify="right")

    for attempt in attempts:
        answered_at = datetime.fromtimestamp(attempt.timestamp / 1000)
        result = "[green]correct[/green]" if attempt.is_correct else "[red]incorrect[/red]"
        table.add_row(
            answered_at.strftime("%Y-%m-%d %H:%M:%S"),
            position_label(attempt.position),
            attempt.hand,
            style_action(attempt.user_action),
            result,
            f"{attempt.boundary_score:.3f}",
        )

    console.print(table)
    trainer.close()


@app.command()
def stats(
    strategy: Optional[Path] = STRATEGY_OPTION,
    db: Optional[Path] = DB_OPTION,
) -> None:
    """Show training statistics and progress."""
    trainer = _open_trainer(strategy, db)
    db_stats = trainer.store.get_stats(now_ms())
    index_stats = trainer.index.get_stats()

    console.print("\n[bold cyan]Training Statistics[/bold cyan]")
    console.print("=" * 40)

    table = Table(show_header=False, box=None)
    table.add_column("Metric", style="dim")
    table.add_column("Value", style="bold")

    table.add_row("Hands in table", str(index_stats["total_hands"]))
    table.add_row("Hands tracked", str(db_stats["items_tracked"]))
    table.add_row("Hands due now", str(db_stats["items_due"]))
    table.add_row("Total answers", str(db_stats["total_attempts"]))
    table.add_row("Accuracy", f"{db_stats['accuracy_percent']:.1f}%")

    console.print(table)

    if db_stats["by_position"]:
        console.print("\n[bold]By Position[/bold]")
        position_table = Table()
        position_table.add_column("Position")
        position_table.add_column("Answers", justify="right")
        position_table.add_column("Accuracy", justify="right")
        position_table.add_column("Avg boundary", justify="right")

        for position, row in db_stats["by_position"].items():
            avg_boundary = index_stats["per_position"].get(position, {}).get("avg_boundary", 0.0)
            position_table.add_row(
                position_label(position),
                str(row["total"]),
                f"{row['accuracy_percent']:.0f}%",
                f"{avg_boundary:.3f}",
            )

        console.print(position_table)
    trainer.close()


@app.command("settings")
def settings_command(
    positions: Optional[list[str]] = typer.Option(
        None,
        "--position", "-p",
        help="Enable a position (repeatable; replaces the stored set)",
    ),
    all_positions: bool = typer.Option(
        False,
        "--all-positions",
        help="Enable every position",
    ),
    mode: Optional[SelectionMode] = typer.Option(None, "--mode", "-m", help="Selection mode"),
    count: Optional[int] = typer.Option(None, "--count", "-c", help="Hands per session"),
    unlimited: bool = typer.Option(False, "--unlimited", help="Unlimited hands per session"),
    strategy: Optional[Path] = STRATEGY_OPTION,
    db: Optional[Path] = DB_OPTION,
) -> None:
    """Show or change stored session settings."""
    app_settings = get_settings()
    trainer = _open_trainer(strategy, db)
    current = trainer.load_session_settings(
        app_settings.default_mode, app_settings.default_question_count
    )

    enabled = current.enabled_positions
    if all_positions:
        enabled = frozenset()
    elif positions:
        enabled = frozenset(normalize_position(p) for p in positions)

    question_count = current.question_count
    if unlimited:
        question_count = None
    elif count is not None:
        question_count = count

    updated = SessionSettings(
        enabled_positions=enabled,
        mode=mode or current.mode,
        question_count=question_count,
    )
    if updated != current:
        trainer.save_session_settings(updated)
        console.print("[green]Settings saved.[/green]")

    shown = updated.active_positions(POSITIONS)
    console.print(f"\nPositions: {', '.join(position_label(p) for p in shown)}")
    console.print(f"Mode: {updated.mode.value}")
    hands_per_session = "unlimited" if updated.question_count is None else updated.question_count
    console.print(f"Hands per session: {hands_per_session}")
    trainer.close()


@app.command()
def reset(
    confirm: bool = typer.Option(
        False,
        "--yes", "-y",
        help="Skip confirmation",
    ),
    strategy: Optional[Path] = STRATEGY_OPTION,
    db: Optional[Path] = DB_OPTION,
) -> None:
    """Clear answer history and review state (settings are kept)."""
    if not confirm and not Confirm.ask("Delete ALL history and review state?", default=False):
        raise typer.Exit(0)

    trainer = _open_trainer(strategy, db)
    count = trainer.store.reset()
    console.print(f"[green]Reset complete: {count} tracked hands cleared.[/green]")
    trainer.close()


# =============================================================================
# Entry Point
# =============================================================================

def main() -> None:
    """CLI entry point."""
    settings = get_settings()

    # Configure logging
    logger.remove()
    logger.add(
        sys.stderr,
        level=settings.log_level,
        format="<level>{message}</level>",
    )
    if settings.log_file:
        logger.add(
            settings.log_file,
            level="DEBUG",
            rotation="1 MB",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function} - {message}",
        )

    app()


if __name__ == "__main__":
    main()
