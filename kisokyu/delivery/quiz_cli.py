"""
Kisokyu: terminal front-end for the adaptive quiz.

A Rich terminal interface for 20-question true/false sessions that bias
toward weak items and grade a one-line justification after each answer.

Commands:
- kisokyu study    - Start a session (1=ただしい / 2=あやまり / 0=すきっぷ)
- kisokyu stats    - Show mastery and session statistics
- kisokyu bank     - List bank items with tag and current box
- kisokyu reset    - Clear progress (a backup is written first)
- kisokyu restore  - Restore progress from a backup
"""
from __future__ import annotations

import random
import sys
from pathlib import Path
from typing import Optional

import typer
from loguru import logger
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

from config import Settings, get_settings

from .background import BackgroundWriter
from .question_bank import SKIP, Answer, Confidence, ItemKind, QuestionBank
from .reason_scorer import rationale_for, score_label, tag_for
from .sampler import get_box
from .scheduler import (
    AnsweredItem,
    AnswerRecord,
    QuizScheduler,
    QuizSession,
    SessionComposer,
    SessionConfig,
)
from .state_store import StateStore
from .telemetry import SessionSummary

# =============================================================================
# CLI Setup
# =============================================================================

app = typer.Typer(
    name="kisokyu",
    help="Kisokyu: adaptive true/false quiz",
    no_args_is_help=True,
)
console = Console()


# =============================================================================
# Labels
# =============================================================================

STR = {
    "APP_TITLE": "きそきゅう ひょうそう てすと（20もん）",
    "HINT_KEY": "（きー：1=ただしい / 2=あやまり / 0=すきっぷ）",
    "Q_PREFIX": "もんだい ",
    "PLACEHOLDER_REASON": "りゆう を ひとこと（はっけん/きずきでもOK）",
    "TXT_CORRECT_POP": "ただしい！ いいね。じしん を えらんで ください。",
    "TXT_WRONG_POP": "あやまり。なぜ そう おもった？ りゆう と じしん を いれて ね。",
    "CONF_TITLE": "じしん（hi=◎ じしん あり / md=○ ふつう / lo=△ じしん なし）",
    "RESULT_TITLE": "けっか",
    "RESULT_RETRY": "もういちど？",
    "WRONG_LIST": "まちがい りすと",
    "SKIP_LIST": "すきっぷ",
    "SEIKAI_LABEL": "せいかい：",
    "REASON_LABEL": "りゆう：",
    "TAG_LABEL": "たぐ：",
    "L_SKIP": "すきっぷ",
}

KEY_TO_ANSWER = {
    "1": Answer.MARU,
    "2": Answer.BATSU,
    "0": SKIP,
}

STYLES = {
    "correct": "bold green",
    "incorrect": "bold red",
    "skip": "bold yellow",
    "info": "bold cyan",
}


# =============================================================================
# Wiring
# =============================================================================


def _build_scheduler(
    settings: Settings,
    store: StateStore,
    writer: BackgroundWriter,
) -> QuizScheduler:
    """Assemble bank, composer and scheduler from settings."""
    bank = QuestionBank.load(settings.question_bank_path, settings.template_bank_path)
    rng = random.Random(settings.seed)
    composer = SessionComposer(
        bank,
        rng,
        SessionConfig(bank_draw=settings.bank_draw, template_draw=settings.template_draw),
    )
    return QuizScheduler(composer, store, writer)


# =============================================================================
# Display Helpers
# =============================================================================


def display_item(session: QuizSession) -> None:
    """Display the current question."""
    item = session.current_item
    position, total = session.progress
    header = f"{STR['Q_PREFIX']}{position}/{total}"
    if item.kind is ItemKind.TEMPLATE:
        header += "  |  [magenta]てんぷれ[/magenta]"

    console.print(Panel(
        item.text,
        title=header,
        title_align="left",
        border_style="cyan",
        padding=(1, 2),
    ))


def display_verdict(answered: AnsweredItem) -> None:
    """Show verdict, canonical answer, rationale and tag."""
    style = STYLES["correct"] if answered.correct else STYLES["incorrect"]
    headline = STR["TXT_CORRECT_POP"] if answered.correct else STR["TXT_WRONG_POP"]

    content = (
        f"[{style}]{headline}[/{style}]\n\n"
        f"{STR['SEIKAI_LABEL']}{answered.canonical.label}\n"
        f"{STR['REASON_LABEL']}{rationale_for(answered.item, answered.canonical)}\n"
        f"[dim]{STR['TAG_LABEL']}{tag_for(answered.item).label}[/dim]"
    )
    console.print(Panel(content, border_style=style, padding=(1, 2)))


def _ask_answer() -> str:
    key = Prompt.ask(STR["HINT_KEY"], choices=list(KEY_TO_ANSWER))
    return KEY_TO_ANSWER[key]


def run_session(scheduler: QuizScheduler, session: QuizSession) -> None:
    """Drive one session until it is complete."""
    while not session.is_complete:
        console.print()
        display_item(session)

        result = scheduler.answer(session, _ask_answer())
        if isinstance(result, AnswerRecord):
            console.print(f"[{STYLES['skip']}]{STR['L_SKIP']}[/{STYLES['skip']}]")
            continue
        if result is None:
            continue

        display_verdict(result)
        reason = Prompt.ask(STR["PLACEHOLDER_REASON"], default="", show_default=False)
        confidence = Prompt.ask(
            STR["CONF_TITLE"],
            choices=[c.value for c in Confidence],
            default=Confidence.MEDIUM.value,
        )
        record = scheduler.commit(session, justification=reason, confidence=confidence)
        if record.justification:
            console.print(f"[dim]{score_label(record.reason_score)}[/dim]")


def display_summary(summary: SessionSummary) -> None:
    """Display end-of-session results."""
    console.print()
    console.print(Panel(
        f"[{STYLES['correct']}]ただしい {summary.correct}[/{STYLES['correct']}]  /  "
        f"[{STYLES['incorrect']}]あやまり {summary.incorrect}[/{STYLES['incorrect']}]  /  "
        f"[{STYLES['skip']}]すきっぷ {summary.skipped}[/{STYLES['skip']}]\n"
        f"[dim]{summary.accuracy_percent:.0f}%  |  "
        f"りゆう へいきん {summary.avg_reason_score:.1f}[/dim]",
        title=STR["RESULT_TITLE"],
        border_style="green",
    ))

    if summary.wrong:
        table = Table(title=f"{STR['WRONG_LIST']}（{len(summary.wrong)}）", show_lines=True)
        table.add_column("もんだい")
        table.add_column("せいかい", no_wrap=True)
        table.add_column("りゆう")
        table.add_column("あなた の りゆう")
        for record in summary.wrong:
            canonical = _expected_answer(record)
            table.add_row(
                record.item.text,
                canonical.label,
                rationale_for(record.item, canonical),
                f"{record.justification or '-'}\n[dim]{score_label(record.reason_score)}[/dim]",
            )
        console.print(table)

    if summary.skips:
        table = Table(title=f"{STR['SKIP_LIST']}（{len(summary.skips)}）")
        table.add_column("もんだい")
        for record in summary.skips:
            table.add_row(record.item.text)
        console.print(table)


def _expected_answer(record: AnswerRecord) -> Answer:
    """The answer a wrong record should have been: the opposite of the submission."""
    submitted = Answer(record.user_answer)
    return Answer.BATSU if submitted is Answer.MARU else Answer.MARU


# =============================================================================
# Commands
# =============================================================================


@app.command()
def study() -> None:
    """
    Start an interactive 20-question session.

    Bank questions are drawn toward weak items; five questions are fresh
    variants generated from template pairs. Progress is saved locally.
    """
    settings = get_settings()
    console.print(f"\n[bold cyan]{STR['APP_TITLE']}[/bold cyan]")
    console.print("=" * 40)

    store = StateStore(settings.db_path)
    writer = BackgroundWriter()

    try:
        scheduler = _build_scheduler(settings, store, writer)
        session = scheduler.start()
        while True:
            run_session(scheduler, session)
            display_summary(scheduler.summarize(session))
            if not Confirm.ask(STR["RESULT_RETRY"], default=False):
                break
            session = scheduler.reset(session)
    except KeyboardInterrupt:
        console.print("\n\n[yellow]ちゅうだん しました。[/yellow]")
    finally:
        writer.close()
        store.close()


@app.command()
def stats() -> None:
    """Show mastery and session statistics."""
    store = StateStore(get_settings().db_path)
    try:
        _show_stats(store)
    finally:
        store.close()


def _show_stats(store: StateStore) -> None:
    db_stats = store.get_stats()

    console.print("\n[bold cyan]Learning Statistics[/bold cyan]")
    console.print("=" * 40)

    table = Table(show_header=False, box=None)
    table.add_column("Metric", style="dim")
    table.add_column("Value", style="bold")

    table.add_row("Items tracked", str(db_stats["items_tracked"]))
    table.add_row("Items in box 4-5", str(db_stats["items_strong"]))
    table.add_row("Total answers", str(db_stats["total_answers"]))
    table.add_row("Sessions", str(db_stats["sessions"]))
    table.add_row("Accuracy (recent)", f"{db_stats['accuracy_recent_percent']:.1f}%")
    table.add_row("Avg reason score (recent)", f"{db_stats['avg_reason_score_recent']:.2f}")
    console.print(table)

    distribution = store.get_box_distribution()
    if distribution:
        box_table = Table(title="Boxes")
        box_table.add_column("Box")
        box_table.add_column("Items")
        for box in sorted(distribution):
            box_table.add_row(str(box), str(distribution[box]))
        console.print(box_table)

    sessions = store.get_session_history(limit=5)
    if sessions:
        console.print("\n[bold]Recent Sessions[/bold]")
        session_table = Table()
        session_table.add_column("Date")
        session_table.add_column("Session")
        session_table.add_column("Answered")
        session_table.add_column("Accuracy")
        session_table.add_column("Skipped")

        for s in sessions:
            date_str = s.started_at.strftime("%Y-%m-%d %H:%M") if s.started_at else "?"
            session_table.add_row(
                date_str,
                s.session_stamp,
                str(s.answered),
                f"{s.accuracy * 100:.0f}%",
                str(s.skipped),
            )
        console.print(session_table)


@app.command()
def bank(
    limit: int = typer.Option(0, "--limit", "-l", help="Rows to show (0 = all)"),
) -> None:
    """List bank items with topic tag and current mastery box."""
    settings = get_settings()
    question_bank = QuestionBank.load(settings.question_bank_path, settings.template_bank_path)
    store = StateStore(settings.db_path)
    try:
        mastery = store.load_mastery_map()
    finally:
        store.close()

    table = Table()
    table.add_column("ID", justify="right")
    table.add_column("Tag")
    table.add_column("Box", justify="right")
    table.add_column("Answer")
    table.add_column("Text")

    items = question_bank.get_all()
    if limit > 0:
        items = items[:limit]
    for item in items:
        table.add_row(
            str(item.id),
            tag_for(item).label,
            str(get_box(mastery, item.id)),
            item.answer.label,
            item.text,
        )

    console.print(table)
    console.print(f"[dim]{question_bank.total_items} items, {len(question_bank.templates)} template pairs[/dim]")


@app.command()
def reset(
    confirm: bool = typer.Option(
        False,
        "--yes", "-y",
        help="Skip confirmation",
    ),
) -> None:
    """Clear all progress for a fresh start (a backup is written first)."""
    if not confirm and not Confirm.ask("Reset ALL progress?", default=False):
        raise typer.Exit(0)

    store = StateStore(get_settings().db_path)
    try:
        count = store.reset()
    finally:
        store.close()
    console.print(f"[green]Reset complete: {count} mastery entries removed.[/green]")


@app.command()
def restore(
    backup_file: Optional[Path] = typer.Argument(
        None,
        help="Backup JSON to restore (default: most recent)",
    ),
) -> None:
    """Restore progress from a backup."""
    store = StateStore(get_settings().db_path)
    try:
        count = store.restore(backup_file)
    finally:
        store.close()

    if count == 0:
        console.print("[yellow]Nothing restored.[/yellow]")
        raise typer.Exit(1)
    console.print(f"[green]Restored {count} mastery entries.[/green]")


# =============================================================================
# Entry Point
# =============================================================================


def main() -> None:
    """CLI entry point."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=get_settings().log_level.upper(),
        format="<level>{message}</level>",
    )

    app()


if __name__ == "__main__":
    main()
