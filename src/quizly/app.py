"""Interactive CLI application."""
import os
import threading
from datetime import date

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from quizly.catalog import load_category, reload_catalog
from quizly.db import DEFAULT_DB_PATH, init_db
from quizly.engine import QuizEngine, Status, random_category
from quizly.errors import QuizlyError
from quizly.ledger import ScoreLedger
from quizly.log import configure_logging
from quizly.models import Category
from quizly.settings import (
    SOUND_ENABLED, THEME_MODE, THEME_MODES, TOGGLES,
    get_all_settings, get_flag, set_flag, set_theme_mode,
)
from quizly.stats import build_results_summary, build_stats_overview
from quizly.store import QuestionStore

console = Console()


class SessionExitRequested(Exception):
    """Raised when the user types 'q' or 'menu' in the middle of a quiz."""


def session_prompt(prompt: str, choices=None, **kwargs) -> str:
    if choices:
        kwargs["choices"] = list(choices) + ["q"]
    answer = Prompt.ask(prompt, **kwargs)
    if answer.strip().lower() in ("q", "menu"):
        raise SessionExitRequested()
    return answer


def next_day_streak(last_quiz_at: int | None, current: int, today: date | None = None) -> int:
    """Day streak after finishing a quiz today, given when the previous one was played."""
    today = today or date.today()
    if last_quiz_at is None:
        return 1
    days = (today - date.fromtimestamp(last_quiz_at)).days
    if days <= 0:
        return max(current, 1)
    if days == 1:
        return current + 1
    return 1


class ConsoleFeedback:
    """Rings the terminal bell on answer events when sound is enabled."""

    def __init__(self, db_path: str):
        self.db_path = db_path

    def __call__(self, event: str) -> None:
        if get_flag(self.db_path, SOUND_ENABLED):
            console.bell()


def show_welcome():
    console.print(Panel(
        "[bold]Quizly[/bold]\n[dim]Timed trivia across every category[/dim]",
        title="Welcome", border_style="blue",
    ))


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("play", "Pick a category and start a quiz"),
        ("random", "Quick start in a random category"),
        ("stats", "Scores, streaks and badges"),
        ("settings", "Sound and notification preferences"),
        ("reload", "Reload the question catalog"),
        ("reset", "Clear all scores"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


def show_question(state) -> None:
    question = state.current_question
    console.print(
        f"\n[bold]Q{state.current_index + 1}/{state.question_count}[/bold]  "
        f"[dim]{question.difficulty.value.title()} · {question.time_limit}s · "
        f"score {state.score} · streak {state.current_streak}[/dim]"
    )
    console.print(f"{question.text}\n")
    for i, option in enumerate(question.options):
        console.print(f"  [cyan]{i + 1})[/cyan] {option.text}")


def show_feedback(state, index: int) -> None:
    answered = state.answered_questions[index]
    question = answered.question
    if answered.timed_out:
        console.print(f"[yellow]Time's up![/yellow] Answer: [green]{question.correct_option.text}[/green]")
    elif answered.is_correct:
        console.print(f"[green]Correct![/green] Streak: {state.current_streak}")
    else:
        console.print(f"[red]Incorrect.[/red] Answer: [green]{question.correct_option.text}[/green]")
    if question.explanation:
        console.print(f"[dim]{question.explanation}[/dim]")


def run_quiz_session(engine: QuizEngine, category: Category):
    """Play one quiz to the end. Returns the QuizResult, or None if it could not start."""
    changed = threading.Condition()
    latest = [engine.state]

    def on_change(state):
        with changed:
            latest[0] = state
            changed.notify_all()

    unsubscribe = engine.subscribe(on_change)
    wait_timeout = engine.config.advance_delay + 5
    try:
        engine.start(category)
        while True:
            state = engine.state
            if state.status is Status.ERROR:
                console.print(f"[yellow]{state.error}[/yellow]")
                return None
            if state.status is Status.COMPLETE:
                return engine.result()
            index = state.current_index
            show_question(state)
            choices = [str(i + 1) for i in range(len(state.current_question.options))]
            answer = session_prompt("\nYour answer", choices=choices)
            engine.submit_answer(int(answer) - 1, question_index=index)
            # a countdown that ran out while waiting already scored this question
            show_feedback(engine.state, index)
            with changed:
                moved_on = changed.wait_for(
                    lambda: latest[0].status is not Status.ACTIVE or latest[0].current_index != index,
                    timeout=wait_timeout,
                )
            if not moved_on:
                console.print("[red]Quiz stalled; see the log for details.[/red]")
                return None
    finally:
        unsubscribe()
        engine.cancel()


def show_results(ledger: ScoreLedger, result) -> None:
    summary = build_results_summary(ledger, result)
    level = summary["achievement"]
    lines = [
        f"{level.emoji} [bold]{level.title}[/bold]",
        f"Score: [bold]{summary['score']}[/bold]  "
        f"({summary['correct_answers']}/{summary['total_questions']}, {summary['percentage']}%)",
        f"Best streak this quiz: {summary['max_streak']}",
        f"Time spent: {summary['time_spent']}s",
    ]
    if summary["is_new_best"]:
        lines.append(f"[green]New personal best![/green] (previous {summary['previous_best']})")
    if summary["best_category"]:
        lines.append(f"[dim]Your strongest category: {summary['best_category'].display_name}[/dim]")
    console.print(Panel("\n".join(lines), title=summary["category"].display_name, border_style="green"))


def play_category(engine: QuizEngine, ledger: ScoreLedger, category: Category) -> None:
    totals = ledger.get_totals()
    result = run_quiz_session(engine, category)
    if result is None:
        return
    ledger.update_streak(next_day_streak(totals.last_quiz_at, totals.current_streak))
    show_results(ledger, result)


def choose_category(store: QuestionStore, ledger: ScoreLedger) -> Category:
    counts = store.get_category_counts()
    scores = {s.category: s for s in ledger.get_all_category_stats()}
    table = Table(title="Categories")
    table.add_column("#", justify="right")
    table.add_column("Category", style="cyan")
    table.add_column("Questions", justify="right")
    table.add_column("Best", justify="right")
    categories = list(Category)
    for i, category in enumerate(categories, 1):
        table.add_row(str(i), category.display_name, str(counts[category]), str(scores[category].best_score))
    console.print(table)
    choice = Prompt.ask("Select category", choices=[str(i) for i in range(1, len(categories) + 1)])
    return categories[int(choice) - 1]


def cmd_stats(ledger: ScoreLedger) -> None:
    overview = build_stats_overview(ledger)
    console.print(Panel(
        f"Total score: [bold]{overview['total_score']}[/bold]  |  "
        f"Quizzes: [bold]{overview['total_quizzes']}[/bold]  |  "
        f"Average: [bold]{overview['average_score']}[/bold]\n"
        f"Day streak: [bold]{overview['current_streak']}[/bold]  |  "
        f"Best streak: [bold]{overview['best_streak']}[/bold]",
        title="Your Stats", border_style="blue",
    ))

    if overview["category_scores"]:
        table = Table(title="Category Breakdown")
        table.add_column("Category", style="cyan")
        table.add_column("Attempts", justify="right")
        table.add_column("Best", justify="right")
        table.add_column("Average", justify="right")
        table.add_column("Accuracy", justify="right")
        for s in overview["category_scores"]:
            table.add_row(
                s.category.display_name, str(s.attempts), str(s.best_score),
                f"{s.average_score:.1f}", f"{s.accuracy:.0f}%",
            )
        console.print(table)
    else:
        console.print("[dim]No quizzes completed yet.[/dim]")

    console.print("\n[bold]Badges:[/bold]")
    for badge in overview["unlocked_badges"]:
        console.print(f"  {badge.icon} [green]{badge.title}[/green] [dim]{badge.description}[/dim]")
    for badge in overview["locked_badges"]:
        console.print(f"  [dim]🔒 {badge.title} - {badge.description}[/dim]")


def cmd_settings(db_path: str) -> None:
    current = get_all_settings(db_path)
    table = Table(title="Settings")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    table.add_row("Theme", current[THEME_MODE])
    for key, label in TOGGLES.items():
        table.add_row(label, "[green]on[/green]" if current[key] else "[red]off[/red]")
    console.print(table)

    choice = Prompt.ask("Change", choices=["theme", *TOGGLES.keys(), "done"], default="done")
    if choice == "theme":
        mode = Prompt.ask("Theme", choices=[m.lower() for m in THEME_MODES], default="system")
        set_theme_mode(db_path, mode)
    elif choice in TOGGLES:
        set_flag(db_path, choice, not current[choice])
        console.print(f"[green]{TOGGLES[choice]} {'disabled' if current[choice] else 'enabled'}.[/green]")


def cmd_reset(ledger: ScoreLedger) -> None:
    confirm = Prompt.ask("[red]Clear all scores, streaks and badges?[/red]", choices=["y", "n"], default="n")
    if confirm == "y":
        ledger.clear_all()
        console.print("[green]All scores cleared.[/green]")


def cmd_reload(store: QuestionStore) -> None:
    installed = reload_catalog(store)
    if installed < 0:
        console.print("[red]Catalog could not be loaded; keeping the current questions.[/red]")
    else:
        console.print(f"[green]Loaded {installed} questions.[/green]")


def main():
    db_path = os.environ.get("QUIZLY_DB", DEFAULT_DB_PATH)
    configure_logging(os.environ.get("QUIZLY_LOG_LEVEL", "WARNING"), console)
    init_db(db_path)
    store = QuestionStore(db_path)
    ledger = ScoreLedger(db_path)
    if reload_catalog(store) < 0 and store.count_all() == 0:
        console.print("[yellow]No questions could be loaded.[/yellow]")

    engine = QuizEngine(store, ledger, fallback=load_category, feedback=ConsoleFeedback(db_path))
    show_welcome()

    while True:
        show_menu()
        choice = Prompt.ask("\n[bold]>[/bold]", default="play").strip().lower()
        try:
            if choice == "play":
                play_category(engine, ledger, choose_category(store, ledger))
            elif choice == "random":
                play_category(engine, ledger, random_category())
            elif choice == "stats":
                cmd_stats(ledger)
            elif choice == "settings":
                cmd_settings(db_path)
            elif choice == "reload":
                cmd_reload(store)
            elif choice == "reset":
                cmd_reset(ledger)
            elif choice in ("quit", "exit", "q"):
                console.print("[dim]See you next time![/dim]")
                break
            else:
                console.print("[red]Unknown command. Try again.[/red]")
        except SessionExitRequested:
            console.print("[dim]Quiz abandoned.[/dim]")
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except QuizlyError as e:
            console.print(f"[red]Error: {e}[/red]")


if __name__ == "__main__":
    main()
