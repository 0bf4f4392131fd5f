"""Interactive CLI practice application."""
import argparse
import logging
import random
import time

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from french_tutor.config import ConfigError, Settings, load_settings
from french_tutor.content import ContentError, load_questions
from french_tutor.db import init_db
from french_tutor.events import ResultDispatcher, SqliteResultSink
from french_tutor.feedback import compose_for_session
from french_tutor.hints import RevealOutcome
from french_tutor.log import setup_logging
from french_tutor.matcher import fallback_unit_count
from french_tutor.models import Question, SubmissionResult, Variant
from french_tutor.session import QuestionSession, create_session
from french_tutor.stats import get_accuracy, get_points_earned, get_variant_scores, get_weak_variants
from french_tutor.timer import TimeoutController

logger = logging.getLogger(__name__)

console = Console()

EXIT_WORDS = ("q", "menu")
HINT_WORD = "?"
TIER_COLORS = {"correct": "green", "partial": "yellow", "incorrect": "red"}
URGENCY_COLORS = {"normal": "cyan", "warning": "dark_orange", "urgent": "red"}


class SessionExitRequested(Exception):
    """The learner asked to leave the current practice session."""


def session_prompt(prompt: str, **kwargs) -> str:
    answer = Prompt.ask(prompt, **kwargs)
    if answer.strip().lower() in EXIT_WORDS:
        raise SessionExitRequested()
    return answer


def show_welcome():
    console.print(Panel(
        "[bold]Français Pratique[/bold]\n[dim]Question practice[/dim]\n"
        f"[dim]Type '{HINT_WORD}' for a hint, 'q' to stop.[/dim]",
        title="Bienvenue", border_style="blue",
    ))


def reveal_next_hint(session: QuestionSession) -> None:
    available = session.available_hints()
    if not available:
        console.print("[dim]No more hints for this question.[/dim]")
        return
    hint = available[0]
    if session.reveal_hint(hint.id) is RevealOutcome.OK:
        console.print(f"[magenta]Hint ({hint.tier.value}, -{hint.cost}):[/magenta] {hint.reveal_text}")


def ask(session: QuestionSession, prompt: str, hints_enabled: bool = True) -> str:
    """Prompt until the learner types something other than the hint request."""
    while True:
        answer = session_prompt(prompt, default="")
        if answer.strip() == HINT_WORD:
            if hints_enabled:
                reveal_next_hint(session)
            else:
                console.print("[dim]Hints are turned off.[/dim]")
            continue
        return answer


def _pick(options, answer: str) -> str:
    if answer.strip().isdigit():
        index = int(answer.strip()) - 1
        if 0 <= index < len(options):
            return options[index]
    return answer


def _blank_count(question: Question) -> int:
    raw = question.correct_answer
    if isinstance(raw, str):
        return len(raw.split("|"))
    if isinstance(raw, (list, tuple)):
        return len(raw)
    return fallback_unit_count(question)


def _print_options(options) -> None:
    for i, option in enumerate(options, 1):
        console.print(f"  [cyan]{i})[/cyan] {option}")


def read_answer(session: QuestionSession, hints_enabled: bool = True):
    q = session.question
    variant = q.variant
    if variant is Variant.MULTIPLE_CHOICE:
        _print_options(q.options)
        return _pick(q.options, ask(session, "\nYour answer", hints_enabled))
    if variant is Variant.FILL_BLANK:
        answers = []
        for i in range(1, _blank_count(q) + 1):
            answers.append(ask(session, f"Blank {i}", hints_enabled))
            session.set_draft(list(answers))
        return answers
    if variant is Variant.DRAG_DROP:
        _print_options(q.options)
        targets = list(q.correct_answer) if isinstance(q.correct_answer, dict) else []
        drops = {}
        for target in targets:
            answer = ask(session, f"Item for [bold]{target}[/bold]", hints_enabled)
            if answer.strip():
                drops[target] = _pick(q.options, answer)
                session.set_draft(dict(drops))
        return drops
    if variant is Variant.TEXT_INPUT:
        return ask(session, "\nYour answer", hints_enabled)
    if variant is Variant.IMAGE_BASED:
        _print_options(q.options)
        if q.selection_mode == "click_regions":
            answer = ask(session, "\nRegions (comma-separated)", hints_enabled)
            return [_pick(q.options, part) for part in answer.split(",") if part.strip()]
        return _pick(q.options, ask(session, "\nRegion", hints_enabled))
    raise ValueError(f"Unsupported variant: {variant}")


def show_question(session: QuestionSession, controller: TimeoutController, number: int, total: int) -> None:
    q = session.question
    subtitle = f"{q.point_value} pts · attempt {session.attempt_count + 1}/{q.max_attempts}"
    if controller.running:
        remaining = controller.remaining_seconds()
        color = URGENCY_COLORS[controller.urgency()]
        subtitle += f" · [{color}]{int(remaining) // 60}:{int(remaining) % 60:02d}[/{color}]"
    console.print(Panel(q.prompt, title=f"Q{number}/{total}", subtitle=subtitle, border_style="cyan"))


def show_feedback(session: QuestionSession) -> None:
    feedback = compose_for_session(session)
    if feedback is None:
        return
    color = TIER_COLORS[feedback.tier]
    console.print(f"[{color}]{feedback.encouragement}[/{color}]  Score: [bold]{feedback.score_display}[/bold]")
    for line in feedback.suggestions:
        console.print(f"  [dim]{line}[/dim]")
    if feedback.correct_answer_disclosure:
        console.print(f"Answer: [green]{feedback.correct_answer_disclosure}[/green]")
    if feedback.explanation and (session.last_result.is_correct or feedback.correct_answer_disclosure):
        console.print(f"[dim]{feedback.explanation}[/dim]")
    if feedback.hint_suggestions and session.can_retry:
        cheapest = feedback.hint_suggestions[0]
        console.print(f"[dim]Stuck? Type '{HINT_WORD}' for a {cheapest.tier.value} hint (-{cheapest.cost}).[/dim]")


def run_question(
    question: Question,
    settings: Settings,
    dispatcher: ResultDispatcher,
    number: int = 1,
    total: int = 1,
    scheduler=None,
) -> SubmissionResult:
    session = create_session(question, policy=settings.scoring, auto_advance=settings.auto_advance)
    controller = TimeoutController(session, scheduler)
    controller.start()
    dispatched = None
    try:
        while True:
            show_question(session, controller, number, total)
            before = session.last_result
            answer = read_answer(session, settings.hints_enabled)
            # the countdown submitted on its own while we were waiting for input
            if session.last_result is not before:
                console.print("[red]Time's up![/red]")
                result = session.last_result
            else:
                result = session.submit(answer)
            controller.cancel()
            if result is not dispatched:
                dispatcher.dispatch(question, result)
                dispatched = result
            show_feedback(session)
            if session.can_retry:
                again = session_prompt("Try again?", choices=["y", "n"], default="y")
                if again == "y" and session.retry():
                    continue
            break
    finally:
        controller.cancel()
    if session.should_auto_advance:
        time.sleep(settings.auto_advance_delay_seconds)
    return session.last_result


def run_practice(questions: list, settings: Settings, dispatcher: ResultDispatcher) -> tuple[int, int]:
    if not questions:
        console.print("[yellow]No questions available![/yellow]")
        return 0, 0
    correct = 0
    points = 0
    answered = 0
    console.print(f"\n[bold]Practice:[/bold] {len(questions)} questions\n")
    try:
        for i, question in enumerate(questions, 1):
            result = run_question(question, settings, dispatcher, number=i, total=len(questions))
            answered += 1
            points += result.score
            if result.is_correct:
                correct += 1
            console.print()
    except SessionExitRequested:
        console.print("[dim]Practice stopped.[/dim]")
    if answered:
        console.print(f"[bold]Score: {correct}/{answered} correct, {points} points[/bold]\n")
    return correct, answered


def show_summary(db_path: str) -> None:
    scores = get_variant_scores(db_path)
    if not scores:
        return
    table = Table(title="Accuracy by question type")
    table.add_column("Type", style="cyan")
    table.add_column("Accuracy", justify="right")
    for variant, score in sorted(scores.items()):
        table.add_row(variant.replace("_", " "), f"{score}%")
    console.print(table)
    console.print(f"  Overall: [bold]{get_accuracy(db_path)}%[/bold]  |  "
                  f"Points: [bold]{get_points_earned(db_path)}[/bold]")
    weak = get_weak_variants(db_path)
    if weak:
        console.print(f"\n  [yellow]Recommendation: practise more {weak[0]['variant'].replace('_', ' ')} questions[/yellow]")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(prog="french-tutor", description="French question practice")
    parser.add_argument("--config", help="Path to a YAML settings file")
    parser.add_argument("--count", type=int, default=5, help="Number of questions")
    parser.add_argument("--variant", choices=[v.value for v in Variant], help="Only this question type")
    parser.add_argument("--bank", help="Path to a JSON question bank")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    try:
        settings = load_settings(args.config)
        setup_logging(settings)
        questions = load_questions(args.bank or settings.question_bank, settings.default_max_attempts)
    except (ConfigError, ContentError) as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    init_db(settings.db_path)
    sink = SqliteResultSink(settings.db_path)
    dispatcher = ResultDispatcher(gamification=sink, persistence=sink)

    if args.variant:
        questions = [q for q in questions if q.variant.value == args.variant]
    questions = random.sample(questions, min(args.count, len(questions)))
    logger.info("Starting practice: %d questions, variant=%s", len(questions), args.variant or "any")

    show_welcome()
    try:
        run_practice(questions, settings, dispatcher)
    except KeyboardInterrupt:
        console.print("\n[dim]Au revoir![/dim]")
    show_summary(settings.db_path)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
