"""CLI commands for SparkSkool.

Commands:
- extract-questions: Pull questions out of an exam text file
- grade: Grade a student's submission against an answer key
- compare: Score one answer against the expected answer
- slides: Generate a slide deck for a topic
- word-search / crossword: Build printable puzzles
- materials / save-material: Browse and store teaching materials
- serve: Run the Web API
"""

import json
import random
from pathlib import Path

import typer
import uvicorn
from rich.console import Console

from sparkskool.config import get_data_dir
from sparkskool.core.answer_comparison import compare_answers
from sparkskool.core.answer_keys import get_answer_key, save_answer_key
from sparkskool.core.materials import (
    MaterialValidationError,
    list_materials,
    save_material,
)
from sparkskool.core.question_extractor import extract_questions_from_text
from sparkskool.core.questions import Question
from sparkskool.core.slides import generate_slides
from sparkskool.core.submission_grader import (
    GradingError,
    grade_student_submission,
    summarize_results,
)
from sparkskool.games.crossword import generate_crossword
from sparkskool.games.word_search import generate_word_search
from sparkskool.llm.client import LLMError
from sparkskool.storage.local_store import LocalStore

app = typer.Typer(
    name="spark",
    help="SparkSkool teaching assistant: grading, slides and classroom games.",
    no_args_is_help=True,
)

console = Console()


def _read_text_or_exit(path: str) -> str:
    file_path = Path(path).expanduser()
    if not file_path.is_file():
        console.print(f"[red]✗ File not found: {file_path}[/red]")
        raise typer.Exit(code=1)
    return file_path.read_text(encoding="utf-8")


def _truncate(text: str, max_len: int = 80) -> str:
    """Truncate text with ellipsis if too long."""
    if len(text) <= max_len:
        return text
    return text[:max_len - 3] + "..."


def _store() -> LocalStore:
    return LocalStore(get_data_dir())


# =============================================================================
# GRADING
# =============================================================================


@app.command(name="extract-questions")
def extract_questions(
    file: str = typer.Argument(..., help="Exam text file"),
    save: bool = typer.Option(False, "--save", "-s", help="Save the result as an answer key"),
    context: str = typer.Option("", "--context", "-c", help="Exam context stored with the key"),
    as_json: bool = typer.Option(False, "--json", help="Print questions as JSON"),
) -> None:
    """Extract questions (and answers when present) from exam text."""
    text = _read_text_or_exit(file)
    questions = extract_questions_from_text(text)

    if not questions:
        console.print("[yellow]⚠ No questions found[/yellow]")
        raise typer.Exit(code=1)

    if as_json:
        console.print_json(json.dumps([q.to_dict() for q in questions]))
    else:
        console.print(f"[green]✓ {len(questions)} questions extracted[/green]")
        for q in questions:
            console.print(f"  [bold]{q.id}.[/bold] {_truncate(q.question)} [dim]({q.type})[/dim]")
            if q.answer:
                console.print(f"     [dim]answer:[/dim] {_truncate(q.answer)}")

    if save:
        answer_key = save_answer_key(questions, exam_context=context, store=_store())
        console.print(f"  [dim]answer key:[/dim] {answer_key.id}")


@app.command()
def grade(
    submission: str = typer.Argument(..., help="Student submission text file"),
    key_file: str | None = typer.Option(None, "--key-file", "-k", help="Answer key JSON file"),
    key_id: str | None = typer.Option(None, "--key-id", help="Stored answer key id"),
) -> None:
    """Grade a student's submission against an answer key."""
    if key_file:
        try:
            raw = json.loads(_read_text_or_exit(key_file))
        except json.JSONDecodeError as e:
            console.print(f"[red]✗ Invalid answer key JSON: {e}[/red]")
            raise typer.Exit(code=1)
        if not isinstance(raw, list) or not all(isinstance(item, dict) for item in raw):
            console.print("[red]✗ Answer key must be a JSON list of question objects[/red]")
            raise typer.Exit(code=1)
        questions = [Question.from_dict(item, index=i) for i, item in enumerate(raw)]
    elif key_id:
        answer_key = get_answer_key(key_id, store=_store())
        if answer_key is None:
            console.print(f"[red]✗ Answer key not found: {key_id}[/red]")
            raise typer.Exit(code=1)
        questions = answer_key.questions
    else:
        console.print("[red]✗ Provide --key-file or --key-id[/red]")
        raise typer.Exit(code=1)

    student_text = _read_text_or_exit(submission)

    try:
        results = grade_student_submission(questions, student_text)
    except GradingError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)

    for result in results:
        color = "green" if result.is_correct else "red"
        console.print(
            f"  [bold]Q{result.question_id}[/bold] [{color}]{result.score}/100[/{color}] "
            f"[dim]{result.match_type}[/dim] {_truncate(result.feedback)}"
        )

    summary = summarize_results(results, questions)
    console.print(
        f"[green]✓ {summary['points_earned']}/{summary['points_possible']} points "
        f"({summary['percentage']}%)[/green]"
    )


@app.command()
def compare(
    student_answer: str = typer.Argument(..., help="The student's answer"),
    correct_answer: str = typer.Argument(..., help="The expected answer"),
    question_type: str = typer.Option(
        "short-answer", "--type", "-t", help="multiple-choice, true-false, short-answer, essay"
    ),
) -> None:
    """Score one answer against the expected answer."""
    try:
        result = compare_answers(student_answer, correct_answer, question_type)
    except LLMError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)

    color = "green" if result.is_correct else "yellow"
    console.print(f"[{color}]{result.score}/100[/{color}] [dim]{result.match_type}[/dim]")
    console.print(f"  [dim]feedback:[/dim]   {result.feedback}")
    console.print(f"  [dim]confidence:[/dim] {result.confidence:.2f}")


# =============================================================================
# CONTENT
# =============================================================================


@app.command()
def slides(
    prompt: str = typer.Argument(..., help="Presentation topic"),
    context: str = typer.Option("", "--context", "-c", help="Extra context for the deck"),
    language: str = typer.Option("en", "--language", "-l", help="Deck language"),
    output: str | None = typer.Option(None, "--output", "-o", help="Write the deck as JSON"),
) -> None:
    """Generate a slide deck."""
    deck = generate_slides(prompt, context=context, language=language)

    if deck.fallback:
        console.print(f"[yellow]⚠ {deck.message}[/yellow]")
    elif deck.cached:
        console.print("[dim]served from cache[/dim]")

    for index, slide in enumerate(deck.slides, start=1):
        console.print(f"  [bold]{index}. {slide.title}[/bold] [dim]({slide.layout})[/dim]")

    if output:
        Path(output).write_text(json.dumps(deck.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8")
        console.print(f"[green]✓ Deck written to {output}[/green]")


@app.command()
def materials(
    category: str | None = typer.Option(None, "--category", help="lesson, quiz or other"),
) -> None:
    """List saved teaching materials, newest first."""
    items = list_materials(category=category, store=_store())
    if not items:
        console.print("[dim]No materials saved[/dim]")
        return

    for material in items:
        console.print(
            f"  [bold]{material.title}[/bold] [dim]{material.category} · {material.id}[/dim]"
        )


@app.command(name="save-material")
def save_material_command(
    file: str = typer.Argument(..., help="Text file with the material"),
    title: str | None = typer.Option(None, "--title", "-t", help="Title (default: first line)"),
    category: str | None = typer.Option(None, "--category", help="lesson, quiz or other"),
) -> None:
    """Store a text file as teaching material."""
    content = _read_text_or_exit(file)
    try:
        material = save_material(
            content,
            title=title,
            category=category,
            file_type=Path(file).suffix.lstrip(".") or None,
            store=_store(),
        )
    except MaterialValidationError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)

    console.print(f"[green]✓ Saved '{material.title}'[/green]")
    console.print(f"  [dim]id:[/dim] {material.id}")


# =============================================================================
# GAMES
# =============================================================================


@app.command(name="word-search")
def word_search(
    words: list[str] = typer.Argument(..., help="Words to hide"),
    size: int = typer.Option(15, "--size", help="Grid side length"),
    seed: int | None = typer.Option(None, "--seed", help="Random seed for a repeatable grid"),
) -> None:
    """Print a word search puzzle."""
    puzzle = generate_word_search(words, size=size, rng=random.Random(seed))
    console.print(puzzle.render())
    console.print()
    console.print("[bold]Words:[/bold] " + ", ".join(w.word for w in puzzle.words))
    if puzzle.unplaced:
        console.print(f"[yellow]⚠ Not placed: {', '.join(puzzle.unplaced)}[/yellow]")


@app.command()
def crossword(
    file: str = typer.Argument(..., help="Clue file, one 'clue | answer' per line"),
    size: int = typer.Option(15, "--size", help="Grid side length"),
    seed: int | None = typer.Option(None, "--seed", help="Random seed for a repeatable grid"),
) -> None:
    """Print a crossword built from a clue file."""
    clues = []
    for line in _read_text_or_exit(file).splitlines():
        if "|" not in line:
            continue
        question, answer = line.split("|", 1)
        clues.append({"question": question.strip(), "answer": answer.strip()})

    if not clues:
        console.print("[red]✗ No 'clue | answer' lines found[/red]")
        raise typer.Exit(code=1)

    result = generate_crossword(clues, size=size, rng=random.Random(seed))
    console.print(result.render())
    console.print()
    for clue in result.clues:
        console.print(f"  [bold]{clue.number}[/bold] [dim]{clue.direction}[/dim] {clue.clue}")
    if result.unplaced:
        console.print(f"[yellow]⚠ Not placed: {', '.join(result.unplaced)}[/yellow]")


# =============================================================================
# SERVER
# =============================================================================


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Bind address"),
    port: int = typer.Option(8000, "--port", "-p", help="Port"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
) -> None:
    """Run the Web API with uvicorn."""
    console.print(f"[green]✓ SparkSkool API on http://{host}:{port}[/green]")
    console.print(f"  [dim]data dir:[/dim] {get_data_dir().absolute()}")
    uvicorn.run("sparkskool.web.api:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    app()
