"""Rich console output and markdown file save for debate decisions."""

import logging
import re
from datetime import datetime
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table
from rich.text import Text

from config.config_loader import DEFAULT_WEIGHTS
from debate_referee.models import DebateDecision, DebateSession

logger = logging.getLogger(__name__)

console = Console(legacy_windows=False)

_DT_FORMAT = "%Y-%m-%d %H:%M:%S"


def _slug(text: str, max_len: int = 40) -> str:
    """Convert text to a filename-safe slug."""
    slug = re.sub(r"[^\w\s-]", "", text.lower())
    slug = re.sub(r"[\s_-]+", "-", slug).strip("-")
    return slug[:max_len]


def _status(session: DebateSession) -> str:
    return "Processed" if session.processed_at else "Pending"


def weights_line(weights: dict[str, float] | None = None) -> str:
    """Describe rubric weights, e.g. 'Clarity 25%, Logic 30%, ...'."""
    weights = weights or DEFAULT_WEIGHTS
    return ", ".join(f"{name.title()} {round(value * 100)}%" for name, value in weights.items())


def verdict_line(decision: DebateDecision) -> str:
    if decision.is_tie:
        return "TIE! The top participants scored within the tie margin."
    if decision.winner:
        name = decision.winner.participant_name or decision.winner.participant_id
        return f"WINNER: {name} ({decision.winner.final_score}/10)"
    return "No winner determined."


def print_sessions(sessions: list[DebateSession]) -> None:
    """Print all sessions as a table, numbered for selection."""
    if not sessions:
        console.print("[yellow]No debate sessions found.[/yellow]")
        return

    table = Table(title="Debate Sessions")
    table.add_column("#", justify="right")
    table.add_column("Topic")
    table.add_column("ID", style="dim")
    table.add_column("Arguments", justify="right")
    table.add_column("Status")
    table.add_column("Created")
    for index, session in enumerate(sessions, start=1):
        status = _status(session)
        table.add_row(
            str(index),
            session.topic,
            session.id,
            str(len(session.arguments)),
            f"[green]{status}[/green]" if session.processed_at else f"[yellow]{status}[/yellow]",
            session.created_at.strftime(_DT_FORMAT),
        )
    console.print(table)


def print_session_details(session: DebateSession) -> None:
    """Print a session header and every argument in submission order."""
    console.print(Rule(f"[bold cyan]{session.topic}[/bold cyan]"))
    console.print(
        Text(
            f"Session ID: {session.id} | Created: {session.created_at.strftime(_DT_FORMAT)} | "
            f"Arguments: {len(session.arguments)} | Status: {_status(session)}",
            style="dim",
        )
    )
    if not session.arguments:
        console.print("No arguments submitted yet.")
        return
    for index, arg in enumerate(session.arguments, start=1):
        console.print(
            Panel(
                arg.text,
                title=f"[bold]{index}. {arg.participant_name}[/bold] ({arg.participant_id})",
                subtitle=arg.submitted_at.strftime(_DT_FORMAT),
                border_style="dim",
            )
        )


def print_decision(decision: DebateDecision, weights: dict[str, float] | None = None) -> None:
    """Print the scores table, verdict and consensus statement."""
    console.print(Rule(f"[bold green]Results: {decision.topic}[/bold green]"))

    table = Table()
    table.add_column("Participant")
    for column in ("Clarity", "Logic", "Evidence", "Relevance", "Final"):
        table.add_column(column, justify="right")
    for participant_id, result in decision.results.items():
        table.add_row(
            result.participant_name or participant_id,
            f"{result.clarity}",
            f"{result.logic}",
            f"{result.evidence}",
            f"{result.relevance}",
            f"[bold]{result.final_score}[/bold]",
        )
    console.print(table)
    console.print(Text(f"Scoring weights: {weights_line(weights)}", style="dim"))

    console.print(Text(verdict_line(decision), style="bold magenta"))
    console.print(Panel(decision.consensus_statement, title="Consensus Statement", border_style="cyan"))
    if decision.scored_by == "heuristic":
        console.print(Text("Scored with fallback heuristics (judge unavailable).", style="dim"))


def save_to_file(
    decision: DebateDecision,
    output_dir: Path,
    weights: dict[str, float] | None = None,
) -> Path:
    """Save the decision as a markdown report.

    Returns:
        Path to the saved file.
    """
    output_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    filepath = output_dir / f"{timestamp}_{_slug(decision.topic)}.md"

    lines: list[str] = [
        f"# Debate Referee: {decision.topic[:80]}",
        "",
        f"**Session:** {decision.session_id}",
        f"**Processed:** {decision.processed_at.strftime(_DT_FORMAT)}",
        f"**Scored by:** {decision.scored_by}",
        f"**Weights:** {weights_line(weights)}",
        "",
        "---",
        "",
        "## Scores",
        "",
        "| Participant | Clarity | Logic | Evidence | Relevance | Final |",
        "|---|---|---|---|---|---|",
    ]
    for participant_id, result in decision.results.items():
        lines.append(
            f"| {result.participant_name or participant_id} | {result.clarity} | {result.logic} | "
            f"{result.evidence} | {result.relevance} | {result.final_score} |"
        )

    lines += ["", "## Verdict", "", verdict_line(decision), "", "## Reasoning", ""]
    for participant_id, result in decision.results.items():
        lines.append(f"- **{result.participant_name or participant_id}:** {result.reasoning}")

    lines += ["", "## Consensus Statement", "", decision.consensus_statement, ""]

    filepath.write_text("\n".join(lines), encoding="utf-8")
    logger.info("Decision saved to: %s", filepath)
    return filepath
