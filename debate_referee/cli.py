"""Click CLI — session management, argument submission, and debate analysis."""

import asyncio
import logging
import sys
from pathlib import Path
from typing import NoReturn

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler

from config.config_loader import AppConfig, load_config
from debate_referee.analyzer import analyze_debate
from debate_referee.errors import RefereeError
from debate_referee.inbox import archive_file, ensure_dirs, parse_file, scan_inbox
from debate_referee.models import DebateSession
from debate_referee.output import print_decision, print_session_details, print_sessions, save_to_file
from debate_referee.providers.anthropic import AnthropicProvider
from debate_referee.providers.base import JudgeProvider, ProviderError
from debate_referee.providers.gemini import GeminiProvider
from debate_referee.providers.openai_provider import OpenAIProvider
from debate_referee.store import DebateStore

logger = logging.getLogger(__name__)

console = Console(legacy_windows=False)

# Keyed by the `sdk` field of a model config
PROVIDER_CLASSES: dict[str, type[JudgeProvider]] = {
    "openai": OpenAIProvider,
    "anthropic": AnthropicProvider,
    "gemini": GeminiProvider,
}


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


def _fail(message: str) -> NoReturn:
    console.print(f"[bold red]Error:[/bold red] {message}")
    sys.exit(1)


def _select_judge(config: AppConfig, judge_name: str | None, no_judge: bool) -> JudgeProvider | None:
    """Build the judge to try first. Returns None when scoring heuristically.

    A judge that is unknown, has no API key, or fails to build is logged and
    skipped: the analysis then falls back to heuristic scoring.
    """
    if no_judge:
        return None
    name = judge_name or config.defaults.judge
    if not name:
        return None
    if name not in config.models:
        logger.warning("Judge '%s' unknown, scoring heuristically", name)
        return None
    if name not in config.available_providers:
        logger.warning("Judge '%s' has no API key (%s), scoring heuristically", name, config.models[name].api_key_env)
        return None

    model_cfg = config.models[name]
    provider_cls = PROVIDER_CLASSES.get(model_cfg.sdk)
    if provider_cls is None:
        logger.warning("Judge '%s' uses unsupported sdk '%s', scoring heuristically", name, model_cfg.sdk)
        return None
    try:
        return provider_cls(model_cfg)
    except ProviderError as exc:
        logger.warning("Failed to instantiate judge '%s': %s", name, exc)
        return None


def _resolve_session(store: DebateStore, ref: str) -> DebateSession:
    """Look a session up by 1-based list index or by id."""
    ref = ref.strip()
    if ref.isdigit():
        sessions = store.list_sessions()
        number = int(ref)
        if 1 <= number <= len(sessions):
            return sessions[number - 1]
    return store.get_session(ref)


@click.group()
@click.option("--config", "config_path", type=click.Path(dir_okay=False), default=None,
              help="Settings file (default: config/settings.yaml)")
@click.option("--data-dir", default=None, help="Data directory (default: from config)")
@click.option("--verbose", is_flag=True, help="Enable DEBUG-level logging")
@click.pass_context
def main(ctx: click.Context, config_path: str | None, data_dir: str | None, verbose: bool) -> None:
    """Debate Referee -- score debate arguments and declare a winner.

    \b
    Examples:
      debate-referee new "Should AI replace human teachers?"
      debate-referee add 1 --participant-id u1 --name Alice "Teachers matter because..."
      debate-referee analyze 1
      debate-referee analyze 1 --no-judge
      debate-referee inbox
    """
    load_dotenv()
    _setup_logging(verbose)

    try:
        config = load_config(Path(config_path)) if config_path else load_config()
    except (FileNotFoundError, ValueError) as exc:
        _fail(f"Config error: {exc}")

    store = DebateStore(Path(data_dir) if data_dir else config.defaults.data_dir)
    try:
        store.initialize()
    except RefereeError as exc:
        _fail(str(exc))

    ctx.obj = {"config": config, "store": store}


@main.command("new")
@click.argument("topic")
@click.pass_obj
def new_session(obj: dict, topic: str) -> None:
    """Create a debate session for TOPIC."""
    if not topic.strip():
        _fail("Topic cannot be empty.")
    session = obj["store"].create_session(topic.strip())
    console.print("[green]Debate session created.[/green]")
    console.print(f"Session ID: {session.id}")
    console.print(f"Topic: {session.topic}")


@main.command("list")
@click.pass_obj
def list_sessions(obj: dict) -> None:
    """List all debate sessions."""
    try:
        print_sessions(obj["store"].list_sessions())
    except RefereeError as exc:
        _fail(str(exc))


@main.command("show")
@click.argument("session_ref")
@click.pass_obj
def show_session(obj: dict, session_ref: str) -> None:
    """Show a session and its arguments. SESSION_REF is a list number or id."""
    try:
        print_session_details(_resolve_session(obj["store"], session_ref))
    except RefereeError as exc:
        _fail(str(exc))


@main.command("add")
@click.argument("session_ref")
@click.argument("text", required=False)
@click.option("--participant-id", required=True, help="Stable id of the participant")
@click.option("--name", "participant_name", required=True, help="Display name of the participant")
@click.option("--file", "text_file", type=click.Path(exists=True, dir_okay=False),
              help="Read the argument text from a file")
@click.pass_obj
def add_argument(
    obj: dict,
    session_ref: str,
    text: str | None,
    participant_id: str,
    participant_name: str,
    text_file: str | None,
) -> None:
    """Submit an argument to a session."""
    if text_file:
        if text:
            raise click.UsageError("Give the argument as TEXT or --file, not both.")
        try:
            text = Path(text_file).read_text(encoding="utf-8")
        except UnicodeDecodeError:
            _fail(f"Argument file is not valid UTF-8: {text_file}")
    if not participant_id.strip():
        _fail("Participant id is required.")
    if not participant_name.strip():
        _fail("Name is required.")
    if not text or not text.strip():
        _fail("Argument text is required (TEXT argument or --file).")

    store: DebateStore = obj["store"]
    try:
        session = _resolve_session(store, session_ref)
        argument = store.add_argument(session.id, participant_id.strip(), participant_name.strip(), text.strip())
    except RefereeError as exc:
        _fail(str(exc))

    console.print("[green]Argument added.[/green]")
    console.print(f"Argument ID: {argument.id}")
    console.print(f"Session: {session.topic}")


@main.command("analyze")
@click.argument("session_ref")
@click.option("--judge", "judge_name", default=None, help="Judge provider name (default: from config)")
@click.option("--no-judge", is_flag=True, help="Skip the judge and score heuristically")
@click.option("--save/--no-save", default=False, help="Also write a markdown report")
@click.option("--output", "output_path", default=None, help="Report directory (default: from config)")
@click.pass_obj
def analyze(
    obj: dict,
    session_ref: str,
    judge_name: str | None,
    no_judge: bool,
    save: bool,
    output_path: str | None,
) -> None:
    """Score a session's arguments and declare the winner."""
    config: AppConfig = obj["config"]
    store: DebateStore = obj["store"]

    try:
        session = _resolve_session(store, session_ref)
        judge = _select_judge(config, judge_name, no_judge)

        participants = sorted({arg.participant_name for arg in session.arguments})
        console.print(f"\n[bold cyan]Analyzing[/bold cyan] \"{session.topic}\"")
        console.print(f"Arguments: {len(session.arguments)} | Participants: {', '.join(participants)}")
        console.print(f"Judge: {judge.name() if judge else 'heuristic'}\n")

        decision = asyncio.run(analyze_debate(session, judge, config.prompts, config.scoring))
        store.save_decision(decision)
        store.mark_processed(session.id, decision.processed_at)
    except RefereeError as exc:
        _fail(str(exc))

    print_decision(decision, config.scoring.weights)

    if save:
        saved = save_to_file(decision, Path(output_path) if output_path else config.defaults.output_dir,
                             config.scoring.weights)
        console.print(f"\n[dim]Saved to: {saved}[/dim]")


@main.command("results")
@click.argument("session_ref")
@click.pass_obj
def show_results(obj: dict, session_ref: str) -> None:
    """Show the stored decision for a session."""
    config: AppConfig = obj["config"]
    try:
        session = _resolve_session(obj["store"], session_ref)
        decision = obj["store"].get_decision(session.id)
    except RefereeError as exc:
        _fail(str(exc))
    if decision is None:
        _fail(f"Session {session.id} has not been analyzed yet.")
    print_decision(decision, config.scoring.weights)


@main.command("inbox")
@click.option("--inbox-dir", "inbox_dir_override", default=None,
              help="Override inbox folder path (default: from config)")
@click.pass_obj
def process_inbox(obj: dict, inbox_dir_override: str | None) -> None:
    """Submit every argument file (.md with frontmatter) in the inbox folder."""
    config: AppConfig = obj["config"]
    store: DebateStore = obj["store"]
    inbox_dir = Path(inbox_dir_override) if inbox_dir_override else config.inbox.dir
    archive_dir = config.inbox.archive_dir
    ensure_dirs(inbox_dir, archive_dir)

    files = scan_inbox(inbox_dir)
    if not files:
        click.echo("No files in inbox.")
        return

    for file_path in files:
        try:
            submission = parse_file(file_path)
            session = _resolve_session(store, submission.session_ref)
            argument = store.add_argument(
                session.id, submission.participant_id, submission.participant_name, submission.text
            )
            archived = archive_file(file_path, archive_dir)
            click.echo(f"Submitted: {file_path.name} -> {session.id} as {argument.id} (archived: {archived.name})")
        except Exception as e:
            logger.error("Failed: %s -- %s", file_path.name, e)
            archive_file(file_path, archive_dir, failed=True)


if __name__ == "__main__":
    main()
