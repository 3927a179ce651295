"""Tests for the Click CLI in debate_referee/cli.py."""

import textwrap
from pathlib import Path

import pytest
import yaml
from click.testing import CliRunner

from debate_referee.cli import _resolve_session, _select_judge, main
from debate_referee.errors import SessionNotFoundError
from debate_referee.providers.anthropic import AnthropicProvider
from debate_referee.store import DebateStore
from tests.conftest import AI_TOPIC, STRONG_ARGUMENT, WEAK_ARGUMENT


@pytest.fixture
def settings_file(tmp_path: Path) -> Path:
    settings = {
        "defaults": {"judge": None, "data_dir": str(tmp_path / "data"), "output_dir": str(tmp_path / "output")},
        "inbox": {"dir": str(tmp_path / "inbox"), "archive_dir": str(tmp_path / "archive")},
        "models": {},
        "prompts": {"judge": "Topic {topic}\n{arguments}"},
    }
    path = tmp_path / "settings.yaml"
    path.write_text(yaml.dump(settings), encoding="utf-8")
    return path


@pytest.fixture
def run(settings_file: Path):
    runner = CliRunner()

    def _run(*args: str):
        return runner.invoke(main, ["--config", str(settings_file), *args])

    return _run


@pytest.fixture
def data_store(tmp_path: Path) -> DebateStore:
    return DebateStore(tmp_path / "data")


# --- helpers ---

def test_resolve_session_by_number_and_id(tmp_path: Path):
    store = DebateStore(tmp_path)
    first = store.create_session("Topic 1")
    second = store.create_session("Topic 2")
    assert _resolve_session(store, "2").id == second.id
    assert _resolve_session(store, first.id).id == first.id


def test_resolve_session_unknown(tmp_path: Path):
    store = DebateStore(tmp_path)
    store.create_session("Topic 1")
    with pytest.raises(SessionNotFoundError):
        _resolve_session(store, "5")


def test_select_judge_none_when_disabled(sample_app_config):
    assert _select_judge(sample_app_config, None, no_judge=True) is None


def test_select_judge_none_without_api_key(sample_app_config, monkeypatch):
    sample_app_config.available_providers = set()
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    assert _select_judge(sample_app_config, None, no_judge=False) is None


def test_select_judge_unknown_name(sample_app_config):
    assert _select_judge(sample_app_config, "nope", no_judge=False) is None


def test_select_judge_builds_configured_provider(sample_app_config, monkeypatch):
    monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-test")
    judge = _select_judge(sample_app_config, None, no_judge=False)
    assert isinstance(judge, AnthropicProvider)
    assert judge.name() == "claude"


# --- commands ---

def test_new_and_list(run):
    result = run("new", AI_TOPIC)
    assert result.exit_code == 0, result.output
    assert "Session ID: debate_" in result.output

    listing = run("list")
    assert listing.exit_code == 0
    assert "Pending" in listing.output


def test_new_rejects_blank_topic(run):
    result = run("new", "   ")
    assert result.exit_code == 1
    assert "Topic cannot be empty" in result.output


def test_add_to_unknown_session_fails(run):
    result = run("add", "debate_missing", "--participant-id", "u1", "--name", "Alice", "Some text")
    assert result.exit_code == 1
    assert "not found" in result.output


def test_full_heuristic_workflow(run, data_store: DebateStore, tmp_path: Path):
    assert run("new", AI_TOPIC).exit_code == 0
    assert run("add", "1", "--participant-id", "alice", "--name", "Alice", STRONG_ARGUMENT).exit_code == 0
    assert run("add", "1", "--participant-id", "bob", "--name", "Bob", WEAK_ARGUMENT).exit_code == 0

    result = run("analyze", "1", "--save", "--output", str(tmp_path / "reports"))
    assert result.exit_code == 0, result.output
    assert "WINNER: Alice" in result.output

    session = data_store.list_sessions()[0]
    assert session.processed_at is not None
    decision = data_store.get_decision(session.id)
    assert decision.scored_by == "heuristic"
    assert decision.winner.participant_id == "alice"
    assert list((tmp_path / "reports").glob("*.md"))

    shown = run("results", "1")
    assert shown.exit_code == 0
    assert "WINNER: Alice" in shown.output


def test_analyze_without_arguments_fails(run):
    run("new", AI_TOPIC)
    result = run("analyze", "1")
    assert result.exit_code == 1
    assert "No arguments to analyze" in result.output


def test_results_before_analysis_fails(run):
    run("new", AI_TOPIC)
    result = run("results", "1")
    assert result.exit_code == 1
    assert "not been analyzed" in result.output


def test_inbox_submits_and_archives(run, data_store: DebateStore, tmp_path: Path):
    run("new", AI_TOPIC)
    inbox = tmp_path / "inbox"
    inbox.mkdir()
    (inbox / "alice.md").write_text(
        textwrap.dedent("""\
            ---
            session: 1
            participant_id: alice
            participant_name: Alice
            ---
            Human teachers notice when a student is struggling.
        """),
        encoding="utf-8",
    )
    (inbox / "broken.md").write_text("No frontmatter here.", encoding="utf-8")

    result = run("inbox")
    assert result.exit_code == 0, result.output
    assert "Submitted: alice.md" in result.output

    session = data_store.list_sessions()[0]
    assert [a.participant_name for a in session.arguments] == ["Alice"]
    archived = sorted(p.name for p in (tmp_path / "archive").iterdir())
    assert any(name.startswith("FAILED_") and name.endswith("broken.md") for name in archived)
    assert not list(inbox.glob("*.md"))


def test_inbox_empty(run):
    result = run("inbox")
    assert result.exit_code == 0
    assert "No files in inbox." in result.output


def test_bad_judge_template_reported_as_config_error(settings_file: Path):
    settings = yaml.safe_load(settings_file.read_text(encoding="utf-8"))
    settings["prompts"]["judge"] = "Topic {topic} {unknown}"
    settings_file.write_text(yaml.dump(settings), encoding="utf-8")

    result = CliRunner().invoke(main, ["--config", str(settings_file), "list"])
    assert result.exit_code == 1
    assert "Config error" in result.output


def test_add_rejects_text_and_file_together(run, tmp_path: Path):
    run("new", AI_TOPIC)
    argument_file = tmp_path / "argument.txt"
    argument_file.write_text(STRONG_ARGUMENT, encoding="utf-8")

    result = run("add", "1", "--participant-id", "alice", "--name", "Alice",
                 "--file", str(argument_file), WEAK_ARGUMENT)
    assert result.exit_code == 2
    assert "not both" in result.output


def test_add_from_file(run, data_store: DebateStore, tmp_path: Path):
    run("new", AI_TOPIC)
    argument_file = tmp_path / "argument.txt"
    argument_file.write_text(STRONG_ARGUMENT, encoding="utf-8")

    result = run("add", "1", "--participant-id", "alice", "--name", "Alice", "--file", str(argument_file))
    assert result.exit_code == 0, result.output
    assert data_store.list_sessions()[0].arguments[0].text == STRONG_ARGUMENT.strip()


def test_add_rejects_non_utf8_file(run, tmp_path: Path):
    run("new", AI_TOPIC)
    argument_file = tmp_path / "argument.txt"
    argument_file.write_bytes(b"\xff\xfe\xfa not text")

    result = run("add", "1", "--participant-id", "alice", "--name", "Alice", "--file", str(argument_file))
    assert result.exit_code == 1
    assert "not valid UTF-8" in result.output
