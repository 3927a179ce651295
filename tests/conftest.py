"""Shared pytest fixtures."""

import json
from datetime import datetime
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from config.config_loader import AppConfig, DefaultsConfig, InboxConfig, ModelConfig, PromptsConfig, ScoringConfig
from debate_referee.models import Argument, DebateSession, JudgeResponse
from debate_referee.providers.base import JudgeProvider

AI_TOPIC = "Should AI replace human teachers?"

# 70 words, "However" + "For instance": clarity 8, logic 7, evidence 8, relevance 10
STRONG_ARGUMENT = (
    "Studies show that adaptive tutoring systems can personalise lessons for every learner. "
    "For instance, an AI tutor can adjust the pace of a maths lesson in real time and give "
    "feedback at any hour of the day. However, AI should replace human teachers only for "
    "routine drilling, because it frees teachers to mentor students, plan creative projects "
    "and support their emotional growth in ways that software still cannot match today."
)

# 7 words, no markers, no topic overlap: clarity 6, logic 5, evidence 4, relevance 5
WEAK_ARGUMENT = "Kids need real people in the classroom."


def make_argument(participant_id: str, name: str, text: str, topic: str = AI_TOPIC) -> Argument:
    return Argument(
        id=f"arg_{participant_id}",
        participant_id=participant_id,
        participant_name=name,
        topic=topic,
        text=text,
        submitted_at=datetime(2025, 1, 1, 12, 0, 0),
    )


def make_session(topic: str, *arguments: Argument, session_id: str = "debate_test") -> DebateSession:
    return DebateSession(
        id=session_id,
        topic=topic,
        created_at=datetime(2025, 1, 1, 11, 0, 0),
        arguments=tuple(arguments),
    )


def judge_json(scores: dict, consensus: str = "Both sides made fair points.") -> str:
    return json.dumps({"scores": scores, "consensusStatement": consensus})


class MockJudge(JudgeProvider):
    """Test double JudgeProvider."""

    def __init__(self, provider_name: str = "mock", response_content: str = "{}") -> None:
        self._name = provider_name
        self._response_content = response_content
        # Shadow the class method with an AsyncMock at the instance level.
        # ABC check passes because generate is defined in the class body below.
        self.generate = AsyncMock(  # type: ignore[assignment]
            return_value=JudgeResponse(
                provider=provider_name,
                model="mock-model",
                content=response_content,
                latency_sec=0.1,
                token_count=10,
            )
        )

    def name(self) -> str:
        return self._name

    def model_string(self) -> str:
        return "mock-model"

    async def generate(self, prompt: str, *, max_tokens: int, temperature: float) -> JudgeResponse:  # type: ignore[override]
        """Default implementation; replaced by AsyncMock in __init__."""
        return JudgeResponse(self._name, "mock-model", self._response_content, 0.1, 10)


@pytest.fixture
def scoring_config() -> ScoringConfig:
    return ScoringConfig()


@pytest.fixture
def prompts_config() -> PromptsConfig:
    return PromptsConfig(
        judge=(
            'Topic: "{topic}"\n\n{arguments}\n'
            'Reply as {{"scores": {{"{example_id}": {{...}}}}, "consensusStatement": "..."}}\n'
            "Score all of: {participant_ids}"
        ),
    )


@pytest.fixture
def sample_defaults_config(tmp_path: Path) -> DefaultsConfig:
    return DefaultsConfig(
        judge="claude",
        data_dir=tmp_path / "data",
        output_dir=tmp_path / "output",
    )


@pytest.fixture
def sample_app_config(sample_defaults_config: DefaultsConfig, prompts_config: PromptsConfig, tmp_path: Path) -> AppConfig:
    model_cfg = ModelConfig(
        name="claude",
        sdk="anthropic",
        model="claude-sonnet-4-20250514",
        api_key_env="ANTHROPIC_API_KEY",
        timeout_sec=60,
    )
    return AppConfig(
        defaults=sample_defaults_config,
        models={"claude": model_cfg},
        prompts=prompts_config,
        inbox=InboxConfig(dir=tmp_path / "inbox", archive_dir=tmp_path / "inbox" / "archive"),
        available_providers={"claude"},
    )


@pytest.fixture
def two_party_session() -> DebateSession:
    return make_session(
        AI_TOPIC,
        make_argument("alice", "Alice", STRONG_ARGUMENT),
        make_argument("bob", "Bob", WEAK_ARGUMENT),
    )


@pytest.fixture
def mock_judge() -> MockJudge:
    return MockJudge()
