"""Pure dataclasses for the debate referee pipeline. No logic, no deps."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Argument:
    id: str
    participant_id: str
    participant_name: str
    topic: str             # copied from the session at submit time
    text: str
    submitted_at: datetime


@dataclass(frozen=True)
class DebateSession:
    id: str
    topic: str
    created_at: datetime
    arguments: tuple[Argument, ...] = ()
    processed_at: datetime | None = None


@dataclass
class RawScore:
    clarity: float
    logic: float
    evidence: float
    relevance: float
    reasoning: str


@dataclass
class ScoringPayload:
    scores: dict[str, RawScore]      # participant id -> raw rubric scores
    consensus_statement: str


@dataclass
class ScoredResult:
    participant_name: str
    clarity: float
    logic: float
    evidence: float
    relevance: float
    final_score: float
    reasoning: str


@dataclass
class Winner:
    participant_id: str
    participant_name: str
    final_score: float


@dataclass
class DebateDecision:
    session_id: str
    topic: str
    results: dict[str, ScoredResult]
    winner: Winner | None
    is_tie: bool
    consensus_statement: str
    processed_at: datetime
    scored_by: str = "judge"         # "judge" or "heuristic"


@dataclass
class JudgeResponse:
    provider: str          # config name, e.g. "openai", "claude"
    model: str             # actual model string used
    content: str
    latency_sec: float
    token_count: int | None
