"""Debate analysis: judge attempt, heuristic fallback, aggregation, verdict."""

import logging
from dataclasses import dataclass
from datetime import datetime

from config.config_loader import PromptsConfig, ScoringConfig
from debate_referee.errors import JudgeError, JudgePromptError, JudgeUnavailableError, PreconditionError
from debate_referee.heuristics import score_heuristically
from debate_referee.models import DebateDecision, DebateSession, ScoringPayload, Winner
from debate_referee.providers.base import JudgeProvider
from debate_referee.scoring import aggregate, resolve_winner
from debate_referee.validator import parse_judge_output

logger = logging.getLogger(__name__)

SCORED_BY_JUDGE = "judge"
SCORED_BY_HEURISTIC = "heuristic"

_RAW_EXCERPT_CHARS = 300


@dataclass
class JudgeAttempt:
    """Outcome of asking the judge: a validated payload or the reason it failed."""

    payload: ScoringPayload | None = None
    failure: JudgeError | None = None

    @property
    def ok(self) -> bool:
        return self.payload is not None


def _format_arguments(session: DebateSession) -> str:
    return "\n".join(
        f"Argument {index} (User: {arg.participant_name}):\n{arg.text}\n"
        for index, arg in enumerate(session.arguments, start=1)
    )


def _excerpt(raw: str, limit: int = _RAW_EXCERPT_CHARS) -> str:
    text = repr(raw)
    return text if len(text) <= limit else f"{text[:limit]}... ({len(raw)} chars)"


def _participant_ids(session: DebateSession) -> list[str]:
    return list(dict.fromkeys(arg.participant_id for arg in session.arguments))


def build_judge_prompt(session: DebateSession, template: str) -> str:
    """Fill the judge prompt template for a session.

    Placeholders: {topic}, {arguments}, {example_id}, {participant_ids}.
    """
    participant_ids = _participant_ids(session)
    return template.format(
        topic=session.topic,
        arguments=_format_arguments(session),
        example_id=participant_ids[0] if participant_ids else "",
        participant_ids=", ".join(participant_ids),
    )


async def attempt_judge(
    session: DebateSession,
    judge: JudgeProvider,
    prompts: PromptsConfig,
    scoring: ScoringConfig,
) -> JudgeAttempt:
    """Ask the judge to score the session and validate its answer.

    Never raises for judge-side problems: an unusable prompt template, call
    failures and bad output are returned as the attempt's failure.
    """
    try:
        prompt = build_judge_prompt(session, prompts.judge)
    except (AttributeError, KeyError, IndexError, ValueError) as exc:
        return JudgeAttempt(failure=JudgePromptError(f"Judge prompt template is invalid: {exc!r}"))

    try:
        response = await judge.generate(
            prompt,
            max_tokens=scoring.max_tokens,
            temperature=scoring.temperature,
        )
    except Exception as exc:
        return JudgeAttempt(failure=JudgeUnavailableError(judge.name(), str(exc)))

    try:
        return JudgeAttempt(payload=parse_judge_output(response.content, session))
    except JudgeError as exc:
        logger.warning(
            "Rejected output from %s for session %s: %s",
            judge.name(),
            session.id,
            _excerpt(response.content),
        )
        logger.debug("Full rejected output: %r", response.content)
        return JudgeAttempt(failure=exc)


def fill_participant_names(decision: DebateDecision, session: DebateSession) -> DebateDecision:
    """Copy display names from the session's arguments into the decision."""
    names = {arg.participant_id: arg.participant_name for arg in session.arguments}
    for participant_id, result in decision.results.items():
        if participant_id in names:
            result.participant_name = names[participant_id]
    if decision.winner and decision.winner.participant_id in names:
        decision.winner = Winner(
            participant_id=decision.winner.participant_id,
            participant_name=names[decision.winner.participant_id],
            final_score=decision.winner.final_score,
        )
    return decision


def decide(
    session: DebateSession,
    payload: ScoringPayload,
    scoring: ScoringConfig,
    scored_by: str,
) -> DebateDecision:
    """Aggregate a validated payload and resolve the verdict."""
    results = aggregate(payload.scores, scoring.weights)
    winner, is_tie = resolve_winner(results, scoring.tie_threshold)
    decision = DebateDecision(
        session_id=session.id,
        topic=session.topic,
        results=results,
        winner=winner,
        is_tie=is_tie,
        consensus_statement=payload.consensus_statement,
        processed_at=datetime.now(),
        scored_by=scored_by,
    )
    return fill_participant_names(decision, session)


async def analyze_debate(
    session: DebateSession,
    judge: JudgeProvider | None,
    prompts: PromptsConfig,
    scoring: ScoringConfig | None = None,
) -> DebateDecision:
    """Score a debate session and return the decision.

    Args:
        session: Session with at least one argument.
        judge: Judge provider to try first, or None to score heuristically.
        prompts: Prompt templates from config.
        scoring: Weights, thresholds and sampling settings. Defaults apply
            when omitted.

    Returns:
        DebateDecision with participant names filled in.

    Raises:
        PreconditionError: If the session has no arguments.
    """
    scoring = scoring or ScoringConfig()
    if not session.arguments:
        raise PreconditionError(f"No arguments to analyze in session {session.id}")

    logger.info("Analyzing debate session %s (%d arguments)", session.id, len(session.arguments))

    attempt = JudgeAttempt()
    if judge is not None:
        attempt = await attempt_judge(session, judge, prompts, scoring)
        if not attempt.ok:
            logger.warning("Judge analysis failed, using heuristic fallback: %s", attempt.failure)
    else:
        logger.info("No judge configured, scoring heuristically")

    if attempt.ok:
        decision = decide(session, attempt.payload, scoring, SCORED_BY_JUDGE)
    else:
        decision = decide(session, score_heuristically(session, scoring.clamps), scoring, SCORED_BY_HEURISTIC)

    logger.info("Debate analysis completed for session %s via %s", session.id, decision.scored_by)
    return decision
