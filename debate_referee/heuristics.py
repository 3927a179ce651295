"""Deterministic rule-based scoring used when no judge is available."""

import logging

from config.config_loader import DEFAULT_CLAMPS
from debate_referee.models import DebateSession, RawScore, ScoringPayload

logger = logging.getLogger(__name__)

STRUCTURE_MARKERS = (
    "first", "second", "third", "furthermore", "moreover", "additionally",
    "however", "therefore", "consequently", "in conclusion", "to summarize",
)

EVIDENCE_MARKERS = (
    "according to", "research shows", "studies indicate", "data suggests",
    "statistics show", "evidence shows", "proven", "demonstrated",
    "example", "for instance", "case study", "survey", "poll",
)

# Logic gets the higher base above this many words
_LONG_ARGUMENT_WORDS = 50


def _clamp(value: float, bounds: tuple[float, float]) -> float:
    low, high = bounds
    return min(high, max(low, value))


def has_structure(text: str) -> bool:
    lower = text.lower()
    return any(marker in lower for marker in STRUCTURE_MARKERS)


def has_evidence(text: str) -> bool:
    lower = text.lower()
    return any(marker in lower for marker in EVIDENCE_MARKERS)


def relevance_ratio(text: str, topic: str) -> float:
    """Fraction of topic words that overlap some argument word.

    A topic word overlaps when it is a substring of an argument word or
    contains one. A topic with no words has ratio 0.
    """
    topic_words = topic.lower().split()
    text_words = text.lower().split()
    if not topic_words:
        return 0.0
    matches = [
        word for word in topic_words
        if any(word in text_word or text_word in word for text_word in text_words)
    ]
    return len(matches) / len(topic_words)


def score_argument(
    text: str,
    topic: str,
    clamps: dict[str, tuple[float, float]] | None = None,
) -> RawScore:
    """Score one argument's text against the topic."""
    bounds = clamps or DEFAULT_CLAMPS
    word_count = len(text.split())
    structured = has_structure(text)
    evidenced = has_evidence(text)

    return RawScore(
        clarity=_clamp(8 if structured else 6, bounds["clarity"]),
        logic=_clamp(7 if word_count > _LONG_ARGUMENT_WORDS else 5, bounds["logic"]),
        evidence=_clamp(8 if evidenced else 4, bounds["evidence"]),
        relevance=_clamp(relevance_ratio(text, topic) * 10 + 5, bounds["relevance"]),
        reasoning=(
            f"Fallback scoring: {'Well-structured' if structured else 'Basic structure'}, "
            f"{'Contains evidence' if evidenced else 'Limited evidence'}, "
            f"{word_count} words"
        ),
    )


def score_heuristically(
    session: DebateSession,
    clamps: dict[str, tuple[float, float]] | None = None,
) -> ScoringPayload:
    """Score every participant in the session without any external call.

    A participant who submitted more than once is scored on their latest
    argument and keeps the position of their first one.
    """
    logger.info("Performing heuristic analysis for session %s", session.id)

    scores: dict[str, RawScore] = {}
    for argument in session.arguments:
        scores[argument.participant_id] = score_argument(argument.text, session.topic, clamps)

    consensus = (
        f"Fallback analysis: {len(session.arguments)} arguments analyzed using basic heuristics. "
        "Results may vary from AI analysis."
    )
    return ScoringPayload(scores=scores, consensus_statement=consensus)
