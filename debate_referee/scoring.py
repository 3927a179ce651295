"""Weighted aggregation of rubric scores and winner/tie resolution."""

from decimal import ROUND_HALF_UP, Decimal

from config.config_loader import DEFAULT_WEIGHTS, RUBRIC_FIELDS
from debate_referee.models import RawScore, ScoredResult, Winner


def round_half_up(value: float, places: int) -> float:
    """Round to `places` decimals, halves away from zero.

    Goes through the shortest repr of the float so 2.675 rounds to 2.68.
    """
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def weighted_score(score: RawScore, weights: dict[str, float] | None = None) -> float:
    """Return the weighted sum of the four sub-scores, rounded to 2 decimals."""
    weights = weights or DEFAULT_WEIGHTS
    total = sum(
        Decimal(repr(float(getattr(score, field)))) * Decimal(repr(float(weights[field])))
        for field in RUBRIC_FIELDS
    )
    return float(total.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def aggregate(
    scores: dict[str, RawScore],
    weights: dict[str, float] | None = None,
) -> dict[str, ScoredResult]:
    """Turn raw rubric scores into ScoredResults, keeping participant order.

    Participant names are left blank; the scoring layer only knows ids.
    """
    results: dict[str, ScoredResult] = {}
    for participant_id, score in scores.items():
        results[participant_id] = ScoredResult(
            participant_name="",
            clarity=round_half_up(score.clarity, 1),
            logic=round_half_up(score.logic, 1),
            evidence=round_half_up(score.evidence, 1),
            relevance=round_half_up(score.relevance, 1),
            final_score=weighted_score(score, weights),
            reasoning=score.reasoning,
        )
    return results


def resolve_winner(
    results: dict[str, ScoredResult],
    tie_threshold: float = 0.1,
) -> tuple[Winner | None, bool]:
    """Pick the winner, or declare a tie between the top two.

    Returns:
        (winner, is_tie). winner is None when tied or when there are no
        results; a lone participant always wins.
    """
    entries = list(results.items())
    if not entries:
        return None, False

    if len(entries) == 1:
        participant_id, result = entries[0]
        return Winner(participant_id, result.participant_name, result.final_score), False

    # Stable: equal scores keep insertion order
    entries.sort(key=lambda item: item[1].final_score, reverse=True)
    (top_id, top), (_, second) = entries[0], entries[1]

    gap = abs(Decimal(repr(top.final_score)) - Decimal(repr(second.final_score)))
    if gap < Decimal(repr(float(tie_threshold))):
        return None, True
    return Winner(top_id, top.participant_name, top.final_score), False
