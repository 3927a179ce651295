"""Extract and validate the scoring payload from raw judge output."""

import json
import logging
import re

from config.config_loader import RUBRIC_FIELDS
from debate_referee.errors import InvalidScoreError, MalformedJudgeOutputError
from debate_referee.models import DebateSession, RawScore, ScoringPayload

logger = logging.getLogger(__name__)

# Greedy: first "{" through last "}", so prose around the object is dropped
_JSON_SPAN = re.compile(r"\{.*\}", re.DOTALL)


def extract_json_object(raw: str) -> dict:
    """Return the JSON object embedded in raw judge text.

    Raises:
        MalformedJudgeOutputError: No brace span, unparsable JSON, or a
            top-level value that is not an object.
    """
    match = _JSON_SPAN.search(raw)
    if not match:
        raise MalformedJudgeOutputError("No JSON found in judge response")
    try:
        parsed = json.loads(match.group(0))
    except json.JSONDecodeError as exc:
        raise MalformedJudgeOutputError(f"Judge response is not valid JSON: {exc}") from exc
    if not isinstance(parsed, dict):
        raise MalformedJudgeOutputError("Judge response JSON is not an object")
    return parsed


def _rubric_value(entry: dict, field: str, participant_id: str) -> float:
    value = entry.get(field)
    # bool is an int subclass; true/false are not scores
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidScoreError(participant_id, field, f"Invalid {field} score for user {participant_id}")
    if not 0 <= value <= 10:
        raise InvalidScoreError(
            participant_id, field, f"Invalid {field} score for user {participant_id}: {value} not in [0, 10]"
        )
    return float(value)


def parse_judge_output(raw: str, session: DebateSession) -> ScoringPayload:
    """Parse judge text into a ScoringPayload covering every session participant.

    Participants are checked in session order and the first violation is
    raised. Entries for ids outside the session are ignored.

    Raises:
        MalformedJudgeOutputError: No JSON object could be parsed.
        InvalidScoreError: A participant is missing or a rubric field is not
            a number in [0, 10].
    """
    parsed = extract_json_object(raw)
    raw_scores = parsed.get("scores")
    if not isinstance(raw_scores, dict):
        raw_scores = {}

    scores: dict[str, RawScore] = {}
    for argument in session.arguments:
        participant_id = argument.participant_id
        if participant_id in scores:
            continue
        entry = raw_scores.get(participant_id)
        if not isinstance(entry, dict):
            raise InvalidScoreError(participant_id, None, f"Missing score for user {participant_id}")

        values = {field: _rubric_value(entry, field, participant_id) for field in RUBRIC_FIELDS}
        reasoning = entry.get("reasoning")
        scores[participant_id] = RawScore(
            **values,
            reasoning=reasoning if isinstance(reasoning, str) else "",
        )

    extra = set(raw_scores) - set(scores)
    if extra:
        logger.debug("Ignoring judge scores for unknown participants: %s", sorted(extra))

    consensus = parsed.get("consensusStatement")
    return ScoringPayload(
        scores=scores,
        consensus_statement=consensus if isinstance(consensus, str) else "",
    )
