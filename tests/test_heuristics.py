"""Tests for debate_referee/heuristics.py."""

from debate_referee.heuristics import (
    has_evidence,
    has_structure,
    relevance_ratio,
    score_argument,
    score_heuristically,
)
from tests.conftest import AI_TOPIC, STRONG_ARGUMENT, WEAK_ARGUMENT, make_argument, make_session


def test_strong_argument_scores():
    score = score_argument(STRONG_ARGUMENT, AI_TOPIC)
    assert score.clarity == 8
    assert score.logic == 7
    assert score.evidence == 8
    assert score.relevance == 10


def test_weak_argument_scores():
    score = score_argument(WEAK_ARGUMENT, AI_TOPIC)
    assert score.clarity == 6
    assert score.logic == 5
    assert score.evidence == 4
    assert score.relevance == 5


def test_markers_are_case_insensitive():
    assert has_structure("IN CONCLUSION, we win.")
    assert has_evidence("According To the latest figures")
    assert not has_structure("plain words only")
    assert not has_evidence("plain words only")


def test_logic_needs_more_than_fifty_words():
    assert score_argument(" ".join(["word"] * 50), "topic").logic == 5
    assert score_argument(" ".join(["word"] * 51), "topic").logic == 7


def test_relevance_matches_substrings_both_ways():
    # "teach" is inside "teachers", "education" contains "educat"
    assert relevance_ratio("teach educat", "teachers education") == 1.0
    assert relevance_ratio("nothing here", "teachers education") == 0.0


def test_relevance_partial_ratio():
    score = score_argument("remote", "remote work")
    assert score.relevance == 10  # 0.5 * 10 + 5


def test_empty_topic_has_zero_ratio():
    assert relevance_ratio("anything", "") == 0.0


def test_empty_text_returns_base_scores():
    score = score_argument("", AI_TOPIC)
    assert (score.clarity, score.logic, score.evidence, score.relevance) == (6, 5, 4, 5)
    assert score.reasoning == "Fallback scoring: Basic structure, Limited evidence, 0 words"


def test_reasoning_template():
    score = score_argument(STRONG_ARGUMENT, AI_TOPIC)
    assert score.reasoning == "Fallback scoring: Well-structured, Contains evidence, 70 words"


def test_custom_clamps_apply():
    clamps = {"clarity": (7, 10), "logic": (4, 6), "evidence": (3, 10), "relevance": (5, 9)}
    score = score_argument(STRONG_ARGUMENT, AI_TOPIC, clamps)
    assert score.clarity == 8
    assert score.logic == 6
    assert score.relevance == 9
    assert score_argument(WEAK_ARGUMENT, AI_TOPIC, clamps).clarity == 7


def test_score_heuristically_covers_every_participant(two_party_session):
    payload = score_heuristically(two_party_session)
    assert list(payload.scores) == ["alice", "bob"]


def test_score_heuristically_consensus_template(two_party_session):
    payload = score_heuristically(two_party_session)
    assert payload.consensus_statement == (
        "Fallback analysis: 2 arguments analyzed using basic heuristics. Results may vary from AI analysis."
    )


def test_repeat_participant_scored_once_on_latest_argument():
    session = make_session(
        AI_TOPIC,
        make_argument("alice", "Alice", WEAK_ARGUMENT),
        make_argument("bob", "Bob", WEAK_ARGUMENT),
        make_argument("alice", "Alice", STRONG_ARGUMENT),
    )
    payload = score_heuristically(session)
    assert list(payload.scores) == ["alice", "bob"]
    assert payload.scores["alice"].logic == 7
