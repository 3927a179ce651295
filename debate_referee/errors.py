"""Exception hierarchy for the referee core and its storage."""


class RefereeError(Exception):
    """Base for every error the referee raises on purpose."""


class PreconditionError(RefereeError):
    """Raised when analysis is requested for a session with no arguments."""


class JudgeError(RefereeError):
    """Base for judge failures that are recovered by heuristic scoring."""


class JudgeUnavailableError(JudgeError):
    """Raised when the judge call itself fails (timeout, auth, quota, network)."""

    def __init__(self, judge_name: str, message: str) -> None:
        self.judge_name = judge_name
        super().__init__(f"Judge {judge_name} unavailable: {message}")


class MalformedJudgeOutputError(JudgeError):
    """Raised when the judge output holds no parsable JSON object."""


class InvalidScoreError(JudgeError):
    """Raised when a participant is missing or a rubric field is out of range."""

    def __init__(self, participant_id: str, field: str | None, message: str) -> None:
        self.participant_id = participant_id
        self.field = field
        super().__init__(message)


class StorageError(RefereeError):
    """Raised when session or decision files cannot be read or written."""


class SessionNotFoundError(StorageError):
    """Raised for an unknown session id."""

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__(f"Session {session_id} not found")


class JudgePromptError(JudgeError):
    """Raised when the judge prompt template cannot be filled for a session."""
