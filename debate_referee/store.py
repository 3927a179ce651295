"""JSON flat-file persistence for debate sessions and decisions."""

import json
import logging
import secrets
import time
from dataclasses import asdict, replace
from datetime import datetime
from pathlib import Path

from debate_referee.errors import SessionNotFoundError, StorageError
from debate_referee.models import Argument, DebateDecision, DebateSession, ScoredResult, Winner

logger = logging.getLogger(__name__)


def generate_id(prefix: str = "debate") -> str:
    """Return an id like debate_1758000000000_3f9a1c2b7."""
    return f"{prefix}_{int(time.time() * 1000)}_{secrets.token_hex(5)[:9]}"


def append_argument(session: DebateSession, argument: Argument) -> DebateSession:
    """Return a copy of the session with the argument appended."""
    return replace(session, arguments=session.arguments + (argument,))


def mark_processed(session: DebateSession, at: datetime) -> DebateSession:
    """Return a copy of the session stamped as processed."""
    return replace(session, processed_at=at)


def _parse_dt(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


def session_to_dict(session: DebateSession) -> dict:
    return {
        "id": session.id,
        "topic": session.topic,
        "created_at": session.created_at.isoformat(),
        "processed_at": session.processed_at.isoformat() if session.processed_at else None,
        "arguments": [
            {**asdict(arg), "submitted_at": arg.submitted_at.isoformat()}
            for arg in session.arguments
        ],
    }


def session_from_dict(data: dict) -> DebateSession:
    return DebateSession(
        id=data["id"],
        topic=data["topic"],
        created_at=datetime.fromisoformat(data["created_at"]),
        processed_at=_parse_dt(data.get("processed_at")),
        arguments=tuple(
            Argument(**{**arg, "submitted_at": datetime.fromisoformat(arg["submitted_at"])})
            for arg in data.get("arguments", [])
        ),
    )


def decision_to_dict(decision: DebateDecision) -> dict:
    data = asdict(decision)
    data["processed_at"] = decision.processed_at.isoformat()
    return data


def decision_from_dict(data: dict) -> DebateDecision:
    winner = data.get("winner")
    return DebateDecision(
        session_id=data["session_id"],
        topic=data["topic"],
        results={pid: ScoredResult(**result) for pid, result in data["results"].items()},
        winner=Winner(**winner) if winner else None,
        is_tie=bool(data["is_tie"]),
        consensus_statement=data["consensus_statement"],
        processed_at=datetime.fromisoformat(data["processed_at"]),
        scored_by=data.get("scored_by", "judge"),
    )


class DebateStore:
    """Stores sessions and decisions as JSON arrays under data_dir."""

    def __init__(self, data_dir: Path = Path("./data")) -> None:
        self.data_dir = Path(data_dir)
        self.sessions_file = self.data_dir / "sessions.json"
        self.results_file = self.data_dir / "results.json"

    def initialize(self) -> None:
        """Create the data directory and empty files if they don't exist."""
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            for path in (self.sessions_file, self.results_file):
                if not path.exists():
                    path.write_text("[]", encoding="utf-8")
        except OSError as exc:
            raise StorageError(f"Failed to initialize debate store: {exc}") from exc

    # --- sessions ---

    def create_session(self, topic: str) -> DebateSession:
        session = DebateSession(id=generate_id(), topic=topic, created_at=datetime.now())
        sessions = self._load_sessions()
        sessions.append(session)
        self._save_sessions(sessions)
        logger.info("Created session %s", session.id)
        return session

    def get_session(self, session_id: str) -> DebateSession:
        """Return the session with this id.

        Raises:
            SessionNotFoundError: No such session.
        """
        for session in self._load_sessions():
            if session.id == session_id:
                return session
        raise SessionNotFoundError(session_id)

    def list_sessions(self) -> list[DebateSession]:
        return self._load_sessions()

    def add_argument(
        self,
        session_id: str,
        participant_id: str,
        participant_name: str,
        text: str,
    ) -> Argument:
        sessions = self._load_sessions()
        index = self._index_of(sessions, session_id)
        argument = Argument(
            id=generate_id(),
            participant_id=participant_id,
            participant_name=participant_name,
            topic=sessions[index].topic,
            text=text,
            submitted_at=datetime.now(),
        )
        sessions[index] = append_argument(sessions[index], argument)
        self._save_sessions(sessions)
        logger.info("Added argument %s to session %s", argument.id, session_id)
        return argument

    def mark_processed(self, session_id: str, at: datetime | None = None) -> DebateSession:
        sessions = self._load_sessions()
        index = self._index_of(sessions, session_id)
        sessions[index] = mark_processed(sessions[index], at or datetime.now())
        self._save_sessions(sessions)
        return sessions[index]

    # --- decisions ---

    def save_decision(self, decision: DebateDecision) -> None:
        """Persist a decision, replacing any earlier one for the same session."""
        decisions = [d for d in self._load_decisions() if d.session_id != decision.session_id]
        decisions.append(decision)
        self._write(self.results_file, [decision_to_dict(d) for d in decisions])

    def get_decision(self, session_id: str) -> DebateDecision | None:
        return next((d for d in self._load_decisions() if d.session_id == session_id), None)

    def list_decisions(self) -> list[DebateDecision]:
        return self._load_decisions()

    # --- file helpers ---

    @staticmethod
    def _index_of(sessions: list[DebateSession], session_id: str) -> int:
        for index, session in enumerate(sessions):
            if session.id == session_id:
                return index
        raise SessionNotFoundError(session_id)

    def _load_sessions(self) -> list[DebateSession]:
        try:
            return [session_from_dict(item) for item in self._read(self.sessions_file)]
        except (KeyError, TypeError, ValueError) as exc:
            raise StorageError(f"Failed to load sessions: {exc}") from exc

    def _save_sessions(self, sessions: list[DebateSession]) -> None:
        self._write(self.sessions_file, [session_to_dict(s) for s in sessions])

    def _load_decisions(self) -> list[DebateDecision]:
        try:
            return [decision_from_dict(item) for item in self._read(self.results_file)]
        except (KeyError, TypeError, ValueError) as exc:
            raise StorageError(f"Failed to load results: {exc}") from exc

    @staticmethod
    def _read(path: Path) -> list:
        if not path.exists():
            return []
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise StorageError(f"Failed to read {path.name}: {exc}") from exc

    def _write(self, path: Path, payload: list) -> None:
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
        except OSError as exc:
            raise StorageError(f"Failed to write {path.name}: {exc}") from exc
