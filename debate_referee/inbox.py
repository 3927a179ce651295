"""Inbox folder scanning, frontmatter parsing, and archive logic for argument files."""

import shutil
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

import frontmatter

from debate_referee.errors import RefereeError

_REQUIRED_KEYS = ("session", "participant_id", "participant_name")


class InboxFileError(RefereeError):
    """Raised when an inbox file lacks required metadata or text."""


@dataclass
class InboxSubmission:
    session_ref: str       # session id or 1-based list index
    participant_id: str
    participant_name: str
    text: str


def ensure_dirs(inbox_dir: Path, archive_dir: Path) -> None:
    """Create inbox and archive directories if they don't exist."""
    inbox_dir.mkdir(parents=True, exist_ok=True)
    archive_dir.mkdir(parents=True, exist_ok=True)


def scan_inbox(inbox_dir: Path) -> list[Path]:
    """Return all .md files in inbox_dir, sorted by mtime ascending (oldest first)."""
    files = list(inbox_dir.glob("*.md"))
    return sorted(files, key=lambda p: p.stat().st_mtime)


def parse_file(file_path: Path) -> InboxSubmission:
    """Parse an argument file: YAML frontmatter for who and where, body for the text.

    Expected frontmatter keys: session, participant_id, participant_name.

    Raises:
        InboxFileError: A key is missing or blank, or the body is empty.
    """
    post = frontmatter.load(str(file_path))
    missing = [k for k in _REQUIRED_KEYS if not str(post.metadata.get(k, "")).strip()]
    if missing:
        raise InboxFileError(f"{file_path.name}: missing frontmatter keys: {', '.join(missing)}")

    text = post.content.strip()
    if not text:
        raise InboxFileError(f"{file_path.name}: argument text is empty")

    return InboxSubmission(
        session_ref=str(post.metadata["session"]).strip(),
        participant_id=str(post.metadata["participant_id"]).strip(),
        participant_name=str(post.metadata["participant_name"]).strip(),
        text=text,
    )


def archive_file(file_path: Path, archive_dir: Path, *, failed: bool = False) -> Path:
    """Move file to archive_dir with a timestamp prefix.

    Args:
        file_path: Source file to archive.
        archive_dir: Destination directory.
        failed: If True, prefix filename with "FAILED_".

    Returns:
        Path to the archived file.
    """
    timestamp = datetime.now().strftime("%Y-%m-%dT%H%M")
    prefix = "FAILED_" if failed else ""
    dest = archive_dir / f"{prefix}{timestamp}_{file_path.name}"
    shutil.move(str(file_path), str(dest))
    return dest
