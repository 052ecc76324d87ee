"""Session transcript discovery and parsing.

A config directory keeps one subdirectory per project under ``projects/``;
each project holds one ``<session-id>.jsonl`` file per session, one JSON
record per line. Assistant turns may be written several times while they
stream, so records are collapsed by ``message.id`` within a file, keeping
the last revision.
"""

import json
import logging
from collections.abc import Iterable, Iterator
from datetime import datetime, timezone
from pathlib import Path

from pydantic import BaseModel

import config
from models import AssistantRecord, TranscriptEvent

log = logging.getLogger(__name__)

TOOL_USE_TYPE = "tool_use"
UNKNOWN_MODEL = "unknown"


class SessionScan(BaseModel):
    session_id: str
    user_messages: int = 0
    active: bool = False
    records: list[AssistantRecord] = []


def _stat_check(path: Path, check) -> bool:
    # pathlib re-raises EACCES and friends from is_dir/is_file
    try:
        return check(path)
    except OSError as exc:
        log.debug("Skipping unreadable entry %s: %s", path, exc)
        return False


def list_project_dirs(root: Path) -> list[Path]:
    """Immediate subdirectories of ``root``; empty when it can't be listed."""
    try:
        entries = sorted(root.iterdir())
    except OSError as exc:
        log.debug("Cannot list projects in %s: %s", root, exc)
        return []
    return [p for p in entries if _stat_check(p, Path.is_dir)]


def iter_session_files(project_dirs: Iterable[Path]) -> Iterator[tuple[str, Path]]:
    """Yield ``(session_id, path)`` for every session log in the projects."""
    ext = config.LOG_EXTENSION
    for project_dir in project_dirs:
        try:
            entries = sorted(project_dir.iterdir())
        except OSError as exc:
            log.debug("Skipping unreadable project %s: %s", project_dir, exc)
            continue
        for fp in entries:
            if fp.name.endswith(ext) and _stat_check(fp, Path.is_file):
                yield fp.name[: -len(ext)], fp


def to_utc_date(ts: str) -> str | None:
    try:
        parsed = datetime.fromisoformat(ts.replace("Z", "+00:00"))
    except (TypeError, ValueError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc).date().isoformat()


def _as_int(value) -> int:
    # Counters are whole tokens; fractional values are truncated
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    try:
        return int(value)
    except (OverflowError, ValueError):  # Infinity / NaN
        return 0


def parse_line(line: str) -> TranscriptEvent | None:
    try:
        entry = json.loads(line)
    except (ValueError, RecursionError):  # bad JSON or nesting too deep
        return None
    if not isinstance(entry, dict):
        return None

    ts = entry.get("timestamp")
    return TranscriptEvent(
        kind=str(entry.get("type") or ""),
        timestamp=ts if isinstance(ts, str) and ts else None,
        payload=entry,
    )


def iter_events(text: str) -> Iterator[TranscriptEvent]:
    for line in text.splitlines():
        if not line.strip():
            continue
        event = parse_line(line)
        if event is None:
            log.debug("Skipping malformed transcript line")
            continue
        yield event


def extract_assistant_record(event: TranscriptEvent) -> AssistantRecord | None:
    """Usage-bearing record from an assistant event, or None if unusable."""
    if event.kind != "assistant" or not event.timestamp:
        return None
    msg = event.payload.get("message")
    if not isinstance(msg, dict):
        return None
    date = to_utc_date(event.timestamp)
    if date is None:
        return None

    usage = msg.get("usage")
    if not isinstance(usage, dict):
        usage = {}
    content = msg.get("content")
    if not isinstance(content, list):
        content = []
    msg_id = msg.get("id")
    model = msg.get("model")

    return AssistantRecord(
        message_id=str(msg_id) if msg_id is not None else None,
        date=date,
        model=model if isinstance(model, str) and model else UNKNOWN_MODEL,
        input_tokens=_as_int(usage.get("input_tokens")),
        output_tokens=_as_int(usage.get("output_tokens")),
        cache_read_input_tokens=_as_int(usage.get("cache_read_input_tokens")),
        cache_creation_input_tokens=_as_int(usage.get("cache_creation_input_tokens")),
        tool_calls=sum(
            1 for c in content if isinstance(c, dict) and c.get("type") == TOOL_USE_TYPE
        ),
    )


def scan_text(session_id: str, text: str) -> SessionScan:
    # message id -> latest revision; insertion order is first sighting
    by_msg_id: dict[str | None, AssistantRecord] = {}
    user_messages = 0
    active = False

    for event in iter_events(text):
        if event.kind == "user":
            user_messages += 1
            active = True
            continue
        if event.kind == "assistant" and event.timestamp:
            active = True
            record = extract_assistant_record(event)
            if record is not None:
                by_msg_id[record.message_id] = record

    return SessionScan(
        session_id=session_id,
        user_messages=user_messages,
        active=active,
        records=list(by_msg_id.values()),
    )


def scan_session(session_id: str, path: Path) -> SessionScan | None:
    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        log.debug("Skipping unreadable session %s: %s", path, exc)
        return None
    return scan_text(session_id, text)
