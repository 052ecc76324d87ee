import logging
from pathlib import Path

import config
from collectors.transcripts import iter_session_files, list_project_dirs, scan_session
from models import AssistantRecord, DailyActivity, ModelUsage, StatsSnapshot

log = logging.getLogger(__name__)


def aggregate_daily(records: list[AssistantRecord]) -> list[DailyActivity]:
    """Group assistant records by UTC day, oldest first.

    Per-day user messages aren't known, so each day's message count is the
    assistant count doubled (one user turn assumed per assistant turn).
    Session counts per day stay at 0.
    """
    # date -> [assistant messages, tool calls]
    daily: dict[str, list[int]] = {}
    for rec in records:
        acc = daily.setdefault(rec.date, [0, 0])
        acc[0] += 1
        acc[1] += rec.tool_calls

    return [
        DailyActivity(date=date, message_count=msgs * 2, tool_call_count=tools)
        for date, (msgs, tools) in sorted(daily.items())
    ]


def aggregate_models(records: list[AssistantRecord]) -> dict[str, ModelUsage]:
    acc: dict[str, dict[str, int]] = {}
    for rec in records:
        m = acc.setdefault(rec.model, {"input": 0, "output": 0, "cache_read": 0, "cache_create": 0})
        m["input"] += rec.input_tokens
        m["output"] += rec.output_tokens
        m["cache_read"] += rec.cache_read_input_tokens
        m["cache_create"] += rec.cache_creation_input_tokens

    return {
        model: ModelUsage(
            input_tokens=v["input"],
            output_tokens=v["output"],
            cache_read_input_tokens=v["cache_read"],
            cache_creation_input_tokens=v["cache_create"],
        )
        for model, v in acc.items()
    }


def build_snapshot(
    session_ids: set[str],
    records: list[AssistantRecord],
    user_messages: int,
) -> StatsSnapshot | None:
    """Final report, or None when nothing was recorded at all."""
    if user_messages == 0 and not records:
        return None

    daily_activity = aggregate_daily(records)
    return StatsSnapshot(
        total_sessions=len(session_ids),
        total_messages=user_messages + len(records),
        first_session_date=daily_activity[0].date if daily_activity else None,
        daily_activity=daily_activity,
        daily_model_tokens=[],
        model_usage=aggregate_models(records),
    )


def _collect(projects_dir: Path) -> StatsSnapshot | None:
    project_dirs = list_project_dirs(projects_dir)
    if not project_dirs:
        return None

    session_ids: set[str] = set()
    records: list[AssistantRecord] = []
    user_messages = 0

    for session_id, path in iter_session_files(project_dirs):
        scan = scan_session(session_id, path)
        if scan is None:
            continue
        if scan.active:
            session_ids.add(session_id)
        user_messages += scan.user_messages
        records.extend(scan.records)

    log.debug(
        "Scanned %s: %d sessions, %d user messages, %d assistant messages",
        projects_dir, len(session_ids), user_messages, len(records),
    )
    return build_snapshot(session_ids, records, user_messages)


def compute_stats(config_dir: Path) -> StatsSnapshot | None:
    """Scan ``<config_dir>/projects`` and summarize usage.

    Returns None when there is nothing to report, including when the
    projects directory is missing or unreadable.
    """
    projects_dir = Path(config_dir) / config.PROJECTS_DIRNAME
    try:
        return _collect(projects_dir)
    except Exception:
        log.exception("Failed to compute stats from %s", projects_dir)
        return None
