"""Per-profile snapshot cache.

Each profile directory keeps its last computed snapshot in
``stats-cache.json``. A cached snapshot younger than
``config.CACHE_TTL_SECONDS`` is served as-is; anything older is recomputed
from the session transcripts.
"""

import logging
from datetime import datetime, timezone
from pathlib import Path

from pydantic import ValidationError

import config
import profiles
from collectors import claude
from models import CachedStats, ProfileStats, StatsSnapshot, StatsSummary

log = logging.getLogger(__name__)


def cache_path(config_dir: Path) -> Path:
    return Path(config_dir) / config.STATS_CACHE_NAME


def load_cached(config_dir: Path) -> CachedStats | None:
    path = cache_path(config_dir)
    try:
        return CachedStats.model_validate_json(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return None
    except OSError as exc:
        log.warning("Cannot read stats cache %s: %s", path, exc)
        return None
    except ValidationError as exc:
        log.warning("Ignoring invalid stats cache %s: %s", path, exc.error_count())
        return None


def is_stale(cached: CachedStats, now: datetime | None = None) -> bool:
    now = now or datetime.now(timezone.utc)
    try:
        computed = datetime.fromisoformat(cached.computed_at.replace("Z", "+00:00"))
    except ValueError:
        return True
    if computed.tzinfo is None:
        computed = computed.replace(tzinfo=timezone.utc)
    return (now - computed).total_seconds() > config.CACHE_TTL_SECONDS


def save(config_dir: Path, cached: CachedStats) -> None:
    path = cache_path(config_dir)
    tmp = path.with_name(path.name + ".tmp")
    try:
        tmp.write_text(cached.model_dump_json(by_alias=True, indent=2), encoding="utf-8")
        tmp.replace(path)
    except OSError as exc:
        log.warning("Could not write stats cache %s: %s", path, exc)


def refresh(config_dir: Path) -> CachedStats | None:
    snapshot = claude.compute_stats(config_dir)
    if snapshot is None:
        log.info("No usage data under %s", config_dir)
        return None
    cached = CachedStats(
        **snapshot.model_dump(),
        computed_at=datetime.now(timezone.utc).isoformat(),
    )
    save(config_dir, cached)
    return cached


def get_stats(config_dir: Path, force: bool = False) -> CachedStats | None:
    if not force:
        cached = load_cached(config_dir)
        if cached is not None and not is_stale(cached):
            return cached
    return refresh(config_dir)


def _profile_stats(name: str, force: bool) -> ProfileStats:
    cached = get_stats(profiles.get_profile_dir(name), force=force)
    if cached is None:
        return ProfileStats(name=name)
    return ProfileStats(
        name=name,
        stats=StatsSnapshot.model_validate(cached.model_dump(exclude={"computed_at"})),
        computed_at=cached.computed_at,
    )


def _summarize(force: bool) -> StatsSummary:
    results = [_profile_stats(name, force) for name in profiles.get_profile_names()]
    stamps = [p.computed_at for p in results if p.computed_at]
    return StatsSummary(profiles=results, last_refreshed=max(stamps) if stamps else None)


def refresh_all() -> StatsSummary:
    return _summarize(force=True)


def get_summary() -> StatsSummary:
    return _summarize(force=False)


def get_profile(name: str, force: bool = False) -> ProfileStats | None:
    if not profiles.profile_exists(name):
        return None
    return _profile_stats(name, force)
