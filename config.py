import os
from pathlib import Path


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


# Root holding one config directory per profile
CLAUTH_DIR = Path(os.getenv("CLAUTH_DIR", str(Path.home() / ".clauth"))).expanduser()

# Per-profile layout
PROJECTS_DIRNAME = "projects"
STATS_CACHE_NAME = "stats-cache.json"
LOG_EXTENSION = os.getenv("CLAUTH_LOG_EXTENSION", ".jsonl")

# Snapshot cache
CACHE_TTL_SECONDS = _env_int("CLAUTH_CACHE_TTL_SECONDS", 300)

LOG_LEVEL = os.getenv("CLAUTH_LOG_LEVEL", "INFO").upper()
