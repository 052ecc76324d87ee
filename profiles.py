import logging
import re
from pathlib import Path

import config

log = logging.getLogger(__name__)

_NAME_RE = re.compile(r"[a-zA-Z0-9][a-zA-Z0-9_-]*")


def get_profile_dir(name: str) -> Path:
    return config.CLAUTH_DIR / name


def is_valid_name(name: str) -> bool:
    return bool(_NAME_RE.fullmatch(name))


def profile_exists(name: str) -> bool:
    return is_valid_name(name) and get_profile_dir(name).is_dir()


def get_profile_names() -> list[str]:
    """Sorted profile names; empty if the profile root doesn't exist yet."""
    try:
        return sorted(p.name for p in config.CLAUTH_DIR.iterdir() if p.is_dir())
    except OSError as exc:
        log.debug("Cannot list profiles in %s: %s", config.CLAUTH_DIR, exc)
        return []
