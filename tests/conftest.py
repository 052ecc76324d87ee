import json
from pathlib import Path

import pytest

import config


def user(ts: str = "2026-03-04T09:59:00.000Z") -> dict:
    return {"type": "user", "timestamp": ts, "message": {"role": "user", "content": "hi"}}


def assistant(
    msg_id: str | None,
    ts: str | None = "2026-03-04T10:00:00.000Z",
    model: str | None = "claude-sonnet-4-5-20250929",
    tools: int = 0,
    **usage,
) -> dict:
    message: dict = {
        "role": "assistant",
        "usage": usage,
        "content": [{"type": "text", "text": "ok"}]
        + [{"type": "tool_use", "id": f"toolu_{i}", "name": "Read", "input": {}} for i in range(tools)],
    }
    if msg_id is not None:
        message["id"] = msg_id
    if model is not None:
        message["model"] = model
    entry: dict = {"type": "assistant", "message": message}
    if ts is not None:
        entry["timestamp"] = ts
    return entry


@pytest.fixture
def config_dir(tmp_path: Path) -> Path:
    path = tmp_path / "profile"
    path.mkdir()
    return path


@pytest.fixture
def write_session(config_dir: Path):
    def _write(project: str, session_id: str, lines: list, root: Path | None = None) -> Path:
        base = (root or config_dir) / config.PROJECTS_DIRNAME / project
        base.mkdir(parents=True, exist_ok=True)
        path = base / f"{session_id}{config.LOG_EXTENSION}"
        path.write_text(
            "\n".join(line if isinstance(line, str) else json.dumps(line) for line in lines),
            encoding="utf-8",
        )
        return path

    return _write


@pytest.fixture
def clauth_dir(tmp_path: Path, monkeypatch) -> Path:
    root = tmp_path / "clauth"
    root.mkdir()
    monkeypatch.setattr(config, "CLAUTH_DIR", root)
    return root
