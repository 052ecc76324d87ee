from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    # Serialized form matches the stats-cache.json layout (camelCase keys)
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TranscriptEvent(BaseModel):
    kind: str  # "user", "assistant", or anything else the log carries
    timestamp: str | None = None
    payload: dict[str, Any] = {}


class AssistantRecord(BaseModel):
    message_id: str | None = None
    date: str  # YYYY-MM-DD, UTC
    model: str = "unknown"
    input_tokens: int = 0
    output_tokens: int = 0
    cache_read_input_tokens: int = 0
    cache_creation_input_tokens: int = 0
    tool_calls: int = 0


class DailyActivity(CamelModel):
    model_config = ConfigDict(frozen=True)

    date: str
    message_count: int = 0
    session_count: int = 0
    tool_call_count: int = 0


class ModelUsage(CamelModel):
    model_config = ConfigDict(frozen=True)

    input_tokens: int = 0
    output_tokens: int = 0
    cache_read_input_tokens: int = 0
    cache_creation_input_tokens: int = 0


class DailyModelTokens(CamelModel):
    model_config = ConfigDict(frozen=True)

    date: str
    tokens_by_model: dict[str, int] = Field(default_factory=dict, validate_default=True)

    @field_validator("tokens_by_model")
    @classmethod
    def _read_only(cls, value):
        return MappingProxyType(value)

    @field_serializer("tokens_by_model", mode="wrap")
    def _as_dict(self, value, handler):
        return handler(dict(value))


class StatsSnapshot(CamelModel):
    model_config = ConfigDict(frozen=True)

    total_sessions: int = 0
    total_messages: int = 0
    first_session_date: str | None = None
    daily_activity: tuple[DailyActivity, ...] = ()
    daily_model_tokens: tuple[DailyModelTokens, ...] = ()  # reserved, always empty for now
    model_usage: dict[str, ModelUsage] = Field(default_factory=dict, validate_default=True)

    # Nested containers are read-only so the whole snapshot is immutable
    @field_validator("model_usage")
    @classmethod
    def _read_only(cls, value):
        return MappingProxyType(value)

    @field_serializer("model_usage", mode="wrap")
    def _as_dict(self, value, handler):
        return handler(dict(value))


class CachedStats(StatsSnapshot):
    computed_at: str  # ISO timestamp, UTC


class ProfileStats(CamelModel):
    name: str
    stats: StatsSnapshot | None = None
    computed_at: str | None = None


class StatsSummary(CamelModel):
    profiles: list[ProfileStats] = []
    last_refreshed: str | None = None
