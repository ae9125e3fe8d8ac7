from datetime import datetime, timedelta, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict


class Account(BaseModel):
    """A provider account, fetched fresh every polling cycle."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str


class TimeBucketSample(BaseModel):
    """Minutes viewed within one provider-defined sub-interval of a window."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    minutes_viewed: int


class AnalyticsWindow(BaseModel):
    """Half-open ``[start, end)`` time range handed to the analytics query."""

    model_config = ConfigDict(frozen=True)

    start: datetime
    end: datetime

    @classmethod
    def trailing(cls, minutes: int, now: datetime | None = None) -> "AnalyticsWindow":
        end = now or datetime.now(timezone.utc)
        return cls(start=end - timedelta(minutes=minutes), end=end)


class PollerState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
