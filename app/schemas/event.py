from datetime import datetime
from typing import Any
from pydantic import BaseModel
from .common import ORMModel


class EventIn(BaseModel):
    event_name: str
    source: str | None = None
    metadata: dict[str, Any] | None = None


class EventOut(ORMModel):
    id: int
    user_id: str | None = None
    event_name: str
    source: str | None = None
    created_at: datetime


class VersionOut(BaseModel):
    version: str
    build_date: str | None = None
    git_commit: str | None = None
    env: str
    label: str
