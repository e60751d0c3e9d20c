from datetime import datetime
from typing import Any, Optional
from sqlalchemy import String, DateTime, Integer, JSON
from sqlalchemy.orm import Mapped, mapped_column
from ..db.base_class import Base
from . import utcnow

class EventLog(Base):
    __tablename__ = "event_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # no FK: events outlive deleted proxy members
    user_id: Mapped[Optional[str]] = mapped_column(String(64), index=True)
    event_name: Mapped[str] = mapped_column(String(64), index=True, nullable=False)
    source: Mapped[Optional[str]] = mapped_column(String(128))
    event_metadata: Mapped[Optional[dict[str, Any]]] = mapped_column("metadata", JSON)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, index=True, nullable=False)
