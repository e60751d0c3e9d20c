from __future__ import annotations
from datetime import datetime
from enum import StrEnum
from typing import TYPE_CHECKING, Optional
from sqlalchemy import String, DateTime, ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from uuid import uuid4
from ..db.base_class import Base
from . import utcnow

if TYPE_CHECKING:
    from .profile import Profile

class StampMethod(StrEnum):
    QR_SCAN = "qr_scan"
    MANUAL_ADMIN = "manual_admin"
    IMPORT = "import"
    SURVEY_REWARD = "survey_reward"
    SLOT_GAME = "slot_game"

class StampHistory(Base):
    __tablename__ = "stamp_history"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    user_id: Mapped[str] = mapped_column(String(64), ForeignKey("profile.id", ondelete="CASCADE"), index=True)
    visit_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, index=True, nullable=False)
    # running stamp total right after this entry
    stamp_number: Mapped[int] = mapped_column(Integer, nullable=False)
    stamp_method: Mapped[StampMethod] = mapped_column(index=True)
    qr_code_id: Mapped[Optional[str]] = mapped_column(String(128), index=True)
    amount: Mapped[Optional[int]] = mapped_column(Integer)
    notes: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)
    profile: Mapped["Profile"] = relationship(back_populates="stamp_history")
