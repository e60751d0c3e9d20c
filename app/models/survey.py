from __future__ import annotations
from datetime import datetime
from typing import TYPE_CHECKING, Optional
from sqlalchemy import String, DateTime, ForeignKey, Integer, Text, Boolean, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from uuid import uuid4
from ..db.base_class import Base
from . import utcnow

if TYPE_CHECKING:
    from .profile import Profile

class Survey(Base):
    __tablename__ = "surveys"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    # scaled like profile.stamp_count
    reward_stamps: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    targets: Mapped[list["SurveyTarget"]] = relationship(back_populates="survey", cascade="all,delete-orphan")

class SurveyTarget(Base):
    __tablename__ = "survey_targets"
    __table_args__ = (UniqueConstraint("user_id", "survey_id", name="uq_survey_target_user_survey"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    user_id: Mapped[str] = mapped_column(String(64), ForeignKey("profile.id", ondelete="CASCADE"), index=True)
    survey_id: Mapped[str] = mapped_column(String(36), ForeignKey("surveys.id", ondelete="CASCADE"), index=True)
    shown_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    postponed_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    last_shown_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    last_postponed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    answered_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    survey: Mapped["Survey"] = relationship(back_populates="targets")
    profile: Mapped["Profile"] = relationship(back_populates="survey_targets")

class SurveyAnswer(Base):
    __tablename__ = "survey_answers"
    __table_args__ = (UniqueConstraint("user_id", "survey_id", name="uq_survey_answer_user_survey"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    user_id: Mapped[str] = mapped_column(String(64), ForeignKey("profile.id", ondelete="CASCADE"), index=True)
    survey_id: Mapped[str] = mapped_column(String(36), ForeignKey("surveys.id", ondelete="CASCADE"), index=True)
    q1_rating: Mapped[int] = mapped_column(Integer, nullable=False)
    q2_comment: Mapped[Optional[str]] = mapped_column(Text)
    q3_recommend: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    profile: Mapped["Profile"] = relationship(back_populates="survey_answers")
