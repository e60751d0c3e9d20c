from __future__ import annotations
from datetime import date, datetime
from enum import StrEnum
from typing import TYPE_CHECKING, Optional
from sqlalchemy import String, DateTime, Date, ForeignKey, Integer, Boolean, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from ..db.base_class import Base
from . import utcnow

if TYPE_CHECKING:
    from .family import Family
    from .stamp import StampHistory
    from .reward import RewardExchange
    from .survey import SurveyTarget, SurveyAnswer

PROXY_ID_PREFIX = "manual-"


class FamilyRole(StrEnum):
    PARENT = "parent"
    CHILD = "child"


class ViewMode(StrEnum):
    ADULT = "adult"
    KIDS = "kids"


class Profile(Base):
    # LINE user id for real members, "manual-child-<uuid>" for proxy members
    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    line_user_id: Mapped[Optional[str]] = mapped_column(String(64), unique=True, index=True)
    display_name: Mapped[str] = mapped_column(String(128), default="", nullable=False)
    picture_url: Mapped[Optional[str]] = mapped_column(String(512))
    real_name: Mapped[Optional[str]] = mapped_column(String(128))
    ticket_number: Mapped[Optional[str]] = mapped_column(String(32))

    stamp_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    visit_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    last_visit_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    family_id: Mapped[Optional[str]] = mapped_column(String(36), ForeignKey("family.id", ondelete="SET NULL"), index=True)
    family_role: Mapped[Optional[FamilyRole]] = mapped_column()
    view_mode: Mapped[ViewMode] = mapped_column(default=ViewMode.ADULT)
    is_line_friend: Mapped[Optional[bool]] = mapped_column(Boolean)

    next_visit_date: Mapped[Optional[date]] = mapped_column(Date)
    next_memo: Mapped[Optional[str]] = mapped_column(Text)
    next_memo_updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    reservation_button_clicks: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    family: Mapped[Optional["Family"]] = relationship(back_populates="members", foreign_keys=[family_id])
    stamp_history: Mapped[list["StampHistory"]] = relationship(back_populates="profile", cascade="all,delete-orphan")
    exchanges: Mapped[list["RewardExchange"]] = relationship(back_populates="profile", cascade="all,delete-orphan")
    survey_targets: Mapped[list["SurveyTarget"]] = relationship(back_populates="profile", cascade="all,delete-orphan")
    survey_answers: Mapped[list["SurveyAnswer"]] = relationship(back_populates="profile", cascade="all,delete-orphan")

    @property
    def is_proxy(self) -> bool:
        return is_proxy_member(self)

    @property
    def member_type(self) -> str:
        return "proxy" if self.is_proxy else "real"


def is_proxy_member(profile: Profile) -> bool:
    """A guardian-managed member: no LINE identity and a manual- id.

    Both conditions must hold before a profile row may be hard-deleted.
    """
    return profile.line_user_id is None and profile.id.startswith(PROXY_ID_PREFIX)
