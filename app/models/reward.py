from datetime import datetime
from enum import StrEnum
from typing import TYPE_CHECKING, Optional
from uuid import uuid4

from sqlalchemy import String, DateTime, ForeignKey, Integer, Text, Boolean
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..db.base_class import Base
from . import utcnow

if TYPE_CHECKING:
    from .profile import Profile


class Reward(Base):
    __tablename__ = "rewards"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    required_stamps: Mapped[int] = mapped_column(Integer, nullable=False)
    image_url: Mapped[Optional[str]] = mapped_column(String(512))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    display_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
    )

    exchanges: Mapped[list["RewardExchange"]] = relationship(
        back_populates="reward",
        cascade="all,delete-orphan",
    )


class ExchangeStatus(StrEnum):
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class RewardExchange(Base):
    __tablename__ = "reward_exchanges"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid4())
    )

    user_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("profile.id", ondelete="CASCADE"),
        index=True,
    )

    reward_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("rewards.id", ondelete="CASCADE"),
        index=True,
    )

    stamp_count_used: Mapped[int] = mapped_column(Integer, nullable=False)

    status: Mapped[ExchangeStatus] = mapped_column(
        default=ExchangeStatus.PENDING,
        index=True,
    )

    notes: Mapped[Optional[str]] = mapped_column(Text)

    exchanged_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
    )

    reward: Mapped["Reward"] = relationship(back_populates="exchanges")
    profile: Mapped["Profile"] = relationship(back_populates="exchanges")

    @property
    def reward_name(self) -> str | None:
        return self.reward.name if self.reward else None
