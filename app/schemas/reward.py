from pydantic import BaseModel
from datetime import datetime
from .common import ORMModel
from ..models.reward import ExchangeStatus


class RewardCreate(BaseModel):
    name: str
    description: str | None = None
    required_stamps: int
    image_url: str | None = None
    display_order: int = 0
    is_active: bool = True


class RewardOut(ORMModel):
    id: int
    name: str
    description: str | None = None
    required_stamps: int
    image_url: str | None = None
    is_active: bool
    display_order: int


class RewardStatusOut(RewardOut):
    can_exchange: bool
    remaining_stamps: int


class ExchangeIn(BaseModel):
    reward_id: int
    profile_id: str | None = None


class ExchangeOut(ORMModel):
    id: str
    user_id: str
    reward_id: int
    reward_name: str | None = None
    stamp_count_used: int
    status: ExchangeStatus
    notes: str | None = None
    exchanged_at: datetime


class ExchangeResultOut(BaseModel):
    success: bool = True
    message: str
    exchange: ExchangeOut
    new_stamp_count: int
