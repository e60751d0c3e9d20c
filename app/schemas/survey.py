from datetime import datetime
from pydantic import BaseModel
from .common import ORMModel


class SurveyCreate(BaseModel):
    title: str
    description: str | None = None
    reward_stamps: int = 0
    is_active: bool = True


class SurveyOut(ORMModel):
    id: str
    title: str
    description: str | None = None
    reward_stamps: int
    is_active: bool
    created_at: datetime


class SurveyCheckOut(BaseModel):
    should_show: bool
    survey_id: str | None = None
    title: str | None = None
    description: str | None = None
    reward_stamps: int | None = None
    shown_count: int | None = None
    postponed_count: int | None = None


class SurveyPostponeOut(BaseModel):
    success: bool = True
    postponed_count: int
    shown_count: int


class SurveySubmitIn(BaseModel):
    q1_rating: int
    q2_comment: str | None = None
    q3_recommend: int


class SurveySubmitOut(BaseModel):
    success: bool = True
    message: str
    reward_stamps: int
    stamp_count: int


class TargetsIn(BaseModel):
    # omitted means every member with a LINE account
    user_ids: list[str] | None = None


class TargetsOut(BaseModel):
    success: bool = True
    added: int
