from datetime import datetime
from pydantic import BaseModel
from .common import ORMModel
from ..models.stamp import StampMethod


class StampEntryOut(ORMModel):
    id: str
    user_id: str
    visit_date: datetime
    stamp_number: int
    stamp_method: StampMethod
    qr_code_id: str | None = None
    amount: int | None = None
    notes: str | None = None


class StampProgressOut(BaseModel):
    stamp_count: int
    goal: int
    percentage: float
    remaining: int
    is_complete: bool


class VisitStampIn(BaseModel):
    qr_code_id: str
    profile_id: str | None = None


class VisitStampOut(BaseModel):
    success: bool = True
    stamp_count: int
    stamp_number: int


class QrScanIn(BaseModel):
    type: str
    stamps: int
    qr_code_id: str | None = None
    profile_id: str | None = None


class SlotPlayIn(BaseModel):
    stamps: int
    profile_id: str | None = None


class StampCreditOut(BaseModel):
    success: bool = True
    message: str
    stamp_count: int
    stamps_added: int


class ManualAdjustIn(BaseModel):
    user_id: str
    new_stamp_count: int


class ManualAdjustOut(BaseModel):
    success: bool = True
    message: str
    stamp_count: int
    entry: StampEntryOut | None = None


class DeleteTodayIn(BaseModel):
    user_id: str


class DeleteTodayOut(BaseModel):
    success: bool = True
    message: str
    deleted_count: int
    removed_amount: int
    stamp_count: int
