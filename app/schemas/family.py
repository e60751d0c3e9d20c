from datetime import datetime
from typing import List
from pydantic import BaseModel
from .common import ORMModel
from .profile import FamilyRole


class FamilyCreate(BaseModel):
    family_name: str


class FamilyJoin(BaseModel):
    invite_code: str


class FamilyUpdate(BaseModel):
    family_name: str


class FamilyOut(ORMModel):
    id: str
    family_name: str
    invite_code: str
    representative_user_id: str | None = None
    created_at: datetime


class MemberOut(ORMModel):
    id: str
    display_name: str
    real_name: str | None = None
    picture_url: str | None = None
    family_role: FamilyRole | None = None
    stamp_count: int
    visit_count: int
    ticket_number: str | None = None
    member_type: str


class FamilyDetailOut(FamilyOut):
    members: List[MemberOut] = []
    total_stamp_count: int = 0
    total_visit_count: int = 0
    member_count: int = 0


class ProxyMemberCreate(BaseModel):
    child_name: str
    ticket_number: str | None = None


class ProxyMemberUpdate(BaseModel):
    child_name: str | None = None
    ticket_number: str | None = None


class MemberRemovedOut(BaseModel):
    success: bool = True
    message: str
    deleted: bool
