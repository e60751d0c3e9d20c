from datetime import date, datetime
from pydantic import BaseModel
from .common import ORMModel
from ..models.profile import FamilyRole, ViewMode


class ProfileOut(ORMModel):
    id: str
    line_user_id: str | None = None
    display_name: str
    picture_url: str | None = None
    real_name: str | None = None
    ticket_number: str | None = None
    stamp_count: int
    visit_count: int
    last_visit_date: datetime | None = None
    family_id: str | None = None
    family_role: FamilyRole | None = None
    view_mode: ViewMode
    is_line_friend: bool | None = None
    member_type: str
    created_at: datetime


class ProfileUpdate(BaseModel):
    display_name: str | None = None
    real_name: str | None = None
    ticket_number: str | None = None
    view_mode: ViewMode | None = None


class RoleSetupIn(BaseModel):
    role: FamilyRole
    ticket_number: str | None = None
    real_name: str | None = None


class RoleSetupOut(BaseModel):
    success: bool = True
    role: FamilyRole
    family_id: str | None = None
    invite_code: str | None = None
    needs_join: bool = False


class ReservationClickIn(BaseModel):
    from_page: str | None = None


class ReservationClickOut(BaseModel):
    success: bool = True
    reservation_button_clicks: int


class MemoOut(ORMModel):
    id: str
    next_visit_date: date | None = None
    next_visit_date_label: str | None = None
    next_memo: str | None = None
    next_memo_updated_at: datetime | None = None


class MemoUpdate(BaseModel):
    # empty string clears a field, a missing key leaves it alone
    next_visit_date: str | None = None
    next_memo: str | None = None
