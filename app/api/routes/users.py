from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from ...schemas.user import MeOut
from ...schemas.family import FamilyOut
from ...schemas.profile import (
    ProfileUpdate,
    RoleSetupIn,
    RoleSetupOut,
    ReservationClickIn,
    ReservationClickOut,
    MemoOut,
    MemoUpdate,
)
from ...models.profile import Profile, FamilyRole
from ...services import analytics_service, family_service, memo_service, profile_service
from ..deps import get_db, get_current_profile, require_staff

router = APIRouter()


def _build_me_out(db: Session, profile: Profile) -> MeOut:
    """Profile fields plus the family it belongs to (or null)."""
    fam = family_service.get_family(db, profile.family_id) if profile.family_id else None
    out = MeOut.model_validate(profile)
    out.family = FamilyOut.model_validate(fam) if fam else None
    return out


def _memo_out(profile: Profile) -> MemoOut:
    out = MemoOut.model_validate(profile)
    out.next_visit_date_label = memo_service.format_visit_date(profile.next_visit_date)
    return out


@router.get("/me", response_model=MeOut)
def me(db: Session = Depends(get_db), current: Profile = Depends(get_current_profile)):
    return _build_me_out(db, current)


@router.patch("/me", response_model=MeOut)
def update_me(
    payload: ProfileUpdate,
    db: Session = Depends(get_db),
    current: Profile = Depends(get_current_profile),
):
    profile = profile_service.update_profile(
        db,
        current,
        display_name=payload.display_name,
        real_name=payload.real_name,
        ticket_number=payload.ticket_number,
        view_mode=payload.view_mode,
    )
    return _build_me_out(db, profile)


@router.post("/me/setup-role", response_model=RoleSetupOut)
def setup_role(
    payload: RoleSetupIn,
    response: Response,
    db: Session = Depends(get_db),
    current: Profile = Depends(get_current_profile),
):
    fam = family_service.setup_role(
        db,
        profile=current,
        role=payload.role,
        ticket_number=payload.ticket_number,
        real_name=payload.real_name,
    )
    if fam is None:
        return RoleSetupOut(role=FamilyRole.CHILD, needs_join=True)
    response.status_code = status.HTTP_201_CREATED
    return RoleSetupOut(role=FamilyRole.PARENT, family_id=fam.id, invite_code=fam.invite_code)


@router.post("/me/reservation-click", response_model=ReservationClickOut)
def reservation_click(
    payload: ReservationClickIn | None = None,
    db: Session = Depends(get_db),
    current: Profile = Depends(get_current_profile),
):
    clicks = profile_service.record_reservation_click(db, current)
    analytics_service.log_event(
        db,
        event_name=analytics_service.RESERVATION_CLICK,
        user_id=current.id,
        metadata={
            "clicks": clicks,
            "from_page": payload.from_page if payload else None,
            "current_stamp_count": current.stamp_count,
        },
    )
    return ReservationClickOut(reservation_button_clicks=clicks)


@router.get("/me/memo", response_model=MemoOut)
def my_memo(current: Profile = Depends(get_current_profile)):
    return _memo_out(current)


@router.get("/{user_id}/memo", response_model=MemoOut, dependencies=[Depends(require_staff)])
def get_memo(user_id: str, db: Session = Depends(get_db)):
    return _memo_out(profile_service.require_profile(db, user_id))


@router.put("/{user_id}/memo", response_model=MemoOut, dependencies=[Depends(require_staff)])
def put_memo(user_id: str, payload: MemoUpdate, db: Session = Depends(get_db)):
    profile = profile_service.require_profile(db, user_id)
    sent = payload.model_fields_set
    profile = memo_service.update_memo(
        db,
        profile,
        next_visit_date=payload.next_visit_date if "next_visit_date" in sent else memo_service.UNSET,
        next_memo=payload.next_memo if "next_memo" in sent else memo_service.UNSET,
    )
    return _memo_out(profile)
