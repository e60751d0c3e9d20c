from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ...schemas.family import (
    FamilyCreate,
    FamilyJoin,
    FamilyUpdate,
    FamilyOut,
    FamilyDetailOut,
    MemberOut,
    ProxyMemberCreate,
    ProxyMemberUpdate,
    MemberRemovedOut,
)
from ...models.profile import Profile
from ...services import family_service
from ..deps import get_db, get_current_profile

router = APIRouter()


@router.post("", response_model=FamilyOut, status_code=status.HTTP_201_CREATED)
def create(payload: FamilyCreate, db: Session = Depends(get_db), current: Profile = Depends(get_current_profile)):
    return family_service.create_family(db, profile=current, name=payload.family_name)


@router.post("/join", response_model=FamilyOut)
def join(payload: FamilyJoin, db: Session = Depends(get_db), current: Profile = Depends(get_current_profile)):
    return family_service.join_family(db, profile=current, invite_code=payload.invite_code)


@router.get("/me", response_model=FamilyDetailOut)
def my_family(db: Session = Depends(get_db), current: Profile = Depends(get_current_profile)):
    fam = family_service.require_family(db, current)
    members = family_service.list_members(db, family_id=fam.id)
    totals = family_service.family_totals(db, family_id=fam.id)
    return FamilyDetailOut(
        **FamilyOut.model_validate(fam).model_dump(),
        members=[MemberOut.model_validate(m) for m in members],
        **totals,
    )


@router.patch("/me", response_model=FamilyOut)
def rename(payload: FamilyUpdate, db: Session = Depends(get_db), current: Profile = Depends(get_current_profile)):
    return family_service.rename_family(db, profile=current, name=payload.family_name)


@router.post("/members", response_model=MemberOut, status_code=status.HTTP_201_CREATED)
def add_member(payload: ProxyMemberCreate, db: Session = Depends(get_db), current: Profile = Depends(get_current_profile)):
    return family_service.add_proxy_member(
        db, parent=current, child_name=payload.child_name, ticket_number=payload.ticket_number
    )


@router.patch("/members/{member_id}", response_model=MemberOut)
def edit_member(
    member_id: str,
    payload: ProxyMemberUpdate,
    db: Session = Depends(get_db),
    current: Profile = Depends(get_current_profile),
):
    return family_service.update_member(
        db,
        parent=current,
        member_id=member_id,
        child_name=payload.child_name,
        ticket_number=payload.ticket_number,
    )


@router.delete("/members/{member_id}", response_model=MemberRemovedOut)
def remove_member(member_id: str, db: Session = Depends(get_db), current: Profile = Depends(get_current_profile)):
    name, deleted = family_service.remove_member(db, parent=current, member_id=member_id)
    if deleted:
        message = f"{name}さんを削除しました"
    else:
        message = f"{name}さんを家族から外しました"
    return MemberRemovedOut(message=message, deleted=deleted)
