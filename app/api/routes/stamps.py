from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ...core.config import settings
from ...schemas.stamp import (
    StampEntryOut,
    StampProgressOut,
    VisitStampIn,
    VisitStampOut,
    QrScanIn,
    SlotPlayIn,
    StampCreditOut,
    ManualAdjustIn,
    ManualAdjustOut,
    DeleteTodayIn,
    DeleteTodayOut,
)
from ...models.profile import Profile
from ...services import stamp_service
from ...services.profile_service import resolve_target, require_profile
from ..deps import get_db, get_current_profile, require_staff

router = APIRouter()


@router.get("/history", response_model=list[StampEntryOut])
def history(
    profile_id: str | None = Query(default=None),
    db: Session = Depends(get_db),
    current: Profile = Depends(get_current_profile),
):
    target = resolve_target(db, current, profile_id)
    return stamp_service.list_history(db, user_id=target.id)


@router.get("/progress", response_model=StampProgressOut)
def progress(
    profile_id: str | None = Query(default=None),
    db: Session = Depends(get_db),
    current: Profile = Depends(get_current_profile),
):
    target = resolve_target(db, current, profile_id)
    p = stamp_service.stamp_progress(target.stamp_count)
    return StampProgressOut(
        stamp_count=target.stamp_count,
        goal=settings.STAMP_GOAL,
        percentage=p.percentage,
        remaining=p.remaining,
        is_complete=p.is_complete,
    )


@router.post("", response_model=VisitStampOut, status_code=status.HTTP_201_CREATED)
def register_visit(payload: VisitStampIn, db: Session = Depends(get_db), current: Profile = Depends(get_current_profile)):
    target = resolve_target(db, current, payload.profile_id)
    entry = stamp_service.register_visit_stamp(db, target, qr_code_id=payload.qr_code_id)
    return VisitStampOut(stamp_count=target.stamp_count, stamp_number=entry.stamp_number)


@router.post("/scan", response_model=StampCreditOut, status_code=status.HTTP_201_CREATED)
def scan(payload: QrScanIn, db: Session = Depends(get_db), current: Profile = Depends(get_current_profile)):
    target = resolve_target(db, current, payload.profile_id)
    stamp_service.scan_qr(db, target, qr_type=payload.type, stamps=payload.stamps, qr_code_id=payload.qr_code_id)
    return StampCreditOut(
        message=f"スタンプを{payload.stamps}個獲得しました",
        stamp_count=target.stamp_count,
        stamps_added=payload.stamps,
    )


@router.post("/slot", response_model=StampCreditOut, status_code=status.HTTP_201_CREATED)
def slot(payload: SlotPlayIn, db: Session = Depends(get_db), current: Profile = Depends(get_current_profile)):
    target = resolve_target(db, current, payload.profile_id)
    stamp_service.play_slot(db, target, stamps=payload.stamps)
    return StampCreditOut(
        message=f"スロットで{payload.stamps}個のスタンプを獲得しました",
        stamp_count=target.stamp_count,
        stamps_added=payload.stamps,
    )


@router.post("/manual", response_model=ManualAdjustOut, dependencies=[Depends(require_staff)])
def manual(payload: ManualAdjustIn, db: Session = Depends(get_db)):
    target = require_profile(db, payload.user_id)
    entry = stamp_service.manual_adjust(db, target, new_stamp_count=payload.new_stamp_count)
    if entry is None:
        return ManualAdjustOut(message="既に同じ値です", stamp_count=target.stamp_count)
    return ManualAdjustOut(
        message=f"スタンプ数を{target.stamp_count}個に更新しました",
        stamp_count=target.stamp_count,
        entry=StampEntryOut.model_validate(entry),
    )


@router.post("/scan/delete-today", response_model=DeleteTodayOut, dependencies=[Depends(require_staff)])
def delete_today(payload: DeleteTodayIn, db: Session = Depends(get_db)):
    target = require_profile(db, payload.user_id)
    count, removed = stamp_service.delete_today_scans(db, target)
    return DeleteTodayOut(
        message=f"本日のQRスキャン{count}件を削除しました",
        deleted_count=count,
        removed_amount=removed,
        stamp_count=target.stamp_count,
    )
