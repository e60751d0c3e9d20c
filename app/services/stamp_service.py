"""
Stamp ledger bookkeeping.

Every stamp-earning event appends a StampHistory row and moves the
denormalised counters on the profile in the same commit:

- ``stamp_count`` changes by the entry amount and never drops below zero
- ``qr_scan`` entries are clinic visits and also bump ``visit_count``
- ``stamp_number`` on the entry is the running total right after it

"Today" is the calendar day in the clinic's timezone.
"""
from dataclasses import dataclass
from datetime import datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo
import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..core.config import settings
from ..models.profile import Profile
from ..models.stamp import StampHistory, StampMethod
from ..models import utcnow, as_utc
from . import analytics_service
from .errors import BadRequest, Conflict, NotFound

logger = logging.getLogger(__name__)

QR_TYPES = ("premium", "regular")


@dataclass
class StampProgress:
    percentage: float
    remaining: int
    is_complete: bool


def _now(now: datetime | None) -> datetime:
    return as_utc(now) if now is not None else utcnow()


def clinic_day_bounds(now: datetime | None = None) -> tuple[datetime, datetime]:
    """UTC [start, end) of the clinic-local day containing ``now``."""
    tz = ZoneInfo(settings.CLINIC_TIMEZONE)
    local = _now(now).astimezone(tz)
    start = datetime.combine(local.date(), time.min, tzinfo=tz)
    end = start + timedelta(days=1)
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)


def _append(
    db: Session,
    profile: Profile,
    *,
    method: StampMethod,
    amount: int,
    now: datetime,
    qr_code_id: str | None = None,
    notes: str | None = None,
) -> StampHistory:
    profile.stamp_count = max(0, (profile.stamp_count or 0) + amount)
    if method == StampMethod.QR_SCAN:
        profile.visit_count = (profile.visit_count or 0) + 1
        profile.last_visit_date = now
    entry = StampHistory(
        user_id=profile.id,
        visit_date=now,
        stamp_number=profile.stamp_count,
        stamp_method=method,
        qr_code_id=qr_code_id,
        amount=amount,
        notes=notes,
    )
    db.add(entry)
    return entry


def record_entry(
    db: Session,
    profile: Profile,
    *,
    method: StampMethod,
    amount: int,
    qr_code_id: str | None = None,
    notes: str | None = None,
    now: datetime | None = None,
) -> StampHistory:
    """Append a ledger entry without committing (caller owns the transaction)."""
    return _append(db, profile, method=method, amount=amount, now=_now(now), qr_code_id=qr_code_id, notes=notes)


def has_scanned_today(db: Session, *, user_id: str, qr_code_id: str, now: datetime | None = None) -> bool:
    start, end = clinic_day_bounds(now)
    q = select(StampHistory.id).where(
        StampHistory.user_id == user_id,
        StampHistory.qr_code_id == qr_code_id,
        StampHistory.visit_date >= start,
        StampHistory.visit_date < end,
    )
    return db.execute(q.limit(1)).first() is not None


def list_history(db: Session, *, user_id: str) -> list[StampHistory]:
    q = select(StampHistory).where(StampHistory.user_id == user_id).order_by(
        StampHistory.visit_date.desc(), StampHistory.created_at.desc()
    )
    return list(db.execute(q).scalars())


def stamp_progress(current_count: int, goal_count: int | None = None) -> StampProgress:
    goal = goal_count if goal_count is not None else settings.STAMP_GOAL
    if goal <= 0:
        return StampProgress(percentage=100.0, remaining=0, is_complete=True)
    return StampProgress(
        percentage=min(100.0, current_count / goal * 100),
        remaining=max(0, goal - current_count),
        is_complete=current_count >= goal,
    )


def register_visit_stamp(db: Session, profile: Profile, *, qr_code_id: str, now: datetime | None = None) -> StampHistory:
    """One stamp per clinic QR code per day."""
    now = _now(now)
    if not qr_code_id or not qr_code_id.strip():
        raise BadRequest("QRコードの値が無効です", "Invalid QR code")
    if has_scanned_today(db, user_id=profile.id, qr_code_id=qr_code_id, now=now):
        logger.warning(f"Duplicate visit stamp rejected: user={profile.id}, qr={qr_code_id}")
        raise BadRequest("本日すでにスタンプを取得済みです", "Duplicate stamp")

    entry = _append(db, profile, method=StampMethod.QR_SCAN, amount=1, now=now, qr_code_id=qr_code_id)
    db.commit()
    db.refresh(entry)
    logger.info(f"Visit stamp registered: user={profile.id}, stamp #{entry.stamp_number}, total={profile.stamp_count}")
    return entry


def scan_qr(
    db: Session,
    profile: Profile,
    *,
    qr_type: str,
    stamps: int,
    qr_code_id: str | None = None,
    now: datetime | None = None,
) -> StampHistory:
    """Credit the stamps encoded in a clinic QR code ({"type": ..., "stamps": n})."""
    now = _now(now)
    if qr_type not in QR_TYPES:
        raise BadRequest("無効なQRコードタイプです", f"Invalid type: {qr_type}. Must be 'premium' or 'regular'")
    if not isinstance(stamps, int) or stamps <= 0:
        raise BadRequest("無効なスタンプ個数です", f"Invalid stamps: {stamps}. Must be a positive integer")

    if qr_code_id and has_scanned_today(db, user_id=profile.id, qr_code_id=qr_code_id, now=now):
        logger.warning(f"Duplicate QR scan rejected: user={profile.id}, qr={qr_code_id}")
        analytics_service.log_event(
            db,
            event_name=analytics_service.STAMP_SCAN_FAIL,
            user_id=profile.id,
            metadata={"error": "Duplicate QR code scan today"},
        )
        raise Conflict("本日すでにこのQRコードでスタンプを取得済みです", "Duplicate QR code scan today")

    if not qr_code_id:
        qr_code_id = f"{qr_type}_{int(now.timestamp() * 1000)}"
    entry = _append(db, profile, method=StampMethod.QR_SCAN, amount=stamps, now=now, qr_code_id=qr_code_id)
    db.commit()
    db.refresh(entry)
    logger.info(
        f"QR scan credited: user={profile.id} ({profile.display_name}), type={qr_type}, "
        f"+{stamps}, total={profile.stamp_count}"
    )
    analytics_service.log_event(
        db,
        event_name=analytics_service.STAMP_SCAN_SUCCESS,
        user_id=profile.id,
        metadata={"stamps_added": stamps, "type": qr_type},
    )
    return entry


def play_slot(db: Session, profile: Profile, *, stamps: int, now: datetime | None = None) -> StampHistory:
    # no daily limit on the slot game
    if not isinstance(stamps, int) or stamps < 1:
        raise BadRequest("無効なスタンプ個数です", f"Invalid stamps: {stamps}. Must be a positive integer")
    entry = _append(
        db,
        profile,
        method=StampMethod.SLOT_GAME,
        amount=stamps,
        now=_now(now),
        notes=f"スロットゲーム: {stamps}個付与",
    )
    db.commit()
    db.refresh(entry)
    logger.info(f"Slot stamps credited: user={profile.id}, +{stamps}, total={profile.stamp_count}")
    analytics_service.log_event(
        db,
        event_name=analytics_service.SLOT_GAME_PLAY,
        user_id=profile.id,
        # credited spins are wins; losing spins never reach the server
        metadata={"result": "win", "stamps_won": stamps},
    )
    return entry


def manual_adjust(db: Session, profile: Profile, *, new_stamp_count: int, now: datetime | None = None) -> StampHistory | None:
    """Staff override of the stamp total. Returns None when nothing changed."""
    if new_stamp_count < 0 or new_stamp_count > settings.MANUAL_STAMP_MAX:
        raise BadRequest(
            f"スタンプ数は0～{settings.MANUAL_STAMP_MAX}の範囲で指定してください",
            "Invalid stamp count",
        )
    current = profile.stamp_count or 0
    if current == new_stamp_count:
        return None

    now = _now(now)
    local = now.astimezone(ZoneInfo(settings.CLINIC_TIMEZONE))
    delta = new_stamp_count - current
    sign = "+" if delta > 0 else ""
    entry = _append(
        db,
        profile,
        method=StampMethod.MANUAL_ADMIN,
        amount=delta,
        now=now,
        qr_code_id=f"MANUAL-ADJUST-{local:%Y%m%d-%H%M%S}",
        notes=f"スタッフ操作: {sign}{delta}個 ({current} → {new_stamp_count})",
    )
    db.commit()
    db.refresh(entry)
    logger.info(f"Manual stamp change: user={profile.id}, {current} -> {new_stamp_count}")
    return entry


def delete_today_scans(db: Session, profile: Profile, *, now: datetime | None = None) -> tuple[int, int]:
    """Undo today's QR scans for a profile. Returns (entries deleted, stamps removed)."""
    start, end = clinic_day_bounds(now)
    q = select(StampHistory).where(
        StampHistory.user_id == profile.id,
        StampHistory.stamp_method == StampMethod.QR_SCAN,
        StampHistory.visit_date >= start,
        StampHistory.visit_date < end,
    )
    scans = list(db.execute(q).scalars())
    if not scans:
        raise NotFound("本日のQRスキャン履歴がありません", "No QR scans found today")

    removed = sum(s.amount or 0 for s in scans)
    for s in scans:
        db.delete(s)
    profile.stamp_count = max(0, (profile.stamp_count or 0) - removed)
    profile.visit_count = max(0, (profile.visit_count or 0) - len(scans))
    db.commit()
    db.refresh(profile)
    logger.info(
        f"Deleted today's QR scans: user={profile.id}, entries={len(scans)}, "
        f"-{removed}, total={profile.stamp_count}"
    )
    return len(scans), removed
