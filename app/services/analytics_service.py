from typing import Any
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..models.event_log import EventLog
from .errors import BadRequest

logger = logging.getLogger(__name__)

STAMP_SCAN_SUCCESS = "stamp_scan_success"
STAMP_SCAN_FAIL = "stamp_scan_fail"
SLOT_GAME_PLAY = "slot_game_play"
REWARD_EXCHANGE = "reward_exchange"
RESERVATION_CLICK = "reservation_click"
FAMILY_MEMBER_ADD = "family_member_add"
FAMILY_MEMBER_EDIT = "family_member_edit"
FAMILY_MEMBER_DELETE = "family_member_delete"


def log_event(
    db: Session,
    *,
    event_name: str,
    user_id: str | None = None,
    source: str | None = None,
    metadata: dict[str, Any] | None = None,
) -> EventLog | None:
    """Record an analytics event in its own commit.

    Call this after the business change has been committed: a failed
    event insert is rolled back and logged, never raised.
    """
    event = EventLog(
        user_id=user_id,
        event_name=event_name,
        source=source or "direct",
        event_metadata=metadata or {},
    )
    try:
        db.add(event)
        db.commit()
        db.refresh(event)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to record event {event_name} for {user_id}: {e}", exc_info=True)
        return None
    return event


def record_client_event(
    db: Session,
    *,
    user_id: str,
    event_name: str,
    source: str | None = None,
    metadata: dict[str, Any] | None = None,
) -> EventLog | None:
    name = (event_name or "").strip()
    if not name:
        raise BadRequest("イベント名を指定してください", "event_name is required")
    return log_event(db, event_name=name, user_id=user_id, source=source, metadata=metadata)
