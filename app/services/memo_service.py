import re
from datetime import date
import logging

from sqlalchemy.orm import Session

from ..core.config import settings
from ..models.profile import Profile
from ..models import utcnow
from .errors import BadRequest

logger = logging.getLogger(__name__)

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

# sentinel for "field not sent" as opposed to an explicit null
UNSET = object()


def parse_visit_date(value: str) -> date:
    if not _DATE_RE.match(value):
        raise BadRequest("日付はYYYY-MM-DD形式で指定してください", "Invalid date format")
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise BadRequest("日付はYYYY-MM-DD形式で指定してください", "Invalid date format")


def update_memo(db: Session, profile: Profile, *, next_visit_date=UNSET, next_memo=UNSET) -> Profile:
    """Staff-side edit of the next-visit memo.

    Empty strings clear a field, omitted fields are left alone, and the
    updated-at stamp moves on every call.
    """
    visit_date = UNSET
    if next_visit_date is not UNSET:
        visit_date = parse_visit_date(next_visit_date) if next_visit_date else None

    memo = UNSET
    if next_memo is not UNSET:
        if next_memo and len(next_memo) > settings.MEMO_MAX_LENGTH:
            raise BadRequest(
                f"メッセージは{settings.MEMO_MAX_LENGTH}文字以内で入力してください",
                "Message too long",
            )
        memo = next_memo or None

    if visit_date is not UNSET:
        profile.next_visit_date = visit_date
    if memo is not UNSET:
        profile.next_memo = memo
    profile.next_memo_updated_at = utcnow()
    db.commit()
    db.refresh(profile)
    logger.info(f"Next-visit memo updated: user={profile.id}, date={profile.next_visit_date}")
    return profile


def format_visit_date(value: date | None) -> str | None:
    """Render a visit date the way the card shows it, e.g. 2026年4月13日."""
    if value is None:
        return None
    return f"{value.year}年{value.month}月{value.day}日"
