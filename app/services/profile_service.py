from sqlalchemy.orm import Session
import logging
from ..models.profile import Profile, FamilyRole, ViewMode
from ..models import utcnow
from .errors import Forbidden, NotFound
from .line_client import LineIdentity

logger = logging.getLogger(__name__)


def get_profile(db: Session, profile_id: str) -> Profile | None:
    return db.get(Profile, profile_id)


def require_profile(db: Session, profile_id: str) -> Profile:
    profile = get_profile(db, profile_id)
    if not profile:
        raise NotFound("ユーザーが見つかりません", "User not found")
    return profile


def upsert_line_profile(db: Session, *, identity: LineIdentity, is_friend: bool | None = None) -> Profile:
    """Create or refresh the profile of a LINE user after login.

    The LINE user id is the primary key; display name and picture follow
    whatever LINE reports at each login.
    """
    try:
        profile = db.get(Profile, identity.user_id)
        if profile is None:
            profile = Profile(id=identity.user_id, line_user_id=identity.user_id)
            db.add(profile)
            logger.info(f"Registering new profile: id={identity.user_id}")
        profile.display_name = identity.display_name
        profile.picture_url = identity.picture_url
        if is_friend is not None:
            profile.is_line_friend = is_friend
        profile.updated_at = utcnow()
        db.commit()
        db.refresh(profile)
        return profile
    except Exception as e:
        logger.error(f"Error saving LINE profile {identity.user_id}: {str(e)}", exc_info=True)
        db.rollback()
        raise


def update_profile(
    db: Session,
    profile: Profile,
    *,
    display_name: str | None = None,
    real_name: str | None = None,
    ticket_number: str | None = None,
    view_mode: ViewMode | None = None,
) -> Profile:
    if display_name is not None:
        profile.display_name = display_name.strip()
    if real_name is not None:
        profile.real_name = real_name.strip() or None
    if ticket_number is not None:
        profile.ticket_number = ticket_number.strip() or None
    if view_mode is not None:
        profile.view_mode = view_mode
    db.commit()
    db.refresh(profile)
    return profile


def record_reservation_click(db: Session, profile: Profile) -> int:
    profile.reservation_button_clicks = (profile.reservation_button_clicks or 0) + 1
    db.commit()
    db.refresh(profile)
    return profile.reservation_button_clicks


def same_family(a: Profile, b: Profile) -> bool:
    return a.family_id is not None and a.family_id == b.family_id


def resolve_target(db: Session, current: Profile, profile_id: str | None) -> Profile:
    """Profile an operation acts on: the caller, or a family member the caller guards.

    Only a parent may act for other members of the same family (children
    with their own LINE account as well as proxy members).
    """
    if not profile_id or profile_id == current.id:
        return current
    if current.family_role != FamilyRole.PARENT:
        raise Forbidden("このメンバーを操作する権限がありません", "Not a guardian of this member")
    target = require_profile(db, profile_id)
    if not same_family(current, target):
        raise Forbidden("このメンバーを操作する権限がありません", "Not a guardian of this member")
    return target


def get_visible_profile(db: Session, current: Profile, profile_id: str) -> Profile:
    target = require_profile(db, profile_id)
    if target.id != current.id and not same_family(current, target):
        raise Forbidden("このプロフィールは閲覧できません", "Not in same family")
    return target
