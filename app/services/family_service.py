import secrets
import logging
from uuid import uuid4
from sqlalchemy.orm import Session
from sqlalchemy import select, func
from ..models.family import Family
from ..models.profile import Profile, FamilyRole, ViewMode, PROXY_ID_PREFIX, is_proxy_member
from ..models import utcnow
from . import analytics_service
from .errors import BadRequest, Forbidden, NotFound

logger = logging.getLogger(__name__)


def _code(n=8) -> str:
    alphabet = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
    return "".join(secrets.choice(alphabet) for _ in range(n))


def _ensure_not_in_family(profile: Profile) -> None:
    if profile.family_id is not None:
        logger.warning(f"Already in a family: user={profile.id}, family={profile.family_id}")
        raise BadRequest("すでに他の家族に参加しています", "Already in a family")


def _new_family(db: Session, *, parent: Profile, name: str) -> Family:
    fam = Family(family_name=name, invite_code=_code(), representative_user_id=parent.id)
    db.add(fam)
    db.flush()
    parent.family_id = fam.id
    parent.family_role = FamilyRole.PARENT
    parent.updated_at = utcnow()
    return fam


def get_family(db: Session, family_id: str) -> Family | None:
    return db.get(Family, family_id)


def create_family(db: Session, *, profile: Profile, name: str) -> Family:
    if not name or not name.strip():
        raise BadRequest("家族名を入力してください", "Empty family name")
    _ensure_not_in_family(profile)
    fam = _new_family(db, parent=profile, name=name.strip())
    db.commit()
    db.refresh(fam)
    logger.info(f"Family created: user={profile.id}, family={fam.id} ({fam.family_name})")
    return fam


def setup_role(
    db: Session,
    *,
    profile: Profile,
    role: FamilyRole,
    ticket_number: str | None = None,
    real_name: str | None = None,
) -> Family | None:
    """First-run role choice. A parent gets a family straight away, a child joins one later."""
    _ensure_not_in_family(profile)
    if ticket_number:
        profile.ticket_number = ticket_number
    if real_name:
        profile.real_name = real_name

    fam = None
    if role == FamilyRole.PARENT:
        fam = _new_family(db, parent=profile, name=f"{profile.display_name or 'ユーザー'}の家族")
    else:
        profile.family_role = FamilyRole.CHILD
    db.commit()
    if fam is not None:
        db.refresh(fam)
    logger.info(f"Role set up: user={profile.id}, role={role.value}")
    return fam


def find_by_invite_code(db: Session, code: str) -> Family | None:
    code = code.strip()
    fam = db.execute(select(Family).where(Family.invite_code == code.upper())).scalar_one_or_none()
    if fam is None:
        # the family id itself also works as an invite code
        fam = db.get(Family, code)
    return fam


def join_family(db: Session, *, profile: Profile, invite_code: str) -> Family:
    fam = find_by_invite_code(db, invite_code) if invite_code and invite_code.strip() else None
    if not fam:
        raise BadRequest("招待コードが無効です", "Invalid invite code")
    _ensure_not_in_family(profile)
    profile.family_id = fam.id
    profile.family_role = FamilyRole.CHILD
    db.commit()
    db.refresh(fam)
    logger.info(f"Family joined: user={profile.id}, family={fam.id} ({fam.family_name})")
    return fam


def list_members(db: Session, *, family_id: str) -> list[Profile]:
    # roles are stored by enum name, so descending puts PARENT first
    q = select(Profile).where(Profile.family_id == family_id).order_by(Profile.family_role.desc(), Profile.created_at.asc())
    return list(db.execute(q).scalars())


def family_totals(db: Session, *, family_id: str) -> dict:
    row = db.execute(
        select(
            func.coalesce(func.sum(Profile.stamp_count), 0),
            func.coalesce(func.sum(Profile.visit_count), 0),
            func.count(Profile.id),
        ).where(Profile.family_id == family_id)
    ).one()
    return {
        "total_stamp_count": int(row[0]),
        "total_visit_count": int(row[1]),
        "member_count": int(row[2]),
    }


def require_family(db: Session, profile: Profile) -> Family:
    fam = get_family(db, profile.family_id) if profile.family_id else None
    if not fam:
        raise NotFound("家族に所属していません", "No family")
    return fam


def require_parent(profile: Profile, message: str = "この操作は保護者のみ可能です") -> None:
    if profile.family_role != FamilyRole.PARENT:
        raise Forbidden(message, "Unauthorized")


def rename_family(db: Session, *, profile: Profile, name: str) -> Family:
    require_parent(profile, "家族名の変更は保護者のみ可能です")
    if not name or not name.strip():
        raise BadRequest("家族名は空にできません", "Empty family name")
    fam = require_family(db, profile)
    fam.family_name = name.strip()
    db.commit()
    db.refresh(fam)
    return fam


def add_proxy_member(db: Session, *, parent: Profile, child_name: str, ticket_number: str | None = None) -> Profile:
    """Register a child who has no LINE account; the parent manages it entirely."""
    require_parent(parent, "親アカウントのみが子供を追加できます")
    if not child_name or not child_name.strip():
        raise BadRequest("子どもの名前を入力してください", "Missing child name")
    if not parent.family_id:
        raise BadRequest("家族情報が見つかりません", "No family")

    name = child_name.strip()
    child = Profile(
        id=f"{PROXY_ID_PREFIX}child-{uuid4()}",
        line_user_id=None,
        display_name=name,
        real_name=name,
        ticket_number=(ticket_number or "").strip() or None,
        stamp_count=0,
        visit_count=0,
        family_id=parent.family_id,
        family_role=FamilyRole.CHILD,
        view_mode=ViewMode.KIDS,
    )
    db.add(child)
    db.commit()
    db.refresh(child)
    logger.info(f"Proxy member added: family={parent.family_id}, member={child.id}")
    analytics_service.log_event(
        db,
        event_name=analytics_service.FAMILY_MEMBER_ADD,
        user_id=parent.id,
        metadata={"family_id": parent.family_id, "member_name": name, "member_type": "child"},
    )
    return child


def _family_member(db: Session, *, parent: Profile, member_id: str) -> Profile:
    member = db.get(Profile, member_id)
    if not member:
        raise NotFound("メンバーが見つかりません", "Member not found")
    if not parent.family_id or member.family_id != parent.family_id:
        raise Forbidden("異なる家族のメンバーは操作できません", "Not in same family")
    return member


def update_member(
    db: Session,
    *,
    parent: Profile,
    member_id: str,
    child_name: str | None = None,
    ticket_number: str | None = None,
) -> Profile:
    require_parent(parent, "親アカウントのみが子供情報を編集できます")
    member = _family_member(db, parent=parent, member_id=member_id)
    if child_name is not None:
        if not child_name.strip():
            raise BadRequest("なまえを入力してください", "Empty child name")
        member.display_name = child_name.strip()
        member.real_name = child_name.strip()
    if ticket_number is not None:
        member.ticket_number = ticket_number.strip() or None
    db.commit()
    db.refresh(member)
    analytics_service.log_event(
        db,
        event_name=analytics_service.FAMILY_MEMBER_EDIT,
        user_id=parent.id,
        metadata={"family_id": parent.family_id, "member_id": member.id, "member_name": member.display_name},
    )
    return member


def remove_member(db: Session, *, parent: Profile, member_id: str) -> tuple[str, bool]:
    """Take a member out of the family. Returns (display name, row deleted).

    Proxy members have nowhere else to live, so their row is deleted along
    with their ledger. Real members keep their profile and are only unlinked.
    """
    require_parent(parent, "メンバーの削除は保護者のみ可能です")
    member = _family_member(db, parent=parent, member_id=member_id)
    if member.family_role == FamilyRole.PARENT or member.id == parent.id:
        raise BadRequest("代表者（親）は削除できません", "Cannot remove parent")

    family_id = parent.family_id
    name = member.display_name
    deleted = is_proxy_member(member)
    if deleted:
        db.delete(member)
    else:
        member.family_id = None
        member.family_role = None
    db.commit()
    logger.info(f"Member removed: family={family_id}, member={member_id}, deleted={deleted}")
    analytics_service.log_event(
        db,
        event_name=analytics_service.FAMILY_MEMBER_DELETE,
        user_id=parent.id,
        metadata={"family_id": family_id, "member_id": member_id, "member_name": name},
    )
    return name, deleted
