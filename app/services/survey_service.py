from dataclasses import dataclass
from datetime import datetime, timedelta
import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.config import settings
from ..models.profile import Profile
from ..models.stamp import StampMethod
from ..models.survey import Survey, SurveyTarget, SurveyAnswer
from ..models import utcnow, as_utc
from . import stamp_service
from .errors import BadRequest, Conflict, NotFound

logger = logging.getLogger(__name__)


@dataclass
class SurveyPrompt:
    should_show: bool
    survey: Survey | None = None
    target: SurveyTarget | None = None


def create_survey(db: Session, *, title: str, description: str | None, reward_stamps: int, is_active: bool = True) -> Survey:
    if not title or not title.strip():
        raise BadRequest("タイトルを入力してください", "Empty survey title")
    if reward_stamps < 0:
        raise BadRequest("報酬スタンプ数が不正です", "Invalid reward stamps")
    s = Survey(title=title.strip(), description=description, reward_stamps=reward_stamps, is_active=is_active)
    db.add(s)
    db.commit()
    db.refresh(s)
    return s


def require_survey(db: Session, survey_id: str) -> Survey:
    survey = db.get(Survey, survey_id)
    if not survey:
        raise NotFound("アンケートが見つかりません", "Survey not found")
    return survey


def _target(db: Session, *, user_id: str, survey_id: str) -> SurveyTarget | None:
    return db.execute(
        select(SurveyTarget).where(SurveyTarget.user_id == user_id, SurveyTarget.survey_id == survey_id)
    ).scalar_one_or_none()


def assign_targets(db: Session, *, survey_id: str, user_ids: list[str] | None = None) -> int:
    """Target a survey at the given profiles, or every real member. Returns rows added."""
    require_survey(db, survey_id)
    if user_ids is None:
        user_ids = list(db.execute(select(Profile.id).where(Profile.line_user_id.is_not(None))).scalars())
    existing = set(db.execute(select(SurveyTarget.user_id).where(SurveyTarget.survey_id == survey_id)).scalars())
    added = 0
    for uid in dict.fromkeys(user_ids):
        if uid in existing or db.get(Profile, uid) is None:
            continue
        db.add(SurveyTarget(user_id=uid, survey_id=survey_id))
        added += 1
    db.commit()
    logger.info(f"Survey targets assigned: survey={survey_id}, added={added}")
    return added


def check_survey(db: Session, *, user_id: str, now: datetime | None = None) -> SurveyPrompt:
    """Pick the survey to prompt for, if any.

    Only the first unanswered target of an active survey is considered,
    and it stays hidden for SURVEY_RESHOW_HOURS after it was last shown.
    """
    now = as_utc(now) if now else utcnow()
    q = (
        select(SurveyTarget, Survey)
        .join(Survey, Survey.id == SurveyTarget.survey_id)
        .where(
            SurveyTarget.user_id == user_id,
            SurveyTarget.answered_at.is_(None),
            Survey.is_active.is_(True),
        )
        .order_by(SurveyTarget.created_at.asc())
    )
    row = db.execute(q.limit(1)).first()
    if row is None:
        return SurveyPrompt(should_show=False)
    target, survey = row
    last_shown = as_utc(target.last_shown_at)
    if last_shown and now - last_shown < timedelta(hours=settings.SURVEY_RESHOW_HOURS):
        return SurveyPrompt(should_show=False)
    return SurveyPrompt(should_show=True, survey=survey, target=target)


def postpone_survey(db: Session, *, user_id: str, survey_id: str, now: datetime | None = None) -> SurveyTarget:
    # postponing also counts as having shown the survey
    require_survey(db, survey_id)
    now = as_utc(now) if now else utcnow()
    target = _target(db, user_id=user_id, survey_id=survey_id)
    if target is None:
        target = SurveyTarget(user_id=user_id, survey_id=survey_id, shown_count=0, postponed_count=0)
        db.add(target)
    target.postponed_count = (target.postponed_count or 0) + 1
    target.shown_count = (target.shown_count or 0) + 1
    target.last_postponed_at = now
    target.last_shown_at = now
    db.commit()
    db.refresh(target)
    logger.info(f"Survey postponed: user={user_id}, survey={survey_id}, count={target.postponed_count}")
    return target


def submit_survey(
    db: Session,
    *,
    profile: Profile,
    survey_id: str,
    q1_rating: int,
    q2_comment: str | None,
    q3_recommend: int,
    now: datetime | None = None,
) -> Survey:
    """Store the answer and credit the survey's reward stamps in one commit."""
    if not 1 <= q1_rating <= 5 or not 0 <= q3_recommend <= 10:
        raise BadRequest("回答内容が不正です", "Invalid answer values")
    survey = require_survey(db, survey_id)
    if not survey.is_active:
        raise BadRequest("このアンケートは現在受付していません", "Survey is not active")

    already = db.execute(
        select(SurveyAnswer.id).where(SurveyAnswer.user_id == profile.id, SurveyAnswer.survey_id == survey_id)
    ).first()
    if already:
        logger.warning(f"Duplicate survey answer: user={profile.id}, survey={survey_id}")
        raise Conflict("既に回答済みです", "Already answered")

    now = as_utc(now) if now else utcnow()
    db.add(SurveyAnswer(
        user_id=profile.id,
        survey_id=survey_id,
        q1_rating=q1_rating,
        q2_comment=q2_comment,
        q3_recommend=q3_recommend,
    ))
    stamp_service.record_entry(
        db,
        profile,
        method=StampMethod.SURVEY_REWARD,
        amount=survey.reward_stamps,
        notes=f"アンケート回答: {survey_id}",
        now=now,
    )
    target = _target(db, user_id=profile.id, survey_id=survey_id)
    if target is not None:
        target.answered_at = now
    try:
        db.commit()
    except IntegrityError:
        # a concurrent submit won the unique (user_id, survey_id) race
        db.rollback()
        raise Conflict("既に回答済みです", "Already answered")
    logger.info(f"Survey answered: user={profile.id}, survey={survey_id}, reward={survey.reward_stamps}")
    return survey
