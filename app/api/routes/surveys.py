from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ...schemas.survey import (
    SurveyCreate,
    SurveyOut,
    SurveyCheckOut,
    SurveyPostponeOut,
    SurveySubmitIn,
    SurveySubmitOut,
    TargetsIn,
    TargetsOut,
)
from ...models.profile import Profile
from ...services import survey_service
from ..deps import get_db, get_current_profile, require_staff

router = APIRouter()


@router.post("", response_model=SurveyOut, status_code=status.HTTP_201_CREATED, dependencies=[Depends(require_staff)])
def create(payload: SurveyCreate, db: Session = Depends(get_db)):
    return survey_service.create_survey(
        db,
        title=payload.title,
        description=payload.description,
        reward_stamps=payload.reward_stamps,
        is_active=payload.is_active,
    )


@router.post("/check", response_model=SurveyCheckOut)
def check(db: Session = Depends(get_db), current: Profile = Depends(get_current_profile)):
    prompt = survey_service.check_survey(db, user_id=current.id)
    if not prompt.should_show:
        return SurveyCheckOut(should_show=False)
    return SurveyCheckOut(
        should_show=True,
        survey_id=prompt.survey.id,
        title=prompt.survey.title,
        description=prompt.survey.description,
        reward_stamps=prompt.survey.reward_stamps,
        shown_count=prompt.target.shown_count,
        postponed_count=prompt.target.postponed_count,
    )


@router.post("/{survey_id}/postpone", response_model=SurveyPostponeOut)
def postpone(survey_id: str, db: Session = Depends(get_db), current: Profile = Depends(get_current_profile)):
    target = survey_service.postpone_survey(db, user_id=current.id, survey_id=survey_id)
    return SurveyPostponeOut(postponed_count=target.postponed_count, shown_count=target.shown_count)


@router.post("/{survey_id}/submit", response_model=SurveySubmitOut, status_code=status.HTTP_201_CREATED)
def submit(
    survey_id: str,
    payload: SurveySubmitIn,
    db: Session = Depends(get_db),
    current: Profile = Depends(get_current_profile),
):
    survey = survey_service.submit_survey(
        db,
        profile=current,
        survey_id=survey_id,
        q1_rating=payload.q1_rating,
        q2_comment=payload.q2_comment,
        q3_recommend=payload.q3_recommend,
    )
    return SurveySubmitOut(
        message="アンケートにご協力いただきありがとうございました",
        reward_stamps=survey.reward_stamps,
        stamp_count=current.stamp_count,
    )


@router.post("/{survey_id}/targets", response_model=TargetsOut, dependencies=[Depends(require_staff)])
def assign_targets(survey_id: str, payload: TargetsIn, db: Session = Depends(get_db)):
    added = survey_service.assign_targets(db, survey_id=survey_id, user_ids=payload.user_ids)
    return TargetsOut(added=added)
