from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ...schemas.reward import (
    RewardCreate,
    RewardOut,
    RewardStatusOut,
    ExchangeIn,
    ExchangeOut,
    ExchangeResultOut,
)
from ...models.profile import Profile
from ...services import reward_service
from ...services.profile_service import resolve_target
from ..deps import get_db, get_current_profile, require_staff

router = APIRouter()


@router.get("", response_model=list[RewardStatusOut])
def list_rewards(
    profile_id: str | None = Query(default=None),
    db: Session = Depends(get_db),
    current: Profile = Depends(get_current_profile),
):
    target = resolve_target(db, current, profile_id)
    rewards = reward_service.list_active_rewards(db)
    return [
        RewardStatusOut(
            **RewardOut.model_validate(s.reward).model_dump(),
            can_exchange=s.can_exchange,
            remaining_stamps=s.remaining_stamps,
        )
        for s in reward_service.with_status(rewards, target.stamp_count)
    ]


@router.post("", response_model=RewardOut, status_code=status.HTTP_201_CREATED, dependencies=[Depends(require_staff)])
def create_reward(payload: RewardCreate, db: Session = Depends(get_db)):
    return reward_service.create_reward(
        db,
        name=payload.name,
        description=payload.description,
        required_stamps=payload.required_stamps,
        image_url=payload.image_url,
        display_order=payload.display_order,
        is_active=payload.is_active,
    )


@router.post("/exchange", response_model=ExchangeResultOut)
def exchange(payload: ExchangeIn, db: Session = Depends(get_db), current: Profile = Depends(get_current_profile)):
    target = resolve_target(db, current, payload.profile_id)
    ex = reward_service.exchange_reward(db, profile=target, reward_id=payload.reward_id)
    return ExchangeResultOut(
        message=f"{ex.reward_name}と交換しました",
        exchange=ExchangeOut.model_validate(ex),
        new_stamp_count=target.stamp_count,
    )


@router.get("/exchanges", response_model=list[ExchangeOut])
def exchanges(
    profile_id: str | None = Query(default=None),
    db: Session = Depends(get_db),
    current: Profile = Depends(get_current_profile),
):
    target = resolve_target(db, current, profile_id)
    return reward_service.list_exchanges(db, user_id=target.id)


@router.post("/exchanges/{exchange_id}/complete", response_model=ExchangeOut, dependencies=[Depends(require_staff)])
def complete(exchange_id: str, db: Session = Depends(get_db)):
    return reward_service.complete_exchange(db, exchange_id=exchange_id)


@router.post("/exchanges/{exchange_id}/cancel", response_model=ExchangeOut, dependencies=[Depends(require_staff)])
def cancel(exchange_id: str, db: Session = Depends(get_db)):
    return reward_service.cancel_exchange(db, exchange_id=exchange_id)
