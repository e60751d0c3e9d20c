from dataclasses import dataclass
import logging
from sqlalchemy.orm import Session
from sqlalchemy import select
from ..models.reward import Reward, RewardExchange, ExchangeStatus
from ..models.profile import Profile
from ..models import utcnow
from . import analytics_service
from .errors import BadRequest, Conflict, NotFound

logger = logging.getLogger(__name__)


@dataclass
class RewardStatus:
    reward: Reward
    can_exchange: bool
    remaining_stamps: int


def create_reward(
    db: Session,
    *,
    name: str,
    description: str | None,
    required_stamps: int,
    image_url: str | None = None,
    display_order: int = 0,
    is_active: bool = True,
) -> Reward:
    if not name or not name.strip():
        raise BadRequest("特典名を入力してください", "Empty reward name")
    if required_stamps < 0:
        raise BadRequest("必要スタンプ数が不正です", "Invalid required stamps")
    r = Reward(
        name=name.strip(),
        description=description,
        required_stamps=required_stamps,
        image_url=image_url,
        display_order=display_order,
        is_active=is_active,
    )
    db.add(r)
    db.commit()
    db.refresh(r)
    return r


def list_active_rewards(db: Session) -> list[Reward]:
    q = select(Reward).where(Reward.is_active.is_(True)).order_by(Reward.display_order.asc(), Reward.id.asc())
    return list(db.execute(q).scalars())


def with_status(rewards: list[Reward], current_stamp_count: int) -> list[RewardStatus]:
    # remaining_stamps goes negative once the reward is affordable
    return [
        RewardStatus(
            reward=r,
            can_exchange=current_stamp_count >= r.required_stamps,
            remaining_stamps=r.required_stamps - current_stamp_count,
        )
        for r in rewards
    ]


def exchange_reward(db: Session, *, profile: Profile, reward_id: int) -> RewardExchange:
    reward = db.get(Reward, reward_id)
    if not reward or not reward.is_active:
        raise NotFound("特典が見つかりません", "Reward not found")

    current = profile.stamp_count or 0
    if current < reward.required_stamps:
        logger.warning(
            f"Exchange rejected: user={profile.id}, reward={reward.id}, "
            f"has={current}, needs={reward.required_stamps}"
        )
        raise BadRequest(
            f"スタンプが不足しています（現在{current}個、必要{reward.required_stamps}個）",
            "Insufficient stamps",
        )

    profile.stamp_count = current - reward.required_stamps
    profile.updated_at = utcnow()
    exchange = RewardExchange(
        user_id=profile.id,
        reward_id=reward.id,
        stamp_count_used=reward.required_stamps,
        status=ExchangeStatus.PENDING,
        notes=f"特典交換: {reward.name}",
    )
    db.add(exchange)
    db.commit()
    db.refresh(exchange)
    logger.info(
        f"Reward exchanged: user={profile.id}, reward={reward.name}, "
        f"stamps {current} -> {profile.stamp_count}"
    )
    analytics_service.log_event(
        db,
        event_name=analytics_service.REWARD_EXCHANGE,
        user_id=profile.id,
        metadata={"reward_id": reward.id, "reward_name": reward.name, "stamps_used": reward.required_stamps},
    )
    return exchange


def list_exchanges(db: Session, *, user_id: str) -> list[RewardExchange]:
    q = select(RewardExchange).where(RewardExchange.user_id == user_id).order_by(RewardExchange.exchanged_at.desc())
    return list(db.execute(q).scalars())


def _pending_exchange(db: Session, exchange_id: str) -> RewardExchange:
    ex = db.get(RewardExchange, exchange_id)
    if not ex:
        raise NotFound("交換履歴が見つかりません", "Exchange not found")
    if ex.status != ExchangeStatus.PENDING:
        raise Conflict("この交換はすでに処理済みです", f"Exchange is {ex.status.value}")
    return ex


def complete_exchange(db: Session, *, exchange_id: str) -> RewardExchange:
    ex = _pending_exchange(db, exchange_id)
    ex.status = ExchangeStatus.COMPLETED
    ex.updated_at = utcnow()
    db.commit()
    db.refresh(ex)
    logger.info(f"Exchange completed: id={ex.id}, user={ex.user_id}")
    return ex


def cancel_exchange(db: Session, *, exchange_id: str) -> RewardExchange:
    """Cancel a pending exchange and give the stamps back."""
    ex = _pending_exchange(db, exchange_id)
    profile = db.get(Profile, ex.user_id)
    if profile is not None:
        profile.stamp_count = (profile.stamp_count or 0) + ex.stamp_count_used
    ex.status = ExchangeStatus.CANCELLED
    ex.updated_at = utcnow()
    db.commit()
    db.refresh(ex)
    logger.info(f"Exchange cancelled: id={ex.id}, user={ex.user_id}, refunded={ex.stamp_count_used}")
    return ex
