import argparse
import logging
from sqlalchemy import select
from app.core.logging import configure_logging
from app.db.session import engine, SessionLocal
from app.db.base import Base, Reward

logger = logging.getLogger(__name__)

DEFAULT_REWARDS = [
    ("オリジナルステッカー", "好きなステッカーを1枚", 3),
    ("歯ブラシ", "お子さま用・大人用から選べます", 5),
    ("フロスセット", "デンタルフロス2個入り", 8),
    ("クリーニング割引券", "次回クリーニング500円引き", 10),
]


def seed_rewards() -> int:
    db = SessionLocal()
    try:
        if db.execute(select(Reward.id).limit(1)).first():
            logger.info("Rewards already present, skipping seed")
            return 0
        for order, (name, description, required) in enumerate(DEFAULT_REWARDS):
            db.add(Reward(name=name, description=description, required_stamps=required, display_order=order))
        db.commit()
        return len(DEFAULT_REWARDS)
    finally:
        db.close()


def init(seed: bool = False):
    Base.metadata.create_all(bind=engine)
    if seed:
        logger.info(f"Seeded {seed_rewards()} rewards")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create the database schema.")
    parser.add_argument("--seed", action="store_true", help="insert the default reward catalog")
    args = parser.parse_args()
    configure_logging()
    init(seed=args.seed)
    print("Database schema created.")
