import logging

from .config import settings


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    # SQL echo stays off unless the engine asks for it
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
