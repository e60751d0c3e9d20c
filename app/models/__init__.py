from datetime import datetime, timezone
def utcnow():
    return datetime.now(timezone.utc)

def as_utc(value: datetime | None) -> datetime | None:
    # SQLite hands datetimes back naive; everything is stored in UTC
    if value is None:
        return None
    return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value.astimezone(timezone.utc)

from .profile import Profile
from .family import Family
from .stamp import StampHistory
from .reward import Reward, RewardExchange
from .survey import Survey, SurveyTarget, SurveyAnswer
from .event_log import EventLog
