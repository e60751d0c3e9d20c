from ..models.profile import Profile, FamilyRole, ViewMode
from ..models.family import Family
from ..models.stamp import StampHistory, StampMethod
from ..models.reward import Reward, RewardExchange, ExchangeStatus
from ..models.survey import Survey, SurveyTarget, SurveyAnswer
from ..models.event_log import EventLog
from ..db.base_class import Base
