from app.models.base import Base
from app.models.property import Property
from app.models.lead import Lead
from app.models.lead_event import LeadEvent
from app.models.profile import Profile
from app.models.favorite import Favorite
from app.models.user_action_log import UserActionLog

__all__ = [
    "Base",
    "Property",
    "Lead",
    "LeadEvent",
    "Profile",
    "Favorite",
    "UserActionLog",
]
