"""Repository layer – all database access goes through here.

Repositories wrap SQLAlchemy queries, log failures and re-raise them as
``QueryError`` so the service layer only contains business logic.
"""

from app.repositories.base import BaseRepository
from app.repositories.property_repository import PropertyRepository
from app.repositories.lead_repository import LeadRepository
from app.repositories.lead_event_repository import LeadEventRepository
from app.repositories.favorite_repository import FavoriteRepository
from app.repositories.profile_repository import ProfileRepository
from app.repositories.action_log_repository import ActionLogRepository

__all__ = [
    "BaseRepository",
    "PropertyRepository",
    "LeadRepository",
    "LeadEventRepository",
    "FavoriteRepository",
    "ProfileRepository",
    "ActionLogRepository",
]
