import logging
from typing import Any, Dict, Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError

from app.models.user_action_log import UserActionLog
from app.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class ActionLogRepository(BaseRepository):
    """Writes to ``user_action_logs``.

    Logging a portal action must never break the request that triggered
    it, so failures are logged and dropped.
    """

    async def log(
        self,
        user_id: UUID,
        action_type: str,
        details: Optional[Dict[str, Any]] = None,
        property_id: Optional[UUID] = None,
    ) -> None:
        self._db.add(
            UserActionLog(
                user_id=user_id,
                action_type=action_type,
                details=details or {},
                property_id=property_id,
            )
        )
        try:
            await self._db.commit()
        except SQLAlchemyError as exc:
            await self._db.rollback()
            logger.error("Failed to log user action %s: %s", action_type, exc)
