import logging
from typing import Any, Dict, List, Optional, Union
from uuid import UUID

from app.core.backend import AuthUser
from app.core.exceptions import InvalidRequestError, PropertyNotFoundError
from app.models.favorite import Favorite
from app.models.lead import Lead
from app.models.property import Property
from app.repositories.action_log_repository import ActionLogRepository
from app.repositories.favorite_repository import FavoriteRepository
from app.repositories.lead_repository import LeadRepository
from app.repositories.property_repository import PropertyRepository
from app.schemas.common import UserActionType
from app.schemas.portal import InquiryRequest, PortalPropertyFilters

logger = logging.getLogger(__name__)


class PortalService:
    """Buyer-facing workflows: listing search, favorites and inquiries.

    Action logging is best effort and only happens for signed-in buyers.
    """

    def __init__(
        self,
        property_repo: PropertyRepository,
        lead_repo: LeadRepository,
        favorite_repo: FavoriteRepository,
        action_log_repo: ActionLogRepository,
    ) -> None:
        self._properties = property_repo
        self._leads = lead_repo
        self._favorites = favorite_repo
        self._action_log = action_log_repo

    async def search(
        self, filters: PortalPropertyFilters, user: Optional[AuthUser] = None
    ) -> Dict[str, Any]:
        page = await self._properties.get_published(filters)
        if user is not None and filters.query:
            await self._action_log.log(
                user.id,
                UserActionType.search.value,
                {"query": filters.query, "total": page["total"]},
            )
        return page

    async def get_listing(
        self, property_id: UUID, user: Optional[AuthUser] = None
    ) -> Property:
        prop = await self._properties.get_published_by_id(property_id)
        if prop is None:
            raise PropertyNotFoundError()
        if user is not None:
            await self._action_log.log(
                user.id, UserActionType.view.value, property_id=property_id
            )
        return prop

    # -- favorites ---------------------------------------------------------

    async def favorite_ids(self, user: AuthUser) -> List[UUID]:
        return await self._favorites.get_ids(user.id)

    async def favorite_properties(self, user: AuthUser) -> List[Dict[str, Any]]:
        return await self._favorites.get_properties(user.id)

    async def add_favorite(
        self, user: AuthUser, property_id: UUID
    ) -> Union[Favorite, Dict[str, bool]]:
        result = await self._favorites.add(user.id, property_id)
        if isinstance(result, Favorite):
            await self._action_log.log(
                user.id, UserActionType.save.value, property_id=property_id
            )
        return result

    async def remove_favorite(self, user: AuthUser, property_id: UUID) -> bool:
        return await self._favorites.remove(user.id, property_id)

    # -- inquiries ---------------------------------------------------------

    async def submit_inquiry(
        self, inquiry: InquiryRequest, user: Optional[AuthUser] = None
    ) -> Lead:
        """Turn a portal inquiry into a ``New`` lead of the listing's tenant."""
        company_id = None
        if inquiry.property_id is not None:
            company_id = await self._properties.get_owner_company(inquiry.property_id)
        if company_id is None:
            raise InvalidRequestError("Could not determine property owner")

        lead = await self._leads.create_inquiry_lead(
            company_id=company_id,
            name=inquiry.name,
            email=inquiry.email,
            phone=inquiry.phone,
            message=inquiry.message,
            property_id=inquiry.property_id,
        )
        logger.info("Inquiry lead %s created for tenant %s", lead.id, company_id)

        if user is not None:
            await self._action_log.log(
                user.id,
                UserActionType.inquire.value,
                {"propertyId": str(inquiry.property_id), "email": inquiry.email},
                property_id=inquiry.property_id,
            )
        return lead

    async def inquiry_history(self, user: AuthUser) -> List[Lead]:
        if not user.email:
            return []
        return await self._leads.get_inquiries_by_email(user.email)
