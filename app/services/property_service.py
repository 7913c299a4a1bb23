import logging
import time
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple
from uuid import UUID

from app.core.backend import AuthUser, HostedBackend, build_upload_path
from app.core.constants import MAX_UPLOAD_FILES, MAX_UPLOAD_SIZE_MB
from app.core.exceptions import (
    ForbiddenError,
    InvalidRequestError,
    PropertyNotFoundError,
    UploadRejectedError,
)
from app.models.property import Property
from app.repositories.property_repository import PropertyRepository
from app.schemas.portal import PropertyFilters
from app.schemas.property import PropertyCreate, PropertyUpdate
from app.services.notifications import EmailMessage, property_deleted_email

logger = logging.getLogger(__name__)

_MAX_UPLOAD_BYTES = MAX_UPLOAD_SIZE_MB * 1024 * 1024


@dataclass
class ImageUpload:
    filename: str
    content: bytes
    content_type: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.content)


def check_upload_count(count: int) -> None:
    if not count:
        raise UploadRejectedError("No files provided")
    if count > MAX_UPLOAD_FILES:
        raise UploadRejectedError(f"Cannot upload more than {MAX_UPLOAD_FILES} images")


def check_upload_file(filename: str, size: Optional[int], content_type: Optional[str]) -> None:
    """Per-file limits; ``None`` means the value is not known yet."""
    if size is not None and size > _MAX_UPLOAD_BYTES:
        raise UploadRejectedError(
            f"File {filename} exceeds size limit of {MAX_UPLOAD_SIZE_MB}MB"
        )
    if content_type is not None and not content_type.startswith("image/"):
        raise UploadRejectedError(f"File {filename} is not an image")


def validate_uploads(files: Sequence[ImageUpload]) -> None:
    """Reject the whole batch before anything is stored."""
    check_upload_count(len(files))
    for item in files:
        check_upload_file(item.filename, item.size, item.content_type)


def owns_property(prop: Property, user_id: UUID, tenant_id: UUID) -> bool:
    """A property belongs to the caller's tenant or was created by the caller."""
    owner = prop.company_id or prop.broker_id
    return owner == tenant_id or prop.broker_id == user_id


class PropertyService:
    """Dashboard property workflows: CRUD with ownership checks and images."""

    def __init__(self, property_repo: PropertyRepository, backend: HostedBackend) -> None:
        self._repo = property_repo
        self._backend = backend

    async def list_properties(
        self, tenant_id: UUID, filters: Optional[PropertyFilters] = None
    ) -> List[Property]:
        if filters is None:
            return await self._repo.get_by_company(tenant_id)
        return await self._repo.get_filtered(tenant_id, filters)

    async def create_property(
        self, payload: PropertyCreate, user: AuthUser, tenant_id: UUID
    ) -> Property:
        prop = await self._repo.create(
            **payload.model_dump(),
            company_id=tenant_id,
            broker_id=user.id,
        )
        logger.info("Property %s created by %s", prop.id, user.id)
        return prop

    async def get_owned(
        self, property_id: UUID, user: AuthUser, tenant_id: UUID
    ) -> Property:
        prop = await self._repo.get_by_id(property_id)
        if prop is None:
            raise PropertyNotFoundError()
        if not owns_property(prop, user.id, tenant_id):
            logger.warning(
                "User %s denied access to property %s", user.id, property_id
            )
            raise ForbiddenError()
        return prop

    async def update_property(
        self,
        property_id: UUID,
        payload: PropertyUpdate,
        user: AuthUser,
        tenant_id: UUID,
    ) -> Property:
        prop = await self.get_owned(property_id, user, tenant_id)
        changes = payload.model_dump(exclude_unset=True)
        if changes.get("is_published") and not (changes.get("images") or prop.images):
            raise InvalidRequestError(
                "Published properties must have at least one image"
            )
        return await self._repo.update(prop, changes)

    async def delete_property(
        self, property_id: UUID, user: AuthUser, tenant_id: UUID
    ) -> Tuple[bool, Optional[EmailMessage]]:
        """Delete an owned property.

        Returns the confirmation email for the caller to send, or
        ``None`` when the caller has no email address.
        """
        prop = await self.get_owned(property_id, user, tenant_id)
        title = prop.title or "Untitled Property"
        await self._repo.delete(property_id)
        logger.info("Property %s deleted by %s", property_id, user.id)
        if not user.email:
            return True, None
        return True, property_deleted_email(user.email, user.display_name, title)

    async def upload_images(
        self,
        files: Sequence[ImageUpload],
        tenant_id: UUID,
        property_id: Optional[str] = None,
    ) -> List[str]:
        """Store images under ``{tenant}/{property}/`` and return public URLs.

        Uploads made before the property exists go to a ``temp-<millis>``
        folder.
        """
        validate_uploads(files)
        target = property_id or f"temp-{int(time.time() * 1000)}"
        urls: List[str] = []
        for item in files:
            path = build_upload_path(tenant_id, target, item.filename)
            urls.append(await self._backend.upload_image(path, item.content, item.filename))
        logger.info("Uploaded %s images for %s", len(urls), target)
        return urls

    async def delete_image(self, image_url: str) -> bool:
        try:
            await self._backend.remove_image(image_url)
        except ValueError as exc:
            raise InvalidRequestError(str(exc)) from exc
        return True
