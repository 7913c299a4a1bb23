"""Hosted backend client (Supabase auth + object storage).

The Supabase SDK is synchronous, so every call is pushed to the
threadpool to keep the event loop free.
"""

import logging
import mimetypes
import secrets
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional
from uuid import UUID

from fastapi.concurrency import run_in_threadpool
from supabase import Client, ClientOptions, create_client

from app.core.config import settings
from app.core.exceptions import BackendServiceError

logger = logging.getLogger(__name__)


@dataclass
class AuthUser:
    """The subset of a hosted auth user the API relies on."""

    id: UUID
    email: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def display_name(self) -> str:
        name = self.metadata.get("full_name") or self.metadata.get("first_name")
        if name:
            return name
        return self.email.split("@")[0] if self.email else "there"


def _to_auth_user(user: Any) -> AuthUser:
    return AuthUser(
        id=UUID(str(user.id)),
        email=getattr(user, "email", None),
        metadata=dict(getattr(user, "user_metadata", None) or {}),
    )


def storage_path_from_url(image_url: str, bucket: str) -> str:
    """Object path of a public storage URL (the part after ``<bucket>/``)."""
    marker = f"{bucket}/"
    if marker not in image_url:
        raise ValueError("Invalid image URL")
    path = image_url.rsplit(marker, 1)[1]
    if not path:
        raise ValueError("Invalid image URL")
    return path


def build_upload_path(tenant_id: Any, property_id: str, filename: str) -> str:
    """``{tenant}/{property}/{millis}-{random}.{ext}``"""
    ext = filename.rsplit(".", 1)[-1] if "." in filename else "bin"
    stamp = int(time.time() * 1000)
    return f"{tenant_id}/{property_id}/{stamp}-{secrets.token_hex(4)}.{ext.lower()}"


class HostedBackend:
    """Thin async facade over the Supabase auth and storage APIs.

    Two clients are kept: one with the anon key for verifying caller
    tokens, one with the service-role key for admin user management and
    storage writes.  Both are created on first use.
    """

    def __init__(
        self,
        url: str,
        anon_key: str,
        service_role_key: str = "",
        bucket: str = "properties",
    ) -> None:
        self._url = url
        self._anon_key = anon_key
        self._service_role_key = service_role_key
        self.bucket = bucket
        self._anon: Optional[Client] = None
        self._admin: Optional[Client] = None

    @classmethod
    def from_settings(cls) -> "HostedBackend":
        return cls(
            settings.SUPABASE_URL,
            settings.SUPABASE_ANON_KEY,
            settings.SUPABASE_SERVICE_ROLE_KEY,
            settings.STORAGE_BUCKET,
        )

    def _client(self, admin: bool) -> Client:
        if not self._url:
            raise BackendServiceError("Hosted backend is not configured")
        options = ClientOptions(auto_refresh_token=False, persist_session=False)
        if admin:
            if self._admin is None:
                key = self._service_role_key or self._anon_key
                self._admin = create_client(self._url, key, options=options)
            return self._admin
        if self._anon is None:
            self._anon = create_client(self._url, self._anon_key, options=options)
        return self._anon

    # -- auth ------------------------------------------------------------

    async def get_user(self, token: str) -> Optional[AuthUser]:
        """Resolve a bearer token to its user, or ``None`` if it is invalid."""
        try:
            response = await run_in_threadpool(self._client(False).auth.get_user, token)
        except Exception as exc:
            logger.warning("Token verification failed: %s", exc)
            return None
        if response is None or response.user is None:
            return None
        return _to_auth_user(response.user)

    async def create_user(
        self, email: str, password: str, full_name: str
    ) -> AuthUser:
        """Create a confirmed auth user through the admin API."""
        attributes = {
            "email": email,
            "password": password,
            "email_confirm": True,
            "user_metadata": {"full_name": full_name},
        }
        try:
            response = await run_in_threadpool(
                self._client(True).auth.admin.create_user, attributes
            )
        except Exception as exc:
            logger.error("Failed to create auth user %s: %s", email, exc)
            raise BackendServiceError(f"Failed to create user: {exc}") from exc
        if response is None or response.user is None:
            raise BackendServiceError("Failed to create user auth record")
        logger.info("Created auth user %s", response.user.id)
        return _to_auth_user(response.user)

    async def delete_user(self, user_id: UUID) -> None:
        try:
            await run_in_threadpool(self._client(True).auth.admin.delete_user, str(user_id))
        except Exception as exc:
            logger.error("Failed to delete auth user %s: %s", user_id, exc)
            raise BackendServiceError(f"Failed to delete user: {exc}") from exc
        logger.info("Deleted auth user %s", user_id)

    async def get_user_email(self, user_id: UUID) -> Optional[str]:
        try:
            response = await run_in_threadpool(
                self._client(True).auth.admin.get_user_by_id, str(user_id)
            )
        except Exception as exc:
            logger.warning("Could not look up auth user %s: %s", user_id, exc)
            return None
        return getattr(getattr(response, "user", None), "email", None)

    # -- storage ---------------------------------------------------------

    async def upload_image(self, path: str, content: bytes, filename: str) -> str:
        """Store *content* at *path* and return its public URL."""
        content_type = mimetypes.guess_type(filename)[0] or "application/octet-stream"
        bucket = self._client(True).storage.from_(self.bucket)
        try:
            await run_in_threadpool(
                bucket.upload, path, content, {"content-type": content_type}
            )
            url = await run_in_threadpool(bucket.get_public_url, path)
        except Exception as exc:
            logger.error("Failed to upload %s: %s", filename, exc)
            raise BackendServiceError(f"Failed to upload {filename}: {exc}") from exc
        return url

    async def remove_image(self, image_url: str) -> None:
        path = storage_path_from_url(image_url, self.bucket)
        bucket = self._client(True).storage.from_(self.bucket)
        try:
            await run_in_threadpool(bucket.remove, [path])
        except Exception as exc:
            logger.error("Failed to delete image %s: %s", path, exc)
            raise BackendServiceError(f"Failed to delete image: {exc}") from exc

