from typing import Any, Dict
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Body, Depends
from pydantic import ValidationError

from app.api.deps import CurrentUser, get_notifier, get_user_service, require_permission
from app.core.exceptions import InvalidRequestError
from app.schemas.common import SuccessResponse
from app.schemas.user import (
    UserForm,
    UserListResponse,
    UserOut,
    UserResponse,
    unwrap_user_payload,
)
from app.services.notifications import EmailNotifier, send_quietly
from app.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["Users"])


def _parse_form(payload: Dict[str, Any]):
    """Accept both plain JSON and the ``{"data": "<json>", "note": ...}`` form."""
    try:
        fields, note = unwrap_user_payload(payload)
        return UserForm.model_validate(fields), note
    except ValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(p) for p in first.get("loc", ()))
        raise InvalidRequestError(f"{field}: {first.get('msg')}") from exc
    except ValueError as exc:
        raise InvalidRequestError(str(exc)) from exc


@router.get("", response_model=UserListResponse)
async def list_users(
    current: CurrentUser = Depends(require_permission("users", "view")),
    service: UserService = Depends(get_user_service),
) -> UserListResponse:
    """Team members of the caller's tenant, excluding the caller."""
    profiles = await service.list_team(current.user, current.tenant_id)
    return UserListResponse(data=[UserOut.model_validate(p) for p in profiles])


@router.post("", response_model=UserResponse)
async def create_user(
    payload: Dict[str, Any] = Body(...),
    current: CurrentUser = Depends(require_permission("users", "create")),
    service: UserService = Depends(get_user_service),
) -> UserResponse:
    form, _ = _parse_form(payload)
    profile = await service.create_user(form, current.tenant_id)
    return UserResponse(data=UserOut.model_validate(profile))


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: UUID,
    background_tasks: BackgroundTasks,
    payload: Dict[str, Any] = Body(...),
    current: CurrentUser = Depends(require_permission("users", "edit")),
    service: UserService = Depends(get_user_service),
    notifier: EmailNotifier = Depends(get_notifier),
) -> UserResponse:
    form, note = _parse_form(payload)
    result = await service.update_user(user_id, form, current.tenant_id, note=note)
    for message in result.emails:
        background_tasks.add_task(send_quietly, notifier, message)
    return UserResponse(data=UserOut.model_validate(result.profile))


@router.delete("/{user_id}", response_model=SuccessResponse)
async def delete_user(
    user_id: UUID,
    current: CurrentUser = Depends(require_permission("users", "delete")),
    service: UserService = Depends(get_user_service),
) -> SuccessResponse:
    await service.delete_user(user_id, current.tenant_id)
    return SuccessResponse()
