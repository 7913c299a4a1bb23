"""API-layer dependency functions.

Re-exports all dependency factories from ``app.dependencies`` so that
endpoint modules only need to import from ``app.api.deps``.
"""

from app.dependencies import (
    CurrentUser,
    # Authentication
    get_current_user,
    get_optional_user,
    require_permission,
    # Shared clients
    get_backend,
    get_notifier,
    # Repository factories
    get_property_repo,
    get_lead_repo,
    get_lead_event_repo,
    get_favorite_repo,
    get_profile_repo,
    get_action_log_repo,
    # Service factories
    get_lead_service,
    get_analytics_service,
    get_property_service,
    get_user_service,
    get_portal_service,
)

__all__ = [
    "CurrentUser",
    "get_current_user",
    "get_optional_user",
    "require_permission",
    "get_backend",
    "get_notifier",
    "get_property_repo",
    "get_lead_repo",
    "get_lead_event_repo",
    "get_favorite_repo",
    "get_profile_repo",
    "get_action_log_repo",
    "get_lead_service",
    "get_analytics_service",
    "get_property_service",
    "get_user_service",
    "get_portal_service",
]
