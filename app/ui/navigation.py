from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple, Union

from app.core.constants import SUPERUSER_ROLES
from app.schemas.user import UserPermissions


@dataclass(frozen=True)
class MenuItem:
    href: str
    label: str
    # (module, action); None means every dashboard user sees the item
    requires: Optional[Tuple[str, Optional[str]]] = None


SIDEBAR_ITEMS: Tuple[MenuItem, ...] = (
    MenuItem("/dashboard", "dashboard.nav.overview"),
    MenuItem("/dashboard/properties", "dashboard.nav.properties", ("properties", "view")),
    MenuItem("/dashboard/leads", "dashboard.nav.leads", ("leads", "view")),
    MenuItem("/dashboard/users", "dashboard.nav.users", ("users", "view")),
)

USER_MENU_ITEMS: Tuple[MenuItem, ...] = (
    MenuItem("/dashboard/profile", "user_menu.profile", ("profile", None)),
    MenuItem("/dashboard/settings", "user_menu.settings"),
)


def visible_items(
    items: Tuple[MenuItem, ...],
    role: Optional[str],
    permissions: Union[UserPermissions, Dict[str, Any], None],
) -> List[MenuItem]:
    """Menu entries the user may open; admins and company owners see all."""
    if role in SUPERUSER_ROLES:
        return list(items)
    if not isinstance(permissions, UserPermissions):
        permissions = UserPermissions.model_validate(permissions or {})
    return [
        item
        for item in items
        if item.requires is None or permissions.allows(*item.requires)
    ]


def sidebar_items(role: Optional[str], permissions: Any) -> List[MenuItem]:
    return visible_items(SIDEBAR_ITEMS, role, permissions)
