from datetime import datetime, timedelta, timezone

import pytest

from app.core.exceptions import ForbiddenError
from app.dependencies import check_account_active, has_permission, parse_permissions
from app.ui.navigation import USER_MENU_ITEMS, sidebar_items, visible_items
from factories import make_profile

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


class TestHasPermission:
    @pytest.mark.parametrize("role", ["admin", "company_owner"])
    def test_superusers_bypass_matrix(self, role):
        profile = make_profile(role=role, permissions={})
        assert has_permission(profile, "users", "delete")

    def test_agent_needs_explicit_grant(self):
        profile = make_profile(permissions={"leads": {"view": True, "edit": False}})
        assert has_permission(profile, "leads", "view")
        assert not has_permission(profile, "leads", "edit")
        assert not has_permission(profile, "properties", "view")

    def test_any_listed_action_is_enough(self):
        profile = make_profile(permissions={"properties": {"create": True}})
        assert has_permission(profile, "properties", "edit", "create")

    def test_flag_modules(self):
        profile = make_profile(permissions={"analytics": True})
        assert has_permission(profile, "analytics")
        assert not has_permission(profile, "profile")

    def test_missing_profile_grants_nothing(self):
        assert not has_permission(None, "leads", "view")


class TestParsePermissions:
    def test_json_string(self):
        parsed = parse_permissions('{"leads": {"view": true}}')
        assert parsed.allows("leads", "view")

    def test_malformed_json_grants_nothing(self):
        parsed = parse_permissions("{not json")
        assert not parsed.allows("leads", "view")

    def test_unknown_module_is_denied(self):
        assert not parse_permissions({}).allows("billing", "view")


class TestAccountActive:
    def test_disabled(self):
        with pytest.raises(ForbiddenError, match="Account disabled"):
            check_account_active(make_profile(is_disabled=True), now=NOW)

    def test_expired(self):
        profile = make_profile(expiry_date=NOW - timedelta(minutes=1))
        with pytest.raises(ForbiddenError, match="Account expired"):
            check_account_active(profile, now=NOW)

    def test_naive_expiry_is_treated_as_utc(self):
        profile = make_profile(expiry_date=datetime(2026, 10, 20))
        check_account_active(profile, now=NOW)

    def test_future_expiry_passes(self):
        check_account_active(make_profile(expiry_date=NOW + timedelta(days=30)), now=NOW)


class TestNavigation:
    def test_owner_sees_every_section(self):
        hrefs = [item.href for item in sidebar_items("company_owner", {})]
        assert len(hrefs) == 4

    def test_agent_sees_granted_sections_only(self):
        items = sidebar_items("agent", {"leads": {"view": True}})
        assert [item.href for item in items] == ["/dashboard", "/dashboard/leads"]

    def test_profile_entry_follows_flag(self):
        hidden = visible_items(USER_MENU_ITEMS, "agent", {"profile": False})
        shown = visible_items(USER_MENU_ITEMS, "agent", {"profile": True})
        assert len(shown) == len(hidden) + 1
