"""Client-side workflows: store, bulk actions, infinite scroll and favorites."""

import asyncio
import json
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from app.ui.api_client import ApiClient, ApiRequestError
from app.ui.bulk_actions import LeadBulkActions
from app.ui.enums import Severity, ToggleState
from app.ui.infinite_scroll import ListingFeed
from app.ui.optimistic import favorite_toggle
from app.ui.selection import SelectionSet
from app.ui.store import AddToast, AppStore, ExpireToasts, RemoveToast, SetLoading


class FakeClock:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def store() -> AppStore:
    return AppStore(clock=FakeClock())


@pytest.fixture
def api() -> AsyncMock:
    return AsyncMock(spec=ApiClient)


def _messages(store: AppStore):
    return [(t.severity, t.message) for t in store.state.toasts]


class TestAppStore:
    def test_toasts_get_increasing_ids(self, store):
        store.dispatch(AddToast("one"))
        store.dispatch(AddToast("two", Severity.success))
        assert [t.id for t in store.state.toasts] == [1, 2]

    def test_remove_toast(self, store):
        store.dispatch(AddToast("one"))
        store.dispatch(RemoveToast(1))
        assert store.state.toasts == ()

    def test_expire_uses_duration(self, store):
        store.dispatch(AddToast("short", duration=1.0))
        store.dispatch(AddToast("long", duration=10.0))
        store.clock.now += 5
        store.dispatch(ExpireToasts())
        assert [t.message for t in store.state.toasts] == ["long"]

    def test_subscribers_see_every_dispatch(self, store):
        seen = []
        unsubscribe = store.subscribe(lambda state: seen.append(state.loading))
        store.dispatch(SetLoading(True))
        unsubscribe()
        store.dispatch(SetLoading(False))
        assert seen == [True]

    def test_unknown_action(self, store):
        with pytest.raises(TypeError):
            store.dispatch("LOADING")


class TestBulkActions:
    @pytest.mark.asyncio
    async def test_delete_success_clears_selection_and_revalidates_once(self, api, store):
        revalidate = MagicMock()
        actions = LeadBulkActions(api, store, revalidate, SelectionSet(["a", "b"]))

        assert await actions.delete_selected() is True

        api.bulk_delete_leads.assert_awaited_once_with(["a", "b"])
        assert not actions.selection
        revalidate.assert_called_once()
        assert _messages(store) == [(Severity.success, "2 leads deleted")]
        assert store.state.loading is False

    @pytest.mark.asyncio
    async def test_failure_keeps_selection(self, api, store):
        api.bulk_update_leads.side_effect = ApiRequestError(500, "boom")
        revalidate = MagicMock()
        actions = LeadBulkActions(api, store, revalidate, SelectionSet(["a"]))

        assert await actions.change_status("Won") is False

        assert actions.selection.ids == ["a"]
        revalidate.assert_not_called()
        assert _messages(store) == [(Severity.error, "Failed to update leads")]
        assert store.state.loading is False

    @pytest.mark.asyncio
    async def test_empty_selection_sends_nothing(self, api, store):
        actions = LeadBulkActions(api, store, MagicMock())
        assert await actions.change_status("Won") is False
        assert await actions.delete_selected() is False
        api.bulk_update_leads.assert_not_called()
        api.bulk_delete_leads.assert_not_called()

    @pytest.mark.asyncio
    async def test_second_click_while_in_flight_is_ignored(self, api, store):
        release = asyncio.Event()

        async def slow_update(ids, data):
            await release.wait()
            return {"data": [], "count": len(ids)}

        api.bulk_update_leads.side_effect = slow_update
        actions = LeadBulkActions(api, store, MagicMock(), SelectionSet(["a"]))

        first = asyncio.create_task(actions.change_status("Won"))
        await asyncio.sleep(0)
        assert actions.busy
        assert await actions.change_status("Lost") is False
        release.set()
        assert await first is True
        api.bulk_update_leads.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_async_revalidate_is_awaited(self, api, store):
        revalidate = AsyncMock()
        actions = LeadBulkActions(api, store, revalidate, SelectionSet(["a"]))
        await actions.change_status("Contacted")
        revalidate.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_delete_one_only_drops_that_id(self, api, store):
        actions = LeadBulkActions(api, store, MagicMock(), SelectionSet(["a", "b"]))
        await actions.delete_one("a")
        api.bulk_delete_leads.assert_awaited_once_with(["a"])
        assert actions.selection.ids == ["b"]

    def test_export_selected_rows(self, api, store):
        actions = LeadBulkActions(api, store, MagicMock(), SelectionSet(["b"]))
        rows = [{"id": "a", "name": "Omar"}, {"id": "b", "name": "Layla"}]
        csv_file = actions.export(rows, only_selected=True)
        assert "Layla" in csv_file.content
        assert "Omar" not in csv_file.content


def _page(ids, total_pages):
    return {"properties": [{"id": i} for i in ids], "totalPages": total_pages}


class TestListingFeed:
    @pytest.mark.asyncio
    async def test_appends_until_last_page(self):
        fetch = AsyncMock(side_effect=[_page([3, 4], 3), _page([5], 3)])
        feed = ListingFeed(fetch)
        feed.reset(_page([1, 2], 3), {"type": ["Villa"]})

        assert await feed.load_more() is True
        assert await feed.load_more() is True
        assert await feed.load_more() is False

        assert [p["id"] for p in feed.items] == [1, 2, 3, 4, 5]
        assert feed.has_more is False
        assert fetch.await_args_list[0].args == ({"type": ["Villa"]}, 2)

    @pytest.mark.asyncio
    async def test_empty_page_stops_loading(self):
        fetch = AsyncMock(return_value=_page([], 5))
        feed = ListingFeed(fetch)
        feed.reset(_page([1], 5))
        assert await feed.load_more() is False
        assert feed.has_more is False
        assert feed.current_page == 1

    @pytest.mark.asyncio
    async def test_single_page_never_fetches(self):
        fetch = AsyncMock()
        feed = ListingFeed(fetch)
        feed.reset(_page([1], 1))
        assert await feed.load_more() is False
        fetch.assert_not_called()

    @pytest.mark.asyncio
    async def test_stale_page_is_discarded_after_reset(self):
        release = asyncio.Event()

        async def fetch(criteria, page):
            await release.wait()
            return _page([99], 2)

        feed = ListingFeed(fetch)
        feed.reset(_page([1], 2), {"q": "old"})
        pending = asyncio.create_task(feed.load_more())
        await asyncio.sleep(0)

        feed.reset(_page([7], 1), {"q": "new"})
        release.set()

        assert await pending is False
        assert [p["id"] for p in feed.items] == [7]

    @pytest.mark.asyncio
    async def test_concurrent_load_is_ignored(self):
        release = asyncio.Event()
        calls = []

        async def fetch(criteria, page):
            calls.append(page)
            await release.wait()
            return _page([2], 3)

        feed = ListingFeed(fetch)
        feed.reset(_page([1], 3))
        first = asyncio.create_task(feed.load_more())
        await asyncio.sleep(0)
        assert await feed.load_more() is False
        release.set()
        await first
        assert calls == [2]

    @pytest.mark.asyncio
    async def test_failure_toasts_and_allows_retry(self, store):
        fetch = AsyncMock(side_effect=[ApiRequestError(0, "Network error"), _page([2], 2)])
        feed = ListingFeed(fetch, store)
        feed.reset(_page([1], 2))

        assert await feed.load_more() is False
        assert _messages(store) == [(Severity.error, "Could not load more properties")]
        assert await feed.load_more() is True


class TestFavoriteToggle:
    @pytest.mark.asyncio
    async def test_add_commits(self, api, store):
        toggle = favorite_toggle(api, store, "p1")
        assert await toggle.toggle() == ToggleState.committed
        assert toggle.value is True
        api.add_favorite.assert_awaited_once_with("p1")

    @pytest.mark.asyncio
    async def test_failure_reverts(self, api, store):
        api.remove_favorite.side_effect = ApiRequestError(500, "boom")
        toggle = favorite_toggle(api, store, "p1", favorited=True)
        assert await toggle.toggle() == ToggleState.reverted
        assert toggle.value is True
        assert _messages(store) == [(Severity.error, "Could not update favorites")]

    @pytest.mark.asyncio
    async def test_signed_out_prompts_without_request(self, api, store):
        toggle = favorite_toggle(api, store, "p1", signed_in=False)
        assert await toggle.toggle() == ToggleState.idle
        api.add_favorite.assert_not_called()
        assert _messages(store) == [(Severity.info, "Sign in to save properties")]


class TestApiClient:
    @pytest.mark.asyncio
    async def test_sends_bearer_token_and_json(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["auth"] = request.headers.get("Authorization")
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"success": True, "count": 2})

        async with ApiClient("http://test", "tok", httpx.MockTransport(handler)) as client:
            body = await client.bulk_delete_leads(["a", "b"])

        assert body == {"success": True, "count": 2}
        assert seen == {"auth": "Bearer tok", "body": {"ids": ["a", "b"]}}

    @pytest.mark.asyncio
    async def test_error_body_becomes_message(self):
        transport = httpx.MockTransport(
            lambda request: httpx.Response(
                400, json={"error": "No lead IDs provided", "type": "invalid_request"}
            )
        )
        async with ApiClient("http://test", transport=transport) as client:
            with pytest.raises(ApiRequestError) as excinfo:
                await client.bulk_update_leads([], {"status": "Won"})
        assert excinfo.value.status == 400
        assert excinfo.value.message == "No lead IDs provided"

    @pytest.mark.asyncio
    async def test_network_failure_has_status_zero(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        async with ApiClient("http://test", transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(ApiRequestError) as excinfo:
                await client.list_leads()
        assert excinfo.value.status == 0

    @pytest.mark.asyncio
    async def test_listing_params_skip_empty_criteria(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["params"] = dict(request.url.params)
            return httpx.Response(200, json=_page([], 0))

        async with ApiClient("http://test", transport=httpx.MockTransport(handler)) as client:
            await client.published_properties({"q": "", "bedrooms": 3, "location": None}, 2)

        assert seen["params"] == {"bedrooms": "3", "page": "2"}
