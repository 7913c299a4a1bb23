"""Portal listing feed that accumulates published pages as the buyer scrolls."""

import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

from app.ui.api_client import ApiRequestError
from app.ui.store import AppStore

logger = logging.getLogger(__name__)

PageFetcher = Callable[[Dict[str, Any], int], Awaitable[Dict[str, Any]]]


def _total_pages(page: Dict[str, Any]) -> int:
    value = page.get("totalPages", page.get("total_pages", 0))
    return int(value or 0)


class ListingFeed:
    """Accumulated list of listings for one set of search criteria.

    :meth:`reset` starts over from the server-rendered first page when the
    criteria change. :meth:`load_more` appends the next page. A fetch that
    was started before the latest reset is thrown away when it completes.
    """

    def __init__(self, fetch_page: PageFetcher, store: Optional[AppStore] = None) -> None:
        self._fetch_page = fetch_page
        self._store = store
        self._generation = 0
        self._loading = False
        self.criteria: Dict[str, Any] = {}
        self.items: List[Dict[str, Any]] = []
        self.current_page = 1
        self.total_pages = 0
        self.has_more = False

    @property
    def loading(self) -> bool:
        return self._loading

    def reset(self, first_page: Dict[str, Any], criteria: Optional[Dict[str, Any]] = None) -> None:
        self._generation += 1
        self._loading = False
        self.criteria = dict(criteria or {})
        self.items = list(first_page.get("properties") or [])
        self.current_page = 1
        self.total_pages = _total_pages(first_page)
        self.has_more = self.total_pages > 1

    async def load_more(self) -> bool:
        """Fetch and append the next page; returns whether rows were added."""
        if self._loading or not self.has_more:
            return False
        generation = self._generation
        next_page = self.current_page + 1
        self._loading = True
        try:
            page = await self._fetch_page(self.criteria, next_page)
        except ApiRequestError as exc:
            if generation == self._generation:
                logger.warning("Loading page %s failed: %s", next_page, exc.message)
                if self._store is not None:
                    self._store.error("Could not load more properties")
            return False
        finally:
            if generation == self._generation:
                self._loading = False

        if generation != self._generation:
            logger.debug("Discarding page %s from superseded search", next_page)
            return False

        rows = page.get("properties") or []
        if not rows:
            self.has_more = False
            return False
        self.items.extend(rows)
        self.current_page = next_page
        self.total_pages = _total_pages(page) or self.total_pages
        self.has_more = self.current_page < self.total_pages
        return True
