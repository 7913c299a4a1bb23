"""Bulk actions over the rows selected in the leads table.

Every action sends exactly one request. On success a toast is shown,
the selection is cleared and the table data is revalidated once. On
failure an error toast is shown and the selection is left untouched so
the user can try again; nothing is retried automatically.
"""

import inspect
import logging
from datetime import date
from typing import Any, Awaitable, Callable, Optional, Sequence, Union

from app.ui.api_client import ApiClient, ApiRequestError
from app.ui.csv_export import CsvFile, export_leads
from app.ui.grid import row_value
from app.ui.selection import SelectionSet
from app.ui.store import AppStore, SetLoading

logger = logging.getLogger(__name__)

Revalidate = Callable[[], Union[None, Awaitable[None]]]


class LeadBulkActions:
    def __init__(
        self,
        api: ApiClient,
        store: AppStore,
        revalidate: Revalidate,
        selection: Optional[SelectionSet] = None,
    ) -> None:
        self._api = api
        self._store = store
        self._revalidate = revalidate
        self.selection = selection if selection is not None else SelectionSet()
        self._in_flight = False

    @property
    def busy(self) -> bool:
        return self._in_flight

    async def _refresh(self) -> None:
        result = self._revalidate()
        if inspect.isawaitable(result):
            await result

    async def _send(self, request: Callable[[], Awaitable[Any]], failure: str) -> bool:
        if self._in_flight:
            logger.debug("Bulk request already in flight, ignoring")
            return False
        self._in_flight = True
        self._store.dispatch(SetLoading(True))
        try:
            await request()
        except ApiRequestError as exc:
            logger.warning("%s (%s): %s", failure, exc.status, exc.message)
            self._store.error(failure)
            return False
        finally:
            self._in_flight = False
            self._store.dispatch(SetLoading(False))
        return True

    async def change_status(self, status: str) -> bool:
        ids = self.selection.ids
        if not ids:
            return False
        ok = await self._send(
            lambda: self._api.bulk_update_leads(ids, {"status": status}),
            "Failed to update leads",
        )
        if ok:
            self._store.success(f"{len(ids)} leads updated to {status}")
            self.selection.clear()
            await self._refresh()
        return ok

    async def delete_selected(self) -> bool:
        ids = self.selection.ids
        if not ids:
            return False
        ok = await self._send(
            lambda: self._api.bulk_delete_leads(ids), "Failed to delete leads"
        )
        if ok:
            self._store.success(f"{len(ids)} leads deleted")
            self.selection.clear()
            await self._refresh()
        return ok

    async def delete_one(self, lead_id: Any) -> bool:
        """Delete a single lead through the bulk endpoint."""
        if not lead_id:
            return False
        ok = await self._send(
            lambda: self._api.bulk_delete_leads([lead_id]), "Failed to delete lead"
        )
        if ok:
            self._store.success("Lead deleted")
            self.selection.discard(lead_id)
            await self._refresh()
        return ok

    def export(
        self,
        rows: Sequence[Any],
        only_selected: bool = False,
        today: Optional[date] = None,
    ) -> CsvFile:
        if only_selected:
            rows = [r for r in rows if row_value(r, "id") in self.selection]
        csv_file = export_leads(rows, today=today)
        self._store.success("Leads exported")
        return csv_file
