import logging
from typing import Any, Awaitable, Callable

from app.ui.api_client import ApiClient, ApiRequestError
from app.ui.enums import Severity, ToggleState
from app.ui.store import AppStore

logger = logging.getLogger(__name__)


class OptimisticToggle:
    """A boolean shown as changed before the server confirms it.

    ``toggle()`` moves to ``pending`` with the new value visible, then to
    ``committed`` when *send* succeeds or ``reverted`` (old value back,
    error toast queued) when it raises :class:`ApiRequestError`.
    """

    def __init__(
        self,
        send: Callable[[bool], Awaitable[Any]],
        store: AppStore,
        value: bool = False,
        signed_in: bool = True,
        failure_message: str = "Could not save your change",
        sign_in_message: str = "Sign in to continue",
    ) -> None:
        self._send = send
        self._store = store
        self.value = value
        self.signed_in = signed_in
        self.state = ToggleState.idle
        self._failure_message = failure_message
        self._sign_in_message = sign_in_message

    async def toggle(self) -> ToggleState:
        if not self.signed_in:
            self._store.toast(self._sign_in_message, Severity.info)
            return self.state
        if self.state == ToggleState.pending:
            return self.state

        previous = self.value
        self.value = not previous
        self.state = ToggleState.pending
        try:
            await self._send(self.value)
        except ApiRequestError as exc:
            logger.warning("Optimistic update reverted: %s", exc.message)
            self.value = previous
            self.state = ToggleState.reverted
            self._store.error(self._failure_message)
        else:
            self.state = ToggleState.committed
        return self.state


def favorite_toggle(
    api: ApiClient,
    store: AppStore,
    property_id: str,
    favorited: bool = False,
    signed_in: bool = True,
) -> OptimisticToggle:
    """Heart button state for one listing."""

    async def send(value: bool) -> Any:
        if value:
            return await api.add_favorite(property_id)
        return await api.remove_favorite(property_id)

    return OptimisticToggle(
        send,
        store,
        value=favorited,
        signed_in=signed_in,
        failure_message="Could not update favorites",
        sign_in_message="Sign in to save properties",
    )
