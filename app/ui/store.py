"""Dashboard shell state: global loading flag and the toast queue.

The store is an explicit object passed to whoever needs it. State only
changes through :meth:`AppStore.dispatch` with one of the typed actions
below, and subscribers are called after every dispatch.
"""

import itertools
import logging
import time
from dataclasses import dataclass, field, replace
from typing import Callable, Iterator, List, Optional, Tuple, Union

from app.ui.enums import Severity

logger = logging.getLogger(__name__)

DEFAULT_TOAST_DURATION = 4.0


@dataclass(frozen=True)
class Toast:
    id: int
    message: str
    severity: Severity = Severity.info
    duration: float = DEFAULT_TOAST_DURATION
    created_at: float = 0.0

    def expired(self, now: float) -> bool:
        return now - self.created_at >= self.duration


@dataclass(frozen=True)
class AppState:
    loading: bool = False
    toasts: Tuple[Toast, ...] = ()


@dataclass(frozen=True)
class SetLoading:
    loading: bool


@dataclass(frozen=True)
class AddToast:
    message: str
    severity: Severity = Severity.info
    duration: float = DEFAULT_TOAST_DURATION


@dataclass(frozen=True)
class RemoveToast:
    toast_id: int


@dataclass(frozen=True)
class ExpireToasts:
    now: Optional[float] = None


Action = Union[SetLoading, AddToast, RemoveToast, ExpireToasts]
Listener = Callable[[AppState], None]


@dataclass
class AppStore:
    clock: Callable[[], float] = time.monotonic
    state: AppState = field(default_factory=AppState)
    _listeners: List[Listener] = field(default_factory=list, repr=False)
    _ids: Iterator[int] = field(default_factory=lambda: itertools.count(1), repr=False)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register *listener*; the returned callable unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def dispatch(self, action: Action) -> AppState:
        self.state = self._reduce(self.state, action)
        for listener in list(self._listeners):
            listener(self.state)
        return self.state

    def _reduce(self, state: AppState, action: Action) -> AppState:
        if isinstance(action, SetLoading):
            return replace(state, loading=action.loading)
        if isinstance(action, AddToast):
            toast = Toast(
                id=next(self._ids),
                message=action.message,
                severity=Severity(action.severity),
                duration=action.duration,
                created_at=self.clock(),
            )
            return replace(state, toasts=state.toasts + (toast,))
        if isinstance(action, RemoveToast):
            return replace(
                state, toasts=tuple(t for t in state.toasts if t.id != action.toast_id)
            )
        if isinstance(action, ExpireToasts):
            now = self.clock() if action.now is None else action.now
            return replace(state, toasts=tuple(t for t in state.toasts if not t.expired(now)))
        raise TypeError(f"Unknown action: {action!r}")

    # Shorthands used by the workflows

    def toast(self, message: str, severity: Severity = Severity.info) -> None:
        self.dispatch(AddToast(message=message, severity=severity))

    def success(self, message: str) -> None:
        self.toast(message, Severity.success)

    def error(self, message: str) -> None:
        logger.warning("Error toast: %s", message)
        self.toast(message, Severity.error)
