from typing import Hashable, Iterable, List


class SelectionSet:
    """Ids of the rows ticked in a table, in the order they were ticked."""

    def __init__(self, ids: Iterable[Hashable] = ()) -> None:
        self._ids = dict.fromkeys(ids)

    def __contains__(self, item_id: Hashable) -> bool:
        return item_id in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def __bool__(self) -> bool:
        return bool(self._ids)

    def contains(self, item_id: Hashable) -> bool:
        return item_id in self._ids

    @property
    def ids(self) -> List[Hashable]:
        return list(self._ids)

    def toggle(self, item_id: Hashable) -> None:
        if item_id in self._ids:
            del self._ids[item_id]
        else:
            self._ids[item_id] = None

    def toggle_all(self, visible_ids: Iterable[Hashable]) -> None:
        """Select every visible row, or clear when all of them already are."""
        visible = list(visible_ids)
        if visible and all(i in self._ids for i in visible):
            self.clear()
        else:
            self._ids = dict.fromkeys(visible)

    def discard(self, item_id: Hashable) -> None:
        self._ids.pop(item_id, None)

    def clear(self) -> None:
        self._ids = {}
