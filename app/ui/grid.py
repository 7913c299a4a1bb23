"""Generic data grid state.

All rows for the tenant are loaded once; filtering, searching, sorting
and pagination are recomputed in memory every time :meth:`DataGrid.view`
is called. Nothing is persisted, so a new grid always starts on page 0
with no filters, search or sort.
"""

import logging
import math
from dataclasses import dataclass, field
from decimal import Decimal
from typing import (
    Any,
    Callable,
    Dict,
    List,
    Mapping,
    Optional,
    Sequence,
    Tuple,
    Union,
)

from app.ui.enums import Align, ColumnKind, FilterType, SortDirection

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10

Row = Any
RowMenu = Callable[[Row], List["MenuOption"]]
CommandHandler = Callable[..., Any]


def row_value(row: Row, key: str) -> Any:
    """Read *key* from a mapping row or an attribute-style row."""
    if isinstance(row, Mapping):
        return row.get(key)
    return getattr(row, key, None)


@dataclass(frozen=True)
class SelectOption:
    label: str
    value: str


@dataclass(frozen=True)
class FilterConfig:
    """How a column can be filtered.

    ``data_type`` is ``"string"`` or ``"number"`` for free-text fields and
    the list of options for select filters.
    """

    type: FilterType = FilterType.field
    data_type: Union[str, Tuple[SelectOption, ...]] = "string"

    def matches(self, value: Any, wanted: str) -> bool:
        if self.type == FilterType.select:
            return value is not None and str(value) == wanted
        if self.data_type == "number":
            try:
                return value is not None and float(value) == float(wanted)
            except (TypeError, ValueError):
                return False
        return value is not None and wanted.casefold() in str(value).casefold()


@dataclass(frozen=True)
class ColumnDescriptor:
    key: str
    text: str
    render: Optional[Callable[[Row], Any]] = None
    sortable: bool = False
    filter: Optional[FilterConfig] = None
    align: Align = Align.start
    kind: ColumnKind = ColumnKind.default
    tooltip: Optional[str] = None

    def value(self, row: Row) -> Any:
        return row_value(row, self.key)

    def cell(self, row: Row) -> Any:
        if self.render is not None:
            return self.render(row)
        return self.value(row)


@dataclass(frozen=True)
class MenuOption:
    id: int
    title: str
    command: str
    visible: bool = True
    disabled: bool = False
    destructive: bool = False
    separator: bool = False


@dataclass(frozen=True)
class EmptyState:
    message: str
    icon: Optional[str] = None
    description: Optional[str] = None
    cta_label: Optional[str] = None
    cta_command: Optional[str] = None


@dataclass(frozen=True)
class GridView:
    rows: List[Row]
    total: int
    page: int
    page_size: int
    page_count: int
    empty_state: Optional[EmptyState] = None

    @property
    def is_empty(self) -> bool:
        return self.total == 0


def visible_options(options: Sequence[MenuOption]) -> List[MenuOption]:
    """Drop hidden options and order the rest by id."""
    return sorted((o for o in options if o.visible), key=lambda o: o.id)


def _sort_key(value: Any) -> Tuple[int, str, Any]:
    # Group by kind first so one column holding mixed types still sorts
    if isinstance(value, str):
        return (1, "", value.casefold())
    if isinstance(value, (int, float, Decimal)):
        return (0, "", value)
    return (2, type(value).__name__, value)


def stable_sort(rows: List[Row], key: str, direction: SortDirection) -> List[Row]:
    """Sort by *key* keeping input order for ties; missing values go last."""
    present = [r for r in rows if row_value(r, key) is not None]
    missing = [r for r in rows if row_value(r, key) is None]
    present.sort(
        key=lambda r: _sort_key(row_value(r, key)),
        reverse=direction == SortDirection.desc,
    )
    return present + missing


@dataclass
class DataGrid:
    columns: List[ColumnDescriptor]
    rows: List[Row] = field(default_factory=list)
    page_size: int = DEFAULT_PAGE_SIZE
    row_menu: Optional[RowMenu] = None
    mass_menu: List[MenuOption] = field(default_factory=list)
    empty_state: Optional[EmptyState] = None

    page: int = 0
    sort: Optional[Tuple[str, SortDirection]] = None
    filters: Dict[str, str] = field(default_factory=dict)
    search: str = ""
    _handlers: Dict[str, CommandHandler] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        if self.page_size < 1:
            raise ValueError("page_size must be positive")
        self._by_key = {c.key: c for c in self.columns}

    # -- state changes -----------------------------------------------------

    def set_rows(self, rows: Sequence[Row]) -> None:
        """Replace the data after a revalidation; filters and sort survive."""
        self.rows = list(rows)

    def set_filter(self, key: str, value: Optional[str]) -> None:
        column = self._by_key.get(key)
        if column is None or column.filter is None:
            raise KeyError(f"Column {key!r} is not filterable")
        if value is None or value == "":
            self.filters.pop(key, None)
        else:
            self.filters[key] = value
        self.page = 0

    def set_search(self, text: str) -> None:
        self.search = text or ""
        self.page = 0

    def sort_by(self, key: str, direction: Optional[SortDirection] = None) -> None:
        """Sort by a column.

        Without an explicit direction repeated calls cycle
        asc -> desc -> unsorted.
        """
        column = self._by_key.get(key)
        if column is None or not column.sortable:
            raise KeyError(f"Column {key!r} is not sortable")
        if direction is not None:
            self.sort = (key, SortDirection(direction))
        elif self.sort is None or self.sort[0] != key:
            self.sort = (key, SortDirection.asc)
        elif self.sort[1] == SortDirection.asc:
            self.sort = (key, SortDirection.desc)
        else:
            self.sort = None

    def clear_sort(self) -> None:
        self.sort = None

    def set_page(self, page: int) -> None:
        self.page = max(0, page)

    def set_page_size(self, page_size: int) -> None:
        if page_size < 1:
            raise ValueError("page_size must be positive")
        self.page_size = page_size
        self.page = 0

    # -- derived view ------------------------------------------------------

    def _filtered(self) -> List[Row]:
        rows = list(self.rows)
        for key, wanted in self.filters.items():
            column = self._by_key[key]
            rows = [r for r in rows if column.filter.matches(column.value(r), wanted)]
        needle = self.search.strip().casefold()
        if needle:
            searchable = [c for c in self.columns if c.kind != ColumnKind.action]
            rows = [
                r
                for r in rows
                if any(
                    c.value(r) is not None and needle in str(c.value(r)).casefold()
                    for c in searchable
                )
            ]
        return rows

    def view(self) -> GridView:
        rows = self._filtered()
        if self.sort is not None:
            rows = stable_sort(rows, *self.sort)
        total = len(rows)
        page_count = max(1, math.ceil(total / self.page_size))
        page = min(self.page, page_count - 1)
        start = page * self.page_size
        return GridView(
            rows=rows[start:start + self.page_size],
            total=total,
            page=page,
            page_size=self.page_size,
            page_count=page_count,
            empty_state=self.empty_state if total == 0 else None,
        )

    # -- menus -------------------------------------------------------------

    def on(self, command: str, handler: CommandHandler) -> None:
        self._handlers[command] = handler

    def row_options(self, row: Row) -> List[MenuOption]:
        if self.row_menu is None:
            return []
        return visible_options(self.row_menu(row))

    def mass_options(self) -> List[MenuOption]:
        return visible_options(self.mass_menu)

    def _run(self, options: List[MenuOption], command: str, argument: Any) -> bool:
        option = next((o for o in options if o.command == command), None)
        if option is None or option.disabled:
            logger.debug("Ignoring unavailable command %s", command)
            return False
        handler = self._handlers.get(command)
        if handler is None:
            raise KeyError(f"No handler registered for {command!r}")
        handler(argument)
        return True

    def dispatch(self, command: str, row: Row) -> bool:
        """Run the handler of a row menu command; hidden or disabled ones are ignored."""
        return self._run(self.row_options(row), command, row)

    def dispatch_mass(self, command: str, selected_rows: Sequence[Row]) -> bool:
        return self._run(self.mass_options(), command, list(selected_rows))
