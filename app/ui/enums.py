from enum import Enum


class Severity(str, Enum):
    success = "success"
    error = "error"
    info = "info"
    warning = "warning"


class SortDirection(str, Enum):
    asc = "asc"
    desc = "desc"


class FilterType(str, Enum):
    field = "field"
    select = "select"


class Align(str, Enum):
    start = "start"
    center = "center"
    end = "end"


class ColumnKind(str, Enum):
    default = "default"
    action = "action"


class ToggleState(str, Enum):
    idle = "idle"
    pending = "pending"
    committed = "committed"
    reverted = "reverted"
