# File: /datatable/core/errors.py | Version: 1.0 | Title: Engine error taxonomy (configuration errors)
from __future__ import annotations

from typing import Any, Optional


class DataTableError(Exception):
    """
    Base for configuration errors: raised at setup/authoring time and
    propagated to the integrating application. Data errors never raise.
    """

    code = "DATA_TABLE_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NoViewsAvailableError(DataTableError):
    code = "NO_VIEWS_AVAILABLE"

    def __init__(
        self, message: str = "No views available. At least one view must be enabled."
    ):
        super().__init__(message)


class ViewNotAvailableError(DataTableError):
    code = "VIEW_NOT_AVAILABLE"

    def __init__(self, view: Any):
        super().__init__(f"View '{view}' is not enabled for this table.")
        self.view = view


class InvalidOperatorError(DataTableError):
    code = "INVALID_OPERATOR"

    def __init__(self, operator: Any, kind: Any, column_id: Optional[str] = None):
        op = getattr(operator, "value", operator)
        k = getattr(kind, "value", kind)
        where = f" (column '{column_id}')" if column_id else ""
        super().__init__(f"Operator '{op}' is not valid for {k} columns{where}.")
        self.operator = operator
        self.kind = kind
        self.column_id = column_id


class FilterDepthError(DataTableError):
    code = "FILTER_TOO_DEEP"

    def __init__(self, depth: int, max_depth: int):
        super().__init__(
            f"Filter groups nest {depth} levels deep; the maximum is {max_depth}."
        )
        self.depth = depth
        self.max_depth = max_depth
