# File: /datatable/schemas/__init__.py | Version: 1.0 | Path: /datatable/schemas/__init__.py
from . import columns, filters, grouping, sorting, table_state, view

__all__ = ["columns", "filters", "grouping", "sorting", "table_state", "view"]
