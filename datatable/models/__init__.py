# File: /datatable/models/__init__.py | Version: 1.0 | Title: Models Package Exports
from .saved_view import SavedViewRecord

__all__ = ["SavedViewRecord"]
