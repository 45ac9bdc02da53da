# File: /datatable/routers/__init__.py | Version: 1.0 | Path: /datatable/routers/__init__.py
"""
Router package exports.

Keeping these explicit helps static analyzers and avoids surprises
when importing submodules like: `from datatable.routers import views`.
"""
from . import health, views

__all__ = ["health", "views"]
