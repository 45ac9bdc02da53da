# File: /datatable/__init__.py | Version: 1.0 | Path: /datatable/__init__.py
"""Data-exploration engine behind multi-view data tables."""

__version__ = "1.0.0"
