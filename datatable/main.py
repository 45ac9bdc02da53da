# File: /datatable/main.py | Version: 1.0 | Title: FastAPI App (saved views + health)
from __future__ import annotations

from fastapi import FastAPI

from datatable import __version__
from datatable.core.config import settings
from datatable.core.logging import configure_logging
from datatable.db.session import init_db
from datatable.observability.sentry import init_sentry_if_configured
from datatable.routers import health, views

# Initialize logging & observability
configure_logging()
init_sentry_if_configured()

# Tables are created on import; there are no migrations
init_db()

# App
app = FastAPI(title="Data Table Saved Views API", version=__version__)

app.include_router(health.router)
app.include_router(views.router)  # Saved Views (collection: /views)

# Optional standardized error responses
if getattr(settings, "ENABLE_STD_ERRORS", False):
    from datatable.core.error_handlers import register_exception_handlers

    register_exception_handlers(app)
