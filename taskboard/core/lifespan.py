"""Application lifespan: startup and shutdown.

Creates the document store from settings unless one was injected into
create_app(), and closes it on shutdown only when the lifespan created it.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from taskboard.core.config import get_settings
from taskboard.infrastructure.store.factory import StoreFactory

logger = logging.getLogger(__name__)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown."""
    settings = get_settings()

    # ---- Startup ----
    owns_store = getattr(app.state, "store", None) is None
    if owns_store:
        app.state.store = StoreFactory.create_document_store(settings)
        logger.info("Document store ready (backend=%s)", settings.database_backend)

    yield

    # ---- Shutdown ----
    if owns_store and app.state.store is not None:
        await app.state.store.close()
        app.state.store = None
        logger.info("Document store closed")
