"""
Main NiceGUI application for Coffee Log.

Builds the configured record store, mounts the /api/coffee routes on the
NiceGUI app, and registers the overview and entry editor pages.
"""

import logging

from dotenv import load_dotenv
from nicegui import ui, app

load_dotenv()

from coffeelog.api import create_api_router
from coffeelog.client import CoffeeApiClient
from coffeelog.config import get_settings
from coffeelog.pages import register_pages
from coffeelog.storage import create_store

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format='%(asctime)s %(levelname)s %(name)s: %(message)s',
)
logger = logging.getLogger(__name__)

store = create_store(settings)
app.include_router(create_api_router(store, settings.owner_id, recent_limit=settings.recent_limit))

api_client = CoffeeApiClient(settings.api_url, timeout=settings.request_timeout)
register_pages(settings, api_client)

logger.info(f"Coffee Log ready ({store.backend_type} store, owner '{settings.owner_id}')")


if __name__ in {"__main__", "__mp_main__"}:
    ui.run(
        title='Coffee Tracker',
        port=settings.port,
        storage_secret=settings.storage_secret,
        reload=False,
        favicon='☕',
    )
