"""
NiceGUI pages for Coffee Log.

Usage:
    from coffeelog.pages import register_pages
    register_pages(settings, api_client)
"""

from coffeelog.pages.entry import create_entry_page
from coffeelog.pages.home import create_home_page


def register_pages(settings, api_client):
    """Register every page. Call once during app setup."""
    create_home_page(settings, api_client)
    create_entry_page(settings, api_client)


__all__ = ['register_pages', 'create_home_page', 'create_entry_page']
