from datetime import datetime

from coffeelog.components import get_preferred_language
from coffeelog.config import Settings
from coffeelog.i18n import Translator

# ui.toggle options for a 1-5 star rating
RATING_OPTIONS = {n: '★' * n for n in range(1, 6)}


def get_translator(settings: Settings) -> Translator:
    """Translator for the current browser's preferred language."""
    return Translator(get_preferred_language(settings.default_language))


def format_timestamp(timestamp: str) -> str:
    """Render an ISO-8601 timestamp as local 'YYYY-MM-DD HH:MM'; unparseable input is returned as is."""
    try:
        moment = datetime.fromisoformat(timestamp.replace('Z', '+00:00'))
    except (ValueError, AttributeError):
        return timestamp
    if moment.tzinfo is not None:
        moment = moment.astimezone()
    return moment.strftime('%Y-%m-%d %H:%M')
