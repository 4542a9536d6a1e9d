from nicegui import ui, app

from coffeelog.i18n import LANGUAGE_OPTIONS, Translator

LANGUAGE_STORAGE_KEY = 'preferred_language'


def get_preferred_language(default: str) -> str:
    """Language stored for this browser, or the configured default."""
    return app.storage.user.get(LANGUAGE_STORAGE_KEY, default)


def render_language_selector(translator: Translator):
    """
    Renders a flag + name dropdown in the top-right corner.
    Choosing a language stores it per browser and reloads the page.
    """
    options = {code: f'{flag} {name}' for code, (flag, name) in LANGUAGE_OPTIONS.items()}

    def handle_select(e):
        if e.value == translator.language:
            return
        app.storage.user[LANGUAGE_STORAGE_KEY] = e.value
        ui.navigate.reload()

    with ui.row().classes('absolute top-4 right-4'):
        ui.select(
            options,
            value=translator.language,
            label=translator.t('common.language'),
            on_change=handle_select,
        ).props('dense outlined').classes('w-40')
