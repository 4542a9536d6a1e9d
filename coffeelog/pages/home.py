"""
Overview page: /

Add-entry form plus the most recent entries, each linking to its editor.
"""

import logging
from typing import List
from urllib.parse import quote

from nicegui import ui, run

from coffeelog.client import CoffeeApiClient
from coffeelog.components import render_language_selector
from coffeelog.config import Settings
from coffeelog.edit import SEVERITY_ERROR, SEVERITY_SUCCESS
from coffeelog.errors import CoffeeLogError
from coffeelog.models import CoffeeRecord
from coffeelog.pages.common import RATING_OPTIONS, format_timestamp, get_translator
from coffeelog.units import (
    MEASUREMENT_SYSTEMS,
    UNIT_LABELS,
    format_amount,
    millilitre_hint,
    units_for_system,
)

logger = logging.getLogger(__name__)


def create_home_page(settings: Settings, api_client: CoffeeApiClient):
    """Register the overview page."""

    @ui.page('/')
    async def home_page():
        translator = get_translator(settings)
        t = translator.t
        render_language_selector(translator)

        form = {
            'system': 'metric',
            'amount': None,
            'unit': units_for_system('metric')[0],
            'rating': None,
            'location': '',
        }
        entries: List[CoffeeRecord] = []

        def notify(message: str, severity: str):
            ui.notify(message, type=severity, position='bottom',
                      timeout=settings.notice_timeout_ms, close_button=True)

        def unit_options(system: str) -> dict:
            return {u: UNIT_LABELS[u] for u in units_for_system(system)}

        def handle_system_change(e):
            form['system'] = e.value
            units = units_for_system(e.value)
            unit_select.set_options(unit_options(e.value), value=units[0])

        async def load_entries():
            try:
                records = await run.io_bound(api_client.list_recent)
            except CoffeeLogError as e:
                logger.error(f"Error fetching entries: {e}")
                notify(t('notifications.listError'), SEVERITY_ERROR)
                return
            entries[:] = records
            entries_view.refresh()

        async def handle_add():
            if not form['amount']:
                return
            entry = {'amount': float(form['amount']), 'unit': form['unit']}
            # Optional fields only when they have values
            if form['rating'] is not None:
                entry['rating'] = form['rating']
            if form['location']:
                entry['location'] = form['location']

            try:
                await run.io_bound(api_client.add_entry, entry)
            except CoffeeLogError as e:
                logger.error(f"Error adding entry: {e}")
                notify(e.user_message or t('notifications.addError'), SEVERITY_ERROR)
                return

            amount_input.value = None
            location_input.value = ''
            rating_toggle.value = None
            notify(t('notifications.addSuccess'), SEVERITY_SUCCESS)
            await load_entries()

        with ui.column().classes('w-full max-w-xl mx-auto'):
            ui.label(t('home.title')).classes('text-3xl font-bold self-center my-4')

            with ui.card().classes('w-full p-6'):
                ui.toggle(
                    {system: t(f'home.{system}') for system in MEASUREMENT_SYSTEMS},
                    value=form['system'],
                    on_change=handle_system_change,
                ).classes('w-full')

                with ui.row().classes('w-full gap-4 no-wrap'):
                    amount_input = ui.number(t('home.amount'), min=0)\
                        .bind_value(form, 'amount').classes('flex-1')
                    unit_select = ui.select(unit_options(form['system']), label=t('home.unit'))\
                        .bind_value(form, 'unit').classes('w-32')

                location_input = ui.input(
                    t('home.location'),
                    placeholder=t('home.locationPlaceholder'),
                ).bind_value(form, 'location').classes('w-full')

                ui.label(t('home.rating')).classes('text-sm text-gray-500 mt-2')
                rating_toggle = ui.toggle(RATING_OPTIONS, clearable=True).bind_value(form, 'rating')

                ui.button(t('home.addCoffee'), on_click=handle_add).classes('w-full mt-4')\
                    .bind_enabled_from(form, 'amount', backward=bool)

            with ui.card().classes('w-full p-6'):
                ui.label(t('home.recentEntries')).classes('text-lg font-bold')

                @ui.refreshable
                def entries_view():
                    if not entries:
                        ui.label(t('home.noEntries')).classes('text-gray-500')
                        return
                    for record in entries:
                        target = f"/coffee/{quote(record.id, safe='')}"
                        with ui.link(target=target).classes('w-full no-underline text-inherit'):
                            with ui.column().classes('w-full gap-0 py-2 border-b'):
                                with ui.row().classes('items-center gap-2'):
                                    ui.label(format_amount(record.amount, record.unit))
                                    hint = millilitre_hint(record.amount, record.unit)
                                    if hint:
                                        ui.label(hint).classes('text-sm text-gray-500')
                                    if record.rating:
                                        ui.label('★' * record.rating).classes('text-amber-500')
                                ui.label(format_timestamp(record.occurred_at))\
                                    .classes('text-sm text-gray-500')
                                if record.location:
                                    ui.label(f"{t('home.locationLabel')}: {record.location}")\
                                        .classes('text-sm text-gray-500')

                entries_view()

        ui.timer(0.1, load_entries, once=True)
