"""
Entry editor page: /coffee/{entry_id}

Renders an EditSessionController. The controller owns all state; this
module only draws it and forwards input.
"""

import logging

from nicegui import ui, run

from coffeelog.client import CoffeeApiClient
from coffeelog.components import render_language_selector
from coffeelog.config import Settings
from coffeelog.edit import EditSessionController, SessionStatus
from coffeelog.pages.common import RATING_OPTIONS, format_timestamp, get_translator
from coffeelog.units import format_amount

logger = logging.getLogger(__name__)


def bind_session_to_client(page_client, controller: EditSessionController) -> None:
    """
    End the edit session when NiceGUI deletes the page's client.

    A dropped socket that reconnects keeps the same client, so responses
    that arrive after the reconnect still reach the session. Only deletion
    (the reconnect window expired or the tab was closed) disposes it.
    """
    page_client.on_delete(controller.dispose)


def create_entry_page(settings: Settings, api_client: CoffeeApiClient):
    """Register the entry editor page."""

    @ui.page('/coffee/{entry_id}')
    async def entry_page(entry_id: str):
        translator = get_translator(settings)
        t = translator.t
        page_client = ui.context.client

        def notify(message: str, severity: str):
            with page_client:
                ui.notify(
                    message,
                    type=severity,
                    position='bottom',
                    timeout=settings.notice_timeout_ms,
                    close_button=True,
                )

        def navigate(path: str):
            with page_client:
                ui.navigate.to(path)

        def schedule(delay: float, callback):
            with page_client:
                ui.timer(delay, callback, once=True)

        controller = EditSessionController(
            entry_id,
            fetch_record=lambda i: run.io_bound(api_client.fetch_record, i),
            submit_patch=lambda i, patch: run.io_bound(api_client.submit_patch, i, patch),
            notify=notify,
            navigate=navigate,
            translate=t,
            schedule=schedule,
            navigate_delay=settings.navigate_delay,
        )
        bind_session_to_client(page_client, controller)

        render_language_selector(translator)

        @ui.refreshable
        def view():
            state = controller.state

            if state.status == SessionStatus.LOADING:
                with ui.row().classes('w-full justify-center my-8'):
                    ui.spinner(size='lg')
                return

            if state.status == SessionStatus.NOT_FOUND:
                with ui.card().classes('w-full p-6 my-8'):
                    ui.label(t('notifications.notFound')).classes('text-lg')
                    ui.button(t('details.backHome'), on_click=controller.go_back).classes('mt-4')
                return

            record = state.record
            ui.label(t('details.title')).classes('text-3xl font-bold self-center my-4')
            with ui.card().classes('w-full p-6'):
                ui.label(format_amount(record.amount, record.unit)).classes('text-lg font-bold')
                ui.label(format_timestamp(record.occurred_at)).classes('text-gray-500 mb-4')

                ui.input(
                    t('details.location'),
                    value=state.location,
                    placeholder=t('details.locationPlaceholder'),
                    on_change=lambda e: controller.set_location(e.value),
                ).classes('w-full')

                ui.label(t('details.rating')).classes('text-sm text-gray-500 mt-4')
                ui.toggle(
                    RATING_OPTIONS,
                    value=state.rating,
                    clearable=True,
                    on_change=lambda e: controller.set_rating(e.value),
                )

                with ui.row().classes('w-full gap-4 mt-6'):
                    save_label = t('common.saving') if state.is_saving else t('common.save')
                    save = ui.button(save_label, on_click=controller.submit).classes('flex-1')
                    if not state.can_submit:
                        save.disable()
                    ui.button(t('common.back'), on_click=controller.go_back)\
                        .props('outline').classes('flex-1')

        last_status = {'value': controller.state.status}

        def on_state_change(state):
            # Form edits don't re-render; only status changes do
            if state.status != last_status['value']:
                last_status['value'] = state.status
                view.refresh()

        controller.set_on_state_change(on_state_change)

        with ui.column().classes('w-full max-w-xl mx-auto'):
            view()

        ui.timer(0.1, controller.load, once=True)
