"""
Edit Session Controller - owns the lifecycle of editing one coffee entry.

    LOADING --(fetch ok)--> READY --(submit)--> SAVING --(ok)--> DONE
    LOADING --(fetch fail)--> NOT_FOUND
    SAVING  --(fail)------> READY   (error notice)

The controller knows nothing about NiceGUI. The page injects:
- fetch_record / submit_patch: async callables reaching the API
- notify(message, severity): shows a non-blocking notice
- navigate(path): leaves the page
- schedule(delay, callback): runs callback later (ui.timer in the page)
- translate(key): localization lookup; raw keys are used when absent

Every request carries a token bound to this session. A response whose token
is stale, already completed, or arrives after dispose() is dropped. Nothing
here enforces a timeout: a request that never returns leaves the session in
LOADING or SAVING.
"""

import asyncio
import itertools
import logging
import uuid
from dataclasses import dataclass, replace
from enum import Enum
from typing import Awaitable, Callable, Optional

from coffeelog.edit.constants import (
    HOME_PATH,
    NAVIGATE_DELAY_SECONDS,
    SEVERITY_ERROR,
    SEVERITY_SUCCESS,
)
from coffeelog.errors import NotFoundError
from coffeelog.models import CoffeeRecord, Patch

logger = logging.getLogger(__name__)


class SessionStatus(str, Enum):
    LOADING = 'loading'
    READY = 'ready'
    SAVING = 'saving'
    DONE = 'done'
    NOT_FOUND = 'not_found'


@dataclass(frozen=True)
class EditState:
    """Immutable snapshot of an edit session."""
    status: SessionStatus = SessionStatus.LOADING
    record: Optional[CoffeeRecord] = None
    rating: Optional[int] = None
    location: str = ''

    @property
    def can_submit(self) -> bool:
        return self.status == SessionStatus.READY

    @property
    def is_saving(self) -> bool:
        return self.status == SessionStatus.SAVING


def _call_later(delay: float, callback: Callable[[], None]) -> None:
    asyncio.get_running_loop().call_later(delay, callback)


class EditSessionController:
    """Loads one entry, holds the form values, submits a patch, and reports the outcome."""

    def __init__(
        self,
        entry_id: str,
        fetch_record: Callable[[str], Awaitable[CoffeeRecord]],
        submit_patch: Callable[[str, Patch], Awaitable[CoffeeRecord]],
        notify: Callable[[str, str], None],
        navigate: Callable[[str], None],
        translate: Optional[Callable[[str], str]] = None,
        schedule: Callable[[float, Callable[[], None]], None] = _call_later,
        navigate_delay: float = NAVIGATE_DELAY_SECONDS,
    ):
        self.entry_id = entry_id
        self.session_id = uuid.uuid4().hex
        self._fetch_record = fetch_record
        self._submit_patch = submit_patch
        self._notify = notify
        self._navigate = navigate
        self._t = translate or (lambda key: key)
        self._schedule = schedule
        self._navigate_delay = navigate_delay

        self._state = EditState()
        self._on_state_change: Optional[Callable[[EditState], None]] = None
        self._counter = itertools.count(1)
        self._pending_token: Optional[str] = None
        self._load_started = False
        self._navigated = False
        self._disposed = False

    @property
    def state(self) -> EditState:
        return self._state

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    def set_on_state_change(self, callback: Callable[[EditState], None]):
        self._on_state_change = callback

    def _set_state(self, **changes) -> EditState:
        self._state = replace(self._state, **changes)
        if self._on_state_change:
            self._on_state_change(self._state)
        return self._state

    # --- Request tokens ---

    def _begin_request(self) -> str:
        token = f"{self.session_id}:{next(self._counter)}"
        self._pending_token = token
        return token

    def _accept(self, token: str) -> bool:
        """Claim the response for `token`. Each pending token is accepted once."""
        if self._disposed or token != self._pending_token:
            logger.debug(f"Dropping stale response {token} for entry {self.entry_id}")
            return False
        self._pending_token = None
        return True

    # --- Loading ---

    def begin_load(self) -> Optional[str]:
        """Start the single fetch of this session. Returns None if already started."""
        if self._load_started or self._disposed:
            return None
        self._load_started = True
        return self._begin_request()

    def complete_load(self, token: str, record: Optional[CoffeeRecord]) -> bool:
        if not self._accept(token):
            return False
        if record is None:
            self._enter_not_found(NotFoundError(f"Entry {self.entry_id} not found"))
            return True

        self._set_state(
            status=SessionStatus.READY,
            record=record,
            rating=record.rating,
            location=record.location or '',
        )
        return True

    def fail_load(self, token: str, error: Exception) -> bool:
        if not self._accept(token):
            return False
        self._enter_not_found(error)
        return True

    def _enter_not_found(self, error: Exception) -> None:
        if isinstance(error, NotFoundError):
            message = self._t('notifications.notFound')
        else:
            logger.error(f"Error fetching entry {self.entry_id}: {error}")
            message = self._t('notifications.loadError')
        self._set_state(status=SessionStatus.NOT_FOUND, record=None)
        self._notify(message, SEVERITY_ERROR)

    async def load(self) -> EditState:
        """Fetch the entry once and seed the editable fields."""
        token = self.begin_load()
        if token is None:
            return self._state
        try:
            record = await self._fetch_record(self.entry_id)
        except Exception as e:
            self.fail_load(token, e)
        else:
            self.complete_load(token, record)
        return self._state

    # --- Editing ---

    def set_rating(self, rating: Optional[int]) -> EditState:
        if self._state.status != SessionStatus.READY:
            return self._state
        return self._set_state(rating=rating)

    def set_location(self, location: Optional[str]) -> EditState:
        if self._state.status != SessionStatus.READY:
            return self._state
        return self._set_state(location=location or '')

    def build_patch(self) -> Patch:
        """
        Patch from the current form values.

        Location is always sent, an empty string included. An unset rating
        is left out so it does not overwrite the stored value.
        """
        if self._state.rating is None:
            return Patch(location=self._state.location)
        return Patch(rating=self._state.rating, location=self._state.location)

    # --- Saving ---

    def begin_submit(self) -> Optional[str]:
        """Move to SAVING. Returns None while a submit is in flight or outside READY."""
        if self._disposed or not self._state.can_submit:
            return None
        token = self._begin_request()
        self._set_state(status=SessionStatus.SAVING)
        return token

    def complete_submit(self, token: str, record: CoffeeRecord) -> bool:
        if not self._accept(token):
            return False
        self._set_state(
            status=SessionStatus.DONE,
            record=record,
            rating=record.rating,
            location=record.location or '',
        )
        self._notify(self._t('notifications.updateSuccess'), SEVERITY_SUCCESS)
        self._schedule(self._navigate_delay, self._navigate_home)
        return True

    def fail_submit(self, token: str, error: Exception) -> bool:
        if not self._accept(token):
            return False
        logger.warning(f"Error updating entry {self.entry_id}: {error}")
        message = getattr(error, 'user_message', None) or self._t('notifications.updateError')
        self._set_state(status=SessionStatus.READY)
        self._notify(message, SEVERITY_ERROR)
        return True

    async def submit(self) -> EditState:
        token = self.begin_submit()
        if token is None:
            return self._state
        patch = self.build_patch()
        try:
            record = await self._submit_patch(self.entry_id, patch)
        except Exception as e:
            self.fail_submit(token, e)
        else:
            self.complete_submit(token, record)
        return self._state

    # --- Leaving ---

    def _navigate_home(self) -> None:
        if self._disposed or self._navigated:
            return
        self._navigated = True
        self._navigate(HOME_PATH)

    def go_back(self) -> None:
        """Leave the editor immediately; allowed in every state."""
        if self._navigated:
            return
        self._navigated = True
        self._navigate(HOME_PATH)
        self.dispose()

    def dispose(self) -> None:
        """End the session. Late responses and pending navigation are ignored afterwards."""
        self._disposed = True
        self._pending_token = None
