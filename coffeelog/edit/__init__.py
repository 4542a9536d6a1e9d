"""
Entry editing for Coffee Log.

- EditSessionController: load / edit / submit state machine for one entry
- EditState, SessionStatus: immutable snapshot of a session

Usage:
    from coffeelog.edit import EditSessionController, SessionStatus
"""

from coffeelog.edit.constants import (
    HOME_PATH,
    NAVIGATE_DELAY_SECONDS,
    NOTICE_TIMEOUT_MS,
    SEVERITY_ERROR,
    SEVERITY_SUCCESS,
)
from coffeelog.edit.session import EditSessionController, EditState, SessionStatus

__all__ = [
    'EditSessionController',
    'EditState',
    'SessionStatus',
    'HOME_PATH',
    'NAVIGATE_DELAY_SECONDS',
    'NOTICE_TIMEOUT_MS',
    'SEVERITY_ERROR',
    'SEVERITY_SUCCESS',
]
