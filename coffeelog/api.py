"""
HTTP API for Coffee Log.

Routes (mounted on the NiceGUI app, which is a FastAPI application):
- GET  /api/coffee        last N entries, newest first
- POST /api/coffee        append a new entry
- GET  /api/coffee/{id}   one entry by id (its timestamp)
- PUT  /api/coffee/{id}   apply a sparse patch of rating/location

Failures are returned as {"error": "<message>"}:
400 validation, 404 unknown entry (GET), 409 duplicate entry, 500 storage.
"""

import logging
from typing import Any

from fastapi import APIRouter, Body
from fastapi.responses import JSONResponse

from coffeelog.entries import DEFAULT_RECENT_LIMIT, add_entry, build_new_record, recent_entries
from coffeelog.errors import ConflictError, StorageError, ValidationError
from coffeelog.models import Patch, RecordKey
from coffeelog.updates import apply_patch

logger = logging.getLogger(__name__)

API_PREFIX = '/api/coffee'


def error_response(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({'error': message}, status_code=status_code)


def create_api_router(store, owner: str, recent_limit: int = DEFAULT_RECENT_LIMIT) -> APIRouter:
    """
    Build the API router around an injected record store.

    Args:
        store: RecordStore instance
        owner: Fixed owner key used for every record
        recent_limit: Number of entries returned by the list route
    """
    router = APIRouter(prefix=API_PREFIX)

    @router.get('')
    def list_entries():
        try:
            records = recent_entries(store, owner, limit=recent_limit)
        except StorageError as e:
            logger.error(f"Error fetching coffee entries: {e}")
            return error_response('Failed to fetch coffee entries', 500)
        return [record.to_item() for record in records]

    @router.post('')
    def create_entry(body: Any = Body(None)):
        if not isinstance(body, dict):
            return error_response('Request body must be a JSON object', 400)
        try:
            record = add_entry(store, build_new_record(owner, body))
        except ConflictError as e:
            return error_response(str(e), 409)
        except ValidationError as e:
            return error_response(str(e), 400)
        except StorageError as e:
            logger.error(f"Error adding coffee entry: {e}")
            return error_response('Failed to add coffee entry', 500)
        return {'success': True, 'entry': record.to_item()}

    @router.get('/{entry_id}')
    def get_entry(entry_id: str):
        try:
            item = store.get_record(RecordKey(owner, entry_id))
        except Exception as e:
            logger.error(f"Error fetching coffee entry {entry_id}: {e}")
            return error_response('Failed to fetch coffee entry', 500)
        if not item:
            return error_response('Coffee entry not found', 404)
        return item

    @router.put('/{entry_id}')
    def update_entry(entry_id: str, body: Any = Body(None)):
        if not isinstance(body, dict):
            return error_response('Request body must be a JSON object', 400)
        patch = Patch.from_payload(body)
        try:
            record = apply_patch(store, RecordKey(owner, entry_id), patch)
        except ValidationError as e:
            return error_response(str(e), 400)
        except StorageError as e:
            logger.error(f"Error updating coffee entry {entry_id}: {e}")
            return error_response('Failed to update coffee entry', 500)
        logger.info(f"Updated coffee entry {entry_id}: {', '.join(patch.present_fields)}")
        return record.to_item()

    return router
