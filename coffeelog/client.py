"""
HTTP client for the Coffee Log API.

Used by the pages to talk to the API over the request/response boundary.
All methods are blocking; call them through nicegui.run.io_bound from UI code.
"""

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests

from coffeelog.errors import NotFoundError, StorageError, TransportError, ValidationError
from coffeelog.models import CoffeeRecord, Patch

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


def _error_message(response: requests.Response) -> Optional[str]:
    """Extract {"error": ...} from a failed response, if the server sent one."""
    try:
        payload = response.json()
    except ValueError:
        return None
    if isinstance(payload, dict) and isinstance(payload.get('error'), str):
        return payload['error'] or None
    return None


class CoffeeApiClient:
    """
    Client for /api/coffee.

    Args:
        base_url: Server root, e.g. http://127.0.0.1:8080
        timeout: Per-request timeout in seconds passed to requests
        session: Optional requests.Session (tests pass a mock)
    """

    def __init__(self, base_url: str, timeout: float = DEFAULT_TIMEOUT,
                 session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self._session = session or requests.Session()

    def _url(self, entry_id: Optional[str] = None) -> str:
        url = f"{self.base_url}/api/coffee"
        if entry_id is not None:
            url += f"/{quote(entry_id, safe='')}"
        return url

    def _request(self, method: str, url: str, **kwargs) -> requests.Response:
        try:
            return self._session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.error(f"{method} {url} failed: {e}")
            raise TransportError(f"{method} {url} failed: {e}") from e

    @staticmethod
    def _json(response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise TransportError(f"Invalid JSON in response: {e}") from e

    def fetch_record(self, entry_id: str) -> CoffeeRecord:
        """
        Fetch one record by id.

        Raises:
            NotFoundError: 404 or an empty body
            TransportError: Network failure or any other non-success status
        """
        response = self._request('GET', self._url(entry_id))
        if response.status_code == 404:
            raise NotFoundError(f"Entry {entry_id} not found", user_message=_error_message(response))
        if not response.ok:
            raise TransportError(
                f"Fetching {entry_id} failed with status {response.status_code}",
                user_message=_error_message(response)
            )

        data = self._json(response)
        if not data:
            raise NotFoundError(f"Entry {entry_id} not found")
        try:
            return CoffeeRecord.from_item(data)
        except (KeyError, TypeError) as e:
            raise TransportError(f"Malformed entry {entry_id}: {e}") from e

    def submit_patch(self, entry_id: str, patch: Patch) -> CoffeeRecord:
        """
        Send a patch. Only present fields go on the wire.

        Raises:
            ValidationError: 400 from the server
            StorageError: Any other non-success status
            TransportError: Network failure or malformed response
        """
        response = self._request('PUT', self._url(entry_id), json=patch.to_payload())
        if response.status_code == 400:
            message = _error_message(response)
            raise ValidationError(message or "Invalid update", user_message=message)
        if not response.ok:
            message = _error_message(response)
            raise StorageError(
                message or f"Update failed with status {response.status_code}",
                user_message=message
            )

        data = self._json(response)
        try:
            return CoffeeRecord.from_item(data)
        except (KeyError, TypeError) as e:
            raise TransportError(f"Malformed entry {entry_id}: {e}") from e

    def list_recent(self) -> List[CoffeeRecord]:
        response = self._request('GET', self._url())
        if not response.ok:
            raise TransportError(
                f"Listing entries failed with status {response.status_code}",
                user_message=_error_message(response)
            )
        return [CoffeeRecord.from_item(item) for item in self._json(response)]

    def add_entry(self, entry: Dict[str, Any]) -> CoffeeRecord:
        """
        Create an entry. `entry` holds amount, unit and optionally
        timestamp, rating and location.
        """
        response = self._request('POST', self._url(), json=entry)
        if response.status_code in (400, 409):
            message = _error_message(response)
            raise ValidationError(message or "Invalid entry", user_message=message)
        if not response.ok:
            raise StorageError(
                f"Adding entry failed with status {response.status_code}",
                user_message=_error_message(response)
            )
        return CoffeeRecord.from_item(self._json(response)['entry'])
