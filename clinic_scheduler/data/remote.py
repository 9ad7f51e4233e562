"""
Remote store client for the spreadsheet-backed web app (Apps Script doGet/doPost).
"""

import logging
from typing import Any, Dict, Optional

import requests

from clinic_scheduler.exceptions import StoreError
from clinic_scheduler.models.mutation import Mutation

# Get logger for this module
logger = logging.getLogger(__name__)


class RemoteStore:
    """
    GET  <api_url>                      → {"status": "success", "data": {...}}
    POST <api_url> {"action": ..., ...} → {"status": "success"} | {"status": "error", "message": ...}

    The server holds a ~10s script lock around each write; a failed lock or any
    server-side exception comes back as an error reply.
    """

    def __init__(self, api_url: str, timeout: Optional[float] = None, session: Optional[requests.Session] = None):
        self.api_url = api_url
        self.timeout = timeout
        self.http = session or requests.Session()

    def fetch_all(self) -> Dict[str, Any]:
        body = self._request("GET")
        data = body.get("data")
        if not isinstance(data, dict):
            raise StoreError("Malformed fetch response: missing 'data'")
        return data

    def apply(self, mutation: Mutation) -> None:
        self._request("POST", json=mutation.to_dict())
        logger.info("Remote %s ok", mutation.describe())

    def _request(self, method: str, **kwargs) -> Dict[str, Any]:
        try:
            response = self.http.request(method, self.api_url, timeout=self.timeout, **kwargs)
        except requests.exceptions.ConnectionError as e:
            error_msg = f"Error connecting to store: {str(e)}"
            logger.error(error_msg)
            raise StoreError(error_msg) from e
        except requests.exceptions.Timeout as e:
            error_msg = f"Store request timed out: {str(e)}"
            logger.error(error_msg)
            raise StoreError(error_msg) from e
        except requests.exceptions.RequestException as e:
            error_msg = f"Store request failed: {str(e)}"
            logger.error(error_msg)
            raise StoreError(error_msg) from e

        if response.status_code != 200:
            error_msg = f"Store returned status code {response.status_code}"
            logger.error(error_msg)
            raise StoreError(error_msg)

        try:
            body = response.json()
        except ValueError as e:
            raise StoreError("Malformed store response (not JSON)") from e
        if not isinstance(body, dict):
            raise StoreError("Malformed store response (not an object)")

        if body.get("status") != "success":
            error_msg = body.get("message") or f"Store replied with status {body.get('status')!r}"
            logger.error("Store error: %s", error_msg)
            raise StoreError(error_msg)
        return body
