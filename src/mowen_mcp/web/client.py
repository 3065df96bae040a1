# File: mowen_mcp/web/client.py

"""
HTTP client for the Mowen open API.
Wraps an aiohttp session, applies bearer authentication to API calls and
handles multipart uploads to the storage endpoint returned by the API.
"""

import asyncio
import json
import logging
import mimetypes
import os
from typing import Any, Dict, Optional

import aiohttp

from . import (
    ApiResponse, ApiError, TransportError,
    API_CREATE_NOTE, API_EDIT_NOTE, API_SET_NOTE, DEFAULT_BASE_URL
)

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"

class MowenClient:
    """
    Async client for the Mowen open API.

    Use as an async context manager so the underlying session is closed:

        async with MowenClient(api_key) as client:
            note_id = await client.create_note(body, settings)
    """

    def __init__(self,
                 api_key: str,
                 base_url: str = DEFAULT_BASE_URL,
                 timeout: float = 30.0):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self._session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self) -> 'MowenClient':
        await self.setup()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def setup(self) -> None:
        """Open the HTTP session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    @property
    def session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            raise RuntimeError("MowenClient is not open; use 'async with MowenClient(...)'")
        return self._session

    @staticmethod
    async def _read(response: aiohttp.ClientResponse) -> ApiResponse:
        """Read a response, decoding the body when it is a JSON object."""
        raw = (await response.read()).decode("utf-8", errors="replace")
        body = None
        if raw:
            try:
                decoded = json.loads(raw)
                if isinstance(decoded, dict):
                    body = decoded
            except ValueError:
                logger.debug(f"Response from {response.url} is not JSON")
        return ApiResponse(status_code=response.status, body=body, raw_body=raw)

    async def post_json(self, path: str, payload: Any) -> ApiResponse:
        """
        POST a JSON payload to an API path with bearer authentication.

        Args:
            path: API path relative to the base URL
            payload: JSON-serialisable request body

        Returns:
            ApiResponse with status, decoded body and raw text

        Raises:
            TransportError: If no response was received
        """
        url = f"{self.base_url}{path}"
        data = json.dumps(payload, ensure_ascii=False)
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json"
        }
        logger.debug(f"POST {url}: {data}")

        try:
            async with self.session.post(url, data=data.encode("utf-8"), headers=headers) as response:
                result = await self._read(response)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransportError(f"Request failed: {e}", url) from e

        logger.info(f"POST {path} -> {result.status_code}")
        return result

    async def upload_form(self,
                          endpoint: str,
                          fields: Dict[str, Any],
                          file_path: str) -> ApiResponse:
        """
        Upload a file as multipart form data to a storage endpoint.

        Every entry of ``fields`` is sent verbatim before the file, which is
        sent under the ``file`` field. No authentication header is added.

        Raises:
            TransportError: If no response was received
            OSError: If the file cannot be opened
        """
        content_type = mimetypes.guess_type(file_path)[0] or DEFAULT_CONTENT_TYPE
        form = aiohttp.FormData()
        for key, value in fields.items():
            form.add_field(key, str(value))

        with open(file_path, "rb") as fh:
            form.add_field(
                "file",
                fh,
                filename=os.path.basename(file_path),
                content_type=content_type
            )
            logger.debug(f"Uploading {file_path} ({content_type}) to {endpoint}")
            try:
                async with self.session.post(endpoint, data=form) as response:
                    result = await self._read(response)
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                raise TransportError(f"Upload failed: {e}", endpoint) from e

        logger.info(f"Upload of {os.path.basename(file_path)} -> {result.status_code}")
        return result

    @staticmethod
    def _raise_for_status(response: ApiResponse, message: str) -> None:
        if not response.ok:
            raise ApiError(message, response.status_code, response.raw_body)

    async def create_note(self, body: Dict[str, Any], settings: Dict[str, Any]) -> Optional[str]:
        """Create a note and return its id, or None if the response has none."""
        response = await self.post_json(API_CREATE_NOTE, {"body": body, "settings": settings})
        self._raise_for_status(response, "Failed to create note")
        note_id = (response.body or {}).get("noteId")
        return note_id if isinstance(note_id, str) and note_id else None

    async def edit_note(self, note_id: str, body: Dict[str, Any]) -> None:
        """Replace the whole body of an existing note."""
        response = await self.post_json(API_EDIT_NOTE, {"noteId": note_id, "body": body})
        self._raise_for_status(response, "Failed to edit note")

    async def set_note_privacy(self, note_id: str, privacy: Dict[str, Any]) -> None:
        """Apply privacy settings to a note."""
        payload = {
            "noteId": note_id,
            "section": 1,
            "settings": {"privacy": privacy}
        }
        response = await self.post_json(API_SET_NOTE, payload)
        self._raise_for_status(response, "Failed to set note privacy")
