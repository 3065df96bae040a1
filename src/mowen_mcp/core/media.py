# File: mowen_mcp/core/media.py

"""
Media resolution for attachment blocks.

Turns a media block into a file id the note body can reference, either by
uploading a local file (prepare, then multipart upload to the storage
endpoint the prepare step hands back) or by asking the service to fetch a
remote URL itself.
"""

import logging
import os
import posixpath
from typing import Any, Dict
from urllib.parse import unquote, urlparse

from ..web import API_UPLOAD_PREPARE, API_UPLOAD_URL, ApiResponse, MowenClient, TransportError
from .blocks import MediaBlock
from .types import (
    EXTENSION_KINDS,
    MediaKind,
    MediaResolutionError,
    MediaResponseError,
    SourceKind
)

logger = logging.getLogger(__name__)

UPLOAD_OK_STATUSES = (200, 204)


def infer_media_kind(path: str) -> MediaKind:
    """Media kind implied by a file's extension."""
    extension = os.path.splitext(path)[1].lower()
    kind = EXTENSION_KINDS.get(extension)
    if kind is None:
        raise MediaResolutionError(f"unsupported file type: '{extension or path}'")
    return kind


def url_file_name(url: str) -> str:
    """Last path segment of a URL, or the URL itself when there is none."""
    name = posixpath.basename(unquote(urlparse(url).path))
    return name or url


def extract_file_id(response: ApiResponse) -> str:
    """Pull ``file.fileId`` out of an upload response."""
    file_info = (response.body or {}).get("file")
    file_id = file_info.get("fileId") if isinstance(file_info, dict) else None
    if not isinstance(file_id, str) or not file_id:
        raise MediaResponseError(
            f"upload response has no 'file.fileId' field: {response.raw_body}"
        )
    return file_id


class MediaResolver:
    """Resolves media blocks to file ids through the Mowen upload API."""

    def __init__(self, client: MowenClient):
        self.client = client

    async def resolve(self, block: MediaBlock) -> str:
        """
        Upload the block's media and return its file id.

        Raises:
            MediaResolutionError: A remote call failed or returned a bad status
            MediaResponseError: A remote call succeeded without a file id
        """
        if block.source_type is SourceKind.URL:
            return await self.upload_from_url(block.source_path, block.file_type)
        return await self.upload_local(block.source_path)

    async def _post(self, path: str, payload: Dict[str, Any], action: str) -> ApiResponse:
        try:
            response = await self.client.post_json(path, payload)
        except TransportError as e:
            raise MediaResolutionError(f"{action} failed: {e}") from e
        if not response.ok:
            raise MediaResolutionError(
                f"{action} failed with status {response.status_code}: {response.raw_body}"
            )
        return response

    async def prepare_upload(self, kind: MediaKind, file_name: str) -> Dict[str, Any]:
        """Ask for an upload session: the storage endpoint plus its form fields."""
        payload = {"fileType": kind.code, "fileName": file_name}
        response = await self._post(API_UPLOAD_PREPARE, payload, "upload prepare")

        form = (response.body or {}).get("form")
        if not isinstance(form, dict) or not form.get("endpoint"):
            raise MediaResponseError(
                f"upload prepare response has no form endpoint: {response.raw_body}"
            )
        return form

    async def upload_local(self, path: str) -> str:
        """Upload a local file and return its file id."""
        # The extension decides the file type sent to the service
        kind = infer_media_kind(path)
        session = dict(await self.prepare_upload(kind, os.path.basename(path)))
        endpoint = session.pop("endpoint")

        logger.info(f"Uploading local {kind.value} '{path}'")
        try:
            response = await self.client.upload_form(endpoint, session, path)
        except TransportError as e:
            raise MediaResolutionError(f"file upload failed: {e}") from e
        except OSError as e:
            raise MediaResolutionError(f"cannot read '{path}': {e}") from e

        if response.status_code not in UPLOAD_OK_STATUSES:
            raise MediaResolutionError(
                f"file upload failed with status {response.status_code}: {response.raw_body}"
            )
        return extract_file_id(response)

    async def upload_from_url(self, url: str, kind: MediaKind) -> str:
        """Have the service fetch and host a remote file; return its file id."""
        payload = {
            "fileType": kind.code,
            "url": url,
            "fileName": url_file_name(url)
        }
        logger.info(f"Uploading {kind.value} from URL {url}")
        response = await self._post(API_UPLOAD_URL, payload, "URL upload")
        return extract_file_id(response)
