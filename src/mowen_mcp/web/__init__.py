# File: mowen_mcp/web/__init__.py

"""
Web module for mowen-mcp.
Handles HTTP access to the Mowen open API and the upload storage endpoints.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

# API paths, relative to the base URL
API_CREATE_NOTE = "/api/open/api/v1/note/create"
API_EDIT_NOTE = "/api/open/api/v1/note/edit"
API_SET_NOTE = "/api/open/api/v1/note/set"
API_UPLOAD_PREPARE = "/api/open/api/v1/upload/prepare"
API_UPLOAD_URL = "/api/open/api/v1/upload/url"

DEFAULT_BASE_URL = "https://open.mowen.cn"

@dataclass
class ApiResponse:
    """Status, decoded JSON object (if any) and raw text of a response."""
    status_code: int
    body: Optional[Dict[str, Any]]
    raw_body: str

    @property
    def ok(self) -> bool:
        return self.status_code == 200

# Exceptions
class WebError(Exception):
    """Base exception for web module."""
    pass

class TransportError(WebError):
    """The request never produced a response (connection, DNS, timeout)."""
    def __init__(self, message: str, url: str):
        self.url = url
        super().__init__(f"{message} (URL: {url})")

class ApiError(WebError):
    """The API answered with a non-success status."""
    def __init__(self, message: str, status_code: int, raw_body: str = ""):
        self.status_code = status_code
        self.raw_body = raw_body
        super().__init__(f"{message} (Status: {status_code}, Response: {raw_body})")

# Export components
from .client import MowenClient

__all__ = [
    'MowenClient',
    'ApiResponse',
    'WebError',
    'TransportError',
    'ApiError',
    'API_CREATE_NOTE',
    'API_EDIT_NOTE',
    'API_SET_NOTE',
    'API_UPLOAD_PREPARE',
    'API_UPLOAD_URL',
    'DEFAULT_BASE_URL'
]
