"""
Exception classes shared by the controllers and the upstream client.

Every error carries an HTTP ``status_code`` and renders to the same
``{code, message}`` body at the boundary.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class DeepLXError(Exception):
    """Base class for all proxy errors."""

    default_message = "Internal server error"
    default_status = 500

    def __init__(self, message: Optional[str] = None, *, status_code: Optional[int] = None):
        self.message = message or self.default_message
        self.status_code = status_code or self.default_status
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.status_code, "message": self.message}


class ClientInputError(DeepLXError):
    """Missing text, malformed JSON or a body of the wrong shape."""

    default_message = "Invalid request body"
    default_status = 400


class AuthError(DeepLXError):
    """Bad or missing access token, or no upstream session configured."""

    default_message = "Invalid access token"
    default_status = 401


class UpstreamRateLimited(DeepLXError):
    default_message = "Too many requests, your IP has been blocked by DeepL temporarily."
    default_status = 429


class UpstreamError(DeepLXError):
    """Non-2xx reply, an error object in the reply, or an empty result."""

    default_message = "DeepL API error"
    default_status = 500
