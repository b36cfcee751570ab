"""
/**
 * @file deeplx/controllers/auth.py
 * @description 访问令牌校验（query 参数 token 或 Authorization 头）。
 */
"""

from __future__ import annotations

import hmac
from typing import Optional

from fastapi import Request

from deeplx.config import load_settings
from deeplx.utils import AuthError

AUTH_SCHEMES = ("Bearer", "DeepL-Auth-Key")


def token_from_header(value: Optional[str]) -> str:
    if not value:
        return ""
    parts = value.split(" ")
    if len(parts) == 2 and parts[0] in AUTH_SCHEMES:
        return parts[1]
    return ""


def _matches(candidate: Optional[str], expected: str) -> bool:
    if not candidate:
        return False
    return hmac.compare_digest(candidate.encode("utf-8"), expected.encode("utf-8"))


def require_access_token(request: Request) -> None:
    """No-op when the deployment has no TOKEN configured."""
    expected = load_settings().resolve_access_token()
    if not expected:
        return
    in_query = request.query_params.get("token")
    in_header = token_from_header(request.headers.get("Authorization"))
    if not (_matches(in_query, expected) or _matches(in_header, expected)):
        raise AuthError("Invalid access token")
