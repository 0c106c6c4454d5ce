from __future__ import annotations

from typing import Any, Dict, Optional

import jwt
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from cleaning_checklist.errors import AuthError, InternalError, InvalidTokenError

from .security import decode_access_token


# Declares the scheme in OpenAPI. The header itself is parsed below, since
# HTTPBearer matches the scheme case-insensitively.
_bearer = HTTPBearer(auto_error=False)

_BEARER_PREFIX = "Bearer "


def get_current_user(
    request: Request,
    _credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
) -> Dict[str, Any]:
    """Authenticate a request from its `Authorization: Bearer <jwt>` header.

    - no header, or a value not starting with exactly "Bearer " -> 401
    - bad signature, malformed, empty or expired token -> 403

    Claims are trusted as signed; the users table is not consulted. On success
    the claims are also stored on `request.state.user`.
    """

    cfg = getattr(request.app.state, "cfg", None)
    if cfg is None:
        raise InternalError()

    header = request.headers.get("authorization") or ""
    if not header.startswith(_BEARER_PREFIX):
        raise AuthError()
    token = header[len(_BEARER_PREFIX) :]

    try:
        payload = decode_access_token(token=token, secret=cfg.AUTH_JWT_SECRET)
    except jwt.InvalidTokenError:
        # ExpiredSignatureError is a subclass.
        raise InvalidTokenError()

    try:
        user_id = int(payload.get("id"))
    except (TypeError, ValueError):
        raise InvalidTokenError()

    user = {"id": user_id, "email": payload.get("email")}
    request.state.user = user
    return user
