"""Session-backed CSRF token for the dashboard's POST forms."""

from __future__ import annotations

import logging
import secrets
from typing import Annotated

from fastapi import Form, HTTPException, Request, status

logger = logging.getLogger(__name__)

CSRF_SESSION_KEY = "dashboard_csrf"
CSRF_TOKEN_BYTES = 32
CSRF_REJECTED = "Your session has expired. Reload the page and try again."


def ensure_csrf_token(request: Request) -> str:
    token = request.session.get(CSRF_SESSION_KEY)
    if not isinstance(token, str) or not token:
        token = secrets.token_urlsafe(CSRF_TOKEN_BYTES)
        request.session[CSRF_SESSION_KEY] = token
    return token


def validate_csrf_token(request: Request, csrf_token: str) -> None:
    expected = request.session.get(CSRF_SESSION_KEY)
    if isinstance(expected, str) and secrets.compare_digest(expected, csrf_token):
        return
    logger.warning(
        "Rejected dashboard form without a valid CSRF token",
        extra={
            "event": "csrf_rejected",
            "path": request.url.path,
            "has_session_token": isinstance(expected, str),
        },
    )
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=CSRF_REJECTED)


def csrf_protect(
    request: Request,
    csrf_token: Annotated[str, Form(max_length=128)] = "",
) -> None:
    validate_csrf_token(request, csrf_token)
