"""Shared route dependencies."""
from typing import Optional

from fastapi import Request

from ..services import ClerkClient
from ..services.exceptions import AuthenticationError
from ..utils.logger import logger

SESSION_COOKIE = "__session"


def _session_token(request: Request) -> Optional[str]:
    authorization = request.headers.get("Authorization", "")
    if authorization.lower().startswith("bearer "):
        return authorization[7:].strip() or None
    return request.cookies.get(SESSION_COOKIE)


async def get_current_user_id(request: Request) -> Optional[str]:
    """Clerk user id of the caller, or None when signed out or the token is invalid."""
    token = _session_token(request)
    if not token:
        return None

    try:
        async with ClerkClient() as clerk:
            claims = await clerk.verify_session_token(token)
    except AuthenticationError as e:
        logger.warning(f"[CLERK] Rejected session token: {e}")
        return None

    return claims["sub"]
