"""Async client for the Clerk backend API and session-token verification."""
from typing import Any, Dict, Optional

import httpx
from jose import ExpiredSignatureError, JWTError, jwt

from ..config import settings
from ..utils.logger import logger
from .exceptions import AuthenticationError, ClerkError


def _key_ids(jwks: Dict[str, Any]) -> set:
    return {key.get("kid") for key in jwks.get("keys", [])}


class ClerkClient:
    """Async HTTP client for Clerk user metadata and JWKS."""

    # Last fetched key set, shared across instances
    _jwks_cache: Optional[Dict[str, Any]] = None

    def __init__(
        self,
        secret_key: Optional[str] = None,
        timeout: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the Clerk client.

        Args:
            secret_key: Clerk secret key. Defaults to settings.clerk_secret_key
            timeout: Request timeout in seconds. Defaults to settings.default_timeout
            transport: Optional httpx transport (used by tests)
        """
        self.secret_key = secret_key or settings.clerk_secret_key
        self.timeout = timeout or settings.default_timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        """Async context manager entry."""
        self._client = httpx.AsyncClient(
            base_url=settings.clerk_api_url,
            timeout=self.timeout,
            headers={"Authorization": f"Bearer {self.secret_key}"},
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _request(self, method: str, url: str, **kwargs) -> Dict[str, Any]:
        if not self._client:
            raise RuntimeError("ClerkClient must be used as an async context manager")

        try:
            response = await self._client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"[CLERK] {method} {url} failed: HTTP {e.response.status_code}")
            raise ClerkError(
                f"Clerk request failed: HTTP {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.RequestError as e:
            raise ClerkError(f"Clerk request failed: {e}") from e

        return response.json()

    async def update_user_metadata(
        self,
        user_id: str,
        public_metadata: Optional[Dict[str, Any]] = None,
        private_metadata: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Merge metadata into a Clerk user.

        Args:
            user_id: Clerk user id
            public_metadata: Keys to merge into the user's public metadata
            private_metadata: Keys to merge into the user's private metadata

        Returns:
            The updated Clerk user object
        """
        payload: Dict[str, Any] = {}
        if public_metadata is not None:
            payload["public_metadata"] = public_metadata
        if private_metadata is not None:
            payload["private_metadata"] = private_metadata

        logger.info(f"[CLERK] Updating metadata for user {user_id}")
        return await self._request("PATCH", f"/users/{user_id}/metadata", json=payload)

    async def get_jwks(self, refresh: bool = False) -> Dict[str, Any]:
        """Fetch (and memoise) the instance's JSON Web Key Set."""
        if ClerkClient._jwks_cache is None or refresh:
            ClerkClient._jwks_cache = await self._request(
                "GET", settings.resolved_clerk_jwks_url
            )
        return ClerkClient._jwks_cache

    async def verify_session_token(self, token: str) -> Dict[str, Any]:
        """Verify a Clerk session JWT and return its claims.

        Raises:
            AuthenticationError: If the token is expired, malformed, signed by
                an unknown key or issued for an unauthorized party
        """
        try:
            kid = jwt.get_unverified_header(token).get("kid")
            jwks = await self.get_jwks()
            if kid and kid not in _key_ids(jwks):
                # Unknown signing key: the set may have rotated since it was cached
                jwks = await self.get_jwks(refresh=True)
            claims = jwt.decode(
                token, jwks, algorithms=["RS256"], options={"verify_aud": False}
            )
        except ExpiredSignatureError as e:
            raise AuthenticationError("Session token expired") from e
        except (JWTError, ClerkError) as e:
            raise AuthenticationError(f"Invalid session token: {e}") from e

        authorized = settings.clerk_authorized_parties
        if authorized and claims.get("azp") not in authorized:
            raise AuthenticationError("Session token issued for an unauthorized party")

        if not claims.get("sub"):
            raise AuthenticationError("Session token has no subject")

        return claims
