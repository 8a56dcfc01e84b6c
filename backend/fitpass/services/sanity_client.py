"""Async client for the Sanity content API (GROQ queries and mutations)."""
import json
from typing import Any, Dict, List, Optional

import httpx

from ..config import settings
from ..utils.logger import logger
from .exceptions import SanityError


class Patch:
    """Pending patch against one document, committed with ``commit()``."""

    def __init__(self, client: "SanityClient", document_id: str):
        self.client = client
        self.document_id = document_id
        self.operations: Dict[str, Any] = {}

    def set(self, attributes: Dict[str, Any]) -> "Patch":
        """Queue a ``set`` operation, merging with any earlier one."""
        self.operations.setdefault("set", {}).update(attributes)
        return self

    def serialize(self) -> Dict[str, Any]:
        return {"patch": {"id": self.document_id, **self.operations}}

    async def commit(self) -> Dict[str, Any]:
        """Send the patch as a single mutation."""
        return await self.client.mutate([self.serialize()])


class SanityClient:
    """Async HTTP client for a Sanity project's dataset."""

    def __init__(
        self,
        token: Optional[str] = None,
        use_cdn: Optional[bool] = None,
        timeout: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the Sanity client.

        Args:
            token: API token. Defaults to settings.sanity_read_token
            use_cdn: Read through the API CDN. Defaults to settings.sanity_use_cdn
            timeout: Request timeout in seconds. Defaults to settings.default_timeout
            transport: Optional httpx transport (used by tests)
        """
        self.token = settings.sanity_read_token if token is None else token
        self.use_cdn = settings.sanity_use_cdn if use_cdn is None else use_cdn
        self.timeout = timeout or settings.default_timeout
        self.dataset = settings.sanity_dataset
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @classmethod
    def for_writes(cls, **kwargs) -> "SanityClient":
        """Client authenticated with the write token, bypassing the CDN."""
        return cls(token=settings.sanity_write_token, use_cdn=False, **kwargs)

    @property
    def base_url(self) -> str:
        host = "apicdn.sanity.io" if self.use_cdn else "api.sanity.io"
        return f"https://{settings.sanity_project_id}.{host}/v{settings.sanity_api_version}"

    async def __aenter__(self):
        """Async context manager entry."""
        if not settings.sanity_configured:
            raise SanityError("Sanity project is not configured (SANITY_PROJECT_ID)")

        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            headers=headers,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        if not self._client:
            raise RuntimeError("SanityClient must be used as an async context manager")

        try:
            response = await self._client.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"[SANITY] {path} failed: HTTP {e.response.status_code}")
            raise SanityError(
                f"Sanity request failed: HTTP {e.response.status_code}",
                status_code=e.response.status_code,
                body=e.response.text,
            ) from e
        except httpx.TimeoutException as e:
            raise SanityError(f"Sanity request timed out after {self.timeout} seconds") from e
        except httpx.RequestError as e:
            raise SanityError(f"Sanity request failed: {e}") from e

        return response.json()

    async def fetch(self, query: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """Run a GROQ query and return its ``result``.

        Args:
            query: GROQ query text
            params: Values for ``$name`` parameters referenced by the query

        Returns:
            The decoded query result (list, object, scalar or None)
        """
        logger.debug(f"[SANITY] Query with params {sorted((params or {}).keys())}")
        query_params = {"query": query}
        for name, value in (params or {}).items():
            query_params[f"${name}"] = json.dumps(value)

        body = await self._request(
            "GET", f"/data/query/{self.dataset}", params=query_params
        )
        return body.get("result")

    async def mutate(self, mutations: List[Dict[str, Any]]) -> Dict[str, Any]:
        """Apply a list of mutations in one transaction."""
        if not self.token:
            raise SanityError("Sanity mutations require an API token")

        logger.info(f"[SANITY] Applying {len(mutations)} mutation(s)")
        return await self._request(
            "POST",
            f"/data/mutate/{self.dataset}",
            params={"returnIds": "true", "visibility": "sync"},
            json={"mutations": mutations},
        )

    def patch(self, document_id: str) -> Patch:
        """Start a patch against ``document_id``."""
        return Patch(self, document_id)

    async def create_if_not_exists(self, document: Dict[str, Any]) -> Dict[str, Any]:
        """Create ``document`` unless a document with its ``_id`` already exists."""
        return await self.mutate([{"createIfNotExists": document}])
