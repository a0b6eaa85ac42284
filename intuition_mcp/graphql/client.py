"""Async client for the Intuition GraphQL API."""

import logging
from typing import Any

import httpx

from ..core.constants import DEFAULT_GRAPHQL_URL, GRAPHQL_ORIGIN, GRAPHQL_TIMEOUT_SECONDS, SERVER_NAME
from ..core.exceptions import GraphQLRequestError
from ..version import __version__

logger = logging.getLogger(__name__)


class IntuitionGraphQLClient:
    """Thin wrapper posting GraphQL documents to the Intuition endpoint."""

    def __init__(
        self,
        url: str = DEFAULT_GRAPHQL_URL,
        timeout: float = GRAPHQL_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.url = url
        self._client = httpx.AsyncClient(
            timeout=timeout,
            transport=transport,
            headers={
                "Content-Type": "application/json",
                "Accept": "application/json",
                "User-Agent": f"{SERVER_NAME}/{__version__}",
                "Origin": GRAPHQL_ORIGIN,
            },
        )

    async def request(self, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        """
        Execute a GraphQL document and return its `data` object.
        Raises GraphQLRequestError on transport, HTTP or GraphQL errors.
        """
        payload = {"query": query, "variables": variables or {}}

        try:
            response = await self._client.post(self.url, json=payload)
        except httpx.HTTPError as e:
            raise GraphQLRequestError(f"GraphQL request failed: {e}") from e

        if response.status_code >= 400:
            logger.warning(f"GraphQL endpoint returned HTTP {response.status_code}: {response.text[:500]}")
            raise GraphQLRequestError(f"HTTP {response.status_code} from GraphQL endpoint")

        try:
            body = response.json()
        except ValueError as e:
            raise GraphQLRequestError("GraphQL endpoint returned invalid JSON") from e
        if not isinstance(body, dict):
            raise GraphQLRequestError("GraphQL endpoint returned an unexpected payload")

        errors = body.get("errors")
        if errors:
            messages = "; ".join(str(err.get("message", err)) for err in errors)
            raise GraphQLRequestError(f"GraphQL errors: {messages}", errors)

        data = body.get("data")
        if data is None:
            raise GraphQLRequestError("GraphQL response has no data")

        return data

    async def aclose(self):
        """Close the underlying HTTP connection pool."""
        await self._client.aclose()

    async def __aenter__(self) -> "IntuitionGraphQLClient":
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()
