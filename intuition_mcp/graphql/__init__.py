"""Remote Intuition GraphQL API access."""

from .client import IntuitionGraphQLClient

__all__ = ["IntuitionGraphQLClient"]
