"""Tool operations backed by the Intuition GraphQL API."""

from .base import Operation, error_result, resource_result, text_result
from . import (
    get_account_info,
    get_followers,
    get_following,
    get_inbound_relations,
    get_outbound_relations,
    get_outgoing_edges,
    search_account_ids,
    search_atoms,
    search_lists,
    triples,
)

OPERATIONS: tuple[Operation, ...] = (
    search_atoms.operation,
    get_account_info.operation,
    search_lists.operation,
    get_following.operation,
    get_followers.operation,
    search_account_ids.operation,
    get_outbound_relations.operation,
    get_inbound_relations.operation,
    get_outgoing_edges.operation,
    triples.get_triples_by_ids_operation,
    triples.get_triples_with_positions_operation,
    triples.get_user_personality_operation,
)

__all__ = [
    "OPERATIONS",
    "Operation",
    "error_result",
    "resource_result",
    "text_result",
]
