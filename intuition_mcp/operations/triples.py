"""Triple lookups by term id, with optional vault positions."""

from typing import Annotated

from pydantic import BaseModel, Field

from ..core.constants import PERSONALITY_TERM_IDS
from ..core.utils import ilike_contains
from ..graphql.queries import POSITION_FIELDS
from .base import Operation, resource_result

TRIPLES_BY_IDS_QUERY = """
query GetTriplesByIds($ids: [numeric!]!) {
  triples(where: { term_id: { _in: $ids } }) {
    counter_term_id
    subject { label }
    predicate { label }
    object { label }
  }
}
"""

_VAULTS = f"""
vaults {{
  total_shares
  positions(where: {{ account: {{ id: {{ _ilike: $address }} }} }}) {{
    {POSITION_FIELDS}
  }}
}}
"""

TRIPLES_WITH_POSITIONS_QUERY = f"""
query GetTriplesWithPositions($ids: [numeric!]!, $address: String) {{
  triples(where: {{ term_id: {{ _in: $ids }} }}) {{
    term_id
    subject {{ label image }}
    predicate {{ label image }}
    object {{ label image }}
    term {{ {_VAULTS} }}
    counter_term {{ {_VAULTS} }}
  }}
}}
"""

TermIds = list[Annotated[int, Field(ge=0)]]


# ============================================================================
# Formatting
# ============================================================================

def format_triples(data: dict) -> list[dict]:
    return [
        {
            "subject": triple["subject"]["label"],
            "predicate": triple["predicate"]["label"],
            "object": triple["object"]["label"],
        }
        for triple in data.get("triples") or []
    ]


def _format_vaults(term: dict | None) -> list[dict]:
    return [
        {
            "totalShares": vault.get("total_shares"),
            "positions": [
                {
                    "accountId": position["account"]["id"],
                    "label": position["account"].get("label"),
                    "shares": position.get("shares"),
                }
                for position in vault.get("positions") or []
            ],
        }
        for vault in (term or {}).get("vaults") or []
    ]


def format_triples_with_positions(data: dict) -> list[dict]:
    return [
        {
            "termId": triple.get("term_id"),
            "subject": triple["subject"]["label"],
            "predicate": triple["predicate"]["label"],
            "object": triple["object"]["label"],
            "termVaults": _format_vaults(triple.get("term")),
            "counterTermVaults": _format_vaults(triple.get("counter_term")),
        }
        for triple in data.get("triples") or []
    ]


def has_positions(triple: dict) -> bool:
    """True if any vault on either side of the triple holds a position."""
    vaults = triple["termVaults"] + triple["counterTermVaults"]
    return any(vault["positions"] for vault in vaults)


# ============================================================================
# get_triples_by_ids
# ============================================================================

class TriplesByIdsParameters(BaseModel):
    ids: TermIds = Field(..., min_length=1, description="Array of numeric term IDs to get triples for")


async def get_triples_by_ids(args: TriplesByIdsParameters, client):
    data = await client.request(TRIPLES_BY_IDS_QUERY, {"ids": args.ids})
    return resource_result("get-triples-result", format_triples(data), indent=2)


get_triples_by_ids_operation = Operation(
    name="get_triples_by_ids",
    description="Get triples based on an array of term IDs.",
    parameters=TriplesByIdsParameters,
    execute=get_triples_by_ids,
)


# ============================================================================
# get_triples_with_positions
# ============================================================================

class TriplesWithPositionsParameters(BaseModel):
    ids: TermIds = Field(..., min_length=1, description="Array of numeric term IDs to get triples for")
    address_filter: str | None = Field(
        None,
        alias="addressFilter",
        description="Optional substring to filter user accounts by address",
    )

    model_config = {"populate_by_name": True}


async def get_triples_with_positions(args: TriplesWithPositionsParameters, client):
    data = await client.request(TRIPLES_WITH_POSITIONS_QUERY, {
        "ids": args.ids,
        "address": ilike_contains(args.address_filter),
    })
    return resource_result("get-triples-with-positions-result", format_triples_with_positions(data), indent=2)


get_triples_with_positions_operation = Operation(
    name="get_triples_with_positions",
    description="Get triples by IDs including user positions filtered optionally by address substring.",
    parameters=TriplesWithPositionsParameters,
    execute=get_triples_with_positions,
)


# ============================================================================
# get_user_personality
# ============================================================================

class UserPersonalityParameters(BaseModel):
    address: str | None = Field(
        None,
        description="Address or address substring; when omitted every position is considered",
    )


async def get_user_personality(args: UserPersonalityParameters, client):
    data = await client.request(TRIPLES_WITH_POSITIONS_QUERY, {
        "ids": list(PERSONALITY_TERM_IDS),
        "address": ilike_contains(args.address),
    })
    triples = [t for t in format_triples_with_positions(data) if has_positions(t)]
    return resource_result("triples-by-address", triples, indent=2)


get_user_personality_operation = Operation(
    name="get_user_personality",
    description=(
        "Return ONLY the triples of the personality profile for which the given address "
        "holds a position, using a predefined list of term IDs."
    ),
    parameters=UserPersonalityParameters,
    execute=get_user_personality,
)
