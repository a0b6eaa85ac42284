"""Outgoing edges of an account, optionally expanded one hop further."""

from pydantic import BaseModel, Field

from ..core.constants import RELATIONS_LIMIT
from ..core.utils import ilike_contains
from ..graphql.queries import ATOM_VALUE_WITH_BOOK_FIELDS, RELATIONS_ORDER_BY
from .base import Operation, resource_result

DESCRIPTION = """Get outgoing edges filtered on the type of relation for a given account.
Also retrieves the outgoing edges edges optionally filtered on a type of relation.

## Example:

- user: what do the accounts I follow follow?
  tool_args: {"account_id":"0x3e2178cf851a0e5cbf84c0ff53f820ad7ead703b","edges_predicate":"follow","edges_edges_predicate":"follow"}

- user: what do the accounts I follow recommend?
  tool_args: {"account_id":"0x3e2178cf851a0e5cbf84c0ff53f820ad7ead703b","edges_predicate":"follow","edges_edges_predicate":"recommend"}

- user: what are the things I prefer?
  tool_args: {"account_id":"0x3e2178cf851a0e5cbf84c0ff53f820ad7ead703b","edges_predicate":"prefers"}
"""

QUERY = f"""
query outgoingEdges(
  $where: claims_bool_exp
  $orderBy: [claims_order_by!]
  $limit: Int
) {{
  claims(where: $where, order_by: $orderBy, limit: $limit) {{
    account {{ id label }}
    subject {{ label }}
    predicate {{ label }}
    object {{
      id
      label
      {ATOM_VALUE_WITH_BOOK_FIELDS}
    }}
  }}
}}
"""

TWO_HOP_QUERY = f"""
query outgoingEdgesEdges(
  $where: claims_bool_exp
  $orderBy: [claims_order_by!]
  $limit: Int
  $whereAccountsClaims: claims_bool_exp
  $whereAccounts: accounts_bool_exp
) {{
  claims(where: $where, order_by: $orderBy, limit: $limit) {{
    account {{ id label }}
    subject {{ label }}
    predicate {{ label }}
    object {{
      id
      label
      accounts(where: $whereAccounts) {{
        id
        label
        claims(where: $whereAccountsClaims) {{
          subject {{ id label type {ATOM_VALUE_WITH_BOOK_FIELDS} }}
          predicate {{ label }}
          object {{ id label type {ATOM_VALUE_WITH_BOOK_FIELDS} }}
        }}
      }}
    }}
  }}
}}
"""


class Parameters(BaseModel):
    account_id: str = Field(
        ...,
        min_length=1,
        description="The account id of the account to find the outgoing edges for. Example: 0x3e2178cf851a0e5cbf84c0ff53f820ad7ead703b",
    )
    edges_predicate: str = Field(
        ...,
        min_length=1,
        description="The predicate to filter on for outgoing edges. Example: follow, like, dislike, recommend, trust",
    )
    edges_edges_predicate: str | None = Field(
        None,
        min_length=1,
        description="Optional predicate to filter edges' edges on.\nExample: recommend, follow, like, dislike, trust",
    )


def build_variables(args: Parameters) -> dict:
    variables = {
        "where": {
            "predicate": {"label": {"_ilike": ilike_contains(args.edges_predicate)}},
            "object": {"type": {"_eq": "Account"}},
            "account_id": {"_eq": args.account_id},
        },
        "orderBy": RELATIONS_ORDER_BY,
        "limit": RELATIONS_LIMIT,
    }
    if args.edges_edges_predicate:
        variables["whereAccounts"] = {"type": {"_eq": "Default"}}
        variables["whereAccountsClaims"] = {
            "triple": {"predicate": {"label": {"_ilike": ilike_contains(args.edges_edges_predicate)}}},
        }
    return variables


def _edge_target(claim: dict) -> dict:
    """Second hop target; an account-valued object is reported by its account."""
    obj = claim.get("object") or {}
    account = (obj.get("value") or {}).get("account")
    source = account or obj
    return {
        "label": source.get("label"),
        "id": source.get("id"),
        "type": (claim.get("predicate") or {}).get("label"),
    }


def format_response(data: dict) -> dict:
    formatted = {"id": "", "label": "", "type": "", "outgoingEdges": []}
    for claim in data.get("claims") or []:
        predicate = (claim.get("predicate") or {}).get("label")
        author = claim.get("account")
        if author is not None:
            formatted["id"] = author.get("id")
            formatted["label"] = author.get("label")
            formatted["type"] = predicate

        obj = claim.get("object") or {}
        if "accounts" not in obj:
            # Single hop: the edge target is the claim object itself
            target = _edge_target(claim)
            formatted["outgoingEdges"].append({
                "id": target["id"],
                "label": target["label"],
                "type": predicate,
                "predicates": [],
            })
            continue

        for account in obj.get("accounts") or []:
            formatted["outgoingEdges"].append({
                "id": account.get("id"),
                "label": account.get("label"),
                "type": predicate,
                "predicates": [_edge_target(c) for c in account.get("claims") or []],
            })
    return formatted


async def execute(args: Parameters, client):
    query = TWO_HOP_QUERY if args.edges_edges_predicate else QUERY
    data = await client.request(query, build_variables(args))
    return resource_result("get-outgoing-edges-result", format_response(data))


operation = Operation(
    name="get_outgoing_edges",
    description=DESCRIPTION,
    parameters=Parameters,
    execute=execute,
)
