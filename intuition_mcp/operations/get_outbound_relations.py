"""Outbound relations of an account, filtered by relation type."""

from pydantic import BaseModel, Field

from ..graphql.queries import OUTBOUND_RELATIONS_QUERY
from .base import Operation, resource_result
from .relations import outbound_variables, relations_from_object_accounts

DESCRIPTION = """Get outbound relations filtered on the type of relation for a given account.
Also retrieves the outbound relations relations optionally filtered on a type of relation.

## Example:

- user: what do the accounts I follow follow?
  tool_args: {"account_id":"0x3e2178cf851a0e5cbf84c0ff53f820ad7ead703b","relations_predicate":"follow","relations_relations_predicate":"follow"}

- user: what do the accounts I trust recommend?
  tool_args: {"account_id":"0x3e2178cf851a0e5cbf84c0ff53f820ad7ead703b","relations_predicate":"trust","relations_relations_predicate":"recommend"}
"""

QUERY = OUTBOUND_RELATIONS_QUERY


class Parameters(BaseModel):
    account_id: str = Field(
        ...,
        min_length=1,
        description="The account id of the account to find the outbound relations for. Example: 0x3e2178cf851a0e5cbf84c0ff53f820ad7ead703b",
    )
    relations_predicate: str = Field(
        ...,
        min_length=1,
        description="The predicate to filter on for outbound relations. Example: follow, like, dislike, recommend, trust",
    )
    relations_relations_predicate: str | None = Field(
        None,
        min_length=1,
        description="Optional predicate to filter relations' relations on.\nExample: recommend, follow, like, dislike, trust",
    )


def format_response(data: dict) -> dict:
    return {"following": relations_from_object_accounts(data.get("claims") or [])}


async def execute(args: Parameters, client):
    variables = outbound_variables(args.account_id, args.relations_predicate, args.relations_relations_predicate)
    data = await client.request(QUERY, variables)
    return resource_result("get-outbound-relations-result", format_response(data))


operation = Operation(
    name="get_outbound_relations",
    description=DESCRIPTION,
    parameters=Parameters,
    execute=execute,
)
