"""Accounts followed by an address and what they interact with."""

from pydantic import BaseModel, Field

from ..graphql.queries import OUTBOUND_RELATIONS_QUERY
from .base import Operation, resource_result
from .relations import outbound_variables, relations_from_object_accounts

DESCRIPTION = """Get atom ids an account address is following.

## Example:

- user: what do the accounts I follow follow?
  tool_args: {"account_id":"0x3e2178cf851a0e5cbf84c0ff53f820ad7ead703b","predicate":"follow"}

- user: what do the accounts I follow recommend?
  tool_args: {"account_id":"0x3e2178cf851a0e5cbf84c0ff53f820ad7ead703b","predicate":"recommend"}
"""

QUERY = OUTBOUND_RELATIONS_QUERY
FOLLOW_PREDICATE = "follow"


class Parameters(BaseModel):
    account_id: str = Field(
        ...,
        min_length=1,
        description="The account id of the account to find the following for. Example: 0x3e2178cf851a0e5cbf84c0ff53f820ad7ead703b",
    )
    predicate: str | None = Field(
        None,
        min_length=1,
        description="Optional predicate to filter following positions on.\nExample: recommend, follow, like, dislike",
    )


def format_response(data: dict) -> dict:
    return {"following": relations_from_object_accounts(data.get("claims") or [])}


async def execute(args: Parameters, client):
    data = await client.request(QUERY, outbound_variables(args.account_id, FOLLOW_PREDICATE, args.predicate))
    return resource_result("get-following-result", format_response(data))


operation = Operation(
    name="get_following",
    description=DESCRIPTION,
    parameters=Parameters,
    execute=execute,
)
