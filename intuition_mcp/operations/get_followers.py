"""Followers of an address and what they interact with."""

from pydantic import BaseModel, Field

from ..graphql.queries import INBOUND_RELATIONS_QUERY
from .base import Operation, resource_result
from .relations import inbound_variables, relations_from_subject_claims

DESCRIPTION = """Get followers of a given address and potentially their interactions with a predicate.

## Example:

- user: what do my followers follow?
  tool_args: {"account_id":"0x3e2178cf851a0e5cbf84c0ff53f820ad7ead703b","predicate":"follow"}

- user: what do my followers recommend?
  tool_args: {"account_id":"0x3e2178cf851a0e5cbf84c0ff53f820ad7ead703b","predicate":"recommend"}
"""

QUERY = INBOUND_RELATIONS_QUERY
FOLLOW_PREDICATE = "follow"


class Parameters(BaseModel):
    account_id: str = Field(
        ...,
        min_length=1,
        description="The account id of the account to find the followers for. Example: 0x3e2178cf851a0e5cbf84c0ff53f820ad7ead703b",
    )
    predicate: str | None = Field(
        None,
        min_length=1,
        description="Optional predicate to filter followers positions on.\nExample: recommend, follow, like, dislike",
    )


def format_response(data: dict) -> dict:
    return {"followers": relations_from_subject_claims(data.get("claims") or [])}


async def execute(args: Parameters, client):
    data = await client.request(QUERY, inbound_variables(args.account_id, FOLLOW_PREDICATE, args.predicate))
    return resource_result("get-followers-result", format_response(data))


operation = Operation(
    name="get_followers",
    description=DESCRIPTION,
    parameters=Parameters,
    execute=execute,
)
