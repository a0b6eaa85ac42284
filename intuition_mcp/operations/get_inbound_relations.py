"""Inbound relations of an account and the relations of their authors."""

from pydantic import BaseModel, Field

from ..graphql.queries import INBOUND_RELATIONS_QUERY
from .base import Operation, resource_result
from .relations import inbound_variables, relations_from_subject_claims

DESCRIPTION = """Get inbound relations filtered on the type of relation for a given account. Also retrieves the relations of these inbound relations filtered on a type of relation.

## Example:

- user: what do my followers follow?
  tool_args: {"account_id":"0x3e2178cf851a0e5cbf84c0ff53f820ad7ead703b","relations_predicate":"follow","relations_relations_predicate":"follow"}

- user: what do the accounts trusting me recommend?
  tool_args: {"account_id":"0x3e2178cf851a0e5cbf84c0ff53f820ad7ead703b","relations_predicate":"trust","relations_relations_predicate":"recommend"}
"""

QUERY = INBOUND_RELATIONS_QUERY


class Parameters(BaseModel):
    account_id: str = Field(
        ...,
        min_length=1,
        description="The account id of the account to find the inbound relations for. Example: 0x3e2178cf851a0e5cbf84c0ff53f820ad7ead703b",
    )
    relations_predicate: str | None = Field(
        None,
        min_length=1,
        description="Optional predicate to filter inbound relations on.\nExample: recommend, follow, like, dislike",
    )
    relations_relations_predicate: str | None = Field(
        None,
        min_length=1,
        description="Optional predicate to filter the relations of inbound relations on.\nExample: recommend, follow, like, dislike",
    )


def format_response(data: dict) -> dict:
    return {"followers": relations_from_subject_claims(data.get("claims") or [])}


async def execute(args: Parameters, client):
    variables = inbound_variables(args.account_id, args.relations_predicate, args.relations_relations_predicate)
    data = await client.request(QUERY, variables)
    return resource_result("get-inbound-relations-result", format_response(data))


operation = Operation(
    name="get_inbound_relations",
    description=DESCRIPTION,
    parameters=Parameters,
    execute=execute,
)
