"""Resolve account addresses from a label such as an ENS name."""

from pydantic import BaseModel, Field

from ..core.utils import ilike_contains
from .base import Operation, resource_result

DESCRIPTION = """Search account address for a given identifier.

## Example:

- user: what are intuitionbilly users he follows liking?
  tool_args: {"identifier":"intuitionbilly"}

- user: what is the address of vitalik.eth account?
  tool_args: {"identifier":"vitalik.eth"}
"""

QUERY = """
query Accounts($where: accounts_bool_exp) {
  accounts(where: $where) {
    id
  }
}
"""


class Parameters(BaseModel):
    identifier: str = Field(
        ...,
        min_length=1,
        description="The account identifier to search the id for, typically an ens address. Example: intuitionbilly.eth",
    )


async def execute(args: Parameters, client):
    data = await client.request(QUERY, {
        "where": {"label": {"_ilike": ilike_contains(args.identifier)}},
    })
    return resource_result("search-account-ids-result", {"accounts": data.get("accounts") or []})


operation = Operation(
    name="search_account_ids",
    description=DESCRIPTION,
    parameters=Parameters,
    execute=execute,
)
