"""Search for curated lists (predicate/object pairs) by name."""

import logging

from pydantic import BaseModel, Field

from ..core.constants import LIST_SEARCH_LIMIT
from ..core.utils import ilike_contains
from .base import Operation, resource_result, text_result

logger = logging.getLogger(__name__)

DESCRIPTION = """Search for lists of entities by name or description.

Do not hesitate to make multiple calls with arguments broken down to single words or other variations when the argument from the user is complex.

### Examples
Examples of cases when to use the tool to assist the user and the arguments to extract:

- user_message: give me a list of blockchains
  tool_args: {"query":"blockchain"}

- user_message: I'm looking for a list of crypto ceos
  tool_args: {"query":"crypto ceos"}

- user_message: do you have a collection about web3
  tool_args: {"query":"web3"}

- user_message: what are some popular defi protocols
  tool_args: {"query":"defi protocols"}

### Response format

When replying to the user using the tool call result give at least 10 items if there is at least 10 items in the result. Sort the items by position descending. Always mention the atom ids. Give a good amount of details. Structure your reply but keep a natural and engaging format and follow the other speech directives.
"""

QUERY = f"""
query SearchLists($str: String!) {{
  predicate_objects(
    where: {{ object: {{ label: {{ _ilike: $str }} }} }}
    limit: {LIST_SEARCH_LIMIT}
    order_by: {{ claim_count: desc }}
  ) {{
    id
    claim_count
    triple_count
    object {{
      label
      id
    }}
  }}
}}
"""


class Parameters(BaseModel):
    query: str = Field(..., min_length=1, description="Name or description of the list to look for")


async def execute(args: Parameters, client):
    data = await client.request(QUERY, {"str": ilike_contains(args.query)})

    lists = data.get("predicate_objects")
    if not isinstance(lists, list) or not lists:
        return text_result("No lists found matching your search criteria.")

    logger.debug(f"List search for {args.query!r} returned {len(lists)} results")
    return resource_result("list-search-result", lists)


operation = Operation(
    name="search_lists",
    description=DESCRIPTION,
    parameters=Parameters,
    execute=execute,
)
