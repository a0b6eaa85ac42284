"""Full-text style search over atoms."""

import logging
from typing import Annotated

from pydantic import BaseModel, Field

from ..core.constants import MAX_SEARCH_QUERIES
from ..core.utils import ilike_suffix, remove_empty_fields
from ..graphql.queries import VAULT_STATS_FIELDS
from .base import Operation, resource_result

logger = logging.getLogger(__name__)

DESCRIPTION = """Search for accounts, things, people, and concepts by name, description, URL or ens domain (e.g. john.eth).

Use the user input with synonyms or break it down into single words for arguments.

### Examples
Examples of cases when to use the tool to assist the user and the arguments to extract:

- user_message: search atoms for ethereum
  tool_args: {"queries":["ethereum","eth"]}

- user_message: search for data about intuition
  tool_args: {"queries":["intuition"]}

- user_message: what information you have about centralized exchanges
  tool_args: {"queries":["centralized exchanges","cex"]}

- user_message: find atoms for vitalik buterin
  tool_args: {"queries":["vitalik buterin","vitalik.eth","vitalik"]}

- user_message: do you know something about billy.eth
  tool_args: {"queries":["billy.eth","bill","william"]}

### Response format

When replying to the user using the tool call result, favor the most popular atoms (with the largest positions) and sort them by position descending.
Always mention the atom ids. Give at least 10 connections and a good amount of details. Structure your reply but keep a natural and engaging format and follow the other speech directives.
"""

# Atom value fields matched against every search term
MATCHED_FIELDS = (
    ("account", "label"),
    ("thing", "url"),
    ("thing", "name"),
    ("thing", "description"),
    ("person", "url"),
    ("person", "name"),
    ("person", "description"),
    ("organization", "url"),
    ("organization", "name"),
    ("organization", "description"),
)


class Parameters(BaseModel):
    queries: list[Annotated[str, Field(min_length=1)]] = Field(
        ...,
        min_length=1,
        description="Search terms: the user input, its synonyms or single words. Only the first 5 are used.",
    )


def build_query(count: int) -> str:
    """SearchAtoms document with one `$like<i>Str` variable per term."""
    variables = ", ".join(f"$like{i}Str: String!" for i in range(count))
    conditions = "\n".join(
        f"{{ value: {{ {kind}: {{ {field}: {{ _ilike: $like{i}Str }} }} }} }}"
        for i in range(count)
        for kind, field in MATCHED_FIELDS
    )
    return f"""
query SearchAtoms({variables}) {{
  atoms(
    where: {{ _or: [
{conditions}
    ] }}
    order_by: {{ vault: {{ position_count: desc }} }}
  ) {{
    id
    label
    value {{
      account {{ id label }}
      person {{ name description email identifier }}
      thing {{ url name description }}
      organization {{ name email description url }}
    }}
    vault {{ {VAULT_STATS_FIELDS} }}
    as_subject_triples {{
      id
      object {{ id label emoji image }}
      predicate {{ id label emoji image }}
      counter_vault {{ {VAULT_STATS_FIELDS} }}
      vault {{ {VAULT_STATS_FIELDS} }}
    }}
  }}
}}
"""


async def execute(args: Parameters, client):
    terms = args.queries[:MAX_SEARCH_QUERIES]
    logger.debug(f"Searching atoms for {terms}")

    variables = {f"like{i}Str": ilike_suffix(term) for i, term in enumerate(terms)}
    data = await client.request(build_query(len(terms)), variables)

    atoms = data.get("atoms") or []
    logger.debug(f"Atom search returned {len(atoms)} results")
    return resource_result("atom-search-result", remove_empty_fields(atoms) or [])


operation = Operation(
    name="search_atoms",
    description=DESCRIPTION,
    parameters=Parameters,
    execute=execute,
)
