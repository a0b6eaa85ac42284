"""Account profile: atoms, triples, claims and positions of one address."""

import logging

from pydantic import BaseModel, Field

from ..graphql.queries import TERM_VALUE_FIELDS
from .base import Operation, resource_result, text_result

logger = logging.getLogger(__name__)

DESCRIPTION = """Get detailed information about an account by address.

If you don't find information about the account you can search atoms instead if the identifier is not a hex address.

### Examples
Examples of cases when to use the tool to assist the user and the arguments to extract:

- user_message: "get the account info for 0x1234567890123456789012345678901234567890"
  tool_args: {"address":"0x1234567890123456789012345678901234567890"}

- user_message: "what do you know about 0x1234567890123456789012345678901234567890"
  tool_args: {"address":"0x1234567890123456789012345678901234567890"}

- user_message: "what's the intuition of 0xabcdef0123456789abcdef0123456789abcdef01"
  tool_args: {"address":"0xabcdef0123456789abcdef0123456789abcdef01"}

### Response format

When replying to the user using the tool call result, favor the most popular atoms (with the largest positions) and sort them by position descending.
Always mention the atom ids. Give at least 10 connections and a good amount of details. Structure your reply but keep a natural and engaging format and follow the other speech directives.
"""

_TERM = f"""
id
label
{TERM_VALUE_FIELDS}
"""

QUERY = f"""
query GetAccountInfo($address: String!) {{
  account(id: $address) {{
    image
    label
    id
    atoms {{
      id
      label
      data
      value {{ thing {{ description }} }}
      vault {{
        total_shares
        positions_aggregate(where: {{ account_id: {{ _eq: $address }} }}) {{
          nodes {{
            account {{ id }}
            shares
          }}
        }}
      }}
    }}
    triples {{
      id
      subject {{ {_TERM} }}
      predicate {{ {_TERM} }}
      object {{ {_TERM} }}
    }}
    claims {{
      triple {{
        id
        subject {{ {_TERM} }}
        predicate {{ {_TERM} }}
        object {{ {_TERM} }}
      }}
      shares
      counter_shares
    }}
    positions(where: {{ account_id: {{ _eq: $address }} }}) {{
      id
      shares
      vault {{
        id
        position_count
        total_shares
        current_share_price
        atom {{
          id
          label
          image
          {TERM_VALUE_FIELDS}
        }}
      }}
    }}
  }}
}}
"""


class Parameters(BaseModel):
    address: str = Field(
        ...,
        min_length=1,
        description=(
            "Hex address of the account, trimmed and lower-cased before lookup. "
            "Example: 0x3e2178cf851a0e5cbf84c0ff53f820ad7ead703b"
        ),
    )


async def execute(args: Parameters, client):
    # Account ids are stored lower-cased
    address = args.address.strip().lower()
    data = await client.request(QUERY, {"address": address})

    account = data.get("account")
    if not account:
        logger.info(f"No account found for {address}")
        return text_result(f"No account found for address {args.address}.")

    return resource_result("account-info", {"account": account})


operation = Operation(
    name="get_account_info",
    description=DESCRIPTION,
    parameters=Parameters,
    execute=execute,
)
