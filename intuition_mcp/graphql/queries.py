"""Selection sets shared by several GraphQL documents."""

# Polymorphic atom value as returned in relation lookups
ATOM_VALUE_FIELDS = """
value {
  thing { url description name }
  account { id label }
  person { name description email identifier }
  organization { name email description url }
}
"""

# Same as ATOM_VALUE_FIELDS plus book atoms
ATOM_VALUE_WITH_BOOK_FIELDS = """
value {
  thing { url description name }
  account { id label }
  person { name description email identifier }
  organization { name email description url }
  book { name description url }
}
"""

# Value shape used when describing an account's own terms
TERM_VALUE_FIELDS = """
value {
  thing { id image description }
  account { id label image }
  person { id image description }
  organization { id image description }
}
"""

VAULT_STATS_FIELDS = """
position_count
current_share_price
total_shares
"""

POSITION_FIELDS = """
account { id label image }
shares
"""

# Ordering of relation claims by popularity of the claim, then of its object
RELATIONS_ORDER_BY = [
    {"vault": {"position_count": "desc"}},
    {"object": {"vault": {"position_count": "desc"}}},
]

# Claims authored by an account, then the claims of each account they point at
OUTBOUND_RELATIONS_QUERY = f"""
query outboundRelations(
  $where: claims_bool_exp
  $orderBy: [claims_order_by!]
  $limit: Int
  $whereAccountsClaims: claims_bool_exp
  $whereAccounts: accounts_bool_exp
) {{
  claims(where: $where, order_by: $orderBy, limit: $limit) {{
    subject {{ label }}
    predicate {{ label }}
    object {{
      id
      label
      accounts(where: $whereAccounts) {{
        id
        label
        claims(where: $whereAccountsClaims) {{
          subject {{ label type {ATOM_VALUE_FIELDS} }}
          predicate {{ label }}
          object {{ id label type {ATOM_VALUE_FIELDS} }}
        }}
      }}
    }}
  }}
}}
"""

# Claims pointing at an account, then the claims made about each author
INBOUND_RELATIONS_QUERY = f"""
query inboundRelations(
  $where: claims_bool_exp
  $orderBy: [claims_order_by!]
  $limit: Int
  $asSubjectClaimsWhere: claims_bool_exp
) {{
  claims(where: $where, order_by: $orderBy, limit: $limit) {{
    account {{ id label }}
    subject {{
      label
      as_subject_claims(where: $asSubjectClaimsWhere) {{
        subject {{ label type {ATOM_VALUE_FIELDS} }}
        predicate {{ label }}
        object {{ id label type {ATOM_VALUE_FIELDS} }}
      }}
    }}
    predicate {{ label }}
    object {{ id label }}
  }}
}}
"""
