"""Claim relation lookups: query variables and flattening of nested claim graphs."""

from typing import Any

from ..core.constants import RELATIONS_LIMIT
from ..core.utils import ilike_contains
from ..graphql.queries import RELATIONS_ORDER_BY


def _predicate_entry(claim: dict) -> dict[str, dict[str, Any]]:
    """{"<predicate label>": {"label": <object label>, "id": <object id>}}"""
    obj = claim.get("object") or {}
    target = {"label": obj.get("label")}
    if obj.get("id") is not None:
        target["id"] = obj["id"]
    predicate = (claim.get("predicate") or {}).get("label")
    return {f"{predicate}": target}


def relations_from_object_accounts(claims: list[dict]) -> list[dict]:
    """
    Accounts reached through each claim's object, with their own claims.

    Used when the queried account is the claim author (outbound relations):
    claims -> object -> accounts -> claims.
    """
    related = []
    for claim in claims:
        for account in (claim.get("object") or {}).get("accounts") or []:
            related.append({
                "id": account.get("id"),
                "label": account.get("label"),
                "predicates": [_predicate_entry(c) for c in account.get("claims") or []],
            })
    return related


def relations_from_subject_claims(claims: list[dict]) -> list[dict]:
    """
    Claim authors pointing at the queried account, with the subject's claims.

    Used for inbound relations: claims -> account, claims -> subject -> as_subject_claims.
    """
    related = []
    for claim in claims:
        author = claim.get("account") or {}
        subject_claims = (claim.get("subject") or {}).get("as_subject_claims") or []
        related.append({
            "id": author.get("id"),
            "label": author.get("label"),
            "predicates": [_predicate_entry(c) for c in subject_claims],
        })
    return related


def outbound_variables(account_id: str, predicate: str | None, nested_predicate: str | None) -> dict:
    """Variables for OUTBOUND_RELATIONS_QUERY."""
    return {
        "where": {
            "predicate": {"label": {"_ilike": ilike_contains(predicate)}},
            "object": {"type": {"_eq": "Account"}},
            "account_id": {"_eq": account_id},
        },
        "whereAccounts": {"type": {"_eq": "Default"}},
        "whereAccountsClaims": {
            "triple": {"predicate": {"label": {"_ilike": ilike_contains(nested_predicate)}}},
        },
        "orderBy": RELATIONS_ORDER_BY,
        "limit": RELATIONS_LIMIT,
    }


def inbound_variables(account_id: str, predicate: str | None, nested_predicate: str | None) -> dict:
    """Variables for INBOUND_RELATIONS_QUERY."""
    return {
        "where": {
            "predicate": {"label": {"_ilike": ilike_contains(predicate)}},
            "object": {"label": {"_eq": account_id}},
        },
        "limit": RELATIONS_LIMIT,
        "asSubjectClaimsWhere": {
            "predicate": {"label": {"_ilike": ilike_contains(nested_predicate)}},
        },
    }
