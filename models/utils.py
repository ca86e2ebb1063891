"""Helpers shared by the command modules.

- create_name_lookup / find_resource: resolve ids and display names
- similarity_score / find_similar_strings: "did you mean" suggestions for
  misspelled light, zone and command names
- get_client: BridgeClient from saved credentials, or None with instructions
"""

import click

from models.types import Resource

EXACT, PREFIX, CONTAINS = 100, 80, 60
# Cut-off for in-order character matches, scored 0-50
MIN_SUBSEQUENCE_SCORE = 21


def create_name_lookup(resources: list[Resource]) -> dict[str, str]:
    return {r.id: r.name for r in resources}


def find_resource(resources: list[Resource], target: str) -> Resource | None:
    """Find a resource by exact id, then by case-insensitive name.

    Args:
        resources: Resources to search
        target: Resource id or display name

    Returns:
        The matching resource, or None
    """
    by_id = next((r for r in resources if r.id == target), None)
    if by_id is not None:
        return by_id

    wanted = target.casefold()
    return next((r for r in resources if r.name.casefold() == wanted), None)


def _in_order_matches(needle: str, haystack: str) -> int:
    """Count characters of needle found left to right in haystack."""
    remaining = iter(haystack)
    return sum(1 for ch in needle if ch in remaining)


def similarity_score(a: str, b: str) -> int:
    """Score how alike two names are, ignoring case.

    Returns:
        100 for equal names, 80 when one starts with the other, 60 when one
        contains the other, otherwise up to 50 for characters shared in
        order (scores below 21 count as no match, 0)
    """
    a, b = a.casefold(), b.casefold()
    if a == b:
        return EXACT
    if a.startswith(b) or b.startswith(a):
        return PREFIX
    if a in b or b in a:
        return CONTAINS

    score = int(_in_order_matches(a, b) / max(len(a), len(b)) * 50)
    return score if score >= MIN_SUBSEQUENCE_SCORE else 0


def find_similar_strings(target: str, candidates: list[str], limit: int = 5) -> list[str]:
    """Candidates resembling target, best first."""
    ranked = sorted(
        ((similarity_score(target, c), c) for c in candidates),
        key=lambda pair: pair[0],
        reverse=True,
    )
    return [c for score, c in ranked if score > 0][:limit]


def get_client(**overrides):
    """Build a BridgeClient from the environment or user config file.

    Prints setup instructions and returns None when no credentials exist.
    """
    from core.client import BridgeClient
    from core.config import USER_CONFIG_FILE, load_bridge_config

    config = load_bridge_config(**overrides)
    if config is None:
        click.echo("Error: No bridge credentials found.", err=True)
        click.echo(f"Set HUE_BRIDGE_IP and HUE_APPLICATION_KEY, or run 'configure' to write {USER_CONFIG_FILE}.")
        return None
    return BridgeClient(config)
