"""Game rules and win logic for molehunt.

Everything here is a pure function over player snapshots so that win
conditions are recomputed from current role/status on every call, never
cached.
"""

from collections import Counter
from typing import Dict, Iterable, Optional, Set, Tuple

from molehunt.game.types import Faction, PlayerRole, PlayerState, PlayerStatus


SKIP_TOKENS = {"skip", "none", ""}


def all_tasks_complete(players: Iterable[PlayerState], catalog: Set[str]) -> bool:
    """Check the task victory condition.

    Args:
        players: Every player of the match (any role, any status)
        catalog: Frozen set of task IDs every loyalist must complete

    Returns:
        True iff at least one loyalist is alive, the catalog is not empty,
        and every living loyalist has completed a superset of the catalog
    """
    if not catalog:
        return False

    living_loyalists = [
        p for p in players
        if p.role == PlayerRole.LOYALIST and p.status == PlayerStatus.ALIVE
    ]
    if not living_loyalists:
        return False

    return all(catalog.issubset(p.tasks) for p in living_loyalists)


def check_faction_win(
    alive_loyalists: int,
    alive_moles: int,
) -> Tuple[bool, Optional[Faction], str]:
    """Check if a faction has won by headcount.

    Args:
        alive_loyalists: Number of alive loyalists
        alive_moles: Number of alive moles

    Returns:
        Tuple of (game_over, winning_faction, reason)
    """
    if alive_moles == 0:
        return True, Faction.LOYALISTS, "All moles removed"

    if alive_moles >= alive_loyalists:
        return True, Faction.MOLES, "Moles equal or outnumber loyalists"

    return False, None, ""


def count_alive(players: Iterable[PlayerState]) -> Tuple[int, int]:
    """Return (alive_loyalists, alive_moles)."""
    loyalists = moles = 0
    for p in players:
        if p.status != PlayerStatus.ALIVE:
            continue
        if p.role == PlayerRole.MOLE:
            moles += 1
        else:
            loyalists += 1
    return loyalists, moles


def task_progress_percent(completed: int, catalog_size: int) -> int:
    """Percentage of the catalog a player has completed (0-100)."""
    if catalog_size <= 0:
        return 0
    return min(100, round(completed * 100 / catalog_size))


def normalize_vote_target(target) -> Optional[str]:
    """Accept a player ID, None or "skip" and normalize to ID or None (skip)."""
    if target is None:
        return None
    target = str(target).strip()
    if target.lower() in SKIP_TOKENS:
        return None
    return target


def majority_threshold(n_alive: int) -> int:
    """Votes needed to eject: strictly more than half of the living players."""
    return n_alive // 2 + 1


def tally_votes(
    ballots: Dict[str, Optional[str]],
    n_alive: int,
) -> Tuple[Optional[str], Dict[Optional[str], int]]:
    """Determine who gets ejected.

    Args:
        ballots: Mapping voter_id -> target_id (None = skip)
        n_alive: Number of living players when the council opened

    Returns:
        Tuple of (ejected_player_id or None, vote counts). Nobody is
        ejected on skip plurality, on a tie, or without a majority.
    """
    tally = Counter(ballots.values())
    counts = dict(tally)

    non_skip = {k: v for k, v in tally.items() if k is not None}
    if not non_skip:
        return None, counts

    max_votes = max(non_skip.values())
    top = [k for k, v in non_skip.items() if v == max_votes]

    # Tie among players, or skip got at least as many votes
    if len(top) > 1 or tally.get(None, 0) >= max_votes:
        return None, counts

    if max_votes < majority_threshold(n_alive):
        return None, counts

    return top[0], counts
