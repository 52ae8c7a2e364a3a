#!/usr/bin/env python3
"""
Display rank assignment and search for leaderboard views.

Ranks are assigned to the full filtered-and-sorted view before the search
term is applied, so a team keeps its position when the user searches for it.
"""

import logging

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)


def ranked_mask(teams: pd.DataFrame) -> pd.Series:
    """True for teams in the ranking pool (anything but an explicit False)."""
    if 'is_ranked' not in teams.columns:
        return pd.Series(True, index=teams.index)
    return teams['is_ranked'].map(lambda v: not (isinstance(v, (bool, np.bool_)) and not v)).astype(bool)


def assign_ranks(sorted_filtered: pd.DataFrame) -> pd.DataFrame:
    """
    Number the ranked teams 1..n in their current order.

    Unranked teams get a null display_rank and are moved after every ranked
    team, keeping their relative order. Every row carries total_ranked.

    Args:
        sorted_filtered: Output of filter_and_sort

    Returns:
        Copy with display_rank (nullable Int64) and total_ranked columns
    """
    mask = ranked_mask(sorted_filtered)
    ranked = sorted_filtered[mask].copy()
    unranked = sorted_filtered[~mask].copy()

    total_ranked = len(ranked)
    ranked['display_rank'] = pd.array(range(1, total_ranked + 1), dtype='Int64')
    unranked['display_rank'] = pd.array([pd.NA] * len(unranked), dtype='Int64')

    result = pd.concat([ranked, unranked])
    result['display_rank'] = result['display_rank'].astype('Int64')
    result['total_ranked'] = total_ranked
    return result


def apply_search(ranked: pd.DataFrame, term: str) -> pd.DataFrame:
    """
    Filter a ranked view by a case-insensitive substring of name or club.

    Ranks are never recomputed. An empty or whitespace-only term returns the
    view unchanged.

    Example:
        >>> apply_search(view, "beach")  # keeps display_rank of each match
    """
    if term is None or not str(term).strip():
        return ranked.copy()

    needle = str(term).lower()
    names = ranked['name'].fillna('').astype(str).str.lower()
    clubs = ranked['club'].fillna('').astype(str).str.lower()
    hits = names.str.contains(needle, regex=False) | clubs.str.contains(needle, regex=False)
    logger.debug(f"apply_search({term!r}): {int(hits.sum())} of {len(ranked)} teams")
    return ranked[hits].copy()
