#!/usr/bin/env python3
"""
National, state and category rank aggregation.

These ranks ignore the leaderboard filters: a team's national rank is its
position by power score among every team in its age group, regardless of
what the user is currently looking at.
"""

import logging
from typing import Any, Dict, Hashable, List, Union

import pandas as pd

logger = logging.getLogger(__name__)


def _power(teams: pd.DataFrame) -> pd.Series:
    return pd.to_numeric(teams['power_score'], errors='coerce').fillna(0.0)


def compute_cohort_ranks(teams: pd.DataFrame, by: Union[str, List[str]]) -> Dict[Hashable, int]:
    """
    Rank teams by power score within each cohort.

    Args:
        teams: Teams DataFrame with id and power_score columns
        by: Cohort column(s), e.g. 'age_group' or ['age_group', 'state']

    Returns:
        Mapping of team id -> 1-based rank within its cohort. Missing power
        counts as 0; ties keep snapshot order.
    """
    if teams.empty:
        return {}

    by = [by] if isinstance(by, str) else list(by)
    ordered = teams.assign(_power=_power(teams))
    ordered = ordered.sort_values('_power', ascending=False, kind='mergesort')
    ranks = ordered.groupby(by, dropna=False, sort=False).cumcount() + 1
    return {team_id: int(rank) for team_id, rank in zip(ordered['id'], ranks)}


def cohort_sizes(teams: pd.DataFrame, by: Union[str, List[str]]) -> Dict[Any, int]:
    """Number of teams per cohort, for '#7 of 212' style labels."""
    if teams.empty:
        return {}
    keys = by if isinstance(by, str) else list(by)
    sizes = teams.groupby(keys, dropna=False).size()
    return {key: int(count) for key, count in sizes.items()}


def compute_national_ranks(teams: pd.DataFrame) -> Dict[Hashable, int]:
    """
    Rank every team within its age group by power score.

    Example:
        >>> ranks = compute_national_ranks(teams)
        >>> ranks[team_id]
        7
    """
    ranks = compute_cohort_ranks(teams, 'age_group')
    logger.debug(f"Computed national ranks for {len(ranks)} teams")
    return ranks


def compute_state_ranks(teams: pd.DataFrame) -> Dict[Hashable, int]:
    """Rank within age group and state."""
    return compute_cohort_ranks(teams, ['age_group', 'state'])


def compute_category_ranks(teams: pd.DataFrame) -> Dict[Hashable, int]:
    """Rank within age group and league."""
    return compute_cohort_ranks(teams, ['age_group', 'league'])
