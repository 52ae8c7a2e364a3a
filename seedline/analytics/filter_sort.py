#!/usr/bin/env python3
"""
Leaderboard filtering and sorting.

Applies the conjunctive filters of a FilterState (gender, age group, league,
state) to the teams table and orders the result by the selected column.
Free-text search is applied after rank assignment, see rank_assignment.py.
"""

import logging
from typing import Any, Dict, Optional

import numpy as np
import pandas as pd

from seedline.analytics.config import resolve_config
from seedline.analytics.filter_state import (
    ALL, ALL_NATIONAL, ALL_REGIONAL, RANK_SORT_FIELDS, FilterState
)
from seedline.analytics.utils_stats import safe_divide_series

logger = logging.getLogger(__name__)

GENDER_PREFIX = {'Girls': 'G', 'Boys': 'B'}

# FilterState sort field -> teams column
RANK_SORT_COLUMNS = {'offRank': 'offensive_rank', 'defRank': 'defensive_rank'}


def filter_teams(teams: pd.DataFrame, filters: FilterState, config: Optional[Dict[str, Any]] = None) -> pd.DataFrame:
    """
    Apply the gender, age group, league and state filters.

    Args:
        teams: Teams DataFrame
        filters: Current filter state
        config: Engine config (league tier lists)

    Returns:
        Filtered copy, snapshot order preserved
    """
    config = resolve_config(config)
    mask = pd.Series(True, index=teams.index)

    if filters.gender != ALL:
        prefix = GENDER_PREFIX[filters.gender]
        first_letter = teams['age_group'].fillna('').astype(str).str[:1].str.upper()
        mask &= first_letter == prefix

    if filters.age_group != ALL:
        mask &= teams['age_group'] == filters.age_group

    if filters.league == ALL_NATIONAL:
        mask &= teams['league'].isin(config['NATIONAL_LEAGUES'])
    elif filters.league == ALL_REGIONAL:
        mask &= teams['league'].isin(config['REGIONAL_LEAGUES'])
    elif filters.league != ALL:
        mask &= teams['league'] == filters.league

    if filters.state != ALL:
        mask &= teams['state'] == filters.state

    return teams[mask].copy()


def sort_keys(teams: pd.DataFrame, sort_field: str, config: Optional[Dict[str, Any]] = None) -> pd.DataFrame:
    """
    Compute the numeric sort columns for a sort field.

    Returns a frame of keys in priority order, each oriented so that
    ascending order is the field's natural (desc) order for power/record/gd
    and best-first for the rank fields.
    """
    config = resolve_config(config)

    if sort_field == 'power':
        power = pd.to_numeric(teams['power_score'], errors='coerce').fillna(0.0)
        return pd.DataFrame({'k0': -power}, index=teams.index)

    if sort_field == 'record':
        points = 3 * teams['wins'] + teams['draws']
        ppg = safe_divide_series(points, teams['games_played'])
        return pd.DataFrame(
            {'k0': -ppg, 'k1': -teams['games_played'].astype(float)},
            index=teams.index
        )

    if sort_field == 'gd':
        gd_per_game = safe_divide_series(teams['goal_diff'], teams['games_played'])
        return pd.DataFrame({'k0': -gd_per_game}, index=teams.index)

    if sort_field in RANK_SORT_FIELDS:
        column = RANK_SORT_COLUMNS[sort_field]
        sentinel = float(config['MISSING_RANK_SENTINEL'])
        if column in teams.columns:
            rank = pd.to_numeric(teams[column], errors='coerce')
        else:
            rank = pd.Series(np.nan, index=teams.index)
        # 0 is treated as "no rank" alongside null
        rank = rank.where(rank.notna() & (rank != 0), sentinel)
        return pd.DataFrame({'k0': rank.astype(float)}, index=teams.index)

    raise ValueError(f"Unknown sort field: {sort_field}")


def sort_teams(teams: pd.DataFrame, sort_field: str, sort_direction: str,
               config: Optional[Dict[str, Any]] = None) -> pd.DataFrame:
    """
    Stable sort by the selected column.

    'desc' is the natural order for power/record/gd and 'asc' for the rank
    fields; the other direction reverses every key. Ties keep input order.
    """
    if teams.empty:
        return teams.copy()

    keys = sort_keys(teams, sort_field, config)
    natural = 'asc' if sort_field in RANK_SORT_FIELDS else 'desc'
    if sort_direction != natural:
        keys = -keys

    # lexsort treats the last key as primary
    columns = [keys[c].to_numpy() for c in reversed(keys.columns)]
    order = np.lexsort(columns)
    return teams.iloc[order].copy()


def filter_and_sort(teams: pd.DataFrame, filters: FilterState,
                    config: Optional[Dict[str, Any]] = None) -> pd.DataFrame:
    """
    Filter the teams table and order it for the leaderboard.

    Args:
        teams: Teams DataFrame (not modified)
        filters: Current filter state
        config: Optional engine config overrides

    Returns:
        Filtered and sorted copy

    Example:
        >>> view = filter_and_sort(teams, FilterState(gender='Girls', age_group='G13'))
    """
    filtered = filter_teams(teams, filters, config)
    result = sort_teams(filtered, filters.sort_field, filters.sort_direction, config)
    logger.debug(
        f"filter_and_sort: {len(teams)} -> {len(result)} teams "
        f"(sort={filters.sort_field} {filters.sort_direction})"
    )
    return result
