#!/usr/bin/env python3
"""
Team Directory - read-only holder of one season snapshot.

A TeamDirectory wraps the teams and games tables from a single snapshot load
and owns the memoization boundary for derived views: national ranks are
computed once per snapshot and leaderboards are cached by the exact
(version, FilterState) value.
"""

import logging
import uuid
from collections import OrderedDict
from pathlib import Path
from typing import Any, Dict, Hashable, List, Optional, Union

import pandas as pd

from seedline.analytics.config import resolve_config
from seedline.analytics.filter_sort import GENDER_PREFIX
from seedline.analytics.filter_state import FilterState
from seedline.analytics.leaderboard import build_leaderboard
from seedline.analytics.national_ranks import compute_national_ranks
from seedline.io.snapshot_loader import GAME_COLUMNS, load_games, load_snapshot


class TeamDirectory:
    """
    Immutable snapshot of teams and games for one season load.

    Every accessor returns a copy, so callers can never mutate the snapshot
    or a cached view.
    """

    def __init__(self, teams: pd.DataFrame, games: Optional[pd.DataFrame] = None,
                 last_updated: Optional[str] = None, config: Optional[Dict[str, Any]] = None):
        """
        Initialize the directory.

        Args:
            teams: Validated teams DataFrame
            games: Validated games DataFrame (optional)
            last_updated: Snapshot timestamp
            config: Optional engine config overrides
        """
        self._teams = teams.copy().reset_index(drop=True)
        self._games = games.copy().reset_index(drop=True) if games is not None else pd.DataFrame(columns=GAME_COLUMNS)
        self.last_updated = last_updated
        self.config = resolve_config(config)

        # Unique per load, even when two snapshots share a timestamp
        self._version = f"{last_updated or 'unversioned'}-{uuid.uuid4().hex[:8]}"

        self._national_ranks: Optional[Dict[Hashable, int]] = None
        self._leaderboard_cache: "OrderedDict[tuple, pd.DataFrame]" = OrderedDict()

        self.logger = logging.getLogger(__name__)
        self.logger.info(f"TeamDirectory {self._version}: {len(self._teams)} teams, {len(self._games)} games")

    # ============================================================================
    # SNAPSHOT ACCESS
    # ============================================================================

    @property
    def version(self) -> str:
        return self._version

    @property
    def teams(self) -> pd.DataFrame:
        return self._teams.copy()

    @property
    def games(self) -> pd.DataFrame:
        return self._games.copy()

    def __len__(self) -> int:
        return len(self._teams)

    def _distinct(self, column: str) -> List[str]:
        values = self._teams[column].dropna().astype(str)
        return sorted(v for v in values.unique() if v.strip())

    @property
    def age_groups(self) -> List[str]:
        return self._distinct('age_group')

    @property
    def leagues(self) -> List[str]:
        return self._distinct('league')

    @property
    def states(self) -> List[str]:
        return self._distinct('state')

    def age_groups_for_gender(self, gender: str) -> List[str]:
        """
        Age groups available for a gender filter value.

        Args:
            gender: 'Girls', 'Boys' or 'ALL'

        Returns:
            Sorted age groups whose first letter matches the gender
        """
        prefix = GENDER_PREFIX.get(gender)
        if prefix is None:
            return self.age_groups
        return [a for a in self.age_groups if a[:1].upper() == prefix]

    # ============================================================================
    # DERIVED VIEWS
    # ============================================================================

    def national_ranks(self) -> Dict[Hashable, int]:
        """National rank of every team, computed once per snapshot."""
        if self._national_ranks is None:
            self._national_ranks = compute_national_ranks(self._teams)
        return dict(self._national_ranks)

    def leaderboard(self, filters: FilterState) -> pd.DataFrame:
        """
        Leaderboard view for a filter state, memoized by exact value.

        Args:
            filters: Filter state (compared by value, never by identity)

        Returns:
            Copy of the cached leaderboard frame
        """
        key = (self._version, filters)
        cached = self._leaderboard_cache.get(key)
        if cached is not None:
            self._leaderboard_cache.move_to_end(key)
            return cached.copy()

        view = build_leaderboard(self._teams, filters, self.config)
        self._leaderboard_cache[key] = view
        max_size = int(self.config['LEADERBOARD_CACHE_SIZE'])
        while len(self._leaderboard_cache) > max_size:
            self._leaderboard_cache.popitem(last=False)
        return view.copy()

    def clear_cache(self) -> None:
        self._leaderboard_cache.clear()
        self._national_ranks = None

    def get_summary(self) -> Dict[str, Any]:
        """Summary of the loaded snapshot."""
        return {
            'version': self._version,
            'last_updated': self.last_updated,
            'total_teams': len(self._teams),
            'ranked_teams': int(self._teams['is_ranked'].sum()) if len(self._teams) else 0,
            'total_games': len(self._games),
            'age_groups': len(self.age_groups),
            'leagues': len(self.leagues),
            'states': len(self.states),
        }


def load_directory(rankings_path: Union[str, Path], games_path: Optional[Union[str, Path]] = None,
                   config: Optional[Dict[str, Any]] = None) -> TeamDirectory:
    """
    Load a TeamDirectory from snapshot files.

    Args:
        rankings_path: Rankings snapshot JSON
        games_path: Games JSON (optional)
        config: Optional engine config overrides

    Returns:
        TeamDirectory for the loaded snapshot
    """
    teams, last_updated = load_snapshot(rankings_path)
    games = load_games(games_path) if games_path else None
    return TeamDirectory(teams, games, last_updated, config)
