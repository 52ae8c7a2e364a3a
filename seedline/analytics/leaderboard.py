#!/usr/bin/env python3
"""
Leaderboard Builder

Runs the leaderboard pipeline for one filter state:

    filter_and_sort -> assign_ranks -> apply_search

and, from the command line, prints or exports the resulting view together
with each team's national rank.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import pandas as pd

from seedline.analytics.config import load_engine_config
from seedline.analytics.filter_sort import filter_and_sort
from seedline.analytics.filter_state import (
    ALL, GENDERS, SORT_DIRECTIONS, SORT_FIELDS, FilterState, default_sort_direction
)
from seedline.analytics.national_ranks import compute_national_ranks
from seedline.analytics.rank_assignment import apply_search, assign_ranks
from seedline.io.snapshot_loader import load_snapshot, snapshot_summary
from seedline.utils.logger import LOG_FORMAT, get_logger

logger = logging.getLogger(__name__)

DISPLAY_COLUMNS = [
    'display_rank', 'national_rank', 'name', 'club', 'age_group', 'league',
    'state', 'wins', 'losses', 'draws', 'goal_diff', 'power_score', 'total_ranked'
]


def build_leaderboard(teams: pd.DataFrame, filters: FilterState,
                      config: Optional[Dict[str, Any]] = None) -> pd.DataFrame:
    """
    Build the leaderboard view for a filter state.

    Ranks are assigned before the search term is applied, so a searched team
    shows the same display_rank it has in the unsearched view.

    Args:
        teams: Teams DataFrame
        filters: Filter state
        config: Optional engine config overrides

    Returns:
        Filtered, sorted, ranked and searched copy of the teams
    """
    ranked = assign_ranks(filter_and_sort(teams, filters, config))
    return apply_search(ranked, filters.search)


def add_national_ranks(view: pd.DataFrame, teams: pd.DataFrame) -> pd.DataFrame:
    """Attach the filter-independent national rank to a leaderboard view."""
    ranks = compute_national_ranks(teams)
    result = view.copy()
    result['national_rank'] = pd.array([ranks.get(i) for i in result['id']], dtype='Int64')
    return result


def format_leaderboard(view: pd.DataFrame, limit: Optional[int] = None) -> pd.DataFrame:
    columns = [c for c in DISPLAY_COLUMNS if c in view.columns]
    formatted = view[columns]
    if limit:
        formatted = formatted.head(limit)
    return formatted.reset_index(drop=True)


def main():
    """CLI entry point for leaderboard export."""
    parser = argparse.ArgumentParser(description="Build a filtered team leaderboard from a rankings snapshot")
    parser.add_argument("--snapshot", type=str, required=True,
                       help="Path to rankings snapshot JSON")
    parser.add_argument("--gender", type=str, default=ALL, choices=GENDERS,
                       help="Gender filter (default: ALL)")
    parser.add_argument("--age-group", type=str, default=ALL,
                       help="Age group filter, e.g. G13 (default: ALL)")
    parser.add_argument("--league", type=str, default=ALL,
                       help="League filter, ALL_NATIONAL or ALL_REGIONAL (default: ALL)")
    parser.add_argument("--state", type=str, default=ALL,
                       help="State filter (default: ALL)")
    parser.add_argument("--search", type=str, default="",
                       help="Search team and club names")
    parser.add_argument("--sort-field", type=str, default='power', choices=SORT_FIELDS,
                       help="Sort column (default: power)")
    parser.add_argument("--sort-direction", type=str, choices=SORT_DIRECTIONS,
                       help="Sort direction (default depends on the sort column)")
    parser.add_argument("--limit", type=int, help="Only show the first N teams")
    parser.add_argument("--output", type=str, help="Write the leaderboard to this CSV path")
    parser.add_argument("--config", type=str, help="Path to engine config YAML")
    parser.add_argument("--log-file", type=str, help="Also write logs to this file")

    args = parser.parse_args()

    if args.log_file:
        get_logger(args.log_file)
    else:
        logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)

    try:
        config = load_engine_config(args.config)
        teams, last_updated = load_snapshot(args.snapshot)
        logger.info(f"Snapshot summary: {snapshot_summary(teams)}")

        filters = FilterState(
            age_group=args.age_group,
            league=args.league,
            state=args.state,
            gender=args.gender,
            search=args.search,
            sort_field=args.sort_field,
            sort_direction=args.sort_direction or default_sort_direction(args.sort_field),
        )

        view = add_national_ranks(build_leaderboard(teams, filters, config), teams)
        output = format_leaderboard(view, args.limit)

        if args.output:
            output_path = Path(args.output)
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output.to_csv(output_path, index=False)
            print(f"Leaderboard exported to: {output_path}")
        else:
            print(f"\nLeaderboard ({len(view)} teams, snapshot {last_updated or 'unknown'}):")
            if output.empty:
                print("No teams match the current filters")
            else:
                print(output.to_string(index=False))

    except Exception as e:
        logger.exception(f"Leaderboard build failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
