"""
Analytics module for the Seedline rankings engine.

This module provides the leaderboard pipeline (filter, sort, rank, search),
national rank aggregation and the match outcome predictor. The predictor
modules (match_predictor, game_performance) are imported by their full path,
since they depend on seedline.identity.
"""

from .config import load_engine_config, resolve_config
from .filter_state import FilterState, default_sort_direction
from .filter_sort import filter_and_sort
from .rank_assignment import assign_ranks, apply_search
from .leaderboard import build_leaderboard
from .national_ranks import compute_national_ranks, compute_state_ranks, compute_category_ranks

__all__ = [
    'load_engine_config',
    'resolve_config',
    'FilterState',
    'default_sort_direction',
    'filter_and_sort',
    'assign_ranks',
    'apply_search',
    'build_leaderboard',
    'compute_national_ranks',
    'compute_state_ranks',
    'compute_category_ranks'
]
