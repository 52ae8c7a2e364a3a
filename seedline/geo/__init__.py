"""
Map layout for the rankings map: coordinate lookup, rank colors and
marker declustering.
"""

from .coordinates import ClubCoordinateLookup, get_rank_color, get_team_coordinates
from .declutter import declutter, position_teams, count_in_viewport

__all__ = [
    'ClubCoordinateLookup',
    'get_rank_color',
    'get_team_coordinates',
    'declutter',
    'position_teams',
    'count_in_viewport'
]
