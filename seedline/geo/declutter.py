#!/usr/bin/env python3
"""
Map marker declustering.

Teams from the same club usually resolve to the same coordinates, so their
markers would be drawn on top of each other. Teams are bucketed by rounded
coordinates; inside a bucket each club gets its own latitude row and the
club's teams are spread along the row in rank order. Spacing shrinks as the
map zooms in so markers keep a constant on-screen gap.
"""

import logging
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from seedline.analytics.config import resolve_config
from seedline.analytics.utils_stats import num
from seedline.geo.coordinates import US_CENTER, ClubCoordinateLookup, get_rank_color, state_centroid
from seedline.normalizers.text_normalizer import extract_base_club_name

logger = logging.getLogger(__name__)

# Labels are drawn only when this few markers are in view
LABEL_THRESHOLD = 15

TEAM_LIMITS = {'top10': 10, 'top100': 100, 'all': None}


def marker_spacing(zoom_level: float, config: Optional[Dict[str, Any]] = None) -> float:
    """
    Degree spacing between neighbouring markers at a zoom level.

    Example:
        >>> marker_spacing(10)
        0.008
        >>> marker_spacing(20)
        0.0008
    """
    config = resolve_config(config)
    base = float(config['BASE_SPACING']) * 2 ** (10 - zoom_level)
    return max(float(config['MIN_SPACING']), base)


def location_key(lat: float, lng: float, precision: int = 2) -> str:
    return f"{lat:.{precision}f},{lng:.{precision}f}"


def _centred_offset(index: int, count: int, step: float) -> float:
    if count <= 1:
        return 0.0
    return (index - (count - 1) / 2) * step


def _rank_sort_key(team: Mapping[str, Any]):
    rank = team.get('rank')
    if rank is None or num(rank, default=-1) < 0:
        return (1, 0.0)
    return (0, float(rank))


def declutter(teams: Iterable[Mapping[str, Any]], zoom_level: float,
              config: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
    """
    Compute collision-free display coordinates for map markers.

    Args:
        teams: Team records with lat, lng, club and optionally rank
        zoom_level: Current map zoom
        config: Optional engine config overrides

    Returns:
        Copies of the input records, in input order, with display_lat,
        display_lng and base_club_name added. A team alone in its bucket
        keeps its true coordinates.
    """
    config = resolve_config(config)
    precision = int(config['LOCATION_PRECISION'])
    step = marker_spacing(zoom_level, config) * float(config['SPACING_FACTOR'])

    records = [dict(team) for team in teams]

    # bucket key -> {'lat', 'lng', 'clubs': {base club -> [record index]}}
    buckets: Dict[str, Dict[str, Any]] = {}
    for i, team in enumerate(records):
        lat = num(team.get('lat'), US_CENTER['lat'])
        lng = num(team.get('lng'), US_CENTER['lng'])
        key = location_key(lat, lng, precision)
        bucket = buckets.setdefault(key, {'lat': lat, 'lng': lng, 'clubs': {}})
        base_club = extract_base_club_name(team.get('club'))
        team['base_club_name'] = base_club
        bucket['clubs'].setdefault(base_club, []).append(i)

    for bucket in buckets.values():
        club_names = sorted(bucket['clubs'])
        for club_index, club_name in enumerate(club_names):
            lat_offset = _centred_offset(club_index, len(club_names), step)
            members = sorted(bucket['clubs'][club_name], key=lambda i: _rank_sort_key(records[i]))
            for team_index, i in enumerate(members):
                lng_offset = _centred_offset(team_index, len(members), step)
                records[i]['display_lat'] = bucket['lat'] + lat_offset
                records[i]['display_lng'] = bucket['lng'] + lng_offset

    logger.debug(f"Declustered {len(records)} teams into {len(buckets)} locations at zoom {zoom_level}")
    return records


def limit_teams(teams: List[Mapping[str, Any]], limit: str = 'all') -> List[Mapping[str, Any]]:
    """Apply the map's Top 10 / Top 100 / All selector."""
    if limit not in TEAM_LIMITS:
        raise ValueError(f"Unknown team limit: {limit} (expected one of {list(TEAM_LIMITS)})")
    count = TEAM_LIMITS[limit]
    return list(teams) if count is None else list(teams)[:count]


def position_teams(teams: Iterable[Mapping[str, Any]], zoom_level: float,
                   lookup: Optional[ClubCoordinateLookup] = None,
                   color_fn: Callable[[int, int], str] = get_rank_color,
                   config: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
    """
    Place an ordered team list on the map.

    Each team's map rank is its position in the list. Coordinates come from
    the club lookup, then the team's state centroid, then the continental US
    center.

    Args:
        teams: Ordered team records (e.g. a leaderboard view as dicts)
        zoom_level: Current map zoom
        lookup: Club coordinate lookup (default: empty table)
        color_fn: (rank, total) -> color
        config: Optional engine config overrides

    Returns:
        Positioned teams with rank, color, lat, lng, display_lat, display_lng
        and base_club_name
    """
    teams = list(teams)
    lookup = lookup or ClubCoordinateLookup()
    total = len(teams)

    prepared = []
    for index, team in enumerate(teams):
        record = dict(team)
        coords = lookup.get_team_coordinates(record)
        if coords.get('lat') is None or coords.get('lng') is None:
            coords = state_centroid(record.get('state')) or dict(US_CENTER)
        record['rank'] = index + 1
        record['color'] = color_fn(index + 1, total)
        record['lat'] = coords['lat']
        record['lng'] = coords['lng']
        record['coordinate_source'] = coords.get('source', 'default')
        prepared.append(record)

    return declutter(prepared, zoom_level, config)


def count_in_viewport(positioned: Iterable[Mapping[str, Any]], south: float, west: float,
                      north: float, east: float) -> int:
    """Number of positioned markers inside a lat/lng bounding box."""
    return sum(
        1 for team in positioned
        if south <= num(team.get('display_lat')) <= north and west <= num(team.get('display_lng')) <= east
    )


def should_show_labels(positioned: List[Mapping[str, Any]], bounds: Optional[tuple] = None,
                       threshold: int = LABEL_THRESHOLD) -> bool:
    """
    Whether marker labels fit on screen.

    Args:
        positioned: Output of position_teams
        bounds: (south, west, north, east), or None for all markers
        threshold: Maximum visible markers that still get labels
    """
    visible = len(positioned) if bounds is None else count_in_viewport(positioned, *bounds)
    return visible <= threshold
