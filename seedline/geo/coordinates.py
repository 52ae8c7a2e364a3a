#!/usr/bin/env python3
"""
Club coordinate lookup and rank colors for the rankings map.

Resolves a team to base map coordinates from the pre-geocoded club address
table, falling back to a state centroid and finally the geographic center of
the continental US, so every team can be placed on the map.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from seedline.analytics.utils_stats import clamp, num, round_half_up
from seedline.normalizers.text_normalizer import normalize_club_name

logger = logging.getLogger(__name__)

US_CENTER = {'lat': 39.8283, 'lng': -98.5795}

STATE_NAME_TO_ABBREV = {
    'alabama': 'AL', 'alaska': 'AK', 'arizona': 'AZ', 'arkansas': 'AR',
    'california': 'CA', 'colorado': 'CO', 'connecticut': 'CT', 'delaware': 'DE',
    'florida': 'FL', 'georgia': 'GA', 'hawaii': 'HI', 'idaho': 'ID',
    'illinois': 'IL', 'indiana': 'IN', 'iowa': 'IA', 'kansas': 'KS',
    'kentucky': 'KY', 'louisiana': 'LA', 'maine': 'ME', 'maryland': 'MD',
    'massachusetts': 'MA', 'michigan': 'MI', 'minnesota': 'MN', 'mississippi': 'MS',
    'missouri': 'MO', 'montana': 'MT', 'nebraska': 'NE', 'nevada': 'NV',
    'new hampshire': 'NH', 'new jersey': 'NJ', 'new mexico': 'NM', 'new york': 'NY',
    'north carolina': 'NC', 'north dakota': 'ND', 'ohio': 'OH', 'oklahoma': 'OK',
    'oregon': 'OR', 'pennsylvania': 'PA', 'rhode island': 'RI', 'south carolina': 'SC',
    'south dakota': 'SD', 'tennessee': 'TN', 'texas': 'TX', 'utah': 'UT',
    'vermont': 'VT', 'virginia': 'VA', 'washington': 'WA', 'west virginia': 'WV',
    'wisconsin': 'WI', 'wyoming': 'WY', 'district of columbia': 'DC',
}

STATE_CENTROIDS = {
    'AL': (32.806671, -86.791130), 'AK': (64.200841, -152.493782),
    'AZ': (33.729759, -111.431221), 'AR': (34.799999, -92.199997),
    'CA': (36.116203, -119.681564), 'CO': (39.059811, -105.311104),
    'CT': (41.597782, -72.755371), 'DC': (38.897438, -77.026817),
    'DE': (39.145, -75.419), 'FL': (27.766279, -81.686783),
    'GA': (33.040619, -83.643074), 'HI': (21.094318, -157.498337),
    'ID': (44.240459, -114.478828), 'IL': (40.349457, -88.986137),
    'IN': (39.849426, -86.258278), 'IA': (42.011539, -93.210526),
    'KS': (38.526600, -96.726486), 'KY': (37.668140, -84.670067),
    'LA': (31.169546, -91.867805), 'ME': (44.693947, -69.381927),
    'MD': (39.063946, -76.802101), 'MA': (42.230171, -71.530106),
    'MI': (43.326618, -84.536095), 'MN': (45.694454, -93.900192),
    'MS': (32.741646, -89.678696), 'MO': (38.456085, -92.288368),
    'MT': (46.921925, -110.454353), 'NE': (41.125370, -98.268082),
    'NV': (38.313515, -117.055374), 'NH': (43.452492, -71.563896),
    'NJ': (40.298904, -74.521011), 'NM': (34.840515, -106.248482),
    'NY': (42.165726, -74.948051), 'NC': (35.630066, -79.806419),
    'ND': (47.528912, -99.784012), 'OH': (40.388783, -82.764915),
    'OK': (35.565342, -96.928917), 'OR': (44.572021, -122.070938),
    'PA': (40.590752, -77.209755), 'RI': (41.680893, -71.511780),
    'SC': (33.856892, -80.945007), 'SD': (44.299782, -99.438828),
    'TN': (35.747845, -86.692345), 'TX': (31.054487, -97.563461),
    'UT': (40.150032, -111.862434), 'VT': (44.045876, -72.710686),
    'VA': (37.769337, -78.169968), 'WA': (47.400902, -121.490494),
    'WV': (38.491226, -80.954456), 'WI': (44.268543, -89.616508),
    'WY': (42.755966, -107.302490),
}

# (position, r, g, b) stops from best (dark green) to worst (dark red)
RANK_COLOR_STOPS = [
    (0.0, 0, 100, 0),
    (0.15, 34, 139, 34),
    (0.30, 154, 205, 50),
    (0.45, 255, 215, 0),
    (0.60, 255, 165, 0),
    (0.75, 255, 69, 0),
    (0.90, 178, 34, 34),
    (1.0, 139, 0, 0),
]


def normalize_state(state: Optional[str]) -> str:
    """Two-letter state code from a code or a full state name."""
    if not state or not isinstance(state, str):
        return ""
    s = state.strip()
    if len(s) == 2:
        return s.upper()
    return STATE_NAME_TO_ABBREV.get(s.lower(), s.upper())


def state_centroid(state: Optional[str]) -> Optional[Dict[str, float]]:
    code = normalize_state(state)
    if code in STATE_CENTROIDS:
        lat, lng = STATE_CENTROIDS[code]
        return {'lat': lat, 'lng': lng}
    return None


def _has_coordinates(address: Mapping[str, Any]) -> bool:
    return bool(num(address.get('lat'))) and bool(num(address.get('lng')))


class ClubCoordinateLookup:
    """
    Club and team address table with fuzzy name resolution.

    The table has the shape ``{"clubs": {name: address}, "teams": {name:
    address}}`` where each address carries ``lat``/``lng`` and optionally
    ``state``, ``city``, ``streetAddress`` and ``zipCode``.
    """

    def __init__(self, addresses: Optional[Dict[str, Any]] = None):
        addresses = addresses or {}
        self.clubs: Dict[str, Dict[str, Any]] = dict(addresses.get('clubs') or {})
        self.teams: Dict[str, Dict[str, Any]] = dict(addresses.get('teams') or {})
        logger.debug(f"Club lookup: {len(self.clubs)} clubs, {len(self.teams)} teams")

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> 'ClubCoordinateLookup':
        """Load the address table from JSON."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Club address file not found: {path}")
        with open(path, 'r', encoding='utf-8') as f:
            addresses = json.load(f)
        lookup = cls(addresses)
        logger.info(f"Loaded club addresses: {len(lookup.clubs)} clubs")
        return lookup

    def get_club_address(self, club_name: Optional[str], team_name: Optional[str]) -> Optional[Dict[str, Any]]:
        """
        Find the address entry for a team.

        Order: exact team name, exact club name, normalized or prefix club
        match, then a prefix match on stored team names.
        """
        if team_name and team_name in self.teams and num(self.teams[team_name].get('lat')):
            return self.teams[team_name]

        if club_name and club_name in self.clubs and num(self.clubs[club_name].get('lat')):
            return self.clubs[club_name]

        if club_name:
            club_lower = club_name.lower()
            club_norm = normalize_club_name(club_name)
            for name, address in self.clubs.items():
                if not num(address.get('lat')):
                    continue
                name_lower = name.lower()
                name_norm = normalize_club_name(name)

                if name_norm == club_norm and len(club_norm) > 3:
                    return address
                if (name_lower.startswith(club_lower) and len(club_lower) > 5) or \
                        (club_lower.startswith(name_lower) and len(name_lower) > 5):
                    return address
                if (name_norm.startswith(club_norm) and len(club_norm) > 4) or \
                        (club_norm.startswith(name_norm) and len(name_norm) > 4):
                    return address

        if team_name:
            team_lower = team_name.lower()
            for name, address in self.teams.items():
                if not num(address.get('lat')):
                    continue
                name_lower = name.lower()
                # Compare on the first 15 characters of the stored name
                if len(name_lower) > 10 and team_lower.startswith(name_lower[:15]):
                    return address

        return None

    def get_team_coordinates(self, team: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Base map coordinates for a team.

        Args:
            team: Team record with name, club and state

        Returns:
            Dictionary with lat, lng and source ('address', 'state' or 'default')
        """
        address = self.get_club_address(team.get('club'), team.get('name'))

        if address and _has_coordinates(address):
            return {'lat': float(address['lat']), 'lng': float(address['lng']), 'source': 'address'}

        if address and address.get('state'):
            centroid = state_centroid(address['state'])
            if centroid:
                return {**centroid, 'source': 'state'}

        centroid = state_centroid(team.get('state'))
        if centroid:
            return {**centroid, 'source': 'state'}

        return {**US_CENTER, 'source': 'default'}

    def get_formatted_address(self, team: Mapping[str, Any]) -> Optional[str]:
        address = self.get_club_address(team.get('club'), team.get('name'))
        if not address:
            return None
        parts = [
            address.get('streetAddress'),
            address.get('city'),
            normalize_state(address.get('state')) or None,
            address.get('zipCode'),
        ]
        parts = [str(p) for p in parts if p]
        return ", ".join(parts) if parts else None


def get_team_coordinates(team: Mapping[str, Any], lookup: Optional[ClubCoordinateLookup] = None) -> Dict[str, Any]:
    """Coordinates for a team, using an empty address table when none is given."""
    return (lookup or ClubCoordinateLookup()).get_team_coordinates(team)


def get_rank_color(rank: int, total: int) -> str:
    """
    Map a rank to a color on a green-to-red gradient.

    Args:
        rank: 1-based rank
        total: Number of ranked teams

    Returns:
        CSS color string

    Example:
        >>> get_rank_color(1, 100)
        'rgb(0, 100, 0)'
        >>> get_rank_color(100, 100)
        'rgb(139, 0, 0)'
    """
    if total <= 1:
        return '#006400'

    position = clamp((rank - 1) / (total - 1), 0.0, 1.0)
    lower, upper = RANK_COLOR_STOPS[0], RANK_COLOR_STOPS[-1]
    for i in range(len(RANK_COLOR_STOPS) - 1):
        if RANK_COLOR_STOPS[i][0] <= position <= RANK_COLOR_STOPS[i + 1][0]:
            lower, upper = RANK_COLOR_STOPS[i], RANK_COLOR_STOPS[i + 1]
            break

    span = upper[0] - lower[0]
    factor = 0.0 if span == 0 else (position - lower[0]) / span
    r, g, b = (round_half_up(lower[c] + (upper[c] - lower[c]) * factor) for c in (1, 2, 3))
    return f"rgb({r}, {g}, {b})"
