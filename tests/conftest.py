#!/usr/bin/env python3
"""
Pytest configuration and fixtures
"""

import json
import pytest
import pandas as pd
import tempfile
import shutil
from pathlib import Path
import sys

# Add project root to path
sys.path.append(str(Path(__file__).parent.parent))

from seedline.io.snapshot_loader import parse_games, parse_snapshot


@pytest.fixture
def sample_snapshot_payload():
    """Small rankings snapshot in the published JSON shape"""
    return {
        'lastUpdated': '2025-10-14T12:00:00Z',
        'rankings': [
            {'id': 0, 'name': 'Beach FC 13G GA', 'club': 'Beach FC', 'ageGroup': 'G13',
             'league': 'GA', 'state': 'CA', 'wins': 10, 'losses': 2, 'draws': 1,
             'goalsFor': 35, 'goalsAgainst': 10, 'goalDiff': 99, 'powerScore': 85.0,
             'offensiveRank': 3, 'defensiveRank': 5, 'isRanked': True,
             'bestWin': 'Solar SC 13G ECNL (3-1)'},
            {'id': 1, 'name': 'Slammers FC 13G ECNL', 'club': 'Slammers FC', 'ageGroup': 'G13',
             'league': 'ECNL', 'state': 'CA', 'wins': 4, 'losses': 8, 'draws': 1,
             'goalsFor': 12, 'goalsAgainst': 25, 'powerScore': 60.0,
             'offensiveRank': 20, 'defensiveRank': 12, 'isRanked': True},
            {'id': 2, 'name': 'Solar SC 13G ECNL', 'club': 'Solar SC', 'ageGroup': 'G13',
             'league': 'ECNL', 'state': 'TX', 'wins': 8, 'losses': 3, 'draws': 2,
             'goalsFor': 28, 'goalsAgainst': 14, 'powerScore': 72.0,
             'offensiveRank': None, 'defensiveRank': 2, 'isRanked': True},
            {'id': 3, 'name': 'Lamorinda SC 13G', 'club': 'Lamorinda SC', 'ageGroup': 'G13',
             'league': 'NPL', 'state': 'CA', 'wins': 0, 'losses': 0, 'draws': 0,
             'goalsFor': 0, 'goalsAgainst': 0, 'powerScore': None, 'isRanked': False},
            {'id': 4, 'name': 'Beach FC 12B GA', 'club': 'Beach FC', 'ageGroup': 'B12',
             'league': 'GA', 'state': 'CA', 'wins': 9, 'losses': 1, 'draws': 2,
             'goalsFor': 30, 'goalsAgainst': 8, 'powerScore': 80.0,
             'offensiveRank': 1, 'defensiveRank': 0, 'isRanked': True},
            {'id': 5, 'name': 'TopHat 13G Gold', 'club': 'TopHat', 'ageGroup': 'G13',
             'league': 'State Cup', 'state': 'GA', 'wins': 6, 'losses': 4, 'draws': 3,
             'goalsFor': 20, 'goalsAgainst': 18, 'powerScore': 72.0},
            {'id': 6, 'name': 'Crossfire Premier 11B ECNL-RL', 'club': 'Crossfire Premier',
             'ageGroup': 'B11', 'league': 'ECNL-RL', 'state': 'WA', 'wins': 5, 'losses': 5,
             'draws': 0, 'goalsFor': 15, 'goalsAgainst': 15, 'powerScore': 55.0,
             'isRanked': None},
        ]
    }


@pytest.fixture
def sample_teams(sample_snapshot_payload):
    """Validated teams DataFrame built from the sample snapshot"""
    teams, _ = parse_snapshot(sample_snapshot_payload)
    return teams


@pytest.fixture
def sample_games_payload():
    """Games feed with past, upcoming and malformed fixtures"""
    return [
        {'homeTeam': 'Beach FC 13G GA', 'awayTeam': 'Slammers FC 13G ECNL', 'homeScore': 3,
         'awayScore': 0, 'date': '2025-09-06', 'league': 'GA', 'ageGroup': 'G13'},
        {'homeTeam': 'Slammers FC 13G ECNL', 'awayTeam': 'Solar SC 13G ECNL', 'homeScore': 2,
         'awayScore': 2, 'date': '2025-09-07', 'league': 'ECNL', 'ageGroup': 'G13'},
        {'homeTeam': 'Solar SC 13G ECNL', 'awayTeam': 'Beach FC 13G', 'homeScore': 1,
         'awayScore': 1, 'date': '2025-09-13'},
        {'homeTeam': 'Beach FC 13G GA', 'awayTeam': 'Mystery United 13G', 'homeScore': 8,
         'awayScore': 0, 'date': '2025-09-20'},
        {'homeTeam': 'Beach FC 13G GA', 'awayTeam': 'TopHat 13G Gold', 'homeScore': None,
         'awayScore': None, 'date': '2099-01-01'},
        {'homeTeam': None, 'awayTeam': 'Nobody FC', 'homeScore': 1, 'awayScore': 0,
         'date': '2025-09-01'},
    ]


@pytest.fixture
def sample_games(sample_games_payload):
    """Validated games DataFrame"""
    return parse_games(sample_games_payload)


@pytest.fixture
def temp_data_dir():
    """Temporary directory for test data"""
    temp_dir = tempfile.mkdtemp()
    yield Path(temp_dir)
    shutil.rmtree(temp_dir)


@pytest.fixture
def sample_snapshot_file(temp_data_dir, sample_snapshot_payload):
    """Rankings snapshot JSON file"""
    file_path = temp_data_dir / 'rankings.json'
    with open(file_path, 'w', encoding='utf-8') as f:
        json.dump(sample_snapshot_payload, f)
    return file_path


@pytest.fixture
def sample_games_file(temp_data_dir, sample_games_payload):
    """Games JSON file"""
    file_path = temp_data_dir / 'games.json'
    with open(file_path, 'w', encoding='utf-8') as f:
        json.dump(sample_games_payload, f)
    return file_path


@pytest.fixture
def large_snapshot_payload():
    """
    500-team directory with exactly 40 G13 girls teams.

    Every seventh G13 team is outside the ranking pool.
    """
    other_groups = ['G12', 'G14', 'B13', 'B12', 'B14', 'G11']
    leagues = ['ECNL', 'GA', 'NPL', 'State Cup']
    states = ['CA', 'TX', 'FL', 'WA', 'NY']
    rankings = []
    for i in range(500):
        age_group = 'G13' if i < 40 else other_groups[i % len(other_groups)]
        rankings.append({
            'id': i,
            'name': f'Team {i} {age_group}',
            'club': f'Club {i % 50}',
            'ageGroup': age_group,
            'league': leagues[i % len(leagues)],
            'state': states[i % len(states)],
            'wins': i % 11,
            'losses': i % 7,
            'draws': i % 3,
            'goalsFor': (i % 11) * 3,
            'goalsAgainst': (i % 7) * 2,
            'powerScore': float((i * 37) % 100),
            'isRanked': not (age_group == 'G13' and i % 7 == 0),
        })
    return {'lastUpdated': '2025-10-14T12:00:00Z', 'rankings': rankings}


@pytest.fixture
def large_teams(large_snapshot_payload):
    teams, _ = parse_snapshot(large_snapshot_payload)
    return teams


@pytest.fixture
def sample_club_addresses():
    """Club address table in the published JSON shape"""
    return {
        'clubs': {
            'Beach FC': {'lat': 33.8, 'lng': -118.3, 'city': 'Torrance', 'state': 'CA',
                         'streetAddress': '1 Beach Way', 'zipCode': '90501'},
            'Slammers FC': {'lat': 33.6, 'lng': -117.9, 'state': 'California'},
            'Ghost SC': {'lat': 30.0, 'lng': None, 'state': 'Texas'},
            'No Coords FC': {'state': 'WA'},
        },
        'teams': {
            'Strikers Elite 13G GA': {'lat': 40.7, 'lng': -74.0, 'state': 'NY'},
            'Slammers FC 13G ECNL': {'lat': 33.65, 'lng': -117.95, 'state': 'CA'},
        }
    }
