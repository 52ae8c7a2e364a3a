#!/usr/bin/env python3
"""
Team identity matching.

Resolves team references that come from outside the current snapshot (game
logs, saved-team lists from a previous session) to rows of the current teams
table. Numeric ids are regenerated on every snapshot load, so matching is
always done by normalized name, age group and club.
"""

import logging
from typing import Any, Dict, Mapping, Optional, Tuple

import pandas as pd

from seedline.analytics.config import resolve_config
from seedline.normalizers.text_normalizer import (
    get_base_club_name, meaningful_words, normalize_team_name
)

logger = logging.getLogger(__name__)

# Shorter name in a containment match must be at least this long
MIN_PARTIAL_MATCH_LENGTH = 8

# A lone shared word must be at least this long to identify a team
MIN_SINGLE_WORD_LENGTH = 5


def _get(record: Mapping[str, Any], *keys: str) -> str:
    for key in keys:
        value = record.get(key)
        if value is not None and not (isinstance(value, float) and pd.isna(value)):
            return str(value)
    return ""


def team_match_key(team: Mapping[str, Any]) -> Tuple[str, str, str]:
    """
    Stable identity key for a team across snapshot reloads.

    Args:
        team: Team record (snake_case or camelCase keys)

    Returns:
        Tuple of (normalized name, lower-case age group, lower-case club)

    Example:
        >>> team_match_key({'name': 'Beach FC 13G GA', 'age_group': 'G13', 'club': 'Beach FC'})
        ('beach fc', 'g13', 'beach fc')
    """
    return (
        normalize_team_name(_get(team, 'name')),
        _get(team, 'age_group', 'ageGroup').strip().lower(),
        _get(team, 'club').strip().lower(),
    )


def create_unranked_opponent(name: str, age_group: str, teams: Optional[pd.DataFrame],
                             config: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Build a placeholder record for an opponent outside the snapshot.

    The placeholder's power is a low quantile of its age group, since teams
    missing from the rankings are usually weaker than ranked ones. It has no
    games, so the predictor treats its scoring as league average.
    """
    config = resolve_config(config)
    power = 0.0
    if teams is not None and not teams.empty:
        cohort = teams[teams['age_group'] == age_group]
        powers = pd.to_numeric(cohort['power_score'], errors='coerce').dropna()
        if not powers.empty:
            power = float(powers.quantile(config['UNRANKED_OPPONENT_QUANTILE']))

    return {
        'id': None,
        'name': name or "",
        'club': "",
        'age_group': age_group or "",
        'league': "",
        'state': "",
        'wins': 0,
        'losses': 0,
        'draws': 0,
        'goals_for': 0,
        'goals_against': 0,
        'goal_diff': 0,
        'games_played': 0,
        'power_score': power,
        'is_ranked': False,
        'is_unranked': True,
    }


def _words_overlap(opp_words, team_words) -> bool:
    matching = [w for w in opp_words if w in team_words]
    if not matching:
        return False
    if len(matching) >= 2:
        return True
    return min(len(opp_words), len(team_words)) == 1 and len(matching[0]) >= MIN_SINGLE_WORD_LENGTH


def find_opponent_in_data(opponent_name: str, age_group: str, teams: Optional[pd.DataFrame],
                          config: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Resolve an opponent name from a game log to a team record.

    Only teams in the same age group are considered. Strategies are tried in
    order and the first hit wins:
    1. Exact name (case-insensitive)
    2. Normalized name (league and age suffixes stripped)
    3. Base club name (club-type word also stripped)
    4. Containment of one normalized name in the other, when the shorter is
       at least 8 characters
    5. Overlap of non-generic words: two shared words, or one shared word of
       5+ characters when either name has a single meaningful word

    Args:
        opponent_name: Name as it appears in the game log
        age_group: Age group of the team whose schedule is being analyzed
        teams: Teams DataFrame
        config: Optional engine config overrides

    Returns:
        Team record as a dict, or an unranked placeholder (is_unranked=True)
    """
    if teams is None or teams.empty or not opponent_name:
        return create_unranked_opponent(opponent_name, age_group, teams, config)

    cohort = teams[teams['age_group'] == age_group]
    if cohort.empty:
        logger.debug(f"No {age_group} teams to match opponent '{opponent_name}'")
        return create_unranked_opponent(opponent_name, age_group, teams, config)

    names = cohort['name'].fillna('').astype(str)
    lowered = names.str.lower()
    normalized = names.map(normalize_team_name)

    opp_lower = opponent_name.lower()
    opp_normalized = normalize_team_name(opponent_name)
    opp_base = get_base_club_name(opponent_name)

    hits = cohort[lowered == opp_lower]
    if hits.empty and opp_normalized:
        hits = cohort[normalized == opp_normalized]
    if hits.empty and opp_base:
        hits = cohort[names.map(get_base_club_name) == opp_base]

    if hits.empty and opp_normalized:
        def contains(team_norm: str) -> bool:
            shorter = min(team_norm, opp_normalized, key=len)
            if len(shorter) < MIN_PARTIAL_MATCH_LENGTH:
                return False
            return opp_normalized in team_norm or team_norm in opp_normalized
        hits = cohort[normalized.map(contains)]

    if hits.empty:
        opp_words = meaningful_words(opponent_name)
        if opp_words:
            overlap = names.map(lambda n: _words_overlap(opp_words, meaningful_words(n)))
            hits = cohort[overlap]

    if hits.empty:
        logger.debug(f"Opponent '{opponent_name}' not found in {age_group}; using unranked placeholder")
        return create_unranked_opponent(opponent_name, age_group, teams, config)

    return hits.iloc[0].to_dict()


def find_team_in_snapshot(saved: Mapping[str, Any], teams: pd.DataFrame) -> Optional[Dict[str, Any]]:
    """
    Find a saved team in the current snapshot.

    Matches on (normalized name, age group, club). A saved record without a
    club matches on name and age group alone, but only when exactly one team
    qualifies. Ids are never consulted.

    Args:
        saved: Team record from an earlier snapshot or a saved list
        teams: Current teams DataFrame

    Returns:
        Matching team as a dict, or None
    """
    if teams is None or teams.empty:
        return None

    name_key, age_key, club_key = team_match_key(saved)
    if not name_key:
        return None

    team_names = teams['name'].fillna('').astype(str).map(normalize_team_name)
    team_ages = teams['age_group'].fillna('').astype(str).str.strip().str.lower()
    candidates = teams[(team_names == name_key) & (team_ages == age_key)]

    if club_key:
        team_clubs = candidates['club'].fillna('').astype(str).str.strip().str.lower()
        candidates = candidates[team_clubs == club_key]
    elif len(candidates) > 1:
        logger.debug(f"Saved team '{saved.get('name')}' has no club and matches {len(candidates)} teams")
        return None

    if candidates.empty:
        return None
    return candidates.iloc[0].to_dict()
