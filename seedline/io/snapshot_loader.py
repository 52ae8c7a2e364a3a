#!/usr/bin/env python3
"""
Snapshot loading for the Seedline engine.

Reads the rankings snapshot (``{"rankings": [...], "lastUpdated": ...}``) and
the games feed (a JSON array) into validated DataFrames with snake_case
columns. This is the only place the engine touches disk for season data.
"""

import json
import logging
from datetime import date
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import pandas as pd

from seedline.schema.snapshot_schema import (
    GameSchema, SnapshotFormatError, TeamSnapshotSchema, validate_dataframe
)

logger = logging.getLogger(__name__)

TEAM_COLUMN_MAPPING = {
    'ageGroup': 'age_group',
    'goalsFor': 'goals_for',
    'goalsAgainst': 'goals_against',
    'goalDiff': 'goal_diff',
    'gamesPlayed': 'games_played',
    'powerScore': 'power_score',
    'offensiveRank': 'offensive_rank',
    'offensivePowerScore': 'offensive_power_score',
    'defensiveRank': 'defensive_rank',
    'defensivePowerScore': 'defensive_power_score',
    'isRanked': 'is_ranked',
    'bestWin': 'best_win',
    'secondBestWin': 'second_best_win',
    'worstLoss': 'worst_loss',
    'secondWorstLoss': 'second_worst_loss',
}

GAME_COLUMN_MAPPING = {
    'homeTeam': 'home_team',
    'awayTeam': 'away_team',
    'homeScore': 'home_score',
    'awayScore': 'away_score',
    'ageGroup': 'age_group',
}

STRING_COLUMNS = ['name', 'club', 'age_group', 'league', 'state']
COUNT_COLUMNS = ['wins', 'losses', 'draws', 'goals_for', 'goals_against']
RATING_COLUMNS = [
    'power_score', 'offensive_rank', 'offensive_power_score',
    'defensive_rank', 'defensive_power_score'
]
NARRATIVE_COLUMNS = ['best_win', 'second_best_win', 'worst_loss', 'second_worst_loss']

GAME_COLUMNS = ['home_team', 'away_team', 'home_score', 'away_score', 'date', 'league', 'age_group']


def _read_json(path: Union[str, Path]) -> Any:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Snapshot file not found: {path}")
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)


def _ranked_flag(value: Any) -> bool:
    # Only an explicit false excludes a team from the ranking pool
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip().lower() not in ('false', '0', 'no')
    try:
        if pd.isna(value):
            return True
    except (TypeError, ValueError):
        pass
    return bool(value)


def normalize_team_frame(raw: pd.DataFrame) -> pd.DataFrame:
    """
    Map snapshot columns to the engine schema and fill soft defaults.

    Missing strings become "", missing counts become 0, missing ratings stay
    NaN, and a missing ``is_ranked`` means ranked. ``goal_diff`` and
    ``games_played`` are always recomputed; disagreeing snapshot values are
    logged.

    Args:
        raw: DataFrame built from the ``rankings`` array

    Returns:
        Normalized DataFrame (not yet schema-validated)
    """
    df = raw.rename(columns=TEAM_COLUMN_MAPPING).copy()

    if 'id' not in df.columns:
        df['id'] = range(len(df))
    df['id'] = df['id'].where(df['id'].notna(), pd.Series(range(len(df)), index=df.index))

    for col in STRING_COLUMNS:
        if col not in df.columns:
            df[col] = ""
        df[col] = df[col].where(df[col].notna(), "").astype(str).str.strip()

    for col in COUNT_COLUMNS:
        if col not in df.columns:
            df[col] = 0
        df[col] = pd.to_numeric(df[col], errors='coerce').fillna(0).astype(int)

    for col in RATING_COLUMNS:
        if col not in df.columns:
            df[col] = float('nan')
        df[col] = pd.to_numeric(df[col], errors='coerce').astype(float)

    for col in NARRATIVE_COLUMNS:
        if col not in df.columns:
            df[col] = None

    if 'is_ranked' not in df.columns:
        df['is_ranked'] = True
    df['is_ranked'] = df['is_ranked'].map(_ranked_flag).astype(bool)

    goal_diff = df['goals_for'] - df['goals_against']
    games_played = df['wins'] + df['losses'] + df['draws']

    for col, derived in (('goal_diff', goal_diff), ('games_played', games_played)):
        if col in df.columns:
            provided = pd.to_numeric(df[col], errors='coerce')
            mismatched = provided.notna() & (provided != derived)
            if mismatched.any():
                logger.warning(f"Recomputed {col} for {int(mismatched.sum())} teams with inconsistent snapshot values")
        df[col] = derived.astype(int)

    return df


def parse_snapshot(payload: Any) -> Tuple[pd.DataFrame, Optional[str]]:
    """
    Parse a rankings snapshot payload.

    Args:
        payload: Decoded JSON object with a ``rankings`` array

    Returns:
        Tuple of (validated teams DataFrame, lastUpdated string or None)

    Raises:
        SnapshotFormatError: If the payload shape is wrong or validation fails
    """
    if not isinstance(payload, dict):
        raise SnapshotFormatError(f"Snapshot must be a JSON object, got {type(payload).__name__}")

    rankings = payload.get('rankings')
    if not isinstance(rankings, list):
        raise SnapshotFormatError("Snapshot 'rankings' must be a list")

    bad_rows = [i for i, r in enumerate(rankings) if not isinstance(r, dict)]
    if bad_rows:
        raise SnapshotFormatError(f"Snapshot 'rankings' contains non-object entries at {bad_rows[:5]}")

    last_updated = payload.get('lastUpdated')

    if not rankings:
        logger.warning("Snapshot contains no teams")

    teams = normalize_team_frame(pd.DataFrame.from_records(rankings))
    teams = validate_dataframe(teams, TeamSnapshotSchema)

    ranked = int(teams['is_ranked'].sum()) if len(teams) else 0
    logger.info(f"Loaded {len(teams)} teams ({ranked} ranked), lastUpdated={last_updated}")
    return teams.reset_index(drop=True), last_updated


def parse_games(payload: Any) -> pd.DataFrame:
    """
    Parse a games payload (a JSON array of fixtures).

    Rows without both team names or with an unparseable date are dropped
    with a warning.

    Raises:
        SnapshotFormatError: If the payload is not a list of objects
    """
    if isinstance(payload, dict) and isinstance(payload.get('games'), list):
        payload = payload['games']
    if not isinstance(payload, list):
        raise SnapshotFormatError(f"Games payload must be a list, got {type(payload).__name__}")
    if any(not isinstance(g, dict) for g in payload):
        raise SnapshotFormatError("Games payload contains non-object entries")

    df = pd.DataFrame.from_records(payload).rename(columns=GAME_COLUMN_MAPPING)
    for col in GAME_COLUMNS:
        if col not in df.columns:
            df[col] = None

    df['league'] = df['league'].where(df['league'].notna(), "")
    df['age_group'] = df['age_group'].where(df['age_group'].notna(), "")
    df['home_score'] = pd.to_numeric(df['home_score'], errors='coerce')
    df['away_score'] = pd.to_numeric(df['away_score'], errors='coerce')

    # Plain dates and timestamps can be mixed in one feed
    parsed_dates = pd.to_datetime(df['date'], errors='coerce', format='ISO8601', utc=True)
    df['date'] = parsed_dates.dt.strftime('%Y-%m-%d')

    initial_count = len(df)
    df = df.dropna(subset=['home_team', 'away_team', 'date'])
    if len(df) < initial_count:
        logger.warning(f"Dropped {initial_count - len(df)} games with missing teams or invalid dates")

    df = validate_dataframe(df, GameSchema)
    logger.info(f"Loaded {len(df)} games")
    return df.reset_index(drop=True)


def load_snapshot(path: Union[str, Path]) -> Tuple[pd.DataFrame, Optional[str]]:
    """Load and validate a rankings snapshot JSON file."""
    logger.info(f"Loading rankings snapshot from {path}")
    return parse_snapshot(_read_json(path))


def load_games(path: Union[str, Path]) -> pd.DataFrame:
    """Load and validate a games JSON file."""
    logger.info(f"Loading games from {path}")
    return parse_games(_read_json(path))


def split_games(games: pd.DataFrame, today: Optional[date] = None) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """
    Split fixtures into past and upcoming games.

    A game is past when its date is on or before ``today`` and both scores
    are present; everything else is upcoming.

    Args:
        games: Games DataFrame
        today: Reference date (default: date.today())

    Returns:
        Tuple of (past, upcoming) DataFrames
    """
    if games.empty:
        return games.copy(), games.copy()

    today = today or date.today()
    game_dates = pd.to_datetime(games['date'], errors='coerce')
    is_past = (
        game_dates.notna()
        & (game_dates <= pd.Timestamp(today))
        & games['home_score'].notna()
        & games['away_score'].notna()
    )
    return games[is_past].copy(), games[~is_past].copy()


def snapshot_summary(teams: pd.DataFrame) -> Dict[str, Any]:
    """Summary counts for logging and the CLI."""
    return {
        'total_teams': len(teams),
        'ranked_teams': int(teams['is_ranked'].sum()) if len(teams) else 0,
        'age_groups': teams['age_group'].nunique() if len(teams) else 0,
        'leagues': teams['league'].nunique() if len(teams) else 0,
    }
