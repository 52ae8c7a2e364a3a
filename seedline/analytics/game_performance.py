#!/usr/bin/env python3
"""
Retrospective game performance ranking.

Scores each completed game of a team against the prediction that would have
been made before kickoff, then ranks the season's games by that score. A
narrow loss to a much stronger opponent can outrank a blowout win against a
much weaker one. Upcoming games are previewed with the same predictor.
"""

import logging
from datetime import date
from typing import Any, Dict, Mapping, Optional

import pandas as pd

from seedline.analytics.config import resolve_config
from seedline.analytics.match_predictor import PredictionResult, predict_game
from seedline.analytics.utils_stats import clamp
from seedline.identity.team_matcher import find_opponent_in_data
from seedline.io.snapshot_loader import split_games
from seedline.normalizers.text_normalizer import normalize_league, normalize_team_name

logger = logging.getLogger(__name__)

BASE_SCORE = 50.0
GOAL_DIFF_WEIGHT = 12.0
UPSET_WIN_BONUS = 15.0
UPSET_DRAW_BONUS = 10.0

PERFORMANCE_COLUMNS = [
    'opponent', 'is_home', 'team_score', 'opponent_score', 'actual_goal_diff',
    'expected_goal_diff', 'performance_diff', 'performance_score',
    'performance_label', 'outperformed', 'opponent_power_score',
    'opponent_is_unranked', 'performance_rank', 'total_games'
]

UPCOMING_COLUMNS = [
    'opponent', 'is_home', 'opponent_power_score', 'opponent_is_unranked',
    'team_win_probability', 'draw_probability', 'team_loss_probability',
    'predicted_team_score', 'predicted_opponent_score', 'prediction'
]


def performance_label(performance_diff: float) -> str:
    if performance_diff >= 2:
        return 'Greatly Outperformed'
    if performance_diff >= 1:
        return 'Outperformed'
    if performance_diff > -1:
        return 'Met Expectations'
    if performance_diff > -2:
        return 'Underperformed'
    return 'Greatly Underperformed'


def performance_color(score: float) -> str:
    """Display color for a performance score."""
    if score >= 70:
        return '#2e7d32'
    if score >= 55:
        return '#558b2f'
    if score >= 45:
        return '#827717'
    if score >= 35:
        return '#ef6c00'
    return '#c62828'


def analyze_game_performance(game: Mapping[str, Any], prediction: PredictionResult, is_home: bool) -> Dict[str, Any]:
    """
    Compare a game's result to its prediction.

    The score starts at 50 and moves 12 points per goal of difference between
    the actual and expected goal differential, with a bonus (or penalty) when
    the result flips the expected outcome. It is clamped to 0-100.

    Args:
        game: Completed game record (home_score/away_score present)
        prediction: Pre-game prediction with the game's home team as home
        is_home: Whether the analyzed team was the home side

    Returns:
        Dictionary of scores and labels from the analyzed team's perspective
    """
    team_score = int(game['home_score'] if is_home else game['away_score'])
    opponent_score = int(game['away_score'] if is_home else game['home_score'])
    actual_gd = team_score - opponent_score
    expected_gd = prediction.expected_goal_diff if is_home else -prediction.expected_goal_diff
    performance_diff = actual_gd - expected_gd

    score = BASE_SCORE + GOAL_DIFF_WEIGHT * performance_diff
    if actual_gd > 0 and expected_gd <= 0:
        score += UPSET_WIN_BONUS
    elif actual_gd == 0 and expected_gd < 0:
        score += UPSET_DRAW_BONUS
    elif actual_gd < 0 and expected_gd >= 0:
        score -= UPSET_WIN_BONUS
    elif actual_gd == 0 and expected_gd > 0:
        score -= UPSET_DRAW_BONUS
    score = clamp(score, 0.0, 100.0)

    return {
        'team_score': team_score,
        'opponent_score': opponent_score,
        'actual_goal_diff': actual_gd,
        'expected_goal_diff': round(expected_gd, 2),
        'performance_diff': round(performance_diff, 2),
        'performance_score': round(score, 1),
        'performance_label': performance_label(performance_diff),
        'outperformed': performance_diff > 0,
    }


def _team_side(game: Mapping[str, Any], team_name: str) -> Optional[bool]:
    """True if the team is home, False if away, None if not in the game."""
    if normalize_team_name(game.get('home_team')) == team_name:
        return True
    if normalize_team_name(game.get('away_team')) == team_name:
        return False
    return None


def _text(value: Any) -> str:
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return ''
    return str(value).strip()


def select_team_games(games: pd.DataFrame, team: Mapping[str, Any]) -> pd.DataFrame:
    """
    Select the games a team played, with the side it played on.

    Team names are compared after normalization, which drops age and league
    suffixes, so a club's sibling teams share a name. A game is kept only
    when its league and age group also agree with the team's. A game with no
    league or no age group recorded is not excluded on that field.

    Args:
        games: Games DataFrame
        team: Team record (name, league, age_group)

    Returns:
        Copy of the matching games in input order with an added boolean
        ``is_home`` column
    """
    if games is None or games.empty:
        return pd.DataFrame(columns=list(getattr(games, 'columns', [])) + ['is_home'])

    team_name = normalize_team_name(team.get('name'))
    team_league = normalize_league(_text(team.get('league')))
    team_age = _text(team.get('age_group')).upper()

    sides = []
    for _, game in games.iterrows():
        is_home = _team_side(game, team_name)
        if is_home is not None:
            game_league = normalize_league(_text(game.get('league')))
            if game_league and game_league != team_league:
                is_home = None
        if is_home is not None:
            game_age = _text(game.get('age_group')).upper()
            if game_age and game_age != team_age:
                is_home = None
        sides.append(is_home)

    mask = pd.Series([side is not None for side in sides], index=games.index)
    selected = games[mask].copy()
    selected['is_home'] = [side for side in sides if side is not None]
    logger.debug(f"Selected {len(selected)} of {len(games)} games for {team.get('name')}")
    return selected


def rank_games_by_performance(games: pd.DataFrame, team: Mapping[str, Any],
                              all_teams: Optional[pd.DataFrame] = None,
                              today: Optional[date] = None,
                              config: Optional[Dict[str, Any]] = None) -> pd.DataFrame:
    """
    Rank a team's completed games from best to worst performance.

    Args:
        games: Games DataFrame (any mix of teams; past and upcoming)
        team: The team record whose season is analyzed
        all_teams: Full teams table for opponent lookup and league averages
        today: Reference date for completed games (default: date.today())
        config: Optional engine config overrides

    Returns:
        DataFrame of the team's completed games with the game columns plus
        PERFORMANCE_COLUMNS, ordered by performance_rank (1 = best)

    Example:
        >>> ranked = rank_games_by_performance(games, team, teams)
        >>> ranked[['opponent', 'performance_score', 'performance_rank']].head()
    """
    config = resolve_config(config)
    if games is None or games.empty:
        return pd.DataFrame(columns=PERFORMANCE_COLUMNS)

    past, _ = split_games(games, today)
    past = select_team_games(past, team).sort_values('date', kind='mergesort')

    age_group = team.get('age_group')
    rows = []
    for _, game in past.iterrows():
        is_home = bool(game['is_home'])
        opponent_name = game['away_team'] if is_home else game['home_team']
        opponent = find_opponent_in_data(opponent_name, age_group, all_teams, config)
        prediction = (
            predict_game(team, opponent, all_teams, config) if is_home
            else predict_game(opponent, team, all_teams, config)
        )

        row = game.to_dict()
        row.update(analyze_game_performance(game, prediction, is_home))
        row.update({
            'opponent': opponent_name,
            'is_home': is_home,
            'opponent_power_score': opponent.get('power_score'),
            'opponent_is_unranked': bool(opponent.get('is_unranked', False)),
            'prediction': prediction,
        })
        rows.append(row)

    if not rows:
        logger.info(f"No completed games found for {team.get('name')}")
        return pd.DataFrame(columns=PERFORMANCE_COLUMNS)

    ranked = pd.DataFrame(rows).sort_values('performance_score', ascending=False, kind='mergesort')
    ranked = ranked.reset_index(drop=True)
    ranked['performance_rank'] = range(1, len(ranked) + 1)
    ranked['total_games'] = len(ranked)
    logger.debug(f"Ranked {len(ranked)} games for {team.get('name')}")
    return ranked


def predict_upcoming_games(games: pd.DataFrame, team: Mapping[str, Any],
                           all_teams: Optional[pd.DataFrame] = None,
                           today: Optional[date] = None,
                           config: Optional[Dict[str, Any]] = None) -> pd.DataFrame:
    """
    Predict each of a team's upcoming games from the team's perspective.

    Args:
        games: Games DataFrame (any mix of teams; past and upcoming)
        team: The team record whose schedule is predicted
        all_teams: Full teams table for opponent lookup and league averages
        today: Reference date (default: date.today())
        config: Optional engine config overrides

    Returns:
        DataFrame of the team's upcoming games with the game columns plus
        UPCOMING_COLUMNS, soonest first
    """
    config = resolve_config(config)
    if games is None or games.empty:
        return pd.DataFrame(columns=UPCOMING_COLUMNS)

    _, upcoming = split_games(games, today)
    upcoming = select_team_games(upcoming, team).sort_values('date', kind='mergesort')

    age_group = team.get('age_group')
    rows = []
    for _, game in upcoming.iterrows():
        is_home = bool(game['is_home'])
        opponent_name = game['away_team'] if is_home else game['home_team']
        opponent = find_opponent_in_data(opponent_name, age_group, all_teams, config)
        if is_home:
            prediction = predict_game(team, opponent, all_teams, config)
            win, loss = prediction.home_win_probability, prediction.away_win_probability
            team_score, opponent_score = prediction.predicted_home_score, prediction.predicted_away_score
        else:
            prediction = predict_game(opponent, team, all_teams, config)
            win, loss = prediction.away_win_probability, prediction.home_win_probability
            team_score, opponent_score = prediction.predicted_away_score, prediction.predicted_home_score

        row = game.to_dict()
        row.update({
            'opponent': opponent_name,
            'is_home': is_home,
            'opponent_power_score': opponent.get('power_score'),
            'opponent_is_unranked': bool(opponent.get('is_unranked', False)),
            'team_win_probability': win,
            'draw_probability': prediction.draw_probability,
            'team_loss_probability': loss,
            'predicted_team_score': team_score,
            'predicted_opponent_score': opponent_score,
            'prediction': prediction,
        })
        rows.append(row)

    if not rows:
        logger.info(f"No upcoming games found for {team.get('name')}")
        return pd.DataFrame(columns=UPCOMING_COLUMNS)

    logger.debug(f"Predicted {len(rows)} upcoming games for {team.get('name')}")
    return pd.DataFrame(rows).reset_index(drop=True)
