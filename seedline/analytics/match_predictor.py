#!/usr/bin/env python3
"""
Match Outcome Predictor

Predicts win/draw/loss probabilities and a scoreline for a game between two
teams from their power scores and season records.

Model:
1. Effective power difference = home power - away power, plus an age
   adjustment when the teams come from different birth years
2. Home expected share e = logistic((diff + home advantage) / scale)
3. Draw mass D * (1 - |2e - 1|), where D is the teams' average draw rate,
   taken out of both sides equally
4. Each outcome floored at PROBABILITY_FLOOR and rounded to integer
   percentages that sum to exactly 100
5. Expected goals from attack/defence multipliers relative to the league
   scoring average, nudged by the power difference and by each side's
   offensive rating against the other side's defensive rating
"""

import argparse
import json
import logging
import re
import sys
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

import pandas as pd

from seedline.analytics.config import load_engine_config, resolve_config
from seedline.analytics.utils_stats import (
    apply_probability_floor, clamp, field, logistic, round_half_up,
    safe_divide, to_integer_percentages
)
from seedline.identity.team_matcher import find_opponent_in_data
from seedline.io.snapshot_loader import load_snapshot
from seedline.utils.logger import LOG_FORMAT, get_logger

logger = logging.getLogger(__name__)

HIGH_CONFIDENCE = 85
LOW_CONFIDENCE = 60

FULL_YEAR_RE = re.compile(r"[GB]?(20\d{2})[GB]?", re.IGNORECASE)
SHORT_YEAR_RE = re.compile(r"[GB]?(\d{1,2})[GB]?", re.IGNORECASE)


@dataclass(frozen=True)
class PredictionResult:
    """Outcome of predict_game. Probabilities are integer percentages."""
    home_win_probability: int
    draw_probability: int
    away_win_probability: int
    predicted_home_score: int
    predicted_away_score: int
    home_expected_goals: float
    away_expected_goals: float
    expected_goal_diff: float
    confidence: int
    is_cross_age_group: bool = False
    age_adjustment: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        """camelCase dictionary for JSON consumers."""
        return {
            'homeWinProbability': self.home_win_probability,
            'drawProbability': self.draw_probability,
            'awayWinProbability': self.away_win_probability,
            'predictedHomeScore': self.predicted_home_score,
            'predictedAwayScore': self.predicted_away_score,
            'homeExpectedGoals': round(self.home_expected_goals, 2),
            'awayExpectedGoals': round(self.away_expected_goals, 2),
            'expectedGoalDiff': round(self.expected_goal_diff, 2),
            'confidence': self.confidence,
            'isCrossAgeGroup': self.is_cross_age_group,
            'ageAdjustment': round(self.age_adjustment, 1),
        }


def parse_birth_year(age_group: Optional[str]) -> Optional[int]:
    """
    Birth year encoded in an age group label.

    Example:
        >>> parse_birth_year("G13")
        2013
        >>> parse_birth_year("2011B")
        2011
        >>> parse_birth_year("G08/07")
        2008
    """
    if not age_group or not isinstance(age_group, str):
        return None
    match = FULL_YEAR_RE.search(age_group)
    if match:
        return int(match.group(1))
    match = SHORT_YEAR_RE.search(age_group)
    if match:
        return 2000 + int(match.group(1))
    return None


def age_group_power_adjustment(home_age_group: Optional[str], away_age_group: Optional[str],
                               config: Optional[Dict[str, Any]] = None) -> float:
    """Power points added to the home side for each year it is older."""
    config = resolve_config(config)
    home_year = parse_birth_year(home_age_group)
    away_year = parse_birth_year(away_age_group)
    if home_year is None or away_year is None:
        return 0.0
    # Earlier birth year = older team
    return (away_year - home_year) * float(config['AGE_GAP_POWER_PER_YEAR'])


def is_cross_age_group(home_age_group: Optional[str], away_age_group: Optional[str]) -> bool:
    home_year = parse_birth_year(home_age_group)
    away_year = parse_birth_year(away_age_group)
    return home_year is not None and away_year is not None and home_year != away_year


def league_averages(all_teams: Optional[pd.DataFrame], config: Optional[Dict[str, Any]] = None) -> Dict[str, float]:
    """
    League-wide scoring and draw rates.

    Args:
        all_teams: Full teams table
        config: Optional engine config overrides

    Returns:
        Dictionary with goals_per_game and draw_rate, falling back to the
        configured defaults when no team has played or scored
    """
    config = resolve_config(config)
    goals_per_game = float(config['DEFAULT_GOALS_PER_GAME'])
    draw_rate = float(config['DEFAULT_DRAW_RATE'])

    if all_teams is None or all_teams.empty:
        return {'goals_per_game': goals_per_game, 'draw_rate': draw_rate}

    games = pd.to_numeric(all_teams['games_played'], errors='coerce').fillna(0).sum()
    if games > 0:
        goals = pd.to_numeric(all_teams['goals_for'], errors='coerce').fillna(0).sum()
        draws = pd.to_numeric(all_teams['draws'], errors='coerce').fillna(0).sum()
        if goals > 0:
            goals_per_game = float(goals) / float(games)
        draw_rate = float(draws) / float(games)

    return {'goals_per_game': goals_per_game, 'draw_rate': draw_rate}


def _games_played(team: Mapping[str, Any]) -> float:
    played = field(team, 'games_played')
    if played <= 0:
        played = field(team, 'wins') + field(team, 'losses') + field(team, 'draws')
    return played


def _draw_rate(team: Mapping[str, Any], league_draw_rate: float) -> float:
    played = _games_played(team)
    if played <= 0:
        return league_draw_rate
    return field(team, 'draws') / played


def _scoring_multipliers(team: Mapping[str, Any], league_avg: float):
    """(attack, defence) relative to league average; 1.0 without data."""
    played = _games_played(team)
    goals_for = field(team, 'goals_for')
    goals_against = field(team, 'goals_against')
    if played <= 0 or (goals_for + goals_against) <= 0:
        return 1.0, 1.0
    attack = safe_divide(goals_for / played, league_avg, 1.0)
    defence = safe_divide(goals_against / played, league_avg, 1.0)
    return attack, defence


def _rating_goals(attacker: Mapping[str, Any], defender: Mapping[str, Any], config: Dict[str, Any]) -> float:
    """Goal adjustment from attacker offense vs defender defense ratings; 50 is neutral."""
    factor = float(config['OFF_DEF_GOAL_FACTOR'])
    offense = field(attacker, 'offensive_power_score', 50.0) - 50.0
    defense = field(defender, 'defensive_power_score', 50.0) - 50.0
    return (offense - defense) * factor


def outcome_probabilities(diff: float, draw_rate: float, config: Optional[Dict[str, Any]] = None):
    """
    Home/draw/away probabilities (floats, sum 1) for an effective power diff.

    The draw share peaks when the teams are even and shrinks as the
    expected share moves towards either bound.
    """
    config = resolve_config(config)
    expected = logistic((diff + float(config['HOME_ADVANTAGE_POWER'])) / float(config['LOGISTIC_SCALE']))
    draw = clamp(draw_rate, 0.0, 1.0) * (1.0 - abs(2.0 * expected - 1.0))
    home = expected - draw / 2.0
    away = 1.0 - expected - draw / 2.0
    return apply_probability_floor([home, draw, away], float(config['PROBABILITY_FLOOR']))


def predict_game(home: Mapping[str, Any], away: Mapping[str, Any],
                 all_teams: Optional[pd.DataFrame] = None,
                 config: Optional[Dict[str, Any]] = None) -> PredictionResult:
    """
    Predict the outcome of a game between two teams.

    Args:
        home: Home team record (dict or pandas row)
        away: Away team record
        all_teams: Full teams table, used for league averages
        config: Optional engine config overrides

    Returns:
        PredictionResult with integer percentages summing to 100

    Example:
        >>> result = predict_game(team_a, team_b, teams)
        >>> result.home_win_probability + result.draw_probability + result.away_win_probability
        100
    """
    config = resolve_config(config)
    averages = league_averages(all_teams, config)

    age_adjustment = age_group_power_adjustment(home.get('age_group'), away.get('age_group'), config)
    diff = field(home, 'power_score') - field(away, 'power_score') + age_adjustment

    draw_rate = (
        _draw_rate(home, averages['draw_rate']) + _draw_rate(away, averages['draw_rate'])
    ) / 2.0
    probs = outcome_probabilities(diff, draw_rate, config)
    home_pct, draw_pct, away_pct = to_integer_percentages(probs)

    league_avg = averages['goals_per_game']
    home_attack, home_defence = _scoring_multipliers(home, league_avg)
    away_attack, away_defence = _scoring_multipliers(away, league_avg)
    power_goals = float(config['POWER_GOAL_FACTOR']) * diff
    home_rating_goals = _rating_goals(home, away, config)
    away_rating_goals = _rating_goals(away, home, config)

    low, high = float(config['MIN_EXPECTED_GOALS']), float(config['MAX_EXPECTED_GOALS'])
    home_xg = clamp(
        league_avg * home_attack * away_defence + float(config['HOME_ADVANTAGE_GOALS'])
        + power_goals + home_rating_goals,
        low, high
    )
    away_xg = clamp(league_avg * away_attack * home_defence - power_goals + away_rating_goals, low, high)

    both_played = _games_played(home) > 0 and _games_played(away) > 0

    result = PredictionResult(
        home_win_probability=home_pct,
        draw_probability=draw_pct,
        away_win_probability=away_pct,
        predicted_home_score=max(0, round_half_up(home_xg)),
        predicted_away_score=max(0, round_half_up(away_xg)),
        home_expected_goals=home_xg,
        away_expected_goals=away_xg,
        expected_goal_diff=home_xg - away_xg,
        confidence=HIGH_CONFIDENCE if both_played else LOW_CONFIDENCE,
        is_cross_age_group=is_cross_age_group(home.get('age_group'), away.get('age_group')),
        age_adjustment=age_adjustment,
    )
    logger.debug(f"predict_game({home.get('name')} vs {away.get('name')}): diff={diff:.2f} -> {result}")
    return result


def prediction_color(probability: int, outcome: str) -> str:
    """Display color for a win or loss probability."""
    if outcome == 'win':
        if probability >= 70:
            return '#2e7d32'
        if probability >= 50:
            return '#558b2f'
        if probability >= 30:
            return '#827717'
    elif outcome == 'loss':
        if probability >= 70:
            return '#c62828'
        if probability >= 50:
            return '#d84315'
        if probability >= 30:
            return '#ef6c00'
    return '#666'


def main():
    """CLI entry point for predicting a single game."""
    parser = argparse.ArgumentParser(description="Predict the outcome of a game between two teams")
    parser.add_argument("--snapshot", type=str, required=True,
                       help="Path to rankings snapshot JSON")
    parser.add_argument("--home", type=str, required=True, help="Home team name")
    parser.add_argument("--away", type=str, required=True, help="Away team name")
    parser.add_argument("--age-group", type=str, required=True,
                       help="Age group of the home team (e.g. G13)")
    parser.add_argument("--away-age-group", type=str,
                       help="Age group of the away team (default: same as home)")
    parser.add_argument("--config", type=str, help="Path to engine config YAML")
    parser.add_argument("--log-file", type=str, help="Also write logs to this file")

    args = parser.parse_args()

    if args.log_file:
        get_logger(args.log_file)
    else:
        logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)

    try:
        config = load_engine_config(args.config)
        teams, _ = load_snapshot(args.snapshot)

        home = find_opponent_in_data(args.home, args.age_group, teams, config)
        away = find_opponent_in_data(args.away, args.away_age_group or args.age_group, teams, config)
        for label, team in (('home', home), ('away', away)):
            if team.get('is_unranked'):
                logger.warning(f"{label} team '{team['name']}' not found in snapshot; using unranked estimate")

        result = predict_game(home, away, teams, config)
        print(json.dumps({
            'homeTeam': home['name'],
            'awayTeam': away['name'],
            **result.to_dict(),
        }, indent=2))

    except Exception as e:
        logger.exception(f"Prediction failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
