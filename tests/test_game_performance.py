#!/usr/bin/env python3
"""
Test suite for retrospective game performance ranking
"""

import pytest
import pandas as pd
import sys
from datetime import date
from pathlib import Path

# Add project root to path
sys.path.append(str(Path(__file__).parent.parent))

from seedline.analytics.game_performance import (
    PERFORMANCE_COLUMNS,
    UPCOMING_COLUMNS,
    analyze_game_performance,
    performance_color,
    performance_label,
    predict_upcoming_games,
    rank_games_by_performance,
    select_team_games,
)
from seedline.analytics.match_predictor import PredictionResult
from seedline.io.snapshot_loader import parse_games, parse_snapshot


def prediction_with_egd(expected_goal_diff):
    return PredictionResult(
        home_win_probability=50,
        draw_probability=20,
        away_win_probability=30,
        predicted_home_score=1,
        predicted_away_score=1,
        home_expected_goals=1.0 + max(expected_goal_diff, 0.0),
        away_expected_goals=1.0 - min(expected_goal_diff, 0.0),
        expected_goal_diff=expected_goal_diff,
        confidence=85,
    )


def game(home_score, away_score):
    return {'home_team': 'Home FC 13G', 'away_team': 'Away FC 13G',
            'home_score': home_score, 'away_score': away_score, 'date': '2025-09-06'}


@pytest.fixture
def power_gap_teams():
    """A mid-table team, a much stronger and a much weaker opponent, no goal data"""
    rankings = [
        {'id': 0, 'name': 'Mid FC 13G', 'club': 'Mid FC', 'ageGroup': 'G13', 'wins': 5, 'losses': 5,
         'powerScore': 60.0},
        {'id': 1, 'name': 'Strong FC 13G', 'club': 'Strong FC', 'ageGroup': 'G13', 'wins': 9, 'losses': 1,
         'powerScore': 100.0},
        {'id': 2, 'name': 'Weak FC 13G', 'club': 'Weak FC', 'ageGroup': 'G13', 'wins': 1, 'losses': 9,
         'powerScore': 0.0},
    ]
    teams, _ = parse_snapshot({'rankings': rankings})
    return teams


@pytest.fixture
def club_sibling_teams():
    """Two age groups of the same two clubs, all in GA"""
    rankings = [
        {'id': 0, 'name': 'Beach FC 13G GA', 'club': 'Beach FC', 'ageGroup': 'G13', 'league': 'GA',
         'wins': 6, 'losses': 2, 'powerScore': 70.0},
        {'id': 1, 'name': 'Solar SC 13G GA', 'club': 'Solar SC', 'ageGroup': 'G13', 'league': 'GA',
         'wins': 4, 'losses': 4, 'powerScore': 60.0},
        {'id': 2, 'name': 'Beach FC 12G GA', 'club': 'Beach FC', 'ageGroup': 'G12', 'league': 'GA',
         'wins': 2, 'losses': 6, 'powerScore': 40.0},
        {'id': 3, 'name': 'Solar SC 12G GA', 'club': 'Solar SC', 'ageGroup': 'G12', 'league': 'GA',
         'wins': 7, 'losses': 1, 'powerScore': 75.0},
    ]
    teams, _ = parse_snapshot({'rankings': rankings})
    return teams


@pytest.fixture
def club_sibling_games():
    return parse_games([
        {'homeTeam': 'Beach FC 13G GA', 'awayTeam': 'Solar SC 13G GA', 'homeScore': 2, 'awayScore': 1,
         'date': '2025-09-06', 'league': 'GA', 'ageGroup': 'G13'},
        {'homeTeam': 'Beach FC 12G GA', 'awayTeam': 'Solar SC 12G GA', 'homeScore': 0, 'awayScore': 5,
         'date': '2025-09-07', 'league': 'GA', 'ageGroup': 'G12'},
    ])


class TestAnalyzeGamePerformance:
    """Test cases for scoring a single result against its prediction"""

    def test_loss_when_favoured(self):
        result = analyze_game_performance(game(0, 1), prediction_with_egd(1.0), is_home=True)
        assert result['actual_goal_diff'] == -1
        assert result['performance_diff'] == -2.0
        assert result['performance_score'] == 11.0
        assert result['performance_label'] == 'Greatly Underperformed'
        assert not result['outperformed']

    def test_upset_win(self):
        result = analyze_game_performance(game(2, 1), prediction_with_egd(-0.5), is_home=True)
        assert result['performance_score'] == 83.0
        assert result['performance_label'] == 'Outperformed'
        assert result['outperformed']

    def test_upset_draw(self):
        result = analyze_game_performance(game(1, 1), prediction_with_egd(-1.0), is_home=True)
        assert result['performance_score'] == 72.0

    def test_draw_when_favoured(self):
        result = analyze_game_performance(game(0, 0), prediction_with_egd(0.5), is_home=True)
        assert result['performance_score'] == 34.0
        assert result['performance_label'] == 'Met Expectations'

    def test_score_clamped(self):
        result = analyze_game_performance(game(6, 0), prediction_with_egd(-1.0), is_home=True)
        assert result['performance_score'] == 100.0

    def test_away_perspective(self):
        result = analyze_game_performance(game(0, 2), prediction_with_egd(1.0), is_home=False)
        assert result['team_score'] == 2
        assert result['opponent_score'] == 0
        assert result['expected_goal_diff'] == -1.0
        assert result['performance_diff'] == 3.0
        assert result['performance_score'] == 100.0
        assert result['performance_label'] == 'Greatly Outperformed'

    @pytest.mark.parametrize("diff,label", [
        (2.0, 'Greatly Outperformed'),
        (1.0, 'Outperformed'),
        (0.0, 'Met Expectations'),
        (-1.0, 'Underperformed'),
        (-1.5, 'Underperformed'),
        (-2.5, 'Greatly Underperformed'),
    ])
    def test_performance_label(self, diff, label):
        assert performance_label(diff) == label

    def test_performance_color(self):
        assert performance_color(80) == '#2e7d32'
        assert performance_color(50) == '#827717'
        assert performance_color(10) == '#c62828'


class TestRankGamesByPerformance:
    """Test cases for ranking a season's games"""

    def test_narrow_loss_beats_blowout_win(self, power_gap_teams):
        games = parse_games([
            {'homeTeam': 'Mid FC 13G', 'awayTeam': 'Weak FC 13G', 'homeScore': 4, 'awayScore': 0,
             'date': '2025-09-06'},
            {'homeTeam': 'Mid FC 13G', 'awayTeam': 'Strong FC 13G', 'homeScore': 0, 'awayScore': 1,
             'date': '2025-09-13'},
        ])
        team = power_gap_teams.iloc[0].to_dict()
        ranked = rank_games_by_performance(games, team, power_gap_teams, today=date(2025, 10, 1))

        assert list(ranked['opponent']) == ['Strong FC 13G', 'Weak FC 13G']
        assert list(ranked['performance_rank']) == [1, 2]
        assert ranked['performance_score'].iloc[0] == pytest.approx(65.0)
        assert ranked['performance_score'].iloc[1] == pytest.approx(54.8)
        assert (ranked['total_games'] == 2).all()

    def test_sample_season(self, sample_teams, sample_games):
        team = sample_teams[sample_teams['id'] == 0].iloc[0].to_dict()
        ranked = rank_games_by_performance(sample_games, team, sample_teams, today=date(2025, 10, 1))

        # the 2099 fixture is upcoming and excluded
        assert len(ranked) == 3
        assert list(ranked['performance_rank']) == [1, 2, 3]
        assert set(ranked['opponent']) == {'Slammers FC 13G ECNL', 'Solar SC 13G ECNL', 'Mystery United 13G'}
        scores = list(ranked['performance_score'])
        assert scores == sorted(scores, reverse=True)

        solar = ranked[ranked['opponent'] == 'Solar SC 13G ECNL'].iloc[0]
        assert not solar['is_home']

        mystery = ranked[ranked['opponent'] == 'Mystery United 13G'].iloc[0]
        assert mystery['opponent_is_unranked']
        assert mystery['opponent_power_score'] == pytest.approx(63.6)

    def test_all_columns_present(self, sample_teams, sample_games):
        team = sample_teams.iloc[0].to_dict()
        ranked = rank_games_by_performance(sample_games, team, sample_teams, today=date(2025, 10, 1))
        for col in PERFORMANCE_COLUMNS:
            assert col in ranked.columns
        assert 'prediction' in ranked.columns

    def test_team_without_games(self, sample_teams, sample_games):
        team = sample_teams[sample_teams['id'] == 6].iloc[0].to_dict()
        ranked = rank_games_by_performance(sample_games, team, sample_teams, today=date(2025, 10, 1))
        assert ranked.empty
        assert list(ranked.columns) == PERFORMANCE_COLUMNS

    def test_empty_games(self, sample_teams):
        ranked = rank_games_by_performance(pd.DataFrame(), sample_teams.iloc[0].to_dict(), sample_teams)
        assert ranked.empty

    def test_sibling_age_group_games_excluded(self, club_sibling_teams, club_sibling_games):
        team = club_sibling_teams.iloc[0].to_dict()
        ranked = rank_games_by_performance(club_sibling_games, team, club_sibling_teams,
                                           today=date(2025, 10, 1))
        assert len(ranked) == 1
        assert ranked.iloc[0]['opponent'] == 'Solar SC 13G GA'
        assert ranked.iloc[0]['team_score'] == 2

    def test_younger_sibling_sees_only_its_games(self, club_sibling_teams, club_sibling_games):
        team = club_sibling_teams.iloc[2].to_dict()
        ranked = rank_games_by_performance(club_sibling_games, team, club_sibling_teams,
                                           today=date(2025, 10, 1))
        assert list(ranked['opponent']) == ['Solar SC 12G GA']
        assert ranked.iloc[0]['opponent_power_score'] == pytest.approx(75.0)


class TestSelectTeamGames:
    """Test cases for picking out a team's games"""

    def test_sides_and_input_order(self, sample_teams, sample_games):
        team = sample_teams[sample_teams['id'] == 0].iloc[0].to_dict()
        selected = select_team_games(sample_games, team)
        assert list(selected['date']) == ['2025-09-06', '2025-09-13', '2025-09-20', '2099-01-01']
        assert list(selected['is_home']) == [True, False, True, True]

    def test_league_must_match_when_recorded(self):
        team = {'name': 'Beach FC 13G GA', 'league': 'GA', 'age_group': 'G13'}
        games = parse_games([
            {'homeTeam': 'Beach FC 13G', 'awayTeam': 'Slammers FC 13G', 'date': '2025-09-06',
             'league': 'ECNL', 'ageGroup': 'G13'},
            {'homeTeam': 'Solar SC 13G', 'awayTeam': 'Beach FC 13G GA', 'date': '2025-09-07',
             'league': 'Girls Academy', 'ageGroup': 'G13'},
            {'homeTeam': 'Beach FC 13G GA', 'awayTeam': 'TopHat 13G', 'date': '2025-09-08'},
        ])
        selected = select_team_games(games, team)
        assert list(selected['date']) == ['2025-09-07', '2025-09-08']
        assert list(selected['is_home']) == [False, True]

    def test_age_group_must_match_when_recorded(self):
        team = {'name': 'Beach FC 13G GA', 'league': 'GA', 'age_group': 'G13'}
        games = parse_games([
            {'homeTeam': 'Beach FC 12G GA', 'awayTeam': 'Solar SC 12G GA', 'date': '2025-09-06',
             'league': 'GA', 'ageGroup': 'G12'},
            {'homeTeam': 'Beach FC 13G GA', 'awayTeam': 'Solar SC 13G GA', 'date': '2025-09-07',
             'league': 'GA', 'ageGroup': 'g13'},
        ])
        assert list(select_team_games(games, team)['date']) == ['2025-09-07']

    def test_no_games(self, sample_teams):
        selected = select_team_games(pd.DataFrame(), sample_teams.iloc[0].to_dict())
        assert selected.empty
        assert 'is_home' in selected.columns


class TestPredictUpcomingGames:
    """Test cases for previewing a team's schedule"""

    def test_sample_fixture(self, sample_teams, sample_games):
        team = sample_teams[sample_teams['id'] == 0].iloc[0].to_dict()
        upcoming = predict_upcoming_games(sample_games, team, sample_teams, today=date(2025, 10, 1))

        assert len(upcoming) == 1
        row = upcoming.iloc[0]
        assert row['opponent'] == 'TopHat 13G Gold'
        assert row['is_home']
        assert row['opponent_power_score'] == pytest.approx(72.0)
        assert not row['opponent_is_unranked']
        assert row['team_win_probability'] + row['draw_probability'] + row['team_loss_probability'] == 100
        assert row['team_win_probability'] > row['team_loss_probability']
        assert row['team_win_probability'] == row['prediction'].home_win_probability
        for col in UPCOMING_COLUMNS:
            assert col in upcoming.columns

    def test_away_perspective_and_order(self, power_gap_teams):
        games = parse_games([
            {'homeTeam': 'Strong FC 13G', 'awayTeam': 'Mid FC 13G', 'date': '2025-10-18'},
            {'homeTeam': 'Mid FC 13G', 'awayTeam': 'Weak FC 13G', 'date': '2025-10-11'},
            {'homeTeam': 'Mid FC 13G', 'awayTeam': 'Weak FC 13G', 'homeScore': 3, 'awayScore': 0,
             'date': '2025-09-06'},
        ])
        team = power_gap_teams.iloc[0].to_dict()
        upcoming = predict_upcoming_games(games, team, power_gap_teams, today=date(2025, 10, 1))

        assert list(upcoming['opponent']) == ['Weak FC 13G', 'Strong FC 13G']
        assert list(upcoming['is_home']) == [True, False]
        away_game = upcoming.iloc[1]
        prediction = away_game['prediction']
        assert away_game['team_win_probability'] == prediction.away_win_probability
        assert away_game['team_loss_probability'] == prediction.home_win_probability
        assert away_game['predicted_team_score'] == prediction.predicted_away_score
        assert away_game['predicted_opponent_score'] == prediction.predicted_home_score
        assert away_game['team_loss_probability'] > away_game['team_win_probability']

    def test_sibling_fixtures_excluded(self, club_sibling_teams):
        games = parse_games([
            {'homeTeam': 'Solar SC 12G GA', 'awayTeam': 'Beach FC 12G GA', 'date': '2025-10-11',
             'league': 'GA', 'ageGroup': 'G12'},
        ])
        team = club_sibling_teams.iloc[0].to_dict()
        upcoming = predict_upcoming_games(games, team, club_sibling_teams, today=date(2025, 10, 1))
        assert upcoming.empty
        assert list(upcoming.columns) == UPCOMING_COLUMNS

    def test_empty_games(self, sample_teams):
        upcoming = predict_upcoming_games(pd.DataFrame(), sample_teams.iloc[0].to_dict(), sample_teams)
        assert upcoming.empty
