#!/usr/bin/env python3
"""
Snapshot Schema Definitions

Defines the canonical schemas for the team rankings snapshot and the games
feed using Pandera. Frames are validated once at load time; the engine then
treats them as read-only.
"""

import logging
from typing import Optional

import pandas as pd
import pandera as pa
from pandera.typing import Series

logger = logging.getLogger(__name__)


class SnapshotFormatError(ValueError):
    """Raised when a snapshot or games payload has the wrong shape."""
    pass


class TeamSnapshotSchema(pa.DataFrameModel):
    """
    Pandera schema for one season snapshot of team records.

    Fields:
    - name / club / age_group / league / state: identity strings ("" if unknown)
    - wins / losses / draws / goals_for / goals_against: record counts
    - goal_diff / games_played: derived, recomputed by the loader
    - power_score and the offensive/defensive ratings: optional floats
    - is_ranked: False excludes a team from the primary ranking pool
    """

    name: Series[str] = pa.Field(description="Team name")
    club: Series[str] = pa.Field(description="Club name")
    age_group: Series[str] = pa.Field(description="Gender letter + birth year (G13, B14)")
    league: Series[str] = pa.Field(description="League name")
    state: Series[str] = pa.Field(description="State code")

    wins: Series[int] = pa.Field(ge=0)
    losses: Series[int] = pa.Field(ge=0)
    draws: Series[int] = pa.Field(ge=0)
    goals_for: Series[int] = pa.Field(ge=0)
    goals_against: Series[int] = pa.Field(ge=0)
    goal_diff: Series[int] = pa.Field(description="goals_for - goals_against")
    games_played: Series[int] = pa.Field(ge=0, description="wins + losses + draws")

    power_score: Series[float] = pa.Field(nullable=True)
    offensive_rank: Optional[Series[float]] = pa.Field(nullable=True)
    offensive_power_score: Optional[Series[float]] = pa.Field(nullable=True)
    defensive_rank: Optional[Series[float]] = pa.Field(nullable=True)
    defensive_power_score: Optional[Series[float]] = pa.Field(nullable=True)

    is_ranked: Series[bool] = pa.Field(description="False marks teams outside the ranking pool")

    class Config:
        """Pandera configuration."""
        coerce = True
        strict = False  # narrative fields pass through unvalidated

    @pa.dataframe_check
    def goal_diff_consistent(cls, df: pd.DataFrame) -> Series[bool]:
        """Derived goal difference must match the goal counts."""
        return df["goal_diff"] == df["goals_for"] - df["goals_against"]

    @pa.dataframe_check
    def games_played_consistent(cls, df: pd.DataFrame) -> Series[bool]:
        """Derived games played must match the record."""
        return df["games_played"] == df["wins"] + df["losses"] + df["draws"]


class GameSchema(pa.DataFrameModel):
    """
    Pandera schema for played and scheduled fixtures.

    Scores are nullable: a game without both scores has not been played.
    """

    home_team: Series[str] = pa.Field(description="Home team name")
    away_team: Series[str] = pa.Field(description="Away team name")
    home_score: Series[float] = pa.Field(nullable=True, ge=0)
    away_score: Series[float] = pa.Field(nullable=True, ge=0)
    date: Series[str] = pa.Field(
        description="Game date in YYYY-MM-DD format",
        str_matches=r"^\d{4}-\d{2}-\d{2}"
    )
    league: Optional[Series[str]] = pa.Field(nullable=True)
    age_group: Optional[Series[str]] = pa.Field(nullable=True)

    class Config:
        """Pandera configuration."""
        coerce = True
        strict = False


def validate_dataframe(df: pd.DataFrame, schema=TeamSnapshotSchema) -> pd.DataFrame:
    """
    Validate a DataFrame against a snapshot schema.

    Args:
        df: pandas DataFrame to validate
        schema: Pandera schema class (default: TeamSnapshotSchema)

    Returns:
        Validated (and type-coerced) DataFrame

    Raises:
        SnapshotFormatError: If validation fails
    """
    try:
        return schema.validate(df)
    except (pa.errors.SchemaError, pa.errors.SchemaErrors) as e:
        logger.error(f"{schema.__name__} validation failed for frame with columns {list(df.columns)}")
        raise SnapshotFormatError(f"{schema.__name__} validation failed: {e}") from e
