#!/usr/bin/env python3
"""
Engine configuration loading.

Every engine function takes an optional ``config`` dict. Keys that are not
supplied fall back to DEFAULT_CONFIG, which mirrors engine_config.yaml.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent / "engine_config.yaml"

DEFAULT_CONFIG: Dict[str, Any] = {
    # Match outcome model
    'PROBABILITY_FLOOR': 0.02,
    'LOGISTIC_SCALE': 12.0,
    'HOME_ADVANTAGE_POWER': 1.5,
    'AGE_GAP_POWER_PER_YEAR': 8.0,
    'DEFAULT_DRAW_RATE': 0.18,
    # Scoreline model
    'DEFAULT_GOALS_PER_GAME': 1.85,
    'HOME_ADVANTAGE_GOALS': 0.15,
    'POWER_GOAL_FACTOR': 0.03,
    'OFF_DEF_GOAL_FACTOR': 0.023,
    'MIN_EXPECTED_GOALS': 0.2,
    'MAX_EXPECTED_GOALS': 8.0,
    # Opponent resolution
    'UNRANKED_OPPONENT_QUANTILE': 0.10,
    # Leaderboard
    'MISSING_RANK_SENTINEL': 9999,
    'LEADERBOARD_CACHE_SIZE': 64,
    'NATIONAL_LEAGUES': [
        'ECNL', 'ECNL-RL', 'GA', 'ASPIRE', 'NPL',
        'MLS NEXT', 'MLS NEXT HD', 'MLS NEXT AD',
    ],
    'REGIONAL_LEAGUES': [
        'Baltimore Mania', 'Chesapeake PSL YPL', 'Eastern PA Challenge Cup',
        'Florida CFPL', 'Florida NFPL', 'Florida SEFPL', 'Florida WFPL',
        'ICSL', 'Illinois Cup', 'Mid South Conference', 'MSPSP',
        'Northwest Conference', 'Presidents Cup', 'Real CO Cup', 'SEFPL',
        'SLYSA', 'SOCAL', 'Southeastern CCL Fall', 'Southeastern CCL U11/U12',
        'State Cup', 'Virginia Cup', 'WFPL', 'WVFC Capital Cup',
    ],
    # Map declustering
    'LOCATION_PRECISION': 2,
    'BASE_SPACING': 0.008,
    'MIN_SPACING': 0.0008,
    'SPACING_FACTOR': 1.2,
}


def load_engine_config(path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """
    Load engine configuration from YAML, merged over the defaults.

    Args:
        path: YAML file path (default: the packaged engine_config.yaml)

    Returns:
        Complete configuration dictionary

    Raises:
        FileNotFoundError: If an explicit path does not exist
        ValueError: If the YAML document is not a mapping
    """
    config_path = Path(path) if path else DEFAULT_CONFIG_PATH

    with open(config_path, 'r', encoding='utf-8') as f:
        loaded = yaml.safe_load(f) or {}

    if not isinstance(loaded, dict):
        raise ValueError(f"Engine config must be a mapping, got {type(loaded).__name__}")

    unknown = sorted(set(loaded) - set(DEFAULT_CONFIG))
    if unknown:
        logger.warning(f"Ignoring unknown config keys in {config_path}: {unknown}")

    config = dict(DEFAULT_CONFIG)
    config.update({k: v for k, v in loaded.items() if k in DEFAULT_CONFIG})
    logger.debug(f"Loaded engine config from {config_path}")
    return config


def resolve_config(config: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Fill a partial config dict with defaults."""
    if not config:
        return dict(DEFAULT_CONFIG)
    merged = dict(DEFAULT_CONFIG)
    merged.update(config)
    return merged
