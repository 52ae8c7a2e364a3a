#!/usr/bin/env python3
"""
Canonical Name Normalizer

Normalizes soccer team and club names for consistent identity matching across
snapshot reloads, game logs and the club address table. Team ids are
regenerated on every snapshot load, so names are the only stable identity.
"""

import re
from typing import List


# Trailing league designations carried in team names ("Beach FC 13G GA")
LEAGUE_SUFFIX_RE = re.compile(r"\s+(ecnl-rl|ecnl rl|ecnl|ga|aspire|npl)$", re.IGNORECASE)

# Trailing age designations ("13G", "08/07G", "12B")
AGE_SUFFIX_RE = re.compile(r"\s+\d+/?\d*[gb]$", re.IGNORECASE)

# Generic club-type words stripped for broader club matching
CLUB_TYPE_SUFFIX_RE = re.compile(r"\s+(sc|fc|soccer club|soccer|club|academy|united)$", re.IGNORECASE)

# Words too common across team names to identify a team on their own
GENERIC_TEAM_WORDS = {
    "united", "fc", "sc", "soccer", "club", "academy", "athletic", "athletics",
    "city", "county", "youth", "premier", "elite", "select", "fire", "heat",
    "storm", "thunder", "lightning", "rush", "force", "spirit", "pride"
}

COLOR_WORDS = "Navy|Red|Blue|White|Black|Gold|Silver|Orange|Green|Purple"


def normalize_team_name(name: str) -> str:
    """
    Normalize a team name for matching across snapshots and game logs.

    Performs the following normalization steps:
    1. Convert to lowercase
    2. Strip a trailing league suffix (GA, ECNL, ECNL-RL, ECNL RL, ASPIRE, NPL)
    3. Strip a trailing age suffix (13G, 08/07G)
    4. Collapse and trim whitespace

    Args:
        name: Raw team name string

    Returns:
        Normalized team name string

    Example:
        >>> normalize_team_name("Beach FC 13G GA")
        'beach fc'
        >>> normalize_team_name("  Slammers FC  ECNL RL ")
        'slammers fc'
    """
    if not name or not isinstance(name, str):
        return ""

    normalized = re.sub(r"\s+", " ", name.lower()).strip()

    # Suffixes can be stacked in either order
    previous = None
    while previous != normalized:
        previous = normalized
        normalized = LEAGUE_SUFFIX_RE.sub("", normalized).strip()
        normalized = AGE_SUFFIX_RE.sub("", normalized).strip()

    return normalized


def get_base_club_name(name: str) -> str:
    """
    Reduce a team name to its club stem for broader matching.

    Example:
        >>> get_base_club_name("Beach FC 13G GA")
        'beach'
    """
    normalized = normalize_team_name(name)
    return CLUB_TYPE_SUFFIX_RE.sub("", normalized).strip()


def normalize_club_name(name: str) -> str:
    """Lowercase a club name and drop a trailing club-type word."""
    if not name or not isinstance(name, str):
        return ""
    normalized = re.sub(r"\s+", " ", name.lower()).strip()
    normalized = re.sub(r"\s+(sc|fc|soccer club|soccer|club|youth|academy|united)$", "", normalized)
    return normalized.strip()


def meaningful_words(name: str) -> List[str]:
    """
    Split a normalized team name into words that can identify a team.

    Drops words of two characters or fewer and GENERIC_TEAM_WORDS.
    """
    return [
        w for w in normalize_team_name(name).split()
        if len(w) > 2 and w not in GENERIC_TEAM_WORDS
    ]


def extract_base_club_name(club_name: str) -> str:
    """
    Extract the organization name from a club/team label for map grouping.

    Strips age and gender designations anywhere in the string, league words
    (optionally followed by a colour) and a trailing colour word. A leading
    4-digit founding year is kept.

    Args:
        club_name: Club or team label

    Returns:
        Base club name, or 'Unknown' for empty input

    Example:
        >>> extract_base_club_name("Lamorinda SC 13G")
        'Lamorinda SC'
        >>> extract_base_club_name("TopHat 08G Gold")
        'TopHat'
        >>> extract_base_club_name("1974 Newark FC 08/07G")
        '1974 Newark FC'
    """
    if not club_name or not isinstance(club_name, str):
        return "Unknown"

    result = club_name

    protected_start = ""
    start_match = re.match(r"^(\d{4}\s+)", result)
    if start_match:
        protected_start = start_match.group(1)
        result = result[len(protected_start):]

    # "08/07G", "08/07"
    result = re.sub(r"\s+\d{2}/\d{2}[GB]?", "", result, flags=re.IGNORECASE)
    # "13G", "B14", "G13", "08G", "B2012", "2012G", "2013"
    result = re.sub(r"\s+[GB]?\d{2,4}[GB]?(?=\s|$)", "", result, flags=re.IGNORECASE)
    # League words, optionally followed by a colour
    result = re.sub(
        r"\s+(ECNL-RL|ECNL|GA|NPL|RL|Pre-Academy|Academy|Elite|Select|Premier)"
        rf"(\s+({COLOR_WORDS}))?(?=\s|$)",
        "", result, flags=re.IGNORECASE
    )
    result = re.sub(rf"\s+({COLOR_WORDS})$", "", result, flags=re.IGNORECASE)

    result = (protected_start + result).strip()
    return result or club_name


def normalize_league(league: str) -> str:
    """
    Canonical league code for comparing a game's league to a team's.

    Example:
        >>> normalize_league("Girls Academy")
        'GA'
        >>> normalize_league("ECNL RL")
        'ECNL-RL'
        >>> normalize_league("MLS NEXT Homegrown")
        'MLS NEXT'
    """
    if not league or not isinstance(league, str):
        return ""
    code = re.sub(r"\s+", " ", league.strip().upper())
    if code in ("ECNL-RL", "ECNL RL"):
        return "ECNL-RL"
    if code == "GIRLS ACADEMY":
        return "GA"
    if code.startswith("MLS NEXT"):
        return "MLS NEXT"
    return code
