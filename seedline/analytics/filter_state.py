#!/usr/bin/env python3
"""
Leaderboard filter state.

FilterState is an immutable value object: every user interaction produces a
new instance, so the engine never observes a half-updated filter. Instances
hash and compare by value, which makes them safe memoization keys.
"""

import logging
from dataclasses import asdict, dataclass, replace
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

ALL = 'ALL'

# Umbrella league values
ALL_NATIONAL = 'ALL_NATIONAL'
ALL_REGIONAL = 'ALL_REGIONAL'

GENDERS = ('Girls', 'Boys', ALL)
SORT_FIELDS = ('power', 'record', 'gd', 'offRank', 'defRank')
SORT_DIRECTIONS = ('asc', 'desc')

# Rank columns read best-first in ascending order
RANK_SORT_FIELDS = ('offRank', 'defRank')

# Keys used by the consumer's session snapshot
_PERSISTED_KEYS = {
    'age_group': 'ageGroup',
    'league': 'league',
    'state': 'state',
    'gender': 'gender',
    'search': 'search',
    'sort_field': 'sortField',
    'sort_direction': 'sortDirection',
}


def default_sort_direction(sort_field: str) -> str:
    """Direction a column starts in when first selected."""
    return 'asc' if sort_field in RANK_SORT_FIELDS else 'desc'


@dataclass(frozen=True)
class FilterState:
    age_group: str = ALL
    league: str = ALL
    state: str = ALL
    gender: str = ALL
    search: str = ''
    sort_field: str = 'power'
    sort_direction: str = 'desc'

    def __post_init__(self):
        if self.gender not in GENDERS:
            raise ValueError(f"Invalid gender filter: {self.gender!r} (expected one of {GENDERS})")
        if self.sort_field not in SORT_FIELDS:
            raise ValueError(f"Invalid sort field: {self.sort_field!r} (expected one of {SORT_FIELDS})")
        if self.sort_direction not in SORT_DIRECTIONS:
            raise ValueError(f"Invalid sort direction: {self.sort_direction!r}")
        for name in ('age_group', 'league', 'state', 'search'):
            if not isinstance(getattr(self, name), str):
                raise ValueError(f"FilterState.{name} must be a string")

    def replace(self, **changes: Any) -> 'FilterState':
        """Return a copy with the given fields changed."""
        return replace(self, **changes)

    def with_sort(self, sort_field: str) -> 'FilterState':
        """
        Apply a column-header click.

        Clicking the active column toggles its direction; clicking another
        column selects it in that column's default direction.
        """
        if sort_field == self.sort_field:
            toggled = 'asc' if self.sort_direction == 'desc' else 'desc'
            return replace(self, sort_direction=toggled)
        return replace(self, sort_field=sort_field, sort_direction=default_sort_direction(sort_field))

    def without_search(self) -> 'FilterState':
        return replace(self, search='')

    def to_dict(self) -> Dict[str, str]:
        """Serialize with the camelCase keys used by the session snapshot."""
        return {_PERSISTED_KEYS[k]: v for k, v in asdict(self).items()}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'FilterState':
        """
        Restore a filter state from a session snapshot.

        Accepts camelCase or snake_case keys. Missing, unknown or invalid
        values fall back to the defaults so a stale snapshot never breaks
        the leaderboard.

        Args:
            data: Persisted filter dictionary (may be None)

        Returns:
            A fully-formed FilterState
        """
        if not data:
            return cls()

        defaults = cls()
        values: Dict[str, Any] = {}
        for attr, persisted in _PERSISTED_KEYS.items():
            raw = data.get(persisted, data.get(attr))
            if raw is None:
                continue
            values[attr] = raw if isinstance(raw, str) else str(raw)

        if values.get('gender') not in (None,) + GENDERS:
            logger.warning(f"Discarding persisted gender filter {values['gender']!r}")
            values.pop('gender')
        if values.get('sort_field') not in (None,) + SORT_FIELDS:
            logger.warning(f"Discarding persisted sort field {values['sort_field']!r}")
            values.pop('sort_field')
            values.pop('sort_direction', None)
        if values.get('sort_direction') not in (None,) + SORT_DIRECTIONS:
            logger.warning(f"Discarding persisted sort direction {values['sort_direction']!r}")
            values.pop('sort_direction')

        if 'sort_field' in values and 'sort_direction' not in values:
            values['sort_direction'] = default_sort_direction(values['sort_field'])

        return replace(defaults, **values)
