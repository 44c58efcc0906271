from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple, Union

from .errors import InvalidConfiguration

DEFAULT_SEARCH_FIELD_NAMES: Tuple[str, ...] = ("Name", "Title", "Description")


class MatchMode(str, Enum):
    """How a search term is compared against a field value."""

    EXACT = "exact"
    CONTAINS = "contains"
    STARTS_WITH = "starts_with"
    ENDS_WITH = "ends_with"
    IGNORE_CASE = "ignore_case"

    @classmethod
    def parse(cls, value: Union["MatchMode", str]) -> "MatchMode":
        """Accept a member, its value, or its name in any case."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().lower().replace("-", "_")
            for mode in cls:
                if key in (mode.value, mode.name.lower()):
                    return mode
        valid = ", ".join(mode.value for mode in cls)
        raise InvalidConfiguration(
            f"Unknown match mode {value!r}; expected one of: {valid}"
        )


@dataclass(frozen=True)
class SearchField:
    """Describes one searchable member of an entity type."""

    name: str
    match_mode: MatchMode
    weight: float = 1.0
