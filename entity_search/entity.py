"""Per-entity search configuration builder."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import (
    TYPE_CHECKING,
    Any,
    Dict,
    Generic,
    Iterator,
    List,
    Optional,
    Tuple,
    TypeVar,
    Union,
)

from .errors import ConfigurationFrozen, InvalidConfiguration, InvalidMemberDeclaration
from .members import find_member, is_matchable, list_members, resolve_member
from .models import MatchMode, SearchField

if TYPE_CHECKING:
    from .registry import SearchConfigurationOptions

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class _Declaration:
    match_mode: Optional[MatchMode]
    weight: float


class EntitySearchConfiguration(Generic[T]):
    """Fluent builder recording which members of an entity type are searchable.

    Instances are created by :meth:`SearchConfigurationOptions.entity` and
    mutated during the configuration phase, for example::

        options.entity(Customer).declare("name").declare(
            "email", MatchMode.CONTAINS
        )

    Once the owning registry is frozen the builder becomes read-only. Query
    code reads :attr:`search_fields`, which falls back to the registry's
    default field names when nothing was declared.
    """

    def __init__(
        self, entity_type: type, options: "SearchConfigurationOptions"
    ) -> None:
        if not isinstance(entity_type, type):
            raise TypeError(f"Entity type must be a class, got {entity_type!r}")
        self.entity_type = entity_type
        self._options = options
        self._members: Dict[str, Any] = list_members(entity_type)
        self._declarations: Dict[str, _Declaration] = {}
        self._frozen = False

    def __repr__(self) -> str:
        return (
            f"EntitySearchConfiguration({self.entity_type.__name__}, "
            f"fields={list(self.field_names)!r})"
        )

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        """Seal this configuration; later declarations raise ConfigurationFrozen."""
        self._frozen = True

    def declare(
        self,
        member: str,
        match_mode: Union[MatchMode, str, None] = None,
        *,
        weight: float = 1.0,
    ) -> "EntitySearchConfiguration[T]":
        """Mark ``member`` as searchable.

        Args:
            member: Member name on the entity type. An exact name wins;
                otherwise a unique case-insensitive match is used.
            match_mode: How the member is matched. ``None`` defers to the
                registry's default match mode at read time.
            weight: Relative priority among the entity's fields; must be > 0.

        Returns:
            This builder, so declarations can be chained.

        Raises:
            ConfigurationFrozen: The configuration phase has ended.
            InvalidMemberDeclaration: The member is missing, ambiguous or not
                matchable, or the mode or weight is invalid.
        """
        if self._frozen:
            raise ConfigurationFrozen(
                f"Search configuration for {self.entity_type.__name__} is frozen; "
                f"cannot declare '{member}'"
            )
        name = self._resolve(member)

        mode: Optional[MatchMode] = None
        if match_mode is not None:
            try:
                mode = MatchMode.parse(match_mode)
            except InvalidConfiguration as exc:
                raise InvalidMemberDeclaration(
                    self.entity_type, member, str(exc)
                ) from exc

        if (
            isinstance(weight, bool)
            or not isinstance(weight, (int, float))
            or not math.isfinite(weight)
            or weight <= 0
        ):
            raise InvalidMemberDeclaration(
                self.entity_type,
                member,
                f"weight must be a positive number, got {weight!r}",
            )

        existing = self._declarations.get(name)
        if existing is None:
            self._declarations[name] = _Declaration(mode, float(weight))
            logger.debug(
                "Declared %s.%s searchable (mode=%s, weight=%s)",
                self.entity_type.__name__,
                name,
                mode.value if mode else "default",
                weight,
            )
        else:
            existing.match_mode = mode
            existing.weight = float(weight)
            logger.debug(
                "Updated %s.%s declaration (mode=%s, weight=%s)",
                self.entity_type.__name__,
                name,
                mode.value if mode else "default",
                weight,
            )
        return self

    def declare_many(
        self,
        *members: str,
        match_mode: Union[MatchMode, str, None] = None,
        weight: float = 1.0,
    ) -> "EntitySearchConfiguration[T]":
        """Declare several members with the same mode and weight."""
        for member in members:
            self.declare(member, match_mode, weight=weight)
        return self

    def _resolve(self, member: str) -> str:
        if not isinstance(member, str) or not member.strip():
            raise InvalidMemberDeclaration(
                self.entity_type, str(member), "member name must be a non-empty string"
            )
        candidates = find_member(self._members, member)
        if not candidates:
            raise InvalidMemberDeclaration(
                self.entity_type, member, "no such member"
            )
        if len(candidates) > 1:
            raise InvalidMemberDeclaration(
                self.entity_type,
                member,
                f"ambiguous between {', '.join(candidates)}",
            )
        name = candidates[0]
        annotation = self._members[name]
        if not is_matchable(annotation):
            raise InvalidMemberDeclaration(
                self.entity_type,
                member,
                f"type {annotation!r} does not support text or value matching",
            )
        return name

    @property
    def has_explicit_fields(self) -> bool:
        return bool(self._declarations)

    @property
    def search_fields(self) -> Tuple[SearchField, ...]:
        """Effective searchable fields, in order.

        Explicit declarations win. Without any, the registry's default field
        names are used, skipping those the entity type lacks or cannot match.
        """
        default_mode = self._options.default_match_mode
        if self._declarations:
            return tuple(
                SearchField(
                    name=name,
                    match_mode=declaration.match_mode or default_mode,
                    weight=declaration.weight,
                )
                for name, declaration in self._declarations.items()
            )

        fields: List[SearchField] = []
        seen = set()
        for default_name in self._options.default_search_field_names:
            name = resolve_member(self._members, default_name)
            if name is None or name in seen:
                continue
            if not is_matchable(self._members[name]):
                continue
            seen.add(name)
            fields.append(SearchField(name=name, match_mode=default_mode))
        return tuple(fields)

    @property
    def field_names(self) -> Tuple[str, ...]:
        return tuple(field.name for field in self.search_fields)

    def get(self, member: str) -> Optional[SearchField]:
        """Return the effective descriptor for ``member`` or None."""
        candidates = find_member(self.field_names, member)
        if len(candidates) != 1:
            return None
        for field in self.search_fields:
            if field.name == candidates[0]:
                return field
        return None

    def __contains__(self, member: object) -> bool:
        return isinstance(member, str) and self.get(member) is not None

    def __len__(self) -> int:
        return len(self.search_fields)

    def __bool__(self) -> bool:
        # A configuration with no effective fields is still a configuration.
        return True

    def __iter__(self) -> Iterator[SearchField]:
        return iter(self.search_fields)
