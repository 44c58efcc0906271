"""Type-indexed registry of entity search configurations."""

from __future__ import annotations

import logging
import threading
from typing import Dict, Iterator, Sequence, Tuple, Type, TypeVar, Union

from .entity import EntitySearchConfiguration
from .models import DEFAULT_SEARCH_FIELD_NAMES, MatchMode

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SearchConfigurationOptions:
    """Holds one :class:`EntitySearchConfiguration` per entity type.

    Configurations are created lazily the first time a type is requested and
    every later request returns that same instance. Lookups are plain
    dictionary reads; only the create path is serialized, and it re-checks
    under the lock so concurrent first callers agree on a single instance.

    The registry is meant to be built once per host lifetime and passed to
    its consumers. Declarations belong to the configuration phase, which ends
    with :meth:`freeze`; after that the registry is safe to share with
    request-serving code.

    ``default_search_field_names`` starts from the process-wide
    :data:`DEFAULT_SEARCH_FIELD_NAMES` and cannot change after construction.
    Passing another sequence is an extension for hosts whose entities follow
    a different naming convention; the module-level tuple itself is fixed.
    """

    def __init__(
        self,
        *,
        default_match_mode: Union[MatchMode, str] = MatchMode.EXACT,
        default_search_field_names: Sequence[str] = DEFAULT_SEARCH_FIELD_NAMES,
    ) -> None:
        self._default_match_mode = MatchMode.parse(default_match_mode)
        self._default_search_field_names: Tuple[str, ...] = tuple(
            default_search_field_names
        )
        self._entities: Dict[type, EntitySearchConfiguration] = {}
        self._create_lock = threading.Lock()
        self._frozen = False

    @property
    def default_search_field_names(self) -> Tuple[str, ...]:
        return self._default_search_field_names

    @property
    def default_match_mode(self) -> MatchMode:
        return self._default_match_mode

    @property
    def frozen(self) -> bool:
        return self._frozen

    def entity(self, entity_type: Type[T]) -> EntitySearchConfiguration[T]:
        """Return the configuration for ``entity_type``, creating it on first use."""
        config = self._entities.get(entity_type)
        if config is not None:
            return config
        if not isinstance(entity_type, type):
            raise TypeError(f"Entity type must be a class, got {entity_type!r}")

        with self._create_lock:
            config = self._entities.get(entity_type)
            if config is None:
                config = EntitySearchConfiguration(entity_type, self)
                if self._frozen:
                    config.freeze()
                self._entities[entity_type] = config
                logger.debug(
                    "Created search configuration for %s", entity_type.__name__
                )
        return config

    def freeze(self) -> None:
        """End the configuration phase for every current and future entity."""
        with self._create_lock:
            if self._frozen:
                return
            self._frozen = True
            for config in self._entities.values():
                config.freeze()
        logger.info(
            "Search configuration frozen with %d entity type(s)", len(self._entities)
        )

    def entity_types(self) -> Tuple[type, ...]:
        return tuple(self._entities)

    def __contains__(self, entity_type: object) -> bool:
        return entity_type in self._entities

    def __len__(self) -> int:
        return len(self._entities)

    def __bool__(self) -> bool:
        return True

    def __iter__(self) -> Iterator[EntitySearchConfiguration]:
        return iter(tuple(self._entities.values()))
