"""Load search declarations from JSON files and scaffold new ones."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError

from .entity import EntitySearchConfiguration
from .errors import InvalidConfiguration
from .models import MatchMode
from .registry import SearchConfigurationOptions

logger = logging.getLogger(__name__)


class FieldEntry(BaseModel):
    """One field declaration in a search config file."""

    model_config = ConfigDict(extra="forbid")

    name: str
    match_mode: Optional[str] = None
    weight: float = 1.0


class EntityEntry(BaseModel):
    """Declarations for a single entity type."""

    model_config = ConfigDict(extra="forbid")

    match_mode: Optional[str] = None
    fields: List[Union[str, FieldEntry]] = []


EntityValue = Union[None, List[Union[str, FieldEntry]], EntityEntry]

_FILE_ADAPTER: TypeAdapter[Dict[str, EntityValue]] = TypeAdapter(
    Dict[str, EntityValue]
)


def _index_entity_types(
    entity_types: Union[Mapping[str, type], Iterable[type]],
) -> Dict[str, type]:
    if isinstance(entity_types, Mapping):
        return dict(entity_types)
    index: Dict[str, type] = {}
    for entity_type in entity_types:
        name = entity_type.__name__
        if name in index and index[name] is not entity_type:
            raise InvalidConfiguration(
                f"Entity name '{name}' refers to more than one type; "
                "pass an explicit name mapping instead."
            )
        index[name] = entity_type
    return index


def parse_search_config(raw: object) -> Dict[str, EntityValue]:
    """Validate the decoded JSON document against the file schema."""
    try:
        return _FILE_ADAPTER.validate_python(raw)
    except ValidationError as exc:
        raise InvalidConfiguration(
            f"Search config does not match the expected schema: {exc}"
        ) from exc


def apply_search_config(
    document: Mapping[str, EntityValue],
    options: SearchConfigurationOptions,
    entity_types: Union[Mapping[str, type], Iterable[type]],
) -> Dict[str, EntitySearchConfiguration]:
    """Apply parsed declarations to ``options`` and return the touched configs."""
    index = _index_entity_types(entity_types)
    applied: Dict[str, EntitySearchConfiguration] = {}
    for entity_name, entry in document.items():
        entity_type = index.get(entity_name)
        if entity_type is None:
            raise InvalidConfiguration(
                f"Unknown entity '{entity_name}' in search config. "
                f"Known entities: {', '.join(sorted(index)) or '(none)'}"
            )
        config = options.entity(entity_type)
        if entry is None:
            logger.debug("Using default search fields for %s", entity_name)
        elif isinstance(entry, EntityEntry):
            for item in entry.fields:
                _declare(config, item, entry.match_mode)
        else:
            for item in entry:
                _declare(config, item, None)
        applied[entity_name] = config
    return applied


def _declare(
    config: EntitySearchConfiguration,
    item: Union[str, FieldEntry],
    entity_mode: Optional[str],
) -> None:
    if isinstance(item, str):
        config.declare(item, entity_mode)
    else:
        config.declare(item.name, item.match_mode or entity_mode, weight=item.weight)


def load_search_config(
    config_path: Path,
    options: SearchConfigurationOptions,
    entity_types: Union[Mapping[str, type], Iterable[type]],
) -> Dict[str, EntitySearchConfiguration]:
    """Read a JSON search config file and apply it to ``options``.

    Args:
        config_path: Path to the JSON file.
        options: Registry receiving the declarations.
        entity_types: Entity classes the file may mention, either as a
            mapping of config names to classes or as classes keyed by
            ``__name__``.

    Returns:
        Mapping of entity name to its configuration, in file order.

    Raises:
        InvalidConfiguration: The file is unreadable, malformed, or names an
            unknown entity or member.
    """
    try:
        raw = json.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise InvalidConfiguration(
            f"Failed to read search config from {config_path}: {exc}"
        ) from exc
    if not isinstance(raw, dict):
        raise InvalidConfiguration(
            f"Search config file {config_path} does not contain a JSON object"
        )
    applied = apply_search_config(parse_search_config(raw), options, entity_types)
    logger.info(
        "Loaded search config for %d entity type(s) from %s", len(applied), config_path
    )
    return applied


def generate_stub_config(
    entity_types: Union[Mapping[str, type], Iterable[type]],
    options: Optional[SearchConfigurationOptions] = None,
) -> Dict[str, Dict[str, object]]:
    """Create a config document listing each entity's current effective fields."""
    if options is None:
        options = SearchConfigurationOptions()
    index = _index_entity_types(entity_types)
    default_mode: MatchMode = options.default_match_mode
    stub: Dict[str, Dict[str, object]] = {}
    for entity_name in sorted(index):
        config = options.entity(index[entity_name])
        stub[entity_name] = {
            "match_mode": default_mode.value,
            "fields": [
                {
                    "name": field.name,
                    "match_mode": field.match_mode.value,
                    "weight": field.weight,
                }
                for field in config.search_fields
            ],
        }
    return stub
