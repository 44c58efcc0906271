"""Member discovery for entity types.

Entity types may be Pydantic models, dataclasses, or plain classes with
annotations or properties. Each member is reported with its annotation (or
``Any`` when none is known) so the builder can decide whether it can take
part in text or value matching.
"""

from __future__ import annotations

import dataclasses
import datetime
import decimal
import enum
import logging
import types
import typing
import uuid
from typing import Any, Dict, Iterable, List, Literal, Optional, Union

from pydantic import BaseModel, PydanticUserError, TypeAdapter

logger = logging.getLogger(__name__)

MATCHABLE_TYPES = (
    str,
    int,
    float,
    bool,
    decimal.Decimal,
    uuid.UUID,
    datetime.date,
    datetime.datetime,
    datetime.time,
)

SCALAR_SCHEMA_TYPES = frozenset({"string", "integer", "number", "boolean"})

_UNION_TYPES = (Union, types.UnionType)


def _resolved_hints(entity_type: type) -> Dict[str, Any]:
    try:
        return typing.get_type_hints(entity_type)
    except (NameError, TypeError) as exc:
        logger.debug(
            "Could not resolve annotations of %s (%s); using raw annotations",
            entity_type.__name__,
            exc,
        )
        hints: Dict[str, Any] = {}
        for klass in reversed(entity_type.__mro__):
            hints.update(getattr(klass, "__annotations__", {}))
        return hints


def list_members(entity_type: type) -> Dict[str, Any]:
    """Return ``{member_name: annotation}`` in declaration order."""
    if isinstance(entity_type, type) and issubclass(entity_type, BaseModel):
        members: Dict[str, Any] = {
            name: field.annotation for name, field in entity_type.model_fields.items()
        }
    elif dataclasses.is_dataclass(entity_type):
        hints = _resolved_hints(entity_type)
        members = {
            field.name: hints.get(field.name, field.type)
            for field in dataclasses.fields(entity_type)
        }
    else:
        members = {
            name: annotation
            for name, annotation in _resolved_hints(entity_type).items()
            if not name.startswith("_")
            and typing.get_origin(annotation) is not typing.ClassVar
        }

    for klass in entity_type.__mro__:
        if klass is object or klass in BaseModel.__mro__:
            continue
        for name, value in vars(klass).items():
            if isinstance(value, property) and not name.startswith("_"):
                if name not in members:
                    members[name] = _property_annotation(value)
    return members


def _property_annotation(prop: property) -> Any:
    if prop.fget is None:
        return Any
    try:
        hints = typing.get_type_hints(prop.fget)
    except (NameError, TypeError):
        return Any
    return hints.get("return", Any)


def _scalar_schema(annotation: Any) -> bool:
    """Ask pydantic whether ``annotation`` validates to a JSON scalar."""
    try:
        schema = TypeAdapter(annotation).json_schema()
    except (PydanticUserError, ImportError, TypeError) as exc:
        logger.debug("No JSON schema for %r (%s)", annotation, exc)
        return False
    return schema.get("type") in SCALAR_SCHEMA_TYPES


def is_matchable(annotation: Any) -> bool:
    """Return True when values of ``annotation`` can be compared to a search term."""
    if annotation is Any or annotation is None:
        return True
    if annotation is type(None):
        return False
    supertype = getattr(annotation, "__supertype__", None)
    if supertype is not None:
        return is_matchable(supertype)
    origin = typing.get_origin(annotation)
    if origin is typing.Annotated:
        return is_matchable(typing.get_args(annotation)[0])
    if origin is Literal:
        return True
    if origin in _UNION_TYPES:
        args = [arg for arg in typing.get_args(annotation) if arg is not type(None)]
        return bool(args) and all(is_matchable(arg) for arg in args)
    if origin is not None:
        return False
    if isinstance(annotation, type):
        if issubclass(annotation, enum.Enum):
            return True
        if issubclass(annotation, MATCHABLE_TYPES):
            return True
        if issubclass(annotation, BaseModel):
            return False
        # EmailStr, HttpUrl and similar validate from strings
        return _scalar_schema(annotation)
    return False


def find_member(members: Iterable[str], requested: str) -> List[str]:
    """Return candidate member names for ``requested``.

    An exact name wins outright; otherwise every case-insensitive match is
    returned so the caller can reject ambiguous declarations.
    """
    names = list(members)
    if requested in names:
        return [requested]
    folded = requested.casefold()
    return [name for name in names if name.casefold() == folded]


def resolve_member(members: Dict[str, Any], requested: str) -> Optional[str]:
    """Return the single member matching ``requested`` or None."""
    candidates = find_member(members, requested)
    if len(candidates) == 1:
        return candidates[0]
    return None
