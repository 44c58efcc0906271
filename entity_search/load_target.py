"""Resolve ``module:attribute`` import strings for the CLI."""

import pkgutil
from typing import Any

from .errors import InvalidConfiguration
from .registry import SearchConfigurationOptions

TARGET_FORMAT = "package.module:attribute"


def load_target(target: str) -> Any:
    """Import and return the object named by ``package.module:attribute``.

    Raises:
        InvalidConfiguration: The string is malformed, the module cannot be
            imported, or the attribute path does not exist.
    """
    module_path, sep, attr_path = target.strip().partition(":")
    if not sep or not module_path or not attr_path.strip(" ."):
        raise InvalidConfiguration(
            f"Target {target!r} must be written as '{TARGET_FORMAT}'."
        )
    try:
        return pkgutil.resolve_name(f"{module_path}:{attr_path.strip()}")
    except ImportError as exc:
        raise InvalidConfiguration(
            f"Could not import the module of target {target!r}: {exc}"
        ) from exc
    except (AttributeError, ValueError) as exc:
        raise InvalidConfiguration(
            f"Target {target!r} does not resolve to an attribute: {exc}"
        ) from exc


def load_entity_type(target: str) -> type:
    """Load a class named by ``module:Class``."""
    obj = load_target(target)
    if not isinstance(obj, type):
        raise TypeError(f"Target '{target}' is not a class.")
    return obj


def load_search_options(target: str) -> SearchConfigurationOptions:
    """Load a registry instance, or build one with an initializer callable.

    The target may name a :class:`SearchConfigurationOptions` instance or a
    callable that accepts a fresh registry and configures it in place.
    """
    obj = load_target(target)
    if isinstance(obj, SearchConfigurationOptions):
        return obj
    if callable(obj) and not isinstance(obj, type):
        options = SearchConfigurationOptions()
        obj(options)
        return options
    raise InvalidConfiguration(
        f"Target '{target}' is neither a SearchConfigurationOptions instance "
        "nor an initializer callable."
    )
