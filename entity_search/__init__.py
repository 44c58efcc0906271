"""Per-entity search field configuration with a type-indexed registry."""

from .config_file import (
    apply_search_config,
    generate_stub_config,
    load_search_config,
    parse_search_config,
)
from .entity import EntitySearchConfiguration
from .errors import (
    ConfigurationFrozen,
    InvalidConfiguration,
    InvalidMemberDeclaration,
    MissingRegistration,
    SearchConfigurationError,
)
from .hosting import (
    ServiceCollection,
    ServiceLifetime,
    ServiceProvider,
    configure_search,
    get_search_configuration,
)
from .load_target import load_entity_type, load_search_options, load_target
from .logging_config import setup_logging
from .models import DEFAULT_SEARCH_FIELD_NAMES, MatchMode, SearchField
from .registry import SearchConfigurationOptions

__all__ = [
    "DEFAULT_SEARCH_FIELD_NAMES",
    "ConfigurationFrozen",
    "EntitySearchConfiguration",
    "InvalidConfiguration",
    "InvalidMemberDeclaration",
    "MatchMode",
    "MissingRegistration",
    "SearchConfigurationError",
    "SearchConfigurationOptions",
    "SearchField",
    "ServiceCollection",
    "ServiceLifetime",
    "ServiceProvider",
    "apply_search_config",
    "configure_search",
    "generate_stub_config",
    "get_search_configuration",
    "load_entity_type",
    "load_search_config",
    "load_search_options",
    "load_target",
    "parse_search_config",
    "setup_logging",
]
