"""Exception types raised while declaring or resolving search configuration."""

from __future__ import annotations


class SearchConfigurationError(Exception):
    """Base class for every error raised by entity_search."""


class InvalidConfiguration(SearchConfigurationError, ValueError):
    """A declaration file or option value could not be applied."""


class InvalidMemberDeclaration(InvalidConfiguration):
    """A declared searchable member does not exist or cannot be matched."""

    def __init__(self, entity_type: type, member: str, reason: str) -> None:
        self.entity_type = entity_type
        self.member = member
        self.reason = reason
        super().__init__(
            f"Cannot declare '{member}' as searchable on "
            f"{entity_type.__name__}: {reason}"
        )


class ConfigurationFrozen(SearchConfigurationError, RuntimeError):
    """Raised when a sealed configuration is mutated."""


class MissingRegistration(SearchConfigurationError, LookupError):
    """The service provider has no registry registered."""

    def __init__(self, service_name: str, entry_point: str) -> None:
        self.service_name = service_name
        self.entry_point = entry_point
        super().__init__(
            f"No {service_name} is registered with this service provider. "
            f"Register one with {entry_point}() while building the service collection."
        )
