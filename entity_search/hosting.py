"""Host integration: register the search registry with a service provider.

A minimal service container is provided so applications without a DI
framework can still own the registry's lifetime explicitly. The single entry
point is :func:`configure_search`; downstream code retrieves the registry
with :func:`get_search_configuration`.
"""

from __future__ import annotations

import inspect
import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional, Type, TypeVar, cast

from .errors import MissingRegistration
from .registry import SearchConfigurationOptions

logger = logging.getLogger(__name__)

T = TypeVar("T")

Factory = Callable[["ServiceProvider"], Any]
SearchInitializer = Callable[..., None]


class ServiceLifetime(str, Enum):
    """How many instances of a registered service a provider hands out."""

    SINGLETON = "singleton"
    SCOPED = "scoped"
    TRANSIENT = "transient"


@dataclass(frozen=True)
class ServiceDescriptor:
    service_type: type
    factory: Factory
    lifetime: ServiceLifetime


class ServiceCollection:
    """Mutable set of service registrations, turned into a provider once built."""

    def __init__(self) -> None:
        self._descriptors: Dict[type, ServiceDescriptor] = {}

    def add(
        self,
        service_type: type,
        factory: Factory,
        lifetime: ServiceLifetime = ServiceLifetime.SINGLETON,
    ) -> "ServiceCollection":
        lifetime = ServiceLifetime(lifetime)
        if service_type in self._descriptors:
            logger.debug("Replacing registration for %s", service_type.__name__)
        self._descriptors[service_type] = ServiceDescriptor(
            service_type, factory, lifetime
        )
        return self

    def get_descriptor(self, service_type: type) -> Optional[ServiceDescriptor]:
        return self._descriptors.get(service_type)

    def __contains__(self, service_type: object) -> bool:
        return service_type in self._descriptors

    def build_provider(self) -> "ServiceProvider":
        return ServiceProvider(dict(self._descriptors))


class ServiceProvider:
    """Resolves registered services according to their lifetime.

    The root provider owns singletons. :meth:`create_scope` returns a child
    provider that shares those singletons and keeps its own scoped instances.
    """

    def __init__(
        self,
        descriptors: Dict[type, ServiceDescriptor],
        *,
        root: Optional["ServiceProvider"] = None,
    ) -> None:
        self._descriptors = descriptors
        self._root = root or self
        self._instances: Dict[type, Any] = {}
        # Factories may resolve other services while the lock is held.
        self._lock = threading.RLock()
        self._local = threading.local()

    @property
    def is_root(self) -> bool:
        return self._root is self

    def create_scope(self) -> "ServiceProvider":
        return ServiceProvider(self._descriptors, root=self._root)

    def __enter__(self) -> "ServiceProvider":
        return self

    def __exit__(self, *exc_info: object) -> None:
        if not self.is_root:
            self._instances.clear()

    def get_service(self, service_type: Type[T]) -> Optional[T]:
        """Return an instance of ``service_type`` or None when unregistered."""
        descriptor = self._descriptors.get(service_type)
        if descriptor is None:
            return None
        if descriptor.lifetime is ServiceLifetime.TRANSIENT:
            return cast(T, self._root._build(descriptor, self))
        if descriptor.lifetime is ServiceLifetime.SINGLETON:
            owner = self._root
        else:
            if self.is_root:
                raise RuntimeError(
                    f"Scoped service {service_type.__name__} cannot be resolved "
                    "from the root provider; call create_scope() first."
                )
            owner = self
        return cast(T, owner._get_or_create(descriptor, self))

    def _get_or_create(
        self, descriptor: ServiceDescriptor, requester: "ServiceProvider"
    ) -> Any:
        instance = self._instances.get(descriptor.service_type)
        if instance is not None:
            return instance
        with self._lock:
            instance = self._instances.get(descriptor.service_type)
            if instance is None:
                instance = self._root._build(descriptor, requester)
                self._instances[descriptor.service_type] = instance
        return instance

    def _build(self, descriptor: ServiceDescriptor, requester: "ServiceProvider") -> Any:
        # Tracked per thread on the root provider so any scope sees the cycle.
        building = getattr(self._local, "building", None)
        if building is None:
            building = self._local.building = set()
        service_type = descriptor.service_type
        if service_type in building:
            raise RuntimeError(
                f"Circular resolution of {service_type.__name__}: its factory "
                f"requested {service_type.__name__} again before returning."
            )
        building.add(service_type)
        try:
            return descriptor.factory(requester)
        finally:
            building.discard(service_type)

    def get_required_service(self, service_type: Type[T]) -> T:
        instance = self.get_service(service_type)
        if instance is None:
            raise MissingRegistration(service_type.__name__, "ServiceCollection.add")
        return instance


def _wants_provider(configure: SearchInitializer) -> bool:
    try:
        signature = inspect.signature(configure)
    except (TypeError, ValueError):
        return False
    positional = [
        param
        for param in signature.parameters.values()
        if param.kind
        in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
    ]
    has_varargs = any(
        param.kind is inspect.Parameter.VAR_POSITIONAL
        for param in signature.parameters.values()
    )
    return len(positional) >= 2 or has_varargs


def configure_search(
    services: ServiceCollection,
    configure: Optional[SearchInitializer] = None,
    *,
    lifetime: ServiceLifetime = ServiceLifetime.SINGLETON,
    freeze: bool = True,
) -> ServiceCollection:
    """Register :class:`SearchConfigurationOptions` with ``services``.

    Args:
        services: Collection to register with.
        configure: Optional initializer run once per created registry. It
            receives the registry, and the resolving provider as well when it
            accepts two positional arguments.
        lifetime: Registration lifetime, mapped one-to-one onto the provider.
        freeze: Seal the registry once the initializer returns.

    Returns:
        ``services``, for chaining.
    """
    lifetime = ServiceLifetime(lifetime)
    pass_provider = configure is not None and _wants_provider(configure)

    def factory(provider: ServiceProvider) -> SearchConfigurationOptions:
        options = SearchConfigurationOptions()
        if configure is not None:
            if pass_provider:
                configure(options, provider)
            else:
                configure(options)
        if freeze:
            options.freeze()
        return options

    services.add(SearchConfigurationOptions, factory, lifetime)
    logger.debug(
        "Registered SearchConfigurationOptions with %s lifetime", lifetime.value
    )
    return services


def get_search_configuration(provider: ServiceProvider) -> SearchConfigurationOptions:
    """Return the registered registry or raise :class:`MissingRegistration`."""
    options = provider.get_service(SearchConfigurationOptions)
    if options is None:
        raise MissingRegistration(
            SearchConfigurationOptions.__name__, configure_search.__name__
        )
    return options
