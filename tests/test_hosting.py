"""Tests for configure_search and the service provider lifetimes."""

import pytest

from entity_search import (
    ConfigurationFrozen,
    MatchMode,
    MissingRegistration,
    SearchConfigurationOptions,
    SearchField,
    ServiceCollection,
    ServiceLifetime,
    configure_search,
    get_search_configuration,
)
from sample_entities import Customer, Product


class Clock:
    """Stand-in for another host service resolved by an initializer."""

    def __init__(self) -> None:
        self.calls = 0


def test_missing_registration_names_type_and_entry_point():
    provider = ServiceCollection().build_provider()

    with pytest.raises(MissingRegistration) as excinfo:
        get_search_configuration(provider)

    message = str(excinfo.value)
    assert "SearchConfigurationOptions" in message
    assert "configure_search" in message
    assert isinstance(excinfo.value, LookupError)


def test_get_required_service_raises_for_unknown_type():
    provider = ServiceCollection().build_provider()

    assert provider.get_service(Clock) is None
    with pytest.raises(MissingRegistration, match="Clock"):
        provider.get_required_service(Clock)


def test_end_to_end_customer_configuration():
    def configure(options):
        options.entity(Customer).declare("Name").declare(
            "Email", match_mode=MatchMode.CONTAINS
        )

    provider = configure_search(ServiceCollection(), configure).build_provider()

    config = get_search_configuration(provider).entity(Customer)

    assert config.search_fields == (
        SearchField("Name", MatchMode.EXACT),
        SearchField("Email", MatchMode.CONTAINS),
    )


def test_initializer_receives_provider_when_it_takes_two_arguments():
    seen = {}

    def configure(options, provider):
        seen["clock"] = provider.get_required_service(Clock)
        options.entity(Product).declare("sku")

    services = ServiceCollection().add(Clock, lambda provider: Clock())
    provider = configure_search(services, configure).build_provider()

    options = get_search_configuration(provider)

    assert seen["clock"] is provider.get_service(Clock)
    assert options.entity(Product).field_names == ("sku",)


def test_initializer_may_configure_many_entities():
    def configure(options):
        options.entity(Customer).declare("Email")
        options.entity(Product).declare("title", "contains")
        options.entity(Customer).declare("Name")

    provider = configure_search(ServiceCollection(), configure).build_provider()
    options = get_search_configuration(provider)

    assert options.entity_types() == (Customer, Product)
    assert options.entity(Customer).field_names == ("Email", "Name")


def test_registry_is_frozen_after_initializer_by_default():
    provider = configure_search(ServiceCollection()).build_provider()
    options = get_search_configuration(provider)

    assert options.frozen
    with pytest.raises(ConfigurationFrozen):
        options.entity(Customer).declare("Name")


def test_freeze_can_be_disabled():
    provider = configure_search(ServiceCollection(), freeze=False).build_provider()
    options = get_search_configuration(provider)

    options.entity(Customer).declare("Name")
    assert not options.frozen


def test_initializer_errors_propagate():
    def configure(options):
        options.entity(Customer).declare("Phone")

    provider = configure_search(ServiceCollection(), configure).build_provider()

    with pytest.raises(ValueError, match="Phone"):
        get_search_configuration(provider)


def test_singleton_lifetime_shares_one_registry():
    calls = []
    services = configure_search(
        ServiceCollection(), calls.append, lifetime=ServiceLifetime.SINGLETON
    )
    provider = services.build_provider()

    first = get_search_configuration(provider)
    with provider.create_scope() as scope:
        second = get_search_configuration(scope)

    assert first is second
    assert calls == [first]


def test_scoped_lifetime_creates_one_registry_per_scope():
    calls = []
    services = configure_search(
        ServiceCollection(), calls.append, lifetime=ServiceLifetime.SCOPED
    )
    provider = services.build_provider()

    with provider.create_scope() as scope_a, provider.create_scope() as scope_b:
        a1 = get_search_configuration(scope_a)
        a2 = get_search_configuration(scope_a)
        b1 = get_search_configuration(scope_b)

    assert a1 is a2
    assert a1 is not b1
    assert calls == [a1, b1]


def test_scoped_lifetime_requires_a_scope():
    provider = configure_search(
        ServiceCollection(), lifetime=ServiceLifetime.SCOPED
    ).build_provider()

    with pytest.raises(RuntimeError, match="create_scope"):
        get_search_configuration(provider)


def test_transient_lifetime_creates_a_registry_per_resolution():
    calls = []
    services = configure_search(
        ServiceCollection(), calls.append, lifetime=ServiceLifetime.TRANSIENT
    )
    provider = services.build_provider()

    first = get_search_configuration(provider)
    second = get_search_configuration(provider)

    assert first is not second
    assert calls == [first, second]
    assert isinstance(first, SearchConfigurationOptions)


@pytest.mark.parametrize("lifetime", list(ServiceLifetime))
def test_lifetime_is_registered_one_to_one(lifetime):
    services = configure_search(ServiceCollection(), lifetime=lifetime)

    assert services.get_descriptor(SearchConfigurationOptions).lifetime is lifetime


def test_lifetime_accepts_string_values():
    services = configure_search(ServiceCollection(), lifetime="transient")

    descriptor = services.get_descriptor(SearchConfigurationOptions)
    assert descriptor.lifetime is ServiceLifetime.TRANSIENT


def test_initializer_resolving_the_registry_again_is_reported():
    def configure(options, provider):
        get_search_configuration(provider)

    provider = configure_search(ServiceCollection(), configure).build_provider()

    with pytest.raises(RuntimeError, match="Circular resolution of SearchConfigurationOptions"):
        get_search_configuration(provider)


@pytest.mark.parametrize("lifetime", list(ServiceLifetime))
def test_circular_resolution_is_reported_for_every_lifetime(lifetime):
    def configure(options, provider):
        get_search_configuration(provider)

    provider = configure_search(
        ServiceCollection(), configure, lifetime=lifetime
    ).build_provider()

    with provider.create_scope() as scope:
        with pytest.raises(RuntimeError, match="Circular resolution"):
            get_search_configuration(scope)


def test_registry_resolves_after_a_failed_circular_attempt():
    attempts = []

    def configure(options, provider):
        attempts.append(options)
        if len(attempts) == 1:
            get_search_configuration(provider)

    provider = configure_search(ServiceCollection(), configure).build_provider()

    with pytest.raises(RuntimeError, match="Circular resolution"):
        get_search_configuration(provider)
    assert get_search_configuration(provider) is attempts[-1]
