"""Register search fields at startup and read them back at query time.

Run with ``python examples/quickstart.py`` after installing the package.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

from entity_search import (
    MatchMode,
    SearchConfigurationOptions,
    ServiceCollection,
    configure_search,
    get_search_configuration,
    setup_logging,
)


class Contract(BaseModel):
    """Minimal contract card."""

    id: str
    title: str
    summary: str
    counterparty: Optional[str] = None


class Supplier(BaseModel):
    name: str
    description: str
    country: str


def configure(options: SearchConfigurationOptions) -> None:
    options.entity(Contract).declare("title", MatchMode.IGNORE_CASE, weight=2).declare(
        "counterparty", MatchMode.CONTAINS
    )


def main() -> None:
    setup_logging(log_level="DEBUG")
    provider = configure_search(ServiceCollection(), configure).build_provider()

    options = get_search_configuration(provider)
    for entity_type in (Contract, Supplier):
        config = options.entity(entity_type)
        print(entity_type.__name__)
        for field in config.search_fields:
            print(f"  {field.name:<14} {field.match_mode.value:<12} weight={field.weight}")


if __name__ == "__main__":
    main()
