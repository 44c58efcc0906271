"""Tests for JSON search config loading and stub generation."""

import json
from pathlib import Path
from tempfile import TemporaryDirectory

import pytest

from entity_search import (
    InvalidConfiguration,
    InvalidMemberDeclaration,
    MatchMode,
    SearchConfigurationOptions,
    SearchField,
    generate_stub_config,
    load_search_config,
)
from sample_entities import Article, Customer, Invoice, Product

ENTITY_TYPES = [Customer, Product, Article, Invoice]


@pytest.fixture
def config_dir():
    with TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


def write_config(directory: Path, payload) -> Path:
    path = directory / "search.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_load_all_entry_shapes(config_dir):
    path = write_config(
        config_dir,
        {
            "Customer": {
                "match_mode": "contains",
                "fields": [
                    "Name",
                    {"name": "Email", "match_mode": "exact", "weight": 2},
                ],
            },
            "Product": ["sku", "title"],
            "Article": None,
        },
    )
    options = SearchConfigurationOptions()

    applied = load_search_config(path, options, ENTITY_TYPES)

    assert list(applied) == ["Customer", "Product", "Article"]
    assert options.entity(Customer).search_fields == (
        SearchField("Name", MatchMode.CONTAINS),
        SearchField("Email", MatchMode.EXACT, 2.0),
    )
    assert options.entity(Product).field_names == ("sku", "title")
    assert options.entity(Article).field_names == ("Title",)
    assert Invoice not in options


def test_load_with_explicit_name_mapping(config_dir):
    path = write_config(config_dir, {"customers": ["Email"]})
    options = SearchConfigurationOptions()

    load_search_config(path, options, {"customers": Customer})

    assert options.entity(Customer).field_names == ("Email",)


def test_unknown_entity_is_rejected(config_dir):
    path = write_config(config_dir, {"Order": ["Name"]})

    with pytest.raises(InvalidConfiguration, match="Unknown entity 'Order'"):
        load_search_config(path, SearchConfigurationOptions(), ENTITY_TYPES)


def test_unknown_member_is_rejected(config_dir):
    path = write_config(config_dir, {"Customer": ["Phone"]})

    with pytest.raises(InvalidMemberDeclaration, match="Phone"):
        load_search_config(path, SearchConfigurationOptions(), ENTITY_TYPES)


@pytest.mark.parametrize(
    "payload",
    [
        {"Customer": 5},
        {"Customer": {"fields": [{"name": "Email", "boost": 2}]}},
        {"Customer": {"columns": ["Email"]}},
    ],
)
def test_schema_errors_are_reported(config_dir, payload):
    path = write_config(config_dir, payload)

    with pytest.raises(InvalidConfiguration, match="expected schema"):
        load_search_config(path, SearchConfigurationOptions(), ENTITY_TYPES)


def test_non_object_document_is_rejected(config_dir):
    path = write_config(config_dir, ["Customer"])

    with pytest.raises(InvalidConfiguration, match="JSON object"):
        load_search_config(path, SearchConfigurationOptions(), ENTITY_TYPES)


def test_unreadable_file_is_reported(config_dir):
    path = config_dir / "search.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(InvalidConfiguration, match="Failed to read"):
        load_search_config(path, SearchConfigurationOptions(), ENTITY_TYPES)

    with pytest.raises(InvalidConfiguration, match="Failed to read"):
        load_search_config(
            config_dir / "missing.json", SearchConfigurationOptions(), ENTITY_TYPES
        )


def test_generate_stub_lists_effective_fields():
    stub = generate_stub_config([Product, Customer, Invoice])

    assert list(stub) == ["Customer", "Invoice", "Product"]
    assert stub["Customer"] == {
        "match_mode": "exact",
        "fields": [
            {"name": "Name", "match_mode": "exact", "weight": 1.0},
            {"name": "Description", "match_mode": "exact", "weight": 1.0},
        ],
    }
    assert stub["Invoice"]["fields"] == []


def test_stub_can_be_loaded_back(config_dir):
    source = SearchConfigurationOptions()
    source.entity(Product).declare("sku", MatchMode.STARTS_WITH, weight=4)
    path = write_config(config_dir, generate_stub_config([Product], source))

    target = SearchConfigurationOptions()
    load_search_config(path, target, [Product])

    assert target.entity(Product).search_fields == source.entity(Product).search_fields
