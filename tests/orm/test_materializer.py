# tests/orm/test_materializer.py
"""
Tests for turning Neo4j records back into models.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from unittest.mock import MagicMock

import pytest
from neo4j import Record
from neo4j.graph import Node
from neo4j.time import DateTime
from pydantic import Field

from neo4jidentity.exceptions import MaterializationError
from neo4jidentity.identity.models import IdentityRole, IdentityUser
from neo4jidentity.orm.descriptors import describe
from neo4jidentity.orm.entities import GraphEntity
from neo4jidentity.orm.materializer import materialize
from neo4jidentity.orm.projection import exclude


class Gadget(GraphEntity):
    name: str = "unnamed"
    count: int = 0
    tags: List[str] = Field(default_factory=list)
    seen_at: Optional[datetime] = None


class Profile(GraphEntity):
    display_name: Optional[str] = Field(None, alias="displayName")
    locale: str = Field(default="en", validation_alias="localeCode")
    meta: Dict[str, Any] = Field(default_factory=dict)


def make_node(properties):
    node = MagicMock(spec=Node)
    node.items.return_value = list(properties.items())
    return node


class TestMappingRecords:
    """Plain mappings are matched by field name."""

    def test_fields_are_assigned(self):
        gadget = materialize(Gadget, {"name": "lamp", "count": 3, "tags": ["a"]})

        assert gadget.name == "lamp"
        assert gadget.count == 3
        assert gadget.tags == ["a"]

    def test_missing_fields_keep_defaults(self):
        gadget = materialize(Gadget, {"name": "lamp"})

        assert gadget.count == 0
        assert gadget.tags == []
        assert gadget.entity_id is None

    def test_unknown_keys_are_ignored(self):
        gadget = materialize(Gadget, {"name": "lamp", "colour": "red", "Extra": 1})

        assert gadget.name == "lamp"
        assert not hasattr(gadget, "colour")

    def test_matching_is_case_sensitive(self):
        gadget = materialize(Gadget, {"Name": "lamp"})

        assert gadget.name == "unnamed"

    def test_identifier_taken_from_record(self):
        gadget = materialize(Gadget, {"name": "lamp", "entity_id": 99})

        assert gadget.entity_id == 99

    def test_null_identifier_left_unset(self):
        gadget = materialize(Gadget, {"entity_id": None})

        assert gadget.entity_id is None

    def test_values_are_coerced_to_declared_type(self):
        gadget = materialize(Gadget, {"count": "7"})

        assert gadget.count == 7


class TestNeo4jRecords:
    """Records and nodes returned by the driver."""

    def test_record_with_single_node_is_unwrapped(self):
        record = Record({"p": make_node({"name": "Admin", "normalized_name": "ADMIN", "entity_id": 4})})

        role = materialize(IdentityRole, record)

        assert role.name == "Admin"
        assert role.normalized_name == "ADMIN"
        assert role.entity_id == 4

    def test_node_directly(self):
        role = materialize(IdentityRole, make_node({"name": "Ops"}))

        assert role.name == "Ops"

    def test_record_with_scalar_columns(self):
        record = Record({"name": "lamp", "count": 2})

        gadget = materialize(Gadget, record)

        assert gadget.name == "lamp"
        assert gadget.count == 2

    def test_neo4j_temporal_values_become_native(self):
        seen = DateTime(2024, 5, 17, 10, 30, 0, tzinfo=timezone.utc)

        gadget = materialize(Gadget, {"seen_at": seen})

        assert isinstance(gadget.seen_at, datetime)
        assert gadget.seen_at == datetime(2024, 5, 17, 10, 30, tzinfo=timezone.utc)

    def test_identity_user_round_trip_fields(self):
        original = IdentityUser(user_name="alice", normalized_user_name="ALICE", access_failed_count=2)
        properties = {**original.model_dump(exclude={"entity_id"}), "entity_id": 31}

        restored = materialize(IdentityUser, Record({"p": make_node(properties)}))

        assert restored.entity_id == 31
        assert restored.model_dump(exclude={"entity_id"}) == original.model_dump(exclude={"entity_id"})


class TestFailures:
    """Coercion failures surface as MaterializationError."""

    def test_uncoercible_value(self):
        with pytest.raises(MaterializationError, match="Gadget") as exc_info:
            materialize(Gadget, {"count": "many"})

        assert exc_info.value.target is Gadget
        assert exc_info.value.__cause__ is not None

    def test_uncoercible_identifier(self):
        with pytest.raises(MaterializationError):
            materialize(Gadget, {"entity_id": "abc"})

    def test_unsupported_record_type(self):
        with pytest.raises(TypeError):
            materialize(Gadget, 42)


class TestAliasedFields:
    """Aliased fields read back what a projection wrote."""

    def test_projection_round_trip(self):
        profile = Profile(displayName="Alice A.", localeCode="fr", entity_id=3)
        payload = exclude(profile)

        restored = materialize(Profile, {**payload, "entity_id": 3})

        assert payload["display_name"] == "Alice A."
        assert restored.display_name == "Alice A."
        assert restored.locale == "fr"
        assert restored.entity_id == 3

    def test_alias_keys_in_record_are_not_fields(self):
        profile = materialize(Profile, {"displayName": "ignored"})

        assert profile.display_name is None

    def test_descriptor_records_alias(self):
        descriptor = describe(Profile)

        assert descriptor.get_field("display_name").input_name == "displayName"
        assert descriptor.get_field("locale").input_name == "localeCode"
        assert descriptor.get_field("meta").input_name == "meta"


class TestNestedValues:
    def test_temporal_values_inside_maps_become_native(self):
        at = DateTime(2030, 1, 1, 0, 0, 0, tzinfo=timezone.utc)

        profile = materialize(Profile, {"meta": {"at": at, "history": [at]}})

        assert profile.meta["at"] == datetime(2030, 1, 1, tzinfo=timezone.utc)
        assert isinstance(profile.meta["at"], datetime)
        assert isinstance(profile.meta["history"][0], datetime)
