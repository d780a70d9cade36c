# tests/orm/test_entities.py
"""
Tests for the GraphEntity / GraphRelationship base models: registration,
decorator configuration and validation behavior.
"""

import pytest
from pydantic import BaseModel, ValidationError

from neo4jidentity.identity.models import Has, IdentityRole, IdentityUser, IsIn
from neo4jidentity.orm.entities import (
    GraphEntity,
    get_entity_by_label,
    get_entity_classes,
    graph_entity,
)
from neo4jidentity.orm.relationships import (
    GraphRelationship,
    get_relationship_by_type,
    get_relationship_classes,
    graph_relationship,
)


class Ledger(GraphEntity):
    title: str = ""


@graph_entity(label="Archive")
class ArchivedLedger(Ledger):
    pass


class Follows(GraphRelationship):
    pass


@graph_relationship(relationship_type="KNOWS", directed=False)
class Knows(GraphRelationship):
    pass


class TestGraphEntity:
    """Base entity behavior."""

    def test_identifier_defaults_to_none(self):
        ledger = Ledger(title="2024")

        assert ledger.entity_id is None
        assert ledger.is_persisted is False

    def test_identifier_assignment_marks_persisted(self):
        ledger = Ledger(title="2024")
        ledger.entity_id = 17

        assert ledger.is_persisted is True

    def test_assignment_is_validated(self):
        ledger = Ledger()

        with pytest.raises(ValidationError):
            ledger.entity_id = "not-a-number"

    def test_unknown_fields_rejected(self):
        with pytest.raises(ValidationError):
            Ledger(title="x", colour="red")

    def test_class_label_defaults_to_name(self):
        assert Ledger._get_class_label() == "Ledger"
        assert ArchivedLedger._get_class_label() == "Archive"


class TestEntityRegistry:
    """Entity classes register themselves on creation."""

    def test_subclasses_are_registered(self):
        classes = get_entity_classes()

        assert Ledger in classes
        assert IdentityUser in classes
        assert IdentityRole in classes
        assert GraphEntity not in classes

    def test_lookup_by_label(self):
        assert get_entity_by_label("Ledger") is Ledger
        assert get_entity_by_label("Archive") is ArchivedLedger
        assert get_entity_by_label("NoSuchLabel") is None


class TestGraphEntityDecorator:
    """@graph_entity validation."""

    def test_rejects_non_entity_classes(self):
        with pytest.raises(TypeError, match="GraphEntity subclasses"):
            @graph_entity(label="Nope")
            class NotAnEntity(BaseModel):
                pass

    def test_rejects_labels_that_are_not_identifiers(self):
        with pytest.raises(ValueError, match="valid identifier"):
            @graph_entity(label="Bad Label) DETACH DELETE (n")
            class Injected(GraphEntity):
                pass

    def test_bare_decorator_keeps_class_name(self):
        @graph_entity
        class Journal(GraphEntity):
            pass

        assert Journal._get_class_label() == "Journal"


class TestGraphRelationship:
    """Relationship types and their registry."""

    def test_default_type_is_upper_class_name(self):
        assert Follows._get_class_relationship_type() == "FOLLOWS"

    def test_decorator_sets_type_and_direction(self):
        assert Knows._get_class_relationship_type() == "KNOWS"
        assert Knows.is_directed() is False
        assert Follows.is_directed() is True

    def test_identity_relationship_types(self):
        assert Has._get_class_relationship_type() == "HAS"
        assert IsIn._get_class_relationship_type() == "IS_IN"

    def test_registry(self):
        assert Follows in get_relationship_classes()
        assert get_relationship_by_type("IS_IN") is IsIn
        assert get_relationship_by_type("MISSING") is None

    def test_rejects_non_relationship_classes(self):
        with pytest.raises(TypeError, match="GraphRelationship subclasses"):
            graph_relationship(Ledger)

    def test_rejects_invalid_type_tokens(self):
        with pytest.raises(ValueError):
            @graph_relationship(relationship_type="HAS]->(x")
            class Broken(GraphRelationship):
                pass
