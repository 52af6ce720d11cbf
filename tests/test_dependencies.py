"""Tests for embedding dependencies and execution order."""

import pytest

from sql2nosql.core.document.dependencies import (
    build_dependency_graph,
    resolve_execution_order,
)
from sql2nosql.core.document.types import (
    DocumentCollection,
    DocumentSchema,
    ObjectField,
    ScalarField,
    ScalarType,
)
from sql2nosql.core.errors import DependencyCycleError


def collection(name, *embeds, opaque=()):
    """Collection with an id field plus one embedded object per name in ``embeds``."""
    fields = [ScalarField("id", ScalarType.NUMBER, optional=False)]
    fields += [ObjectField(e, fields=(ScalarField("id"),)) for e in embeds]
    fields += [ObjectField(o) for o in opaque]
    return DocumentCollection(name=name, fields=fields)


def test_graph_of_music_schema(music_augmented):
    """Album depends on the artist it embeds; references add no edges."""
    assert build_dependency_graph(music_augmented) == {
        "artist": [],
        "album": ["artist"],
        "track": [],
    }


def test_execution_order_puts_dependencies_first(music_augmented):
    """Artist is written before album."""
    order = resolve_execution_order(music_augmented)

    assert order == ["artist", "album", "track"]
    assert order.index("artist") < order.index("album")


def test_ties_follow_schema_order():
    """Independent collections keep their declaration order, not alphabetical."""
    schema = DocumentSchema(collections=[collection("zebra"), collection("yak"), collection("ant")])

    assert resolve_execution_order(schema) == ["zebra", "yak", "ant"]


def test_dependent_declared_first():
    """A dependent declared before its dependency is moved after it."""
    schema = DocumentSchema(
        collections=[
            collection("orders", "customer"),
            collection("notes"),
            collection("customers"),
        ]
    )

    assert build_dependency_graph(schema)["orders"] == ["customers"]
    assert resolve_execution_order(schema) == ["notes", "customers", "orders"]


def test_opaque_objects_are_not_dependencies():
    """Objects without a nested shape never create edges."""
    schema = DocumentSchema(
        collections=[collection("event", opaque=("user",)), collection("user")]
    )

    assert build_dependency_graph(schema) == {"event": [], "user": []}


def test_cycle_is_reported():
    """Mutual embeddings raise with the collections in the cycle."""
    schema = DocumentSchema(
        collections=[
            collection("a", "b"),
            collection("b", "a"),
            collection("c", "a"),
            collection("d"),
        ]
    )

    with pytest.raises(DependencyCycleError) as exc:
        resolve_execution_order(schema)

    assert exc.value.collections == ["a", "b"]
    assert "reference" in str(exc.value)


def test_path_between_cycles_is_not_reported():
    """A collection linking two cycles is not listed as a cycle member."""
    schema = DocumentSchema(
        collections=[
            collection("a", "b"),
            collection("b", "a", "e"),
            collection("e", "c"),
            collection("c", "d"),
            collection("d", "c"),
        ]
    )

    with pytest.raises(DependencyCycleError) as exc:
        resolve_execution_order(schema)

    assert exc.value.collections == ["a", "b", "c", "d"]


def test_self_embedding_is_ignored():
    """A collection never depends on itself."""
    schema = DocumentSchema(collections=[collection("employee", "employee")])

    assert build_dependency_graph(schema) == {"employee": []}
    assert resolve_execution_order(schema) == ["employee"]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
