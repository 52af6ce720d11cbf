"""Tests for reference resolution and the advisory augmentation merger."""

import pytest

from sql2nosql.core.advisory.types import (
    AdvisoryRecommendation,
    RelationshipType,
    Strategy,
)
from sql2nosql.core.document.mapper import map_to_document_schema
from sql2nosql.core.document.merger import augment_schema, nested_field_name
from sql2nosql.core.document.resolver import resolve_referenced_table
from sql2nosql.core.document.types import ObjectField, ReferenceField
from sql2nosql.core.schema.ddl_parser import parse_sql_schema

IMPLICIT_DDL = """
CREATE TABLE genres (genre_id integer PRIMARY KEY, name text, description text);
CREATE TABLE track (track_id integer PRIMARY KEY, title text, genre_id integer);
"""


def rec(collection, field, strategy, **kwargs):
    return AdvisoryRecommendation(
        collection=collection, field=field, strategy=strategy, **kwargs
    )


def test_resolve_prefers_foreign_key(music_schema):
    """A declared foreign key wins over name matching."""
    resolved = resolve_referenced_table(music_schema, "album", "artist_id")

    assert resolved.table.name == "artist"
    assert resolved.is_explicit


def test_resolve_by_plural_name():
    """Without a foreign key the stripped name is matched against table names."""
    schema = parse_sql_schema(IMPLICIT_DDL)
    resolved = resolve_referenced_table(schema, "track", "genre_id")

    assert resolved.table.name == "genres"
    assert not resolved.is_explicit


def test_resolve_unknown_field(music_schema):
    """Nothing matches a field with no table behind it."""
    assert resolve_referenced_table(music_schema, "album", "label_id") is None
    assert resolve_referenced_table(music_schema, "album", "id") is None


def test_nested_field_name():
    """Id suffixes are stripped; a bare id gets an _obj suffix."""
    assert nested_field_name("artist_id") == "artist"
    assert nested_field_name("ArtistId") == "Artist"
    assert nested_field_name("id") == "id_obj"


def test_full_embedding_of_foreign_key(music_schema, music_baseline):
    """A full embedding adds an object with every column of the target table."""
    result = augment_schema(
        music_baseline, music_schema, [rec("album", "artist_id", Strategy.FULL)]
    )
    album = result.schema.get_collection("album")
    artist = album.get_field("artist")

    assert isinstance(artist, ObjectField)
    assert artist.is_embedded
    assert artist.nested_names == ["artist_id", "name"]
    assert all(f.optional for f in artist.fields)
    # The reference stays next to the embedded copy
    assert isinstance(album.get_field("artist_id"), ReferenceField)
    assert album.field_names[-1] == "artist"
    assert [o.nested_field for o in result.applied] == ["artist"]
    assert result.skipped == []


def test_baseline_is_not_modified(music_schema, music_baseline):
    """Merging returns a new schema."""
    augment_schema(music_baseline, music_schema, [rec("album", "artist_id", Strategy.FULL)])

    assert music_baseline == map_to_document_schema(music_schema)
    assert music_baseline.get_collection("album").get_field("artist") is None


def test_merge_is_idempotent(music_schema, music_baseline):
    """Applying the same recommendations twice changes nothing the second time."""
    recommendations = [
        rec("album", "artist_id", Strategy.PARTIAL, suggested_fields=["name"]),
        rec("track", "album_id", Strategy.HYBRID, suggested_fields=["title"]),
    ]
    once = augment_schema(music_baseline, music_schema, recommendations)
    twice = augment_schema(once.schema, music_schema, recommendations)

    assert twice.schema == once.schema


def test_partial_embedding_keeps_suggested_and_id_fields(music_schema, music_baseline):
    """Suggested fields come first, then id-like columns; unknown names are dropped."""
    result = augment_schema(
        music_baseline,
        music_schema,
        [rec("album", "artist_id", Strategy.PARTIAL, suggested_fields=["name", "nope"])],
    )
    artist = result.schema.get_collection("album").get_field("artist")

    assert artist.nested_names == ["name", "artist_id"]


def test_second_recommendation_merges_into_existing_object(music_schema, music_baseline):
    """A later recommendation for the same field only adds missing nested fields."""
    result = augment_schema(
        music_baseline,
        music_schema,
        [
            rec("album", "artist_id", Strategy.PARTIAL, suggested_fields=["artist_id"]),
            rec("album", "artist_id", Strategy.HYBRID, suggested_fields=["name"]),
        ],
    )
    artist = result.schema.get_collection("album").get_field("artist")

    assert artist.nested_names == ["artist_id", "name"]
    assert len(result.applied) == 2


def test_full_embedding_of_implicit_relationship_is_skipped():
    """Full embeddings need a foreign key."""
    schema = parse_sql_schema(IMPLICIT_DDL)
    baseline = map_to_document_schema(schema)

    result = augment_schema(
        baseline,
        schema,
        [
            rec("track", "genre_id", Strategy.FULL),
            rec(
                "track",
                "genre_id",
                Strategy.FULL,
                relationship_type=RelationshipType.IMPLICIT,
            ),
        ],
    )

    assert result.schema == baseline
    assert len(result.skipped) == 2
    assert all("foreign-key" in o.reason for o in result.skipped)


def test_partial_embedding_of_implicit_relationship():
    """Implicit relationships can be embedded partially."""
    schema = parse_sql_schema(IMPLICIT_DDL)
    baseline = map_to_document_schema(schema)

    result = augment_schema(
        baseline,
        schema,
        [
            rec(
                "track",
                "genre_id",
                Strategy.PARTIAL,
                relationship_type=RelationshipType.IMPLICIT,
                suggested_fields=["name"],
            )
        ],
    )
    genre = result.schema.get_collection("track").get_field("genre")

    assert genre.nested_names == ["name", "genre_id"]


def test_reference_strategy_leaves_schema_unchanged(music_schema, music_baseline):
    """Reference recommendations are accepted without changing anything."""
    result = augment_schema(
        music_baseline, music_schema, [rec("album", "artist_id", Strategy.REFERENCE)]
    )

    assert result.schema == music_baseline
    assert len(result.applied) == 1
    assert result.applied[0].nested_field is None


def test_unresolvable_recommendations_are_skipped(music_schema, music_baseline):
    """Unknown collections and unresolvable fields are skipped, not raised."""
    result = augment_schema(
        music_baseline,
        music_schema,
        [
            rec("playlist", "track_id", Strategy.PARTIAL),
            rec("album", "label_id", Strategy.PARTIAL),
        ],
    )

    assert result.schema == music_baseline
    assert [o.recommendation.collection for o in result.skipped] == ["playlist", "album"]


def test_low_confidence_recommendations_are_skipped(music_schema, music_baseline):
    """Recommendations below the confidence threshold are ignored."""
    result = augment_schema(
        music_baseline,
        music_schema,
        [rec("album", "artist_id", Strategy.FULL, confidence=0.3)],
        min_confidence=0.5,
    )

    assert result.schema == music_baseline
    assert len(result.skipped) == 1


def test_name_clash_with_scalar_field_is_skipped():
    """An existing non-object field with the embedded name is left alone."""
    schema = parse_sql_schema(
        """
        CREATE TABLE artist (artist_id integer PRIMARY KEY, name text);
        CREATE TABLE album (
            album_id integer PRIMARY KEY,
            artist text,
            artist_id integer REFERENCES artist(artist_id)
        );
        """
    )
    baseline = map_to_document_schema(schema)
    result = augment_schema(baseline, schema, [rec("album", "artist_id", Strategy.FULL)])

    assert result.schema == baseline
    assert "already exists" in result.skipped[0].reason


def test_bare_id_foreign_key_gets_obj_suffix():
    """A foreign key on a column named id embeds under id_obj."""
    schema = parse_sql_schema(
        """
        CREATE TABLE users (id integer PRIMARY KEY, email text);
        CREATE TABLE profile (id integer PRIMARY KEY REFERENCES users(id), bio text);
        """
    )
    baseline = map_to_document_schema(schema)
    result = augment_schema(baseline, schema, [rec("profile", "id", Strategy.FULL)])
    embedded = result.schema.get_collection("profile").get_field("id_obj")

    assert embedded.nested_names == ["id", "email"]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
