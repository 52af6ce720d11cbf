"""Shared fixtures for sql2nosql tests."""

import pytest

from sql2nosql.core.advisory.types import AdvisoryRecommendation, Strategy
from sql2nosql.core.document.mapper import map_to_document_schema
from sql2nosql.core.document.merger import augment_schema
from sql2nosql.core.schema.ddl_parser import parse_sql_schema
from sql2nosql.utils.config import set_config

MUSIC_DDL = """
-- Small music catalog
CREATE TABLE artist (
    artist_id integer PRIMARY KEY,
    name varchar(120)
);

CREATE TABLE album (
    album_id integer PRIMARY KEY,
    title varchar(160) NOT NULL,
    artist_id integer NOT NULL REFERENCES artist(artist_id)
);

CREATE TABLE track (
    track_id integer NOT NULL,
    name varchar(200) NOT NULL,
    album_id integer,
    unit_price numeric(10,2) NOT NULL,
    CONSTRAINT track_pkey PRIMARY KEY (track_id),
    CONSTRAINT track_album_fk FOREIGN KEY (album_id) REFERENCES album (album_id)
);
"""


@pytest.fixture(autouse=True)
def reset_config():
    """Every test starts from the default configuration."""
    set_config(None)
    yield
    set_config(None)


@pytest.fixture
def music_ddl():
    return MUSIC_DDL


@pytest.fixture
def music_schema():
    return parse_sql_schema(MUSIC_DDL)


@pytest.fixture
def music_baseline(music_schema):
    return map_to_document_schema(music_schema)


@pytest.fixture
def music_augmented(music_schema, music_baseline):
    """Album embeds a full copy of its artist."""
    recommendation = AdvisoryRecommendation(
        collection="album", field="artist_id", strategy=Strategy.FULL
    )
    return augment_schema(music_baseline, music_schema, [recommendation]).schema
