"""Tests for schema sources, the SQLAlchemy row source and the MongoDB sink."""

import datetime
import decimal
import uuid

import pytest
from bson.decimal128 import Decimal128
from sqlalchemy import create_engine, text

from sql2nosql.connectors import (
    ConnectorFactory,
    DBConnector,
    DDLLoader,
    InMemoryDocumentSink,
    InMemoryRowSource,
    SQLAlchemyRowSource,
)
from sql2nosql.connectors.mongo_sink import MongoDocumentSink, to_bson_value
from sql2nosql.core.advisory.types import AdvisoryRecommendation, Strategy
from sql2nosql.core.document.merger import augment_schema
from sql2nosql.core.migration.params import IndexSpec, MigrationConfig
from sql2nosql.core.migration.runtime import MigrationRunner
from sql2nosql.core.migration.synthesizer import synthesize_parameters
from sql2nosql.core.schema.ddl_parser import parse_sql_schema
from sql2nosql.core.schema.types import SqlColumnType
from sql2nosql.core.document.mapper import map_to_document_schema
from sql2nosql.utils.config import Config

SQLITE_DDL = [
    "CREATE TABLE artist (artist_id INTEGER PRIMARY KEY, name VARCHAR(120))",
    """CREATE TABLE album (
        album_id INTEGER PRIMARY KEY,
        title TEXT NOT NULL,
        artist_id INTEGER NOT NULL REFERENCES artist (artist_id)
    )""",
    """CREATE TABLE order_line (
        order_id INTEGER NOT NULL,
        line_no INTEGER NOT NULL,
        price NUMERIC(10, 2),
        PRIMARY KEY (order_id, line_no)
    )""",
]


@pytest.fixture
def sqlite_url(tmp_path):
    url = f"sqlite:///{tmp_path / 'music.db'}"
    engine = create_engine(url)
    with engine.begin() as conn:
        for statement in SQLITE_DDL:
            conn.execute(text(statement))
        conn.execute(
            text("INSERT INTO artist (artist_id, name) VALUES (1, 'AC/DC'), (2, 'Accept')")
        )
        conn.execute(
            text(
                "INSERT INTO album (album_id, title, artist_id) VALUES "
                "(10, 'Let There Be Rock', 1), (11, 'Balls to the Wall', 2)"
            )
        )
        conn.execute(
            text(
                "INSERT INTO order_line (order_id, line_no, price) VALUES "
                "(1, 1, 5), (1, 2, 6), (1, 3, 7), (2, 1, 8), (2, 2, 9)"
            )
        )
    engine.dispose()
    return url


class FakeCollection:
    def __init__(self):
        self.calls = []

    def create_index(self, keys, unique=False, name=None):
        self.calls.append(("create_index", keys, unique, name))

    def update_one(self, filter, update, upsert=False):
        self.calls.append(("update_one", filter, update, upsert))

    def find(self, filter, projection):
        self.calls.append(("find", filter, projection))
        return iter([{"artist_id": 1}])


class FakeDatabase(dict):
    def __missing__(self, name):
        self[name] = FakeCollection()
        return self[name]


class FakeMongoClient:
    def __init__(self):
        self.databases = {}
        self.closed = False

    def __getitem__(self, name):
        return self.databases.setdefault(name, FakeDatabase())

    def close(self):
        self.closed = True


class StoringCollection:
    """Keeps documents in their BSON-converted form, as MongoDB returns them."""

    def __init__(self):
        self.documents = []

    def create_index(self, keys, unique=False, name=None):
        pass

    def update_one(self, filter, update, upsert=False):
        for doc in self.documents:
            if all(doc.get(k) == v for k, v in filter.items()):
                doc.update(update["$set"])
                return
        self.documents.append({**filter, **update["$set"]})

    def find(self, filter, projection):
        return iter([dict(d) for d in self.documents])


class StoringDatabase(dict):
    def __missing__(self, name):
        self[name] = StoringCollection()
        return self[name]


class StoringMongoClient(FakeMongoClient):
    def __getitem__(self, name):
        return self.databases.setdefault(name, StoringDatabase())


def test_db_connector_introspects_sqlite(sqlite_url):
    """Tables, keys, types and foreign keys are read through the inspector."""
    connector = DBConnector(sqlite_url)
    try:
        schema = connector.load_schema()
    finally:
        connector.close()

    assert set(schema.table_names) == {"artist", "album", "order_line"}
    order_line = schema.get_table("order_line")
    assert order_line.primary_key == ("order_id", "line_no")
    assert order_line.get_column("price").type == SqlColumnType.NUMERIC
    assert schema.get_table("album").get_column("title").type == SqlColumnType.TEXT
    assert not schema.get_table("artist").get_column("artist_id").nullable

    fk = schema.find_foreign_key("album", "artist_id")
    assert (fk.to_table, fk.to_column) == ("artist", "artist_id")


def test_db_connector_table_filter(sqlite_url):
    """Only the requested tables are analyzed."""
    connector = DBConnector(sqlite_url, tables=["artist"])
    try:
        schema = connector.load_schema()
    finally:
        connector.close()

    assert schema.table_names == ["artist"]
    assert schema.foreign_keys == ()


def test_row_source_keyset_pages(sqlite_url):
    """Composite keyset pages continue strictly after the last key."""
    source = SQLAlchemyRowSource(sqlite_url)
    try:
        page = source.fetch_page("order_line", ("order_id", "line_no"), after=(1, 2), limit=2)
    finally:
        source.close()

    assert [(r["order_id"], r["line_no"]) for r in page] == [(1, 3), (2, 1)]


def test_migrate_sqlite_into_memory(sqlite_url):
    """End to end: introspect, plan and run against an in-memory sink."""
    connector = DBConnector(sqlite_url)
    relational = connector.load_schema()
    connector.close()

    report = synthesize_parameters(
        relational,
        map_to_document_schema(relational),
        MigrationConfig(batch_size=2, progress_interval=0),
    )
    source = SQLAlchemyRowSource(sqlite_url)
    sink = InMemoryDocumentSink()
    try:
        summary = MigrationRunner(source, sink).run(report.parameters)
    finally:
        source.close()

    assert summary.get("order_line").succeeded == 5
    assert sorted(d["name"] for d in sink.find_all("artist")) == ["AC/DC", "Accept"]


def test_ddl_loader(tmp_path, music_ddl):
    """DDL files are parsed into a schema."""
    path = tmp_path / "schema.sql"
    path.write_text(music_ddl)

    loader = DDLLoader(ddl_file=path)

    assert loader.get_table_names() == ["artist", "album", "track"]
    with pytest.raises(FileNotFoundError):
        DDLLoader(ddl_file=tmp_path / "missing.sql")
    with pytest.raises(ValueError):
        DDLLoader()


def test_connector_factory(music_ddl):
    """Connectors are created by name or from the source config section."""
    loader = ConnectorFactory.create_connector(" DDL ", ddl=music_ddl)
    assert isinstance(loader, DDLLoader)
    assert ConnectorFactory.list_connectors() == ["database", "db", "ddl"]

    with pytest.raises(ValueError):
        ConnectorFactory.create_connector("csv")
    with pytest.raises(ValueError):
        ConnectorFactory.from_config(Config())


def test_connector_factory_from_config(tmp_path, music_ddl):
    """A configured DDL file wins over a connection string."""
    path = tmp_path / "schema.sql"
    path.write_text(music_ddl)
    config = Config()
    config.set("source.ddl_file", str(path))
    config.set("source.connection", "postgresql://unused/db")

    connector = ConnectorFactory.from_config(config)

    assert isinstance(connector, DDLLoader)


def test_to_bson_value():
    """Driver values are converted to BSON-storable ones."""
    value = to_bson_value(
        {
            "price": decimal.Decimal("9.99"),
            "released": datetime.date(1977, 3, 21),
            "ref": uuid.UUID("12345678-1234-5678-1234-567812345678"),
            "tags": ("rock", decimal.Decimal("1")),
        }
    )

    assert value["price"] == Decimal128("9.99")
    assert value["released"] == datetime.datetime(1977, 3, 21)
    assert value["ref"] == "12345678-1234-5678-1234-567812345678"
    assert value["tags"] == ["rock", Decimal128("1")]


def test_mongo_sink_uses_upserts_and_named_indexes():
    """Writes are idempotent upserts keyed by the identity filter."""
    client = FakeMongoClient()
    sink = MongoDocumentSink(database="music", client=client)

    sink.create_index("order_line", IndexSpec("order_line_order_id_line_no_pk", ("order_id", "line_no")))
    sink.upsert("order_line", {"order_id": 1, "line_no": 2}, {"price": decimal.Decimal("6")})
    documents = sink.find_all("artist")
    sink.close()

    calls = client.databases["music"]["order_line"].calls
    assert calls[0] == (
        "create_index",
        [("order_id", 1), ("line_no", 1)],
        True,
        "order_line_order_id_line_no_pk",
    )
    assert calls[1] == (
        "update_one",
        {"order_id": 1, "line_no": 2},
        {"$set": {"price": Decimal128("6")}},
        True,
    )
    assert documents == [{"artist_id": 1}]
    assert client.databases["music"]["artist"].calls == [("find", {}, {"_id": 0})]
    assert client.closed


def test_mongo_join_key_matches_stored_values():
    """Raw row values and their stored BSON forms give the same hashable key."""
    sink = MongoDocumentSink(database="music", client=FakeMongoClient())
    ref = uuid.UUID("12345678-1234-5678-1234-567812345678")

    raw = sink.join_key([ref, decimal.Decimal("9.99"), datetime.date(1977, 3, 21)])
    stored = sink.join_key(
        [str(ref), Decimal128("9.99"), datetime.datetime(1977, 3, 21)]
    )

    assert raw == stored
    assert {raw: "found"}[stored] == "found"


def test_uuid_keys_embed_through_mongo_sink():
    """Embedded copies are found when the join key is stored converted."""
    schema = parse_sql_schema(
        """
        CREATE TABLE artist (artist_id uuid PRIMARY KEY, name text, rating numeric(3,1));
        CREATE TABLE album (
            album_id integer PRIMARY KEY,
            title text,
            artist_id uuid REFERENCES artist(artist_id)
        );
        """
    )
    document = augment_schema(
        map_to_document_schema(schema),
        schema,
        [AdvisoryRecommendation("album", "artist_id", Strategy.FULL)],
    ).schema
    report = synthesize_parameters(
        schema, document, MigrationConfig(batch_size=2, progress_interval=0)
    )
    acdc, accept = uuid.uuid4(), uuid.uuid4()
    source = InMemoryRowSource(
        {
            "artist": [
                {"artist_id": acdc, "name": "AC/DC", "rating": decimal.Decimal("9.5")},
                {"artist_id": accept, "name": "Accept", "rating": decimal.Decimal("8.0")},
            ],
            "album": [
                {"album_id": 10, "title": "Let There Be Rock", "artist_id": acdc},
                {"album_id": 11, "title": "Balls to the Wall", "artist_id": accept},
            ],
        }
    )
    client = StoringMongoClient()

    summary = MigrationRunner(source, MongoDocumentSink(database="music", client=client)).run(
        report.parameters
    )

    assert summary.succeeded == 4
    albums = {d["album_id"]: d for d in client.databases["music"]["album"].documents}
    assert albums[10]["artist"]["artist_id"] == str(acdc)
    assert albums[10]["artist"]["name"] == "AC/DC"
    assert albums[10]["artist"]["rating"] == Decimal128("9.5")
    assert albums[11]["artist"]["name"] == "Accept"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
