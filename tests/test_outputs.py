"""Tests for generated migration bundles and analysis reports."""

import json

import pytest

from sql2nosql.core.advisory.types import AdvisoryReport, AdvisoryRecommendation, Strategy
from sql2nosql.core.document.merger import augment_schema
from sql2nosql.core.migration.generator import render_script, write_migration_bundle
from sql2nosql.core.migration.params import MigrationConfig, ScriptParameters
from sql2nosql.core.migration.synthesizer import synthesize_parameters
from sql2nosql.core.report import build_analysis, write_analysis_report


def test_bundle_layout(tmp_path, music_schema, music_augmented):
    """Plan, parameter files and numbered scripts are written in execution order."""
    report = synthesize_parameters(music_schema, music_augmented, MigrationConfig())
    scripts = write_migration_bundle(
        report, tmp_path, "mongodb://localhost:27017", "music"
    )

    assert [p.name for p in scripts] == ["01_artist.py", "02_album.py", "03_track.py"]
    plan = json.loads((tmp_path / "plan.json").read_text())
    assert plan["order"] == ["artist", "album", "track"]
    assert plan["failures"] == {}

    loaded = ScriptParameters.load(tmp_path / "album.params.json")
    assert loaded == report.get("album")


def test_rendered_script_is_valid_python(music_schema, music_augmented):
    """Scripts compile and point at their own parameter file."""
    report = synthesize_parameters(music_schema, music_augmented, MigrationConfig())
    source = render_script(report.get("album"), "mongodb://db:27017", "music", "public")

    compile(source, "02_album.py", "exec")
    assert 'Path(__file__).with_name("album.params.json")' in source
    assert "default='mongodb://db:27017'" in source
    assert "Run after: artist" in source


def test_analysis_without_recommendations(music_schema, music_baseline):
    """The analysis holds both schemas and no augmentation."""
    analysis = build_analysis(music_schema, music_baseline)

    assert set(analysis) == {"sql_schema", "nosql_schema"}
    assert len(analysis["nosql_schema"]["collections"]) == 3


def test_report_files(tmp_path, music_schema, music_baseline):
    """JSON analysis, per-table JSON/HTML and an index page are written."""
    advisory = AdvisoryReport(
        embeddings=[
            AdvisoryRecommendation("album", "artist_id", Strategy.FULL),
            AdvisoryRecommendation("album", "label_id", Strategy.PARTIAL),
        ]
    )
    augmentation = augment_schema(music_baseline, music_schema, advisory.embeddings)
    written = write_analysis_report(
        music_schema, music_baseline, tmp_path, augmentation=augmentation, advisory=advisory
    )

    names = {p.name for p in written}
    assert {"schema-analysis.json", "index.html", "table-album.json", "table-album.html"} <= names

    analysis = json.loads((tmp_path / "schema-analysis.json").read_text())
    assert len(analysis["recommendations"]["embeddings"]) == 2
    assert len(analysis["augmentation"]["applied"]) == 1
    assert len(analysis["augmentation"]["skipped"]) == 1

    per_table = json.loads((tmp_path / "table-album.json").read_text())
    assert "artist" in [f["name"] for f in per_table["nosql_collection"]["fields"]]

    index = (tmp_path / "index.html").read_text()
    assert 'href="table-track.html"' in index
    assert "Skipped recommendations" in index


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
