"""Tests for advisory recommendation parsing and the LLM advisor."""

import json

import pytest

from sql2nosql.agent.base import LLMResponse
from sql2nosql.core.advisory.advisor import SchemaAdvisor, parse_advisory_response
from sql2nosql.core.advisory.prompts import SYSTEM_PROMPT, build_recommendation_prompt
from sql2nosql.core.advisory.types import (
    AdvisoryRecommendation,
    AdvisoryReport,
    RelationshipType,
    Strategy,
)
from sql2nosql.core.errors import InvalidRecommendationError

ADVISOR_ANSWER = {
    "embeddings": [
        {
            "collection": "album",
            "field": "artist_id",
            "relationshipType": "explicit",
            "strategy": "partial",
            "reason": "Artist name is shown with every album.",
            "suggestedFields": ["name"],
            "confidence": 0.8,
        }
    ],
    "insights": [
        {
            "type": "indexing",
            "collection": "track",
            "recommendation": "Index album_id",
            "reasoning": "Tracks are listed per album.",
            "tradeoffs": {"pros": ["fast lookups"], "cons": ["write cost"]},
        }
    ],
    "warnings": ["track.unit_price uses numeric"],
}


class FakeAgent:
    """Records prompts and returns a canned answer."""

    def __init__(self, content):
        self.content = content
        self.calls = []

    def generate(self, prompt, system_prompt=None, temperature=None, json_output=False):
        self.calls.append(
            {
                "prompt": prompt,
                "system_prompt": system_prompt,
                "temperature": temperature,
                "json_output": json_output,
            }
        )
        return LLMResponse(content=self.content, model="fake")


def test_recommendation_from_camel_case():
    """camelCase keys from the advisor are accepted."""
    recommendation = AdvisoryRecommendation.from_dict(ADVISOR_ANSWER["embeddings"][0])

    assert recommendation.strategy == Strategy.PARTIAL
    assert recommendation.relationship_type == RelationshipType.EXPLICIT
    assert recommendation.suggested_fields == ("name",)
    assert recommendation.confidence == 0.8


def test_recommendation_rejects_bad_values():
    """Unknown strategies and out-of-range confidence are invalid."""
    with pytest.raises(InvalidRecommendationError):
        AdvisoryRecommendation.from_dict(
            {"collection": "album", "field": "artist_id", "strategy": "inline"}
        )
    with pytest.raises(InvalidRecommendationError):
        AdvisoryRecommendation(
            collection="album", field="artist_id", strategy=Strategy.FULL, confidence=1.5
        )
    with pytest.raises(InvalidRecommendationError):
        AdvisoryRecommendation(collection="", field="artist_id", strategy=Strategy.FULL)


def test_parse_fenced_response():
    """Markdown code fences around the JSON are tolerated."""
    text = "```json\n" + json.dumps(ADVISOR_ANSWER) + "\n```"
    report = parse_advisory_response(text)

    assert len(report.embeddings) == 1
    assert report.insights[0].pros == ("fast lookups",)
    assert report.warnings == ["track.unit_price uses numeric"]


def test_parse_invalid_json():
    """A non-JSON answer is an invalid recommendation."""
    with pytest.raises(InvalidRecommendationError):
        parse_advisory_response("I recommend embedding the artist.")


def test_missing_sections_default_to_empty():
    """Missing lists become empty; a bare list is read as embeddings."""
    assert AdvisoryReport.from_dict({}).embeddings == []

    report = AdvisoryReport.from_dict(
        [{"collection": "album", "field": "artist_id", "strategy": "full"}]
    )
    assert report.embeddings[0].strategy == Strategy.FULL
    assert report.insights == []


def test_malformed_embeddings_are_dropped():
    """One bad entry does not spoil the rest."""
    report = AdvisoryReport.from_dict(
        {
            "embeddings": [
                {"collection": "album", "field": "artist_id", "strategy": "inline"},
                "not an object",
                {"collection": "track", "field": "album_id", "strategy": "hybrid"},
            ]
        }
    )

    assert [(r.collection, r.strategy) for r in report.embeddings] == [
        ("track", Strategy.HYBRID)
    ]


def test_report_round_trips(tmp_path):
    """Saved reports load back equal."""
    report = AdvisoryReport.from_dict(ADVISOR_ANSWER)
    path = tmp_path / "recommendations.json"
    report.save(path)

    assert AdvisoryReport.load(path) == report


def test_prompt_describes_both_schemas(music_schema, music_baseline):
    """The prompt lists tables, foreign keys and the baseline mapping."""
    prompt = build_recommendation_prompt(music_schema, music_baseline)

    assert "- artist" in prompt
    assert "album.artist_id -> artist.artist_id" in prompt
    assert "artist_id(reference->artist)" in prompt
    assert '"embeddings"' in prompt


def test_advisor_calls_agent_with_json_output(music_schema, music_baseline):
    """The advisor sends the prompt in JSON mode and parses the answer."""
    agent = FakeAgent(json.dumps(ADVISOR_ANSWER))
    report = SchemaAdvisor(agent, temperature=0.0).recommend(music_schema, music_baseline)

    assert len(agent.calls) == 1
    call = agent.calls[0]
    assert call["system_prompt"] == SYSTEM_PROMPT
    assert call["json_output"] is True
    assert call["temperature"] == 0.0
    assert report.embeddings[0].collection == "album"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
