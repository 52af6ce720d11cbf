"""Advisory embedding recommendations: types, prompt and LLM advisor."""

from sql2nosql.core.advisory.advisor import SchemaAdvisor, parse_advisory_response
from sql2nosql.core.advisory.prompts import build_recommendation_prompt
from sql2nosql.core.advisory.types import (
    AdvisoryRecommendation,
    AdvisoryReport,
    OptimizationInsight,
    RelationshipType,
    Strategy,
)

__all__ = [
    "AdvisoryRecommendation",
    "AdvisoryReport",
    "OptimizationInsight",
    "RelationshipType",
    "SchemaAdvisor",
    "Strategy",
    "build_recommendation_prompt",
    "parse_advisory_response",
]
