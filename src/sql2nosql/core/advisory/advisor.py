"""LLM-backed embedding advisor."""

from __future__ import annotations

import json
import re
from typing import Optional

from sql2nosql.core.advisory.prompts import SYSTEM_PROMPT, build_recommendation_prompt
from sql2nosql.core.advisory.types import AdvisoryReport
from sql2nosql.core.document.types import DocumentSchema
from sql2nosql.core.errors import InvalidRecommendationError
from sql2nosql.core.schema.types import RelationalSchema
from sql2nosql.utils.logging import get_logger

logger = get_logger(__name__)

_CODE_FENCE_RE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


def parse_advisory_response(text: str) -> AdvisoryReport:
    """Parse the advisor's JSON answer.

    Markdown code fences are tolerated. Missing sections default to empty
    lists and malformed recommendations are dropped with a warning.

    Raises:
        InvalidRecommendationError: If the answer is not JSON at all
    """
    text = text.strip()
    fenced = _CODE_FENCE_RE.match(text)
    if fenced:
        text = fenced.group(1)

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise InvalidRecommendationError(f"Advisor returned invalid JSON: {e}") from e

    return AdvisoryReport.from_dict(data)


class SchemaAdvisor:
    """Ask an LLM for embedding recommendations.

    Args:
        agent: Anything with ``generate(prompt, system_prompt=..., json_output=...)``
            returning an object with ``content``. Defaults to an
            ``AgentWrapper`` built from the global config.
    """

    def __init__(self, agent=None, temperature: Optional[float] = None):
        if agent is None:
            from sql2nosql.agent import AgentWrapper

            agent = AgentWrapper()
        self.agent = agent
        self.temperature = temperature

    def recommend(
        self, relational: RelationalSchema, document: DocumentSchema
    ) -> AdvisoryReport:
        """Generate recommendations for a baseline document schema."""
        prompt = build_recommendation_prompt(relational, document)
        logger.info(
            f"Requesting embedding recommendations for {len(document.collections)} collections"
        )

        response = self.agent.generate(
            prompt=prompt,
            system_prompt=SYSTEM_PROMPT,
            temperature=self.temperature,
            json_output=True,
        )
        report = parse_advisory_response(response.content)

        for warning in report.warnings:
            logger.warning(f"Advisor warning: {warning}")
        logger.info(
            f"Advisor returned {len(report.embeddings)} recommendations "
            f"and {len(report.insights)} insights"
        )
        return report
