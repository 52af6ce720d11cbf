"""Advisory recommendation types."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from sql2nosql.core.errors import InvalidRecommendationError
from sql2nosql.utils.logging import get_logger

logger = get_logger(__name__)


class Strategy(Enum):
    """Embedding strategy for a relationship."""

    REFERENCE = "reference"
    PARTIAL = "partial"
    FULL = "full"
    HYBRID = "hybrid"


class RelationshipType(Enum):
    """How a relationship was discovered."""

    EXPLICIT = "explicit"  # backed by a foreign key
    IMPLICIT = "implicit"  # guessed from an id-like column name


def _parse_enum(enum_cls, value: Any, what: str):
    try:
        return enum_cls(str(value).lower())
    except ValueError:
        allowed = ", ".join(e.value for e in enum_cls)
        raise InvalidRecommendationError(
            f"Unknown {what} '{value}' (expected one of: {allowed})"
        ) from None


@dataclass(frozen=True)
class AdvisoryRecommendation:
    """One embedding recommendation for ``collection.field``."""

    collection: str
    field: str
    strategy: Strategy
    relationship_type: RelationshipType = RelationshipType.EXPLICIT
    reason: str = ""
    suggested_fields: Optional[Tuple[str, ...]] = None
    confidence: Optional[float] = None

    def __post_init__(self):
        if not self.collection or not self.field:
            raise InvalidRecommendationError(
                "Recommendation needs both a collection and a field"
            )
        if self.suggested_fields is not None:
            object.__setattr__(self, "suggested_fields", tuple(self.suggested_fields))
        if self.confidence is not None:
            try:
                confidence = float(self.confidence)
            except (TypeError, ValueError):
                raise InvalidRecommendationError(
                    f"Confidence for {self.collection}.{self.field} is not a number: "
                    f"{self.confidence!r}"
                ) from None
            if not 0.0 <= confidence <= 1.0:
                raise InvalidRecommendationError(
                    f"Confidence for {self.collection}.{self.field} must be in [0, 1], "
                    f"got {confidence}"
                )
            object.__setattr__(self, "confidence", confidence)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "collection": self.collection,
            "field": self.field,
            "relationship_type": self.relationship_type.value,
            "strategy": self.strategy.value,
            "reason": self.reason,
        }
        if self.suggested_fields is not None:
            data["suggested_fields"] = list(self.suggested_fields)
        if self.confidence is not None:
            data["confidence"] = self.confidence
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> AdvisoryRecommendation:
        """Create from dictionary (snake_case or camelCase keys).

        Raises:
            InvalidRecommendationError: On an unknown strategy or relationship
                type, a missing collection/field, or a bad confidence
        """
        if "strategy" not in data:
            raise InvalidRecommendationError(
                f"Recommendation for {data.get('collection')}.{data.get('field')} "
                "has no strategy"
            )
        relationship = data.get("relationship_type", data.get("relationshipType"))
        suggested = data.get("suggested_fields", data.get("suggestedFields"))
        if suggested is not None and not isinstance(suggested, (list, tuple)):
            raise InvalidRecommendationError(
                f"suggested_fields must be a list, got {type(suggested).__name__}"
            )

        return cls(
            collection=data.get("collection") or "",
            field=data.get("field") or "",
            strategy=_parse_enum(Strategy, data["strategy"], "strategy"),
            relationship_type=(
                RelationshipType.EXPLICIT
                if relationship is None
                else _parse_enum(RelationshipType, relationship, "relationship type")
            ),
            reason=data.get("reason") or "",
            suggested_fields=None if suggested is None else tuple(suggested),
            confidence=data.get("confidence"),
        )


@dataclass(frozen=True)
class OptimizationInsight:
    """Free-form optimization hint (indexing, sharding, ...) from the advisor."""

    type: str
    collection: str
    recommendation: str
    reasoning: str = ""
    pros: Tuple[str, ...] = ()
    cons: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "collection": self.collection,
            "recommendation": self.recommendation,
            "reasoning": self.reasoning,
            "tradeoffs": {"pros": list(self.pros), "cons": list(self.cons)},
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> OptimizationInsight:
        tradeoffs = data.get("tradeoffs") or {}
        return cls(
            type=str(data.get("type", "")),
            collection=str(data.get("collection", "")),
            recommendation=str(data.get("recommendation", "")),
            reasoning=str(data.get("reasoning", "")),
            pros=tuple(tradeoffs.get("pros") or ()),
            cons=tuple(tradeoffs.get("cons") or ()),
        )


@dataclass
class AdvisoryReport:
    """Everything the advisor returned: embeddings, insights and warnings."""

    embeddings: List[AdvisoryRecommendation] = field(default_factory=list)
    insights: List[OptimizationInsight] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "embeddings": [r.to_dict() for r in self.embeddings],
            "insights": [i.to_dict() for i in self.insights],
            "warnings": list(self.warnings),
        }

    @classmethod
    def from_dict(cls, data: Any) -> AdvisoryReport:
        """Leniently build a report.

        Missing or non-list sections become empty. Malformed embeddings are
        dropped with a warning. A bare list is read as the embeddings section.
        """
        if isinstance(data, list):
            data = {"embeddings": data}
        if not isinstance(data, dict):
            raise InvalidRecommendationError(
                f"Expected a JSON object with 'embeddings', got {type(data).__name__}"
            )

        embeddings = []
        for raw in _as_list(data.get("embeddings")):
            if not isinstance(raw, dict):
                logger.warning(f"Dropping non-object recommendation: {raw!r}")
                continue
            try:
                embeddings.append(AdvisoryRecommendation.from_dict(raw))
            except InvalidRecommendationError as e:
                logger.warning(f"Dropping malformed recommendation: {e}")

        insights = [
            OptimizationInsight.from_dict(raw)
            for raw in _as_list(data.get("insights"))
            if isinstance(raw, dict)
        ]
        warnings = [str(w) for w in _as_list(data.get("warnings"))]
        return cls(embeddings=embeddings, insights=insights, warnings=warnings)

    def save(self, path: str | Path) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)
        logger.info(f"Saved {len(self.embeddings)} recommendations to {path}")

    @classmethod
    def load(cls, path: str | Path) -> AdvisoryReport:
        with open(path, "r") as f:
            data = json.load(f)
        return cls.from_dict(data)


def _as_list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []
