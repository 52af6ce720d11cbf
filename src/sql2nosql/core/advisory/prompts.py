"""Prompt for the embedding advisor."""

from __future__ import annotations

from sql2nosql.core.document.types import DocumentSchema, ReferenceField
from sql2nosql.core.schema.types import RelationalSchema

SYSTEM_PROMPT = (
    "You are a NoSQL database design expert. Return only valid JSON, "
    "no markdown formatting."
)

COLUMN_PREVIEW = 6


def _tables_summary(schema: RelationalSchema) -> str:
    lines = []
    for table in schema.tables:
        preview = ", ".join(
            f"{c.name}:{c.type.value}" for c in table.columns[:COLUMN_PREVIEW]
        )
        if len(table.columns) > COLUMN_PREVIEW:
            preview += ", ..."
        fks = schema.get_foreign_keys_for_table(table.name)
        lines.append(
            f"- {table.name}\n"
            f"  columns: {preview}\n"
            f"  PK: {', '.join(table.primary_key) or 'none'}\n"
            f"  FKs: {len(fks)}"
        )
    return "\n".join(lines)


def _relationships_summary(schema: RelationalSchema) -> str:
    lines = [
        f"- {fk.from_table}.{fk.from_column} -> {fk.to_table}.{fk.to_column} "
        f"({fk.cardinality.value})"
        for fk in schema.foreign_keys
    ]
    return "\n".join(lines) or "None"


def _mapping_summary(document: DocumentSchema) -> str:
    lines = []
    for collection in document.collections:
        fields = []
        for f in collection.fields:
            if isinstance(f, ReferenceField):
                fields.append(f"{f.name}(reference->{f.ref_collection})")
            else:
                fields.append(f"{f.name}({f.to_dict()['type']})")
        lines.append(f"- {collection.name}: {', '.join(fields)}")
    return "\n".join(lines)


def build_recommendation_prompt(
    relational: RelationalSchema, document: DocumentSchema
) -> str:
    """Build the user prompt asking for embedding recommendations.

    Args:
        relational: Source relational schema
        document: Baseline document schema

    Returns:
        Prompt string
    """
    return f"""You are a senior NoSQL database architect helping migrate a SQL schema to MongoDB.

The SQL schema has already been introspected and a baseline NoSQL mapping has
been generated without AI. Your role is ONLY to recommend embedding changes.
Data migration and batching are handled elsewhere.

## SQL Schema Summary
{_tables_summary(relational)}

## Explicit Foreign Key Relationships
{_relationships_summary(relational)}

## Current NoSQL Mapping (baseline)
{_mapping_summary(document)}

## Relationship types
1. **explicit**: backed by a SQL foreign key
2. **implicit**: an id-like column (*_id, owner_id, created_by) with no foreign key

## Strategies
1. **reference**: keep the reference only
2. **partial**: embed selected fields
3. **full**: embed the whole referenced row (ONLY for explicit relationships)
4. **hybrid**: reference plus denormalized fields

## Rules
- Implicit relationships may ONLY use "partial" or "hybrid"
- Prefer immutable or rarely updated fields (name, title, slug, code)
- Avoid large, frequently updated or unbounded fields
- Respect MongoDB limits (16MB documents, shallow nesting)
- If a reference is best, still include it with strategy "reference"

## Output Format
Return JSON in EXACTLY this format:
{{
  "embeddings": [
    {{
      "collection": "orders",
      "field": "user_id",
      "relationshipType": "implicit",
      "strategy": "partial",
      "reason": "User name is read with every order and rarely changes.",
      "suggestedFields": ["name"],
      "confidence": 0.7
    }}
  ],
  "insights": [],
  "warnings": []
}}

Confidence: 0.0-0.4 weak, 0.5-0.7 reasonable, 0.8-1.0 very strong.
Be concise, conservative and deterministic."""
