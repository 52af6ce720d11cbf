"""JSON and static HTML analysis reports."""

from __future__ import annotations

import json
from html import escape
from pathlib import Path
from typing import Any, Dict, List, Optional

from sql2nosql.core.advisory.types import AdvisoryReport
from sql2nosql.core.document.merger import AugmentationResult
from sql2nosql.core.document.types import (
    DocumentCollection,
    DocumentSchema,
    ObjectField,
    ReferenceField,
)
from sql2nosql.core.schema.types import RelationalSchema, Table
from sql2nosql.utils.logging import get_logger

logger = get_logger(__name__)

_STYLE = """
    * { margin: 0; padding: 0; box-sizing: border-box; }
    body { font-family: system-ui, -apple-system, sans-serif; background: #0f172a;
           color: #e5e7eb; padding: 24px; line-height: 1.6; }
    .container { max-width: 1200px; margin: 0 auto; }
    h1 { color: #38bdf8; margin-bottom: 8px; }
    h2 { color: #a5b4fc; margin: 24px 0 8px; }
    a { color: #38bdf8; }
    table { width: 100%; border-collapse: collapse; margin-top: 8px; }
    th, td { text-align: left; padding: 6px 10px; border-bottom: 1px solid #1e293b; }
    th { color: #94a3b8; font-weight: 600; }
    .muted { color: #94a3b8; }
    .tag { background: #1e293b; border-radius: 4px; padding: 0 6px; font-size: 0.85em; }
"""


def build_analysis(
    relational: RelationalSchema,
    baseline: DocumentSchema,
    augmentation: Optional[AugmentationResult] = None,
    advisory: Optional[AdvisoryReport] = None,
) -> Dict[str, Any]:
    """Combined analysis document written to ``schema-analysis.json``."""
    analysis: Dict[str, Any] = {
        "sql_schema": relational.to_dict(),
        "nosql_schema": baseline.to_dict(),
    }
    if advisory is not None:
        analysis["recommendations"] = advisory.to_dict()
    if augmentation is not None:
        analysis["augmented_schema"] = augmentation.schema.to_dict()
        analysis["augmentation"] = {
            "applied": [o.to_dict() for o in augmentation.applied],
            "skipped": [o.to_dict() for o in augmentation.skipped],
        }
    return analysis


def write_analysis_report(
    relational: RelationalSchema,
    baseline: DocumentSchema,
    output_dir: str | Path,
    augmentation: Optional[AugmentationResult] = None,
    advisory: Optional[AdvisoryReport] = None,
) -> List[Path]:
    """Write the analysis JSON, per-table JSON/HTML and ``index.html``.

    Args:
        relational: Source relational schema
        baseline: Baseline document schema
        output_dir: Directory to write into (created if missing)
        augmentation: Optional merge result (adds the augmented schema)
        advisory: Optional advisor output (adds recommendations)

    Returns:
        Paths of all written files
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    written = []

    analysis = build_analysis(relational, baseline, augmentation, advisory)
    written.append(_write_json(output_dir / "schema-analysis.json", analysis))

    final = augmentation.schema if augmentation is not None else baseline
    for table in relational.tables:
        collection = final.get_collection(table.name)
        per_table = {
            "sql_table": table.to_dict(),
            "nosql_collection": collection.to_dict() if collection else None,
        }
        written.append(_write_json(output_dir / f"table-{table.name}.json", per_table))

        html_path = output_dir / f"table-{table.name}.html"
        html_path.write_text(_table_html(relational, table, collection), encoding="utf-8")
        written.append(html_path)

    index_path = output_dir / "index.html"
    index_path.write_text(_index_html(relational, final, augmentation), encoding="utf-8")
    written.append(index_path)

    logger.info(f"Wrote {len(written)} report files to {output_dir}")
    return written


def _write_json(path: Path, data: Dict[str, Any]) -> Path:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
    return path


def _page(title: str, body: str) -> str:
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{escape(title)}</title>
  <style>{_STYLE}</style>
</head>
<body>
<div class="container">
{body}
</div>
</body>
</html>
"""


def _field_type(field) -> str:
    if isinstance(field, ReferenceField):
        return f"reference &rarr; {escape(field.ref_collection)}"
    if isinstance(field, ObjectField):
        if field.is_embedded:
            return f"object {{{escape(', '.join(field.nested_names))}}}"
        return "object"
    return field.type.value


def _index_html(
    relational: RelationalSchema,
    document: DocumentSchema,
    augmentation: Optional[AugmentationResult],
) -> str:
    rows = []
    for table in relational.tables:
        collection = document.get_collection(table.name)
        fk_count = len(relational.get_foreign_keys_for_table(table.name))
        rows.append(
            "<tr>"
            f'<td><a href="table-{escape(table.name)}.html">{escape(table.name)}</a></td>'
            f"<td>{len(table.columns)}</td>"
            f"<td>{escape(', '.join(table.primary_key)) or '&mdash;'}</td>"
            f"<td>{fk_count}</td>"
            f"<td>{len(collection.fields) if collection else 0}</td>"
            "</tr>"
        )

    relationships = "".join(
        f"<li>{escape(fk.from_table)}.{escape(fk.from_column)} &rarr; "
        f"{escape(fk.to_table)}.{escape(fk.to_column)} "
        f'<span class="tag">{fk.cardinality.value}</span></li>'
        for fk in relational.foreign_keys
    ) or '<li class="muted">None</li>'

    advisory_section = ""
    if augmentation is not None:
        items = "".join(
            f"<li>{escape(o.recommendation.collection)}.{escape(o.recommendation.field)} "
            f'<span class="tag">{o.recommendation.strategy.value}</span> {escape(o.reason)}</li>'
            for o in augmentation.applied
        ) or '<li class="muted">None</li>'
        skipped = "".join(
            f"<li>{escape(o.recommendation.collection)}.{escape(o.recommendation.field)}: "
            f"{escape(o.reason)}</li>"
            for o in augmentation.skipped
        ) or '<li class="muted">None</li>'
        advisory_section = (
            f"<h2>Applied recommendations</h2><ul>{items}</ul>"
            f"<h2>Skipped recommendations</h2><ul>{skipped}</ul>"
        )

    body = f"""
<h1>SQL &rarr; NoSQL Schema Analysis</h1>
<p class="muted">{len(relational.tables)} tables, {len(relational.foreign_keys)} foreign keys</p>
<h2>Tables</h2>
<table>
  <tr><th>Table</th><th>Columns</th><th>Primary key</th><th>FKs</th><th>Fields</th></tr>
  {''.join(rows)}
</table>
<h2>Relationships</h2>
<ul>{relationships}</ul>
{advisory_section}
"""
    return _page("SQL → NoSQL Schema Analysis", body)


def _table_html(
    relational: RelationalSchema, table: Table, collection: Optional[DocumentCollection]
) -> str:
    column_rows = "".join(
        "<tr>"
        f"<td>{escape(c.name)}</td><td>{c.type.value}</td>"
        f"<td>{'yes' if c.nullable else 'no'}</td>"
        f"<td>{'PK ' if c.is_primary_key else ''}{'UNIQUE' if c.is_unique else ''}</td>"
        "</tr>"
        for c in table.columns
    )
    field_rows = ""
    if collection is not None:
        field_rows = "".join(
            "<tr>"
            f"<td>{escape(f.name)}</td><td>{_field_type(f)}</td>"
            f"<td>{'yes' if f.optional else 'no'}</td>"
            f"<td>{escape(f.description or '')}</td>"
            "</tr>"
            for f in collection.fields
        )
    outgoing = "".join(
        f"<li>{escape(fk.from_column)} &rarr; {escape(fk.to_table)}.{escape(fk.to_column)}</li>"
        for fk in relational.get_foreign_keys_for_table(table.name)
    ) or '<li class="muted">None</li>'
    unique = "; ".join(", ".join(g) for g in table.unique_constraints) or "&mdash;"

    body = f"""
<p><a href="index.html">&larr; All tables</a></p>
<h1>{escape(table.name)}</h1>
<p class="muted">Primary key: {escape(', '.join(table.primary_key)) or '&mdash;'}
 &middot; Unique: {escape(unique) if table.unique_constraints else unique}</p>
<h2>SQL columns</h2>
<table>
  <tr><th>Column</th><th>Type</th><th>Nullable</th><th>Keys</th></tr>
  {column_rows}
</table>
<h2>Foreign keys</h2>
<ul>{outgoing}</ul>
<h2>NoSQL collection</h2>
<table>
  <tr><th>Field</th><th>Type</th><th>Optional</th><th>Description</th></tr>
  {field_rows}
</table>
"""
    return _page(f"{table.name} - SQL → NoSQL", body)
