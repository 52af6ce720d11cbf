"""Reference executor for synthesized migration parameters.

The runner talks to the outside world through two small interfaces:

- ``RowSource``: reads rows of a table in identity order, page by page
- ``DocumentSink``: creates indexes, upserts documents, reads them back

Collections run one at a time in the given (dependency) order, and the pages
of a collection are applied in order.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from typing import (
    Any,
    Callable,
    Dict,
    Iterable,
    Iterator,
    List,
    Mapping,
    Optional,
    Sequence,
    Tuple,
)

from sql2nosql.core.document.types import ObjectField
from sql2nosql.core.errors import MigrationRowError
from sql2nosql.core.migration.params import (
    BatchPlan,
    EmbedSpec,
    ErrorPolicy,
    IndexSpec,
    ScriptParameters,
)
from sql2nosql.utils.logging import get_logger

logger = get_logger(__name__)

Row = Dict[str, Any]
Document = Dict[str, Any]


class RowSource(ABC):
    """Reads source rows."""

    @abstractmethod
    def fetch_page(
        self,
        table: str,
        order_by: Sequence[str],
        after: Optional[Tuple[Any, ...]] = None,
        limit: Optional[int] = None,
    ) -> List[Row]:
        """Rows of ``table`` ordered by ``order_by``, strictly after ``after``.

        Args:
            table: Table name
            order_by: Columns defining a strict total order
            after: Key tuple of the last row already read (None = from the start)
            limit: Maximum number of rows (None = no limit)
        """
        pass


class DocumentSink(ABC):
    """Writes and reads destination documents."""

    @abstractmethod
    def create_index(self, collection: str, index: IndexSpec) -> None:
        """Create an index if it does not exist yet."""
        pass

    @abstractmethod
    def upsert(self, collection: str, filter: Dict[str, Any], document: Document) -> None:
        """Insert or replace the single document matching ``filter``."""
        pass

    @abstractmethod
    def find_all(self, collection: str) -> List[Document]:
        """All documents of a collection."""
        pass

    def join_key(self, values: Iterable[Any]) -> Tuple[Any, ...]:
        """Hashable key for matching row values against stored documents.

        Sinks that convert values on write must convert them here the same
        way, so a source row and the document written from it give equal keys.
        """
        return tuple(values)


def iter_pages(source: RowSource, table: str, plan: BatchPlan) -> Iterator[List[Row]]:
    """Yield the pages of ``table`` described by ``plan``.

    A full scan yields a single page. Keyset pages continue strictly after
    the previous page's last key and stop on a short or empty page.
    """
    if plan.is_full_scan:
        yield source.fetch_page(table, plan.order_by, None, None)
        return

    after = None
    while True:
        page = source.fetch_page(table, plan.order_by, after, plan.batch_size)
        if not page:
            return
        yield page
        if len(page) < plan.batch_size:
            return
        last = page[-1]
        after = tuple(last[c] for c in plan.order_by)


@dataclass
class CollectionSummary:
    """Outcome of one collection."""

    collection: str
    status: str = "pending"  # completed | failed | skipped
    attempted: int = 0
    succeeded: int = 0
    skipped: int = 0
    error: Optional[str] = None
    row_errors: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "collection": self.collection,
            "status": self.status,
            "attempted": self.attempted,
            "succeeded": self.succeeded,
            "skipped": self.skipped,
            "error": self.error,
            "row_errors": list(self.row_errors),
        }


@dataclass
class MigrationSummary:
    """Per-collection summaries of a run, in execution order."""

    collections: List[CollectionSummary] = field(default_factory=list)
    dry_run: bool = False

    def get(self, collection: str) -> Optional[CollectionSummary]:
        for summary in self.collections:
            if summary.collection == collection:
                return summary
        return None

    @property
    def succeeded(self) -> int:
        return sum(s.succeeded for s in self.collections)

    @property
    def skipped(self) -> int:
        return sum(s.skipped for s in self.collections)

    @property
    def failed_collections(self) -> List[str]:
        return [s.collection for s in self.collections if s.status == "failed"]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dry_run": self.dry_run,
            "succeeded": self.succeeded,
            "skipped": self.skipped,
            "collections": [s.to_dict() for s in self.collections],
        }


def build_document(
    params: ScriptParameters,
    row: Mapping[str, Any],
    preloaded: Mapping[str, Dict[Tuple[Any, ...], Document]],
    join_key: Callable[[Iterable[Any]], Tuple[Any, ...]] = tuple,
) -> Document:
    """Build the destination document for one source row.

    Plain fields copy the row value. Embedded object fields copy the nested
    fields of the preloaded dependency document the row joins to (None when
    the row's join value is NULL or unmatched). ``join_key`` must be the one
    the preloaded documents were keyed with.
    """
    document: Document = {}
    for doc_field in params.fields:
        if isinstance(doc_field, ObjectField) and doc_field.is_embedded:
            embed = params.get_embed(doc_field.name)
            if embed is None:
                continue
            document[doc_field.name] = _embedded_value(
                doc_field, embed, row, preloaded, join_key
            )
        else:
            document[doc_field.name] = row.get(doc_field.name)
    return document


def _embedded_value(
    doc_field: ObjectField,
    embed: EmbedSpec,
    row: Mapping[str, Any],
    preloaded: Mapping[str, Dict[Tuple[Any, ...], Document]],
    join_key: Callable[[Iterable[Any]], Tuple[Any, ...]],
) -> Optional[Document]:
    values = [row.get(c) for c in embed.local_columns]
    if any(v is None for v in values):
        return None
    source_doc = preloaded.get(embed.source_collection, {}).get(join_key(values))
    if source_doc is None:
        logger.warning(
            f"No {embed.source_collection} document matches "
            f"{dict(zip(embed.local_columns, values))}; {doc_field.name} left empty"
        )
        return None
    return {name: source_doc.get(name) for name in doc_field.nested_names}


class MigrationRunner:
    """Execute ScriptParameters against a row source and a document sink.

    Example:
        >>> runner = MigrationRunner(source, sink)
        >>> summary = runner.run(report.parameters)
        >>> summary.get("album").succeeded
        347
    """

    def __init__(self, source: RowSource, sink: DocumentSink):
        self.source = source
        self.sink = sink
        # Documents built during a dry run, so dependents can preload them
        self._built: Dict[str, List[Document]] = {}

    def run(self, parameters: Sequence[ScriptParameters]) -> MigrationSummary:
        """Migrate every collection in order.

        A collection whose run fails (under skip-and-log) is recorded as
        failed; collections that preload it are skipped.

        Raises:
            MigrationRowError: On the first failing row of a fail-fast collection
        """
        dry_run = any(p.dry_run for p in parameters)
        summary = MigrationSummary(dry_run=dry_run)
        unavailable = set()

        for params in parameters:
            blocked = sorted(set(params.preload) & unavailable)
            if blocked:
                result = CollectionSummary(
                    collection=params.collection,
                    status="skipped",
                    error=f"dependencies not migrated: {', '.join(blocked)}",
                )
                logger.warning(f"Skipping {params.collection}: {result.error}")
                unavailable.add(params.collection)
            else:
                result = self.run_collection(params)
                if result.status == "failed":
                    unavailable.add(params.collection)
            summary.collections.append(result)

        logger.info(
            f"Migration finished{' (dry run)' if dry_run else ''}: "
            f"{summary.succeeded} documents written, {summary.skipped} rows skipped, "
            f"{len(summary.failed_collections)} collections failed"
        )
        return summary

    def run_collection(self, params: ScriptParameters) -> CollectionSummary:
        """Migrate one collection."""
        result = CollectionSummary(collection=params.collection)
        prefix = "[dry run] " if params.dry_run else ""
        logger.info(f"{prefix}Migrating {params.table} -> {params.collection}")

        try:
            self._create_indexes(params)
            preloaded = self._preload(params)
            self._process_rows(params, preloaded, result)
        except MigrationRowError:
            result.status = "failed"
            self._log_summary(params, result)
            raise
        except Exception as e:
            if params.error_policy == ErrorPolicy.FAIL_FAST:
                raise
            result.status = "failed"
            result.error = str(e)
            logger.error(f"Collection {params.collection} failed: {e}")
            self._log_summary(params, result)
            return result

        result.status = "completed"
        self._log_summary(params, result)
        return result

    def _create_indexes(self, params: ScriptParameters) -> None:
        for index in params.indexes:
            if params.dry_run:
                logger.info(
                    f"[dry run] Would create index {index.name} on "
                    f"{params.collection}({', '.join(index.columns)})"
                )
                continue
            self.sink.create_index(params.collection, index)

    def _preload(self, params: ScriptParameters) -> Dict[str, Dict[Tuple[Any, ...], Document]]:
        """Index each dependency's documents by the join columns its embeds use."""
        preloaded: Dict[str, Dict[Tuple[Any, ...], Document]] = {}
        for embed in params.embeds:
            if embed.source_collection in preloaded:
                continue
            if params.dry_run and embed.source_collection in self._built:
                documents = self._built[embed.source_collection]
            else:
                documents = self.sink.find_all(embed.source_collection)

            by_key = {}
            for doc in documents:
                values = [doc.get(c) for c in embed.source_columns]
                if any(v is None for v in values):
                    continue
                by_key[self.sink.join_key(values)] = doc
            preloaded[embed.source_collection] = by_key
            logger.debug(
                f"Preloaded {len(by_key)} documents from {embed.source_collection}"
            )
        return preloaded

    def _process_rows(
        self,
        params: ScriptParameters,
        preloaded: Dict[str, Dict[Tuple[Any, ...], Document]],
        result: CollectionSummary,
    ) -> None:
        built: List[Document] = []
        plan = params.batch_plan
        if not params.identity.unique and not plan.is_full_scan:
            logger.warning(
                f"{params.collection}: identity {', '.join(params.identity.columns)} "
                "is not unique, reading the table in a single scan"
            )
            plan = replace(plan, batch_size=0)

        for page in iter_pages(self.source, params.table, plan):
            for row in page:
                result.attempted += 1
                identity = {c: row.get(c) for c in params.identity.columns}
                try:
                    upsert_filter = params.identity.filter_for(row)
                    document = build_document(
                        params, row, preloaded, self.sink.join_key
                    )
                    if params.dry_run:
                        built.append(document)
                    else:
                        self.sink.upsert(params.collection, upsert_filter, document)
                    result.succeeded += 1
                except Exception as e:
                    if params.error_policy == ErrorPolicy.FAIL_FAST:
                        logger.error(
                            f"Row {identity} of {params.collection} failed: {e}"
                        )
                        raise MigrationRowError(params.collection, identity, e) from e
                    result.skipped += 1
                    result.row_errors.append({"identity": identity, "error": str(e)})
                    logger.warning(
                        f"Skipping row {identity} of {params.collection}: {e}"
                    )

                if params.progress_interval and result.attempted % params.progress_interval == 0:
                    logger.info(
                        f"{params.collection}: {result.attempted} rows processed "
                        f"({result.succeeded} ok, {result.skipped} skipped)"
                    )

        if params.dry_run:
            self._built[params.collection] = built

    def _log_summary(self, params: ScriptParameters, result: CollectionSummary) -> None:
        logger.info(
            f"{params.collection} {result.status}: attempted={result.attempted} "
            f"succeeded={result.succeeded} skipped={result.skipped}"
        )
