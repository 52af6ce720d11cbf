"""Embedding dependencies between collections and their execution order.

``A -> B`` means collection A embeds a copy of B, so B's documents must be
written before A's migration preloads them.
"""

from __future__ import annotations

import heapq
from typing import Dict, List

from sql2nosql.core.document.types import DocumentSchema
from sql2nosql.core.errors import DependencyCycleError
from sql2nosql.core.schema.naming import match_name
from sql2nosql.utils.logging import get_logger

logger = get_logger(__name__)


def find_embedded_source(schema: DocumentSchema, collection: str, field_name: str):
    """Collection whose data an embedded field of ``collection`` copies, if any."""
    others = [name for name in schema.collection_names if name != collection]
    return match_name(field_name, others)


def build_dependency_graph(schema: DocumentSchema) -> Dict[str, List[str]]:
    """Map each collection to the collections it embeds.

    Only object fields with a nested shape count; opaque JSON objects do not.
    Every collection appears as a key, in schema order.

    Args:
        schema: Document schema (usually the augmented one)

    Returns:
        Dict of collection name -> dependency names (first-seen field order)
    """
    graph: Dict[str, List[str]] = {}
    for collection in schema.collections:
        deps: List[str] = []
        for embedded in collection.embedded_fields():
            source = find_embedded_source(schema, collection.name, embedded.name)
            if source is not None and source not in deps:
                deps.append(source)
        graph[collection.name] = deps
    return graph


def resolve_execution_order(schema: DocumentSchema) -> List[str]:
    """Order collections so every dependency precedes its dependents.

    Kahn's algorithm; among collections that are ready at the same time the
    one declared first in the schema goes first.

    Raises:
        DependencyCycleError: If embeddings form a cycle. No partial order is
            returned.
    """
    graph = build_dependency_graph(schema)
    position = {name: i for i, name in enumerate(schema.collection_names)}

    pending = {name: len(deps) for name, deps in graph.items()}
    dependents: Dict[str, List[str]] = {name: [] for name in graph}
    for name, deps in graph.items():
        for dep in deps:
            dependents[dep].append(name)

    ready = [(position[name], name) for name, count in pending.items() if count == 0]
    heapq.heapify(ready)
    order: List[str] = []

    while ready:
        _, name = heapq.heappop(ready)
        order.append(name)
        for dependent in dependents[name]:
            pending[dependent] -= 1
            if pending[dependent] == 0:
                heapq.heappush(ready, (position[dependent], dependent))

    if len(order) != len(graph):
        cycle = _cycle_members(graph, set(graph) - set(order))
        logger.error(f"Embedding dependency cycle between: {', '.join(cycle)}")
        raise DependencyCycleError(sorted(cycle, key=position.get))

    logger.debug(f"Execution order: {' -> '.join(order)}")
    return order


def _cycle_members(graph: Dict[str, List[str]], remaining: set) -> List[str]:
    """Collections on a cycle: members of strongly connected components of size >= 2.

    Collections that merely wait on a cycle, or sit on a path between two
    cycles, are left out. Tarjan's algorithm over the unresolved subgraph.
    """
    index: Dict[str, int] = {}
    lowlink: Dict[str, int] = {}
    stack: List[str] = []
    on_stack = set()
    members: List[str] = []

    def visit(name: str) -> None:
        index[name] = lowlink[name] = len(index)
        stack.append(name)
        on_stack.add(name)
        for dep in graph[name]:
            if dep not in remaining:
                continue
            if dep not in index:
                visit(dep)
                lowlink[name] = min(lowlink[name], lowlink[dep])
            elif dep in on_stack:
                lowlink[name] = min(lowlink[name], index[dep])

        if lowlink[name] == index[name]:
            component = []
            while True:
                member = stack.pop()
                on_stack.discard(member)
                component.append(member)
                if member == name:
                    break
            if len(component) > 1:
                members.extend(component)

    for name in graph:
        if name in remaining and name not in index:
            visit(name)
    return members
