"""
Composition traversal for composite algorithms.

An algorithm class is composite when algorithm instances are PART-OF it.
Each part realizes one or more algorithm classes, which may be composite
themselves. The walker resolves this tree with an explicit worklist so
that deep designs do not hit the recursion limit and so that a class that
is transitively part of itself is reported instead of looping forever.
"""

from __future__ import annotations

from enum import Enum
import logging
from typing import TYPE_CHECKING

from ontogen.core.exceptions import CompositionCycleError
from ontogen.core.hypergraph import TraversalDirection, UniqueId, intersect

if TYPE_CHECKING:
    from ontogen.ontology.software_graph import SoftwareGraph

logger = logging.getLogger(__name__)


class _Mark(Enum):
    OPEN = 1
    DONE = 2


class CompositionWalker:
    """
    Resolves the composition tree below algorithm classes.

    Usage:
        walker = CompositionWalker(graph)
        order = walker.hierarchy("Disparity")   # parts first, root last
    """

    def __init__(self, graph: SoftwareGraph) -> None:
        """
        Initialize CompositionWalker.

        Args:
            graph: Software ontology to query
        """
        self.graph = graph

    def parts_of(self, algorithm_id: UniqueId) -> set[UniqueId]:
        """Part instances of an algorithm class."""
        return self.graph.components_of({algorithm_id})

    def part_classes(self, part_id: UniqueId) -> set[UniqueId]:
        """Algorithm classes a part realizes."""
        return intersect(
            self.graph.instances_of({part_id}, direction=TraversalDirection.FORWARD),
            self.graph.algorithm_classes(),
        )

    def sub_algorithms(self, algorithm_id: UniqueId) -> set[UniqueId]:
        """Algorithm classes directly used as parts of ``algorithm_id``."""
        result: set[UniqueId] = set()
        for part_id in self.parts_of(algorithm_id):
            result |= self.part_classes(part_id)
        return result

    def hierarchy(self, algorithm_id: UniqueId) -> list[UniqueId]:
        """
        All algorithm classes below (and including) ``algorithm_id``.

        Returns:
            Classes in dependency order: every class comes after the
            classes of its parts, ``algorithm_id`` comes last

        Raises:
            CompositionCycleError: If a class is transitively part of itself
        """
        marks: dict[UniqueId, _Mark] = {algorithm_id: _Mark.OPEN}
        stack: list[tuple[UniqueId, list[UniqueId]]] = [
            (algorithm_id, sorted(self.sub_algorithms(algorithm_id), reverse=True))
        ]
        order: list[UniqueId] = []

        while stack:
            current, pending = stack[-1]
            if not pending:
                stack.pop()
                marks[current] = _Mark.DONE
                order.append(current)
                continue
            child = pending.pop()
            mark = marks.get(child)
            if mark is _Mark.DONE:
                continue
            if mark is _Mark.OPEN:
                path = [uid for uid, _ in stack]
                cycle = path[path.index(child) :] + [child]
                msg = f"Composition cycle: {' -> '.join(cycle)}"
                raise CompositionCycleError(msg, cycle=cycle)
            marks[child] = _Mark.OPEN
            stack.append((child, sorted(self.sub_algorithms(child), reverse=True)))

        logger.debug("Hierarchy of %s: %s", algorithm_id, order)
        return order

    def depth(self, algorithm_id: UniqueId) -> int:
        """
        Nesting depth of a composition tree (0 for an atomic algorithm).

        Raises:
            CompositionCycleError: If a class is transitively part of itself
        """
        depths: dict[UniqueId, int] = {}
        for uid in self.hierarchy(algorithm_id):
            children = self.sub_algorithms(uid)
            depths[uid] = 1 + max(depths[c] for c in children) if children else 0
        return depths[algorithm_id]
