"""
Hypergraph storage - the substrate everything else is built on.

A hypergraph holds hyperedges addressed by a unique id. A hyperedge is
either a concept (no endpoints), a relation kind (endpoints are the
constraint classes) or a fact (an instance of a relation kind connecting a
set of concepts to another set of concepts).

All queries return plain ``set[str]`` of uids. Use :func:`intersect` and
:func:`unite` to combine them.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from enum import Enum
import logging

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

UniqueId = str


class HyperedgeKind(str, Enum):
    """What a hyperedge represents."""

    CONCEPT = "concept"
    RELATION = "relation"
    FACT = "fact"


class TraversalDirection(str, Enum):
    """Direction used when following relations."""

    FORWARD = "forward"
    INVERSE = "inverse"
    BOTH = "both"


class Hyperedge(BaseModel):
    """
    A node or edge of the hypergraph.

    Endpoints are kept as ordered lists without duplicates so that
    serialization stays stable.
    """

    uid: UniqueId = Field(..., description="Globally unique identifier")
    label: str = Field("", description="Display label (not unique)")
    kind: HyperedgeKind = Field(HyperedgeKind.CONCEPT, description="Concept, relation or fact")
    from_ids: list[UniqueId] = Field(default_factory=list, description="Source endpoints")
    to_ids: list[UniqueId] = Field(default_factory=list, description="Target endpoints")
    relation: UniqueId | None = Field(None, description="Relation kind a fact instantiates")

    def __str__(self) -> str:
        """String representation."""
        if self.kind == HyperedgeKind.CONCEPT:
            return f"{self.uid}[{self.label}]"
        return f"{sorted(self.from_ids)} --{self.label}--> {sorted(self.to_ids)}"


def intersect(*sets: Iterable[UniqueId]) -> set[UniqueId]:
    """Intersection of all given uid collections."""
    if not sets:
        return set()
    result = set(sets[0])
    for other in sets[1:]:
        result &= set(other)
    return result


def unite(*sets: Iterable[UniqueId]) -> set[UniqueId]:
    """Union of all given uid collections."""
    result: set[UniqueId] = set()
    for other in sets:
        result |= set(other)
    return result


def _dedup(ids: Iterable[UniqueId]) -> list[UniqueId]:
    return list(dict.fromkeys(ids))


class Hypergraph:
    """
    Append-only store of hyperedges.

    Example:
        >>> graph = Hypergraph()
        >>> graph.create("A", "First")
        {'A'}
        >>> graph.get("A").label
        'First'
    """

    def __init__(self, other: Hypergraph | None = None) -> None:
        """
        Initialize Hypergraph.

        Args:
            other: Optional graph whose hyperedges are copied into this one
        """
        self._edges: dict[UniqueId, Hyperedge] = {}
        self._counters: dict[str, int] = {}
        if other is not None:
            for edge in other:
                self.add(edge.model_copy(deep=True))

    def add(self, edge: Hyperedge) -> Hyperedge:
        """
        Store a hyperedge as is.

        An existing hyperedge with the same uid is kept and returned.
        """
        existing = self._edges.get(edge.uid)
        if existing is not None:
            return existing
        edge.from_ids = _dedup(edge.from_ids)
        edge.to_ids = _dedup(edge.to_ids)
        self._edges[edge.uid] = edge
        return edge

    def create(self, uid: UniqueId, label: str = "") -> set[UniqueId]:
        """
        Create a concept.

        Creation is idempotent: if ``uid`` already exists its label is kept.

        Args:
            uid: Identifier of the new concept
            label: Display label

        Returns:
            ``{uid}`` on success, empty set for an empty uid
        """
        if not uid:
            return set()
        if uid in self._edges:
            return {uid}
        self.add(Hyperedge(uid=uid, label=label, kind=HyperedgeKind.CONCEPT))
        return {uid}

    def get(self, uid: UniqueId) -> Hyperedge | None:
        """Get a hyperedge by uid, None if unknown."""
        return self._edges.get(uid)

    def label_of(self, uid: UniqueId) -> str:
        """Label of a hyperedge, empty string if unknown."""
        edge = self._edges.get(uid)
        return edge.label if edge is not None else ""

    def set_label(self, uid: UniqueId, label: str) -> None:
        """Replace the label of an existing hyperedge."""
        edge = self._edges.get(uid)
        if edge is not None:
            edge.label = label

    def find(self, label: str = "", kind: HyperedgeKind | None = None) -> set[UniqueId]:
        """
        Find hyperedges by label and kind.

        Args:
            label: Exact label to match (empty = any)
            kind: Restrict to a hyperedge kind (None = any)
        """
        return {
            uid
            for uid, edge in self._edges.items()
            if (not label or edge.label == label) and (kind is None or edge.kind == kind)
        }

    def filter_by_label(self, uids: Iterable[UniqueId], label: str = "") -> set[UniqueId]:
        """Keep the known uids whose label equals ``label`` (empty = keep all)."""
        return {
            uid
            for uid in uids
            if uid in self._edges and (not label or self._edges[uid].label == label)
        }

    def uids(self) -> set[UniqueId]:
        """All known uids."""
        return set(self._edges)

    def next_free_uid(self, base: UniqueId) -> UniqueId:
        """
        Generate an unused uid derived from ``base``.

        The first free one of ``base1``, ``base2``, ... is returned.
        """
        n = self._counters.get(base, 0)
        while True:
            n += 1
            candidate = f"{base}{n}"
            if candidate not in self._edges:
                self._counters[base] = n
                return candidate

    def __contains__(self, uid: object) -> bool:
        return uid in self._edges

    def __iter__(self) -> Iterator[Hyperedge]:
        return iter(list(self._edges.values()))

    def __len__(self) -> int:
        return len(self._edges)

    def __repr__(self) -> str:
        """String representation."""
        return f"{type(self).__name__}(hyperedges={len(self._edges)})"
