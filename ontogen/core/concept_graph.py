"""
Concept graph - generic reasoning on top of the hypergraph.

Introduces the generic vocabulary every domain ontology builds on:

    IS-A            class lattice (transitive)
    INSTANCE-OF     instance -> class(es)
    HAS-A           structural ownership, owner -> child
    PART-OF         structural containment, part -> whole
    CONNECTS        peer connection
    SUBRELATION-OF  relation kind -> more generic relation kind

Facts are asserted with :meth:`ConceptGraph.relate_from`. Every query
honours the relation-kind hierarchy, e.g. asking for HAS-A also yields
facts of any kind declared SUBRELATION-OF HAS-A.
"""

from __future__ import annotations

from collections import defaultdict, deque
from collections.abc import Iterable
import logging

from ontogen.core.hypergraph import (
    Hyperedge,
    HyperedgeKind,
    Hypergraph,
    TraversalDirection,
    UniqueId,
    unite,
)

logger = logging.getLogger(__name__)

_FactKey = tuple[UniqueId, frozenset[UniqueId], frozenset[UniqueId]]


class ConceptGraph(Hypergraph):
    """
    Hypergraph with class/instance reasoning and typed relations.

    The generic vocabulary is created by :meth:`bootstrap`, which runs on
    construction and may safely run again.
    """

    IS_A_ID: UniqueId = "ConceptGraph::IsA"
    INSTANCE_OF_ID: UniqueId = "ConceptGraph::InstanceOf"
    HAS_A_ID: UniqueId = "ConceptGraph::HasA"
    PART_OF_ID: UniqueId = "ConceptGraph::PartOf"
    CONNECTS_ID: UniqueId = "ConceptGraph::Connects"
    SUBRELATION_OF_ID: UniqueId = "ConceptGraph::SubrelationOf"

    def __init__(self, other: Hypergraph | None = None) -> None:
        """
        Initialize ConceptGraph.

        Args:
            other: Optional graph (e.g. freshly loaded) to copy from
        """
        self._fact_keys: dict[_FactKey, UniqueId] = {}
        self._outgoing: dict[UniqueId, list[UniqueId]] = defaultdict(list)
        self._incoming: dict[UniqueId, list[UniqueId]] = defaultdict(list)
        self._subrelation_cache: dict[frozenset[UniqueId], set[UniqueId]] = {}
        super().__init__(other)
        self.bootstrap()

    def bootstrap(self) -> None:
        """Create the generic relation vocabulary (idempotent)."""
        self.relate(self.IS_A_ID, set(), set(), "IS-A")
        self.relate(self.INSTANCE_OF_ID, set(), set(), "INSTANCE-OF")
        self.relate(self.HAS_A_ID, set(), set(), "HAS-A")
        self.relate(self.PART_OF_ID, set(), set(), "PART-OF")
        self.relate(self.CONNECTS_ID, set(), set(), "CONNECTS")
        self.relate(self.SUBRELATION_OF_ID, set(), set(), "SUBRELATION-OF")

    def add(self, edge: Hyperedge) -> Hyperedge:
        """Store a hyperedge and index it when it is a fact."""
        if edge.uid in self:
            return super().add(edge)
        stored = super().add(edge)
        if stored.kind == HyperedgeKind.FACT and stored.relation:
            key = (stored.relation, frozenset(stored.from_ids), frozenset(stored.to_ids))
            self._fact_keys.setdefault(key, stored.uid)
            for uid in stored.from_ids:
                self._outgoing[uid].append(stored.uid)
            for uid in stored.to_ids:
                self._incoming[uid].append(stored.uid)
            if stored.relation == self.SUBRELATION_OF_ID:
                self._subrelation_cache.clear()
        return stored

    # Relations

    def relate(
        self,
        uid: UniqueId,
        from_ids: Iterable[UniqueId],
        to_ids: Iterable[UniqueId],
        label: str = "",
    ) -> set[UniqueId]:
        """
        Declare a relation kind.

        Args:
            uid: Identifier of the relation kind
            from_ids: Classes the sources are constrained to
            to_ids: Classes the targets are constrained to
            label: Display label

        Returns:
            ``{uid}``
        """
        if not uid:
            return set()
        self.add(
            Hyperedge(
                uid=uid,
                label=label,
                kind=HyperedgeKind.RELATION,
                from_ids=sorted(from_ids),
                to_ids=sorted(to_ids),
            )
        )
        return {uid}

    def relate_from(
        self,
        from_ids: Iterable[UniqueId],
        to_ids: Iterable[UniqueId],
        relation_id: UniqueId,
    ) -> set[UniqueId]:
        """
        Assert a fact of relation kind ``relation_id``.

        No type checking happens here; domain ontologies filter the
        endpoints before calling this. An identical fact is not stored twice.

        Returns:
            ``{fact_uid}``, or an empty set if an endpoint set is empty or
            the relation kind is unknown
        """
        sources = sorted(set(from_ids))
        targets = sorted(set(to_ids))
        relation = self.get(relation_id)
        if not sources or not targets or relation is None:
            return set()
        if relation.kind != HyperedgeKind.RELATION:
            logger.debug("Refusing to assert fact of non-relation %s", relation_id)
            return set()

        key = (relation_id, frozenset(sources), frozenset(targets))
        existing = self._fact_keys.get(key)
        if existing is not None:
            return {existing}

        fact = Hyperedge(
            uid=self.next_free_uid(relation_id),
            label=relation.label,
            kind=HyperedgeKind.FACT,
            from_ids=sources,
            to_ids=targets,
            relation=relation_id,
        )
        self.add(fact)
        logger.debug("Asserted %s", fact)
        return {fact.uid}

    def subrelation_of(
        self, relation_ids: Iterable[UniqueId], parent_ids: Iterable[UniqueId]
    ) -> set[UniqueId]:
        """Declare relation kinds to be specializations of other kinds."""
        return self.relate_from(relation_ids, parent_ids, self.SUBRELATION_OF_ID)

    def subrelations_of(self, relation_ids: Iterable[UniqueId]) -> set[UniqueId]:
        """All relation kinds that specialize the given ones (reflexive, transitive)."""
        roots = frozenset(relation_ids)
        cached = self._subrelation_cache.get(roots)
        if cached is not None:
            return set(cached)
        result = self._closure(roots, self.SUBRELATION_OF_ID, TraversalDirection.INVERSE)
        self._subrelation_cache[roots] = result
        return set(result)

    def facts_of(
        self,
        relation_ids: Iterable[UniqueId],
        from_ids: Iterable[UniqueId] | None = None,
        to_ids: Iterable[UniqueId] | None = None,
    ) -> set[UniqueId]:
        """
        Facts of the given relation kinds (and their subrelations).

        Args:
            relation_ids: Relation kinds to look for
            from_ids: If given, only facts with one of these as source
            to_ids: If given, only facts with one of these as target
        """
        kinds = self.subrelations_of(relation_ids)
        candidates: set[UniqueId] = set()
        if from_ids is not None:
            for uid in from_ids:
                candidates.update(self._outgoing.get(uid, ()))
        if to_ids is not None:
            incoming: set[UniqueId] = set()
            for uid in to_ids:
                incoming.update(self._incoming.get(uid, ()))
            candidates = incoming if from_ids is None else candidates & incoming
        if from_ids is None and to_ids is None:
            candidates = {
                edge.uid for edge in self if edge.kind == HyperedgeKind.FACT
            }
        return {uid for uid in candidates if self.get(uid).relation in kinds}

    def related(
        self,
        uids: Iterable[UniqueId],
        relation_ids: Iterable[UniqueId],
        label: str = "",
        direction: TraversalDirection = TraversalDirection.FORWARD,
    ) -> set[UniqueId]:
        """
        Concepts reachable in one step over the given relation kinds.

        FORWARD follows facts from source to target, INVERSE from target to
        source, BOTH does both.
        """
        kinds = self.subrelations_of(relation_ids)
        result: set[UniqueId] = set()
        for uid in uids:
            if direction in (TraversalDirection.FORWARD, TraversalDirection.BOTH):
                for fact_uid in self._outgoing.get(uid, ()):
                    fact = self.get(fact_uid)
                    if fact.relation in kinds:
                        result.update(fact.to_ids)
            if direction in (TraversalDirection.INVERSE, TraversalDirection.BOTH):
                for fact_uid in self._incoming.get(uid, ()):
                    fact = self.get(fact_uid)
                    if fact.relation in kinds:
                        result.update(fact.from_ids)
        return self.filter_by_label(result, label)

    def _closure(
        self,
        uids: Iterable[UniqueId],
        relation_id: UniqueId,
        direction: TraversalDirection,
    ) -> set[UniqueId]:
        """Reflexive transitive closure over exactly one relation kind."""
        seen = {uid for uid in uids if uid in self}
        todo = deque(seen)
        while todo:
            current = todo.popleft()
            step: list[UniqueId] = []
            if direction in (TraversalDirection.FORWARD, TraversalDirection.BOTH):
                for fact_uid in self._outgoing.get(current, ()):
                    fact = self.get(fact_uid)
                    if fact.relation == relation_id:
                        step.extend(fact.to_ids)
            if direction in (TraversalDirection.INVERSE, TraversalDirection.BOTH):
                for fact_uid in self._incoming.get(current, ()):
                    fact = self.get(fact_uid)
                    if fact.relation == relation_id:
                        step.extend(fact.from_ids)
            for uid in step:
                if uid not in seen:
                    seen.add(uid)
                    todo.append(uid)
        return seen

    # Classes

    def is_a(self, from_ids: Iterable[UniqueId], to_ids: Iterable[UniqueId]) -> set[UniqueId]:
        """Assert that ``from_ids`` are subclasses of ``to_ids``."""
        return self.relate_from(from_ids, to_ids, self.IS_A_ID)

    def subclasses_of(
        self,
        uids: Iterable[UniqueId],
        label: str = "",
        direction: TraversalDirection = TraversalDirection.INVERSE,
    ) -> set[UniqueId]:
        """
        Transitive subclasses of ``uids``, including ``uids`` themselves.

        With FORWARD the superclasses are returned instead.
        """
        return self.filter_by_label(self._closure(uids, self.IS_A_ID, direction), label)

    def direct_subclasses_of(
        self,
        uids: Iterable[UniqueId],
        label: str = "",
        direction: TraversalDirection = TraversalDirection.INVERSE,
    ) -> set[UniqueId]:
        """Direct subclasses of ``uids`` (FORWARD: direct superclasses)."""
        return self.related(uids, {self.IS_A_ID}, label, direction)

    # Instances

    def instance_of(
        self, instance_ids: Iterable[UniqueId], class_ids: Iterable[UniqueId]
    ) -> set[UniqueId]:
        """Assert that ``instance_ids`` realize ``class_ids``."""
        return self.relate_from(instance_ids, class_ids, self.INSTANCE_OF_ID)

    def instances_of(
        self,
        uids: Iterable[UniqueId],
        label: str = "",
        direction: TraversalDirection = TraversalDirection.INVERSE,
    ) -> set[UniqueId]:
        """
        Direct instances of the classes ``uids``.

        With FORWARD, ``uids`` are instances and their classes are returned.
        """
        return self.related(uids, {self.INSTANCE_OF_ID}, label, direction)

    def instantiate_from(self, class_ids: Iterable[UniqueId], label: str = "") -> set[UniqueId]:
        """
        Create a new instance realizing all given classes.

        Args:
            class_ids: Classes the instance realizes
            label: Label of the instance (default: label of the first class)

        Returns:
            ``{instance_uid}`` or empty set if no class is known
        """
        classes = sorted(uid for uid in set(class_ids) if uid in self)
        if not classes:
            return set()
        uid = self.next_free_uid(classes[0])
        self.create(uid, label or self.label_of(classes[0]))
        self.instance_of({uid}, classes)
        return {uid}

    def instantiate_deep_from(self, class_ids: Iterable[UniqueId]) -> set[UniqueId]:
        """
        Instantiate each class together with copies of its structure.

        Every structural child (HAS-A target, PART-OF source) of a class is
        instantiated as well, recursively, and re-attached to the new owner
        with the same relation kind. CONNECTS facts among copied children
        are replicated. Shared children are copied once.

        Returns:
            The new top-level instance uids, one per known class
        """
        result: set[UniqueId] = set()
        has_a = self.subrelations_of({self.HAS_A_ID})
        part_of = self.subrelations_of({self.PART_OF_ID})

        for class_id in sorted(set(class_ids)):
            top = self.instantiate_from({class_id})
            if not top:
                continue
            copies: dict[UniqueId, UniqueId] = {class_id: next(iter(top))}
            todo = deque([class_id])
            while todo:
                original = todo.popleft()
                owner_copy = copies[original]
                for fact_uid in list(self._outgoing.get(original, ())):
                    fact = self.get(fact_uid)
                    if fact.relation in has_a:
                        for child in fact.to_ids:
                            child_copy = self._copy_child(child, copies, todo)
                            self.relate_from({owner_copy}, {child_copy}, fact.relation)
                for fact_uid in list(self._incoming.get(original, ())):
                    fact = self.get(fact_uid)
                    if fact.relation in part_of:
                        for child in fact.from_ids:
                            child_copy = self._copy_child(child, copies, todo)
                            self.relate_from({child_copy}, {owner_copy}, fact.relation)
            self._copy_connections(copies)
            result |= top
        return result

    def _copy_child(
        self, child: UniqueId, copies: dict[UniqueId, UniqueId], todo: deque[UniqueId]
    ) -> UniqueId:
        if child in copies:
            return copies[child]
        classes = self.instances_of({child}, direction=TraversalDirection.FORWARD) or {child}
        copy_uid = next(iter(self.instantiate_from(classes, self.label_of(child))))
        copies[child] = copy_uid
        todo.append(child)
        return copy_uid

    def _copy_connections(self, copies: dict[UniqueId, UniqueId]) -> None:
        connects = self.subrelations_of({self.CONNECTS_ID})
        for fact_uid in self.facts_of(connects, from_ids=list(copies)):
            fact = self.get(fact_uid)
            if all(uid in copies for uid in fact.from_ids + fact.to_ids):
                self.relate_from(
                    {copies[uid] for uid in fact.from_ids},
                    {copies[uid] for uid in fact.to_ids},
                    fact.relation,
                )

    # Structure

    def children_of(
        self,
        uids: Iterable[UniqueId],
        label: str = "",
        direction: TraversalDirection = TraversalDirection.FORWARD,
    ) -> set[UniqueId]:
        """
        Structural children: HAS-A targets and PART-OF sources.

        With INVERSE the owners/containers of ``uids`` are returned.
        """
        uids = set(uids)
        if direction == TraversalDirection.FORWARD:
            return unite(
                self.related(uids, {self.HAS_A_ID}, label, TraversalDirection.FORWARD),
                self.related(uids, {self.PART_OF_ID}, label, TraversalDirection.INVERSE),
            )
        if direction == TraversalDirection.INVERSE:
            return unite(
                self.related(uids, {self.HAS_A_ID}, label, TraversalDirection.INVERSE),
                self.related(uids, {self.PART_OF_ID}, label, TraversalDirection.FORWARD),
            )
        return unite(
            self.children_of(uids, label, TraversalDirection.FORWARD),
            self.children_of(uids, label, TraversalDirection.INVERSE),
        )

    def endpoints_of(
        self,
        uids: Iterable[UniqueId],
        label: str = "",
        direction: TraversalDirection = TraversalDirection.FORWARD,
    ) -> set[UniqueId]:
        """Concepts connected to ``uids`` via CONNECTS (or a subrelation)."""
        return self.related(uids, {self.CONNECTS_ID}, label, direction)
