"""
Component/Network ontology.

Vocabulary:

    COMPONENT
    INTERFACE
    NETWORK          -- is-a --> COMPONENT

    COMPONENT/NETWORK  -- HAS-A-INTERFACE (has-a) -->       INTERFACE
    INTERFACE          -- CONNECTED-TO (connects) -->       INTERFACE
    COMPONENT          -- PART-OF-NETWORK (part-of) -->     NETWORK

Every assertion first filters its endpoints against the class lattice.
Endpoints that do not conform are dropped (and recorded in
``rejections``); if a side ends up empty nothing is asserted and an empty
set is returned.
"""

from __future__ import annotations

from collections.abc import Iterable
import logging

from ontogen.core.concept_graph import ConceptGraph
from ontogen.core.hypergraph import (
    HyperedgeKind,
    Hypergraph,
    TraversalDirection,
    UniqueId,
    intersect,
    unite,
)
from ontogen.ontology.models import EndpointRole, OntologyStats, Rejection

logger = logging.getLogger(__name__)


class ComponentNetwork(ConceptGraph):
    """
    Ontology of components, their interfaces and networks of components.

    Example:
        >>> cn = ComponentNetwork()
        >>> cn.create_component("MyComponent", "A")
        {'MyComponent'}
        >>> cn.create_interface("CommonInterface", "Interface")
        {'CommonInterface'}
        >>> x = cn.instantiate_from({"CommonInterface"}, "x")
        >>> len(cn.has_interface({"MyComponent"}, x))
        1
    """

    COMPONENT_ID: UniqueId = "Component::Network::Component"
    INTERFACE_ID: UniqueId = "Component::Network::Interface"
    NETWORK_ID: UniqueId = "Component::Network::Network"
    HAS_A_INTERFACE_ID: UniqueId = "Component::Network::HasAInterface"
    CONNECTED_TO_INTERFACE_ID: UniqueId = "Component::Network::ConnectedToInterface"
    PART_OF_NETWORK_ID: UniqueId = "Component::Network::PartOfNetwork"

    def __init__(self, other: Hypergraph | None = None) -> None:
        """
        Initialize ComponentNetwork.

        Args:
            other: Optional graph (e.g. freshly loaded) to copy from
        """
        self.rejections: list[Rejection] = []
        super().__init__(other)

    def bootstrap(self) -> None:
        """Create the component/network vocabulary (idempotent)."""
        super().bootstrap()
        self.create(self.COMPONENT_ID, "COMPONENT")
        self.create(self.INTERFACE_ID, "INTERFACE")
        self.create(self.NETWORK_ID, "NETWORK")

        self.relate(
            self.HAS_A_INTERFACE_ID,
            {self.COMPONENT_ID, self.NETWORK_ID},
            {self.INTERFACE_ID},
            "HAS-A",
        )
        self.subrelation_of({self.HAS_A_INTERFACE_ID}, {self.HAS_A_ID})
        self.relate(
            self.CONNECTED_TO_INTERFACE_ID, {self.INTERFACE_ID}, {self.INTERFACE_ID}, "CONNECTED-TO"
        )
        self.subrelation_of({self.CONNECTED_TO_INTERFACE_ID}, {self.CONNECTS_ID})
        self.relate(self.PART_OF_NETWORK_ID, {self.COMPONENT_ID}, {self.NETWORK_ID}, "PART-OF")
        self.subrelation_of({self.PART_OF_NETWORK_ID}, {self.PART_OF_ID})
        self.is_a({self.NETWORK_ID}, {self.COMPONENT_ID})

    # Validation helpers

    def _filter(
        self,
        uids: Iterable[UniqueId],
        valid: set[UniqueId],
        relation: UniqueId,
        role: EndpointRole,
        expected: str,
    ) -> set[UniqueId]:
        """Keep the uids found in ``valid``, record a rejection for the rest."""
        kept: set[UniqueId] = set()
        for uid in uids:
            if uid in valid:
                kept.add(uid)
                continue
            rejection = Rejection(
                uid=uid,
                relation=relation,
                role=role,
                reason=f"not a known {expected}" if uid in self else "unknown uid",
            )
            self.rejections.append(rejection)
            logger.debug("%s", rejection)
        return kept

    def _assert_filtered(
        self,
        from_ids: Iterable[UniqueId],
        valid_from: set[UniqueId],
        expected_from: str,
        to_ids: Iterable[UniqueId],
        valid_to: set[UniqueId],
        expected_to: str,
        relation_id: UniqueId,
    ) -> set[UniqueId]:
        sources = self._filter(from_ids, valid_from, relation_id, EndpointRole.SOURCE, expected_from)
        targets = self._filter(to_ids, valid_to, relation_id, EndpointRole.TARGET, expected_to)
        if sources and targets:
            return self.relate_from(sources, targets, relation_id)
        return set()

    def _create_class(
        self,
        uid: UniqueId,
        label: str,
        root_id: UniqueId,
        superclass_ids: Iterable[UniqueId],
        valid: set[UniqueId],
        expected: str,
    ) -> set[UniqueId]:
        """Create ``uid`` and make it a subclass of ``root_id`` and the valid superclasses."""
        existing = self.get(uid)
        if not uid or (existing is not None and existing.kind != HyperedgeKind.CONCEPT):
            logger.debug("Cannot create class %r below %s", uid, root_id)
            return set()
        superclasses = self._filter(
            unite({root_id}, superclass_ids), valid, self.IS_A_ID, EndpointRole.SUPERCLASS, expected
        )
        superclasses.discard(uid)
        if not superclasses:
            return set()
        if self.is_a(self.create(uid, label), superclasses):
            return {uid}
        return set()

    def clear_rejections(self) -> None:
        """Forget all recorded rejections."""
        self.rejections.clear()

    # Factory functions

    def create_component(
        self,
        uid: UniqueId,
        label: str = "Component",
        superclass_ids: Iterable[UniqueId] = (),
    ) -> set[UniqueId]:
        """
        Create a component class.

        Args:
            uid: Identifier of the new class
            label: Display label
            superclass_ids: Additional superclasses; those that are not
                component classes are dropped

        Returns:
            ``{uid}`` on success, empty set otherwise
        """
        return self._create_class(
            uid, label, self.COMPONENT_ID, superclass_ids, self.component_classes(), "component class"
        )

    def create_interface(
        self,
        uid: UniqueId,
        label: str = "Interface",
        superclass_ids: Iterable[UniqueId] = (),
    ) -> set[UniqueId]:
        """Create an interface class (see :meth:`create_component`)."""
        return self._create_class(
            uid, label, self.INTERFACE_ID, superclass_ids, self.interface_classes(), "interface class"
        )

    def create_network(
        self,
        uid: UniqueId,
        label: str = "Network",
        superclass_ids: Iterable[UniqueId] = (),
    ) -> set[UniqueId]:
        """Create a network class (see :meth:`create_component`)."""
        return self._create_class(
            uid, label, self.NETWORK_ID, superclass_ids, self.network_classes(), "network class"
        )

    def instantiate_component(self, component_ids: Iterable[UniqueId]) -> set[UniqueId]:
        """
        Instantiate component classes together with their interfaces and parts.

        Returns:
            The new component instances
        """
        return self.instantiate_deep_from(intersect(component_ids, self.component_classes()))

    # Class queries

    def _classes_below(
        self, root_id: UniqueId, name: str, restrict_to: Iterable[UniqueId]
    ) -> set[UniqueId]:
        result = self.subclasses_of({root_id}, name)
        restrict_to = set(restrict_to)
        if restrict_to:
            result = intersect(result, self.subclasses_of(restrict_to, name))
        return result

    def component_classes(
        self, name: str = "", restrict_to: Iterable[UniqueId] = ()
    ) -> set[UniqueId]:
        """
        All (transitive) component classes.

        Args:
            name: Only classes with this label (empty = all)
            restrict_to: If given, only classes also below one of these
        """
        return self._classes_below(self.COMPONENT_ID, name, restrict_to)

    def interface_classes(
        self, name: str = "", restrict_to: Iterable[UniqueId] = ()
    ) -> set[UniqueId]:
        """All (transitive) interface classes."""
        return self._classes_below(self.INTERFACE_ID, name, restrict_to)

    def network_classes(self, name: str = "", restrict_to: Iterable[UniqueId] = ()) -> set[UniqueId]:
        """All (transitive) network classes."""
        return self._classes_below(self.NETWORK_ID, name, restrict_to)

    # Instance queries

    def components(self, name: str = "", class_name: str = "") -> set[UniqueId]:
        """
        Component instances.

        Args:
            name: Only instances with this label
            class_name: Only instances of component classes with this label
        """
        return self.instances_of(self.component_classes(class_name), name)

    def interfaces(self, name: str = "", class_name: str = "") -> set[UniqueId]:
        """Interface instances (see :meth:`components`)."""
        return self.instances_of(self.interface_classes(class_name), name)

    def networks(self, name: str = "", class_name: str = "") -> set[UniqueId]:
        """Network instances (see :meth:`components`)."""
        return self.instances_of(self.network_classes(class_name), name)

    # Facts

    def has_interface(
        self, component_ids: Iterable[UniqueId], interface_ids: Iterable[UniqueId]
    ) -> set[UniqueId]:
        """
        Assert that components (classes or instances) own interface instances.

        Returns:
            ``{fact_uid}`` or empty set if nothing conforms
        """
        return self._assert_filtered(
            component_ids,
            unite(self.component_classes(), self.components()),
            "component",
            interface_ids,
            self.interfaces(),
            "interface instance",
            self.HAS_A_INTERFACE_ID,
        )

    def connect_interface(
        self, from_interface_ids: Iterable[UniqueId], to_interface_ids: Iterable[UniqueId]
    ) -> set[UniqueId]:
        """Assert that interface instances are connected."""
        valid = self.interfaces()
        return self._assert_filtered(
            from_interface_ids,
            valid,
            "interface instance",
            to_interface_ids,
            valid,
            "interface instance",
            self.CONNECTED_TO_INTERFACE_ID,
        )

    def part_of_network(
        self, component_ids: Iterable[UniqueId], network_ids: Iterable[UniqueId]
    ) -> set[UniqueId]:
        """Assert that component instances are part of networks (classes or instances)."""
        return self._assert_filtered(
            component_ids,
            self.components(),
            "component instance",
            network_ids,
            unite(self.networks(), self.network_classes()),
            "network",
            self.PART_OF_NETWORK_ID,
        )

    def export_interfaces(
        self, network_ids: Iterable[UniqueId], interface_ids: Iterable[UniqueId]
    ) -> set[UniqueId]:
        """
        Make interfaces of network parts available at network level.

        Only interfaces owned by a part of one of the networks are exported.
        """
        network_ids = set(network_ids)
        valid = self.interfaces_of(self.components_of(network_ids))
        exported = self._filter(
            interface_ids, valid, self.HAS_A_INTERFACE_ID, EndpointRole.TARGET, "interface of a part"
        )
        networks = self._filter(
            network_ids,
            unite(self.networks(), self.network_classes()),
            self.HAS_A_INTERFACE_ID,
            EndpointRole.SOURCE,
            "network",
        )
        if not exported or not networks:
            return set()
        return self.has_interface(networks, exported)

    # Structural queries

    def interfaces_of(
        self,
        component_ids: Iterable[UniqueId],
        name: str = "",
        direction: TraversalDirection = TraversalDirection.FORWARD,
    ) -> set[UniqueId]:
        """
        Interface instances owned by the given components.

        With INVERSE, ``component_ids`` are interfaces and their owners
        are returned instead.
        """
        if direction == TraversalDirection.INVERSE:
            owned = intersect(component_ids, self.interfaces())
            return self.children_of(owned, name, TraversalDirection.INVERSE)
        return intersect(self.children_of(component_ids, name), self.interfaces(name))

    def components_of(
        self,
        component_ids: Iterable[UniqueId],
        name: str = "",
        direction: TraversalDirection = TraversalDirection.FORWARD,
    ) -> set[UniqueId]:
        """
        Component instances that are structural parts of the given components.

        With INVERSE the enclosing components/networks are returned.
        """
        if direction == TraversalDirection.INVERSE:
            return intersect(
                self.children_of(component_ids, name, TraversalDirection.INVERSE),
                unite(self.component_classes(), self.components()),
            )
        return intersect(self.children_of(component_ids, name), self.components(name))

    # Statistics

    def _roots(self) -> dict[str, UniqueId]:
        return {
            "COMPONENT": self.COMPONENT_ID,
            "INTERFACE": self.INTERFACE_ID,
            "NETWORK": self.NETWORK_ID,
        }

    def stats(self) -> OntologyStats:
        """
        Get statistics about the ontology.

        Returns:
            OntologyStats with current counts
        """
        kinds = {kind: 0 for kind in HyperedgeKind}
        for edge in self:
            kinds[edge.kind] += 1
        classes_by_root = {}
        instances_by_root = {}
        for name, root_id in self._roots().items():
            classes = self.subclasses_of({root_id})
            classes_by_root[name] = len(classes) - 1
            instances_by_root[name] = len(self.instances_of(classes))
        return OntologyStats(
            total_concepts=kinds[HyperedgeKind.CONCEPT],
            total_relations=kinds[HyperedgeKind.RELATION],
            total_facts=kinds[HyperedgeKind.FACT],
            classes_by_root=classes_by_root,
            instances_by_root=instances_by_root,
        )

    def __repr__(self) -> str:
        """String representation."""
        return f"{type(self).__name__}(hyperedges={len(self)}, rejections={len(self.rejections)})"
