"""
Software ontology.

Builds on the component/network ontology and introduces the concepts needed
for logical specification of algorithms and skeleton generation:

    ALGORITHM  -- is-a --> NETWORK          (an algorithm may be composite)
    INTERFACE  -- is-a --> Component INTERFACE
    INPUT      -- is-a --> INTERFACE
    OUTPUT     -- is-a --> INTERFACE
    IMPLEMENTATION                          (realized artifacts, per language)
    DATATYPE                                (language specific datatypes)

    ALGORITHM -- NEEDS (has-a) -->        INPUT
    ALGORITHM -- PROVIDES (has-a) -->     OUTPUT
    INPUT     -- DEPENDS-ON (connects) --> OUTPUT
    IMPLEMENTATION -- is-a --> ALGORITHM  (realizes)

Example:

        |---------- realizes -- disparity.vhd
        v
    DisparityMap -- needs --> left -- is-a --> Input
      | |                       |---- instance-of --> Image <-- is-a -- uint8_image_t
      | |---------- needs --> right ...
      |------------ provides --> disparity ...

Interface classes such as ``Image`` are subclassed by datatype classes
(e.g. ``uint8_image_t``, which is also a DATATYPE). This is how a generator
resolves the concrete type of an interface for its target language.
"""

from __future__ import annotations

from collections.abc import Iterable
import logging

from ontogen.core.hypergraph import (
    TraversalDirection,
    UniqueId,
    intersect,
    unite,
)
from ontogen.ontology.component_network import ComponentNetwork

logger = logging.getLogger(__name__)


class SoftwareGraph(ComponentNetwork):
    """
    Ontology of algorithms, their inputs/outputs and implementations.

    The NEEDS/PROVIDES assertions are not atomic: the HAS-A-INTERFACE fact is
    asserted first and stays even if the second assertion yields nothing.
    """

    ALGORITHM_ID: UniqueId = "Software::Graph::Algorithm"
    INTERFACE_ID_SW: UniqueId = "Software::Graph::Interface"
    INPUT_ID: UniqueId = "Software::Graph::Input"
    OUTPUT_ID: UniqueId = "Software::Graph::Output"
    IMPLEMENTATION_ID: UniqueId = "Software::Graph::Implementation"
    DATATYPE_ID: UniqueId = "Software::Graph::Datatype"

    NEEDS_ID: UniqueId = "Software::Graph::Needs"
    PROVIDES_ID: UniqueId = "Software::Graph::Provides"
    DEPENDS_ON_ID: UniqueId = "Software::Graph::DependsOn"

    def bootstrap(self) -> None:
        """Create the software vocabulary (idempotent)."""
        super().bootstrap()
        self.create(self.ALGORITHM_ID, "ALGORITHM")
        self.create(self.INTERFACE_ID_SW, "INTERFACE")
        self.create(self.INPUT_ID, "INPUT")
        self.create(self.OUTPUT_ID, "OUTPUT")
        self.create(self.IMPLEMENTATION_ID, "IMPLEMENTATION")
        self.create(self.DATATYPE_ID, "DATATYPE")

        self.is_a({self.ALGORITHM_ID}, {self.NETWORK_ID})
        self.is_a({self.INTERFACE_ID_SW}, {self.INTERFACE_ID})
        self.is_a({self.INPUT_ID}, {self.INTERFACE_ID_SW})
        self.is_a({self.OUTPUT_ID}, {self.INTERFACE_ID_SW})

        self.relate(self.NEEDS_ID, {self.ALGORITHM_ID}, {self.INPUT_ID}, "NEEDS")
        self.subrelation_of({self.NEEDS_ID}, {self.HAS_A_INTERFACE_ID})
        self.relate(self.PROVIDES_ID, {self.ALGORITHM_ID}, {self.OUTPUT_ID}, "PROVIDES")
        self.subrelation_of({self.PROVIDES_ID}, {self.HAS_A_INTERFACE_ID})
        self.relate(self.DEPENDS_ON_ID, {self.INPUT_ID}, {self.OUTPUT_ID}, "DEPENDS-ON")
        self.subrelation_of({self.DEPENDS_ON_ID}, {self.CONNECTS_ID})

    # Factory functions
    # NOTE: These create classes; use instantiate_from() for instances.

    def create_algorithm(
        self, uid: UniqueId, label: str = "Algorithm", superclass_ids: Iterable[UniqueId] = ()
    ) -> set[UniqueId]:
        """Create an algorithm class."""
        return self._create_class(
            uid, label, self.ALGORITHM_ID, superclass_ids, self.algorithm_classes(), "algorithm class"
        )

    def create_interface(
        self, uid: UniqueId, label: str = "Interface", superclass_ids: Iterable[UniqueId] = ()
    ) -> set[UniqueId]:
        """Create a (software) interface class."""
        return self._create_class(
            uid,
            label,
            self.INTERFACE_ID_SW,
            superclass_ids,
            self.interface_classes(),
            "interface class",
        )

    def create_input(
        self, uid: UniqueId, label: str = "Input", superclass_ids: Iterable[UniqueId] = ()
    ) -> set[UniqueId]:
        """Create an input class; extra superclasses must be interface classes."""
        return self._create_class(
            uid, label, self.INPUT_ID, superclass_ids, self.interface_classes(), "interface class"
        )

    def create_output(
        self, uid: UniqueId, label: str = "Output", superclass_ids: Iterable[UniqueId] = ()
    ) -> set[UniqueId]:
        """Create an output class; extra superclasses must be interface classes."""
        return self._create_class(
            uid, label, self.OUTPUT_ID, superclass_ids, self.interface_classes(), "interface class"
        )

    def create_implementation(
        self,
        uid: UniqueId,
        label: str = "Implementation",
        superclass_ids: Iterable[UniqueId] = (),
    ) -> set[UniqueId]:
        """
        Create an implementation class.

        The label may hold free-form text such as generated source code.
        Call :meth:`realizes` (or ``is_a``) afterwards to tie the
        implementation to the algorithm it realizes.
        """
        return self._create_class(
            uid,
            label,
            self.IMPLEMENTATION_ID,
            superclass_ids,
            self.implementation_classes(),
            "implementation class",
        )

    def create_datatype(
        self, uid: UniqueId, label: str = "Datatype", superclass_ids: Iterable[UniqueId] = ()
    ) -> set[UniqueId]:
        """
        Create a datatype class.

        Extra superclasses may be datatype classes (e.g. a language root)
        or interface classes the datatype realizes.
        """
        return self._create_class(
            uid,
            label,
            self.DATATYPE_ID,
            superclass_ids,
            unite(self.datatype_classes(), self.interface_classes()),
            "datatype or interface class",
        )

    # Class queries

    def algorithm_classes(self, name: str = "", restrict_to: Iterable[UniqueId] = ()) -> set[UniqueId]:
        """All (transitive) algorithm classes."""
        return self._classes_below(self.ALGORITHM_ID, name, restrict_to)

    def input_classes(self, name: str = "", restrict_to: Iterable[UniqueId] = ()) -> set[UniqueId]:
        """All (transitive) input classes."""
        return self._classes_below(self.INPUT_ID, name, restrict_to)

    def output_classes(self, name: str = "", restrict_to: Iterable[UniqueId] = ()) -> set[UniqueId]:
        """All (transitive) output classes."""
        return self._classes_below(self.OUTPUT_ID, name, restrict_to)

    def implementation_classes(
        self, name: str = "", restrict_to: Iterable[UniqueId] = ()
    ) -> set[UniqueId]:
        """All (transitive) implementation classes."""
        return self._classes_below(self.IMPLEMENTATION_ID, name, restrict_to)

    def datatype_classes(self, name: str = "", restrict_to: Iterable[UniqueId] = ()) -> set[UniqueId]:
        """All (transitive) datatype classes, optionally below ``restrict_to``."""
        return self._classes_below(self.DATATYPE_ID, name, restrict_to)

    # Instance queries

    def algorithms(self, name: str = "", class_name: str = "") -> set[UniqueId]:
        """Algorithm instances."""
        return self.instances_of(self.algorithm_classes(class_name), name)

    def inputs(self, name: str = "", class_name: str = "") -> set[UniqueId]:
        """
        Input instances.

        An instance counts as input if one of its classes is an input class,
        e.g. an instance of both ``Input`` and ``Image``.
        """
        return self.instances_of(self.input_classes(class_name), name)

    def outputs(self, name: str = "", class_name: str = "") -> set[UniqueId]:
        """Output instances."""
        return self.instances_of(self.output_classes(class_name), name)

    def implementations(self, name: str = "", class_name: str = "") -> set[UniqueId]:
        """Implementation instances."""
        return self.instances_of(self.implementation_classes(class_name), name)

    def datatypes(self, name: str = "", class_name: str = "") -> set[UniqueId]:
        """Datatype instances."""
        return self.instances_of(self.datatype_classes(class_name), name)

    # Facts
    # RULE: A needs I -> A has I, I is-a Input
    # RULE: A provides O -> A has O, O is-a Output
    # RULE: I dependsOn O -> I is-a Input, O is-a Output

    def needs_interface(
        self, algorithm_ids: Iterable[UniqueId], input_ids: Iterable[UniqueId]
    ) -> set[UniqueId]:
        """
        Assert that algorithms need inputs.

        Returns:
            ``{fact_uid}`` of the NEEDS fact, empty set if nothing conforms
        """
        return self._has_then(algorithm_ids, input_ids, self.inputs(), "input instance", self.NEEDS_ID)

    def provides_interface(
        self, algorithm_ids: Iterable[UniqueId], output_ids: Iterable[UniqueId]
    ) -> set[UniqueId]:
        """Assert that algorithms provide outputs (see :meth:`needs_interface`)."""
        return self._has_then(
            algorithm_ids, output_ids, self.outputs(), "output instance", self.PROVIDES_ID
        )

    def _has_then(
        self,
        algorithm_ids: Iterable[UniqueId],
        interface_ids: Iterable[UniqueId],
        valid_to: set[UniqueId],
        expected_to: str,
        relation_id: UniqueId,
    ) -> set[UniqueId]:
        algorithm_ids = set(algorithm_ids)
        interface_ids = set(interface_ids)
        if not self.has_interface(algorithm_ids, interface_ids):
            return set()
        return self._assert_filtered(
            algorithm_ids,
            unite(self.algorithm_classes(), self.algorithms()),
            "algorithm",
            interface_ids,
            valid_to,
            expected_to,
            relation_id,
        )

    def depends_on(
        self, input_ids: Iterable[UniqueId], output_ids: Iterable[UniqueId]
    ) -> set[UniqueId]:
        """Assert that inputs depend on (are fed by) outputs."""
        return self._assert_filtered(
            input_ids,
            self.inputs(),
            "input instance",
            output_ids,
            self.outputs(),
            "output instance",
            self.DEPENDS_ON_ID,
        )

    def realizes(
        self, implementation_ids: Iterable[UniqueId], algorithm_ids: Iterable[UniqueId]
    ) -> set[UniqueId]:
        """Assert that implementation classes realize algorithm classes."""
        return self._assert_filtered(
            implementation_ids,
            self.implementation_classes(),
            "implementation class",
            algorithm_ids,
            self.algorithm_classes(),
            "algorithm class",
            self.IS_A_ID,
        )

    # Structural queries

    def inputs_of(self, algorithm_ids: Iterable[UniqueId], name: str = "") -> set[UniqueId]:
        """Input instances owned by the given algorithms."""
        return intersect(self.interfaces_of(algorithm_ids, name), self.inputs(name))

    def outputs_of(self, algorithm_ids: Iterable[UniqueId], name: str = "") -> set[UniqueId]:
        """Output instances owned by the given algorithms."""
        return intersect(self.interfaces_of(algorithm_ids, name), self.outputs(name))

    def dependencies_of(self, input_ids: Iterable[UniqueId], name: str = "") -> set[UniqueId]:
        """Output instances the given inputs depend on."""
        return intersect(
            self.related(input_ids, {self.DEPENDS_ON_ID}, name, TraversalDirection.FORWARD),
            self.outputs(name),
        )

    def implementations_of(
        self, algorithm_ids: Iterable[UniqueId], name: str = ""
    ) -> set[UniqueId]:
        """Implementation classes realizing the given algorithms."""
        return intersect(
            self.direct_subclasses_of(algorithm_ids, name),
            self.implementation_classes(name),
        )

    def _roots(self) -> dict[str, UniqueId]:
        roots = super()._roots()
        roots.update(
            {
                "ALGORITHM": self.ALGORITHM_ID,
                "INPUT": self.INPUT_ID,
                "OUTPUT": self.OUTPUT_ID,
                "IMPLEMENTATION": self.IMPLEMENTATION_ID,
                "DATATYPE": self.DATATYPE_ID,
            }
        )
        return roots
