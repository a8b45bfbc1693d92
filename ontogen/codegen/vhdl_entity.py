"""
Algorithm to VHDL entity generator.

For every selected algorithm class one self-contained VHDL text is rendered:

    1. interface resolution  (inputs/outputs and their interface classes)
    2. port section          (one port per interface class, plus clk/rst)
    3. architecture          (clocked skeleton for atomic algorithms,
                              signals + wiring + instantiation for composites)
    4. type package          (one subtype per datatype realizing an
                              interface class)
    5. persistence           (the text becomes the label of a new
                              implementation class which IS-A the algorithm)

The package is placed in front of the entity in the output text so the
file analyses top to bottom.

Known limitation: an output feeding several inputs (fan-out) gets one
assignment per consumer, there is no shared net.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import TYPE_CHECKING

from ontogen.codegen.composition import CompositionWalker
from ontogen.codegen.models import GeneratedEntity, GenerationReport
from ontogen.codegen.naming import (
    gen_input_identifier,
    gen_output_identifier,
    gen_part_identifier,
    gen_signal_identifier,
    gen_type_from_label,
    sanitize,
)
from ontogen.core.config import OntogenConfig
from ontogen.core.exceptions import CompositionCycleError, GenerationError, SelectionError
from ontogen.core.hypergraph import TraversalDirection, UniqueId, intersect

if TYPE_CHECKING:
    from ontogen.ontology.software_graph import SoftwareGraph

logger = logging.getLogger(__name__)

HEADER = "-- Algorithm to VHDL entity generator --"
LIBRARY_CLAUSE = ["library IEEE;", "use IEEE.STD_LOGIC_1164.ALL;"]
ARCHITECTURE_NAME = "BEHAVIOURAL"


@dataclass
class EntityContext:
    """Query results gathered for one algorithm before rendering."""

    algorithm_id: UniqueId
    name: str
    input_ids: list[UniqueId]
    output_ids: list[UniqueId]
    interface_class_ids: set[UniqueId] = field(default_factory=set)
    parts: list[UniqueId] = field(default_factory=list)


class VhdlEntityGenerator:
    """
    Generates VHDL entities from algorithm classes of a software ontology.

    Usage:
        generator = VhdlEntityGenerator(graph, OntogenConfig(datatype_uid="VHDL::Types"))
        report = generator.generate(label="Disparity")
        print(report.generated[0].text)
    """

    def __init__(self, graph: SoftwareGraph, config: OntogenConfig | None = None) -> None:
        """
        Initialize VhdlEntityGenerator.

        Args:
            graph: Populated software ontology (mutated: results are stored in it)
            config: Generator configuration (defaults apply if None)
        """
        self.graph = graph
        self.config = config or OntogenConfig()
        self.walker = CompositionWalker(graph)

    # Selection

    def candidate_algorithms(self, label: str = "") -> set[UniqueId]:
        """
        Algorithm classes code can be generated for.

        The ALGORITHM root and implementation classes (which realize
        algorithms by being subclasses of them) are excluded.
        """
        return (
            self.graph.algorithm_classes(label)
            - {self.graph.ALGORITHM_ID}
            - self.graph.implementation_classes()
        )

    def select_algorithms(self, uid: str = "", label: str = "") -> set[UniqueId]:
        """
        Select the target algorithm classes.

        Args:
            uid: Restrict to this algorithm uid (empty = no restriction)
            label: Restrict to algorithms with this label (empty = all)

        Raises:
            SelectionError: If no algorithm matches
        """
        algorithms = self.candidate_algorithms(label)
        if uid:
            algorithms = intersect(algorithms, {uid})
        if not algorithms:
            msg = "No algorithm found."
            raise SelectionError(msg, uid=uid or None, label=label or None)
        return algorithms

    def relevant_datatypes(self) -> set[UniqueId]:
        """Datatype classes considered when resolving interface types."""
        if self.config.datatype_uid:
            return self.graph.datatype_classes("", {self.config.datatype_uid})
        return self.graph.datatype_classes()

    # Generation

    def generate(self, uid: str = "", label: str = "") -> GenerationReport:
        """
        Generate entities for all selected algorithms.

        A failing algorithm is recorded in the report and does not stop the
        others.

        Raises:
            SelectionError: If no algorithm matches ``uid``/``label``
        """
        targets = self.select_algorithms(uid, label)
        report = GenerationReport()
        relevant_type_uids = self.relevant_datatypes()

        for algorithm_id in self._generation_order(targets, report):
            try:
                report.generated.append(self.generate_entity(algorithm_id, relevant_type_uids))
            except GenerationError as e:
                logger.error("Generation failed for %s: %s", algorithm_id, e)
                report.failed[algorithm_id] = str(e)

        logger.info(
            "Generated %d entities, %d failed", len(report.generated), len(report.failed)
        )
        return report

    def _generation_order(
        self, targets: set[UniqueId], report: GenerationReport
    ) -> list[UniqueId]:
        excluded = {self.graph.ALGORITHM_ID} | self.graph.implementation_classes()
        order: dict[UniqueId, None] = {}
        for target in sorted(targets):
            try:
                hierarchy = self.walker.hierarchy(target)
            except CompositionCycleError as e:
                logger.error("Skipping %s: %s", target, e)
                report.failed[target] = str(e)
                continue
            selected = hierarchy if self.config.recursive else [target]
            for algorithm_id in selected:
                if algorithm_id not in excluded:
                    order.setdefault(algorithm_id, None)
        return list(order)

    def generate_entity(
        self, algorithm_id: UniqueId, relevant_type_uids: set[UniqueId] | None = None
    ) -> GeneratedEntity:
        """
        Render one algorithm and store the result as implementation.

        Raises:
            GenerationError: If the algorithm is unknown or the result
                cannot be stored
        """
        if algorithm_id not in self.graph:
            raise GenerationError(f"Unknown algorithm: {algorithm_id}", algorithm_uid=algorithm_id)
        if relevant_type_uids is None:
            relevant_type_uids = self.relevant_datatypes()

        context = self.build_context(algorithm_id)
        text = self.render_context(context, relevant_type_uids)
        implementation_uid = self.persist(algorithm_id, context.name, text)

        logger.info(
            "Generated entity %s (%s, %d parts)",
            context.name,
            "composite" if context.parts else "atomic",
            len(context.parts),
        )
        return GeneratedEntity(
            algorithm_uid=algorithm_id,
            label=context.name,
            implementation_uid=implementation_uid,
            text=text,
            parts=context.parts,
        )

    def render(
        self, algorithm_id: UniqueId, relevant_type_uids: set[UniqueId] | None = None
    ) -> str:
        """Render the VHDL text of an algorithm without storing it."""
        if relevant_type_uids is None:
            relevant_type_uids = self.relevant_datatypes()
        return self.render_context(self.build_context(algorithm_id), relevant_type_uids)

    def persist(self, algorithm_id: UniqueId, name: str, text: str) -> UniqueId:
        """
        Store generated text as implementation class realizing the algorithm.

        Regenerating reuses the implementation class and replaces its text.
        """
        self.graph.create_implementation(
            self.config.implementation_uid, self.config.implementation_label
        )
        implementation_uid = f"{self.config.implementation_uid}::{name}"
        created = self.graph.create_implementation(
            implementation_uid, text, {self.config.implementation_uid}
        )
        if not created:
            msg = f"Cannot create implementation {implementation_uid}"
            raise GenerationError(msg, algorithm_uid=algorithm_id)
        self.graph.set_label(implementation_uid, text)
        if not self.graph.realizes({implementation_uid}, {algorithm_id}):
            msg = f"{implementation_uid} cannot realize {algorithm_id}"
            raise GenerationError(msg, algorithm_uid=algorithm_id)
        return implementation_uid

    # Queries

    def interface_classes_of(self, interface_id: UniqueId) -> list[UniqueId]:
        """
        Classes of an interface instance that determine its VHDL type.

        Every class is returned; an instance of several classes yields one
        port (and one signal) per class.
        """
        classes = self.graph.instances_of({interface_id}, direction=TraversalDirection.FORWARD)
        return sorted(classes)

    def build_context(self, algorithm_id: UniqueId) -> EntityContext:
        """Run all ontology queries needed to render an algorithm."""
        graph = self.graph
        interface_ids = graph.interfaces_of({algorithm_id})
        context = EntityContext(
            algorithm_id=algorithm_id,
            name=graph.label_of(algorithm_id),
            input_ids=sorted(intersect(graph.inputs(), interface_ids)),
            output_ids=sorted(intersect(graph.outputs(), interface_ids)),
        )
        for interface_id in context.input_ids + context.output_ids:
            context.interface_class_ids.update(self.interface_classes_of(interface_id))
        context.parts = sorted(self.walker.parts_of(algorithm_id))
        return context

    # Rendering

    def _type_of(self, class_id: UniqueId) -> str:
        return gen_type_from_label(self.graph.label_of(class_id), self.config.type_suffix)

    def _input_name(self, interface_id: UniqueId) -> str:
        return gen_input_identifier(self.graph.label_of(interface_id))

    def _output_name(self, interface_id: UniqueId) -> str:
        return gen_output_identifier(self.graph.label_of(interface_id))

    def render_context(self, context: EntityContext, relevant_type_uids: set[UniqueId]) -> str:
        """Render the full text from gathered query results."""
        name = sanitize(context.name)
        lines = [HEADER, *LIBRARY_CLAUSE, ""]
        lines += self._render_package(context, name, relevant_type_uids)
        lines += ["", *LIBRARY_CLAUSE, "", f"use work.{name}_types.all;", ""]
        lines += self._render_ports(context, name)
        if context.parts:
            lines += self._render_composite_architecture(context, name)
        else:
            lines += self._render_atomic_architecture(name)
        return "\n".join(lines) + "\n"

    def _render_ports(self, context: EntityContext, name: str) -> list[str]:
        lines = [f"entity {name} is", "port(", "", "\t-- Inputs --"]
        for input_id in context.input_ids:
            for class_id in self.interface_classes_of(input_id):
                lines.append(f"\t{self._input_name(input_id)} : in {self._type_of(class_id)};")
        lines += ["", "\t-- Outputs --"]
        for output_id in context.output_ids:
            for class_id in self.interface_classes_of(output_id):
                lines.append(f"\t{self._output_name(output_id)} : out {self._type_of(class_id)};")
        lines += [
            "",
            "\t-- Standard Signals --",
            "\tclk : in std_logic;",
            "\trst : in std_logic",
            ");",
            f"end {name};",
        ]
        return lines

    def _render_atomic_architecture(self, name: str) -> list[str]:
        return [
            "",
            "-- Architecture def --",
            f"architecture {ARCHITECTURE_NAME} of {name} is",
            "-- signals here --",
            "",
            "begin",
            "-- processes here --",
            "compute : process(clk)",
            "\t-- variables here --",
            "\tbegin",
            "\t\tif rising_edge(clk) then",
            "\t\t\tif (rst='1') then",
            "\t\t\t\t-- init here --",
            "\t\t\telse",
            "\t\t\t\t-- computation here --",
            "\t\t\tend if;",
            "\t\tend if;",
            "end process compute;",
            f"end {ARCHITECTURE_NAME};",
        ]

    def _render_composite_architecture(self, context: EntityContext, name: str) -> list[str]:
        graph = self.graph
        parts = set(context.parts)
        all_inputs = graph.inputs()
        all_outputs = graph.outputs()
        part_inputs: dict[UniqueId, list[UniqueId]] = {}
        part_outputs: dict[UniqueId, list[UniqueId]] = {}
        for part_id in context.parts:
            part_interfaces = graph.interfaces_of({part_id})
            part_inputs[part_id] = sorted(intersect(all_inputs, part_interfaces))
            part_outputs[part_id] = sorted(intersect(all_outputs, part_interfaces))

        lines = [
            "",
            "-- Architecture def --",
            f"architecture {ARCHITECTURE_NAME} of {name} is",
            "-- signals of parts --",
        ]
        for part_id in context.parts:
            for input_id in part_inputs[part_id]:
                signal = gen_signal_identifier(part_id, self._input_name(input_id))
                for class_id in self.interface_classes_of(input_id):
                    lines.append(f"signal {signal} : {self._type_of(class_id)};")
            for output_id in part_outputs[part_id]:
                signal = gen_signal_identifier(part_id, self._output_name(output_id))
                for class_id in self.interface_classes_of(output_id):
                    lines.append(f"signal {signal} : {self._type_of(class_id)};")

        lines += ["", "begin", "-- assignment of toplvl inputs to internal inputs --"]
        for input_id in context.input_ids:
            port = self._input_name(input_id)
            for part_id in self._owners(input_id, parts):
                lines.append(f"{gen_signal_identifier(part_id, port)} <= {port};")

        lines.append("-- assignment of internal outputs to toplvl outputs --")
        for output_id in context.output_ids:
            port = self._output_name(output_id)
            for part_id in self._owners(output_id, parts):
                lines.append(f"{port} <= {gen_signal_identifier(part_id, port)};")

        # NOTE: fan-out is not merged, every consumer gets its own assignment
        lines.append("-- assignment of internal outputs to internal inputs --")
        for part_id in context.parts:
            for input_id in part_inputs[part_id]:
                consumer = gen_signal_identifier(part_id, self._input_name(input_id))
                for output_id in sorted(graph.dependencies_of({input_id})):
                    for producer_id in self._owners(output_id, parts):
                        producer = gen_signal_identifier(producer_id, self._output_name(output_id))
                        lines.append(f"{consumer} <= {producer};")

        lines.append("-- part entity instantiation & wiring --")
        for part_id in context.parts:
            for class_id in sorted(self.walker.part_classes(part_id)):
                lines += self._render_instantiation(
                    part_id, class_id, part_inputs[part_id], part_outputs[part_id]
                )

        lines += ["-- processes here --", f"end {ARCHITECTURE_NAME};"]
        return lines

    def _owners(self, interface_id: UniqueId, parts: set[UniqueId]) -> list[UniqueId]:
        """Parts owning an interface instance."""
        owners = self.graph.interfaces_of({interface_id}, direction=TraversalDirection.INVERSE)
        return sorted(intersect(parts, owners))

    def _render_instantiation(
        self,
        part_id: UniqueId,
        class_id: UniqueId,
        input_ids: list[UniqueId],
        output_ids: list[UniqueId],
    ) -> list[str]:
        lines = [
            f"{gen_part_identifier(part_id)}: entity work.{sanitize(self.graph.label_of(class_id))}",
            "port map (",
            "\t-- inputs --",
        ]
        for input_id in input_ids:
            port = self._input_name(input_id)
            lines.append(f"\t{port} => {gen_signal_identifier(part_id, port)},")
        lines.append("\t-- outputs --")
        for output_id in output_ids:
            port = self._output_name(output_id)
            lines.append(f"\t{port} => {gen_signal_identifier(part_id, port)},")
        lines += ["\tclk => clk,", "\trst => rst", ");"]
        return lines

    def _render_package(
        self, context: EntityContext, name: str, relevant_type_uids: set[UniqueId]
    ) -> list[str]:
        lines = ["-- Package def --", f"package {name}_types is"]
        for class_id in sorted(context.interface_class_ids):
            type_ids = intersect(
                relevant_type_uids, self.graph.direct_subclasses_of({class_id})
            )
            if not type_ids:
                logger.warning(
                    "No datatype found for interface class %s of %s", class_id, context.name
                )
            elif len(type_ids) > 1:
                logger.warning(
                    "%d datatypes found for interface class %s of %s",
                    len(type_ids),
                    class_id,
                    context.name,
                )
            for type_id in sorted(type_ids):
                lines.append(
                    f"\tsubtype {self._type_of(class_id)} is {self.graph.label_of(type_id)};"
                )
        lines.append(f"end {name}_types;")
        return lines
