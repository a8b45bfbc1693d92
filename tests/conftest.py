"""Shared fixtures for ontogen tests."""

import pytest

from ontogen.ontology import ComponentNetwork, SoftwareGraph


def only(uids: set[str]) -> str:
    """The single uid of a singleton set."""
    assert len(uids) == 1, uids
    return next(iter(uids))


@pytest.fixture
def network() -> ComponentNetwork:
    """Empty component/network ontology."""
    return ComponentNetwork()


@pytest.fixture
def swgraph() -> SoftwareGraph:
    """Empty software ontology."""
    return SoftwareGraph()


@pytest.fixture
def image_graph(swgraph: SoftwareGraph) -> SoftwareGraph:
    """
    Software ontology with image input/output classes.

    Both are realized by one VHDL datatype:

        ImageIn  -- is-a --> INPUT       VHDL::Image8 -- is-a --> VHDL::Types
        ImageOut -- is-a --> OUTPUT                   -- is-a --> ImageIn, ImageOut
    """
    swgraph.create_input("ImageIn", "ImageIn")
    swgraph.create_output("ImageOut", "ImageOut")
    swgraph.create_datatype("VHDL::Types", "VHDL")
    swgraph.create_datatype(
        "VHDL::Image8", "std_logic_vector(7 downto 0)", {"VHDL::Types", "ImageIn", "ImageOut"}
    )
    return swgraph


def define_algorithm(
    g: SoftwareGraph, uid: str, inputs: tuple[str, ...], outputs: tuple[str, ...]
) -> None:
    """Create an algorithm class needing/providing fresh image interfaces."""
    g.create_algorithm(uid, uid)
    for label in inputs:
        g.needs_interface({uid}, g.instantiate_from({"ImageIn"}, label))
    for label in outputs:
        g.provides_interface({uid}, g.instantiate_from({"ImageOut"}, label))


@pytest.fixture
def disparity(image_graph: SoftwareGraph) -> tuple[SoftwareGraph, dict[str, str]]:
    """
    Composite Disparity algorithm built from deep copies of Rectify and Match.

        left, right --> Rectify1 --> rect_left, rect_right
                                        |          |
                        match_left, match_right --> Match1 --> disparity

    ``left``, ``right`` and ``disparity`` of the parts are exported as the
    ports of Disparity. ``ids`` maps part interface labels to their uids.
    """
    g = image_graph
    define_algorithm(g, "Rectify", ("left", "right"), ("rect_left", "rect_right"))
    define_algorithm(g, "Match", ("match_left", "match_right"), ("disparity",))
    g.create_algorithm("Disparity", "Disparity")

    ids: dict[str, str] = {
        "rectify": only(g.instantiate_component({"Rectify"})),
        "match": only(g.instantiate_component({"Match"})),
    }
    g.part_of_network({ids["rectify"], ids["match"]}, {"Disparity"})
    for part, labels in (
        (ids["rectify"], ("left", "right", "rect_left", "rect_right")),
        (ids["match"], ("match_left", "match_right", "disparity")),
    ):
        for label in labels:
            ids[label] = only(g.interfaces_of({part}, label))

    g.depends_on({ids["match_left"]}, {ids["rect_left"]})
    g.depends_on({ids["match_right"]}, {ids["rect_right"]})
    g.export_interfaces({"Disparity"}, {ids["left"], ids["right"], ids["disparity"]})
    return g, ids
