"""Tests for composition traversal."""

import pytest

from conftest import only

from ontogen.codegen import CompositionWalker
from ontogen.core import CompositionCycleError


def add_part(g, container: str, part_class: str) -> str:
    part = only(g.instantiate_from({part_class}))
    assert g.part_of_network({part}, {container})
    return part


def test_parts_and_classes(disparity):
    g, ids = disparity
    walker = CompositionWalker(g)
    assert walker.parts_of("Disparity") == {ids["rectify"], ids["match"]}
    assert walker.part_classes(ids["rectify"]) == {"Rectify"}
    assert walker.sub_algorithms("Disparity") == {"Rectify", "Match"}
    assert walker.sub_algorithms("Match") == set()


def test_hierarchy_lists_parts_first(disparity):
    g, _ = disparity
    walker = CompositionWalker(g)
    assert walker.hierarchy("Disparity") == ["Match", "Rectify", "Disparity"]
    assert walker.hierarchy("Match") == ["Match"]
    assert walker.depth("Disparity") == 1
    assert walker.depth("Match") == 0


def test_shared_sub_algorithm_is_listed_once(swgraph):
    for name in ("Top", "Left", "Right", "Leaf"):
        swgraph.create_algorithm(name, name)
    add_part(swgraph, "Top", "Left")
    add_part(swgraph, "Top", "Right")
    add_part(swgraph, "Left", "Leaf")
    add_part(swgraph, "Right", "Leaf")

    walker = CompositionWalker(swgraph)
    assert walker.hierarchy("Top") == ["Leaf", "Left", "Right", "Top"]
    assert walker.depth("Top") == 2


def test_self_cycle(swgraph):
    swgraph.create_algorithm("Loop", "Loop")
    add_part(swgraph, "Loop", "Loop")

    with pytest.raises(CompositionCycleError) as exc_info:
        CompositionWalker(swgraph).hierarchy("Loop")
    assert exc_info.value.cycle == ["Loop", "Loop"]


def test_indirect_cycle(swgraph):
    swgraph.create_algorithm("Ping", "Ping")
    swgraph.create_algorithm("Pong", "Pong")
    add_part(swgraph, "Ping", "Pong")
    add_part(swgraph, "Pong", "Ping")

    walker = CompositionWalker(swgraph)
    with pytest.raises(CompositionCycleError) as exc_info:
        walker.hierarchy("Ping")
    assert exc_info.value.cycle == ["Ping", "Pong", "Ping"]
    with pytest.raises(CompositionCycleError):
        walker.depth("Pong")


def test_deep_composition_does_not_recurse(swgraph):
    levels = [f"Level{i:04d}" for i in range(1100)]
    for name in levels:
        swgraph.create_algorithm(name, name)
    for container, part_class in zip(levels, levels[1:]):
        add_part(swgraph, container, part_class)

    walker = CompositionWalker(swgraph)
    order = walker.hierarchy(levels[0])
    assert order == list(reversed(levels))
    assert walker.depth(levels[0]) == len(levels) - 1
