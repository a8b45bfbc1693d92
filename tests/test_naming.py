"""Tests for VHDL identifier generation."""

import pytest

from ontogen.codegen.naming import (
    gen_input_identifier,
    gen_output_identifier,
    gen_part_identifier,
    gen_signal_identifier,
    gen_type_from_label,
    sanitize,
)


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("Disparity", "Disparity"),
        ("Software::Graph::Rectify1", "Software_Graph_Rectify1"),
        ("rect left", "rect_left"),
        ("__x__", "x"),
        ("a--b", "a_b"),
        ("8bit", "x8bit"),
        ("::", "x"),
    ],
)
def test_sanitize(name, expected):
    assert sanitize(name) == expected


def test_port_and_type_names():
    assert gen_type_from_label("Image") == "Image_type"
    assert gen_type_from_label("Image", "_t") == "Image_t"
    assert gen_input_identifier("left") == "input_left"
    assert gen_output_identifier("rect left") == "output_rect_left"


def test_part_signals():
    assert gen_part_identifier("Rectify1") == "component_Rectify1"
    port = gen_input_identifier("left")
    assert gen_signal_identifier("Rectify1", port) == "component_Rectify1_input_left"
