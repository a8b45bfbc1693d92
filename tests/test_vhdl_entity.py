"""Tests for the VHDL entity generator."""

import logging
import re

import pytest

from conftest import only

from ontogen.codegen import VhdlEntityGenerator
from ontogen.core import GenerationError, OntogenConfig, SelectionError

IMPLEMENTATION = "Software::Graph::Implementation::VHDL"
IMAGE8 = "std_logic_vector(7 downto 0)"


def port_lines(text: str) -> list[str]:
    return [line for line in text.splitlines() if " : in " in line or " : out " in line]


def bound_ports(text: str, part_id: str) -> list[str]:
    """Port names a composite binds in the port map of one part."""
    block = text.split(f"component_{part_id}: entity work.", 1)[1].split(");", 1)[0]
    return re.findall(r"^\t(\w+) => component_", block, re.MULTILINE)


@pytest.fixture
def blur(image_graph):
    g = image_graph
    g.create_algorithm("Blur", "Blur")
    g.needs_interface({"Blur"}, g.instantiate_from({"ImageIn"}, "source"))
    g.provides_interface({"Blur"}, g.instantiate_from({"ImageOut"}, "result"))
    return g


class TestAtomicEntity:
    def test_ports(self, blur):
        text = VhdlEntityGenerator(blur).render("Blur")
        assert port_lines(text) == [
            "\tinput_source : in ImageIn_type;",
            "\toutput_result : out ImageOut_type;",
            "\tclk : in std_logic;",
            "\trst : in std_logic",
        ]

    def test_layout(self, blur):
        text = VhdlEntityGenerator(blur).render("Blur")
        assert text.startswith("-- Algorithm to VHDL entity generator --\nlibrary IEEE;\n")
        assert text.count("use IEEE.STD_LOGIC_1164.ALL;") == 2
        assert f"\tsubtype ImageIn_type is {IMAGE8};" in text
        assert f"\tsubtype ImageOut_type is {IMAGE8};" in text
        assert "use work.Blur_types.all;" in text
        assert text.index("package Blur_types is") < text.index("entity Blur is")
        assert "end Blur_types;" in text
        assert "end Blur;" in text
        assert "architecture BEHAVIOURAL of Blur is" in text
        assert "compute : process(clk)" in text
        assert text.rstrip().endswith("end BEHAVIOURAL;")
        assert "signal " not in text

    def test_generate_stores_implementation(self, blur):
        report = VhdlEntityGenerator(blur).generate(label="Blur")

        assert report.ok
        assert [e.algorithm_uid for e in report.generated] == ["Blur"]
        generated = report.entity("Blur")
        assert generated.implementation_uid == f"{IMPLEMENTATION}::Blur"
        assert not generated.is_composite
        assert blur.implementations_of({"Blur"}) == {generated.implementation_uid}
        assert blur.label_of(generated.implementation_uid) == generated.text
        assert blur.label_of(IMPLEMENTATION) == "VHDLImplementation"
        assert IMPLEMENTATION in blur.implementation_classes()

    def test_render_does_not_store(self, blur):
        VhdlEntityGenerator(blur).render("Blur")
        assert blur.implementations_of({"Blur"}) == set()

    def test_regeneration_replaces_text(self, blur):
        generator = VhdlEntityGenerator(blur)
        first = generator.generate(label="Blur").entity("Blur")
        blur.needs_interface({"Blur"}, blur.instantiate_from({"ImageIn"}, "mask"))
        second = generator.generate(label="Blur").entity("Blur")

        assert second.implementation_uid == first.implementation_uid
        assert blur.implementations_of({"Blur"}) == {first.implementation_uid}
        assert "input_mask" not in first.text
        assert "\tinput_mask : in ImageIn_type;" in blur.label_of(second.implementation_uid)

    def test_every_class_of_an_interface_gets_a_port(self, blur):
        blur.create_interface("Mask", "Mask")
        blur.needs_interface(
            {"Blur"}, blur.instantiate_from({blur.INPUT_ID, "Mask"}, "weights")
        )
        lines = port_lines(VhdlEntityGenerator(blur).render("Blur"))
        assert [line for line in lines if "input_weights" in line] == [
            "\tinput_weights : in Mask_type;",
            "\tinput_weights : in INPUT_type;",
        ]
        assert len(lines) == 4 + 2

    def test_root_class_as_port_type(self, swgraph):
        swgraph.create_algorithm("Plain", "Plain")
        swgraph.needs_interface({"Plain"}, swgraph.instantiate_from({swgraph.INPUT_ID}, "x"))
        text = VhdlEntityGenerator(swgraph).render("Plain")
        assert "\tinput_x : in INPUT_type;" in text


class TestDatatypes:
    @pytest.fixture
    def two_languages(self, blur):
        blur.create_datatype("C::Types", "C")
        blur.create_datatype("C::Image", "uint8_t*", {"C::Types", "ImageIn", "ImageOut"})
        return blur

    def test_restricted_to_datatype_class(self, two_languages):
        config = OntogenConfig(datatype_uid="VHDL::Types")
        generator = VhdlEntityGenerator(two_languages, config)
        assert generator.relevant_datatypes() == {"VHDL::Types", "VHDL::Image8"}
        text = generator.render("Blur")
        assert f"\tsubtype ImageIn_type is {IMAGE8};" in text
        assert "uint8_t*" not in text

    def test_ambiguous_datatypes_are_all_listed(self, two_languages, caplog):
        with caplog.at_level(logging.WARNING):
            text = VhdlEntityGenerator(two_languages).render("Blur")
        assert text.count("\tsubtype ImageIn_type is ") == 2
        assert "2 datatypes found" in caplog.text

    def test_missing_datatype_is_reported(self, swgraph, caplog):
        swgraph.create_algorithm("Plain", "Plain")
        swgraph.create_input("AudioIn", "AudioIn")
        swgraph.needs_interface({"Plain"}, swgraph.instantiate_from({"AudioIn"}, "x"))
        with caplog.at_level(logging.WARNING):
            text = VhdlEntityGenerator(swgraph).render("Plain")
        assert "subtype" not in text
        assert "No datatype found for interface class AudioIn" in caplog.text


class TestCompositeEntity:
    def test_signals_and_wiring(self, disparity):
        g, _ = disparity
        text = VhdlEntityGenerator(g).render("Disparity")
        lines = text.splitlines()

        assert port_lines(text) == [
            "\tinput_left : in ImageIn_type;",
            "\tinput_right : in ImageIn_type;",
            "\toutput_disparity : out ImageOut_type;",
            "\tclk : in std_logic;",
            "\trst : in std_logic",
        ]
        assert [line for line in lines if line.startswith("signal ")] == [
            "signal component_Match1_input_match_left : ImageIn_type;",
            "signal component_Match1_input_match_right : ImageIn_type;",
            "signal component_Match1_output_disparity : ImageOut_type;",
            "signal component_Rectify1_input_left : ImageIn_type;",
            "signal component_Rectify1_input_right : ImageIn_type;",
            "signal component_Rectify1_output_rect_left : ImageOut_type;",
            "signal component_Rectify1_output_rect_right : ImageOut_type;",
        ]
        assert [line for line in lines if " <= " in line] == [
            "component_Rectify1_input_left <= input_left;",
            "component_Rectify1_input_right <= input_right;",
            "output_disparity <= component_Match1_output_disparity;",
            "component_Match1_input_match_left <= component_Rectify1_output_rect_left;",
            "component_Match1_input_match_right <= component_Rectify1_output_rect_right;",
        ]

    def test_package(self, disparity):
        g, _ = disparity
        text = VhdlEntityGenerator(g).render("Disparity")
        assert [line for line in text.splitlines() if "subtype" in line] == [
            f"\tsubtype ImageIn_type is {IMAGE8};",
            f"\tsubtype ImageOut_type is {IMAGE8};",
        ]

    def test_part_instantiation(self, disparity):
        g, _ = disparity
        text = VhdlEntityGenerator(g).render("Disparity")

        assert text.count(": entity work.") == 2
        assert "component_Match1: entity work.Match\nport map (" in text
        assert "component_Rectify1: entity work.Rectify\nport map (" in text
        assert "\tinput_match_left => component_Match1_input_match_left," in text
        assert "\toutput_rect_right => component_Rectify1_output_rect_right," in text
        assert bound_ports(text, "Match1") == [
            "input_match_left",
            "input_match_right",
            "output_disparity",
        ]
        assert text.count("\tclk => clk,") == 2
        assert "compute : process(clk)" not in text
        assert text.index("-- part entity instantiation & wiring --") > text.index(
            "-- assignment of internal outputs to internal inputs --"
        )

    def test_fan_out_gets_one_assignment_per_consumer(self, disparity):
        g, ids = disparity
        g.depends_on({ids["match_right"]}, {ids["rect_left"]})
        text = VhdlEntityGenerator(g).render("Disparity")
        assert text.count(" <= component_Rectify1_output_rect_left;") == 2

    def test_generate_reports_parts(self, disparity):
        g, _ = disparity
        report = VhdlEntityGenerator(g).generate(label="Disparity")

        assert [e.algorithm_uid for e in report.generated] == ["Disparity"]
        entity = report.entity("Disparity")
        assert entity.is_composite
        assert entity.parts == ["Match1", "Rectify1"]
        assert g.implementations_of({"Disparity"}) == {f"{IMPLEMENTATION}::Disparity"}

    def test_recursive_generation(self, disparity):
        g, _ = disparity
        generator = VhdlEntityGenerator(g, OntogenConfig(recursive=True))
        report = generator.generate(label="Disparity")

        assert [e.algorithm_uid for e in report.generated] == ["Match", "Rectify", "Disparity"]
        for uid in ("Match", "Rectify", "Disparity"):
            assert g.implementations_of({uid}) == {f"{IMPLEMENTATION}::{uid}"}

    def test_sub_entities_declare_the_bound_ports(self, disparity):
        g, ids = disparity
        report = VhdlEntityGenerator(g, OntogenConfig(recursive=True)).generate(label="Disparity")
        parent = report.entity("Disparity").text

        for part_id, class_id in ((ids["match"], "Match"), (ids["rectify"], "Rectify")):
            child = report.entity(class_id).text
            assert not report.entity(class_id).is_composite
            declared = [line.split(" : ")[0].strip() for line in port_lines(child)]
            assert declared[:-2] == bound_ports(parent, part_id)
        assert "\tinput_match_left : in ImageIn_type;" in report.entity("Match").text
        assert "\toutput_rect_right : out ImageOut_type;" in report.entity("Rectify").text

    def test_cycle_is_reported_per_algorithm(self, disparity):
        g, _ = disparity
        g.create_algorithm("Loop", "Loop")
        g.part_of_network(g.instantiate_from({"Loop"}), {"Loop"})

        report = VhdlEntityGenerator(g).generate()

        assert not report.ok
        assert set(report.failed) == {"Loop"}
        assert "Composition cycle" in report.failed["Loop"]
        assert {e.algorithm_uid for e in report.generated} == {"Disparity", "Match", "Rectify"}
        assert g.implementations_of({"Loop"}) == set()


class TestSelection:
    def test_candidates(self, disparity):
        g, _ = disparity
        generator = VhdlEntityGenerator(g)
        assert generator.candidate_algorithms() == {"Disparity", "Rectify", "Match"}
        generator.generate(label="Match")
        assert generator.candidate_algorithms() == {"Disparity", "Rectify", "Match"}
        assert generator.candidate_algorithms("Match") == {"Match"}

    def test_select_by_uid_and_label(self, disparity):
        g, _ = disparity
        generator = VhdlEntityGenerator(g)
        assert generator.select_algorithms(uid="Match") == {"Match"}
        assert generator.select_algorithms(uid="Match", label="Match") == {"Match"}

    @pytest.mark.parametrize(
        ("uid", "label"),
        [
            ("", "Nope"),
            ("Match", "Disparity"),
            ("Software::Graph::Algorithm", ""),
            ("ImageIn1", ""),
            ("Match1", ""),
        ],
    )
    def test_no_algorithm(self, disparity, uid, label):
        g, _ = disparity
        with pytest.raises(SelectionError, match="No algorithm found."):
            VhdlEntityGenerator(g).generate(uid=uid, label=label)
        assert g.implementation_classes() == {g.IMPLEMENTATION_ID}

    def test_empty_graph(self, swgraph):
        with pytest.raises(SelectionError):
            VhdlEntityGenerator(swgraph).generate()

    def test_unknown_algorithm(self, swgraph):
        with pytest.raises(GenerationError) as exc_info:
            VhdlEntityGenerator(swgraph).generate_entity("Nope")
        assert exc_info.value.algorithm_uid == "Nope"
