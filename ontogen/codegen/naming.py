"""Identifier generation for VHDL entities."""

import re

_INVALID = re.compile(r"[^A-Za-z0-9_]+")


def sanitize(name: str) -> str:
    """
    Turn an arbitrary uid or label into a VHDL basic identifier.

    Runs of invalid characters become a single underscore, leading and
    trailing underscores are stripped and a leading digit gets an ``x``
    prefix.

    Example:
        >>> sanitize("Software::Graph::Rectify1")
        'Software_Graph_Rectify1'
    """
    result = _INVALID.sub("_", name).strip("_")
    result = re.sub(r"_+", "_", result)
    if not result:
        return "x"
    if result[0].isdigit():
        return "x" + result
    return result


def gen_type_from_label(label: str, suffix: str = "_type") -> str:
    """VHDL type name of an interface class label, e.g. ``Image`` -> ``Image_type``."""
    return sanitize(label) + suffix


def gen_part_identifier(part_uid: str) -> str:
    """Instance name of a part inside a composite architecture."""
    return "component_" + sanitize(part_uid)


def gen_input_identifier(label: str) -> str:
    """Port name of an input interface."""
    return "input_" + sanitize(label)


def gen_output_identifier(label: str) -> str:
    """Port name of an output interface."""
    return "output_" + sanitize(label)


def gen_signal_identifier(part_uid: str, port_identifier: str) -> str:
    """Internal signal carrying a port of a part."""
    return f"{gen_part_identifier(part_uid)}_{port_identifier}"
