"""
ontogen-vhdl - generate VHDL entities from a software ontology.

Loads a YAML model, generates one VHDL entity per selected algorithm,
stores the generated text as implementations in the model and writes the
model to the output file.

Exit codes:
    0  success
    1  bad or missing arguments, unreadable input model or config
    2  no algorithm found
    3  output file cannot be written
"""

from __future__ import annotations

import argparse
from enum import IntEnum
import logging
import sys
from typing import NoReturn

from pydantic import ValidationError as PydanticValidationError

from ontogen.codegen.vhdl_entity import VhdlEntityGenerator
from ontogen.core.config import OntogenConfig
from ontogen.core.exceptions import ConfigurationError, PersistenceError, SelectionError
from ontogen.core.serialization import load_graph, save_graph
from ontogen.ontology.software_graph import SoftwareGraph

logger = logging.getLogger(__name__)


class ExitCode(IntEnum):
    """Process exit codes."""

    OK = 0
    USAGE = 1
    NO_ALGORITHM = 2
    OUTPUT_FAILED = 3


EPILOG = """\
Example:
  ontogen-vhdl --label=MyAlgorithm initial_model.yml new_model.yml
"""


class _ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser exiting with ExitCode.USAGE on bad arguments."""

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stdout)
        self.exit(ExitCode.USAGE, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = _ArgumentParser(
        prog="ontogen-vhdl",
        description="Generate VHDL entities for algorithms of a software ontology.",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("input", metavar="<yaml-file-in>", help="Model to read")
    parser.add_argument("output", metavar="<yaml-file-out>", help="Model to write")
    parser.add_argument(
        "--uid", default="", help="Specify the algorithm to be used to generate code by UID"
    )
    parser.add_argument(
        "--label",
        default="",
        help="Specify the algorithm(s) to be used to generate code by label",
    )
    parser.add_argument(
        "--type-uid",
        dest="type_uid",
        default=None,
        help="Specify the datatype class which hosts compatible types",
    )
    parser.add_argument(
        "--recursive",
        action="store_true",
        default=None,
        help="Also generate entities for all algorithms used as parts",
    )
    parser.add_argument("--config", default=None, help="YAML configuration file")
    return parser


def load_config(args: argparse.Namespace) -> OntogenConfig:
    """
    Build the configuration from file/environment and command line overrides.

    Raises:
        ConfigurationError: If the configuration is invalid
    """
    try:
        config = OntogenConfig.from_yaml(args.config) if args.config else OntogenConfig()
    except PydanticValidationError as e:
        msg = f"Invalid configuration: {e}"
        raise ConfigurationError(msg) from e

    overrides = {}
    if args.type_uid:
        overrides["datatype_uid"] = args.type_uid
    if args.recursive is not None:
        overrides["recursive"] = args.recursive
    if overrides:
        config = config.model_copy(update=overrides)
    return config


def main(argv: list[str] | None = None) -> int:
    """
    Run the generator.

    Args:
        argv: Command line arguments (default: sys.argv[1:])

    Returns:
        Process exit code
    """
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as e:
        return int(e.code or 0)

    try:
        config = load_config(args)
    except ConfigurationError as e:
        print(f"Configuration error: {e}")
        return ExitCode.USAGE

    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        graph = SoftwareGraph(load_graph(args.input))
    except PersistenceError as e:
        print(f"Cannot load model: {e}")
        return ExitCode.USAGE
    if logger.isEnabledFor(logging.INFO):
        logger.info("Loaded %s from %s", graph.stats(), args.input)

    generator = VhdlEntityGenerator(graph, config)
    try:
        report = generator.generate(uid=args.uid, label=args.label)
    except SelectionError as e:
        print(e)
        return ExitCode.NO_ALGORITHM

    for name, message in report.failed.items():
        print(f"FAILED {name}: {message}")

    try:
        save_graph(graph, args.output)
    except PersistenceError as e:
        print(f"FAILED: {e}")
        return ExitCode.OUTPUT_FAILED

    return ExitCode.OK


if __name__ == "__main__":
    sys.exit(main())
