"""
ontogen - ontology driven VHDL entity generation.

Main Features:
- Typed concept graph (classes, instances, relation kinds)
- Component/network ontology with type-checked assertions
- Software ontology (algorithms, inputs, outputs, implementations)
- VHDL entity/architecture/package generation for atomic and composite
  algorithms, stored back into the model as implementations

Quick Start:
    >>> from ontogen import SoftwareGraph, VhdlEntityGenerator
    >>> graph = SoftwareGraph()
    >>> graph.create_algorithm("Blur", "Blur")
    {'Blur'}
    >>> report = VhdlEntityGenerator(graph).generate(label="Blur")

Architecture:
    Hypergraph → ConceptGraph → ComponentNetwork → SoftwareGraph → VhdlEntityGenerator
"""

__version__ = "0.1.0"

from ontogen.codegen import GeneratedEntity, GenerationReport, VhdlEntityGenerator
from ontogen.core import (
    CompositionCycleError,
    ConceptGraph,
    ConfigurationError,
    GenerationError,
    Hypergraph,
    OntogenConfig,
    OntogenError,
    PersistenceError,
    SelectionError,
    TraversalDirection,
    ValidationError,
)
from ontogen.ontology import ComponentNetwork, SoftwareGraph

__all__ = [
    "ComponentNetwork",
    "CompositionCycleError",
    "ConceptGraph",
    "ConfigurationError",
    "GeneratedEntity",
    "GenerationError",
    "GenerationReport",
    "Hypergraph",
    "OntogenConfig",
    "OntogenError",
    "PersistenceError",
    "SelectionError",
    "SoftwareGraph",
    "TraversalDirection",
    "ValidationError",
    "VhdlEntityGenerator",
    "__version__",
]
