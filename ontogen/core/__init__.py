"""Core module for ontogen - graph substrate, configuration and persistence."""

from ontogen.core.concept_graph import ConceptGraph
from ontogen.core.config import OntogenConfig
from ontogen.core.exceptions import (
    CompositionCycleError,
    ConfigurationError,
    GenerationError,
    OntogenError,
    PersistenceError,
    SelectionError,
    ValidationError,
)
from ontogen.core.hypergraph import (
    Hyperedge,
    HyperedgeKind,
    Hypergraph,
    TraversalDirection,
    intersect,
    unite,
)
from ontogen.core.serialization import load_graph, save_graph

__all__ = [
    "CompositionCycleError",
    "ConceptGraph",
    "ConfigurationError",
    "GenerationError",
    "Hyperedge",
    "HyperedgeKind",
    "Hypergraph",
    "OntogenConfig",
    "OntogenError",
    "PersistenceError",
    "SelectionError",
    "TraversalDirection",
    "ValidationError",
    "intersect",
    "load_graph",
    "save_graph",
    "unite",
]
