"""
YAML persistence of hypergraphs.

Document layout:

    format: ontogen-hypergraph
    version: 1
    hyperedges:
      - uid: Component::Network::Component
        label: COMPONENT
        kind: concept
      - uid: ConceptGraph::IsA1
        label: IS-A
        kind: fact
        from: [Component::Network::Network]
        to: [Component::Network::Component]
        relation: ConceptGraph::IsA

Loading produces a plain :class:`Hypergraph`; wrap it in the ontology you
need, e.g. ``SoftwareGraph(load_graph(path))``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError as PydanticValidationError
import yaml

from ontogen.core.exceptions import PersistenceError, ValidationError
from ontogen.core.hypergraph import Hyperedge, HyperedgeKind, Hypergraph

logger = logging.getLogger(__name__)

FORMAT_NAME = "ontogen-hypergraph"
FORMAT_VERSION = 1


def _edge_to_dict(edge: Hyperedge) -> dict[str, Any]:
    data: dict[str, Any] = {"uid": edge.uid, "label": edge.label, "kind": edge.kind.value}
    if edge.from_ids:
        data["from"] = list(edge.from_ids)
    if edge.to_ids:
        data["to"] = list(edge.to_ids)
    if edge.relation:
        data["relation"] = edge.relation
    return data


def _edge_from_dict(data: dict[str, Any]) -> Hyperedge:
    return Hyperedge(
        uid=data["uid"],
        label=data.get("label") or "",
        kind=HyperedgeKind(data.get("kind", HyperedgeKind.CONCEPT.value)),
        from_ids=data.get("from") or [],
        to_ids=data.get("to") or [],
        relation=data.get("relation"),
    )


def to_yaml(graph: Hypergraph) -> str:
    """Serialize a graph to a YAML document."""
    document = {
        "format": FORMAT_NAME,
        "version": FORMAT_VERSION,
        "hyperedges": [_edge_to_dict(edge) for edge in graph],
    }
    return yaml.safe_dump(document, default_flow_style=False, sort_keys=False, allow_unicode=True)


def from_yaml(text: str) -> Hypergraph:
    """
    Parse a YAML document into a graph.

    Raises:
        ValidationError: If the document is not a valid graph document
    """
    try:
        document = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        msg = f"Invalid YAML: {e}"
        raise ValidationError(msg) from e

    if not isinstance(document, dict) or not isinstance(document.get("hyperedges", []), list):
        raise ValidationError("Graph document must be a mapping with a 'hyperedges' list")
    if document.get("format", FORMAT_NAME) != FORMAT_NAME:
        raise ValidationError(f"Unsupported graph format: {document.get('format')!r}")

    graph = Hypergraph()
    for index, data in enumerate(document.get("hyperedges") or []):
        if not isinstance(data, dict) or "uid" not in data:
            raise ValidationError(f"Hyperedge #{index} has no uid")
        try:
            graph.add(_edge_from_dict(data))
        except (PydanticValidationError, ValueError) as e:
            msg = f"Hyperedge #{index} ({data.get('uid')!r}) is invalid: {e}"
            raise ValidationError(msg) from e

    logger.debug("Parsed graph with %d hyperedges", len(graph))
    return graph


def load_graph(path: Path | str) -> Hypergraph:
    """
    Load a graph from a YAML file.

    Raises:
        PersistenceError: If the file cannot be read or parsed
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        msg = f"Cannot read graph from {path}: {e}"
        raise PersistenceError(msg, path=str(path)) from e
    try:
        return from_yaml(text)
    except ValidationError as e:
        msg = f"Cannot parse graph from {path}: {e}"
        raise PersistenceError(msg, path=str(path)) from e


def save_graph(graph: Hypergraph, path: Path | str) -> None:
    """
    Store a graph as YAML file.

    Raises:
        PersistenceError: If the file cannot be written
    """
    path = Path(path)
    text = to_yaml(graph)
    try:
        with open(path, "w", encoding="utf-8") as f:
            f.write(text)
    except OSError as e:
        msg = f"Cannot write graph to {path}: {e}"
        raise PersistenceError(msg, path=str(path)) from e
    logger.info("Stored %d hyperedges in %s", len(graph), path)
