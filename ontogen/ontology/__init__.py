"""Domain ontologies."""

from ontogen.ontology.component_network import ComponentNetwork
from ontogen.ontology.models import EndpointRole, OntologyStats, Rejection
from ontogen.ontology.software_graph import SoftwareGraph

__all__ = [
    "ComponentNetwork",
    "EndpointRole",
    "OntologyStats",
    "Rejection",
    "SoftwareGraph",
]
