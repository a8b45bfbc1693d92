"""Data models for the domain ontologies."""

from enum import Enum

from pydantic import BaseModel, Field


class EndpointRole(str, Enum):
    """Side of an assertion an endpoint was given on."""

    SOURCE = "source"
    TARGET = "target"
    SUPERCLASS = "superclass"


class Rejection(BaseModel):
    """
    Records why an endpoint was dropped from an assertion.

    Assertions never raise; they filter non-conforming endpoints and go on
    with the rest. Each dropped uid leaves one of these behind.
    """

    uid: str = Field(..., description="The dropped uid")
    relation: str = Field(..., description="Relation kind being asserted")
    role: EndpointRole = Field(..., description="Where the uid was given")
    reason: str = Field("", description="Why the uid does not conform")

    def __str__(self) -> str:
        """String representation."""
        return f"{self.relation}: dropped {self.role.value} {self.uid!r} ({self.reason})"


class OntologyStats(BaseModel):
    """Statistics about an ontology instance."""

    total_concepts: int = Field(0, description="Total number of concepts")
    total_relations: int = Field(0, description="Total number of relation kinds")
    total_facts: int = Field(0, description="Total number of asserted facts")
    classes_by_root: dict[str, int] = Field(
        default_factory=dict, description="Number of classes below each root class"
    )
    instances_by_root: dict[str, int] = Field(
        default_factory=dict, description="Number of instances below each root class"
    )
