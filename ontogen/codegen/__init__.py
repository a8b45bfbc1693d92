"""Code generation from software ontologies."""

from ontogen.codegen.composition import CompositionWalker
from ontogen.codegen.models import GeneratedEntity, GenerationReport
from ontogen.codegen.vhdl_entity import VhdlEntityGenerator

__all__ = [
    "CompositionWalker",
    "GeneratedEntity",
    "GenerationReport",
    "VhdlEntityGenerator",
]
