"""Data models for code generation results."""

from pydantic import BaseModel, Field


class GeneratedEntity(BaseModel):
    """VHDL artifact generated for one algorithm class."""

    algorithm_uid: str = Field(..., description="Algorithm class the entity was generated for")
    label: str = Field(..., description="Entity name (label of the algorithm)")
    implementation_uid: str = Field(..., description="Implementation class holding the text")
    text: str = Field(..., description="Generated VHDL source")
    parts: list[str] = Field(default_factory=list, description="Part instances (empty = atomic)")

    @property
    def is_composite(self) -> bool:
        """Whether the entity instantiates sub-entities."""
        return bool(self.parts)

    def __str__(self) -> str:
        """String representation."""
        return f"GeneratedEntity({self.label}, parts={len(self.parts)})"


class GenerationReport(BaseModel):
    """
    Outcome of one generator run.

    Failures are kept per algorithm; algorithms generated earlier in the
    same run stay generated.
    """

    generated: list[GeneratedEntity] = Field(default_factory=list)
    failed: dict[str, str] = Field(
        default_factory=dict, description="Algorithm uid -> failure message"
    )

    @property
    def ok(self) -> bool:
        """True if no algorithm failed."""
        return not self.failed

    def entity(self, algorithm_uid: str) -> GeneratedEntity | None:
        """Generated entity of an algorithm, None if not generated."""
        for entity in self.generated:
            if entity.algorithm_uid == algorithm_uid:
                return entity
        return None
