"""Custom exceptions for ontogen."""


class OntogenError(Exception):
    """Base exception for all ontogen errors."""


class ConfigurationError(OntogenError):
    """Raised when configuration is invalid."""


class ValidationError(OntogenError):
    """Raised when a graph document is structurally invalid."""


class PersistenceError(OntogenError):
    """Raised when a graph cannot be loaded or stored."""

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


class SelectionError(OntogenError):
    """Raised when no algorithm matches the requested uid/label."""

    def __init__(self, message: str, uid: str | None = None, label: str | None = None) -> None:
        super().__init__(message)
        self.uid = uid
        self.label = label


class CompositionCycleError(OntogenError):
    """Raised when an algorithm is transitively part of itself."""

    def __init__(self, message: str, cycle: list[str] | None = None) -> None:
        super().__init__(message)
        self.cycle = cycle or []


class GenerationError(OntogenError):
    """Raised when an artifact cannot be generated or stored for an algorithm."""

    def __init__(self, message: str, algorithm_uid: str | None = None) -> None:
        super().__init__(message)
        self.algorithm_uid = algorithm_uid
