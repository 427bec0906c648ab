class ComplianceError(Exception):
    """Base class for errors raised by release_compliance."""


class EvaluationError(ComplianceError):
    """Evaluation of a snapshot failed; no partial result is returned."""

    def __init__(self, message: str, *, service: str = ""):
        super().__init__(message)
        self.service = service


class ConfigError(ComplianceError):
    """A configuration file could not be read or is invalid."""
