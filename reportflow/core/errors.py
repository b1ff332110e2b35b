"""Custom exceptions used across reportflow."""


class ReportFlowError(Exception):
    """Base error for the application."""


class ConfigError(ReportFlowError):
    """Configuration related error."""


class UnknownStructureError(ConfigError):
    """Raised when no adapter is registered for a structure type."""

    def __init__(self, structure_type: str) -> None:
        super().__init__(f"No structure adapter for structureType: {structure_type!r}")
        self.structure_type = structure_type


class DocumentLoadError(ConfigError):
    """Raised when a document file cannot be read or fails validation."""
