"""Error taxonomy of the risk classification engine."""


class SoraError(Exception):
    """Base class for engine errors."""


class ValidationError(SoraError):
    """A required input is missing, out of range or of the wrong category.

    Always user-correctable: ``field`` names the snapshot field the user has
    to fix (dotted path, e.g. ``drone.max_speed``).
    """

    code = "VALIDATION_ERROR"

    def __init__(self, field: str, message: str):
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


class OutOfScopeError(ValidationError):
    """The operation falls outside the SORA (certified category or grey cell)."""

    code = "OUT_OF_SCOPE"


class ConfigurationError(SoraError):
    """A lookup table has no entry for an otherwise valid input combination."""

    code = "CONFIGURATION_ERROR"
