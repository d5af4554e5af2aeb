"""Exception types raised by semroute."""


class RouterError(Exception):
    """Base class for all semroute errors."""


class EmbeddingFailure(RouterError):
    """The embedding provider could not produce a vector for a text."""


class BuildFailure(RouterError):
    """A route store could not be built because an utterance failed to embed."""

    def __init__(self, route_name: str, utterance_index: int, reason: str = ""):
        self.route_name = route_name
        self.utterance_index = utterance_index
        message = f"Failed to embed utterance {utterance_index} of route '{route_name}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class DimensionMismatch(RouterError, ValueError):
    """Two vectors that must be compared have different lengths."""

    def __init__(self, expected: int, actual: int, message: str | None = None):
        self.expected = expected
        self.actual = actual
        super().__init__(message or f"Vector dimension mismatch: expected {expected}, got {actual}")


class ConfigError(RouterError, ValueError):
    """Route configuration is invalid or could not be loaded."""


class DispatchError(RouterError):
    """A routed request could not be handed to a downstream handler."""
