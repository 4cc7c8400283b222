class ConfigurationError(ValueError):
    """Raised when required review settings are missing or invalid."""


class TransportError(RuntimeError):
    """Raised when the completion endpoint cannot be reached."""


class ProtocolError(RuntimeError):
    """Raised when the completion endpoint answers with a non-2xx status or an empty body."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ParseError(ValueError):
    """Raised when the completion response is malformed or has an unexpected shape."""


class DiffError(RuntimeError):
    """Raised when a single file's diff section cannot be generated."""


class GitCommandError(RuntimeError):
    """Raised when a git command used to collect workspace changes fails."""
