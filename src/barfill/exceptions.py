"""Exception hierarchy for barfill."""


class BarfillError(Exception):
    """Base exception for all barfill errors."""

    pass


class ConfigurationError(BarfillError):
    """Errors related to run configuration."""

    pass


class InvalidConfigurationError(ConfigurationError):
    """A spacing required by the selected axis mode is not positive."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Invalid configuration: {reason}")


class SessionError(BarfillError):
    """Errors related to capture sessions."""

    pass


class SessionAlreadyActiveError(SessionError):
    """A capture session is already running for the document."""

    def __init__(self, document_name: str) -> None:
        self.document_name = document_name
        super().__init__(f"A capture session is already active for '{document_name}'")


class SessionStateError(SessionError):
    """Operation is not valid in the session's current state."""

    def __init__(self, operation: str, state: str) -> None:
        self.operation = operation
        self.state = state
        super().__init__(f"Cannot {operation} while session is {state}")


class GeometryError(BarfillError):
    """Errors in geometric calculations."""

    pass


class BoundaryNotClosedError(GeometryError):
    """Boundary is open and its ends are too far apart to auto-close."""

    def __init__(self, gap: float, tolerance: float) -> None:
        self.gap = gap
        self.tolerance = tolerance
        super().__init__(
            f"Boundary must be closed: end gap {gap:.4f} exceeds tolerance {tolerance}"
        )


class BarValidationError(GeometryError):
    """A generated bar failed validation during the write phase."""

    def __init__(self, index: int, reason: str) -> None:
        self.index = index
        self.reason = reason
        super().__init__(f"Bar {index} failed validation: {reason}")


class BoundaryError(BarfillError):
    """Errors related to locating or loading boundary entities."""

    pass


class MissingBoundaryError(BoundaryError):
    """The recorded boundary entity does not exist."""

    def __init__(self, boundary_id: str | None) -> None:
        self.boundary_id = boundary_id
        if boundary_id is None:
            message = "No polyline was created by the drawing tool"
        else:
            message = f"Boundary entity '{boundary_id}' is no longer available"
        super().__init__(message)


class BoundaryReadError(BoundaryError):
    """Error reading a boundary from a file."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to read boundary '{path}': {reason}")


class ExportError(BarfillError):
    """Error saving a run result."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to export run to '{path}': {reason}")
