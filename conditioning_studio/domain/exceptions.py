"""Base exception classes for the Conditioning Studio domain layer."""


class StudioError(Exception):
    """Base exception for all domain errors.

    All domain-specific exceptions MUST inherit from this class.
    This enables consistent error handling across the application.

    Dispatch rejections are NOT exceptions - they are returned as
    DispatchFailure values. Exceptions are reserved for integrity
    faults such as a corrupted persisted event log.
    """

    def __init__(self, message: str = "") -> None:
        """Initialize the exception with an optional message.

        Args:
            message: Human-readable error description.
        """
        super().__init__(message)
