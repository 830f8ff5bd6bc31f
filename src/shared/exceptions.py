"""Exceptions for the shared module."""


class StartupError(Exception):
    """Raised when the service cannot reach a state where it may serve traffic."""
    pass


class ConfigurationError(StartupError):
    """Raised when required settings are missing or invalid."""
    pass


class StorageUnavailableError(StartupError):
    """Raised when the storage backend stays unreachable for every allowed attempt."""

    def __init__(self, attempts: int, last_error: Exception) -> None:
        super().__init__(
            f"Failed to connect to storage after {attempts} attempts: {last_error}"
        )
        self.attempts = attempts
        self.last_error = last_error


class BucketProvisioningError(StartupError):
    """Raised when the configured bucket is missing and cannot be created."""
    pass
