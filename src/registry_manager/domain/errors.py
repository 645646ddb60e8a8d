"""Error taxonomy shared by the domain and its adapters."""

from __future__ import annotations


class RegistryError(RuntimeError):
    """Base class for every failure that aborts a publish run."""


class IncompatibleToolchainError(RegistryError):
    """Raised when the source was built with an older toolchain than the registry requires."""

    def __init__(self, *, required: str, declared: str) -> None:
        super().__init__(
            f"The repository was built with types version {declared}, "
            f"expected version {required} or higher"
        )
        self.required = required
        self.declared = declared


class NotFoundError(RegistryError):
    """Raised when a requested document, file or directory does not exist."""

    def __init__(self, message: str, *, repository: str, path: str) -> None:
        super().__init__(message)
        self.repository = repository
        self.path = path


class TransportError(RegistryError):
    """Raised on network failures, timeouts and unexpected HTTP status codes."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class DecodeError(RegistryError):
    """Raised when a payload is not valid JSON, base64 or semantic-version data."""


class StaleReferenceError(RegistryError):
    """Raised when the registry reference moved between reading it and updating it.

    The run can be repeated safely by the operator: nothing was published.
    """

    def __init__(self, message: str, *, expected: str | None = None) -> None:
        super().__init__(message)
        self.expected = expected
