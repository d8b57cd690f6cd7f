"""Error hierarchy for composeapp.

Error layers:
- ComposeAppError: Base class for all composeapp errors
- DomainError: Malformed input, bad references, filesystem problems while bundling
- InfrastructureError: Registry or engine failures while resolving or publishing

Every error is fatal to the operation that raised it. Nothing is retried here;
the caller owns retry policy. The CLI maps these to a console message and exit
status 1.
"""


class ComposeAppError(Exception):
    """Base class for all composeapp errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(message)


# =============================================================================
# Domain Errors
# =============================================================================


class DomainError(ComposeAppError):
    """Base class for domain errors."""


class InputError(DomainError):
    """A service record in the application descriptor is malformed."""

    def __init__(self, message: str, service: str | None = None) -> None:
        super().__init__(message, code="INPUT_ERROR")
        self.service = service


class InvalidReferenceError(DomainError):
    """An image reference could not be parsed or lacks a required tag."""

    def __init__(self, message: str, reference: str | None = None) -> None:
        super().__init__(message, code="REFERENCE_ERROR")
        self.reference = reference


class ArchiveError(DomainError):
    """Walking or reading the bundle directory failed."""


class UnsupportedEntryError(ArchiveError):
    """The bundle directory holds an entry that cannot be archived (device, fifo, socket)."""

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message, code="UNSUPPORTED_ENTRY")
        self.path = path


# =============================================================================
# Infrastructure Errors
# =============================================================================


class InfrastructureError(ComposeAppError):
    """Base class for infrastructure/system errors."""


class RegistryError(InfrastructureError):
    """A registry request failed (transport error or non-success status)."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ManifestUnknownError(RegistryError):
    """The registry has no manifest or blob for the requested tag or digest."""


class ResolutionError(InfrastructureError):
    """Resolving an image digest or platform set failed."""


class PublishError(InfrastructureError):
    """Uploading the bundle blob or pushing its manifest failed."""


class ConfigurationError(InfrastructureError):
    """System misconfiguration detected."""
