"""Custom exception classes for the file registry."""


class RegistryError(Exception):
    """
    Base exception class for all registry errors.
    """
    pass


class SnapshotIOError(RegistryError):
    """
    Raised when the registry snapshot cannot be read or written.

    Recoverable: the store logs it and keeps serving from memory.
    """
    pass


class FileIdNotFoundError(RegistryError):
    """
    Raised when a file identifier is not present in the registry.
    """
    pass


class PermissionDeniedError(RegistryError):
    """
    Raised when a user acts on a file they neither uploaded nor own the bot for.
    """
    pass


class MalformedEventError(RegistryError):
    """
    Raised when a submission carries no recognizable file payload.
    """
    pass


class EntropyExhaustedError(RegistryError):
    """
    Raised when no randomness source is available to mint identifiers.
    """
    pass


class IdentifierCollisionError(RegistryError):
    """
    Raised when every identifier re-roll collided with an existing entry.
    """
    pass


class ConfigurationError(RegistryError):
    """
    Raised when required settings are missing or invalid.
    """
    pass


class BatchRegistrationError(RegistryError):
    """
    Raised when a batch stops part-way.

    Files registered before the failure stay registered and are listed in
    ``registered``; the underlying error is chained as ``__cause__``.
    """

    def __init__(self, message: str, registered=None, total: int = 0):
        super().__init__(message)
        self.registered = list(registered or [])
        self.total = total
