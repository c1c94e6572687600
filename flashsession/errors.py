"""Exceptions raised by the session layer."""


class SessionError(Exception):
    """Base class for every session error."""


class ConfigurationError(SessionError):
    """Unknown storage name or unusable session settings."""


class NotStartedError(SessionError):
    """A session operation was called before a storage was selected."""


class GenerationExhaustedError(SessionError):
    """No unused session ID was found within the allowed attempts."""


class ImmutabilityViolation(SessionError, TypeError):
    """Attempt to modify a read-only container."""


class BackendError(SessionError):
    """A storage backend failed to read or write."""
