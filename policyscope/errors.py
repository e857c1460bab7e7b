"""Error types raised while analyzing a policy."""


class PolicyScopeError(Exception):
    """Base class for all analysis errors."""


class ConfigurationError(PolicyScopeError):
    """A required setting (API key, assistant id) is missing."""


class FetchError(PolicyScopeError):
    """The policy URL could not be retrieved or had no readable text."""


class ResponseFormatError(PolicyScopeError):
    """The assistant reply did not contain an extractable JSON object."""


class AnalysisFailedError(PolicyScopeError):
    """The provider run ended in a failed, cancelled or expired state."""

    def __init__(self, status: str, message: str):
        super().__init__(message)
        self.status = status


class AnalysisTimeoutError(PolicyScopeError):
    """The provider run did not finish within the configured wait."""


class DataIntegrityError(PolicyScopeError):
    """A normalized result is missing a required field."""
