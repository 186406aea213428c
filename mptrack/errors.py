from __future__ import annotations


class MixpanelError(Exception):
    """Base class for every error raised by the client."""


class InvalidArgument(MixpanelError, ValueError):
    """Raised when the client is misused: empty token, missing event time."""


class ConfigurationError(MixpanelError):
    """Raised when a request needs configuration the client does not have."""


class NetworkError(MixpanelError):
    """Raised when the request could not be completed at the transport level."""


class RemoteRejection(MixpanelError):
    """Raised when the service answers with anything other than ``1``."""

    def __init__(self, body: str) -> None:
        super().__init__(f"Mixpanel Server Error: {body}")
        self.body = body


class ValueCoercionWarning(MixpanelError, UserWarning):
    """Reported when a value that must be numeric cannot be read as a number."""
