"""Custom exceptions for the FindOrigin application."""


class FindOriginError(Exception):
    """Base exception for FindOrigin application."""

    pass


class ConfigurationError(FindOriginError):
    """Exception raised for configuration errors."""

    pass


class ProviderError(FindOriginError):
    """Exception raised when a search provider fails or returns an unusable payload."""

    def __init__(self, provider: str, message: str, status_code: int = 0, response_text: str = ""):
        self.provider = provider
        self.message = message
        self.status_code = status_code
        self.response_text = response_text
        if status_code:
            super().__init__(f"{provider} error {status_code}: {message}")
        else:
            super().__init__(f"{provider} error: {message}")


class ProviderTimeout(ProviderError):
    """Exception raised when a search provider does not answer in time."""

    def __init__(self, provider: str, timeout: float):
        self.timeout = timeout
        super().__init__(provider, f"timed out after {timeout:g}s")


class ReasoningServiceError(FindOriginError):
    """Exception raised when the reasoning service cannot be reached or rejects the request."""

    def __init__(self, message: str, status_code: int = 0):
        self.status_code = status_code
        super().__init__(message)


class ReasoningServiceMalformed(FindOriginError):
    """Exception raised when the reasoning service answers with an unexpected shape."""

    pass


class DeliveryError(FindOriginError):
    """Exception raised when a chat notification cannot be delivered."""

    def __init__(self, message: str, status_code: int = 0, response_text: str = ""):
        self.status_code = status_code
        self.response_text = response_text
        super().__init__(message)
