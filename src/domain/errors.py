"""
Exceptions raised by the inquiry pipeline.

Each carries the HTTP status code the handler answers with. Anything that is
not an InquiryError is treated as an unexpected failure (500).
"""


class InquiryError(Exception):
    """Base class for failures that map to a specific HTTP response."""

    def __init__(self, message: str, status_code: int):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class ClientInputError(InquiryError):
    """Raised when the submission itself is invalid (4xx, nothing sent)."""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message, status_code)


class UpstreamDeliveryError(InquiryError):
    """Raised when the delivery gateway rejects the message."""

    def __init__(self, response_text: str, status_code: int = 502):
        self.response_text = response_text
        super().__init__(f"Email failed: {response_text}", status_code)


class ConfigurationError(Exception):
    """Raised when handler configuration is invalid or missing."""
    pass
