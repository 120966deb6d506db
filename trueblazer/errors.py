"""Exceptions raised by the context-assembly layer.

The scoring core never raises; these cover the store and gateway boundaries.
"""

from __future__ import annotations


class TrueBlazerError(Exception):
    """Base class for service-level failures."""

    status_code = 500


class ContextNotFoundError(TrueBlazerError):
    """A row the handler depends on does not exist for this user."""

    status_code = 404


class StoreError(TrueBlazerError):
    """The row store failed to read or write."""


class GatewayError(TrueBlazerError):
    """The LLM gateway call failed."""

    def __init__(self, message: str, retryable: bool = False):
        super().__init__(message)
        self.retryable = retryable


class GatewayNotConfiguredError(GatewayError):
    status_code = 503

    def __init__(self, message: str = "AI service not configured"):
        super().__init__(message)


class GatewayRateLimitError(GatewayError):
    status_code = 429

    def __init__(self, message: str = "Rate limit exceeded. Please try again later."):
        super().__init__(message, retryable=True)


class GatewayPaymentRequiredError(GatewayError):
    status_code = 402

    def __init__(self, message: str = "Payment required. Please add credits to your AI workspace."):
        super().__init__(message)


class GatewayResponseError(GatewayError):
    """The gateway answered but the content was empty, unparseable or malformed."""

    status_code = 502
