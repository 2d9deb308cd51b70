"""Exceptions raised by language-model gateways."""
from typing import Any, Dict, Optional

from api.shared.exceptions import ExternalServiceError


class GatewayError(ExternalServiceError):
    """Raised when the completion service call fails."""

    status_code = 400

    def __init__(
        self,
        message: str,
        error_code: str = "GATEWAY_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__("Language model", message, error_code, details)


class GatewayTimeoutError(GatewayError):
    """Raised when the completion call exceeds its time budget."""

    def __init__(self, timeout_seconds: float):
        super().__init__(
            f"request timed out after {timeout_seconds:g} seconds",
            "GATEWAY_TIMEOUT",
            {"timeout_seconds": timeout_seconds},
        )


class GatewayRateLimitError(GatewayError):
    """Raised when the provider rejects the call for rate limits."""

    def __init__(self, message: str):
        super().__init__(message, "GATEWAY_RATE_LIMITED")


class GatewayResponseError(GatewayError):
    """Raised when the provider answers with an unusable completion."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "GATEWAY_MALFORMED_RESPONSE", details)
