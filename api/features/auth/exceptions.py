"""Exceptions for the Auth feature."""
from typing import Any, Dict, Optional

from api.shared.exceptions import ExternalServiceError


class IdentityVerificationError(ExternalServiceError):
    """Raised when an identity token cannot be verified."""

    status_code = 400

    def __init__(
        self,
        message: str,
        error_code: str = "IDENTITY_VERIFICATION_FAILED",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__("Identity", message, error_code, details)


class EmptyIdentityPayloadError(IdentityVerificationError):
    """Raised when verification succeeds but yields no account payload."""

    def __init__(self):
        super().__init__("No account payload!", "IDENTITY_PAYLOAD_MISSING")
