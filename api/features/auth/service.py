"""Service layer for the Auth feature."""
import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional

from google.auth import exceptions as google_auth_exceptions
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token

from api.features.auth.exceptions import (
    EmptyIdentityPayloadError,
    IdentityVerificationError,
)
from api.features.auth.models import UserModel
from api.features.auth.repository import UserStore
from api.shared.exceptions import ValidationError
from api.shared.utils import get_current_timestamp, is_missing

logger = logging.getLogger("companion.auth.service")


class IdentityVerifier(ABC):
    """Verifies an identity token and returns its claims."""

    @abstractmethod
    async def verify(self, credential: str) -> Optional[Dict[str, Any]]:
        pass


class GoogleIdentityVerifier(IdentityVerifier):
    """Verifies Google ID tokens against the configured OAuth client id."""

    def __init__(self, audience: str):
        self.audience = audience
        self._request = google_requests.Request()

    async def verify(self, credential: str) -> Optional[Dict[str, Any]]:
        try:
            # google-auth fetches signing certs over blocking HTTP
            return await asyncio.to_thread(
                id_token.verify_oauth2_token,
                credential,
                self._request,
                self.audience or None,
            )
        except (ValueError, google_auth_exceptions.GoogleAuthError) as e:
            logger.warning(f"Identity token rejected: {e}")
            raise IdentityVerificationError(str(e)) from e


class LoginService:
    """Verifies a credential and records the user it identifies."""

    def __init__(
        self,
        verifier: IdentityVerifier,
        user_store: UserStore,
        clock: Callable[[], int] = get_current_timestamp,
    ):
        self.verifier = verifier
        self.user_store = user_store
        self.clock = clock

    async def login(self, credential: Optional[str]) -> Dict[str, Any]:
        if is_missing(credential):
            raise ValidationError("Credential missing.", {"parameter": "credential"})

        payload = await self.verifier.verify(credential)
        if not payload or not payload.get("sub"):
            raise EmptyIdentityPayloadError()

        user = UserModel.from_payload(payload, last_login=self.clock())
        await self.user_store.upsert(user)
        logger.info(f"User signed in: {user.id}")
        return payload
