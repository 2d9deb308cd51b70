"""Controller for the Auth feature."""
from typing import Any, Dict, Optional

from api.features.auth.service import LoginService


class AuthController:
    """Controller for login."""

    def __init__(self, login_service: LoginService):
        self.login_service = login_service

    async def login(self, *, credential: Optional[str]) -> Dict[str, Any]:
        return await self.login_service.login(credential)
