"""Models for the Auth feature."""
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class UserModel(BaseModel):
    """Domain model for a signed-in user."""

    id: str = Field(description="Identity provider subject identifier")
    email: Optional[str] = Field(default=None)
    name: Optional[str] = Field(default=None)
    picture: Optional[str] = Field(default=None)
    payload: Dict[str, Any] = Field(default_factory=dict, description="Verified token claims")
    last_login: int = Field(description="Epoch seconds of the latest login")

    @classmethod
    def from_payload(cls, payload: Dict[str, Any], *, last_login: int) -> "UserModel":
        return cls(
            id=str(payload["sub"]),
            email=payload.get("email"),
            name=payload.get("name"),
            picture=payload.get("picture"),
            payload=dict(payload),
            last_login=last_login,
        )
