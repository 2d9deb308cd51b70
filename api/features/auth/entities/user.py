"""User entity keyed by the identity provider's subject identifier."""
from typing import Any, Dict, Optional

from sqlalchemy import BigInteger, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from api.shared.entities.base import BaseEntity


class AppUser(BaseEntity):
    """Signed-in user; the verified token payload is kept verbatim."""

    __tablename__ = "app_user"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    email: Mapped[Optional[str]] = mapped_column(String(320))
    name: Mapped[Optional[str]] = mapped_column(String(255))
    picture: Mapped[Optional[str]] = mapped_column(String(1024))
    payload: Mapped[Dict[str, Any]] = mapped_column(JSONB, nullable=False, default=dict)
    last_login: Mapped[int] = mapped_column(BigInteger, nullable=False)
