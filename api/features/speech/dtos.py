"""DTOs for the Speech feature."""
from typing import Optional

from pydantic import Field

from api.shared.dtos import BaseDTO


class SpeechToTextRequest(BaseDTO):
    """Audio to transcribe, base64 encoded."""

    audio_content: Optional[str] = Field(
        default=None, alias="audioContent", description="Base64-encoded audio bytes"
    )
