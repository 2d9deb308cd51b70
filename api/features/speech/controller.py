"""Controller for the Speech feature."""
import base64
import binascii
from typing import Optional

from api.features.speech.dtos import SpeechToTextRequest
from api.features.speech.service import SpeechService
from api.shared.exceptions import ValidationError
from api.shared.utils import is_missing


class SpeechController:
    """Validates speech requests and delegates to the speech service."""

    def __init__(self, speech_service: SpeechService):
        self.speech_service = speech_service

    async def text_to_speech(self, *, text: Optional[str]) -> bytes:
        if is_missing(text):
            raise ValidationError('Missing "text" parameter', {"parameter": "text"})
        return await self.speech_service.synthesize(text)

    async def speech_to_text(self, request: Optional[SpeechToTextRequest]) -> str:
        encoded = request.audio_content if request else None
        if is_missing(encoded):
            raise ValidationError("Missing audio content.", {"parameter": "audioContent"})
        try:
            audio = base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError):
            raise ValidationError(
                "Audio content is not valid base64.", {"parameter": "audioContent"}
            )
        return await self.speech_service.transcribe(audio)
