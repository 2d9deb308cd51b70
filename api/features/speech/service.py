"""Service layer for the Speech feature.

Pure request/response proxies over the Google Cloud Text-to-Speech and
Speech-to-Text async clients; nothing is stored.
"""
import logging
from abc import ABC, abstractmethod

from google.api_core import exceptions as google_exceptions
from google.auth import exceptions as google_auth_exceptions
from google.cloud import speech, texttospeech

from api.features.speech.exceptions import SpeechRecognitionError, SpeechSynthesisError
from infra.resources import GoogleSpeechResource

logger = logging.getLogger("companion.speech.service")

# Client construction fails with DefaultCredentialsError when ADC is absent
_GOOGLE_ERRORS = (google_exceptions.GoogleAPIError, google_auth_exceptions.GoogleAuthError)


class SpeechService(ABC):
    @abstractmethod
    async def synthesize(self, text: str) -> bytes:
        """Return encoded audio for 'text'."""
        pass

    @abstractmethod
    async def transcribe(self, audio: bytes) -> str:
        """Return the transcript of 'audio', one line per recognized result."""
        pass


class GoogleSpeechService(SpeechService):
    """Speech service backed by Google Cloud async clients."""

    def __init__(
        self,
        clients: GoogleSpeechResource,
        *,
        language_code: str,
        voice_gender: str,
        tts_audio_encoding: str,
        stt_encoding: str,
        stt_sample_rate_hertz: int,
    ):
        self.clients = clients
        self.language_code = language_code
        self.voice_gender = voice_gender
        self.tts_audio_encoding = tts_audio_encoding
        self.stt_encoding = stt_encoding
        self.stt_sample_rate_hertz = stt_sample_rate_hertz

    async def synthesize(self, text: str) -> bytes:
        try:
            response = await self.clients.tts_client.synthesize_speech(
                input=texttospeech.SynthesisInput(text=text),
                voice=texttospeech.VoiceSelectionParams(
                    language_code=self.language_code,
                    ssml_gender=texttospeech.SsmlVoiceGender[self.voice_gender],
                ),
                audio_config=texttospeech.AudioConfig(
                    audio_encoding=texttospeech.AudioEncoding[self.tts_audio_encoding],
                ),
            )
        except _GOOGLE_ERRORS as e:
            logger.error(f"Google TTS failed: {e}")
            raise SpeechSynthesisError({"reason": str(e)}) from e
        return response.audio_content

    async def transcribe(self, audio: bytes) -> str:
        config = speech.RecognitionConfig(
            encoding=speech.RecognitionConfig.AudioEncoding[self.stt_encoding],
            sample_rate_hertz=self.stt_sample_rate_hertz,
            language_code=self.language_code,
        )
        try:
            response = await self.clients.stt_client.recognize(
                config=config, audio=speech.RecognitionAudio(content=audio)
            )
        except _GOOGLE_ERRORS as e:
            logger.error(f"Google STT failed: {e}")
            raise SpeechRecognitionError({"reason": str(e)}) from e
        return "\n".join(
            result.alternatives[0].transcript
            for result in response.results
            if result.alternatives
        )
