"""Exceptions for the Speech feature."""
from typing import Any, Dict, Optional

from api.shared.exceptions import ExternalServiceError


class SpeechSynthesisError(ExternalServiceError):
    """Raised when text-to-speech synthesis fails."""

    status_code = 500

    def __init__(self, details: Optional[Dict[str, Any]] = None):
        super().__init__("Google TTS", "An error occurred at Google TTS.", "SPEECH_SYNTHESIS_FAILED", details)


class SpeechRecognitionError(ExternalServiceError):
    """Raised when speech-to-text recognition fails."""

    status_code = 500

    def __init__(self, details: Optional[Dict[str, Any]] = None):
        super().__init__("Google STT", "An error occurred at Google STT.", "SPEECH_RECOGNITION_FAILED", details)
