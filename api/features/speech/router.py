"""Router for the Speech feature."""
from typing import Optional

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Body, Depends, Query
from fastapi.responses import PlainTextResponse, Response

from api.features.speech.controller import SpeechController
from api.features.speech.dtos import SpeechToTextRequest
from di.container import ApplicationContainer as DependencyContainer

router = APIRouter()


@router.get("/tts", response_class=Response)
@inject
async def text_to_speech(
    text: Optional[str] = Query(None, description="Text to synthesize"),
    controller: SpeechController = Depends(
        Provide[DependencyContainer.controllers.speech_controller]
    ),
):
    """Synthesize speech and return MP3 audio."""
    audio = await controller.text_to_speech(text=text)
    return Response(content=audio, media_type="audio/mpeg")


@router.post("/stt", response_class=PlainTextResponse)
@inject
async def speech_to_text(
    request: Optional[SpeechToTextRequest] = Body(None),
    controller: SpeechController = Depends(
        Provide[DependencyContainer.controllers.speech_controller]
    ),
):
    """Transcribe base64-encoded audio to plain text."""
    transcript = await controller.speech_to_text(request)
    return PlainTextResponse(transcript)
