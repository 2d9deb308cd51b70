"""Infrastructure resources: database, OpenAI client, Google speech clients.

This module is part of the infra layer and must not import from application features.
"""
from google.cloud import speech, texttospeech
from openai import AsyncOpenAI
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker


class DatabaseResource:
    """Database resource for dependency injection."""

    def __init__(self, database_url: str):
        self.database_url = database_url
        self.engine = None
        self.session_factory = None

    async def init(self):
        """Initialize database connection."""
        self.engine = create_async_engine(
            self.database_url,
            echo=False,
            pool_pre_ping=True,
            pool_recycle=3600,
        )
        self.session_factory = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        return self

    def get_session(self) -> AsyncSession:
        """Get database session (synchronous accessor)."""
        if self.session_factory is None:
            raise RuntimeError("Database not initialized. Call init() first.")
        return self.session_factory()

    async def shutdown(self):
        """Shutdown database connection."""
        if self.engine:
            await self.engine.dispose()


class OpenAIResource:
    """Process-wide 'AsyncOpenAI' client."""

    def __init__(self, api_key: str, timeout_seconds: float):
        self.api_key = api_key
        self.timeout_seconds = timeout_seconds
        self._client = None

    async def init(self):
        # No client-side retries; the gateway owns the timeout
        self._client = AsyncOpenAI(
            api_key=self.api_key,
            timeout=self.timeout_seconds,
            max_retries=0,
        )
        return self

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            raise RuntimeError("OpenAI client not initialized. Call init() first.")
        return self._client

    async def shutdown(self):
        if self._client is not None:
            await self._client.close()
            self._client = None


class GoogleSpeechResource:
    """Google Cloud Text-to-Speech and Speech-to-Text async clients.

    Clients are built on first use, so missing Application Default
    Credentials only fail the speech calls, not startup.
    """

    def __init__(self):
        self._tts_client = None
        self._stt_client = None

    async def init(self):
        return self

    @property
    def tts_client(self) -> texttospeech.TextToSpeechAsyncClient:
        if self._tts_client is None:
            self._tts_client = texttospeech.TextToSpeechAsyncClient()
        return self._tts_client

    @property
    def stt_client(self) -> speech.SpeechAsyncClient:
        if self._stt_client is None:
            self._stt_client = speech.SpeechAsyncClient()
        return self._stt_client

    async def shutdown(self):
        self._tts_client = None
        self._stt_client = None
