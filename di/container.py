"""Centralized dependency injection container."""
from dependency_injector import containers, providers

from core.settings import SETTINGS
from infra.resources import (
    DatabaseResource,
    GoogleSpeechResource,
    OpenAIResource,
)


class InfrastructureContainer(containers.DeclarativeContainer):
    """Infrastructure layer dependencies."""

    # Database
    database = providers.Resource(
        DatabaseResource,
        database_url=str(SETTINGS.DATABASE.DATABASE_URL),
    )

    # OpenAI
    openai_client = providers.Resource(
        OpenAIResource,
        api_key=SETTINGS.OPENAI.OPENAI_API_KEY.get_secret_value(),
        timeout_seconds=SETTINGS.OPENAI.OPENAI_TIMEOUT_SECONDS,
    )

    # Google Cloud speech
    google_speech = providers.Resource(GoogleSpeechResource)


class ServiceContainer(containers.DeclarativeContainer):
    """Application services - depends on infrastructure."""

    infrastructure = providers.DependenciesContainer()

    store_backend = providers.Callable(lambda: SETTINGS.CONVERSATION.STORE_BACKEND)

    # Stores
    conversation_store = providers.Selector(
        store_backend,
        postgres=providers.Singleton(
            "api.features.conversation.repository.PostgresConversationStore",
            database=infrastructure.database,
        ),
        memory=providers.Singleton(
            "api.features.conversation.repository.InMemoryConversationStore",
        ),
    )

    user_store = providers.Selector(
        store_backend,
        postgres=providers.Singleton(
            "api.features.auth.repository.PostgresUserStore",
            database=infrastructure.database,
        ),
        memory=providers.Singleton(
            "api.features.auth.repository.InMemoryUserStore",
        ),
    )

    # Language model
    llm_gateway = providers.Singleton(
        "llm.openai_gateway.OpenAIChatGateway",
        client=infrastructure.openai_client.provided.client,
        model=SETTINGS.OPENAI.OPENAI_MODEL,
        temperature=SETTINGS.OPENAI.OPENAI_TEMPERATURE,
        max_tokens=SETTINGS.OPENAI.OPENAI_MAX_TOKENS,
        timeout_seconds=SETTINGS.OPENAI.OPENAI_TIMEOUT_SECONDS,
    )

    # Singleton so the per-conversation locks are shared by all requests
    conversation_manager = providers.Singleton(
        "api.features.conversation.service.ConversationManager",
        store=conversation_store,
        gateway=llm_gateway,
        system_prompt=SETTINGS.OPENAI.SYSTEM_PROMPT,
        max_history_messages=SETTINGS.CONVERSATION.MAX_HISTORY_MESSAGES,
    )

    # Identity
    identity_verifier = providers.Singleton(
        "api.features.auth.service.GoogleIdentityVerifier",
        audience=SETTINGS.GOOGLE.GOOGLE_CLIENT_ID,
    )

    login_service = providers.Factory(
        "api.features.auth.service.LoginService",
        verifier=identity_verifier,
        user_store=user_store,
    )

    # Speech
    speech_service = providers.Singleton(
        "api.features.speech.service.GoogleSpeechService",
        clients=infrastructure.google_speech,
        language_code=SETTINGS.SPEECH.LANGUAGE_CODE,
        voice_gender=SETTINGS.SPEECH.TTS_VOICE_GENDER,
        tts_audio_encoding=SETTINGS.SPEECH.TTS_AUDIO_ENCODING,
        stt_encoding=SETTINGS.SPEECH.STT_ENCODING,
        stt_sample_rate_hertz=SETTINGS.SPEECH.STT_SAMPLE_RATE_HERTZ,
    )


class ControllerContainer(containers.DeclarativeContainer):
    """Controller-specific dependencies."""

    services = providers.DependenciesContainer()

    # Controllers
    conversation_controller = providers.Factory(
        "api.features.conversation.controller.ConversationController",
        conversation_manager=services.conversation_manager,
    )

    auth_controller = providers.Factory(
        "api.features.auth.controller.AuthController",
        login_service=services.login_service,
    )

    speech_controller = providers.Factory(
        "api.features.speech.controller.SpeechController",
        speech_service=services.speech_service,
    )


class ApplicationContainer(containers.DeclarativeContainer):
    """Main application container composing all sub-containers."""

    wiring_config = containers.WiringConfiguration(
        modules=[
            "api.main",
            "api.features.conversation.router",
            "api.features.auth.router",
            "api.features.speech.router",
        ]
    )

    infrastructure = providers.Container(InfrastructureContainer)
    services = providers.Container(ServiceContainer, infrastructure=infrastructure)
    controllers = providers.Container(ControllerContainer, services=services)
