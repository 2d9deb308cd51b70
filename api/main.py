import logging
import sys
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy import text
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request

from api.shared.dtos import ErrorResponse, HealthCheckResponse
from api.shared.exceptions import CompanionException, ErrorKind
from core.logging_config import configure_logging
from core.settings import SETTINGS
from di.container import ApplicationContainer as DependencyContainer

configure_logging()

logger = logging.getLogger("companion")


class CustomFastAPI(FastAPI):
    container: DependencyContainer


@asynccontextmanager
async def lifespan(_app: CustomFastAPI):
    logger.info("Starting application initialization...")
    start_time = time.time()

    try:
        if SETTINGS.CONVERSATION.STORE_BACKEND == "postgres":
            logger.info("Initializing database connection...")
            db_start = time.time()
            db_resource = _app.container.infrastructure.database()
            await db_resource.init()
            async with db_resource.engine.begin() as _conn:
                await _conn.execute(text("SELECT 1"))
            logger.info(
                f"✅ Database connection established in {time.time() - db_start:.2f}s"
            )
        else:
            logger.info("Using in-memory stores; database connection skipped")

        logger.info("Initializing OpenAI client...")
        await _app.container.infrastructure.openai_client().init()

        logger.info("Initializing Google speech clients...")
        await _app.container.infrastructure.google_speech().init()

        logger.info(
            f"✅ Application startup completed in {time.time() - start_time:.2f}s"
        )
    except Exception as e:
        logger.exception(f"❌ Failed to initialize application: {str(e)}")
        raise

    yield

    try:
        await _app.container.infrastructure.openai_client().shutdown()
        await _app.container.infrastructure.google_speech().shutdown()
        await _app.container.infrastructure.database().shutdown()
        logger.info("Application shutdown complete")
    except Exception as e:
        logger.exception(f"Error during shutdown: {e}")


def create_fastapi_app() -> CustomFastAPI:
    _app = CustomFastAPI(
        title="Companion Chat API",
        description="Chat companion backend: Google sign-in, conversations, speech",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Initialize dependency container
    _app.container = DependencyContainer()
    _app.container.wire(modules=[sys.modules[__name__]])
    _app.container.init_resources()

    _app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include feature routers
    from api.features.auth.router import router as auth_router
    from api.features.conversation.router import router as conversation_router
    from api.features.speech.router import router as speech_router

    _app.include_router(auth_router, prefix="/api", tags=["Auth"])
    _app.include_router(conversation_router, prefix="/api", tags=["Conversation"])
    _app.include_router(speech_router, prefix="/api", tags=["Speech"])

    register_exception_handlers(_app)
    return _app


def _error_response(
    status_code: int, kind: str, error_code: str, detail: str, details=None
) -> JSONResponse:
    body = ErrorResponse(
        error=kind,
        error_code=error_code,
        detail=detail,
        status_code=status_code,
        details=details or None,
    )
    return JSONResponse(status_code=status_code, content=body.model_dump())


def register_exception_handlers(_app: FastAPI) -> None:
    @_app.exception_handler(CompanionException)
    async def companion_exception_handler(request: Request, exc: CompanionException):
        if exc.status_code >= 500:
            logger.error(f"{exc.error_code} on {request.url.path}: {exc.message}")
        else:
            logger.info(f"{exc.error_code} on {request.url.path}: {exc.message}")
        return _error_response(
            exc.status_code, exc.kind.value, exc.error_code, exc.message, exc.details
        )

    @_app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ):
        return _error_response(
            400, ErrorKind.VALIDATION.value, "VALIDATION_ERROR", str(exc)
        )

    @_app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled exception: {exc}")
        return _error_response(
            500,
            ErrorKind.INTERNAL.value,
            "INTERNAL_ERROR",
            "An unexpected error occurred",
        )


app = create_fastapi_app()


@app.get("/")
async def root():
    return Response(status_code=200)


@app.get("/health", response_model=HealthCheckResponse)
async def health():
    return HealthCheckResponse(status="ok")


def run() -> None:
    import uvicorn

    uvicorn.run("api.main:app", host="0.0.0.0", port=SETTINGS.APP.PORT)


if __name__ == "__main__":
    run()
