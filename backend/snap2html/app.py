import os
from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from dotenv import load_dotenv

from .config import Settings, load_settings
from .errors import Misconfigured
from .routes.chat import router as chat_router
from .routes.generate import router as generate_router
from .routes.health import router as health_router
from .services.generation import GenerationService
from .services.model import ModelClient

logger = structlog.get_logger(__name__)


def load_environment() -> None:
    # Load environment variables from .env.local / .env if present
    if os.getenv("DOTENV_DISABLED", "false").lower() not in {"1", "true", "yes"}:
        load_dotenv(".env.local")
        load_dotenv()


def create_app(
    settings: Optional[Settings] = None,
    model_client: Optional[ModelClient] = None,
    require_credential: bool = True,
) -> FastAPI:
    if settings is None:
        load_environment()
        settings = load_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Refuse to start without the model credential
        if require_credential:
            try:
                settings.require_api_key()
            except Misconfigured as exc:
                logger.error("server.misconfigured", error=exc.message, hint="VERCEL_API_KEY=your_actual_api_key_here")
                raise
        yield

    app = FastAPI(title="Screenshot to HTML API", version="0.3.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.generation_service = GenerationService(settings, model_client=model_client)

    # CORS
    cors_origins = settings.cors_allow_origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=cors_origins != ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def _invalid_body(request: Request, exc: RequestValidationError):
        logger.info("request.invalid", path=request.url.path, errors=len(exc.errors()))
        return JSONResponse(status_code=400, content={"error": "Invalid request body"})

    @app.exception_handler(Exception)
    async def _unhandled(request: Request, exc: Exception):
        logger.error("request.unhandled", path=request.url.path, error_type=type(exc).__name__, error=str(exc))
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    # Routers
    app.include_router(health_router)
    app.include_router(generate_router)
    app.include_router(chat_router)

    return app
