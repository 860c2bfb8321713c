import errno
import logging
import socket
import sys
from typing import Optional

import structlog
import uvicorn
from fastapi import FastAPI

from .app import create_app, load_environment
from .config import Settings, load_settings
from .errors import Misconfigured

logger = structlog.get_logger(__name__)


class PortUnavailableError(RuntimeError):
    def __init__(self, first_port: int, attempts: int):
        super().__init__(
            f"No free port in {first_port}-{first_port + attempts - 1} after {attempts} attempts"
        )
        self.first_port = first_port
        self.attempts = attempts


def acquire_listenable_port(preferred_port: int, host: str = "0.0.0.0", max_attempts: int = 20) -> socket.socket:
    """Bind the first free port at or above ``preferred_port``.

    Returns the bound socket so the port stays reserved until the server
    takes it over; ``sock.getsockname()[1]`` is the port actually used.
    Only "address in use" moves on to the next port, any other bind error
    is raised as is.
    """
    for offset in range(max(max_attempts, 1)):
        port = preferred_port + offset
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            sock.bind((host, port))
            sock.listen()
        except OSError as exc:
            sock.close()
            if exc.errno == errno.EADDRINUSE:
                logger.debug("server.port_in_use", port=port)
                continue
            raise
        return sock
    raise PortUnavailableError(preferred_port, max(max_attempts, 1))


def configure_logging(level: str = "INFO") -> None:
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level, logging.INFO)),
    )


def serve(settings: Optional[Settings] = None, app: Optional[FastAPI] = None) -> None:
    if settings is None and app is not None:
        settings = app.state.settings
    if settings is None:
        load_environment()
        settings = load_settings()
    configure_logging(settings.log_level)

    try:
        settings.require_api_key()
    except Misconfigured as exc:
        logger.error("server.misconfigured", error=exc.message, hint="VERCEL_API_KEY=your_actual_api_key_here")
        sys.exit(1)

    try:
        sock = acquire_listenable_port(settings.port, host=settings.host, max_attempts=settings.port_max_attempts)
    except (OSError, PortUnavailableError) as exc:
        logger.error("server.start_failed", error=str(exc))
        sys.exit(1)

    port = sock.getsockname()[1]
    if port != settings.port:
        logger.warning("server.port_busy", preferred_port=settings.port, port=port)
    logger.info(
        "server.listening",
        url=f"http://localhost:{port}",
        health=f"http://localhost:{port}/health",
        port=port,
    )

    if app is None:
        app = create_app(settings)
    config = uvicorn.Config(app, log_level=settings.log_level.lower())
    uvicorn.Server(config).run(sockets=[sock])
