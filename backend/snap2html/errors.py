from typing import Optional

from openai import APITimeoutError, AuthenticationError


class GenerationError(Exception):
    """Base for failures that map onto an HTTP status and a safe message."""

    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class InvalidRequest(GenerationError):
    status_code = 400


class Misconfigured(GenerationError):
    status_code = 500


class Unauthorized(GenerationError):
    status_code = 401


class GenerationFailed(GenerationError):
    status_code = 500


class GenerationTimeout(GenerationError):
    status_code = 504


UNAUTHORIZED_MESSAGE = "Invalid VERCEL_API_KEY. Please check your API key in .env.local file."
TIMEOUT_MESSAGE = "The model did not respond in time. Please try again."

# Substring the upstream SDK puts in credential rejections
AUTH_ERROR_SIGNATURE = "Invalid API key"


def classify_model_error(exc: BaseException, *, failure_message: str) -> GenerationError:
    """Map an exception raised by the model call onto the public taxonomy."""
    if isinstance(exc, GenerationError):
        return exc
    if isinstance(exc, AuthenticationError) or AUTH_ERROR_SIGNATURE in str(exc):
        return Unauthorized(UNAUTHORIZED_MESSAGE)
    if isinstance(exc, APITimeoutError):
        return GenerationTimeout(TIMEOUT_MESSAGE)
    return GenerationFailed(failure_message)
