import re
from typing import Optional

import structlog
from starlette.concurrency import run_in_threadpool

from ..config import Settings
from ..errors import InvalidRequest, Misconfigured, classify_model_error
from ..schemas import ChatRefinementRequest, Diagnostics, GenerationRequest, GenerationResult
from .model import ModelClient
from .prompts import build_generation_message, build_generation_prompt, build_refinement_messages
from .uploads import StagedUpload, discard_upload, read_upload

logger = structlog.get_logger(__name__)

SCRIPT_TAG = re.compile(r"<script\b", re.IGNORECASE)
JS_KEYWORDS = re.compile(r"function|addEventListener|querySelector|getElementById")

GENERATE_FAILED_MESSAGE = "Failed to generate HTML. Please try again."
CHAT_FAILED_MESSAGE = "Failed to process chat message. Please try again."


def compute_diagnostics(text: str) -> Diagnostics:
    # Advisory only: a pattern scan, not a check that the page works.
    return Diagnostics(
        has_script_tag=bool(SCRIPT_TAG.search(text)),
        has_interactivity_keywords=bool(JS_KEYWORDS.search(text)),
        length=len(text),
    )


class GenerationService:
    """Runs one generation or refinement request against the model.

    Holds no per-request state; a single instance serves every request.
    """

    def __init__(self, settings: Settings, model_client: Optional[ModelClient] = None):
        self.settings = settings
        self.model_client = model_client or ModelClient(settings)

    def _require_credential(self, area: str, **context) -> None:
        try:
            self.settings.require_api_key()
        except Misconfigured as exc:
            logger.warning(f"{area}.misconfigured", error=exc.message, **context)
            raise

    async def handle_generate(
        self,
        upload: Optional[StagedUpload],
        prompt: Optional[str] = None,
        include_javascript: bool = False,
        make_interactive: bool = False,
    ) -> GenerationResult:
        if upload is None:
            logger.info("generate.rejected", reason="No file uploaded")
            raise InvalidRequest("No file uploaded")
        try:
            self._require_credential("generate", filename=upload.filename)
            request = GenerationRequest(
                image_bytes=await run_in_threadpool(read_upload, upload),
                image_mime_type=upload.mime_type,
                user_prompt=prompt,
                include_javascript=include_javascript,
                make_interactive=make_interactive,
            )
            if not request.image_bytes:
                logger.info("generate.rejected", reason="Uploaded file is empty", filename=upload.filename)
                raise InvalidRequest("Uploaded file is empty")
            return await self._generate(request, upload.filename)
        finally:
            await run_in_threadpool(discard_upload, upload.path)

    async def _generate(self, request: GenerationRequest, filename: str) -> GenerationResult:
        logger.info(
            "generate.request",
            filename=filename,
            mime_type=request.image_mime_type,
            image_bytes=len(request.image_bytes),
            custom_prompt=bool(request.user_prompt),
            include_javascript=request.include_javascript,
            make_interactive=request.make_interactive,
        )
        prompt = build_generation_prompt(
            request.user_prompt,
            request.include_javascript,
            request.make_interactive,
            prompts=self.settings.prompts,
        )
        logger.debug("generate.prompt", prompt=prompt)
        message = build_generation_message(prompt, request.image_bytes, request.image_mime_type)

        try:
            text = await self.model_client.generate(
                [message],
                temperature=self.settings.temperature,
                max_output_tokens=self.settings.max_tokens,
            )
        except Exception as exc:
            logger.error(
                "generate.failed",
                filename=filename,
                image_bytes=len(request.image_bytes),
                error_type=type(exc).__name__,
                error=str(exc),
            )
            raise classify_model_error(exc, failure_message=GENERATE_FAILED_MESSAGE) from exc

        diagnostics = compute_diagnostics(text)
        logger.info(
            "generate.complete",
            response_length=diagnostics.length,
            has_script=diagnostics.has_script_tag,
            has_js_keywords=diagnostics.has_interactivity_keywords,
        )
        return GenerationResult(text=text, diagnostics=diagnostics, prompt_used=prompt)

    async def handle_refine(self, request: ChatRefinementRequest) -> GenerationResult:
        if not request.message:
            logger.info(
                "chat.rejected",
                reason="No message provided",
                conversation_length=len(request.conversation_history),
            )
            raise InvalidRequest("No message provided")
        self._require_credential("chat", message_length=len(request.message))

        messages = build_refinement_messages(
            request.conversation_history,
            request.current_html,
            request.message,
            prompts=self.settings.prompts,
        )
        logger.info(
            "chat.request",
            message_length=len(request.message),
            conversation_length=len(request.conversation_history),
            html_length=len(request.current_html),
            outgoing_messages=len(messages),
        )

        try:
            text = await self.model_client.generate(
                messages,
                temperature=self.settings.temperature,
                max_output_tokens=self.settings.max_tokens,
            )
        except Exception as exc:
            logger.error(
                "chat.failed",
                message_length=len(request.message),
                conversation_length=len(request.conversation_history),
                error_type=type(exc).__name__,
                error=str(exc),
            )
            raise classify_model_error(exc, failure_message=CHAT_FAILED_MESSAGE) from exc

        diagnostics = compute_diagnostics(text)
        logger.info("chat.complete", response_length=diagnostics.length, has_script=diagnostics.has_script_tag)
        return GenerationResult(text=text, diagnostics=diagnostics)
