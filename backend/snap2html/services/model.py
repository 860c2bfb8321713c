import asyncio
from typing import Any, Dict, List, Sequence

from openai import AsyncOpenAI

from ..config import Settings
from ..errors import GenerationTimeout, TIMEOUT_MESSAGE
from ..schemas import ImagePart, ModelMessage, TextPart


def to_openai_message(message: ModelMessage) -> Dict[str, Any]:
    if all(isinstance(p, TextPart) for p in message.content) and len(message.content) == 1:
        return {"role": message.role, "content": message.content[0].text}
    parts: List[Dict[str, Any]] = []
    for part in message.content:
        if isinstance(part, ImagePart):
            parts.append({"type": "image_url", "image_url": {"url": part.data}})
        else:
            parts.append({"type": "text", "text": part.text})
    return {"role": message.role, "content": parts}


class ModelClient:
    """Thin async wrapper over the OpenAI-compatible v0 endpoint.

    One attempt per call; the SDK's own retries are disabled and the whole call
    is bounded by ``settings.timeout_seconds``.
    """

    def __init__(self, settings: Settings, client: Any = None):
        self._settings = settings
        self._client = client

    def _get_client(self):
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self._settings.require_api_key(),
                base_url=self._settings.base_url,
                timeout=self._settings.timeout_seconds,
                max_retries=0,
            )
        return self._client

    async def generate(
        self,
        messages: Sequence[ModelMessage],
        *,
        temperature: float,
        max_output_tokens: int,
    ) -> str:
        client = self._get_client()
        call = client.chat.completions.create(
            model=self._settings.model,
            messages=[to_openai_message(m) for m in messages],
            temperature=temperature,
            max_tokens=max_output_tokens,
        )
        try:
            resp = await asyncio.wait_for(call, timeout=self._settings.timeout_seconds)
        except asyncio.TimeoutError as exc:
            raise GenerationTimeout(TIMEOUT_MESSAGE) from exc
        return resp.choices[0].message.content or ""
