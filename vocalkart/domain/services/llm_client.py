# vocalkart/domain/services/llm_client.py

from __future__ import annotations
from typing import List, Optional, Dict, Any
import json
import logging
from time import monotonic as _now

from openai import AsyncOpenAI, OpenAIError

from vocalkart.core.config import Settings
from vocalkart.core.errors import GenerationServiceError

logger = logging.getLogger(__name__)


class LLMGateway:
    """
    Thin async client for the OpenAI-compatible text-generation gateway.
    - Bounded timeout and retries are delegated to the SDK.
    - Any transport/HTTP failure surfaces as GenerationServiceError.
    - Callers own parsing of the returned text.
    """

    def __init__(self, settings: Settings, client: Optional[AsyncOpenAI] = None):
        self.model = settings.LLM_MODEL
        self.timeout_s = settings.llm_timeout_s
        self._api_key = settings.LLM_API_KEY
        self._client = client
        if self._client is None and self._api_key:
            self._client = AsyncOpenAI(
                api_key=self._api_key,
                base_url=settings.LLM_BASE_URL,
                timeout=settings.llm_timeout_s,
                max_retries=settings.llm_max_retries,
            )

    @property
    def configured(self) -> bool:
        return self._client is not None

    def _require_client(self) -> AsyncOpenAI:
        if self._client is None:
            raise GenerationServiceError("LLM_API_KEY not configured")
        return self._client

    async def _create(self, **kwargs):
        client = self._require_client()
        t0 = _now()
        try:
            resp = await client.chat.completions.create(model=self.model, **kwargs)
        except OpenAIError as e:
            logger.error(f"LLM call failed model={self.model}: {e}")
            raise GenerationServiceError(f"Text generation failed: {e}") from e
        dt = _now() - t0
        u = getattr(resp, "usage", None)
        logger.info(
            f"LLM call model={getattr(resp, 'model', self.model)} duration={dt:.3f}s "
            f"tokens(prompt={getattr(u, 'prompt_tokens', None)}, completion={getattr(u, 'completion_tokens', None)})"
        )
        if not resp.choices:
            raise GenerationServiceError("Text generation returned no choices")
        return resp.choices[0].message

    async def complete(self, prompt: str, *, system: Optional[str] = None) -> str:
        """Single-turn completion. Returns the raw message text ('' when empty)."""
        messages: List[Dict[str, str]] = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})
        message = await self._create(messages=messages)
        return message.content or ""

    async def call_tool(self, messages: List[Dict[str, str]], tool: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Force a single function call and return its parsed arguments.
        Returns None when the model did not call the tool.
        """
        name = tool["function"]["name"]
        message = await self._create(
            messages=messages,
            tools=[tool],
            tool_choice={"type": "function", "function": {"name": name}},
        )
        calls = getattr(message, "tool_calls", None) or []
        if not calls:
            return None
        try:
            args = json.loads(calls[0].function.arguments or "{}")
        except json.JSONDecodeError as e:
            logger.error(f"Tool call {name} returned invalid JSON arguments: {e}")
            return None
        return args if isinstance(args, dict) else None
