"""Completion backends.

Each provider turns (agent system prompt, user text, history) into its own wire
request, performs one POST through the shared ``httpx.AsyncClient`` and
normalizes the reply into a :class:`CompletionOutcome`. Failures surface as
``TransportError``, ``RemoteError`` or ``DecodeError``; nothing is retried here.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence

import httpx
from loguru import logger
from pydantic import ValidationError

from agent_rpc.config import Settings
from agent_rpc.errors import (
    ConfigurationError,
    DecodeError,
    RemoteError,
    TransportError,
    describe_validation_error,
)
from agent_rpc.models import (
    AgentDescriptor,
    ChatCompletionResponse,
    CompletionOutcome,
    ConversationMessage,
    GeminiResponse,
)

NO_RESPONSE_TEXT = "Sorry, I couldn't generate a response."

# history role -> Gemini content role
GEMINI_ROLES = {"user": "user", "assistant": "model"}


class CompletionProvider(ABC):
    name: str = "provider"

    def __init__(self, client: httpx.AsyncClient, api_key: str):
        self._client = client
        self._api_key = api_key

    @abstractmethod
    async def complete(
        self,
        agent: AgentDescriptor,
        user_text: str,
        history: Optional[Sequence[ConversationMessage]] = None,
    ) -> CompletionOutcome:
        ...

    @abstractmethod
    def _headers(self) -> Dict[str, str]:
        ...

    async def _post(self, url: str, payload: Dict[str, Any]) -> str:
        """POST ``payload`` and return the raw body of a 2xx response."""
        try:
            r = await self._client.post(url, json=payload, headers=self._headers())
        except httpx.TransportError as e:
            logger.error("{} request failed: {!r}", self.name, e)
            raise TransportError(self.name, f"request failed: {e!r}") from e
        body = r.text
        if not r.is_success:
            logger.error("{} API error response ({}): {}", self.name, r.status_code, body)
            raise RemoteError(self.name, r.status_code, body)
        logger.info("{} API response received successfully", self.name)
        return body


class OpenAIChatProvider(CompletionProvider):
    """Primary provider: OpenAI-compatible chat completions (Groq)."""

    name = "groq"

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_key: str,
        base_url: str = "https://api.groq.com/openai/v1",
        model: str = "llama-3.3-70b-versatile",
        temperature: float = 0.7,
        max_tokens: int = 1024,
    ):
        super().__init__(client, api_key)
        self.url = f"{base_url.rstrip('/')}/chat/completions"
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens

    def _headers(self):
        return {"Authorization": f"Bearer {self._api_key}", "Content-Type": "application/json"}

    def build_payload(self, system_prompt: str, user_text: str, history=None) -> Dict[str, Any]:
        messages = [{"role": "system", "content": system_prompt}]
        for msg in history or ():
            messages.append({"role": msg.role, "content": msg.content})
        messages.append({"role": "user", "content": user_text})
        return {
            "model": self.model,
            "messages": messages,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }

    async def complete(self, agent, user_text, history=None):
        body = await self._post(self.url, self.build_payload(agent.system_prompt, user_text, history))
        try:
            out = ChatCompletionResponse.model_validate_json(body)
        except ValidationError as e:
            raise DecodeError(self.name, describe_validation_error(e), body) from e
        if not out.choices:
            raise DecodeError(self.name, "response contains no choices", body)
        tokens = out.usage.total_tokens if out.usage else None
        return CompletionOutcome(reply_text=out.choices[0].message.content, tokens_used=tokens)


class GeminiProvider(CompletionProvider):
    """Fallback provider: Google Gemini generateContent, endpoint chosen by the agent's model."""

    name = "gemini"

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_key: str,
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
    ):
        super().__init__(client, api_key)
        self.base_url = base_url.rstrip("/")

    def _headers(self):
        return {"x-goog-api-key": self._api_key, "Content-Type": "application/json"}

    def url_for(self, model: str) -> str:
        return f"{self.base_url}/models/{model}:generateContent"

    def build_payload(self, system_prompt: str, user_text: str, history=None) -> Dict[str, Any]:
        contents: List[Dict[str, Any]] = []
        for msg in history or ():
            role = GEMINI_ROLES.get(msg.role)
            if role is None:
                logger.debug("Dropping history message with unsupported role {!r}", msg.role)
                continue
            contents.append({"role": role, "parts": [{"text": msg.content}]})
        contents.append({"role": "user", "parts": [{"text": user_text}]})
        return {
            "contents": contents,
            "system_instruction": {"parts": [{"text": system_prompt}]},
        }

    async def complete(self, agent, user_text, history=None):
        payload = self.build_payload(agent.system_prompt, user_text, history)
        body = await self._post(self.url_for(agent.model), payload)
        try:
            out = GeminiResponse.model_validate_json(body)
        except ValidationError as e:
            raise DecodeError(self.name, describe_validation_error(e), body) from e
        tokens = out.usage_metadata.total_token_count if out.usage_metadata else None
        if not out.candidates or not out.candidates[0].content.parts:
            logger.warning("{} returned no candidates", self.name)
            return CompletionOutcome(reply_text=NO_RESPONSE_TEXT, tokens_used=tokens, empty=True)
        return CompletionOutcome(reply_text=out.candidates[0].content.parts[0].text, tokens_used=tokens)


def select_provider(settings: Settings, client: httpx.AsyncClient) -> CompletionProvider:
    """Pick the process-wide provider from the configured credentials."""
    if settings.groq_api_key:
        return OpenAIChatProvider(
            client,
            settings.groq_api_key,
            base_url=settings.groq_base_url,
            model=settings.groq_model,
            temperature=settings.temperature,
            max_tokens=settings.max_tokens,
        )
    if settings.gemini_api_key:
        return GeminiProvider(client, settings.gemini_api_key, base_url=settings.gemini_base_url)
    raise ConfigurationError("GROQ_API_KEY or GEMINI_API_KEY must be set")
