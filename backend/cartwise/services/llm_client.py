"""Unified LLM client: tries OpenAI first, falls back to Anthropic."""

import asyncio
import logging

import anthropic
from openai import AsyncOpenAI

from cartwise.config import settings

logger = logging.getLogger(__name__)


class LLMError(RuntimeError):
    """No provider produced usable text (unconfigured, timeout, error, or empty envelope)."""


class LLMClient:
    """Unified async LLM client with OpenAI primary + Anthropic fallback."""

    def __init__(
        self,
        openai_api_key: str | None = None,
        anthropic_api_key: str | None = None,
        timeout: float | None = None,
    ):
        self.timeout = settings.llm_timeout_seconds if timeout is None else timeout
        self._openai = None
        self._anthropic = None

        openai_key = settings.openai_api_key if openai_api_key is None else openai_api_key
        anthropic_key = settings.anthropic_api_key if anthropic_api_key is None else anthropic_api_key

        if openai_key:
            self._openai = AsyncOpenAI(api_key=openai_key, timeout=self.timeout, max_retries=0)
        if anthropic_key:
            self._anthropic = anthropic.AsyncAnthropic(
                api_key=anthropic_key, timeout=self.timeout, max_retries=0,
            )

    @property
    def configured(self) -> bool:
        return self._openai is not None or self._anthropic is not None

    async def complete(
        self,
        system: str,
        user: str,
        *,
        max_tokens: int = 400,
        temperature: float = 0.7,
    ) -> str:
        """Get a completion from the best available LLM.

        Each provider attempt is bounded by ``self.timeout`` seconds.

        Returns:
            The top-level generated text, stripped.

        Raises:
            LLMError if no provider is configured or every provider fails.
        """
        errors = []

        if self._openai:
            try:
                return await asyncio.wait_for(
                    self._complete_openai(system, user, max_tokens, temperature),
                    timeout=self.timeout,
                )
            except asyncio.TimeoutError:
                errors.append(f"OpenAI: timed out after {self.timeout:.0f}s")
                logger.warning(f"OpenAI timed out after {self.timeout:.0f}s, trying Anthropic")
            except Exception as e:
                errors.append(f"OpenAI: {e}")
                logger.warning(f"OpenAI failed, trying Anthropic: {e}")

        if self._anthropic:
            try:
                return await asyncio.wait_for(
                    self._complete_anthropic(system, user, max_tokens, temperature),
                    timeout=self.timeout,
                )
            except asyncio.TimeoutError:
                errors.append(f"Anthropic: timed out after {self.timeout:.0f}s")
                logger.warning(f"Anthropic timed out after {self.timeout:.0f}s")
            except Exception as e:
                errors.append(f"Anthropic: {e}")
                logger.warning(f"Anthropic also failed: {e}")

        if not errors:
            raise LLMError("No LLM provider configured")
        raise LLMError(f"All LLM providers failed: {'; '.join(errors)}")

    async def _complete_openai(self, system, user, max_tokens, temperature) -> str:
        response = await self._openai.chat.completions.create(
            model=settings.openai_model,
            max_tokens=max_tokens,
            temperature=temperature,
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
        )
        if not response.choices:
            raise ValueError("response has no choices")
        return _require_text(response.choices[0].message.content)

    async def _complete_anthropic(self, system, user, max_tokens, temperature) -> str:
        response = await self._anthropic.messages.create(
            model=settings.anthropic_model,
            max_tokens=max_tokens,
            temperature=temperature,
            system=system,
            messages=[{"role": "user", "content": user}],
        )
        if not response.content:
            raise ValueError("response has no content blocks")
        return _require_text(getattr(response.content[0], "text", None))


def _require_text(text) -> str:
    if not isinstance(text, str) or not text.strip():
        raise ValueError("response is missing generated text")
    return text.strip()


# Singleton
llm_client = LLMClient()
