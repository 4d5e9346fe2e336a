"""LLM client for report narratives: OpenAI first, Gemini as fallback."""

import asyncio
import logging
import os
import time
from dataclasses import dataclass, field
from typing import Any, Optional

import openai
import google.generativeai as genai

from localseo.utils.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)


@dataclass
class UsageStats:
    """Token usage and estimated spend."""
    total_input_tokens: int = 0
    total_output_tokens: int = 0
    total_requests: int = 0
    monthly_cost_usd: float = 0.0
    month_start: float = field(default_factory=time.time)

    def add_usage(self, input_tokens: int, output_tokens: int,
                  cost_per_1k_input: float = 0.00015,
                  cost_per_1k_output: float = 0.0006) -> float:
        """Record a call and return its cost."""
        cost = (input_tokens / 1000) * cost_per_1k_input + \
               (output_tokens / 1000) * cost_per_1k_output
        self.total_input_tokens += input_tokens
        self.total_output_tokens += output_tokens
        self.total_requests += 1
        self.monthly_cost_usd += cost
        return cost


class LLMClient:
    """Async text generation with provider fallback.

    Usage::

        client = LLMClient()
        if client.configured:
            summary = await client.generate_text("Summarize this Local SEO report ...")
    """

    def __init__(
        self,
        openai_api_key: Optional[str] = None,
        gemini_api_key: Optional[str] = None,
        openai_model: str = "gpt-4o-mini",
        gemini_model: str = "gemini-2.0-flash",
        max_tokens: int = 800,
        temperature: float = 0.4,
        timeout: int = 60,
        openai_rpm: int = 60,
        gemini_rpm: int = 15,
        max_monthly_budget: float = 20.0,
    ):
        self._openai_key = openai_api_key or os.getenv("OPENAI_API_KEY", "")
        self._gemini_key = gemini_api_key or os.getenv("GEMINI_API_KEY", "")
        self._openai_model = openai_model
        self._gemini_model = gemini_model
        self._max_tokens = max_tokens
        self._temperature = temperature

        self._timeout = timeout
        # Built on first use and dropped by close(); its connection pool belongs to one event loop.
        self._openai_client: Optional[openai.AsyncOpenAI] = None
        if self._gemini_key:
            genai.configure(api_key=self._gemini_key)

        self._openai_limiter = RateLimiter(openai_rpm, name="openai")
        self._gemini_limiter = RateLimiter(gemini_rpm, name="gemini")

        self.usage = UsageStats()
        self._max_monthly_budget = max_monthly_budget

    @classmethod
    def from_config(cls, llm_config: Optional[dict[str, Any]]) -> "LLMClient":
        """Build from the ``llm`` section of settings.yaml."""
        cfg = llm_config or {}
        return cls(
            openai_model=cfg.get("openai_model", "gpt-4o-mini"),
            gemini_model=cfg.get("gemini_model", "gemini-2.0-flash"),
            max_tokens=cfg.get("max_tokens", 800),
            temperature=cfg.get("temperature", 0.4),
            max_monthly_budget=cfg.get("max_monthly_budget", 20.0),
        )

    @property
    def configured(self) -> bool:
        return bool(self._openai_key or self._gemini_key)

    async def generate_text(
        self,
        prompt: str,
        system_prompt: str = "You are a local SEO consultant.",
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> str:
        """Generate text, falling back to Gemini when OpenAI fails.

        Raises:
            RuntimeError: If no provider is configured.
        """
        max_tokens = max_tokens or self._max_tokens
        temperature = temperature if temperature is not None else self._temperature

        if self._openai_key:
            try:
                return await self._call_openai(prompt, system_prompt, max_tokens, temperature)
            except Exception as exc:
                if not self._gemini_key:
                    raise
                logger.warning("OpenAI call failed: %s; falling back to Gemini", exc)

        if self._gemini_key:
            return await self._call_gemini(prompt, system_prompt, max_tokens, temperature)

        raise RuntimeError("No LLM provider configured. Set OPENAI_API_KEY or GEMINI_API_KEY.")

    async def close(self) -> None:
        """Close the OpenAI HTTP client; the next call opens a new one."""
        if self._openai_client is not None:
            client, self._openai_client = self._openai_client, None
            await client.close()

    async def _call_openai(
        self, prompt: str, system_prompt: str, max_tokens: int, temperature: float
    ) -> str:
        self._check_budget()
        await self._openai_limiter.acquire()

        if self._openai_client is None:
            self._openai_client = openai.AsyncOpenAI(api_key=self._openai_key, timeout=self._timeout)
        response = await self._openai_client.chat.completions.create(
            model=self._openai_model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": prompt},
            ],
            max_tokens=max_tokens,
            temperature=temperature,
        )
        text = response.choices[0].message.content or ""
        usage = response.usage
        if usage:
            cost = self.usage.add_usage(usage.prompt_tokens, usage.completion_tokens)
            logger.info(
                "OpenAI call: %d in / %d out tokens, $%.6f",
                usage.prompt_tokens, usage.completion_tokens, cost,
            )
        return text.strip()

    async def _call_gemini(
        self, prompt: str, system_prompt: str, max_tokens: int, temperature: float
    ) -> str:
        await self._gemini_limiter.acquire()

        model = genai.GenerativeModel(
            model_name=self._gemini_model,
            system_instruction=system_prompt,
            generation_config=genai.types.GenerationConfig(
                max_output_tokens=max_tokens,
                temperature=temperature,
            ),
        )
        # The Gemini SDK call is synchronous.
        response = await asyncio.to_thread(model.generate_content, prompt)
        text = response.text or ""
        logger.info("Gemini call completed (len=%d)", len(text))
        return text.strip()

    def _check_budget(self) -> None:
        if self.usage.monthly_cost_usd >= self._max_monthly_budget:
            raise RuntimeError(
                f"Monthly LLM budget exceeded: ${self.usage.monthly_cost_usd:.2f} "
                f">= ${self._max_monthly_budget:.2f}"
            )
