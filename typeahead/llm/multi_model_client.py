# typeahead/llm/multi_model_client.py

import os
import logging
import time
from typing import Dict, List, Optional

from openai import AsyncOpenAI
import google.generativeai as genai

from typeahead.config import (
    AI_PROVIDER,
    GEMINI_CHAT_MODEL,
    OPENAI_CHAT_MODEL,
)

logger = logging.getLogger(__name__)


class MultiModelLLMClient:
    """
    Async multi-provider text generator.

    Fallback order:

    1. AI_PROVIDER (openai by default)
    2. the other configured provider

    Guarantees:
    • single call per provider, no retry loops
    • provider latency tracking
    • raises RuntimeError only when every provider failed
    """

    PROVIDERS = ("openai", "gemini")

    def __init__(self, preferred_provider: str = AI_PROVIDER):

        self.openai: Optional[AsyncOpenAI] = None

        self.openai_available = False
        self.gemini_available = False

        self._init_openai()
        self._init_gemini()

        preferred = preferred_provider if preferred_provider in self.PROVIDERS else "openai"

        self._order = [preferred] + [p for p in self.PROVIDERS if p != preferred]

        logger.info(
            "LLM initialization complete",
            extra={
                "provider_order": self._order,
                "openai_available": self.openai_available,
                "gemini_available": self.gemini_available,
            },
        )

    # ============================================================
    # INITIALIZATION
    # ============================================================

    def _init_openai(self):

        try:

            key = os.getenv("OPENAI_API_KEY")

            if key and key.startswith("sk-"):

                self.openai = AsyncOpenAI(api_key=key)

                self.openai_available = True

                logger.info("OpenAI initialized successfully")

            else:

                logger.warning("OpenAI API key missing or invalid")

        except Exception as e:

            logger.error(
                "OpenAI initialization failed",
                extra={"error": str(e)},
            )

    def _init_gemini(self):

        try:

            key = os.getenv("GEMINI_API_KEY")

            if not key:

                logger.warning("Gemini API key missing")
                return

            genai.configure(api_key=key)

            self.gemini_available = True

            logger.info("Gemini initialized successfully")

        except Exception as e:

            logger.error(
                "Gemini initialization failed",
                extra={"error": str(e)},
            )

    # ============================================================
    # PUBLIC API
    # ============================================================

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        max_tokens: int = 150,
        temperature: float = 0.3,
    ) -> str:

        return await self.chat(
            system_prompt=system_prompt,
            messages=[{"role": "user", "content": user_prompt}],
            max_tokens=max_tokens,
            temperature=temperature,
        )

    async def chat(
        self,
        system_prompt: str,
        messages: List[Dict[str, str]],
        max_tokens: int = 500,
        temperature: float = 0.7,
    ) -> str:

        logger.info(
            "LLM request started",
            extra={
                "provider_order": self._order,
                "messages": len(messages),
                "max_tokens": max_tokens,
            },
        )

        for provider in self._order:

            if not self._available(provider):
                continue

            fn = self._generate_openai if provider == "openai" else self._generate_gemini

            try:

                return await self._timed_call(
                    provider=provider,
                    fn=fn,
                    system_prompt=system_prompt,
                    messages=messages,
                    max_tokens=max_tokens,
                    temperature=temperature,
                )

            except Exception as e:

                logger.warning(
                    f"{provider} failed",
                    extra={"provider": provider, "error": str(e)},
                )

        raise RuntimeError("No LLM backend available")

    # ============================================================
    # PROVIDERS
    # ============================================================

    async def _generate_openai(self, system_prompt, messages, max_tokens, temperature) -> str:

        response = await self.openai.chat.completions.create(
            model=OPENAI_CHAT_MODEL,
            messages=[{"role": "system", "content": system_prompt}, *messages],
            temperature=temperature,
            max_tokens=max_tokens,
        )

        text = response.choices[0].message.content or ""

        return text.strip()

    async def _generate_gemini(self, system_prompt, messages, max_tokens, temperature) -> str:

        model = genai.GenerativeModel(model_name=GEMINI_CHAT_MODEL)

        # Gemini has no system role: the system prompt goes first as a
        # user turn and assistant turns become "model" turns.
        contents = [{"role": "user", "parts": [system_prompt]}]

        for message in messages:
            role = "model" if message["role"] == "assistant" else "user"
            contents.append({"role": role, "parts": [message["content"]]})

        response = await model.generate_content_async(
            contents,
            generation_config=genai.types.GenerationConfig(
                max_output_tokens=max_tokens,
                temperature=temperature,
            ),
        )

        if not response or not response.text:
            raise RuntimeError("Gemini returned empty response")

        return response.text.strip()

    # ============================================================
    # LATENCY OBSERVABILITY
    # ============================================================

    async def _timed_call(self, provider: str, fn, **kwargs) -> str:

        start = time.time()

        result = await fn(**kwargs)

        latency = time.time() - start

        logger.info(
            "LLM provider success",
            extra={
                "provider": provider,
                "latency_seconds": round(latency, 3),
            },
        )

        return result

    # ============================================================
    # STATUS
    # ============================================================

    def _available(self, provider: str) -> bool:

        if provider == "openai":
            return self.openai_available

        return self.gemini_available

    def get_usage_stats(self) -> Dict:

        return {
            "preferred_provider": self._order[0],
            "openai_available": self.openai_available,
            "gemini_available": self.gemini_available,
        }
