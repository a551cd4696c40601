"""
QuickAI Backend - Google Gemini Service Implementation
=======================================================

What:  Concrete LLMService backed by the Google Gemini API.
How:   Sends a single-turn prompt with a token budget and temperature, returns
       the completion text. One call per request: no retries, no timeout
       override, no streaming.
Who:   Instantiated once at import; called by ActionService.
"""

import logging
import time
import uuid

import google.generativeai as genai

from quickai.config import settings
from quickai.exceptions import LLMServiceError
from quickai.services.llm_base import LLMService

logger = logging.getLogger(__name__)


class GeminiService(LLMService):
    """
    Google Gemini implementation of the text completion gateway.

    The SDK is configured once with the API key; the model object is reused
    across requests and holds no per-request state.
    """

    def __init__(self):
        if settings.gemini_api_key:
            genai.configure(api_key=settings.gemini_api_key)

        self.model = genai.GenerativeModel(settings.gemini_model)
        self.temperature = settings.gemini_temperature

        logger.info(
            "GeminiService initialized with model=%s, temperature=%.2f",
            settings.gemini_model,
            self.temperature,
        )

    async def generate_text(self, prompt: str, max_tokens: int) -> str:
        """
        Generate a completion with Gemini.

        Flow:
            1. Build the generation config (token budget + temperature)
            2. Await generate_content_async once
            3. Return response.text as-is

        Raises:
            LLMServiceError: SDK raised, or the response carried no text
                (e.g. blocked by safety filters).
        """
        call_id = str(uuid.uuid4())[:8]
        start_time = time.perf_counter()

        logger.info(
            "[%s] Gemini completion: model=%s, max_tokens=%d, prompt_chars=%d",
            call_id,
            settings.gemini_model,
            max_tokens,
            len(prompt),
        )

        try:
            response = await self.model.generate_content_async(
                prompt,
                generation_config=genai.GenerationConfig(
                    max_output_tokens=max_tokens,
                    temperature=self.temperature,
                ),
            )
            content = response.text
        except Exception as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                "[%s] Gemini call failed after %.0fms: %s",
                call_id,
                duration_ms,
                str(e),
            )
            raise LLMServiceError(
                message=str(e) or "AI text generation failed.",
                context={"call_id": call_id, "error_type": type(e).__name__},
            ) from e

        if not content:
            raise LLMServiceError(
                message="The AI model returned an empty response.",
                context={"call_id": call_id},
            )

        duration_ms = (time.perf_counter() - start_time) * 1000
        logger.info(
            "[%s] Gemini completion finished in %.0fms, %d chars",
            call_id,
            duration_ms,
            len(content),
        )
        return content

    async def health_check(self) -> bool:
        """
        Check if Gemini API is reachable.

        How:     Lists available models (no token cost).
        Returns: True if reachable and authenticated, False otherwise.
        """
        try:
            models = genai.list_models()
            model_names = [m.name for m in models]
            target = f"models/{settings.gemini_model}"
            if target not in model_names:
                logger.warning("Configured model %s not found in available models", target)
            return True
        except Exception as e:
            logger.warning("Gemini health check failed: %s", str(e))
            return False


# ── Singleton Instance ────────────────────────────────────────────────────
gemini_service = GeminiService()
