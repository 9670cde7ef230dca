"""
OpenAI client singleton and answer generation.

Any OpenAI-compatible chat-completions backend works; set
``OPENAI_BASE_URL`` to route through a gateway.
"""

from __future__ import annotations

import threading

from openai import OpenAI

from techassist.core.config import settings
from techassist.core.errors import UpstreamServiceError
from techassist.schemas.response import GeneratedAnswer, TokenUsage
from techassist.utils.logging import get_logger
from techassist.utils.timing import timed

logger = get_logger("techassist.services.llm")


# ── Singleton OpenAI client ─────────────────────────────────────────
_client_lock = threading.Lock()
_client_instance: OpenAI | None = None


def get_openai_client() -> OpenAI:
    """
    Return a module-level OpenAI client singleton.

    Raises UpstreamServiceError when the API key is missing.
    """
    global _client_instance
    if _client_instance is not None:
        return _client_instance

    with _client_lock:
        if _client_instance is not None:
            return _client_instance

        if not settings.openai_api_key:
            raise UpstreamServiceError("OpenAI API key not configured (OPENAI_API_KEY).")

        _client_instance = OpenAI(
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url,
        )
        logger.info("OpenAI client singleton initialized.")
        return _client_instance


# ── Answer generation ───────────────────────────────────────────────
@timed("generate_answer")
def generate_answer(system_prompt: str, user_prompt: str) -> GeneratedAnswer:
    """
    Send the assembled prompt to the generation backend and return the
    completion text verbatim.

    Raises UpstreamServiceError on any backend failure or empty completion.
    """
    client = get_openai_client()
    try:
        response = client.chat.completions.create(
            model=settings.llm_model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            temperature=settings.llm_temperature,
        )
    except Exception as e:
        logger.error("Answer generation failed: %s", e)
        raise UpstreamServiceError(f"Failed to generate answer: {e}") from e

    content = response.choices[0].message.content if response.choices else None
    if not content:
        raise UpstreamServiceError("Failed to generate answer: empty completion")

    usage = TokenUsage()
    if getattr(response, "usage", None):
        usage = TokenUsage(
            input_tokens=getattr(response.usage, "prompt_tokens", 0) or 0,
            output_tokens=getattr(response.usage, "completion_tokens", 0) or 0,
            total_tokens=getattr(response.usage, "total_tokens", 0) or 0,
        )

    return GeneratedAnswer(content=content, usage=usage)
