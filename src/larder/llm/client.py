"""
Larder - LLM Client.

Thin wrapper around the OpenAI chat completions API. All model calls go
through here so model, temperature and token limits come from one place.
"""

import logging
from typing import Any

from openai import AsyncOpenAI

from larder.config import settings
from larder.errors import LarderError

logger = logging.getLogger(__name__)

# Singleton client instance
_client: AsyncOpenAI | None = None


def is_configured() -> bool:
    return bool(settings.openai_api_key)


def get_client() -> AsyncOpenAI:
    """
    Get the OpenAI client.

    Uses singleton pattern to reuse connection.
    """
    global _client

    if _client is None:
        if not is_configured():
            raise LarderError("OpenAI is not configured (set OPENAI_API_KEY)")
        _client = AsyncOpenAI(api_key=settings.openai_api_key)

    return _client


async def complete(
    messages: list[dict[str, Any]],
    tools: list[dict[str, Any]] | None = None,
    client: AsyncOpenAI | None = None,
) -> Any:
    """
    Make one chat completion call.

    Args:
        messages: Chat messages (system, user, assistant, tool)
        tools: Function definitions the model may call
        client: Client to use instead of the shared one

    Returns:
        The first choice's message (content and/or tool_calls)
    """
    client = client or get_client()

    api_kwargs: dict[str, Any] = {
        "model": settings.openai_model,
        "messages": messages,
        "temperature": settings.openai_temperature,
        "max_tokens": settings.openai_max_tokens,
    }
    if tools:
        api_kwargs["tools"] = tools

    logger.debug(f"LLM call: model={settings.openai_model}, messages={len(messages)}, tools={len(tools or [])}")
    response = await client.chat.completions.create(**api_kwargs)
    return response.choices[0].message
