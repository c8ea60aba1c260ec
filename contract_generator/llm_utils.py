"""
LLM Utilities - chat completion wrapper and error mapping
"""

from typing import List, Optional

import openai
from openai import AsyncOpenAI

from healing.errors import GenerationError


async def call_chat_completion(
    client: AsyncOpenAI,
    model: str,
    messages: List[dict],
    timeout: Optional[float] = 120,
    debug: bool = False,
    **kwargs,
) -> str:
    """
    Single chat completion call returning the message text.

    Transport failures are not retried here; callers decide what a failed
    call means for their step.

    Args:
        client: AsyncOpenAI client instance
        model: Model name (e.g., "gpt-4o")
        messages: Chat messages
        timeout: Request timeout in seconds
        debug: Enable debug output
        **kwargs: Additional arguments for chat.completions.create

    Returns:
        Raw text content of the first choice

    Raises:
        GenerationError: API/transport failure or empty response
    """
    try:
        response = await client.chat.completions.create(
            model=model,
            messages=messages,
            timeout=timeout,
            **kwargs,
        )
    except openai.OpenAIError as e:
        if debug:
            print(f"LLM call failed: {e}")
        raise GenerationError(f"Model request failed: {e}") from e

    if not response.choices:
        raise GenerationError("No choices returned from model")

    content = response.choices[0].message.content
    if not content or not content.strip():
        raise GenerationError("No content returned from model")
    return content
