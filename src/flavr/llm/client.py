"""
Flavr - Generation Client.

Every external generation call goes through a GenerativeBackend: system
instruction + user instruction + capability tier + output ceiling in,
raw text out. The OpenAI implementation requests JSON-object output but
returns the text untouched; parsing and repair happen in flavr.llm.repair.
"""

import asyncio
import logging
from typing import Protocol

import openai
from openai import AsyncOpenAI

from flavr.config import settings
from flavr.errors import FlavrError, GenerationError, GenerationTimeoutError
from flavr.llm.model_router import get_model_config
from flavr.llm.prompt_logger import log_prompt
from flavr.observability.langsmith import trace_generation

logger = logging.getLogger(__name__)


class GenerativeBackend(Protocol):
    """External generative service."""

    async def complete(
        self,
        *,
        system_prompt: str,
        user_prompt: str,
        tier: str,
        max_tokens: int,
    ) -> str:
        """
        Return the model's raw text.

        Raises:
            GenerationError: On service, quota or empty-response errors
        """
        ...


class OpenAIBackend:
    """GenerativeBackend over the OpenAI chat completions API."""

    def __init__(self, client: AsyncOpenAI | None = None) -> None:
        self._client = client

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI(api_key=settings.openai_api_key)
        return self._client

    async def complete(
        self,
        *,
        system_prompt: str,
        user_prompt: str,
        tier: str,
        max_tokens: int,
    ) -> str:
        config = get_model_config(tier)
        model = config["model"]

        async with trace_generation(
            tier,
            model=model,
            max_tokens=max_tokens,
            system_prompt=system_prompt,
            user_prompt=user_prompt,
        ) as run:
            try:
                completion = await self.client.chat.completions.create(
                    model=model,
                    messages=[
                        {"role": "system", "content": system_prompt},
                        {"role": "user", "content": user_prompt},
                    ],
                    temperature=config.get("temperature", 0.7),
                    max_tokens=max_tokens,
                    response_format={"type": "json_object"},
                )
            except openai.OpenAIError as e:
                log_prompt(
                    tier=tier,
                    model=model,
                    system_prompt=system_prompt,
                    user_prompt=user_prompt,
                    max_tokens=max_tokens,
                    error=str(e),
                )
                raise GenerationError(f"{model} call failed: {e}") from e

            choice = completion.choices[0]
            content = choice.message.content or ""
            log_prompt(
                tier=tier,
                model=model,
                system_prompt=system_prompt,
                user_prompt=user_prompt,
                max_tokens=max_tokens,
                response=content,
            )
            run.end(outputs={"content": content, "finish_reason": choice.finish_reason})

        if choice.finish_reason == "length":
            logger.warning(f"{model} response truncated at {max_tokens} tokens")
        if not content.strip():
            raise GenerationError(f"Empty response from {model}")
        return content


def _discard_late_result(task: asyncio.Future) -> None:
    """Consume the outcome of an abandoned call so it is never reported as unhandled."""
    if task.cancelled():
        return
    error = task.exception()
    if error is not None:
        logger.debug(f"Abandoned generation call failed late: {error}")
    else:
        logger.debug("Abandoned generation call completed late; result discarded")


async def complete_within(
    backend: GenerativeBackend,
    timeout: float,
    *,
    system_prompt: str,
    user_prompt: str,
    tier: str,
    max_tokens: int,
) -> str:
    """
    Run one backend call under a wall-clock timeout.

    On expiry the call is abandoned, not cancelled: it keeps running in the
    background and its late result is discarded.

    Raises:
        GenerationTimeoutError: If the call did not finish within `timeout`
        GenerationError: If the backend failed
    """
    task = asyncio.ensure_future(
        backend.complete(
            system_prompt=system_prompt,
            user_prompt=user_prompt,
            tier=tier,
            max_tokens=max_tokens,
        )
    )
    try:
        return await asyncio.wait_for(asyncio.shield(task), timeout)
    except asyncio.TimeoutError:
        task.add_done_callback(_discard_late_result)
        raise GenerationTimeoutError(f"Generation at tier '{tier}' exceeded {timeout:g}s") from None
    except FlavrError:
        raise
    except Exception as e:
        raise GenerationError(f"Generation at tier '{tier}' failed: {type(e).__name__}: {e}") from e
