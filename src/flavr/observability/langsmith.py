"""
Flavr - LangSmith Integration.

Optional tracing of external generation calls. Each call becomes one `llm`
run named after its capability tier and tagged with tier and model, so
template-tier and fallback traffic can be filtered apart.

To enable:
1. Set LANGCHAIN_TRACING_V2=true
2. Set LANGCHAIN_API_KEY=<your-key>
3. Set LANGCHAIN_PROJECT=flavr (optional)
"""

import logging
from contextlib import asynccontextmanager
from uuid import uuid4

from langsmith import Client as LangSmithClient
from langsmith.run_trees import RunTree

from flavr.config import settings

logger = logging.getLogger(__name__)

_langsmith_client: LangSmithClient | None = None
_tracing_enabled: bool = False


class _NoopRun:
    """Stands in for a RunTree when tracing is disabled."""

    def end(self, **kwargs) -> None:
        pass


def init_langsmith() -> bool:
    """
    Initialize LangSmith tracing if configured.

    Returns True if tracing is enabled. Call once at startup.
    """
    global _langsmith_client, _tracing_enabled

    if not settings.langchain_tracing_v2:
        logger.info("LangSmith tracing disabled (set LANGCHAIN_TRACING_V2=true to enable)")
        return False

    if not settings.langchain_api_key:
        logger.warning("LangSmith tracing requested but LANGCHAIN_API_KEY is not set")
        return False

    try:
        _langsmith_client = LangSmithClient(api_key=settings.langchain_api_key)
    except Exception as e:
        logger.warning(f"Failed to initialize LangSmith: {e}")
        return False

    _tracing_enabled = True
    logger.info(f"LangSmith tracing enabled for project: {settings.langchain_project}")
    return True


def is_tracing_enabled() -> bool:
    return _tracing_enabled


@asynccontextmanager
async def trace_generation(
    tier: str,
    *,
    model: str,
    max_tokens: int,
    system_prompt: str,
    user_prompt: str,
):
    """
    Trace one external generation call.

    Usage:
        async with trace_generation("standard", model=..., max_tokens=...,
                                    system_prompt=..., user_prompt=...) as run:
            text = await ...
            run.end(outputs={"content": text})

    A failure inside the block is recorded on the run and re-raised.
    """
    if not _tracing_enabled:
        yield _NoopRun()
        return

    run = RunTree(
        name=f"generate_{tier}",
        run_type="llm",
        inputs={"system": system_prompt, "user": user_prompt},
        extra={"metadata": {"tier": tier, "model": model, "max_tokens": max_tokens}},
        tags=[f"tier:{tier}", f"model:{model}"],
        project_name=settings.langchain_project,
        id=str(uuid4()),
        client=_langsmith_client,
    )

    run.post()
    try:
        yield run
    except Exception as e:
        run.end(error=f"{type(e).__name__}: {e}")
        raise
    finally:
        run.patch()
