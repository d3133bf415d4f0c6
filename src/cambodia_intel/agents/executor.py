"""Command Executor - the single upstream call every analysis makes.

Domain agents build a prompt and hand it to a CommandExecutor together with
ExecutionOptions. The default implementation runs the prompt through a
LangChain chat model created by config.llm.
"""

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass
from functools import lru_cache
from typing import Any, Dict, Optional

from langchain_core.messages import HumanMessage

from ..config.llm import get_chat_model, get_model_id

logger = logging.getLogger(__name__)


@dataclass
class ExecutionOptions:
    """Per-call options. Unset fields fall back to provider defaults."""
    title: Optional[str] = None
    force_model: Optional[str] = None
    max_output_tokens: Optional[int] = None
    reasoning_effort: Optional[str] = None
    verbosity: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "ExecutionOptions":
        data = data or {}
        return cls(**{k: data.get(k) for k in cls.__dataclass_fields__})

    def to_dict(self) -> Dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}


@dataclass
class ExecutionResult:
    """Text returned by the executor and whether it succeeded."""
    response: str
    success: bool
    ai_used: Optional[str] = None


class CommandExecutor(ABC):
    """Runs one prompt against an AI service."""

    @abstractmethod
    async def execute(
        self,
        prompt: str,
        session_id: Optional[str] = None,
        transport: Optional[Any] = None,
        options: Optional[ExecutionOptions] = None,
    ) -> ExecutionResult:
        ...


class LangChainExecutor(CommandExecutor):
    """
    Executor backed by a LangChain chat model.

    force_model selects a model alias (primary, fast, balanced) or a raw
    model id; max_output_tokens maps to max_tokens. Reasoning effort and
    verbosity travel as request metadata.
    """

    def __init__(self, provider: Optional[str] = None, default_model: str = "primary"):
        self.provider = provider
        self.default_model = default_model

    async def execute(
        self,
        prompt: str,
        session_id: Optional[str] = None,
        transport: Optional[Any] = None,
        options: Optional[ExecutionOptions] = None,
    ) -> ExecutionResult:
        options = options or ExecutionOptions()
        model = options.force_model or self.default_model
        title = options.title or "Analysis"

        llm = get_chat_model(
            model=model,
            provider=self.provider,
            max_tokens=options.max_output_tokens,
        )
        if llm is None:
            logger.warning(f"[{title}] No chat model available for '{model}'")
            return ExecutionResult(
                response="AI analysis unavailable: no LLM provider configured",
                success=False,
            )

        model_id = get_model_id(model, self.provider)
        metadata = {
            "title": title,
            "session_id": session_id,
            "reasoning_effort": options.reasoning_effort,
            "verbosity": options.verbosity,
        }

        start_time = time.time()
        response = await llm.ainvoke(
            [HumanMessage(content=prompt)],
            config={"metadata": {k: v for k, v in metadata.items() if v is not None}},
        )
        elapsed_ms = (time.time() - start_time) * 1000

        usage = getattr(response, "usage_metadata", None) or {}
        logger.info(
            f"[{title}] {model_id}: {elapsed_ms:.0f}ms, "
            f"tokens: {usage.get('total_tokens', 'n/a')}"
        )

        return ExecutionResult(response=response.content, success=True, ai_used=model_id)


@lru_cache(maxsize=1)
def get_default_executor() -> CommandExecutor:
    """Process-wide LangChain executor for the configured provider."""
    return LangChainExecutor()


__all__ = [
    "ExecutionOptions",
    "ExecutionResult",
    "CommandExecutor",
    "LangChainExecutor",
    "get_default_executor",
]
