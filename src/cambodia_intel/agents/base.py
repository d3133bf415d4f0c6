"""Shared analysis plumbing for the domain agents.

Every analyze coroutine does the same thing: compute local fields from the
request, render a registered prompt, await one executor call and wrap both
into an AnalysisResult. Upstream failures become failure records; they are
logged and never raised.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Type

from ..config.prompts import build_prompt, get_execution_options
from ..config.schemas import TAG_SYNONYMS, TagEnum
from ..utils.helpers import thaw
from .executor import CommandExecutor, ExecutionOptions, get_default_executor

logger = logging.getLogger(__name__)

ERROR_SUMMARY = {"status": "error"}


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class AnalysisResult:
    """Narrative analysis plus locally derived fields."""
    analysis: str
    success: bool = True
    ai_used: Optional[str] = None
    error: Optional[str] = None
    timestamp: str = field(default_factory=_now)
    fields: Dict[str, Any] = field(default_factory=dict)

    BASE_KEYS = ("analysis", "success", "ai_used", "error", "timestamp")

    def to_dict(self) -> Dict[str, Any]:
        """Flat wire form: base keys plus every derived field at top level."""
        data = {
            "analysis": self.analysis,
            "success": self.success,
            "ai_used": self.ai_used,
            "error": self.error,
            "timestamp": self.timestamp,
        }
        data.update(thaw(self.fields))
        return data

    def to_json(self, **kwargs) -> str:
        return json.dumps(self.to_dict(), default=str, **kwargs)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AnalysisResult":
        return cls(
            analysis=data.get("analysis", ""),
            success=bool(data.get("success", False)),
            ai_used=data.get("ai_used"),
            error=data.get("error"),
            timestamp=data.get("timestamp") or _now(),
            fields={k: v for k, v in data.items() if k not in cls.BASE_KEYS},
        )

    @classmethod
    def from_json(cls, text: str) -> "AnalysisResult":
        return cls.from_dict(json.loads(text))

    def __getitem__(self, key: str) -> Any:
        return self.to_dict()[key]


def resolve_executor(executor: Optional[CommandExecutor]) -> CommandExecutor:
    return executor if executor is not None else get_default_executor()


def format_bullets(data: Mapping[str, Any]) -> str:
    """Render a mapping as "• Key: value" lines for prompt text."""
    lines = []
    for key, value in data.items():
        label = str(key).replace("_", " ").title()
        if isinstance(value, (list, tuple)):
            value = ", ".join(str(v) for v in value)
        lines.append(f"• {label}: {value}")
    return "\n".join(lines)


# =============================================================================
# FREE-TEXT EXTRACTION
# =============================================================================

_AMOUNT_RE = re.compile(r"\$?\s*(\d[\d,]*(?:\.\d+)?)\s*(k|m|thousand|million)?\b", re.IGNORECASE)
_MULTIPLIERS = {"k": 1_000, "thousand": 1_000, "m": 1_000_000, "million": 1_000_000}


def detect_tag(enum_cls: Type[TagEnum], text: Optional[str]) -> Optional[TagEnum]:
    """First enum member whose value, name or synonym appears in the text."""
    if not text:
        return None
    haystack = re.sub(r"[^a-z0-9]", "", text.lower())
    for member in enum_cls:
        if member.name == "OTHER":
            continue
        for needle in (member.value, member.name):
            if re.sub(r"[^a-z0-9]", "", needle.lower()) in haystack:
                return member
    # Short synonyms ("pp") would match inside unrelated words
    for synonym, value in TAG_SYNONYMS.get(enum_cls.__name__, {}).items():
        if len(synonym) >= 4 and synonym in haystack:
            return enum_cls(value)
    return None


def parse_amount(value: Any) -> Optional[float]:
    """Dollar amount from a number or text like "$150,000" or "2.5M"."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    matches = list(_AMOUNT_RE.finditer(str(value)))
    if not matches:
        return None
    # Prefer "$50,000" or "50k" over a bare number such as "3 years"
    marked = [m for m in matches if m.group(0).lstrip().startswith("$") or m.group(2)]
    match = (marked or matches)[0]
    amount = float(match.group(1).replace(",", ""))
    suffix = (match.group(2) or "").lower()
    return amount * _MULTIPLIERS.get(suffix, 1)


def find_term(text: Optional[str], terms: Sequence[str]) -> Optional[str]:
    """First listed term contained in the text (case-insensitive)."""
    lowered = (text or "").lower()
    for term in terms:
        if term.lower() in lowered:
            return term
    return None


def _failed(title: str, error: Exception, fields: Dict[str, Any], summary_key: str) -> AnalysisResult:
    fields[summary_key] = dict(ERROR_SUMMARY)
    return AnalysisResult(
        analysis=f"{title} unavailable: {error}",
        success=False,
        error=str(error),
        fields=fields,
    )


async def run_analysis(
    prompt_id: str,
    variables: Dict[str, Any],
    *,
    summary_key: str,
    derive: Optional[Callable[[], Dict[str, Any]]] = None,
    executor: Optional[CommandExecutor] = None,
    session_id: Optional[str] = None,
    transport: Optional[Any] = None,
) -> AnalysisResult:
    """
    Render a prompt, run it and attach derived fields.

    Args:
        prompt_id: Registered prompt to render
        variables: Template (and title) variables
        summary_key: Field replaced by {"status": "error"} when the call raises
        derive: Pure function returning the locally computed fields
        executor: Executor to use (defaults to the LangChain executor)

    Returns:
        AnalysisResult; success is False when the prompt could not be
        rendered or the upstream call failed
    """
    fields = derive() if derive else {}
    title = prompt_id

    try:
        options = ExecutionOptions.from_dict(get_execution_options(prompt_id, **variables))
        title = options.title or title
        prompt = build_prompt(prompt_id, **variables)
    except (KeyError, IndexError, TypeError, ValueError) as e:
        logger.error(f"Prompt '{prompt_id}' could not be rendered: {e!r}")
        return _failed(title, e, fields, summary_key)

    try:
        result = await resolve_executor(executor).execute(
            prompt,
            session_id=session_id,
            transport=transport,
            options=options,
        )
    except Exception as e:
        logger.error(f"{title} failed: {e}")
        return _failed(title, e, fields, summary_key)

    if not result.success:
        logger.warning(f"{title} returned no analysis: {result.response}")
        return AnalysisResult(
            analysis=result.response,
            success=False,
            ai_used=result.ai_used,
            error=result.response,
            fields=fields,
        )

    return AnalysisResult(
        analysis=result.response,
        success=True,
        ai_used=result.ai_used,
        fields=fields,
    )


__all__ = [
    "AnalysisResult",
    "detect_tag",
    "find_term",
    "format_bullets",
    "parse_amount",
    "resolve_executor",
    "run_analysis",
]
