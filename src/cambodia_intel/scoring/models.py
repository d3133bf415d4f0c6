"""Small result records produced by the scoring helpers."""

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional


@dataclass
class Recommendation:
    category: str
    recommendation: str
    priority: str
    rationale: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class NextStep:
    step: str
    deadline: str
    responsibility: str
    priority: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        if self.priority is None:
            data.pop("priority")
        return data


@dataclass
class ActionItem:
    """A servicing or follow-up action assigned to a role."""
    action: str
    priority: str
    deadline: str
    responsibility: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
