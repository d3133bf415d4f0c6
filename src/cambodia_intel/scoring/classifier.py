"""Threshold-based risk classifier.

Maps a record of observations to a weighted composite score in [0, 100]
and a label from an ordered cut-point table. Trigger conditions (for
example a sanctions match) force the worst label regardless of score.

The classifier is a pure function of its inputs and configuration.
"""

import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

MAX_SUB_SCORE = 5
MIN_SUB_SCORE = 1
DEFAULT_SUB_SCORE = 3
# Sub-scores below this are reported as risk factors
RISK_FACTOR_THRESHOLD = 3


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(getattr(value, "value", value)).strip().lower()


def matches_status(value: Any, *expected: str) -> bool:
    """Case-insensitive equality against any expected status."""
    text = _text(value)
    return bool(text) and text in {e.lower() for e in expected}


def contains_any(value: Any, *needles: str) -> bool:
    """Case-insensitive substring test against any needle."""
    text = _text(value)
    return any(n.lower() in text for n in needles)


def clamp(value: float, low: float = 0, high: float = 100) -> float:
    return max(low, min(high, value))


# =============================================================================
# CONFIGURATION
# =============================================================================

@dataclass(frozen=True)
class Deduction:
    """Subtract points when a field matches one of the given statuses."""
    field: str
    matches: Tuple[str, ...]
    points: int

    def applies_to(self, record: Mapping[str, Any]) -> bool:
        return matches_status(record.get(self.field), *self.matches)


@dataclass(frozen=True)
class CategoryRule:
    """Scoring rule for one weighted category."""
    weight: float
    deductions: Tuple[Deduction, ...] = ()
    subfactors: Tuple[str, ...] = ()
    max_score: int = MAX_SUB_SCORE
    floor: int = MIN_SUB_SCORE
    default_score: int = DEFAULT_SUB_SCORE
    # When the predicate is false the category scores max_score
    applies: Optional[Callable[[Mapping[str, Any]], bool]] = None

    @property
    def fields(self) -> Tuple[str, ...]:
        return tuple(dict.fromkeys(d.field for d in self.deductions))


@dataclass(frozen=True)
class Trigger:
    """Condition that forces the worst label."""
    name: str
    field: str
    matches: Tuple[str, ...]

    def fired(self, record: Mapping[str, Any]) -> bool:
        return matches_status(record.get(self.field), *self.matches)


@dataclass(frozen=True)
class ClassifierConfig:
    categories: Mapping[str, CategoryRule]
    cut_points: Tuple[Tuple[float, str], ...]
    fallback_label: str
    triggers: Tuple[Trigger, ...] = ()
    worst_label: Optional[str] = None

    @property
    def override_label(self) -> str:
        return self.worst_label or self.fallback_label


@dataclass
class ClassificationResult:
    composite_score: int
    label: str
    category_scores: Dict[str, int]
    score_breakdown: Dict[str, int]
    triggered_overrides: List[str] = field(default_factory=list)
    defaulted_categories: List[str] = field(default_factory=list)
    risk_factors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# =============================================================================
# CLASSIFICATION
# =============================================================================

def _present(record: Mapping[str, Any], name: str) -> bool:
    value = record.get(name)
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


def score_category(rule: CategoryRule, record: Mapping[str, Any]) -> Tuple[int, bool]:
    """
    Score one category.

    Returns:
        (sub_score, defaulted) where defaulted means none of the
        category's fields were present
    """
    if rule.applies is not None and not rule.applies(record):
        return rule.max_score, False

    if rule.fields and not any(_present(record, name) for name in rule.fields):
        return rule.default_score, True

    score = rule.max_score
    for deduction in rule.deductions:
        if deduction.applies_to(record):
            score -= deduction.points

    return max(rule.floor, score), False


def label_for(score: float, cut_points: Sequence[Tuple[float, str]], fallback: str) -> str:
    """First label whose minimum the score reaches."""
    for minimum, label in cut_points:
        if score >= minimum:
            return label
    return fallback


def classify(record: Mapping[str, Any], config: ClassifierConfig) -> ClassificationResult:
    """
    Classify a record against a weighted category table.

    Args:
        record: Observations keyed by field name
        config: Category rules, cut points and triggers

    Returns:
        ClassificationResult
    """
    total = 0.0
    max_total = 0.0
    category_scores: Dict[str, int] = {}
    breakdown: Dict[str, int] = {}
    defaulted: List[str] = []

    for name, rule in config.categories.items():
        sub_score, was_defaulted = score_category(rule, record)
        if was_defaulted:
            defaulted.append(name)
            logger.debug(f"Category '{name}' absent, using default score {rule.default_score}")

        category_scores[name] = sub_score
        breakdown[name] = round(sub_score * rule.weight)
        total += sub_score * rule.weight
        max_total += rule.max_score * rule.weight

    composite = int(clamp(round(total / max_total * 100))) if max_total else 0
    label = label_for(composite, config.cut_points, config.fallback_label)

    overrides = [t.name for t in config.triggers if t.fired(record)]
    if overrides:
        label = config.override_label

    risk_factors = [
        f"{name.replace('_', ' ').title()} Risk: Below acceptable threshold"
        for name, score in category_scores.items()
        if score < RISK_FACTOR_THRESHOLD
    ]

    return ClassificationResult(
        composite_score=composite,
        label=label,
        category_scores=category_scores,
        score_breakdown=breakdown,
        triggered_overrides=overrides,
        defaulted_categories=defaulted,
        risk_factors=risk_factors,
    )


__all__ = [
    "Deduction",
    "CategoryRule",
    "Trigger",
    "ClassifierConfig",
    "ClassificationResult",
    "classify",
    "score_category",
    "label_for",
    "matches_status",
    "contains_any",
    "clamp",
]
