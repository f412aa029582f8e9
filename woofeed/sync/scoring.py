#===========================================================================
# woofeed/sync/scoring.py
# Weighted completeness score per category and overall.
#===========================================================================
from __future__ import annotations

import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Sequence, Tuple

from woofeed.models.results import CategoryScore, FieldIssue, FieldResult, ScoreResult
from woofeed.spec.feed_spec import ATTRIBUTE_SPECS, CATEGORY_CONFIG
from woofeed.sync.components.util import is_empty


def _default_weights() -> Mapping[str, float]:
    return MappingProxyType({"Required": 3.0, "Recommended": 2.0, "Conditional": 1.5, "Optional": 1.0})


@dataclass(frozen=True)
class ScoringConfig:
    weights: Mapping[str, float] = field(default_factory=_default_weights)
    warning_credit: float = 0.5
    # (minimum score, grade), highest first; anything below the last is Poor
    grade_thresholds: Tuple[Tuple[int, str], ...] = ((80, "Excellent"), (60, "Good"), (40, "Needs Work"))
    floor_grade: str = "Poor"
    # Missing fields without an issue still count toward the possible total,
    # so an incomplete product cannot reach 100.
    missing_counts_against_total: bool = True

    def weight_for(self, requirement: str) -> float:
        return self.weights.get(requirement, 1.0)

    def grade(self, score: int) -> str:
        for minimum, label in self.grade_thresholds:
            if score >= minimum:
                return label
        return self.floor_grade


DEFAULT_SCORING_CONFIG = ScoringConfig()


def round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def _percent(earned: float, possible: float) -> int:
    return round_half_up(100 * earned / possible) if possible > 0 else 0


def _issue_map(issues: Iterable[Any]) -> Dict[str, str]:
    out: Dict[str, str] = {}
    for i in issues or []:
        if isinstance(i, FieldIssue):
            f, msg = i.field, i.error
        elif isinstance(i, dict):
            f, msg = i.get("field"), i.get("error")
        else:
            continue
        # first issue per field is the one reported
        if f and f not in out:
            out[f] = msg or ""
    return out


def compute_score(
    attribute_set: Mapping[str, Any] | None,
    errors: Sequence[Any] = (),
    warnings: Sequence[Any] = (),
    skip_fields: Iterable[str] = (),
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> ScoreResult:
    values = attribute_set or {}
    skip = frozenset(skip_fields)
    error_map = _issue_map(errors)
    warning_map = _issue_map(warnings)

    per_category: Dict[str, List[FieldResult]] = {k: [] for k in CATEGORY_CONFIG}
    earned_by_cat: Dict[str, float] = {k: 0.0 for k in CATEGORY_CONFIG}
    possible_by_cat: Dict[str, float] = {k: 0.0 for k in CATEGORY_CONFIG}

    error_count = warning_count = passed_count = checked = with_value = 0

    for spec in ATTRIBUTE_SPECS:
        attribute = spec.attribute
        value = values.get(attribute)
        present = not is_empty(value)
        base = dict(
            attribute=attribute,
            requirement=spec.requirement,
            value=value if present else None,
            description=spec.description,
        )

        if attribute in skip:
            per_category[spec.category].append(FieldResult(status="skipped", **base))
            continue

        weight = config.weight_for(spec.requirement)
        counts_toward_total = True

        if attribute in error_map:
            status, message, points = "error", error_map[attribute], 0.0
            error_count += 1
        elif attribute in warning_map:
            status, message, points = "warning", warning_map[attribute], weight * config.warning_credit
            warning_count += 1
        elif present:
            status, message, points = "pass", None, weight
            passed_count += 1
        else:
            status, message, points = "missing", f"{attribute} is not provided", 0.0
            counts_toward_total = config.missing_counts_against_total

        if present:
            with_value += 1
        checked += 1

        earned_by_cat[spec.category] += points
        if counts_toward_total:
            possible_by_cat[spec.category] += weight

        per_category[spec.category].append(FieldResult(status=status, message=message, **base))

    category_scores = [
        CategoryScore(
            key=key,
            label=info.label,
            order=info.order,
            score=_percent(earned_by_cat[key], possible_by_cat[key]),
            fields=per_category[key],
        )
        for key, info in CATEGORY_CONFIG.items()
    ]

    common = dict(
        error_count=error_count,
        warning_count=warning_count,
        passed_count=passed_count,
        total_fields_checked=checked,
        category_scores=category_scores,
    )

    # nothing detected at all is reported apart from "detected but wrong"
    if with_value == 0:
        return ScoreResult(overall=0, grade=config.floor_grade, no_data_found=True, **common)

    overall = _percent(sum(earned_by_cat.values()), sum(possible_by_cat.values()))
    return ScoreResult(overall=overall, grade=config.grade(overall), no_data_found=False, **common)
