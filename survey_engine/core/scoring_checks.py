# survey_engine/core/scoring_checks.py
"""Authoring-time checks and clean-up for a survey's scoring configuration.

Nothing here runs during scoring; these report what a builder should fix
before a survey is published.
"""
from __future__ import annotations

import math
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from survey_engine.core.bands import bands_for
from survey_engine.core.scoring import is_scorable
from survey_engine.models.base import Number
from survey_engine.models.question import Question, QuestionType as T
from survey_engine.models.scoring import (
    CategoryResultConfig,
    ConfigIssue,
    ResultsScreenConfig,
    ScoreBand,
    ScoreConfig,
    Severity,
)

MAX_SCORE_WEIGHT = 1000
OPTION_SCORED_TYPES = frozenset({T.MULTIPLE_CHOICE, T.DROPDOWN, T.YES_NO, T.CHECKBOX})


def _short(text: str, n: int = 50) -> str:
    return text if len(text) <= n else text[:n] + "..."


def _fmt(x: Number) -> str:
    return f"{x:g}"


# ============================== bands ==============================
def _check_band_coverage(bands: List[ScoreBand]) -> List[ConfigIssue]:
    if not bands:
        return [ConfigIssue(
            code="NO_BANDS_DEFINED",
            severity="warning",
            message="Scoring is enabled but no score bands are defined",
        )]

    issues: List[ConfigIssue] = []
    covered = 0
    for band in sorted(bands, key=lambda b: b.min):
        if band.min > covered:
            issues.append(ConfigIssue(
                code="BAND_GAP",
                severity="error",
                message=f"Score range {_fmt(covered)}-{_fmt(band.min - 1)} has no assigned band",
                details={"gapStart": covered, "gapEnd": band.min - 1},
            ))
        covered = max(covered, band.max + 1)
    if covered <= 100:
        issues.append(ConfigIssue(
            code="BAND_GAP",
            severity="error",
            message=f"Score range {_fmt(covered)}-100 has no assigned band",
            details={"gapStart": covered, "gapEnd": 100},
        ))
    return issues


def _check_band_overlaps(bands: List[ScoreBand]) -> List[ConfigIssue]:
    issues: List[ConfigIssue] = []
    for i, a in enumerate(bands):
        for b in bands[i + 1:]:
            if a.min <= b.max and b.min <= a.max:
                start, end = max(a.min, b.min), min(a.max, b.max)
                issues.append(ConfigIssue(
                    code="BAND_OVERLAP",
                    severity="error",
                    message=f'Bands "{a.label}" and "{b.label}" overlap in range {_fmt(start)}-{_fmt(end)}',
                    band_id=a.id,
                    details={"otherBandId": b.id, "overlapStart": start, "overlapEnd": end},
                ))
    return issues


def _check_band_bounds(bands: List[ScoreBand]) -> List[ConfigIssue]:
    issues: List[ConfigIssue] = []
    for band in bands:
        if band.min >= band.max:
            issues.append(ConfigIssue(
                code="INVALID_BAND_RANGE",
                severity="error",
                message=f'Band "{band.label}" has invalid range: min ({_fmt(band.min)}) >= max ({_fmt(band.max)})',
                band_id=band.id,
                details={"min": band.min, "max": band.max},
            ))
        if band.min < 0:
            issues.append(ConfigIssue(
                code="BAND_OUT_OF_RANGE",
                severity="error",
                message=f'Band "{band.label}" has negative min value ({_fmt(band.min)})',
                band_id=band.id,
            ))
        if band.max > 100:
            issues.append(ConfigIssue(
                code="BAND_OUT_OF_RANGE",
                severity="warning",
                message=f'Band "{band.label}" max value ({_fmt(band.max)}) exceeds 100',
                band_id=band.id,
            ))
    return issues


# ============================== categories ==============================
def _check_category_usage(questions: Sequence[Question], config: ScoreConfig) -> List[ConfigIssue]:
    used = {q.scoring_category for q in questions if is_scorable(q) and q.scoring_category}
    return [
        ConfigIssue(
            code="UNUSED_CATEGORY",
            severity="warning",
            message=f'Category "{cat.name or cat.id}" is defined but no questions are assigned to it',
            category_id=cat.id,
        )
        for cat in config.categories
        if cat.id not in used
    ]


def _check_scorable_questions(questions: Sequence[Question], config: ScoreConfig) -> List[ConfigIssue]:
    known = {c.id for c in config.categories}
    issues: List[ConfigIssue] = []
    for q in questions:
        if not is_scorable(q):
            continue
        if not q.scoring_category:
            issues.append(ConfigIssue(
                code="SCORABLE_NO_CATEGORY",
                severity="warning",
                message=f'Scorable question "{_short(q.question)}" has no category assigned',
                question_id=q.id,
            ))
        elif known and q.scoring_category not in known:
            issues.append(ConfigIssue(
                code="INVALID_CATEGORY_REF",
                severity="error",
                message=f'Question references non-existent category "{q.scoring_category}"',
                question_id=q.id,
                category_id=q.scoring_category,
            ))
        if q.type in OPTION_SCORED_TYPES and not q.option_scores:
            issues.append(ConfigIssue(
                code="MISSING_OPTION_SCORES",
                severity="warning",
                message=f"Scorable {q.type.value} question has no option scores defined",
                question_id=q.id,
            ))
    return issues


# ============================== weights ==============================
def _check_weights(questions: Sequence[Question]) -> List[ConfigIssue]:
    scorable = [q for q in questions if is_scorable(q)]
    # λιγότερες από 3 ερωτήσεις: δεν βγαίνει συμπέρασμα για ανισορροπία
    if len(scorable) < 3:
        return []

    weights = [q.weight for q in scorable]
    total = sum(weights)
    issues: List[ConfigIssue] = []
    if total > 0:
        for q in scorable:
            share = q.weight / total * 100
            if share > 50:
                issues.append(ConfigIssue(
                    code="WEIGHT_IMBALANCE",
                    severity="warning",
                    message=f"Question has {share:.0f}% of total weight ({_fmt(q.weight)} of {_fmt(total)})",
                    question_id=q.id,
                    details={"weight": q.weight, "totalWeight": total, "percentage": share},
                ))

    hi, lo = max(weights), min(weights)
    if lo > 0 and hi > lo * 5:
        issues.append(ConfigIssue(
            code="EXTREME_WEIGHT_VARIANCE",
            severity="info",
            message=f"Weight variance is high: max weight ({_fmt(hi)}) is {hi / lo:.1f}x the min weight ({_fmt(lo)})",
            details={"maxWeight": hi, "minWeight": lo, "ratio": hi / lo},
        ))
    return issues


def validate_score_config(
    questions: Sequence[Question],
    score_config: Optional[ScoreConfig],
) -> List[ConfigIssue]:
    """All scoring configuration issues; empty when scoring is disabled."""
    if score_config is None or not score_config.enabled:
        return []
    bands = bands_for(score_config)
    return [
        *_check_band_coverage(bands),
        *(_check_band_overlaps(bands) if len(bands) > 1 else []),
        *_check_band_bounds(bands),
        *_check_category_usage(questions, score_config),
        *_check_scorable_questions(questions, score_config),
        *_check_weights(questions),
    ]


# ============================== summaries ==============================
def summarize_issues(issues: Sequence[ConfigIssue]) -> Dict[str, Any]:
    counts = {"error": 0, "warning": 0, "info": 0}
    for issue in issues:
        counts[issue.severity] += 1
    return {
        "error_count": counts["error"],
        "warning_count": counts["warning"],
        "info_count": counts["info"],
        "is_valid": counts["error"] == 0,
    }


def filter_by_severity(issues: Sequence[ConfigIssue], severity: Severity) -> List[ConfigIssue]:
    return [i for i in issues if i.severity == severity]


def issues_for_question(issues: Sequence[ConfigIssue], question_id: str) -> List[ConfigIssue]:
    return [i for i in issues if i.question_id == question_id]


# ============================== normalisation ==============================
def _sanitize_bands(bands: Optional[Sequence[ScoreBand]]) -> Optional[List[ScoreBand]]:
    """Dedupe by id, swap inverted bounds, sort by min and keep the first of overlapping bands.

    A band that starts inside the previous one is moved to start right after it,
    or dropped when nothing of it is left.
    """
    if bands is None:
        return None
    seen = set()
    cleaned: List[ScoreBand] = []
    for band in bands:
        if not band.id or band.id in seen:
            continue
        seen.add(band.id)
        if band.min > band.max:
            band = band.model_copy(update={"min": band.max, "max": band.min})
        cleaned.append(band)
    cleaned.sort(key=lambda b: b.min)

    kept: List[ScoreBand] = []
    for band in cleaned:
        last = kept[-1] if kept else None
        if last is None or band.min > last.max:
            kept.append(band)
            continue
        start = math.floor(last.max) + 1
        if start <= band.max:
            kept.append(band.model_copy(update={"min": start}))
    return kept


def normalize_score_config(config: Union[ScoreConfig, Mapping[str, Any], None]) -> Optional[ScoreConfig]:
    if config is None:
        return None
    if not isinstance(config, ScoreConfig):
        config = ScoreConfig.model_validate(config)

    seen = set()
    categories = []
    for cat in config.categories:
        if cat.id and cat.id not in seen:
            seen.add(cat.id)
            categories.append(cat)

    results_screen = config.results_screen
    if results_screen is not None:
        results_screen = ResultsScreenConfig(
            enabled=results_screen.enabled,
            score_ranges=_sanitize_bands(results_screen.score_ranges),
            categories=[
                CategoryResultConfig(
                    category_id=c.category_id,
                    bands_mode=c.bands_mode,
                    bands=_sanitize_bands(c.bands),
                )
                for c in results_screen.categories
            ] if results_screen.categories is not None else None,
        )

    return config.model_copy(update={
        "categories": categories,
        "score_ranges": _sanitize_bands(config.score_ranges) or [],
        "results_screen": results_screen,
    })


def clamp_score_weight(weight: Optional[Number]) -> Optional[Number]:
    if weight is None or isinstance(weight, bool):
        return None
    if not math.isfinite(weight):
        return None
    return max(0, min(weight, MAX_SCORE_WEIGHT))


def sanitize_option_scores(option_scores: Optional[Mapping[str, Any]]) -> Optional[Dict[str, Number]]:
    if option_scores is None:
        return None
    clean: Dict[str, Number] = {}
    for label, value in option_scores.items():
        ok = isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)
        clean[label] = value if ok else 0
    return clean
