# survey_engine/core/status.py
"""Classifies a survey's scoring state for reporting.

Read-only: nothing here changes how scores are computed.
"""
from __future__ import annotations

import logging
from typing import Mapping, Optional, Sequence

from survey_engine.core.bands import bands_for
from survey_engine.models.scoring import ScoreConfig, ScoringState, ScoringStateResult

logger = logging.getLogger(__name__)

DimensionScores = Mapping[str, Optional[float]]

_NO_RESPONSES = ScoringStateResult(
    state=ScoringState.NO_RESPONSES,
    title="Waiting for Responses",
    message="No responses yet. Scores appear once participants submit.",
    show_scoring=False,
    show_trends=False,
    show_participation=True,
    show_question_summary=False,
    severity="info",
)

_NO_SCORING = ScoringStateResult(
    state=ScoringState.NO_SCORING,
    title="Scoring Not Enabled",
    message="Scoring is off for this survey. Only participation and question summaries are available.",
    show_scoring=False,
    show_trends=False,
    show_participation=True,
    show_question_summary=True,
    severity="info",
)

_SINGLE_VERSION = ScoringStateResult(
    state=ScoringState.SINGLE_VERSION,
    title="Single Snapshot Mode",
    message="Only one scoring version exists. Trends need at least two.",
    show_scoring=True,
    show_trends=False,
    show_participation=True,
    show_question_summary=True,
    severity="info",
)

_HEALTHY = ScoringStateResult(
    state=ScoringState.HEALTHY,
    title="Scoring Ready",
    message="All scoring data is available.",
    show_scoring=True,
    show_trends=True,
    show_participation=True,
    show_question_summary=True,
    severity="info",
)


def _misconfigured(title: str, message: str) -> ScoringStateResult:
    return ScoringStateResult(
        state=ScoringState.MISCONFIGURED,
        title=title,
        message=message,
        show_scoring=False,
        show_trends=False,
        show_participation=True,
        show_question_summary=True,
        severity="error",
    )


def _all_null(scores: Optional[DimensionScores]) -> bool:
    return bool(scores) and all(v is None for v in scores.values())


def derive_scoring_state(
    score_config: Optional[ScoreConfig],
    response_count: int,
    version_count: int = 1,
    dimension_scores: Optional[DimensionScores] = None,
) -> ScoringStateResult:
    """Priority: no-responses, no-scoring, misconfigured, single-version, healthy."""
    if response_count <= 0:
        return _NO_RESPONSES
    if score_config is None or not score_config.enabled:
        return _NO_SCORING

    if not score_config.categories:
        return _misconfigured(
            "Scoring Misconfigured",
            "Scoring is enabled but no categories are defined.",
        )
    if not bands_for(score_config):
        return _misconfigured(
            "Score Ranges Missing",
            "Scoring categories exist but no score ranges (bands) are configured.",
        )
    if _all_null(dimension_scores):
        logger.warning(
            "SCORES_ALL_NULL: %d responses but every dimension score is null; "
            "questions may not be mapped to scoring categories", response_count,
        )
        return _misconfigured(
            "No Dimension Data",
            "Responses exist but no scores were calculated. Map questions to scoring categories.",
        )

    if version_count <= 1:
        return _SINGLE_VERSION
    return _HEALTHY


def check_scoring_invariants(
    scoring_enabled: bool,
    response_count: int,
    dimension_scores: Optional[DimensionScores] = None,
    band_counts: Optional[Sequence[int]] = None,
) -> list:
    """Logs and returns the codes of invariants broken by a scoring summary."""
    if not scoring_enabled or response_count <= 0:
        return []

    broken = []
    if _all_null(dimension_scores):
        broken.append("SCORES_ALL_NULL")
        logger.warning("SCORES_ALL_NULL: %d responses but all dimension scores are null", response_count)
    if band_counts is not None and all(c == 0 for c in band_counts):
        broken.append("BANDS_ALL_ZERO")
        logger.warning("BANDS_ALL_ZERO: %d responses but all band counts are 0", response_count)
    return broken
