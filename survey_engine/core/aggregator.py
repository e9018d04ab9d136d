# survey_engine/core/aggregator.py
"""Category / overall aggregation of question scores into a ScoreResult."""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from survey_engine.core.bands import bands_for_category, resolve_band, to_percentage
from survey_engine.core.config import settings
from survey_engine.core.scoring import is_scorable, score_question, tidy_number
from survey_engine.core.traversal import replay_path
from survey_engine.models.question import Question
from survey_engine.models.scoring import CategoryScore, QuestionScore, ScoreConfig, ScoreResult

logger = logging.getLogger(__name__)

DEFAULT_ENGINE_ID = "engagement_v1"

ScoringEngine = Callable[..., ScoreResult]


def _category_name(config: Optional[ScoreConfig], category_id: str) -> str:
    for cat in (config.categories if config else []):
        if cat.id == category_id:
            return cat.name
    return category_id[:1].upper() + category_id[1:] if category_id else category_id


def _category_score(
    category_id: str,
    scores: List[QuestionScore],
    config: Optional[ScoreConfig],
) -> CategoryScore:
    score = tidy_number(sum(s.score for s in scores))
    max_score = tidy_number(sum(s.max_score for s in scores))
    pct = to_percentage(score, max_score)
    band = None
    # χωρίς max (άδεια κατηγορία) δεν βγάζουμε label
    if max_score > 0:
        band = resolve_band(pct, bands_for_category(config, category_id))
    return CategoryScore(
        name=_category_name(config, category_id),
        score=score,
        max_score=max_score,
        percentage=pct,
        label=band.label if band else None,
        band_id=band.id if band else None,
    )


def score_survey(
    questions: Sequence[Question],
    responses: Optional[Mapping[str, Any]] = None,
    score_config: Optional[ScoreConfig] = None,
    respect_logic: bool = False,
) -> ScoreResult:
    """Score a whole response set. Pure: same inputs, same ScoreResult.

    With `respect_logic=True` only questions on the replayed traversal path are
    scored, so questions the respondent never saw do not count toward max.
    """
    responses = dict(responses or {})
    pool = list(questions)
    if respect_logic:
        seen = set(replay_path(pool, responses))
        pool = [q for q in pool if q.id in seen]

    question_scores = [score_question(q, responses.get(q.id)) for q in pool if is_scorable(q)]

    total = tidy_number(sum(s.score for s in question_scores))
    max_total = tidy_number(sum(s.max_score for s in question_scores))
    percentage = to_percentage(total, max_total)

    grouped: Dict[str, List[QuestionScore]] = {}
    for cat in (score_config.categories if score_config else []):
        grouped.setdefault(cat.id, [])
    for s in question_scores:
        if s.category:
            grouped.setdefault(s.category, []).append(s)

    by_category = {cid: _category_score(cid, scores, score_config) for cid, scores in grouped.items()}
    band = resolve_band(percentage, score_config, view="results") if max_total > 0 else None

    return ScoreResult(
        total_score=total,
        max_score=max_total,
        percentage=percentage,
        by_category=by_category,
        band=band,
        question_scores=question_scores,
    )


# ------------------------- engine registry -------------------------
SCORING_ENGINES: Dict[str, ScoringEngine] = {
    DEFAULT_ENGINE_ID: score_survey,
}


def run_scoring_engine(
    questions: Sequence[Question],
    responses: Optional[Mapping[str, Any]] = None,
    score_config: Optional[ScoreConfig] = None,
    engine_id: Optional[str] = None,
    **kwargs: Any,
) -> ScoreResult:
    engine_id = engine_id or (score_config.scoring_engine_id if score_config else None) or settings.SCORING_ENGINE_ID
    engine = SCORING_ENGINES.get(engine_id)
    if engine is None:
        logger.warning("unknown scoring engine %r, falling back to %s", engine_id, DEFAULT_ENGINE_ID)
        engine = SCORING_ENGINES[DEFAULT_ENGINE_ID]
    return engine(questions, responses, score_config, **kwargs)
