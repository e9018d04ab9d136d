# survey_engine/core/scoring.py
"""Per-question scoring: one strategy per ScoringMode, picked only from the registry.

Every strategy returns a (score, max_score) pair. An unanswered question still
reports its configured max so a half-finished response does not inflate the
percentage.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

from survey_engine.core.registry import RATING_FAMILY, get_scoring_mode
from survey_engine.core.validator import is_unanswered, rating_upper_bound, slider_bounds, total_points
from survey_engine.models.base import Number
from survey_engine.models.question import Question, QuestionType as T
from survey_engine.models.scoring import NpsGroup, QuestionScore, ScoringMode as M

logger = logging.getLogger(__name__)

ScorePair = Tuple[Number, Number]

# NPS: detractor 0-6, passive 7-8, promoter 9-10
NPS_BANDS: Tuple[Tuple[int, int, NpsGroup], ...] = (
    (0, 6, "detractor"),
    (7, 8, "passive"),
    (9, 10, "promoter"),
)
NPS_MAX = 10


# ------------------------- helpers -------------------------
def safe_num(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    try:
        return float(str(value).strip().replace(",", "."))
    except ValueError:
        return None


def tidy_number(x: Number) -> Number:
    # 8.0 -> 8, ώστε τα αποτελέσματα να βγαίνουν σαν ακέραιοι όπου γίνεται
    if isinstance(x, float) and x.is_integer():
        return int(x)
    return x


def _option_scores(question: Question) -> Dict[str, Number]:
    return dict(question.option_scores or {})


def _max_positive(scores: Dict[str, Number]) -> Number:
    positives = [v for v in scores.values() if v > 0]
    return max(positives) if positives else 0


def _sum_positive(scores: Dict[str, Number]) -> Number:
    return sum(v for v in scores.values() if v > 0)


def nps_group(value: Any) -> Optional[NpsGroup]:
    n = safe_num(value)
    if n is None:
        return None
    for lo, hi, group in NPS_BANDS:
        if lo <= n <= hi:
            return group
    return None


# ------------------------- upper bounds -------------------------
def numeric_upper_bound(question: Question) -> Number:
    if question.type in RATING_FAMILY:
        return rating_upper_bound(question)
    if question.type == T.SLIDER:
        return slider_bounds(question)[1]
    # number: χωρίς max δεν υπάρχει άνω όριο για να κανονικοποιηθεί
    return question.max if question.max is not None else 0


# ------------------------- strategies -------------------------
def _score_numeric_direct(question: Question, answer: Any) -> ScorePair:
    w = question.weight
    upper = numeric_upper_bound(question)
    if upper <= 0:
        logger.debug("numeric question %s has no upper bound; scored as zero", question.id)
        return 0, 0
    value = safe_num(answer)
    if value is None:
        return 0, upper * w
    value = max(0, min(value, upper))
    return value * w, upper * w


def _choice_key(question: Question, answer: Any) -> str:
    if isinstance(answer, bool):
        return question.yes_label if answer else question.no_label
    return str(answer).strip()


def _score_position_mapped(question: Question, answer: Any) -> ScorePair:
    w = question.weight
    scores = _option_scores(question)
    multi = question.type == T.IMAGE_CHOICE and question.selection_type == "multiple"
    max_score = (_sum_positive(scores) if multi else _max_positive(scores)) * w
    if is_unanswered(answer):
        return 0, max_score
    if isinstance(answer, list):
        return sum(scores.get(str(a), 0) for a in answer) * w, max_score
    return scores.get(_choice_key(question, answer), 0) * w, max_score


def _score_custom(question: Question, answer: Any) -> ScorePair:
    # yes_no: boolean -> yesLabel/noLabel, μετά ίδιο lookup με τα single-choice
    if isinstance(answer, str) and answer.strip().lower() in ("true", "false"):
        answer = answer.strip().lower() == "true"
    return _score_position_mapped(question, answer)


def _score_count(question: Question, answer: Any) -> ScorePair:
    w = question.weight
    scores = _option_scores(question)
    # αρνητικές επιλογές (distractors) δεν ανεβάζουν ποτέ το max
    max_score = _sum_positive(scores) * w
    if is_unanswered(answer):
        return 0, max_score
    selected = answer if isinstance(answer, list) else [answer]
    return sum(scores.get(str(v), 0) for v in selected) * w, max_score


def _score_nps(question: Question, answer: Any) -> ScorePair:
    # NPS μένει πάντα στην κλίμακα 0-10, το scoreWeight δεν εφαρμόζεται
    value = safe_num(answer)
    if value is None:
        return 0, NPS_MAX
    return max(0, min(value, NPS_MAX)), NPS_MAX


def _score_matrix_sum(question: Question, answer: Any) -> ScorePair:
    w = question.weight
    scores = _option_scores(question)
    if scores:
        per_row_max = _sum_positive(scores) if question.matrix_type == "checkbox" else _max_positive(scores)
    else:
        per_row_max = 1
    # μόνο οι δηλωμένες γραμμές μετράνε, απαντημένο ή όχι
    rows = list(question.row_labels or [])
    max_score = len(rows) * per_row_max * w
    if is_unanswered(answer) or not isinstance(answer, dict):
        return 0, max_score

    total = 0
    for row in rows:
        cell = answer.get(row)
        if is_unanswered(cell):
            continue
        cells = cell if isinstance(cell, list) else [cell]
        total += sum(scores.get(str(c), 0) for c in cells) if scores else 1
    return total * w, max_score


def _positional_weights(n: int) -> List[int]:
    return list(range(n, 0, -1))


def _score_ranking_weighted(question: Question, answer: Any) -> ScorePair:
    w = question.weight
    scores = _option_scores(question)
    options = list(question.options or [])
    n = len(options) or (len(answer) if isinstance(answer, list) else 0)
    positions = _positional_weights(n)

    if scores:
        # μέγιστο: οι καλύτερες επιλογές στις πρώτες θέσεις
        best = sorted((v for v in scores.values() if v > 0), reverse=True)
        max_score = sum(p * v for p, v in zip(positions, best)) * w
    else:
        max_score = sum(positions) * w

    if is_unanswered(answer) or not isinstance(answer, list):
        return 0, max_score

    total = 0
    for rank, item in enumerate(answer[:n]):
        item_value = scores.get(str(item), 0) if scores else 1
        total += (n - rank) * item_value
    return total * w, max_score


def _score_constant_sum_total(question: Question, answer: Any) -> ScorePair:
    w = question.weight
    max_score = total_points(question) * w
    if is_unanswered(answer) or not isinstance(answer, dict):
        return 0, max_score
    if question.correct_option:
        allocated = safe_num(answer.get(question.correct_option)) or 0
    else:
        allocated = sum(safe_num(v) or 0 for v in answer.values())
    return max(0, min(allocated, total_points(question))) * w, max_score


def _score_none(question: Question, answer: Any) -> ScorePair:
    return 0, 0


STRATEGIES: Dict[M, Callable[[Question, Any], ScorePair]] = {
    M.NUMERIC_DIRECT: _score_numeric_direct,
    M.POSITION_MAPPED: _score_position_mapped,
    M.CUSTOM: _score_custom,
    M.COUNT: _score_count,
    M.NPS: _score_nps,
    M.MATRIX_SUM: _score_matrix_sum,
    M.RANKING_WEIGHTED: _score_ranking_weighted,
    M.CONSTANT_SUM_TOTAL: _score_constant_sum_total,
    M.NONE: _score_none,
}


# ------------------------- public API -------------------------
def is_scorable(question: Question) -> bool:
    return question.scorable is not False and get_scoring_mode(question.type) != M.NONE


def score_question(question: Question, answer: Any = None) -> QuestionScore:
    mode = get_scoring_mode(question.type)
    if question.scorable is False:
        mode_fn = _score_none
    else:
        mode_fn = STRATEGIES[mode]
    score, max_score = mode_fn(question, answer)
    return QuestionScore(
        question_id=question.id,
        score=tidy_number(score),
        max_score=tidy_number(max_score),
        mode=mode,
        category=question.scoring_category,
        answered=not is_unanswered(answer),
        nps_group=nps_group(answer) if mode == M.NPS else None,
    )
