# survey_engine/core/registry.py
"""Static per-question-type tables: answer shape, valid logic operators, scoring mode.

The three tables are keyed by the closed QuestionType enum and must stay in sync
with it; `check_registry_consistency()` runs at import time and fails fast.
"""
from __future__ import annotations

from typing import Dict, List, Optional, Tuple, Union

from pydantic import StrictBool, StrictStr, TypeAdapter

from survey_engine.core.errors import RegistryMismatchError, UnknownQuestionTypeError
from survey_engine.models.base import Number
from survey_engine.models.logic import LogicOperator as Op
from survey_engine.models.question import QuestionType as T
from survey_engine.models.scoring import ScoringMode as M

# ------------------------- answer shapes -------------------------
_TEXT_SHAPE = TypeAdapter(Optional[StrictStr])
_NUMBER_SHAPE = TypeAdapter(Optional[Number])
_INTEGER_SHAPE = TypeAdapter(Optional[int])
_BOOL_SHAPE = TypeAdapter(Optional[StrictBool])
_LIST_SHAPE = TypeAdapter(Optional[List[StrictStr]])
_IMAGE_CHOICE_SHAPE = TypeAdapter(Optional[Union[StrictStr, List[StrictStr]]])
_MATRIX_SHAPE = TypeAdapter(Optional[Union[Dict[str, StrictStr], Dict[str, List[StrictStr]]]])
_CONSTANT_SUM_SHAPE = TypeAdapter(Optional[Dict[str, Number]])
_DISPLAY_SHAPE = TypeAdapter(None)

ANSWER_SHAPES: Dict[T, TypeAdapter] = {
    T.TEXT: _TEXT_SHAPE,
    T.TEXTAREA: _TEXT_SHAPE,
    T.EMAIL: _TEXT_SHAPE,
    T.PHONE: _TEXT_SHAPE,
    T.URL: _TEXT_SHAPE,
    T.NUMBER: _NUMBER_SHAPE,
    T.MULTIPLE_CHOICE: _TEXT_SHAPE,
    T.CHECKBOX: _LIST_SHAPE,
    T.DROPDOWN: _TEXT_SHAPE,
    T.IMAGE_CHOICE: _IMAGE_CHOICE_SHAPE,
    T.YES_NO: _BOOL_SHAPE,
    T.RATING: _INTEGER_SHAPE,
    T.NPS: _INTEGER_SHAPE,
    T.LIKERT: _INTEGER_SHAPE,
    T.OPINION_SCALE: _INTEGER_SHAPE,
    T.SLIDER: _NUMBER_SHAPE,
    T.EMOJI_RATING: _INTEGER_SHAPE,
    T.MATRIX: _MATRIX_SHAPE,
    T.RANKING: _LIST_SHAPE,
    T.CONSTANT_SUM: _CONSTANT_SUM_SHAPE,
    T.CALCULATION: _NUMBER_SHAPE,
    T.DATE: _TEXT_SHAPE,
    T.TIME: _TEXT_SHAPE,
    T.DATETIME: _TEXT_SHAPE,
    T.FILE_UPLOAD: _TEXT_SHAPE,
    T.SIGNATURE: _TEXT_SHAPE,
    T.VIDEO: _TEXT_SHAPE,
    T.AUDIO_CAPTURE: _TEXT_SHAPE,
    T.SECTION: _DISPLAY_SHAPE,
    T.STATEMENT: _DISPLAY_SHAPE,
    T.LEGAL: _BOOL_SHAPE,
    T.HIDDEN: _TEXT_SHAPE,
}

# ------------------------- logic operators -------------------------
_PRESENCE = (Op.ANSWERED, Op.NOT_ANSWERED)
_TEXT_OPS = _PRESENCE + (Op.EQUALS, Op.NOT_EQUALS, Op.CONTAINS)
_CONTACT_OPS = _PRESENCE + (Op.EQUALS, Op.NOT_EQUALS)
_ORDER = (Op.GT, Op.LT, Op.GTE, Op.LTE)
_NUMERIC_OPS = _PRESENCE + (Op.EQUALS, Op.NOT_EQUALS) + _ORDER + (Op.BETWEEN,)
_CHOICE_OPS = _PRESENCE + (Op.EQUALS, Op.NOT_EQUALS, Op.INCLUDES_ANY)
_CHECKBOX_OPS = _PRESENCE + (Op.INCLUDES_ALL, Op.INCLUDES_ANY)
_BOOLEAN_OPS = _PRESENCE + (Op.IS_TRUE, Op.IS_FALSE)
_DATE_OPS = _PRESENCE + (Op.EQUALS, Op.NOT_EQUALS, Op.GT, Op.LT, Op.BETWEEN)

VALID_OPERATORS: Dict[T, Tuple[Op, ...]] = {
    T.TEXT: _TEXT_OPS,
    T.TEXTAREA: _TEXT_OPS,
    T.EMAIL: _TEXT_OPS,
    T.PHONE: _CONTACT_OPS,
    T.URL: _CONTACT_OPS,
    T.NUMBER: _NUMERIC_OPS,
    T.MULTIPLE_CHOICE: _CHOICE_OPS,
    T.CHECKBOX: _CHECKBOX_OPS,
    T.DROPDOWN: _CHOICE_OPS,
    T.IMAGE_CHOICE: _CHOICE_OPS,
    T.YES_NO: _BOOLEAN_OPS,
    T.RATING: _NUMERIC_OPS,
    T.NPS: _NUMERIC_OPS,
    T.LIKERT: _PRESENCE + (Op.EQUALS, Op.NOT_EQUALS) + _ORDER,
    T.OPINION_SCALE: _NUMERIC_OPS,
    T.SLIDER: _PRESENCE + _ORDER + (Op.BETWEEN,),
    T.EMOJI_RATING: _PRESENCE + (Op.EQUALS, Op.NOT_EQUALS, Op.GT, Op.LT),
    T.MATRIX: _PRESENCE,
    T.RANKING: _PRESENCE,
    T.CONSTANT_SUM: _PRESENCE,
    # derived value, always present
    T.CALCULATION: (Op.EQUALS, Op.NOT_EQUALS) + _ORDER + (Op.BETWEEN,),
    T.DATE: _DATE_OPS,
    T.TIME: _CONTACT_OPS,
    T.DATETIME: _DATE_OPS,
    T.FILE_UPLOAD: _PRESENCE,
    T.SIGNATURE: _PRESENCE,
    T.VIDEO: _PRESENCE,
    T.AUDIO_CAPTURE: _PRESENCE,
    T.SECTION: (),
    T.STATEMENT: (),
    T.LEGAL: _BOOLEAN_OPS,
    T.HIDDEN: (Op.EQUALS, Op.NOT_EQUALS, Op.CONTAINS, Op.INCLUDES_ANY),
}

# ------------------------- scoring modes -------------------------
SCORING_MODES: Dict[T, M] = {
    T.TEXT: M.NONE,
    T.TEXTAREA: M.NONE,
    T.EMAIL: M.NONE,
    T.PHONE: M.NONE,
    T.URL: M.NONE,
    T.NUMBER: M.NUMERIC_DIRECT,
    T.MULTIPLE_CHOICE: M.POSITION_MAPPED,
    T.CHECKBOX: M.COUNT,
    T.DROPDOWN: M.POSITION_MAPPED,
    T.IMAGE_CHOICE: M.CUSTOM,
    T.YES_NO: M.CUSTOM,
    T.RATING: M.NUMERIC_DIRECT,
    T.NPS: M.NPS,
    T.LIKERT: M.NUMERIC_DIRECT,
    T.OPINION_SCALE: M.NUMERIC_DIRECT,
    T.SLIDER: M.NUMERIC_DIRECT,
    T.EMOJI_RATING: M.NUMERIC_DIRECT,
    T.MATRIX: M.MATRIX_SUM,
    T.RANKING: M.RANKING_WEIGHTED,
    T.CONSTANT_SUM: M.CONSTANT_SUM_TOTAL,
    T.CALCULATION: M.NONE,
    T.DATE: M.NONE,
    T.TIME: M.NONE,
    T.DATETIME: M.NONE,
    T.FILE_UPLOAD: M.NONE,
    T.SIGNATURE: M.NONE,
    T.VIDEO: M.NONE,
    T.AUDIO_CAPTURE: M.NONE,
    T.SECTION: M.NONE,
    T.STATEMENT: M.NONE,
    T.LEGAL: M.NONE,
    T.HIDDEN: M.NONE,
}

# rating-family: ακέραιο στο [1, scale]
RATING_FAMILY = frozenset({T.RATING, T.OPINION_SCALE, T.EMOJI_RATING, T.LIKERT})
# τύποι όπου τα numeric strings γίνονται αριθμοί στη σύγκριση των conditions
NUMERIC_TYPES = frozenset({
    T.NUMBER, T.RATING, T.NPS, T.LIKERT, T.OPINION_SCALE, T.SLIDER, T.EMOJI_RATING, T.CALCULATION,
})

_TABLES = {
    "ANSWER_SHAPES": ANSWER_SHAPES,
    "VALID_OPERATORS": VALID_OPERATORS,
    "SCORING_MODES": SCORING_MODES,
}


def _norm_type(question_type: Union[T, str]) -> T:
    if isinstance(question_type, T):
        return question_type
    try:
        return T(str(question_type).strip())
    except ValueError:
        raise UnknownQuestionTypeError(f"Unknown question type '{question_type}'.") from None


def get_answer_shape(question_type: Union[T, str]) -> TypeAdapter:
    return ANSWER_SHAPES[_norm_type(question_type)]


def get_valid_operators(question_type: Union[T, str]) -> Tuple[Op, ...]:
    return VALID_OPERATORS[_norm_type(question_type)]


def get_scoring_mode(question_type: Union[T, str]) -> M:
    return SCORING_MODES[_norm_type(question_type)]


def is_scorable_type(question_type: Union[T, str]) -> bool:
    return get_scoring_mode(question_type) != M.NONE


def supports_logic(question_type: Union[T, str]) -> bool:
    return bool(get_valid_operators(question_type))


def check_registry_consistency() -> None:
    """Every table must be keyed by exactly the QuestionType members."""
    expected = set(T)
    problems = []
    for name, table in _TABLES.items():
        keys = set(table)
        missing = sorted(t.value for t in expected - keys)
        extra = sorted(str(k) for k in keys - expected)
        if missing:
            problems.append(f"{name} missing {missing}")
        if extra:
            problems.append(f"{name} has unknown keys {extra}")
    if problems:
        raise RegistryMismatchError("; ".join(problems))


check_registry_consistency()
