# survey_engine/core/validator.py
"""Answer validation against the static shape of a question type plus its dynamic bounds.

Bad answers are reported, never raised: callers decide whether to block a
submission or only flag it.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Annotated, Any, Dict, List, Optional, Union

from pydantic import AfterValidator, Field, StrictStr, TypeAdapter, ValidationError

from survey_engine.core.registry import RATING_FAMILY, get_answer_shape
from survey_engine.models.base import Number
from survey_engine.models.question import Question, QuestionType as T

DEFAULT_SCALE = 5
DEFAULT_SLIDER = (0, 100, 1)
DEFAULT_TOTAL_POINTS = 100


@dataclass(frozen=True)
class AnswerValidation:
    valid: bool
    errors: List[str] = field(default_factory=list)

    def __bool__(self) -> bool:
        return self.valid


# ------------------------- helpers -------------------------
def is_unanswered(answer: Any) -> bool:
    """None, "" (μόνο κενά), [] και {} μετράνε όλα ως αναπάντητο."""
    if answer is None:
        return True
    if isinstance(answer, str):
        return not answer.strip()
    if isinstance(answer, (list, tuple, dict, set)):
        return len(answer) == 0
    return False


def rating_upper_bound(question: Question) -> int:
    if question.type == T.LIKERT and question.likert_points:
        return int(question.likert_points)
    for candidate in (question.rating_scale, question.scale, question.points):
        if candidate:
            return int(candidate)
    return DEFAULT_SCALE


def slider_bounds(question: Question) -> tuple[Number, Number, Number]:
    lo = question.min if question.min is not None else DEFAULT_SLIDER[0]
    hi = question.max if question.max is not None else DEFAULT_SLIDER[1]
    step = question.step if question.step else DEFAULT_SLIDER[2]
    return lo, hi, step


def total_points(question: Question) -> Number:
    return question.total_points if question.total_points is not None else DEFAULT_TOTAL_POINTS


def _dec(x: Number) -> Decimal:
    return Decimal(str(x))


def _on_step(lo: Number, step: Number):
    def check(value: Number) -> Number:
        if (_dec(value) - _dec(lo)) % _dec(step) != 0:
            raise ValueError(f"value {value} is not on a step of {step} from {lo}")
        return value
    return check


def _sums_to(total: Number):
    def check(allocation: Dict[str, Number]) -> Dict[str, Number]:
        if any(v < 0 for v in allocation.values()):
            raise ValueError("allocations must be non-negative")
        allocated = sum((_dec(v) for v in allocation.values()), Decimal(0))
        if allocated != _dec(total):
            raise ValueError(f"allocations sum to {allocated}, expected exactly {total}")
        return allocation
    return check


def _keys_in(allowed: List[str]):
    def check(allocation: Dict[str, Number]) -> Dict[str, Number]:
        unknown = sorted(set(allocation) - set(allowed))
        if unknown:
            raise ValueError(f"unknown options {unknown}")
        return allocation
    return check


def _one_of(allowed: List[str]):
    def check(value: Any) -> Any:
        values = value if isinstance(value, list) else [value]
        unknown = [v for v in values if v not in allowed]
        if unknown:
            raise ValueError(f"not a configured option: {unknown}")
        return value
    return check


def _all_of(checks):
    def check(value: Any) -> Any:
        for fn in checks:
            value = fn(value)
        return value
    return check


# ------------------------- dynamic schema -------------------------
def build_dynamic_schema(question: Question) -> TypeAdapter:
    """Schema for `question` with its configured bounds; falls back to the static shape."""
    qtype = question.type
    restrict_options = bool(question.options) and not question.allow_other

    if qtype in RATING_FAMILY:
        return TypeAdapter(Optional[Annotated[int, Field(ge=1, le=rating_upper_bound(question))]])

    if qtype == T.NPS:
        return TypeAdapter(Optional[Annotated[int, Field(ge=0, le=10)]])

    if qtype == T.SLIDER:
        lo, hi, step = slider_bounds(question)
        return TypeAdapter(Optional[Annotated[float, Field(ge=lo, le=hi), AfterValidator(_on_step(lo, step))]])

    if qtype == T.NUMBER and (question.min is not None or question.max is not None):
        return TypeAdapter(Optional[Annotated[float, Field(ge=question.min, le=question.max)]])

    if qtype == T.CONSTANT_SUM:
        checks = [_sums_to(total_points(question))]
        if question.options:
            checks.insert(0, _keys_in(question.options))
        return TypeAdapter(Optional[Annotated[Dict[str, Number], AfterValidator(_all_of(checks))]])

    if qtype == T.CHECKBOX:
        bounded = Annotated[
            List[StrictStr],
            Field(min_length=question.min_selections, max_length=question.max_selections),
        ]
        if restrict_options:
            bounded = Annotated[bounded, AfterValidator(_one_of(question.options))]
        return TypeAdapter(Optional[bounded])

    if qtype in (T.MULTIPLE_CHOICE, T.DROPDOWN) and restrict_options:
        return TypeAdapter(Optional[Annotated[StrictStr, AfterValidator(_one_of(question.options))]])

    if qtype == T.IMAGE_CHOICE and restrict_options:
        return TypeAdapter(Optional[Annotated[Union[StrictStr, List[StrictStr]], AfterValidator(_one_of(question.options))]])

    return get_answer_shape(qtype)


def _format_errors(exc: ValidationError) -> List[str]:
    out = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()))
        out.append(f"{loc}: {err['msg']}" if loc else err["msg"])
    return out


def validate_answer(question: Question, answer: Any) -> AnswerValidation:
    if is_unanswered(answer):
        if question.required:
            return AnswerValidation(False, [f"question '{question.id}' is required"])
        return AnswerValidation(True)

    try:
        build_dynamic_schema(question).validate_python(answer)
    except ValidationError as exc:
        return AnswerValidation(False, _format_errors(exc))
    return AnswerValidation(True)


def is_valid_answer(question: Question, answer: Any) -> bool:
    return validate_answer(question, answer).valid


def validate_responses(questions: List[Question], responses: Dict[str, Any]) -> Dict[str, AnswerValidation]:
    """Per-question results for a whole response set (only failures are returned)."""
    failures: Dict[str, AnswerValidation] = {}
    for q in questions:
        result = validate_answer(q, responses.get(q.id))
        if not result.valid:
            failures[q.id] = result
    return failures
