# survey_engine/core/logic.py
"""Condition / rule evaluation against a response snapshot."""
from __future__ import annotations

import logging
import operator as _op
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Union

from survey_engine.core.config import settings
from survey_engine.core.errors import InvalidRuleError
from survey_engine.core.registry import NUMERIC_TYPES, get_valid_operators
from survey_engine.core.scoring import safe_num
from survey_engine.core.validator import is_unanswered
from survey_engine.models.logic import ConditionLogic, LogicCondition, LogicOperator as Op, LogicResult, LogicRule
from survey_engine.models.question import Question, QuestionType

logger = logging.getLogger(__name__)

QuestionIndex = Mapping[str, Question]

_ORDERING: Dict[Op, Callable[[Any, Any], bool]] = {
    Op.GT: _op.gt,
    Op.LT: _op.lt,
    Op.GTE: _op.ge,
    Op.LTE: _op.le,
}


# ------------------------- helpers -------------------------
def _index(questions: Union[QuestionIndex, Sequence[Question], None]) -> Optional[QuestionIndex]:
    if questions is None:
        return None
    if isinstance(questions, Mapping):
        return questions
    return {q.id: q for q in questions}


def _as_bool(x: Any) -> Optional[bool]:
    if isinstance(x, bool):
        return x
    if isinstance(x, str):
        s = x.strip().lower()
        if s in ("true", "yes", "1"):
            return True
        if s in ("false", "no", "0"):
            return False
    return None


def _num(x: Any) -> Optional[float]:
    if isinstance(x, (list, dict)):
        return None
    return safe_num(x)


def _text(x: Any) -> str:
    return str(x).strip()


def _equals(answer: Any, target: Any, numeric: bool) -> bool:
    if is_unanswered(answer):
        return False
    if isinstance(answer, list):
        if isinstance(target, list):
            return sorted(map(_text, answer)) == sorted(map(_text, target))
        return False
    if isinstance(answer, bool) or isinstance(target, bool):
        a = _as_bool(answer)
        return a is not None and a == _as_bool(target)
    if numeric:
        a, b = _num(answer), _num(target)
        if a is not None and b is not None:
            return a == b
    return _text(answer) == _text(target)


def _ordered(answer: Any, target: Any, numeric: bool, op: Op) -> bool:
    if is_unanswered(answer) or isinstance(answer, (list, dict, bool)):
        return False
    a, b = _num(answer), _num(target)
    if a is not None and b is not None:
        return _ORDERING[op](a, b)
    if numeric:
        return False
    # date/time: ISO strings συγκρίνονται λεξικογραφικά
    return _ORDERING[op](_text(answer), _text(target))


def _contains(answer: Any, target: Any) -> bool:
    if isinstance(answer, list):
        return _text(target) in map(_text, answer)
    if isinstance(answer, str):
        return _text(target).lower() in answer.lower()
    return False


def _includes(answer: Any, values: Sequence[Any], require_all: bool) -> bool:
    if is_unanswered(answer):
        return False
    have = set(map(_text, answer)) if isinstance(answer, list) else {_text(answer)}
    wanted = set(map(_text, values))
    return wanted <= have if require_all else bool(wanted & have)


# ------------------------- conditions -------------------------
def _resolve_type(condition: LogicCondition, questions: Optional[QuestionIndex], rule_id: Optional[str]) -> Optional[QuestionType]:
    if questions is None:
        return None
    target = questions.get(condition.question_id)
    if target is None:
        raise InvalidRuleError(
            f"condition reads unknown question '{condition.question_id}'",
            rule_id=rule_id, question_id=condition.question_id,
        )
    if condition.operator not in get_valid_operators(target.type):
        raise InvalidRuleError(
            f"operator '{condition.operator.value}' is not valid for {target.type.value} question '{target.id}'",
            rule_id=rule_id, question_id=target.id,
        )
    return target.type


def _apply(condition: LogicCondition, answer: Any, qtype: Optional[QuestionType]) -> bool:
    op, value = condition.operator, condition.value
    numeric = qtype is None or qtype in NUMERIC_TYPES

    if op == Op.ANSWERED:
        return not is_unanswered(answer)
    if op == Op.NOT_ANSWERED:
        return is_unanswered(answer)
    if op == Op.EQUALS:
        return _equals(answer, value, numeric)
    if op == Op.NOT_EQUALS:
        return not _equals(answer, value, numeric)
    if op in _ORDERING:
        return _ordered(answer, value, numeric, op)
    if op == Op.BETWEEN:
        a = _num(answer) if not is_unanswered(answer) else None
        return a is not None and value.min <= a <= value.max
    if op == Op.CONTAINS:
        return _contains(answer, value)
    if op == Op.INCLUDES_ANY:
        return _includes(answer, value, require_all=False)
    if op == Op.INCLUDES_ALL:
        return _includes(answer, value, require_all=True)
    if op == Op.IS_TRUE:
        return answer is True
    if op == Op.IS_FALSE:
        return answer is False
    return False


def evaluate_condition(
    condition: LogicCondition,
    responses: Mapping[str, Any],
    questions: Union[QuestionIndex, Sequence[Question], None] = None,
) -> bool:
    qtype = _resolve_type(condition, _index(questions), None)
    return _apply(condition, responses.get(condition.question_id), qtype)


# ------------------------- rules -------------------------
def evaluate_rule(
    rule: LogicRule,
    responses: Mapping[str, Any],
    questions: Union[QuestionIndex, Sequence[Question], None] = None,
) -> bool:
    """True when the rule's conditions hold under its conditionLogic.

    Raises InvalidRuleError when `questions` is given and a condition cannot be
    resolved against it (unknown question, operator not allowed for its type).
    """
    index = _index(questions)
    if index is not None and rule.target_question_id and rule.target_question_id not in index:
        raise InvalidRuleError(
            f"rule targets unknown question '{rule.target_question_id}'",
            rule_id=rule.id, question_id=rule.target_question_id,
        )
    # πρώτα επίλυση όλων, ώστε ένα σπασμένο condition να μη κρύβεται πίσω από short-circuit
    typed = [(c, _resolve_type(c, index, rule.id)) for c in rule.conditions]
    results = (_apply(c, responses.get(c.question_id), t) for c, t in typed)
    if rule.condition_logic == ConditionLogic.OR:
        return any(results)
    return all(results)


def evaluate_logic_rules(
    rules: Optional[Sequence[LogicRule]],
    responses: Mapping[str, Any],
    questions: Union[QuestionIndex, Sequence[Question], None] = None,
    strict: Optional[bool] = None,
) -> LogicResult:
    """First rule in declared order that matches wins.

    Rules that cannot be resolved are skipped and logged (or raised when strict).
    """
    if not rules:
        return LogicResult()
    strict = settings.LOGIC_STRICT if strict is None else strict
    index = _index(questions)

    for rule in rules:
        try:
            matched = evaluate_rule(rule, responses, index)
        except InvalidRuleError as exc:
            if strict:
                raise
            logger.warning("skipping logic rule %s: %s", rule.id, exc)
            continue
        if matched:
            return LogicResult(action=rule.action, target_question_id=rule.target_question_id, matched_rule=rule)
    return LogicResult()
