# survey_engine/models/logic.py
from __future__ import annotations

from enum import Enum
from typing import Any, List, Optional, Union

from pydantic import Field, StrictBool, field_validator, model_validator

from survey_engine.models.base import BaseModelConfig, Number


class LogicOperator(str, Enum):
    ANSWERED = "answered"
    NOT_ANSWERED = "not_answered"
    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    GT = "gt"
    LT = "lt"
    GTE = "gte"
    LTE = "lte"
    BETWEEN = "between"
    CONTAINS = "contains"
    INCLUDES_ANY = "includes_any"
    INCLUDES_ALL = "includes_all"
    IS_TRUE = "is_true"
    IS_FALSE = "is_false"


class LogicAction(str, Enum):
    SKIP = "skip"
    SHOW = "show"
    END = "end"
    JUMP = "jump"


class ConditionLogic(str, Enum):
    AND = "and"
    OR = "or"


UNARY_OPERATORS = frozenset({
    LogicOperator.ANSWERED,
    LogicOperator.NOT_ANSWERED,
    LogicOperator.IS_TRUE,
    LogicOperator.IS_FALSE,
})
MEMBERSHIP_OPERATORS = frozenset({LogicOperator.INCLUDES_ANY, LogicOperator.INCLUDES_ALL})

Scalar = Union[StrictBool, int, float, str]


class RangeValue(BaseModelConfig):
    min: Number
    max: Number

    @model_validator(mode="after")
    def _ordered(self):
        if self.min > self.max:
            raise ValueError(f"between range min ({self.min}) > max ({self.max})")
        return self


class LogicCondition(BaseModelConfig):
    question_id: str
    operator: LogicOperator
    value: Union[RangeValue, List[Scalar], Scalar, None] = None

    @model_validator(mode="before")
    @classmethod
    def _wrap_membership_scalar(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        op = data.get("operator")
        value = data.get("value")
        if op in {o.value for o in MEMBERSHIP_OPERATORS} and value is not None and not isinstance(value, list):
            return {**data, "value": [value]}
        return data

    @model_validator(mode="after")
    def _check_value_shape(self):
        op, value = self.operator, self.value
        if op in UNARY_OPERATORS:
            if value is not None:
                raise ValueError(f"operator '{op.value}' takes no value")
        elif op == LogicOperator.BETWEEN:
            if not isinstance(value, RangeValue):
                raise ValueError("operator 'between' requires a {min, max} value")
        elif op in MEMBERSHIP_OPERATORS:
            if not isinstance(value, list) or not value:
                raise ValueError(f"operator '{op.value}' requires a non-empty list value")
        elif value is None or isinstance(value, (list, RangeValue)):
            raise ValueError(f"operator '{op.value}' requires a scalar value")
        return self


class LogicRule(BaseModelConfig):
    id: str
    conditions: List[LogicCondition] = Field(min_length=1)
    condition_logic: ConditionLogic = ConditionLogic.AND
    action: LogicAction
    target_question_id: Optional[str] = None

    @field_validator("condition_logic", mode="before")
    @classmethod
    def _lower_logic(cls, v: Any) -> Any:
        return v.lower() if isinstance(v, str) else v

    @model_validator(mode="after")
    def _check_target(self):
        if self.action == LogicAction.END:
            if self.target_question_id:
                raise ValueError("'end' rules take no targetQuestionId")
        elif not self.target_question_id:
            raise ValueError(f"'{self.action.value}' rules require a targetQuestionId")
        return self


class LegacySkipCondition(BaseModelConfig):
    """Deprecated single-condition shape: skip the owning question if `question_id` == `answer`."""
    question_id: str
    answer: Scalar


class LogicResult(BaseModelConfig):
    action: Optional[LogicAction] = None
    target_question_id: Optional[str] = None
    matched_rule: Optional[LogicRule] = None

    @property
    def matched(self) -> bool:
        return self.matched_rule is not None


class NavigationDecision(BaseModelConfig):
    current_question_id: Optional[str] = None
    next_question_id: Optional[str] = None
    ended: bool = False
    matched_rule_id: Optional[str] = None
