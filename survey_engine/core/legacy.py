# survey_engine/core/legacy.py
"""The one place where the deprecated `skipCondition` shape meets unified LogicRules."""
from __future__ import annotations

from typing import Any, Dict, List, Mapping, Sequence, Tuple, Union

from survey_engine.models.logic import (
    ConditionLogic,
    LegacySkipCondition,
    LogicAction,
    LogicCondition,
    LogicOperator,
    LogicRule,
)
from survey_engine.models.question import Question


LEGACY_RULE_PREFIX = "legacy-skip-"


def legacy_condition_to_condition(skip: Union[LegacySkipCondition, Mapping[str, Any]]) -> LogicCondition:
    if not isinstance(skip, LegacySkipCondition):
        skip = LegacySkipCondition.model_validate(skip)
    return LogicCondition(question_id=skip.question_id, operator=LogicOperator.EQUALS, value=skip.answer)


def legacy_condition_to_rule(
    owner_question_id: str,
    skip: Union[LegacySkipCondition, Mapping[str, Any]],
) -> LogicRule:
    """`skip owner if <questionId> == <answer>` as a unified skip rule targeting the owner."""
    return LogicRule(
        id=f"{LEGACY_RULE_PREFIX}{owner_question_id}",
        conditions=[legacy_condition_to_condition(skip)],
        condition_logic=ConditionLogic.AND,
        action=LogicAction.SKIP,
        target_question_id=owner_question_id,
    )


def rule_trigger(rule: LogicRule, owner: str, position: Mapping[str, int]) -> str:
    read = [c.question_id for c in rule.conditions]
    if not all(qid in position for qid in read):
        return owner
    return max(read, key=position.__getitem__)


RuleGroup = Tuple[str, List[LogicRule]]


def collect_rules(questions: Sequence[Question]) -> Dict[str, List[RuleGroup]]:
    """Rule groups keyed by the question after which they are evaluated.

    A rule fires once every question it reads has been presented, i.e. after the
    latest of them in survey order. Rules reading an unknown question stay on the
    question that declares them and are dropped by the evaluator.

    Each group is `(declaring_question_id, rules)`: the rules one question declares
    for that trigger, in declared order, with its legacy skipCondition last.
    First-match applies inside a group only; groups follow survey order.
    """
    position = {q.id: i for i, q in enumerate(questions)}
    table: Dict[str, List[RuleGroup]] = {q.id: [] for q in questions}
    for q in questions:
        rules = list(q.logic_rules)
        if q.skip_condition is not None:
            rules.append(legacy_condition_to_rule(q.id, q.skip_condition))
        by_trigger: Dict[str, List[LogicRule]] = {}
        for rule in rules:
            by_trigger.setdefault(rule_trigger(rule, q.id, position), []).append(rule)
        for trigger, grouped in by_trigger.items():
            table[trigger].append((q.id, grouped))
    return table
