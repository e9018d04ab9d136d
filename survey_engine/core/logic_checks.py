# survey_engine/core/logic_checks.py
"""Authoring-time checks for branching rules.

Evaluation skips rules it cannot resolve; this is where those rules get reported.
"""
from __future__ import annotations

from typing import Dict, List, Sequence, Tuple

from survey_engine.core.legacy import legacy_condition_to_rule, rule_trigger
from survey_engine.core.registry import get_valid_operators
from survey_engine.models.logic import LogicAction, LogicRule
from survey_engine.models.question import Question
from survey_engine.models.scoring import ConfigIssue


def _declared_rules(questions: Sequence[Question]) -> List[Tuple[Question, LogicRule]]:
    pairs = []
    for q in questions:
        for rule in q.logic_rules:
            pairs.append((q, rule))
        if q.skip_condition is not None:
            pairs.append((q, legacy_condition_to_rule(q.id, q.skip_condition)))
    return pairs


def _condition_key(rule: LogicRule) -> Tuple:
    conds = sorted(
        (c.question_id, c.operator.value, repr(c.value))
        for c in rule.conditions
    )
    return rule.condition_logic.value, tuple(conds)


def _check_references(questions: Sequence[Question], pairs) -> List[ConfigIssue]:
    by_id = {q.id: q for q in questions}
    issues: List[ConfigIssue] = []
    for owner, rule in pairs:
        target = rule.target_question_id
        if target is not None and target not in by_id:
            issues.append(ConfigIssue(
                code="MISSING_TARGET",
                severity="error",
                message=f'Rule targets non-existent question "{target}"',
                question_id=owner.id,
                rule_id=rule.id,
                details={"targetId": target},
            ))
        for cond in rule.conditions:
            source = by_id.get(cond.question_id)
            if source is None:
                issues.append(ConfigIssue(
                    code="UNKNOWN_CONDITION_QUESTION",
                    severity="error",
                    message=f'Rule condition reads non-existent question "{cond.question_id}"',
                    question_id=owner.id,
                    rule_id=rule.id,
                    details={"conditionQuestionId": cond.question_id},
                ))
            elif cond.operator not in get_valid_operators(source.type):
                issues.append(ConfigIssue(
                    code="INVALID_OPERATOR",
                    severity="error",
                    message=f'Operator "{cond.operator.value}" cannot be used on {source.type.value} question "{source.id}"',
                    question_id=owner.id,
                    rule_id=rule.id,
                    details={"operator": cond.operator.value, "questionType": source.type.value},
                ))
    return issues


def _check_direction(questions: Sequence[Question], pairs) -> List[ConfigIssue]:
    position = {q.id: i for i, q in enumerate(questions)}
    issues: List[ConfigIssue] = []
    for owner, rule in pairs:
        target = rule.target_question_id
        if target not in position:
            continue
        trigger = rule_trigger(rule, owner.id, position)
        if target == trigger:
            issues.append(ConfigIssue(
                code="SELF_TARGET",
                severity="warning",
                message=f'Rule on "{trigger}" targets the question that triggers it and has no effect',
                question_id=owner.id,
                rule_id=rule.id,
                details={"targetId": target},
            ))
        elif position[target] < position[trigger]:
            issues.append(ConfigIssue(
                code="BACKWARDS_JUMP",
                severity="warning",
                message=f'Rule points back from "{trigger}" to "{target}", which has already been passed',
                question_id=owner.id,
                rule_id=rule.id,
                details={"targetId": target, "triggerId": trigger},
            ))
    return issues


def _check_unreachable(questions: Sequence[Question], pairs) -> List[ConfigIssue]:
    # a `show` target stays hidden unless some show rule fires before it is reached
    position = {q.id: i for i, q in enumerate(questions)}
    shows: Dict[str, List[int]] = {}
    for owner, rule in pairs:
        if rule.action == LogicAction.SHOW and rule.target_question_id in position:
            trigger = rule_trigger(rule, owner.id, position)
            shows.setdefault(rule.target_question_id, []).append(position[trigger])

    issues: List[ConfigIssue] = []
    for qid, triggers in shows.items():
        if all(t >= position[qid] for t in triggers):
            q = questions[position[qid]]
            issues.append(ConfigIssue(
                code="UNREACHABLE_QUESTION",
                severity="warning",
                message=f'Question "{q.question[:50]}" may never be shown due to logic rules',
                question_id=qid,
                details={"questionOrder": position[qid]},
            ))
    return issues


def _check_conflicts(questions: Sequence[Question], pairs) -> List[ConfigIssue]:
    position = {q.id: i for i, q in enumerate(questions)}
    groups: Dict[Tuple, List[LogicRule]] = {}
    for owner, rule in pairs:
        key = (rule_trigger(rule, owner.id, position), owner.id, _condition_key(rule))
        groups.setdefault(key, []).append(rule)

    issues: List[ConfigIssue] = []
    for (trigger, _, _), rules in groups.items():
        outcomes = {(r.action.value, r.target_question_id) for r in rules}
        if len(outcomes) > 1:
            issues.append(ConfigIssue(
                code="CONFLICTING_RULES",
                severity="warning",
                message=f'Rules {", ".join(r.id for r in rules)} share the same conditions but lead to different outcomes; only "{rules[0].id}" can fire',
                question_id=trigger,
                rule_id=rules[0].id,
                details={"ruleIds": [r.id for r in rules]},
            ))
    return issues


def validate_survey_logic(questions: Sequence[Question]) -> List[ConfigIssue]:
    if not questions:
        return []
    pairs = _declared_rules(questions)
    return [
        *_check_references(questions, pairs),
        *_check_direction(questions, pairs),
        *_check_unreachable(questions, pairs),
        *_check_conflicts(questions, pairs),
    ]
