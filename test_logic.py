import logging

import pytest
from pydantic import ValidationError

from survey_engine.core.errors import InvalidRuleError
from survey_engine.core.legacy import collect_rules, legacy_condition_to_rule
from survey_engine.core.logic import evaluate_condition, evaluate_logic_rules, evaluate_rule
from survey_engine.models.logic import LogicAction, LogicCondition, LogicOperator, LogicRule


def rule(rule_id, conditions, action="skip", target="q3", logic="and"):
    data = {"id": rule_id, "conditions": conditions, "conditionLogic": logic, "action": action}
    if target is not None:
        data["targetQuestionId"] = target
    return LogicRule.model_validate(data)


def cond(question_id, operator, value=None):
    data = {"questionId": question_id, "operator": operator}
    if value is not None:
        data["value"] = value
    return data


@pytest.fixture
def questions(make_question):
    return [
        make_question("q1", "rating", ratingScale=10),
        make_question("q2", "multiple_choice", options=["A", "Other"]),
        make_question("q3", "checkbox", options=["x", "y", "z"]),
        make_question("q4", "date"),
        make_question("q5", "yes_no"),
    ]


def test_equals_triggers_skip(questions):
    r = rule("r1", [cond("q2", "equals", "Other")])
    assert evaluate_rule(r, {"q2": "Other"}, questions)
    assert not evaluate_rule(r, {"q2": "A"}, questions)


def test_numeric_strings_are_coerced_for_numeric_types(questions):
    c = LogicCondition.model_validate(cond("q1", "gt", 5))
    assert evaluate_condition(c, {"q1": "7"}, questions)
    assert not evaluate_condition(c, {"q1": "3"}, questions)


def test_between_is_inclusive(questions):
    c = LogicCondition.model_validate(cond("q1", "between", {"min": 1, "max": 5}))
    assert evaluate_condition(c, {"q1": 5}, questions)
    assert evaluate_condition(c, {"q1": 1}, questions)
    assert not evaluate_condition(c, {"q1": 6}, questions)


def test_dates_compare_as_iso_strings(questions):
    c = LogicCondition.model_validate(cond("q4", "gt", "2024-03-01"))
    assert evaluate_condition(c, {"q4": "2024-05-01"}, questions)
    assert not evaluate_condition(c, {"q4": "2023-12-31"}, questions)


def test_membership_operators(questions):
    answers = {"q3": ["x", "y"]}
    assert evaluate_condition(LogicCondition.model_validate(cond("q3", "includes_any", ["z", "y"])), answers, questions)
    assert not evaluate_condition(LogicCondition.model_validate(cond("q3", "includes_all", ["x", "z"])), answers, questions)


def test_scalar_is_wrapped_for_includes():
    c = LogicCondition.model_validate(cond("q3", "includes_any", "x"))
    assert c.value == ["x"]


def test_boolean_operators(questions):
    c = LogicCondition.model_validate(cond("q5", "is_true"))
    assert evaluate_condition(c, {"q5": True}, questions)
    assert not evaluate_condition(c, {"q5": "true"}, questions)
    eq = LogicCondition.model_validate(cond("q5", "equals", True))
    with pytest.raises(InvalidRuleError):
        evaluate_condition(eq, {"q5": True}, questions)


def test_presence_operators(questions):
    answered = LogicCondition.model_validate(cond("q3", "answered"))
    assert not evaluate_condition(answered, {"q3": []}, questions)
    assert evaluate_condition(answered, {"q3": ["x"]}, questions)


def test_not_equals_on_unanswered_is_true(questions):
    c = LogicCondition.model_validate(cond("q2", "not_equals", "A"))
    assert evaluate_condition(c, {}, questions)


def test_and_or(questions):
    conditions = [cond("q1", "gte", 8), cond("q2", "equals", "Other")]
    responses = {"q1": 9, "q2": "A"}
    assert not evaluate_rule(rule("and", conditions), responses, questions)
    assert evaluate_rule(rule("or", conditions, logic="OR"), responses, questions)


def test_first_matching_rule_wins(questions):
    rules = [
        rule("first", [cond("q1", "gt", 2)], action="jump", target="q4"),
        rule("second", [cond("q1", "gt", 1)], action="skip", target="q3"),
    ]
    result = evaluate_logic_rules(rules, {"q1": 5}, questions)
    assert result.matched_rule.id == "first"
    assert result.action == LogicAction.JUMP
    assert result.target_question_id == "q4"


def test_no_match(questions):
    result = evaluate_logic_rules([rule("r", [cond("q1", "gt", 9)])], {"q1": 2}, questions)
    assert not result.matched
    assert result.action is None


def test_unresolvable_rules_are_skipped_and_logged(questions, caplog):
    rules = [
        rule("ghost", [cond("missing", "answered")]),
        rule("bad-op", [cond("q2", "gt", 3)]),
        rule("ok", [cond("q2", "answered")]),
    ]
    with caplog.at_level(logging.WARNING):
        result = evaluate_logic_rules(rules, {"q2": "A"}, questions, strict=False)
    assert result.matched_rule.id == "ok"
    assert "ghost" in caplog.text
    assert "bad-op" in caplog.text


def test_strict_mode_raises(questions):
    with pytest.raises(InvalidRuleError) as info:
        evaluate_logic_rules([rule("ghost", [cond("missing", "answered")])], {}, questions, strict=True)
    assert info.value.rule_id == "ghost"


def test_rule_shape_is_validated():
    with pytest.raises(ValidationError):
        rule("end-with-target", [cond("q1", "answered")], action="end", target="q2")
    with pytest.raises(ValidationError):
        rule("jump-without-target", [cond("q1", "answered")], action="jump", target=None)
    with pytest.raises(ValidationError):
        LogicCondition.model_validate(cond("q1", "between", {"min": 5, "max": 1}))
    with pytest.raises(ValidationError):
        LogicRule.model_validate({"id": "empty", "conditions": [], "action": "end"})


def test_legacy_condition_becomes_skip_rule():
    r = legacy_condition_to_rule("q3", {"questionId": "q2", "answer": "Other"})
    assert r.action == LogicAction.SKIP
    assert r.target_question_id == "q3"
    assert r.conditions[0].operator == LogicOperator.EQUALS
    assert r.conditions[0].value == "Other"


def test_collect_rules_groups_by_trigger_and_declaring_question(make_question):
    questions = [
        make_question("q1", "text", logicRules=[{
            "id": "late",
            "conditions": [{"questionId": "q2", "operator": "answered"}],
            "action": "end",
        }]),
        make_question("q2", "multiple_choice", options=["A", "Other"], logicRules=[{
            "id": "own",
            "conditions": [{"questionId": "q2", "operator": "equals", "value": "Other"}],
            "action": "skip",
            "targetQuestionId": "q4",
        }]),
        make_question("q3", "text", skipCondition={"questionId": "q2", "answer": "Other"}),
        make_question("q4", "text"),
    ]
    table = collect_rules(questions)
    assert table["q1"] == []
    groups = [(owner, [r.id for r in rules]) for owner, rules in table["q2"]]
    assert groups == [("q1", ["late"]), ("q2", ["own"]), ("q3", ["legacy-skip-q3"])]


def test_legacy_rule_follows_own_rules_in_its_group(make_question):
    questions = [
        make_question("q1", "multiple_choice", options=["A", "Other"]),
        make_question("q2", "text", skipCondition={"questionId": "q1", "answer": "Other"}, logicRules=[{
            "id": "own",
            "conditions": [{"questionId": "q1", "operator": "answered"}],
            "action": "show",
            "targetQuestionId": "q3",
        }]),
        make_question("q3", "text"),
    ]
    (owner, rules), = collect_rules(questions)["q1"]
    assert owner == "q2"
    assert [r.id for r in rules] == ["own", "legacy-skip-q2"]
