import logging

import pytest

from survey_engine.core.traversal import SurveyTraversal, first_question_id, next_question_id, replay_path


def skip_rule(rule_id, source, value, target):
    return {
        "id": rule_id,
        "conditions": [{"questionId": source, "operator": "equals", "value": value}],
        "action": "skip",
        "targetQuestionId": target,
    }


@pytest.fixture
def other_survey(make_question):
    return [
        make_question("q1", "text"),
        make_question("q2", "multiple_choice", options=["A", "Other"],
                      logicRules=[skip_rule("skip-q3", "q2", "Other", "q3")]),
        make_question("q3", "text"),
        make_question("q4", "text"),
    ]


def test_skip_hides_target(other_survey):
    assert replay_path(other_survey, {"q2": "Other"}) == ["q1", "q2", "q4"]
    assert replay_path(other_survey, {"q2": "A"}) == ["q1", "q2", "q3", "q4"]


def test_no_rules_walks_in_order(make_question):
    questions = [make_question(f"q{i}", "text") for i in range(1, 4)]
    assert replay_path(questions) == ["q1", "q2", "q3"]
    assert first_question_id(questions) == "q1"
    assert replay_path([]) == []


def test_legacy_skip_condition(make_question):
    questions = [
        make_question("q2", "multiple_choice", options=["A", "Other"]),
        make_question("q3", "text", skipCondition={"questionId": "q2", "answer": "Other"}),
        make_question("q4", "text"),
    ]
    assert replay_path(questions, {"q2": "Other"}) == ["q2", "q4"]
    assert replay_path(questions, {"q2": "A"}) == ["q2", "q3", "q4"]


def test_later_answers_are_not_visible_early(make_question):
    # declared on q1 but reads q3, so it cannot fire before q3 is presented
    questions = [
        make_question("q1", "text", logicRules=[{
            "id": "peek",
            "conditions": [{"questionId": "q3", "operator": "answered"}],
            "action": "skip",
            "targetQuestionId": "q2",
        }]),
        make_question("q2", "text"),
        make_question("q3", "text"),
    ]
    assert replay_path(questions, {"q3": "already there"}) == ["q1", "q2", "q3"]


def test_show_reveals_hidden_question(make_question):
    questions = [
        make_question("q1", "yes_no", logicRules=[{
            "id": "show-q3",
            "conditions": [{"questionId": "q1", "operator": "is_true"}],
            "action": "show",
            "targetQuestionId": "q3",
        }]),
        make_question("q2", "text"),
        make_question("q3", "text"),
    ]
    assert replay_path(questions, {"q1": False}) == ["q1", "q2"]
    assert replay_path(questions, {"q1": True}) == ["q1", "q2", "q3"]


def test_end_stops_the_survey(make_question):
    questions = [
        make_question("q1", "yes_no", logicRules=[{
            "id": "stop",
            "conditions": [{"questionId": "q1", "operator": "is_false"}],
            "action": "end",
        }]),
        make_question("q2", "text"),
    ]
    assert replay_path(questions, {"q1": False}) == ["q1"]
    decision = next_question_id(questions, "q1", {"q1": False})
    assert decision.ended
    assert decision.next_question_id is None
    assert decision.matched_rule_id == "stop"


def test_jump_moves_pointer(make_question):
    questions = [
        make_question("q1", "nps", logicRules=[{
            "id": "detractor",
            "conditions": [{"questionId": "q1", "operator": "lte", "value": 6}],
            "action": "jump",
            "targetQuestionId": "q4",
        }]),
        make_question("q2", "text"),
        make_question("q3", "text"),
        make_question("q4", "text"),
    ]
    assert replay_path(questions, {"q1": 3}) == ["q1", "q4"]
    assert replay_path(questions, {"q1": 9}) == ["q1", "q2", "q3", "q4"]


def test_backwards_jump_never_re_presents(make_question, caplog):
    questions = [
        make_question("q1", "text"),
        make_question("q2", "text", logicRules=[{
            "id": "back",
            "conditions": [{"questionId": "q2", "operator": "answered"}],
            "action": "jump",
            "targetQuestionId": "q1",
        }]),
        make_question("q3", "text"),
    ]
    with caplog.at_level(logging.WARNING):
        assert replay_path(questions, {"q2": "x"}) == ["q1", "q2", "q3"]
    assert "already presented" in caplog.text


def test_next_question_id(other_survey):
    decision = next_question_id(other_survey, "q2", {"q2": "Other"})
    assert decision.next_question_id == "q4"
    assert decision.matched_rule_id == "skip-q3"

    last = next_question_id(other_survey, "q4", {"q2": "A"})
    assert last.next_question_id is None
    assert last.ended


def test_next_question_id_unknown_question(other_survey):
    with pytest.raises(KeyError):
        next_question_id(other_survey, "nope", {})


def test_walk_is_repeatable(other_survey):
    trav = SurveyTraversal(other_survey, {"q2": "Other"})
    assert trav.path() == trav.path()


def test_legacy_skip_fires_beside_trigger_question_rules(make_question):
    questions = [
        make_question("q1", "multiple_choice", options=["A", "Other"],
                      logicRules=[skip_rule("skip-q4", "q1", "Other", "q4")]),
        make_question("q2", "text", skipCondition={"questionId": "q1", "answer": "Other"}),
        make_question("q3", "text"),
        make_question("q4", "text"),
    ]
    assert replay_path(questions, {"q1": "Other"}) == ["q1", "q3"]
    assert replay_path(questions, {"q1": "A"}) == ["q1", "q2", "q3", "q4"]


def test_rules_from_different_questions_sharing_a_trigger_all_apply(make_question):
    questions = [
        make_question("q1", "multiple_choice", options=["A", "Other"]),
        make_question("q2", "text", logicRules=[skip_rule("from-q2", "q1", "Other", "q3")]),
        make_question("q3", "text", logicRules=[skip_rule("from-q3", "q1", "Other", "q4")]),
        make_question("q4", "text"),
        make_question("q5", "text"),
    ]
    assert replay_path(questions, {"q1": "Other"}) == ["q1", "q2", "q5"]


def test_first_match_is_scoped_to_the_declaring_question(make_question):
    questions = [
        make_question("q1", "multiple_choice", options=["A", "Other"], logicRules=[
            skip_rule("first", "q1", "Other", "q2"),
            skip_rule("shadowed", "q1", "Other", "q3"),
        ]),
        make_question("q2", "text"),
        make_question("q3", "text"),
        make_question("q4", "text", logicRules=[skip_rule("other-owner", "q1", "Other", "q5")]),
        make_question("q5", "text"),
    ]
    assert replay_path(questions, {"q1": "Other"}) == ["q1", "q3", "q4"]


def test_end_from_one_question_wins_over_skips_from_others(make_question):
    questions = [
        make_question("q1", "multiple_choice", options=["A", "Other"], logicRules=[{
            "id": "stop",
            "conditions": [{"questionId": "q1", "operator": "equals", "value": "Other"}],
            "action": "end",
        }]),
        make_question("q2", "text", skipCondition={"questionId": "q1", "answer": "Other"}),
        make_question("q3", "text"),
    ]
    decisions = list(SurveyTraversal(questions, {"q1": "Other"}).walk())
    assert [d.current_question_id for d in decisions] == ["q1"]
    assert decisions[0].ended
    assert decisions[0].matched_rule_id == "stop"
