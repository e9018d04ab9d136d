import pytest

from survey_engine.core import registry
from survey_engine.core.errors import RegistryMismatchError, UnknownQuestionTypeError
from survey_engine.core.registry import (
    check_registry_consistency,
    get_answer_shape,
    get_scoring_mode,
    get_valid_operators,
    is_scorable_type,
    supports_logic,
)
from survey_engine.models.logic import LogicOperator
from survey_engine.models.question import QuestionType
from survey_engine.models.scoring import ScoringMode


def test_tables_cover_every_question_type():
    assert len(QuestionType) == 32
    check_registry_consistency()
    for qtype in QuestionType:
        assert get_answer_shape(qtype) is not None
        assert isinstance(get_valid_operators(qtype), tuple)
        assert isinstance(get_scoring_mode(qtype), ScoringMode)


def test_missing_entry_is_detected(monkeypatch):
    broken = dict(registry.SCORING_MODES)
    del broken[QuestionType.RANKING]
    monkeypatch.setitem(registry._TABLES, "SCORING_MODES", broken)
    with pytest.raises(RegistryMismatchError, match="ranking"):
        check_registry_consistency()


def test_unknown_type_string_raises():
    with pytest.raises(UnknownQuestionTypeError):
        get_scoring_mode("hologram")


def test_lookup_accepts_plain_strings():
    assert get_scoring_mode("checkbox") == ScoringMode.COUNT
    assert get_scoring_mode("yes_no") == ScoringMode.CUSTOM
    assert get_scoring_mode("constant_sum") == ScoringMode.CONSTANT_SUM_TOTAL


@pytest.mark.parametrize("qtype", ["number", "rating", "likert", "opinion_scale", "slider", "emoji_rating"])
def test_numeric_direct_types(qtype):
    assert get_scoring_mode(qtype) == ScoringMode.NUMERIC_DIRECT


def test_non_scoring_types():
    for qtype in ("text", "email", "date", "file_upload", "section", "hidden", "calculation"):
        assert not is_scorable_type(qtype)


def test_display_types_take_no_logic():
    assert not supports_logic(QuestionType.SECTION)
    assert not supports_logic(QuestionType.STATEMENT)
    assert supports_logic(QuestionType.TEXT)
    assert LogicOperator.BETWEEN in get_valid_operators("nps")
    assert LogicOperator.GT not in get_valid_operators("multiple_choice")


def test_answer_shapes():
    assert get_answer_shape("checkbox").validate_python(["A", "B"]) == ["A", "B"]
    assert get_answer_shape("yes_no").validate_python(True) is True
    assert get_answer_shape("section").validate_python(None) is None


@pytest.mark.parametrize("qtype, operators", [
    ("phone", {"answered", "not_answered", "equals", "not_equals"}),
    ("yes_no", {"answered", "not_answered", "is_true", "is_false"}),
    ("image_choice", {"answered", "not_answered", "equals", "not_equals", "includes_any"}),
    ("checkbox", {"answered", "not_answered", "includes_all", "includes_any"}),
    ("likert", {"answered", "not_answered", "equals", "not_equals", "gt", "lt", "gte", "lte"}),
    ("slider", {"answered", "not_answered", "gt", "lt", "gte", "lte", "between"}),
    ("emoji_rating", {"answered", "not_answered", "equals", "not_equals", "gt", "lt"}),
    ("ranking", {"answered", "not_answered"}),
    ("calculation", {"equals", "not_equals", "gt", "lt", "gte", "lte", "between"}),
    ("date", {"answered", "not_answered", "equals", "not_equals", "gt", "lt", "between"}),
    ("time", {"answered", "not_answered", "equals", "not_equals"}),
    ("hidden", {"equals", "not_equals", "contains", "includes_any"}),
])
def test_operator_allow_list(qtype, operators):
    assert {op.value for op in get_valid_operators(qtype)} == operators


def test_image_choice_uses_custom_scoring():
    assert get_scoring_mode("image_choice") == ScoringMode.CUSTOM
    assert get_scoring_mode("multiple_choice") == ScoringMode.POSITION_MAPPED
