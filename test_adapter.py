import pytest

from survey_engine.core.adapter import normalize_question, normalize_questions, to_builder_question, to_runtime_question
from survey_engine.core.errors import QuestionFormatError
from survey_engine.models.question import Question, QuestionType


def test_builder_text_becomes_question():
    q = normalize_question({"id": "q1", "type": "rating", "text": "How likely?"})
    assert q.question == "How likely?"
    assert q.required is False
    assert q.type == QuestionType.RATING


def test_invalid_question_raises_with_details():
    with pytest.raises(QuestionFormatError, match="Invalid question q9"):
        normalize_question({"id": "q9", "type": "hologram"})
    with pytest.raises(QuestionFormatError):
        normalize_question("not a question")


def test_media_defaults():
    upload = normalize_question({"id": "f", "type": "file_upload", "fileTypes": "pdf; png"})
    payload = upload.to_payload()
    assert payload["allowedTypes"] == ["pdf", "png"]
    assert payload["maxFileSize"] == 10
    assert payload["maxFiles"] == 1

    audio = normalize_question({"id": "a", "type": "audio_capture", "duration": "30"})
    assert audio.to_payload()["maxDuration"] == 30


def test_image_options_built_from_parallel_lists():
    q = normalize_question({
        "id": "img",
        "type": "image_choice",
        "options": ["cat", "dog"],
        "optionImages": ["https://img/cat.png", ""],
    })
    payload = q.to_payload()
    assert payload["selectionType"] == "single"
    assert payload["imageOptions"] == [{"imageUrl": "https://img/cat.png", "label": "cat", "value": "cat"}]


def test_matrix_type_defaults_to_radio():
    q = normalize_question({"id": "m", "type": "matrix", "rowLabels": ["r1"], "matrixType": None})
    assert q.matrix_type == "radio"
    checkbox = normalize_question({"id": "m", "type": "matrix", "matrixType": "checkbox"})
    assert checkbox.to_payload()["matrixType"] == "checkbox"


def test_round_trip_preserves_scoring_and_logic_fields():
    original = Question.model_validate({
        "id": "q1",
        "type": "multiple_choice",
        "question": "Pick one",
        "options": ["A", "B"],
        "scorable": True,
        "scoreWeight": 2,
        "scoringCategory": "engagement",
        "optionScores": {"A": 1, "B": 3},
        "logicRules": [{
            "id": "r1",
            "conditions": [{"questionId": "q1", "operator": "equals", "value": "B"}],
            "action": "end",
        }],
    })
    builder = to_builder_question(original, 4)
    assert builder["text"] == "Pick one"
    assert builder["order"] == 4
    assert builder["hasLogic"] is True

    back = to_runtime_question(builder)
    for field in ("id", "type", "scorable", "score_weight", "scoring_category", "option_scores", "logic_rules"):
        assert getattr(back, field) == getattr(original, field)
    assert back == original


def test_builder_edits_to_text_win():
    builder = to_builder_question({"id": "q1", "type": "text", "question": "Old"}, 0)
    builder["text"] = "New"
    assert to_runtime_question(builder).question == "New"


def test_normalize_questions_handles_none():
    assert normalize_questions(None) == []
