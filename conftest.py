import pytest

from survey_engine.models.question import Question
from survey_engine.models.scoring import ScoreConfig


@pytest.fixture
def make_question():
    def _make(qid, qtype, **fields):
        return Question.model_validate({"id": qid, "type": qtype, **fields})
    return _make


@pytest.fixture
def two_band_config():
    return ScoreConfig.model_validate({
        "enabled": True,
        "categories": [
            {"id": "engagement", "name": "Engagement"},
            {"id": "satisfaction", "name": "Satisfaction"},
        ],
        "scoreRanges": [
            {"id": "low", "min": 0, "max": 49, "label": "Needs work"},
            {"id": "high", "min": 50, "max": 100, "label": "Strong"},
        ],
    })
