# survey_engine/models/question.py
from __future__ import annotations

from enum import Enum
from typing import Dict, List, Literal, Optional

from pydantic import ConfigDict, Field

from survey_engine.models.base import BaseModelConfig, Number
from survey_engine.models.logic import LegacySkipCondition, LogicRule


class QuestionType(str, Enum):
    # text input
    TEXT = "text"
    TEXTAREA = "textarea"
    EMAIL = "email"
    PHONE = "phone"
    URL = "url"
    NUMBER = "number"
    # selection
    MULTIPLE_CHOICE = "multiple_choice"
    CHECKBOX = "checkbox"
    DROPDOWN = "dropdown"
    IMAGE_CHOICE = "image_choice"
    YES_NO = "yes_no"
    # rating & scales
    RATING = "rating"
    NPS = "nps"
    LIKERT = "likert"
    OPINION_SCALE = "opinion_scale"
    SLIDER = "slider"
    EMOJI_RATING = "emoji_rating"
    # advanced
    MATRIX = "matrix"
    RANKING = "ranking"
    CONSTANT_SUM = "constant_sum"
    CALCULATION = "calculation"
    # date & time
    DATE = "date"
    TIME = "time"
    DATETIME = "datetime"
    # media
    FILE_UPLOAD = "file_upload"
    SIGNATURE = "signature"
    VIDEO = "video"
    AUDIO_CAPTURE = "audio_capture"
    # structural / special
    SECTION = "section"
    STATEMENT = "statement"
    LEGAL = "legal"
    HIDDEN = "hidden"


class Question(BaseModelConfig):
    # Το free-form per-type config (placeholder, ratingStyle κ.λπ.) περνάει αυτούσιο
    model_config = ConfigDict(extra="allow")

    id: str
    type: QuestionType
    question: str = ""
    description: Optional[str] = None
    required: bool = False

    # choices / matrix
    options: Optional[List[str]] = None
    row_labels: Optional[List[str]] = None
    col_labels: Optional[List[str]] = None
    matrix_type: Literal["radio", "checkbox"] = "radio"
    allow_other: bool = False
    selection_type: Literal["single", "multiple"] = "single"
    yes_label: str = "Yes"
    no_label: str = "No"

    # scales / numeric bounds
    rating_scale: Optional[int] = None
    scale: Optional[int] = None
    points: Optional[int] = None
    likert_points: Optional[int] = None
    min: Optional[Number] = None
    max: Optional[Number] = None
    step: Optional[Number] = None

    # checkbox / constant sum
    min_selections: Optional[int] = None
    max_selections: Optional[int] = None
    total_points: Optional[Number] = None
    correct_option: Optional[str] = None

    # scoring
    scorable: Optional[bool] = None
    score_weight: Optional[Number] = None
    scoring_category: Optional[str] = None
    option_scores: Optional[Dict[str, Number]] = None

    # logic
    logic_rules: List[LogicRule] = Field(default_factory=list)
    skip_condition: Optional[LegacySkipCondition] = None

    @property
    def weight(self) -> Number:
        return 1 if self.score_weight is None else self.score_weight
