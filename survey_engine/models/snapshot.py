# survey_engine/models/snapshot.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import Field

from survey_engine.models.base import BaseModelConfig
from survey_engine.models.question import Question
from survey_engine.models.scoring import ScoreConfig


class SurveySnapshot(BaseModelConfig):
    """Everything needed to score one response set offline."""
    survey_id: Optional[str] = None
    questions: List[Question] = Field(default_factory=list)
    responses: Dict[str, Any] = Field(default_factory=dict)
    score_config: Optional[ScoreConfig] = None
