# survey_engine/models/scoring.py
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import Field

from survey_engine.models.base import BaseModelConfig, Number


class ScoringMode(str, Enum):
    NUMERIC_DIRECT = "numeric_direct"
    POSITION_MAPPED = "position_mapped"
    CUSTOM = "custom"
    COUNT = "count"
    NPS = "nps"
    MATRIX_SUM = "matrix_sum"
    RANKING_WEIGHTED = "ranking_weighted"
    CONSTANT_SUM_TOTAL = "constant_sum_total"
    NONE = "none"


NpsGroup = Literal["detractor", "passive", "promoter"]


# ============================== config ==============================
class ScoreCategory(BaseModelConfig):
    id: str
    name: str


class ScoreBand(BaseModelConfig):
    id: str
    min: Number
    max: Number
    label: str
    color: Optional[str] = None
    interpretation: Optional[str] = None


class CategoryResultConfig(BaseModelConfig):
    category_id: str
    bands_mode: Literal["global", "custom"] = "global"
    bands: Optional[List[ScoreBand]] = None


class ResultsScreenConfig(BaseModelConfig):
    enabled: bool = False
    score_ranges: Optional[List[ScoreBand]] = None
    categories: Optional[List[CategoryResultConfig]] = None


class ScoreConfig(BaseModelConfig):
    enabled: bool = False
    categories: List[ScoreCategory] = Field(default_factory=list)
    score_ranges: List[ScoreBand] = Field(default_factory=list)
    results_screen: Optional[ResultsScreenConfig] = None
    scoring_engine_id: Optional[str] = None


# ============================== results ==============================
class QuestionScore(BaseModelConfig):
    question_id: str
    score: Number = 0
    max_score: Number = 0
    mode: ScoringMode
    category: Optional[str] = None
    answered: bool = False
    nps_group: Optional[NpsGroup] = None


class CategoryScore(BaseModelConfig):
    name: str
    score: Number = 0
    max_score: Number = 0
    percentage: int = 0
    label: Optional[str] = None
    band_id: Optional[str] = None


class ScoreResult(BaseModelConfig):
    total_score: Number = 0
    max_score: Number = 0
    percentage: int = 0
    by_category: Dict[str, CategoryScore] = Field(default_factory=dict)
    band: Optional[ScoreBand] = None
    question_scores: List[QuestionScore] = Field(default_factory=list)


# ============================== diagnostics ==============================
Severity = Literal["error", "warning", "info"]


class ConfigIssue(BaseModelConfig):
    code: str
    severity: Severity
    message: str
    question_id: Optional[str] = None
    rule_id: Optional[str] = None
    category_id: Optional[str] = None
    band_id: Optional[str] = None
    details: Dict[str, Any] = Field(default_factory=dict)


class ScoringState(str, Enum):
    NO_RESPONSES = "no-responses"
    NO_SCORING = "no-scoring"
    MISCONFIGURED = "misconfigured"
    SINGLE_VERSION = "single-version"
    HEALTHY = "healthy"


class ScoringStateResult(BaseModelConfig):
    state: ScoringState
    title: str
    message: str
    show_scoring: bool
    show_trends: bool
    show_participation: bool
    show_question_summary: bool
    severity: Severity
