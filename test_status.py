import logging

from survey_engine.core.status import check_scoring_invariants, derive_scoring_state
from survey_engine.models.scoring import ScoreConfig, ScoringState


def test_no_responses_comes_first(two_band_config):
    result = derive_scoring_state(two_band_config, response_count=0)
    assert result.state == ScoringState.NO_RESPONSES
    assert result.show_participation
    assert not result.show_scoring


def test_scoring_disabled():
    assert derive_scoring_state(None, 5).state == ScoringState.NO_SCORING
    assert derive_scoring_state(ScoreConfig(enabled=False), 5).state == ScoringState.NO_SCORING


def test_enabled_without_categories():
    result = derive_scoring_state(ScoreConfig(enabled=True), 5)
    assert result.state == ScoringState.MISCONFIGURED
    assert result.severity == "error"


def test_enabled_without_bands(two_band_config):
    config = two_band_config.model_copy(update={"score_ranges": []})
    result = derive_scoring_state(config, 5)
    assert result.state == ScoringState.MISCONFIGURED
    assert result.title == "Score Ranges Missing"


def test_all_null_dimension_scores(two_band_config, caplog):
    with caplog.at_level(logging.WARNING):
        result = derive_scoring_state(two_band_config, 5, dimension_scores={"engagement": None})
    assert result.state == ScoringState.MISCONFIGURED
    assert "SCORES_ALL_NULL" in caplog.text


def test_single_version_then_healthy(two_band_config):
    single = derive_scoring_state(two_band_config, 5, version_count=1, dimension_scores={"engagement": 80})
    assert single.state == ScoringState.SINGLE_VERSION
    assert single.show_scoring and not single.show_trends

    healthy = derive_scoring_state(two_band_config, 5, version_count=3)
    assert healthy.state == ScoringState.HEALTHY
    assert healthy.show_trends


def test_invariant_check():
    assert check_scoring_invariants(True, 4, {"a": None}, band_counts=[0, 0]) == ["SCORES_ALL_NULL", "BANDS_ALL_ZERO"]
    assert check_scoring_invariants(False, 4, {"a": None}) == []
    assert check_scoring_invariants(True, 4, {"a": 10}, band_counts=[1, 3]) == []
