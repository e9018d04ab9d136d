# survey_engine/core/bands.py
from __future__ import annotations

import math
from typing import List, Literal, Optional, Sequence, Union

from survey_engine.models.base import Number
from survey_engine.models.scoring import ScoreBand, ScoreConfig

BandView = Literal["category", "results"]


def round_half_up(x: float) -> int:
    # Όχι το round() της Python (banker's rounding): 62.5 -> 63
    return int(math.floor(x + 0.5))


def to_percentage(score: Number, max_score: Number) -> int:
    if max_score <= 0:
        return 0
    return max(0, min(100, round_half_up(score / max_score * 100)))


def bands_for(config: Optional[ScoreConfig], view: BandView = "category") -> List[ScoreBand]:
    """Global bands for a view.

    The category view reads `scoreRanges` first and falls back to the results
    screen bands; the results view does the opposite.
    """
    if config is None:
        return []
    primary = list(config.score_ranges or [])
    results = list((config.results_screen.score_ranges or []) if config.results_screen else [])
    if view == "results":
        return results or primary
    return primary or results


def bands_for_category(config: Optional[ScoreConfig], category_id: str) -> List[ScoreBand]:
    if config is None:
        return []
    rs = config.results_screen
    for cat in (rs.categories or []) if rs else []:
        if cat.category_id == category_id and cat.bands_mode == "custom" and cat.bands:
            return list(cat.bands)
    return bands_for(config, "category")


def resolve_band(
    value: Number,
    config_or_bands: Union[ScoreConfig, Sequence[ScoreBand], None],
    view: BandView = "category",
) -> Optional[ScoreBand]:
    """First band in list order whose inclusive [min, max] contains `value`, else None."""
    if config_or_bands is None:
        return None
    if isinstance(config_or_bands, ScoreConfig):
        bands = bands_for(config_or_bands, view)
    else:
        bands = list(config_or_bands)
    for band in bands:
        if band.min <= value <= band.max:
            return band
    return None
