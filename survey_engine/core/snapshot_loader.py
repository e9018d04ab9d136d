# survey_engine/core/snapshot_loader.py
from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Optional, Tuple

from pydantic import ValidationError

from survey_engine.core.adapter import normalize_questions
from survey_engine.core.config import settings
from survey_engine.core.errors import QuestionFormatError, SnapshotError
from survey_engine.models.snapshot import SurveySnapshot

logger = logging.getLogger(__name__)

OVERRIDE_ENV = "SNAPSHOT_OVERRIDE_JSON"


def _load_from_env() -> Tuple[Optional[dict], str]:
    raw = os.getenv(OVERRIDE_ENV)
    if not raw:
        return None, "none"
    try:
        return json.loads(raw), "env"
    except json.JSONDecodeError as e:
        logger.warning("%s is not valid JSON (%s); falling back to file", OVERRIDE_ENV, e)
        return None, "env_invalid"


def _load_from_file(path: Path) -> Tuple[dict, str]:
    if not path.exists():
        raise SnapshotError(f"snapshot file not found: {path}")
    try:
        # utf-8-sig: αρχεία από Windows editors έχουν BOM
        return json.loads(path.read_text(encoding="utf-8-sig")), f"file:{path}"
    except (OSError, json.JSONDecodeError) as e:
        raise SnapshotError(f"failed to read snapshot file {path}: {e}") from e


def parse_snapshot(data: Any) -> SurveySnapshot:
    if not isinstance(data, dict):
        raise SnapshotError("snapshot must be a JSON object")
    try:
        questions = normalize_questions(data.get("questions"))
        return SurveySnapshot.model_validate({**data, "questions": questions})
    except (QuestionFormatError, ValidationError) as e:
        raise SnapshotError(f"invalid snapshot: {e}") from e


def load_snapshot(path: Optional[str] = None) -> Tuple[SurveySnapshot, str]:
    """Snapshot from an explicit `path`, else $SNAPSHOT_OVERRIDE_JSON, else settings.SNAPSHOT_PATH."""
    data, src = (None, "none") if path else _load_from_env()
    if data is None:
        data, src = _load_from_file(Path(path or settings.SNAPSHOT_PATH))
    snapshot = parse_snapshot(data)
    logger.info("snapshot loaded from %s (%d questions)", src, len(snapshot.questions))
    return snapshot, src
