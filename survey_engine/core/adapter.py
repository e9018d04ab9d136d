# survey_engine/core/adapter.py
"""Converts between the builder's question shape and the runtime Question model.

The builder keeps the prompt under `text` and adds `order`/`hasLogic`; the
runtime model uses `question` and knows nothing about list position.
"""
from __future__ import annotations

import re
from typing import Any, Dict, Iterable, List, Mapping, Optional

from pydantic import ValidationError

from survey_engine.core.errors import QuestionFormatError
from survey_engine.models.question import Question

BUILDER_ONLY_KEYS = ("text", "order", "hasLogic")
DEFAULT_ALLOWED_FILE_TYPES = ["pdf", "doc", "docx", "jpg", "png"]


def _coerce_list(value: Any) -> Optional[List[str]]:
    if isinstance(value, str):
        return [v.strip() for v in re.split(r"[,;]+", value) if v.strip()]
    if isinstance(value, list):
        return [v.strip() for v in value if isinstance(v, str) and v.strip()]
    return None


def _first(q: Mapping[str, Any], *keys: str) -> Any:
    for k in keys:
        if q.get(k) is not None:
            return q[k]
    return None


def _number(value: Any, default: float) -> Any:
    if value is None:
        return default
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return value
    return value


def _prepare(raw: Mapping[str, Any]) -> Dict[str, Any]:
    q = dict(raw)

    if not q.get("question") and isinstance(q.get("text"), str):
        q["question"] = q["text"]
    q.setdefault("required", False)

    qtype = q.get("type")
    if qtype == "file_upload":
        allowed = _coerce_list(_first(q, "allowedTypes", "allowedFileTypes", "fileTypes"))
        q["allowedTypes"] = allowed or list(DEFAULT_ALLOWED_FILE_TYPES)
        q["maxFileSize"] = _number(_first(q, "maxFileSize", "maxSizeMB", "maxSize"), 10)
        q["maxFiles"] = _number(_first(q, "maxFiles", "maxUploads", "maxAttachments"), 1)
    elif qtype == "image_choice":
        q["selectionType"] = q.get("selectionType") or "single"
        q.setdefault("imageSize", "medium")
        q.setdefault("columns", 2)
        q.setdefault("showLabels", True)
        images, options = q.get("optionImages"), q.get("options")
        if not q.get("imageOptions") and isinstance(images, list) and isinstance(options, list):
            q["imageOptions"] = [
                {"imageUrl": img, "label": label, "value": label}
                for img, label in zip(images, options)
                if isinstance(img, str) and img
            ]
    elif qtype == "matrix":
        q["matrixType"] = q.get("matrixType") or "radio"
    elif qtype == "video":
        q["videoUrl"] = _first(q, "videoUrl", "url", "mediaUrl")
    elif qtype == "audio_capture":
        q["maxDuration"] = _number(_first(q, "maxDuration", "duration", "durationSeconds"), 60)

    return q


def normalize_question(raw: Any) -> Question:
    """Fills builder aliases and per-type defaults, then validates into a Question."""
    if isinstance(raw, Question):
        return raw
    if not isinstance(raw, Mapping):
        raise QuestionFormatError(f"Invalid question: expected an object, got {type(raw).__name__}")

    prepared = _prepare(raw)
    try:
        return Question.model_validate(prepared)
    except ValidationError as exc:
        label = prepared.get("id") if isinstance(prepared.get("id"), str) else "<unknown id>"
        details = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}" for err in exc.errors()
        )
        raise QuestionFormatError(f"Invalid question {label}: {details}") from exc


def normalize_questions(raw_questions: Optional[Iterable[Any]]) -> List[Question]:
    return [normalize_question(r) for r in raw_questions or []]


def to_runtime_question(builder_question: Mapping[str, Any]) -> Question:
    data = {k: v for k, v in builder_question.items() if k not in BUILDER_ONLY_KEYS}
    data["question"] = builder_question.get("text", builder_question.get("question", ""))
    return normalize_question(data)


def to_builder_question(question: Any, index: int) -> Dict[str, Any]:
    q = normalize_question(question)
    payload = q.to_payload()
    payload["text"] = q.question
    payload["order"] = index
    payload["hasLogic"] = bool(q.skip_condition or q.logic_rules)
    return payload
