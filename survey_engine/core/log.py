# survey_engine/core/log.py
from __future__ import annotations

import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional

# survey_id που κολλάει σε κάθε log record της τρέχουσας ροής
_SURVEY_ID: ContextVar[Optional[str]] = ContextVar("survey_id", default=None)

_RESERVED = {
    "msg", "args", "levelname", "levelno", "name", "pathname", "filename", "module",
    "exc_info", "exc_text", "stack_info", "lineno", "funcName", "created", "msecs",
    "relativeCreated", "thread", "threadName", "processName", "process", "taskName",
    "survey_id", "message",
}


def set_survey_id(survey_id: Optional[str]) -> None:
    _SURVEY_ID.set(survey_id)


def clear_survey_id() -> None:
    _SURVEY_ID.set(None)


class SurveyIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.survey_id = _SURVEY_ID.get()
        return True


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "ts": datetime.now(timezone.utc).replace(microsecond=0).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "survey_id": getattr(record, "survey_id", None),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        # extra={...} πεδία, όσο είναι JSON-serializable
        for key, value in record.__dict__.items():
            if key in _RESERVED or key in payload:
                continue
            try:
                json.dumps(value, ensure_ascii=False)
                payload[key] = value
            except TypeError:
                payload[key] = str(value)

        return json.dumps(payload, ensure_ascii=False)


def setup_logging(level: str = "INFO", json_logs: bool = False) -> None:
    """Configure the root logger once (scripts / host application startup)."""
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level.upper())

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(SurveyIdFilter())
    if json_logs:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            fmt="%(asctime)s %(levelname)s %(name)s survey_id=%(survey_id)s %(message)s"
        ))
    root.addHandler(handler)
