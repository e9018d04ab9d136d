# survey_engine/core/errors.py
from __future__ import annotations


class EngineError(Exception):
    # Base class for every failure the engine raises on purpose.
    pass


class ConfigurationError(EngineError):
    # Survey or engine configuration is broken (fatal at startup/test time).
    pass


class RegistryMismatchError(ConfigurationError):
    # The per-type tables do not cover exactly the QuestionType enum.
    pass


class UnknownQuestionTypeError(ConfigurationError):
    # A question type string outside the closed set was looked up.
    pass


class InvalidRuleError(ConfigurationError):
    # A logic rule points at an unknown question or uses a wrong operator.
    def __init__(self, message: str, rule_id: str | None = None, question_id: str | None = None):
        super().__init__(message)
        self.rule_id = rule_id
        self.question_id = question_id


class QuestionFormatError(EngineError):
    # Raw question payload could not be normalized into a Question.
    pass


class SnapshotError(EngineError):
    # Survey snapshot (questions + responses + scoreConfig) could not be loaded.
    pass
