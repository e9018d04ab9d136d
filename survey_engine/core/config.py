# survey_engine/core/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file='.env', env_file_encoding='utf-8', extra='ignore')

    PROJECT_NAME: str = "survey-scoring-engine"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    # Αν True, ένας κανόνας που δεν επιλύεται σηκώνει InvalidRuleError αντί για warning
    LOGIC_STRICT: bool = False

    SCORING_ENGINE_ID: str = "engagement_v1"

    # Snapshot {questions, responses, scoreConfig} για το verify script
    SNAPSHOT_PATH: str = "snapshots/survey_snapshot.json"


settings = Settings()
