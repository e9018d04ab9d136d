# survey_engine/models/base.py
from __future__ import annotations

from typing import Union

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

Number = Union[int, float]


class BaseModelConfig(BaseModel):
    # Το host app στέλνει camelCase JSON, εμείς δουλεύουμε με snake_case
    model_config = ConfigDict(
        protected_namespaces=(),
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")
