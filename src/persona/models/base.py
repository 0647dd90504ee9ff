"""Shared pydantic base for API-facing models (camelCase on the wire)."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class PersonaModel(BaseModel):
    """Snake_case attributes, camelCase JSON, whitespace-stripped strings."""

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "str_strip_whitespace": True,
    }

    def to_json_dict(self, **kwargs: Any) -> dict[str, Any]:
        """JSON-safe camelCase dict with unset optionals dropped."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True, **kwargs)
