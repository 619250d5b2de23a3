"""Validation-oriented policy models."""

from __future__ import annotations

import re

from pydantic import BaseModel, Field, field_validator, model_validator


class ValidationPolicy(BaseModel):
    """Bounds and conventions enforced by the recipe validator."""

    identity_pattern: str = Field(
        default=r"^[a-z0-9-]+$",
        description="Regular expression every recipe identity must fully match.",
    )
    name_max_length: int = Field(default=50, ge=1)
    description_min_length: int = Field(default=20, ge=0)
    description_max_length: int = Field(default=200, ge=1)
    fallback_identity: str = Field(
        default="generic",
        min_length=1,
        description="Identity of the catch-all recipe excluded from overlap checks.",
    )
    probe_url: str = Field(
        default="https://example.com",
        description="URL used to exercise URL matchers for well-formedness.",
    )

    @field_validator("identity_pattern")
    @classmethod
    def _compile_identity_pattern(cls, value: str) -> str:
        try:
            re.compile(value)
        except re.error as exc:
            raise ValueError(f"identity_pattern is not a valid regular expression: {exc}") from exc
        return value

    @model_validator(mode="after")
    def _check_description_bounds(self) -> "ValidationPolicy":
        if self.description_min_length > self.description_max_length:
            raise ValueError("description_min_length must not exceed description_max_length")
        return self
