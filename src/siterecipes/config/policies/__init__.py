"""Policy models governing catalog validation and extraction smoke tests."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field

from ..sources import deep_merge, env_overrides, read_yaml
from .smoke import SmokeTestPolicy
from .validation import ValidationPolicy

POLICY_ENV_PREFIX = "SITERECIPES_POLICY__"


class Policies(BaseModel):
    """Root policy container, versioned so CI output can cite what was enforced."""

    model_config = ConfigDict(extra="forbid")

    policy_version: str = Field(default="2025-01-15", min_length=1)
    validation: ValidationPolicy = Field(default_factory=ValidationPolicy)
    smoke: SmokeTestPolicy = Field(default_factory=SmokeTestPolicy)


def load_policies(source: os.PathLike[str] | str | Mapping[str, Any]) -> Policies:
    """Build :class:`Policies` from a mapping or a YAML file.

    ``SITERECIPES_POLICY__SECTION__KEY`` environment variables are layered on
    top, e.g. ``SITERECIPES_POLICY__VALIDATION__NAME_MAX_LENGTH=40``.
    """

    if isinstance(source, Mapping):
        raw = dict(source)
    else:
        path = Path(source)
        if not path.exists():
            raise FileNotFoundError(f"Policy file not found: {path}")
        raw = read_yaml(path)
    return Policies.model_validate(deep_merge(raw, env_overrides(POLICY_ENV_PREFIX)))


__all__ = [
    "POLICY_ENV_PREFIX",
    "Policies",
    "SmokeTestPolicy",
    "ValidationPolicy",
    "load_policies",
]
