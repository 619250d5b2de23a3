"""Policy for smoke-testing extraction routines during catalog checks."""

from __future__ import annotations

from pydantic import BaseModel, Field


class SmokeTestPolicy(BaseModel):
    """Inputs handed to every extraction routine by ``siterecipes validate``."""

    enabled: bool = Field(default=True)
    payload: str = Field(
        default="<html><head><title>Test</title></head><body></body></html>",
        description="Minimal payload every routine must survive without raising.",
    )
    default_url: str = Field(
        default="https://example.com",
        description="URL used when a recipe declares no worked examples.",
    )
