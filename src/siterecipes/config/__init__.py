"""Configuration utilities for the recipe engine."""

from .policies import Policies, SmokeTestPolicy, ValidationPolicy, load_policies
from .settings import LogConfig, Settings, get_settings
from .sources import deep_merge, env_overrides, read_yaml

__all__ = [
    "LogConfig",
    "Settings",
    "get_settings",
    "Policies",
    "load_policies",
    "ValidationPolicy",
    "SmokeTestPolicy",
    "deep_merge",
    "env_overrides",
    "read_yaml",
]
