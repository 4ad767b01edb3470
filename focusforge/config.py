from __future__ import annotations

from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field

from focusforge import ARGS_DIR
from focusforge.logging_config import get_logger

logger = get_logger(__name__)

CONFIG_NAME = "focusforge"


# =============================================================================
# FocusForgeConfig (args/focusforge.yaml)
# =============================================================================

class StorageConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    backend: Literal["sqlite", "memory"] = Field(default="sqlite")
    path: str = Field(default="data/focusforge.db")
    quota_bytes: Optional[int] = Field(default=None, ge=1)


class GamificationConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    streak_lookback_days: int = Field(default=365, ge=1, le=3650)
    calendar_days: int = Field(default=28, ge=7, le=365)


class AIConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    provider: Literal["auto", "gemini", "rules"] = Field(default="auto")
    model: str = Field(default="gemini-2.0-flash")
    api_key_env: str = Field(default="GOOGLE_AI_API_KEY")
    base_url: str = Field(default="https://generativelanguage.googleapis.com/v1beta")
    timeout_seconds: float = Field(default=20.0, gt=0)
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)


class RateLimitConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    max_requests: int = Field(default=3, ge=1)
    window_seconds: float = Field(default=300.0, gt=0)


class FocusForgeConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    storage: StorageConfig = Field(default_factory=StorageConfig)
    gamification: GamificationConfig = Field(default_factory=GamificationConfig)
    ai: AIConfig = Field(default_factory=AIConfig)
    rate_limit: RateLimitConfig = Field(default_factory=RateLimitConfig)


# =============================================================================
# load_config
# =============================================================================

def load_config(path: Path | None = None) -> FocusForgeConfig:
    """Load and validate the YAML config, falling back to defaults on any problem."""
    yaml_path = path or ARGS_DIR / f"{CONFIG_NAME}.yaml"

    try:
        if yaml_path.exists():
            with open(yaml_path) as f:
                raw = yaml.safe_load(f) or {}
        else:
            raw = {}

        return FocusForgeConfig.model_validate(raw)
    except Exception as e:
        logger.warning(f"Config validation failed for {yaml_path}: {e}, using defaults")
        return FocusForgeConfig()


__all__ = [
    "AIConfig",
    "FocusForgeConfig",
    "GamificationConfig",
    "RateLimitConfig",
    "StorageConfig",
    "load_config",
]
