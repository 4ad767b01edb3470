from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from focusforge.ai import (
    DEFAULT_ESTIMATED_MINUTES,
    MAX_ESTIMATED_MINUTES,
    MIN_ESTIMATED_MINUTES,
    SUGGESTION_TIPS_MAX_LENGTH,
    SUGGESTION_TITLE_MAX_LENGTH,
)
from focusforge.storage.normalizer import clamp_int


class DecomposeRequest(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)
    title: str = Field(min_length=1, max_length=120)
    description: Optional[str] = Field(default=None, max_length=1000)


class SubtaskSuggestion(BaseModel):
    model_config = ConfigDict(extra="ignore")
    title: str = Field(min_length=1, max_length=SUGGESTION_TITLE_MAX_LENGTH)
    estimated_minutes: int = Field(ge=MIN_ESTIMATED_MINUTES, le=MAX_ESTIMATED_MINUTES)
    tips: str = Field(default="", max_length=SUGGESTION_TIPS_MAX_LENGTH)

    @classmethod
    def sanitize(cls, raw: Any) -> Optional["SubtaskSuggestion"]:
        """Coerce an untrusted model output item; None if it has no usable title."""
        if not isinstance(raw, dict):
            return None

        title = str(raw.get("title") or "").strip()[:SUGGESTION_TITLE_MAX_LENGTH].strip()
        if not title:
            return None

        minutes = raw.get("estimated_minutes")
        if isinstance(minutes, str):
            try:
                minutes = float(minutes)
            except ValueError:
                minutes = None

        return cls(
            title=title,
            estimated_minutes=clamp_int(
                minutes, MIN_ESTIMATED_MINUTES, MAX_ESTIMATED_MINUTES, DEFAULT_ESTIMATED_MINUTES, rounding="round"
            ),
            tips=str(raw.get("tips") or "")[:SUGGESTION_TIPS_MAX_LENGTH],
        )

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("title must not be blank")
        return value


__all__ = ["DecomposeRequest", "SubtaskSuggestion"]
