"""Schemas for timer settings."""
from __future__ import annotations

from pydantic import BaseModel, Field


class TimerSettings(BaseModel):
    focus_minutes: int = Field(default=25, ge=1)
    short_break_minutes: int = Field(default=5, ge=1)
    long_break_minutes: int = Field(default=15, ge=1)
    long_break_interval: int = Field(default=4, ge=1)
    auto_start_breaks: bool = True
    auto_start_focus: bool = False
    track_breaks: bool = True
    daily_goal_minutes: int = Field(default=120, ge=1)
    streak_goal_minutes: int = Field(default=60, ge=1)
    use_local_storage_fallback: bool = False
