"""Schemas for the day planner, recurring definitions and time-blocking templates."""
from __future__ import annotations

from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from app.api.schemas.common import MINUTES_PER_DAY, Priority, check_time_window, check_unique_ids, clean_required_text


class ScheduleWindow(BaseModel):
    start_min: int = Field(..., ge=0, le=MINUTES_PER_DAY - 1)
    end_min: int = Field(..., ge=1, le=MINUTES_PER_DAY)

    @model_validator(mode="after")
    def end_after_start(self) -> "ScheduleWindow":
        check_time_window(self.start_min, self.end_min)
        return self


class RecurrenceRule(BaseModel):
    type: Literal["daily", "weekly"]
    interval: int = Field(default=1, ge=1, le=30)
    weekdays: Optional[List[int]] = None

    @field_validator("weekdays")
    @classmethod
    def iso_weekdays(cls, value: Optional[List[int]]) -> Optional[List[int]]:
        if value is None:
            return None
        if any(day < 1 or day > 7 for day in value):
            raise ValueError("weekdays must be between 1 (Monday) and 7 (Sunday)")
        return sorted(set(value))

    @model_validator(mode="after")
    def weekly_needs_weekdays(self) -> "RecurrenceRule":
        if self.type == "weekly" and not self.weekdays:
            raise ValueError("weekly recurrence requires at least one weekday")
        return self


class RecurringTask(BaseModel):
    id: str
    title: str = Field(..., min_length=1)
    priority: Priority = "med"
    note: Optional[str] = None
    recurrence: RecurrenceRule
    default_schedule: Optional[ScheduleWindow] = None
    created_at: datetime
    archived: bool = False


class PlannerTask(BaseModel):
    id: str
    title: str = Field(..., min_length=1)
    priority: Priority = "med"
    note: Optional[str] = None
    completed: bool = False
    start_min: Optional[int] = Field(default=None, ge=0, le=MINUTES_PER_DAY - 1)
    end_min: Optional[int] = Field(default=None, ge=1, le=MINUTES_PER_DAY)
    source_recurring_id: Optional[str] = None
    deleted: bool = False

    @model_validator(mode="after")
    def end_after_start(self) -> "PlannerTask":
        check_time_window(self.start_min, self.end_min)
        return self


class PlannerDay(BaseModel):
    tasks: List[PlannerTask] = Field(default_factory=list)
    generated_from_recurring: bool = False

    @model_validator(mode="after")
    def one_entry_per_task(self) -> "PlannerDay":
        check_unique_ids(self.tasks, "task")
        sources = [task.source_recurring_id for task in self.tasks if task.source_recurring_id]
        if len(sources) != len(set(sources)):
            raise ValueError("a recurring definition may contribute only one task per day")
        return self


class PlannerDayResponse(PlannerDay):
    date: date
    request_id: str = ""


class PlannerWeekColumn(BaseModel):
    date: date
    label: str
    tasks: List[PlannerTask]


class PlannerWeekResponse(BaseModel):
    start: date
    end: date
    days: List[PlannerWeekColumn]
    request_id: str = ""


class TemplateBlock(BaseModel):
    title: str = Field(..., min_length=1)
    start_min: int = Field(..., ge=0, le=MINUTES_PER_DAY - 1)
    end_min: int = Field(..., ge=1, le=MINUTES_PER_DAY)
    priority: Priority = "med"

    @model_validator(mode="after")
    def end_after_start(self) -> "TemplateBlock":
        check_time_window(self.start_min, self.end_min)
        return self


class TimeBlockingTemplate(BaseModel):
    id: str
    name: str = Field(..., min_length=1)
    blocks: List[TemplateBlock] = Field(default_factory=list)
    created_at: datetime


class TemplateFromDayRequest(BaseModel):
    date: date
    name: str = Field(..., min_length=1, max_length=200)

    @field_validator("name")
    @classmethod
    def trim_name(cls, value: str) -> str:
        return clean_required_text(value, "name")


class ApplyTemplateRequest(BaseModel):
    date: date
    template_id: str
