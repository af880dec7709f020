"""Request/response models shared by the HTTP routes and the data-access service."""
from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from enum import IntEnum
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_serializer
from pydantic.alias_generators import to_camel


class StoryPriority(IntEnum):
    LOW = 0
    MEDIUM = 1
    HIGH = 2


class _ApiModel(BaseModel):
    # camelCase on the wire, snake_case in Python
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CreateUserDto(_ApiModel):
    email: EmailStr
    display_name: str = Field(..., min_length=1, max_length=100)


class CreateStoryDto(_ApiModel):
    title: str = Field(..., min_length=1, max_length=500)
    description: Optional[str] = None
    year: int = Field(..., ge=1, le=9999)
    priority: StoryPriority = StoryPriority.LOW
    estimated_hours: Optional[Decimal] = Field(None, ge=0, le=Decimal("999.99"), max_digits=5, decimal_places=2)
    due_date: Optional[datetime] = None


class CreateStoryRequest(CreateStoryDto):
    user_id: uuid.UUID


class StoryDto(_ApiModel):
    id: int
    user_id: uuid.UUID
    title: str
    description: Optional[str] = None
    year: int
    is_completed: bool
    priority: int
    estimated_hours: Optional[Decimal] = None
    actual_hours: Optional[Decimal] = None
    due_date: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    @field_serializer("estimated_hours", "actual_hours", when_used="json")
    def _hours_as_number(self, v: Optional[Decimal]):
        return None if v is None else float(v)


class YearStatsDto(_ApiModel):
    year: int
    total_stories: int = 0
    completed_stories: int = 0
    completion_percentage: Decimal = Decimal("0.00")
    total_estimated_hours: Decimal = Decimal("0.00")
    total_actual_hours: Decimal = Decimal("0.00")

    @field_serializer("completion_percentage", "total_estimated_hours", "total_actual_hours", when_used="json")
    def _decimal_as_number(self, v: Decimal):
        return float(v)
