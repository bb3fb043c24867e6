"""User and daily activity records."""

from __future__ import annotations

from datetime import date as calendar_date
from datetime import datetime

from pydantic import BaseModel, ConfigDict

ROLE_USER = "user"
ROLE_ADMIN = "admin"


class User(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    username: str
    password: str
    role: str = ROLE_USER
    streak: int = 0
    last_daily_solve: datetime | None = None
    google_id: str | None = None
    created_at: datetime


class UserCreate(BaseModel):
    username: str
    password: str
    role: str | None = None
    google_id: str | None = None


class UserActivity(BaseModel):
    """Per-user, per-day engagement accumulator."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    date: calendar_date
    minutes_active: int = 0
    questions_solved: int = 0
