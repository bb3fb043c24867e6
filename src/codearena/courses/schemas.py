"""Course, lesson, enrollment and lesson-progress records."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

ENROLLMENT_ACTIVE = "active"
ENROLLMENT_COMPLETED = "completed"


class QuizItem(BaseModel):
    question: str
    options: list[str]
    correct_answer_index: int


class Course(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    description: str
    level: str
    duration: str = ""
    difficulty: str
    topics: list[str] = Field(default_factory=list)
    prerequisites: str | None = None
    instructor: str
    rating: float | None = None
    students: int = 0
    price: str
    thumbnail: str | None = None
    is_active: bool = True
    created_at: datetime


class CourseCreate(BaseModel):
    title: str
    description: str
    level: str
    duration: str = ""
    difficulty: str
    topics: list[str] = Field(default_factory=list)
    prerequisites: str | None = None
    instructor: str
    rating: float | None = None
    price: str = "Free"
    thumbnail: str | None = None
    is_active: bool = True


class Lesson(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    course_id: str
    title: str
    description: str | None = None
    content: str
    order: int
    duration: int | None = None
    video_url: str | None = None
    type: str = "video"
    quiz_data: list[QuizItem] | None = None
    is_active: bool = True
    created_at: datetime


class LessonCreate(BaseModel):
    course_id: str
    title: str
    description: str | None = None
    content: str
    order: int
    duration: int | None = None
    video_url: str | None = None
    type: str = "video"
    quiz_data: list[QuizItem] | None = None
    is_active: bool = True


class Enrollment(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    course_id: str
    enrolled_at: datetime
    completed_at: datetime | None = None
    progress: int = 0
    time_spent: int = 0
    status: str = ENROLLMENT_ACTIVE
    last_accessed_at: datetime


class LessonProgress(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    enrollment_id: str
    lesson_id: str
    user_id: str
    completed: bool = False
    time_spent: int = 0
    completed_at: datetime | None = None
    last_accessed_at: datetime
