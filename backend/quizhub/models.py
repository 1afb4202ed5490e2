"""SQLModel data models.

This module defines the application's database tables using SQLModel.
Each class maps to a table and uses relationships where appropriate.
Multilingual columns follow the `<field>`, `<field>_sl`, `<field>_hr`
convention.
"""

from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import JSON, Column
from sqlmodel import Field, Relationship, SQLModel


def _now() -> datetime:
    return datetime.now(timezone.utc)


class User(SQLModel, table=True):
    """A registered user.

    Fields:
    - `username`: unique login name
    - `password_hash`: hashed password string (never store plaintext)
    - `role`: one of ADMIN, TEACHER or USER
    """
    id: Optional[int] = Field(default=None, primary_key=True)
    username: str = Field(index=True, nullable=False, unique=True)
    password_hash: str
    role: str = Field(default="USER")
    created_at: datetime = Field(default_factory=_now)


class Teacher(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    email: Optional[str] = None
    quizzes: List["Quiz"] = Relationship(back_populates="teacher")


class Quiz(SQLModel, table=True):
    """A named, ordered collection of questions owned by a teacher."""
    id: Optional[int] = Field(default=None, primary_key=True)
    title: str
    title_sl: Optional[str] = None
    title_hr: Optional[str] = None
    description: Optional[str] = None
    description_sl: Optional[str] = None
    description_hr: Optional[str] = None
    teacher_id: Optional[int] = Field(default=None, foreign_key="teacher.id", index=True)
    created_at: datetime = Field(default_factory=_now)
    teacher: Optional[Teacher] = Relationship(back_populates="quizzes")
    questions: List["Question"] = Relationship(
        back_populates="quiz",
        sa_relationship_kwargs={"cascade": "all, delete-orphan", "order_by": "Question.position"},
    )
    submissions: List["QuizSubmission"] = Relationship(
        back_populates="quiz", sa_relationship_kwargs={"cascade": "all, delete-orphan"}
    )


class Question(SQLModel, table=True):
    """A gradable item belonging to exactly one `Quiz`.

    `answers_data` stores the configuration for the question type
    (multiple choice, text input, dropdown, ordering or matching).
    `correct_option_id` is the answer key of single choice questions.
    """
    id: Optional[int] = Field(default=None, primary_key=True)
    quiz_id: int = Field(foreign_key="quiz.id", index=True)
    position: int = 0
    text: str = ""
    text_sl: Optional[str] = None
    text_hr: Optional[str] = None
    question_type: str = Field(default="SINGLE_CHOICE")
    answers_data: Optional[dict] = Field(default=None, sa_column=Column(JSON))
    correct_option_id: Optional[int] = None
    quiz: Optional[Quiz] = Relationship(back_populates="questions")
    options: List["Option"] = Relationship(
        back_populates="question",
        sa_relationship_kwargs={"cascade": "all, delete-orphan", "order_by": "Option.id"},
    )


class Option(SQLModel, table=True):
    """Stored answer option.

    `content_type` is `text`, `mixed`, the legacy `image`, or NULL for
    rows written before the content system existed.
    """
    id: Optional[int] = Field(default=None, primary_key=True)
    question_id: int = Field(foreign_key="question.id", index=True)
    text: Optional[str] = None
    text_sl: Optional[str] = None
    text_hr: Optional[str] = None
    image_url: Optional[str] = None
    alt_text: Optional[str] = None
    alt_text_sl: Optional[str] = None
    alt_text_hr: Optional[str] = None
    content_type: Optional[str] = None
    image_suffix: Optional[str] = None
    image_suffix_sl: Optional[str] = None
    image_suffix_hr: Optional[str] = None
    correct: bool = False
    question: Optional[Question] = Relationship(back_populates="options")


class QuizSubmission(SQLModel, table=True):
    """Immutable record of one submission and its computed score (0-100)."""
    id: Optional[int] = Field(default=None, primary_key=True)
    quiz_id: int = Field(foreign_key="quiz.id", index=True)
    user_id: Optional[int] = Field(default=None, foreign_key="user.id", index=True)
    score: float
    answers: Optional[dict] = Field(default=None, sa_column=Column(JSON))
    created_at: datetime = Field(default_factory=_now)
    quiz: Optional[Quiz] = Relationship(back_populates="submissions")
