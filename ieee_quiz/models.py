from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field as PydanticField, StrictInt
from pydantic.alias_generators import to_camel
from sqlalchemy import JSON, Column
from sqlmodel import SQLModel, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class KVRecord(SQLModel, table=True):
    key: str = Field(primary_key=True)
    value: dict = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    updated_at: datetime = Field(default_factory=utcnow)


# --- Domain / wire schemas (camelCase on the wire) ---

class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Question(CamelModel):
    model_config = ConfigDict(frozen=True)

    id: int
    text: str
    options: tuple[str, str, str, str]
    correct_option_index: int = PydanticField(ge=0, le=3)
    points: int = PydanticField(gt=0)


class PublicQuestion(CamelModel):
    """A question as handed to players: no correct-answer field exists here."""

    id: int
    question: str
    options: list[str]
    points: int


class UserRecord(CamelModel):
    id: str
    name: str
    email: Optional[str] = None
    membership_type: str = "non-ieee-member"
    avatar: str = ""
    best_score: int = PydanticField(default=0, ge=0)
    total_xp: int = PydanticField(default=0, ge=0)
    badges: list[str] = PydanticField(default_factory=list)
    last_attempt_at: Optional[datetime] = None
    last_time_spent_seconds: Optional[int] = None
    created_at: datetime = PydanticField(default_factory=utcnow)


class SubmittedAnswer(CamelModel):
    # StrictInt: "1", 1.0 and true are not question ids or option indexes
    question_id: StrictInt
    selected_option_index: StrictInt = PydanticField(
        validation_alias=AliasChoices("selectedOptionIndex", "selectedOption", "selected_option_index"),
    )


class QuizSubmission(CamelModel):
    answers: list[SubmittedAnswer]
    time_spent_seconds: Optional[StrictInt] = PydanticField(
        default=None,
        ge=0,
        alias="timeSpent",
        validation_alias=AliasChoices("timeSpent", "timeSpentSeconds", "time_spent_seconds"),
    )


class AttemptResult(CamelModel):
    raw_score: int = PydanticField(alias="score")
    correct_count: int = PydanticField(alias="correctAnswers")
    total_questions: int
    xp_earned: int
    earned_badges: list[str]
    user: UserRecord


class LeaderboardEntry(CamelModel):
    rank: int = PydanticField(ge=1)
    id: str
    name: str
    avatar: str
    score: int
    xp: int
    badges: list[str]
    time_spent: Optional[int] = None


class EligibilityResponse(CamelModel):
    can_take_quiz: bool
    message: Optional[str] = None
    last_attempt: Optional[datetime] = None


class SignupRequest(CamelModel):
    name: str
    email: Optional[str] = None
    membership_type: Optional[str] = None


class SignupResponse(CamelModel):
    message: str
    user: UserRecord
    access_token: Optional[str] = None


class UserResponse(CamelModel):
    user: UserRecord


class ContactCreate(CamelModel):
    name: str
    email: str
    message: str


class ContactMessage(ContactCreate):
    id: str
    created_at: datetime = PydanticField(default_factory=utcnow)


class MessageResponse(CamelModel):
    message: str


def dump(model: BaseModel) -> dict[str, Any]:
    """JSON-safe dict of a schema using its wire names, as stored in KVRecord."""
    return model.model_dump(mode="json", by_alias=True)
