from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class UserInfo(CamelModel):
    full_name: str = Field(default="", alias="fullName")
    email: str = ""


class SurveyResponse(CamelModel):
    question_id: str = Field(alias="questionId")
    answer: Any


class FormData(CamelModel):
    user_info: UserInfo = Field(default_factory=UserInfo, alias="userInfo")
    responses: list[SurveyResponse] = Field(default_factory=list)

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class SubmissionRecord(FormData):
    """Persisted form of a submission: the FormData plus store-assigned fields."""

    id: str | None = Field(default=None, alias="_id")
    submitted_at: datetime = Field(alias="submittedAt")


class SubmitSuccessResponse(BaseModel):
    message: str
    data: dict[str, Any]


class ErrorResponse(BaseModel):
    error: str
    details: str | list[str]


class Section(str, Enum):
    WELCOME = "welcome"
    BASICS = "basics"
    NEEDS = "needs"
    TICHI = "tichi"
    JOURNEY = "journey"
    THANK_YOU = "thankYou"


class QuestionType(str, Enum):
    TEXT = "text"
    MULTI_CHOICE = "multiChoice"


class Question(BaseModel):
    id: str
    text: str
    type: QuestionType
    options: list[str] | None = None
    category: Section
