from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class LoginRequest(BaseModel):
    username: str = ""
    password: str = ""


class SecurityAnswer(BaseModel):
    question_id: int | None = None
    answer: str = ""


class RegisterRequest(BaseModel):
    username: str = ""
    password: str = ""
    first_name: str = ""
    last_name: str = ""
    security_answers: list[SecurityAnswer] = Field(default_factory=list)


class ResetQuestionsRequest(BaseModel):
    username: str = ""


class VerifyAnswersRequest(BaseModel):
    username: str = ""
    answers: list[SecurityAnswer] = Field(default_factory=list)


class ResetPasswordRequest(BaseModel):
    username: str = ""
    password_reset_token: str = ""
    new_password: str = ""


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    username: str
    first_name: str
    last_name: str
    is_admin: bool = False
