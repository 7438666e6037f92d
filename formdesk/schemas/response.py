from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import List, Optional, Union

from formdesk.models.form import QuestionType

class AnswerSubmit(BaseModel):
    question_id: str
    # Scalars are accepted and stringified by the submission validator
    answer: Union[str, int, float, bool, None] = None

class ResponseSubmitRequest(BaseModel):
    form_id: int
    answers: List[AnswerSubmit]
    submitter_email: Optional[EmailStr] = None
    submitter_name: Optional[str] = Field(None, max_length=100)

    @field_validator("submitter_email", mode="before")
    def normalize_email(cls, v):
        if isinstance(v, str):
            v = v.strip().lower()
            return v or None
        return v

    @field_validator("submitter_name", mode="before")
    def strip_name(cls, v):
        if isinstance(v, str):
            return v.strip() or None
        return v

class AnswerSnapshot(BaseModel):
    question_id: str
    question_text: str
    question_type: QuestionType
    answer: str
