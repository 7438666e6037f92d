from pydantic import BaseModel, Field, field_validator, model_validator
from typing import List, Optional

from formdesk.models.form import QuestionType, Theme

MAX_QUESTIONS = 10

class QuestionCreate(BaseModel):
    # Sent back by the editor for existing questions so stored answers stay aligned
    id: Optional[str] = None
    text: str = Field(..., min_length=1, max_length=500)
    type: QuestionType
    options: List[str] = []
    required: bool = False

    @field_validator("text", mode="before")
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("options")
    def strip_options(cls, v):
        return [option.strip() for option in v]

    @model_validator(mode="after")
    def validate_options(self):
        if self.type == QuestionType.SINGLE_CHOICE:
            if len(self.options) < 2:
                raise ValueError(f'Single-choice question "{self.text}" must have at least 2 options')
            if any(not option for option in self.options):
                raise ValueError(f'Single-choice question "{self.text}" has an empty option')
            if len(set(self.options)) != len(self.options):
                raise ValueError(f'Single-choice question "{self.text}" has duplicate options')
        elif self.options:
            raise ValueError(f'Text question "{self.text}" cannot have options')
        return self

class FormSettings(BaseModel):
    allow_multiple_responses: bool = False
    require_email: bool = False
    theme: Theme = Theme.LIGHT

class FormSettingsUpdate(BaseModel):
    allow_multiple_responses: Optional[bool] = None
    require_email: Optional[bool] = None
    theme: Optional[Theme] = None

class FormCreateRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=500)
    questions: List[QuestionCreate] = Field(..., min_length=1, max_length=MAX_QUESTIONS)
    settings: FormSettings = FormSettings()

    @field_validator("title", "description", mode="before")
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v

class FormUpdateRequest(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=500)
    questions: Optional[List[QuestionCreate]] = Field(None, min_length=1, max_length=MAX_QUESTIONS)
    is_active: Optional[bool] = None
    settings: Optional[FormSettingsUpdate] = None

    @field_validator("title", "description", mode="before")
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v
