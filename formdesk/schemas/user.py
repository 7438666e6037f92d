from pydantic import BaseModel, EmailStr, Field, field_validator

class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    business_name: str = Field(..., min_length=1, max_length=200)

    @field_validator("email", mode="before")
    def normalize_email(cls, v):
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("business_name", mode="before")
    def strip_business_name(cls, v):
        return v.strip() if isinstance(v, str) else v
