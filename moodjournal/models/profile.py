"""Pydantic models for the narrow profile interface (account creation / edit)."""

from typing import Optional

from pydantic import BaseModel, Field, field_validator


class ProfileUpdate(BaseModel):
    """Name, age and gender collected at profile setup or edit."""

    name: str = Field(..., min_length=1, max_length=100)
    age: int = Field(..., ge=1, le=130)
    gender: str = Field(..., min_length=1, max_length=50)

    @field_validator("name", "gender")
    @classmethod
    def strip_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Must not be blank")
        return v


class ProfileResponse(BaseModel):
    """Profile document as stored remotely."""

    user_id: str
    name: Optional[str] = None
    age: Optional[int] = None
    gender: Optional[str] = None
    profile_complete: bool = False
    questionnaire: dict[str, str] = Field(default_factory=dict)
    created: bool = False  # True when this call created the document
