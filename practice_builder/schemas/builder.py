from datetime import date
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

# --- ENUMS ---

class Difficulty(str, Enum):
    """How demanding a drill is for the group."""
    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"

class Category(str, Enum):
    """Skill categories, in the order the catalog is displayed."""
    PASSING = "Passing"
    ATTACKING = "Attacking"
    SETTING = "Setting"
    SERVING = "Serving"
    DEFENSE = "Defense"
    BLOCKING = "Blocking"
    COMPETITION = "Competition"

# --- CATALOG INPUT ---

class DrillFields(BaseModel):
    """Editable fields of a catalog drill."""
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(default="")
    duration_minutes: int = Field(..., gt=0, description="Minutes, positive")
    difficulty: Difficulty
    category: Category
    tags: List[str] = Field(default_factory=list)
    diagram_url: Optional[str] = None

    @field_validator("title")
    @classmethod
    def _strip_title(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("title must not be blank")
        return value

    @field_validator("tags")
    @classmethod
    def _dedupe_tags(cls, value: List[str]) -> List[str]:
        seen: List[str] = []
        for tag in value:
            tag = tag.strip()
            if tag and tag not in seen:
                seen.append(tag)
        return seen

class DrillUpdate(BaseModel):
    """Partial update; unset fields are left untouched."""
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    duration_minutes: Optional[int] = Field(default=None, gt=0)
    difficulty: Optional[Difficulty] = None
    category: Optional[Category] = None
    tags: Optional[List[str]] = None
    diagram_url: Optional[str] = None

# --- COMMIT INPUT ---

class PracticeCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    practice_date: date
    notes: str = Field(default="")

    @field_validator("title")
    @classmethod
    def _strip_title(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("title must not be blank")
        return value

# --- HTTP PAYLOADS ---

class AddDrillPayload(BaseModel):
    drill_id: str

class MovePayload(BaseModel):
    from_instance_id: str
    to_instance_id: str

class DraftMetaPayload(BaseModel):
    title: Optional[str] = None
    practice_date: Optional[date] = None
