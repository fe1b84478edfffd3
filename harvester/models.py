from enum import Enum
from typing import List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class ExtractionMode(str, Enum):
    """How a matched element is turned into a record."""
    AUTO = "AUTO"
    LINKS = "LINKS"
    IMAGES = "IMAGES"
    TEXT = "TEXT"


class ExtractionRequest(BaseModel):
    """Everything needed for one extraction run."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    html: str
    selector: str = ""
    mode: ExtractionMode = ExtractionMode.AUTO
    limit: int = Field(10, description="Maximum number of records to emit")
    resolve_lazy_images: bool = Field(
        False,
        alias="resolveLazyImages",
        description="Read data-src/srcset when src is missing or a placeholder"
    )

    @field_validator('limit')
    @classmethod
    def validate_limit(cls, v):
        if v < 1:
            raise ValueError("limit must be a positive integer")
        return v


class ExtractedItem(BaseModel):
    """A single extracted record."""
    id: int
    name: Optional[str] = None
    href: Optional[str] = None
    src: Optional[str] = None


class ExtractionResult(BaseModel):
    """Records from one extraction run plus summary counts."""
    model_config = ConfigDict(populate_by_name=True)

    items: List[ExtractedItem] = Field(default_factory=list)
    total_found: int = Field(0, alias="totalFound")
    requested: int
    message: str = ""


class CandidateSelector(BaseModel):
    """A selector proposed by the image class scanner."""
    selector: str
    count: int = 0
    type: Literal["img", "parent"]
    example: str = ""


class Project(BaseModel):
    """A named, saved extraction configuration."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    created_at: float = Field(0, alias="createdAt")
    updated_at: float = Field(0, alias="updatedAt")
    config: ExtractionRequest
    last_result: Optional[ExtractionResult] = Field(None, alias="lastResult")
