"""Request and response schemas for AI assist API"""

from typing import Generic, TypeVar

from pydantic import BaseModel, Field

from scribo.features.ai_assist.domain import ContentLength, GenerationTone, Tone, WritingStyle

T = TypeVar("T")


class TextRequest(BaseModel):
    text: str


class SummarizeRequest(BaseModel):
    text: str
    max_length: int = Field(default=150, ge=20, le=1000)


class AdjustToneRequest(BaseModel):
    text: str
    tone: Tone


class GenerateContentRequest(BaseModel):
    context: str
    style: WritingStyle = WritingStyle.PROFESSIONAL
    length: ContentLength = ContentLength.MEDIUM
    tone: GenerationTone = GenerationTone.NEUTRAL


class AIResponse(BaseModel, Generic[T]):
    success: bool = True
    data: T
