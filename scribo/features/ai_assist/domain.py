"""Domain models for AI-assisted editing"""

from enum import Enum

from pydantic import BaseModel


class Tone(str, Enum):
    PROFESSIONAL = "professional"
    CASUAL = "casual"
    FORMAL = "formal"
    ENTHUSIASTIC = "enthusiastic"


class WritingStyle(str, Enum):
    PROFESSIONAL = "professional"
    CASUAL = "casual"
    ACADEMIC = "academic"


class GenerationTone(str, Enum):
    POSITIVE = "positive"
    NEUTRAL = "neutral"


class ContentLength(str, Enum):
    SHORT = "short"
    MEDIUM = "medium"
    LONG = "long"


MIN_SUMMARY_INPUT_LENGTH = 100


class GrammarCorrection(BaseModel):
    original: str
    corrected: str
    changes: bool


class Summary(BaseModel):
    original: str
    summary: str
    compression_ratio: float


class ToneAdjustment(BaseModel):
    original: str
    adjusted: str
    tone: Tone


class GeneratedContent(BaseModel):
    context: str
    generated: str
    style: WritingStyle
    tone: GenerationTone
    length: ContentLength
