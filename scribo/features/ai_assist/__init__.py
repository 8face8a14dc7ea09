"""AI-assisted editing feature module"""

from scribo.features.ai_assist.api import router
from scribo.features.ai_assist.service import NoteAIService

__all__ = ["router", "NoteAIService"]
