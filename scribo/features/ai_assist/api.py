"""AI assist API endpoints"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from scribo.errors import NoteAppError, to_http_exception
from scribo.features.ai_assist.domain import GeneratedContent, GrammarCorrection, Summary, ToneAdjustment
from scribo.features.ai_assist.schemas import (
    AdjustToneRequest,
    AIResponse,
    GenerateContentRequest,
    SummarizeRequest,
    TextRequest,
)
from scribo.features.ai_assist.service import NoteAIService
from scribo.features.users.domain import CurrentUser
from scribo.middleware.auth import get_current_user

logger = logging.getLogger(__name__)


router = APIRouter(prefix="/api/ai", tags=["ai"])


def get_ai_service() -> NoteAIService:
    return NoteAIService()


@router.post("/correct-grammar", response_model=AIResponse[GrammarCorrection])
async def correct_grammar(
    request: TextRequest,
    user: CurrentUser = Depends(get_current_user),
    service: NoteAIService = Depends(get_ai_service),
):
    try:
        result = await service.correct_grammar(request.text)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NoteAppError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Grammar correction error: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to correct grammar")

    return AIResponse[GrammarCorrection](data=result)


@router.post("/summarize", response_model=AIResponse[Summary])
async def summarize(
    request: SummarizeRequest,
    user: CurrentUser = Depends(get_current_user),
    service: NoteAIService = Depends(get_ai_service),
):
    """Summarize at least 100 characters of text"""
    try:
        result = await service.summarize(request.text, request.max_length)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NoteAppError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Summarization error: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to summarize text")

    return AIResponse[Summary](data=result)


@router.post("/adjust-tone", response_model=AIResponse[ToneAdjustment])
async def adjust_tone(
    request: AdjustToneRequest,
    user: CurrentUser = Depends(get_current_user),
    service: NoteAIService = Depends(get_ai_service),
):
    try:
        result = await service.adjust_tone(request.text, request.tone)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NoteAppError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Tone adjustment error: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to adjust tone")

    return AIResponse[ToneAdjustment](data=result)


@router.post("/generate-content", response_model=AIResponse[GeneratedContent])
async def generate_content(
    request: GenerateContentRequest,
    user: CurrentUser = Depends(get_current_user),
    service: NoteAIService = Depends(get_ai_service),
):
    """Draft a note from a short context"""
    try:
        result = await service.generate_content(
            request.context,
            style=request.style,
            length=request.length,
            tone=request.tone,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NoteAppError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Content generation error: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to generate content")

    return AIResponse[GeneratedContent](data=result)
