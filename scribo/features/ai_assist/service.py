"""AI-assisted text operations for notes"""

import logging
import re
from typing import Dict, List, Optional, Union

from scribo.errors import UpstreamError
from scribo.features.ai_assist import prompts
from scribo.features.ai_assist.domain import (
    MIN_SUMMARY_INPUT_LENGTH,
    ContentLength,
    GeneratedContent,
    GenerationTone,
    GrammarCorrection,
    Summary,
    Tone,
    ToneAdjustment,
    WritingStyle,
)
from scribo.features.export.formats import html_to_plain_text
from scribo.services.llm import LLMService

logger = logging.getLogger(__name__)

_HTML_TAG_RE = re.compile(r"<\s*/?\s*[a-zA-Z][^>]*>")


def _prepare_text(text: Optional[str], what: str) -> str:
    """Reduce editor HTML to plain text and reject empty input"""
    if text and _HTML_TAG_RE.search(text):
        text = html_to_plain_text(text)
    text = (text or "").strip()
    if not text:
        raise ValueError(f"{what} is required")
    return text


class NoteAIService:
    """Grammar, summary, tone and generation helpers on top of an LLM client"""

    def __init__(self, llm: Optional[LLMService] = None):
        self.llm = llm or LLMService()

    async def _complete(
        self,
        operation: str,
        messages: List[Dict[str, str]],
        temperature: Optional[float] = None,
    ) -> str:
        try:
            reply = await self.llm.invoke(messages, temperature=temperature)
        except Exception as e:
            logger.error(f"{operation} failed: {e}", exc_info=True)
            raise UpstreamError("AI service is temporarily unavailable. Please try again.") from e
        return (reply or "").strip()

    async def correct_grammar(self, text: str) -> GrammarCorrection:
        text = _prepare_text(text, "Text")
        logger.info(f"Processing grammar correction for text length: {len(text)}")

        corrected = await self._complete(
            "Grammar correction",
            [
                {"role": "system", "content": prompts.GRAMMAR_SYSTEM_PROMPT},
                {"role": "user", "content": text},
            ],
            temperature=0.3,
        )
        corrected = corrected or text
        return GrammarCorrection(original=text, corrected=corrected, changes=corrected != text)

    async def summarize(self, text: str, max_length: int = 150) -> Summary:
        """
        Summarize a note.

        Raises:
            ValueError: Empty text or fewer than 100 characters
            UpstreamError: The language model call failed
        """
        text = _prepare_text(text, "Text")
        if len(text) < MIN_SUMMARY_INPUT_LENGTH:
            raise ValueError(
                f"Text is too short to summarize (minimum {MIN_SUMMARY_INPUT_LENGTH} characters)"
            )

        summary = await self._complete(
            "Summarization",
            [
                {"role": "system", "content": prompts.SUMMARIZE_SYSTEM_PROMPT.format(max_length=max_length)},
                {"role": "user", "content": text},
            ],
            temperature=0.3,
        )
        ratio = round((1 - len(summary) / len(text)) * 100, 1)
        return Summary(original=text, summary=summary, compression_ratio=ratio)

    async def adjust_tone(self, text: str, tone: Union[Tone, str] = Tone.PROFESSIONAL) -> ToneAdjustment:
        text = _prepare_text(text, "Text")
        tone = Tone(tone)
        instruction = prompts.TONE_INSTRUCTIONS.get(tone.value, prompts.DEFAULT_TONE_INSTRUCTION)

        adjusted = await self._complete(
            "Tone adjustment",
            [
                {"role": "system", "content": prompts.TONE_SYSTEM_PROMPT.format(instruction=instruction)},
                {"role": "user", "content": text},
            ],
            temperature=0.6,
        )
        return ToneAdjustment(original=text, adjusted=adjusted, tone=tone)

    async def generate_content(
        self,
        context: str,
        style: Union[WritingStyle, str] = WritingStyle.PROFESSIONAL,
        length: Union[ContentLength, str] = ContentLength.MEDIUM,
        tone: Union[GenerationTone, str] = GenerationTone.NEUTRAL,
    ) -> GeneratedContent:
        context = _prepare_text(context, "Context")
        style, length, tone = WritingStyle(style), ContentLength(length), GenerationTone(tone)

        generated = await self._complete(
            "Content generation",
            [
                {
                    "role": "system",
                    "content": prompts.build_generation_prompt(style.value, tone.value, length.value),
                },
                {"role": "user", "content": context},
            ],
        )
        return GeneratedContent(
            context=context,
            generated=generated,
            style=style,
            tone=tone,
            length=length,
        )
