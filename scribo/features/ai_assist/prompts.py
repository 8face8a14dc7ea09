"""Prompt templates for AI-assisted note editing"""

GRAMMAR_SYSTEM_PROMPT = (
    "You are a careful copy editor. Fix grammar and spelling errors in the text "
    "the user sends, keeping the same meaning and tone. Reply with the corrected "
    "text only."
)

SUMMARIZE_SYSTEM_PROMPT = (
    "You summarize notes. Reply with a summary of the user's text that is at most "
    "{max_length} words long. Reply with the summary only."
)

TONE_INSTRUCTIONS = {
    "professional": "Rewrite in a professional tone.",
    "casual": "Rewrite in a casual and friendly tone.",
    "formal": "Rewrite in a formal tone.",
    "enthusiastic": "Rewrite with enthusiasm and energy.",
}
DEFAULT_TONE_INSTRUCTION = "Rewrite this text."

TONE_SYSTEM_PROMPT = (
    "You rewrite notes. {instruction} Keep the meaning. Reply with the rewritten "
    "text only."
)

STYLE_PHRASES = {
    "professional": " in a professional and clear manner",
    "casual": " in a casual and friendly manner",
    "academic": " in an academic and formal manner",
}

GENERATION_TONE_PHRASES = {
    "positive": " with a positive tone",
    "neutral": " with a balanced tone",
}

# length -> approximate word budget
LENGTH_WORDS = {
    "short": 100,
    "medium": 200,
    "long": 350,
}


def build_generation_prompt(style: str, tone: str, length: str) -> str:
    prompt = "Write a detailed note"
    prompt += STYLE_PHRASES.get(style, "")
    prompt += GENERATION_TONE_PHRASES.get(tone, "")
    prompt += f" of about {LENGTH_WORDS.get(length, LENGTH_WORDS['medium'])} words"
    prompt += " based on the information the user provides. Reply with the note only."
    return prompt
