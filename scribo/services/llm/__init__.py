from scribo.services.llm.call_llm import LLMService

__all__ = ["LLMService"]
