from typing import Dict, List, Optional

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI

from scribo.config import get_settings


def to_langchain_messages(messages: List[Dict[str, str]]) -> List[BaseMessage]:
    """Convert role/content dicts to LangChain messages"""
    return [
        SystemMessage(content=msg["content"]) if msg["role"] == "system"
        else HumanMessage(content=msg["content"]) if msg["role"] == "user"
        else AIMessage(content=msg["content"])
        for msg in messages
    ]


class LLMService:
    def __init__(
        self,
        model: Optional[str] = None,
        temperature: float = 0.7,
        api_key: Optional[str] = None,
    ):
        settings = get_settings()
        self.model = model or settings.openai_model
        self.temperature = temperature
        self.api_key = api_key or settings.openai_api_key
        self._llm: Optional[ChatOpenAI] = None

    @property
    def llm(self) -> ChatOpenAI:
        # Created on first use so the app starts without OPENAI_API_KEY
        if self._llm is None:
            kwargs = {"model": self.model, "temperature": self.temperature}
            if self.api_key:
                kwargs["api_key"] = self.api_key
            self._llm = ChatOpenAI(**kwargs)
        return self._llm

    async def invoke(self, messages: List[Dict[str, str]], temperature: Optional[float] = None) -> str:
        """
        Invoke the LLM and return the text of its reply.

        Args:
            messages: List of message dictionaries with 'role' and 'content' keys
            temperature: Overrides the service temperature for this call
        """
        llm = self.llm
        if temperature is not None and temperature != self.temperature:
            llm = llm.bind(temperature=temperature)

        response = await llm.ainvoke(to_langchain_messages(messages))
        return str(response.content)
