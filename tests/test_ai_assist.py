import pytest
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

from scribo.errors import UpstreamError
from scribo.features.ai_assist.api import get_ai_service
from scribo.features.ai_assist.service import NoteAIService
from scribo.services.llm.call_llm import to_langchain_messages
from tests.conftest import ALICE, auth

LONG_TEXT = (
    "The quarterly planning meeting covered hiring, the new onboarding flow, "
    "and the migration of the reporting pipeline to the new warehouse."
)


class FakeLLM:
    """Records calls and replies with a canned answer"""

    def __init__(self, reply="", error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    async def invoke(self, messages, temperature=None):
        self.calls.append((messages, temperature))
        if self.error is not None:
            raise self.error
        return self.reply


def test_to_langchain_messages():
    messages = to_langchain_messages(
        [
            {"role": "system", "content": "be brief"},
            {"role": "user", "content": "hi"},
            {"role": "assistant", "content": "hello"},
        ]
    )

    assert [type(m) for m in messages] == [SystemMessage, HumanMessage, AIMessage]
    assert [m.content for m in messages] == ["be brief", "hi", "hello"]


# ============================================================================
# SERVICE
# ============================================================================

async def test_correct_grammar():
    llm = FakeLLM(reply="  I have a cat.  ")

    result = await NoteAIService(llm).correct_grammar("i has a cat")

    assert result.corrected == "I have a cat."
    assert result.changes is True
    messages, temperature = llm.calls[0]
    assert temperature == 0.3
    assert messages[0]["role"] == "system"
    assert messages[1] == {"role": "user", "content": "i has a cat"}


async def test_correct_grammar_keeps_original_on_empty_reply():
    result = await NoteAIService(FakeLLM(reply="")).correct_grammar("Fine text.")

    assert result.corrected == "Fine text."
    assert result.changes is False


async def test_html_is_stripped_before_prompting():
    llm = FakeLLM(reply="ok")

    await NoteAIService(llm).correct_grammar("<p>Hello <b>there</b></p>")

    assert llm.calls[0][0][1]["content"] == "Hello there"


@pytest.mark.parametrize("text", ["", "   ", "<p></p>", None])
async def test_empty_text_is_rejected(text):
    llm = FakeLLM(reply="unused")

    with pytest.raises(ValueError, match="Text is required"):
        await NoteAIService(llm).correct_grammar(text)
    assert llm.calls == []


async def test_summarize():
    llm = FakeLLM(reply="Planning covered hiring and a warehouse migration.")

    result = await NoteAIService(llm).summarize(LONG_TEXT, max_length=50)

    assert result.summary == "Planning covered hiring and a warehouse migration."
    expected_ratio = round((1 - len(result.summary) / len(LONG_TEXT)) * 100, 1)
    assert result.compression_ratio == expected_ratio
    assert "50" in llm.calls[0][0][0]["content"]


async def test_summarize_rejects_short_text():
    with pytest.raises(ValueError, match="too short"):
        await NoteAIService(FakeLLM(reply="x")).summarize("Too short to bother.")


async def test_adjust_tone():
    llm = FakeLLM(reply="Hey, the meeting moved to Friday!")

    result = await NoteAIService(llm).adjust_tone("The meeting is rescheduled to Friday.", "casual")

    assert result.tone.value == "casual"
    assert result.adjusted == "Hey, the meeting moved to Friday!"


async def test_adjust_tone_rejects_unknown_tone():
    with pytest.raises(ValueError):
        await NoteAIService(FakeLLM(reply="x")).adjust_tone("Some text", "sarcastic")


async def test_generate_content():
    llm = FakeLLM(reply="Draft body")

    result = await NoteAIService(llm).generate_content("team offsite", style="academic", length="short")

    assert result.generated == "Draft body"
    assert (result.style.value, result.length.value, result.tone.value) == ("academic", "short", "neutral")


async def test_generate_content_requires_context():
    with pytest.raises(ValueError, match="Context is required"):
        await NoteAIService(FakeLLM()).generate_content("  ")


async def test_llm_failure_becomes_upstream_error():
    service = NoteAIService(FakeLLM(error=RuntimeError("rate limited")))

    with pytest.raises(UpstreamError):
        await service.correct_grammar("Some text")


# ============================================================================
# API
# ============================================================================

@pytest.fixture
def fake_llm(app):
    llm = FakeLLM(reply="Improved text.")
    app.dependency_overrides[get_ai_service] = lambda: NoteAIService(llm)
    return llm


async def test_correct_grammar_endpoint(client, fake_llm):
    response = await client.post("/api/ai/correct-grammar", json={"text": "bad text"}, headers=auth(ALICE))

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["data"]["corrected"] == "Improved text."


async def test_summarize_endpoint_rejects_short_text(client, fake_llm):
    response = await client.post("/api/ai/summarize", json={"text": "short"}, headers=auth(ALICE))

    assert response.status_code == 400
    assert "too short" in response.json()["detail"]


async def test_summarize_endpoint_validates_max_length(client, fake_llm):
    response = await client.post(
        "/api/ai/summarize", json={"text": LONG_TEXT, "max_length": 5}, headers=auth(ALICE)
    )
    assert response.status_code == 422


async def test_adjust_tone_endpoint(client, fake_llm):
    response = await client.post(
        "/api/ai/adjust-tone", json={"text": "hello", "tone": "formal"}, headers=auth(ALICE)
    )

    assert response.status_code == 200
    assert response.json()["data"]["tone"] == "formal"


async def test_generate_content_endpoint(client, fake_llm):
    response = await client.post(
        "/api/ai/generate-content", json={"context": "weekly update"}, headers=auth(ALICE)
    )

    assert response.status_code == 200
    assert response.json()["data"]["generated"] == "Improved text."


async def test_ai_endpoint_maps_llm_failure(client, app):
    app.dependency_overrides[get_ai_service] = lambda: NoteAIService(FakeLLM(error=RuntimeError("down")))

    response = await client.post("/api/ai/correct-grammar", json={"text": "x"}, headers=auth(ALICE))

    assert response.status_code == 503


async def test_ai_endpoints_require_user(client, fake_llm):
    response = await client.post("/api/ai/correct-grammar", json={"text": "x"})
    assert response.status_code == 401
