"""Tests for ChatService"""

import pytest

from homeinspect.application.chat_service import ChatService
from homeinspect.domain.config.llm import LLMConfig
from homeinspect.domain.models.requests import ChatRequest, ChatTurn
from homeinspect.domain.prompts.chat_prompts import CONTEXT_PREFIX
from homeinspect.infrastructure.llm.mock import MockLLMProvider


@pytest.fixture
def provider():
    return MockLLMProvider({"response": "About $8,000.", "fragment_size": 5})


@pytest.fixture
def service(provider):
    return ChatService(provider, max_context_chars=20)


class TestBuildMessages:
    def test_message_order(self, service):
        request = ChatRequest(
            message="What would repairs cost?",
            context="Roof: missing shingles",
            history=[ChatTurn("user", "Is the roof ok?"), ChatTurn("assistant", "No.")],
        )
        messages = service.build_messages(request, LLMConfig(system_prompt="Stored"))

        assert [m["role"] for m in messages] == ["system", "system", "user", "assistant", "user"]
        assert messages[0]["content"] == "Stored"
        assert messages[1]["content"].startswith(CONTEXT_PREFIX + "Roof: missing shingl")
        assert messages[-1] == {"role": "user", "content": "What would repairs cost?"}

    def test_no_context_message_when_empty(self, service):
        messages = service.build_messages(ChatRequest(message="hi"), LLMConfig())
        assert [m["role"] for m in messages] == ["system", "user"]

    def test_override_beats_chat_prompt(self, service):
        request = ChatRequest(message="cost?", prompt_override="OVERRIDE {message}")
        config = LLMConfig(chat_prompt="CONFIGURED {message}")
        assert service.build_messages(request, config)[0]["content"] == "OVERRIDE cost?"

    def test_chat_prompt_beats_caller_prompt(self, service):
        request = ChatRequest(message="cost?", system_prompt="Caller")
        config = LLMConfig(chat_prompt="CONFIGURED for {systemPrompt}")
        assert service.build_messages(request, config)[0]["content"] == "CONFIGURED for Caller"

    def test_images_attached_to_last_message(self, service):
        request = ChatRequest(message="And this?", images=["data:image/png;base64,AAAA"])
        last = service.build_messages(request, LLMConfig())[-1]
        assert last["content"][0] == {"type": "text", "text": "And this?"}
        assert last["content"][1]["image_url"]["url"] == "data:image/png;base64,AAAA"


class TestReplies:
    def test_stream_reply(self, service, provider):
        assert "".join(service.stream_reply(ChatRequest(message="cost?"), LLMConfig())) == "About $8,000."
        assert provider.calls[0]["stream"] is True

    def test_stream_reply_without_streaming(self, service, provider):
        fragments = service.stream_reply(ChatRequest(message="cost?"), LLMConfig(streaming=False))
        assert list(fragments) == ["About $8,000."]
        assert provider.calls[0]["stream"] is False

    def test_reply_with_images_is_one_shot(self, service, provider):
        request = ChatRequest(message="look", images=["https://example.com/a.jpg"])
        assert service.reply_with_images(request, LLMConfig(streaming=True)) == "About $8,000."
        assert provider.calls[0]["stream"] is False

    def test_reply_with_images_ignores_templates(self, service, provider):
        request = ChatRequest(
            message="look",
            images=["data:image/png;base64,AAAA"],
            prompt_override="OVERRIDE {message}",
        )
        config = LLMConfig(system_prompt="Stored", chat_prompt="CONFIGURED {message}")
        service.reply_with_images(request, config)
        assert provider.calls[0]["messages"][0] == {"role": "system", "content": "Stored"}

    def test_reply_with_images_prefers_caller_prompt(self, service, provider):
        request = ChatRequest(
            message="look",
            images=["data:image/png;base64,AAAA"],
            system_prompt="Caller {message}",
        )
        service.reply_with_images(request, LLMConfig(system_prompt="Stored", chat_prompt="CONFIGURED"))
        assert provider.calls[0]["messages"][0]["content"] == "Caller {message}"
