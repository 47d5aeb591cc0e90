"""Chat service - follow-up questions about an inspection"""

from __future__ import annotations

import logging
from typing import List

from homeinspect.domain.config.llm import LLMConfig
from homeinspect.domain.models.requests import ChatRequest
from homeinspect.domain.prompts.chat_prompts import (
    CONTEXT_PREFIX,
    PromptSources,
    resolve_system_prompt,
    truncate_context,
)
from homeinspect.domain.prompts.messages import (
    Message,
    assistant_message,
    system_message,
    user_message,
)
from homeinspect.infrastructure.llm.base import FragmentStream, LLMProvider

logger = logging.getLogger(__name__)


def _preview(text: str, limit: int = 50) -> str:
    if not text:
        return ""
    return text[:limit] + ("..." if len(text) > limit else "")


class ChatService:
    """Service for conversational follow-ups.

    Conversation state is not kept server side; callers resend the history
    with every message.
    """

    def __init__(self, llm_provider: LLMProvider, max_context_chars: int = 4000):
        self.llm_provider = llm_provider
        self.max_context_chars = max_context_chars

    def resolve_system_prompt(self, request: ChatRequest, config: LLMConfig) -> str:
        sources = PromptSources(
            override=request.prompt_override,
            configured_template=config.chat_prompt,
            caller_prompt=request.system_prompt,
            default_prompt=config.system_prompt,
        )
        return resolve_system_prompt(
            sources,
            message=request.message,
            context=request.context,
            max_context_chars=self.max_context_chars,
        )

    def build_messages(self, request: ChatRequest, config: LLMConfig) -> List[Message]:
        """System prompt, optional context, prior turns, then the new message"""
        return self._assemble(self.resolve_system_prompt(request, config), request)

    def build_image_messages(self, request: ChatRequest, config: LLMConfig) -> List[Message]:
        """Like build_messages, but the system prompt skips the templates.

        The caller's systemPrompt is used verbatim when given, else the stored one.
        """
        caller = request.system_prompt
        system_prompt = caller if caller and caller.strip() else config.system_prompt
        return self._assemble(system_prompt, request)

    def _assemble(self, system_prompt: str, request: ChatRequest) -> List[Message]:
        messages = [system_message(system_prompt)]
        context = truncate_context(request.context, self.max_context_chars)
        if context:
            messages.append(system_message(CONTEXT_PREFIX + context))
        for turn in request.history:
            if turn.role == "user":
                messages.append(user_message(turn.content))
            else:
                messages.append(assistant_message(turn.content))
        messages.append(user_message(request.message, request.images))
        return messages

    def _log_request(self, request: ChatRequest) -> None:
        logger.info(
            f"Chat request: message='{_preview(request.message)}' "
            f"history={len(request.history)} images={len(request.images)} "
            f"context_chars={len(request.context or '')} override={request.prompt_override is not None}"
        )

    def stream_reply(self, request: ChatRequest, config: LLMConfig) -> FragmentStream:
        """Answer through the template pipeline (text-only messages)

        Raises:
            ProviderError: If the provider rejects the call
        """
        self._log_request(request)
        messages = self.build_messages(request, config)
        if config.streaming:
            return self.llm_provider.stream(messages, config)
        return FragmentStream([self.llm_provider.generate(messages, config)])

    def reply_with_images(self, request: ChatRequest, config: LLMConfig) -> str:
        """Answer a message carrying inline images with a one-shot call

        promptOverride and the configured chatPrompt do not apply here.

        Raises:
            ProviderError: If the provider rejects the call
        """
        self._log_request(request)
        return self.llm_provider.generate(self.build_image_messages(request, config), config)
