"""Analysis service - sends inspection photos to the LLM"""

from __future__ import annotations

import logging
from typing import List

from homeinspect.domain.config.llm import LLMConfig
from homeinspect.domain.models.requests import AnalysisRequest
from homeinspect.domain.prompts.inspection_prompts import build_analysis_text
from homeinspect.domain.prompts.messages import Message, system_message, user_message
from homeinspect.infrastructure.llm.base import FragmentStream, LLMProvider

logger = logging.getLogger(__name__)


class AnalysisService:
    """Service for analyzing home inspection photos"""

    def __init__(self, llm_provider: LLMProvider):
        self.llm_provider = llm_provider

    def build_messages(self, request: AnalysisRequest, config: LLMConfig) -> List[Message]:
        """System persona plus one human message carrying every photo"""
        text = build_analysis_text(request.categories)
        image_urls = [image.data_uri for image in request.images]
        return [system_message(config.system_prompt), user_message(text, image_urls)]

    def analyze(self, request: AnalysisRequest, config: LLMConfig) -> FragmentStream:
        """Start the analysis

        Args:
            request: Photos in upload order
            config: Configuration snapshot for this call

        Returns:
            Fragments of the report; a single fragment when streaming is disabled

        Raises:
            ProviderError: If the provider rejects the call
        """
        logger.info(
            f"Analyzing {len(request.images)} photo(s) with {config.model_name} "
            f"(streaming={config.streaming}): {', '.join(request.descriptors) or 'no photos'}"
        )
        messages = self.build_messages(request, config)
        if config.streaming:
            return self.llm_provider.stream(messages, config)
        return FragmentStream([self.llm_provider.generate(messages, config)])
