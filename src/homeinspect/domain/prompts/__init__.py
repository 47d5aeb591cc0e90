"""Prompt templates for inspection analysis and chat"""

from homeinspect.domain.prompts.chat_prompts import PromptTemplate, resolve_system_prompt
from homeinspect.domain.prompts.inspection_prompts import DEFAULT_SYSTEM_PROMPT, build_analysis_text

__all__ = ["DEFAULT_SYSTEM_PROMPT", "PromptTemplate", "build_analysis_text", "resolve_system_prompt"]
