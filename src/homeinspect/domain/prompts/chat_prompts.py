"""Chat prompt templates and system prompt resolution"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Mapping, Optional

CONTEXT_PREFIX = "Context from previous analysis: "
TRUNCATION_MARKER = "\n...[truncated]"

_PLACEHOLDER_RE = re.compile(r"\{(\w+)\}")


def truncate_context(context: Optional[str], max_chars: int) -> str:
    """Bound the context string substituted into prompts"""
    if not context:
        return ""
    if len(context) <= max_chars:
        return context
    return context[:max_chars] + TRUNCATION_MARKER


class PromptTemplate:
    """Variable-substitution template.

    Placeholders look like ``{name}``. Known variables are substituted,
    unknown placeholders are left as written so templates may contain
    literal braces (JSON examples etc.).
    """

    def __init__(self, template: str):
        self.template = template

    @property
    def variables(self) -> set:
        return set(_PLACEHOLDER_RE.findall(self.template))

    def render(self, values: Mapping[str, str]) -> str:
        def _substitute(match: re.Match) -> str:
            name = match.group(1)
            if name in values:
                return values[name]
            return match.group(0)

        return _PLACEHOLDER_RE.sub(_substitute, self.template)


@dataclass(frozen=True)
class PromptSources:
    """Candidate system prompts in resolution order"""

    override: Optional[str] = None  # per-call promptOverride (template)
    configured_template: Optional[str] = None  # server chatPrompt (template)
    caller_prompt: Optional[str] = None  # per-call systemPrompt (verbatim)
    default_prompt: str = ""  # stored systemPrompt


def resolve_system_prompt(
    sources: PromptSources,
    *,
    message: str,
    context: Optional[str],
    max_context_chars: int,
) -> str:
    """Pick and render the effective chat system prompt.

    Priority: override > configured chat template > caller prompt > stored default.
    Templates are rendered with ``context``, ``message`` and ``systemPrompt``.
    """
    variables = {
        "context": truncate_context(context, max_context_chars),
        "message": message,
        "systemPrompt": sources.caller_prompt or sources.default_prompt,
    }
    for template in (sources.override, sources.configured_template):
        if template and template.strip():
            return PromptTemplate(template).render(variables)
    if sources.caller_prompt and sources.caller_prompt.strip():
        return sources.caller_prompt
    return sources.default_prompt
